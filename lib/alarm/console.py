"""
lib/alarm/console.py

Single-line console output shared by the countdown renderer and the
alarm dispatcher.
"""

import sys
from typing import Optional, TextIO


# Carriage return plus "erase entire line"
CLEAR_LINE = "\r\x1b[2K"


class Console:
    """
    Writes an overwritable status line plus ordinary lines to a stream.

    On a terminal the status line is erased with an ANSI sequence before
    being rewritten. On anything else (pipes, files, StringIO in tests)
    only a carriage return is emitted.

    Args:
        stream: Output stream (default: sys.stdout).
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    @property
    def is_terminal(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _line_reset(self) -> str:
        return CLEAR_LINE if self.is_terminal else "\r"

    def overwrite(self, text: str) -> None:
        """Replace the current line with ``text`` (no newline)."""
        self.stream.write(self._line_reset() + text)
        self.stream.flush()

    def clear_line(self) -> None:
        """Erase the current line and move the cursor to column 0."""
        self.stream.write(self._line_reset())
        self.stream.flush()

    def print(self, text: str = "") -> None:
        """Write ``text`` followed by a newline."""
        self.stream.write(text + "\n")
        self.stream.flush()
