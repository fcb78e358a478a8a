"""
lib/alarm/dispatcher.py

Alarm action dispatcher.

Turns each scheduler firing into console output plus best-effort sound
and desktop notification requests. Collaborator calls are started as
background tasks and never awaited here, so a slow or failing
collaborator cannot hold up the scheduler.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional, Set

from .collaborators import NotificationRequest, Notifier, SoundPlayer
from .console import Console
from .countdown import CountdownRenderer


# Fixed alarm sound, shipped next to the program
ALARM_SOUND_FILE = Path(__file__).resolve().parent / "alarm.wav"

ALARM_VOLUME = 1.0

DEFAULT_TITLE = "Interval Alarm!"

BANNER_WIDTH = 40
BANNER_RULE = "=" * BANNER_WIDTH
SEPARATOR = "-" * 42


def format_banner(alarm_time: str) -> str:
    """
    Build the fixed-width alarm banner.

    Args:
        alarm_time: Local time string shown on the banner.

    Returns:
        Multi-line banner text (no trailing newline).
    """
    inner = BANNER_WIDTH - 4
    lines = [
        BANNER_RULE,
        f"||{'!!! ALARM !!!':^{inner}}||",
        f"||{f'It is {alarm_time}':^{inner}}||",
        BANNER_RULE,
    ]
    return "\n".join(lines)


def local_time_string(instant: datetime) -> str:
    """Render an instant as local wall-clock time, e.g. '02:30:00 PM'."""
    return instant.astimezone().strftime("%I:%M:%S %p")


class AlarmDispatcher:
    """
    Reacts to scheduler firings.

    Order of operations for every firing:
    1. Pause the renderer and clear its line
    2. Print the banner and a separator
    3. Start sound playback (if a player is available)
    4. Start the desktop notification (if a notifier is available)
    5. Resume the renderer

    Args:
        renderer: Countdown renderer to pause/resume.
        console: Output console (default: the renderer's console).
        sound_player: Optional SoundPlayer.
        notifier: Optional Notifier.
        sound_file: Audio resource to play.
        title: Notification title.
        icon: Optional notification icon path.
    """

    def __init__(
        self,
        renderer: CountdownRenderer,
        console: Optional[Console] = None,
        sound_player: Optional[SoundPlayer] = None,
        notifier: Optional[Notifier] = None,
        sound_file: Path = ALARM_SOUND_FILE,
        title: str = DEFAULT_TITLE,
        icon: Optional[str] = None
    ):
        self.renderer = renderer
        self.console = console or renderer.console
        self.sound_player = sound_player
        self.notifier = notifier
        self.sound_file = sound_file
        self.title = title
        self.icon = icon
        self.dispatch_count = 0
        self._in_flight: Set[asyncio.Task] = set()
        self.logger = logging.getLogger(f"{__name__}.AlarmDispatcher")

    @property
    def in_flight_count(self) -> int:
        """Number of collaborator requests still running."""
        return len(self._in_flight)

    async def dispatch(self, firing_instant: datetime) -> None:
        """
        Handle one firing.

        Args:
            firing_instant: When the scheduler fired.
        """
        self.dispatch_count += 1
        alarm_time = local_time_string(firing_instant)

        self.renderer.pause()
        try:
            self.console.print()
            self.console.print(format_banner(alarm_time))
            self.console.print(SEPARATOR)

            if self.sound_player:
                self._start(
                    "sound playback",
                    lambda: self.sound_player.play(self.sound_file, ALARM_VOLUME),
                )

            if self.notifier:
                request = NotificationRequest(
                    title=self.title,
                    message=f"It's {alarm_time} - Time for your alarm!",
                    icon=self.icon,
                    play_default_sound=True,
                    wait_for_user_interaction=False,
                )
                self._start("desktop notification", lambda: self.notifier.notify(request))
        finally:
            self.renderer.resume()

    def abandon(self) -> int:
        """
        Cancel in-flight collaborator requests without waiting for them.

        Returns:
            Number of requests cancelled.
        """
        pending = [task for task in self._in_flight if not task.done()]
        for task in pending:
            task.cancel()
        self._in_flight.clear()

        if pending:
            self.logger.debug(f"Abandoned {len(pending)} in-flight request(s)")
        return len(pending)

    def _start(self, label: str, request: Callable[[], Awaitable[None]]) -> None:
        """Start a collaborator request as a background task."""
        try:
            task = asyncio.create_task(request())
        except Exception as e:
            self.logger.error(f"Error starting {label}: {e}")
            return

        task.set_name(label)
        self._in_flight.add(task)
        task.add_done_callback(self._on_request_done)

    def _on_request_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)

        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            self.logger.error(f"Error in {task.get_name()}: {error}")
