"""
lib/alarm/countdown.py

Countdown rendering.

Provides:
- format_countdown() for the "<M>m <SS>s" display format
- CountdownRenderer, a 1-second tick that keeps one console line updated
  with the time left until the next alarm
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from .clock import Clock, SystemClock
from .console import Console


# Renderer tick period (seconds)
TICK_INTERVAL = 1.0

COUNTDOWN_PREFIX = "Next alarm in: "


def format_countdown(remaining: timedelta) -> str:
    """
    Format time left as whole minutes and zero-padded seconds.

    Args:
        remaining: Time until the next alarm. Zero or negative values
                   are clamped.

    Returns:
        String like "2m 05s".
    """
    total_seconds = max(0, int(remaining.total_seconds()))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}m {seconds:02d}s"


class CountdownRenderer:
    """
    Rewrites the countdown line once per tick.

    The renderer only reads the next-due instant through ``next_due``; it
    never changes it.

    Args:
        next_due: Callable returning the next alarm instant (or None).
        console: Output console (default: stdout).
        clock: Time source (default: SystemClock).
        tick_interval: Seconds between renders.
    """

    def __init__(
        self,
        next_due: Callable[[], Optional[datetime]],
        console: Optional[Console] = None,
        clock: Optional[Clock] = None,
        tick_interval: float = TICK_INTERVAL
    ):
        self.next_due = next_due
        self.console = console or Console()
        self.clock = clock or SystemClock()
        self.tick_interval = tick_interval
        self.running = False
        self._paused = False
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(f"{__name__}.CountdownRenderer")

    @property
    def paused(self) -> bool:
        return self._paused

    def remaining(self) -> timedelta:
        """Time left until the next alarm, never negative."""
        due = self.next_due()
        if due is None:
            return timedelta(0)
        return max(timedelta(0), due - self.clock.now())

    def render(self) -> None:
        """Draw the countdown line once. No-op unless running and not paused."""
        if not self.running or self._paused:
            return
        self.console.overwrite(COUNTDOWN_PREFIX + format_countdown(self.remaining()))

    async def start(self) -> None:
        """Start ticking."""
        if self.running:
            self.logger.warning("Renderer already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._tick_loop())
        self.logger.debug(f"Renderer started (tick: {self.tick_interval}s)")

    def pause(self) -> None:
        """Stop writing to the console and clear the countdown line."""
        if not self.running or self._paused:
            return
        self._paused = True
        self.console.clear_line()

    def resume(self) -> None:
        """Resume ticking and redraw immediately."""
        if not self._paused:
            return
        self._paused = False
        self.render()

    async def stop(self) -> None:
        """Cancel the tick. Idempotent."""
        if not self.running:
            return

        self.running = False

        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            if task is not asyncio.current_task():
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self.logger.debug("Renderer stopped")

    async def _tick_loop(self) -> None:
        try:
            while self.running:
                self.render()
                await self.clock.sleep(self.tick_interval)
        except asyncio.CancelledError:
            self.logger.debug("Tick loop cancelled")
            raise
