"""
core/lifecycle.py

Startup sequencing and graceful shutdown for the interval alarm.

The controller wires the scheduler, renderer and dispatcher together,
prints the startup banner, and tears everything down exactly once when
the shutdown event is set.
"""

import asyncio
import logging
import signal
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Optional

from lib.alarm.clock import Clock, SystemClock
from lib.alarm.collaborators import Notifier, SoundPlayer
from lib.alarm.console import Console
from lib.alarm.countdown import CountdownRenderer
from lib.alarm.dispatcher import (
    ALARM_SOUND_FILE,
    DEFAULT_TITLE,
    SEPARATOR,
    AlarmDispatcher,
)
from lib.alarm.errors import AlarmStateError, InvalidConfiguration
from lib.alarm.scheduler import AlarmScheduler


logger = logging.getLogger(__name__)

STOPPED_MESSAGE = "Alarm application stopped."

# Longest accepted interval: one leap year
MAX_MINUTES = 366 * 24 * 60


class RunState(Enum):
    """Application run states."""
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class LifecycleController:
    """
    Owns the alarm components for one run.

    Responsibilities:
    1. Validate the interval and build the components
    2. Print the startup banner, arm the scheduler, start the countdown
    3. Stop everything exactly once on shutdown

    Args:
        minutes: Alarm interval in whole minutes.
        clock: Time source shared by all components.
        console: Output console.
        sound_player: Optional sound collaborator.
        notifier: Optional notification collaborator.
        sound_file: Alarm audio resource.
        title: Notification title.
        icon: Optional notification icon.

    Raises:
        InvalidConfiguration: If minutes is not a positive integer or
                              exceeds MAX_MINUTES.
    """

    def __init__(
        self,
        minutes: int,
        clock: Optional[Clock] = None,
        console: Optional[Console] = None,
        sound_player: Optional[SoundPlayer] = None,
        notifier: Optional[Notifier] = None,
        sound_file: Path = ALARM_SOUND_FILE,
        title: str = DEFAULT_TITLE,
        icon: Optional[str] = None
    ):
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise InvalidConfiguration(
                f"Alarm interval must be a positive number of minutes, got {minutes!r}"
            )
        if minutes > MAX_MINUTES:
            raise InvalidConfiguration(
                f"Alarm interval must be at most {MAX_MINUTES} minutes, got {minutes}"
            )

        self.minutes = minutes
        self.interval = timedelta(minutes=minutes)
        self.clock = clock or SystemClock()
        self.console = console or Console()
        self.sound_player = sound_player
        self.notifier = notifier
        self.state: Optional[RunState] = None

        self.scheduler = AlarmScheduler(clock=self.clock)
        self.renderer = CountdownRenderer(
            self.scheduler.current_next_due,
            console=self.console,
            clock=self.clock
        )
        self.dispatcher = AlarmDispatcher(
            self.renderer,
            console=self.console,
            sound_player=sound_player,
            notifier=notifier,
            sound_file=sound_file,
            title=title,
            icon=icon
        )
        self.scheduler.on_due = self.dispatcher.dispatch

    async def start(self) -> None:
        """Print the startup banner and start the timers."""
        if self.state is not None:
            raise AlarmStateError(f"Cannot start from state {self.state.value}")

        self._print_banner()

        self.state = RunState.RUNNING
        await self.scheduler.initialize(self.interval)
        await self.renderer.start()
        logger.info(f"Alarm running every {self.minutes} minute(s)")

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """
        Start, then block until ``shutdown_event`` is set and shut down.

        Args:
            shutdown_event: Cancellation token, usually set by a signal.
        """
        try:
            await self.start()
            await shutdown_event.wait()
            logger.info("Received shutdown signal")
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """
        Stop all periodic activity and print the farewell message.

        Only the first call has any effect.
        """
        if self.state in (RunState.STOPPING, RunState.STOPPED):
            return

        self.state = RunState.STOPPING
        logger.info("Shutting down alarm...")

        # Scheduler first so no alarm can fire while the renderer winds down
        await self.scheduler.stop()
        await self.renderer.stop()
        self.dispatcher.abandon()
        if self.sound_player:
            self.sound_player.close()

        self.console.clear_line()
        self.console.print()
        self.console.print(STOPPED_MESSAGE)

        self.state = RunState.STOPPED
        logger.info("Alarm stopped")

    def _print_banner(self) -> None:
        unit = "minute" if self.minutes == 1 else "minutes"
        self.console.print()
        self.console.print("Alarm Application Started")
        self.console.print(f"Setting up alarm to sound every {self.minutes} {unit}.")

        if self.sound_player:
            self.console.print(
                f"Custom alarm sound enabled. Ensure '{self.dispatcher.sound_file}' "
                "exists (about 10 seconds long)."
            )
            if not self.dispatcher.sound_file.exists():
                self.console.print(
                    "Sound file not found; run scripts/generate_alarm_sound.py to create it."
                )
        else:
            self.console.print("Custom alarm sound disabled.")

        if self.notifier:
            self.console.print("Desktop notifications enabled.")
        else:
            self.console.print("Desktop notifications disabled.")

        self.console.print("Press Ctrl+C to stop the alarm at any time.")
        self.console.print(SEPARATOR)


def install_signal_handlers(shutdown_event: asyncio.Event) -> None:
    """
    Set ``shutdown_event`` on SIGINT/SIGTERM.

    Repeated signals just set the event again.
    """
    loop = asyncio.get_running_loop()

    def request_shutdown(signum=None, frame=None):
        loop.call_soon_threadsafe(shutdown_event.set)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops have no add_signal_handler
            signal.signal(sig, request_shutdown)
