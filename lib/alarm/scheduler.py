"""
lib/alarm/scheduler.py

Asyncio-based periodic alarm scheduler.

Owns the next-due instant and fires an async callback each time it is
reached. A single background task sleeps until the due instant, fires,
re-anchors the next instant on the actual firing time and sleeps again.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional

from .clock import Clock, SystemClock
from .errors import AlarmStateError, InvalidConfiguration


class SchedulerState(Enum):
    """Lifecycle states of the AlarmScheduler."""
    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"
    STOPPED = "stopped"


class AlarmScheduler:
    """
    Fires ``on_due`` at a fixed interval until stopped.

    The next instant is computed as ``firing_instant + interval``, so
    latency between the due instant and the actual wake-up carries over
    to the following cycles.

    Args:
        clock: Time source (default: SystemClock).
        on_due: Async callback called with the firing instant.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        on_due: Optional[Callable[[datetime], Awaitable[None]]] = None
    ):
        self.clock = clock or SystemClock()
        self.on_due = on_due
        self.interval: Optional[timedelta] = None
        self._next_due: Optional[datetime] = None
        self._state = SchedulerState.IDLE
        self._fired_count = 0
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(f"{__name__}.AlarmScheduler")

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def fired_count(self) -> int:
        """Number of times on_due has been fired."""
        return self._fired_count

    @property
    def running(self) -> bool:
        return self._state in (SchedulerState.ARMED, SchedulerState.FIRING)

    async def initialize(self, interval: timedelta) -> None:
        """
        Arm the scheduler.

        Sets the first due instant to ``now + interval`` and starts the
        background task.

        Args:
            interval: Time between alarms, must be positive.

        Raises:
            InvalidConfiguration: If interval is not positive or pushes the
                                  next alarm past the calendar range.
            AlarmStateError: If called more than once or after stop().
        """
        if self._state is not SchedulerState.IDLE:
            raise AlarmStateError(
                f"Scheduler cannot be initialized from state {self._state.value}"
            )

        if interval <= timedelta(0):
            raise InvalidConfiguration(
                f"Alarm interval must be positive, got {interval}"
            )

        try:
            next_due = self.clock.now() + interval
        except OverflowError:
            raise InvalidConfiguration(
                f"Alarm interval is too long: {interval}"
            ) from None

        self.interval = interval
        self._next_due = next_due
        self._state = SchedulerState.ARMED
        self._task = asyncio.create_task(self._run_loop())
        self.logger.info(
            f"Scheduler armed (interval: {interval}, first alarm: {self._next_due})"
        )

    def current_next_due(self) -> Optional[datetime]:
        """Instant of the next alarm, or None before initialize()."""
        return self._next_due

    async def stop(self) -> None:
        """
        Cancel any pending firing.

        Idempotent and safe before initialize(). When called from inside
        on_due the task is cancelled but not awaited.
        """
        if self._state is SchedulerState.STOPPED:
            return

        self._state = SchedulerState.STOPPED

        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            if task is not asyncio.current_task():
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self.logger.info(f"Scheduler stopped after {self._fired_count} alarm(s)")

    async def _run_loop(self) -> None:
        """Sleep until due, fire, repeat."""
        self.logger.debug("Scheduler loop started")

        try:
            while self.running:
                remaining = (self._next_due - self.clock.now()).total_seconds()
                if remaining > 0:
                    await self.clock.sleep(remaining)
                    continue

                await self._fire()
        except asyncio.CancelledError:
            self.logger.debug("Scheduler loop cancelled")
            raise

        self.logger.debug("Scheduler loop ended")

    async def _fire(self) -> None:
        firing_instant = self.clock.now()
        self._state = SchedulerState.FIRING
        self._next_due = firing_instant + self.interval
        self._fired_count += 1
        self.logger.debug(
            f"Alarm #{self._fired_count} fired at {firing_instant}, "
            f"next at {self._next_due}"
        )

        if self.on_due:
            try:
                await self.on_due(firing_instant)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.exception(f"Error in alarm callback: {e}")

        if self._state is SchedulerState.FIRING:
            self._state = SchedulerState.ARMED
