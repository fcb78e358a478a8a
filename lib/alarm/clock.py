"""
lib/alarm/clock.py

Clock sources for the alarm components.

Every component reads time and waits through a Clock so the same code can
run against the wall clock or against a virtual clock that only moves when
told to.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple


class Clock(ABC):
    """Source of the current instant and of timed waits."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant as a timezone-aware UTC datetime."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds``."""


class SystemClock(Clock):
    """Wall clock backed by ``datetime.now`` and ``asyncio.sleep``."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


class ManualClock(Clock):
    """
    Virtual clock for fast-forwarding.

    Time stands still until advance() is awaited. Sleepers are woken in
    deadline order and the event loop is given a few iterations after
    each wake-up so woken tasks can run up to their next await (and
    register new sleepers) before time moves on.

    Args:
        start: Initial instant (default: 2025-01-01 00:00 UTC).
        settle_rounds: Loop iterations granted after each wake-up.
    """

    def __init__(self, start: Optional[datetime] = None, settle_rounds: int = 10):
        self._now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.settle_rounds = settle_rounds
        self._sleepers: List[Tuple[datetime, int, asyncio.Future]] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return

        deadline = self._now + timedelta(seconds=seconds)
        future = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (deadline, next(self._seq), future))
        await future

    @property
    def pending_sleepers(self) -> int:
        """Number of tasks still waiting on this clock."""
        return sum(1 for _, _, future in self._sleepers if not future.done())

    async def advance(self, seconds: float) -> None:
        """
        Move time forward by ``seconds``, waking every sleeper due on the way.

        Sleepers registered while advancing are honored if their deadline
        falls inside the window.
        """
        target = self._now + timedelta(seconds=seconds)
        await self.settle()

        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            if future.done():
                # Sleeper was cancelled
                continue
            self._now = max(self._now, deadline)
            future.set_result(None)
            await self.settle()

        self._now = target
        await self.settle()

    async def settle(self) -> None:
        """Let ready tasks run without moving time."""
        for _ in range(self.settle_rounds):
            await asyncio.sleep(0)
