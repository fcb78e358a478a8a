"""
lib/alarm

Periodic alarm components.

This module provides:
- Clock sources (SystemClock, ManualClock)
- AlarmScheduler: fires a callback every interval
- CountdownRenderer: keeps a "Next alarm in" console line updated
- AlarmDispatcher: banner, sound and desktop notification on each alarm
- Optional collaborators backed by pygame and plyer
- Exception hierarchy for alarm errors

Example:
    from lib.alarm import AlarmScheduler, CountdownRenderer, AlarmDispatcher

    scheduler = AlarmScheduler()
    renderer = CountdownRenderer(scheduler.current_next_due)
    dispatcher = AlarmDispatcher(renderer)
    scheduler.on_due = dispatcher.dispatch

    await scheduler.initialize(timedelta(minutes=30))
    await renderer.start()
"""

from .clock import Clock, ManualClock, SystemClock
from .collaborators import (
    NotificationRequest,
    Notifier,
    SoundPlayer,
    load_notifier,
    load_sound_player,
)
from .console import Console
from .countdown import CountdownRenderer, format_countdown
from .dispatcher import ALARM_SOUND_FILE, AlarmDispatcher, format_banner
from .errors import (
    AlarmError,
    AlarmStateError,
    CollaboratorFailure,
    CollaboratorUnavailable,
    InvalidConfiguration,
    NotificationFailure,
    PlaybackFailure,
)
from .scheduler import AlarmScheduler, SchedulerState

__all__ = [
    "ALARM_SOUND_FILE",
    "AlarmDispatcher",
    "AlarmError",
    "AlarmScheduler",
    "AlarmStateError",
    "Clock",
    "CollaboratorFailure",
    "CollaboratorUnavailable",
    "Console",
    "CountdownRenderer",
    "InvalidConfiguration",
    "ManualClock",
    "NotificationFailure",
    "NotificationRequest",
    "Notifier",
    "PlaybackFailure",
    "SchedulerState",
    "SoundPlayer",
    "SystemClock",
    "format_banner",
    "format_countdown",
    "load_notifier",
    "load_sound_player",
]
