"""
lib/alarm/errors.py

Alarm-specific exceptions.

All exceptions inherit from AlarmError so callers can catch the whole
family at once when needed.
"""


class AlarmError(Exception):
    """Base exception for alarm errors."""
    pass


class InvalidConfiguration(AlarmError):
    """
    Interval or configuration value rejected.

    Raised for non-numeric or non-positive intervals and for unreadable
    or malformed configuration files. Fatal at startup.
    """
    pass


class AlarmStateError(AlarmError):
    """Operation not allowed in the component's current state."""
    pass


class CollaboratorUnavailable(AlarmError):
    """
    Optional side-effect collaborator could not be loaded.

    Raised when the backing library is missing or fails to initialize.
    The feature is disabled and the rest of the program keeps running.
    """
    pass


class CollaboratorFailure(AlarmError):
    """Base exception for per-firing collaborator failures."""
    pass


class PlaybackFailure(CollaboratorFailure):
    """Sound playback failed."""
    pass


class NotificationFailure(CollaboratorFailure):
    """Desktop notification failed."""
    pass
