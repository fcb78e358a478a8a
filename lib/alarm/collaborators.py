"""
lib/alarm/collaborators.py

Optional side-effect collaborators: sound playback and desktop
notifications.

The dispatcher only depends on the SoundPlayer and Notifier capabilities.
Concrete adapters wrap pygame.mixer and plyer; either library may be
missing or unusable on a given machine, in which case the loaders return
None and the feature is simply disabled.
"""

import asyncio
import functools
import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .errors import (
    CollaboratorUnavailable,
    NotificationFailure,
    PlaybackFailure,
)

# Keep pygame's import banner out of the countdown line
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

try:
    import pygame
    HAS_PYGAME = True
except ImportError:
    HAS_PYGAME = False

try:
    from plyer import notification as plyer_notification
    HAS_PLYER = True
except ImportError:
    HAS_PLYER = False


logger = logging.getLogger(__name__)

APP_NAME = "Interval Alarm"

# Seconds a non-interactive notification stays on screen
NOTIFICATION_TIMEOUT = 10


@dataclass
class NotificationRequest:
    """
    Desktop notification request.

    Attributes:
        title: Notification title.
        message: Body text.
        icon: Optional path to an icon.
        play_default_sound: Ask the OS to play its own notification sound.
        wait_for_user_interaction: Keep the notification until dismissed.
    """
    title: str
    message: str
    icon: Optional[str] = None
    play_default_sound: bool = True
    wait_for_user_interaction: bool = False


class SoundPlayer(ABC):
    """Plays an audio resource once."""

    @abstractmethod
    async def play(self, path: Union[str, Path], volume: float = 1.0) -> None:
        """
        Play ``path`` once for its full duration.

        Raises:
            PlaybackFailure: If the resource cannot be played.
        """

    def close(self) -> None:
        """Release audio resources."""


class Notifier(ABC):
    """Shows transient desktop notifications."""

    @abstractmethod
    async def notify(self, request: NotificationRequest) -> None:
        """
        Display ``request`` without blocking the caller.

        Raises:
            NotificationFailure: If the notification cannot be shown.
        """


class PygameSoundPlayer(SoundPlayer):
    """
    SoundPlayer backed by pygame.mixer.

    Raises:
        CollaboratorUnavailable: If pygame is missing or the mixer cannot
                                 be initialized (e.g. no audio device).
    """

    def __init__(self):
        if not HAS_PYGAME:
            raise CollaboratorUnavailable("pygame is not installed")

        try:
            pygame.mixer.init()
        except (pygame.error, NotImplementedError) as e:
            # NotImplementedError: pygame built without its mixer module
            raise CollaboratorUnavailable(f"audio mixer unavailable: {e}") from e

    async def play(self, path: Union[str, Path], volume: float = 1.0) -> None:
        try:
            sound = pygame.mixer.Sound(str(path))
        except (pygame.error, FileNotFoundError) as e:
            raise PlaybackFailure(f"cannot load '{path}': {e}") from e

        sound.set_volume(volume)
        if sound.play() is None:
            raise PlaybackFailure("no free mixer channel")

        # Completion means the sound has finished playing
        await asyncio.sleep(sound.get_length())

    def close(self) -> None:
        if pygame.mixer.get_init():
            pygame.mixer.quit()


class PlyerNotifier(Notifier):
    """
    Notifier backed by plyer.

    plyer calls block (some backends spawn a helper process), so each one
    runs on its own daemon thread. Cancelling notify() stops waiting for
    the thread, and a thread still stuck in the backend never holds up
    loop or interpreter shutdown.

    Raises:
        CollaboratorUnavailable: If plyer is not installed.
    """

    def __init__(self, app_name: str = APP_NAME):
        if not HAS_PLYER:
            raise CollaboratorUnavailable("plyer is not installed")
        self.app_name = app_name

    async def notify(self, request: NotificationRequest) -> None:
        # plyer has no "sound" switch; the OS default applies
        timeout = 0 if request.wait_for_user_interaction else NOTIFICATION_TIMEOUT
        send = functools.partial(
            plyer_notification.notify,
            title=request.title,
            message=request.message,
            app_name=self.app_name,
            app_icon=request.icon or "",
            timeout=timeout,
        )

        loop = asyncio.get_running_loop()
        done = loop.create_future()

        def deliver():
            error = None
            try:
                send()
            except Exception as e:
                error = e
            try:
                loop.call_soon_threadsafe(_resolve, done, error)
            except RuntimeError:
                # Loop closed while the backend was still busy
                logger.debug("Notification finished after the event loop closed")

        threading.Thread(target=deliver, name="plyer-notify", daemon=True).start()

        try:
            await done
        except Exception as e:
            raise NotificationFailure(str(e) or e.__class__.__name__) from e


def _resolve(future: asyncio.Future, error: Optional[Exception]) -> None:
    """Complete a notification future unless its waiter already gave up."""
    if future.done():
        return
    if error is None:
        future.set_result(None)
    else:
        future.set_exception(error)


def load_sound_player(enabled: bool = True) -> Optional[SoundPlayer]:
    """
    Load the sound collaborator.

    Args:
        enabled: False skips loading altogether.

    Returns:
        A SoundPlayer, or None when disabled or unavailable.
    """
    if not enabled:
        return None

    try:
        return PygameSoundPlayer()
    except CollaboratorUnavailable as e:
        logger.warning(f"Sound playback disabled: {e}")
        return None


def load_notifier(enabled: bool = True) -> Optional[Notifier]:
    """
    Load the desktop notification collaborator.

    Args:
        enabled: False skips loading altogether.

    Returns:
        A Notifier, or None when disabled or unavailable.
    """
    if not enabled:
        return None

    try:
        return PlyerNotifier()
    except CollaboratorUnavailable as e:
        logger.warning(f"Desktop notifications disabled: {e}")
        return None
