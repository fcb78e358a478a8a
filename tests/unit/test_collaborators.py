"""
tests/unit/test_collaborators.py

Unit tests for the pygame and plyer collaborator adapters.

The real libraries are replaced with mocks so the tests run without an
audio device or a desktop session.
"""

import asyncio
import logging
import threading
import time
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from lib.alarm import collaborators
from lib.alarm.collaborators import (
    NOTIFICATION_TIMEOUT,
    NotificationRequest,
    PlyerNotifier,
    PygameSoundPlayer,
    load_notifier,
    load_sound_player,
)
from lib.alarm.errors import (
    CollaboratorUnavailable,
    NotificationFailure,
    PlaybackFailure,
)


class FakePygameError(Exception):
    pass


@pytest.fixture
def fake_pygame():
    """Stand-in pygame module with a working mixer"""
    sound = MagicMock()
    sound.get_length.return_value = 0.0
    sound.play.return_value = MagicMock(name="Channel")

    mixer = MagicMock()
    mixer.Sound.return_value = sound
    mixer.get_init.return_value = (44100, -16, 2)

    module = SimpleNamespace(mixer=mixer, error=FakePygameError, sound=sound)
    with patch.object(collaborators, "pygame", module, create=True), \
            patch.object(collaborators, "HAS_PYGAME", True):
        yield module


@pytest.fixture
def fake_plyer():
    notification = MagicMock()
    with patch.object(collaborators, "plyer_notification", notification, create=True), \
            patch.object(collaborators, "HAS_PLYER", True):
        yield notification


# =============================================================================
# Sound Player Tests
# =============================================================================

class TestPygameSoundPlayer:
    """Tests for PygameSoundPlayer."""

    def test_missing_library(self):
        with patch.object(collaborators, "HAS_PYGAME", False):
            with pytest.raises(CollaboratorUnavailable, match="pygame is not installed"):
                PygameSoundPlayer()

    def test_mixer_init_failure(self, fake_pygame):
        fake_pygame.mixer.init.side_effect = FakePygameError("No available audio device")

        with pytest.raises(CollaboratorUnavailable, match="No available audio device"):
            PygameSoundPlayer()

    def test_mixer_module_missing(self, fake_pygame):
        fake_pygame.mixer.init.side_effect = NotImplementedError("mixer module not available")

        with pytest.raises(CollaboratorUnavailable, match="mixer module not available"):
            PygameSoundPlayer()

    @pytest.mark.asyncio
    async def test_play_full_volume(self, fake_pygame, tmp_path):
        path = tmp_path / "alarm.wav"
        player = PygameSoundPlayer()

        await player.play(path, 1.0)

        fake_pygame.mixer.Sound.assert_called_once_with(str(path))
        fake_pygame.sound.set_volume.assert_called_once_with(1.0)
        fake_pygame.sound.play.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_play_missing_file(self, fake_pygame):
        fake_pygame.mixer.Sound.side_effect = FileNotFoundError("No such file")
        player = PygameSoundPlayer()

        with pytest.raises(PlaybackFailure, match="missing.wav"):
            await player.play("missing.wav")

    @pytest.mark.asyncio
    async def test_play_decoder_error(self, fake_pygame):
        fake_pygame.mixer.Sound.side_effect = FakePygameError("Unknown WAVE format")
        player = PygameSoundPlayer()

        with pytest.raises(PlaybackFailure, match="Unknown WAVE format"):
            await player.play("alarm.wav")

    @pytest.mark.asyncio
    async def test_play_no_channel(self, fake_pygame):
        fake_pygame.sound.play.return_value = None
        player = PygameSoundPlayer()

        with pytest.raises(PlaybackFailure, match="no free mixer channel"):
            await player.play("alarm.wav")

    def test_close_quits_mixer(self, fake_pygame):
        player = PygameSoundPlayer()

        player.close()

        fake_pygame.mixer.quit.assert_called_once_with()


# =============================================================================
# Notifier Tests
# =============================================================================

class TestPlyerNotifier:
    """Tests for PlyerNotifier."""

    def test_missing_library(self):
        with patch.object(collaborators, "HAS_PLYER", False):
            with pytest.raises(CollaboratorUnavailable, match="plyer is not installed"):
                PlyerNotifier()

    @pytest.mark.asyncio
    async def test_notify_arguments(self, fake_plyer):
        notifier = PlyerNotifier(app_name="Test Alarm")
        request = NotificationRequest(
            title="Interval Alarm!",
            message="It's 02:30:00 PM - Time for your alarm!",
            icon="/tmp/icon.png",
        )

        await notifier.notify(request)

        fake_plyer.notify.assert_called_once_with(
            title="Interval Alarm!",
            message="It's 02:30:00 PM - Time for your alarm!",
            app_name="Test Alarm",
            app_icon="/tmp/icon.png",
            timeout=NOTIFICATION_TIMEOUT,
        )

    @pytest.mark.asyncio
    async def test_wait_for_user_interaction(self, fake_plyer):
        notifier = PlyerNotifier()
        request = NotificationRequest(
            title="t", message="m", wait_for_user_interaction=True
        )

        await notifier.notify(request)

        assert fake_plyer.notify.call_args.kwargs["timeout"] == 0
        assert fake_plyer.notify.call_args.kwargs["app_icon"] == ""

    @pytest.mark.asyncio
    async def test_backend_error(self, fake_plyer):
        fake_plyer.notify.side_effect = NotImplementedError()
        notifier = PlyerNotifier()

        with pytest.raises(NotificationFailure, match="NotImplementedError"):
            await notifier.notify(NotificationRequest(title="t", message="m"))

    @pytest.mark.asyncio
    async def test_runs_on_daemon_thread(self, fake_plyer):
        seen = []
        fake_plyer.notify.side_effect = lambda **kw: seen.append(threading.current_thread())

        await PlyerNotifier().notify(NotificationRequest(title="t", message="m"))

        assert len(seen) == 1
        assert seen[0] is not threading.main_thread()
        assert seen[0].daemon is True

    @pytest.mark.asyncio
    async def test_cancel_while_backend_blocks(self, fake_plyer):
        release = threading.Event()
        fake_plyer.notify.side_effect = lambda **kw: release.wait(5)

        task = asyncio.create_task(
            PlyerNotifier().notify(NotificationRequest(title="t", message="m"))
        )
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=1.0)
        release.set()

    def test_blocked_backend_does_not_delay_loop_exit(self, fake_plyer):
        """asyncio.run returns while a notification is still stuck."""
        release = threading.Event()
        fake_plyer.notify.side_effect = lambda **kw: release.wait(5)

        async def scenario():
            task = asyncio.create_task(
                PlyerNotifier().notify(NotificationRequest(title="t", message="m"))
            )
            await asyncio.sleep(0.05)
            task.cancel()

        started = time.monotonic()
        try:
            asyncio.run(scenario())
            elapsed = time.monotonic() - started
        finally:
            release.set()

        assert elapsed < 1.0


# =============================================================================
# Loader Tests
# =============================================================================

class TestLoaders:
    """Tests for load_sound_player() and load_notifier()."""

    def test_sound_disabled(self, fake_pygame):
        assert load_sound_player(enabled=False) is None
        fake_pygame.mixer.init.assert_not_called()

    def test_sound_loaded(self, fake_pygame):
        assert isinstance(load_sound_player(), PygameSoundPlayer)

    def test_sound_unavailable_logs_warning(self, caplog):
        with patch.object(collaborators, "HAS_PYGAME", False):
            with caplog.at_level(logging.WARNING):
                assert load_sound_player() is None

        assert "Sound playback disabled: pygame is not installed" in caplog.text

    def test_notifier_disabled(self, fake_plyer):
        assert load_notifier(enabled=False) is None

    def test_notifier_loaded(self, fake_plyer):
        assert isinstance(load_notifier(), PlyerNotifier)

    def test_notifier_unavailable_logs_warning(self, caplog):
        with patch.object(collaborators, "HAS_PLYER", False):
            with caplog.at_level(logging.WARNING):
                assert load_notifier() is None

        assert "Desktop notifications disabled" in caplog.text
