"""
tests/unit/test_interval_alarm.py

Tests for the command line entry point.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import interval_alarm
from common.config import AlarmSettings
from core.lifecycle import MAX_MINUTES, STOPPED_MESSAGE


class TestMain:
    """Tests for main()."""

    @pytest.mark.parametrize("argv", [
        ["0"], ["-5"], ["abc"], [], ["5000000000"], ["1_0"], ["\u0663"]
    ])
    def test_invalid_arguments_exit_1(self, argv, capsys):
        """Usage errors exit with status 1 and never build the alarm."""
        with patch.object(interval_alarm, "LifecycleController") as controller, \
                patch.object(interval_alarm.asyncio, "run") as run:
            status = interval_alarm.main(argv)

        assert status == 1
        controller.assert_not_called()
        run.assert_not_called()

        err = capsys.readouterr().err
        assert err.startswith("Error: ")
        assert "usage: interval-alarm <minutes>" in err
        assert "example: interval-alarm 30" in err

    def test_huge_interval_reports_limit(self, capsys):
        with patch.object(interval_alarm.asyncio, "run") as run:
            status = interval_alarm.main(["5000000000"])

        assert status == 1
        run.assert_not_called()
        assert f"at most {MAX_MINUTES} minutes" in capsys.readouterr().err

    def test_valid_arguments_run_alarm(self):
        with patch.object(interval_alarm, "configure_app_logging") as configure, \
                patch.object(interval_alarm, "run", new=MagicMock()) as run, \
                patch.object(interval_alarm.asyncio, "run") as asyncio_run:
            status = interval_alarm.main(["15", "--log-level", "info"])

        assert status == 0
        configure.assert_called_once()
        settings = run.call_args.args[0]
        assert isinstance(settings, AlarmSettings)
        assert settings.minutes == 15
        asyncio_run.assert_called_once_with(run.return_value)

    def test_early_keyboard_interrupt(self, capsys):
        with patch.object(interval_alarm, "configure_app_logging"), \
                patch.object(interval_alarm, "run", new=MagicMock()), \
                patch.object(interval_alarm.asyncio, "run", side_effect=KeyboardInterrupt):
            status = interval_alarm.main(["1"])

        assert status == 0
        assert STOPPED_MESSAGE in capsys.readouterr().out


class TestRun:
    """Tests for run()."""

    @pytest.mark.asyncio
    async def test_run_wires_collaborators(self):
        settings = AlarmSettings(
            minutes=3,
            sound_enabled=False,
            notification_title="Stand up",
            notification_icon="icon.png"
        )
        app = MagicMock()
        app.run = AsyncMock()

        with patch.object(interval_alarm, "LifecycleController", return_value=app) as controller, \
                patch.object(interval_alarm, "load_sound_player", return_value=None) as load_sound, \
                patch.object(interval_alarm, "load_notifier", return_value="notifier") as load_notify, \
                patch.object(interval_alarm, "install_signal_handlers") as install:
            await interval_alarm.run(settings)

        load_sound.assert_called_once_with(False)
        load_notify.assert_called_once_with(True)
        controller.assert_called_once_with(
            3,
            sound_player=None,
            notifier="notifier",
            title="Stand up",
            icon="icon.png"
        )
        shutdown_event = install.call_args.args[0]
        app.run.assert_awaited_once_with(shutdown_event)
