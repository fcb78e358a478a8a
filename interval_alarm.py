#!/usr/bin/env python3
"""
Interval Alarm - recurring command-line alarm

Sounds an alarm every N minutes with a live countdown, a console banner,
an optional custom sound and an optional desktop notification.

Usage:
    interval-alarm <minutes> [--config config.yaml] [--log-level info]
    python interval_alarm.py 30

Press Ctrl+C to stop.
"""

import asyncio
import logging
import sys

from common.config import USAGE_EXAMPLE, configure_app_logging, get_config
from core.lifecycle import STOPPED_MESSAGE, LifecycleController, install_signal_handlers
from lib.alarm.collaborators import load_notifier, load_sound_player
from lib.alarm.errors import InvalidConfiguration


logger = logging.getLogger(__name__)


async def run(settings):
    """Run the alarm until SIGINT/SIGTERM"""
    app = LifecycleController(
        settings.minutes,
        sound_player=load_sound_player(settings.sound_enabled),
        notifier=load_notifier(settings.notifications_enabled),
        title=settings.notification_title,
        icon=settings.notification_icon
    )

    shutdown_event = asyncio.Event()
    install_signal_handlers(shutdown_event)
    await app.run(shutdown_event)


def main(argv=None):
    """Entry point

    Returns:
        Process exit status
    """
    try:
        settings = get_config(argv)
    except InvalidConfiguration as e:
        print(f"Error: {e}", file=sys.stderr)
        print(USAGE_EXAMPLE, file=sys.stderr)
        return 1

    configure_app_logging(settings)
    logger.debug(f"Settings: {settings}")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        # Signal arrived before the handlers were installed
        print("\n" + STOPPED_MESSAGE)
    return 0


if __name__ == "__main__":
    sys.exit(main())
