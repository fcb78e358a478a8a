#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from core.lifecycle import MAX_MINUTES
from lib.alarm.dispatcher import DEFAULT_TITLE
from lib.alarm.errors import InvalidConfiguration

try:
    import yaml
    HAS_YAML = True
except ImportError:
    HAS_YAML = False

# json.JSONDecodeError is a ValueError
PARSE_ERRORS = (ValueError, yaml.YAMLError) if HAS_YAML else (ValueError,)


PROG = 'interval-alarm'

USAGE_EXAMPLE = (
    'usage: %s <minutes>\n'
    'example: %s 30  (alarm every 30 minutes)' % (PROG, PROG)
)

DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'
DEFAULT_LOG_LEVEL = 'warning'

# Plain ASCII digits; int() alone would also take '+5', '1_0' and '٣'
MINUTES_PATTERN = re.compile(r'\d+', re.ASCII)


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, ignoring EINVAL from stale Windows handles"""
        try:
            super().flush()
        except OSError as e:
            if e.errno != 22:  # EINVAL
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        handler = RobustFileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def configure_app_logging(settings, logger=None):
    """Configure application logging from settings

    With a log file, ERROR records (collaborator failures) are still
    echoed to stderr.

    Args:
        settings: AlarmSettings
        logger: Logger to configure (default: root logger)

    Returns:
        Configured logger instance
    """
    logger = configure_logger(
        logger or logging.getLogger(),
        log_file=settings.log_file,
        log_format=settings.log_format,
        log_level=settings.log_level
    )

    if settings.log_file:
        errors = logging.StreamHandler()
        errors.setLevel(logging.ERROR)
        errors.setFormatter(logging.Formatter(settings.log_format))
        logger.addHandler(errors)

    return logger


def parse_log_level(name):
    """Convert a level name such as 'info' to its logging constant

    Raises:
        InvalidConfiguration: If the name is not a logging level
    """
    level = getattr(logging, str(name).upper(), None)
    if not isinstance(level, int):
        raise InvalidConfiguration('Unknown log level: %r' % (name,))
    return level


def parse_minutes(value):
    """Parse the alarm interval argument

    Args:
        value: Command line string, base-10 whole minutes

    Returns:
        Positive int, at most MAX_MINUTES

    Raises:
        InvalidConfiguration: If value is not a positive integer or
                              exceeds MAX_MINUTES
    """
    text = str(value).strip()
    if not MINUTES_PATTERN.fullmatch(text):
        raise InvalidConfiguration(
            'Please provide a positive number for the alarm interval '
            'in minutes (got %r).' % (value,)
        )

    # int() refuses digit strings past sys.get_int_max_str_digits()
    if len(text.lstrip('0')) > len(str(MAX_MINUTES)):
        minutes = None
    else:
        minutes = int(text)

    if minutes == 0:
        raise InvalidConfiguration(
            'Please provide a positive number for the alarm interval '
            'in minutes (got %r).' % (value,)
        )
    if minutes is None or minutes > MAX_MINUTES:
        raise InvalidConfiguration(
            'The alarm interval can be at most %d minutes (got %s).'
            % (MAX_MINUTES, text)
        )
    return minutes


def load_config_file(path):
    """Load a JSON or YAML configuration file

    YAML is chosen by the .yaml/.yml extension; anything else is JSON.

    Returns:
        Configuration dictionary (empty for an empty file)

    Raises:
        InvalidConfiguration: If the file cannot be read or parsed
    """
    is_yaml = path.endswith(('.yaml', '.yml'))
    if is_yaml and not HAS_YAML:
        raise InvalidConfiguration(
            'PyYAML is required for YAML config files (pip install pyyaml)'
        )

    try:
        with open(path, 'r', encoding='utf-8') as fp:
            conf = yaml.safe_load(fp) if is_yaml else json.load(fp)
    except OSError as e:
        raise InvalidConfiguration('Cannot read config file %s: %s' % (path, e)) from e
    except PARSE_ERRORS as e:
        raise InvalidConfiguration('Invalid config file %s: %s' % (path, e)) from e

    if conf is None:
        return {}
    if not isinstance(conf, dict):
        raise InvalidConfiguration('Config file %s must contain a mapping' % path)
    return conf


@dataclass
class AlarmSettings:
    """Validated startup settings

    Attributes:
        minutes: Alarm interval in whole minutes
        config_file: Path of the loaded config file, if any
        sound_enabled: Try to load the sound collaborator
        notifications_enabled: Try to load the notification collaborator
        notification_title: Desktop notification title
        notification_icon: Optional notification icon path
        log_level: logging level constant
        log_file: Log file path (None for stderr)
        log_format: logging format string
    """
    minutes: int
    config_file: Optional[str] = None
    sound_enabled: bool = True
    notifications_enabled: bool = True
    notification_title: str = DEFAULT_TITLE
    notification_icon: Optional[str] = None
    log_level: int = logging.WARNING
    log_file: Optional[str] = None
    log_format: str = DEFAULT_LOG_FORMAT

    @classmethod
    def from_config(cls, minutes, conf, config_file=None, log_level=None):
        """Build settings from a config dictionary

        Args:
            minutes: Validated interval in minutes
            conf: Dictionary loaded from the config file
            config_file: Where conf came from
            log_level: Level name overriding the config file
        """
        logging_conf = conf.get('logging') or {}
        sound_conf = conf.get('sound') or {}
        notification_conf = conf.get('notification') or {}

        return cls(
            minutes=minutes,
            config_file=config_file,
            sound_enabled=bool(sound_conf.get('enabled', True)),
            notifications_enabled=bool(notification_conf.get('enabled', True)),
            notification_title=notification_conf.get('title') or DEFAULT_TITLE,
            notification_icon=notification_conf.get('icon'),
            log_level=parse_log_level(
                log_level or logging_conf.get('level', DEFAULT_LOG_LEVEL)
            ),
            log_file=logging_conf.get('file'),
            log_format=logging_conf.get('format') or DEFAULT_LOG_FORMAT,
        )


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2"""

    def error(self, message):
        raise InvalidConfiguration(message)


def build_parser():
    parser = _ArgumentParser(
        prog=PROG,
        description='Sound an alarm every N minutes with a live countdown.',
        epilog='Press Ctrl+C to stop the alarm at any time.'
    )
    parser.add_argument('minutes', help='Alarm interval in whole minutes')
    parser.add_argument('--config', help='JSON or YAML config file')
    parser.add_argument('--log-level',
                        help='Log level (debug, info, warning, error)')
    return parser


def get_config(argv=None):
    """Parse command line arguments and the optional config file

    Args:
        argv: Argument list without the program name (default: sys.argv[1:])

    Returns:
        AlarmSettings

    Raises:
        InvalidConfiguration: On any usage or configuration error
    """
    args = build_parser().parse_args(argv)
    minutes = parse_minutes(args.minutes)
    conf = load_config_file(args.config) if args.config else {}

    return AlarmSettings.from_config(
        minutes,
        conf,
        config_file=args.config,
        log_level=args.log_level
    )
