"""Common utilities for the interval alarm."""
from .config import AlarmSettings, configure_app_logging, configure_logger, get_config

__all__ = ['AlarmSettings', 'get_config', 'configure_logger', 'configure_app_logging']
