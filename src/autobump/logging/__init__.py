"""Logging utilities."""

from .history import JsonlUpdateHistory, UpdateRecord, utc_timestamp
from .structured import LOG_FORMATS, LOG_LEVELS, configure_logging, get_logger

__all__ = [
    "JsonlUpdateHistory",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "UpdateRecord",
    "configure_logging",
    "get_logger",
    "utc_timestamp",
]
