"""Modification detection and per-pass caches."""

from .cache import NEVER_WRITTEN, FileDateCache, PassCaches, last_write_time
from .detector import DetectionError, ModificationDetector, parse_item_date

__all__ = [
    "DetectionError",
    "FileDateCache",
    "ModificationDetector",
    "NEVER_WRITTEN",
    "PassCaches",
    "last_write_time",
    "parse_item_date",
]
