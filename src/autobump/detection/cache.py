"""Per-pass caches for modification verdicts, file dates and updated units."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from autobump.logging import get_logger
from autobump.workspace.models import BuildUnit

logger = get_logger(__name__)

NEVER_WRITTEN = datetime.min

StatFunction = Callable[[Path], datetime]


def last_write_time(path: Path) -> datetime:
    """Return the local last-write time, or ``NEVER_WRITTEN`` for a missing file."""
    try:
        return datetime.fromtimestamp(os.stat(path).st_mtime)
    except FileNotFoundError:
        return NEVER_WRITTEN


@dataclass(slots=True)
class FileDateCache:
    """Last-write timestamps keyed by (output filename, output directory)."""

    stat: StatFunction = last_write_time
    _dates: dict[tuple[str, str], datetime] = field(default_factory=dict)

    def get(self, filename: str, directory: Path) -> datetime:
        key = (filename, str(directory))
        cached = self._dates.get(key)
        if cached is not None:
            return cached
        value = self.stat(directory / filename)
        self._dates[key] = value
        logger.debug("last build", output=str(directory / filename), timestamp=value.isoformat())
        return value

    def clear(self) -> None:
        self._dates.clear()

    def __len__(self) -> int:
        return len(self._dates)


@dataclass(slots=True)
class PassCaches:
    """Mutable state shared by one build session.

    ``verdicts`` and ``file_dates`` live until build completion; ``updated``
    is the per-pass dedup set keyed by unit identity.
    """

    verdicts: dict[tuple[str, str], bool] = field(default_factory=dict)
    file_dates: FileDateCache = field(default_factory=FileDateCache)
    updated: dict[str, BuildUnit] = field(default_factory=dict)

    def clear_updated(self) -> None:
        self.updated.clear()

    def clear_detection(self) -> None:
        logger.debug("clearing date and verdict caches")
        self.verdicts.clear()
        self.file_dates.clear()
