"""Decides whether build units changed since their last build output."""

from __future__ import annotations

from datetime import datetime

from autobump.detection.cache import NEVER_WRITTEN, PassCaches
from autobump.logging import get_logger
from autobump.workspace.host import PrimaryOutputAccessor, UnitTreeHost
from autobump.workspace.models import (
    UNIT_FOLDER,
    UNIT_NONE,
    UNIT_PROJECT,
    UNIT_SOLUTION,
    BuildUnit,
    OutputFile,
    ProjectItem,
)

logger = get_logger(__name__)

INVARIANT_DATE_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
)


class DetectionError(RuntimeError):
    """Raised when the host model cannot report a project's build output."""


class ModificationDetector:
    """Cached "changed since last build?" verdicts for build units."""

    def __init__(self, host: UnitTreeHost, caches: PassCaches) -> None:
        self._host = host
        self._caches = caches

    def is_modified(self, unit: BuildUnit) -> bool:
        """Return True when the unit needs a version update in this session."""
        key = unit.cache_key
        cached = self._caches.verdicts.get(key)
        if cached is not None:
            logger.debug("verdict cache hit", unit=unit.name, kind=unit.kind, modified=cached)
            return cached

        if not unit.settings.detect_changes:
            logger.debug("detect changes disabled, marking as modified", unit=unit.name)
            return self._remember(unit, True)

        if unit.kind == UNIT_PROJECT:
            return self._remember(unit, self._is_project_modified(unit))
        if unit.kind in (UNIT_FOLDER, UNIT_SOLUTION):
            result = False
            for child in unit.children:
                if child.kind in (UNIT_PROJECT, UNIT_FOLDER):
                    result = self.is_modified(child)
                if result:
                    break
            if not result:
                logger.debug("solution/folder is not modified", unit=unit.name)
            return self._remember(unit, result)
        if unit.kind == UNIT_NONE:
            logger.warning("unsupported unit kind, assuming modified", unit=unit.name)
            return self._remember(unit, True)
        raise ValueError(f"Modification detection is undefined for unit kind '{unit.kind}'.")

    def _remember(self, unit: BuildUnit, verdict: bool) -> bool:
        self._caches.verdicts[unit.cache_key] = verdict
        return verdict

    def _is_project_modified(self, unit: BuildUnit) -> bool:
        logger.debug("checking project", unit=unit.name)
        try:
            output = self.resolve_output(unit)
            output_date = self._caches.file_dates.get(output.name, output.directory)
            for item in self._host.project_items(unit):
                if item.is_folder:
                    if not _is_folder_newer(item, output_date):
                        continue
                elif not _is_item_newer(item, output_date):
                    continue
                logger.debug("project item is modified", unit=unit.name, item=item.name)
                return True
        except DetectionError as error:
            logger.warning(
                "could not get project output date, assuming modified",
                unit=unit.name,
                error=str(error),
            )
            return True
        except Exception as error:
            logger.warning(
                "could not check project, assuming modified",
                unit=unit.name,
                error=str(error),
                exc_info=True,
            )
            return True
        logger.debug("project is not modified", unit=unit.name)
        return False

    def resolve_output(self, unit: BuildUnit) -> OutputFile:
        """Query the primary output accessor, then the fallback accessor."""
        try:
            return self._host.output_file(unit)
        except Exception as primary_error:
            if not isinstance(self._host, PrimaryOutputAccessor):
                raise DetectionError(str(primary_error)) from primary_error
            logger.debug(
                "primary output query failed, trying fallback accessor",
                unit=unit.name,
                error=str(primary_error),
            )
            try:
                full_path = self._host.primary_output(unit)
            except Exception as fallback_error:
                raise DetectionError(str(fallback_error)) from fallback_error
            return OutputFile(name=full_path.name, directory=full_path.parent)


def parse_item_date(value: str) -> datetime | None:
    """Parse a host date stamp: ISO first, then invariant-culture layouts."""
    stripped = value.strip()
    try:
        return datetime.fromisoformat(stripped)
    except ValueError:
        pass
    for layout in INVARIANT_DATE_FORMATS:
        try:
            return datetime.strptime(stripped, layout)
        except ValueError:
            continue
    return None


def _is_folder_newer(item: ProjectItem, output_date: datetime) -> bool:
    if item.local_path is not None and not item.local_path.exists():
        logger.debug("folder not found, assuming a clean build", item=item.name)
        return True
    return any(_is_item_newer(child, output_date) for child in item.children)


def _is_item_newer(item: ProjectItem, output_date: datetime) -> bool:
    if item.local_path is None:
        return False
    if not item.local_path.exists():
        logger.debug("item not found, assuming a clean build", item=item.name)
        return True
    item_date = NEVER_WRITTEN
    if item.date_modified is not None:
        parsed = parse_item_date(item.date_modified)
        if parsed is None:
            logger.warning("cannot parse item date", item=item.name, value=item.date_modified)
        else:
            item_date = parsed
    else:
        item_date = datetime.fromtimestamp(item.local_path.stat().st_mtime)
    if item_date.tzinfo is not None:
        item_date = item_date.astimezone().replace(tzinfo=None)
    return item_date > output_date
