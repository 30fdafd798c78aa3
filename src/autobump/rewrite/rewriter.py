"""Locate, parse, increment and rewrite version expressions."""

from __future__ import annotations

import re
from pathlib import Path

from autobump.build import PassContext
from autobump.config import ConfigurationError
from autobump.logging import JsonlUpdateHistory, UpdateRecord, get_logger, utc_timestamp
from autobump.rewrite.dialects import AttributePattern
from autobump.rewrite.editors import ArtifactEdit, ArtifactEditor, WriteError, read_artifact
from autobump.rewrite.locator import LocateError, resolve_artifact
from autobump.strategies import IncrementContext, StrategyRegistry
from autobump.versioning import StructuredVersion, non_numeric_pattern, parse_version
from autobump.workspace.host import UnitTreeHost
from autobump.workspace.models import BuildUnit

SEPARATOR_PATTERN = re.compile(r"[\s,.]+")
MIN_VERSION_COMPONENTS = 2

logger = get_logger(__name__)


class VersionRewriter:
    """Rewrites one version attribute of one unit per call."""

    def __init__(
        self,
        host: UnitTreeHost,
        registry: StrategyRegistry,
        editor: ArtifactEditor,
        history: JsonlUpdateHistory | None = None,
    ) -> None:
        self._host = host
        self._registry = registry
        self._editor = editor
        self._history = history

    def update_version(
        self, unit: BuildUnit, attribute: str, build: PassContext
    ) -> list[UpdateRecord]:
        """Update ``attribute`` in the unit's artifact when this pass allows it.

        Returns one record per expression written. Failures are logged and
        never raised.
        """
        if not build.allows(unit.settings):
            return []
        logger.debug("updating attribute", unit=unit.name, attribute=attribute, phase=build.phase)
        try:
            artifact = resolve_artifact(self._host, unit)
        except ConfigurationError as error:
            logger.error("cannot resolve version artifact", unit=unit.name, error=str(error))
            return []
        except LocateError as error:
            logger.warning("version artifact not found", unit=unit.name, error=str(error))
            return []

        records: list[UpdateRecord] = []
        for pattern in artifact.dialect.patterns(attribute):
            try:
                record = self._rewrite(unit, artifact.path, pattern, build)
            except Exception as error:
                logger.error(
                    "error occurred while updating version",
                    unit=unit.name,
                    attribute=pattern.attribute,
                    artifact=str(artifact.path),
                    error=str(error),
                )
                continue
            if record is not None:
                records.append(record)
        return records

    def _rewrite(
        self,
        unit: BuildUnit,
        path: Path,
        attribute: AttributePattern,
        build: PassContext,
    ) -> UpdateRecord | None:
        text, _ = read_artifact(path)
        match = attribute.pattern.search(text)
        if match is None:
            raise LocateError(f"Failed to locate attribute '{attribute.attribute}' in '{path}'.")
        full = match.group("full")
        separator_match = SEPARATOR_PATTERN.search(full)
        if separator_match is None:
            raise LocateError(
                f"Failed to fetch version separator of '{attribute.attribute}' in '{path}'."
            )
        separator = separator_match.group(0)
        current = parse_version(full, separator, required=MIN_VERSION_COMPONENTS)

        settings = unit.settings
        context = IncrementContext(
            unit=unit,
            current_version=current,
            build_start=build.build_time(settings),
            start_date=settings.start_date,
        )
        new_version = settings.versioning_style.increment(self._registry, context)
        if new_version == current:
            logger.debug("version unchanged", unit=unit.name, attribute=attribute.attribute)
            return None

        replacement = compose_version_text(
            full, separator, new_version, settings.replace_non_numerics
        )
        start, end = match.span()
        full_start, full_end = match.span("full")
        edit = ArtifactEdit(
            start=start,
            original=match.group(0),
            replacement=text[start:full_start] + replacement + text[full_end:end],
        )
        try:
            ok = self._editor.apply(path, edit)
        except WriteError as error:
            logger.warning("failed to write version artifact", artifact=str(path), error=str(error))
            ok = False

        record = UpdateRecord(
            timestamp=utc_timestamp(),
            unit=unit.name,
            attribute=attribute.attribute,
            artifact=str(path),
            old_version=full,
            new_version=replacement,
            ok=ok,
        )
        log = logger.info if ok else logger.error
        log(
            f"{unit.name} {attribute.attribute}: {replacement} [{record.status}]",
            unit=unit.name,
            attribute=attribute.attribute,
            version=replacement,
            status=record.status,
        )
        if self._history is not None:
            self._history.append(record)
        return record


def compose_version_text(
    original: str,
    separator: str,
    new_version: StructuredVersion,
    replace_non_numerics: bool,
) -> str:
    """Render ``new_version`` in the shape of the ``original`` version text.

    With ``replace_non_numerics`` disabled, positions whose original token is
    not purely numeric keep that token and only numeric positions take the
    new values. Otherwise all four components are written.
    """
    if not replace_non_numerics and non_numeric_pattern(separator).search(original):
        parts = original.split(separator)
        new_parts = [str(value) for value in new_version.components]
        merged = [
            new_parts[index] if part.isdecimal() else part
            for index, part in enumerate(parts[:4])
        ]
        return separator.join(merged)
    return new_version.numeric().format(4, separator)
