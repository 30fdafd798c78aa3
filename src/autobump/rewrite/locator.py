"""Resolves which artifact carries a unit's version and in which dialect."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from autobump.config import ConfigurationError
from autobump.logging import get_logger
from autobump.rewrite.dialects import (
    DIALECT_CPP_MANAGED,
    DIALECT_CPP_UNMANAGED,
    DIALECTS,
    NATIVE_PROJECT_EXTENSIONS,
    Dialect,
    dialect_for_artifact,
    dialect_for_project,
)
from autobump.workspace.host import UnitTreeHost
from autobump.workspace.models import UNIT_PROJECT, UNIT_SOLUTION, BuildUnit

logger = get_logger(__name__)


class LocateError(LookupError):
    """Raised when a version artifact or expression cannot be found."""


@dataclass(slots=True, frozen=True)
class ResolvedArtifact:
    """Artifact path plus the dialect used to read it."""

    path: Path
    dialect: Dialect


def detect_dialect(host: UnitTreeHost, unit: BuildUnit) -> Dialect | None:
    """Set ``unit.dialect`` from its project file when not yet known."""
    if unit.dialect in DIALECTS:
        return DIALECTS[unit.dialect]
    if unit.kind != UNIT_PROJECT:
        return None
    dialect = dialect_for_project(unit.path)
    if dialect is None:
        return None
    if dialect.name == DIALECT_CPP_MANAGED:
        if host.find_item(unit, dialect.artifact_filename) is None:
            dialect = DIALECTS[DIALECT_CPP_UNMANAGED]
    unit.dialect = dialect.name
    return dialect


def resolve_artifact(host: UnitTreeHost, unit: BuildUnit) -> ResolvedArtifact:
    """Find the version artifact of a unit.

    An explicit ``assembly_info_filename`` wins and is resolved against the
    unit's directory. Solutions require that override. Raises
    ConfigurationError for an unusable setup and LocateError when the
    artifact is missing.
    """
    override = unit.settings.assembly_info_filename
    if unit.kind == UNIT_SOLUTION:
        if not override:
            raise ConfigurationError(
                "Can't update the version of a solution without an assembly_info_filename."
            )
        dialect = dialect_for_artifact(override)
        if dialect is None:
            raise ConfigurationError(
                f"Can't infer the language of '{override}'; add a known file extension."
            )
        unit.dialect = dialect.name
        return _existing(ResolvedArtifact(path=unit.directory / override, dialect=dialect))
    if unit.kind != UNIT_PROJECT:
        raise ConfigurationError(
            f"Unit '{unit.name}' of kind '{unit.kind}' has no version artifact."
        )

    project_dialect = dialect_for_project(unit.path)
    if project_dialect is None:
        raise ConfigurationError(f"Unknown project file type: '{unit.path.suffix}'.")

    if override:
        dialect = dialect_for_artifact(override) or detect_dialect(host, unit) or project_dialect
        unit.dialect = dialect.name
        return _existing(ResolvedArtifact(path=unit.directory / override, dialect=dialect))

    filename = project_dialect.artifact_filename
    found = host.find_item(unit, filename)
    dialect = project_dialect
    if found is None and unit.path.suffix.lower() in NATIVE_PROJECT_EXTENSIONS:
        dialect = DIALECTS[DIALECT_CPP_UNMANAGED]
        filename = dialect.artifact_filename.format(name=unit.name)
        found = host.find_item(unit, filename)
    if found is None:
        raise LocateError(f"Could not locate '{filename}' in project '{unit.name}'.")
    unit.dialect = dialect.name
    logger.debug("found version artifact", unit=unit.name, artifact=str(found))
    return _existing(ResolvedArtifact(path=found, dialect=dialect))


def _existing(artifact: ResolvedArtifact) -> ResolvedArtifact:
    if not artifact.path.is_file():
        raise LocateError(f"Version artifact '{artifact.path}' does not exist.")
    return artifact
