"""Interfaces the engine consumes from the host build environment."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from autobump.workspace.models import BuildUnit, OutputFile, ProjectItem


class OutputUnavailableError(LookupError):
    """Raised when a host accessor cannot report a project's build output."""


class UnitTreeHost(Protocol):
    """Read-only view over the host's solution/project model."""

    def solution(self) -> BuildUnit:
        """Build a fresh unit tree rooted at the solution."""

    def active_projects(self) -> list[BuildUnit]:
        """Return the projects explicitly selected for a project-scoped build."""

    def dependencies(self, unit: BuildUnit) -> list[BuildUnit]:
        """Return the unit's build-time prerequisite projects."""

    def active_configuration(self, unit: BuildUnit) -> str:
        """Return the active configuration name of a solution or project."""

    def project_items(self, unit: BuildUnit) -> list[ProjectItem]:
        """Return the top-level items of a project."""

    def find_item(self, unit: BuildUnit, filename: str) -> Path | None:
        """Return the on-disk path of a named item inside the unit, if any."""

    def output_file(self, unit: BuildUnit) -> OutputFile:
        """Return the active build output; raise OutputUnavailableError if unknown."""


@runtime_checkable
class PrimaryOutputAccessor(Protocol):
    """Narrower fallback accessor for project kinds without a uniform output property."""

    def primary_output(self, unit: BuildUnit) -> Path:
        """Return the full path of the primary output of the first configuration."""


class ArtifactDocument(Protocol):
    """Open text document in the host editor."""

    def replace_text(self, old: str, new: str) -> bool:
        """Replace the first occurrence of ``old``; return False when absent."""

    def save(self) -> None:
        """Persist the document."""

    def close(self, save: bool) -> None:
        """Close the document window."""


@runtime_checkable
class DocumentHost(Protocol):
    """Host editing surface used outside headless mode."""

    def is_open(self, path: Path) -> bool:
        """Return True when the artifact is already open in the editor."""

    def open_document(self, path: Path) -> ArtifactDocument:
        """Open the artifact as an editable document."""
