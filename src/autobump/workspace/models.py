"""Build unit tree and project item models."""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Final

from autobump.config import UnitSettings

UNIT_SOLUTION: Final = "solution"
UNIT_FOLDER: Final = "folder"
UNIT_PROJECT: Final = "project"
UNIT_NONE: Final = "none"
UNIT_KINDS: Final = (UNIT_SOLUTION, UNIT_FOLDER, UNIT_PROJECT, UNIT_NONE)

ITEM_FILE: Final = "file"
ITEM_PHYSICAL_FOLDER: Final = "physical_folder"
ITEM_VIRTUAL_FOLDER: Final = "virtual_folder"
FOLDER_ITEM_KINDS: Final = (ITEM_PHYSICAL_FOLDER, ITEM_VIRTUAL_FOLDER)

DIALECT_NONE: Final = "none"


@dataclass(slots=True, frozen=True)
class ProjectItem:
    """Item inside a project as exposed by the host model.

    ``local_path`` is the on-disk location when the item maps to one;
    ``date_modified`` is the host's own textual modification stamp, if any.
    """

    name: str
    kind: str = ITEM_FILE
    local_path: Path | None = None
    date_modified: str | None = None
    children: tuple[ProjectItem, ...] = ()

    @property
    def is_folder(self) -> bool:
        return self.kind in FOLDER_ITEM_KINDS


@dataclass(slots=True, frozen=True)
class OutputFile:
    """Build output location of a project."""

    name: str
    directory: Path

    @property
    def path(self) -> Path:
        return self.directory / self.name


@dataclass(slots=True, eq=False, weakref_slot=True)
class BuildUnit:
    """Solution, folder or project node.

    Children are owned by their parent; the parent link is weak. The tree is
    rebuilt for every build pass.
    """

    kind: str
    name: str
    unique_name: str
    path: Path
    settings: UnitSettings = field(default_factory=UnitSettings)
    dialect: str = DIALECT_NONE
    children: list[BuildUnit] = field(default_factory=list)
    _parent: weakref.ReferenceType[BuildUnit] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.kind not in UNIT_KINDS:
            raise ValueError(f"Unknown build unit kind: {self.kind}")

    @property
    def parent(self) -> BuildUnit | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def directory(self) -> Path:
        """Directory holding the unit's solution or project file."""
        if self.kind == UNIT_FOLDER:
            return self.path
        return self.path.parent

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.kind, self.name)

    def add_child(self, child: BuildUnit) -> BuildUnit:
        """Attach ``child`` in order and point its weak parent link here."""
        child._parent = weakref.ref(self)
        self.children.append(child)
        return child

    def root(self) -> BuildUnit:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def walk(self) -> Iterator[BuildUnit]:
        """Yield this unit and all descendants depth-first in child order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def apply_global_settings(self, global_settings: UnitSettings) -> None:
        """Replace settings with the global ones, keeping the unit's own artifact override."""
        self.settings = replace(
            global_settings,
            assembly_info_filename=self.settings.assembly_info_filename,
            use_global_settings=self.settings.use_global_settings,
        )
