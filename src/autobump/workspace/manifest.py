"""Filesystem-backed unit tree described by autobump.toml."""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from autobump.config import (
    ConfigurationError,
    UnitSettings,
    get_table,
    get_table_list,
    load_config_file,
    optional_str,
    parse_unit_settings,
    tuple_of_strings,
)
from autobump.workspace.host import OutputUnavailableError
from autobump.workspace.models import (
    ITEM_FILE,
    ITEM_PHYSICAL_FOLDER,
    UNIT_FOLDER,
    UNIT_PROJECT,
    UNIT_SOLUTION,
    BuildUnit,
    OutputFile,
    ProjectItem,
)

DEFAULT_ACTIVE_CONFIGURATION: Final = "Release"
DEFAULT_EXCLUDE_GLOBS: Final = ("**/bin/**", "**/obj/**", "**/.git/**", "**/.autobump/**")


@dataclass(slots=True, frozen=True)
class FolderEntry:
    """Solution folder declared in the manifest."""

    name: str
    parent: str | None
    settings: UnitSettings


@dataclass(slots=True, frozen=True)
class ProjectEntry:
    """Project declared in the manifest."""

    name: str
    path: Path
    folder: str | None
    depends_on: tuple[str, ...]
    active_configuration: str
    output_dir: str | None
    output_name: str | None
    primary_output: str | None
    exclude_globs: tuple[str, ...]
    settings: UnitSettings


@dataclass(slots=True, frozen=True)
class SolutionManifest:
    """Parsed solution layout."""

    root: Path
    name: str
    path: Path
    active_configuration: str
    settings: UnitSettings
    folders: tuple[FolderEntry, ...]
    projects: tuple[ProjectEntry, ...]


def parse_manifest(root: Path, payload: dict[str, object]) -> SolutionManifest:
    """Validate the solution, folder and project tables of a config payload."""
    resolved_root = root.resolve()
    solution_payload = get_table(payload, "solution")
    name = optional_str(solution_payload.get("name"), "solution.name", None) or resolved_root.name
    solution_path = (
        optional_str(solution_payload.get("path"), "solution.path", None) or f"{name}.sln"
    )
    active_configuration = (
        optional_str(
            solution_payload.get("active_configuration"),
            "solution.active_configuration",
            None,
        )
        or DEFAULT_ACTIVE_CONFIGURATION
    )
    solution_settings = parse_unit_settings(
        get_table(solution_payload, "settings"), "solution.settings", UnitSettings()
    )

    folders: list[FolderEntry] = []
    for index, entry in enumerate(get_table_list(payload, "folders")):
        section = f"folders[{index}]"
        folder_name = _required_str(entry, "name", section)
        folders.append(
            FolderEntry(
                name=folder_name,
                parent=optional_str(entry.get("parent"), f"{section}.parent", None),
                settings=parse_unit_settings(
                    get_table(entry, "settings"), f"{section}.settings", UnitSettings()
                ),
            )
        )
    folder_names = [folder.name for folder in folders]
    _ensure_unique(folder_names, "folders")
    for folder in folders:
        if folder.parent is not None and folder.parent not in folder_names:
            raise ConfigurationError(
                f"Folder '{folder.name}' references unknown parent '{folder.parent}'."
            )
    _ensure_acyclic_folders(folders)

    projects: list[ProjectEntry] = []
    for index, entry in enumerate(get_table_list(payload, "projects")):
        section = f"projects[{index}]"
        project_name = _required_str(entry, "name", section)
        folder = optional_str(entry.get("folder"), f"{section}.folder", None)
        if folder is not None and folder not in folder_names:
            raise ConfigurationError(
                f"Project '{project_name}' references unknown folder '{folder}'."
            )
        depends_on: tuple[str, ...] = ()
        if "depends_on" in entry:
            depends_on = tuple_of_strings(entry["depends_on"], section, "depends_on")
        exclude_globs = DEFAULT_EXCLUDE_GLOBS
        if "exclude_globs" in entry:
            exclude_globs = tuple_of_strings(entry["exclude_globs"], section, "exclude_globs")
        projects.append(
            ProjectEntry(
                name=project_name,
                path=resolved_root / _required_str(entry, "path", section),
                folder=folder,
                depends_on=depends_on,
                active_configuration=optional_str(
                    entry.get("active_configuration"),
                    f"{section}.active_configuration",
                    active_configuration,
                )
                or active_configuration,
                output_dir=optional_str(entry.get("output_dir"), f"{section}.output_dir", None),
                output_name=optional_str(entry.get("output_name"), f"{section}.output_name", None),
                primary_output=optional_str(
                    entry.get("primary_output"), f"{section}.primary_output", None
                ),
                exclude_globs=exclude_globs,
                settings=parse_unit_settings(
                    get_table(entry, "settings"), f"{section}.settings", UnitSettings()
                ),
            )
        )
    project_names = [project.name for project in projects]
    _ensure_unique(project_names, "projects")
    for project in projects:
        for dependency in project.depends_on:
            if dependency not in project_names:
                raise ConfigurationError(
                    f"Project '{project.name}' depends on unknown project '{dependency}'."
                )

    return SolutionManifest(
        root=resolved_root,
        name=name,
        path=resolved_root / solution_path,
        active_configuration=active_configuration,
        settings=solution_settings,
        folders=tuple(folders),
        projects=tuple(projects),
    )


class ManifestHost:
    """Unit tree accessor backed by a manifest and the files on disk."""

    def __init__(
        self, manifest: SolutionManifest, active_project_names: tuple[str, ...] = ()
    ) -> None:
        self._manifest = manifest
        self._projects = {project.name: project for project in manifest.projects}
        unknown = [name for name in active_project_names if name not in self._projects]
        if unknown:
            raise ConfigurationError(f"Unknown project(s) requested: {', '.join(unknown)}.")
        self._active_project_names = active_project_names
        self._tree: BuildUnit | None = None

    @classmethod
    def load(cls, root: Path, active_project_names: tuple[str, ...] = ()) -> ManifestHost:
        """Read autobump.toml under ``root``."""
        return cls(parse_manifest(root, load_config_file(root.resolve())), active_project_names)

    @property
    def manifest(self) -> SolutionManifest:
        return self._manifest

    def solution(self) -> BuildUnit:
        """Build a fresh unit tree; the host holds it until the next call."""
        manifest = self._manifest
        solution = BuildUnit(
            kind=UNIT_SOLUTION,
            name=manifest.name,
            unique_name=manifest.path.relative_to(manifest.root).as_posix(),
            path=manifest.path,
            settings=manifest.settings,
        )
        folder_units: dict[str, BuildUnit] = {}
        for folder in manifest.folders:
            folder_units[folder.name] = BuildUnit(
                kind=UNIT_FOLDER,
                name=folder.name,
                unique_name=f"folder:{folder.name}",
                path=manifest.root,
                settings=folder.settings,
            )
        for folder in manifest.folders:
            parent = folder_units[folder.parent] if folder.parent is not None else solution
            parent.add_child(folder_units[folder.name])
        for project in manifest.projects:
            parent = folder_units[project.folder] if project.folder is not None else solution
            parent.add_child(
                BuildUnit(
                    kind=UNIT_PROJECT,
                    name=project.name,
                    unique_name=project.path.relative_to(manifest.root).as_posix(),
                    path=project.path,
                    settings=project.settings,
                )
            )
        self._tree = solution
        return solution

    def active_projects(self) -> list[BuildUnit]:
        tree = self.solution()
        return [_find_project(tree, name) for name in self._active_project_names]

    def dependencies(self, unit: BuildUnit) -> list[BuildUnit]:
        entry = self._entry(unit)
        tree = unit.root()
        if tree.kind != UNIT_SOLUTION:
            tree = self._tree if self._tree is not None else self.solution()
        return [_find_project(tree, name) for name in entry.depends_on]

    def active_configuration(self, unit: BuildUnit) -> str:
        if unit.kind == UNIT_SOLUTION:
            return self._manifest.active_configuration
        return self._entry(unit).active_configuration

    def project_items(self, unit: BuildUnit) -> list[ProjectItem]:
        entry = self._entry(unit)
        return _scan_items(entry.path.parent, entry.path, entry.exclude_globs)

    def find_item(self, unit: BuildUnit, filename: str) -> Path | None:
        if unit.kind != UNIT_PROJECT:
            return None
        wanted = filename.lower()
        pending = list(self.project_items(unit))
        while pending:
            item = pending.pop(0)
            if item.kind == ITEM_FILE and item.name.lower() == wanted:
                return item.local_path
            pending.extend(item.children)
        return None

    def output_file(self, unit: BuildUnit) -> OutputFile:
        entry = self._entry(unit)
        if entry.output_dir is None or entry.output_name is None:
            raise OutputUnavailableError(
                f"Project '{entry.name}' does not declare output_dir and output_name."
            )
        return OutputFile(name=entry.output_name, directory=entry.path.parent / entry.output_dir)

    def primary_output(self, unit: BuildUnit) -> Path:
        entry = self._entry(unit)
        if entry.primary_output is None:
            raise OutputUnavailableError(f"Project '{entry.name}' does not declare primary_output.")
        return entry.path.parent / entry.primary_output

    def _entry(self, unit: BuildUnit) -> ProjectEntry:
        entry = self._projects.get(unit.name)
        if unit.kind != UNIT_PROJECT or entry is None:
            raise LookupError(f"'{unit.name}' is not a project of this solution.")
        return entry


def _find_project(tree: BuildUnit, name: str) -> BuildUnit:
    for unit in tree.walk():
        if unit.kind == UNIT_PROJECT and unit.name == name:
            return unit
    raise LookupError(f"Project '{name}' is not part of the solution tree.")


def _scan_items(
    project_dir: Path, project_file: Path, exclude_globs: tuple[str, ...]
) -> list[ProjectItem]:
    """List top-level files as items and directories as physical folders."""
    try:
        with os.scandir(project_dir) as entries:
            ordered = sorted(entries, key=lambda item: item.name)
    except OSError:
        return []
    items: list[ProjectItem] = []
    for entry in ordered:
        full_path = Path(entry.path)
        relative = full_path.relative_to(project_dir).as_posix()
        if entry.is_dir(follow_symlinks=False):
            if _should_exclude(f"{relative}/", exclude_globs):
                continue
            children = tuple(
                ProjectItem(name=path.name, kind=ITEM_FILE, local_path=path)
                for path in _files_beneath(project_dir, full_path, exclude_globs)
            )
            items.append(
                ProjectItem(
                    name=entry.name,
                    kind=ITEM_PHYSICAL_FOLDER,
                    local_path=full_path,
                    children=children,
                )
            )
            continue
        if not entry.is_file(follow_symlinks=False) or full_path == project_file:
            continue
        if _should_exclude(relative, exclude_globs):
            continue
        items.append(ProjectItem(name=entry.name, kind=ITEM_FILE, local_path=full_path))
    return items


def _files_beneath(
    project_dir: Path, folder: Path, exclude_globs: tuple[str, ...]
) -> list[Path]:
    output: list[Path] = []
    stack: list[Path] = [folder]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered = sorted(entries, key=lambda item: item.name)
        except OSError:
            continue
        for entry in reversed(ordered):
            full_path = Path(entry.path)
            relative = full_path.relative_to(project_dir).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if not _should_exclude(f"{relative}/", exclude_globs):
                    stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if not _should_exclude(relative, exclude_globs):
                output.append(full_path)
    return sorted(output)


def _should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def _required_str(entry: dict[str, object], key: str, section: str) -> str:
    value = optional_str(entry.get(key), f"{section}.{key}", None)
    if value is None:
        raise ConfigurationError(f"Config field '{section}.{key}' is required.")
    return value


def _ensure_unique(names: list[str], section: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ConfigurationError(f"Config section '{section}' declares '{name}' twice.")
        seen.add(name)


def _ensure_acyclic_folders(folders: list[FolderEntry]) -> None:
    parents = {folder.name: folder.parent for folder in folders}
    for folder in folders:
        seen = {folder.name}
        current = folder.parent
        while current is not None:
            if current in seen:
                raise ConfigurationError(f"Folder '{folder.name}' is nested inside itself.")
            seen.add(current)
            current = parents[current]
