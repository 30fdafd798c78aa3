"""Apply a version edit to an artifact on disk or through the host editor."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from autobump.config import ConfigurationError
from autobump.workspace.host import DocumentHost


class WriteError(OSError):
    """Raised when an artifact cannot be rewritten."""


@dataclass(slots=True, frozen=True)
class ArtifactEdit:
    """Replace ``original`` found at ``start`` with ``replacement``."""

    start: int
    original: str
    replacement: str

    @property
    def end(self) -> int:
        return self.start + len(self.original)


class ArtifactEditor(Protocol):
    """Writes one edit to an artifact; returns False when the edit did not apply."""

    def apply(self, path: Path, edit: ArtifactEdit) -> bool:
        """Apply ``edit`` to the artifact at ``path``."""


def read_artifact(path: Path) -> tuple[str, str]:
    """Return artifact text and the encoding to write it back with."""
    raw = path.read_bytes()
    if raw.startswith(codecs.BOM_UTF8):
        encoding = "utf-8-sig"
    elif raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        encoding = "utf-16"
    else:
        encoding = "utf-8"
    try:
        return raw.decode(encoding), encoding
    except UnicodeDecodeError:
        return raw.decode("latin-1"), "latin-1"


class FileArtifactEditor:
    """Headless read-modify-write of the file on disk."""

    def apply(self, path: Path, edit: ArtifactEdit) -> bool:
        try:
            text, encoding = read_artifact(path)
        except OSError as error:
            raise WriteError(f"Cannot read '{path}': {error}") from error
        if text[edit.start : edit.end] != edit.original:
            return False
        updated = text[: edit.start] + edit.replacement + text[edit.end :]
        try:
            with path.open("w", encoding=encoding, newline="") as handle:
                handle.write(updated)
        except OSError as error:
            raise WriteError(f"Cannot write '{path}': {error}") from error
        return True


class DocumentArtifactEditor:
    """Edits through the host's document surface.

    A document opened only for the edit is closed with save; one the user
    already had open is saved in place and left open.
    """

    def __init__(self, host: DocumentHost) -> None:
        self._host = host

    def apply(self, path: Path, edit: ArtifactEdit) -> bool:
        close_afterwards = not self._host.is_open(path)
        try:
            document = self._host.open_document(path)
        except Exception as error:
            raise WriteError(f"Could not open '{path}' in the host editor: {error}") from error
        success = document.replace_text(edit.original, edit.replacement)
        if close_afterwards:
            document.close(save=True)
        else:
            document.save()
        return success


def select_editor(headless: bool, host: object) -> ArtifactEditor:
    """Return the plain-file editor in headless mode, else the host document editor."""
    if headless:
        return FileArtifactEditor()
    if not isinstance(host, DocumentHost):
        raise ConfigurationError(
            "Non-headless mode needs a host exposing is_open() and open_document()."
        )
    return DocumentArtifactEditor(host)
