"""Version artifact location and rewriting."""

from .dialects import (
    ASSEMBLY_FILE_VERSION,
    ASSEMBLY_VERSION,
    DIALECTS,
    VERSION_ATTRIBUTES,
    AttributePattern,
    Dialect,
    dialect_for_artifact,
    dialect_for_project,
)
from .editors import (
    ArtifactEdit,
    ArtifactEditor,
    DocumentArtifactEditor,
    FileArtifactEditor,
    WriteError,
    select_editor,
)
from .locator import LocateError, ResolvedArtifact, detect_dialect, resolve_artifact
from .rewriter import VersionRewriter, compose_version_text

__all__ = [
    "ASSEMBLY_FILE_VERSION",
    "ASSEMBLY_VERSION",
    "ArtifactEdit",
    "ArtifactEditor",
    "AttributePattern",
    "DIALECTS",
    "Dialect",
    "DocumentArtifactEditor",
    "FileArtifactEditor",
    "LocateError",
    "ResolvedArtifact",
    "VERSION_ATTRIBUTES",
    "VersionRewriter",
    "WriteError",
    "compose_version_text",
    "detect_dialect",
    "dialect_for_artifact",
    "dialect_for_project",
    "resolve_artifact",
    "select_editor",
]
