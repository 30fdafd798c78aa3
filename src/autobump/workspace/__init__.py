"""Build unit tree and host interfaces."""

from .host import (
    ArtifactDocument,
    DocumentHost,
    OutputUnavailableError,
    PrimaryOutputAccessor,
    UnitTreeHost,
)
from .manifest import ManifestHost, SolutionManifest, parse_manifest
from .models import (
    DIALECT_NONE,
    ITEM_FILE,
    ITEM_PHYSICAL_FOLDER,
    ITEM_VIRTUAL_FOLDER,
    UNIT_FOLDER,
    UNIT_NONE,
    UNIT_PROJECT,
    UNIT_SOLUTION,
    BuildUnit,
    OutputFile,
    ProjectItem,
)

__all__ = [
    "ArtifactDocument",
    "BuildUnit",
    "DIALECT_NONE",
    "DocumentHost",
    "ITEM_FILE",
    "ITEM_PHYSICAL_FOLDER",
    "ITEM_VIRTUAL_FOLDER",
    "ManifestHost",
    "OutputFile",
    "OutputUnavailableError",
    "PrimaryOutputAccessor",
    "ProjectItem",
    "SolutionManifest",
    "UNIT_FOLDER",
    "UNIT_NONE",
    "UNIT_PROJECT",
    "UNIT_SOLUTION",
    "UnitTreeHost",
    "parse_manifest",
]
