"""Source dialects and their version attribute patterns."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

ASSEMBLY_VERSION: Final = "AssemblyVersion"
ASSEMBLY_FILE_VERSION: Final = "AssemblyFileVersion"
PRODUCT_VERSION: Final = "ProductVersion"
FILE_VERSION: Final = "FileVersion"
VERSION_ATTRIBUTES: Final = (ASSEMBLY_VERSION, ASSEMBLY_FILE_VERSION)

DIALECT_CSHARP: Final = "csharp"
DIALECT_VISUAL_BASIC: Final = "visual_basic"
DIALECT_CPP_MANAGED: Final = "cpp_managed"
DIALECT_CPP_UNMANAGED: Final = "cpp_unmanaged"

PATTERN_FLAGS: Final = re.IGNORECASE | re.MULTILINE

_RESOURCE_ATTRIBUTES: Final = {
    ASSEMBLY_VERSION: PRODUCT_VERSION,
    ASSEMBLY_FILE_VERSION: FILE_VERSION,
}


@dataclass(slots=True, frozen=True)
class AttributePattern:
    """Compiled locator for one version expression.

    The ``full`` named group captures the version string to rewrite.
    """

    attribute: str
    pattern: re.Pattern[str]


@dataclass(slots=True, frozen=True)
class Dialect:
    """Source dialect: where its version artifact lives and how to find versions in it."""

    name: str
    artifact_filename: str
    artifact_extensions: tuple[str, ...]
    build_patterns: Callable[[str], tuple[AttributePattern, ...]]

    def patterns(self, attribute: str) -> tuple[AttributePattern, ...]:
        if attribute not in VERSION_ATTRIBUTES:
            raise ValueError(f"Unknown version attribute: {attribute}")
        return self.build_patterns(attribute)


def managed_patterns(attribute: str) -> tuple[AttributePattern, ...]:
    """``[assembly: Attr("1.2.3.4")]`` / ``<Assembly: Attr("1.2.3.4")>`` forms."""
    name = re.escape(attribute)
    pattern = re.compile(
        rf'^[\[<]assembly:\s*{name}(Attribute)?\s*\(\s*'
        rf'"(?P<full>\S+\.\S+(\.(?P<version>[^"]+))?)"\s*\)[\]>]',
        PATTERN_FLAGS,
    )
    return (AttributePattern(attribute=attribute, pattern=pattern),)


def resource_patterns(attribute: str) -> tuple[AttributePattern, ...]:
    """Resource script forms.

    Quoted ``VALUE "FileVersion", "1.0.0.1"`` first, then ``FILEVERSION 1,0,0,1``.
    """
    resource_name = _RESOURCE_ATTRIBUTES[attribute]
    quoted = re.compile(
        rf'^[\s]*VALUE "{re.escape(resource_name)}", '
        rf'"(?P<full>\S+[.,\s]+\S+[.,\s]+\S+[.,\s]+[^\s"]+)"',
        PATTERN_FLAGS,
    )
    upper_name = resource_name.upper()
    unquoted = re.compile(
        rf"^[\s]*{re.escape(upper_name)} (?P<full>\S+[.,]+\S+[.,]+\S+[.,]+\S+)",
        PATTERN_FLAGS,
    )
    return (
        AttributePattern(attribute=resource_name, pattern=quoted),
        AttributePattern(attribute=upper_name, pattern=unquoted),
    )


DIALECTS: Final[dict[str, Dialect]] = {
    DIALECT_CSHARP: Dialect(
        name=DIALECT_CSHARP,
        artifact_filename="AssemblyInfo.cs",
        artifact_extensions=(".cs",),
        build_patterns=managed_patterns,
    ),
    DIALECT_VISUAL_BASIC: Dialect(
        name=DIALECT_VISUAL_BASIC,
        artifact_filename="AssemblyInfo.vb",
        artifact_extensions=(".vb",),
        build_patterns=managed_patterns,
    ),
    DIALECT_CPP_MANAGED: Dialect(
        name=DIALECT_CPP_MANAGED,
        artifact_filename="AssemblyInfo.cpp",
        artifact_extensions=(".cpp",),
        build_patterns=managed_patterns,
    ),
    DIALECT_CPP_UNMANAGED: Dialect(
        name=DIALECT_CPP_UNMANAGED,
        artifact_filename="{name}.rc",
        artifact_extensions=(".rc",),
        build_patterns=resource_patterns,
    ),
}

PROJECT_EXTENSIONS: Final[dict[str, str]] = {
    ".csproj": DIALECT_CSHARP,
    ".vbproj": DIALECT_VISUAL_BASIC,
    ".vcxproj": DIALECT_CPP_MANAGED,
    ".vcproj": DIALECT_CPP_MANAGED,
}
NATIVE_PROJECT_EXTENSIONS: Final = (".vcxproj", ".vcproj")


def dialect_for_project(project_path: Path) -> Dialect | None:
    """Return the dialect implied by a project file extension."""
    name = PROJECT_EXTENSIONS.get(project_path.suffix.lower())
    return DIALECTS[name] if name is not None else None


def dialect_for_artifact(artifact: str | Path) -> Dialect | None:
    """Infer the dialect from a version artifact's own extension."""
    suffix = Path(artifact).suffix.lower()
    for dialect in DIALECTS.values():
        if suffix in dialect.artifact_extensions:
            return dialect
    return None
