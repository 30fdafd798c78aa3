"""Structured version model."""

from .version import (
    BUILD,
    COMPONENTS,
    MAJOR,
    MINOR,
    REVISION,
    StructuredVersion,
    VersionComponent,
    VersionParseError,
    non_numeric_pattern,
    parse_version,
)

__all__ = [
    "BUILD",
    "COMPONENTS",
    "MAJOR",
    "MINOR",
    "REVISION",
    "StructuredVersion",
    "VersionComponent",
    "VersionParseError",
    "non_numeric_pattern",
    "parse_version",
]
