"""Structured four-component version values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Final, Literal

VersionComponent = Literal["major", "minor", "build", "revision"]

MAJOR: Final = "major"
MINOR: Final = "minor"
BUILD: Final = "build"
REVISION: Final = "revision"
COMPONENTS: Final[tuple[VersionComponent, ...]] = (MAJOR, MINOR, BUILD, REVISION)

PLACEHOLDER_DIGIT: Final = "0"

ComponentValue = int | str


class VersionParseError(ValueError):
    """Raised when a version string cannot be split into enough components."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Cannot parse version '{text}': {reason}")
        self.text = text
        self.reason = reason


@dataclass(slots=True, frozen=True)
class StructuredVersion:
    """Immutable major.minor.build.revision value.

    Each component is either a non-negative integer or an opaque token carried
    over verbatim from the parsed text (for example ``RC1``). ``length`` keeps
    how many components the source text actually had; missing trailing
    components read as ``0``. Equality only looks at the four components.
    """

    major: ComponentValue = 0
    minor: ComponentValue = 0
    build: ComponentValue = 0
    revision: ComponentValue = 0
    separator: str = field(default=".", compare=False)
    length: int = field(default=4, compare=False)

    @property
    def components(self) -> tuple[ComponentValue, ...]:
        """Return the four components in order."""
        return (self.major, self.minor, self.build, self.revision)

    def get(self, component: VersionComponent) -> ComponentValue:
        """Return one component by name."""
        return getattr(self, _checked(component))

    def is_numeric(self, component: VersionComponent) -> bool:
        """Return True when a component supports arithmetic."""
        return isinstance(self.get(component), int)

    def with_component(
        self, component: VersionComponent, value: ComponentValue
    ) -> StructuredVersion:
        """Return a copy with one component replaced."""
        return replace(self, **{_checked(component): _coerce(value)})

    def numeric(self) -> StructuredVersion:
        """Return a copy where opaque tokens become their placeholder-substituted numbers."""
        values = [
            value if isinstance(value, int) else int(re.sub(r"\D+", PLACEHOLDER_DIGIT, value))
            for value in self.components
        ]
        return replace(
            self, major=values[0], minor=values[1], build=values[2], revision=values[3]
        )

    def format(self, precision: int = 4, separator: str = ".") -> str:
        """Render the first ``precision`` components joined by ``separator``."""
        if precision < 1 or precision > 4:
            raise ValueError("Version precision must be between 1 and 4.")
        return separator.join(str(value) for value in self.components[:precision])

    def __str__(self) -> str:
        return self.format(max(self.length, 1))


def parse_version(text: str, separator: str = ".", required: int = 1) -> StructuredVersion:
    """Parse ``text`` split on ``separator`` into a StructuredVersion.

    Runs of characters that are neither digits nor separator characters are
    replaced by a placeholder digit for validation only; the original token is
    kept as an opaque component.
    """
    if not separator:
        raise VersionParseError(text, "separator must be non-empty")
    if required < 1 or required > 4:
        raise ValueError("Required component count must be between 1 and 4.")
    stripped = text.strip()
    if not stripped:
        raise VersionParseError(text, "version text is empty")
    sanitized = non_numeric_pattern(separator).sub(PLACEHOLDER_DIGIT, stripped)
    sanitized_parts = sanitized.split(separator)
    raw_parts = stripped.split(separator)
    if len(sanitized_parts) != len(raw_parts):
        raise VersionParseError(text, "component boundaries are ambiguous")
    if len(raw_parts) < required:
        raise VersionParseError(
            text, f"expected at least {required} components, found {len(raw_parts)}"
        )
    if len(raw_parts) > 4:
        raise VersionParseError(text, f"expected at most 4 components, found {len(raw_parts)}")

    values: list[ComponentValue] = []
    for raw, sanitized_part in zip(raw_parts, sanitized_parts, strict=True):
        if not sanitized_part.isdecimal():
            raise VersionParseError(text, f"component '{raw}' is empty or malformed")
        values.append(int(raw) if raw.isdecimal() else raw)
    length = len(values)
    while len(values) < 4:
        values.append(0)
    return StructuredVersion(
        major=values[0],
        minor=values[1],
        build=values[2],
        revision=values[3],
        separator=separator,
        length=length,
    )


def non_numeric_pattern(separator: str) -> re.Pattern[str]:
    """Return a regex matching runs that are neither digits nor separator characters."""
    return re.compile(f"[^\\d{re.escape(separator)}]+")


def _checked(component: str) -> str:
    if component not in COMPONENTS:
        raise ValueError(f"Unknown version component: {component}")
    return component


def _coerce(value: ComponentValue) -> ComponentValue:
    if isinstance(value, bool):
        raise TypeError("Version components must be int or str.")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("Numeric version components must be non-negative.")
        return value
    if isinstance(value, str) and value.isdecimal():
        return int(value)
    if isinstance(value, str) and value:
        return value
    raise TypeError("Version components must be a non-negative int or non-empty str.")
