"""Increment strategy protocol and per-update context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Protocol

from autobump.versioning import (
    COMPONENTS,
    StructuredVersion,
    VersionComponent,
)
from autobump.versioning.version import ComponentValue

if TYPE_CHECKING:
    from autobump.workspace.models import BuildUnit


class StrategyError(RuntimeError):
    """Raised when a strategy fails while computing a component."""

    def __init__(self, strategy: str, component: str, cause: BaseException) -> None:
        super().__init__(f"Strategy '{strategy}' failed on component '{component}': {cause}")
        self.strategy = strategy
        self.component = component
        self.cause = cause


class StrategyNotFoundError(LookupError):
    """Raised when a configured strategy name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown increment strategy: {name}")
        self.name = name


@dataclass(slots=True)
class IncrementContext:
    """Mutable state threaded through one strategy call chain.

    A strategy writes results with :meth:`set_new_value` and may clear
    ``continue_processing`` to leave the remaining, lower-order components
    untouched. One context is created per artifact update.
    """

    unit: BuildUnit | None
    current_version: StructuredVersion
    build_start: datetime
    start_date: date
    continue_processing: bool = True
    _new_values: dict[str, ComponentValue] = field(default_factory=dict)

    def current_value(self, component: VersionComponent) -> ComponentValue:
        """Return the component value as parsed from the artifact."""
        return self.current_version.get(component)

    def set_new_value(self, component: VersionComponent, value: ComponentValue) -> None:
        """Record the newly computed value for a component."""
        if component not in COMPONENTS:
            raise ValueError(f"Unknown version component: {component}")
        self._new_values[component] = value

    @property
    def new_values(self) -> dict[str, ComponentValue]:
        """Return a copy of the values set so far."""
        return dict(self._new_values)

    @property
    def new_version(self) -> StructuredVersion:
        """Return the current version with every recorded value applied."""
        version = self.current_version
        for component in COMPONENTS:
            if component in self._new_values:
                version = version.with_component(component, self._new_values[component])
        return version


class IncrementStrategy(Protocol):
    """Protocol implemented by increment strategies."""

    name: str
    description: str

    def increment(self, context: IncrementContext, component: VersionComponent) -> None:
        """Compute one component and record it through ``context.set_new_value``."""
