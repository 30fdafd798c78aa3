"""Versioning styles: one strategy per version component."""

from __future__ import annotations

from dataclasses import dataclass

from autobump.logging import get_logger
from autobump.strategies.base import IncrementContext, StrategyError, StrategyNotFoundError
from autobump.strategies.registry import StrategyRegistry
from autobump.versioning import COMPONENTS, StructuredVersion, VersionComponent

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class VersioningStyle:
    """Strategy names applied to major, minor, build and revision."""

    major: str = "none"
    minor: str = "none"
    build: str = "none"
    revision: str = "increment"

    @classmethod
    def from_string(cls, value: str) -> VersioningStyle:
        """Parse ``"major.minor.build.revision"`` strategy names."""
        parts = [part.strip() for part in value.split(".")]
        if len(parts) != 4 or not all(parts):
            raise ValueError(
                "Versioning style must name four strategies joined by dots, "
                "e.g. 'none.none.increment.none'."
            )
        return cls(major=parts[0], minor=parts[1], build=parts[2], revision=parts[3])

    def strategy_for(self, component: VersionComponent) -> str:
        """Return the strategy name configured for a component."""
        return getattr(self, component)

    def __str__(self) -> str:
        return ".".join(self.strategy_for(component) for component in COMPONENTS)

    def increment(self, registry: StrategyRegistry, context: IncrementContext) -> StructuredVersion:
        """Run the configured strategy for each component in order.

        Stops as soon as a strategy clears ``context.continue_processing``.
        Unknown strategy names raise StrategyNotFoundError; any other strategy
        failure is wrapped in StrategyError.
        """
        for component in COMPONENTS:
            if not context.continue_processing:
                logger.debug("strategy chain halted", before=component)
                break
            name = self.strategy_for(component)
            strategy = registry.resolve(name)
            try:
                strategy.increment(context, component)
            except (StrategyNotFoundError, StrategyError):
                raise
            except Exception as error:
                raise StrategyError(strategy=name, component=component, cause=error) from error
        return context.new_version
