"""Named strategy registry."""

from __future__ import annotations

from dataclasses import dataclass, field

from autobump.strategies.base import IncrementStrategy, StrategyNotFoundError


@dataclass(slots=True)
class StrategyRegistry:
    """In-memory strategy registry preserving registration order."""

    _strategies: dict[str, IncrementStrategy] = field(default_factory=dict)

    def register(self, strategy: IncrementStrategy, *, name: str | None = None) -> None:
        """Register a strategy under its own name or an explicit alias."""
        key = _normalize(name if name is not None else strategy.name)
        if not key:
            raise ValueError("Strategy name must be non-empty.")
        self._strategies[key] = strategy

    def resolve(self, name: str) -> IncrementStrategy:
        """Return the strategy registered under ``name``."""
        strategy = self._strategies.get(_normalize(name))
        if strategy is None:
            raise StrategyNotFoundError(name)
        return strategy

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize(name) in self._strategies

    def names(self) -> tuple[str, ...]:
        """Return registered strategy names in registration order."""
        return tuple(self._strategies.keys())

    def describe(self) -> list[dict[str, str]]:
        """Return name/description pairs for listing."""
        return [
            {"name": key, "description": strategy.description}
            for key, strategy in self._strategies.items()
        ]


def _normalize(name: str) -> str:
    return name.strip().lower()
