"""Pluggable increment strategies."""

from .base import IncrementContext, IncrementStrategy, StrategyError, StrategyNotFoundError
from .builtin import register_builtin_strategies
from .registry import StrategyRegistry
from .runtime import build_strategy_registry, load_plugin_module
from .style import VersioningStyle

__all__ = [
    "IncrementContext",
    "IncrementStrategy",
    "StrategyError",
    "StrategyNotFoundError",
    "StrategyRegistry",
    "VersioningStyle",
    "build_strategy_registry",
    "load_plugin_module",
    "register_builtin_strategies",
]
