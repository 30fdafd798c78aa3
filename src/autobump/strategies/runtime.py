"""Runtime strategy registry construction and plugin loading."""

from __future__ import annotations

import importlib
from collections.abc import Iterable
from importlib.metadata import entry_points

from autobump.logging import get_logger
from autobump.strategies.builtin import register_builtin_strategies
from autobump.strategies.registry import StrategyRegistry

ENTRY_POINT_GROUP = "autobump.strategies"

logger = get_logger(__name__)


def build_strategy_registry(
    plugin_modules: Iterable[str] = (),
    *,
    load_entry_points: bool = True,
) -> StrategyRegistry:
    """Build a registry with built-ins first, then configured plugins."""
    registry = StrategyRegistry()
    register_builtin_strategies(registry)
    for module_name in plugin_modules:
        load_plugin_module(registry, module_name)
    if load_entry_points:
        _load_entry_point_plugins(registry)
    return registry


def load_plugin_module(registry: StrategyRegistry, module_name: str) -> bool:
    """Import ``module_name`` and call its ``register_strategies(registry)``."""
    logger.debug("loading strategy plugin", module=module_name)
    try:
        module = importlib.import_module(module_name)
        register = getattr(module, "register_strategies", None)
        if not callable(register):
            logger.error(
                "strategy plugin has no register_strategies()",
                module=module_name,
            )
            return False
        register(registry)
    except Exception as error:
        logger.error("failed to load strategy plugin", module=module_name, error=str(error))
        return False
    return True


def _load_entry_point_plugins(registry: StrategyRegistry) -> None:
    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        logger.debug("loading strategy entry point", entry_point=entry_point.name)
        try:
            loaded = entry_point.load()
            if isinstance(loaded, type):
                registry.register(loaded())
            elif hasattr(loaded, "increment"):
                registry.register(loaded)
            else:
                loaded(registry)
        except Exception as error:
            logger.error(
                "failed to load strategy entry point",
                entry_point=entry_point.name,
                error=str(error),
            )
