"""Built-in increment strategies."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from autobump.strategies.base import IncrementContext
from autobump.strategies.registry import StrategyRegistry
from autobump.versioning import VersionComponent

_EPOCH_2000 = date(2000, 1, 1)


class NoneStrategy:
    """Leaves the component unchanged."""

    name = "none"
    description = "Keeps the current value."

    def increment(self, context: IncrementContext, component: VersionComponent) -> None:
        _ = context
        _ = component


class IncrementByOneStrategy:
    """Adds one to numeric components; opaque tokens are left alone."""

    name = "increment"
    description = "Adds one to the current value."

    def increment(self, context: IncrementContext, component: VersionComponent) -> None:
        current = context.current_value(component)
        if isinstance(current, int):
            context.set_new_value(component, current + 1)


class ResetStrategy:
    """Sets numeric components back to zero."""

    name = "reset"
    description = "Resets the value to zero."

    def increment(self, context: IncrementContext, component: VersionComponent) -> None:
        if context.current_version.is_numeric(component):
            context.set_new_value(component, 0)


@dataclass(slots=True, frozen=True)
class StampStrategy:
    """Derives a component from the build timestamp and the start date."""

    name: str
    description: str
    compute: Callable[[IncrementContext], int]

    def increment(self, context: IncrementContext, component: VersionComponent) -> None:
        value = self.compute(context)
        if value < 0:
            raise ValueError(f"{self.name} produced a negative value ({value}).")
        if context.current_value(component) == value:
            return
        context.set_new_value(component, value)


def _build_date(context: IncrementContext) -> date:
    return context.build_start.date()


def _days_since_start(context: IncrementContext) -> int:
    return (_build_date(context) - context.start_date).days


def _months_since_start(context: IncrementContext) -> int:
    built = _build_date(context)
    start = context.start_date
    return (built.year - start.year) * 12 + (built.month - start.month)


def _seconds_since_midnight(context: IncrementContext) -> int:
    moment = context.build_start
    return (moment.hour * 3600 + moment.minute * 60 + moment.second) // 2


STAMP_STRATEGIES: tuple[StampStrategy, ...] = (
    StampStrategy("year_stamp", "Four digit build year.", lambda c: c.build_start.year),
    StampStrategy("short_year_stamp", "Two digit build year.", lambda c: c.build_start.year % 100),
    StampStrategy("month_stamp", "Build month.", lambda c: c.build_start.month),
    StampStrategy("day_stamp", "Build day of month.", lambda c: c.build_start.day),
    StampStrategy(
        "month_day_stamp",
        "Build month and day as MMdd.",
        lambda c: c.build_start.month * 100 + c.build_start.day,
    ),
    StampStrategy(
        "day_of_year", "Build day of the year.", lambda c: c.build_start.timetuple().tm_yday
    ),
    StampStrategy(
        "year_day_stamp",
        "Two digit year followed by the three digit day of the year.",
        lambda c: (c.build_start.year % 100) * 1000 + c.build_start.timetuple().tm_yday,
    ),
    StampStrategy(
        "time_stamp",
        "Build time as HHmm.",
        lambda c: c.build_start.hour * 100 + c.build_start.minute,
    ),
    StampStrategy("delta_base_days", "Days elapsed since the start date.", _days_since_start),
    StampStrategy(
        "delta_base_date",
        "Months since the start date times 100 plus the day of month.",
        lambda c: _months_since_start(c) * 100 + c.build_start.day,
    ),
    StampStrategy(
        "delta_base_year",
        "Years elapsed since the start date.",
        lambda c: c.build_start.year - c.start_date.year,
    ),
    StampStrategy(
        "seconds_since_midnight",
        "Seconds since midnight divided by two.",
        _seconds_since_midnight,
    ),
    StampStrategy(
        "days_since_2000",
        "Days elapsed since 2000-01-01.",
        lambda c: (_build_date(c) - _EPOCH_2000).days,
    ),
)


def register_builtin_strategies(registry: StrategyRegistry) -> None:
    """Register every built-in strategy in a stable order."""
    registry.register(NoneStrategy())
    registry.register(IncrementByOneStrategy())
    registry.register(ResetStrategy())
    for strategy in STAMP_STRATEGIES:
        registry.register(strategy)
