from __future__ import annotations

from datetime import date, datetime

import pytest

from autobump.strategies import IncrementContext, StrategyRegistry, register_builtin_strategies
from autobump.versioning import BUILD, MAJOR, REVISION, parse_version


def _registry() -> StrategyRegistry:
    registry = StrategyRegistry()
    register_builtin_strategies(registry)
    return registry


def _context(
    version: str = "1.0.0.0",
    build_start: datetime = datetime(2026, 3, 14, 9, 26, 53),
    start_date: date = date(2026, 1, 1),
) -> IncrementContext:
    return IncrementContext(
        unit=None,
        current_version=parse_version(version),
        build_start=build_start,
        start_date=start_date,
    )


def _apply(name: str, component: str = REVISION, **kwargs: object) -> object:
    context = _context(**kwargs)  # type: ignore[arg-type]
    _registry().resolve(name).increment(context, component)  # type: ignore[arg-type]
    return context.new_version.get(component)  # type: ignore[arg-type]


def test_builtin_names_are_registered_in_stable_order() -> None:
    names = _registry().names()

    assert names[:3] == ("none", "increment", "reset")
    assert "delta_base_days" in names
    assert "days_since_2000" in names


def test_none_keeps_current_value() -> None:
    assert _apply("none", version="1.2.3.4") == 4


def test_increment_adds_one_and_skips_opaque_tokens() -> None:
    assert _apply("increment", version="1.2.3.4") == 5
    assert _apply("increment", component=BUILD, version="1.0.RC1.0") == "RC1"


def test_reset_sets_zero() -> None:
    assert _apply("reset", component=MAJOR, version="7.2.3.4") == 0


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("year_stamp", 2026),
        ("short_year_stamp", 26),
        ("month_stamp", 3),
        ("day_stamp", 14),
        ("month_day_stamp", 314),
        ("day_of_year", 73),
        ("year_day_stamp", 26073),
        ("time_stamp", 926),
        ("delta_base_days", 72),
        ("delta_base_date", 214),
        ("delta_base_year", 0),
        ("seconds_since_midnight", (9 * 3600 + 26 * 60 + 53) // 2),
        ("days_since_2000", (date(2026, 3, 14) - date(2000, 1, 1)).days),
    ],
)
def test_stamp_strategies_derive_from_build_start(name: str, expected: int) -> None:
    assert _apply(name) == expected


def test_delta_base_days_counts_days_since_start_date() -> None:
    value = _apply(
        "delta_base_days",
        version="2.3.4.5",
        build_start=datetime(2026, 1, 11, 12, 0),
        start_date=date(2026, 1, 1),
    )

    assert value == 10


def test_stamp_before_start_date_raises() -> None:
    context = _context(build_start=datetime(2025, 12, 31), start_date=date(2026, 1, 1))

    with pytest.raises(ValueError, match="negative"):
        _registry().resolve("delta_base_days").increment(context, REVISION)


def test_stamp_equal_to_current_value_records_nothing() -> None:
    context = _context(version="1.0.0.2026")

    _registry().resolve("year_stamp").increment(context, REVISION)

    assert context.new_values == {}
