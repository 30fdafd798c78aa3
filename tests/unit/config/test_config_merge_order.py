from __future__ import annotations

from datetime import date
from pathlib import Path

from autobump.config import (
    APPLY_GLOBAL_ALWAYS,
    BUILD_ACTION_REBUILD,
    CliOverrides,
    UnitSettings,
    default_config,
    load_effective_config,
)
from autobump.strategies import VersioningStyle


def test_defaults_apply_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config == default_config(tmp_path)
    assert config.enabled is True
    assert config.headless is True
    assert config.global_settings == UnitSettings()
    assert config.history_file == tmp_path.resolve() / ".autobump" / "history.jsonl"


def test_default_unit_settings() -> None:
    settings = UnitSettings()

    assert settings.detect_changes is True
    assert settings.increment_before_build is True
    assert settings.auto_update_assembly_version is False
    assert settings.auto_update_file_version is False
    assert settings.replace_non_numerics is True
    assert settings.configuration_name == "Any"
    assert str(settings.versioning_style) == "none.none.none.increment"
    assert settings.start_date == date(1975, 10, 21)


def test_config_file_overrides_defaults(tmp_path: Path) -> None:
    (tmp_path / "autobump.toml").write_text(
        "\n".join(
            [
                "[autobump]",
                "enabled = false",
                'apply_global_settings = "always"',
                'history_file = "logs/bumps.jsonl"',
                'plugin_modules = ["team_strategies"]',
                "",
                "[global]",
                'build_action = "rebuild"',
                "auto_update_file_version = true",
                'versioning_style = "none.none.increment.delta_base_days"',
                "start_date = 2026-01-01",
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(tmp_path)

    assert config.enabled is False
    assert config.apply_global_settings == APPLY_GLOBAL_ALWAYS
    assert config.history_file == tmp_path.resolve() / "logs" / "bumps.jsonl"
    assert config.plugin_modules == ("team_strategies",)
    assert config.global_settings.build_action == BUILD_ACTION_REBUILD
    assert config.global_settings.auto_update_file_version is True
    assert config.global_settings.versioning_style == VersioningStyle(
        build="increment", revision="delta_base_days"
    )
    assert config.global_settings.start_date == date(2026, 1, 1)


def test_versioning_style_table_fills_missing_components(tmp_path: Path) -> None:
    (tmp_path / "autobump.toml").write_text(
        "\n".join(
            [
                "[global.versioning_style]",
                'build = "day_of_year"',
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(tmp_path)

    assert str(config.global_settings.versioning_style) == "none.none.day_of_year.increment"


def test_cli_overrides_take_precedence(tmp_path: Path) -> None:
    (tmp_path / "autobump.toml").write_text(
        "\n".join(["[autobump]", "enabled = false", "headless = true"]),
        encoding="utf-8",
    )
    history = tmp_path / "elsewhere.jsonl"

    config = load_effective_config(
        tmp_path, CliOverrides(enabled=True, headless=False, history_file=history)
    )

    assert config.enabled is True
    assert config.headless is False
    assert config.history_file == history.resolve()


def test_public_dict_is_serializable_snapshot(tmp_path: Path) -> None:
    payload = default_config(tmp_path).to_public_dict()

    global_payload = payload["global"]
    assert payload["enabled"] is True
    assert isinstance(global_payload, dict)
    assert global_payload["versioning_style"] == "none.none.none.increment"
    assert global_payload["start_date"] == "1975-10-21"
