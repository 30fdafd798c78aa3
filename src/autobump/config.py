"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from pathlib import Path
from typing import Final

from autobump.strategies.style import VersioningStyle

CONFIG_FILENAME: Final = "autobump.toml"
DEFAULT_HISTORY_FILE: Final = ".autobump/history.jsonl"

BUILD_ACTION_BUILD: Final = "build"
BUILD_ACTION_REBUILD: Final = "rebuild"
BUILD_ACTION_BOTH: Final = "both"
BUILD_ACTION_TYPES: Final = (BUILD_ACTION_BUILD, BUILD_ACTION_REBUILD, BUILD_ACTION_BOTH)

APPLY_GLOBAL_AS_NEEDED: Final = "as_needed"
APPLY_GLOBAL_ALWAYS: Final = "always"
APPLY_GLOBAL_MODES: Final = (APPLY_GLOBAL_AS_NEEDED, APPLY_GLOBAL_ALWAYS)

ANY_CONFIGURATION: Final = "Any"
DEFAULT_START_DATE: Final = date(1975, 10, 21)


class ConfigurationError(ValueError):
    """Raised for invalid configuration values or unresolvable unit setup."""


@dataclass(slots=True, frozen=True)
class UnitSettings:
    """Per-unit increment settings."""

    detect_changes: bool = True
    build_action: str = BUILD_ACTION_BOTH
    increment_before_build: bool = True
    auto_update_assembly_version: bool = False
    auto_update_file_version: bool = False
    use_global_settings: bool = False
    replace_non_numerics: bool = True
    configuration_name: str = ANY_CONFIGURATION
    assembly_info_filename: str | None = None
    versioning_style: VersioningStyle = VersioningStyle()
    start_date: date = DEFAULT_START_DATE
    universal_time: bool = False

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable settings snapshot."""
        return {
            "detect_changes": self.detect_changes,
            "build_action": self.build_action,
            "increment_before_build": self.increment_before_build,
            "auto_update_assembly_version": self.auto_update_assembly_version,
            "auto_update_file_version": self.auto_update_file_version,
            "use_global_settings": self.use_global_settings,
            "replace_non_numerics": self.replace_non_numerics,
            "configuration_name": self.configuration_name,
            "assembly_info_filename": self.assembly_info_filename,
            "versioning_style": str(self.versioning_style),
            "start_date": self.start_date.isoformat(),
            "universal_time": self.universal_time,
        }


@dataclass(slots=True, frozen=True)
class AutobumpConfig:
    """Fully merged tool configuration."""

    root: Path
    enabled: bool
    headless: bool
    apply_global_settings: str
    history_file: Path
    plugin_modules: tuple[str, ...]
    global_settings: UnitSettings

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "root": str(self.root),
            "enabled": self.enabled,
            "headless": self.headless,
            "apply_global_settings": self.apply_global_settings,
            "history_file": str(self.history_file),
            "plugin_modules": list(self.plugin_modules),
            "global": self.global_settings.to_public_dict(),
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    enabled: bool | None = None
    headless: bool | None = None
    history_file: Path | None = None


_SETTINGS_FIELDS: Final = tuple(item.name for item in fields(UnitSettings))


def default_config(root: Path) -> AutobumpConfig:
    """Build default config for a workspace root."""
    resolved_root = root.resolve()
    return AutobumpConfig(
        root=resolved_root,
        enabled=True,
        headless=True,
        apply_global_settings=APPLY_GLOBAL_AS_NEEDED,
        history_file=resolved_root / DEFAULT_HISTORY_FILE,
        plugin_modules=(),
        global_settings=UnitSettings(),
    )


def load_config_file(root: Path) -> dict[str, object]:
    """Load optional autobump.toml from the workspace root."""
    config_path = root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as error:
            raise ConfigurationError(f"{CONFIG_FILENAME} is not valid TOML: {error}") from error
    return payload


def get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    """Return an optional sub-table, rejecting non-table values."""
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigurationError(f"Config section '{key}' must be a table.")
    return value


def get_table_list(payload: dict[str, object], key: str) -> list[dict[str, object]]:
    """Return an optional array of tables."""
    value = payload.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ConfigurationError(f"Config section '{key}' must be an array of tables.")
    return value


def merge_config(
    base: AutobumpConfig, payload: dict[str, object], overrides: CliOverrides
) -> AutobumpConfig:
    """Merge defaults, workspace config, then CLI/startup overrides."""
    tool_payload = get_table(payload, "autobump")
    global_payload = get_table(payload, "global")

    enabled = optional_bool(tool_payload.get("enabled"), "autobump.enabled", base.enabled)
    headless = optional_bool(tool_payload.get("headless"), "autobump.headless", base.headless)
    apply_global = optional_choice(
        tool_payload.get("apply_global_settings"),
        "autobump.apply_global_settings",
        base.apply_global_settings,
        APPLY_GLOBAL_MODES,
    )
    history_file = base.history_file
    raw_history = optional_str(tool_payload.get("history_file"), "autobump.history_file", None)
    if raw_history is not None:
        history_file = base.root / raw_history
    plugin_modules = base.plugin_modules
    if "plugin_modules" in tool_payload:
        plugin_modules = tuple_of_strings(
            tool_payload["plugin_modules"], "autobump", "plugin_modules"
        )

    merged = AutobumpConfig(
        root=base.root,
        enabled=enabled,
        headless=headless,
        apply_global_settings=apply_global,
        history_file=history_file,
        plugin_modules=plugin_modules,
        global_settings=parse_unit_settings(global_payload, "global", base.global_settings),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: AutobumpConfig, overrides: CliOverrides) -> AutobumpConfig:
    """Apply startup overrides at highest precedence."""
    return replace(
        config,
        enabled=overrides.enabled if overrides.enabled is not None else config.enabled,
        headless=overrides.headless if overrides.headless is not None else config.headless,
        history_file=(overrides.history_file or config.history_file).resolve(),
    )


def load_effective_config(root: Path, overrides: CliOverrides | None = None) -> AutobumpConfig:
    """Load effective config using merge order defaults -> autobump.toml -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def parse_unit_settings(
    payload: dict[str, object], section: str, base: UnitSettings
) -> UnitSettings:
    """Merge a settings table over ``base`` field by field."""
    unknown = sorted(set(payload) - set(_SETTINGS_FIELDS))
    if unknown:
        raise ConfigurationError(
            f"Config section '{section}' has unknown keys: {', '.join(unknown)}."
        )

    def name(key: str) -> str:
        return f"{section}.{key}"

    return UnitSettings(
        detect_changes=optional_bool(
            payload.get("detect_changes"), name("detect_changes"), base.detect_changes
        ),
        build_action=optional_choice(
            payload.get("build_action"), name("build_action"), base.build_action, BUILD_ACTION_TYPES
        ),
        increment_before_build=optional_bool(
            payload.get("increment_before_build"),
            name("increment_before_build"),
            base.increment_before_build,
        ),
        auto_update_assembly_version=optional_bool(
            payload.get("auto_update_assembly_version"),
            name("auto_update_assembly_version"),
            base.auto_update_assembly_version,
        ),
        auto_update_file_version=optional_bool(
            payload.get("auto_update_file_version"),
            name("auto_update_file_version"),
            base.auto_update_file_version,
        ),
        use_global_settings=optional_bool(
            payload.get("use_global_settings"),
            name("use_global_settings"),
            base.use_global_settings,
        ),
        replace_non_numerics=optional_bool(
            payload.get("replace_non_numerics"),
            name("replace_non_numerics"),
            base.replace_non_numerics,
        ),
        configuration_name=optional_str(
            payload.get("configuration_name"), name("configuration_name"), base.configuration_name
        )
        or ANY_CONFIGURATION,
        assembly_info_filename=optional_str(
            payload.get("assembly_info_filename"),
            name("assembly_info_filename"),
            base.assembly_info_filename,
        ),
        versioning_style=_versioning_style(
            payload.get("versioning_style"), name("versioning_style"), base.versioning_style
        ),
        start_date=_optional_date(payload.get("start_date"), name("start_date"), base.start_date),
        universal_time=optional_bool(
            payload.get("universal_time"), name("universal_time"), base.universal_time
        ),
    )


def optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f"Config field '{name}' must be a boolean.")
    return value


def optional_str(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigurationError(f"Config field '{name}' must be a string.")
    stripped = value.strip()
    return stripped or default


def optional_choice(value: object, name: str, default: str, choices: tuple[str, ...]) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value.strip().lower() not in choices:
        raise ConfigurationError(f"Config field '{name}' must be one of {', '.join(choices)}.")
    return value.strip().lower()


def tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigurationError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigurationError(
                f"Config field '{section}.{field}' must contain only strings."
            )
        output.append(item)
    return tuple(output)


def _optional_date(value: object, name: str, default: date) -> date:
    if value is None:
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as error:
            raise ConfigurationError(f"Config field '{name}' must be an ISO date.") from error
    raise ConfigurationError(f"Config field '{name}' must be an ISO date.")


def _versioning_style(value: object, name: str, default: VersioningStyle) -> VersioningStyle:
    if value is None:
        return default
    if isinstance(value, str):
        try:
            return VersioningStyle.from_string(value)
        except ValueError as error:
            raise ConfigurationError(f"Config field '{name}': {error}") from error
    if isinstance(value, dict):
        unknown = sorted(set(value) - {"major", "minor", "build", "revision"})
        if unknown:
            raise ConfigurationError(
                f"Config field '{name}' has unknown components: {', '.join(unknown)}."
            )
        parts: dict[str, str] = {}
        for component in ("major", "minor", "build", "revision"):
            parts[component] = (
                optional_str(value.get(component), f"{name}.{component}", None)
                or default.strategy_for(component)
            )
        return VersioningStyle(**parts)
    raise ConfigurationError(f"Config field '{name}' must be a string or a table.")
