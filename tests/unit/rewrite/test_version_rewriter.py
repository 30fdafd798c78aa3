from __future__ import annotations

import json
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

from structlog.testing import capture_logs

from autobump.build import PassContext
from autobump.logging import JsonlUpdateHistory
from autobump.rewrite import (
    ASSEMBLY_FILE_VERSION,
    ASSEMBLY_VERSION,
    ArtifactEdit,
    FileArtifactEditor,
    VersionRewriter,
    compose_version_text,
)
from autobump.strategies import (
    IncrementContext,
    StrategyRegistry,
    VersioningStyle,
    register_builtin_strategies,
)
from autobump.versioning import VersionComponent, parse_version
from autobump.workspace import BuildUnit, ManifestHost

BUILD_START = datetime(2026, 1, 11, 12, 0)


class _FiveStrategy:
    name = "five"
    description = "Always writes 5."

    def increment(self, context: IncrementContext, component: VersionComponent) -> None:
        context.set_new_value(component, 5)


class _RejectingEditor:
    def apply(self, path: Path, edit: ArtifactEdit) -> bool:
        return False


def _registry() -> StrategyRegistry:
    registry = StrategyRegistry()
    register_builtin_strategies(registry)
    registry.register(_FiveStrategy())
    return registry


def _pass(action: str = "build", state: str = "in_progress") -> PassContext:
    return PassContext(scope="solution", action=action, state=state, started_at=BUILD_START)


def _project(
    root: Path, artifact: str, text: str, project_file: str = "Core.csproj"
) -> tuple[ManifestHost, BuildUnit]:
    (root / "Core").mkdir(parents=True, exist_ok=True)
    (root / "Core" / project_file).write_text("", encoding="utf-8")
    (root / "Core" / artifact).write_text(text, encoding="utf-8")
    (root / "autobump.toml").write_text(
        "\n".join(["[[projects]]", 'name = "Core"', f'path = "Core/{project_file}"']),
        encoding="utf-8",
    )
    host = ManifestHost.load(root)
    return host, host.solution().children[0]


def _settings(unit: BuildUnit, style: str, **changes: object) -> None:
    unit.settings = replace(
        unit.settings,
        versioning_style=VersioningStyle.from_string(style),
        start_date=date(2026, 1, 1),
        **changes,
    )


def test_file_version_revision_follows_days_since_start(tmp_path: Path) -> None:
    host, unit = _project(
        tmp_path,
        "AssemblyInfo.cs",
        "\n".join(
            [
                "using System.Reflection;",
                '[assembly: AssemblyVersion("2.3.0.0")]',
                '[assembly: AssemblyFileVersion("2.3.4.5")]',
                "",
            ]
        ),
    )
    _settings(unit, "none.none.none.delta_base_days")
    history = JsonlUpdateHistory(tmp_path / ".autobump" / "history.jsonl")
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor(), history)

    with capture_logs() as logs:
        records = rewriter.update_version(unit, ASSEMBLY_FILE_VERSION, _pass())

    text = (tmp_path / "Core" / "AssemblyInfo.cs").read_text(encoding="utf-8")
    assert '[assembly: AssemblyFileVersion("2.3.4.10")]' in text
    assert '[assembly: AssemblyVersion("2.3.0.0")]' in text
    assert [(record.old_version, record.new_version, record.ok) for record in records] == [
        ("2.3.4.5", "2.3.4.10", True)
    ]
    [summary] = [entry for entry in logs if entry.get("status")]
    assert summary["log_level"] == "info"
    assert summary["event"] == "Core AssemblyFileVersion: 2.3.4.10 [SUCCESS]"
    [entry] = history.read()
    assert entry["new_version"] == "2.3.4.10"
    assert entry["unit"] == "Core"


def test_non_numeric_components_are_preserved(tmp_path: Path) -> None:
    host, unit = _project(
        tmp_path, "AssemblyInfo.cs", '[assembly: AssemblyVersion("1.0.RC1.0")]\n'
    )
    _settings(unit, "none.none.five.five", replace_non_numerics=False)
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor())

    [record] = rewriter.update_version(unit, ASSEMBLY_VERSION, _pass())

    assert record.new_version == "1.0.RC1.5"
    text = (tmp_path / "Core" / "AssemblyInfo.cs").read_text(encoding="utf-8")
    assert text == '[assembly: AssemblyVersion("1.0.RC1.5")]\n'


def test_non_numeric_components_are_replaced_when_enabled(tmp_path: Path) -> None:
    host, unit = _project(
        tmp_path, "AssemblyInfo.cs", '[assembly: AssemblyVersion("1.0.RC1.0")]\n'
    )
    _settings(unit, "none.none.none.five")
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor())

    [record] = rewriter.update_version(unit, ASSEMBLY_VERSION, _pass())

    assert record.new_version == "1.0.1.5"


def test_unchanged_version_writes_nothing(tmp_path: Path) -> None:
    original = '[assembly: AssemblyVersion("1.2.3.4")]\n'
    host, unit = _project(tmp_path, "AssemblyInfo.cs", original)
    _settings(unit, "none.none.none.none")
    history = JsonlUpdateHistory(tmp_path / "history.jsonl")
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor(), history)

    assert rewriter.update_version(unit, ASSEMBLY_VERSION, _pass()) == []
    assert (tmp_path / "Core" / "AssemblyInfo.cs").read_text(encoding="utf-8") == original
    assert not history.path.exists()


def test_resource_script_updates_both_forms(tmp_path: Path) -> None:
    host, unit = _project(
        tmp_path,
        "Core.rc",
        "\n".join(
            [
                "VS_VERSION_INFO VERSIONINFO",
                " FILEVERSION 1,0,0,1",
                "BEGIN",
                '            VALUE "FileVersion", "1, 0, 0, 1"',
                "END",
                "",
            ]
        ),
        project_file="Core.vcxproj",
    )
    _settings(unit, "none.none.none.increment")
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor())

    records = rewriter.update_version(unit, ASSEMBLY_FILE_VERSION, _pass())

    assert [(record.attribute, record.new_version) for record in records] == [
        ("FileVersion", "1, 0, 0, 2"),
        ("FILEVERSION", "1,0,0,2"),
    ]
    text = (tmp_path / "Core" / "Core.rc").read_text(encoding="utf-8")
    assert " FILEVERSION 1,0,0,2\n" in text
    assert 'VALUE "FileVersion", "1, 0, 0, 2"' in text


def test_pass_that_does_not_match_build_kind_is_skipped(tmp_path: Path) -> None:
    original = '[assembly: AssemblyVersion("1.2.3.4")]\n'
    host, unit = _project(tmp_path, "AssemblyInfo.cs", original)
    _settings(unit, "none.none.none.increment", build_action="build")
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor())

    assert rewriter.update_version(unit, ASSEMBLY_VERSION, _pass(action="rebuild_all")) == []
    assert rewriter.update_version(unit, ASSEMBLY_VERSION, _pass(state="done")) == []
    assert (tmp_path / "Core" / "AssemblyInfo.cs").read_text(encoding="utf-8") == original


def test_missing_attribute_is_logged_not_raised(tmp_path: Path) -> None:
    host, unit = _project(tmp_path, "AssemblyInfo.cs", "using System;\n")
    _settings(unit, "none.none.none.increment")
    rewriter = VersionRewriter(host, _registry(), FileArtifactEditor())

    with capture_logs() as logs:
        records = rewriter.update_version(unit, ASSEMBLY_VERSION, _pass())

    assert records == []
    [error] = [entry for entry in logs if entry["log_level"] == "error"]
    assert "Failed to locate attribute" in error["error"]


def test_rejected_write_is_reported_as_failed(tmp_path: Path) -> None:
    host, unit = _project(
        tmp_path, "AssemblyInfo.cs", '[assembly: AssemblyVersion("1.2.3.4")]\n'
    )
    _settings(unit, "none.none.none.increment")
    history = JsonlUpdateHistory(tmp_path / "history.jsonl")
    rewriter = VersionRewriter(host, _registry(), _RejectingEditor(), history)

    with capture_logs() as logs:
        [record] = rewriter.update_version(unit, ASSEMBLY_VERSION, _pass())

    assert record.ok is False
    assert record.status == "FAILED"
    [summary] = [entry for entry in logs if entry.get("status")]
    assert summary["log_level"] == "error"
    assert summary["event"].endswith("[FAILED]")
    assert json.loads(history.path.read_text(encoding="utf-8"))["ok"] is False


def test_compose_keeps_original_token_count_when_splicing() -> None:
    new_version = parse_version("1.0.*").with_component("revision", 3)

    assert compose_version_text("1.0.*", ".", new_version, replace_non_numerics=False) == "1.0.*"
    assert compose_version_text("1.0.*", ".", new_version, replace_non_numerics=True) == "1.0.0.3"


def test_compose_uses_original_separator() -> None:
    new_version = parse_version("3.1.0.7")

    assert compose_version_text("3, 1, 0, 0", ", ", new_version, True) == "3, 1, 0, 7"
