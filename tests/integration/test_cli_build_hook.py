from __future__ import annotations

import io
import json
import os
import time
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from autobump.cli import build_arg_parser, run


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def _write(path: Path, text: str = "", mtime: float = 1_600_000_000) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    os.utime(path, (mtime, mtime))


def _workspace(root: Path, extra: list[str] | None = None) -> None:
    _write(
        root / "autobump.toml",
        "\n".join(
            [
                "[global]",
                "auto_update_assembly_version = true",
                "",
                "[solution]",
                'name = "Acme"',
                "",
                "[[projects]]",
                'name = "App"',
                'path = "App/App.csproj"',
                'depends_on = ["Core"]',
                'output_dir = "bin"',
                'output_name = "App.exe"',
                "[projects.settings]",
                "use_global_settings = true",
                "",
                "[[projects]]",
                'name = "Core"',
                'path = "Core/Core.vbproj"',
                'output_dir = "bin"',
                'output_name = "Core.dll"',
                "[projects.settings]",
                "use_global_settings = true",
                *(extra or []),
            ]
        ),
    )
    _write(root / "App" / "App.csproj")
    _write(
        root / "App" / "Properties" / "AssemblyInfo.cs",
        '[assembly: AssemblyVersion("1.0.0.0")]\n',
    )
    _write(root / "Core" / "Core.vbproj")
    _write(
        root / "Core" / "My Project" / "AssemblyInfo.vb",
        '<Assembly: AssemblyVersion("3.2.1.0")>\n',
    )


def _run(root: Path, *args: str) -> tuple[int, str]:
    output = io.StringIO()
    code = run(["--root", str(root), "--log-level", "error", *args], out_stream=output)
    return code, output.getvalue()


def _versions(root: Path) -> tuple[str, str]:
    app = (root / "App" / "Properties" / "AssemblyInfo.cs").read_text(encoding="utf-8")
    core = (root / "Core" / "My Project" / "AssemblyInfo.vb").read_text(encoding="utf-8")
    return app.split('"')[1], core.split('"')[1]


def _mark_built(root: Path) -> None:
    future = time.time() + 3600
    _write(root / "App" / "bin" / "App.exe", "binary", mtime=future)
    _write(root / "Core" / "bin" / "Core.dll", "binary", mtime=future)


def test_parser_defaults() -> None:
    args = build_arg_parser().parse_args([])

    assert args.root == "."
    assert args.scope is None
    assert args.action == "build"
    assert args.phase == "both"
    assert args.projects == []


def test_solution_build_updates_changed_projects_and_records_history(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, _ = _run(tmp_path)

    assert code == 0
    assert _versions(tmp_path) == ("1.0.0.1", "3.2.1.1")
    code, output = _run(tmp_path, "--show-history", "10")
    assert code == 0
    assert sorted(entry["unit"] for entry in json.loads(output)) == ["App", "Core"]


def test_unchanged_workspace_is_left_alone_on_next_build(tmp_path: Path) -> None:
    _workspace(tmp_path)
    _run(tmp_path)
    _mark_built(tmp_path)

    code, _ = _run(tmp_path)

    assert code == 0
    assert _versions(tmp_path) == ("1.0.0.1", "3.2.1.1")


def test_project_scope_pulls_in_dependencies_once(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, _ = _run(tmp_path, "--project", "App", "--phase", "pre")

    assert code == 0
    assert _versions(tmp_path) == ("1.0.0.1", "3.2.1.1")
    history_path = tmp_path / ".autobump" / "history.jsonl"
    history = [json.loads(line) for line in history_path.read_text(encoding="utf-8").splitlines()]
    assert [entry["unit"] for entry in history] == ["App", "Core"]


def test_clean_action_changes_nothing(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, _ = _run(tmp_path, "--action", "clean")

    assert code == 0
    assert _versions(tmp_path) == ("1.0.0.0", "3.2.1.0")


def test_disabled_by_flag_changes_nothing(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, _ = _run(tmp_path, "--enabled", "false")

    assert code == 0
    assert _versions(tmp_path) == ("1.0.0.0", "3.2.1.0")


def test_list_strategies_outputs_builtins(tmp_path: Path) -> None:
    code, output = _run(tmp_path, "--list-strategies")

    assert code == 0
    names = [entry["name"] for entry in json.loads(output)]
    assert names[:3] == ["none", "increment", "reset"]
    assert "delta_base_days" in names


def test_show_config_reports_effective_values(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, output = _run(tmp_path, "--show-config", "--headless", "false")

    assert code == 0
    payload = json.loads(output)
    assert payload["headless"] is False
    assert payload["global"]["auto_update_assembly_version"] is True


def test_invalid_config_exits_with_error_code(tmp_path: Path) -> None:
    _workspace(tmp_path, extra=['build_action = "sometimes"'])

    code, _ = _run(tmp_path)

    assert code == 2


def test_unknown_project_exits_with_error_code(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, _ = _run(tmp_path, "--project", "Missing")

    assert code == 2
    assert _versions(tmp_path) == ("1.0.0.0", "3.2.1.0")
