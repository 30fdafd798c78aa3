"""Command-line entrypoint for pre-/post-build version increments."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TextIO

from autobump.build import (
    ACTION_BUILD,
    BUILD_ACTIONS,
    BUILD_SCOPES,
    SCOPE_PROJECTS,
    SCOPE_SOLUTION,
)
from autobump.config import ConfigurationError, CliOverrides, load_effective_config
from autobump.lifecycle import BuildLifecycleController
from autobump.logging import (
    LOG_FORMATS,
    LOG_LEVELS,
    JsonlUpdateHistory,
    UpdateRecord,
    configure_logging,
    get_logger,
)
from autobump.strategies import build_strategy_registry
from autobump.workspace import ManifestHost

PHASE_PRE = "pre"
PHASE_POST = "post"
PHASE_BOTH = "both"
PHASES = (PHASE_PRE, PHASE_POST, PHASE_BOTH)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2

logger = get_logger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one build hook invocation."""
    parser = argparse.ArgumentParser(
        prog="autobump",
        description="Increment version attributes of changed projects around a build.",
    )
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--scope", choices=BUILD_SCOPES, required=False, default=None)
    parser.add_argument("--action", choices=BUILD_ACTIONS, required=False, default=ACTION_BUILD)
    parser.add_argument("--phase", choices=PHASES, required=False, default=PHASE_BOTH)
    parser.add_argument(
        "--project",
        action="append",
        dest="projects",
        default=[],
        help="Project to build; repeat for several. Implies --scope projects.",
    )
    parser.add_argument("--headless", choices=("true", "false"), required=False, default=None)
    parser.add_argument("--enabled", choices=("true", "false"), required=False, default=None)
    parser.add_argument("--history-file", required=False, default=None)
    parser.add_argument("--log-level", choices=LOG_LEVELS, required=False, default="info")
    parser.add_argument("--log-format", choices=LOG_FORMATS, required=False, default="console")
    parser.add_argument("--list-strategies", action="store_true")
    parser.add_argument("--show-config", action="store_true")
    parser.add_argument("--show-history", type=int, required=False, default=None, metavar="N")
    return parser


def run(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Parse arguments and run the requested build phases."""
    output = out_stream or sys.stdout
    args = build_arg_parser().parse_args(argv)
    configure_logging(level=args.log_level, log_format=args.log_format)

    root = Path(args.root).resolve()
    overrides = CliOverrides(
        enabled=_optional_flag(args.enabled),
        headless=_optional_flag(args.headless),
        history_file=Path(args.history_file).resolve() if args.history_file is not None else None,
    )
    projects = tuple(args.projects)
    try:
        config = load_effective_config(root, overrides)
        registry = build_strategy_registry(config.plugin_modules)
        if args.list_strategies:
            _write_json(output, registry.describe())
            return EXIT_OK
        if args.show_config:
            _write_json(output, config.to_public_dict())
            return EXIT_OK
        history = JsonlUpdateHistory(config.history_file)
        if args.show_history is not None:
            _write_json(output, history.read(limit=args.show_history))
            return EXIT_OK
        host = ManifestHost.load(root, projects)
    except ConfigurationError as error:
        logger.error("invalid configuration", error=str(error))
        return EXIT_CONFIG_ERROR

    scope = args.scope or (SCOPE_PROJECTS if projects else SCOPE_SOLUTION)
    controller = BuildLifecycleController(host, config, registry, history=history)
    records: list[UpdateRecord] = []
    if args.phase in (PHASE_PRE, PHASE_BOTH):
        records.extend(controller.on_build_begin(scope, args.action))
    if args.phase in (PHASE_POST, PHASE_BOTH):
        records.extend(controller.on_build_done(scope, args.action))
    failed = sum(1 for record in records if not record.ok)
    logger.debug("run finished", updated=len(records) - failed, failed=failed)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Console script entrypoint."""
    return run(argv)


def _optional_flag(value: str | None) -> bool | None:
    if value is None:
        return None
    return value == "true"


def _write_json(stream: TextIO, payload: object) -> None:
    stream.write(json.dumps(payload, indent=2, sort_keys=True))
    stream.write("\n")


if __name__ == "__main__":
    raise SystemExit(main())
