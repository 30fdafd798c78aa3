"""Build lifecycle state machine."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from autobump.build import (
    BUILD_ACTIONS,
    BUILD_SCOPES,
    INCREMENTING_ACTIONS,
    SCOPE_SOLUTION,
    STATE_DONE,
    STATE_IDLE,
    STATE_IN_PROGRESS,
    PassContext,
)
from autobump.config import AutobumpConfig
from autobump.detection import ModificationDetector, PassCaches
from autobump.lifecycle.orchestrator import UpdateOrchestrator
from autobump.logging import JsonlUpdateHistory, UpdateRecord, get_logger
from autobump.rewrite import ArtifactEditor, VersionRewriter, select_editor
from autobump.strategies import StrategyRegistry
from autobump.workspace.host import UnitTreeHost

logger = get_logger(__name__)


class BuildLifecycleController:
    """Reacts to build-begin/build-done signals: idle -> in_progress -> done -> idle.

    Owns the per-session caches. The dedup set is cleared after every pass;
    the verdict and file-date caches only once the build is done.
    """

    def __init__(
        self,
        host: UnitTreeHost,
        config: AutobumpConfig,
        registry: StrategyRegistry,
        *,
        editor: ArtifactEditor | None = None,
        history: JsonlUpdateHistory | None = None,
        clock: Callable[[], datetime] = datetime.now,
        caches: PassCaches | None = None,
    ) -> None:
        self._host = host
        self._config = config
        self._registry = registry
        self._editor = editor
        self._history = history
        self._clock = clock
        self._caches = caches or PassCaches()
        self._state = STATE_IDLE
        self._scope = SCOPE_SOLUTION
        self._action = ""
        self._started_at = datetime.min

    @property
    def state(self) -> str:
        return self._state

    @property
    def caches(self) -> PassCaches:
        return self._caches

    def on_build_begin(self, scope: str, action: str) -> list[UpdateRecord]:
        """Record the build and run the pre-build pass."""
        _validate(scope, action)
        logger.debug("build begin", scope=scope, action=action)
        self._state = STATE_IN_PROGRESS
        self._scope = scope
        self._action = action
        self._started_at = self._clock()
        try:
            return self._execute_pass()
        finally:
            self._caches.clear_updated()

    def on_build_done(self, scope: str, action: str) -> list[UpdateRecord]:
        """Run the post-build pass and drop every session cache."""
        _validate(scope, action)
        logger.debug("build done", scope=scope, action=action)
        self._state = STATE_DONE
        self._scope = scope
        self._action = action
        if self._started_at == datetime.min:
            self._started_at = self._clock()
        try:
            return self._execute_pass()
        finally:
            self._caches.clear_updated()
            self._caches.clear_detection()
            self._state = STATE_IDLE
            self._started_at = datetime.min

    def _execute_pass(self) -> list[UpdateRecord]:
        if not self._config.enabled:
            logger.info("autobump disabled")
            return []
        if self._action not in INCREMENTING_ACTIONS:
            return []
        build = PassContext(
            scope=self._scope,
            action=self._action,
            state=self._state,
            started_at=self._started_at,
        )
        try:
            editor = self._editor or select_editor(self._config.headless, self._host)
            rewriter = VersionRewriter(self._host, self._registry, editor, self._history)
            detector = ModificationDetector(self._host, self._caches)
            orchestrator = UpdateOrchestrator(
                host=self._host,
                config=self._config,
                rewriter=rewriter,
                detector=detector,
                caches=self._caches,
                build=build,
            )
            if self._scope == SCOPE_SOLUTION:
                orchestrator.update_recursive(self._host.solution())
            else:
                for unit in self._host.active_projects():
                    try:
                        if detector.is_modified(unit):
                            orchestrator.update_unit(unit)
                    except Exception as error:
                        logger.error(
                            "error while updating project",
                            unit=unit.unique_name,
                            error=str(error),
                        )
        except Exception as error:
            logger.error("error occurred while executing build version increment", error=str(error))
            return []
        logger.info(
            f"{build.phase.capitalize()}-build process: completed",
            updated=len(orchestrator.records),
        )
        return orchestrator.records


def _validate(scope: str, action: str) -> None:
    if scope not in BUILD_SCOPES:
        raise ValueError(f"Build scope must be one of {', '.join(BUILD_SCOPES)}.")
    if action not in BUILD_ACTIONS:
        raise ValueError(f"Build action must be one of {', '.join(BUILD_ACTIONS)}.")
