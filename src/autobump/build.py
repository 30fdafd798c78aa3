"""Build scope, action and lifecycle state shared across a build pass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final

from autobump.config import (
    BUILD_ACTION_BOTH,
    BUILD_ACTION_BUILD,
    BUILD_ACTION_REBUILD,
    UnitSettings,
)

SCOPE_SOLUTION: Final = "solution"
SCOPE_PROJECTS: Final = "projects"
BUILD_SCOPES: Final = (SCOPE_SOLUTION, SCOPE_PROJECTS)

ACTION_BUILD: Final = "build"
ACTION_REBUILD_ALL: Final = "rebuild_all"
ACTION_CLEAN: Final = "clean"
ACTION_DEPLOY: Final = "deploy"
BUILD_ACTIONS: Final = (ACTION_BUILD, ACTION_REBUILD_ALL, ACTION_CLEAN, ACTION_DEPLOY)
INCREMENTING_ACTIONS: Final = (ACTION_BUILD, ACTION_REBUILD_ALL)

STATE_IDLE: Final = "idle"
STATE_IN_PROGRESS: Final = "in_progress"
STATE_DONE: Final = "done"


@dataclass(slots=True, frozen=True)
class PassContext:
    """What the current build pass is doing and when the build started."""

    scope: str
    action: str
    state: str
    started_at: datetime

    @property
    def phase(self) -> str:
        return "pre" if self.state == STATE_IN_PROGRESS else "post"

    def allows(self, settings: UnitSettings) -> bool:
        """Return True when the unit's build kind and phase settings match this pass."""
        action_matches = (
            settings.build_action == BUILD_ACTION_BOTH
            or (settings.build_action == BUILD_ACTION_BUILD and self.action == ACTION_BUILD)
            or (settings.build_action == BUILD_ACTION_REBUILD and self.action == ACTION_REBUILD_ALL)
        )
        if not action_matches:
            return False
        return settings.increment_before_build == (self.state == STATE_IN_PROGRESS)

    def build_time(self, settings: UnitSettings) -> datetime:
        """Return the build start, converted to UTC when the unit asks for it."""
        if settings.universal_time:
            return self.started_at.astimezone(UTC)
        return self.started_at
