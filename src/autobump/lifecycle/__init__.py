"""Build lifecycle control and update orchestration."""

from .controller import BuildLifecycleController
from .orchestrator import UpdateOrchestrator

__all__ = ["BuildLifecycleController", "UpdateOrchestrator"]
