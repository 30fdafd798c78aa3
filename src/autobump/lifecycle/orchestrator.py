"""Per-unit update traversal with dependency handling and per-pass dedup."""

from __future__ import annotations

from autobump.build import PassContext
from autobump.config import ANY_CONFIGURATION, APPLY_GLOBAL_ALWAYS, AutobumpConfig
from autobump.detection import ModificationDetector, PassCaches
from autobump.logging import UpdateRecord, get_logger
from autobump.rewrite import ASSEMBLY_FILE_VERSION, ASSEMBLY_VERSION, VersionRewriter
from autobump.workspace.host import UnitTreeHost
from autobump.workspace.models import UNIT_FOLDER, BuildUnit

logger = get_logger(__name__)


class UpdateOrchestrator:
    """Drives the rewriter over build units for one pass."""

    def __init__(
        self,
        host: UnitTreeHost,
        config: AutobumpConfig,
        rewriter: VersionRewriter,
        detector: ModificationDetector,
        caches: PassCaches,
        build: PassContext,
    ) -> None:
        self._host = host
        self._config = config
        self._rewriter = rewriter
        self._detector = detector
        self._caches = caches
        self._build = build
        self._in_progress: set[str] = set()
        self.records: list[UpdateRecord] = []

    def update_unit(self, unit: BuildUnit) -> None:
        """Update a project, then its prerequisites, then mark it done.

        The unit's own attributes are rewritten before its prerequisites are
        visited; it only enters the dedup set once every prerequisite returned.
        """
        self._apply_global_settings(unit)
        if unit.unique_name in self._caches.updated:
            return
        if unit.unique_name in self._in_progress:
            logger.warning("dependency cycle detected, skipping", unit=unit.unique_name)
            return
        self._in_progress.add(unit.unique_name)
        try:
            if self._configuration_matches(unit):
                self._update_attributes(unit)
            try:
                dependencies = self._host.dependencies(unit)
            except Exception as error:
                logger.error(
                    "failed updating dependencies",
                    unit=unit.unique_name,
                    error=str(error),
                )
                dependencies = []
            for dependency in dependencies:
                try:
                    self.update_unit(dependency)
                except Exception as error:
                    logger.error(
                        "exception while updating project dependency",
                        dependency=dependency.unique_name,
                        unit=unit.unique_name,
                        error=str(error),
                    )
        finally:
            self._in_progress.discard(unit.unique_name)
        self._caches.updated[unit.unique_name] = unit

    def update_recursive(self, unit: BuildUnit) -> None:
        """Update a modified unit, then always descend into its children."""
        try:
            if self._detector.is_modified(unit) and unit.unique_name not in self._caches.updated:
                self._apply_global_settings(unit)
                if self._configuration_matches(unit):
                    self._update_attributes(unit)
                self._caches.updated[unit.unique_name] = unit
        except Exception as error:
            logger.error("error while updating unit", unit=unit.name, error=str(error))
        for child in unit.children:
            self.update_recursive(child)

    def _apply_global_settings(self, unit: BuildUnit) -> None:
        if (
            self._config.apply_global_settings == APPLY_GLOBAL_ALWAYS
            or unit.settings.use_global_settings
        ):
            unit.apply_global_settings(self._config.global_settings)

    def _configuration_matches(self, unit: BuildUnit) -> bool:
        if unit.kind == UNIT_FOLDER:
            return False
        wanted = unit.settings.configuration_name
        if wanted == ANY_CONFIGURATION:
            return True
        try:
            active = self._host.active_configuration(unit)
        except Exception as error:
            logger.warning(
                "couldn't get the active configuration name, skipping",
                unit=unit.unique_name,
                error=str(error),
            )
            return False
        return wanted == active

    def _update_attributes(self, unit: BuildUnit) -> None:
        if unit.settings.auto_update_assembly_version:
            self.records.extend(self._rewriter.update_version(unit, ASSEMBLY_VERSION, self._build))
        if unit.settings.auto_update_file_version:
            self.records.extend(
                self._rewriter.update_version(unit, ASSEMBLY_FILE_VERSION, self._build)
            )
