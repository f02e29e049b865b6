"""Per-module dependency collection.

Turns the host's resolved dependencies into a stable DependencyMap keyed by
the original declaration. Three version sources are reconciled in order:
live resolution, then lock-file pins (locks always win), then decisions
recorded in a manipulation model persisted by a previous run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Set

from common.errors import InvalidArgumentError, ModelLookupError, UnresolvedDependencyError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import Coordinate, DependencyMap, RelaxedCoordinate
from versioning.parser import parse_relaxed
from .configuration import AlignmentConfiguration
from .model import ManipulationModel
from .module import Module

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedDependency:
    """A resolved first-level dependency and the declaration it came from.

    ``declared`` is None when the host found no declaration, e.g. for entries
    that only exist in a lock file.
    """
    resolved: Coordinate
    declared: Optional[RelaxedCoordinate] = None


@dataclass
class ResolutionResult:
    """What the host build tool reports for one module."""
    resolved: List[ResolvedDependency] = field(default_factory=list)
    unresolved: Set[RelaxedCoordinate] = field(default_factory=set)
    strict_conflict_resolution: bool = False


class ResolutionPort(Protocol):
    """Narrow view of the host tool's dependency resolution."""

    def resolve(self, module: Module) -> ResolutionResult:
        ...


class DependencyCollector:
    """Builds the DependencyMap of each module of one build."""

    def __init__(
        self,
        port: ResolutionPort,
        configuration: AlignmentConfiguration,
        project_modules: Iterable[Module],
        prior_model: Optional[ManipulationModel] = None,
    ):
        """Initialize the collector.

        Args:
            port: Host resolution adapter.
            configuration: Run configuration (ignore flag, strict policy).
            project_modules: Every module of the build; dependencies on these are skipped.
            prior_model: Model persisted by a previous run, if any.
        """
        self._port = port
        self._configuration = configuration
        self._project_modules = list(project_modules)
        self._prior_model = prior_model

    def _is_project_module(self, group: str, artifact: str, version: str) -> bool:
        return any(m.matches(group, artifact, version) for m in self._project_modules)

    def collect(self, module: Module, lock_overrides: Iterable[Coordinate] = ()) -> DependencyMap:
        """Collect the dependencies of ``module``.

        Raises:
            UnresolvedDependencyError: If an external dependency could not be
                resolved and unresolvable dependencies are not ignored.
        """
        result = self._port.resolve(module)
        if result.strict_conflict_resolution:
            self._handle_strict_conflict_resolution(module)

        self._check_unresolved(module, result.unresolved)

        locks = self._lock_versions(module, lock_overrides)
        declared_by_ga: Dict[str, RelaxedCoordinate] = {}
        dependencies: DependencyMap = {}

        for dep in result.resolved:
            resolved = dep.resolved
            if self._is_project_module(resolved.group_id, resolved.artifact_id, resolved.version):
                logger.debug("Skipping internal project dependency %s of module %s", resolved, module.path)
                continue

            coordinate = resolved
            locked = locks.get(resolved.ga)
            if locked is not None and locked != resolved.version:
                logger.debug("Lock file pins %s to %s", resolved, locked)
                coordinate = resolved.with_version(locked)

            if dep.declared is None:
                key = declared_by_ga.get(
                    resolved.ga,
                    RelaxedCoordinate(resolved.group_id, resolved.artifact_id, resolved.version),
                )
            else:
                previous = declared_by_ga.get(resolved.ga)
                if previous is not None and previous != dep.declared:
                    logger.error(
                        "Found duplicate matching original dependencies [%s, %s] for %s",
                        previous, dep.declared, resolved,
                    )
                    key = previous
                else:
                    key = dep.declared
            declared_by_ga.setdefault(resolved.ga, key)

            if key not in dependencies:
                logger.info("For %s, with original key %s, adding dependency to scan %s", module.path, key, coordinate)
            dependencies[key] = coordinate

        if self._prior_model is not None:
            self._apply_prior_model(module, dependencies)

        if is_debug_enabled(logger):
            logger.debug(
                "Collected dependencies",
                extra=extra_context(
                    event="collect",
                    component="collector",
                    target=module.path,
                    count=len(dependencies),
                    locks=len(locks),
                )
            )
        return dependencies

    @staticmethod
    def _lock_versions(module: Module, lock_overrides: Iterable[Coordinate]) -> Dict[str, str]:
        """Map group:artifact to its pinned version; the lowest-sorting pin wins a conflict."""
        pinned: Dict[str, List[str]] = {}
        for pin in sorted(set(lock_overrides)):
            pinned.setdefault(pin.ga, []).append(pin.version)
        for ga, versions in pinned.items():
            if len(versions) > 1:
                logger.warning(
                    "Module %s locks %s to several versions %s; using %s",
                    module.path, ga, versions, versions[0],
                )
        return {ga: versions[0] for ga, versions in pinned.items()}

    def _handle_strict_conflict_resolution(self, module: Module) -> None:
        if self._configuration.strict_conflict_resolution == "fail":
            raise UnresolvedDependencyError(
                f"Module {module.path} uses strict conflict resolution; "
                "refusing to align a build whose version conflicts fail resolution"
            )
        logger.warning(
            "Detected use of strict conflict resolution in module %s; "
            "continuing with the versions reported by the build tool.",
            module.path,
        )

    def _check_unresolved(self, module: Module, unresolved: Iterable[RelaxedCoordinate]) -> None:
        # Modules of this build are expected to be unresolvable at this stage.
        external = sorted(
            (u for u in unresolved if not self._is_project_module(u.group_id, u.artifact_id, u.version)),
            key=str,
        )
        if not external:
            return
        names = ", ".join(str(u) for u in external)
        if self._configuration.ignore_unresolvable_dependencies:
            logger.warning("For module %s; ignoring all unresolvable dependencies: %s", module.path, names)
            return
        for u in external:
            logger.error("For module %s; unable to resolve %s", module.path, u)
        raise UnresolvedDependencyError(
            f"For module {module.path}, unable to resolve all project dependencies: [{names}]"
        )

    def _apply_prior_model(self, module: Module, dependencies: DependencyMap) -> None:
        """Pin entries to the aligned versions recorded by the previous run."""
        try:
            node = self._prior_model.find_corresponding_child(module.path)
        except ModelLookupError:
            logger.info("Module %s is not present in the existing manipulation model", module.path)
            return

        for key, aligned in node.aligned_dependencies.items():
            # Only full GAV keys; unversioned (BOM managed) entries are not pinned.
            if key.count(":") != 2:
                continue
            try:
                original = parse_relaxed(key)
            except InvalidArgumentError:
                continue
            current = dependencies.get(original)
            if current is not None and current.version != aligned.version:
                logger.info("Using existing model to update %s to %s", current, aligned)
                dependencies[original] = aligned
