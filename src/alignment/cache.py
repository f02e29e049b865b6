"""Build-scoped cache shared by every module of one build invocation.

Aggregates per-module dependency maps, the coordinates to query and the
repositories seen, and detects the moment the last module has reported.
All mutations share one lock so exactly one ``remove_project`` call can
observe the pending set becoming empty.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Set

from versioning.models import Coordinate, DependencyMap
from .model import ManipulationModel
from .module import Module

logger = logging.getLogger(__name__)


class BuildCache:
    """Process state for a single build, keyed by the build's root identity."""

    def __init__(
        self,
        root: Module,
        module_paths: Iterable[str],
        model: Optional[ManipulationModel] = None,
    ):
        """Initialize the cache.

        Args:
            root: The build's root module.
            module_paths: Identities (paths) of every module expected to report.
            model: Skeleton manipulation model mirroring the module hierarchy.
        """
        self.root = root
        self.model = model if model is not None else ManipulationModel(root.name, root.group, root.version)
        self._lock = threading.Lock()
        self._dependencies: Dict[Module, DependencyMap] = {}
        self._pending: Set[str] = set(module_paths)
        self._expected = len(self._pending)
        self._gavs: Set[Coordinate] = set()
        self._repositories: List[str] = []
        self._completed = False

    def __str__(self) -> str:
        return (
            f"BuildCache(root={self.root.path}, modules={len(self._dependencies)}/{self._expected}, "
            f"gavs={len(self._gavs)}, repositories={len(self._repositories)})"
        )

    def add_dependencies(self, module: Module, dependencies: DependencyMap) -> None:
        """Merge ``dependencies`` into the table for ``module``."""
        with self._lock:
            self._dependencies.setdefault(module, {}).update(dependencies)

    def add_repository(self, repository: str) -> None:
        """Record a repository; adding the same one twice is a no-op."""
        with self._lock:
            if repository not in self._repositories:
                self._repositories.append(repository)

    def add_gav(self, coordinate: Coordinate) -> None:
        """Record a project coordinate to send to the alignment service."""
        with self._lock:
            self._gavs.add(coordinate)

    def remove_project(self, module_path: str) -> bool:
        """Mark ``module_path`` as reported.

        Returns:
            True only for the call that empties the pending set.
        """
        with self._lock:
            if module_path not in self._pending:
                logger.debug("Module %s is not pending in %s", module_path, self)
                return False
            self._pending.discard(module_path)
            if self._pending or self._completed:
                return False
            self._completed = True
            return True

    @property
    def completed(self) -> bool:
        """True once every module has reported."""
        with self._lock:
            return self._completed

    @property
    def pending(self) -> Set[str]:
        with self._lock:
            return set(self._pending)

    @property
    def dependencies(self) -> Dict[Module, DependencyMap]:
        """Copy of the per-module tables; complete only after the last report."""
        with self._lock:
            return {module: dict(deps) for module, deps in self._dependencies.items()}

    @property
    def gavs(self) -> Set[Coordinate]:
        with self._lock:
            return set(self._gavs)

    @property
    def repositories(self) -> List[str]:
        with self._lock:
            return list(self._repositories)

    def all_dependencies(self) -> Set[Coordinate]:
        """Distinct resolved coordinates across every module."""
        with self._lock:
            return {coord for deps in self._dependencies.values() for coord in deps.values()}


class BuildCacheRegistry:
    """Hands out one BuildCache per build identity and forgets it at build end."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._caches: Dict[str, BuildCache] = {}

    def get_or_create(self, build_id: str, factory: Callable[[], BuildCache]) -> BuildCache:
        """Return the cache for ``build_id``, creating it with ``factory`` on first use."""
        with self._lock:
            cache = self._caches.get(build_id)
            if cache is None:
                cache = factory()
                self._caches[build_id] = cache
                logger.debug("Created %s for build %s", cache, build_id)
            return cache

    def discard(self, build_id: str) -> None:
        """Drop the cache for ``build_id`` so nothing leaks into the next build."""
        with self._lock:
            self._caches.pop(build_id, None)

    def __contains__(self, build_id: str) -> bool:
        with self._lock:
            return build_id in self._caches
