"""Per-module alignment task and the build-wide run that drives it.

Every module runs ``AlignmentTask.perform``. The module whose report empties
the build cache's pending set queries the alignment service once for the
whole build, assembles the manipulation model and writes it.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional, Set, Union

from constants import Constants
from common.errors import AlignmentError
from versioning.models import Coordinate
from .assembler import ModelAssembler
from .cache import BuildCache, BuildCacheRegistry
from .collector import DependencyCollector, ResolutionPort
from .configuration import AlignmentConfiguration
from .io import manipulation_file_path, read_manipulation_model
from .lockfile_parser import read_locks
from .model import ManipulationModel
from .module import Module
from .service import AlignmentService, Request
from .translator import AlignmentServiceClient

logger = logging.getLogger(__name__)

LockReader = Callable[[Union[str, Path]], Set[Coordinate]]


class AlignmentTask:
    """Collects one module's dependencies and, for the last module, aligns the build."""

    NAME = "generateAlignmentMetadata"

    def __init__(
        self,
        cache: BuildCache,
        collector: DependencyCollector,
        service: AlignmentService,
        assembler: ModelAssembler,
        root_dir: Union[str, Path],
        lock_reader: LockReader = read_locks,
    ):
        self._cache = cache
        self._collector = collector
        self._service = service
        self._assembler = assembler
        self._root_dir = Path(root_dir)
        self._lock_reader = lock_reader

    def perform(self, module: Module, repositories: Iterable[str] = ()) -> Optional[ManipulationModel]:
        """Report ``module`` to the build cache.

        Returns:
            The completed model when this call finished the build, else None.
        """
        logger.info(
            "Starting model task for project %s with GAV %s:%s:%s",
            module.path, module.group, module.name, module.version,
        )
        locks = self._lock_reader(module.project_dir) if module.project_dir else set()
        dependencies = self._collector.collect(module, locks)

        self._cache.add_dependencies(module, dependencies)
        for repository in repositories:
            self._cache.add_repository(repository)

        if module.is_fully_defined:
            logger.debug("Adding %s to cache for scanning.", module.coordinate())
            self._cache.add_gav(module.coordinate())
        else:
            logger.warning(
                "Project '%s:%s:%s' is not fully defined ; skipping.",
                module.group, module.name, module.version,
            )

        # The call that empties the pending set is the last module of the build.
        if not self._cache.remove_project(module.path):
            return None
        return self._align()

    def _align(self) -> ManipulationModel:
        logger.info("Completed scanning projects; now processing for REST...")
        root = self._cache.root
        request = Request(
            root=root.coordinate() if root.is_fully_defined else None,
            project_gavs=sorted(self._cache.gavs),
            dependencies=sorted(self._cache.all_dependencies()),
        )
        response = self._service.align(request)
        model = self._cache.model
        self._assembler.assemble_and_write(self._root_dir, model, self._cache.dependencies, response)
        logger.info("Completed processing for alignment and writing %s", self._cache)
        return model


def run_alignment(
    root: Module,
    modules: List[Module],
    skeleton: ManipulationModel,
    port: ResolutionPort,
    configuration: AlignmentConfiguration,
    root_dir: Union[str, Path],
    repositories: Optional[Mapping[str, Iterable[str]]] = None,
    workers: int = Constants.DEFAULT_WORKERS,
    registry: Optional[BuildCacheRegistry] = None,
    client: Optional[AlignmentServiceClient] = None,
    lock_reader: LockReader = read_locks,
) -> ManipulationModel:
    """Align a whole build, reporting its modules concurrently.

    ``repositories`` maps a module path to the repositories that module uses.

    Raises:
        AlignmentError: Any failure of any module; the build fails as a whole.
    """
    registry = registry if registry is not None else BuildCacheRegistry()
    build_id = str(Path(root_dir).resolve())
    # Validates the protocol before any module is processed.
    client = client if client is not None else AlignmentServiceClient(
        configuration.da_url,
        configuration.repository_group,
        configuration.version_suffix,
        protocol=configuration.rest_protocol,
        timeout=configuration.request_timeout,
    )

    prior_model = None
    if manipulation_file_path(root_dir).exists():
        logger.info("Using existing manipulation model at %s", manipulation_file_path(root_dir))
        prior_model = read_manipulation_model(root_dir)

    cache = registry.get_or_create(build_id, lambda: BuildCache(root, [m.path for m in modules], skeleton))
    repositories = repositories or {}
    task = AlignmentTask(
        cache,
        DependencyCollector(port, configuration, modules, prior_model),
        AlignmentService(client, configuration.version_suffix),
        ModelAssembler(configuration),
        root_dir,
        lock_reader=lock_reader,
    )
    try:
        with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
            futures = [
                executor.submit(task.perform, module, list(repositories.get(module.path, ())))
                for module in modules
            ]
            results = []
            errors: List[AlignmentError] = []
            for future in futures:
                try:
                    results.append(future.result())
                except AlignmentError as e:
                    errors.append(e)
        if errors:
            raise errors[0]
        completed = [r for r in results if r is not None]
        if len(completed) != 1:
            raise AlignmentError(f"Expected exactly one module to complete the build, got {len(completed)}")
        return completed[0]
    finally:
        registry.discard(build_id)
