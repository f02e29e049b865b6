"""Maps alignment results back onto the manipulation model tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from versioning.models import DependencyMap
from versioning.parser import is_dynamic
from .configuration import AlignmentConfiguration
from .io import write_manipulation_model
from .model import ManipulationModel
from .module import Module
from .service import Response

logger = logging.getLogger(__name__)


class ModelAssembler:
    """Records, per module, which dependencies were aligned and which were not."""

    def __init__(self, configuration: AlignmentConfiguration):
        self._configuration = configuration

    def assemble(
        self,
        model: ManipulationModel,
        module_dependencies: Dict[Module, DependencyMap],
        response: Response,
    ) -> ManipulationModel:
        """Apply ``response`` to every module node of ``model`` in place.

        Raises:
            ModelLookupError: If a module has no node in the tree.
        """
        new_version = response.new_project_version
        update_versions = self._configuration.version_modification_enabled and bool(new_version)
        if self._configuration.version_modification_enabled and not new_version:
            logger.warning("No new project version available; leaving module versions untouched")
        if update_versions:
            logger.info("Updating project %s version to %s", model.name, new_version)
            model.version = new_version

        for module in sorted(module_dependencies, key=lambda m: m.path):
            node = model.find_corresponding_child(module.path)
            if update_versions:
                logger.info("Updating sub-project %s version to %s", node.name, new_version)
                node.version = new_version
            dependencies = module_dependencies[module]
            self._update_dynamic_dependencies(node, dependencies)
            self._update_dependencies(node, dependencies, response)
        return model

    def assemble_and_write(
        self,
        root_dir: Union[str, Path],
        model: ManipulationModel,
        module_dependencies: Dict[Module, DependencyMap],
        response: Response,
    ) -> Path:
        """Assemble ``model`` and persist it under ``root_dir``."""
        self.assemble(model, module_dependencies, response)
        return write_manipulation_model(root_dir, model)

    @staticmethod
    def _update_dynamic_dependencies(node: ManipulationModel, dependencies: DependencyMap) -> None:
        # Dynamic declarations must be findable under their original expression.
        for relaxed, coordinate in dependencies.items():
            if is_dynamic(relaxed.version):
                node.aligned_dependencies[str(relaxed)] = coordinate

    @staticmethod
    def _update_dependencies(node: ManipulationModel, dependencies: DependencyMap, response: Response) -> None:
        for relaxed, coordinate in dependencies.items():
            key = str(relaxed)
            best_match: Optional[str] = response.aligned_version_of(coordinate)
            if best_match is not None:
                node.aligned_dependencies[key] = coordinate.with_version(best_match)
                node.available_unaligned_dependencies.pop(key, None)
            else:
                node.available_unaligned_dependencies[key] = response.available_versions_of(coordinate)
