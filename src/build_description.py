"""Build description: a YAML/JSON stand-in for the host tool's project model.

The description lists the module hierarchy and, per module, its declared
dependencies with the version the host resolved them to. It provides the
module list, the skeleton manipulation model and a static resolution port.

Example::

    group: org.acme
    name: root
    version: "1.0.0"
    repositories: [https://repo1.maven.org/maven2]
    dependencies:
      - declared: org.apache.commons:commons-lang3:latest.release
        resolved: org.apache.commons:commons-lang3:3.9
      - declared: org.acme:missing:1.0      # no "resolved": unresolvable
    children:
      - name: core
        dependencies: [...]
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft7Validator

from common.errors import ConfigurationError, InvalidArgumentError
from alignment.collector import ResolutionResult, ResolvedDependency
from alignment.model import ManipulationModel
from alignment.module import Module
from constants import Constants
from versioning.parser import parse_gav, parse_relaxed

logger = logging.getLogger(__name__)

DESCRIPTION_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "definitions": {
        "dependency": {
            "type": "object",
            "properties": {
                "declared": {"type": "string"},
                "resolved": {"type": ["string", "null"]},
            },
            "anyOf": [{"required": ["declared"]}, {"required": ["resolved"]}],
        },
        "module": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1, "pattern": "^[^:]+$"},
                "group": {"type": "string"},
                "version": {"type": "string"},
                "dir": {"type": "string"},
                "strictConflictResolution": {"type": "boolean"},
                "repositories": {"type": "array", "items": {"type": "string"}},
                "dependencies": {"type": "array", "items": {"$ref": "#/definitions/dependency"}},
                "children": {"type": "array", "items": {"$ref": "#/definitions/module"}},
            },
        },
    },
    "$ref": "#/definitions/module",
}


@dataclass
class ModuleDescription:
    """One module of the description together with its host-reported resolution."""
    module: Module
    resolution: ResolutionResult
    repositories: List[str] = field(default_factory=list)
    children: List["ModuleDescription"] = field(default_factory=list)


class BuildDescription:
    """Parsed build description; also acts as the build's resolution port."""

    def __init__(self, root: ModuleDescription, root_dir: str):
        self.root = root
        self.root_dir = root_dir
        self._by_path: Dict[str, ModuleDescription] = {}
        for desc in self._walk(root):
            self._by_path[desc.module.path] = desc

    def _walk(self, desc: ModuleDescription):
        yield desc
        for child in desc.children:
            yield from self._walk(child)

    @property
    def modules(self) -> List[Module]:
        return [desc.module for desc in self._walk(self.root)]

    @property
    def repositories(self) -> List[str]:
        """Distinct repositories of every module, in declaration order."""
        seen: List[str] = []
        for desc in self._walk(self.root):
            for repo in desc.repositories:
                if repo not in seen:
                    seen.append(repo)
        return seen

    @property
    def module_repositories(self) -> Dict[str, List[str]]:
        """Repositories declared by each module, keyed by module path."""
        return {desc.module.path: list(desc.repositories) for desc in self._walk(self.root)}

    def skeleton_model(self) -> ManipulationModel:
        """An empty manipulation model mirroring the module hierarchy."""
        def build(desc: ModuleDescription) -> ManipulationModel:
            node = ManipulationModel(desc.module.name, desc.module.group, desc.module.version)
            for child in desc.children:
                node.add_child(build(child))
            return node
        return build(self.root)

    def resolve(self, module: Module) -> ResolutionResult:
        """Resolution port: the pairs recorded for ``module``."""
        desc = self._by_path.get(module.path)
        if desc is None:
            raise InvalidArgumentError(f"Module {module.path} is not part of this build description")
        return desc.resolution


def _parse_module(
    data: Dict[str, Any],
    parent: Optional[Module],
    base_dir: str,
) -> ModuleDescription:
    name = data["name"]
    group = data.get("group", parent.group if parent else "")
    version = data.get("version", parent.version if parent else Constants.DEFAULT_PROJECT_VERSION)
    if parent is None:
        path = ":"
        default_dir = base_dir
    else:
        path = f":{name}" if parent.path == ":" else f"{parent.path}:{name}"
        default_dir = os.path.join(parent.project_dir or base_dir, name)
    project_dir = os.path.join(base_dir, data["dir"]) if "dir" in data else default_dir
    module = Module(name=name, path=path, group=group, version=version, project_dir=project_dir)

    resolution = ResolutionResult(strict_conflict_resolution=bool(data.get("strictConflictResolution", False)))
    try:
        for entry in data.get("dependencies") or []:
            declared = parse_relaxed(entry["declared"]) if entry.get("declared") else None
            resolved = entry.get("resolved")
            if resolved:
                resolution.resolved.append(ResolvedDependency(parse_gav(resolved), declared))
            elif declared is not None:
                resolution.unresolved.add(declared)
    except InvalidArgumentError as e:
        raise ConfigurationError(f"Invalid dependency in module {path}: {e}") from e

    desc = ModuleDescription(module, resolution, list(data.get("repositories") or []))
    for child in data.get("children") or []:
        child_desc = _parse_module(child, module, base_dir)
        if any(c.module.name == child_desc.module.name for c in desc.children):
            raise ConfigurationError(f"Module {path} declares child {child_desc.module.name} twice")
        desc.children.append(child_desc)
    return desc


def parse_build_description(data: Any, base_dir: str) -> BuildDescription:
    """Validate and parse an already-decoded description."""
    validator = Draft7Validator(DESCRIPTION_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ConfigurationError(f"Invalid build description at '{path}': {first.message}")
    return BuildDescription(_parse_module(data, None, base_dir), base_dir)


def load_build_description(path: str) -> BuildDescription:
    """Read a YAML or JSON build description from ``path``.

    Module directories are resolved relative to the file's directory.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Unable to read build description {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Build description {path} is not valid YAML/JSON: {e}") from e
    base_dir = os.path.dirname(os.path.abspath(path))
    description = parse_build_description(data, base_dir)
    logger.info("Loaded build description with %d modules from %s", len(description.modules), path)
    return description
