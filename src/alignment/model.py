"""Manipulation model: the per-module tree of alignment decisions.

Each node owns its children through an ordered list. The only upward link is
``parent_path``, the colon path of the parent node, which is used for path
lookups and never for ownership or iteration.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Dict, Iterator, List, Optional

from common.errors import InvalidArgumentError, ModelLookupError
from versioning.models import Coordinate


class ManipulationModel:
    """One module of the build and the dependency decisions recorded for it."""

    def __init__(self, name: str, group: str, version: Optional[str] = None):
        self.name = name
        self.group = group
        self.version = version
        self.aligned_dependencies: Dict[str, Coordinate] = {}
        self.available_unaligned_dependencies: Dict[str, List[str]] = {}
        self.children: List[ManipulationModel] = []
        self.parent_path: Optional[str] = None

    def __repr__(self) -> str:
        return f"ManipulationModel(name={self.name!r}, group={self.group!r}, version={self.version!r})"

    @property
    def path(self) -> str:
        """Colon path of this node; the root is ``:``."""
        if self.parent_path is None:
            return ":"
        if self.parent_path == ":":
            return f":{self.name}"
        return f"{self.parent_path}:{self.name}"

    def _path_segments(self) -> List[str]:
        return [s for s in self.path.split(":") if s]

    def add_child(self, child: "ManipulationModel") -> "ManipulationModel":
        """Attach ``child`` (and its subtree) below this node.

        Raises:
            InvalidArgumentError: If a sibling with the same name already exists.
        """
        if any(c.name == child.name for c in self.children):
            raise InvalidArgumentError(
                f"ManipulationModel {self.name} already has a child named {child.name}"
            )
        self.children.append(child)
        child._reparent(self.path)
        return child

    def _reparent(self, parent_path: str) -> None:
        self.parent_path = parent_path
        for child in self.children:
            child._reparent(self.path)

    def iter_nodes(self) -> Iterator["ManipulationModel"]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def find_corresponding_child(self, path: str) -> "ManipulationModel":
        """Locate a node by bare name or by colon path.

        A bare name matches this node or the first descendant with that name in
        breadth-first order. A path starting with ``:`` is absolute: ``:`` is
        the root of the path and each further segment must match a child name
        exactly. When called on a non-root node the path may include this
        node's own path as a prefix (``:child1:child11`` from ``child1``).

        Raises:
            InvalidArgumentError: If ``path`` is empty.
            ModelLookupError: If a segment (or the name) does not exist.
        """
        if not path:
            raise InvalidArgumentError("Supplied child name cannot be empty")

        if not path.startswith(":"):
            return self._find_by_name(path)

        segments = [s for s in path[1:].split(":")]
        if segments == [""]:
            segments = []
        own = self._path_segments()
        if own and segments[:len(own)] == own:
            segments = segments[len(own):]

        current = self
        for segment in segments:
            match = next((c for c in current.children if c.name == segment), None)
            if match is None:
                raise ModelLookupError(f"ManipulationModel {segment} does not exist")
            current = match
        return current

    def _find_by_name(self, name: str) -> "ManipulationModel":
        queue = deque([self])
        while queue:
            node = queue.popleft()
            if node.name == name:
                return node
            queue.extend(node.children)
        raise ModelLookupError(f"ManipulationModel {name} does not exist")

    def get_all_aligned_dependencies(self) -> Dict[str, Coordinate]:
        """Aligned dependencies of this node and its whole subtree."""
        merged: Dict[str, Coordinate] = {}
        for node in self.iter_nodes():
            merged.update(node.aligned_dependencies)
        return merged

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted manipulation file shape."""
        return {
            "group": self.group,
            "name": self.name,
            "version": self.version,
            "alignedDependencies": {
                key: coord.to_dict() for key, coord in sorted(self.aligned_dependencies.items())
            },
            "availableUnalignedDependencies": {
                key: list(versions)
                for key, versions in sorted(self.available_unaligned_dependencies.items())
            },
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManipulationModel":
        """Rebuild a tree from its persisted shape."""
        node = cls(data["name"], data.get("group") or "", data.get("version"))
        for key, gav in (data.get("alignedDependencies") or {}).items():
            node.aligned_dependencies[key] = Coordinate(gav["groupId"], gav["artifactId"], gav["version"])
        for key, versions in (data.get("availableUnalignedDependencies") or {}).items():
            node.available_unaligned_dependencies[key] = list(versions or [])
        for child in data.get("children") or []:
            node.add_child(cls.from_dict(child))
        return node
