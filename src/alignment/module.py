"""Identity of a module (sub-project) taking part in a build."""

from dataclasses import dataclass
from typing import Optional

from constants import Constants
from versioning.models import Coordinate


@dataclass(frozen=True)
class Module:
    """A module of a multi-module build.

    ``path`` is the colon path from the build root (``:`` for the root module,
    ``:a:b`` for child ``b`` of ``a``) and is unique within a build.
    """
    name: str
    path: str
    group: str = ""
    version: str = Constants.DEFAULT_PROJECT_VERSION
    project_dir: Optional[str] = None

    @property
    def is_fully_defined(self) -> bool:
        """False when the group is blank or the version was never set."""
        return bool(self.group.strip()) and self.version not in ("", Constants.DEFAULT_PROJECT_VERSION)

    def coordinate(self) -> Coordinate:
        """This module's own group:name:version."""
        return Coordinate(self.group, self.name, self.version)

    def matches(self, group: Optional[str], artifact: Optional[str], version: Optional[str]) -> bool:
        """True when the given GAV points at this module."""
        return group == self.group and artifact == self.name and version == self.version
