"""Data models for coordinates and alignment results."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True, order=True)
class Coordinate:
    """A resolved group:artifact:version; the canonical alignment-service key."""
    group_id: str
    artifact_id: str
    version: str

    def with_version(self, version: str) -> "Coordinate":
        """Return a copy of this coordinate carrying ``version``."""
        return Coordinate(self.group_id, self.artifact_id, version)

    @property
    def ga(self) -> str:
        """group:artifact without a version."""
        return f"{self.group_id}:{self.artifact_id}"

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the alignment service field names."""
        return {"groupId": self.group_id, "artifactId": self.artifact_id, "version": self.version}

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True, eq=False)
class RelaxedCoordinate:
    """A dependency as declared: the version is the original expression.

    The expression may be a range, "+", "latest.release", a concrete version or
    empty (BOM managed). Two relaxed coordinates are equal exactly when group,
    artifact and the original version string match; a Coordinate with the same
    three strings also compares equal.
    """
    group_id: str
    artifact_id: str
    version: str = ""

    def _key(self):
        return (self.group_id, self.artifact_id, self.version)

    def __eq__(self, other) -> bool:
        if isinstance(other, (RelaxedCoordinate, Coordinate)):
            return self._key() == (other.group_id, other.artifact_id, other.version)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if self.version:
            return f"{self.group_id}:{self.artifact_id}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}"


@dataclass
class AlignmentValue:
    """Per-coordinate alignment outcome returned by the service."""
    best_match_version: Optional[str] = None
    available_versions: List[str] = field(default_factory=list)


# Type aliases used across the alignment package.
DependencyMap = Dict[RelaxedCoordinate, Coordinate]
AlignmentResult = Dict[Coordinate, AlignmentValue]
