"""Alignment service: turns translated versions into an alignment response."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Collection, List, Optional

from constants import Constants
from versioning.models import AlignmentResult, AlignmentValue, Coordinate
from .translator import AlignmentServiceClient

logger = logging.getLogger(__name__)

_NUMERIC_RE = re.compile(r"^\d+(\.\d+)*$")


@dataclass
class Request:
    """Everything one build sends for alignment."""
    root: Optional[Coordinate]
    project_gavs: Collection[Coordinate] = field(default_factory=list)
    dependencies: Collection[Coordinate] = field(default_factory=list)


class Response:
    """Translated versions plus the version chosen for the build itself."""

    def __init__(self, translation: AlignmentResult, new_project_version: Optional[str] = None):
        self._translation = translation
        self.new_project_version = new_project_version

    def aligned_version_of(self, coordinate: Coordinate) -> Optional[str]:
        """Best-match version for ``coordinate``, or None."""
        value = self._translation.get(coordinate)
        return value.best_match_version if value is not None else None

    def available_versions_of(self, coordinate: Coordinate) -> List[str]:
        """Other versions the service knows for ``coordinate``, in service order."""
        value = self._translation.get(coordinate)
        return list(value.available_versions) if value is not None else []

    def __len__(self) -> int:
        return len(self._translation)


def next_incremental_version(version: str, suffix: str, existing: Collection[str] = ()) -> str:
    """Return ``version`` carrying the next ``<suffix>-NNNNN`` build number.

    Purely numeric versions are padded to three components and joined with
    ``.`` (``1.0`` -> ``1.0.0.redhat-00001``); other versions use ``-``. Any
    suffix already present on ``version`` is replaced. The build number is one
    above the highest one found on ``version`` itself or among ``existing`` for
    the same base version.
    """
    suffix_re = re.compile(rf"[.-]{re.escape(suffix)}-(\d+)$")
    own = suffix_re.search(version)
    base = suffix_re.sub("", version)
    if _NUMERIC_RE.match(base):
        parts = base.split(".")
        while len(parts) < 3:
            parts.append("0")
        base = ".".join(parts)
        separator = "."
    else:
        separator = "-"

    build_re = re.compile(rf"^{re.escape(base)}[.-]{re.escape(suffix)}-(\d+)$")
    highest = int(own.group(1)) if own else 0
    for candidate in existing:
        match = build_re.match(candidate or "")
        if match:
            highest = max(highest, int(match.group(1)))
    build = str(highest + 1).zfill(Constants.VERSION_INCREMENTAL_PADDING)
    return f"{base}{separator}{suffix}-{build}"


class AlignmentService:
    """Aligns a build through the REST alignment service."""

    def __init__(self, client: AlignmentServiceClient, version_suffix: str = Constants.VERSION_SUFFIX):
        self._client = client
        self._version_suffix = version_suffix

    def align(self, request: Request) -> Response:
        """Translate the build's project and dependency coordinates.

        Raises:
            AlignmentServiceError: If the service cannot be queried.
        """
        coordinates = set(request.project_gavs) | set(request.dependencies)
        if request.root is not None:
            coordinates.add(request.root)
        translation = self._client.translate_versions(coordinates)
        logger.info("Alignment service returned %d of %d requested GAVs", len(translation), len(coordinates))

        new_version = None
        if request.root is not None:
            value = translation.get(request.root, AlignmentValue())
            existing = list(value.available_versions)
            if value.best_match_version:
                existing.append(value.best_match_version)
            new_version = next_incremental_version(request.root.version, self._version_suffix, existing)
        return Response(translation, new_version)
