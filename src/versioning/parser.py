"""Coordinate parsing and dynamic version detection."""

import re
from typing import Optional, Tuple

from common.errors import InvalidArgumentError
from .models import Coordinate, RelaxedCoordinate

# Gradle/Maven dynamic selectors: prefix "1.+" / "2.0+" / "+", "latest.release" style
# status selectors and bracket ranges such as "[1.0,2.0)", "]1.0,2.0[" or "(,1.5]".
_PREFIX_RE = re.compile(r"^[^\[\]()]*\+$")
_LATEST_RE = re.compile(r"^latest\.[A-Za-z0-9_-]+$")
_RANGE_RE = re.compile(r"^[\[\]\(][^\[\]\(\)]*,[^\[\]\(\)]*[\[\]\)]$")


def tokenize_rightmost_colon(s: str) -> Tuple[str, Optional[str]]:
    """Return (identifier, spec or None) using the rightmost-colon rule."""
    s = s.strip()
    if ':' not in s:
        return s, None
    parts = s.rsplit(':', 1)
    identifier = parts[0].strip()
    spec_part = parts[1].strip() if len(parts) > 1 else ''
    spec = spec_part if spec_part else None
    return identifier, spec


def is_dynamic(version: Optional[str]) -> bool:
    """True when ``version`` is a dynamic expression rather than a concrete version."""
    if not version:
        return False
    version = version.strip()
    return bool(
        _PREFIX_RE.match(version)
        or _LATEST_RE.match(version)
        or _RANGE_RE.match(version)
    )


def parse_gav(token: str) -> Coordinate:
    """Parse ``group:artifact:version`` into a Coordinate.

    Raises:
        InvalidArgumentError: If the token does not hold exactly three non-empty parts.
    """
    parts = [p.strip() for p in (token or "").split(":")]
    if len(parts) != 3 or not all(parts):
        raise InvalidArgumentError(f"Invalid GAV '{token}'; expected group:artifact:version")
    return Coordinate(parts[0], parts[1], parts[2])


def parse_relaxed(token: str) -> RelaxedCoordinate:
    """Parse a declared dependency (``group:artifact[:version]``).

    The version part is kept verbatim, so dynamic expressions survive.
    """
    token = (token or "").strip()
    if token.count(":") == 1:
        group_id, artifact_id = (p.strip() for p in token.split(":"))
        version = ""
    else:
        identifier, spec = tokenize_rightmost_colon(token)
        if ":" not in identifier:
            raise InvalidArgumentError(f"Invalid dependency '{token}'; expected group:artifact[:version]")
        group_id, artifact_id = (p.strip() for p in identifier.split(":", 1))
        version = spec or ""
    if not group_id or not artifact_id:
        raise InvalidArgumentError(f"Invalid dependency '{token}'; expected group:artifact[:version]")
    return RelaxedCoordinate(group_id, artifact_id, version)
