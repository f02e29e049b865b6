"""Lockfile parser for Gradle dependency locking.

Reads ``gradle/dependency-locks/*.lockfile`` (one file per configuration)
and the single-file ``gradle.lockfile`` layout, returning every pinned
coordinate. Lock pins override live resolution in the collector.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Set, Union

from constants import Constants
from versioning.models import Coordinate

logger = logging.getLogger(__name__)


def parse_lockfile(lockfile_path: Union[str, Path]) -> Set[Coordinate]:
    """Extract pinned coordinates from a single Gradle lockfile.

    Lines look like ``group:artifact:version`` and, in the single-file layout,
    ``group:artifact:version=configA,configB``. Comments (``#``), blank lines
    and the ``empty=`` marker are ignored; malformed lines are logged and skipped.

    Args:
        lockfile_path: Path to the lockfile

    Returns:
        Set of pinned coordinates (empty if the file cannot be read)
    """
    pins: Set[Coordinate] = set()
    try:
        with open(lockfile_path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except FileNotFoundError as e:
        logger.warning("Lockfile not found: %s", e)
        return pins
    except IOError as e:
        logger.warning("Failed to read lockfile: %s", e)
        return pins

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("empty="):
            continue
        gav = line.split("=", 1)[0].strip()
        parts = gav.split(":")
        if len(parts) != 3 or not all(parts):
            logger.warning("Skipping malformed lock entry %s:%d: %r", lockfile_path, lineno, line)
            continue
        pins.add(Coordinate(parts[0], parts[1], parts[2]))
    return pins


def read_locks(module_dir: Union[str, Path]) -> Set[Coordinate]:
    """Collect all lock pins for the module rooted at ``module_dir``.

    Looks in ``<module_dir>/gradle/dependency-locks/*.lockfile`` and in
    ``<module_dir>/gradle.lockfile``. A module without locks yields an empty set.
    """
    pins: Set[Coordinate] = set()
    locks_dir = Path(module_dir) / Constants.LOCKS_DIR
    if locks_dir.is_dir():
        for entry in sorted(os.listdir(locks_dir)):
            if entry.endswith(Constants.LOCKFILE_SUFFIX):
                pins |= parse_lockfile(locks_dir / entry)
    single = Path(module_dir) / "gradle.lockfile"
    if single.is_file():
        pins |= parse_lockfile(single)
    if pins:
        logger.debug("Read %d lock pins under %s", len(pins), module_dir)
    return pins
