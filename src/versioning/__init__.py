"""Coordinate models and version expression helpers."""

from .models import AlignmentResult, AlignmentValue, Coordinate, DependencyMap, RelaxedCoordinate
from .parser import is_dynamic, parse_gav, parse_relaxed, tokenize_rightmost_colon

__all__ = [
    "AlignmentResult",
    "AlignmentValue",
    "Coordinate",
    "DependencyMap",
    "RelaxedCoordinate",
    "is_dynamic",
    "parse_gav",
    "parse_relaxed",
    "tokenize_rightmost_colon",
]
