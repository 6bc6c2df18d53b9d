"""
Girth check.

The girth of a row is the length of its shortest cycle, ignoring edge
direction. A level with a girth bound rejects any row whose graph has a
cycle shorter than the bound.
"""

from __future__ import annotations

from ..graphs import build_undirected_adjacency, find_simple_cycles
from ..orientation import OrientationMaps
from ..types import ROWS, Row, Vertex
from ..validation import validate_min_girth
from ..violations import GirthViolation


def row_cycles(maps: OrientationMaps, max_length: int) -> dict[Row, list[tuple[Vertex, ...]]]:
    """Map each row to its simple cycles of at most max_length vertices."""
    result: dict[Row, list[tuple[Vertex, ...]]] = {}
    for row in ROWS:
        adj = build_undirected_adjacency(maps.for_row(row).keys())
        result[row] = find_simple_cycles(adj, max_length=max_length)
    return result


def check_girth(maps: OrientationMaps, min_girth: int) -> list[GirthViolation]:
    """
    Find cycles shorter than min_girth on either row.

    Args:
        maps: Orientation maps; their keys are the row graph's edges
        min_girth: Smallest allowed cycle length (>= 3)

    Returns:
        One violation per short cycle, top row first. Empty if none.

    Raises:
        ValidationError: If min_girth < 3
    """
    validate_min_girth(min_girth)

    violations: list[GirthViolation] = []
    for row, cycles in row_cycles(maps, min_girth - 1).items():
        for cycle in cycles:
            if len(cycle) < min_girth:
                violations.append(GirthViolation(row=row, cycle=cycle, min_girth=min_girth))
    return violations


__all__ = ["check_girth", "row_cycles"]
