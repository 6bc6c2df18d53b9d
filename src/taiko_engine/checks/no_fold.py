"""
No-fold check.

Within one row and one color, the horizontal edges must form a partial
injective function: every vertex has at most one outgoing and at most one
incoming edge of that color, and no two edges of that color run in
opposite directions between the same vertices.
"""

from __future__ import annotations

from typing import Optional

from ..pattern_log import DerivedEdges, PatternLog
from ..types import ROWS, HorizontalEdge, Row, Vertex
from ..violations import FoldViolation

_Slots = dict[tuple[Optional[str], Vertex], HorizontalEdge]


def _row_edges(log: PatternLog, row: Row, candidate: Optional[DerivedEdges]) -> list[HorizontalEdge]:
    edges = list(log.sequence(row))
    if candidate is not None:
        edge = candidate.for_row(row)
        if edge is not None:
            edges.append(edge)
    return edges


def check_no_fold(
    log: PatternLog,
    candidate: Optional[DerivedEdges] = None,
) -> list[FoldViolation]:
    """
    Find every fold in the pattern log.

    Args:
        log: Pattern log to scan (not modified)
        candidate: Edges of a pair appended virtually after the log

    Returns:
        Fold violations in scan order, top row first. Empty if none.
    """
    violations: list[FoldViolation] = []

    for row in ROWS:
        outgoing: _Slots = {}
        incoming: _Slots = {}

        for edge in _row_edges(log, row, candidate):
            color = edge.color
            src, tgt = edge.source, edge.target

            previous = outgoing.get((color, src))
            if previous is None:
                outgoing[(color, src)] = edge
            elif previous.target != tgt:
                violations.append(
                    FoldViolation("multiple-outgoing", row, color, src, (previous, edge))
                )

            previous = incoming.get((color, tgt))
            if previous is None:
                incoming[(color, tgt)] = edge
            elif previous.source != src:
                violations.append(
                    FoldViolation("multiple-incoming", row, color, tgt, (previous, edge))
                )

            reverse = outgoing.get((color, tgt))
            if reverse is not None and reverse.target == src:
                violations.append(FoldViolation("two-cycle", row, color, src, (reverse, edge)))

    return violations


__all__ = ["check_no_fold"]
