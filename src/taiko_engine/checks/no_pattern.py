"""
No-pattern check.

A trio is a centre vertex together with two of its horizontal neighbours.
Its signature records, for each flanking edge, whether the edge leaves or
enters the centre and its color. Across both rows, no two trios may share
a signature.
"""

from __future__ import annotations

from typing import Iterator, Optional

from ..pattern_log import DerivedEdges, PatternLog
from ..types import ROWS, HorizontalEdge, Row, Trio, Vertex
from ..violations import PatternViolation


def _row_adjacency(
    log: PatternLog,
    row: Row,
    candidate: Optional[DerivedEdges],
) -> dict[Vertex, dict[Vertex, HorizontalEdge]]:
    edges = list(log.sequence(row))
    if candidate is not None and candidate.for_row(row) is not None:
        edges.append(candidate.for_row(row))

    adj: dict[Vertex, dict[Vertex, HorizontalEdge]] = {}
    for edge in edges:
        a, b = edge.vertices
        adj.setdefault(a, {}).setdefault(b, edge)
        adj.setdefault(b, {}).setdefault(a, edge)
    return adj


def _order_flanks(center: Vertex, n1: Vertex, n2: Vertex) -> tuple[Vertex, Vertex]:
    ic = center.index
    if (ic < n1.index and ic < n2.index) or (ic > n1.index and ic > n2.index):
        # Higher index first on both sides, so above both neighbours pt1 is the nearer one
        return (n1, n2) if n1.index > n2.index else (n2, n1)
    return (n1, n2) if n1.index < n2.index else (n2, n1)


def iter_trios(
    log: PatternLog,
    candidate: Optional[DerivedEdges] = None,
) -> Iterator[Trio]:
    """
    Iterate every trio of the pattern log.

    Centres come in order of first appearance, top row first; for each
    centre, neighbours are taken in index order.

    Args:
        log: Pattern log (not modified)
        candidate: Edges of a pair appended virtually after the log
    """
    for row in ROWS:
        adj = _row_adjacency(log, row, candidate)
        for center, flanks in adj.items():
            neighbors = sorted(flanks, key=lambda v: v.index)
            for i, n1 in enumerate(neighbors):
                for n2 in neighbors[i + 1 :]:
                    pt1, pt3 = _order_flanks(center, n1, n2)
                    e1, e2 = flanks[pt1], flanks[pt3]
                    yield Trio(
                        row=row,
                        pt1=pt1,
                        center=center,
                        pt3=pt3,
                        o1=e1.direction_at(center),
                        c1=e1.color,
                        o2=e2.direction_at(center),
                        c2=e2.color,
                        edges=(e1, e2),
                    )


def check_no_pattern(
    log: PatternLog,
    candidate: Optional[DerivedEdges] = None,
) -> list[PatternViolation]:
    """
    Find every trio whose signature repeats an earlier trio.

    Returns:
        One violation per repeat, naming the earlier holder. Empty if none.
    """
    holders: dict[str, Trio] = {}
    violations: list[PatternViolation] = []

    for trio in iter_trios(log, candidate):
        signature = trio.signature
        first = holders.get(signature)
        if first is None:
            holders[signature] = trio
        else:
            violations.append(PatternViolation(signature=signature, trio=trio, conflicting=first))

    return violations


__all__ = ["iter_trios", "check_no_pattern"]
