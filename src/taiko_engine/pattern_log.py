"""
Pattern log: the ordered horizontal edges induced by committed pairs.

Each complete pair contributes at most one edge per row, appended in
commit order. The log is derived data; rebuild() regenerates it from the
pairs and orientation maps whenever history is restored or colors change.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Iterator, Optional

from .orientation import OrientationMaps
from .types import ROWS, ConnectionPair, HorizontalEdge, Row

logger = logging.getLogger(__name__)


@dataclass
class PatternLog:
    """Ordered horizontal edges per row."""

    top_sequence: list[HorizontalEdge] = field(default_factory=list)
    bottom_sequence: list[HorizontalEdge] = field(default_factory=list)

    def sequence(self, row: Row) -> list[HorizontalEdge]:
        return self.top_sequence if row is Row.TOP else self.bottom_sequence

    def edges(self) -> Iterator[HorizontalEdge]:
        """Iterate every edge, top row first."""
        yield from self.top_sequence
        yield from self.bottom_sequence

    def copy(self) -> PatternLog:
        return copy.deepcopy(self)

    def clear(self) -> None:
        self.top_sequence.clear()
        self.bottom_sequence.clear()

    def to_dict(self) -> dict[str, Any]:
        return {
            "top_sequence": [edge.to_dict() for edge in self.top_sequence],
            "bottom_sequence": [edge.to_dict() for edge in self.bottom_sequence],
        }

    def __len__(self) -> int:
        return len(self.top_sequence) + len(self.bottom_sequence)


@dataclass(frozen=True)
class DerivedEdges:
    """The horizontal edges one pair induces (None for a skipped row)."""

    pair_id: str
    top: Optional[HorizontalEdge] = None
    bottom: Optional[HorizontalEdge] = None

    def for_row(self, row: Row) -> Optional[HorizontalEdge]:
        return self.top if row is Row.TOP else self.bottom

    def __iter__(self) -> Iterator[HorizontalEdge]:
        for row in ROWS:
            edge = self.for_row(row)
            if edge is not None:
                yield edge


def _log_summary(action: str, log: PatternLog) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("pattern log %s: %s", action, json.dumps(log.to_dict()))


def derive_edges(
    pair: ConnectionPair,
    maps: OrientationMaps,
    *,
    color: Optional[str] = None,
) -> DerivedEdges:
    """
    Build the horizontal edges of a complete pair.

    Rows that are degenerate or have no orientation entry yield None.

    Args:
        pair: Complete pair
        maps: Orientation maps holding the resolved entries
        color: Edge color (default: the second connection's color)
    """
    if color is None:
        color = pair.color
    pid = pair.key

    edges: dict[Row, Optional[HorizontalEdge]] = {}
    for row in ROWS:
        key = pair.combination(row)
        orientation = maps.get(row, key) if key is not None else None
        if key is None or orientation is None:
            edges[row] = None
            continue
        edges[row] = HorizontalEdge(
            row=row,
            vertices=key,
            color=color,
            orientation=orientation,
            pair_id=pid,
        )

    return DerivedEdges(pair_id=pid, top=edges[Row.TOP], bottom=edges[Row.BOTTOM])


def append_edges(log: PatternLog, pair_id: str, derived: DerivedEdges) -> None:
    """Append a pair's derived edges to the end of each row sequence."""
    for edge in derived:
        if edge.pair_id != pair_id:
            edge = replace(edge, pair_id=pair_id)
        log.sequence(edge.row).append(edge)
    _log_summary(f"append {pair_id}", log)


def rebuild(log: PatternLog, pairs: Iterable[ConnectionPair], maps: OrientationMaps) -> PatternLog:
    """
    Regenerate the log from every complete pair, in order.

    Idempotent: rebuilding twice from the same inputs gives the same log.
    """
    log.clear()
    for pair in pairs:
        if not pair.is_complete:
            continue
        derived = derive_edges(pair, maps)
        for edge in derived:
            log.sequence(edge.row).append(edge)
    _log_summary("rebuild", log)
    return log


def remove_by_pair_id(log: PatternLog, pair_id: str) -> int:
    """
    Drop every edge induced by one pair.

    Returns:
        Number of edges removed.
    """
    removed = 0
    for row in ROWS:
        seq = log.sequence(row)
        kept = [edge for edge in seq if edge.pair_id != pair_id]
        removed += len(seq) - len(kept)
        seq[:] = kept
    _log_summary(f"remove {pair_id}", log)
    return removed


def clear_log(log: PatternLog) -> None:
    log.clear()
    _log_summary("clear", log)


__all__ = [
    "PatternLog",
    "DerivedEdges",
    "derive_edges",
    "append_edges",
    "rebuild",
    "remove_by_pair_id",
    "clear_log",
]
