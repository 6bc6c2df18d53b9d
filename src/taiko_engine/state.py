"""
Mutable board state owned by the engine.

A BoardState groups everything a turn can change. The engine works on a
deep clone of it while validating a candidate pair and swaps the clone in
only when every check passes.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional

from .grouping import ColorGroups
from .orientation import OrientationMaps
from .pattern_log import PatternLog
from .types import ConnectionPair, Row, Vertex, VerticalConnection


@dataclass
class BoardState:
    """
    Everything a turn can change.

    Attributes:
        top_count: Number of vertices in the top row
        bottom_count: Number of vertices in the bottom row
        connections: Every vertical connection, in creation order
        pairs: Committed complete pairs, in commit order
        pending: Pair holding a single connection, if any
        groups: Color groups of the committed pairs
        orientations: Per-row orientation maps
        pattern_log: Horizontal edges derived from pairs and orientations
        processed: PairKeys of committed pairs
        color_index: Palette generation counter
    """

    top_count: int = 1
    bottom_count: int = 1
    connections: list[VerticalConnection] = field(default_factory=list)
    pairs: list[ConnectionPair] = field(default_factory=list)
    pending: Optional[ConnectionPair] = None
    groups: ColorGroups = field(default_factory=ColorGroups)
    orientations: OrientationMaps = field(default_factory=OrientationMaps)
    pattern_log: PatternLog = field(default_factory=PatternLog)
    processed: set[str] = field(default_factory=set)
    color_index: int = 0

    def clone(self) -> BoardState:
        """Deep copy; connections stay shared between pairs and the connection list."""
        return copy.deepcopy(self)

    def connected_vertices(self) -> set[Vertex]:
        result: set[Vertex] = set()
        for conn in self.connections:
            result.update(conn.nodes)
        return result

    def has_connection(self, conn: VerticalConnection) -> bool:
        return any(existing.same_vertices(conn) for existing in self.connections)

    def add_connection(self, conn: VerticalConnection) -> None:
        """Record a connection and grow the rows."""
        self.connections.append(conn)
        self.grow_rows()

    def grow_rows(self) -> None:
        """
        Add a vertex to each row whose vertices are all connected.
        """
        connected = self.connected_vertices()
        if all(Vertex(Row.TOP, i) in connected for i in range(self.top_count)):
            self.top_count += 1
        if all(Vertex(Row.BOTTOM, i) in connected for i in range(self.bottom_count)):
            self.bottom_count += 1

    def pairs_by_key(self) -> dict[str, ConnectionPair]:
        return {pair.key: pair for pair in self.pairs}

    def used_colors(self) -> set[str]:
        return {conn.color for conn in self.connections if conn.color is not None}


__all__ = ["BoardState"]
