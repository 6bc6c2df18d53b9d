"""
Common types for the puzzle engine.

This module provides the fundamental types shared by every component:
- Row / Vertex: the two vertex rows and their members
- Orientation / Direction: horizontal edge direction vocabulary
- VerticalConnection / ConnectionPair: what the player draws
- HorizontalEdge: derived same-row edge recorded in the pattern log
- Trio: a centre vertex with two flanking horizontal edges
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence


class Row(Enum):
    """Vertex row."""

    TOP = "top"
    BOTTOM = "bottom"

    def opposite(self) -> Row:
        """Get the other row."""
        return Row.BOTTOM if self is Row.TOP else Row.TOP


ROWS: tuple[Row, Row] = (Row.TOP, Row.BOTTOM)


class Orientation(Enum):
    """
    Direction of a horizontal edge between two same-row vertices.

    - right: from the lower index to the higher index
    - left: from the higher index to the lower index
    """

    LEFT = "left"
    RIGHT = "right"

    def flipped(self) -> Orientation:
        """Get the opposite orientation."""
        return Orientation.RIGHT if self is Orientation.LEFT else Orientation.LEFT

    @classmethod
    def between(cls, start: Vertex, end: Vertex) -> Orientation:
        """Orientation of an edge running from start to end."""
        return cls.RIGHT if start.index < end.index else cls.LEFT


class Direction(Enum):
    """Direction of an edge relative to one of its endpoints."""

    IN = "in"
    OUT = "out"


@dataclass(frozen=True)
class Vertex:
    """
    A puzzle vertex.

    Attributes:
        row: Row the vertex lives in
        index: Position within the row (0-based)
    """

    row: Row
    index: int

    @property
    def sort_key(self) -> tuple[int, int]:
        """Ordering key: top row first, then by index."""
        return (0 if self.row is Row.TOP else 1, self.index)

    def __str__(self) -> str:
        return f"{self.row.value}-{self.index}"


CombinationKey = tuple[Vertex, Vertex]
"""Two distinct same-row vertices sorted by index."""


def combination_key(a: Vertex, b: Vertex) -> Optional[CombinationKey]:
    """
    Build the combination key for two same-row vertices.

    Returns None when both vertices are the same (a degenerate row).
    """
    if a == b:
        return None
    if a.index <= b.index:
        return (a, b)
    return (b, a)


def edge_id(key: CombinationKey) -> str:
    """Text id of a combination key, e.g. "top-0,top-1"."""
    return f"{key[0]},{key[1]}"


@dataclass
class VerticalConnection:
    """
    A single top-to-bottom edge drawn by the player.

    Attributes:
        top: Top row vertex
        bottom: Bottom row vertex
        color: Current color (may be rewritten by group merges)
        seed_color: Color the connection was created with
    """

    top: Vertex
    bottom: Vertex
    color: Optional[str] = None
    seed_color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.seed_color is None:
            self.seed_color = self.color

    @property
    def nodes(self) -> tuple[Vertex, Vertex]:
        """(top, bottom) vertices."""
        return (self.top, self.bottom)

    def vertex(self, row: Row) -> Vertex:
        """Get the endpoint in the given row."""
        return self.top if row is Row.TOP else self.bottom

    def same_vertices(self, other: VerticalConnection) -> bool:
        """Check whether both connections join the same two vertices."""
        return self.top == other.top and self.bottom == other.bottom

    def shares_vertex(self, other: VerticalConnection) -> bool:
        """Check whether the connections have an endpoint in common."""
        return self.top == other.top or self.bottom == other.bottom

    def node_key(self) -> str:
        """Order-independent text form used by pair keys."""
        return "|".join(sorted((str(self.top), str(self.bottom))))

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [str(self.top), str(self.bottom)],
            "color": self.color,
            "seed_color": self.seed_color,
        }


def pair_key(connections: Sequence[VerticalConnection]) -> str:
    """
    Canonical, order-independent key for a connection pair.

    Each connection contributes its sorted vertex names joined by "|";
    the contributions are sorted and JSON encoded.
    """
    return json.dumps(sorted(conn.node_key() for conn in connections))


@dataclass
class ConnectionPair:
    """
    One or two vertical connections sharing a color.

    A pair with a single connection is pending; the second connection
    completes it. Order is significant: the first connection is the
    reference for the pair's orientation.
    """

    connections: list[VerticalConnection] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return len(self.connections) == 2

    @property
    def is_pending(self) -> bool:
        return len(self.connections) == 1

    @property
    def first(self) -> VerticalConnection:
        return self.connections[0]

    @property
    def second(self) -> VerticalConnection:
        return self.connections[1]

    @property
    def color(self) -> Optional[str]:
        """Pair color, taken from the second connection once complete."""
        if not self.connections:
            return None
        return self.connections[-1].color

    @property
    def key(self) -> str:
        return pair_key(self.connections)

    def row_vertices(self, row: Row) -> tuple[Vertex, Vertex]:
        """(first, second) endpoints of a complete pair in one row."""
        return (self.first.vertex(row), self.second.vertex(row))

    def combination(self, row: Row) -> Optional[CombinationKey]:
        """Combination key for a row, or None if degenerate."""
        a, b = self.row_vertices(row)
        return combination_key(a, b)

    def vertices(self) -> set[Vertex]:
        result: set[Vertex] = set()
        for conn in self.connections:
            result.update(conn.nodes)
        return result

    def set_color(self, color: str) -> None:
        for conn in self.connections:
            conn.color = color

    def __len__(self) -> int:
        return len(self.connections)


@dataclass(frozen=True)
class HorizontalEdge:
    """
    Derived, oriented same-row edge.

    Attributes:
        row: Row of both endpoints
        vertices: Endpoints sorted by index
        color: Color of the pair that induced the edge
        orientation: Direction along the row
        pair_id: PairKey of the inducing pair
    """

    row: Row
    vertices: CombinationKey
    color: Optional[str]
    orientation: Orientation
    pair_id: str = ""

    @property
    def id(self) -> str:
        return edge_id(self.vertices)

    @property
    def source(self) -> Vertex:
        if self.orientation is Orientation.RIGHT:
            return self.vertices[0]
        return self.vertices[1]

    @property
    def target(self) -> Vertex:
        if self.orientation is Orientation.RIGHT:
            return self.vertices[1]
        return self.vertices[0]

    def other(self, vertex: Vertex) -> Vertex:
        """Get the endpoint opposite to vertex."""
        return self.vertices[1] if vertex == self.vertices[0] else self.vertices[0]

    def direction_at(self, vertex: Vertex) -> Direction:
        """out if vertex is the source of this edge, in otherwise."""
        return Direction.OUT if vertex == self.source else Direction.IN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "row": self.row.value,
            "nodes": [str(v) for v in self.vertices],
            "color": self.color,
            "orientation": self.orientation.value,
            "pair_id": self.pair_id,
        }


@dataclass(frozen=True)
class Trio:
    """
    A centre vertex with two flanking horizontal edges.

    pt1 and pt3 follow the index ordering rule of the no-pattern check;
    (o1, c1) describe edge (pt1, center) and (o2, c2) edge (center, pt3).
    """

    row: Row
    pt1: Vertex
    center: Vertex
    pt3: Vertex
    o1: Direction
    c1: Optional[str]
    o2: Direction
    c2: Optional[str]
    edges: tuple[HorizontalEdge, HorizontalEdge]

    @property
    def signature(self) -> str:
        return f"{self.o1.value}|{self.c1}|{self.o2.value}|{self.c2}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row.value,
            "pt1": str(self.pt1),
            "pt2": str(self.center),
            "pt3": str(self.pt3),
            "orientation1": self.o1.value,
            "color1": self.c1,
            "orientation2": self.o2.value,
            "color2": self.c2,
        }


__all__ = [
    "Row",
    "ROWS",
    "Orientation",
    "Direction",
    "Vertex",
    "CombinationKey",
    "combination_key",
    "edge_id",
    "VerticalConnection",
    "pair_key",
    "ConnectionPair",
    "HorizontalEdge",
    "Trio",
]
