"""
Input validation utilities for the puzzle engine.

Provides centralized coercion and validation for vertices, connections,
pairs and engine parameters. Contract breaches by the caller raise
descriptive exceptions; puzzle-rule failures never do (they are reported
as violations in a TurnResult).
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Sequence

from .types import (
    CombinationKey,
    ConnectionPair,
    Row,
    Vertex,
    VerticalConnection,
    combination_key,
)

_VERTEX_RE = re.compile(r"^(top|bottom)-(\d+)$")


class ValidationError(ValueError):
    """Base exception for engine contract errors."""

    pass


class InvalidVertexError(ValidationError):
    """Raised when a vertex is malformed or does not exist on the board."""

    pass


class InvalidConnectionError(ValidationError):
    """Raised when a connection does not join one top and one bottom vertex."""

    pass


class InvalidPairError(ValidationError):
    """Raised when a candidate pair is malformed or cannot be submitted."""

    pass


class UnknownLevelError(ValidationError):
    """Raised when a level name has no check policy."""

    pass


class ScenarioError(ValidationError):
    """Raised when a replay scenario is malformed."""

    pass


class RuleWarning(UserWarning):
    """Warning issued when a puzzle rule is bypassed because the level does not enforce it."""

    pass


def as_vertex(value: Any) -> Vertex:
    """
    Coerce a value to a Vertex.

    Accepts Vertex objects, strings like "top-3" and (row, index) tuples.

    Raises:
        InvalidVertexError: If the value cannot be interpreted as a vertex
    """
    if isinstance(value, Vertex):
        if value.index < 0:
            raise InvalidVertexError(f"Vertex index must be >= 0, got {value.index}")
        return value

    if isinstance(value, str):
        match = _VERTEX_RE.match(value.strip())
        if not match:
            raise InvalidVertexError(
                f'Vertex must look like "top-<n>" or "bottom-<n>", got {value!r}'
            )
        return Vertex(Row(match.group(1)), int(match.group(2)))

    if isinstance(value, (tuple, list)) and len(value) == 2:
        row, index = value
        try:
            row = row if isinstance(row, Row) else Row(row)
        except ValueError:
            raise InvalidVertexError(f"Unknown row {row!r}") from None
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise InvalidVertexError(f"Vertex index must be a non-negative int, got {index!r}")
        return Vertex(row, index)

    raise InvalidVertexError(f"Cannot interpret {value!r} as a vertex")


def parse_edge_id(value: str) -> CombinationKey:
    """
    Parse a combination key from its text id ("top-0,top-1").

    Raises:
        InvalidVertexError: If the id is malformed, mixes rows or is degenerate
    """
    parts = value.split(",")
    if len(parts) != 2:
        raise InvalidVertexError(f"Edge id must name two vertices, got {value!r}")
    a, b = as_vertex(parts[0]), as_vertex(parts[1])
    if a.row is not b.row:
        raise InvalidVertexError(f"Edge id {value!r} mixes rows")
    key = combination_key(a, b)
    if key is None:
        raise InvalidVertexError(f"Edge id {value!r} is degenerate")
    return key


def as_connection(value: Any, color: Optional[str] = None) -> VerticalConnection:
    """
    Coerce a value to a VerticalConnection.

    Accepts VerticalConnection objects, (a, b) sequences in either row
    order and mappings with "nodes" (or "top"/"bottom") and "color".

    Args:
        value: Connection description
        color: Color to use when the description carries none

    Raises:
        InvalidConnectionError: If the connection is malformed
    """
    if isinstance(value, VerticalConnection):
        conn = VerticalConnection(
            top=as_vertex(value.top),
            bottom=as_vertex(value.bottom),
            color=value.color if value.color is not None else color,
            seed_color=value.seed_color,
        )
        return _check_rows(conn)

    own_color: Optional[str] = None
    if isinstance(value, Mapping):
        own_color = value.get("color")
        if "nodes" in value:
            nodes = value["nodes"]
        elif "top" in value and "bottom" in value:
            nodes = (value["top"], value["bottom"])
        else:
            raise InvalidConnectionError(f"Connection mapping needs 'nodes', got {dict(value)!r}")
    elif isinstance(value, (tuple, list)):
        nodes = value
    else:
        raise InvalidConnectionError(f"Cannot interpret {value!r} as a connection")

    if not isinstance(nodes, (tuple, list)) or len(nodes) != 2:
        raise InvalidConnectionError(f"Connection must name exactly two vertices, got {nodes!r}")

    a, b = as_vertex(nodes[0]), as_vertex(nodes[1])
    if a.row is Row.BOTTOM and b.row is Row.TOP:
        a, b = b, a
    if own_color is not None:
        validate_color(own_color)
    conn = VerticalConnection(top=a, bottom=b, color=own_color if own_color is not None else color)
    return _check_rows(conn)


def _check_rows(conn: VerticalConnection) -> VerticalConnection:
    if conn.top.row is not Row.TOP or conn.bottom.row is not Row.BOTTOM:
        raise InvalidConnectionError(
            f"Connection must join one top and one bottom vertex, got {conn.top} & {conn.bottom}"
        )
    return conn


def as_pair(value: Any) -> ConnectionPair:
    """
    Coerce a candidate pair to a complete ConnectionPair.

    The second connection adopts the first connection's color; a pair
    with no color at all is returned uncolored for the caller to fill.

    Raises:
        InvalidPairError: If the pair does not hold exactly two connections
    """
    items: Sequence[Any]
    if isinstance(value, ConnectionPair):
        items = value.connections
    elif isinstance(value, Mapping) and "connections" in value:
        items = value["connections"]
    elif isinstance(value, (tuple, list)):
        items = value
    else:
        raise InvalidPairError(f"Cannot interpret {value!r} as a connection pair")

    if len(items) != 2:
        raise InvalidPairError(f"A pair must hold exactly two connections, got {len(items)}")

    try:
        first = as_connection(items[0])
        second = as_connection(items[1], color=first.color)
    except InvalidConnectionError as exc:
        raise InvalidPairError(str(exc)) from exc

    color = first.color if first.color is not None else second.color
    if color is not None:
        first.color = color
        second.color = color
        first.seed_color = first.seed_color or color
        second.seed_color = second.seed_color or color
    return ConnectionPair([first, second])


def validate_vertex_bounds(vertex: Vertex, top_count: int, bottom_count: int) -> Vertex:
    """
    Validate that a vertex exists on a board with the given row sizes.

    Raises:
        InvalidVertexError: If the index is beyond the row
    """
    count = top_count if vertex.row is Row.TOP else bottom_count
    if vertex.index >= count:
        raise InvalidVertexError(
            f"Vertex {vertex} does not exist (row has {count} vertices)"
        )
    return vertex


def validate_color(color: Any) -> str:
    """
    Validate a color value.

    Raises:
        ValidationError: If the color is not a non-empty string
    """
    if not isinstance(color, str) or not color.strip():
        raise ValidationError(f"color must be a non-empty string, got {color!r}")
    return color


def validate_max_history(max_history: Optional[int]) -> Optional[int]:
    """
    Validate the history depth limit.

    Raises:
        ValidationError: If max_history < 1
    """
    if max_history is None:
        return None
    if isinstance(max_history, bool) or not isinstance(max_history, int) or max_history < 1:
        raise ValidationError(f"max_history must be a positive int or None, got {max_history!r}")
    return max_history


def validate_min_girth(min_girth: int) -> int:
    """
    Validate a girth bound.

    Raises:
        ValidationError: If min_girth < 3
    """
    if min_girth < 3:
        raise ValidationError(f"min_girth must be >= 3, got {min_girth}")
    return min_girth


__all__ = [
    "ValidationError",
    "InvalidVertexError",
    "InvalidConnectionError",
    "InvalidPairError",
    "UnknownLevelError",
    "ScenarioError",
    "RuleWarning",
    "as_vertex",
    "parse_edge_id",
    "as_connection",
    "as_pair",
    "validate_vertex_bounds",
    "validate_color",
    "validate_max_history",
    "validate_min_girth",
]
