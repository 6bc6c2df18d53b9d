"""
DOT (Graphviz) export for the pattern log.

Renders the horizontal edges of one row, or of both rows as clusters, as
a directed graph with edges drawn in their pair colors. Useful for
inspecting a board while debugging a scenario.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..pattern_log import PatternLog
from ..types import ROWS, HorizontalEdge, Row, Vertex


def _row_vertices(log: PatternLog, row: Row) -> list[Vertex]:
    vertices: set[Vertex] = set()
    for edge in log.sequence(row):
        vertices.update(edge.vertices)
    return sorted(vertices, key=lambda v: v.index)


def _row_lines(
    log: PatternLog,
    row: Row,
    indent: str,
    get_edge_attrs: Optional[Callable[[HorizontalEdge], Optional[dict[str, str]]]],
) -> list[str]:
    lines: list[str] = []

    for vertex in _row_vertices(log, row):
        lines.append(f"{indent}{_quote_id(str(vertex))}{_format_attrs({'label': str(vertex.index)})};")

    seen: set[tuple[Vertex, Vertex, Optional[str]]] = set()
    for position, edge in enumerate(log.sequence(row)):
        marker = (edge.source, edge.target, edge.color)
        if marker in seen:
            continue
        seen.add(marker)

        edge_data: dict[str, str] = {"label": str(position)}
        if edge.color:
            edge_data["color"] = edge.color
        if get_edge_attrs:
            custom_attrs = get_edge_attrs(edge)
            if custom_attrs:
                edge_data.update(custom_attrs)

        lines.append(
            f"{indent}{_quote_id(str(edge.source))} -> "
            f"{_quote_id(str(edge.target))}{_format_attrs(edge_data)};"
        )

    return lines


def to_dot(
    log: PatternLog,
    row: Row,
    *,
    name: Optional[str] = None,
    graph_attrs: Optional[dict[str, str]] = None,
    get_edge_attrs: Optional[Callable[[HorizontalEdge], Optional[dict[str, str]]]] = None,
) -> str:
    """
    Export one row of a pattern log to DOT format.

    Repeated edges (same endpoints, direction and color) are drawn once;
    edge labels give the position of the first occurrence in the log.

    Args:
        log: Pattern log to render
        row: Row to render
        name: Graph name (default "<row>_row")
        graph_attrs: Additional graph-level attributes
        get_edge_attrs: Callable(edge) -> dict for custom edge attributes

    Returns:
        DOT format string representation of the row graph
    """
    all_graph_attrs: dict[str, str] = {"rankdir": "LR"}
    if graph_attrs:
        all_graph_attrs.update(graph_attrs)

    lines = [f"digraph {_quote_id(name or f'{row.value}_row')} {{"]
    lines.append(_format_attrs_block("graph", all_graph_attrs))
    lines.append(_format_attrs_block("node", {"shape": "circle"}))
    lines.append("")
    lines.extend(_row_lines(log, row, "  ", get_edge_attrs))
    lines.append("}")
    return "\n".join(lines)


def to_dot_board(
    log: PatternLog,
    *,
    name: str = "board",
    get_edge_attrs: Optional[Callable[[HorizontalEdge], Optional[dict[str, str]]]] = None,
) -> str:
    """
    Export both rows of a pattern log, each as a labelled cluster.

    Returns:
        DOT format string representation of the board
    """
    lines = [f"digraph {_quote_id(name)} {{"]
    lines.append(_format_attrs_block("graph", {"rankdir": "LR"}))
    lines.append(_format_attrs_block("node", {"shape": "circle"}))

    for row in ROWS:
        lines.append("")
        lines.append(f"  subgraph {_quote_id(f'cluster_{row.value}')} {{")
        lines.append(f"    label={_quote_id(row.value)};")
        lines.extend(_row_lines(log, row, "    ", get_edge_attrs))
        lines.append("  }")

    lines.append("}")
    return "\n".join(lines)


def _quote_id(s: str) -> str:
    """Quote a DOT identifier if necessary."""
    if not s:
        return '""'

    # Simple identifiers don't need quoting
    if s.isidentifier() or s.isdigit():
        return s

    escaped = s.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _format_attrs(attrs: dict[str, Any]) -> str:
    """Format attributes as DOT attribute list."""
    if not attrs:
        return ""
    return " [" + ", ".join(f"{key}={_quote_id(str(value))}" for key, value in attrs.items()) + "]"


def _format_attrs_block(element: str, attrs: dict[str, str]) -> str:
    """Format a default attributes block."""
    if not attrs:
        return ""
    parts = [f"{key}={_quote_id(value)}" for key, value in attrs.items()]
    return f"  {element} [{', '.join(parts)}];"


__all__ = ["to_dot", "to_dot_board"]
