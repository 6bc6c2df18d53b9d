"""Tests for DOT export of the pattern log."""

import pytest

from taiko_engine.export import to_dot, to_dot_board
from taiko_engine.pattern_log import PatternLog
from taiko_engine.types import HorizontalEdge, Orientation, Row, Vertex, combination_key

RED = "#ff0000"

# =============================================================================
# Fixtures
# =============================================================================


def arc(row, start, end, color=RED):
    a, b = Vertex(row, start), Vertex(row, end)
    return HorizontalEdge(
        row=row,
        vertices=combination_key(a, b),
        color=color,
        orientation=Orientation.between(a, b),
    )


@pytest.fixture
def log():
    """Top path 0 -> 1 <- 2 and one bottom edge, with a repeat."""
    result = PatternLog()
    result.top_sequence.extend(
        [arc(Row.TOP, 0, 1), arc(Row.TOP, 2, 1, "#00ff00"), arc(Row.TOP, 0, 1)]
    )
    result.bottom_sequence.append(arc(Row.BOTTOM, 1, 0))
    return result


# =============================================================================
# Single row
# =============================================================================


class TestToDot:
    """Tests for to_dot."""

    def test_header_and_defaults(self, log):
        """Graphs are named after the row and laid out left to right."""
        dot = to_dot(log, Row.TOP)
        lines = dot.splitlines()
        assert lines[0] == "digraph top_row {"
        assert "  graph [rankdir=LR];" in lines
        assert "  node [shape=circle];" in lines
        assert lines[-1] == "}"

    def test_nodes(self, log):
        """Every vertex on a row edge becomes a labelled node."""
        dot = to_dot(log, Row.TOP)
        assert '  "top-0" [label=0];' in dot
        assert '  "top-2" [label=2];' in dot
        assert "bottom-0" not in dot

    def test_edges_follow_orientation(self, log):
        """Edges run from source to target in their pair color."""
        dot = to_dot(log, Row.TOP)
        assert '  "top-0" -> "top-1" [label=0, color="#ff0000"];' in dot
        assert '  "top-2" -> "top-1" [label=1, color="#00ff00"];' in dot

    def test_repeated_edges_drawn_once(self, log):
        """A repeated edge keeps its first position."""
        dot = to_dot(log, Row.TOP)
        assert dot.count('"top-0" -> "top-1"') == 1

    def test_custom_name_and_attrs(self, log):
        """Names, graph attributes and edge attributes can be customised."""
        dot = to_dot(
            log,
            Row.BOTTOM,
            name="my graph",
            graph_attrs={"rankdir": "TB"},
            get_edge_attrs=lambda edge: {"style": "dashed"},
        )
        assert dot.startswith('digraph "my graph" {')
        assert "rankdir=TB" in dot
        assert 'style=dashed' in dot
        assert '"bottom-1" -> "bottom-0"' in dot

    def test_empty_log(self):
        """An empty log gives an empty graph."""
        dot = to_dot(PatternLog(), Row.TOP)
        assert "->" not in dot


# =============================================================================
# Whole board
# =============================================================================


class TestToDotBoard:
    """Tests for to_dot_board."""

    def test_clusters(self, log):
        """Each row is its own cluster."""
        dot = to_dot_board(log)
        assert dot.startswith("digraph board {")
        assert "  subgraph cluster_top {" in dot
        assert "  subgraph cluster_bottom {" in dot
        assert "    label=top;" in dot
        assert dot.index("cluster_top") < dot.index("cluster_bottom")

    def test_edges_indented_in_clusters(self, log):
        """Cluster contents are indented one level deeper."""
        dot = to_dot_board(log)
        assert '    "bottom-1" -> "bottom-0" [label=0, color="#ff0000"];' in dot
