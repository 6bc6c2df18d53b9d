"""Tests for the pattern log."""

import logging

from taiko_engine.orientation import OrientationMaps, apply_orientation, resolve_orientation
from taiko_engine.pattern_log import (
    PatternLog,
    append_edges,
    clear_log,
    derive_edges,
    rebuild,
    remove_by_pair_id,
)
from taiko_engine.types import ConnectionPair, Orientation, Row, Vertex, VerticalConnection

RED = "#ff0000"
BLUE = "#0000ff"


def t(i):
    return Vertex(Row.TOP, i)


def b(i):
    return Vertex(Row.BOTTOM, i)


def make_pair(first, second, color=RED):
    return ConnectionPair(
        [
            VerticalConnection(t(first[0]), b(first[1]), color),
            VerticalConnection(t(second[0]), b(second[1]), color),
        ]
    )


def board(*pairs):
    """Resolve and record pairs in order; return (pairs, maps, log)."""
    maps = OrientationMaps()
    log = PatternLog()
    for pair in pairs:
        apply_orientation(maps, resolve_orientation(pair, maps))
        append_edges(log, pair.key, derive_edges(pair, maps))
    return list(pairs), maps, log


class TestDeriveEdges:
    """Tests for derive_edges."""

    def test_both_rows(self):
        """A regular pair yields one edge per row."""
        pair = make_pair((0, 0), (1, 1))
        _, maps, _ = board(pair)
        derived = derive_edges(pair, maps)
        assert derived.pair_id == pair.key
        assert derived.top.id == "top-0,top-1"
        assert derived.top.orientation is Orientation.RIGHT
        assert derived.bottom.id == "bottom-0,bottom-1"
        assert len(list(derived)) == 2

    def test_degenerate_row(self):
        """A degenerate row yields no edge."""
        pair = make_pair((0, 0), (1, 0))
        _, maps, _ = board(pair)
        derived = derive_edges(pair, maps)
        assert derived.top is not None
        assert derived.bottom is None

    def test_unset_orientation(self):
        """Rows without an orientation entry yield no edge."""
        derived = derive_edges(make_pair((0, 0), (1, 1)), OrientationMaps())
        assert list(derived) == []

    def test_color_from_second_connection(self):
        """Edge color defaults to the second connection's color."""
        pair = make_pair((0, 0), (1, 1))
        pair.second.color = BLUE
        _, maps, _ = board(make_pair((0, 0), (1, 1)))
        assert derive_edges(pair, maps).top.color == BLUE
        assert derive_edges(pair, maps, color="#123456").top.color == "#123456"


class TestLogMutations:
    """Tests for append, rebuild, remove and clear."""

    def test_append_order(self):
        """Edges are appended in commit order per row."""
        p1 = make_pair((0, 0), (1, 1))
        p2 = make_pair((2, 1), (3, 2))
        _, _, log = board(p1, p2)
        assert [e.id for e in log.top_sequence] == ["top-0,top-1", "top-2,top-3"]
        assert [e.pair_id for e in log.bottom_sequence] == [p1.key, p2.key]
        assert len(log) == 4

    def test_rebuild_matches_incremental(self):
        """Rebuilding from pairs reproduces the incremental log."""
        pairs, maps, log = board(make_pair((0, 0), (1, 1)), make_pair((1, 2), (0, 3)))
        rebuilt = rebuild(PatternLog(), pairs, maps)
        assert rebuilt == log

    def test_rebuild_idempotent(self):
        """Rebuilding twice gives the same log."""
        pairs, maps, log = board(make_pair((0, 0), (1, 1)), make_pair((2, 1), (3, 0)))
        once = rebuild(log.copy(), pairs, maps).copy()
        twice = rebuild(rebuild(log.copy(), pairs, maps), pairs, maps)
        assert once == twice

    def test_rebuild_skips_pending(self):
        """Pending pairs contribute nothing."""
        pairs, maps, _ = board(make_pair((0, 0), (1, 1)))
        pending = ConnectionPair([VerticalConnection(t(5), b(5), RED)])
        log = rebuild(PatternLog(), pairs + [pending], maps)
        assert len(log) == 2

    def test_rebuild_uses_current_colors(self):
        """Rebuilding picks up recolored pairs."""
        pairs, maps, log = board(make_pair((0, 0), (1, 1)))
        pairs[0].set_color(BLUE)
        rebuild(log, pairs, maps)
        assert {edge.color for edge in log.edges()} == {BLUE}

    def test_remove_by_pair_id(self):
        """Removing a pair drops only its edges."""
        p1 = make_pair((0, 0), (1, 1))
        p2 = make_pair((2, 1), (3, 2))
        _, _, log = board(p1, p2)
        assert remove_by_pair_id(log, p1.key) == 2
        assert {edge.pair_id for edge in log.edges()} == {p2.key}

    def test_clear(self):
        """clear_log empties both rows."""
        _, _, log = board(make_pair((0, 0), (1, 1)))
        clear_log(log)
        assert len(log) == 0

    def test_to_dict(self):
        """The log serializes to plain data."""
        _, _, log = board(make_pair((0, 0), (1, 1)))
        data = log.to_dict()
        assert data["top_sequence"][0]["id"] == "top-0,top-1"
        assert data["top_sequence"][0]["orientation"] == "right"

    def test_mutations_log_debug(self, caplog):
        """Every mutation emits a DEBUG record with a summary."""
        with caplog.at_level(logging.DEBUG, logger="taiko_engine.pattern_log"):
            _, _, log = board(make_pair((0, 0), (1, 1)))
            clear_log(log)
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("pattern log append") for m in messages)
        assert any(m.startswith("pattern log clear") for m in messages)
