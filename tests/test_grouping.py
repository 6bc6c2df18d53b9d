"""Tests for color grouping."""

import pytest

from taiko_engine.grouping import ColorGroups, grouping_keys
from taiko_engine.types import ConnectionPair, Row, Vertex, VerticalConnection

RED = "#ff0000"
GREEN = "#00ff00"
BLUE = "#0000ff"


def t(i):
    return Vertex(Row.TOP, i)


def b(i):
    return Vertex(Row.BOTTOM, i)


def make_pair(first, second, color):
    """Build a pair from two (top, bottom) index tuples."""
    return ConnectionPair(
        [
            VerticalConnection(t(first[0]), b(first[1]), color),
            VerticalConnection(t(second[0]), b(second[1]), color),
        ]
    )


def merge_all(groups, pairs):
    committed = {}
    results = []
    for pair in pairs:
        results.append(groups.merge(pair, committed))
        committed[pair.key] = pair
    return committed, results


class TestGroupingKeys:
    """Tests for grouping key extraction."""

    def test_bottom_first(self):
        """The bottom key comes before the top key."""
        pair = make_pair((0, 0), (1, 1), RED)
        assert grouping_keys(pair) == [(b(0), b(1)), (t(0), t(1))]

    def test_degenerate_row_skipped(self):
        """A degenerate row contributes no key."""
        pair = make_pair((0, 0), (1, 0), RED)
        assert grouping_keys(pair) == [(t(0), t(1))]


class TestMerge:
    """Tests for ColorGroups.merge."""

    def test_new_group(self):
        """A pair with no known key starts a group with its own color."""
        groups = ColorGroups()
        pair = make_pair((0, 0), (1, 1), RED)
        result = groups.merge(pair, {})
        assert result.color == RED
        assert result.group_index == 0
        assert result.absorbed == ()
        assert groups.color_of((t(0), t(1))) == RED
        assert groups.color_of((b(0), b(1))) == RED
        assert groups.groups()[0].pair_keys == [pair.key]

    def test_join_existing_group(self):
        """A pair sharing a key joins that group and takes its color."""
        groups = ColorGroups()
        first = make_pair((0, 0), (1, 1), RED)
        second = make_pair((2, 0), (3, 1), BLUE)
        _, results = merge_all(groups, [first, second])

        assert results[1].color == RED
        assert second.color == RED
        assert second.first.seed_color == BLUE
        assert len(groups) == 1
        assert groups.color_of((t(2), t(3))) == RED

    def test_merge_two_groups(self):
        """A bridging pair merges groups; the bottom key's group is canonical."""
        groups = ColorGroups()
        p1 = make_pair((0, 0), (1, 1), RED)
        p2 = make_pair((2, 2), (3, 3), BLUE)
        p3 = make_pair((0, 2), (1, 3), GREEN)
        _, results = merge_all(groups, [p1, p2, p3])
        result = results[2]

        assert result.color == BLUE
        assert result.group_index == 1
        assert result.absorbed == (0,)
        assert result.recolored == (p1.key,)
        assert groups.records[0] is None
        assert len(groups) == 1

    def test_merge_propagates_color_eagerly(self):
        """Every connection of an absorbed pair takes the canonical color."""
        groups = ColorGroups()
        p1 = make_pair((0, 0), (1, 1), RED)
        p2 = make_pair((2, 2), (3, 3), BLUE)
        p3 = make_pair((0, 2), (1, 3), GREEN)
        merge_all(groups, [p1, p2, p3])

        for pair in (p1, p2, p3):
            assert [c.color for c in pair.connections] == [BLUE, BLUE]

    def test_merge_rewrites_key_index(self):
        """Keys of an absorbed group point at the canonical group."""
        groups = ColorGroups()
        merge_all(
            groups,
            [
                make_pair((0, 0), (1, 1), RED),
                make_pair((2, 2), (3, 3), BLUE),
                make_pair((0, 2), (1, 3), GREEN),
            ],
        )
        assert set(groups.key_index.values()) == {1}
        group = groups.group_for((b(0), b(1)))
        assert group is not None
        assert group.color == BLUE
        assert {t(0), t(1), t(2), t(3), b(0), b(1), b(2), b(3)} == group.vertices
        assert len(group.pair_keys) == 3

    def test_union_stability(self):
        """Pairs sharing any key always share one color."""
        groups = ColorGroups()
        pairs = [
            make_pair((0, 0), (1, 1), RED),
            make_pair((2, 2), (3, 3), BLUE),
            make_pair((4, 4), (5, 5), GREEN),
            make_pair((0, 4), (1, 5), RED),
            make_pair((2, 0), (3, 1), GREEN),
        ]
        merge_all(groups, pairs)
        colors = {conn.color for pair in pairs for conn in pair.connections}
        assert len(colors) == 1
        assert len(groups) == 1

    def test_uncolored_pair_raises(self):
        """New groups need a color."""
        groups = ColorGroups()
        with pytest.raises(ValueError, match="uncolored"):
            groups.merge(make_pair((0, 0), (1, 1), None), {})


class TestSimulateMerge:
    """Tests for ColorGroups.simulate_merge."""

    def test_no_mutation(self):
        """Simulating a merge leaves groups and pairs untouched."""
        groups = ColorGroups()
        p1 = make_pair((0, 0), (1, 1), RED)
        p2 = make_pair((2, 2), (3, 3), BLUE)
        committed, _ = merge_all(groups, [p1, p2])
        p3 = make_pair((0, 2), (1, 3), GREEN)

        result = groups.simulate_merge(p3, committed)

        assert result.color == BLUE
        assert result.absorbed == (0,)
        assert p1.color == RED
        assert p3.color == GREEN
        assert len(groups) == 2
        assert groups.color_of((t(0), t(1))) == RED

    def test_copy_is_independent(self):
        """copy() returns groups that do not share records."""
        groups = ColorGroups()
        merge_all(groups, [make_pair((0, 0), (1, 1), RED)])
        clone = groups.copy()
        clone.merge(make_pair((2, 0), (3, 1), BLUE), {})
        assert len(groups.groups()[0].pair_keys) == 1
        assert len(clone.groups()[0].pair_keys) == 2
