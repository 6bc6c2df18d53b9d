"""Tests for the girth check."""

import pytest

from taiko_engine.checks import check_girth
from taiko_engine.orientation import OrientationMaps
from taiko_engine.types import Orientation, Row, Vertex, combination_key
from taiko_engine.validation import ValidationError


def t(i):
    return Vertex(Row.TOP, i)


def b(i):
    return Vertex(Row.BOTTOM, i)


def make_maps(*pairs):
    """Orientation maps with an entry for every (a, b) vertex pair."""
    maps = OrientationMaps()
    for a, c in pairs:
        maps.for_row(a.row)[combination_key(a, c)] = Orientation.RIGHT
    return maps


def ring(vertex, n):
    return [(vertex(i), vertex((i + 1) % n)) for i in range(n)]


class TestGirth:
    """Tests for check_girth."""

    def test_forest_passes(self):
        """Rows without cycles pass any bound."""
        maps = make_maps((t(0), t(1)), (t(1), t(2)), (b(0), b(3)))
        assert check_girth(maps, 6) == []

    def test_triangle_fails_girth_four(self):
        """A triangle is shorter than four."""
        (violation,) = check_girth(make_maps(*ring(b, 3)), 4)
        assert violation.row is Row.BOTTOM
        assert violation.length == 3
        assert set(violation.cycle) == {b(0), b(1), b(2)}
        assert violation.min_girth == 4

    def test_square_passes_girth_four(self):
        """A 4-cycle meets a bound of four."""
        assert check_girth(make_maps(*ring(t, 4)), 4) == []

    def test_square_fails_girth_six(self):
        """A 4-cycle is shorter than six."""
        (violation,) = check_girth(make_maps(*ring(t, 4)), 6)
        assert violation.length == 4
        assert violation.row is Row.TOP

    def test_pentagon_fails_girth_six(self):
        """A 5-cycle is shorter than six."""
        assert len(check_girth(make_maps(*ring(t, 5)), 6)) == 1

    def test_hexagon_passes_girth_six(self):
        """A 6-cycle meets a bound of six."""
        assert check_girth(make_maps(*ring(t, 6)), 6) == []

    def test_direction_ignored(self):
        """Orientation does not matter for girth."""
        maps = make_maps(*ring(b, 3))
        maps.bottom[(b(0), b(1))] = Orientation.LEFT
        assert len(check_girth(maps, 4)) == 1

    def test_both_rows_reported(self):
        """Short cycles in each row are reported, top first."""
        maps = make_maps(*ring(t, 3), *ring(b, 3))
        violations = check_girth(maps, 4)
        assert [v.row for v in violations] == [Row.TOP, Row.BOTTOM]

    def test_to_dict(self):
        """Violations serialize to plain data."""
        data = check_girth(make_maps(*ring(b, 3)), 4)[0].to_dict()
        assert data["code"] == "GIRTH"
        assert data["length"] == 3
        assert data["sequence"] == "bottom"

    def test_invalid_bound(self):
        """Bounds below three are rejected."""
        with pytest.raises(ValidationError):
            check_girth(OrientationMaps(), 2)
