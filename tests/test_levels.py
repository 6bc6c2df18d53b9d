"""Tests for the level policy."""

import pytest

from taiko_engine.levels import (
    LEVEL_ALIASES,
    LEVEL_PREREQUISITES,
    LEVELS,
    CheckContext,
    CheckKind,
    CheckSpec,
    canonical_level,
    describe_level,
    get_checks_for_level,
    level_enforces,
    level_graph,
    level_order,
    run_level_checks,
    unlocked_levels,
)
from taiko_engine.orientation import OrientationMaps, resolve_orientation
from taiko_engine.pattern_log import PatternLog
from taiko_engine.types import (
    ConnectionPair,
    HorizontalEdge,
    Orientation,
    Row,
    Vertex,
    VerticalConnection,
    combination_key,
)
from taiko_engine.validation import UnknownLevelError
from taiko_engine.violations import RuleCode

RED = "#ff0000"


def t(i):
    return Vertex(Row.TOP, i)


def b(i):
    return Vertex(Row.BOTTOM, i)


def arc(start, end, color=RED):
    return HorizontalEdge(
        row=start.row,
        vertices=combination_key(start, end),
        color=color,
        orientation=Orientation.between(start, end),
    )


def folded_log():
    log = PatternLog()
    log.top_sequence.extend([arc(t(0), t(1)), arc(t(0), t(2))])
    return log


def triangle_maps():
    maps = OrientationMaps()
    for a, c in [(b(0), b(1)), (b(1), b(2)), (b(0), b(2))]:
        maps.bottom[combination_key(a, c)] = Orientation.RIGHT
    return maps


def conflicting_resolution():
    maps = OrientationMaps()
    maps.top[(t(0), t(1))] = Orientation.RIGHT
    maps.bottom[(b(0), b(1))] = Orientation.RIGHT
    pair = ConnectionPair(
        [VerticalConnection(t(1), b(0), RED), VerticalConnection(t(0), b(1), RED)]
    )
    return resolve_orientation(pair, maps)


class TestLevelTable:
    """Tests for the level table and aliases."""

    def test_check_lists(self):
        """Each level enforces its documented checks in order."""
        labels = {name: [spec.label for spec in specs] for name, specs in LEVELS.items()}
        assert labels["Level 1"] == []
        assert labels["Level 2"] == ["orientation"]
        assert labels["Level 3.NF"] == ["orientation", "no-fold"]
        assert labels["Level 3.G4"] == ["orientation", "girth(4)"]
        assert labels["Level 4.NF+NP"] == ["orientation", "no-fold", "no-pattern"]
        assert labels["Level 4.NF+G4"] == ["orientation", "no-fold", "girth(4)"]
        assert labels["Level 4.NF+G6"] == ["orientation", "no-fold", "girth(6)"]
        assert labels["Level 5.NF+NP+G4"] == ["orientation", "no-fold", "no-pattern", "girth(4)"]
        assert labels["Level 5.NF+NP+G6"] == ["orientation", "no-fold", "no-pattern", "girth(6)"]

    @pytest.mark.parametrize(
        "alias,target",
        [
            ("Level 3", "Level 3.NF"),
            ("Level 4NP", "Level 4.NF+NP"),
            ("Level 4.6", "Level 4.NF+G6"),
            ("Level 4.G4", "Level 5.NF+NP+G4"),
            ("Level 5.NP+G4", "Level 5.NF+NP+G4"),
            ("Level 5.NP+G6", "Level 5.NF+NP+G6"),
        ],
    )
    def test_aliases(self, alias, target):
        """Legacy names resolve to canonical levels."""
        assert canonical_level(alias) == target
        assert get_checks_for_level(alias) == LEVELS[target]

    def test_aliases_target_known_levels(self):
        """Every alias points at a level in the table."""
        assert set(LEVEL_ALIASES.values()) <= set(LEVELS)

    def test_unknown_level(self):
        """Unknown names raise UnknownLevelError."""
        with pytest.raises(UnknownLevelError, match="Level 9"):
            get_checks_for_level("Level 9")

    def test_level_enforces(self):
        """level_enforces reports whether a level runs a check kind."""
        assert not level_enforces("Level 1", CheckKind.ORIENTATION)
        assert level_enforces("Level 2", CheckKind.ORIENTATION)
        assert level_enforces("Level 4.6", CheckKind.GIRTH)

    def test_girth_spec_needs_bound(self):
        """A girth check without a bound is a programming error."""
        with pytest.raises(ValueError):
            CheckSpec(CheckKind.GIRTH)


class TestRunLevelChecks:
    """Tests for run_level_checks."""

    def test_level_one_accepts_anything(self):
        """Level 1 has no checks."""
        context = CheckContext(conflicting_resolution(), folded_log(), triangle_maps())
        assert run_level_checks("Level 1", context).ok

    def test_orientation_failure(self):
        """Orientation violations come from the resolution."""
        context = CheckContext(conflicting_resolution(), PatternLog(), OrientationMaps())
        result = run_level_checks("Level 2", context)
        assert not result.ok
        assert result.code is RuleCode.ORIENTATION
        assert result.message == "Orientation condition failed!"
        assert result.violations[0].kind == "conflict"

    def test_no_fold_failure(self):
        """No-fold failures carry their message."""
        context = CheckContext(None, folded_log(), OrientationMaps())
        result = run_level_checks("Level 3.NF", context)
        assert result.code is RuleCode.NO_FOLD
        assert result.message == "No-Fold condition failed!"

    def test_no_pattern_failure(self):
        """No-pattern failures carry their message."""
        log = PatternLog()
        log.top_sequence.extend([arc(t(0), t(1)), arc(t(1), t(2)), arc(t(2), t(3))])
        result = run_level_checks("Level 4.NF+NP", CheckContext(None, log, OrientationMaps()))
        assert result.code is RuleCode.NO_PATTERN
        assert result.message == "No-Pattern fails! Check the flashing edges to see your mistake."

    def test_girth_failure(self):
        """Girth failures name the bound."""
        context = CheckContext(None, PatternLog(), triangle_maps())
        result = run_level_checks("Level 3.G4", context)
        assert result.code is RuleCode.GIRTH
        assert result.message == "Girth length should be at least 4!"

    def test_first_failure_wins(self):
        """Checks stop at the first failure, in level order."""
        context = CheckContext(conflicting_resolution(), folded_log(), triangle_maps())
        result = run_level_checks("Level 5.NF+NP+G4", context)
        assert result.code is RuleCode.ORIENTATION

    def test_girth_six_message(self):
        """The girth bound shows up in the message."""
        context = CheckContext(None, PatternLog(), triangle_maps())
        assert run_level_checks("Level 4.6", context).message == "Girth length should be at least 6!"


class TestPrerequisites:
    """Tests for the level prerequisite graph."""

    def test_every_level_has_prerequisites_entry(self):
        """The prerequisite table covers every level."""
        assert set(LEVEL_PREREQUISITES) == set(LEVELS)

    def test_level_order(self):
        """Levels sort with every prerequisite first."""
        order = level_order()
        assert order[0] == "Level 1"
        assert order[-1] == "Level 5.NF+NP+G6"
        for name, prereqs in LEVEL_PREREQUISITES.items():
            for prereq in prereqs:
                assert order.index(prereq) < order.index(name)

    def test_unlocked_initially(self):
        """Only the first level is open at the start."""
        assert unlocked_levels() == ["Level 1"]

    def test_unlock_any_prerequisite(self):
        """Completing any prerequisite unlocks a level."""
        unlocked = unlocked_levels(["Level 1", "Level 2", "Level 3.G4"])
        assert "Level 4.NF+G4" in unlocked
        assert "Level 4.NF+NP" not in unlocked

    def test_unlock_accepts_aliases(self):
        """Completed levels may be given by legacy name."""
        assert "Level 4.NF+NP" in unlocked_levels(["Level 3"])

    def test_level_graph(self):
        """The graph lists every level and prerequisite edge."""
        graph = level_graph()
        assert len(graph["nodes"]) == len(LEVELS)
        assert {"source": "Level 2", "target": "Level 3.G4"} in graph["edges"]
        assert len(graph["edges"]) == sum(len(p) for p in LEVEL_PREREQUISITES.values())

    def test_describe_level(self):
        """Descriptions name the level and its checks."""
        text = describe_level("Level 4.6")
        assert text.startswith("Level 4.NF+G6:")
        assert "girth(6)" in text
        assert describe_level("Level 1").endswith("(checks: none)")
