"""
Level policy.

Each level enforces an ordered tuple of checks. Checks run read-only
against the previewed board and the runner stops at the first failure.

Levels also form a prerequisite graph: a level unlocks once any of its
prerequisites has been completed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from .checks import check_girth, check_no_fold, check_no_pattern
from .graphs import topological_sort
from .orientation import OrientationMaps, OrientationResolution
from .pattern_log import PatternLog
from .validation import UnknownLevelError, validate_min_girth
from .violations import RuleCode, TurnResult, Violation


class CheckKind(Enum):
    """Kind of rule check."""

    ORIENTATION = "orientation"
    NO_FOLD = "no-fold"
    NO_PATTERN = "no-pattern"
    GIRTH = "girth"


@dataclass(frozen=True)
class CheckContext:
    """
    Read-only inputs of the level checks.

    Attributes:
        resolution: Orientation resolution of the candidate pair
        log: Pattern log including the candidate's edges
        maps: Orientation maps including the candidate's new keys
    """

    resolution: Optional[OrientationResolution]
    log: PatternLog
    maps: OrientationMaps


@dataclass(frozen=True)
class CheckSpec:
    """A single check enforced by a level."""

    kind: CheckKind
    min_girth: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind is CheckKind.GIRTH:
            if self.min_girth is None:
                raise ValueError("girth checks need min_girth")
            validate_min_girth(self.min_girth)

    @property
    def code(self) -> RuleCode:
        return _CODES[self.kind]

    @property
    def message(self) -> str:
        if self.kind is CheckKind.GIRTH:
            return f"Girth length should be at least {self.min_girth}!"
        return _MESSAGES[self.kind]

    @property
    def label(self) -> str:
        if self.kind is CheckKind.GIRTH:
            return f"girth({self.min_girth})"
        return self.kind.value

    def run(self, context: CheckContext) -> list[Violation]:
        """Return this check's violations for the context (empty on success)."""
        if self.kind is CheckKind.ORIENTATION:
            if context.resolution is None:
                return []
            return list(context.resolution.violations)
        if self.kind is CheckKind.NO_FOLD:
            return list(check_no_fold(context.log))
        if self.kind is CheckKind.NO_PATTERN:
            return list(check_no_pattern(context.log))
        assert self.min_girth is not None
        return list(check_girth(context.maps, self.min_girth))


_CODES = {
    CheckKind.ORIENTATION: RuleCode.ORIENTATION,
    CheckKind.NO_FOLD: RuleCode.NO_FOLD,
    CheckKind.NO_PATTERN: RuleCode.NO_PATTERN,
    CheckKind.GIRTH: RuleCode.GIRTH,
}

_MESSAGES = {
    CheckKind.ORIENTATION: "Orientation condition failed!",
    CheckKind.NO_FOLD: "No-Fold condition failed!",
    CheckKind.NO_PATTERN: "No-Pattern fails! Check the flashing edges to see your mistake.",
}

ORIENTATION = CheckSpec(CheckKind.ORIENTATION)
NO_FOLD = CheckSpec(CheckKind.NO_FOLD)
NO_PATTERN = CheckSpec(CheckKind.NO_PATTERN)


def girth(min_girth: int) -> CheckSpec:
    return CheckSpec(CheckKind.GIRTH, min_girth=min_girth)


# =============================================================================
# Level Table
# =============================================================================

LEVELS: dict[str, tuple[CheckSpec, ...]] = {
    "Level 1": (),
    "Level 2": (ORIENTATION,),
    "Level 3.NF": (ORIENTATION, NO_FOLD),
    "Level 3.G4": (ORIENTATION, girth(4)),
    "Level 4.NF+NP": (ORIENTATION, NO_FOLD, NO_PATTERN),
    "Level 4.NF+G4": (ORIENTATION, NO_FOLD, girth(4)),
    "Level 4.NF+G6": (ORIENTATION, NO_FOLD, girth(6)),
    "Level 5.NF+NP+G4": (ORIENTATION, NO_FOLD, NO_PATTERN, girth(4)),
    "Level 5.NF+NP+G6": (ORIENTATION, NO_FOLD, NO_PATTERN, girth(6)),
}

LEVEL_ALIASES: dict[str, str] = {
    "Level 3": "Level 3.NF",
    "Level 4NP": "Level 4.NF+NP",
    "Level 4.6": "Level 4.NF+G6",
    "Level 4.G4": "Level 5.NF+NP+G4",
    "Level 5.NP+G4": "Level 5.NF+NP+G4",
    "Level 5.NP+G6": "Level 5.NF+NP+G6",
}

LEVEL_DESCRIPTIONS: dict[str, str] = {
    "Level 1": "Free play: any pair is accepted.",
    "Level 2": "Horizontal edges must be oriented consistently.",
    "Level 3.NF": "Each color may not fold back on itself.",
    "Level 3.G4": "Each row must avoid triangles.",
    "Level 4.NF+NP": "No fold, and no two trios may share a pattern.",
    "Level 4.NF+G4": "No fold, and each row must avoid triangles.",
    "Level 4.NF+G6": "No fold, and each row must avoid cycles shorter than six.",
    "Level 5.NF+NP+G4": "No fold, no repeated pattern and no triangles.",
    "Level 5.NF+NP+G6": "No fold, no repeated pattern and no cycles shorter than six.",
}

LEVEL_PREREQUISITES: dict[str, tuple[str, ...]] = {
    "Level 1": (),
    "Level 2": ("Level 1",),
    "Level 3.NF": ("Level 2",),
    "Level 3.G4": ("Level 2",),
    "Level 4.NF+NP": ("Level 3.NF",),
    "Level 4.NF+G4": ("Level 3.NF", "Level 3.G4"),
    "Level 4.NF+G6": ("Level 3.NF",),
    "Level 5.NF+NP+G4": ("Level 4.NF+NP", "Level 4.NF+G4"),
    "Level 5.NF+NP+G6": ("Level 5.NF+NP+G4",),
}


def canonical_level(level: str) -> str:
    """
    Resolve a level name or legacy alias to its canonical name.

    Raises:
        UnknownLevelError: If the level is not known
    """
    name = LEVEL_ALIASES.get(level, level)
    if name not in LEVELS:
        raise UnknownLevelError(f"Unknown level {level!r}; known levels: {', '.join(LEVELS)}")
    return name


def get_checks_for_level(level: str) -> tuple[CheckSpec, ...]:
    """Get the ordered checks a level enforces."""
    return LEVELS[canonical_level(level)]


def level_enforces(level: str, kind: CheckKind) -> bool:
    return any(spec.kind is kind for spec in get_checks_for_level(level))


def run_level_checks(level: str, context: CheckContext) -> TurnResult:
    """
    Run a level's checks in order.

    Returns:
        TurnResult.success() if every check passes, otherwise the first
        failing check's code, message and violations.

    Raises:
        UnknownLevelError: If the level is not known
    """
    for spec in get_checks_for_level(level):
        violations = spec.run(context)
        if violations:
            return TurnResult.failure(spec.code, spec.message, tuple(violations))
    return TurnResult.success()


# =============================================================================
# Prerequisite Graph
# =============================================================================


def level_graph() -> dict[str, list]:
    """
    Get the prerequisite graph as nodes and edges.

    Returns:
        {"nodes": [{"name", "description", "checks"}], "edges": [{"source", "target"}]}
    """
    nodes = [
        {
            "name": name,
            "description": LEVEL_DESCRIPTIONS[name],
            "checks": [spec.label for spec in specs],
        }
        for name, specs in LEVELS.items()
    ]
    edges = [
        {"source": prereq, "target": name}
        for name, prereqs in LEVEL_PREREQUISITES.items()
        for prereq in prereqs
    ]
    return {"nodes": nodes, "edges": edges}


def level_order() -> list[str]:
    """Canonical levels in prerequisite (topological) order."""
    order = topological_sort(
        list(LEVELS),
        [(p, name) for name, prereqs in LEVEL_PREREQUISITES.items() for p in prereqs],
    )
    if order is None:
        raise RuntimeError("Level prerequisites contain a cycle")
    return order


def unlocked_levels(completed: Iterable[str] = ()) -> list[str]:
    """
    Levels available to a player, in prerequisite order.

    A level is unlocked when it has no prerequisites or when any of its
    prerequisites is in completed (aliases accepted).
    """
    done = {canonical_level(name) for name in completed}
    return [
        name
        for name in level_order()
        if not LEVEL_PREREQUISITES[name] or any(p in done for p in LEVEL_PREREQUISITES[name])
    ]


def describe_level(level: str) -> str:
    """One-line description of a level and the checks it enforces."""
    name = canonical_level(level)
    checks: Sequence[str] = [spec.label for spec in LEVELS[name]] or ["none"]
    return f"{name}: {LEVEL_DESCRIPTIONS[name]} (checks: {', '.join(checks)})"


__all__ = [
    "CheckKind",
    "CheckContext",
    "CheckSpec",
    "LEVELS",
    "LEVEL_ALIASES",
    "LEVEL_DESCRIPTIONS",
    "LEVEL_PREREQUISITES",
    "canonical_level",
    "get_checks_for_level",
    "level_enforces",
    "run_level_checks",
    "level_graph",
    "level_order",
    "unlocked_levels",
    "describe_level",
]
