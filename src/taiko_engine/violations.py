"""
Player-facing rule outcomes.

Violations are recoverable: the engine reports them inside a TurnResult
and refuses the candidate pair. Each record carries enough structure
(edge ids, vertices, colors, orientations, rows) for a UI to highlight
the offending edges.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from .types import HorizontalEdge, Row, Trio, Vertex


class RuleCode(Enum):
    """Failure category of a turn."""

    ORIENTATION = "ORIENTATION"
    NO_FOLD = "NO_FOLD"
    NO_PATTERN = "NO_PATTERN"
    GIRTH = "GIRTH"
    CONNECTION = "CONNECTION"


@dataclass(frozen=True)
class OrientationViolation:
    """
    Conflicting or cyclic direction assignment.

    kind is "conflict" when the pair's two rows require opposite senses,
    or "cycle" when the new direction closes a short directed cycle.
    """

    kind: str
    edges: tuple[HorizontalEdge, ...]
    row: Optional[Row] = None
    cycle: tuple[Vertex, ...] = ()

    code: ClassVar[RuleCode] = RuleCode.ORIENTATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "type": self.kind,
            "sequence": self.row.value if self.row else None,
            "cycle": [str(v) for v in self.cycle],
            "edges": [edge.to_dict() for edge in self.edges],
        }


@dataclass(frozen=True)
class FoldViolation:
    """
    A color's horizontal subgraph stops being a partial function.

    kind is one of "multiple-outgoing", "multiple-incoming" or "two-cycle";
    edges holds the earlier edge first, then the conflicting one.
    """

    kind: str
    row: Row
    color: Optional[str]
    vertex: Vertex
    edges: tuple[HorizontalEdge, HorizontalEdge]

    code: ClassVar[RuleCode] = RuleCode.NO_FOLD

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "type": self.kind,
            "sequence": self.row.value,
            "color": self.color,
            "vertex": str(self.vertex),
            "edges": [edge.to_dict() for edge in self.edges],
        }


@dataclass(frozen=True)
class PatternViolation:
    """Two distinct trios share one signature."""

    signature: str
    trio: Trio
    conflicting: Trio

    code: ClassVar[RuleCode] = RuleCode.NO_PATTERN

    @property
    def edges(self) -> tuple[HorizontalEdge, ...]:
        return self.conflicting.edges + self.trio.edges

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "type": "duplicate-signature",
            "signature": self.signature,
            "trio": self.trio.to_dict(),
            "conflicting": self.conflicting.to_dict(),
            "edges": [edge.to_dict() for edge in self.edges],
        }


@dataclass(frozen=True)
class GirthViolation:
    """A row graph contains a cycle shorter than the level bound."""

    row: Row
    cycle: tuple[Vertex, ...]
    min_girth: int

    code: ClassVar[RuleCode] = RuleCode.GIRTH

    @property
    def length(self) -> int:
        return len(self.cycle)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "type": "short-cycle",
            "sequence": self.row.value,
            "cycle": [str(v) for v in self.cycle],
            "length": self.length,
            "min_girth": self.min_girth,
        }


Violation = Union[OrientationViolation, FoldViolation, PatternViolation, GirthViolation]


@dataclass(frozen=True)
class TurnResult:
    """
    Verdict of one engine action.

    Attributes:
        ok: True if the action committed (or was an accepted no-op)
        code: Failure category when ok is False
        message: Human readable summary
        violations: Every violation found by the failing check
    """

    ok: bool
    code: Optional[RuleCode] = None
    message: Optional[str] = None
    violations: tuple[Violation, ...] = ()

    @classmethod
    def success(cls, message: Optional[str] = None) -> TurnResult:
        return cls(ok=True, message=message)

    @classmethod
    def failure(
        cls,
        code: RuleCode,
        message: str,
        violations: tuple[Violation, ...] = (),
    ) -> TurnResult:
        return cls(ok=False, code=code, message=message, violations=tuple(violations))

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "code": self.code.value if self.code else None,
            "message": self.message,
            "violations": [v.to_dict() for v in self.violations],
        }


__all__ = [
    "RuleCode",
    "OrientationViolation",
    "FoldViolation",
    "PatternViolation",
    "GirthViolation",
    "Violation",
    "TurnResult",
]
