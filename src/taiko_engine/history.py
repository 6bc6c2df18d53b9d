"""
Undo history.

Snapshots hold deep copies of the primary board data. The pattern log and
the processed-pair keys are derived, so they are rebuilt on restore
instead of being stored.
"""

from __future__ import annotations

import copy
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from .grouping import ColorGroups
from .orientation import OrientationMaps
from .pattern_log import PatternLog, rebuild
from .state import BoardState
from .types import ConnectionPair, VerticalConnection
from .validation import validate_max_history


@dataclass
class HistorySnapshot:
    """Deep copy of the board's primary data."""

    top_count: int
    bottom_count: int
    connections: list[VerticalConnection] = field(default_factory=list)
    pairs: list[ConnectionPair] = field(default_factory=list)
    pending: Optional[ConnectionPair] = None
    groups: ColorGroups = field(default_factory=ColorGroups)
    orientations: OrientationMaps = field(default_factory=OrientationMaps)
    color_index: int = 0

    @classmethod
    def capture(cls, state: BoardState) -> HistorySnapshot:
        """Snapshot a board state (copied in one pass so shared connections stay shared)."""
        connections, pairs, pending, groups, orientations = copy.deepcopy(
            (state.connections, state.pairs, state.pending, state.groups, state.orientations)
        )
        return cls(
            top_count=state.top_count,
            bottom_count=state.bottom_count,
            connections=connections,
            pairs=pairs,
            pending=pending,
            groups=groups,
            orientations=orientations,
            color_index=state.color_index,
        )

    def restore(self) -> BoardState:
        """Build a fresh board state from this snapshot; the snapshot is left intact."""
        snapshot = copy.deepcopy(self)
        state = BoardState(
            top_count=snapshot.top_count,
            bottom_count=snapshot.bottom_count,
            connections=snapshot.connections,
            pairs=snapshot.pairs,
            pending=snapshot.pending,
            groups=snapshot.groups,
            orientations=snapshot.orientations,
            pattern_log=PatternLog(),
            color_index=snapshot.color_index,
        )
        rebuild(state.pattern_log, state.pairs, state.orientations)
        state.processed = {pair.key for pair in state.pairs if pair.is_complete}
        return state


class History:
    """
    Bounded stack of snapshots.

    When max_history is set, pushing past the limit drops the oldest entry.
    """

    def __init__(self, max_history: Optional[int] = None) -> None:
        self._max_history = validate_max_history(max_history)
        self._stack: deque[HistorySnapshot] = deque(maxlen=self._max_history)

    @property
    def max_history(self) -> Optional[int]:
        return self._max_history

    def push(self, snapshot: HistorySnapshot) -> None:
        self._stack.append(snapshot)

    def pop(self) -> Optional[HistorySnapshot]:
        """Remove and return the newest snapshot, or None when empty."""
        if not self._stack:
            return None
        return self._stack.pop()

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)


__all__ = ["HistorySnapshot", "History"]
