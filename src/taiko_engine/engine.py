"""
Puzzle engine: the turn protocol.

The engine owns the board state. Every turn is evaluated on a deep clone
of the board (the preview): connections are added, orientation resolved
and applied, colors merged, the pattern log updated and the level checks
run. The preview replaces the board only when every check passes, so a
rejected turn leaves no trace.
"""

from __future__ import annotations

import logging
import warnings
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Optional, TypedDict, Union

if TYPE_CHECKING:
    from typing_extensions import Self

from .grouping import ColorGroup
from .history import History, HistorySnapshot
from .levels import CheckContext, CheckKind, canonical_level, level_enforces, run_level_checks
from .orientation import OrientationMaps, apply_orientation, resolve_orientation
from .palette import ColorPalette
from .pattern_log import PatternLog, append_edges, derive_edges, rebuild
from .serialize import snapshot_from_dict, snapshot_to_dict
from .state import BoardState
from .types import (
    CombinationKey,
    ConnectionPair,
    Orientation,
    Row,
    VerticalConnection,
    combination_key,
    edge_id,
)
from .validation import (
    InvalidPairError,
    InvalidVertexError,
    RuleWarning,
    as_connection,
    as_pair,
    as_vertex,
    parse_edge_id,
    validate_vertex_bounds,
)
from .violations import RuleCode, TurnResult

logger = logging.getLogger(__name__)

MSG_ALREADY_PROCESSED = "Pair already processed."
MSG_SAME_ROW = "Can't connect two vertices from the same row."
MSG_ALREADY_CONNECTED = "These vertices are already connected."
MSG_SHARED_VERTEX = "Two vertical edges in each pair should not share a common vertex"


class EngineEventType(IntEnum):
    """
    Engine lifecycle events.

    - commit: A turn was accepted and the board changed
    - reject: A turn failed a check; the board is unchanged
    - undo: The board was restored from history
    - reset: The board and history were cleared
    """

    commit = 0
    reject = 1
    undo = 2
    reset = 3


class EngineEvent(TypedDict, total=False):
    """Event payload passed to engine listeners."""

    type: EngineEventType
    level: Optional[str]
    result: Optional[TurnResult]
    pair_id: Optional[str]


EventCallback = Callable[[EngineEvent], None]


class PuzzleEngine:
    """
    Incremental validator for the two-row matching puzzle.

    Example:
        engine = PuzzleEngine()
        result = engine.submit_pair([("top-0", "bottom-0"), ("top-1", "bottom-0")], "Level 2")
        if not result:
            print(result.message)
        engine.undo()
    """

    def __init__(
        self,
        *,
        enforce_row_bounds: bool = True,
        palette: Optional[ColorPalette] = None,
        max_history: Optional[int] = None,
        on_commit: Optional[EventCallback] = None,
        on_reject: Optional[EventCallback] = None,
        on_undo: Optional[EventCallback] = None,
        on_reset: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize an empty board.

        Args:
            enforce_row_bounds: Reject vertices beyond the current row sizes
            palette: Color source for pairs submitted without a color
            max_history: Keep at most this many undo snapshots (None: unbounded)
            on_commit: Callback for commit events
            on_reject: Callback for reject events
            on_undo: Callback for undo events
            on_reset: Callback for reset events

        Raises:
            ValidationError: If max_history is not a positive int
        """
        self._state = BoardState()
        self._history = History(max_history)
        self._palette = palette if palette is not None else ColorPalette()
        self._enforce_row_bounds = enforce_row_bounds
        self._events: dict[EngineEventType, EventCallback] = {}

        if on_commit:
            self._events[EngineEventType.commit] = on_commit
        if on_reject:
            self._events[EngineEventType.reject] = on_reject
        if on_undo:
            self._events[EngineEventType.undo] = on_undo
        if on_reset:
            self._events[EngineEventType.reset] = on_reset

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: Union[EngineEventType, str], callback: EventCallback) -> Self:
        """
        Subscribe to an engine event.

        Args:
            event: Event type (EngineEventType enum or string name)
            callback: Function to call when the event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EngineEventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: EngineEvent) -> None:
        """Call the callback registered for the event's type, if any."""
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def submit_pair(self, candidate_pair: Any, level: str) -> TurnResult:
        """
        Validate a complete pair and commit it if every level check passes.

        Args:
            candidate_pair: ConnectionPair or a sequence of two connections
            level: Level name (legacy aliases accepted)

        Returns:
            TurnResult; on failure the board is unchanged.

        Raises:
            UnknownLevelError: If the level is not known
            InvalidPairError: If the pair is malformed or a connection is pending
            InvalidVertexError: If row bounds are enforced and a vertex is missing
        """
        name = canonical_level(level)
        pair = self._prepare_pair(candidate_pair)
        if pair.key in self._state.processed:
            return TurnResult.success(MSG_ALREADY_PROCESSED)

        preview = self._state.clone()
        result = self._run_turn(preview, pair, name, pair.connections)
        if result.ok:
            self._commit(preview, name, pair.key, result)
        else:
            self._reject(name, pair.key, result)
        return result

    def preview(self, candidate_pair: Any, level: str) -> TurnResult:
        """
        Dry-run submit_pair: report the verdict without changing anything.

        Raises:
            Same as submit_pair.
        """
        name = canonical_level(level)
        pair = self._prepare_pair(candidate_pair)
        if pair.key in self._state.processed:
            return TurnResult.success(MSG_ALREADY_PROCESSED)
        return self._run_turn(self._state.clone(), pair, name, pair.connections)

    def connect(self, vertex_a: Any, vertex_b: Any, level: str) -> TurnResult:
        """
        Add one connection through the two-step player protocol.

        The first call opens a pending pair with a palette color. The second
        call completes the pair and evaluates it like submit_pair; if that
        fails, the pair stays pending.

        Args:
            vertex_a: One endpoint (Vertex, "top-0", or (row, index))
            vertex_b: The other endpoint
            level: Level name (legacy aliases accepted)

        Returns:
            TurnResult; player mistakes are reported with code CONNECTION.

        Raises:
            UnknownLevelError: If the level is not known
            InvalidVertexError: If a vertex is malformed or out of bounds
        """
        name = canonical_level(level)
        a, b = as_vertex(vertex_a), as_vertex(vertex_b)
        if a.row is b.row:
            return self._connection_failure(name, MSG_SAME_ROW)

        conn = as_connection((a, b))
        state = self._state
        self._check_bounds(conn, state)
        if state.has_connection(conn):
            return self._connection_failure(name, MSG_ALREADY_CONNECTED)

        if state.pending is None:
            opened = state.clone()
            color, opened.color_index = self._palette.next_color(
                opened.color_index, opened.used_colors()
            )
            conn.color = conn.seed_color = color
            opened.add_connection(conn)
            opened.pending = ConnectionPair([conn])
            self._history.push(HistorySnapshot.capture(state))
            self._state = opened
            logger.info("opened pair at %s with color %s", conn.node_key(), color)
            return TurnResult.success()

        if conn.shares_vertex(state.pending.first):
            return self._connection_failure(name, MSG_SHARED_VERTEX)

        preview = state.clone()
        pair = preview.pending
        assert pair is not None
        conn.color = conn.seed_color = pair.first.color
        pair.connections.append(conn)
        preview.pending = None

        result = self._run_turn(preview, pair, name, [conn])
        if result.ok:
            self._commit(preview, name, pair.key, result)
        else:
            self._reject(name, pair.key, result)
        return result

    def undo(self) -> None:
        """Restore the board before the last committed action (no-op if none)."""
        snapshot = self._history.pop()
        if snapshot is None:
            return
        self._state = snapshot.restore()
        logger.info("undo: %d pairs remain", len(self._state.pairs))
        self.trigger({"type": EngineEventType.undo, "level": None, "result": None, "pair_id": None})

    def reset(self) -> None:
        """Clear the board and the history."""
        self._state = BoardState()
        self._history.clear()
        logger.info("board reset")
        self.trigger({"type": EngineEventType.reset, "level": None, "result": None, "pair_id": None})

    # -------------------------------------------------------------------------
    # Turn Internals
    # -------------------------------------------------------------------------

    def _prepare_pair(self, candidate_pair: Any) -> ConnectionPair:
        if self._state.pending is not None:
            raise InvalidPairError("Cannot submit a pair while a connection is pending")
        return as_pair(candidate_pair)

    def _check_bounds(self, conn: VerticalConnection, state: BoardState) -> None:
        if not self._enforce_row_bounds:
            return
        for vertex in conn.nodes:
            validate_vertex_bounds(vertex, state.top_count, state.bottom_count)

    def _run_turn(
        self,
        preview: BoardState,
        pair: ConnectionPair,
        level: str,
        new_connections: Iterable[VerticalConnection],
    ) -> TurnResult:
        """Apply a complete pair to the preview and run the level checks on it."""
        if pair.first.color is None:
            color, preview.color_index = self._palette.next_color(
                preview.color_index, preview.used_colors()
            )
            for conn in pair.connections:
                conn.color = conn.seed_color = color

        for conn in new_connections:
            self._check_bounds(conn, preview)
            if preview.has_connection(conn):
                return TurnResult.failure(RuleCode.CONNECTION, MSG_ALREADY_CONNECTED)
            preview.add_connection(conn)

        enforce_orientation = level_enforces(level, CheckKind.ORIENTATION)
        resolution = resolve_orientation(
            pair,
            preview.orientations,
            check_cycles=enforce_orientation,
            color_of=preview.groups.color_of,
        )
        if not resolution.ok and not enforce_orientation:
            ids = ", ".join(edge.id for v in resolution.violations for edge in v.edges)
            warnings.warn(
                f"{level} does not enforce orientation; keeping stored orientation for {ids}",
                RuleWarning,
                stacklevel=3,
            )
        apply_orientation(preview.orientations, resolution)

        pairs_by_key = preview.pairs_by_key()
        preview.pairs.append(pair)
        preview.processed.add(pair.key)
        merge = preview.groups.merge(pair, pairs_by_key)

        if merge.absorbed:
            rebuild(preview.pattern_log, preview.pairs, preview.orientations)
        else:
            append_edges(preview.pattern_log, pair.key, derive_edges(pair, preview.orientations))

        context = CheckContext(
            resolution=resolution,
            log=preview.pattern_log,
            maps=preview.orientations,
        )
        return run_level_checks(level, context)

    def _commit(self, preview: BoardState, level: str, pair_id: str, result: TurnResult) -> None:
        self._history.push(HistorySnapshot.capture(self._state))
        self._state = preview
        logger.info("committed %s at %s (%d pairs)", pair_id, level, len(preview.pairs))
        self.trigger(
            {"type": EngineEventType.commit, "level": level, "result": result, "pair_id": pair_id}
        )

    def _reject(self, level: str, pair_id: Optional[str], result: TurnResult) -> None:
        logger.info("rejected %s at %s: %s", pair_id, level, result.message)
        self.trigger(
            {"type": EngineEventType.reject, "level": level, "result": result, "pair_id": pair_id}
        )

    def _connection_failure(self, level: str, message: str) -> TurnResult:
        result = TurnResult.failure(RuleCode.CONNECTION, message)
        self._reject(level, None, result)
        return result

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def top_row_count(self) -> int:
        return self._state.top_count

    @property
    def bottom_row_count(self) -> int:
        return self._state.bottom_count

    @property
    def row_counts(self) -> tuple[int, int]:
        """(top, bottom) row sizes."""
        return (self._state.top_count, self._state.bottom_count)

    @property
    def color_groups(self) -> list[ColorGroup]:
        """Copies of the live color groups."""
        return self._state.groups.copy().groups()

    @property
    def orientations(self) -> OrientationMaps:
        return self._state.orientations.copy()

    def orientation(
        self,
        row_or_key: Union[Row, str, CombinationKey],
        key: Union[str, CombinationKey, None] = None,
    ) -> Optional[Orientation]:
        """
        Look up a stored orientation.

        Accepts either an edge id / combination key alone (the row is taken
        from its vertices) or a row followed by a key.

        Example:
            engine.orientation("top-0,top-1")
            engine.orientation(Row.TOP, "top-0,top-1")
        """
        if key is None:
            if isinstance(row_or_key, Row):
                raise InvalidVertexError(f"A key is required after row {row_or_key.value!r}")
            combo = self._as_key(row_or_key)
            return self._state.orientations.get(combo[0].row, combo)
        try:
            row = row_or_key if isinstance(row_or_key, Row) else Row(row_or_key)
        except ValueError:
            raise InvalidVertexError(f"Unknown row {row_or_key!r}") from None
        combo = self._as_key(key)
        if combo[0].row is not row:
            return None
        return self._state.orientations.get(row, combo)

    @staticmethod
    def _as_key(value: Any) -> CombinationKey:
        if isinstance(value, str):
            return parse_edge_id(value)
        try:
            first, second = value
        except (TypeError, ValueError):
            raise InvalidVertexError(f"Not a combination key: {value!r}") from None
        a, b = as_vertex(first), as_vertex(second)
        combo = combination_key(a, b)
        if combo is None or a.row is not b.row:
            raise InvalidVertexError(f"Not a combination key: {value!r}")
        return combo

    @property
    def pattern_log(self) -> PatternLog:
        return self._state.pattern_log.copy()

    @property
    def connections(self) -> list[VerticalConnection]:
        return self._state.clone().connections

    @property
    def pairs(self) -> list[ConnectionPair]:
        return self._state.clone().pairs

    @property
    def pending(self) -> Optional[ConnectionPair]:
        return self._state.clone().pending

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def enforce_row_bounds(self) -> bool:
        return self._enforce_row_bounds

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        """Encode the committed board as JSON-compatible data."""
        return snapshot_to_dict(HistorySnapshot.capture(self._state))

    def load_state(self, data: Mapping[str, Any]) -> None:
        """
        Replace the board with a previously exported state; history is cleared.

        Raises:
            ValidationError: If the data is malformed
        """
        self._state = snapshot_from_dict(data).restore()
        self._history.clear()
        logger.info("loaded state with %d pairs", len(self._state.pairs))

    def summary(self) -> dict[str, Any]:
        """JSON-friendly view of orientations, pattern log, groups and pairs."""
        state = self._state
        return {
            "rows": {"top": state.top_count, "bottom": state.bottom_count},
            "orientations": {
                row.value: {
                    edge_id(k): o.value for k, o in state.orientations.for_row(row).items()
                }
                for row in (Row.TOP, Row.BOTTOM)
            },
            "pattern_log": state.pattern_log.to_dict(),
            "groups": state.groups.to_summary(),
            "pairs": [
                {"id": pair.key, "connections": [c.to_dict() for c in pair.connections]}
                for pair in state.pairs
            ],
        }


__all__ = [
    "PuzzleEngine",
    "EngineEventType",
    "EngineEvent",
    "MSG_ALREADY_PROCESSED",
    "MSG_SAME_ROW",
    "MSG_ALREADY_CONNECTED",
    "MSG_SHARED_VERTEX",
]
