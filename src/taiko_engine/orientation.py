"""
Orientation resolution for connection pairs.

A complete pair induces one horizontal edge per non-degenerate row. Each
row keeps a map from combination key to the orientation chosen the first
time that key appeared. A pair has a single sense (forward or reversed)
shared by both rows, so a pair whose two keys were fixed by earlier pairs
with incompatible senses cannot be placed.

Resolution is pure; apply_orientation is the commit step.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from .graphs import build_directed_adjacency, find_path
from .types import (
    ROWS,
    CombinationKey,
    ConnectionPair,
    HorizontalEdge,
    Orientation,
    Row,
    Vertex,
    combination_key,
)
from .violations import OrientationViolation

DEFAULT_MIN_CYCLE = 4


@dataclass
class OrientationMaps:
    """Per-row combination key -> Orientation maps."""

    top: dict[CombinationKey, Orientation] = field(default_factory=dict)
    bottom: dict[CombinationKey, Orientation] = field(default_factory=dict)

    def for_row(self, row: Row) -> dict[CombinationKey, Orientation]:
        return self.top if row is Row.TOP else self.bottom

    def get(self, row: Row, key: CombinationKey) -> Optional[Orientation]:
        return self.for_row(row).get(key)

    def copy(self) -> OrientationMaps:
        return copy.deepcopy(self)

    def items(self) -> Iterator[tuple[Row, CombinationKey, Orientation]]:
        """Iterate (row, key, orientation), top row first, in insertion order."""
        for row in ROWS:
            for key, orientation in self.for_row(row).items():
                yield row, key, orientation

    def __len__(self) -> int:
        return len(self.top) + len(self.bottom)


@dataclass(frozen=True)
class OrientationResolution:
    """
    Result of resolving a pair against the orientation maps.

    Attributes:
        reversed: Whether the pair's sense is reversed
        assignments: Resulting orientation per non-degenerate row
        new_keys: Keys this pair would set for the first time
        violations: Conflict or short-cycle violations
    """

    reversed: bool
    assignments: dict[Row, Orientation]
    new_keys: dict[Row, CombinationKey]
    violations: tuple[OrientationViolation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations


def raw_orientation(pair: ConnectionPair, row: Row) -> Orientation:
    """Direction from the first connection's vertex to the second's in one row."""
    a, b = pair.row_vertices(row)
    return Orientation.between(a, b)


def _edge_between(
    row: Row,
    start: Vertex,
    end: Vertex,
    color: Optional[str],
    pair_id: str = "",
) -> HorizontalEdge:
    key = combination_key(start, end)
    assert key is not None
    return HorizontalEdge(
        row=row,
        vertices=key,
        color=color,
        orientation=Orientation.between(start, end),
        pair_id=pair_id,
    )


def _current_color(
    key: CombinationKey,
    default: Optional[str],
    color_of: Optional[Callable[[CombinationKey], Optional[str]]],
) -> Optional[str]:
    current = color_of(key) if color_of is not None else None
    return current if current is not None else default


def _endpoints(key: CombinationKey, orientation: Orientation) -> tuple[Vertex, Vertex]:
    if orientation is Orientation.RIGHT:
        return key[0], key[1]
    return key[1], key[0]


def resolve_orientation(
    pair: ConnectionPair,
    maps: OrientationMaps,
    *,
    color: Optional[str] = None,
    check_cycles: bool = True,
    min_cycle: int = DEFAULT_MIN_CYCLE,
    color_of: Optional[Callable[[CombinationKey], Optional[str]]] = None,
) -> OrientationResolution:
    """
    Decide the orientation a complete pair induces on each row.

    Args:
        pair: Complete candidate pair
        maps: Current orientation maps (not modified)
        color: Color reported on the pair's own edges when none of its keys
            is grouped yet (default: pair color)
        check_cycles: Look for short directed cycles through new edges
        min_cycle: Directed cycles with fewer edges than this are violations
        color_of: Current group color of a key, used for every reported edge

    Returns:
        OrientationResolution with the chosen sense and any violations.
    """
    if color is None:
        color = pair.color
    pid = pair.key

    keys: dict[Row, CombinationKey] = {}
    raw: dict[Row, Orientation] = {}
    for row in ROWS:
        key = pair.combination(row)
        if key is not None:
            keys[row] = key
            raw[row] = raw_orientation(pair, row)

    # Sense each set key requires to reproduce its stored orientation
    required: dict[Row, bool] = {}
    for row, key in keys.items():
        stored = maps.get(row, key)
        if stored is not None:
            required[row] = stored is not raw[row]

    violations: list[OrientationViolation] = []
    senses = set(required.values())
    if len(senses) > 1:
        edges = tuple(
            HorizontalEdge(
                row=row,
                vertices=keys[row],
                color=_current_color(keys[row], color, color_of),
                orientation=maps.for_row(row)[keys[row]],
                pair_id=pid,
            )
            for row in ROWS
            if row in required
        )
        violations.append(OrientationViolation(kind="conflict", edges=edges))

    if Row.TOP in required:
        reversed_ = required[Row.TOP]
    elif Row.BOTTOM in required:
        reversed_ = required[Row.BOTTOM]
    else:
        reversed_ = False

    assignments: dict[Row, Orientation] = {}
    new_keys: dict[Row, CombinationKey] = {}
    for row, key in keys.items():
        stored = maps.get(row, key)
        if stored is not None:
            assignments[row] = stored
        else:
            assignments[row] = raw[row].flipped() if reversed_ else raw[row]
            new_keys[row] = key

    if check_cycles and not violations:
        # The pair joins the group of its first grouped key, bottom row first
        merged = color
        for row in (Row.BOTTOM, Row.TOP):
            grouped = _current_color(keys[row], None, color_of) if row in keys else None
            if grouped is not None:
                merged = grouped
                break
        for row, key in new_keys.items():
            violation = _find_short_cycle(
                row, key, assignments[row], maps, merged, pid, min_cycle, color_of
            )
            if violation is not None:
                violations.append(violation)

    return OrientationResolution(
        reversed=reversed_,
        assignments=assignments,
        new_keys=new_keys,
        violations=tuple(violations),
    )


def _find_short_cycle(
    row: Row,
    key: CombinationKey,
    orientation: Orientation,
    maps: OrientationMaps,
    color: Optional[str],
    pair_id: str,
    min_cycle: int,
    color_of: Optional[Callable[[CombinationKey], Optional[str]]],
) -> Optional[OrientationViolation]:
    source, target = _endpoints(key, orientation)
    arcs = [_endpoints(k, o) for k, o in maps.for_row(row).items()]
    arcs.append((source, target))
    adj = build_directed_adjacency(arcs)

    path = find_path(adj, target, source, max_edges=min_cycle - 2)
    if path is None:
        return None

    edges = [_edge_between(row, source, target, color, pair_id)]
    for u, v in zip(path, path[1:]):
        existing = combination_key(u, v)
        assert existing is not None
        edge_color = color_of(existing) if color_of is not None else None
        edges.append(_edge_between(row, u, v, edge_color))

    cycle = (source,) + tuple(path[:-1])
    return OrientationViolation(kind="cycle", edges=tuple(edges), row=row, cycle=cycle)


def apply_orientation(maps: OrientationMaps, resolution: OrientationResolution) -> None:
    """Write the newly set keys of a resolution; existing entries are kept."""
    for row, key in resolution.new_keys.items():
        maps.for_row(row).setdefault(key, resolution.assignments[row])


__all__ = [
    "DEFAULT_MIN_CYCLE",
    "OrientationMaps",
    "OrientationResolution",
    "raw_orientation",
    "resolve_orientation",
    "apply_orientation",
]
