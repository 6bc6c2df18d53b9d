"""
Color grouping of connection pairs.

Two complete pairs belong to the same group when they share a combination
key on either row. Groups are kept in an arena (a list of records) plus a
combination-key -> arena index map; merging absorbs records by rewriting
index entries, and propagates the surviving color eagerly to every
connection of every absorbed pair.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .types import CombinationKey, ConnectionPair, Row, Vertex, edge_id

logger = logging.getLogger(__name__)


@dataclass
class ColorGroup:
    """
    Ownership group of pairs that must share one color.

    Attributes:
        color: Canonical color of the group
        vertices: Every vertex touched by a member pair
        pair_keys: PairKeys of member pairs, in join order
        keys: Combination keys registered to this group
    """

    color: str
    vertices: set[Vertex] = field(default_factory=set)
    pair_keys: list[str] = field(default_factory=list)
    keys: set[CombinationKey] = field(default_factory=set)

    def absorb(self, other: ColorGroup) -> None:
        self.vertices |= other.vertices
        for key in other.pair_keys:
            if key not in self.pair_keys:
                self.pair_keys.append(key)
        self.keys |= other.keys


@dataclass(frozen=True)
class MergeResult:
    """
    Outcome of merging a pair into the groups.

    Attributes:
        color: Effective color of the pair after the merge
        group_index: Arena index of the group that now owns the pair
        absorbed: Arena indices of groups folded into it
        recolored: PairKeys of historical pairs whose color changed
    """

    color: str
    group_index: int
    absorbed: tuple[int, ...] = ()
    recolored: tuple[str, ...] = ()


def grouping_keys(pair: ConnectionPair) -> list[CombinationKey]:
    """Non-degenerate combination keys of a complete pair, bottom row first."""
    keys: list[CombinationKey] = []
    for row in (Row.BOTTOM, Row.TOP):
        key = pair.combination(row)
        if key is not None:
            keys.append(key)
    return keys


class ColorGroups:
    """
    Union of pairs into color groups.

    The arena keeps absorbed slots as None so indices stay stable.
    """

    def __init__(self) -> None:
        self._groups: list[Optional[ColorGroup]] = []
        self._index: dict[CombinationKey, int] = {}

    @classmethod
    def from_records(
        cls,
        groups: list[Optional[ColorGroup]],
        index: Mapping[CombinationKey, int],
    ) -> ColorGroups:
        """Rebuild from an arena and its key index (used when loading snapshots)."""
        result = cls()
        result._groups = list(groups)
        result._index = dict(index)
        return result

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def records(self) -> list[Optional[ColorGroup]]:
        """Raw arena, including absorbed (None) slots."""
        return self._groups

    @property
    def key_index(self) -> dict[CombinationKey, int]:
        return self._index

    def groups(self) -> list[ColorGroup]:
        """Live groups in creation order."""
        return [g for g in self._groups if g is not None]

    def group_for(self, key: CombinationKey) -> Optional[ColorGroup]:
        idx = self._index.get(key)
        if idx is None:
            return None
        return self._groups[idx]

    def color_of(self, key: CombinationKey) -> Optional[str]:
        group = self.group_for(key)
        return group.color if group else None

    def copy(self) -> ColorGroups:
        return copy.deepcopy(self)

    def __len__(self) -> int:
        return len(self.groups())

    # -------------------------------------------------------------------------
    # Merging
    # -------------------------------------------------------------------------

    def merge(
        self,
        pair: ConnectionPair,
        pairs_by_key: Mapping[str, ConnectionPair],
    ) -> MergeResult:
        """
        Merge a complete pair into the groups.

        Mutates the groups, the pair's connections and every historical
        pair in pairs_by_key whose group is absorbed.

        Args:
            pair: Newly completed pair
            pairs_by_key: Every committed pair by PairKey

        Returns:
            MergeResult describing the effective color.
        """
        keys = grouping_keys(pair)
        pid = pair.key

        matching: list[int] = []
        for key in keys:
            idx = self._index.get(key)
            if idx is not None and idx not in matching:
                matching.append(idx)

        if not matching:
            color = pair.first.color
            if color is None:
                raise ValueError("Cannot group an uncolored pair")
            pair.set_color(color)
            group = ColorGroup(color=color, vertices=pair.vertices(), pair_keys=[pid])
            self._groups.append(group)
            idx = len(self._groups) - 1
            self._register(idx, keys)
            logger.debug("group %d created for %s with color %s", idx, pid, color)
            return MergeResult(color=color, group_index=idx)

        canonical_idx = matching[0]
        canonical = self._groups[canonical_idx]
        assert canonical is not None

        recolored: list[str] = []
        for other_idx in matching[1:]:
            other = self._groups[other_idx]
            assert other is not None
            for member in other.pair_keys:
                member_pair = pairs_by_key.get(member)
                if member_pair is not None and member_pair.color != canonical.color:
                    member_pair.set_color(canonical.color)
                    recolored.append(member)
            canonical.absorb(other)
            self._groups[other_idx] = None
            for key, idx in self._index.items():
                if idx == other_idx:
                    self._index[key] = canonical_idx
            logger.debug(
                "group %d absorbed into %d (color %s)", other_idx, canonical_idx, canonical.color
            )

        pair.set_color(canonical.color)
        canonical.vertices |= pair.vertices()
        if pid not in canonical.pair_keys:
            canonical.pair_keys.append(pid)
        self._register(canonical_idx, keys)

        return MergeResult(
            color=canonical.color,
            group_index=canonical_idx,
            absorbed=tuple(matching[1:]),
            recolored=tuple(recolored),
        )

    def simulate_merge(
        self,
        pair: ConnectionPair,
        pairs_by_key: Mapping[str, ConnectionPair],
    ) -> MergeResult:
        """Run merge on deep copies; neither self nor the pairs are touched."""
        groups = self.copy()
        pairs_copy, pair_copy = copy.deepcopy((dict(pairs_by_key), pair))
        return groups.merge(pair_copy, pairs_copy)

    def _register(self, idx: int, keys: list[CombinationKey]) -> None:
        group = self._groups[idx]
        assert group is not None
        for key in keys:
            self._index[key] = idx
            group.keys.add(key)

    def to_summary(self) -> list[dict[str, object]]:
        """JSON-friendly description of the live groups."""
        summary: list[dict[str, object]] = []
        for idx, group in enumerate(self._groups):
            if group is None:
                continue
            summary.append(
                {
                    "index": idx,
                    "color": group.color,
                    "nodes": [str(v) for v in sorted(group.vertices, key=lambda v: v.sort_key)],
                    "combinations": sorted(
                        edge_id(k) for k in group.keys
                    ),
                    "pair_count": len(group.pair_keys),
                }
            )
        return summary


__all__ = ["ColorGroup", "ColorGroups", "MergeResult", "grouping_keys"]
