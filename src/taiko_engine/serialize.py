"""
JSON-compatible encoding of history snapshots.

Vertices are encoded as "top-3" strings, combination keys as edge ids
("top-0,top-1") and orientations as "left"/"right". Pairs reference
connections by index so shared connections stay shared after decoding.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .grouping import ColorGroup, ColorGroups
from .history import HistorySnapshot
from .orientation import OrientationMaps
from .types import ROWS, ConnectionPair, Orientation, VerticalConnection, edge_id
from .validation import ValidationError, as_vertex, parse_edge_id

FORMAT_VERSION = 1


def snapshot_to_dict(snapshot: HistorySnapshot) -> dict[str, Any]:
    """
    Encode a snapshot as JSON-compatible data.

    Example:
        data = snapshot_to_dict(HistorySnapshot.capture(state))
        json.dumps(data)
    """
    positions = {id(conn): i for i, conn in enumerate(snapshot.connections)}

    def encode_pair(pair: ConnectionPair) -> list[int]:
        try:
            return [positions[id(conn)] for conn in pair.connections]
        except KeyError:
            raise ValidationError("Pair references a connection missing from the board") from None

    groups: list[Optional[dict[str, Any]]] = []
    for group in snapshot.groups.records:
        if group is None:
            groups.append(None)
            continue
        groups.append(
            {
                "color": group.color,
                "vertices": sorted(str(v) for v in group.vertices),
                "pair_keys": list(group.pair_keys),
                "keys": sorted(edge_id(key) for key in group.keys),
            }
        )

    return {
        "version": FORMAT_VERSION,
        "rows": {"top": snapshot.top_count, "bottom": snapshot.bottom_count},
        "connections": [conn.to_dict() for conn in snapshot.connections],
        "pairs": [encode_pair(pair) for pair in snapshot.pairs],
        "pending": encode_pair(snapshot.pending) if snapshot.pending is not None else None,
        "groups": groups,
        "group_index": {edge_id(key): idx for key, idx in snapshot.groups.key_index.items()},
        "orientations": {
            row.value: {
                edge_id(key): orientation.value
                for key, orientation in snapshot.orientations.for_row(row).items()
            }
            for row in ROWS
        },
        "color_index": snapshot.color_index,
    }


def snapshot_from_dict(data: Mapping[str, Any]) -> HistorySnapshot:
    """
    Decode a snapshot produced by snapshot_to_dict.

    Raises:
        ValidationError: If the data is malformed
    """
    if data.get("version", FORMAT_VERSION) != FORMAT_VERSION:
        raise ValidationError(f"Unsupported snapshot version {data.get('version')!r}")

    try:
        connections = [
            VerticalConnection(
                top=as_vertex(item["nodes"][0]),
                bottom=as_vertex(item["nodes"][1]),
                color=item.get("color"),
                seed_color=item.get("seed_color"),
            )
            for item in data.get("connections", [])
        ]

        def decode_pair(indices: list[int]) -> ConnectionPair:
            return ConnectionPair([connections[i] for i in indices])

        pairs = [decode_pair(indices) for indices in data.get("pairs", [])]
        pending_data = data.get("pending")
        pending = decode_pair(pending_data) if pending_data is not None else None

        records: list[Optional[ColorGroup]] = []
        for item in data.get("groups", []):
            if item is None:
                records.append(None)
                continue
            records.append(
                ColorGroup(
                    color=item["color"],
                    vertices={as_vertex(v) for v in item.get("vertices", [])},
                    pair_keys=list(item.get("pair_keys", [])),
                    keys={parse_edge_id(k) for k in item.get("keys", [])},
                )
            )
        index = {parse_edge_id(k): int(v) for k, v in data.get("group_index", {}).items()}

        orientations = OrientationMaps()
        for row in ROWS:
            for key, value in data.get("orientations", {}).get(row.value, {}).items():
                orientations.for_row(row)[parse_edge_id(key)] = Orientation(value)

        rows = data.get("rows", {})
        return HistorySnapshot(
            top_count=int(rows.get("top", 1)),
            bottom_count=int(rows.get("bottom", 1)),
            connections=connections,
            pairs=pairs,
            pending=pending,
            groups=ColorGroups.from_records(records, index),
            orientations=orientations,
            color_index=int(data.get("color_index", 0)),
        )
    except ValidationError:
        raise
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ValidationError(f"Malformed snapshot: {exc!r}") from exc


__all__ = ["FORMAT_VERSION", "snapshot_to_dict", "snapshot_from_dict"]
