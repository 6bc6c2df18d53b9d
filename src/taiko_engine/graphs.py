"""
Graph utilities shared by the rule checks.

This module provides small, reusable functions over adjacency dicts:
- Adjacency construction (directed and undirected)
- Bounded shortest-path search
- Simple cycle enumeration
- Topological sorting

Nodes can be any hashable value. Iteration follows adjacency insertion
order, so results are deterministic for a given input order.
"""

from __future__ import annotations

from collections import deque
from typing import Hashable, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T", bound=Hashable)


# =============================================================================
# Adjacency Construction
# =============================================================================


def build_directed_adjacency(edges: Iterable[tuple[T, T]]) -> dict[T, list[T]]:
    """
    Build a directed adjacency dict.

    Every endpoint gets an entry, so sinks map to an empty list.

    Example:
        >>> build_directed_adjacency([(0, 1), (1, 2)])
        {0: [1], 1: [2], 2: []}
    """
    adj: dict[T, list[T]] = {}
    for src, tgt in edges:
        adj.setdefault(src, [])
        adj.setdefault(tgt, [])
        if tgt not in adj[src]:
            adj[src].append(tgt)
    return adj


def build_undirected_adjacency(edges: Iterable[tuple[T, T]]) -> dict[T, list[T]]:
    """
    Build an undirected adjacency dict (parallel edges collapse).

    Example:
        >>> build_undirected_adjacency([(0, 1), (1, 2)])
        {0: [1], 1: [0, 2], 2: [1]}
    """
    adj: dict[T, list[T]] = {}
    for u, v in edges:
        adj.setdefault(u, [])
        adj.setdefault(v, [])
        if v not in adj[u]:
            adj[u].append(v)
        if u not in adj[v]:
            adj[v].append(u)
    return adj


# =============================================================================
# Path Search
# =============================================================================


def find_path(
    adj: dict[T, list[T]],
    start: T,
    goal: T,
    max_edges: Optional[int] = None,
) -> Optional[list[T]]:
    """
    Find a shortest path from start to goal using BFS.

    Args:
        adj: Adjacency dict
        start: First node of the path
        goal: Last node of the path
        max_edges: Only accept paths with at most this many edges

    Returns:
        List of nodes from start to goal, or None if no such path exists.
    """
    if start == goal:
        return [start]

    parents: dict[T, Optional[T]] = {start: None}
    queue: deque[tuple[T, int]] = deque([(start, 0)])

    while queue:
        node, depth = queue.popleft()
        if max_edges is not None and depth >= max_edges:
            continue

        for neighbor in adj.get(node, []):
            if neighbor in parents:
                continue
            parents[neighbor] = node
            if neighbor == goal:
                path = [goal]
                step = parents[goal]
                while step is not None:
                    path.append(step)
                    step = parents[step]
                path.reverse()
                return path
            queue.append((neighbor, depth + 1))

    return None


# =============================================================================
# Cycle Enumeration
# =============================================================================


def find_simple_cycles(
    adj: dict[T, list[T]],
    max_length: Optional[int] = None,
) -> list[tuple[T, ...]]:
    """
    Enumerate the simple cycles of an undirected graph.

    Exhaustive DFS from every node, only extending into nodes that come
    later in adjacency order than the start node. Cycles are normalized
    as vertex sets to drop duplicates (the same cycle walked in the other
    direction, or a different cycle over the same vertex set).

    The search is exponential on dense graphs. Passing max_length bounds
    the path depth, which keeps it cheap when only short cycles matter.

    Args:
        adj: Undirected adjacency dict
        max_length: Ignore cycles with more than this many vertices

    Returns:
        List of cycles, each a tuple of nodes in walk order.

    Example:
        >>> adj = build_undirected_adjacency([(0, 1), (1, 2), (2, 0)])
        >>> find_simple_cycles(adj)
        [(0, 1, 2)]
    """
    rank = {node: i for i, node in enumerate(adj)}
    seen: set[frozenset[T]] = set()
    cycles: list[tuple[T, ...]] = []

    def dfs(start: T, node: T, path: list[T], on_path: set[T]) -> None:
        for neighbor in adj.get(node, []):
            if neighbor == start:
                if len(path) >= 3:
                    signature = frozenset(path)
                    if signature not in seen:
                        seen.add(signature)
                        cycles.append(tuple(path))
            elif neighbor not in on_path and rank[neighbor] > rank[start]:
                if max_length is not None and len(path) >= max_length:
                    continue
                path.append(neighbor)
                on_path.add(neighbor)
                dfs(start, neighbor, path, on_path)
                on_path.discard(neighbor)
                path.pop()

    for start in adj:
        dfs(start, start, [start], {start})

    return cycles


# =============================================================================
# Topological Sort
# =============================================================================


def topological_sort(
    nodes: Sequence[T],
    edges: Iterable[tuple[T, T]],
) -> Optional[list[T]]:
    """
    Compute a topological ordering of a directed graph.

    Uses Kahn's algorithm (BFS-based). Ties keep the order of nodes.

    Returns:
        List of nodes in topological order, or None if the graph has cycles.

    Example:
        >>> topological_sort(["a", "b", "c"], [("a", "b"), ("b", "c")])
        ['a', 'b', 'c']
    """
    adj: dict[T, list[T]] = {node: [] for node in nodes}
    in_degree: dict[T, int] = {node: 0 for node in nodes}

    for src, tgt in edges:
        if src in adj and tgt in adj:
            adj[src].append(tgt)
            in_degree[tgt] += 1

    queue: deque[T] = deque(node for node in nodes if in_degree[node] == 0)
    result: list[T] = []

    while queue:
        node = queue.popleft()
        result.append(node)

        for neighbor in adj[node]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    # If not all nodes processed, graph has a cycle
    if len(result) != len(adj):
        return None

    return result


__all__ = [
    "build_directed_adjacency",
    "build_undirected_adjacency",
    "find_path",
    "find_simple_cycles",
    "topological_sort",
]
