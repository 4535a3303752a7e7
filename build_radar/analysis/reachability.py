"""Transitive reachability counts over forward and reverse adjacency."""

from __future__ import annotations

from collections import deque
from typing import Hashable, Iterable, Mapping, TypeVar

N = TypeVar("N", bound=Hashable)


def build_reverse_dependency_map(adjacency: Mapping[N, Iterable[N]]) -> dict[N, frozenset[N]]:
    """For each node, the nodes that depend on it directly. Every forward key is present."""
    reverse: dict[N, set[N]] = {}
    for node, deps in adjacency.items():
        reverse.setdefault(node, set())
        for dep in deps:
            reverse.setdefault(dep, set()).add(node)
    return {node: frozenset(accessors) for node, accessors in reverse.items()}


def transitive_closure(node: N, adjacency: Mapping[N, Iterable[N]]) -> set[N]:
    """Everything reachable from node, excluding node itself unless it sits on a cycle."""
    visited: set[N] = set()
    queue: deque[N] = deque()
    for nxt in adjacency.get(node, ()):
        if nxt not in visited:
            visited.add(nxt)
            queue.append(nxt)

    while queue:
        current = queue.popleft()
        for nxt in adjacency.get(current, ()):
            if nxt not in visited:
                visited.add(nxt)
                queue.append(nxt)
    return visited


def count_transitive_dependencies(node: N, adjacency: Mapping[N, Iterable[N]]) -> int:
    return len(transitive_closure(node, adjacency) - {node})


def count_transitive_dependents(node: N, reverse_adjacency: Mapping[N, Iterable[N]]) -> int:
    return len(transitive_closure(node, reverse_adjacency) - {node})
