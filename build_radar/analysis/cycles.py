"""Cycle detection: strongly connected components via an iterative Tarjan's algorithm."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, Iterator, Mapping, TypeVar

from build_radar.models import CycleInfo

N = TypeVar("N", bound=Hashable)


def cycle_severity(size: int) -> int:
    """Bigger cycles force more modules to recompile together."""
    if size >= 10:
        return 10
    if size >= 5:
        return 7
    if size >= 3:
        return 5
    return 3


def detect_cycles(adjacency: Mapping[N, Iterable[N]]) -> dict[N, CycleInfo]:
    """Map every node in a non-trivial SCC (size >= 2) to its component's CycleInfo."""
    result: dict[N, CycleInfo] = {}
    for scc in strongly_connected_components(adjacency):
        if len(scc) < 2:
            continue
        info = CycleInfo(
            cycle_size=len(scc),
            members=frozenset(scc),
            severity=cycle_severity(len(scc)),
        )
        for node in scc:
            result[node] = info
    return result


@dataclass
class _Frame:
    node: Hashable
    neighbors: Iterator
    returning_from: Hashable | None = None
    resuming: bool = False


def strongly_connected_components(adjacency: Mapping[N, Iterable[N]]) -> list[list[N]]:
    """All SCCs, trivial ones included, in the order Tarjan's algorithm completes them.

    Uses an explicit frame stack so deep dependency chains cannot exhaust the
    interpreter's recursion limit.
    """
    counter = 0
    index: dict[N, int] = {}
    lowlink: dict[N, int] = {}
    on_stack: set[N] = set()
    stack: list[N] = []
    sccs: list[list[N]] = []

    def visit(node: N) -> _Frame:
        nonlocal counter
        index[node] = counter
        lowlink[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)
        return _Frame(node, iter(adjacency.get(node, ())))

    for start in adjacency:
        if start in index:
            continue

        work: list[_Frame] = [visit(start)]
        while work:
            frame = work[-1]
            node = frame.node

            if frame.resuming:
                # Fold the finished child's low-link into ours
                lowlink[node] = min(lowlink[node], lowlink[frame.returning_from])
                frame.resuming = False

            recursed = False
            for w in frame.neighbors:
                if w not in index:
                    frame.resuming = True
                    frame.returning_from = w
                    work.append(visit(w))
                    recursed = True
                    break
                if w in on_stack:
                    lowlink[node] = min(lowlink[node], index[w])

            if recursed:
                continue

            if lowlink[node] == index[node]:
                component: list[N] = []
                while True:
                    w = stack.pop()
                    on_stack.discard(w)
                    component.append(w)
                    if w == node:
                        break
                sccs.append(component)

            work.pop()

    return sccs
