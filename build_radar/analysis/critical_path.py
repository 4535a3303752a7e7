"""Critical path analysis: longest dependency chains, computed in reverse topological order.

The critical path is the longest chain among modules that are not excluded
build targets (apps, demos, wiring aggregators). It bounds build time even with
unlimited parallelism.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Hashable, Iterable, Mapping, TypeVar

from build_radar.models import DepthInfo, TargetCriticalPath

N = TypeVar("N", bound=Hashable)

NodePredicate = Callable[[Hashable], bool]


def _never(node: Hashable) -> bool:
    return False


def compute_depth_map(adjacency: Mapping[N, Iterable[N]]) -> dict[N, int]:
    """Longest path from every node down to a sink, via Kahn's algorithm run in reverse.

    Nodes held only by cycles never become ready and fall back to depth 0.
    """
    pending: dict[N, int] = {}
    reverse: dict[N, list[N]] = {}
    for node, deps in adjacency.items():
        deps = list(deps)
        pending[node] = len(deps)
        for dep in deps:
            reverse.setdefault(dep, []).append(node)

    depth: dict[N, int] = {}
    queue: deque[N] = deque()

    for node, count in pending.items():
        if count == 0:
            depth[node] = 0
            queue.append(node)

    # Successors that never appear as keys are leaves
    for deps in adjacency.values():
        for dep in deps:
            if dep not in pending and dep not in depth:
                depth[dep] = 0
                queue.append(dep)

    while queue:
        node = queue.popleft()
        candidate = depth[node] + 1
        for dependent in reverse.get(node, ()):
            if candidate > depth.get(dependent, 0):
                depth[dependent] = candidate
            pending[dependent] -= 1
            if pending[dependent] == 0:
                queue.append(dependent)

    for node in adjacency:
        depth.setdefault(node, 0)

    return depth


def _deepest(nodes: Iterable[N], depth: Mapping[N, int]) -> N | None:
    """Greatest depth wins; ties go to the lexicographically smallest node."""
    return min(nodes, key=lambda n: (-depth.get(n, 0), str(n)), default=None)


def compute_best_successor_map(
    adjacency: Mapping[N, Iterable[N]],
    depth: Mapping[N, int],
) -> dict[N, N | None]:
    return {node: _deepest(deps, depth) for node, deps in adjacency.items()}


def _walk(start: N, best_successor: Mapping[N, N | None]) -> list[N]:
    chain: list[N] = []
    visited: set[N] = set()
    current: N | None = start
    while current is not None and current not in visited:
        visited.add(current)
        chain.append(current)
        current = best_successor.get(current)
    return chain


def analyze_critical_path(
    adjacency: Mapping[N, Iterable[N]],
    is_excluded: NodePredicate = _never,
) -> dict[N, DepthInfo]:
    """Depth and critical-path membership for every node in adjacency.

    Excluded nodes still get a depth, they just cannot be chosen as the start
    of the critical path.
    """
    depth = compute_depth_map(adjacency)
    best_successor = compute_best_successor_map(adjacency, depth)

    candidate_depths = {node: d for node, d in depth.items() if not is_excluded(node)}
    max_depth = max(candidate_depths.values(), default=0)
    roots = [node for node, d in candidate_depths.items() if d == max_depth]

    critical: set[N] = set()
    for root in roots:
        critical.update(_walk(root, best_successor))

    return {
        node: DepthInfo(depth=depth.get(node, 0), on_critical_path=node in critical)
        for node in adjacency
    }


def analyze_critical_path_for(
    target: N,
    adjacency: Mapping[N, Iterable[N]],
    is_excluded: NodePredicate = _never,
    is_aggregator: NodePredicate = _never,
    depth: Mapping[N, int] | None = None,
    best_successor: Mapping[N, N | None] | None = None,
) -> TargetCriticalPath:
    """Trace the serialized compilation chain for a single build target.

    The walk starts from the deepest non-excluded dependency of target, looking
    one hop through aggregator modules, and ends at a leaf.
    """
    if depth is None:
        depth = compute_depth_map(adjacency)
    if best_successor is None:
        best_successor = compute_best_successor_map(adjacency, depth)

    direct = list(adjacency.get(target, ()))
    candidates = {dep for dep in direct if not is_excluded(dep)}
    for aggregator in (dep for dep in direct if is_aggregator(dep)):
        candidates.update(
            dep for dep in adjacency.get(aggregator, ()) if not is_excluded(dep)
        )

    deepest = _deepest(candidates, depth)
    if deepest is None:
        return TargetCriticalPath(target=target, depth=0)
    return TargetCriticalPath(
        target=target,
        depth=depth.get(deepest, 0),
        chain=_walk(deepest, best_successor),
    )


def analyze_target_critical_paths(
    adjacency: Mapping[N, Iterable[N]],
    is_target: NodePredicate,
    is_excluded: NodePredicate = _never,
    is_aggregator: NodePredicate = _never,
) -> list[TargetCriticalPath]:
    """Per-target critical paths for every node matching is_target, deepest first."""
    depth = compute_depth_map(adjacency)
    best_successor = compute_best_successor_map(adjacency, depth)
    paths = [
        analyze_critical_path_for(
            target, adjacency, is_excluded, is_aggregator, depth, best_successor,
        )
        for target in adjacency
        if is_target(target)
    ]
    paths.sort(key=lambda p: (-p.depth, str(p.target)))
    return paths
