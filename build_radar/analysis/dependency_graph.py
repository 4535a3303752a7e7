"""Dependency graph builder: lazy BFS expansion from seed projects, plus a read-only query façade."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Generic, Hashable, Iterable, Mapping, TypeVar

from build_radar.models import ProjectPath, Rule
from build_radar.resolver import SuccessorResolver, resolve_successors

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Hashable)


class BreadthFirstSearch:
    """Expand a dependency map from a seed set, resolving each project exactly once."""

    @staticmethod
    def run(
        seeds: Iterable[ProjectPath],
        rules: Iterable[Rule] = (),
        resolver: SuccessorResolver = resolve_successors,
    ) -> Mapping[ProjectPath, frozenset[ProjectPath]]:
        rules = frozenset(rules)
        seeds = list(dict.fromkeys(seeds))

        # One set for all the visited bookkeeping
        seen: set[ProjectPath] = set(seeds)
        queue: deque[ProjectPath] = deque(seeds)
        dependency_map: dict[ProjectPath, frozenset[ProjectPath]] = {}

        while queue:
            node = queue.popleft()
            successors = frozenset(resolver(node, rules))
            dependency_map[node] = successors

            for successor in successors:
                if successor not in seen:
                    seen.add(successor)
                    queue.append(successor)

        logger.debug(
            "Expanded %d seed(s) into %d node(s)", len(seeds), len(dependency_map),
        )
        return MappingProxyType(dependency_map)

    @staticmethod
    def flatten(
        seeds: Iterable[ProjectPath],
        rules: Iterable[Rule] = (),
        resolver: SuccessorResolver = resolve_successors,
    ) -> set[ProjectPath]:
        """All projects reachable from seeds, seeds included."""
        seeds = list(seeds)
        result = set(seeds)
        for successors in BreadthFirstSearch.run(seeds, rules, resolver).values():
            result.update(successors)
        return result


def build_graph(
    seeds: Iterable[ProjectPath],
    rules: Iterable[Rule] = (),
    resolver: SuccessorResolver = resolve_successors,
) -> Graph[ProjectPath]:
    return Graph(BreadthFirstSearch.run(seeds, rules, resolver))


class NodeNotInGraphError(ValueError):
    def __init__(self, node: Hashable):
        self.node = node
        super().__init__(f"{node} is not part of this build graph")


@dataclass(frozen=True)
class Edge(Generic[N]):
    accessor: N
    successor: N


class Graph(Generic[N]):
    """Read-only queries over a completed dependency map."""

    def __init__(self, dependency_map: Mapping[N, Iterable[N]]):
        self.dependency_map = MappingProxyType(
            {node: frozenset(successors) for node, successors in dependency_map.items()}
        )

    def __len__(self) -> int:
        return len(self.dependency_map)

    def __contains__(self, node: object) -> bool:
        return node in self.dependency_map

    @property
    def nodes(self) -> list[N]:
        return list(self.dependency_map)

    def edges(self) -> set[Edge[N]]:
        return {
            Edge(accessor, successor)
            for accessor, successors in self.dependency_map.items()
            for successor in successors
        }

    def successors_of(self, node: N) -> frozenset[N]:
        try:
            return self.dependency_map[node]
        except KeyError:
            raise NodeNotInGraphError(node) from None

    def accessors_of(self, node: N) -> set[N]:
        if node not in self.dependency_map:
            raise NodeNotInGraphError(node)
        return {edge.accessor for edge in self.edges() if edge.successor == node}

    def find_shortest_path(self, source: N, target: N) -> list[N] | None:
        """BFS shortest path by edge count, both ends included; None when unreachable."""
        parents: dict[N, N | None] = {source: None}
        queue: deque[N] = deque([source])

        while queue:
            current = queue.popleft()
            if current == target:
                path = [current]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                path.reverse()
                return path

            for dep in self.dependency_map.get(current, ()):
                if dep not in parents:
                    parents[dep] = current
                    queue.append(dep)

        return None
