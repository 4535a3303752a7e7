"""Betweenness centrality via Brandes' algorithm.

High-centrality modules sit on many shortest dependency paths between other
modules, so a change to them tends to have wide-reaching rebuild impact.

Complexity: O(V * (V + E)) for the unweighted directed graph.
"""

from __future__ import annotations

from collections import deque
from typing import Hashable, Iterable, Mapping, TypeVar

N = TypeVar("N", bound=Hashable)


def compute_betweenness_centrality(adjacency: Mapping[N, Iterable[N]]) -> dict[N, float]:
    """Compute the betweenness centrality of every node in adjacency.

    Nodes referenced only as successors are treated as having no outgoing edges.
    """
    centrality: dict[N, float] = {node: 0.0 for node in adjacency}

    for source in adjacency:
        # BFS phase
        stack: list[N] = []
        predecessors: dict[N, list[N]] = {}
        sigma: dict[N, int] = {source: 1}
        distance: dict[N, int] = {source: 0}
        queue: deque[N] = deque([source])

        while queue:
            v = queue.popleft()
            stack.append(v)
            dist_v = distance[v]
            sigma_v = sigma[v]

            for w in adjacency.get(v, ()):
                if w not in distance:
                    distance[w] = dist_v + 1
                    queue.append(w)
                if distance[w] == dist_v + 1:
                    sigma[w] = sigma.get(w, 0) + sigma_v
                    predecessors.setdefault(w, []).append(v)

        # Back-propagation in order of non-increasing distance
        delta: dict[N, float] = {}
        while stack:
            w = stack.pop()
            delta_w = delta.get(w, 0.0)
            for v in predecessors.get(w, ()):
                delta[v] = delta.get(v, 0.0) + (sigma[v] / sigma[w]) * (1.0 + delta_w)
            if w != source:
                centrality[w] = centrality.get(w, 0.0) + delta_w

    return centrality
