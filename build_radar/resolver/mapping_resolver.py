"""Resolver backed by a precomputed edge snapshot."""

from __future__ import annotations

from typing import Iterable, Mapping

from build_radar.models import ProjectPath, Rule
from build_radar.resolver.base import BaseResolver


class MappingResolver(BaseResolver):
    """Resolve successors from an in-memory adjacency mapping.

    Nodes missing from the mapping are leaves. Rules are ignored since the
    snapshot already reflects them.
    """

    def __init__(self, edges: Mapping[ProjectPath, Iterable[ProjectPath]]):
        self.edges = {node: frozenset(successors) for node, successors in edges.items()}

    def resolve(self, node: ProjectPath, rules: Iterable[Rule]) -> frozenset[ProjectPath]:
        return self.edges.get(node, frozenset())
