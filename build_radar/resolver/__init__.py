"""Successor resolvers consumed by the graph builder."""

from __future__ import annotations

from typing import Iterable

from build_radar.models import ProjectPath, Rule
from build_radar.resolver.base import BaseResolver, SuccessorResolver, UnknownAccessorError
from build_radar.resolver.buildscript_resolver import BuildscriptResolver
from build_radar.resolver.mapping_resolver import MappingResolver
from build_radar.resolver.production_filter import build_production_dependency_map

_default_resolver = BuildscriptResolver()


def resolve_successors(node: ProjectPath, rules: Iterable[Rule] = ()) -> frozenset[ProjectPath]:
    """Resolve node's direct successors from its build script."""
    return _default_resolver.resolve(node, rules)


__all__ = [
    "BaseResolver",
    "BuildscriptResolver",
    "MappingResolver",
    "SuccessorResolver",
    "UnknownAccessorError",
    "build_production_dependency_map",
    "resolve_successors",
]
