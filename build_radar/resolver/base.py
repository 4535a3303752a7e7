"""Abstract base successor resolver."""

from __future__ import annotations

import abc
from typing import Iterable, Protocol

from build_radar.models import ProjectPath, Rule


class UnknownAccessorError(LookupError):
    """A type-safe accessor was referenced that the accessor table cannot resolve."""

    def __init__(self, accessor: str, project: ProjectPath):
        self.accessor = accessor
        self.project = project
        super().__init__(
            f'Could not find project mapping for type-safe project accessor "{accessor}" '
            f"referenced by {project.path}"
        )


class SuccessorResolver(Protocol):
    def __call__(self, node: ProjectPath, rules: Iterable[Rule]) -> frozenset[ProjectPath]:
        ...


class BaseResolver(abc.ABC):
    """Base class for successor resolvers used by the graph builder."""

    @abc.abstractmethod
    def resolve(self, node: ProjectPath, rules: Iterable[Rule]) -> frozenset[ProjectPath]:
        """Return the direct successors of node."""

    def __call__(self, node: ProjectPath, rules: Iterable[Rule]) -> frozenset[ProjectPath]:
        return self.resolve(node, rules)
