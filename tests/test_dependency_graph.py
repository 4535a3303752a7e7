"""Tests for the lazy BFS graph builder and the Graph query façade."""

from collections import Counter
from pathlib import Path
from types import MappingProxyType

import pytest

from build_radar.analysis.dependency_graph import (
    BreadthFirstSearch,
    Edge,
    Graph,
    NodeNotInGraphError,
    build_graph,
)
from build_radar.models import ProjectPath
from build_radar.resolver import MappingResolver

ROOT = Path("/build")


def _p(path):
    return ProjectPath(ROOT, path)


class CountingResolver(MappingResolver):
    def __init__(self, edges):
        super().__init__(edges)
        self.calls = Counter()
        self.rules_seen = []

    def resolve(self, node, rules):
        self.calls[node] += 1
        self.rules_seen.append(rules)
        return super().resolve(node, rules)


def _resolver(**edges):
    return CountingResolver({
        _p(node): {_p(s) for s in succs} for node, succs in edges.items()
    })


# ── Node identity ─────────────────────────────────────────────

class TestProjectPathIdentity:
    def test_structural_equality(self):
        assert ProjectPath(Path("/build"), ":a") == ProjectPath(Path("/build"), ":a")
        assert hash(ProjectPath(Path("/build"), ":a")) == hash(ProjectPath(Path("/build"), ":a"))

    def test_root_is_part_of_identity(self):
        assert ProjectPath(Path("/one"), ":a") != ProjectPath(Path("/two"), ":a")

    def test_seen_set_deduplicates(self):
        assert len({_p(":a"), _p(":a"), _p(":b")}) == 2


# ── Breadth-first expansion ───────────────────────────────────

class TestBreadthFirstSearch:
    def test_expands_from_seeds(self):
        resolver = _resolver(**{":a": [":b"], ":b": [":c"]})
        result = BreadthFirstSearch.run([_p(":a")], resolver=resolver)
        assert dict(result) == {
            _p(":a"): frozenset({_p(":b")}),
            _p(":b"): frozenset({_p(":c")}),
            _p(":c"): frozenset(),
        }

    def test_closure_has_no_dangling_successors(self):
        resolver = _resolver(**{
            ":app": [":f1", ":f2"], ":f1": [":core"], ":f2": [":core", ":util"], ":util": [":core"],
        })
        result = BreadthFirstSearch.run([_p(":app")], resolver=resolver)
        for successors in result.values():
            assert successors <= set(result)

    def test_each_node_resolved_once(self):
        resolver = _resolver(**{
            ":app": [":f1", ":f2"], ":f1": [":core"], ":f2": [":core"],
        })
        BreadthFirstSearch.run([_p(":app"), _p(":f1")], resolver=resolver)
        assert set(resolver.calls.values()) == {1}
        assert len(resolver.calls) == 4

    def test_self_loop_resolved_once(self):
        resolver = _resolver(**{":a": [":a", ":b"]})
        result = BreadthFirstSearch.run([_p(":a")], resolver=resolver)
        assert resolver.calls[_p(":a")] == 1
        assert _p(":a") in result[_p(":a")]

    def test_cycle_terminates(self):
        resolver = _resolver(**{":a": [":b"], ":b": [":c"], ":c": [":a"]})
        result = BreadthFirstSearch.run([_p(":a")], resolver=resolver)
        assert len(result) == 3
        assert sum(resolver.calls.values()) == 3

    def test_fifo_order(self):
        resolver = _resolver(**{":a": [":b"], ":b": [":d"], ":c": [":e"]})
        result = BreadthFirstSearch.run([_p(":a"), _p(":c")], resolver=resolver)
        order = [node.path for node in result]
        assert order[:2] == [":a", ":c"]
        assert set(order[2:4]) == {":b", ":e"}
        assert order[4] == ":d"

    def test_idempotent(self):
        edges = {":a": [":b", ":c"], ":b": [":c"]}
        first = BreadthFirstSearch.run([_p(":a")], resolver=_resolver(**edges))
        second = BreadthFirstSearch.run([_p(":a")], resolver=_resolver(**edges))
        assert dict(first) == dict(second)

    def test_result_is_read_only(self):
        result = BreadthFirstSearch.run([_p(":a")], resolver=_resolver(**{":a": [":b"]}))
        with pytest.raises(TypeError):
            result[_p(":z")] = frozenset()

    def test_rules_passed_to_resolver(self):
        resolver = _resolver(**{":a": []})
        rule = object()
        BreadthFirstSearch.run([_p(":a")], rules={rule}, resolver=resolver)
        assert resolver.rules_seen == [frozenset({rule})]

    def test_empty_seeds(self):
        assert dict(BreadthFirstSearch.run([], resolver=_resolver())) == {}

    def test_flatten_includes_seeds(self):
        resolver = _resolver(**{":a": [":b"], ":b": [":c"]})
        result = BreadthFirstSearch.flatten([_p(":a"), _p(":x")], resolver=resolver)
        assert result == {_p(":a"), _p(":b"), _p(":c"), _p(":x")}

    def test_resolver_errors_propagate(self):
        def failing(node, rules):
            raise LookupError(f"cannot resolve {node}")

        with pytest.raises(LookupError):
            BreadthFirstSearch.run([_p(":a")], resolver=failing)

    def test_build_graph_wraps_result(self):
        graph = build_graph([_p(":a")], resolver=_resolver(**{":a": [":b"]}))
        assert isinstance(graph, Graph)
        assert len(graph) == 2


# ── Graph façade ──────────────────────────────────────────────

_EDGES = {"A": {"B", "D"}, "B": {"C"}, "C": {"D"}, "D": set(), "E": {"D"}}


class TestGraph:
    def test_edges(self):
        graph = Graph({"A": {"B", "C"}, "B": {"C"}, "C": set()})
        assert graph.edges() == {Edge("A", "B"), Edge("A", "C"), Edge("B", "C")}

    def test_successors_of(self):
        assert Graph(_EDGES).successors_of("A") == frozenset({"B", "D"})

    def test_successors_of_unknown_node(self):
        with pytest.raises(NodeNotInGraphError, match="not part of this build graph"):
            Graph(_EDGES).successors_of("Z")

    def test_not_in_graph_is_value_error(self):
        with pytest.raises(ValueError):
            Graph(_EDGES).accessors_of("Z")

    def test_accessors_of(self):
        assert Graph(_EDGES).accessors_of("D") == {"A", "C", "E"}
        assert Graph(_EDGES).accessors_of("A") == set()

    def test_shortest_path_prefers_fewest_edges(self):
        assert Graph(_EDGES).find_shortest_path("A", "D") == ["A", "D"]
        assert Graph(_EDGES).find_shortest_path("B", "D") == ["B", "C", "D"]

    def test_shortest_path_to_self(self):
        assert Graph(_EDGES).find_shortest_path("A", "A") == ["A"]

    def test_shortest_path_unreachable(self):
        assert Graph(_EDGES).find_shortest_path("D", "A") is None

    def test_shortest_path_through_cycle(self):
        graph = Graph({"A": {"B"}, "B": {"C"}, "C": {"A"}})
        assert graph.find_shortest_path("B", "A") == ["B", "C", "A"]

    def test_contains_and_nodes(self):
        graph = Graph(_EDGES)
        assert "A" in graph
        assert "Z" not in graph
        assert sorted(graph.nodes) == ["A", "B", "C", "D", "E"]

    def test_successors_are_frozen_for_proxy_input(self):
        graph = Graph(MappingProxyType({"A": {"B"}, "B": set()}))
        successors = graph.successors_of("A")
        assert isinstance(successors, frozenset)
        assert successors == frozenset({"B"})

    def test_graph_is_read_only(self):
        graph = Graph(_EDGES)
        with pytest.raises(TypeError):
            graph.dependency_map["Z"] = frozenset()
