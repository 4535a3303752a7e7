"""Analysis pass orchestrator: discover -> load rules -> expand graph -> run analytics in parallel."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from build_radar.analysis.centrality import compute_betweenness_centrality
from build_radar.analysis.critical_path import analyze_critical_path, analyze_target_critical_paths
from build_radar.analysis.cycles import detect_cycles
from build_radar.analysis.dependency_graph import BreadthFirstSearch
from build_radar.analysis.reachability import (
    build_reverse_dependency_map,
    count_transitive_dependencies,
    count_transitive_dependents,
)
from build_radar.models import (
    AnalysisConfig,
    CycleInfo,
    DepthInfo,
    ProjectPath,
    TargetCriticalPath,
)
from build_radar.module_type import is_app, is_excluded_root, is_wiring
from build_radar.resolver import (
    SuccessorResolver,
    build_production_dependency_map,
    resolve_successors,
)
from build_radar.rules import TypeSafeAccessorInference, compute_rules, load_rules
from build_radar.scanner import discover_projects, read_project_list

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class GraphData:
    build_root: Path
    projects: list[ProjectPath]
    dependency_map: Mapping[ProjectPath, frozenset[ProjectPath]]
    reverse_dependency_map: Mapping[ProjectPath, frozenset[ProjectPath]]

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.dependency_map.values())


@dataclass
class AnalysisReport:
    graph: GraphData
    centrality: dict[ProjectPath, float] = field(default_factory=dict)
    cycles: dict[ProjectPath, CycleInfo] = field(default_factory=dict)
    critical_path: dict[ProjectPath, DepthInfo] = field(default_factory=dict)
    target_paths: list[TargetCriticalPath] = field(default_factory=list)
    dependency_counts: dict[ProjectPath, int] = field(default_factory=dict)
    dependent_counts: dict[ProjectPath, int] = field(default_factory=dict)


def build_graph_data(
    config: AnalysisConfig,
    progress: ProgressCallback | None = None,
    resolver: SuccessorResolver = resolve_successors,
) -> GraphData:
    """Stages 1-3: discover projects, load rules, expand the dependency graph."""
    build_root = config.build_root.resolve()

    if progress:
        progress("Discovering projects", 0, 1)
    all_projects = discover_projects(build_root, skip_dirs=config.skip_dirs)
    if config.project_list:
        seeds = read_project_list(config.project_list, build_root)
    else:
        seeds = all_projects
    logger.info("Found %d projects (%d seeds)", len(all_projects), len(seeds))
    if progress:
        progress("Discovering projects", 1, 1)

    build_rules = load_rules(build_root, config.rules_path)
    project_name = config.root_project_name or build_rules.project_name or build_root.name
    rules = compute_rules(
        build_root,
        project_name,
        build_rules.implicit_rules,
        build_rules.type_safe_accessor_inference or TypeSafeAccessorInference.DISABLED,
        lambda: all_projects,
    )

    if progress:
        progress("Building dependency graph", 0, 1)
    start = time.perf_counter()
    dependency_map = BreadthFirstSearch.run(seeds, rules, resolver)
    elapsed_ms = (time.perf_counter() - start) * 1000
    reverse = build_reverse_dependency_map(dependency_map)
    graph = GraphData(build_root, list(seeds), dependency_map, reverse)
    logger.info(
        "Graph built in %.0fms: %d nodes, %d edges",
        elapsed_ms, len(dependency_map), graph.edge_count,
    )
    if progress:
        progress("Building dependency graph", 1, 1)

    return graph


def _critical_paths(graph: GraphData) -> tuple[dict, list]:
    """Critical paths over production edges only; test-only dependencies never block a build."""
    production = build_production_dependency_map(graph.dependency_map)
    global_paths = analyze_critical_path(production, is_excluded_root)
    per_target = analyze_target_critical_paths(production, is_app, is_excluded_root, is_wiring)
    return global_paths, per_target


def _reachability_counts(graph: GraphData) -> tuple[dict, dict]:
    dependencies = {
        node: count_transitive_dependencies(node, graph.dependency_map)
        for node in graph.dependency_map
    }
    dependents = {
        node: count_transitive_dependents(node, graph.reverse_dependency_map)
        for node in graph.dependency_map
    }
    return dependencies, dependents


def run_analysis(
    config: AnalysisConfig,
    progress: ProgressCallback | None = None,
    resolver: SuccessorResolver = resolve_successors,
) -> AnalysisReport:
    """Run a full analysis pass over the build at config.build_root."""
    graph = build_graph_data(config, progress, resolver)
    return analyze_graph(graph, config.max_workers, progress)


def analyze_graph(
    graph: GraphData,
    max_workers: int = 4,
    progress: ProgressCallback | None = None,
) -> AnalysisReport:
    """Run every analytic over an already-built graph as parallel tasks and join the results."""
    report = AnalysisReport(graph=graph)
    dependency_map = graph.dependency_map

    jobs: dict[str, Callable[[], object]] = {
        "centrality": lambda: compute_betweenness_centrality(dependency_map),
        "cycles": lambda: detect_cycles(dependency_map),
        "critical_path": lambda: _critical_paths(graph),
        "reachability": lambda: _reachability_counts(graph),
    }

    done = 0
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(job): name for name, job in jobs.items()}
        for future in as_completed(futures):
            name = futures[future]
            result = future.result()
            if name == "reachability":
                report.dependency_counts, report.dependent_counts = result
            elif name == "critical_path":
                report.critical_path, report.target_paths = result
            else:
                setattr(report, name, result)
            done += 1
            logger.debug("Analysis %s finished", name)
            if progress:
                progress("Analyzing", done, len(jobs))

    return report
