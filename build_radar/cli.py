"""Click CLI with analyze, centrality, cycles, critical-path, deps, consumers, and reason subcommands."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from build_radar.analysis.centrality import compute_betweenness_centrality
from build_radar.analysis.critical_path import analyze_critical_path, analyze_critical_path_for
from build_radar.analysis.cycles import detect_cycles
from build_radar.analysis.dependency_graph import Graph, NodeNotInGraphError
from build_radar.analysis.reachability import transitive_closure
from build_radar.models import GRADLE_PATH_SEP, AnalysisConfig, ProjectPath
from build_radar.module_type import is_excluded_root, is_wiring
from build_radar.pipeline import GraphData, analyze_graph, build_graph_data
from build_radar.resolver import UnknownAccessorError, build_production_dependency_map
from build_radar.rules import InvalidRulesError

_ROOT_ARG = click.argument(
    "build_root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".",
)


def _config(ctx: click.Context, build_root: Path) -> AnalysisConfig:
    return AnalysisConfig(
        build_root=build_root,
        rules_path=ctx.obj.get("rules"),
        root_project_name=ctx.obj.get("project_name"),
        project_list=ctx.obj.get("project_list"),
        max_workers=ctx.obj.get("workers", 4),
    )


def _load_graph(ctx: click.Context, build_root: Path) -> GraphData:
    try:
        return build_graph_data(_config(ctx, build_root))
    except (UnknownAccessorError, InvalidRulesError) as e:
        raise click.ClickException(str(e))


def _project(graph: GraphData, path: str) -> ProjectPath:
    if not path.startswith(GRADLE_PATH_SEP):
        path = GRADLE_PATH_SEP + path
    return ProjectPath(graph.build_root, path)


@click.group()
@click.version_option(version="0.1.0")
@click.option("--rules", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Rules JSON (default: gradle/build-radar-rules.json)")
@click.option("--project-name", help="Root project name for type-safe accessors")
@click.option("--project-list", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="File listing seed projects (default: every project found)")
@click.option("--workers", default=4, show_default=True, help="Parallel analysis workers")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, rules, project_name, project_list, workers, verbose):
    """build-radar: find bottlenecks, cycles, and critical paths in a Gradle build graph."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj.update(
        rules=rules, project_name=project_name, project_list=project_list, workers=workers,
    )


@cli.command()
@_ROOT_ARG
@click.option("--top", default=20, show_default=True, help="Rows per section")
@click.pass_context
def analyze(ctx, build_root: Path, top: int):
    """Run every analysis and print a summary."""
    graph = _load_graph(ctx, build_root)

    def progress(stage: str, current: int, total: int):
        click.echo(f"  {stage}: {current}/{total}", err=True)

    report = analyze_graph(graph, ctx.obj["workers"], progress)

    click.echo(f"\n{len(graph.dependency_map)} modules, {graph.edge_count} edges\n")

    click.echo(click.style("Top connectors (betweenness centrality)", bold=True))
    ranked = sorted(report.centrality.items(), key=lambda kv: (-kv[1], kv[0].path))
    for project, score in ranked[:top]:
        click.echo(f"  {score:12.2f}  {project.path}")

    groups = {info.members: info for info in report.cycles.values()}
    click.echo(click.style(f"\nCycles: {len(groups)}", bold=True))
    for info in sorted(groups.values(), key=lambda i: -i.cycle_size):
        members = ", ".join(sorted(str(m) for m in info.members))
        click.echo(f"  [severity {info.severity}] {info.cycle_size} modules: {members}")

    on_path = sorted(
        (p for p, d in report.critical_path.items() if d.on_critical_path),
        key=lambda p: -report.critical_path[p].depth,
    )
    click.echo(click.style(f"\nCritical path ({len(on_path)} modules)", bold=True))
    for project in on_path:
        click.echo(f"  {report.critical_path[project].depth:4d}  {project.path}")

    click.echo(click.style("\nMost depended-on modules", bold=True))
    dependents = sorted(report.dependent_counts.items(), key=lambda kv: (-kv[1], kv[0].path))
    for project, count in dependents[:top]:
        click.echo(f"  {count:6d}  {project.path}")

    if report.target_paths:
        click.echo(click.style("\nApp critical paths", bold=True))
        for target_path in report.target_paths[:top]:
            click.echo(f"  {target_path.depth:4d}  {target_path.target}")


@cli.command()
@_ROOT_ARG
@click.option("--top", default=50, show_default=True, help="Rows to print")
@click.pass_context
def centrality(ctx, build_root: Path, top: int):
    """Rank modules by betweenness centrality."""
    graph = _load_graph(ctx, build_root)
    scores = compute_betweenness_centrality(graph.dependency_map)
    ranked = sorted(scores.items(), key=lambda kv: (-kv[1], kv[0].path))
    max_score = ranked[0][1] if ranked else 0.0

    click.echo(f"{'Rank':<6} {'Module':<70} {'Centrality':>15} {'Normalized':>12}")
    click.echo("-" * 105)
    for rank, (project, score) in enumerate(ranked[:top], start=1):
        normalized = score / max_score if max_score > 0 else 0.0
        click.echo(f"{rank:<6} {project.path:<70} {score:>15.2f} {normalized:>12.4f}")

    non_zero = sum(1 for score in scores.values() if score > 0)
    click.echo(f"\nTotal modules: {len(scores)}")
    click.echo(f"Modules with non-zero centrality: {non_zero}")


@cli.command()
@_ROOT_ARG
@click.pass_context
def cycles(ctx, build_root: Path):
    """List dependency cycles (strongly connected components)."""
    graph = _load_graph(ctx, build_root)
    result = detect_cycles(graph.dependency_map)
    if not result:
        click.echo("No dependency cycles found.")
        return

    groups = {info.members: info for info in result.values()}
    for info in sorted(groups.values(), key=lambda i: -i.cycle_size):
        click.echo(click.style(f"Cycle of {info.cycle_size} (severity {info.severity})", fg="red"))
        for member in sorted(str(m) for m in info.members):
            click.echo(f"  {member}")


@cli.command("critical-path")
@_ROOT_ARG
@click.option("--target", help="Trace the chain for one build target instead of the whole build")
@click.pass_context
def critical_path(ctx, build_root: Path, target: str | None):
    """Print the longest dependency chain."""
    graph = _load_graph(ctx, build_root)
    production = build_production_dependency_map(graph.dependency_map)

    if target:
        node = _project(graph, target)
        if node not in production:
            raise click.ClickException(str(NodeNotInGraphError(node)))
        result = analyze_critical_path_for(node, production, is_excluded_root, is_wiring)
        click.echo(f"{target}: depth {result.depth}")
        for project in result.chain:
            click.echo(f"  {project.path}")
        return

    infos = analyze_critical_path(production, is_excluded_root)
    on_path = sorted(
        (p for p, info in infos.items() if info.on_critical_path),
        key=lambda p: (-infos[p].depth, p.path),
    )
    for project in on_path:
        click.echo(f"{infos[project].depth:4d}  {project.path}")


@cli.command()
@_ROOT_ARG
@click.argument("project")
@click.option("--transitive/--direct", default=True, help="Include transitive dependencies")
@click.pass_context
def deps(ctx, build_root: Path, project: str, transitive: bool):
    """List the dependencies of PROJECT."""
    graph = _load_graph(ctx, build_root)
    node = _project(graph, project)
    try:
        direct = Graph(graph.dependency_map).successors_of(node)
    except NodeNotInGraphError as e:
        raise click.ClickException(str(e))

    found = transitive_closure(node, graph.dependency_map) - {node} if transitive else set(direct)
    for dep in sorted(found, key=lambda p: p.path):
        marker = "" if dep in direct else "  (transitive)"
        click.echo(f"{dep.path}{marker}")


@cli.command()
@_ROOT_ARG
@click.argument("project")
@click.option("--transitive/--direct", default=False, help="Include transitive consumers")
@click.pass_context
def consumers(ctx, build_root: Path, project: str, transitive: bool):
    """List the modules that depend on PROJECT."""
    graph = _load_graph(ctx, build_root)
    node = _project(graph, project)
    try:
        direct = Graph(graph.dependency_map).accessors_of(node)
    except NodeNotInGraphError as e:
        raise click.ClickException(str(e))

    found = transitive_closure(node, graph.reverse_dependency_map) - {node} if transitive else direct
    for consumer in sorted(found, key=lambda p: p.path):
        marker = "" if consumer in direct else "  (transitive)"
        click.echo(f"{consumer.path}{marker}")


@cli.command()
@_ROOT_ARG
@click.argument("source")
@click.argument("target")
@click.pass_context
def reason(ctx, build_root: Path, source: str, target: str):
    """Explain why SOURCE depends on TARGET via the shortest dependency path."""
    graph = _load_graph(ctx, build_root)
    path = Graph(graph.dependency_map).find_shortest_path(
        _project(graph, source), _project(graph, target),
    )
    if path is None:
        click.echo(f"{source} does not depend on {target}.")
        return
    click.echo(" -> ".join(node.path for node in path))


if __name__ == "__main__":
    cli()
