"""Data models for the build-radar graph analysis."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Hashable, Mapping, Union

GRADLE_PATH_SEP = ":"
GRADLE_SCRIPT = "build.gradle"
GRADLE_SCRIPT_KOTLIN = "build.gradle.kts"
BUILDSCRIPTS = (GRADLE_SCRIPT, GRADLE_SCRIPT_KOTLIN)

_ACCESSOR_SPLIT = re.compile(r"[.\-_]")


@dataclass(frozen=True)
class ProjectPath:
    """A node in the build graph: a build root plus a Gradle project path."""
    root: Path
    path: str

    def __str__(self) -> str:
        return self.path

    @property
    def project_dir(self) -> Path:
        relative = self.path.removeprefix(GRADLE_PATH_SEP)
        if not relative:
            return self.root
        return self.root.joinpath(*relative.split(GRADLE_PATH_SEP))

    @property
    def has_build_file(self) -> bool:
        return any((self.project_dir / name).exists() for name in BUILDSCRIPTS)

    @property
    def build_file_path(self) -> Path:
        for name in BUILDSCRIPTS:
            candidate = self.project_dir / name
            if candidate.exists():
                return candidate
        raise FileNotFoundError(f"No build.gradle(.kts) for {self.path} found")

    @property
    def is_root_project(self) -> bool:
        return self.path == GRADLE_PATH_SEP

    @property
    def name(self) -> str:
        return self.path.rsplit(GRADLE_PATH_SEP, 1)[-1]

    @property
    def parent(self) -> ProjectPath | None:
        if self.is_root_project:
            return None
        parent_path = self.path.rpartition(GRADLE_PATH_SEP)[0]
        return ProjectPath(self.root, parent_path or GRADLE_PATH_SEP)

    @property
    def type_safe_accessor_name(self) -> str:
        """Name of the generated `projects.*` accessor, e.g. `:core:feed-api` -> `core.feedApi`."""
        children = self.path.removeprefix(GRADLE_PATH_SEP).split(GRADLE_PATH_SEP)
        parts = []
        for child in children:
            segments = _ACCESSOR_SPLIT.split(child)
            parts.append(segments[0] + "".join(s[:1].upper() + s[1:] for s in segments[1:]))
        return ".".join(parts)


def project_path_relative_to(directory: Path, build_root: Path) -> ProjectPath:
    """Build the ProjectPath for a project directory inside build_root."""
    relative = directory.relative_to(build_root)
    return ProjectPath(build_root, GRADLE_PATH_SEP + GRADLE_PATH_SEP.join(relative.parts))


# ── Implicit dependency rules ────────────────────────────────

@dataclass(frozen=True)
class BuildscriptMatchRule:
    """Adds included_projects when any build script line matches pattern."""
    pattern: re.Pattern
    included_projects: frozenset[ProjectPath] = frozenset()


@dataclass(frozen=True)
class ProjectPathMatchRule:
    """Adds included_projects when the project's own path matches pattern."""
    pattern: re.Pattern
    included_projects: frozenset[ProjectPath] = frozenset()


@dataclass(frozen=True)
class CaptureRule:
    """Synthesizes one successor per match by expanding template with the match groups."""
    pattern: re.Pattern
    template: str


@dataclass(frozen=True)
class TypeSafeAccessorRule:
    """Resolves `projects.*` accessors.

    With an accessor_map every accessor must be present in it. Without one the
    accessor is converted to its default kebab-case project path.
    """
    root_project_accessor: str
    accessor_map: Mapping[str, ProjectPath] | None = field(default=None, hash=False)

    @property
    def is_strict(self) -> bool:
        return self.accessor_map is None


Rule = Union[BuildscriptMatchRule, ProjectPathMatchRule, CaptureRule, TypeSafeAccessorRule]


# ── Analysis results ─────────────────────────────────────────

@dataclass(frozen=True)
class CycleInfo:
    """Shared by every member of one strongly connected component of size >= 2."""
    cycle_size: int
    members: frozenset
    severity: int


@dataclass(frozen=True)
class DepthInfo:
    depth: int  # longest path down to any sink
    on_critical_path: bool


@dataclass
class TargetCriticalPath:
    """The serialized compilation chain for one build target, deepest module first."""
    target: Hashable
    depth: int
    chain: list = field(default_factory=list)


@dataclass
class AnalysisConfig:
    """Configuration for one analysis pass."""
    build_root: Path = field(default_factory=lambda: Path("."))
    rules_path: Path | None = None
    root_project_name: str | None = None
    project_list: Path | None = None
    max_workers: int = 4
    skip_dirs: list[str] = field(default_factory=lambda: [
        "build", "src", "src-gen", ".git", ".gradle", ".idea",
        "node_modules", "buildSrc",
    ])
