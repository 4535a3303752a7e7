"""Project discovery: find every Gradle project under a build root."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from build_radar.models import (
    BUILDSCRIPTS,
    GRADLE_PATH_SEP,
    ProjectPath,
    project_path_relative_to,
)

_DEFAULT_SKIP_DIRS = ["build", "src", "src-gen"]


def _should_skip(name: str, skip_dirs: list[str]) -> bool:
    if name.startswith("."):
        return True
    return any(fnmatch.fnmatch(name, pattern) for pattern in skip_dirs)


def discover_projects(
    build_root: Path,
    skip_dirs: list[str] | None = None,
) -> list[ProjectPath]:
    """Walk build_root and return every project directory holding a build script, sorted by path.

    Skipped directories are pruned before descending so source trees are never walked.
    """
    skip_dirs = skip_dirs if skip_dirs is not None else _DEFAULT_SKIP_DIRS
    build_root = build_root.resolve()
    projects: list[ProjectPath] = []

    for dirpath, dirnames, filenames in os.walk(build_root):
        dirnames[:] = sorted(d for d in dirnames if not _should_skip(d, skip_dirs))
        directory = Path(dirpath)
        if directory == build_root:
            continue
        if any(name in filenames for name in BUILDSCRIPTS):
            projects.append(project_path_relative_to(directory, build_root))

    projects.sort(key=lambda p: p.path)
    return projects


def read_project_list(list_file: Path, build_root: Path) -> list[ProjectPath]:
    """Read seed projects from a newline-separated list; `#` comments and blanks are ignored."""
    build_root = build_root.resolve()
    projects: list[ProjectPath] = []
    for line in list_file.read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        if not line.startswith(GRADLE_PATH_SEP):
            line = GRADLE_PATH_SEP + line
        projects.append(ProjectPath(build_root, line))
    return list(dict.fromkeys(projects))
