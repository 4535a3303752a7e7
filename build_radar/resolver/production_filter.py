"""Production-only view of a dependency map, with test configuration edges removed."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping

from build_radar.models import ProjectPath
from build_radar.resolver.buildscript_resolver import BLOCK_COMMENT_PATTERN

logger = logging.getLogger(__name__)

# Configuration/task avoidance keeps these out of production compilation
TEST_CONFIGURATIONS = frozenset({
    "testImplementation",
    "testApi",
    "testCompileOnly",
    "testRuntimeOnly",
    "androidTestImplementation",
    "androidTestApi",
    "androidTestCompileOnly",
    "androidTestRuntimeOnly",
    "testFixturesImplementation",
    "testFixturesApi",
    "screenshotTestImplementation",
})

PROJECT_DEP_WITH_CONFIG_PATTERN = re.compile(
    r"""(\w+)\s*(?:\(|\s).*?project\s*\(\s*(['"])(.*?)\2\s*\)"""
)


def _test_dependency_paths(project: ProjectPath) -> set[str]:
    text = BLOCK_COMMENT_PATTERN.sub("", project.build_file_path.read_text(encoding="utf-8"))
    paths: set[str] = set()
    for line in text.splitlines():
        line = line.split("//", 1)[0]
        for m in PROJECT_DEP_WITH_CONFIG_PATTERN.finditer(line):
            if m.group(1) in TEST_CONFIGURATIONS:
                paths.add(m.group(3))
    return paths


def build_production_dependency_map(
    dependency_map: Mapping[ProjectPath, Iterable[ProjectPath]],
) -> dict[ProjectPath, frozenset[ProjectPath]]:
    """Re-read each build script and drop successors declared under test configurations.

    Projects without a readable build script keep their full successor set.
    """
    production: dict[ProjectPath, frozenset[ProjectPath]] = {}
    dropped = 0
    for project, successors in dependency_map.items():
        successors = frozenset(successors)
        if not project.has_build_file:
            production[project] = successors
            continue
        try:
            test_paths = _test_dependency_paths(project)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not re-read %s, keeping all its edges: %s", project.path, e)
            production[project] = successors
            continue

        kept = frozenset(s for s in successors if s.path not in test_paths)
        dropped += len(successors) - len(kept)
        production[project] = kept

    logger.info("Production dependency map: dropped %d test-only edge(s)", dropped)
    return production
