"""Regex-based build script resolver for build.gradle and build.gradle.kts."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from build_radar.models import (
    GRADLE_PATH_SEP,
    BuildscriptMatchRule,
    CaptureRule,
    ProjectPath,
    ProjectPathMatchRule,
    Rule,
    TypeSafeAccessorRule,
)
from build_radar.resolver.base import BaseResolver, UnknownAccessorError

logger = logging.getLogger(__name__)

PROJECT_DEP_PATTERN = re.compile(r"""project\s*\((['"])(.*?)\1\)""")
TYPESAFE_PROJECT_DEP_PATTERN = re.compile(r"\b(projects\.[\w.]+)\b")
STRING_LITERAL_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'")
BLOCK_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
CAMELCASE_PATTERN = re.compile(r"(?<=.)([A-Z])")


def accessor_as_default_path(accessor: str) -> str:
    """`features.featureA` -> `:features:feature-a`."""
    kebab = CAMELCASE_PATTERN.sub(r"-\1", accessor.replace(".", GRADLE_PATH_SEP))
    return GRADLE_PATH_SEP + kebab.lower()


def _clean_accessor(accessor: str, root_project_accessor: str) -> str:
    accessor = accessor.removeprefix("projects.")
    accessor = accessor.removeprefix(f"{root_project_accessor}.")
    accessor = accessor.removesuffix(".dependencyProject")
    return accessor.removesuffix(".path")


class BuildscriptResolver(BaseResolver):
    """Parse a project's build script and apply implicit dependency rules."""

    def resolve(self, node: ProjectPath, rules: Iterable[Rule]) -> frozenset[ProjectPath]:
        if not node.has_build_file:
            logger.warning("%s has no build script, treating it as a leaf", node.path)
            return frozenset()

        rules = list(rules)
        text = node.build_file_path.read_text(encoding="utf-8", errors="replace")
        lines = self._code_lines(text)

        successors: set[ProjectPath] = set()
        successors.update(self._direct_dependencies(node, lines))
        successors.update(self._type_safe_dependencies(node, lines, rules))
        successors.update(self._implicit_dependencies(node, lines, rules))
        successors.update(self._implicit_parent_projects(node))

        logger.debug("%s -> %d successor(s)", node.path, len(successors))
        return frozenset(successors)

    @staticmethod
    def _code_lines(text: str) -> list[str]:
        """Drop block comments and `//` line comments."""
        text = BLOCK_COMMENT_PATTERN.sub("", text)
        return [line.split("//", 1)[0] for line in text.splitlines()]

    @staticmethod
    def _direct_dependencies(node: ProjectPath, lines: list[str]) -> set[ProjectPath]:
        return {
            ProjectPath(node.root, m.group(2))
            for line in lines
            for m in PROJECT_DEP_PATTERN.finditer(line)
        }

    @staticmethod
    def _type_safe_dependencies(
        node: ProjectPath,
        lines: list[str],
        rules: list[Rule],
    ) -> set[ProjectPath]:
        rule = next((r for r in rules if isinstance(r, TypeSafeAccessorRule)), None)
        if rule is None:
            return set()

        result: set[ProjectPath] = set()
        for line in lines:
            line = STRING_LITERAL_PATTERN.sub("", line)
            for m in TYPESAFE_PROJECT_DEP_PATTERN.finditer(line):
                accessor = m.group(1)
                clean = _clean_accessor(accessor, rule.root_project_accessor)
                if rule.is_strict:
                    result.add(ProjectPath(node.root, accessor_as_default_path(clean)))
                    continue
                target = rule.accessor_map.get(clean)
                if target is None:
                    raise UnknownAccessorError(accessor, node)
                result.add(target)
        return result

    @staticmethod
    def _implicit_dependencies(
        node: ProjectPath,
        lines: list[str],
        rules: list[Rule],
    ) -> set[ProjectPath]:
        result: set[ProjectPath] = set()
        for rule in rules:
            if isinstance(rule, BuildscriptMatchRule):
                if any(rule.pattern.search(line) for line in lines):
                    result.update(rule.included_projects)
            elif isinstance(rule, ProjectPathMatchRule):
                if rule.pattern.search(node.path):
                    result.update(rule.included_projects)
            elif isinstance(rule, CaptureRule):
                for m in rule.pattern.finditer("\n".join(lines)):
                    result.add(ProjectPath(node.root, m.expand(rule.template)))
            elif isinstance(rule, TypeSafeAccessorRule):
                continue
            else:
                raise TypeError(f"Unsupported dependency rule: {rule!r}")
        return result

    @staticmethod
    def _implicit_parent_projects(node: ProjectPath) -> set[ProjectPath]:
        """Including `:a:b:c` implicitly includes `:a:b` and `:a` when they have build scripts."""
        result: set[ProjectPath] = set()
        parent = node.parent
        while parent is not None and not parent.is_root_project:
            if parent.has_build_file:
                result.add(parent)
            parent = parent.parent
        return result
