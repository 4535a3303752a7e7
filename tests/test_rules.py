"""Tests for the rules file loader."""

import json

import pytest

from build_radar.models import (
    BuildscriptMatchRule,
    CaptureRule,
    ProjectPath,
    ProjectPathMatchRule,
    TypeSafeAccessorRule,
)
from build_radar.rules import (
    RULES_LOCATION,
    InvalidRulesError,
    TypeSafeAccessorInference,
    compute_rules,
    load_rules,
)


@pytest.fixture
def root(tmp_path):
    return tmp_path.resolve()


def _write_rules(root, content):
    rules_file = root / RULES_LOCATION
    rules_file.parent.mkdir(parents=True, exist_ok=True)
    rules_file.write_text(content if isinstance(content, str) else json.dumps(content))
    return rules_file


_IMPLICIT = [
    {"type": "project-path-match-rule", "pattern": ":foo", "includedProjects": [":bar"]},
    {"type": "buildscript-match-rule", "pattern": "example", "includedProjects": [":foo"]},
]


class TestLoadRules:
    def test_legacy_list_format(self, root):
        _write_rules(root, _IMPLICIT)
        rules = load_rules(root)
        assert rules.project_name is None
        assert rules.type_safe_accessor_inference is None
        assert {type(r) for r in rules.implicit_rules} == {ProjectPathMatchRule, BuildscriptMatchRule}

        by_type = {type(r): r for r in rules.implicit_rules}
        assert by_type[ProjectPathMatchRule].pattern.pattern == ":foo"
        assert by_type[ProjectPathMatchRule].included_projects == frozenset({ProjectPath(root, ":bar")})
        assert by_type[BuildscriptMatchRule].included_projects == frozenset({ProjectPath(root, ":foo")})

    def test_full_format(self, root):
        _write_rules(root, {
            "projectName": "example-project",
            "implicitRules": _IMPLICIT,
            "typeSafeAccessorInference": "STRICT",
        })
        rules = load_rules(root)
        assert rules.project_name == "example-project"
        assert len(rules.implicit_rules) == 2
        assert rules.type_safe_accessor_inference is TypeSafeAccessorInference.STRICT

    def test_capture_rule(self, root):
        _write_rules(root, [
            {"type": "capture-rule", "pattern": r'flag\("(\w+)"\)', "template": r":flags:\1"},
        ])
        (rule,) = load_rules(root).implicit_rules
        assert isinstance(rule, CaptureRule)
        assert rule.template == r":flags:\1"

    def test_missing_file(self, root):
        assert load_rules(root).implicit_rules == set()

    def test_empty_list(self, root):
        _write_rules(root, "[]")
        assert load_rules(root).implicit_rules == set()

    def test_explicit_path(self, root):
        custom = root / "custom.json"
        custom.write_text(json.dumps(_IMPLICIT))
        assert len(load_rules(root, custom).implicit_rules) == 2

    def test_unreadable_file(self, root):
        _write_rules(root, "")
        with pytest.raises(InvalidRulesError):
            load_rules(root)

    def test_unknown_rule_type(self, root):
        _write_rules(root, [{"type": "mystery-rule", "pattern": "x"}])
        with pytest.raises(InvalidRulesError):
            load_rules(root)

    def test_invalid_pattern(self, root):
        _write_rules(root, [{"type": "buildscript-match-rule", "pattern": "(", "includedProjects": []}])
        with pytest.raises(InvalidRulesError, match="Invalid rule pattern"):
            load_rules(root)

    def test_cause_is_chained(self, root):
        _write_rules(root, "{not json")
        with pytest.raises(InvalidRulesError) as exc_info:
            load_rules(root)
        assert exc_info.value.__cause__ is not None


class TestComputeRules:
    def test_disabled_keeps_implicit_rules_only(self, root):
        implicit = load_rules(root).implicit_rules
        assert compute_rules(root, "sample", implicit) == frozenset()

    def test_strict_adds_accessor_rule_without_table(self, root):
        rules = compute_rules(root, "my-build", inference=TypeSafeAccessorInference.STRICT)
        (rule,) = rules
        assert isinstance(rule, TypeSafeAccessorRule)
        assert rule.root_project_accessor == "myBuild"
        assert rule.is_strict

    def test_full_builds_accessor_table(self, root):
        projects = [ProjectPath(root, ":core:feed-api"), ProjectPath(root, ":app")]
        rules = compute_rules(
            root, "sample",
            inference=TypeSafeAccessorInference.FULL,
            all_projects=lambda: projects,
        )
        (rule,) = rules
        assert not rule.is_strict
        assert rule.accessor_map["core.feedApi"] == projects[0]
        assert rule.accessor_map["app"] == projects[1]
