"""Rules file loader: reads implicit dependency rules from gradle/build-radar-rules.json."""

from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Callable, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from build_radar.models import (
    BuildscriptMatchRule,
    CaptureRule,
    ProjectPath,
    ProjectPathMatchRule,
    Rule,
    TypeSafeAccessorRule,
)

logger = logging.getLogger(__name__)

RULES_LOCATION = Path("gradle") / "build-radar-rules.json"


class InvalidRulesError(Exception):
    """The rules file exists but could not be parsed."""


class TypeSafeAccessorInference(enum.Enum):
    DISABLED = "DISABLED"
    STRICT = "STRICT"
    FULL = "FULL"


# ── On-disk schema ───────────────────────────────────────────

class _RuleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    pattern: str


class ProjectPathMatchRuleModel(_RuleModel):
    type: Literal["project-path-match-rule"]
    included_projects: list[str] = Field(default_factory=list, alias="includedProjects")


class BuildscriptMatchRuleModel(_RuleModel):
    type: Literal["buildscript-match-rule"]
    included_projects: list[str] = Field(default_factory=list, alias="includedProjects")


class CaptureRuleModel(_RuleModel):
    type: Literal["capture-rule"]
    template: str


RuleModel = Annotated[
    Union[ProjectPathMatchRuleModel, BuildscriptMatchRuleModel, CaptureRuleModel],
    Field(discriminator="type"),
]


class RulesFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    project_name: str | None = Field(default=None, alias="projectName")
    implicit_rules: list[RuleModel] = Field(default_factory=list, alias="implicitRules")
    type_safe_accessor_inference: TypeSafeAccessorInference | None = Field(
        default=None, alias="typeSafeAccessorInference",
    )


# ── Materialized rules ───────────────────────────────────────

@dataclass
class BuildRules:
    implicit_rules: set[Rule] = field(default_factory=set)
    project_name: str | None = None
    type_safe_accessor_inference: TypeSafeAccessorInference | None = None


def _to_rule(model: ProjectPathMatchRuleModel | BuildscriptMatchRuleModel | CaptureRuleModel,
             build_root: Path) -> Rule:
    try:
        pattern = re.compile(model.pattern)
    except re.error as e:
        raise InvalidRulesError(f"Invalid rule pattern {model.pattern!r}: {e}") from e

    if isinstance(model, CaptureRuleModel):
        return CaptureRule(pattern=pattern, template=model.template)

    included = frozenset(ProjectPath(build_root, p) for p in model.included_projects)
    if isinstance(model, ProjectPathMatchRuleModel):
        return ProjectPathMatchRule(pattern=pattern, included_projects=included)
    return BuildscriptMatchRule(pattern=pattern, included_projects=included)


def parse_rules(text: str, build_root: Path) -> BuildRules:
    """Parse rules JSON. A bare list of rules is accepted as the legacy format."""
    try:
        data = json.loads(text)
        if isinstance(data, list):
            data = {"implicitRules": data}
        rules_file = RulesFile.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise InvalidRulesError(f"Rules at {RULES_LOCATION} were invalid") from e

    return BuildRules(
        implicit_rules={_to_rule(m, build_root) for m in rules_file.implicit_rules},
        project_name=rules_file.project_name,
        type_safe_accessor_inference=rules_file.type_safe_accessor_inference,
    )


def load_rules(build_root: Path, rules_path: Path | None = None) -> BuildRules:
    """Read the rules file for build_root; a missing file yields empty rules."""
    rules_path = rules_path or build_root / RULES_LOCATION
    if not rules_path.exists():
        logger.debug("No rules file at %s", rules_path)
        return BuildRules()

    rules = parse_rules(rules_path.read_text(encoding="utf-8"), build_root)
    logger.info("Loaded %d implicit rule(s) from %s", len(rules.implicit_rules), rules_path)
    return rules


def compute_rules(
    build_root: Path,
    project_name: str,
    implicit_rules: Iterable[Rule] = (),
    inference: TypeSafeAccessorInference = TypeSafeAccessorInference.DISABLED,
    all_projects: Callable[[], Iterable[ProjectPath]] = lambda: (),
) -> frozenset[Rule]:
    """All rules to apply during graph expansion, including the accessor rule for the inference level."""
    rules = set(implicit_rules)
    if inference is TypeSafeAccessorInference.DISABLED:
        return frozenset(rules)

    root_accessor = ProjectPath(build_root, ":" + project_name).type_safe_accessor_name
    if inference is TypeSafeAccessorInference.FULL:
        accessor_map = {p.type_safe_accessor_name: p for p in all_projects()}
        rules.add(TypeSafeAccessorRule(root_accessor, accessor_map))
    else:
        rules.add(TypeSafeAccessorRule(root_accessor))
    return frozenset(rules)
