"""Module-type classification by project path naming conventions."""

from __future__ import annotations

import enum

from build_radar.models import ProjectPath


class ModuleType(enum.Enum):
    PUBLIC = "public"
    IMPL = "impl"
    FAKE = "fake"
    WIRING = "wiring"
    INTERNAL = "internal"
    DEMO = "demo"
    TESTING = "testing"
    TESTING_ANDROID = "testingAndroid"
    TEST_SUITE = "test-suite"
    TEST_APP = "test-app"
    APP = "app"
    OTHER = "other"


# Build targets and glue; never interesting as library bottlenecks
EXCLUDED_ROOT_TYPES = frozenset({
    ModuleType.APP,
    ModuleType.DEMO,
    ModuleType.TEST_APP,
    ModuleType.TEST_SUITE,
    ModuleType.WIRING,
})


def _is_named(segment: str, name: str) -> bool:
    return segment == name or segment.startswith(f"{name}-")


def detect_module_type(project: ProjectPath) -> ModuleType:
    last = project.name

    if last == "public":
        return ModuleType.PUBLIC
    if last == "testingAndroid":
        return ModuleType.TESTING_ANDROID
    if last == "testing":
        return ModuleType.TESTING
    if _is_named(last, "test-suite"):
        return ModuleType.TEST_SUITE
    if _is_named(last, "test-app"):
        return ModuleType.TEST_APP
    if _is_named(last, "demo"):
        return ModuleType.DEMO
    if _is_named(last, "internal"):
        return ModuleType.INTERNAL
    if last.endswith(("-wiring", "-robots")):
        return ModuleType.WIRING
    if _is_named(last, "fake"):
        return ModuleType.FAKE
    if _is_named(last, "impl"):
        return ModuleType.IMPL
    if project.path.startswith(":apps:"):
        return ModuleType.APP
    return ModuleType.OTHER


def is_excluded_root(project: ProjectPath) -> bool:
    return detect_module_type(project) in EXCLUDED_ROOT_TYPES


def is_wiring(project: ProjectPath) -> bool:
    return detect_module_type(project) is ModuleType.WIRING


def is_app(project: ProjectPath) -> bool:
    return detect_module_type(project) is ModuleType.APP
