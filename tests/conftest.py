"""Shared fixtures: small Gradle builds written to a temp directory."""

from pathlib import Path

import pytest


def write_project(root: Path, path: str, content: str = "", kotlin: bool = True) -> Path:
    """Create the project directory for a Gradle path and write its build script."""
    project_dir = root.joinpath(*path.strip(":").split(":"))
    project_dir.mkdir(parents=True, exist_ok=True)
    script = project_dir / ("build.gradle.kts" if kotlin else "build.gradle")
    script.write_text(content)
    return script


@pytest.fixture
def sample_build(tmp_path):
    """:apps:main -> :feature:impl -> {:feature:public, :core}, :feature:public -> :core."""
    root = tmp_path.resolve()
    (root / "settings.gradle.kts").write_text('rootProject.name = "sample"\n')
    write_project(root, ":apps:main", """
plugins { id("com.android.application") }
dependencies {
  implementation(project(":feature:impl"))
}
""")
    write_project(root, ":feature:impl", """
dependencies {
  api(project(":feature:public"))
  implementation(project(":core"))
  // implementation(project(":legacy"))
}
""")
    write_project(root, ":feature:public", """
dependencies {
  api(project(':core'))
}
""", kotlin=False)
    write_project(root, ":core", "plugins { kotlin(\"jvm\") }\n")
    return root


@pytest.fixture
def cyclic_build(tmp_path):
    """:a -> :b -> :c -> :a, plus :d -> :a."""
    root = tmp_path.resolve()
    write_project(root, ":a", 'implementation(project(":b"))\n')
    write_project(root, ":b", 'implementation(project(":c"))\n')
    write_project(root, ":c", 'implementation(project(":a"))\n')
    write_project(root, ":d", 'implementation(project(":a"))\n')
    return root
