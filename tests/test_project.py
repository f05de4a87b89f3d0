"""Tests for project detection and module lookup (infra/project.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from forge_shell.core.conversion import PYTHON_SOURCE_CAPABILITY
from forge_shell.exceptions import ResourceNotFoundError
from forge_shell.infra.filesystem import LocalResourceFactory
from forge_shell.infra.project import (
    DirectoryProject,
    PythonSourceCapability,
    has_python_sources,
    locate_project,
)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "demo"
    package = root / "src" / "demo"
    (package / "sub").mkdir(parents=True)
    (root / "pyproject.toml").write_text("[project]\nname = 'demo'\n")
    (package / "__init__.py").write_text("")
    (package / "core.py").write_text("")
    (package / "cli.py").write_text("")
    (package / "sub" / "__init__.py").write_text("")
    return root


class TestLocateProject:
    def test_found_from_nested_file(self, project_root: Path) -> None:
        resource = LocalResourceFactory().from_path(project_root / "src" / "demo" / "core.py")
        project = locate_project(resource)
        assert project is not None
        assert project.root == project_root
        assert project.name == "demo"

    def test_none_outside_a_project(self, tmp_path: Path) -> None:
        lone = tmp_path / "lone"
        lone.mkdir()
        assert locate_project(LocalResourceFactory().from_path(lone)) is None


class TestDirectoryProject:
    def test_python_source_capability(self, project_root: Path) -> None:
        project = DirectoryProject(project_root)
        assert project.has_capability(PYTHON_SOURCE_CAPABILITY)
        capability = project.get_capability(PYTHON_SOURCE_CAPABILITY)
        assert capability.source_root == project_root / "src"

    def test_no_sources_no_capability(self, tmp_path: Path) -> None:
        (tmp_path / "setup.cfg").write_text("")
        project = DirectoryProject(tmp_path)
        assert not project.has_capability(PYTHON_SOURCE_CAPABILITY)
        with pytest.raises(LookupError):
            project.get_capability(PYTHON_SOURCE_CAPABILITY)

    def test_capabilities_detected_on_first_use(self, tmp_path: Path) -> None:
        (tmp_path / "setup.cfg").write_text("")
        project = DirectoryProject(tmp_path)
        assert project.source_root == tmp_path
        (tmp_path / "late.py").write_text("")
        assert project.has_capability(PYTHON_SOURCE_CAPABILITY)


class TestHasPythonSources:
    def test_found_within_depth(self, tmp_path: Path) -> None:
        nested = tmp_path / "a" / "b" / "c"
        nested.mkdir(parents=True)
        (nested / "mod.py").write_text("")
        assert has_python_sources(tmp_path)

    def test_deeper_files_are_not_searched(self, tmp_path: Path) -> None:
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        (nested / "mod.py").write_text("")
        assert has_python_sources(tmp_path, depth=3)
        assert not has_python_sources(tmp_path, depth=2)

    def test_no_sources(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("")
        assert not has_python_sources(tmp_path)


class TestPythonSourceCapability:
    def _capability(self, project_root: Path) -> PythonSourceCapability:
        return PythonSourceCapability(project_root / "src")

    def test_module_and_package(self, project_root: Path) -> None:
        capability = self._capability(project_root)
        assert [source.module for source in capability.resolve("demo.core")] == ["demo.core"]
        assert [source.module for source in capability.resolve("demo.sub")] == ["demo.sub"]

    def test_glob_segment(self, project_root: Path) -> None:
        modules = [source.module for source in self._capability(project_root).resolve("demo.c*")]
        assert modules == ["demo.cli", "demo.core"]

    def test_py_suffix_is_accepted(self, project_root: Path) -> None:
        assert len(self._capability(project_root).resolve("demo.core.py")) == 1

    def test_empty_spec(self, project_root: Path) -> None:
        assert self._capability(project_root).resolve("  ") == []

    def test_get_source(self, project_root: Path) -> None:
        source = self._capability(project_root).get_source("demo")
        assert source.path == project_root / "src" / "demo" / "__init__.py"

    def test_get_source_missing(self, project_root: Path) -> None:
        with pytest.raises(ResourceNotFoundError, match="no module named 'demo.nope'"):
            self._capability(project_root).get_source("demo.nope")
