"""Tests for local resources and path-spec expansion (infra/filesystem.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from forge_shell.core.models import Resource
from forge_shell.exceptions import ResourceNotFoundError
from forge_shell.infra.filesystem import (
    GlobPathspecResolver,
    LocalResourceFactory,
    context_directory,
    has_glob,
)

factory = LocalResourceFactory()


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "b.py").write_text("")
    (tmp_path / "src" / "a.py").write_text("")
    (tmp_path / "README.md").write_text("")
    return tmp_path


def _resolve(spec: str, current: Path, previous: Resource | None = None) -> list[Resource]:
    return GlobPathspecResolver().resolve(spec, current=factory.from_path(current), previous=previous)


class TestFactory:
    def test_absolute_and_directory_flag(self, tree: Path) -> None:
        resource = factory.from_path(tree / "src")
        assert resource.path == tree / "src"
        assert resource.is_directory

    def test_missing_path_is_not_a_directory(self, tree: Path) -> None:
        assert not factory.from_path(tree / "nope").is_directory

    def test_context_directory_of_a_file_is_its_parent(self, tree: Path) -> None:
        assert context_directory(factory.from_path(tree / "README.md")) == tree


class TestResolve:
    def test_glob_matches_sorted(self, tree: Path) -> None:
        matches = _resolve("src/*.py", tree)
        assert [match.path.name for match in matches] == ["a.py", "b.py"]

    def test_relative_to_a_file_uses_its_parent(self, tree: Path) -> None:
        matches = _resolve("src", tree / "README.md")
        assert [match.path for match in matches] == [tree / "src"]

    def test_parent_reference(self, tree: Path) -> None:
        assert [match.path for match in _resolve("..", tree / "src")] == [tree]

    def test_missing_plain_path_matches_nothing(self, tree: Path) -> None:
        assert _resolve("missing.txt", tree) == []

    def test_glob_without_matches(self, tree: Path) -> None:
        assert _resolve("*.rs", tree) == []

    def test_previous_location(self, tree: Path) -> None:
        previous = factory.from_path(tree / "src")
        assert _resolve("-", tree, previous) == [previous]
        assert _resolve("-", tree) == []

    def test_home_expansion(self, tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tree))
        assert [match.path for match in _resolve("~/README.md", tree / "src")] == [tree / "README.md"]


class TestLiteral:
    def test_missing_file_becomes_a_resource(self, tree: Path) -> None:
        resource = GlobPathspecResolver().literal("new.txt", current=factory.from_path(tree))
        assert resource.path == tree / "new.txt"
        assert not resource.is_directory

    @pytest.mark.parametrize("spec", ["-", "  ", "*.rs"])
    def test_unusable_specs(self, tree: Path, spec: str) -> None:
        with pytest.raises(ResourceNotFoundError):
            GlobPathspecResolver().literal(spec, current=factory.from_path(tree))


@pytest.mark.parametrize(("spec", "expected"), [("*.py", True), ("a?", True), ("[ab]", True), ("plain", False)])
def test_has_glob(spec: str, expected: bool) -> None:
    assert has_glob(spec) is expected
