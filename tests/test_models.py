"""Tests for the frozen domain models (core/models.py)."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from forge_shell.core.models import (
    ArrayOf,
    Dependency,
    Resource,
    SourceResource,
    SynthesizedUnit,
)


class TestResource:
    def test_name_is_last_component(self) -> None:
        assert Resource(path=Path("/work/notes.txt")).name == "notes.txt"

    def test_root_name_falls_back_to_full_path(self) -> None:
        assert Resource(path=Path("/"), is_directory=True).name == "/"

    def test_str_is_fully_qualified(self) -> None:
        resource = Resource(path=Path("/work/src"), is_directory=True)
        assert str(resource) == "/work/src"
        assert resource.fully_qualified_name == "/work/src"

    def test_is_frozen(self) -> None:
        resource = Resource(path=Path("/work"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            resource.is_directory = True  # type: ignore[misc]

    def test_source_resource_is_a_resource(self) -> None:
        source = SourceResource(path=Path("/work/src/pkg/mod.py"), module="pkg.mod")
        assert isinstance(source, Resource)
        assert source.name == "mod.py"
        assert source.module == "pkg.mod"


class TestDependency:
    def test_minimal_coordinate(self) -> None:
        assert str(Dependency("org.example", "lib")) == "org.example:lib"

    def test_full_coordinate(self) -> None:
        dep = Dependency("org.example", "lib", "1.2", "jar", "test")
        assert str(dep) == "org.example:lib:1.2:jar:test"

    def test_trailing_parts_stop_at_first_gap(self) -> None:
        dep = Dependency("org.example", "lib", None, "jar")
        assert str(dep) == "org.example:lib"


def test_array_of_str() -> None:
    assert str(ArrayOf(Resource)) == "Resource[]"


def test_synthesized_unit_text_concatenates_parts() -> None:
    unit = SynthesizedUnit(
        name="f_1",
        parameters=("_0",),
        arguments=("'a'",),
        prologue="def f_1(_0):\n",
        body="    print(_0)\n",
        epilogue="f_1('a')\n",
    )
    assert unit.text == "def f_1(_0):\n    print(_0)\nf_1('a')\n"
