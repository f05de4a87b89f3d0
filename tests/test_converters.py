"""Tests for the built-in scalar handlers (core/converters.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from forge_shell.core.converters import to_bool, to_dependency, to_float, to_int, to_path
from forge_shell.core.models import Dependency
from forge_shell.exceptions import ConversionError


class TestToBool:
    @pytest.mark.parametrize("word", ["true", "T", "yes", "Y", "on", "1", " yes "])
    def test_true_words(self, word: str) -> None:
        assert to_bool(word) is True

    @pytest.mark.parametrize("word", ["false", "F", "no", "n", "off", "0"])
    def test_false_words(self, word: str) -> None:
        assert to_bool(word) is False

    def test_rejects_other_text(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            to_bool("maybe")
        assert exc_info.value.hint == "Answer yes or no."


class TestNumbers:
    def test_int_strips_whitespace(self) -> None:
        assert to_int(" 42 ") == 42

    def test_float(self) -> None:
        assert to_float("2.5") == 2.5

    def test_int_rejects_text(self) -> None:
        with pytest.raises(ValueError):
            to_int("four")


class TestToPath:
    def test_expands_home(self) -> None:
        assert to_path("~/notes.txt") == Path.home() / "notes.txt"

    def test_relative_path_is_not_resolved(self) -> None:
        assert to_path("a/b") == Path("a/b")

    def test_empty_is_rejected(self) -> None:
        with pytest.raises(ConversionError):
            to_path("   ")


class TestToDependency:
    def test_group_and_artifact(self) -> None:
        assert to_dependency("org.example:lib") == Dependency("org.example", "lib")

    def test_full_coordinate(self) -> None:
        dependency = to_dependency("org.example:lib:1.0:jar:test")
        assert dependency.version == "1.0"
        assert dependency.packaging == "jar"
        assert dependency.scope == "test"
        assert str(dependency) == "org.example:lib:1.0:jar:test"

    @pytest.mark.parametrize("raw", ["lib", "a::b", "a:b:c:d:e:f", ""])
    def test_invalid_coordinates(self, raw: str) -> None:
        with pytest.raises(ConversionError, match="invalid dependency coordinate"):
            to_dependency(raw)
