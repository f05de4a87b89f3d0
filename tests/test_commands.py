"""Tests for the command table and argument binding (core/commands.py)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from forge_shell.core.commands import (
    ArgumentBinder,
    CommandTable,
    expand_variables,
    split_arguments,
    target_for,
)
from forge_shell.core.conversion import ConversionRegistry
from forge_shell.core.converters import install_scalar_handlers
from forge_shell.core.models import ArrayOf
from forge_shell.exceptions import CommandParseError


# ---------------------------------------------------------------------------
# Sample handlers
# ---------------------------------------------------------------------------

def greet(ctx: Any, name: str, times: int = 1) -> None:
    """Greet someone.

    More detail that help should not show.
    """


def total(ctx: Any, numbers: list[int]) -> None:
    """Add numbers."""


def build(ctx: Any, target: str, *, dry_run: bool = False, jobs: int = 1) -> None:
    """Build a target."""


def deploy(ctx: Any, *, env: str) -> None:
    """Deploy somewhere."""


def tag(ctx: Any, first: str, *rest: int) -> None:
    """Tag things."""


def _binder() -> ArgumentBinder:
    registry = ConversionRegistry()
    install_scalar_handlers(registry)
    return ArgumentBinder(registry)


def _table() -> CommandTable:
    table = CommandTable()
    table.register("greet", greet)
    table.register("total", total)
    table.register("build", build)
    table.register("deploy", deploy)
    table.register("tag", tag, aliases=("label",))
    return table


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------

class TestCommandTable:
    def test_help_defaults_to_first_docstring_line(self) -> None:
        command = _table().get("greet")
        assert command is not None
        assert command.help == "Greet someone."

    def test_alias_lookup(self) -> None:
        table = _table()
        assert "label" in table
        assert table.get("label") is table.get("tag")

    def test_names_include_aliases_sorted(self) -> None:
        assert _table().names() == ["build", "deploy", "greet", "label", "tag", "total"]

    def test_iteration_is_sorted_without_aliases(self) -> None:
        assert [command.name for command in _table()] == ["build", "deploy", "greet", "tag", "total"]

    def test_decorator_registers(self) -> None:
        table = CommandTable()

        @table.command("hello", plugin="demo")
        def hello(ctx: Any) -> None:
            """Say hello."""

        command = table.get("hello")
        assert command is not None
        assert command.plugin == "demo"
        assert command.handler is hello

    def test_non_string_membership(self) -> None:
        assert 3 not in _table()


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

class TestExpandVariables:
    def _lookup(self, name: str) -> Any:
        return {"USER": "ada", "SPACED": "a b", "EMPTY": ""}.get(name)

    def test_plain_and_braced(self) -> None:
        assert expand_variables("hi $USER ${USER}!", self._lookup) == "hi ada ada!"

    def test_single_quotes_suppress_expansion(self) -> None:
        assert expand_variables("'$USER'", self._lookup) == "'$USER'"

    def test_double_quotes_expand(self) -> None:
        assert expand_variables('"$USER"', self._lookup) == '"ada"'

    def test_values_stay_one_token(self) -> None:
        expanded = expand_variables("echo $SPACED", self._lookup)
        assert split_arguments("echo", expanded) == ["echo", "a b"]

    def test_unset_and_empty_values_vanish_outside_quotes(self) -> None:
        assert split_arguments("x", expand_variables("$MISSING $EMPTY", self._lookup)) == []

    def test_escaped_dollar_is_kept(self) -> None:
        assert split_arguments("x", expand_variables(r"\$USER", self._lookup)) == ["$USER"]


class TestSplitArguments:
    def test_shell_quoting(self) -> None:
        assert split_arguments("x", "a 'b c' \"d e\"") == ["a", "b c", "d e"]

    def test_unbalanced_quote_is_parse_error(self) -> None:
        with pytest.raises(CommandParseError) as exc_info:
            split_arguments("echo", "'oops")
        assert exc_info.value.command == "echo"


class TestTargetFor:
    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (int, int),
            (Optional[int], int),
            (int | None, int),
            (list[Path], ArrayOf(Path)),
            (tuple[int, ...], ArrayOf(int)),
            (Any, str),
        ],
    )
    def test_mapping(self, annotation: Any, expected: Any) -> None:
        assert target_for(annotation) == expected


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------

class TestArgumentBinder:
    def _bind(self, name: str, tokens: list[str]) -> tuple[list[Any], dict[str, Any]]:
        command = _table().get(name)
        assert command is not None
        return _binder().bind(command, tokens)

    def test_positional_conversion_and_default(self) -> None:
        assert self._bind("greet", ["ada"]) == (["ada", 1], {})
        assert self._bind("greet", ["ada", "3"]) == (["ada", 3], {})

    def test_list_parameter_is_greedy(self) -> None:
        assert self._bind("total", ["1", "2", "3"]) == ([[1, 2, 3]], {})

    def test_empty_list_parameter(self) -> None:
        assert self._bind("total", []) == ([[]], {})

    def test_options_and_flags(self) -> None:
        args, kwargs = self._bind("build", ["--dry-run", "app", "--jobs", "4"])
        assert args == ["app"]
        assert kwargs == {"dry_run": True, "jobs": 4}

    def test_double_dash_ends_options(self) -> None:
        args, kwargs = self._bind("build", ["--", "--dry-run"])
        assert args == ["--dry-run"]
        assert kwargs == {}

    def test_var_positional_converts_each(self) -> None:
        assert self._bind("tag", ["a", "1", "2"]) == (["a", 1, 2], {})

    def test_missing_argument(self) -> None:
        with pytest.raises(CommandParseError, match="missing required argument: name"):
            self._bind("greet", [])

    def test_too_many_arguments(self) -> None:
        with pytest.raises(CommandParseError, match="too many arguments: extra"):
            self._bind("greet", ["ada", "2", "extra"])

    def test_unknown_option(self) -> None:
        with pytest.raises(CommandParseError, match="unknown option: --fast"):
            self._bind("build", ["app", "--fast"])

    def test_option_without_value(self) -> None:
        with pytest.raises(CommandParseError, match="requires a value"):
            self._bind("build", ["app", "--jobs"])

    def test_missing_required_option(self) -> None:
        with pytest.raises(CommandParseError, match="missing required option: --env"):
            self._bind("deploy", [])

    def test_conversion_failure_is_parse_error_naming_command(self) -> None:
        with pytest.raises(CommandParseError) as exc_info:
            self._bind("greet", ["ada", "many"])
        assert exc_info.value.command == "greet"
        assert "cannot convert 'many' to int" in str(exc_info.value)

    def test_unresolvable_context_annotation_still_binds(self) -> None:
        namespace: dict[str, Any] = {}
        exec(
            "from __future__ import annotations\n"
            "def show(shell: MissingShell, count: int) -> None:\n"
            "    pass\n",
            namespace,
        )
        table = CommandTable()
        command = table.register("show", namespace["show"])
        assert _binder().bind(command, ["5"]) == ([5], {})

    def test_several_unresolvable_annotations_bind_as_text(self) -> None:
        namespace: dict[str, Any] = {}
        exec(
            "from __future__ import annotations\n"
            "def tag(shell: MissingShell, label: MissingLabel, counts: list[int]) -> None:\n"
            "    pass\n",
            namespace,
        )
        table = CommandTable()
        command = table.register("tag", namespace["tag"])
        assert _binder().bind(command, ["v1", "1", "2"]) == (["v1", [1, 2]], {})
