"""Regression tests for optional UI dependencies (rich/prompt_toolkit).

Bootstrap commands must keep working when the UI packages are missing;
the interactive shell fails cleanly only when it actually needs them.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from forge_shell.cli import exit_codes
from forge_shell.cli.app import main
from forge_shell.cli.console import console, err_console
from forge_shell.cli.prompt_expander import RichPromptExpander
from forge_shell.cli.shell import Shell
from forge_shell.core.session import Session
from forge_shell.exceptions import EnvironmentError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.markup", None)
    monkeypatch.setitem(sys.modules, "rich.table", None)
    monkeypatch.setitem(sys.modules, "rich.text", None)


def _hide_prompt_toolkit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "prompt_toolkit", None)


def test_help_works_without_rich_or_prompt_toolkit(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_prompt_toolkit(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich_or_prompt_toolkit(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_prompt_toolkit(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_doctor_works_without_rich(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _hide_rich(monkeypatch)

    code = main(["--config-dir", str(tmp_path), "doctor"])
    assert code in (exit_codes.SUCCESS, exit_codes.GENERAL_ERROR)


def test_shell_errors_cleanly_when_prompt_toolkit_missing(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _hide_prompt_toolkit(monkeypatch)

    with pytest.raises(EnvironmentError, match="prompt_toolkit is not installed"):
        Shell.create(config_dir=tmp_path)


def test_console_falls_back_to_plain_print(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _hide_rich(monkeypatch)

    console.print("[bold]kept[/bold]")
    err_console.print("to stderr")
    captured = capsys.readouterr()
    assert captured.out == "[bold]kept[/bold]\n"
    assert captured.err == "to stderr\n"


def test_prompt_expands_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    assert RichPromptExpander(color=True).expand(r"\c{green}ok\c> ", Session()) == "ok> "
