"""Shared pytest fixtures and fakes for the forge-shell test suite.

Guidelines
----------
* No real terminal: input comes from :class:`ScriptedReader`.
* Files live under ``tmp_path``; the user's ``~/.forge`` is never touched.
* Core tests stay pure and build their collaborators by hand.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest

from forge_shell.cli.prompt_expander import RichPromptExpander
from forge_shell.cli.shell import Shell
from forge_shell.core.models import Resource
from forge_shell.core.script_wrapper import PythonDialect
from forge_shell.core.session import Session
from forge_shell.infra.config_store import ConfigStore
from forge_shell.infra.history_store import HistoryStore

FILE_COMPLETER = object()
"""Stands in for the filename completer returned by :class:`ScriptedReader`."""


class ScriptedReader:
    """LineReader fake replaying scripted input.

    Items are returned in order: a string is a typed line, ``None`` is end
    of input, and an exception (instance or class) is raised.  Once the
    script is exhausted every read returns ``None``.
    """

    def __init__(self, lines: Iterable[Any] = ()) -> None:
        self.lines: list[Any] = list(lines)
        self.calls: list[dict[str, Any]] = []
        self.history_lines: list[str] = []
        self.words: list[str] = []

    @property
    def prompts(self) -> list[str]:
        return [call["prompt"] for call in self.calls]

    def read_line(
        self,
        prompt: str,
        *,
        completer: Any | None = None,
        history: bool = True,
    ) -> str | None:
        self.calls.append({"prompt": prompt, "completer": completer, "history": history})
        if not self.lines:
            return None
        item = self.lines.pop(0)
        if isinstance(item, BaseException) or (
            isinstance(item, type) and issubclass(item, BaseException)
        ):
            raise item
        return item

    def file_completer(self) -> Any:
        return FILE_COMPLETER

    def load_history(self, lines: Sequence[str]) -> None:
        self.history_lines.extend(lines)

    def set_words(self, words: Sequence[str]) -> None:
        self.words = list(words)


class RecordingEvaluator:
    """Evaluator fake recording every script it is asked to run."""

    dialect = PythonDialect()

    def __init__(self, failures: dict[str, BaseException] | None = None) -> None:
        self.scripts: list[str] = []
        self.failures = failures or {}

    def run(self, script: str) -> None:
        self.scripts.append(script)
        failure = self.failures.get(script.strip())
        if failure is not None:
            raise failure


@pytest.fixture
def session(tmp_path: Path) -> Session:
    """A session positioned in an empty working directory."""
    work = tmp_path / "work"
    work.mkdir()
    result = Session()
    result.set_current_resource(Resource(path=work, is_directory=True))
    return result


@pytest.fixture
def reader() -> ScriptedReader:
    return ScriptedReader()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "config"


@pytest.fixture
def make_shell(config_dir: Path) -> Iterator[Any]:
    """Factory for shells wired to fakes; history handles are closed afterwards."""
    shells: list[Shell] = []

    def factory(
        lines: Iterable[Any] = (),
        *,
        evaluator: Any | None = None,
        verbose: bool = False,
    ) -> Shell:
        session = Session()
        session.verbose = verbose
        shell = Shell(
            session,
            ScriptedReader(lines),
            history=HistoryStore(config_dir),
            config_store=ConfigStore(config_dir),
            evaluator=evaluator,
            expander=RichPromptExpander(color=False),
        )
        shells.append(shell)
        return shell

    yield factory

    for shell in shells:
        shell.history.close()
