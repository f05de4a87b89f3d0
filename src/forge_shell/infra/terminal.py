"""prompt_toolkit backed implementation of :class:`~forge_shell.core.protocols.LineReader`.

This module is the **only** place in the codebase that imports
``prompt_toolkit``.  The import is deferred to construction so that
bootstrap paths (``--help``, ``--version``, ``doctor``) work without it.

Two prompt sessions share one output:

* the *shell* session keeps the command history and the canonical
  completer;
* the *plain* session serves interactive prompts, which must not leak
  answers into command history.

A temporary completer may be swapped in for a single read.  Only one swap
may be outstanding; afterwards the canonical completer is re-installed
rather than whatever was active before.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from forge_shell.exceptions import EnvironmentError

logger = logging.getLogger(__name__)


def _import_prompt_toolkit() -> Any:
    """Import prompt_toolkit lazily for terminal input."""
    try:
        import prompt_toolkit
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "prompt_toolkit is not installed. Install with: pip install prompt_toolkit",
        ) from exc
    return prompt_toolkit


class PromptToolkitReader:
    """Blocking line reader with history and completion.

    Parameters
    ----------
    words:
        Words offered by the canonical completer (command names).
    """

    def __init__(self, words: Iterable[str] = ()) -> None:
        _import_prompt_toolkit()
        from prompt_toolkit import PromptSession
        from prompt_toolkit.completion import WordCompleter
        from prompt_toolkit.history import InMemoryHistory

        self._history = InMemoryHistory()

        self._completer: Any = WordCompleter(sorted(set(words)), sentence=True)
        self._shell_session: Any = PromptSession(
            history=self._history,
            completer=self._completer,
            complete_while_typing=False,
        )
        self._plain_session: Any = PromptSession(history=InMemoryHistory())
        self._swapped: bool = False

    def load_history(self, lines: Iterable[str]) -> None:
        """Append previously recorded lines, oldest first."""
        for line in lines:
            self._history.append_string(line)

    def set_words(self, words: Iterable[str]) -> None:
        """Replace the canonical completer's vocabulary."""
        from prompt_toolkit.completion import WordCompleter

        self._completer = WordCompleter(sorted(set(words)), sentence=True)
        self._shell_session.completer = self._completer

    def file_completer(self) -> Any:
        from prompt_toolkit.completion import PathCompleter

        return PathCompleter(expanduser=True)

    def read_line(
        self,
        prompt: str,
        *,
        completer: Any | None = None,
        history: bool = True,
    ) -> str | None:
        """Read one line; ``None`` on EOF (Ctrl+D).

        ``KeyboardInterrupt`` (Ctrl+C) propagates to the caller.
        """
        from prompt_toolkit.formatted_text import ANSI

        session = self._shell_session if history else self._plain_session
        if completer is not None and self._swapped:
            raise RuntimeError("a temporary completer is already installed")

        self._swapped = completer is not None
        try:
            return session.prompt(ANSI(prompt), completer=completer or (self._completer if history else None))
        except EOFError:
            logger.debug("end of input")
            return None
        finally:
            if self._swapped:
                session.completer = self._completer if history else None
                self._swapped = False
