"""Interactive prompting primitives used by commands.

Every prompt reads through the shell's :class:`~forge_shell.core.protocols.LineReader`
with history disabled, so answers never end up in the command history.
End of input (Ctrl+D) and Ctrl+C both raise
:class:`~forge_shell.exceptions.AbortedError`; validation loops therefore
terminate when input runs out instead of spinning.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from forge_shell.cli.console import console
from forge_shell.core.conversion import ConversionRegistry
from forge_shell.core.models import Resource
from forge_shell.core.protocols import LineReader, ResourceFactory
from forge_shell.core.session import Session
from forge_shell.exceptions import AbortedError, ConversionError
from forge_shell.infra.filesystem import LocalResourceFactory, context_directory

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INVALID = object()
"""Marks a failed conversion, distinct from any legitimate value."""


class PromptType(Enum):
    """Common input shapes accepted by :meth:`Prompter.prompt_common`."""

    ANY = r".*"
    PACKAGE_NAME = r"[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*"
    CLASS_NAME = r"[A-Z][A-Za-z0-9_]*"
    IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
    DEPENDENCY_ID = r"[^:\s]+:[^:\s]+(:[^:\s]+){0,3}"
    VERSION = r"\d+(\.\d+)*([.+-]?[A-Za-z0-9]+)*"

    @property
    def pattern(self) -> str:
        return self.value


def _spaced(message: str) -> str:
    if message and not message[-1].isspace():
        return message + " "
    return message


def _require_options(options: Sequence[Any] | Mapping[str, Any]) -> None:
    if not options:
        raise ValueError("cannot ask the user to choose from an empty list of options")


class Prompter:
    """Prompting primitives bound to one session and one line reader."""

    def __init__(
        self,
        session: Session,
        reader: LineReader,
        registry: ConversionRegistry,
        factory: ResourceFactory | None = None,
    ) -> None:
        self._session = session
        self._reader = reader
        self._registry = registry
        self._factory: ResourceFactory = factory or LocalResourceFactory()

    # ------------------------------------------------------------------
    # Raw read
    # ------------------------------------------------------------------

    def _read(self, message: str, *, completer: Any | None = None) -> str:
        try:
            line = self._reader.read_line(_spaced(message), completer=completer, history=False)
        except KeyboardInterrupt as exc:
            raise AbortedError() from exc
        if line is None:
            raise AbortedError()
        return line

    def prompt(self, message: str = "") -> str:
        """Read one line of input after showing *message*."""
        return self._read(message)

    # ------------------------------------------------------------------
    # Validated prompts
    # ------------------------------------------------------------------

    def prompt_regex(self, message: str, pattern: str, default: str | None = None) -> str:
        """Prompt until the input matches *pattern* in full.

        Raises
        ------
        ValueError
            Immediately, when *default* does not match *pattern* itself.
        """
        regex = re.compile(pattern)
        if default is not None:
            if regex.fullmatch(default) is None:
                raise ValueError(
                    f"default value [{default}] does not match required pattern [{pattern}]",
                )
            message = f"{message} [{default}]"

        while True:
            line = self.prompt(message)
            if default is not None and not line.strip():
                line = default
            if regex.fullmatch(line) is not None:
                return line

    def prompt_typed(self, message: str, target: Any, default: Any = None) -> Any:
        """Prompt until the input converts to *target*.

        Empty input returns *default* unconverted when one is given.
        """
        while True:
            line = self.prompt(message)
            if default is not None and not line.strip():
                return default
            result = self._convert(target, line.strip())
            if result is not _INVALID:
                return result

    def _convert(self, target: Any, token: str) -> Any:
        try:
            value = self._registry.convert(target, [token])
        except ConversionError:
            logger.debug("rejected %r as %r", token, target)
            return _INVALID
        return _INVALID if value is None else value

    def prompt_boolean(self, message: str, default: bool = True) -> bool:
        hint = "[Y/n]" if default else "[y/N]"
        return self.prompt_typed(f"{message} {hint} ", bool, default)

    def prompt_common(self, message: str, kind: PromptType, default: str | None = None) -> str:
        """Prompt for one of the input shapes in :class:`PromptType`."""
        return self.prompt_regex(message, kind.pattern, default)

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def _print_menu(self, labels: Sequence[str]) -> None:
        console.print()
        for number, label in enumerate(labels, start=1):
            console.print(f"  {number} - [{label}]", markup=False)
        console.print()

    def prompt_choice(self, message: str, options: Sequence[Any] | Mapping[str, T]) -> int | T:
        """Let the user pick from *options*.

        With a sequence the user types a 1-based number and the 0-based
        index is returned; an out-of-range number prints a notice and asks
        again.  With a mapping the user types a key and its value is
        returned; unknown keys re-ask silently.
        """
        _require_options(options)
        if isinstance(options, Mapping):
            return self._choose_by_name(message, options)
        return self._choose_index(message, options)

    def _choose_index(self, message: str, options: Sequence[Any]) -> int:
        console.print(message, markup=False)
        while True:
            self._print_menu([str(option) for option in options])
            number = self.prompt_typed("Choose an option by typing the number of the selection: ", int)
            if 1 <= number <= len(options):
                return number - 1
            console.print("Invalid selection, please try again.")

    def _choose_by_name(self, message: str, options: Mapping[str, T]) -> T:
        console.print(message, markup=False)
        while True:
            self._print_menu(list(options))
            name = self.prompt("Choose an option by typing the name of the selection: ").strip()
            if name in options:
                return options[name]

    def prompt_choice_typed(self, message: str, options: Sequence[T]) -> T:
        """Like :meth:`prompt_choice` but returns the chosen option.

        A single option is returned without asking.
        """
        _require_options(options)
        if len(options) == 1:
            return options[0]
        return options[self._choose_index(message, options)]

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def prompt_file(self, message: str, default: Resource | None = None) -> Resource | None:
        """Prompt for a path with filename completion.

        Without *default* this asks until something non-empty is typed;
        with *default*, empty input returns it.
        """
        completer = self._reader.file_completer()
        while True:
            line = self._read(message, completer=completer).strip()
            if line:
                return self._factory.from_path(self._locate(line))
            if default is not None:
                return default

    def _locate(self, text: str) -> Path:
        path = Path(os.path.expanduser(text))
        if path.is_absolute() or self._session.current_resource is None:
            return path
        return context_directory(self._session.current_resource) / path
