"""The bundled embedded engine: Python source mixed with command lines.

Script text is Python, executed with the session variables as its global
scope.  A line whose first word is a registered command, followed by
whitespace or the end of the line, is a *command line* instead::

    set PROMPT '> '                  # command line
    if OS_NAME.startswith("Win"):    # Python
        echo "hello $USER"           # command line, indented

Before compiling, every command line is rewritten in place into a call of
the dispatcher bound as :data:`DISPATCH_NAME`, keeping its indentation, so
commands compose with Python blocks.  Dispatch expands ``$NAME`` and
``$1``… (positional script arguments), splits with shell quoting rules,
binds the tokens to the handler's parameters and calls it.

Known limitation: lines inside multi-line string literals are rewritten
too when they look like command lines.

Error mapping
-------------
* ``SyntaxError``                 → :class:`CommandParseError`
* a lone unknown word (NameError) → :class:`CommandParseError`
* handler failure                 → :class:`CommandExecutionError`
* taxonomy errors, ``KeyboardInterrupt`` → unchanged
* any other Python exception      → unchanged (unclassified)
"""

from __future__ import annotations

import ast
import logging
import re
from typing import Any

from forge_shell.core.commands import ArgumentBinder, CommandTable, expand_variables, split_arguments
from forge_shell.core.conversion import ConversionRegistry
from forge_shell.core.script_wrapper import VARARG_NAME, PythonDialect
from forge_shell.core.session import Session
from forge_shell.exceptions import (
    CommandExecutionError,
    CommandParseError,
    ForgeShellError,
)

logger = logging.getLogger(__name__)

DISPATCH_NAME = "__forge_command__"

_COMMAND_LINE = re.compile(r"^(?P<indent>[ \t]*)(?P<name>[A-Za-z_][\w-]*)(?=[ \t]|$)(?P<rest>.*)$")
_LONE_WORD = re.compile(r"^\s*([A-Za-z_]\w*)\s*$")


class PythonEvaluator:
    """Executes scripts for a :class:`Session`.

    Parameters
    ----------
    session:
        Provides the global scope (``session.variables``) and property
        lookups for ``$NAME`` expansion.
    commands:
        The command table consulted for command lines.
    registry:
        Converts command tokens to typed handler arguments.
    context:
        Object passed as the first argument to every handler (the shell).
    """

    dialect = PythonDialect()

    def __init__(
        self,
        session: Session,
        commands: CommandTable,
        registry: ConversionRegistry,
        context: Any = None,
    ) -> None:
        self._session = session
        self._commands = commands
        self._binder = ArgumentBinder(registry)
        self.context: Any = context

    # ------------------------------------------------------------------
    # Evaluator protocol
    # ------------------------------------------------------------------

    def run(self, script: str) -> None:
        source = self.translate(script)
        interactive = "\n" not in script.strip()

        try:
            if not ast.parse(source, "<shell>").body:
                logger.debug("nothing to run in %r", script)
                return
            code = compile(source, "<shell>", "single" if interactive else "exec")
        except SyntaxError as exc:
            raise CommandParseError(
                exc.msg or "invalid syntax",
                command=_first_word(exc.text or script),
            ) from exc

        try:
            exec(code, self._namespace())
        except NameError as exc:
            word = _LONE_WORD.match(script)
            if word is not None and word.group(1) == getattr(exc, "name", word.group(1)):
                raise CommandParseError("command not found", command=word.group(1)) from exc
            raise

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def translate(self, script: str) -> str:
        """Rewrite command lines of *script* into dispatcher calls."""
        lines = []
        for line in script.splitlines():
            match = _COMMAND_LINE.match(line)
            if match is not None and match.group("name") in self._commands:
                line = (
                    f"{match.group('indent')}{DISPATCH_NAME}"
                    f"({match.group('name')!r}, {match.group('rest')!r})"
                )
            lines.append(line)
        return "\n".join(lines) + "\n"

    def _namespace(self) -> dict[str, Any]:
        self._session.export()
        namespace = self._session.variables
        namespace[DISPATCH_NAME] = self.dispatch
        namespace.setdefault("shell", self.context)
        return namespace

    # ------------------------------------------------------------------
    # Command dispatch
    # ------------------------------------------------------------------

    def dispatch(self, name: str, text: str = "") -> Any:
        """Run command *name* with raw argument *text*."""
        command = self._commands.get(name)
        if command is None:
            raise CommandParseError("command not found", command=name)

        tokens = split_arguments(command.name, expand_variables(text, self._lookup))
        args, kwargs = self._binder.bind(command, tokens)
        logger.debug("dispatching %s %r", command.name, tokens)

        try:
            return command.handler(self.context, *args, **kwargs)
        except (ForgeShellError, KeyboardInterrupt):
            raise
        except Exception as exc:
            raise CommandExecutionError(str(exc) or type(exc).__name__, command=command.name) from exc

    def _lookup(self, name: str) -> Any:
        if name.isdigit():
            arguments = self._session.variables.get(VARARG_NAME) or []
            index = int(name) - 1
            return arguments[index] if 0 <= index < len(arguments) else ""
        return self._session.get_property(name, "")


def _first_word(text: str) -> str | None:
    words = text.split()
    return words[0] if words else None
