"""Classification of arbitrary failures into the shell's error taxonomy.

The translator is the single place where an exception's
:class:`~forge_shell.exceptions.ErrorKind` is inspected.  It produces an
:class:`ErrorReport` (a pure value) and leaves rendering to the CLI
layer.

Rules
-----
1. If **any** exception in the cause chain is a user abort
   (:class:`AbortedError` or ``KeyboardInterrupt``) the whole event is a
   cancelled operation: ``Aborted.`` as a notice.
2. Otherwise the outermost exception decides the message format.
3. Verbosity only controls whether a traceback is attached.
"""

from __future__ import annotations

import traceback
from collections.abc import Iterator
from dataclasses import dataclass

from forge_shell.exceptions import (
    AbortedError,
    CommandExecutionError,
    CommandParseError,
    ErrorKind,
    ForgeShellError,
    PluginExecutionError,
)

VERBOSE_ON_HINT = '(type "set VERBOSE true" to enable stack traces)'
VERBOSE_OFF_HINT = '(type "set VERBOSE false" to disable stack traces)'


@dataclass(frozen=True, slots=True)
class ErrorReport:
    """What the shell should tell the user about a failure."""

    kind: ErrorKind
    level: str
    """``"info"`` for aborts, ``"error"`` for everything else."""

    message: str
    traceback: str | None = None
    hint: str | None = None


def iter_causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* followed by its causes, outermost first, without cycles."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def is_user_abort(exc: BaseException) -> bool:
    return any(
        isinstance(cause, (AbortedError, KeyboardInterrupt))
        for cause in iter_causes(exc)
    )


def _sourced(name: str | None) -> str:
    return "" if not name else f"[{name}] "


def _format_traceback(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class ErrorTranslator:
    """Turns exceptions into :class:`ErrorReport` values."""

    def translate(self, exc: BaseException, *, verbose: bool = False) -> ErrorReport:
        trace = _format_traceback(exc) if verbose else None

        if is_user_abort(exc):
            return ErrorReport(ErrorKind.ABORTED, "info", "Aborted.", trace)

        hint = exc.hint if isinstance(exc, ForgeShellError) else None

        if isinstance(exc, CommandExecutionError):
            message = _sourced(exc.command) + str(exc)
        elif isinstance(exc, CommandParseError):
            message = f"[[{exc.command}]] {exc}" if exc.command else str(exc)
        elif isinstance(exc, PluginExecutionError):
            message = _sourced(exc.plugin) + str(exc)
        elif isinstance(exc, ForgeShellError) and exc.kind is ErrorKind.SHELL_EXECUTION:
            message = str(exc)
        else:
            return self._unclassified(exc, trace)

        return ErrorReport(exc.kind, "error", message, trace, hint)

    @staticmethod
    def _unclassified(exc: BaseException, trace: str | None) -> ErrorReport:
        if trace is None:
            detail = str(exc) or type(exc).__name__
            message = f"Exception encountered: {detail} {VERBOSE_ON_HINT}"
        else:
            message = f"Exception encountered: {VERBOSE_OFF_HINT}"
        return ErrorReport(ErrorKind.UNCLASSIFIED, "error", message, trace)
