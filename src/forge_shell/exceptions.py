"""Custom exception hierarchy for forge-shell.

All exceptions that cross layer boundaries must inherit from
:class:`ForgeShellError`.  Raw exceptions raised by command handlers or
by the embedded evaluator are wrapped into a typed subclass at the
evaluator boundary whenever their meaning is known.

Each class carries an :class:`ErrorKind` tag.  The shell inspects the tag
exactly once, in :mod:`forge_shell.core.error_translator`, instead of
spreading ``except`` chains over the call sites.

Hierarchy
---------
ForgeShellError
├── AbortedError                 (ABORTED)
├── CommandExecutionError        (COMMAND_EXECUTION)
├── CommandParseError            (COMMAND_PARSE)
├── PluginExecutionError         (PLUGIN_EXECUTION)
├── ShellExecutionError          (SHELL_EXECUTION)
├── ConversionError
│   ├── AmbiguousPathError
│   └── ResourceNotFoundError
├── ConfigError                  (SHELL_EXECUTION)
├── HistoryError                 (SHELL_EXECUTION)
└── EnvironmentError             (SHELL_EXECUTION)
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure categories understood by the shell."""

    ABORTED = "aborted"
    COMMAND_EXECUTION = "command-execution"
    COMMAND_PARSE = "command-parse"
    PLUGIN_EXECUTION = "plugin-execution"
    SHELL_EXECUTION = "shell-execution"
    UNCLASSIFIED = "unclassified"


class ForgeShellError(Exception):
    """Base exception for all forge-shell errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the shell can render a clean, single-line message
    without leaking internal stack traces.
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""

    @property
    def message(self) -> str:
        return str(self)


# --- The shell taxonomy ----------------------------------------------------

class AbortedError(ForgeShellError):
    """Raised when the user abandons an operation (EOF at a prompt, Ctrl+C)."""

    kind = ErrorKind.ABORTED

    def __init__(self, message: str = "Aborted.", *, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)


class CommandExecutionError(ForgeShellError):
    """Raised when a command handler fails while running."""

    kind = ErrorKind.COMMAND_EXECUTION

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.command: str | None = command


class CommandParseError(ForgeShellError):
    """Raised when a command line cannot be parsed or its arguments bound."""

    kind = ErrorKind.COMMAND_PARSE

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.command: str | None = command


class PluginExecutionError(ForgeShellError):
    """Raised when a plugin (a named group of commands) fails."""

    kind = ErrorKind.PLUGIN_EXECUTION

    def __init__(
        self,
        message: str,
        *,
        plugin: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.plugin: str | None = plugin


class ShellExecutionError(ForgeShellError):
    """Raised for shell-level failures that carry no command context."""

    kind = ErrorKind.SHELL_EXECUTION


# --- Argument conversion ---------------------------------------------------

class ConversionError(ForgeShellError):
    """Raised when a raw token cannot be coerced to the requested type."""


class AmbiguousPathError(ConversionError):
    """Raised when a path-spec matches several resources where one was required."""

    def __init__(self, spec: str, candidates: Sequence[object]) -> None:
        super().__init__(
            f"ambiguous path '{spec}' matched {len(candidates)} resources",
            hint="Narrow the path so that it matches a single resource.",
        )
        self.spec: str = spec
        self.candidates: tuple[object, ...] = tuple(candidates)


class ResourceNotFoundError(ConversionError):
    """Raised when neither path-spec expansion nor literal lookup finds a resource."""


# --- Environment / persistence ---------------------------------------------

class ConfigError(ForgeShellError):
    """Raised when the config directory or config file cannot be prepared."""

    kind = ErrorKind.SHELL_EXECUTION


class HistoryError(ForgeShellError):
    """Raised when the command history file cannot be created or read."""

    kind = ErrorKind.SHELL_EXECUTION


class EnvironmentError(ForgeShellError):
    """Raised when a required runtime dependency is not available."""

    kind = ErrorKind.SHELL_EXECUTION
