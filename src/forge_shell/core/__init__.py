"""Core layer: session state, conversion, script wrapping and translation.

Rules
-----
* No ``print()`` calls.
* No file or terminal I/O.
* No imports from ``cli`` or ``infra``.
"""

from forge_shell.core.commands import ArgumentBinder, Command, CommandTable
from forge_shell.core.conversion import ConversionRegistry
from forge_shell.core.error_translator import ErrorReport, ErrorTranslator
from forge_shell.core.models import Ambiguous, NoMatch, Resource, ScriptInvocation, Unique, Unsupported
from forge_shell.core.prompt_renderer import PromptRenderer
from forge_shell.core.script_wrapper import FshDialect, PythonDialect, ScriptWrapper
from forge_shell.core.session import Session, SessionConfig

__all__: list[str] = [
    "Ambiguous",
    "ArgumentBinder",
    "Command",
    "CommandTable",
    "ConversionRegistry",
    "ErrorReport",
    "ErrorTranslator",
    "FshDialect",
    "NoMatch",
    "PromptRenderer",
    "PythonDialect",
    "Resource",
    "ScriptInvocation",
    "ScriptWrapper",
    "Session",
    "SessionConfig",
    "Unique",
    "Unsupported",
]
