"""Command table and argument binding.

A command is a plain function whose first parameter receives the shell
context and whose remaining parameters are bound from raw tokens::

    def ls(shell, paths: list[Resource], *, all: bool = False) -> None: ...

Binding rules
-------------
* Positional parameters consume one token each, converted through the
  :class:`~forge_shell.core.conversion.ConversionRegistry` according to
  their annotation (unannotated means ``str``).
* A ``list[T]`` parameter is greedy: it takes every remaining positional
  token as one ``ArrayOf(T)`` request.
* ``*rest`` converts each remaining token individually.
* Keyword-only parameters are options: ``--name value``, or ``--name``
  alone for ``bool``.  ``--`` ends option parsing.

Any binding or conversion failure surfaces as :class:`CommandParseError`
so that it aborts only the current command.
"""

from __future__ import annotations

import inspect
import re
import shlex
import types
import typing
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from forge_shell.core.conversion import ConversionRegistry
from forge_shell.core.models import ArrayOf, TypeSpec
from forge_shell.exceptions import CommandParseError, ForgeShellError

Handler = Callable[..., Any]

_VARIABLE = re.compile(r"\$(?:\{(\w+)\}|(\w+))")


@dataclass(frozen=True, slots=True)
class Command:
    """A named command contributed by a plugin."""

    name: str
    handler: Handler
    plugin: str = "builtin"
    help: str = ""
    aliases: tuple[str, ...] = field(default=())


class CommandTable:
    """Registry of commands, addressable by name or alias."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}
        self._aliases: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        *,
        plugin: str = "builtin",
        help: str = "",
        aliases: Sequence[str] = (),
    ) -> Command:
        command = Command(
            name=name,
            handler=handler,
            plugin=plugin,
            help=help or (inspect.getdoc(handler) or "").split("\n", 1)[0],
            aliases=tuple(aliases),
        )
        self._commands[name] = command
        for alias in aliases:
            self._aliases[alias] = name
        return command

    def command(
        self,
        name: str,
        *,
        plugin: str = "builtin",
        aliases: Sequence[str] = (),
    ) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: Handler) -> Handler:
            self.register(name, handler, plugin=plugin, aliases=aliases)
            return handler

        return decorator

    def get(self, name: str) -> Command | None:
        return self._commands.get(self._aliases.get(name, name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[Command]:
        return iter(sorted(self._commands.values(), key=lambda command: command.name))

    def names(self) -> list[str]:
        return sorted([*self._commands, *self._aliases])


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

def expand_variables(text: str, lookup: Callable[[str], Any]) -> str:
    """Replace ``$NAME`` / ``${NAME}`` in *text* with ``lookup(NAME)``.

    Nothing is expanded inside single quotes or after a backslash.
    Substituted values are quoted so that they remain one token.
    """
    out: list[str] = []
    quote: str | None = None
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and quote != "'":
            out.append(text[index:index + 2])
            index += 2
            continue
        if char in "'\"":
            if quote is None:
                quote = char
            elif quote == char:
                quote = None
            out.append(char)
            index += 1
            continue
        if char == "$" and quote != "'":
            match = _VARIABLE.match(text, index)
            if match is not None:
                value = lookup(match.group(1) or match.group(2))
                value = "" if value is None else str(value)
                if quote == '"':
                    out.append(value.replace("\\", "\\\\").replace('"', '\\"'))
                elif value:
                    out.append(shlex.quote(value))
                index = match.end()
                continue
        out.append(char)
        index += 1
    return "".join(out)


def split_arguments(command: str, text: str) -> list[str]:
    """Split *text* into tokens with POSIX shell quoting rules."""
    try:
        return shlex.split(text, posix=True)
    except ValueError as exc:
        raise CommandParseError(f"cannot parse arguments: {exc}", command=command) from exc


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------

def target_for(annotation: Any) -> TypeSpec:
    """Map a parameter annotation to a conversion target."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return str
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return target_for(members[0])
        return str
    if origin in (list, tuple, Sequence):
        args = [arg for arg in typing.get_args(annotation) if arg is not Ellipsis]
        return ArrayOf(args[0] if args else str)
    if isinstance(annotation, type):
        return annotation
    return str


def _is_flag(annotation: Any) -> bool:
    return target_for(annotation) is bool


class ArgumentBinder:
    """Binds raw tokens to a command handler's parameters."""

    def __init__(self, registry: ConversionRegistry) -> None:
        self._registry = registry

    def bind(self, command: Command, tokens: Sequence[str]) -> tuple[list[Any], dict[str, Any]]:
        """Return ``(args, kwargs)`` for ``command.handler`` after the context."""
        signature = inspect.signature(command.handler)
        hints = _type_hints(command.handler)
        parameters = list(signature.parameters.values())[1:]

        options = {
            parameter.name.replace("_", "-"): parameter
            for parameter in parameters
            if parameter.kind is inspect.Parameter.KEYWORD_ONLY
        }
        positional_tokens, kwargs = self._bind_options(command, tokens, options, hints)

        args: list[Any] = []
        remaining = list(positional_tokens)
        for parameter in parameters:
            annotation = hints.get(parameter.name, parameter.annotation)
            if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                args.extend(self._convert(command, target_for(annotation), [token]) for token in remaining)
                remaining = []
            elif parameter.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                target = target_for(annotation)
                if isinstance(target, ArrayOf):
                    if remaining:
                        args.append(self._convert(command, target, remaining))
                        remaining = []
                    elif parameter.default is not inspect.Parameter.empty:
                        args.append(parameter.default)
                    else:
                        args.append([])
                elif remaining:
                    args.append(self._convert(command, target, [remaining.pop(0)]))
                elif parameter.default is not inspect.Parameter.empty:
                    args.append(parameter.default)
                else:
                    raise CommandParseError(
                        f"missing required argument: {parameter.name}",
                        command=command.name,
                    )

        if remaining:
            raise CommandParseError(
                f"too many arguments: {' '.join(remaining)}",
                command=command.name,
            )
        return args, kwargs

    def _bind_options(
        self,
        command: Command,
        tokens: Sequence[str],
        options: Mapping[str, inspect.Parameter],
        hints: Mapping[str, Any],
    ) -> tuple[list[str], dict[str, Any]]:
        if not options:
            return list(tokens), {}

        positional: list[str] = []
        kwargs: dict[str, Any] = {}
        iterator = iter(tokens)
        for token in iterator:
            if token == "--":
                positional.extend(iterator)
                break
            if not token.startswith("--") or len(token) == 2:
                positional.append(token)
                continue
            parameter = options.get(token[2:])
            if parameter is None:
                raise CommandParseError(f"unknown option: {token}", command=command.name)
            annotation = hints.get(parameter.name, parameter.annotation)
            if _is_flag(annotation):
                kwargs[parameter.name] = True
                continue
            value = next(iterator, None)
            if value is None:
                raise CommandParseError(f"option {token} requires a value", command=command.name)
            kwargs[parameter.name] = self._convert(command, target_for(annotation), [value])

        for name, parameter in options.items():
            if parameter.name not in kwargs and parameter.default is inspect.Parameter.empty:
                raise CommandParseError(f"missing required option: --{name}", command=command.name)
        return positional, kwargs

    def _convert(self, command: Command, target: TypeSpec, tokens: Sequence[str]) -> Any:
        try:
            return self._registry.convert(target, tokens)
        except ForgeShellError as exc:
            raise CommandParseError(str(exc), command=command.name, hint=exc.hint) from exc


def _type_hints(handler: Handler) -> dict[str, Any]:
    """Return the resolved annotations of *handler*.

    Names that only exist under ``TYPE_CHECKING`` (typically the shell type
    of the context parameter) resolve to ``Any``.
    """
    placeholders: dict[str, Any] = {}
    while True:
        try:
            return typing.get_type_hints(handler, localns=placeholders)
        except NameError as exc:
            if exc.name is None or exc.name in placeholders:
                raise
            placeholders[exc.name] = Any
