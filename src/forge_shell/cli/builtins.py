"""Built-in shell commands.

Every handler takes the :class:`~forge_shell.cli.shell.Shell` first; the
remaining parameters are bound from the command line by
:class:`~forge_shell.core.commands.ArgumentBinder` using the annotations
below, so the annotations must stay importable at runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from forge_shell.cli.console import console
from forge_shell.core.commands import CommandTable
from forge_shell.core.models import Resource
from forge_shell.core.session import PROP_VERBOSE
from forge_shell.exceptions import CommandExecutionError

if TYPE_CHECKING:
    from forge_shell.cli.shell import Shell


def echo(shell: Shell, *words: str) -> None:
    """Print the arguments, separated by spaces."""
    console.print(" ".join(words), markup=False)


def set_property(shell: Shell, name: str | None = None, *value: str) -> None:
    """Set a session property, or list all of them."""
    if name is None:
        for key, current in sorted(shell.session.properties().items()):
            console.print(f"{key}={current}", markup=False)
        return
    shell.session.set_property(name, " ".join(value))


def unset_property(shell: Shell, name: str) -> None:
    """Remove a session property."""
    try:
        shell.session.remove_property(name)
    except KeyError as exc:
        raise CommandExecutionError(exc.args[0], command="unset") from exc


def verbose(shell: Shell, enabled: bool | None = None) -> None:
    """Toggle stack traces on errors, or set them on/off."""
    session = shell.session
    session.set_property(PROP_VERBOSE, not session.verbose if enabled is None else enabled)
    console.print(f"verbose mode {'on' if session.verbose else 'off'}")


def cd(shell: Shell, target: Resource | None = None) -> None:
    """Change the current directory (``-`` returns to the previous one)."""
    if target is None:
        target = shell.resource_factory.from_path(shell.home)
    if not target.path.is_dir():
        raise CommandExecutionError(f"no such directory: {target.path}", command="cd")
    shell.set_current_resource(target)


def pwd(shell: Shell) -> None:
    """Print the current directory."""
    console.print(str(shell.session.require_current_resource().path), markup=False)


def ls(shell: Shell, paths: list[Resource] | None = None, *, all: bool = False) -> None:
    """List directory contents."""
    if paths is not None and not paths:
        raise CommandExecutionError("no matching files", command="ls")
    targets = paths or [shell.session.require_current_resource()]
    for target in targets:
        if not target.path.is_dir():
            console.print(target.name, markup=False)
            continue
        if len(targets) > 1:
            console.print(f"{target.path}:", markup=False)
        for child in sorted(target.path.iterdir(), key=lambda path: path.name.lower()):
            if child.name.startswith(".") and not all:
                continue
            console.print(child.name + ("/" if child.is_dir() else ""), markup=False)


def run(shell: Shell, script: Resource, *arguments: str) -> None:
    """Run a script file with positional arguments ($1, $2, ...)."""
    shell.print_verbose(f"running {script.path}", color="cyan")
    shell.execute_file(script.path, *arguments)


def history(shell: Shell, count: int = 0) -> None:
    """Show command history (the last COUNT entries when given)."""
    records = shell.history.records
    start = max(len(records) - count, 0) if count > 0 else 0
    for number, line in enumerate(records[start:], start=start + 1):
        console.print(f"{number:>5}  {line}", markup=False)


def help_(shell: Shell, name: str | None = None) -> None:
    """List commands, or describe one."""
    if name is not None:
        command = shell.commands.get(name)
        if command is None:
            raise CommandExecutionError(f"no such command: {name}", command="help")
        commands = [command]
    else:
        commands = list(shell.commands)

    width = max(len(command.name) for command in commands)
    for command in commands:
        aliases = f" (alias: {', '.join(command.aliases)})" if command.aliases else ""
        console.print(f"  {command.name:<{width}}  {command.help}{aliases}", markup=False)


def exit_(shell: Shell) -> None:
    """Leave the shell."""
    shell.session.request_exit()


def install_builtins(commands: CommandTable) -> CommandTable:
    """Register the built-in commands on *commands*."""
    commands.register("echo", echo)
    commands.register("set", set_property)
    commands.register("unset", unset_property)
    commands.register("verbose", verbose)
    commands.register("cd", cd)
    commands.register("pwd", pwd)
    commands.register("ls", ls)
    commands.register("run", run)
    commands.register("history", history)
    commands.register("help", help_)
    commands.register("exit", exit_, aliases=("quit",))
    return commands
