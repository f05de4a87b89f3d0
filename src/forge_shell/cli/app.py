"""CLI entry point for forge-shell.

This module is the process error boundary.  :func:`cli` catches
:class:`~forge_shell.exceptions.ForgeShellError`, ``KeyboardInterrupt``
and any unexpected ``Exception``, prints a short message and exits with a
code from :mod:`forge_shell.cli.exit_codes`.

Usage::

    forge-shell                      # interactive shell
    forge-shell SCRIPT [ARGS...]     # run a script file and exit
    forge-shell doctor               # environment diagnostics
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from forge_shell.cli import exit_codes
from forge_shell.cli.console import err_console, set_color
from forge_shell.exceptions import ForgeShellError
from forge_shell.infra.config_store import DEFAULT_CONFIG_DIR
from forge_shell.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forge-shell",
        description="Interactive command shell with Python scripting.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show stack traces for errors and enable debug logging.",
    )
    parser.add_argument(
        "--pretend",
        action="store_true",
        help="Print the generated script for file runs instead of running it.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable coloured output and prompts.",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=DEFAULT_CONFIG_DIR,
        help="Directory holding the history and config files (default: %(default)s).",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="A script file to run, or 'doctor' to run diagnostics.",
    )
    parser.add_argument(
        "arguments",
        nargs=argparse.REMAINDER,
        help="Positional arguments passed to the script ($1, $2, ...).",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_doctor(config_dir: Path) -> int:
    from forge_shell.cli.doctor import run_doctor

    return run_doctor(config_dir)


def _handle_shell(args: argparse.Namespace) -> int:
    """Start a shell, then run the script *target* or the input loop."""
    from forge_shell.cli.shell import Shell

    shell = Shell.create(
        config_dir=args.config_dir,
        verbose=args.verbose,
        pretend=args.pretend,
        color=not args.no_color,
    )
    shell.startup(restart=args.target is not None)
    try:
        if args.target is None:
            shell.run()
            return exit_codes.SUCCESS
        try:
            shell.execute_file(Path(args.target), *args.arguments)
        except (Exception, KeyboardInterrupt) as exc:
            shell.report(shell.translator.translate(exc, verbose=shell.session.verbose))
            return exit_codes.GENERAL_ERROR
        return exit_codes.SUCCESS
    finally:
        shell.shutdown()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run forge-shell.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    set_color(not args.no_color)

    if args.target is not None and args.target.lower() == "doctor":
        return _handle_doctor(args.config_dir)
    return _handle_shell(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point; never exits with a raw stack trace."""
    try:
        code = main()
        sys.exit(code)
    except ForgeShellError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
