"""``forge-shell doctor``: environment diagnostics.

Collects one row per requirement and renders them as a Rich table, or as
plain text on stderr when Rich is not installed.
"""

from __future__ import annotations

import os
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from forge_shell.cli import exit_codes
from forge_shell.cli.console import err_console
from forge_shell.infra.config_store import DEFAULT_CONFIG_DIR
from forge_shell.version import __version__

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _forge_shell_version_check() -> tuple[str, str, str]:
    return "forge-shell", __version__, OK


def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    current = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", current, OK if ok else "[red]FAIL (>=3.10 required)[/red]"


def _rich_check() -> tuple[str, str, str]:
    """Rich is optional: output falls back to plain text without it."""
    try:
        import rich  # noqa: F401
    except ImportError:
        return "rich", "NOT INSTALLED", WARN
    try:
        return "rich", version("rich"), OK
    except PackageNotFoundError:
        return "rich", "unknown", OK


def _prompt_toolkit_check() -> tuple[str, str, str]:
    """The interactive shell cannot start without prompt_toolkit."""
    try:
        import prompt_toolkit
    except ImportError:
        return "prompt_toolkit", "NOT INSTALLED", FAIL
    return "prompt_toolkit", getattr(prompt_toolkit, "__version__", "unknown"), OK


def _config_dir_check(config_dir: Path) -> tuple[str, str, str]:
    """Return the config directory row; missing but creatable is fine."""
    existing = config_dir
    while not existing.exists() and existing != existing.parent:
        existing = existing.parent
    writable = existing.is_dir() and os.access(existing, os.W_OK)
    return "Config dir", str(config_dir), OK if writable else WARN


def _os_check() -> tuple[str, str, str]:
    system_raw = platform.system()
    system_display = {"Darwin": "macOS"}.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, OK


def _status_plain(status: str) -> str:
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_table(checks: list[tuple[str, str, str]]) -> None:
    print("\nforge-shell doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<16} {'Value':<36} {'Status':<8}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<16} {value:<36} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(config_dir: Path = DEFAULT_CONFIG_DIR) -> int:
    """Run every check and render the summary.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` unless a check failed, in which case
        :data:`exit_codes.GENERAL_ERROR`.
    """
    checks = [
        _forge_shell_version_check(),
        _python_version_check(),
        _rich_check(),
        _prompt_toolkit_check(),
        _config_dir_check(config_dir),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_table(checks)
        print("Some checks failed." if has_failure else "All checks passed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS

    table = Table(
        title="forge-shell doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    err_console.print()
    err_console.print(table)
    err_console.print()

    if has_failure:
        err_console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    err_console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
