"""Process exit codes returned by :func:`forge_shell.cli.app.main`."""

from __future__ import annotations

SUCCESS: int = 0
"""The shell or script finished normally."""

GENERAL_ERROR: int = 1
"""A known ForgeShellError reached the process boundary."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped every error boundary."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C outside the shell loop (128 + SIGINT)."""
