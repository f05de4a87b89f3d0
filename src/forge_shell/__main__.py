"""Allow ``python -m forge_shell`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m forge_shell`` behaves identically to the ``forge-shell``
console script.
"""

from __future__ import annotations

from forge_shell.cli.app import cli

if __name__ == "__main__":
    cli()
