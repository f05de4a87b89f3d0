"""Console output with optional Rich support.

Rich is imported when something is printed, never at module import, so
bootstrap paths (``--help``, ``--version``, ``doctor``) work without it.
Two proxies exist: :data:`console` writes command output to stdout and
:data:`err_console` writes diagnostics to stderr.
"""

from __future__ import annotations

import sys
from typing import Any

from forge_shell.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = False, **options: Any) -> Any:
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr, **options)


class _ConsoleProxy:
    """``print``-compatible proxy with a plain fallback.

    A fresh Rich console is created per call so tests that swap
    ``sys.stdout`` (``capsys``) see the output.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        self._stderr = stderr
        self.color: bool = True

    def print(
        self,
        *objects: object,
        markup: bool = True,
        style: str | None = None,
        end: str = "\n",
    ) -> None:
        """Render with Rich when available, else plain ``print``."""
        try:
            rich_console = get_rich_console(stderr=self._stderr, no_color=not self.color)
        except EnvironmentError:
            print(*objects, end=end, file=sys.stderr if self._stderr else sys.stdout)
            return
        rich_console.print(*objects, markup=markup, style=style, highlight=False, soft_wrap=True, end=end)


console = _ConsoleProxy()
err_console = _ConsoleProxy(stderr=True)


def set_color(enabled: bool) -> None:
    """Enable or disable colour on both proxies."""
    console.color = enabled
    err_console.color = enabled
