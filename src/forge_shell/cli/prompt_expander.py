"""Prompt template expansion rendered through Rich.

Template syntax
---------------
``$NAME`` / ``${NAME}``
    The session property *NAME* (empty when unset).
``\\W``
    Name of the current directory (``/`` at the filesystem root).
``\\w``
    Full path of the current directory, with the home directory shown as
    ``~``.
``\\$``
    A literal ``$``.
``\\c{colour}`` … ``\\c``
    Colour the enclosed text.  Any Rich colour name is accepted.

Unknown escapes are kept as written.  Colour directives become ANSI
sequences when colour is enabled and Rich is installed; otherwise they
are dropped and only the text remains.
"""

from __future__ import annotations

import io
import re
from pathlib import Path

from forge_shell.core.session import Session
from forge_shell.infra.filesystem import context_directory

_TOKEN = re.compile(
    r"\\c\{(?P<colour>[\w ]+)\}"
    r"|(?P<reset>\\c)"
    r"|\\(?P<escape>[Ww$])"
    r"|\$\{(?P<braced>\w+)\}"
    r"|\$(?P<name>\w+)"
)


class RichPromptExpander:
    """Expands prompt templates for :class:`~forge_shell.core.prompt_renderer.PromptRenderer`."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def segments(self, template: str, session: Session) -> list[tuple[str, str | None]]:
        """Split *template* into ``(text, colour)`` pairs."""
        segments: list[tuple[str, str | None]] = []
        colour: str | None = None
        position = 0
        for match in _TOKEN.finditer(template):
            if match.start() > position:
                segments.append((template[position:match.start()], colour))
            position = match.end()

            if match.group("colour") is not None:
                colour = match.group("colour").strip()
            elif match.group("reset") is not None:
                colour = None
            elif match.group("escape") is not None:
                segments.append((self._escape(match.group("escape"), session), colour))
            else:
                name = match.group("braced") or match.group("name")
                segments.append((str(session.get_property(name, "")), colour))

        if position < len(template):
            segments.append((template[position:], colour))
        return [(text, style) for text, style in segments if text]

    def expand(self, template: str, session: Session) -> str:
        segments = self.segments(template, session)
        if not self.color:
            return "".join(text for text, _ in segments)
        try:
            return _render_ansi(segments)
        except ModuleNotFoundError:
            return "".join(text for text, _ in segments)

    @staticmethod
    def _escape(code: str, session: Session) -> str:
        if code == "$":
            return "$"
        if session.current_resource is None:
            return ""
        directory = context_directory(session.current_resource)
        if code == "W":
            return directory.name or directory.anchor or "/"
        home = Path.home()
        if directory == home or home in directory.parents:
            return "~" + str(directory)[len(str(home)):]
        return str(directory)


def _render_ansi(segments: list[tuple[str, str | None]]) -> str:
    from rich.console import Console
    from rich.text import Text

    text = Text(no_wrap=True, end="")
    for value, colour in segments:
        text.append(value, style=colour)

    buffer = io.StringIO()
    renderer = Console(
        file=buffer,
        force_terminal=True,
        color_system="standard",
        width=max(80, len(text.plain) + 1),
        highlight=False,
    )
    renderer.print(text, end="")
    return buffer.getvalue()
