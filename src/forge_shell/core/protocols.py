"""Protocols (interfaces) consumed by the core layer.

Infrastructure and CLI adapters implement these; core modules refer only
to the protocols.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from forge_shell.core.models import Resource, SourceResource

if TYPE_CHECKING:
    from forge_shell.core.session import Session


class ScriptDialect(Protocol):
    """Grammar fragments used to wrap a script file into a callable unit."""

    invoke_first: bool
    """Place the call before the body, which then runs outside the function."""

    def declare(self, name: str, parameters: Sequence[str]) -> str:
        """Return the text opening a function *name* with *parameters*."""
        ...  # pragma: no cover

    def bind_arguments(self, sequence: str, parameters: Sequence[str]) -> str:
        """Return statements copying *parameters* into the global *sequence*."""
        ...  # pragma: no cover

    def body(self, content: str) -> str:
        """Return the script *content* as it appears in the composite."""
        ...  # pragma: no cover

    def invoke(self, name: str, literals: Sequence[str]) -> str:
        """Return the text calling *name* (closing the block if still open)."""
        ...  # pragma: no cover


class Evaluator(Protocol):
    """Contract for the embedded scripting engine.

    The engine executes arbitrary script text synchronously and raises
    typed :class:`~forge_shell.exceptions.ForgeShellError` subclasses for
    failures it understands.  Anything else propagates unchanged and is
    classified by the error translator.
    """

    dialect: ScriptDialect

    def run(self, script: str) -> None:
        """Execute *script* in the session scope."""
        ...  # pragma: no cover


class PathspecResolver(Protocol):
    """Expands a textual path-spec into addressable resources."""

    def resolve(
        self,
        spec: str,
        *,
        current: Resource,
        previous: Resource | None,
    ) -> list[Resource]:
        """Return matches for *spec* in order; an empty list means no match."""
        ...  # pragma: no cover

    def literal(self, spec: str, *, current: Resource) -> Resource:
        """Construct a resource directly from *spec*.

        Raises
        ------
        ResourceNotFoundError
            When *spec* cannot name a single resource.
        """
        ...  # pragma: no cover


class ResourceFactory(Protocol):
    """Creates :class:`Resource` values from filesystem paths."""

    def from_path(self, path: Path) -> Resource:
        ...  # pragma: no cover


class SourceCapability(Protocol):
    """A project capability that addresses Python source files."""

    def resolve(self, spec: str) -> list[Resource]:
        ...  # pragma: no cover

    def get_source(self, name: str) -> SourceResource:
        """Return the source file for module *name*.

        Raises
        ------
        ResourceNotFoundError
            When no such module exists.
        """
        ...  # pragma: no cover


class Project(Protocol):
    """The project bound to the current location, if any."""

    name: str
    root: Path

    def has_capability(self, name: str) -> bool:
        ...  # pragma: no cover

    def get_capability(self, name: str) -> Any:
        ...  # pragma: no cover


class PromptExpander(Protocol):
    """Expands a prompt template (variables, colour directives) to a string."""

    def expand(self, template: str, session: Session) -> str:
        ...  # pragma: no cover


class LineReader(Protocol):
    """Blocking terminal input.

    ``read_line`` returns ``None`` on end-of-input and lets
    ``KeyboardInterrupt`` propagate.
    """

    def read_line(
        self,
        prompt: str,
        *,
        completer: Any | None = None,
        history: bool = True,
    ) -> str | None:
        ...  # pragma: no cover

    def file_completer(self) -> Any:
        """Return a completer that completes filesystem paths."""
        ...  # pragma: no cover

    def load_history(self, lines: Sequence[str]) -> None:
        """Seed the in-memory history with previously recorded lines."""
        ...  # pragma: no cover

    def set_words(self, words: Sequence[str]) -> None:
        """Replace the words offered by the canonical completer."""
        ...  # pragma: no cover
