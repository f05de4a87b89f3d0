"""Conversion of raw command-line tokens into typed values.

The registry dispatches on a target :data:`~forge_shell.core.models.TypeSpec`
(a plain type for scalars or :class:`~forge_shell.core.models.ArrayOf`
for sequences) to one of two kinds of handler:

* **Scalar handlers**: callables turning a single string into a value
  (booleans, numbers, paths, dependency coordinates).  They raise on
  failure; see :mod:`forge_shell.core.converters`.
* **Expanders**: resource handlers that turn path-specs into zero or more
  matches.  Their results collapse into one three-way outcome
  (:class:`NoMatch` / :class:`Unique` / :class:`Ambiguous`), plus
  :class:`Unsupported` when the current context cannot resolve the type
  at all.

:meth:`ConversionRegistry.resolve` reports the outcome;
:meth:`ConversionRegistry.convert` applies the shared policy so every
command sees the same ambiguity and fallback behaviour:

* array target   → every match, in token order;
* scalar, 1 match → the match;
* scalar, 2+      → :class:`AmbiguousPathError`, no retry;
* scalar, 0       → literal construction, else :class:`ResourceNotFoundError`;
* unsupported     → ``None``, no literal fallback.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from forge_shell.core.models import (
    Ambiguous,
    ArrayOf,
    ConversionOutcome,
    NoMatch,
    Resource,
    SourceResource,
    TypeSpec,
    Unique,
    Unsupported,
)
from forge_shell.core.protocols import PathspecResolver, SourceCapability
from forge_shell.core.session import Session
from forge_shell.exceptions import (
    AmbiguousPathError,
    ConversionError,
    ForgeShellError,
    ResourceNotFoundError,
)

PYTHON_SOURCE_CAPABILITY = "python-source"

ScalarHandler = Callable[[str], Any]


class Expander(Protocol):
    """Resource handler: path-spec expansion plus literal construction."""

    def expand(self, tokens: Sequence[str]) -> list[Any] | None:
        """Return ordered matches, or ``None`` when the type is unsupported here."""
        ...  # pragma: no cover

    def literal(self, token: str) -> Any:
        """Construct a value directly from *token* or raise ``ResourceNotFoundError``."""
        ...  # pragma: no cover


class ConversionRegistry:
    """Pluggable dispatch from raw string tokens to typed values."""

    def __init__(self) -> None:
        self._scalars: dict[type, ScalarHandler] = {}
        self._expanders: dict[type, Expander] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, target: type, handler: ScalarHandler) -> None:
        """Register a scalar *handler* for *target* (replacing any previous one)."""
        self._scalars[target] = handler

    def register_expander(self, target: type, expander: Expander) -> None:
        """Register a resource *expander* serving ``target`` and ``ArrayOf(target)``."""
        self._expanders[target] = expander

    def supports(self, target: TypeSpec) -> bool:
        item = target.item if isinstance(target, ArrayOf) else target
        return item in self._expanders or item in self._scalars

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, target: TypeSpec, tokens: Sequence[str]) -> ConversionOutcome:
        """Resolve *tokens* against *target* without applying fallback policy.

        Raises
        ------
        ConversionError
            When no handler is registered for *target*, or a scalar
            handler rejects the input.
        """
        tokens = _as_tokens(tokens)

        if isinstance(target, ArrayOf):
            expander = self._expanders.get(target.item)
            if expander is not None:
                matches = expander.expand(tokens)
                if matches is None:
                    return Unsupported(f"{target} cannot be resolved in this context")
                return Unique(matches)
            handler = self._require_scalar(target.item)
            return Unique([self._apply(handler, target.item, token) for token in tokens])

        expander = self._expanders.get(target)
        if expander is not None:
            matches = expander.expand(tokens)
            if matches is None:
                return Unsupported(f"{target.__name__} cannot be resolved in this context")
            if not matches:
                return NoMatch()
            if len(matches) > 1:
                return Ambiguous(tuple(matches))
            return Unique(matches[0])

        handler = self._require_scalar(target)
        return Unique(self._apply(handler, target, " ".join(tokens)))

    def convert(self, target: TypeSpec, tokens: Sequence[str] | str) -> Any:
        """Resolve *tokens* and apply the ambiguity / fallback policy.

        Raises
        ------
        AmbiguousPathError
            When a scalar resource target matches more than once.
        ResourceNotFoundError
            When nothing matches and literal construction fails.
        ConversionError
            When a scalar handler rejects the input.
        """
        tokens = _as_tokens(tokens)
        outcome = self.resolve(target, tokens)

        if isinstance(outcome, Unique):
            return outcome.value
        if isinstance(outcome, Unsupported):
            return None
        if isinstance(outcome, Ambiguous):
            raise AmbiguousPathError(" ".join(tokens), outcome.candidates)

        # NoMatch: only scalar expanders produce it.
        expander = None if isinstance(target, ArrayOf) else self._expanders.get(target)
        if expander is None:
            raise ConversionError(f"no literal construction for {getattr(target, '__name__', target)}")
        return expander.literal(" ".join(tokens))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_scalar(self, target: type) -> ScalarHandler:
        handler = self._scalars.get(target)
        if handler is None:
            raise ConversionError(f"no conversion registered for {target.__name__}")
        return handler

    @staticmethod
    def _apply(handler: ScalarHandler, target: type, token: str) -> Any:
        try:
            return handler(token)
        except ForgeShellError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConversionError(
                f"cannot convert '{token}' to {target.__name__}: {exc}",
            ) from exc


def _as_tokens(tokens: Sequence[str] | str) -> list[str]:
    if isinstance(tokens, str):
        return [tokens]
    return [str(token) for token in tokens]


# ---------------------------------------------------------------------------
# Resource expanders
# ---------------------------------------------------------------------------

class ResourceExpander:
    """Expands path-specs against the session's current and previous location."""

    def __init__(self, session: Session, resolver: PathspecResolver) -> None:
        self._session = session
        self._resolver = resolver

    def expand(self, tokens: Sequence[str]) -> list[Any]:
        current = self._session.require_current_resource()
        previous = self._session.previous_resource
        matches: list[Any] = []
        for token in tokens:
            matches.extend(self._resolver.resolve(token, current=current, previous=previous))
        return matches

    def literal(self, token: str) -> Resource:
        return self._resolver.literal(token, current=self._session.require_current_resource())


class SourceExpander:
    """Expands module specs through the project's ``python-source`` capability.

    Without a bound project exposing the capability the expander reports
    ``None`` (unsupported), never an empty match list.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _capability(self) -> SourceCapability | None:
        project = self._session.project
        if project is None or not project.has_capability(PYTHON_SOURCE_CAPABILITY):
            return None
        capability: SourceCapability = project.get_capability(PYTHON_SOURCE_CAPABILITY)
        return capability

    def expand(self, tokens: Sequence[str]) -> list[Any] | None:
        capability = self._capability()
        if capability is None:
            return None
        matches: list[Any] = []
        for token in tokens:
            matches.extend(
                match for match in capability.resolve(token)
                if isinstance(match, SourceResource)
            )
        return matches

    def literal(self, token: str) -> SourceResource:
        capability = self._capability()
        if capability is None:
            raise ResourceNotFoundError(f"no python sources available for '{token}'")
        return capability.get_source(token)


def install_resource_handlers(
    registry: ConversionRegistry,
    session: Session,
    resolver: PathspecResolver,
) -> None:
    """Register the resource and source expanders on *registry*."""
    registry.register_expander(Resource, ResourceExpander(session, resolver))
    registry.register_expander(SourceResource, SourceExpander(session))
