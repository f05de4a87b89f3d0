"""Domain models for forge-shell.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access.  They carry zero I/O and no dependencies on
external packages.  Filesystem facts (such as whether a path is a
directory) are captured by the infrastructure layer when a model is
created, never looked up here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union


# ---------------------------------------------------------------------------
# Addressable resources
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Resource:
    """A location the shell can address: a file or a directory."""

    path: Path
    """Absolute path of the resource.  It may not exist yet."""

    is_directory: bool = False
    """Whether the path was a directory when the resource was created."""

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def fully_qualified_name(self) -> str:
        return str(self.path)

    def __str__(self) -> str:
        return self.fully_qualified_name


@dataclass(frozen=True, slots=True)
class SourceResource(Resource):
    """A Python source file addressed through a project's source capability."""

    module: str = ""
    """Dotted module name relative to the source root (e.g. ``pkg.mod``)."""


# ---------------------------------------------------------------------------
# Dependency coordinates
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Dependency:
    """A ``group:artifact[:version[:packaging[:scope]]]`` coordinate."""

    group_id: str
    artifact_id: str
    version: str | None = None
    packaging: str | None = None
    scope: str | None = None

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id]
        for extra in (self.version, self.packaging, self.scope):
            if extra is None:
                break
            parts.append(extra)
        return ":".join(parts)


# ---------------------------------------------------------------------------
# Conversion requests and outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArrayOf:
    """Conversion target describing an ordered sequence of ``item`` values."""

    item: type

    def __str__(self) -> str:
        return f"{self.item.__name__}[]"


TypeSpec = Union[type, ArrayOf]
"""Anything :class:`~forge_shell.core.conversion.ConversionRegistry` converts to."""


@dataclass(frozen=True, slots=True)
class NoMatch:
    """Expansion produced zero results."""


@dataclass(frozen=True, slots=True)
class Unique:
    """Expansion produced exactly one value (or a whole array)."""

    value: Any


@dataclass(frozen=True, slots=True)
class Ambiguous:
    """Expansion produced several candidates where one was required."""

    candidates: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Unsupported:
    """The target cannot be resolved in the current context at all.

    Distinct from :class:`NoMatch`: no literal fallback may be attempted.
    """

    reason: str


ConversionOutcome = Union[NoMatch, Unique, Ambiguous, Unsupported]


# ---------------------------------------------------------------------------
# Script invocation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ScriptInvocation:
    """A script file plus the positional arguments it is invoked with."""

    path: Path
    content: str
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SynthesizedUnit:
    """Composite, uniquely named script text wrapping a script file.

    ``text`` is ``prologue + body + epilogue`` and is what gets submitted
    to the evaluator.
    """

    name: str
    parameters: tuple[str, ...]
    arguments: tuple[str, ...]
    prologue: str
    body: str
    epilogue: str

    @property
    def text(self) -> str:
        return self.prologue + self.body + self.epilogue
