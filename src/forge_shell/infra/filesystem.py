"""Infrastructure: local filesystem resources and path-spec expansion.

Path-spec grammar
-----------------
* ``-``              the previous location (empty when there is none);
* ``~`` / ``~/x``    expanded against the user's home directory;
* ``*``, ``?``, ``[]`` glob patterns, matched in sorted order;
* anything else      a relative or absolute path, matched when it exists.

Relative specs are anchored at the *context directory* of the current
resource: the resource itself when it is a directory, else its parent.
"""

from __future__ import annotations

import glob
import os
from pathlib import Path

from forge_shell.core.models import Resource
from forge_shell.exceptions import ResourceNotFoundError

PREVIOUS_LOCATION = "-"

_GLOB_CHARS = frozenset("*?[")


class LocalResourceFactory:
    """Creates :class:`Resource` values for local paths."""

    def from_path(self, path: Path) -> Resource:
        absolute = Path(os.path.abspath(os.path.expanduser(str(path))))
        return Resource(path=absolute, is_directory=absolute.is_dir())


def context_directory(resource: Resource) -> Path:
    """Return the directory relative specs are resolved against."""
    return resource.path if resource.is_directory else resource.path.parent


def has_glob(spec: str) -> bool:
    return any(char in _GLOB_CHARS for char in spec)


class GlobPathspecResolver:
    """Expands path-specs against the local filesystem."""

    def __init__(self, factory: LocalResourceFactory | None = None) -> None:
        self._factory = factory or LocalResourceFactory()

    def _absolute(self, spec: str, current: Resource) -> str:
        expanded = os.path.expanduser(spec)
        if os.path.isabs(expanded):
            return os.path.normpath(expanded)
        return os.path.normpath(os.path.join(context_directory(current), expanded))

    def resolve(
        self,
        spec: str,
        *,
        current: Resource,
        previous: Resource | None,
    ) -> list[Resource]:
        if spec == PREVIOUS_LOCATION:
            return [previous] if previous is not None else []

        pattern = self._absolute(spec, current)
        if has_glob(spec):
            return [self._factory.from_path(Path(match)) for match in sorted(glob.glob(pattern))]
        if os.path.lexists(pattern):
            return [self._factory.from_path(Path(pattern))]
        return []

    def literal(self, spec: str, *, current: Resource) -> Resource:
        if spec == PREVIOUS_LOCATION:
            raise ResourceNotFoundError("no previous location", hint="Change directory first.")
        if not spec.strip():
            raise ResourceNotFoundError("empty path")
        if has_glob(spec):
            raise ResourceNotFoundError(f"no such file or directory: {spec}")
        return self._factory.from_path(Path(self._absolute(spec, current)))
