"""Infrastructure: project detection and the ``python-source`` capability.

A directory is a project root when it contains one of
:data:`PROJECT_MARKERS`.  Projects expose optional capabilities by name;
the only one shipped is ``python-source``, which addresses modules by
dotted name (``pkg.mod``, ``pkg.*``) under ``src/`` or the project root.
"""

from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import Any

from forge_shell.core.conversion import PYTHON_SOURCE_CAPABILITY
from forge_shell.core.models import Resource, SourceResource
from forge_shell.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)

PROJECT_MARKERS: tuple[str, ...] = ("pyproject.toml", "setup.py", "setup.cfg")
SOURCE_PROBE_DEPTH = 4


class PythonSourceCapability:
    """Resolves module specs to ``.py`` files below *source_root*."""

    def __init__(self, source_root: Path) -> None:
        self.source_root = source_root

    def _module_name(self, path: Path) -> str:
        relative = path.relative_to(self.source_root).with_suffix("")
        parts = list(relative.parts)
        if parts and parts[-1] == "__init__":
            parts.pop()
        return ".".join(parts)

    def _source(self, path: Path) -> SourceResource:
        return SourceResource(path=path, is_directory=False, module=self._module_name(path))

    def resolve(self, spec: str) -> list[Resource]:
        """Return source files matching *spec*, sorted by path.

        ``pkg.mod`` matches ``pkg/mod.py`` or ``pkg/mod/__init__.py``;
        glob characters are allowed in any segment.
        """
        stripped = spec.strip()
        if stripped.endswith(".py"):
            stripped = stripped[:-3]
        relative = stripped.replace(".", "/")
        if not relative:
            return []
        candidates = sorted(
            set(glob.glob(str(self.source_root / f"{relative}.py")))
            | set(glob.glob(str(self.source_root / relative / "__init__.py")))
        )
        return [self._source(Path(candidate)) for candidate in candidates]

    def get_source(self, name: str) -> SourceResource:
        relative = name.strip().replace(".", "/")
        for candidate in (
            self.source_root / f"{relative}.py",
            self.source_root / relative / "__init__.py",
        ):
            if relative and candidate.is_file():
                return self._source(candidate)
        raise ResourceNotFoundError(
            f"no module named '{name}' under {self.source_root}",
        )


def has_python_sources(source_root: Path, depth: int = SOURCE_PROBE_DEPTH) -> bool:
    """Return whether a ``.py`` file sits at most *depth* levels below *source_root*."""
    pattern = "*.py"
    for _ in range(depth):
        if next(source_root.glob(pattern), None) is not None:
            return True
        pattern = f"*/{pattern}"
    return False


class DirectoryProject:
    """A project rooted at a directory holding a packaging marker file.

    Capabilities are detected on first use, so binding a project on every
    ``cd`` does not touch its source tree.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.name = root.name
        self.source_root = root / "src" if (root / "src").is_dir() else root
        self._capabilities: dict[str, Any] | None = None

    def _detected(self) -> dict[str, Any]:
        if self._capabilities is None:
            self._capabilities = {}
            if has_python_sources(self.source_root):
                self._capabilities[PYTHON_SOURCE_CAPABILITY] = PythonSourceCapability(self.source_root)
            logger.debug("capabilities of %s: %s", self.name, sorted(self._capabilities))
        return self._capabilities

    def has_capability(self, name: str) -> bool:
        return name in self._detected()

    def get_capability(self, name: str) -> Any:
        try:
            return self._detected()[name]
        except KeyError:
            raise LookupError(f"project {self.name} has no capability '{name}'") from None

    def __repr__(self) -> str:
        return f"DirectoryProject({str(self.root)!r})"


def locate_project(resource: Resource) -> DirectoryProject | None:
    """Return the project enclosing *resource*, searching upwards."""
    start = resource.path if resource.is_directory else resource.path.parent
    for directory in (start, *start.parents):
        if any((directory / marker).is_file() for marker in PROJECT_MARKERS):
            logger.debug("project root found at %s", directory)
            return DirectoryProject(directory)
    return None
