"""Infrastructure layer: files, projects, the terminal and the engine.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Raw ``OSError`` and third-party failures are re-raised as
  :class:`~forge_shell.exceptions.ForgeShellError` subclasses.
"""

from forge_shell.infra.config_store import ConfigStore
from forge_shell.infra.filesystem import GlobPathspecResolver, LocalResourceFactory
from forge_shell.infra.history_store import HistoryStore
from forge_shell.infra.project import DirectoryProject, locate_project
from forge_shell.infra.python_evaluator import PythonEvaluator

__all__: list[str] = [
    "ConfigStore",
    "DirectoryProject",
    "GlobPathspecResolver",
    "HistoryStore",
    "LocalResourceFactory",
    "PythonEvaluator",
    "locate_project",
]
