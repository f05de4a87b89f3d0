"""Session-scoped state shared by every shell component.

A :class:`Session` holds two kinds of data:

* :class:`SessionConfig`: typed fields for the keys the shell itself
  understands (prompt templates, verbosity, working-directory label, …).
* ``variables``: an open mapping for engine-defined names.  The bundled
  evaluator uses it as its global scope.

Both are reachable through one loosely-typed, string-keyed surface
(:meth:`Session.get_property` / :meth:`Session.set_property`) so commands
such as ``set`` need not know which side a key lives on.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from forge_shell.core.models import Resource
from forge_shell.core.protocols import Project

PROP_PROMPT = "PROMPT"
PROP_PROMPT_NO_PROJECT = "PROMPT_NOPROJ"
PROP_VERBOSE = "VERBOSE"
PROP_CWD = "CWD"
PROP_OS_NAME = "OS_NAME"
PROP_CONFIG_DIR = "FORGE_CONFIG_DIR"
PROP_NO_MOTD = "NO_MOTD"
PROP_DEFAULT_PLUGIN_REPO = "DEFAULT_PLUGIN_REPO"
PROP_PROJECT_NAME = "PROJECT_NAME"

DEFAULT_PROMPT = "[\\c{green}$PROJECT_NAME\\c] \\c{white}\\W\\c \\c{green}\\$\\c "
DEFAULT_PROMPT_NO_PROJECT = "[\\c{red}no project\\c] \\c{white}\\W\\c \\c{red}\\$\\c "
DEFAULT_PLUGIN_REPO = "https://github.com/forge-shell/plugin-index/raw/main/index.json"

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


@dataclass(slots=True)
class SessionConfig:
    """Typed view of the known session properties."""

    prompt: str = "> "
    prompt_no_project: str = "> "
    verbose: bool = False
    cwd: str = ""
    os_name: str = ""
    config_dir: str = ""
    no_motd: bool = False
    plugin_repo: str = DEFAULT_PLUGIN_REPO


_FIELD_BY_KEY: dict[str, str] = {
    PROP_PROMPT: "prompt",
    PROP_PROMPT_NO_PROJECT: "prompt_no_project",
    PROP_VERBOSE: "verbose",
    PROP_CWD: "cwd",
    PROP_OS_NAME: "os_name",
    PROP_CONFIG_DIR: "config_dir",
    PROP_NO_MOTD: "no_motd",
    PROP_DEFAULT_PLUGIN_REPO: "plugin_repo",
}

_BOOL_FIELDS = frozenset(f.name for f in fields(SessionConfig) if f.type in ("bool", bool))


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_STRINGS


class Session:
    """Mutable state for one interactive session.

    Mutated only by the input loop, the prompting primitives and the
    commands they run; it lives until the process exits.
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config: SessionConfig = config or SessionConfig()
        self.variables: dict[str, Any] = {}
        self.current_resource: Resource | None = None
        self.previous_resource: Resource | None = None
        self.project: Project | None = None
        self.pretend: bool = False
        self.exit_requested: bool = False
        self.exit_armed: bool = False

    # ------------------------------------------------------------------
    # Property surface
    # ------------------------------------------------------------------

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return the value of property *name*, known or engine-defined."""
        field_name = _FIELD_BY_KEY.get(name)
        if field_name is not None:
            return getattr(self.config, field_name)
        if name == PROP_PROJECT_NAME:
            return self.project.name if self.project is not None else ""
        return self.variables.get(name, default)

    def set_property(self, name: str, value: Any) -> None:
        """Set property *name*.

        Known keys are coerced to their field type (``"true"`` becomes
        ``True`` for flags); every value is mirrored into ``variables`` so
        scripts can read it by name.
        """
        field_name = _FIELD_BY_KEY.get(name)
        if field_name is not None:
            if field_name in _BOOL_FIELDS:
                value = _coerce_flag(value)
            else:
                value = str(value)
            setattr(self.config, field_name, value)
        self.variables[name] = value

    def remove_property(self, name: str) -> None:
        """Remove an engine-defined property; known keys cannot be removed."""
        if name in _FIELD_BY_KEY:
            raise KeyError(f"{name} is a built-in property and cannot be removed")
        self.variables.pop(name, None)

    def properties(self) -> dict[str, Any]:
        """Return a snapshot of every property, known keys first."""
        snapshot = {key: self.get_property(key) for key in _FIELD_BY_KEY}
        snapshot[PROP_PROJECT_NAME] = self.get_property(PROP_PROJECT_NAME)
        for key, value in self.variables.items():
            if not key.startswith("__"):
                snapshot.setdefault(key, value)
        return snapshot

    def export(self) -> None:
        """Copy known properties into ``variables`` for script access."""
        for key in _FIELD_BY_KEY:
            self.variables[key] = self.get_property(key)
        self.variables[PROP_PROJECT_NAME] = self.get_property(PROP_PROJECT_NAME)

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    @verbose.setter
    def verbose(self, value: bool) -> None:
        self.set_property(PROP_VERBOSE, value)

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    def set_current_resource(self, resource: Resource) -> None:
        """Move to *resource*, keeping the old location as the ``-`` anchor."""
        if self.current_resource is not None:
            self.previous_resource = self.current_resource
        self.current_resource = resource
        self.set_property(PROP_CWD, resource.fully_qualified_name)

    def require_current_resource(self) -> Resource:
        if self.current_resource is None:
            raise RuntimeError("session has no current resource; call Shell.startup() first")
        return self.current_resource

    # ------------------------------------------------------------------
    # Exit state
    # ------------------------------------------------------------------

    def arm_exit(self) -> None:
        self.exit_armed = True

    def disarm_exit(self) -> None:
        self.exit_armed = False

    def request_exit(self) -> None:
        """Ask the input loop to stop at the next iteration boundary."""
        self.exit_requested = True
        self.exit_armed = False
