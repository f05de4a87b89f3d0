"""Infrastructure: the per-user config directory and config script.

Layout
------
``~/.forge/``
    ``cmd_history``: one accepted command per line (see
    :mod:`forge_shell.infra.history_store`).
    ``config``:      a script executed at every startup.  Created on first
    run with :data:`DEFAULT_CONFIG`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from forge_shell.core.session import (
    DEFAULT_PLUGIN_REPO,
    DEFAULT_PROMPT,
    DEFAULT_PROMPT_NO_PROJECT,
    PROP_DEFAULT_PLUGIN_REPO,
    PROP_PROMPT,
    PROP_PROMPT_NO_PROJECT,
)
from forge_shell.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR: Path = Path.home() / ".forge"
HISTORY_FILE_NAME = "cmd_history"
CONFIG_FILE_NAME = "config"

_BANNER = (
    r"    ____                        ",
    r"   / __/___  _________ ____     ",
    r"  / /_/ __ \/ ___/ __ `/ _ \    ",
    r" / __/ /_/ / /  / /_/ /  __/    ",
    r"/_/  \____/_/   \__, /\___/     ",
    r"               /____/           ",
)


def _single_quoted(value: str) -> str:
    return "'" + value.replace("'", "'\"'\"'") + "'"


def _default_config() -> str:
    lines = ["# Automatically generated config file", "if not NO_MOTD:"]
    lines.extend(f"    echo {_single_quoted(row)}" for row in _BANNER)
    lines.extend(
        (
            "    echo",
            "",
            'if OS_NAME.startswith("Windows"):',
            "    echo '  Windows? Really? Okay...'",
            "",
            f"set {PROP_PROMPT} {_single_quoted(DEFAULT_PROMPT)}",
            f"set {PROP_PROMPT_NO_PROJECT} {_single_quoted(DEFAULT_PROMPT_NO_PROJECT)}",
            f"set {PROP_DEFAULT_PLUGIN_REPO} {_single_quoted(DEFAULT_PLUGIN_REPO)}",
            "",
        )
    )
    return "\n".join(lines)


DEFAULT_CONFIG: str = _default_config()


def ensure_config_dir(config_dir: Path) -> Path:
    """Create *config_dir* if needed.

    Raises
    ------
    ConfigError
        When the directory cannot be created or a file is in the way.
    """
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(
            f"could not create config directory: {config_dir}",
            hint=f"{exc.strerror or exc}. Check permissions or pass --config-dir.",
        ) from exc
    return config_dir


class ConfigStore:
    """Locates and bootstraps the files in the config directory."""

    def __init__(self, config_dir: Path = DEFAULT_CONFIG_DIR) -> None:
        self.config_dir: Path = config_dir

    @property
    def history_file(self) -> Path:
        return self.config_dir / HISTORY_FILE_NAME

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def ensure_config_file(self) -> Path:
        """Return the config script path, writing the default one if absent.

        Raises
        ------
        ConfigError
            When the directory or the default file cannot be written.
        """
        ensure_config_dir(self.config_dir)
        path = self.config_file
        if not path.exists():
            try:
                path.write_text(DEFAULT_CONFIG, encoding="utf-8")
            except OSError as exc:
                raise ConfigError(f"could not create config file: {path}") from exc
            logger.debug("wrote default config to %s", path)
        return path
