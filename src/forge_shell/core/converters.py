"""Built-in scalar conversion handlers.

Every function here is a **pure** ``str -> value`` transformation that
raises ``ValueError`` (or a :class:`ConversionError`) on bad input.  They
are independent plug-ins: :func:`install_scalar_handlers` registers them,
and callers may replace any of them on the registry.
"""

from __future__ import annotations

import os
from pathlib import Path

from forge_shell.core.conversion import ConversionRegistry
from forge_shell.core.models import Dependency
from forge_shell.exceptions import ConversionError

_TRUE_WORDS = frozenset({"true", "t", "yes", "y", "on", "1"})
_FALSE_WORDS = frozenset({"false", "f", "no", "n", "off", "0"})


def to_bool(token: str) -> bool:
    """Parse yes/no style answers; anything else is rejected."""
    word = token.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ConversionError(f"not a boolean: '{token}'", hint="Answer yes or no.")


def to_int(token: str) -> int:
    return int(token.strip())


def to_float(token: str) -> float:
    return float(token.strip())


def to_str(token: str) -> str:
    return token


def to_path(token: str) -> Path:
    """Return *token* as a user-expanded :class:`Path` (not resolved)."""
    stripped = token.strip()
    if not stripped:
        raise ConversionError("path must not be empty")
    return Path(os.path.expanduser(stripped))


def to_dependency(token: str) -> Dependency:
    """Parse ``group:artifact[:version[:packaging[:scope]]]``."""
    parts = token.strip().split(":")
    if len(parts) < 2 or len(parts) > 5 or any(not part for part in parts):
        raise ConversionError(
            f"invalid dependency coordinate: '{token}'",
            hint="Use group:artifact[:version[:packaging[:scope]]]",
        )
    padded = parts + [None] * (5 - len(parts))
    return Dependency(
        group_id=padded[0],
        artifact_id=padded[1],
        version=padded[2],
        packaging=padded[3],
        scope=padded[4],
    )


def install_scalar_handlers(registry: ConversionRegistry) -> None:
    """Register every built-in scalar handler on *registry*."""
    registry.register(bool, to_bool)
    registry.register(int, to_int)
    registry.register(float, to_float)
    registry.register(str, to_str)
    registry.register(Path, to_path)
    registry.register(Dependency, to_dependency)
