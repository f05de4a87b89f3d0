"""Infrastructure: the append-only command history file.

File format
-----------
Plain bytes, one record per line, each terminated by ``\\n``.  Nothing is
escaped, so a record containing a newline is not round-tripped, and any
bytes after the final newline are ignored on load.

Lifecycle
---------
:meth:`HistoryStore.open` loads previous records and opens one append
handle for the whole session.  The handle is flushed and closed by an
``atexit`` hook, however the process ends.
"""

from __future__ import annotations

import atexit
import logging
from pathlib import Path
from typing import BinaryIO

from forge_shell.exceptions import ConfigError, HistoryError
from forge_shell.infra.config_store import HISTORY_FILE_NAME, ensure_config_dir

logger = logging.getLogger(__name__)

CHUNK_SIZE = 25
"""Bytes read per chunk while loading."""

_NEWLINE = 0x0A


class HistoryStore:
    """Persistent, append-only record of accepted input lines."""

    def __init__(self, config_dir: Path, file_name: str = HISTORY_FILE_NAME) -> None:
        self.config_dir: Path = config_dir
        self.path: Path = config_dir / file_name
        self.records: list[str] = []
        self._handle: BinaryIO | None = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self) -> list[str]:
        """Prepare the history file and load its records.

        Raises
        ------
        HistoryError
            When the config directory or history file cannot be created or
            read.  History is unavailable afterwards; the shell keeps going.
        """
        try:
            ensure_config_dir(self.config_dir)
        except ConfigError as exc:
            raise HistoryError(str(exc), hint=exc.hint) from exc

        try:
            self.path.touch(exist_ok=True)
            self.records = self._load()
            self._handle = open(self.path, "ab")
        except OSError as exc:
            raise HistoryError(f"could not open history file: {self.path}") from exc

        atexit.register(self.close)
        logger.debug("loaded %d history record(s) from %s", len(self.records), self.path)
        return list(self.records)

    def _load(self) -> list[str]:
        records: list[str] = []
        buffer = bytearray()
        with open(self.path, "rb") as stream:
            while chunk := stream.read(CHUNK_SIZE):
                for byte in chunk:
                    if byte == _NEWLINE:
                        records.append(buffer.decode("utf-8", errors="replace"))
                        buffer.clear()
                    else:
                        buffer.append(byte)
        return records

    def append(self, line: str) -> None:
        """Record *line* as-is, followed by a single newline."""
        self.records.append(line)
        if self._handle is None:
            return
        try:
            self._handle.write(line.encode("utf-8") + b"\n")
        except OSError:
            logger.warning("could not write to history file %s", self.path, exc_info=True)

    def close(self) -> None:
        """Flush and release the append handle (idempotent)."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.flush()
        finally:
            handle.close()
        atexit.unregister(self.close)
