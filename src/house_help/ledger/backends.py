"""Local persistence backends for the ledger document.

The store reads and writes the whole document as text through this
interface, so the medium can change without touching the store.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

STORAGE_KEY = "house_help_tracker_appdata"


@runtime_checkable
class LedgerBackend(Protocol):
    """Whole-document text storage."""

    key: str

    def read(self) -> str | None:
        """Return the stored document, or None if nothing was written yet."""
        ...

    def write(self, payload: str) -> None:
        ...


class InMemoryBackend:
    """Keeps the document in memory; used by tests and one-shot tools."""

    def __init__(self, initial: str | None = None, key: str = STORAGE_KEY) -> None:
        self.key = key
        self._payload = initial
        self.write_count = 0

    def read(self) -> str | None:
        return self._payload

    def write(self, payload: str) -> None:
        self._payload = payload
        self.write_count += 1


class JsonFileBackend:
    """Stores the document as a JSON file.

    Writes go to a sibling temp file first and are then renamed over the
    target, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str | os.PathLike[str], key: str = STORAGE_KEY) -> None:
        self.path = Path(path).expanduser()
        self.key = key

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read ledger file %s", self.path, exc_info=True)
            return None

    def write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, self.path)
