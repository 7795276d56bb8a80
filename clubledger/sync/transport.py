"""Mini README: Remote free-text stores used for ledger synchronisation.

Structure:
    * SyncTransport - abstract async read/write interface.
    * InMemoryTransport - holds the blob in memory (tests, API sessions).
    * FileTransport - keeps the blob in a text file, e.g. a synced folder.

A transport only moves the whole text. ``read`` returns ``None`` when the
remote has never been written; errors raised while reading or writing are
left to propagate to the caller. File access runs in a worker thread so
the event loop serving the API is never blocked.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..logging_utils import get_logger
from .registry import REGISTRY

LOGGER = get_logger(__name__)


class SyncTransport(ABC):
    """Base interface for remote free-text stores."""

    transport_name: str = "generic"

    @abstractmethod
    async def read(self) -> Optional[str]:
        """Return the full remote text, or ``None`` when absent."""

    @abstractmethod
    async def write(self, text: str) -> None:
        """Replace the full remote text."""

    def metadata(self) -> Dict[str, str]:
        """Return diagnostic metadata for API responses."""

        return {"transport": self.transport_name}


class InMemoryTransport(SyncTransport):
    """Transport keeping the remote text in memory."""

    transport_name = "memory"

    def __init__(self, text: Optional[str] = None) -> None:
        self.text = text
        self.writes = 0

    async def read(self) -> Optional[str]:
        return self.text

    async def write(self, text: str) -> None:
        self.text = text
        self.writes += 1
        LOGGER.debug("In-memory transport now holds %s characters", len(text))


class FileTransport(SyncTransport):
    """Transport backed by a plain text file."""

    transport_name = "file"

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is None:
            raise ValueError("A file path is required for the file transport")
        self.path = Path(path).expanduser()

    async def read(self) -> Optional[str]:
        return await asyncio.to_thread(self._read_file)

    async def write(self, text: str) -> None:
        await asyncio.to_thread(self._write_file, text)
        LOGGER.info("Wrote %s characters to sync file %s", len(text), self.path)

    def _read_file(self) -> Optional[str]:
        if not self.path.exists():
            LOGGER.info("Sync file %s does not exist yet", self.path)
            return None
        return self.path.read_text(encoding="utf-8")

    def _write_file(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")

    def metadata(self) -> Dict[str, str]:
        return {"transport": self.transport_name, "path": str(self.path)}


REGISTRY.register(InMemoryTransport)
REGISTRY.register(FileTransport)
