"""File I/O for the bridge.

Input reads never raise: a missing or unreadable file becomes a typed
ReadResult so the bridge can report it and keep running. Output writes are
serialized per path and raise OutputWriteError on failure.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from portbridge.lib.errors import OutputWriteError
from portbridge.lib.storage.base import StorageBackend, StorageResult

logger = logging.getLogger(__name__)

__all__ = ["InputStatus", "ReadResult", "read_input", "OutputWriter"]


class InputStatus(Enum):
    """Outcome of reading an input file."""

    OK = "ok"
    MISSING = "missing"
    FAILED = "failed"


@dataclass
class ReadResult:
    """Result of reading one input file for a port."""

    port: str
    path: str
    status: InputStatus
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == InputStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (payload text excluded)."""
        return {
            "port": self.port,
            "path": self.path,
            "status": self.status.value,
            "chars": len(self.text) if self.text is not None else None,
            "error": self.error,
        }


async def read_input(
    storage: StorageBackend,
    port: str,
    path: str,
    encoding: str = "utf-8",
) -> ReadResult:
    """Read an input file as text without raising on failure.

    Args:
        storage: Backend the path is resolved against
        port: Name of the input port the text is destined for
        path: File path (relative to the storage base or absolute)
        encoding: Text encoding (default: utf-8)

    Returns:
        ReadResult with status OK and the full text, MISSING when the file
        does not exist, or FAILED for any other read or decode error.
    """
    loop = asyncio.get_running_loop()
    full_path = storage.get_full_path(path)

    try:
        text = await loop.run_in_executor(None, storage.read_text, path, encoding)
    except FileNotFoundError as e:
        return ReadResult(port, full_path, InputStatus.MISSING, error=str(e))
    except (OSError, UnicodeDecodeError, LookupError) as e:
        return ReadResult(port, full_path, InputStatus.FAILED, error=str(e))

    return ReadResult(port, full_path, InputStatus.OK, text=text)


class OutputWriter:
    """Persist output payloads, one write at a time per path.

    Writes to the same path complete in the order they were requested,
    so the file ends up holding the last payload received for it.
    """

    def __init__(self, storage: StorageBackend, encoding: str = "utf-8") -> None:
        self.storage = storage
        self.encoding = encoding
        self.writes = 0
        self.bytes_written = 0
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, path: str) -> asyncio.Lock:
        key = os.path.normcase(os.path.abspath(self.storage.get_full_path(path)))
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def write(self, port: str, path: str, payload: str) -> StorageResult:
        """Overwrite ``path`` with ``payload``.

        Raises:
            OutputWriteError: If the write fails for any reason.
        """
        loop = asyncio.get_running_loop()

        async with self._lock_for(path):
            try:
                result = await loop.run_in_executor(
                    None, self.storage.write_text, path, payload, self.encoding
                )
            except (OSError, UnicodeError, LookupError) as e:
                raise OutputWriteError(
                    "Failed to write output",
                    port=port,
                    path=self.storage.get_full_path(path),
                    cause=e,
                ) from e

            if not result.success:
                raise OutputWriteError(
                    "Failed to write output",
                    port=port,
                    path=result.path,
                    details={"error": result.error},
                )

        self.writes += 1
        self.bytes_written += result.bytes_written
        logger.debug("Wrote %d bytes to %s", result.bytes_written, result.path)
        return result
