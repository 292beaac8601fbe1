"""Local filesystem storage backend."""

from __future__ import annotations

import logging
from pathlib import Path

from portbridge.lib.storage.base import StorageBackend, StorageResult

logger = logging.getLogger(__name__)

__all__ = ["LocalStorage"]


class LocalStorage(StorageBackend):
    """Local filesystem storage backend.

    Example:
        >>> storage = LocalStorage(".")
        >>> storage.exists("data/cust.csv")
        True
        >>> storage.write_text("users.json", "[]").success
        True
    """

    @property
    def scheme(self) -> str:
        return "local"

    def _resolve_path(self, path: str) -> Path:
        """Resolve a path to an absolute Path object."""
        full_path = self.get_full_path(path)
        return Path(full_path).resolve()

    def exists(self, path: str) -> bool:
        """Check if a path exists."""
        return self._resolve_path(path).exists()

    def read_bytes(self, path: str) -> bytes:
        """Read file contents as bytes."""
        resolved = self._resolve_path(path)
        return resolved.read_bytes()

    def write_bytes(self, path: str, data: bytes) -> StorageResult:
        """Write bytes to a file."""
        resolved = self._resolve_path(path)

        try:
            # Ensure parent directory exists
            resolved.parent.mkdir(parents=True, exist_ok=True)

            resolved.write_bytes(data)

            return StorageResult(
                success=True,
                path=str(resolved),
                files_written=[str(resolved)],
                bytes_written=len(data),
            )
        except OSError as e:
            logger.error("Failed to write %s: %s", resolved, e)
            return StorageResult(
                success=False,
                path=str(resolved),
                error=str(e),
            )
