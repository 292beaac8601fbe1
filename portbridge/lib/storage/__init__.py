"""Storage backend abstraction for the bridge.

Usage:
    from portbridge.lib.storage import get_storage

    storage = get_storage("./run/")
    storage.write_text("users.json", payload)
"""

from portbridge.lib.errors import ConfigurationError
from portbridge.lib.storage.base import StorageBackend, StorageResult
from portbridge.lib.storage.local import LocalStorage

__all__ = [
    "StorageBackend",
    "StorageResult",
    "LocalStorage",
    "get_storage",
    "parse_uri",
]


def parse_uri(path: str) -> tuple[str, str]:
    """Parse a storage URI into scheme and path.

    Examples:
        >>> parse_uri("./data/")
        ('local', './data/')
        >>> parse_uri("s3://my-bucket/out/")
        ('s3', 'my-bucket/out/')
    """
    if "://" in path:
        scheme, rest = path.split("://", 1)
        return (scheme.lower(), rest)
    if path.startswith("file:"):
        return ("local", path[5:])
    return ("local", path)


def get_storage(path: str, **options) -> StorageBackend:
    """Get the storage backend for a base path.

    Only the local filesystem is supported.

    Raises:
        ConfigurationError: If the path uses a remote scheme.
    """
    scheme, local_path = parse_uri(path)

    if scheme not in ("local", "file"):
        raise ConfigurationError(
            f"Unsupported storage scheme '{scheme}'",
            field="base_dir",
            value=path,
            suggestion="Use a local directory path for base_dir.",
        )

    return LocalStorage(local_path or ".", **options)
