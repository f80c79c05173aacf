"""S3-compatible object store backend for content uploads."""

from .core.config import ObjectStoreConfig, Settings, get_settings
from .core.storage import ReadOptions, StorageBackend, StoredFile
from .services.storage import ObjectStoreStorage

__all__ = [
    "ObjectStoreConfig",
    "ObjectStoreStorage",
    "ReadOptions",
    "Settings",
    "StorageBackend",
    "StoredFile",
    "get_settings",
]
