"""Error taxonomy for object store storage operations."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification assigned when an object store request fails."""

    NOT_FOUND = "not_found"
    OTHER = "other"


class StorageError(Exception):
    """Base exception for all storage adapter errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ObjectStoreRequestError(StorageError):
    """Raised by the client boundary when a request to the object store fails."""

    def __init__(
        self,
        operation: str,
        key: str,
        kind: ErrorKind,
        message: str,
    ) -> None:
        super().__init__(message, details={"operation": operation, "key": key})
        self.operation = operation
        self.key = key
        self.kind = kind

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND


class SaveError(StorageError):
    """Raised when a file upload fails."""


class SaveRawError(StorageError):
    """Raised when a raw buffer upload fails."""


class DeleteError(StorageError):
    """Raised when an object cannot be deleted."""


class ReadError(StorageError):
    """Raised when an object cannot be read."""


class NotFoundError(StorageError):
    """Raised when a read targets a key that does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}", details={"path": path})
        self.path = path


__all__ = [
    "DeleteError",
    "ErrorKind",
    "NotFoundError",
    "ObjectStoreRequestError",
    "ReadError",
    "SaveError",
    "SaveRawError",
    "StorageError",
]
