"""Storage contracts shared by the adapter and its host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from starlette.requests import Request
from starlette.responses import Response

RequestHandler = Callable[[Request], Awaitable[Response]]
ExistsCheck = Callable[[str, str | None], bool]


@dataclass(frozen=True, slots=True)
class StoredFile:
    """A file handed over by the host for persistence."""

    name: str
    contents: bytes | None = None
    path: str | None = None
    type: str | None = None


@dataclass(frozen=True, slots=True)
class ReadOptions:
    """Descriptor for a read; ``path`` is already a full object key."""

    path: str


class UniqueFileNameStrategy(Protocol):
    """Collision-avoidance policy used by ``save``."""

    def target_dir(self, base_dir: str) -> str:
        """Return the directory new uploads are placed in."""

    def __call__(self, file: StoredFile, target_dir: str, exists: ExistsCheck) -> str:
        """Return a path under ``target_dir`` that ``exists`` reports as free."""


class StorageBackend(Protocol):
    """The six operations a host relies on for file persistence."""

    def save(self, file: StoredFile, target_dir: str | None = None) -> str:
        """Persist ``file`` and return the URL path it is served from."""

    def save_raw(self, buffer: bytes, target_path: str) -> str:
        """Persist ``buffer`` under the static prefix and return its URL path."""

    def exists(self, file_name: str, target_dir: str | None = None) -> bool:
        """Return whether the object is present."""

    def delete(self, file_name: str, target_dir: str | None = None) -> None:
        """Remove the object."""

    def read(self, options: ReadOptions) -> bytes:
        """Return the full object contents."""

    def serve(self) -> RequestHandler:
        """Return an HTTP endpoint serving objects under the static prefix."""


__all__ = [
    "ExistsCheck",
    "ReadOptions",
    "RequestHandler",
    "StorageBackend",
    "StoredFile",
    "UniqueFileNameStrategy",
]
