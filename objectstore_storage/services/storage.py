"""Object store backed storage adapter.

``ObjectStoreStorage`` lets a content host keep uploaded media in an
S3-compatible bucket instead of on local disk. Each public operation issues
exactly one request to the store (``save`` also checks which names are free) and
maps failures onto :mod:`objectstore_storage.core.exceptions`.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from email.utils import format_datetime

import structlog
from starlette.concurrency import iterate_in_threadpool, run_in_threadpool
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response, StreamingResponse
from starlette.types import Receive, Scope, Send

from objectstore_storage.core.config import ObjectStoreConfig, Settings, get_settings
from objectstore_storage.core.exceptions import (
    DeleteError,
    NotFoundError,
    ObjectStoreRequestError,
    ReadError,
    SaveError,
    SaveRawError,
)
from objectstore_storage.core.storage import (
    ReadOptions,
    RequestHandler,
    StoredFile,
    UniqueFileNameStrategy,
)
from objectstore_storage.services.client import (
    ObjectStoreClient,
    StoredObject,
    get_object_store_client,
)
from objectstore_storage.services.metrics import (
    storage_operation_seconds,
    storage_operations_total,
)
from objectstore_storage.services.naming import DatedUniqueFileName

LOGGER = structlog.get_logger(__name__)

CACHE_CONTROL = "public, max-age=31536000"
NOT_FOUND_BODY = "File not found"


def normalize_key(key: str) -> str:
    """Return ``key`` with forward slashes and no leading slash."""

    return key.replace("\\", "/").lstrip("/")


def http_date(value: datetime) -> str:
    """Format ``value`` as an RFC 7231 date in GMT."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def _record(operation: str, outcome: str, started: float) -> None:
    storage_operation_seconds.labels(operation=operation).observe(
        time.perf_counter() - started
    )
    storage_operations_total.labels(operation=operation, outcome=outcome).inc()


@contextmanager
def _observe(operation: str) -> Iterator[None]:
    started = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "success"
    finally:
        _record(operation, outcome, started)


class ObjectStoreStorage:
    """Storage backend persisting files in an S3-compatible bucket."""

    def __init__(
        self,
        config: ObjectStoreConfig,
        client: ObjectStoreClient | None = None,
        unique_file_name: UniqueFileNameStrategy | None = None,
    ) -> None:
        self.config = config
        self.client = client if client is not None else get_object_store_client(config)
        self.unique_file_name = unique_file_name or DatedUniqueFileName()

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, **options: object
    ) -> "ObjectStoreStorage":
        """Build an adapter from environment settings plus explicit options."""

        settings = settings or get_settings()
        return cls(settings.to_object_store_config(**options))

    @staticmethod
    def _object_key(file_name: str, target_dir: str | None) -> str:
        prefix = f"{target_dir}/" if target_dir else ""
        return normalize_key(prefix + file_name)

    def save(self, file: StoredFile, target_dir: str | None = None) -> str:
        """Upload ``file`` under the configured storage path and return its URL."""

        with _observe("save"):
            storage_dir = self.unique_file_name.target_dir(self.config.storage_path)
            LOGGER.info(
                "object_store_save_requested",
                file=file.name,
                target_dir=target_dir,
                storage_dir=storage_dir,
            )
            try:
                file_name = self.unique_file_name(file, storage_dir, self.exists)
                object_key = normalize_key(file_name)
                if file.contents is not None:
                    self.client.put_object(object_key, file.contents, file.type)
                elif file.path:
                    with open(file.path, "rb") as source:
                        self.client.put_object(object_key, source, file.type)
                else:
                    raise ValueError(f"{file.name} has neither contents nor a source path")
            except (ObjectStoreRequestError, OSError, ValueError) as exc:
                LOGGER.error("object_store_save_failed", file=file.name, error=str(exc))
                raise SaveError(f"Failed to save file to Object Store: {exc}") from exc

            LOGGER.info("object_store_saved", bucket=self.config.bucket, key=object_key)
            return f"/{object_key}"

    def save_raw(self, buffer: bytes, target_path: str) -> str:
        """Upload ``buffer`` under the static prefix and return its URL."""

        with _observe("save_raw"):
            object_key = normalize_key(f"{self.config.static_file_url_prefix}{target_path}")
            try:
                self.client.put_object(object_key, buffer)
            except ObjectStoreRequestError as exc:
                LOGGER.error("object_store_save_raw_failed", key=object_key, error=str(exc))
                raise SaveRawError(f"Failed to save buffer to Object Store: {exc}") from exc

            LOGGER.info("object_store_saved_raw", bucket=self.config.bucket, key=object_key)
            return f"/{object_key}"

    def exists(self, file_name: str, target_dir: str | None = None) -> bool:
        """Return ``True`` when the object is present; other failures propagate."""

        object_key = self._object_key(file_name, target_dir)
        with _observe("exists"):
            try:
                self.client.head_object(object_key)
            except ObjectStoreRequestError as exc:
                if exc.is_not_found:
                    return False
                LOGGER.warning("object_store_exists_check_failed", key=object_key, error=str(exc))
                raise
            return True

    def delete(self, file_name: str, target_dir: str | None = None) -> None:
        object_key = self._object_key(file_name, target_dir)
        with _observe("delete"):
            try:
                self.client.delete_object(object_key)
            except ObjectStoreRequestError as exc:
                LOGGER.error("object_store_delete_failed", key=object_key, error=str(exc))
                raise DeleteError(f"Failed to delete file from Object Store: {exc}") from exc

            LOGGER.info("object_store_deleted", bucket=self.config.bucket, key=object_key)

    def read(self, options: ReadOptions) -> bytes:
        """Return the whole object; only suitable for files that fit in memory."""

        with _observe("read"):
            stored: StoredObject | None = None
            try:
                stored = self.client.get_object(options.path)
                if stored.body is None:
                    LOGGER.error("object_store_read_without_body", key=options.path)
                    raise ReadError(
                        f"Failed to read file from Object Store: no body returned for {options.path}"
                    )
                return b"".join(stored.iter_chunks())
            except ObjectStoreRequestError as exc:
                if exc.is_not_found:
                    raise NotFoundError(options.path) from exc
                LOGGER.error("object_store_read_failed", key=options.path, error=str(exc))
                raise ReadError(f"Failed to read file from Object Store: {exc}") from exc
            finally:
                if stored is not None:
                    stored.close()

    def serve(self) -> RequestHandler:
        """Return an endpoint streaming objects stored under the static prefix."""

        prefix = self.config.static_file_url_prefix
        client = self.client

        async def handler(request: Request) -> Response:
            if "path" in request.path_params:
                file_path = request.path_params["path"]
            else:
                file_path = request.url.path[1:]
            object_key = f"{prefix}{file_path}"
            started = time.perf_counter()

            try:
                stored = await run_in_threadpool(client.get_object, object_key)
            except ObjectStoreRequestError as exc:
                if exc.is_not_found:
                    _record("serve", "not_found", started)
                    return PlainTextResponse(NOT_FOUND_BODY, status_code=404)
                _record("serve", "error", started)
                LOGGER.error("object_store_serve_failed", key=object_key, error=str(exc))
                raise

            if stored.body is None:
                _record("serve", "not_found", started)
                return PlainTextResponse(NOT_FOUND_BODY, status_code=404)

            return ObjectStreamResponse(stored, started)

        return handler


class ObjectStreamResponse(StreamingResponse):
    """Streams a fetched object and releases it however the transfer ends."""

    def __init__(self, stored: StoredObject, started: float) -> None:
        super().__init__(_stream_body(stored), headers=_response_headers(stored))
        self.stored = stored
        self.started = started

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        outcome = "error"
        try:
            await super().__call__(scope, receive, send)
            outcome = "success"
        except (ClientDisconnect, OSError):
            outcome = "disconnected"
            raise
        finally:
            self.stored.close()
            _record("serve", outcome, self.started)


def _response_headers(stored: StoredObject) -> dict[str, str]:
    headers: dict[str, str] = {}
    if stored.content_type:
        headers["Content-Type"] = stored.content_type
    headers["Cache-Control"] = CACHE_CONTROL
    if stored.etag:
        headers["ETag"] = stored.etag
    if stored.last_modified:
        headers["Last-Modified"] = http_date(stored.last_modified)
    return headers


async def _stream_body(stored: StoredObject) -> AsyncIterator[bytes]:
    async for chunk in iterate_in_threadpool(stored.iter_chunks()):
        yield chunk


__all__ = [
    "CACHE_CONTROL",
    "ObjectStoreStorage",
    "ObjectStreamResponse",
    "http_date",
    "normalize_key",
]
