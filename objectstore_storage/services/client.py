"""Minimal S3 client helpers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Any

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
import structlog

from objectstore_storage.core.config import ObjectStoreConfig
from objectstore_storage.core.exceptions import ErrorKind, ObjectStoreRequestError

LOGGER = structlog.get_logger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
CHUNK_SIZE = 64 * 1024


def build_s3_client(config: ObjectStoreConfig) -> BaseClient:
    """Return a boto3 S3 client pointed at the configured endpoint."""

    client_kwargs: dict[str, object] = {
        "endpoint_url": config.endpoint,
        "region_name": config.region,
        "use_ssl": config.use_ssl,
        "config": Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        ),
    }

    if config.access_key and config.secret_key:
        client_kwargs["aws_access_key_id"] = config.access_key
        client_kwargs["aws_secret_access_key"] = config.secret_key

    return boto3.client("s3", **client_kwargs)


def classify_error(exc: Exception) -> ErrorKind:
    """Return the error kind for a raw botocore failure."""

    if not isinstance(exc, ClientError):
        return ErrorKind.OTHER

    error = exc.response.get("Error", {})
    code = str(error.get("Code", ""))
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    if code in NOT_FOUND_CODES or status == 404:
        return ErrorKind.NOT_FOUND
    return ErrorKind.OTHER


def _translate(exc: Exception, operation: str, key: str) -> ObjectStoreRequestError:
    kind = classify_error(exc)
    return ObjectStoreRequestError(operation, key, kind, str(exc))


@dataclass(slots=True)
class StoredObject:
    """A fetched object whose body is still an open stream."""

    key: str
    body: Any | None
    content_type: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the body in order, translating stream failures."""

        if self.body is None:
            return
        try:
            for chunk in self.body.iter_chunks(chunk_size):
                if chunk:
                    yield chunk
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, "GetObject", self.key) from exc

    def close(self) -> None:
        if self.body is not None:
            self.body.close()


class ObjectStoreClient:
    """Bucket-scoped wrapper that turns SDK failures into typed errors."""

    def __init__(self, client: BaseClient, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def put_object(
        self,
        key: str,
        body: bytes | IO[bytes],
        content_type: str | None = None,
    ) -> None:
        params: dict[str, object] = {"Bucket": self.bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        try:
            self.client.put_object(**params)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, "PutObject", key) from exc

    def get_object(self, key: str) -> StoredObject:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, "GetObject", key) from exc

        return StoredObject(
            key=key,
            body=response.get("Body"),
            content_type=response.get("ContentType"),
            etag=response.get("ETag"),
            last_modified=response.get("LastModified"),
        )

    def head_object(self, key: str) -> dict[str, Any]:
        try:
            return self.client.head_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, "HeadObject", key) from exc

    def delete_object(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, "DeleteObject", key) from exc

    def head_bucket(self) -> None:
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, "HeadBucket", "") from exc


def get_object_store_client(config: ObjectStoreConfig) -> ObjectStoreClient:
    """Return a configured, bucket-scoped client instance."""

    LOGGER.info(
        "object_store_client_created",
        endpoint=config.endpoint,
        bucket=config.bucket,
        region=config.region,
    )
    return ObjectStoreClient(build_s3_client(config), config.bucket)


__all__ = [
    "ObjectStoreClient",
    "StoredObject",
    "build_s3_client",
    "classify_error",
    "get_object_store_client",
]
