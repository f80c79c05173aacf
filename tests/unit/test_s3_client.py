from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, Mock

import pytest
from botocore.exceptions import BotoCoreError

from objectstore_storage.core.config import ObjectStoreConfig
from objectstore_storage.core.exceptions import ErrorKind, ObjectStoreRequestError
from objectstore_storage.services import client as s3_client
from objectstore_storage.services.client import ObjectStoreClient, classify_error

from .fakes import FakeBody, client_error


def test_build_s3_client_uses_sigv4_and_path_style(
    monkeypatch: pytest.MonkeyPatch, config: ObjectStoreConfig
) -> None:
    captured: dict[str, object] = {}

    def fake_boto3_client(service_name: str, **kwargs: object) -> Mock:
        captured["service"] = service_name
        captured.update(kwargs)
        return Mock()

    monkeypatch.setattr(s3_client.boto3, "client", fake_boto3_client)

    s3_client.build_s3_client(config)

    assert captured["service"] == "s3"
    assert captured["endpoint_url"] == "http://minio:9000"
    assert captured["region_name"] == "eu-west-1"
    assert captured["use_ssl"] is False
    assert captured["aws_access_key_id"] == "test"
    assert captured["aws_secret_access_key"] == "secret"
    botocore_config = captured["config"]
    assert getattr(botocore_config, "signature_version", None) == "s3v4"
    assert botocore_config.s3 == {"addressing_style": "path"}


def test_build_s3_client_leaves_credentials_to_the_sdk(
    monkeypatch: pytest.MonkeyPatch, config: ObjectStoreConfig
) -> None:
    captured: dict[str, object] = {}

    def fake_boto3_client(service_name: str, **kwargs: object) -> Mock:
        captured.update(kwargs)
        return Mock()

    monkeypatch.setattr(s3_client.boto3, "client", fake_boto3_client)

    anonymous = config.model_copy(update={"access_key": None, "secret_key": None})
    s3_client.build_s3_client(anonymous)

    assert "aws_access_key_id" not in captured
    assert "aws_secret_access_key" not in captured


@pytest.mark.parametrize(
    ("code", "status", "expected"),
    [
        ("NoSuchKey", None, ErrorKind.NOT_FOUND),
        ("NotFound", None, ErrorKind.NOT_FOUND),
        ("404", None, ErrorKind.NOT_FOUND),
        ("SomethingElse", 404, ErrorKind.NOT_FOUND),
        ("AccessDenied", 403, ErrorKind.OTHER),
        ("InternalError", 500, ErrorKind.OTHER),
    ],
)
def test_classify_error(code: str, status: int | None, expected: ErrorKind) -> None:
    assert classify_error(client_error(code, status)) is expected


def test_classify_error_treats_transport_failures_as_other() -> None:
    assert classify_error(BotoCoreError()) is ErrorKind.OTHER


def test_put_object_only_sends_content_type_when_given(
    s3: MagicMock, object_store: ObjectStoreClient
) -> None:
    object_store.put_object("a.txt", b"hi")
    object_store.put_object("b.txt", b"hi", "text/plain")

    first, second = s3.put_object.call_args_list
    assert first.kwargs == {"Bucket": "ghost", "Key": "a.txt", "Body": b"hi"}
    assert second.kwargs["ContentType"] == "text/plain"


def test_get_object_maps_response_fields(s3: MagicMock, object_store: ObjectStoreClient) -> None:
    modified = datetime(2024, 1, 5, 10, 15, tzinfo=timezone.utc)
    body = FakeBody([b"a", b"", b"b"])
    s3.get_object.return_value = {
        "Body": body,
        "ContentType": "image/png",
        "ETag": '"etag"',
        "LastModified": modified,
    }

    stored = object_store.get_object("content/media/a.png")

    s3.get_object.assert_called_once_with(Bucket="ghost", Key="content/media/a.png")
    assert stored.content_type == "image/png"
    assert stored.etag == '"etag"'
    assert stored.last_modified == modified
    assert list(stored.iter_chunks()) == [b"a", b"b"]
    stored.close()
    assert body.closed is True


def test_get_object_translates_missing_key(s3: MagicMock, object_store: ObjectStoreClient) -> None:
    raw = client_error("NoSuchKey", 404, "GetObject")
    s3.get_object.side_effect = raw

    with pytest.raises(ObjectStoreRequestError) as excinfo:
        object_store.get_object("missing.png")

    assert excinfo.value.kind is ErrorKind.NOT_FOUND
    assert excinfo.value.operation == "GetObject"
    assert excinfo.value.key == "missing.png"
    assert excinfo.value.__cause__ is raw


def test_stream_failures_are_translated(s3: MagicMock, object_store: ObjectStoreClient) -> None:
    s3.get_object.return_value = {"Body": FakeBody([b"a"], error=BotoCoreError())}

    stored = object_store.get_object("a.bin")

    with pytest.raises(ObjectStoreRequestError) as excinfo:
        list(stored.iter_chunks())
    assert excinfo.value.kind is ErrorKind.OTHER


def test_head_bucket_translates_errors(s3: MagicMock, object_store: ObjectStoreClient) -> None:
    s3.head_bucket.side_effect = client_error("AccessDenied", 403, "HeadBucket")

    with pytest.raises(ObjectStoreRequestError) as excinfo:
        object_store.head_bucket()

    assert excinfo.value.kind is ErrorKind.OTHER
    s3.head_bucket.assert_called_once_with(Bucket="ghost")
