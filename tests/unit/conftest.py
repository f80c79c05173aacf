from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from objectstore_storage.core.config import ObjectStoreConfig
from objectstore_storage.services.client import ObjectStoreClient


@pytest.fixture()
def config() -> ObjectStoreConfig:
    return ObjectStoreConfig(
        endpoint="http://minio:9000",
        access_key="test",
        secret_key="secret",
        bucket="ghost",
        region="eu-west-1",
        storage_path="content/media/",
        static_file_url_prefix="content/media/",
    )


@pytest.fixture()
def s3() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def object_store(s3: MagicMock) -> ObjectStoreClient:
    return ObjectStoreClient(s3, "ghost")
