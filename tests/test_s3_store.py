"""Tests for the boto3-backed object store client.

The boto3 client is replaced by a Mock; these tests check request mapping
and error translation, not S3 itself.
"""

from __future__ import annotations

import io
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from s3vfs.config import S3FileSystemConfig
from s3vfs.errors import ObjectNotFoundError, StoreRequestFailedError
from s3vfs.storage.s3_store import S3ObjectStoreClient, create_boto3_client


def _client_error(code: str, status: int, operation: str = "HeadObject") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": "error"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


@pytest.fixture
def boto_client() -> MagicMock:
    """Return a stand-in for a boto3 S3 client."""
    return MagicMock()


@pytest.fixture
def store(boto_client: MagicMock) -> S3ObjectStoreClient:
    return S3ObjectStoreClient(boto_client, "cms-uploads")


class TestListObjects:
    """Tests for paginated listing."""

    def test_aggregates_all_pages(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        modified = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        pages: list[dict[str, Any]] = [
            {
                "Contents": [{"Key": "upload/a.txt", "Size": 3, "LastModified": modified}],
                "CommonPrefixes": [{"Prefix": "upload/sub/"}],
            },
            {
                "Contents": [{"Key": "upload/b.txt", "Size": 0, "LastModified": modified}],
            },
            {},
        ]
        boto_client.get_paginator.return_value.paginate.return_value = pages

        result = store.list_objects("upload/", "/")

        boto_client.get_paginator.assert_called_once_with("list_objects_v2")
        boto_client.get_paginator.return_value.paginate.assert_called_once_with(
            Bucket="cms-uploads", Prefix="upload/", Delimiter="/"
        )
        assert [o.key for o in result.objects] == ["upload/a.txt", "upload/b.txt"]
        assert [o.size for o in result.objects] == [3, 0]
        assert result.objects[0].last_modified == modified
        assert result.common_prefixes == ("upload/sub/",)
        assert result.prefix == "upload/"

    def test_naive_timestamps_become_utc(
        self, store: S3ObjectStoreClient, boto_client: MagicMock
    ) -> None:
        boto_client.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": "a", "Size": 1, "LastModified": datetime(2024, 1, 1)}]}
        ]

        result = store.list_objects("", "/")

        assert result.objects[0].last_modified.tzinfo is UTC

    def test_listing_failure(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        boto_client.get_paginator.return_value.paginate.side_effect = _client_error(
            "AccessDenied", 403, "ListObjectsV2"
        )

        with pytest.raises(StoreRequestFailedError) as exc_info:
            store.list_objects("upload/", "/")

        assert exc_info.value.operation == "list_objects"
        assert exc_info.value.bucket == "cms-uploads"
        assert isinstance(exc_info.value.cause, ClientError)


class TestErrorTranslation:
    """Tests for mapping botocore errors onto s3vfs errors."""

    @pytest.mark.parametrize("code,status", [("404", 404), ("NoSuchKey", 404), ("NotFound", 404)])
    def test_not_found(
        self, store: S3ObjectStoreClient, boto_client: MagicMock, code: str, status: int
    ) -> None:
        boto_client.head_object.side_effect = _client_error(code, status)

        with pytest.raises(ObjectNotFoundError) as exc_info:
            store.head_object("upload/a.txt")

        assert exc_info.value.key == "upload/a.txt"
        assert exc_info.value.bucket == "cms-uploads"

    def test_access_denied_is_not_not_found(
        self, store: S3ObjectStoreClient, boto_client: MagicMock
    ) -> None:
        boto_client.head_object.side_effect = _client_error("403", 403)

        with pytest.raises(StoreRequestFailedError) as exc_info:
            store.head_object("upload/a.txt")

        assert not isinstance(exc_info.value, ObjectNotFoundError)
        assert "key=upload/a.txt" in str(exc_info.value)
        assert "bucket=cms-uploads" in str(exc_info.value)

    def test_transport_error(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        boto_client.get_object.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.example.invalid"
        )

        with pytest.raises(StoreRequestFailedError) as exc_info:
            store.get_object("upload/a.txt")

        assert exc_info.value.operation == "get_object"
        assert isinstance(exc_info.value.cause, EndpointConnectionError)

    def test_delete_failure(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        boto_client.delete_object.side_effect = _client_error("InternalError", 500, "DeleteObject")

        with pytest.raises(StoreRequestFailedError):
            store.delete_object("upload/a.txt")


class TestObjectRequests:
    """Tests for request parameter mapping."""

    def test_get_object(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        body = io.BytesIO(b"hello")
        modified = datetime(2024, 2, 2, tzinfo=UTC)
        boto_client.get_object.return_value = {
            "Body": body,
            "ContentLength": 5,
            "LastModified": modified,
        }

        result = store.get_object("upload/a.txt")

        boto_client.get_object.assert_called_once_with(Bucket="cms-uploads", Key="upload/a.txt")
        assert result.stream is body
        assert result.content_length == 5
        assert result.last_modified == modified

    def test_head_object(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        boto_client.head_object.return_value = {
            "ContentLength": 42,
            "LastModified": datetime(2024, 3, 3, tzinfo=UTC),
            "ContentType": "image/jpeg",
        }

        summary = store.head_object("upload/a.jpg")

        assert summary.size == 42
        assert summary.content_type == "image/jpeg"

    def test_put_object_full(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        store.put_object(
            "upload/a.jpg",
            b"data",
            content_type="image/jpeg",
            acl="public-read",
            metadata={"Expires": "Thu, 01 Jan 2035 00:00:00 GMT"},
        )

        boto_client.put_object.assert_called_once_with(
            Bucket="cms-uploads",
            Key="upload/a.jpg",
            Body=b"data",
            ContentType="image/jpeg",
            ACL="public-read",
            Metadata={"Expires": "Thu, 01 Jan 2035 00:00:00 GMT"},
        )

    def test_put_object_minimal(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        store.put_object("upload/__empty", b"")

        boto_client.put_object.assert_called_once_with(
            Bucket="cms-uploads", Key="upload/__empty", Body=b""
        )

    def test_copy_object_with_metadata_replaces(
        self, store: S3ObjectStoreClient, boto_client: MagicMock
    ) -> None:
        store.copy_object("a.txt", "b.txt", acl="public-read", metadata={"Expires": "x"})

        boto_client.copy_object.assert_called_once_with(
            Bucket="cms-uploads",
            Key="b.txt",
            CopySource={"Bucket": "cms-uploads", "Key": "a.txt"},
            ACL="public-read",
            Metadata={"Expires": "x"},
            MetadataDirective="REPLACE",
        )

    def test_copy_object_without_metadata(
        self, store: S3ObjectStoreClient, boto_client: MagicMock
    ) -> None:
        store.copy_object("a.txt", "b.txt")

        kwargs = boto_client.copy_object.call_args.kwargs
        assert "MetadataDirective" not in kwargs
        assert "ACL" not in kwargs

    def test_copy_missing_source(self, store: S3ObjectStoreClient, boto_client: MagicMock) -> None:
        boto_client.copy_object.side_effect = _client_error("NoSuchKey", 404, "CopyObject")

        with pytest.raises(ObjectNotFoundError) as exc_info:
            store.copy_object("a.txt", "b.txt")

        assert exc_info.value.key == "a.txt"


class TestClientFactory:
    """Tests for create_boto3_client."""

    def test_passes_credentials_region_and_timeouts(self) -> None:
        config = S3FileSystemConfig(
            access_key_id="AKIATESTKEY",
            secret_access_key="test-secret",
            bucket_name="cms-uploads",
            region="eu-central-1",
            endpoint_url="http://localhost:9000",
            connect_timeout_seconds=5,
            read_timeout_seconds=900,
        )

        with patch("s3vfs.storage.s3_store.boto3.client") as client_factory:
            create_boto3_client(config)

        args, kwargs = client_factory.call_args
        assert args == ("s3",)
        assert kwargs["aws_access_key_id"] == "AKIATESTKEY"
        assert kwargs["aws_secret_access_key"] == "test-secret"
        assert kwargs["region_name"] == "eu-central-1"
        assert kwargs["endpoint_url"] == "http://localhost:9000"
        assert kwargs["config"].connect_timeout == 5
        assert kwargs["config"].read_timeout == 900

    def test_from_config(self, config: S3FileSystemConfig) -> None:
        with patch("s3vfs.storage.s3_store.boto3.client"):
            store = S3ObjectStoreClient.from_config(config)

        assert store.bucket == config.bucket_name
        assert store.backend_name == "s3"
