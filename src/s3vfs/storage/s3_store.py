"""s3vfs S3 object store backend.

Provides an ObjectStoreClient over a boto3 S3 client, for AWS S3 and
S3-compatible stores. Retries, signing and transport stay with
boto3/botocore; this module only maps requests and translates errors.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3vfs.errors import ObjectNotFoundError, StoreRequestFailedError
from s3vfs.storage.models import ListResult, ObjectBody, ObjectSummary
from s3vfs.storage.object_store import ObjectStoreClient

if TYPE_CHECKING:
    from s3vfs.config import S3FileSystemConfig

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def create_boto3_client(config: S3FileSystemConfig) -> Any:
    """Create a boto3 S3 client with the configured credentials and timeouts."""
    client_config = Config(
        region_name=config.region,
        connect_timeout=config.connect_timeout_seconds,
        read_timeout=config.read_timeout_seconds,
    )
    return boto3.client(
        "s3",
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        region_name=config.region,
        endpoint_url=config.endpoint_url,
        config=client_config,
    )


def _is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in _NOT_FOUND_CODES or status == 404


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime.now(UTC)


class S3ObjectStoreClient(ObjectStoreClient):
    """ObjectStoreClient backed by a boto3 S3 client.

    Args:
        client: A boto3 S3 client (see create_boto3_client).
        bucket: Bucket every key is resolved against.
    """

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @classmethod
    def from_config(cls, config: S3FileSystemConfig) -> S3ObjectStoreClient:
        return cls(create_boto3_client(config), config.bucket_name)

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "s3"

    @property
    def bucket(self) -> str:
        return self._bucket

    def _translate(self, error: Exception, operation: str, key: str) -> Exception:
        """Map a boto3 failure onto the s3vfs error types."""
        if isinstance(error, ClientError) and _is_not_found(error):
            return ObjectNotFoundError(operation=operation, key=key, bucket=self._bucket)
        return StoreRequestFailedError(
            message=f"Object store request failed: {error}",
            operation=operation,
            key=key,
            bucket=self._bucket,
            cause=error,
        )

    def list_objects(self, prefix: str, delimiter: str = "/") -> ListResult:
        """List every page under a prefix."""
        objects: list[ObjectSummary] = []
        common_prefixes: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(
                Bucket=self._bucket, Prefix=prefix, Delimiter=delimiter
            ):
                for item in page.get("Contents", []):
                    objects.append(
                        ObjectSummary(
                            key=item["Key"],
                            size=int(item.get("Size", 0)),
                            last_modified=_as_datetime(item.get("LastModified")),
                        )
                    )
                for item in page.get("CommonPrefixes", []):
                    common_prefixes.append(item["Prefix"])
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "list_objects", prefix) from e

        logger.debug(
            "Listed prefix=%s objects=%d common_prefixes=%d",
            prefix,
            len(objects),
            len(common_prefixes),
        )
        return ListResult(
            prefix=prefix, objects=tuple(objects), common_prefixes=tuple(common_prefixes)
        )

    def get_object(self, key: str) -> ObjectBody:
        """Open an object; the returned stream is the botocore response body."""
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "get_object", key) from e

        return ObjectBody(
            key=key,
            content_length=int(response.get("ContentLength", 0)),
            last_modified=_as_datetime(response.get("LastModified")),
            stream=response["Body"],
        )

    def head_object(self, key: str) -> ObjectSummary:
        """Get object metadata without retrieving content."""
        try:
            response = self._client.head_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "head_object", key) from e

        return ObjectSummary(
            key=key,
            size=int(response.get("ContentLength", 0)),
            last_modified=_as_datetime(response.get("LastModified")),
            content_type=response.get("ContentType"),
        )

    def put_object(
        self,
        key: str,
        body: bytes | BinaryIO,
        *,
        content_type: str | None = None,
        acl: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        """Store an object."""
        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        if acl:
            params["ACL"] = acl
        if metadata:
            params["Metadata"] = dict(metadata)

        try:
            self._client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "put_object", key) from e

        logger.debug("Stored object: bucket=%s key=%s", self._bucket, key)

    def delete_object(self, key: str) -> None:
        """Delete an object."""
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "delete_object", key) from e

        logger.debug("Deleted object: bucket=%s key=%s", self._bucket, key)

    def copy_object(
        self,
        src_key: str,
        dst_key: str,
        *,
        acl: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        """Copy an object within the bucket."""
        params: dict[str, Any] = {
            "Bucket": self._bucket,
            "Key": dst_key,
            "CopySource": {"Bucket": self._bucket, "Key": src_key},
        }
        if acl:
            params["ACL"] = acl
        if metadata:
            params["Metadata"] = dict(metadata)
            params["MetadataDirective"] = "REPLACE"

        try:
            self._client.copy_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "copy_object", src_key) from e

        logger.debug("Copied object: bucket=%s src=%s dst=%s", self._bucket, src_key, dst_key)
