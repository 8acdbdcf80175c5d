"""s3vfs in-memory object store backend.

Provides a process-local ObjectStoreClient for development and testing. It
reproduces the listing semantics of S3: keys are flat strings, and a
delimiter listing folds every key with a further delimiter into a common
prefix.
"""

from __future__ import annotations

import io
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import BinaryIO

from s3vfs.errors import ObjectNotFoundError
from s3vfs.storage.models import ListResult, ObjectBody, ObjectSummary
from s3vfs.storage.object_store import ObjectStoreClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredBlob:
    """Content and metadata of one in-memory object."""

    data: bytes
    last_modified: datetime
    content_type: str | None = None
    acl: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


class InMemoryObjectStoreClient(ObjectStoreClient):
    """Dict-backed object store.

    Safe for concurrent use: every request runs under one lock.
    """

    def __init__(self, bucket: str = "s3vfs-memory") -> None:
        self._bucket = bucket
        self._objects: dict[str, StoredBlob] = {}
        self._lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "memory"

    @property
    def bucket(self) -> str:
        return self._bucket

    def keys(self) -> list[str]:
        """Return every stored key, sorted."""
        with self._lock:
            return sorted(self._objects)

    def blob(self, key: str) -> StoredBlob:
        """Return the stored blob for a key (for inspection in tests)."""
        with self._lock:
            try:
                return self._objects[key]
            except KeyError as e:
                raise ObjectNotFoundError(operation="blob", key=key, bucket=self._bucket) from e

    def list_objects(self, prefix: str, delimiter: str = "/") -> ListResult:
        objects: list[ObjectSummary] = []
        common_prefixes: list[str] = []
        with self._lock:
            for key in sorted(self._objects):
                if not key.startswith(prefix):
                    continue
                rest = key[len(prefix) :]
                cut = rest.find(delimiter) if delimiter else -1
                if cut >= 0:
                    common = prefix + rest[: cut + 1]
                    if not common_prefixes or common_prefixes[-1] != common:
                        common_prefixes.append(common)
                    continue
                blob = self._objects[key]
                objects.append(
                    ObjectSummary(
                        key=key,
                        size=len(blob.data),
                        last_modified=blob.last_modified,
                        content_type=blob.content_type,
                    )
                )
        return ListResult(
            prefix=prefix, objects=tuple(objects), common_prefixes=tuple(common_prefixes)
        )

    def get_object(self, key: str) -> ObjectBody:
        blob = self._get_blob(key, "get_object")
        return ObjectBody(
            key=key,
            content_length=len(blob.data),
            last_modified=blob.last_modified,
            stream=io.BytesIO(blob.data),
        )

    def head_object(self, key: str) -> ObjectSummary:
        blob = self._get_blob(key, "head_object")
        return ObjectSummary(
            key=key,
            size=len(blob.data),
            last_modified=blob.last_modified,
            content_type=blob.content_type,
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
        data = body if isinstance(body, bytes) else body.read()
        blob = StoredBlob(
            data=bytes(data),
            last_modified=datetime.now(UTC),
            content_type=content_type,
            acl=acl,
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._objects[key] = blob
        logger.debug("Stored object: bucket=%s key=%s size=%d", self._bucket, key, len(data))

    def delete_object(self, key: str) -> None:
        with self._lock:
            self._objects.pop(key, None)
        logger.debug("Deleted object: bucket=%s key=%s", self._bucket, key)

    def copy_object(
        self,
        src_key: str,
        dst_key: str,
        *,
        acl: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        source = self._get_blob(src_key, "copy_object")
        blob = StoredBlob(
            data=source.data,
            last_modified=datetime.now(UTC),
            content_type=source.content_type,
            acl=acl,
            metadata=dict(metadata) if metadata is not None else dict(source.metadata),
        )
        with self._lock:
            self._objects[dst_key] = blob

    def _get_blob(self, key: str, operation: str) -> StoredBlob:
        with self._lock:
            blob = self._objects.get(key)
        if blob is None:
            raise ObjectNotFoundError(operation=operation, key=key, bucket=self._bucket)
        return blob
