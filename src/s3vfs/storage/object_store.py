"""s3vfs object store client interface definition.

Provides the ObjectStoreClient contract every storage backend implements:
a flat key-value store of binary objects with prefix + delimiter listing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import BinaryIO

from s3vfs.storage.models import ListResult, ObjectBody, ObjectSummary

PUBLIC_READ_ACL = "public-read"


class ObjectStoreClient(ABC):
    """Abstract base class for object store backends.

    All keys are bucket-relative. Implementations translate their native
    failures into ObjectNotFoundError (the key does not exist) or
    StoreRequestFailedError (everything else).

    Implementations:
    - S3ObjectStoreClient: boto3 against AWS S3 or a compatible store
    - InMemoryObjectStoreClient: process-local dict (dev/test)
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier for observability (e.g. "s3", "memory")."""
        ...

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Return the bucket this client operates on."""
        ...

    @abstractmethod
    def list_objects(self, prefix: str, delimiter: str = "/") -> ListResult:
        """List objects and common prefixes directly under a prefix.

        Args:
            prefix: Key prefix to list.
            delimiter: Character that ends a common-prefix aggregation.

        Returns:
            ListResult covering every page of the listing.

        Raises:
            StoreRequestFailedError: If the store cannot complete the listing.
        """
        ...

    @abstractmethod
    def get_object(self, key: str) -> ObjectBody:
        """Open an object for reading.

        Returns:
            ObjectBody whose stream the caller must close.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StoreRequestFailedError: If the store cannot complete the read.
        """
        ...

    @abstractmethod
    def head_object(self, key: str) -> ObjectSummary:
        """Get object metadata without retrieving content.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StoreRequestFailedError: If the store cannot complete the probe.
        """
        ...

    @abstractmethod
    def put_object(
        self,
        key: str,
        body: bytes | BinaryIO,
        *,
        content_type: str | None = None,
        acl: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        """Store an object, replacing any previous content at the key.

        Args:
            key: Object key.
            body: Full content, as bytes or a readable binary stream.
            content_type: Optional MIME type of the content.
            acl: Optional canned ACL (e.g. "public-read").
            metadata: Optional user metadata stored with the object.

        Raises:
            StoreRequestFailedError: If the store cannot complete the write.
        """
        ...

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """Delete an object. Deleting an absent key succeeds.

        Raises:
            StoreRequestFailedError: If the store cannot complete the deletion.
        """
        ...

    @abstractmethod
    def copy_object(
        self,
        src_key: str,
        dst_key: str,
        *,
        acl: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        """Copy an object server-side within the bucket.

        When ``metadata`` is given it replaces the source's user metadata.

        Raises:
            ObjectNotFoundError: If the source object does not exist.
            StoreRequestFailedError: If the store cannot complete the copy.
        """
        ...
