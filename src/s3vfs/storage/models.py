"""s3vfs object store data models.

Provides typed dataclasses for the responses of an ObjectStoreClient.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO


@dataclass(frozen=True)
class ObjectSummary:
    """Metadata for one stored object.

    Attributes:
        key: Object key within the bucket.
        size: Size of the object content in bytes.
        last_modified: Timestamp of the last write, as reported by the store.
        content_type: MIME type recorded with the object, if any.
    """

    key: str
    size: int
    last_modified: datetime
    content_type: str | None = None


@dataclass(frozen=True)
class ListResult:
    """Result of a prefix + delimiter listing.

    Attributes:
        prefix: Prefix the listing was issued for.
        objects: Objects whose key has no delimiter after the prefix.
        common_prefixes: Aggregated key prefixes up to and including the
            next delimiter, each standing for one emulated sub-directory.
    """

    prefix: str
    objects: tuple[ObjectSummary, ...] = ()
    common_prefixes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ObjectBody:
    """An object opened for reading.

    The caller owns ``stream`` and must close it once done reading.

    Attributes:
        key: Object key within the bucket.
        content_length: Size of the content in bytes.
        last_modified: Timestamp of the last write.
        stream: Readable binary stream supporting ``read(size)`` and ``close()``.
    """

    key: str
    content_length: int
    last_modified: datetime
    stream: BinaryIO = field(repr=False)
