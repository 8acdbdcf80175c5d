"""s3vfs virtual filesystem over an S3-compatible object store.

The store is a flat key-value space, so directories are emulated:

    ~/upload/28/photo.jpg   ->  upload/28/photo.jpg   (the file)
    ~/upload/28             ->  upload/28/__empty     (zero-byte sentinel)

A directory exists while its sentinel exists. Listing a directory is a
prefix + "/" delimiter listing: objects are its files, common prefixes are
its sub-directories. Zero-byte objects are never reported as files.

Move and recursive delete are sequences of independent store calls and are
not atomic. A failed move may leave the file at both paths, never at
neither; retrying the whole operation converges.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from contextlib import closing
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import BinaryIO

from s3vfs.config import S3FileSystemConfig
from s3vfs.errors import (
    FileSystemError,
    ObjectNotFoundError,
    StoreRequestFailedError,
    UnsupportedOperationError,
)
from s3vfs.events import FileSystemEvents
from s3vfs.filesystem import FileSystem
from s3vfs.mime import MimeTypeLookup
from s3vfs.models import (
    DirectoryData,
    ExistenceProbe,
    ExistenceStatus,
    FileData,
    FileEventKind,
)
from s3vfs.paths import (
    DELIMITER,
    directory_prefix,
    extension_of,
    is_sentinel_key,
    name_from_key,
    sentinel_key,
    to_store_key,
    to_virtual_path,
)
from s3vfs.storage.factory import create_object_store_client
from s3vfs.storage.models import ListResult
from s3vfs.storage.object_store import PUBLIC_READ_ACL, ObjectStoreClient
from s3vfs.tracing import traced_fs_operation

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 32 * 1024
SENTINEL_CONTENT_TYPE = "text/plain"


def _far_future(now: datetime, years: int) -> datetime:
    try:
        return now.replace(year=now.year + years)
    except ValueError:
        # Feb 29 into a non-leap year
        return now.replace(year=now.year + years, day=28)


def copy_in_chunks(source: BinaryIO, sink: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> int:
    """Copy ``source`` into ``sink`` one chunk at a time.

    Returns:
        Number of bytes written.
    """
    total = 0
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        sink.write(chunk)
        total += len(chunk)
    return total


class S3FileSystem(FileSystem):
    """FileSystem backed by an ObjectStoreClient.

    The instance holds no per-call state and can be shared by concurrent
    callers.

    Args:
        config: Immutable settings captured at construction.
        store: Client for the bucket named in ``config``.
        mime: Content-type lookup for uploads.
        events: Observer list; a fresh one is created when omitted.
    """

    def __init__(
        self,
        config: S3FileSystemConfig,
        store: ObjectStoreClient,
        *,
        mime: MimeTypeLookup | None = None,
        events: FileSystemEvents | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._mime = mime or MimeTypeLookup()
        self._events = events or FileSystemEvents()
        logger.debug(
            "S3FileSystem initialized: backend=%s bucket=%s",
            store.backend_name,
            store.bucket,
        )

    @property
    def config(self) -> S3FileSystemConfig:
        return self._config

    @property
    def store(self) -> ObjectStoreClient:
        return self._store

    @property
    def events(self) -> FileSystemEvents:
        return self._events

    @property
    def _acl(self) -> str | None:
        return PUBLIC_READ_ACL if self._config.public_read else None

    def _expiry_metadata(self) -> dict[str, str]:
        """User metadata carrying the far-future cache expiry hint."""
        expires = _far_future(datetime.now(UTC), self._config.cache_expiry_years)
        return {"Expires": format_datetime(expires, usegmt=True)}

    def _list_directory(self, virtual_path: str) -> ListResult:
        return self._store.list_objects(directory_prefix(to_store_key(virtual_path)), DELIMITER)

    def _probe(self, key: str) -> ExistenceProbe:
        try:
            self._store.head_object(key)
        except ObjectNotFoundError:
            return ExistenceProbe(status=ExistenceStatus.ABSENT, key=key)
        except FileSystemError as e:
            logger.warning("Existence probe failed, reporting absent: key=%s error=%s", key, e)
            return ExistenceProbe(status=ExistenceStatus.TRANSIENT_FAILURE, key=key, error=e)
        return ExistenceProbe(status=ExistenceStatus.PRESENT, key=key)

    # Listing and metadata

    @traced_fs_operation("get_files")
    def get_files(self, parent_virtual_path: str) -> list[FileData]:
        """List files directly inside a directory, skipping zero-byte objects."""
        listing = self._list_directory(parent_virtual_path)
        return [
            FileData(
                name=name_from_key(obj.key),
                virtual_path=to_virtual_path(obj.key),
                length=obj.size,
                created=obj.last_modified,
                updated=obj.last_modified,
            )
            for obj in listing.objects
            if obj.size > 0
        ]

    @traced_fs_operation("get_file")
    def get_file(self, virtual_path: str) -> FileData:
        """Get file metadata from a HEAD probe; timestamps come from the store."""
        key = to_store_key(virtual_path)
        summary = self._store.head_object(key)
        return FileData(
            name=name_from_key(key),
            virtual_path=to_virtual_path(key),
            length=summary.size,
            created=summary.last_modified,
            updated=summary.last_modified,
        )

    @traced_fs_operation("get_directories")
    def get_directories(self, parent_virtual_path: str) -> list[DirectoryData]:
        """List sub-directories from the listing's common prefixes."""
        listing = self._list_directory(parent_virtual_path)
        now = datetime.now(UTC)
        return [
            DirectoryData(
                name=name_from_key(prefix),
                virtual_path=to_virtual_path(prefix),
                created=now,
                updated=now,
                url=self._config.display_url(prefix),
            )
            for prefix in listing.common_prefixes
        ]

    @traced_fs_operation("get_directory")
    def get_directory(self, virtual_path: str) -> DirectoryData:
        """Describe a directory without querying the store."""
        key = to_store_key(virtual_path)
        now = datetime.now(UTC)
        return DirectoryData(
            name=name_from_key(key),
            virtual_path=to_virtual_path(key),
            created=now,
            updated=now,
            url=self._config.display_url(key),
        )

    # Existence

    def probe_file(self, virtual_path: str) -> ExistenceProbe:
        """Probe for a file, distinguishing absence from store failure."""
        return self._probe(to_store_key(virtual_path))

    def probe_directory(self, virtual_path: str) -> ExistenceProbe:
        """Probe for a directory's sentinel, distinguishing absence from store failure."""
        return self._probe(sentinel_key(to_store_key(virtual_path)))

    @traced_fs_operation("file_exists")
    def file_exists(self, virtual_path: str) -> bool:
        """Return True if the file exists. Store failures count as absent."""
        return self.probe_file(virtual_path).exists

    @traced_fs_operation("directory_exists")
    def directory_exists(self, virtual_path: str) -> bool:
        """Return True if the directory sentinel exists. Store failures count as absent."""
        return self.probe_directory(virtual_path).exists

    # File mutations

    @traced_fs_operation("write_file")
    def write_file(self, virtual_path: str, data: bytes | BinaryIO) -> None:
        key = to_store_key(virtual_path)
        content_type = self._mime.content_type_for(extension_of(key))
        self._store.put_object(
            key,
            data,
            content_type=content_type,
            acl=self._acl,
            metadata=self._expiry_metadata(),
        )
        logger.info(
            "Wrote file: bucket=%s key=%s content_type=%s", self._store.bucket, key, content_type
        )
        self._events.emit(FileEventKind.WRITTEN, to_virtual_path(key))

    @traced_fs_operation("delete_file")
    def delete_file(self, virtual_path: str) -> None:
        key = to_store_key(virtual_path)
        self._store.delete_object(key)
        logger.info("Deleted file: bucket=%s key=%s", self._store.bucket, key)
        self._events.emit(FileEventKind.DELETED, to_virtual_path(key))

    def _copy(self, src_key: str, dst_key: str) -> None:
        self._store.copy_object(
            src_key, dst_key, acl=self._acl, metadata=self._expiry_metadata()
        )

    @traced_fs_operation("copy_file")
    def copy_file(self, from_virtual_path: str, destination_virtual_path: str) -> None:
        src_key = to_store_key(from_virtual_path)
        dst_key = to_store_key(destination_virtual_path)
        self._copy(src_key, dst_key)
        logger.info("Copied file: bucket=%s src=%s dst=%s", self._store.bucket, src_key, dst_key)
        self._events.emit(
            FileEventKind.COPIED, to_virtual_path(src_key), to_virtual_path(dst_key)
        )

    @traced_fs_operation("move_file")
    def move_file(self, from_virtual_path: str, destination_virtual_path: str) -> None:
        """Copy then delete the source.

        If the delete fails the file remains at both paths; calling again
        with the same arguments completes the move.

        A move onto the same key only checks that the source exists; it
        changes nothing and emits no event.
        """
        src_key = to_store_key(from_virtual_path)
        dst_key = to_store_key(destination_virtual_path)
        if src_key == dst_key:
            self._store.head_object(src_key)
            logger.debug("Move onto itself skipped: bucket=%s key=%s", self._store.bucket, src_key)
            return
        self._copy(src_key, dst_key)
        self._store.delete_object(src_key)
        logger.info("Moved file: bucket=%s src=%s dst=%s", self._store.bucket, src_key, dst_key)
        self._events.emit(FileEventKind.MOVED, to_virtual_path(src_key), to_virtual_path(dst_key))

    # Directory mutations

    @traced_fs_operation("create_directory")
    def create_directory(self, virtual_path: str) -> None:
        key = to_store_key(virtual_path)
        self._store.put_object(sentinel_key(key), b"", content_type=SENTINEL_CONTENT_TYPE)
        logger.info("Created directory: bucket=%s key=%s", self._store.bucket, key)
        self._events.emit(FileEventKind.DIRECTORY_CREATED, to_virtual_path(key))

    @traced_fs_operation("delete_directory")
    def delete_directory(self, virtual_path: str) -> None:
        """Delete a directory tree, deepest directories first.

        Walks the tree with an explicit work-list instead of recursion, so
        depth is bounded only by memory. Each directory is listed once;
        after all of its sub-directories are gone its files are deleted,
        then any remaining zero-byte markers, then its sentinel.

        Raises:
            FileSystemError: If the path is the root, which would delete
                every object in the bucket.
        """
        key = to_store_key(virtual_path)
        if not directory_prefix(key):
            raise FileSystemError(
                "Refusing to delete the root directory",
                operation="delete_directory",
                key=key,
                bucket=self._store.bucket,
            )
        pending: list[tuple[str, ListResult | None]] = [(directory_prefix(key), None)]
        deleted = 0

        while pending:
            prefix, listing = pending.pop()
            if listing is None:
                listing = self._store.list_objects(prefix, DELIMITER)
                pending.append((prefix, listing))
                pending.extend((child, None) for child in reversed(listing.common_prefixes))
                continue

            marker = sentinel_key(prefix)
            files = [obj.key for obj in listing.objects if obj.size > 0]
            empties = [
                obj.key
                for obj in listing.objects
                if obj.size == 0 and not is_sentinel_key(obj.key)
            ]
            for object_key in files + empties:
                self._store.delete_object(object_key)
            self._store.delete_object(marker)
            deleted += len(files) + len(empties) + 1

        logger.info(
            "Deleted directory: bucket=%s key=%s delete_requests=%d",
            self._store.bucket,
            key,
            deleted,
        )
        self._events.emit(FileEventKind.DIRECTORY_DELETED, to_virtual_path(key))

    @traced_fs_operation("move_directory")
    def move_directory(self, from_virtual_path: str, destination_virtual_path: str) -> None:
        """Not supported: always raises UnsupportedOperationError."""
        raise UnsupportedOperationError("move_directory")

    # Reading

    @traced_fs_operation("open_file")
    def open_file(self, virtual_path: str) -> BinaryIO:
        """Download the whole object into a seekable buffer positioned at 0."""
        key = to_store_key(virtual_path)
        bucket = self._store.bucket
        try:
            body = self._store.get_object(key)
        except ObjectNotFoundError as e:
            raise ObjectNotFoundError(
                f"Unable to open {virtual_path}", operation="open_file", key=key, bucket=bucket
            ) from e
        except StoreRequestFailedError as e:
            raise StoreRequestFailedError(
                f"Unable to open {virtual_path}",
                operation="open_file",
                key=key,
                bucket=bucket,
                cause=e.cause or e,
            ) from e

        buffer = io.BytesIO()
        with closing(body.stream) as stream:
            copy_in_chunks(stream, buffer)
        buffer.seek(0)
        return buffer

    @traced_fs_operation("read_file_contents")
    def read_file_contents(self, virtual_path: str, output: BinaryIO) -> int:
        """Stream the object into ``output`` in 32 KiB chunks.

        The object is never held in memory as a whole. The store response is
        closed whether or not reading succeeds.
        """
        key = to_store_key(virtual_path)
        body = self._store.get_object(key)
        with closing(body.stream) as stream:
            written = copy_in_chunks(stream, output)
        logger.debug("Streamed file: bucket=%s key=%s bytes=%d", self._store.bucket, key, written)
        return written

    @traced_fs_operation("search_files")
    def search_files(
        self, query: str, scope_directories: Sequence[str] | None = None
    ) -> list[FileData]:
        """Search is not supported by this filesystem; always returns no results."""
        logger.debug("search_files is not supported; returning no results")
        return []


def create_filesystem(
    config: S3FileSystemConfig | None = None,
    *,
    backend: str | None = None,
    mime: MimeTypeLookup | None = None,
) -> S3FileSystem:
    """Build an S3FileSystem from explicit or environment configuration.

    Args:
        config: Settings to use. Read from S3VFS_* variables when None.
        backend: Store backend name ("s3" or "memory"). Read from
            S3VFS_OBJECT_STORE_BACKEND when None.
        mime: Content-type lookup for uploads.

    Raises:
        ConfigurationMissingError: If a required setting is missing.
        ConfigurationError: If a setting or the backend name is invalid.
    """
    if config is None:
        config = S3FileSystemConfig.from_env()
    store = create_object_store_client(config, backend=backend)
    return S3FileSystem(config, store, mime=mime)
