"""s3vfs - virtual filesystem over an S3-compatible object store.

Lets a content-management host keep uploaded files and directories in a
bucket instead of on local disk. Host paths ("~/upload/28/photo.jpg") map
to object keys ("upload/28/photo.jpg"); directories are emulated with
zero-byte sentinel objects ("upload/28/__empty").

Quick start:
    from s3vfs import S3FileSystemConfig, create_filesystem

    fs = create_filesystem(S3FileSystemConfig.from_env())
    fs.write_file("~/upload/hello.txt", b"Hello world!")
"""

from s3vfs.config import S3FileSystemConfig
from s3vfs.errors import (
    ConfigurationError,
    ConfigurationMissingError,
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
    FileEvent,
    FileEventKind,
)
from s3vfs.paths import to_store_key, to_virtual_path
from s3vfs.s3_filesystem import S3FileSystem, create_filesystem

__all__ = [
    "FileSystem",
    "S3FileSystem",
    "S3FileSystemConfig",
    "create_filesystem",
    "FileSystemEvents",
    "MimeTypeLookup",
    "FileData",
    "DirectoryData",
    "FileEvent",
    "FileEventKind",
    "ExistenceProbe",
    "ExistenceStatus",
    "FileSystemError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "ObjectNotFoundError",
    "StoreRequestFailedError",
    "UnsupportedOperationError",
    "to_store_key",
    "to_virtual_path",
]
