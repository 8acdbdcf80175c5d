"""s3vfs filesystem data models.

Provides typed dataclasses for the entries, lifecycle events and existence
probes returned to the host.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from s3vfs.errors import FileSystemError


@dataclass(frozen=True)
class FileData:
    """A file as seen by the host.

    Attributes:
        name: Last segment of the object key.
        virtual_path: Host path of the file ("~/upload/photo.jpg").
        length: Size of the file content in bytes.
        created: Creation timestamp. The store does not track creation
            separately, so this equals ``updated``.
        updated: Last modification timestamp reported by the store.
    """

    name: str
    virtual_path: str
    length: int
    created: datetime
    updated: datetime

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "virtual_path": self.virtual_path,
            "length": self.length,
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
        }


@dataclass(frozen=True)
class DirectoryData:
    """A directory as seen by the host.

    Attributes:
        name: Last non-empty segment of the directory key.
        virtual_path: Host path of the directory.
        created: Synthesized timestamp; the store keeps none for directories.
        updated: Synthesized timestamp; the store keeps none for directories.
        url: Public display URL of the directory, when known.
    """

    name: str
    virtual_path: str
    created: datetime
    updated: datetime
    url: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "virtual_path": self.virtual_path,
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
            "url": self.url,
        }


class FileEventKind(StrEnum):
    """Lifecycle notifications raised after a successful mutation."""

    WRITTEN = "written"
    COPIED = "copied"
    MOVED = "moved"
    DELETED = "deleted"
    DIRECTORY_CREATED = "directory_created"
    DIRECTORY_MOVED = "directory_moved"
    DIRECTORY_DELETED = "directory_deleted"


@dataclass(frozen=True)
class FileEvent:
    """A lifecycle notification.

    Attributes:
        kind: What happened.
        source_path: Virtual path the operation acted on.
        destination_path: Target virtual path for copy/move, otherwise None.
    """

    kind: FileEventKind
    source_path: str
    destination_path: str | None = None


class ExistenceStatus(StrEnum):
    """Outcome of an existence probe."""

    PRESENT = "present"
    ABSENT = "absent"
    TRANSIENT_FAILURE = "transient_failure"


@dataclass(frozen=True)
class ExistenceProbe:
    """Result of probing the store for a key.

    ``error`` is set only for TRANSIENT_FAILURE, when the store could not
    answer and the key may or may not exist.
    """

    status: ExistenceStatus
    key: str
    error: FileSystemError | None = None

    @property
    def exists(self) -> bool:
        return self.status is ExistenceStatus.PRESENT
