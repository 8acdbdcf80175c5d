"""s3vfs virtual filesystem interface definition.

Provides the FileSystem contract a content-management host programs
against: files, directories, metadata and lifecycle events addressed by
"~/"-rooted virtual paths.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import BinaryIO

from s3vfs.events import FileSystemEvents
from s3vfs.models import DirectoryData, FileData


class FileSystem(ABC):
    """Abstract base class for virtual filesystems.

    Mutations emit one FileEvent through ``events`` after they succeed.

    Implementations:
    - S3FileSystem: objects in an S3-compatible store
    """

    @property
    @abstractmethod
    def events(self) -> FileSystemEvents:
        """Return the observer list lifecycle events are delivered to."""
        ...

    @property
    def supports_search(self) -> bool:
        """Whether search_files can return results."""
        return False

    @abstractmethod
    def get_files(self, parent_virtual_path: str) -> list[FileData]:
        """List the files directly inside a directory."""
        ...

    @abstractmethod
    def get_file(self, virtual_path: str) -> FileData:
        """Get metadata for one file.

        Raises:
            ObjectNotFoundError: If the file does not exist.
        """
        ...

    @abstractmethod
    def get_directories(self, parent_virtual_path: str) -> list[DirectoryData]:
        """List the directories directly inside a directory."""
        ...

    @abstractmethod
    def get_directory(self, virtual_path: str) -> DirectoryData:
        """Describe a directory."""
        ...

    @abstractmethod
    def file_exists(self, virtual_path: str) -> bool:
        ...

    @abstractmethod
    def directory_exists(self, virtual_path: str) -> bool:
        ...

    @abstractmethod
    def write_file(self, virtual_path: str, data: bytes | BinaryIO) -> None:
        """Create or replace a file with the given content."""
        ...

    @abstractmethod
    def delete_file(self, virtual_path: str) -> None:
        ...

    @abstractmethod
    def copy_file(self, from_virtual_path: str, destination_virtual_path: str) -> None:
        ...

    @abstractmethod
    def move_file(self, from_virtual_path: str, destination_virtual_path: str) -> None:
        ...

    @abstractmethod
    def create_directory(self, virtual_path: str) -> None:
        ...

    @abstractmethod
    def delete_directory(self, virtual_path: str) -> None:
        """Delete a directory with every file and directory below it."""
        ...

    @abstractmethod
    def move_directory(self, from_virtual_path: str, destination_virtual_path: str) -> None:
        ...

    @abstractmethod
    def open_file(self, virtual_path: str) -> BinaryIO:
        """Return the whole file content as a seekable in-memory stream."""
        ...

    @abstractmethod
    def read_file_contents(self, virtual_path: str, output: BinaryIO) -> int:
        """Stream the file content into ``output``.

        Returns:
            Number of bytes written.
        """
        ...

    @abstractmethod
    def search_files(
        self, query: str, scope_directories: Sequence[str] | None = None
    ) -> list[FileData]:
        ...
