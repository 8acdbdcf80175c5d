"""s3vfs error types.

Every failure surfaced by the virtual filesystem derives from FileSystemError
and carries the operation, object key and bucket involved so a caller can
tell which object in which bucket failed.
"""

from __future__ import annotations


class FileSystemError(Exception):
    """Base exception for virtual filesystem operations.

    Attributes:
        message: Human-readable error message.
        operation: Filesystem or store operation that failed (if applicable).
        key: Object key associated with the operation (if applicable).
        bucket: Bucket associated with the operation (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        key: str | None = None,
        bucket: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.key = key
        self.bucket = bucket

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.key is not None:
            parts.append(f"key={self.key}")
        if self.bucket:
            parts.append(f"bucket={self.bucket}")
        return " ".join(parts)


class ConfigurationError(FileSystemError):
    """Raised when a configuration setting has an unusable value."""

    def __init__(self, message: str, *, setting: str) -> None:
        super().__init__(message)
        self.setting = setting


class ConfigurationMissingError(ConfigurationError):
    """Raised at construction when a required setting is missing or blank."""

    def __init__(self, setting: str) -> None:
        super().__init__(f"Required setting {setting} is missing or empty", setting=setting)


class ObjectNotFoundError(FileSystemError):
    """Raised when an object does not exist in the store."""

    def __init__(
        self,
        message: str = "Object not found",
        *,
        operation: str | None = None,
        key: str | None = None,
        bucket: str | None = None,
    ) -> None:
        super().__init__(message, operation=operation, key=key, bucket=bucket)


class StoreRequestFailedError(FileSystemError):
    """Raised when the object store cannot complete a request.

    Covers transport, authentication and server-side failures, as opposed
    to the logical "object does not exist" case.
    """

    def __init__(
        self,
        message: str = "Object store request failed",
        *,
        operation: str | None = None,
        key: str | None = None,
        bucket: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, operation=operation, key=key, bucket=bucket)
        self.cause = cause


class UnsupportedOperationError(FileSystemError):
    """Raised for operations this filesystem does not provide."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} is not supported", operation=operation)
