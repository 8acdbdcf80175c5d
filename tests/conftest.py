"""Pytest configuration and fixtures for s3vfs tests.

Adapter tests run against the in-memory object store backend, which shares
the listing semantics of S3 (flat keys, delimiter folding into common
prefixes).
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from s3vfs.config import S3FileSystemConfig
from s3vfs.models import FileEvent
from s3vfs.s3_filesystem import S3FileSystem
from s3vfs.storage.memory_store import InMemoryObjectStoreClient

TEST_BUCKET = "test-bucket"

STORE_METHODS = (
    "list_objects",
    "get_object",
    "head_object",
    "put_object",
    "delete_object",
    "copy_object",
)


@pytest.fixture(autouse=True)
def clear_s3vfs_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove S3VFS_* variables so the host environment cannot leak into tests."""
    for name in list(os.environ):
        if name.startswith("S3VFS_"):
            monkeypatch.delenv(name)


@pytest.fixture
def config() -> S3FileSystemConfig:
    """Return a complete configuration for the test bucket."""
    return S3FileSystemConfig(
        access_key_id="AKIATESTKEY",
        secret_access_key="test-secret",
        bucket_name=TEST_BUCKET,
        region="eu-west-1",
    )


@pytest.fixture
def memory_store() -> InMemoryObjectStoreClient:
    """Return an empty in-memory store for the test bucket."""
    return InMemoryObjectStoreClient(bucket=TEST_BUCKET)


@pytest.fixture
def fs(config: S3FileSystemConfig, memory_store: InMemoryObjectStoreClient) -> S3FileSystem:
    """Return a filesystem over the in-memory store."""
    return S3FileSystem(config, memory_store)


@pytest.fixture
def recorded_events(fs: S3FileSystem) -> list[FileEvent]:
    """Collect every event the filesystem emits."""
    events: list[FileEvent] = []
    fs.events.subscribe_all(events.append)
    return events


@pytest.fixture
def store_spy(memory_store: InMemoryObjectStoreClient) -> Iterator[dict[str, MagicMock]]:
    """Record every call made to the in-memory store, keyed by method name."""
    with contextlib.ExitStack() as stack:
        mocks = {
            name: stack.enter_context(
                patch.object(memory_store, name, wraps=getattr(memory_store, name))
            )
            for name in STORE_METHODS
        }
        yield mocks
