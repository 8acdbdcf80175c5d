"""Object store backend selection.

Environment Variables:
    S3VFS_OBJECT_STORE_BACKEND: "s3" or "memory" (default: "s3")
"""

from __future__ import annotations

import logging
import os

from s3vfs.config import S3FileSystemConfig
from s3vfs.errors import ConfigurationError
from s3vfs.storage.memory_store import InMemoryObjectStoreClient
from s3vfs.storage.object_store import ObjectStoreClient
from s3vfs.storage.s3_store import S3ObjectStoreClient

logger = logging.getLogger(__name__)

S3VFS_OBJECT_STORE_BACKEND_ENV = "S3VFS_OBJECT_STORE_BACKEND"

BACKENDS = ("s3", "memory")


def create_object_store_client(
    config: S3FileSystemConfig, *, backend: str | None = None
) -> ObjectStoreClient:
    """Create the store client for the configured bucket.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    if backend is None:
        backend = os.environ.get(S3VFS_OBJECT_STORE_BACKEND_ENV, "").strip() or "s3"
    backend = backend.lower()

    if backend == "s3":
        client: ObjectStoreClient = S3ObjectStoreClient.from_config(config)
    elif backend == "memory":
        client = InMemoryObjectStoreClient(bucket=config.bucket_name)
    else:
        raise ConfigurationError(
            f"Unknown object store backend {backend!r}; expected one of {', '.join(BACKENDS)}",
            setting=S3VFS_OBJECT_STORE_BACKEND_ENV,
        )

    logger.debug("Created object store client: backend=%s bucket=%s", backend, config.bucket_name)
    return client
