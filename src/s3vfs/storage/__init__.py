"""s3vfs object store abstraction.

Backends:
- S3ObjectStoreClient: AWS S3 or an S3-compatible store via boto3 (production)
- InMemoryObjectStoreClient: process-local dict (dev/test)

Environment Variables:
    S3VFS_OBJECT_STORE_BACKEND: "s3" or "memory" (default: "s3")
"""

from s3vfs.storage.factory import create_object_store_client
from s3vfs.storage.memory_store import InMemoryObjectStoreClient
from s3vfs.storage.models import ListResult, ObjectBody, ObjectSummary
from s3vfs.storage.object_store import PUBLIC_READ_ACL, ObjectStoreClient
from s3vfs.storage.s3_store import S3ObjectStoreClient, create_boto3_client

__all__ = [
    "ObjectStoreClient",
    "S3ObjectStoreClient",
    "InMemoryObjectStoreClient",
    "ListResult",
    "ObjectBody",
    "ObjectSummary",
    "PUBLIC_READ_ACL",
    "create_boto3_client",
    "create_object_store_client",
]
