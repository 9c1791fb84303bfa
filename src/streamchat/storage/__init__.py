"""Key-value blob storage backends."""

from streamchat.storage.base import ABSENT_ETAG, Blob, BlobStore, compute_etag
from streamchat.storage.memory import InMemoryBlobStore, WriteOnceBlobStore

# Import directly when needed (pulls in SQLAlchemy):
# from streamchat.storage.sql_store import SQLBlobStore
# from streamchat.storage.database import Database, DatabaseConfig

__all__ = [
    "ABSENT_ETAG",
    "Blob",
    "BlobStore",
    "InMemoryBlobStore",
    "WriteOnceBlobStore",
    "compute_etag",
]
