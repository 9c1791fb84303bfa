"""In-memory implementation of the BlobStore interface.

Provides dictionary-based storage suitable for development, testing and
single-process deployments.
"""

import asyncio
from typing import Optional

from streamchat.errors import ConflictError
from streamchat.storage.base import Blob, compute_etag


class InMemoryBlobStore:
    """Thread-safe in-memory implementation of BlobStore.

    Uses a dictionary for storage with an asyncio lock so conditional
    writes are atomic within the event loop.

    Attributes:
        _blobs: Dictionary mapping key to Blob
        _lock: Asyncio lock for thread-safe operations
    """

    supports_delete = True

    def __init__(self) -> None:
        """Initialize the in-memory blob store."""
        self._blobs: dict[str, Blob] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[Blob]:
        async with self._lock:
            return self._blobs.get(key)

    async def set(self, key: str, data: bytes, if_match: Optional[str] = None) -> str:
        async with self._lock:
            if if_match is not None:
                current = self._blobs.get(key)
                current_etag = current.etag if current else ""
                if current_etag != if_match:
                    raise ConflictError(key)

            blob = Blob(data=data, etag=compute_etag(data))
            self._blobs[key] = blob
            return blob.etag

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._blobs.pop(key, None)

    async def keys(self) -> list[str]:
        """List all stored keys (test and debugging aid)."""
        async with self._lock:
            return sorted(self._blobs)


class WriteOnceBlobStore(InMemoryBlobStore):
    """In-memory store that exposes no deletion primitive.

    Mirrors hosted blob services whose SDK lacks a delete call; callers
    must consult ``supports_delete`` before deleting.
    """

    supports_delete = False

    async def delete(self, key: str) -> None:
        raise NotImplementedError("This blob store does not support deletion")
