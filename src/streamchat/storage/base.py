"""Abstract blob store interface for the storage layer.

This module defines the Protocol for key-value blob stores, enabling
different storage backend implementations while maintaining a consistent
interface. Every stored value carries an etag so callers can perform
compare-and-swap writes.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Protocol

# Passed as ``if_match`` to require that the key does not exist yet.
ABSENT_ETAG = ""


def compute_etag(data: bytes) -> str:
    """Compute the etag for a blob payload.

    Args:
        data: Raw blob bytes

    Returns:
        Hex SHA-256 digest of the payload
    """
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class Blob:
    """A stored value and its revision tag.

    Attributes:
        data: Raw payload bytes
        etag: Revision tag of the payload
    """

    data: bytes
    etag: str


class BlobStore(Protocol):
    """Protocol for key-value blob storage operations.

    Implementations must make ``set`` with ``if_match`` atomic with respect
    to other writers of the same key.

    Attributes:
        supports_delete: Whether ``delete`` is available on this backend
    """

    supports_delete: bool

    async def get(self, key: str) -> Optional[Blob]:
        """Retrieve a blob by key.

        Args:
            key: Storage key

        Returns:
            Blob if the key exists, None otherwise
        """
        ...

    async def set(self, key: str, data: bytes, if_match: Optional[str] = None) -> str:
        """Store a blob, replacing any previous value.

        Args:
            key: Storage key
            data: Payload to store
            if_match: Expected current etag. ``ABSENT_ETAG`` requires the key
                to be missing; None writes unconditionally.

        Returns:
            Etag of the stored payload

        Raises:
            ConflictError: If ``if_match`` does not match the current etag
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete a blob. Missing keys are ignored.

        Args:
            key: Storage key

        Raises:
            NotImplementedError: If the backend does not support deletion
        """
        ...
