"""SQLAlchemy implementation of the BlobStore interface.

Stores each blob as one row of the ``blobs`` table. Conditional writes are
expressed as guarded UPDATE/INSERT statements so that concurrent writers
against the same database observe compare-and-swap semantics.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from streamchat.errors import ConflictError
from streamchat.storage.base import ABSENT_ETAG, Blob, compute_etag
from streamchat.storage.database import Database
from streamchat.storage.models import BlobModel


class SQLBlobStore:
    """BlobStore backed by a relational database.

    Attributes:
        _database: Database providing sessions
    """

    supports_delete = True

    def __init__(self, database: Database) -> None:
        """Initialize the store.

        Args:
            database: Database whose tables have been created
        """
        self._database = database

    async def get(self, key: str) -> Optional[Blob]:
        async with self._database.session() as session:
            row = await session.get(BlobModel, key)
            if row is None:
                return None
            return Blob(data=row.data, etag=row.etag)

    async def set(self, key: str, data: bytes, if_match: Optional[str] = None) -> str:
        etag = compute_etag(data)
        now = datetime.utcnow()

        try:
            async with self._database.session() as session:
                if if_match is None:
                    row = await session.get(BlobModel, key)
                    if row is None:
                        session.add(BlobModel(key=key, data=data, etag=etag, updated_at=now))
                    else:
                        row.data = data
                        row.etag = etag
                        row.updated_at = now
                elif if_match == ABSENT_ETAG:
                    session.add(BlobModel(key=key, data=data, etag=etag, updated_at=now))
                else:
                    result = await session.execute(
                        update(BlobModel)
                        .where(BlobModel.key == key, BlobModel.etag == if_match)
                        .values(data=data, etag=etag, updated_at=now)
                    )
                    if result.rowcount != 1:
                        raise ConflictError(key)
        except IntegrityError as e:
            # Another writer created the key first
            raise ConflictError(key) from e

        return etag

    async def delete(self, key: str) -> None:
        async with self._database.session() as session:
            await session.execute(delete(BlobModel).where(BlobModel.key == key))

    async def keys(self) -> list[str]:
        """List all stored keys (test and debugging aid)."""
        async with self._database.session() as session:
            result = await session.execute(select(BlobModel.key).order_by(BlobModel.key))
            return list(result.scalars())
