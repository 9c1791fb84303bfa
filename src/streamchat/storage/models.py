"""SQLAlchemy ORM models for blob persistence."""

from datetime import datetime

from sqlalchemy import DateTime, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from streamchat.storage.base_model import Base


class BlobModel(Base):
    """ORM model for one key-value blob.

    Attributes:
        key: Storage key (primary key), e.g. ``conversations/<id>.json``
        data: Raw payload bytes
        etag: SHA-256 of ``data``; the revision used for conditional writes
        updated_at: Timestamp of the last write
    """

    __tablename__ = "blobs"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    etag: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
