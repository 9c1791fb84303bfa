"""Declarative base for the blob table ORM model."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for streamchat ORM models."""

    pass
