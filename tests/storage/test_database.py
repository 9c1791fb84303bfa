"""Tests for database configuration and session management."""

import pytest
from sqlalchemy import select

from streamchat.storage.database import Database, DatabaseConfig
from streamchat.storage.models import BlobModel


class TestDatabaseConfig:
    def test_defaults_to_in_memory_sqlite(self) -> None:
        config = DatabaseConfig()

        assert config.url == "sqlite+aiosqlite:///:memory:"
        assert config.echo is False


class TestDatabase:
    @pytest.mark.asyncio
    async def test_create_tables_and_health_check(self) -> None:
        database = Database(DatabaseConfig())
        try:
            await database.create_tables()
            assert await database.health_check() is True
        finally:
            await database.close()

    @pytest.mark.asyncio
    async def test_session_commits_on_success(self) -> None:
        database = Database(DatabaseConfig())
        await database.create_tables()
        try:
            async with database.session() as session:
                session.add(BlobModel(key="k", data=b"x", etag="e"))

            async with database.session() as session:
                result = await session.execute(select(BlobModel.key))
                assert list(result.scalars()) == ["k"]
        finally:
            await database.close()

    @pytest.mark.asyncio
    async def test_session_rolls_back_on_error(self) -> None:
        database = Database(DatabaseConfig())
        await database.create_tables()
        try:
            with pytest.raises(RuntimeError):
                async with database.session() as session:
                    session.add(BlobModel(key="k", data=b"x", etag="e"))
                    await session.flush()
                    raise RuntimeError("boom")

            async with database.session() as session:
                assert await session.get(BlobModel, "k") is None
        finally:
            await database.close()
