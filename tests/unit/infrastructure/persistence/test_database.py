"""Tests for the Database engine setup."""

from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from tunecraft.config import DatabaseSettings, Settings
from tunecraft.infrastructure.persistence.database import Database, _engine_kwargs


class TestEngineKwargs:
    def test_sqlite_gets_busy_timeout(self) -> None:
        kwargs = _engine_kwargs(
            DatabaseSettings(url="sqlite+aiosqlite:///./x.db", busy_timeout_seconds=5)
        )

        assert kwargs["connect_args"] == {"check_same_thread": False, "timeout": 5}
        assert kwargs["pool_pre_ping"] is True

    def test_other_backends_get_no_sqlite_args(self) -> None:
        kwargs = _engine_kwargs(DatabaseSettings(url="postgresql+asyncpg://db/tunecraft"))
        assert "connect_args" not in kwargs


class TestDatabase:
    """Test schema management and connection pragmas on a real file."""

    async def test_foreign_keys_enforced(self, database: Database) -> None:
        async with database.session_factory() as session:
            with pytest.raises(IntegrityError):
                await session.execute(
                    text(
                        "INSERT INTO listening_events (user_id, track_id, listened_at) "
                        "VALUES ('nobody', 'nothing', '2024-05-13 00:00:00')"
                    )
                )

    async def test_create_and_drop_tables(self, tmp_path: Path) -> None:
        db = Database(
            Settings(
                _env_file=None,
                database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path}/schema.db"),
            )
        )
        try:
            await db.create_tables()
            async with db.session_factory() as session:
                connection = await session.connection()
                tables = await connection.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names()
                )
            assert {"users", "tracks", "listening_events", "weekly_statistics"} <= set(tables)

            await db.drop_tables()
            async with db.session_factory() as session:
                connection = await session.connection()
                tables = await connection.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names()
                )
            assert tables == []
        finally:
            await db.close()
