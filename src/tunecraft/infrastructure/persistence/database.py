"""Database engine and session factory.

TuneCraft runs on a single SQLite file through aiosqlite. Every connection gets
foreign keys switched on and a busy timeout, so writers queue up instead of failing.
"""

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tunecraft.config import DatabaseSettings, Settings

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


# Hey future me - busy_timeout is what serializes concurrent writers! A second transaction
# that wants the write lock waits up to this long (inside aiosqlite's worker thread, the
# event loop keeps running) instead of raising "database is locked" right away.
def _engine_kwargs(database: DatabaseSettings) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "echo": database.echo,
        "pool_pre_ping": database.pool_pre_ping,
    }
    if _is_sqlite(database.url):
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": database.busy_timeout_seconds,
        }
    return kwargs


class Database:
    """Owns the async engine and hands out sessions to units of work."""

    def __init__(self, settings: Settings) -> None:
        """Create the engine for ``settings.database.url``."""
        self.settings = settings
        url = settings.database.url

        self._engine = create_async_engine(url, **_engine_kwargs(settings.database))
        if _is_sqlite(url):
            event.listen(self._engine.sync_engine, "connect", _set_sqlite_pragmas)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Session factory shared by units of work and workers."""
        return self._session_factory

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self._engine.dispose()

    async def create_tables(self) -> None:
        """Create all tables (tests and first start; production uses Alembic)."""
        from tunecraft.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables (for testing only)."""
        from tunecraft.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


def _set_sqlite_pragmas(dbapi_conn: Any, _connection_record: Any) -> None:
    """SQLite ships with foreign keys off; every connection turns them on."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    logger.debug("Enabled foreign keys for SQLite connection")
