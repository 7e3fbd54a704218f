"""SQLAlchemy unit of work."""

from __future__ import annotations

import logging
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tunecraft.domain.ports import IUnitOfWork

from .repositories import (
    AlbumRepository,
    ListeningEventRepository,
    PlaylistRepository,
    TrackRepository,
    UserRepository,
    WeeklyStatisticRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """One AsyncSession, one transaction, all repositories bound to it.

    Hey future me - this is single-use! Create a fresh one per workflow:

        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            user = await uow.users.get_by_id(user_id)
            ...
        # committed here, or rolled back if the block raised
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with the session factory of a Database."""
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work used outside of 'async with'")
        return self._session

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        """Open a session and bind the repositories to it."""
        self._session = self._session_factory()
        self.users = UserRepository(self._session)
        self.albums = AlbumRepository(self._session)
        self.tracks = TrackRepository(self._session)
        self.listening_events = ListeningEventRepository(self._session)
        self.playlists = PlaylistRepository(self._session)
        self.weekly_statistics = WeeklyStatisticRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Commit on clean exit, roll back when the block raised."""
        try:
            if exc_type is None:
                try:
                    await self.commit()
                except Exception as e:
                    logger.error("Unit of work commit failed: %s", e)
                    await self.rollback()
                    raise
            else:
                await self.rollback()
        finally:
            await self.session.close()
            self._session = None

    async def commit(self) -> None:
        """Commit the pending changes."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Discard the pending changes."""
        await self.session.rollback()
