"""Shared fixtures: a throwaway SQLite database and a small catalog builder.

Hey future me - service tests run against a REAL SQLite file per test (tmp_path), through
the real repositories and unit of work. No mocked sessions: the interesting bugs here are
query bugs (soft-delete filters, window bounds, ordering) and mocks would hide them.
"""

from collections.abc import AsyncIterator, Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from tunecraft.config import DatabaseSettings, Settings, StatisticsSettings
from tunecraft.domain.entities import (
    Album,
    Genre,
    ListeningEvent,
    Playlist,
    Track,
    User,
    UserRole,
)
from tunecraft.domain.ports import IUnitOfWork, UnitOfWorkFactory
from tunecraft.domain.value_objects import AlbumId, PlaylistId, TrackId, UserId
from tunecraft.infrastructure.persistence import Database, SqlAlchemyUnitOfWork

# Wednesday; the 3 month lookback starts 2024-02-15 12:00 UTC
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=UTC)


class CatalogBuilder:
    """Seeds users, tracks, listens and playlists, one committed unit of work per call."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory
        # tracks get strictly increasing created_at so catalog order is predictable
        self._next_created_at = datetime(2024, 1, 1, tzinfo=UTC)

    async def user(
        self,
        username: str,
        role: UserRole = UserRole.LISTENER,
        is_deleted: bool = False,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        user = User(
            id=UserId.generate(),
            username=username,
            role=role,
            first_name=first_name,
            last_name=last_name,
            is_deleted=is_deleted,
        )
        async with self._uow_factory() as uow:
            await uow.users.add(user)
        return user

    async def artist(self, username: str, is_deleted: bool = False) -> User:
        return await self.user(username, role=UserRole.ARTIST, is_deleted=is_deleted)

    async def album(self, artist: User, title: str = "Album", is_deleted: bool = False) -> Album:
        album = Album(
            id=AlbumId.generate(), title=title, artist_id=artist.id, is_deleted=is_deleted
        )
        async with self._uow_factory() as uow:
            await uow.albums.add(album)
        return album

    async def track(
        self,
        artist: User,
        genre: Genre,
        title: str | None = None,
        is_deleted: bool = False,
        duration_seconds: int | None = 180,
    ) -> Track:
        created_at = self._next_created_at
        self._next_created_at += timedelta(minutes=1)
        track = Track(
            id=TrackId.generate(),
            title=title or f"{genre.value.title()} song {created_at:%H%M}",
            artist_id=artist.id,
            genre=genre,
            duration_seconds=duration_seconds,
            is_deleted=is_deleted,
            created_at=created_at,
            updated_at=created_at,
        )
        async with self._uow_factory() as uow:
            await uow.tracks.add(track)
        return track

    async def tracks(self, artist: User, genre: Genre, count: int) -> list[Track]:
        return [await self.track(artist, genre) for _ in range(count)]

    async def listen(self, user: User, track: Track, at: datetime, times: int = 1) -> None:
        async with self._uow_factory() as uow:
            for _ in range(times):
                await uow.listening_events.add(
                    ListeningEvent(user_id=user.id, track_id=track.id, listened_at=at)
                )

    async def playlist(
        self,
        owner: User,
        name: str,
        tracks: Iterable[Track] = (),
        is_system_generated: bool = False,
    ) -> Playlist:
        playlist = Playlist(
            id=PlaylistId.generate(),
            name=name,
            owner_id=owner.id,
            is_system_generated=is_system_generated,
        )
        for track in tracks:
            playlist.add_track(track.id)
        async with self._uow_factory() as uow:
            await uow.playlists.add(playlist)
        return playlist


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a per-test SQLite file, worker disabled."""
    return Settings(
        app_env="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path}/test.db"),
        statistics=StatisticsSettings(enabled=False),
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    """Database with all tables created."""
    db = Database(settings)
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    """Factory creating units of work on the test database."""

    def factory() -> IUnitOfWork:
        return SqlAlchemyUnitOfWork(database.session_factory)

    return factory


@pytest.fixture
def catalog(uow_factory: UnitOfWorkFactory) -> CatalogBuilder:
    """Catalog builder bound to the test database."""
    return CatalogBuilder(uow_factory)
