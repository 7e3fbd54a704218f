"""Repository implementations for domain entities."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tunecraft.domain.entities import (
    Album,
    Genre,
    ListeningEvent,
    Playlist,
    PlaylistEntry,
    Track,
    User,
    UserRole,
    WeeklyStatistic,
)
from tunecraft.domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
)
from tunecraft.domain.ports import (
    IAlbumRepository,
    IListeningEventRepository,
    IPlaylistRepository,
    ITrackRepository,
    IUserRepository,
    IWeeklyStatisticRepository,
)
from tunecraft.domain.value_objects import (
    AlbumId,
    PlaylistId,
    TrackId,
    UserId,
    to_utc,
)

from .models import (
    AlbumModel,
    ListeningEventModel,
    PlaylistModel,
    PlaylistTrackModel,
    TrackModel,
    UserModel,
    WeeklyStatisticModel,
    ensure_utc_aware,
    utc_now,
)


# Hey future me, this is the Repository pattern! Each repo gets the AsyncSession of its unit
# of work injected. Repos NEVER commit - they only stage changes (session.add, UPDATE
# statements). The unit of work commits or rolls back the whole workflow at once.
class UserRepository(IUserRepository):
    """SQLAlchemy implementation of User repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, user: User) -> None:
        """Add a new user."""
        self.session.add(
            UserModel(
                id=str(user.id),
                username=user.username,
                role=user.role.value,
                first_name=user.first_name,
                last_name=user.last_name,
                playlists_generated_at=user.playlists_generated_at,
                is_deleted=user.is_deleted,
                created_at=user.created_at,
            )
        )

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Get a non-deleted user by ID."""
        stmt = select(UserModel).where(
            UserModel.id == str(user_id), UserModel.is_deleted.is_(False)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_by_role(self, role: UserRole) -> list[User]:
        """List all non-deleted users holding the given role, by username."""
        stmt = (
            select(UserModel)
            .where(UserModel.role == role.value, UserModel.is_deleted.is_(False))
            .order_by(UserModel.username)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    # Hey future me - this UPDATE is the FIRST statement of a regeneration on purpose! It takes
    # the write lock (SQLite RESERVED lock, row lock elsewhere) before the old mixes are read,
    # so a concurrent regeneration of the same user waits here and then sees our new mixes.
    async def mark_playlists_generated(self, user_id: UserId) -> bool:
        """Stamp playlists_generated_at; False when the user is missing or deleted."""
        stmt = (
            update(UserModel)
            .where(UserModel.id == str(user_id), UserModel.is_deleted.is_(False))
            .values(playlists_generated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=UserId.from_string(model.id),
            username=model.username,
            role=UserRole(model.role),
            first_name=model.first_name,
            last_name=model.last_name,
            playlists_generated_at=(
                ensure_utc_aware(model.playlists_generated_at)
                if model.playlists_generated_at
                else None
            ),
            is_deleted=model.is_deleted,
            created_at=ensure_utc_aware(model.created_at),
        )


class AlbumRepository(IAlbumRepository):
    """SQLAlchemy implementation of Album repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, album: Album) -> None:
        """Add a new album."""
        self.session.add(
            AlbumModel(
                id=str(album.id),
                title=album.title,
                artist_id=str(album.artist_id),
                is_deleted=album.is_deleted,
                created_at=album.created_at,
            )
        )

    async def count_by_artist(self, artist_id: UserId) -> int:
        """Count the non-deleted albums of an artist."""
        stmt = select(func.count(AlbumModel.id)).where(
            AlbumModel.artist_id == str(artist_id), AlbumModel.is_deleted.is_(False)
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0


class TrackRepository(ITrackRepository):
    """SQLAlchemy implementation of Track repository."""

    # Listen, "catalog order" is (created_at, id) everywhere in this repo. Any deterministic
    # order would do for playlist filling, but it has to be the SAME order on every call.
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, track: Track) -> None:
        """Add a new track."""
        self.session.add(
            TrackModel(
                id=str(track.id),
                title=track.title,
                artist_id=str(track.artist_id),
                album_id=str(track.album_id) if track.album_id else None,
                genre=track.genre.value,
                duration_seconds=track.duration_seconds,
                is_deleted=track.is_deleted,
                created_at=track.created_at,
                updated_at=track.updated_at,
            )
        )

    async def get_by_id(self, track_id: TrackId) -> Track | None:
        """Get a non-deleted track by ID."""
        stmt = select(TrackModel).where(
            TrackModel.id == str(track_id), TrackModel.is_deleted.is_(False)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_by_artist(
        self, artist_id: UserId, limit: int | None = None
    ) -> list[Track]:
        """List the non-deleted tracks of an artist in catalog order."""
        stmt = (
            select(TrackModel)
            .where(
                TrackModel.artist_id == str(artist_id),
                TrackModel.is_deleted.is_(False),
            )
            .order_by(TrackModel.created_at, TrackModel.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def get_distinct_genres_by_artist(self, artist_id: UserId) -> frozenset[Genre]:
        """Distinct genres among the non-deleted tracks of an artist."""
        stmt = select(distinct(TrackModel.genre)).where(
            TrackModel.artist_id == str(artist_id), TrackModel.is_deleted.is_(False)
        )
        result = await self.session.execute(stmt)
        return frozenset(Genre(value) for value in result.scalars().all())

    async def list_by_genre(self, genre: Genre, limit: int) -> list[Track]:
        """List up to ``limit`` non-deleted tracks of a genre in catalog order."""
        stmt = (
            select(TrackModel)
            .where(TrackModel.genre == genre.value, TrackModel.is_deleted.is_(False))
            .order_by(TrackModel.created_at, TrackModel.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def count_by_artist(self, artist_id: UserId) -> int:
        """Count the non-deleted tracks of an artist."""
        stmt = select(func.count(TrackModel.id)).where(
            TrackModel.artist_id == str(artist_id), TrackModel.is_deleted.is_(False)
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def list_active(self) -> list[Track]:
        """List every non-deleted track."""
        stmt = (
            select(TrackModel)
            .where(TrackModel.is_deleted.is_(False))
            .order_by(TrackModel.created_at, TrackModel.id)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def soft_delete(self, track_id: TrackId) -> None:
        """Mark a track as deleted."""
        stmt = (
            update(TrackModel)
            .where(TrackModel.id == str(track_id), TrackModel.is_deleted.is_(False))
            .values(is_deleted=True, updated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise EntityNotFoundException("Track", track_id)

    @staticmethod
    def _to_entity(model: TrackModel) -> Track:
        return Track(
            id=TrackId.from_string(model.id),
            title=model.title,
            artist_id=UserId.from_string(model.artist_id),
            genre=Genre(model.genre),
            album_id=AlbumId.from_string(model.album_id) if model.album_id else None,
            duration_seconds=model.duration_seconds,
            is_deleted=model.is_deleted,
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )


class ListeningEventRepository(IListeningEventRepository):
    """SQLAlchemy implementation of the listening event log."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, event: ListeningEvent) -> None:
        """Append a listening event."""
        self.session.add(
            ListeningEventModel(
                user_id=str(event.user_id),
                track_id=str(event.track_id),
                listened_at=to_utc(event.listened_at),
            )
        )

    # Hey future me - this returns one genre PER EVENT, oldest first, not a grouped count.
    # The ranking (and its tie-break: earliest listened genre wins) happens in
    # rank_genres() so it is the same on every backend. Events on deleted tracks don't count.
    async def list_genres_for_user(
        self, user_id: UserId, after: datetime
    ) -> list[Genre]:
        """Genre of each event of the user strictly after ``after``, oldest first."""
        stmt = (
            select(TrackModel.genre)
            .select_from(ListeningEventModel)
            .join(TrackModel, TrackModel.id == ListeningEventModel.track_id)
            .where(
                ListeningEventModel.user_id == str(user_id),
                ListeningEventModel.listened_at > to_utc(after),
                TrackModel.is_deleted.is_(False),
            )
            .order_by(ListeningEventModel.listened_at, ListeningEventModel.id)
        )
        result = await self.session.execute(stmt)
        return [Genre(value) for value in result.scalars().all()]

    async def count_for_track(
        self, track_id: TrackId, start: datetime, end: datetime
    ) -> int:
        """Count events of a track with start <= listened_at <= end."""
        stmt = select(func.count(ListeningEventModel.id)).where(
            ListeningEventModel.track_id == str(track_id),
            ListeningEventModel.listened_at.between(to_utc(start), to_utc(end)),
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def count_distinct_listeners_for_track(
        self, track_id: TrackId, start: datetime, end: datetime
    ) -> int:
        """Count distinct users among the events of a track in [start, end]."""
        stmt = select(func.count(distinct(ListeningEventModel.user_id))).where(
            ListeningEventModel.track_id == str(track_id),
            ListeningEventModel.listened_at.between(to_utc(start), to_utc(end)),
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0


class PlaylistRepository(IPlaylistRepository):
    """SQLAlchemy implementation of Playlist repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, playlist: Playlist) -> None:
        """Add a new playlist together with its entries."""
        model = PlaylistModel(
            id=str(playlist.id),
            name=playlist.name,
            description=playlist.description,
            owner_id=str(playlist.owner_id),
            is_system_generated=playlist.is_system_generated,
            is_deleted=playlist.is_deleted,
            created_at=playlist.created_at,
            updated_at=playlist.updated_at,
        )
        model.playlist_tracks = [
            PlaylistTrackModel(track_id=str(entry.track_id), position=entry.position)
            for entry in playlist.entries
        ]
        self.session.add(model)

    async def get_by_id(self, playlist_id: PlaylistId) -> Playlist | None:
        """Get a non-deleted playlist with its entries in position order."""
        stmt = (
            select(PlaylistModel)
            .where(
                PlaylistModel.id == str(playlist_id),
                PlaylistModel.is_deleted.is_(False),
            )
            .options(selectinload(PlaylistModel.playlist_tracks))
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_by_owner(self, owner_id: UserId) -> list[Playlist]:
        """List the non-deleted playlists of a user."""
        stmt = (
            select(PlaylistModel)
            .where(
                PlaylistModel.owner_id == str(owner_id),
                PlaylistModel.is_deleted.is_(False),
            )
            .options(selectinload(PlaylistModel.playlist_tracks))
            .order_by(PlaylistModel.created_at, PlaylistModel.id)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def list_system_generated_by_owner(self, owner_id: UserId) -> list[Playlist]:
        """List the non-deleted system-generated playlists of a user."""
        stmt = (
            select(PlaylistModel)
            .where(
                PlaylistModel.owner_id == str(owner_id),
                PlaylistModel.is_system_generated.is_(True),
                PlaylistModel.is_deleted.is_(False),
            )
            .options(selectinload(PlaylistModel.playlist_tracks))
            .order_by(PlaylistModel.created_at, PlaylistModel.id)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def soft_delete(self, playlist_id: PlaylistId) -> None:
        """Mark a playlist as deleted."""
        stmt = (
            update(PlaylistModel)
            .where(
                PlaylistModel.id == str(playlist_id),
                PlaylistModel.is_deleted.is_(False),
            )
            .values(is_deleted=True, updated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise EntityNotFoundException("Playlist", playlist_id)

    # Hey future me - unlike a sync import, a duplicate here is an ERROR, not a silent skip.
    # The composite primary key would reject it anyway, the explicit check just turns the
    # IntegrityError into a DuplicateEntityException before anything is staged.
    async def add_track(
        self, playlist_id: PlaylistId, track_id: TrackId, position: int
    ) -> PlaylistEntry:
        """Add a track at a position; raises DuplicateEntityException if present."""
        check_stmt = select(PlaylistTrackModel.track_id).where(
            PlaylistTrackModel.playlist_id == str(playlist_id),
            PlaylistTrackModel.track_id == str(track_id),
        )
        check_result = await self.session.execute(check_stmt)
        if check_result.scalar_one_or_none() is not None:
            raise DuplicateEntityException("PlaylistTrack", f"{playlist_id}/{track_id}")

        entry = PlaylistEntry(track_id=track_id, position=position)
        self.session.add(
            PlaylistTrackModel(
                playlist_id=str(playlist_id),
                track_id=str(track_id),
                position=position,
            )
        )
        await self.session.flush()
        return entry

    async def get_max_position(self, playlist_id: PlaylistId) -> int:
        """Highest position used in the playlist, 0 when empty."""
        stmt = select(func.max(PlaylistTrackModel.position)).where(
            PlaylistTrackModel.playlist_id == str(playlist_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    @staticmethod
    def _to_entity(model: PlaylistModel) -> Playlist:
        entries = [
            PlaylistEntry(track_id=TrackId.from_string(pt.track_id), position=pt.position)
            for pt in sorted(model.playlist_tracks, key=lambda pt: pt.position)
        ]
        return Playlist(
            id=PlaylistId.from_string(model.id),
            name=model.name,
            owner_id=UserId.from_string(model.owner_id),
            description=model.description,
            is_system_generated=model.is_system_generated,
            is_deleted=model.is_deleted,
            entries=entries,
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )


class WeeklyStatisticRepository(IWeeklyStatisticRepository):
    """SQLAlchemy implementation of WeeklyStatistic repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def get(self, track_id: TrackId, week_start: date) -> WeeklyStatistic | None:
        """Get the statistic of a track for the week starting on ``week_start``."""
        model = await self._get_model(track_id, week_start)
        return self._to_entity(model) if model else None

    # Listen, this OVERWRITES counts - it never adds to them. Running the aggregation twice
    # in one week leaves the same numbers as running it once.
    async def upsert(self, statistic: WeeklyStatistic) -> bool:
        """Insert or overwrite the row for (track, week_start)."""
        model = await self._get_model(statistic.track_id, statistic.week_start)
        if model is not None:
            model.listen_count = statistic.listen_count
            model.unique_listener_count = statistic.unique_listener_count
            return False

        self.session.add(
            WeeklyStatisticModel(
                track_id=str(statistic.track_id),
                week_start_date=statistic.week_start,
                week_end_date=statistic.week_end,
                listen_count=statistic.listen_count,
                unique_listener_count=statistic.unique_listener_count,
            )
        )
        return True

    async def list_for_week(
        self, week_start: date, limit: int | None = None
    ) -> list[WeeklyStatistic]:
        """Rows of a week ordered by listen count, highest first."""
        stmt = (
            select(WeeklyStatisticModel)
            .where(WeeklyStatisticModel.week_start_date == week_start)
            .order_by(
                WeeklyStatisticModel.listen_count.desc(),
                WeeklyStatisticModel.unique_listener_count.desc(),
                WeeklyStatisticModel.track_id,
            )
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def _get_model(
        self, track_id: TrackId, week_start: date
    ) -> WeeklyStatisticModel | None:
        stmt = select(WeeklyStatisticModel).where(
            WeeklyStatisticModel.track_id == str(track_id),
            WeeklyStatisticModel.week_start_date == week_start,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: WeeklyStatisticModel) -> WeeklyStatistic:
        return WeeklyStatistic(
            track_id=TrackId.from_string(model.track_id),
            week_start=model.week_start_date,
            week_end=model.week_end_date,
            listen_count=model.listen_count,
            unique_listener_count=model.unique_listener_count,
        )
