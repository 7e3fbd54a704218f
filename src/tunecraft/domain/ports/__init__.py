"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date, datetime
from types import TracebackType

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
from tunecraft.domain.value_objects import PlaylistId, TrackId, UserId


# Hey future me, these are PORTS (hexagonal architecture)! Services depend on these ABCs, the
# SQLAlchemy implementations live in infrastructure/persistence. Every read method hides
# soft-deleted rows - a deleted user, track or playlist must never come back from a port.
class IUserRepository(ABC):
    """Repository interface for User entities."""

    @abstractmethod
    async def add(self, user: User) -> None:
        """Add a new user."""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UserId) -> User | None:
        """Get a non-deleted user by ID."""
        pass

    @abstractmethod
    async def list_by_role(self, role: UserRole) -> list[User]:
        """List all non-deleted users holding the given role."""
        pass

    @abstractmethod
    async def mark_playlists_generated(self, user_id: UserId) -> bool:
        """Stamp the regeneration time and lock the user row for the transaction.

        Returns False when the user is missing or deleted.
        """
        pass


class IAlbumRepository(ABC):
    """Repository interface for Album entities."""

    @abstractmethod
    async def add(self, album: Album) -> None:
        """Add a new album."""
        pass

    @abstractmethod
    async def count_by_artist(self, artist_id: UserId) -> int:
        """Count the non-deleted albums of an artist."""
        pass


class ITrackRepository(ABC):
    """Repository interface for Track entities."""

    @abstractmethod
    async def add(self, track: Track) -> None:
        """Add a new track."""
        pass

    @abstractmethod
    async def get_by_id(self, track_id: TrackId) -> Track | None:
        """Get a non-deleted track by ID."""
        pass

    @abstractmethod
    async def list_by_artist(
        self, artist_id: UserId, limit: int | None = None
    ) -> list[Track]:
        """List the non-deleted tracks of an artist in catalog order."""
        pass

    @abstractmethod
    async def get_distinct_genres_by_artist(self, artist_id: UserId) -> frozenset[Genre]:
        """Distinct genres among the non-deleted tracks of an artist."""
        pass

    @abstractmethod
    async def list_by_genre(self, genre: Genre, limit: int) -> list[Track]:
        """List up to ``limit`` non-deleted tracks of a genre in catalog order."""
        pass

    @abstractmethod
    async def count_by_artist(self, artist_id: UserId) -> int:
        """Count the non-deleted tracks of an artist."""
        pass

    @abstractmethod
    async def list_active(self) -> list[Track]:
        """List every non-deleted track."""
        pass

    @abstractmethod
    async def soft_delete(self, track_id: TrackId) -> None:
        """Mark a track as deleted."""
        pass


class IListeningEventRepository(ABC):
    """Repository interface for the append-only listening event log."""

    @abstractmethod
    async def add(self, event: ListeningEvent) -> None:
        """Append a listening event."""
        pass

    @abstractmethod
    async def list_genres_for_user(
        self, user_id: UserId, after: datetime
    ) -> list[Genre]:
        """Genre of each event of the user strictly after ``after``, oldest first."""
        pass

    @abstractmethod
    async def count_for_track(
        self, track_id: TrackId, start: datetime, end: datetime
    ) -> int:
        """Count events of a track with start <= listened_at <= end."""
        pass

    @abstractmethod
    async def count_distinct_listeners_for_track(
        self, track_id: TrackId, start: datetime, end: datetime
    ) -> int:
        """Count distinct users among the events of a track in [start, end]."""
        pass


class IPlaylistRepository(ABC):
    """Repository interface for Playlist entities."""

    @abstractmethod
    async def add(self, playlist: Playlist) -> None:
        """Add a new playlist together with its entries."""
        pass

    @abstractmethod
    async def get_by_id(self, playlist_id: PlaylistId) -> Playlist | None:
        """Get a non-deleted playlist with its entries in position order."""
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: UserId) -> list[Playlist]:
        """List the non-deleted playlists of a user."""
        pass

    @abstractmethod
    async def list_system_generated_by_owner(self, owner_id: UserId) -> list[Playlist]:
        """List the non-deleted system-generated playlists of a user."""
        pass

    @abstractmethod
    async def soft_delete(self, playlist_id: PlaylistId) -> None:
        """Mark a playlist as deleted."""
        pass

    @abstractmethod
    async def add_track(
        self, playlist_id: PlaylistId, track_id: TrackId, position: int
    ) -> PlaylistEntry:
        """Add a track at a position; raises DuplicateEntityException if present."""
        pass

    @abstractmethod
    async def get_max_position(self, playlist_id: PlaylistId) -> int:
        """Highest position used in the playlist, 0 when empty."""
        pass


class IWeeklyStatisticRepository(ABC):
    """Repository interface for WeeklyStatistic rows."""

    @abstractmethod
    async def get(self, track_id: TrackId, week_start: date) -> WeeklyStatistic | None:
        """Get the statistic of a track for the week starting on ``week_start``."""
        pass

    @abstractmethod
    async def upsert(self, statistic: WeeklyStatistic) -> bool:
        """Insert or overwrite the row for (track, week_start).

        Returns:
            True if a new row was created, False if an existing one was updated
        """
        pass

    @abstractmethod
    async def list_for_week(
        self, week_start: date, limit: int | None = None
    ) -> list[WeeklyStatistic]:
        """Rows of a week ordered by listen count, highest first."""
        pass


# Yo, the unit of work is the TRANSACTION boundary! Everything done through the repositories
# of one IUnitOfWork becomes visible together on a clean exit, or not at all when the block
# raises. Services never commit halfway through a workflow.
class IUnitOfWork(ABC):
    """Transactional scope exposing all repositories."""

    users: IUserRepository
    albums: IAlbumRepository
    tracks: ITrackRepository
    listening_events: IListeningEventRepository
    playlists: IPlaylistRepository
    weekly_statistics: IWeeklyStatisticRepository

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the pending changes."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard the pending changes."""
        pass


UnitOfWorkFactory = Callable[[], IUnitOfWork]


__all__ = [
    "IAlbumRepository",
    "IListeningEventRepository",
    "IPlaylistRepository",
    "ITrackRepository",
    "IUnitOfWork",
    "IUserRepository",
    "IWeeklyStatisticRepository",
    "UnitOfWorkFactory",
]
