"""Domain entities."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum

from tunecraft.domain.exceptions import DuplicateEntityException, NotAnArtistException
from tunecraft.domain.value_objects import AlbumId, PlaylistId, TrackId, UserId


# Hey future me, Genre is a CLOSED set - a track has exactly one of these. Values are the
# uppercase names because that's what the catalog stores and what playlist names show
# ("ROCK Mix for You"). Declaration order doubles as the display order for genre lists.
class Genre(str, Enum):
    """Fixed genre enumeration of the catalog."""

    POP = "POP"
    ROCK = "ROCK"
    HIP_HOP = "HIP_HOP"
    JAZZ = "JAZZ"
    CLASSICAL = "CLASSICAL"
    ELECTRONIC = "ELECTRONIC"
    COUNTRY = "COUNTRY"
    RNB = "RNB"
    METAL = "METAL"
    BLUES = "BLUES"
    REGGAE = "REGGAE"
    FOLK = "FOLK"
    LATIN = "LATIN"
    OTHER = "OTHER"

    @classmethod
    def in_display_order(cls, genres: Iterable["Genre"]) -> list["Genre"]:
        """Return the given genres sorted by declaration order."""
        wanted = set(genres)
        return [genre for genre in cls if genre in wanted]


# Yo, roles are a TAG on the user, not a class hierarchy! An artist is a User whose role is
# ARTIST. "Only artists may do X" is a runtime check through has_role()/require_artist().
class UserRole(str, Enum):
    """Role of a user account."""

    LISTENER = "LISTENER"
    ARTIST = "ARTIST"
    ADMIN = "ADMIN"


@dataclass
class User:
    """User entity. Artists are users with the ARTIST role."""

    id: UserId
    username: str
    role: UserRole = UserRole.LISTENER
    first_name: str | None = None
    last_name: str | None = None
    playlists_generated_at: datetime | None = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate user data."""
        if not self.username or not self.username.strip():
            raise ValueError("Username cannot be empty")

    def has_role(self, role: UserRole) -> bool:
        """Check whether the user currently holds the given role."""
        return self.role is role

    @property
    def is_artist(self) -> bool:
        return self.has_role(UserRole.ARTIST)

    def require_artist(self) -> None:
        """Raise NotAnArtistException unless the user is an artist."""
        if not self.is_artist:
            raise NotAnArtistException(self.id, self.role.value)


@dataclass
class Album:
    """Album entity, owned by an artist."""

    id: AlbumId
    title: str
    artist_id: UserId
    is_deleted: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate album data."""
        if not self.title or not self.title.strip():
            raise ValueError("Album title cannot be empty")


# Listen, tracks are NEVER hard-deleted! soft_delete() flips is_deleted and from then on the
# catalog queries skip the track: it's not recommended, not counted, not aggregated.
@dataclass
class Track:
    """Track entity representing a music track."""

    id: TrackId
    title: str
    artist_id: UserId
    genre: Genre
    album_id: AlbumId | None = None
    duration_seconds: int | None = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate track data."""
        if not self.title or not self.title.strip():
            raise ValueError("Track title cannot be empty")
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("Duration cannot be negative")

    def soft_delete(self) -> None:
        """Mark the track as deleted."""
        self.is_deleted = True
        self.updated_at = datetime.now(UTC)


@dataclass(frozen=True)
class ListeningEvent:
    """Immutable record of a user playing a track."""

    user_id: UserId
    track_id: TrackId
    listened_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class PlaylistEntry:
    """A track at a position inside a playlist. Positions start at 1."""

    track_id: TrackId
    position: int

    def __post_init__(self) -> None:
        if self.position < 1:
            raise ValueError("Playlist positions start at 1")


# Hey future me - system-generated playlists (is_system_generated=True) belong to the
# recommendation engine: it creates them and soft-deletes them on the next regeneration.
# User playlists are never touched by it. A track appears at most once per playlist,
# add_track() RAISES on a duplicate instead of silently skipping it.
@dataclass
class Playlist:
    """Playlist entity with ordered, duplicate-free entries."""

    id: PlaylistId
    name: str
    owner_id: UserId
    description: str | None = None
    is_system_generated: bool = False
    is_deleted: bool = False
    entries: list[PlaylistEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    SYSTEM_DESCRIPTION = "Based on your listening history"

    def __post_init__(self) -> None:
        """Validate playlist data."""
        if not self.name or not self.name.strip():
            raise ValueError("Playlist name cannot be empty")

    @classmethod
    def genre_mix(cls, genre: Genre, owner_id: UserId) -> "Playlist":
        """Create an empty system-generated mix for one genre."""
        return cls(
            id=PlaylistId.generate(),
            name=f"{genre.value} Mix for You",
            owner_id=owner_id,
            description=cls.SYSTEM_DESCRIPTION,
            is_system_generated=True,
        )

    @property
    def track_ids(self) -> list[TrackId]:
        return [entry.track_id for entry in self.entries]

    def contains(self, track_id: TrackId) -> bool:
        """Check whether the track is already in the playlist."""
        return any(entry.track_id == track_id for entry in self.entries)

    def next_position(self) -> int:
        """Position the next appended track will get."""
        return max((entry.position for entry in self.entries), default=0) + 1

    def add_track(self, track_id: TrackId) -> PlaylistEntry:
        """Append a track at the end of the playlist."""
        if self.contains(track_id):
            raise DuplicateEntityException("PlaylistTrack", f"{self.id}/{track_id}")
        entry = PlaylistEntry(track_id=track_id, position=self.next_position())
        self.entries.append(entry)
        self.updated_at = datetime.now(UTC)
        return entry

    def soft_delete(self) -> None:
        """Mark the playlist as deleted."""
        self.is_deleted = True
        self.updated_at = datetime.now(UTC)

    def track_count(self) -> int:
        """Get the number of tracks in the playlist."""
        return len(self.entries)


@dataclass
class WeeklyStatistic:
    """Listen counts of one track over one Monday-to-Sunday week."""

    track_id: TrackId
    week_start: date
    week_end: date
    listen_count: int = 0
    unique_listener_count: int = 0

    def __post_init__(self) -> None:
        """Validate statistic data."""
        self._validate_counts(self.listen_count, self.unique_listener_count)

    def replace_counts(self, listen_count: int, unique_listener_count: int) -> None:
        """Overwrite the counts with freshly computed values."""
        self._validate_counts(listen_count, unique_listener_count)
        self.listen_count = listen_count
        self.unique_listener_count = unique_listener_count

    @staticmethod
    def _validate_counts(listen_count: int, unique_listener_count: int) -> None:
        if listen_count < 0 or unique_listener_count < 0:
            raise ValueError("Statistic counts cannot be negative")
        if unique_listener_count > listen_count:
            raise ValueError("Unique listeners cannot exceed listen count")


__all__ = [
    "Album",
    "Genre",
    "ListeningEvent",
    "Playlist",
    "PlaylistEntry",
    "Track",
    "User",
    "UserRole",
    "WeeklyStatistic",
]
