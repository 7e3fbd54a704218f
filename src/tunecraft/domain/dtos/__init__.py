"""
Result objects returned by the recommendation and statistics services.

Hey future me - these are dumb data carriers, not entities! They exist so callers
(request layer, scheduler, tests) get summaries instead of full ORM-shaped entities:
a PlaylistSummary has a track count, not the track listing.
"""

from dataclasses import dataclass, field

from tunecraft.domain.entities import Genre
from tunecraft.domain.value_objects import PlaylistId, TrackId, UserId, WeekWindow


@dataclass(frozen=True)
class GenreAffinity:
    """A genre and how often the user listened to it inside the lookback window."""

    genre: Genre
    listen_count: int


@dataclass(frozen=True)
class SimilarArtist:
    """An artist sharing at least one genre with the target artist."""

    id: UserId
    username: str
    shared_genres: list[Genre] = field(default_factory=list)

    @property
    def shared_count(self) -> int:
        return len(self.shared_genres)


@dataclass(frozen=True)
class TrackSummary:
    """Short form of a track for profile listings."""

    id: TrackId
    title: str
    genre: Genre
    duration_seconds: int | None = None


@dataclass(frozen=True)
class ArtistProfile:
    """Artist page: catalog counts, genres, first tracks and similar artists."""

    id: UserId
    username: str
    first_name: str | None
    last_name: str | None
    album_count: int
    track_count: int
    genres: list[Genre] = field(default_factory=list)
    top_tracks: list[TrackSummary] = field(default_factory=list)
    similar_artists: list[SimilarArtist] = field(default_factory=list)


@dataclass(frozen=True)
class PlaylistSummary:
    """Summary of a playlist created by the recommendation engine."""

    id: PlaylistId
    name: str
    description: str | None
    owner_id: UserId
    owner_username: str
    is_system_generated: bool
    track_count: int


@dataclass(frozen=True)
class WeeklyStatisticsReport:
    """Outcome of one aggregation run."""

    window: WeekWindow
    processed_tracks: int = 0
    created: int = 0
    updated: int = 0


__all__ = [
    "ArtistProfile",
    "GenreAffinity",
    "PlaylistSummary",
    "SimilarArtist",
    "TrackSummary",
    "WeeklyStatisticsReport",
]
