"""Artist similarity and artist profiles.

Hey future me - "similar" means sharing at least one genre tag, nothing smarter! Two artists
are compared by the overlap of their distinct track genres. More shared genres ranks higher,
equal overlap falls back to username then id so the list never reshuffles between calls.
"""

import logging
from collections.abc import Iterable

from tunecraft.config import RecommendationSettings
from tunecraft.domain.dtos import ArtistProfile, SimilarArtist, TrackSummary
from tunecraft.domain.entities import Genre, User, UserRole
from tunecraft.domain.exceptions import EntityNotFoundException
from tunecraft.domain.ports import IUnitOfWork, UnitOfWorkFactory
from tunecraft.domain.value_objects import UserId

logger = logging.getLogger(__name__)


def score_similar_artists(
    target_id: UserId,
    target_genres: frozenset[Genre],
    candidates: Iterable[tuple[User, frozenset[Genre]]],
    limit: int = 10,
) -> list[SimilarArtist]:
    """Rank candidate artists by genre overlap with the target.

    Args:
        target_id: Artist being compared against (never part of the result)
        target_genres: Distinct genres of the target
        candidates: (artist, distinct genres) pairs
        limit: Maximum number of results

    Returns:
        Artists with a non-empty overlap, most shared genres first
    """
    scored: list[SimilarArtist] = []
    for artist, genres in candidates:
        if artist.id == target_id:
            continue
        shared = target_genres & genres
        if not shared:
            continue
        scored.append(
            SimilarArtist(
                id=artist.id,
                username=artist.username,
                shared_genres=Genre.in_display_order(shared),
            )
        )

    scored.sort(key=lambda s: (-s.shared_count, s.username, str(s.id)))
    return scored[:limit]


class ArtistSimilarityService:
    """Similar-artist lookup and the artist profile view."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        settings: RecommendationSettings | None = None,
    ) -> None:
        """Initialize similarity service.

        Args:
            uow_factory: Creates a fresh unit of work per call
            settings: Result limits
        """
        self._uow_factory = uow_factory
        self._settings = settings or RecommendationSettings()

    async def get_similar_artists(self, artist_id: UserId) -> list[SimilarArtist]:
        """Artists sharing genres with the given artist.

        Raises:
            EntityNotFoundException: If the artist is missing or deleted
            NotAnArtistException: If the user does not hold the ARTIST role
        """
        async with self._uow_factory() as uow:
            artist = await self._resolve_artist(uow, artist_id)
            return await self._similar_to(uow, artist)

    async def get_artist_profile(self, artist_id: UserId) -> ArtistProfile:
        """Catalog counts, genres, first tracks and similar artists of an artist.

        Raises:
            EntityNotFoundException: If the artist is missing or deleted
            NotAnArtistException: If the user does not hold the ARTIST role
        """
        async with self._uow_factory() as uow:
            artist = await self._resolve_artist(uow, artist_id)
            album_count = await uow.albums.count_by_artist(artist.id)
            track_count = await uow.tracks.count_by_artist(artist.id)
            genres = await uow.tracks.get_distinct_genres_by_artist(artist.id)
            tracks = await uow.tracks.list_by_artist(
                artist.id, limit=self._settings.top_tracks_limit
            )
            similar = await self._similar_to(uow, artist, genres)

        return ArtistProfile(
            id=artist.id,
            username=artist.username,
            first_name=artist.first_name,
            last_name=artist.last_name,
            album_count=album_count,
            track_count=track_count,
            genres=Genre.in_display_order(genres),
            top_tracks=[
                TrackSummary(
                    id=track.id,
                    title=track.title,
                    genre=track.genre,
                    duration_seconds=track.duration_seconds,
                )
                for track in tracks
            ],
            similar_artists=similar,
        )

    async def _resolve_artist(self, uow: IUnitOfWork, artist_id: UserId) -> User:
        artist = await uow.users.get_by_id(artist_id)
        if artist is None:
            raise EntityNotFoundException("Artist", artist_id)
        artist.require_artist()
        return artist

    # Listen, this is one genre query per artist. Fine for a catalog of a few thousand
    # artists; a grouped query would be the next step if the profile page gets slow.
    async def _similar_to(
        self,
        uow: IUnitOfWork,
        artist: User,
        target_genres: frozenset[Genre] | None = None,
    ) -> list[SimilarArtist]:
        if target_genres is None:
            target_genres = await uow.tracks.get_distinct_genres_by_artist(artist.id)
        if not target_genres:
            return []

        candidates: list[tuple[User, frozenset[Genre]]] = []
        for other in await uow.users.list_by_role(UserRole.ARTIST):
            if other.id == artist.id:
                continue
            genres = await uow.tracks.get_distinct_genres_by_artist(other.id)
            candidates.append((other, genres))

        similar = score_similar_artists(
            artist.id,
            target_genres,
            candidates,
            limit=self._settings.similar_artists_limit,
        )
        logger.debug(
            "Found %d similar artists for %s among %d candidates",
            len(similar),
            artist.username,
            len(candidates),
        )
        return similar
