"""Playlist recommendation - "<GENRE> Mix for You" playlists from listening history.

Hey future me - regeneration is REPLACE, never merge! Every run soft-deletes all of the
user's current system playlists and builds new ones from scratch:

1. lock and resolve the user (fails before anything changes)
2. rank genres over the last 3 months
3. soft-delete the old system playlists
4. one playlist per top genre (max 3), up to 20 tracks each, positions 1..n

Steps 1-4 share ONE unit of work. If anything raises halfway, the old playlists come back
and none of the new ones exist. Step 1 writes the user row before anything is read, so two
regenerations of the same user run one after the other and the second replaces the first.
User-made playlists are never touched.
"""

import logging
from datetime import datetime

from tunecraft.application.services.genre_affinity_service import (
    GenreAffinityCalculator,
)
from tunecraft.config import RecommendationSettings
from tunecraft.domain.dtos import PlaylistSummary
from tunecraft.domain.entities import Genre, Playlist, User
from tunecraft.domain.exceptions import EntityNotFoundException
from tunecraft.domain.ports import IUnitOfWork, UnitOfWorkFactory
from tunecraft.domain.value_objects import UserId
from tunecraft.infrastructure.observability import log_operation

logger = logging.getLogger(__name__)


class PlaylistRecommendationService:
    """Regenerates the system-generated playlists of a user."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        settings: RecommendationSettings | None = None,
    ) -> None:
        """Initialize recommendation service.

        Args:
            uow_factory: Creates a fresh unit of work per regeneration
            settings: Lookback and size limits
        """
        self._uow_factory = uow_factory
        self._settings = settings or RecommendationSettings()

    async def generate_recommended_playlists(
        self, user_id: UserId, now: datetime | None = None
    ) -> list[PlaylistSummary]:
        """Replace the user's system playlists with fresh genre mixes.

        Args:
            user_id: Listener to generate for
            now: Reference time for the lookback window (defaults to current UTC time)

        Returns:
            Summaries of the new playlists in genre rank order (possibly empty)

        Raises:
            EntityNotFoundException: If the user is missing or deleted
        """
        async with log_operation(
            logger, "playlist_regeneration", user_id=str(user_id)
        ):
            async with self._uow_factory() as uow:
                # write first: a concurrent run for this user waits until we commit
                locked = await uow.users.mark_playlists_generated(user_id)
                user = await uow.users.get_by_id(user_id) if locked else None
                if user is None:
                    raise EntityNotFoundException("User", user_id)

                calculator = GenreAffinityCalculator(
                    uow.listening_events, uow.tracks, self._settings.lookback_months
                )
                affinities = await calculator.rank_user_genres(user.id, now)

                removed = await self._remove_system_playlists(uow, user.id)

                summaries: list[PlaylistSummary] = []
                for affinity in affinities[: self._settings.max_playlists]:
                    playlist = await self._build_genre_mix(uow, user, affinity.genre)
                    summaries.append(self._summarize(playlist, user))

            logger.info(
                "Regenerated playlists for %s: removed %d, created %d",
                user.username,
                removed,
                len(summaries),
            )
            return summaries

    async def _remove_system_playlists(self, uow: IUnitOfWork, owner_id: UserId) -> int:
        old_playlists = await uow.playlists.list_system_generated_by_owner(owner_id)
        for playlist in old_playlists:
            await uow.playlists.soft_delete(playlist.id)
        return len(old_playlists)

    async def _build_genre_mix(
        self, uow: IUnitOfWork, user: User, genre: Genre
    ) -> Playlist:
        playlist = Playlist.genre_mix(genre, user.id)
        tracks = await uow.tracks.list_by_genre(
            genre, self._settings.tracks_per_playlist
        )
        for track in tracks:
            playlist.add_track(track.id)
        await uow.playlists.add(playlist)
        logger.debug("Built %s with %d tracks", playlist.name, playlist.track_count())
        return playlist

    @staticmethod
    def _summarize(playlist: Playlist, owner: User) -> PlaylistSummary:
        return PlaylistSummary(
            id=playlist.id,
            name=playlist.name,
            description=playlist.description,
            owner_id=owner.id,
            owner_username=owner.username,
            is_system_generated=playlist.is_system_generated,
            track_count=playlist.track_count(),
        )
