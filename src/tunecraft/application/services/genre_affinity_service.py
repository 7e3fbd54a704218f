"""Genre affinity - which genres a listener has been playing lately.

Hey future me - affinity is a plain COUNT of listening events per genre over a calendar
lookback window (3 months by default). No weighting, no decay. The ranking is stable: when
two genres have the same count, the one listened to first inside the window wins.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime

from tunecraft.config import RecommendationSettings
from tunecraft.domain.dtos import GenreAffinity
from tunecraft.domain.entities import Genre
from tunecraft.domain.exceptions import EntityNotFoundException
from tunecraft.domain.ports import (
    IListeningEventRepository,
    ITrackRepository,
    UnitOfWorkFactory,
)
from tunecraft.domain.value_objects import UserId, subtract_months

logger = logging.getLogger(__name__)


def rank_genres(genres: Iterable[Genre]) -> list[GenreAffinity]:
    """Count genres and rank them by descending count.

    Args:
        genres: One genre per listening event, oldest first

    Returns:
        Affinities, highest count first; equal counts keep first-seen order
    """
    # Counter keeps insertion order and most_common() sorts stably
    counts = Counter(genres)
    return [
        GenreAffinity(genre=genre, listen_count=count)
        for genre, count in counts.most_common()
    ]


class GenreAffinityCalculator:
    """Affinity computations over repositories of an open unit of work."""

    def __init__(
        self,
        listening_events: IListeningEventRepository,
        tracks: ITrackRepository,
        lookback_months: int = 3,
    ) -> None:
        self._listening_events = listening_events
        self._tracks = tracks
        self._lookback_months = lookback_months

    def window_start(self, now: datetime | None = None) -> datetime:
        """Exclusive lower bound of the lookback window."""
        return subtract_months(now or datetime.now(UTC), self._lookback_months)

    async def rank_user_genres(
        self, user_id: UserId, now: datetime | None = None
    ) -> list[GenreAffinity]:
        """Rank the user's genres over events strictly after the window start."""
        after = self.window_start(now)
        genres = await self._listening_events.list_genres_for_user(user_id, after)
        ranked = rank_genres(genres)
        logger.debug(
            "Ranked %d genres from %d events for user %s since %s",
            len(ranked),
            len(genres),
            user_id,
            after.isoformat(),
        )
        return ranked

    async def artist_genres(self, artist_id: UserId) -> frozenset[Genre]:
        """Distinct genres among the artist's non-deleted tracks."""
        return await self._tracks.get_distinct_genres_by_artist(artist_id)


class GenreAffinityService:
    """Standalone entry point that opens its own unit of work per call."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        settings: RecommendationSettings | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._settings = settings or RecommendationSettings()

    async def rank_user_genres(
        self, user_id: UserId, now: datetime | None = None
    ) -> list[GenreAffinity]:
        """Ranked genre affinities of an existing user.

        Raises:
            EntityNotFoundException: If the user is missing or deleted
        """
        async with self._uow_factory() as uow:
            if await uow.users.get_by_id(user_id) is None:
                raise EntityNotFoundException("User", user_id)
            calculator = GenreAffinityCalculator(
                uow.listening_events, uow.tracks, self._settings.lookback_months
            )
            return await calculator.rank_user_genres(user_id, now)

    async def artist_genres(self, artist_id: UserId) -> frozenset[Genre]:
        """Distinct genres of an artist; empty for an artist without tracks."""
        async with self._uow_factory() as uow:
            calculator = GenreAffinityCalculator(
                uow.listening_events, uow.tracks, self._settings.lookback_months
            )
            return await calculator.artist_genres(artist_id)
