"""Weekly per-track listening statistics.

Hey future me - the rollup is RECOMPUTE-AND-OVERWRITE. For every live track we count the
listening events inside the Monday-Sunday window and upsert one row keyed by
(track, week_start). Run it twice in the same week and nothing changes the second time.
Deleted tracks are skipped entirely, so a row they got earlier in the week just stays as is.
"""

import logging
from datetime import UTC, date, datetime

from tunecraft.config import RecommendationSettings
from tunecraft.domain.dtos import WeeklyStatisticsReport
from tunecraft.domain.entities import WeeklyStatistic
from tunecraft.domain.ports import IUnitOfWork, UnitOfWorkFactory
from tunecraft.domain.value_objects import WeekWindow
from tunecraft.infrastructure.observability import log_operation

logger = logging.getLogger(__name__)


async def compute_weekly_statistics(
    uow: IUnitOfWork, window: WeekWindow
) -> WeeklyStatisticsReport:
    """Aggregate listens of every non-deleted track over one week.

    Runs inside the caller's unit of work; nothing is committed here.

    Args:
        uow: Open unit of work
        window: Week to aggregate

    Returns:
        Counts of processed tracks and of created/updated rows
    """
    created = updated = 0
    tracks = await uow.tracks.list_active()

    for track in tracks:
        listens = await uow.listening_events.count_for_track(
            track.id, window.starts_at, window.ends_at
        )
        listeners = await uow.listening_events.count_distinct_listeners_for_track(
            track.id, window.starts_at, window.ends_at
        )
        statistic = WeeklyStatistic(
            track_id=track.id,
            week_start=window.start_date,
            week_end=window.end_date,
            listen_count=listens,
            unique_listener_count=listeners,
        )
        if await uow.weekly_statistics.upsert(statistic):
            created += 1
        else:
            updated += 1
        logger.debug(
            "Track %s: %d listens, %d listeners in %s", track.id, listens, listeners, window
        )

    return WeeklyStatisticsReport(
        window=window,
        processed_tracks=len(tracks),
        created=created,
        updated=updated,
    )


class WeeklyStatisticsService:
    """Runs the weekly rollup and reads its results back."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        settings: RecommendationSettings | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._settings = settings or RecommendationSettings()

    async def generate_weekly_statistics(
        self, now: datetime | None = None
    ) -> WeeklyStatisticsReport:
        """Aggregate the week containing ``now`` in one transaction.

        Args:
            now: Any moment inside the target week (defaults to current UTC time)

        Returns:
            Report of the run
        """
        window = WeekWindow.containing(now or datetime.now(UTC))

        async with log_operation(logger, "weekly_statistics", week=str(window)):
            async with self._uow_factory() as uow:
                report = await compute_weekly_statistics(uow, window)

        logger.info(
            "Weekly statistics for %s: %d tracks, %d created, %d updated",
            window,
            report.processed_tracks,
            report.created,
            report.updated,
        )
        return report

    async def get_top_tracks(
        self, week_start: date, limit: int | None = None
    ) -> list[WeeklyStatistic]:
        """Most played tracks of the week containing ``week_start``.

        Args:
            week_start: Any day of the week (normalized to its Monday)
            limit: Maximum rows (defaults to the configured top tracks limit)
        """
        window = WeekWindow.containing(week_start)
        async with self._uow_factory() as uow:
            return await uow.weekly_statistics.list_for_week(
                window.start_date, limit or self._settings.top_tracks_limit
            )
