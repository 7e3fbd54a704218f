"""Weekly Statistics Worker - triggers the weekly listening rollup.

Hey future me - this worker only decides WHEN. All the counting lives in
WeeklyStatisticsService, which can also be called on demand (run_once() or the app's
run_weekly_statistics()).

Schedule: once a week at a fixed UTC weekday/time, Friday 23:59 by default. The run
aggregates the Monday-Sunday week containing the scheduled moment, so Friday's run covers
Monday through Friday night. Listens later that weekend are picked up if it runs again in
the same week (the rollup overwrites, it never double-counts).

Lifecycle:
- Created in lifecycle.py during app startup (only if statistics.enabled)
- Runs as asyncio task via start()
- Stopped via stop() during shutdown; a pending sleep is interrupted immediately
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from tunecraft.application.services.weekly_statistics_service import (
    WeeklyStatisticsService,
)
from tunecraft.config import StatisticsSettings
from tunecraft.domain.dtos import WeeklyStatisticsReport
from tunecraft.domain.value_objects import to_utc
from tunecraft.infrastructure.observability import (
    log_worker_health,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


def next_run_after(
    moment: datetime, weekday: int, hour: int, minute: int
) -> datetime:
    """First scheduled run strictly after ``moment``.

    Args:
        moment: Reference time (naive values are taken as UTC)
        weekday: Day of week, Monday=0 ... Sunday=6
        hour: Hour of day (UTC)
        minute: Minute of hour

    Returns:
        Aware UTC datetime of the next run
    """
    moment = to_utc(moment)
    candidate = moment.replace(hour=hour, minute=minute, second=0, microsecond=0)
    candidate += timedelta(days=(weekday - candidate.weekday()) % 7)
    if candidate <= moment:
        candidate += timedelta(days=7)
    return candidate


class WeeklyStatisticsWorker:
    """Worker that runs the weekly statistics rollup on a fixed weekly schedule."""

    def __init__(
        self,
        service: WeeklyStatisticsService,
        settings: StatisticsSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the weekly statistics worker.

        Args:
            service: Service doing the actual aggregation
            settings: Schedule (weekday/hour/minute, UTC)
            clock: Source of the current time, for tests
        """
        self._service = service
        self._settings = settings or StatisticsSettings()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._running = False
        self._stop_event = asyncio.Event()
        self._started_at: float | None = None
        self._last_scheduled: datetime | None = None
        self._stats: dict[str, Any] = {
            "runs_completed": 0,
            "errors_total": 0,
            "last_run_at": None,
            "last_report": None,
            "next_run_at": None,
        }

    async def start(self) -> None:
        """Start the worker loop.

        Runs continuously until stop() is called.
        """
        if self._stop_event.is_set():
            # stop() won the race against task startup
            return
        self._running = True
        self._started_at = time.monotonic()
        logger.info(
            "WeeklyStatisticsWorker started (weekday=%d, at %02d:%02d UTC)",
            self._settings.run_weekday,
            self._settings.run_hour,
            self._settings.run_minute,
        )

        while self._running:
            now = to_utc(self._clock())
            # a timer firing a hair early must not schedule the same slot twice
            reference = max(now, self._last_scheduled) if self._last_scheduled else now
            next_run = next_run_after(
                reference,
                self._settings.run_weekday,
                self._settings.run_hour,
                self._settings.run_minute,
            )
            self._stats["next_run_at"] = next_run
            delay = max((next_run - now).total_seconds(), 0.0)
            logger.debug("Next weekly statistics run at %s", next_run.isoformat())

            if await self._wait_or_stop(delay):
                break
            self._last_scheduled = next_run

            try:
                await self.run_once(now=next_run)
            except Exception as e:
                # Log but don't crash - next week's run gets another chance
                self._stats["errors_total"] += 1
                logger.exception("Weekly statistics run failed: %s", e)

            log_worker_health(
                logger,
                "weekly_statistics",
                cycles_completed=self._stats["runs_completed"],
                errors_total=self._stats["errors_total"],
                uptime_seconds=time.monotonic() - self._started_at,
            )

        logger.info("WeeklyStatisticsWorker stopped")

    def stop(self) -> None:
        """Signal the worker to stop."""
        self._running = False
        self._stop_event.set()
        logger.info("WeeklyStatisticsWorker stopping...")

    async def run_once(self, now: datetime | None = None) -> WeeklyStatisticsReport:
        """Run the rollup for the week containing ``now`` right away."""
        set_correlation_id()
        report = await self._service.generate_weekly_statistics(now or self._clock())
        self._stats["runs_completed"] += 1
        self._stats["last_run_at"] = self._clock()
        self._stats["last_report"] = report
        return report

    async def _wait_or_stop(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds; True if stop() was called meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except TimeoutError:
            return not self._running
        return True

    def get_stats(self) -> dict[str, Any]:
        """Get worker statistics."""
        return {
            **self._stats,
            "running": self._running,
            "run_weekday": self._settings.run_weekday,
            "run_time": f"{self._settings.run_hour:02d}:{self._settings.run_minute:02d}",
        }


# Hey future me - factory function for easy worker creation from app context
def create_weekly_statistics_worker(
    service: WeeklyStatisticsService,
    settings: StatisticsSettings | None = None,
) -> WeeklyStatisticsWorker:
    """Create a WeeklyStatisticsWorker with the given schedule."""
    return WeeklyStatisticsWorker(service=service, settings=settings)
