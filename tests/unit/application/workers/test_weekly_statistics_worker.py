"""Tests for WeeklyStatisticsWorker scheduling."""

import asyncio
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from tunecraft.application.services.weekly_statistics_service import (
    WeeklyStatisticsService,
)
from tunecraft.application.workers.weekly_statistics_worker import (
    WeeklyStatisticsWorker,
    next_run_after,
)
from tunecraft.config import StatisticsSettings
from tunecraft.domain.dtos import WeeklyStatisticsReport
from tunecraft.domain.value_objects import WeekWindow

FRIDAY = 4


class TestNextRunAfter:
    """Test the schedule computation."""

    def test_later_same_week(self) -> None:
        """Wednesday noon -> Friday 23:59 of the same week."""
        moment = datetime(2024, 5, 15, 12, 0, tzinfo=UTC)
        assert next_run_after(moment, FRIDAY, 23, 59) == datetime(
            2024, 5, 17, 23, 59, tzinfo=UTC
        )

    def test_same_day_before_time(self) -> None:
        moment = datetime(2024, 5, 17, 8, 0, tzinfo=UTC)
        assert next_run_after(moment, FRIDAY, 23, 59) == datetime(
            2024, 5, 17, 23, 59, tzinfo=UTC
        )

    def test_exactly_at_run_time_moves_a_week(self) -> None:
        """The result is strictly after the reference moment."""
        moment = datetime(2024, 5, 17, 23, 59, tzinfo=UTC)
        assert next_run_after(moment, FRIDAY, 23, 59) == datetime(
            2024, 5, 24, 23, 59, tzinfo=UTC
        )

    def test_weekend_rolls_to_next_friday(self) -> None:
        moment = datetime(2024, 5, 18, 0, 0, tzinfo=UTC)
        assert next_run_after(moment, FRIDAY, 23, 59) == datetime(
            2024, 5, 24, 23, 59, tzinfo=UTC
        )

    def test_naive_moment_is_utc(self) -> None:
        result = next_run_after(datetime(2024, 5, 13, 0, 0), 0, 6, 30)
        assert result == datetime(2024, 5, 13, 6, 30, tzinfo=UTC)


def _report() -> WeeklyStatisticsReport:
    return WeeklyStatisticsReport(
        window=WeekWindow.containing(date(2024, 5, 17)), processed_tracks=3, created=3
    )


class TestWeeklyStatisticsWorker:
    """Test the worker loop with a mocked service and a frozen clock."""

    @pytest.fixture
    def mock_service(self) -> AsyncMock:
        service = AsyncMock(spec=WeeklyStatisticsService)
        service.generate_weekly_statistics = AsyncMock(return_value=_report())
        return service

    async def test_run_once_calls_service(self, mock_service: AsyncMock) -> None:
        now = datetime(2024, 5, 15, 9, 0, tzinfo=UTC)
        worker = WeeklyStatisticsWorker(mock_service, clock=lambda: now)

        report = await worker.run_once()

        mock_service.generate_weekly_statistics.assert_awaited_once_with(now)
        assert report.processed_tracks == 3
        assert worker.get_stats()["runs_completed"] == 1

    async def test_loop_runs_at_scheduled_moment(self, mock_service: AsyncMock) -> None:
        """50ms before Friday 23:59 the worker sleeps, then runs for that slot."""
        just_before = datetime(2024, 5, 17, 23, 58, 59, 950000, tzinfo=UTC)
        worker = WeeklyStatisticsWorker(
            mock_service, StatisticsSettings(), clock=lambda: just_before
        )

        async def run_and_stop(now: datetime) -> WeeklyStatisticsReport:
            worker.stop()
            return _report()

        mock_service.generate_weekly_statistics.side_effect = run_and_stop

        await asyncio.wait_for(worker.start(), timeout=5)

        mock_service.generate_weekly_statistics.assert_awaited_once_with(
            datetime(2024, 5, 17, 23, 59, tzinfo=UTC)
        )
        assert worker.get_stats()["running"] is False

    async def test_failed_run_does_not_crash_loop(self, mock_service: AsyncMock) -> None:
        just_before = datetime(2024, 5, 17, 23, 58, 59, 990000, tzinfo=UTC)
        worker = WeeklyStatisticsWorker(mock_service, clock=lambda: just_before)

        async def fail_and_stop(now: datetime) -> WeeklyStatisticsReport:
            worker.stop()
            raise RuntimeError("database is locked")

        mock_service.generate_weekly_statistics.side_effect = fail_and_stop

        await asyncio.wait_for(worker.start(), timeout=5)

        stats = worker.get_stats()
        assert stats["errors_total"] == 1
        assert stats["runs_completed"] == 0

    async def test_stop_interrupts_sleep(self, mock_service: AsyncMock) -> None:
        """A week-long sleep ends as soon as stop() is called."""
        worker = WeeklyStatisticsWorker(
            mock_service, clock=lambda: datetime(2024, 5, 18, 0, 0, tzinfo=UTC)
        )
        task = asyncio.create_task(worker.start())
        await asyncio.sleep(0.01)

        worker.stop()
        await asyncio.wait_for(task, timeout=1)

        mock_service.generate_weekly_statistics.assert_not_awaited()
        assert worker.get_stats()["next_run_at"] == datetime(2024, 5, 24, 23, 59, tzinfo=UTC)

    async def test_stop_before_start(self, mock_service: AsyncMock) -> None:
        worker = WeeklyStatisticsWorker(mock_service)
        worker.stop()

        await asyncio.wait_for(worker.start(), timeout=1)

        mock_service.generate_weekly_statistics.assert_not_awaited()
