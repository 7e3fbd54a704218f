"""Background workers."""

from tunecraft.application.workers.weekly_statistics_worker import (
    WeeklyStatisticsWorker,
    create_weekly_statistics_worker,
    next_run_after,
)

__all__ = [
    "WeeklyStatisticsWorker",
    "create_weekly_statistics_worker",
    "next_run_after",
]
