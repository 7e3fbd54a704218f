"""Application lifecycle management for startup and shutdown tasks.

This module wires settings, logging, the database, the services and the weekly
statistics worker into a TuneCraftApp, and tears them down again in reverse order.
A request layer or a CLI enters ``lifespan()`` once and calls into the app it yields.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field
from datetime import datetime

from tunecraft.application.services import (
    ArtistSimilarityService,
    GenreAffinityService,
    ListeningService,
    PlaylistRecommendationService,
    PlaylistService,
    WeeklyStatisticsService,
)
from tunecraft.application.workers import (
    WeeklyStatisticsWorker,
    create_weekly_statistics_worker,
)
from tunecraft.config import Settings, get_settings
from tunecraft.domain.dtos import PlaylistSummary, WeeklyStatisticsReport
from tunecraft.domain.exceptions import ConfigurationError
from tunecraft.domain.ports import IUnitOfWork
from tunecraft.domain.value_objects import UserId
from tunecraft.infrastructure.observability import (
    configure_logging,
    set_correlation_id,
)
from tunecraft.infrastructure.persistence import Database, SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

WORKER_SHUTDOWN_TIMEOUT = 10.0


# Hey future me, this validates SQLite paths BEFORE we create the engine! SQLite needs to
# create the -journal/-wal files next to the .db file, so the parent directory must exist and
# be writable. We DON'T pre-create the .db file - SQLite does that on first connect.
# Returns early for non-SQLite URLs and in-memory databases.
def _validate_sqlite_path(settings: Settings) -> None:
    """Validate SQLite database path accessibility before engine creation."""
    db_path = settings._get_sqlite_db_path()
    if db_path is None:
        return

    try:
        if db_path.parent and str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Ensured SQLite parent directory exists: %s", db_path.parent)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update TUNECRAFT_DATABASE__URL or adjust directory permissions."
        ) from exc

    try:
        test_file = db_path.parent / f".{db_path.stem}_write_test"
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to write files in database directory '{db_path.parent}': {exc}. "
            "SQLite requires write permissions to create database and journal files."
        ) from exc


@dataclass
class TuneCraftApp:
    """Running application: database, services and the statistics worker."""

    settings: Settings
    db: Database
    affinity: GenreAffinityService
    similarity: ArtistSimilarityService
    recommendations: PlaylistRecommendationService
    statistics: WeeklyStatisticsService
    listening: ListeningService
    playlists: PlaylistService
    statistics_worker: WeeklyStatisticsWorker | None = None
    _worker_task: asyncio.Task[None] | None = field(default=None, repr=False)

    def unit_of_work(self) -> IUnitOfWork:
        """Create a fresh unit of work bound to the app's database."""
        return SqlAlchemyUnitOfWork(self.db.session_factory)

    async def generate_playlists(
        self, user_id: UserId, now: datetime | None = None
    ) -> list[PlaylistSummary]:
        """On-demand playlist regeneration for one user."""
        set_correlation_id()
        return await self.recommendations.generate_recommended_playlists(user_id, now)

    async def run_weekly_statistics(
        self, now: datetime | None = None
    ) -> WeeklyStatisticsReport:
        """On-demand weekly statistics run, outside the worker schedule."""
        set_correlation_id()
        return await self.statistics.generate_weekly_statistics(now)


def build_app(settings: Settings, db: Database) -> TuneCraftApp:
    """Wire services and worker around an open database."""

    def uow_factory() -> IUnitOfWork:
        return SqlAlchemyUnitOfWork(db.session_factory)

    statistics = WeeklyStatisticsService(uow_factory, settings.recommendation)
    worker = (
        create_weekly_statistics_worker(statistics, settings.statistics)
        if settings.statistics.enabled
        else None
    )
    return TuneCraftApp(
        settings=settings,
        db=db,
        affinity=GenreAffinityService(uow_factory, settings.recommendation),
        similarity=ArtistSimilarityService(uow_factory, settings.recommendation),
        recommendations=PlaylistRecommendationService(
            uow_factory, settings.recommendation
        ),
        statistics=statistics,
        listening=ListeningService(uow_factory),
        playlists=PlaylistService(uow_factory),
        statistics_worker=worker,
    )


# Listen future me, everything before `yield` is STARTUP, everything after is SHUTDOWN. The
# try/finally makes sure the worker is stopped and the engine disposed even if startup
# crashed halfway. create_schema=True is for tests and first runs; production uses Alembic.
@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    create_schema: bool = False,
    start_worker: bool = True,
) -> AsyncGenerator[TuneCraftApp, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks including:
    - Logging configuration
    - SQLite path validation
    - Database initialization
    - Weekly statistics worker startup
    - Resource cleanup
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    db: Database | None = None
    app: TuneCraftApp | None = None
    try:
        try:
            _validate_sqlite_path(settings)
        except ConfigurationError as e:
            logger.error("SQLite path validation failed: %s", e)
            raise

        db = Database(settings)
        logger.info("Database initialized: %s", settings.database.url)
        if create_schema:
            await db.create_tables()
            logger.info("Database schema created")

        app = build_app(settings, db)

        if start_worker and app.statistics_worker is not None:
            app._worker_task = asyncio.create_task(
                app.statistics_worker.start(), name="weekly_statistics_worker"
            )
            logger.info("Weekly statistics worker scheduled")
        else:
            logger.info("Weekly statistics worker disabled")

        yield app

    except Exception as e:
        logger.exception("Error during application lifetime: %s", e)
        raise
    finally:
        logger.info("Shutting down application")

        worker = app.statistics_worker if app is not None else None
        worker_task = app._worker_task if app is not None else None
        if worker is not None and worker_task is not None:
            try:
                worker.stop()
                try:
                    await asyncio.wait_for(worker_task, timeout=WORKER_SHUTDOWN_TIMEOUT)
                except TimeoutError:
                    worker_task.cancel()
                    with suppress(asyncio.CancelledError):
                        await worker_task
                logger.info("Weekly statistics worker stopped")
            except Exception as e:
                logger.exception("Error stopping weekly statistics worker: %s", e)

        if db is not None:
            try:
                await db.close()
                logger.info("Database connection closed")
            except Exception as e:
                logger.exception("Error closing database: %s", e)
