"""Shared logger helpers.

Hey future me - use these so every service logs runs the same way:

    logger = logging.getLogger(__name__)

    async with log_operation(logger, "playlist_regeneration", user_id=str(user_id)):
        ...

    log_worker_health(logger, "weekly_statistics", cycles_completed=4, errors_total=0,
                      uptime_seconds=3600)
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


# Yo, this logs "<operation>.started" and "<operation>.completed" with duration_ms, or
# "<operation>.failed" with the traceback. It RE-RAISES - it only logs, it never handles.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: Any,
) -> AsyncIterator[None]:
    """Log operation start/end with automatic timing.

    Args:
        logger: Module logger
        operation: Operation name (e.g., "weekly_statistics")
        **context: Additional fields to include in logs
    """
    start = time.monotonic()
    logger.info(f"{operation}.started", extra=context)

    try:
        yield
    except Exception as e:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": duration_ms,
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        f"{operation}.completed",
        extra={**context, "duration_ms": duration_ms},
    )


def log_worker_health(
    logger: logging.Logger,
    worker_name: str,
    cycles_completed: int,
    errors_total: int,
    uptime_seconds: float,
    extra_stats: dict[str, Any] | None = None,
) -> None:
    """Log worker health status in consistent format."""
    log_data = {
        "worker": worker_name,
        "cycles_completed": cycles_completed,
        "errors_total": errors_total,
        "uptime_seconds": int(uptime_seconds),
    }
    if extra_stats:
        log_data.update(extra_stats)

    logger.info("worker.health", extra=log_data)
