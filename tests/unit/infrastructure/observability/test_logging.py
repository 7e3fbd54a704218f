"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from tunecraft.infrastructure.observability.logger_template import (
    log_operation,
    log_worker_health,
)
from tunecraft.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


def _record(msg: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="tunecraft.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        result = set_correlation_id("weekly-run-1")
        assert result == "weekly-run-1"
        assert get_correlation_id() == "weekly-run-1"

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_stamps_record(self):
        set_correlation_id("abc")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "abc"


class TestFormatters:
    """Test the JSON and compact text formatters."""

    def test_json_formatter_adds_fields(self):
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = _record("Playlists regenerated")
        record.correlation_id = "corr-1"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "Playlists regenerated"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "tunecraft.test"
        assert payload["correlation_id"] == "corr-1"

    def test_compact_formatter_shows_root_cause_first(self):
        try:
            try:
                raise KeyError("track")
            except KeyError as e:
                raise RuntimeError("aggregation failed") from e
        except RuntimeError:
            exc_info = sys.exc_info()

        text = CompactExceptionFormatter().formatException(exc_info)

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == ["╰─► KeyError: 'track'", "╰─► RuntimeError: aggregation failed"]


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        configure_logging(log_level="DEBUG", json_format=False)
        assert logging.getLogger("tunecraft").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_replaces_handlers(self):
        """Repeated calls leave exactly one handler."""
        configure_logging(log_level="INFO", json_format=True)
        configure_logging(log_level="INFO", json_format=True)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, CustomJsonFormatter)

    def test_driver_loggers_quieted(self):
        configure_logging(log_level="DEBUG", json_format=False)
        assert logging.getLogger("aiosqlite").level == logging.WARNING


class TestLogOperation:
    """Test the operation timing helper."""

    async def test_logs_started_and_completed(self, caplog):
        caplog.set_level(logging.INFO)
        logger = logging.getLogger("tunecraft.test.ops")

        async with log_operation(logger, "weekly_statistics", week_start="2024-05-13"):
            pass

        messages = [r.getMessage() for r in caplog.records if r.name == logger.name]
        assert messages == ["weekly_statistics.started", "weekly_statistics.completed"]
        completed = [r for r in caplog.records if r.getMessage().endswith("completed")][0]
        assert completed.week_start == "2024-05-13"
        assert completed.duration_ms >= 0

    async def test_logs_failure_and_reraises(self, caplog):
        caplog.set_level(logging.INFO)
        logger = logging.getLogger("tunecraft.test.ops")

        with pytest.raises(ValueError):
            async with log_operation(logger, "playlist_regeneration"):
                raise ValueError("no genres")

        failed = [r for r in caplog.records if r.getMessage() == "playlist_regeneration.failed"]
        assert len(failed) == 1
        assert failed[0].error_type == "ValueError"
        assert failed[0].levelno == logging.ERROR

    def test_worker_health(self, caplog):
        caplog.set_level(logging.INFO)
        logger = logging.getLogger("tunecraft.test.worker")

        log_worker_health(
            logger, "weekly_statistics", 3, 1, 12.7, extra_stats={"next_run_at": "friday"}
        )

        record = caplog.records[-1]
        assert record.getMessage() == "worker.health"
        assert (record.worker, record.cycles_completed, record.uptime_seconds) == (
            "weekly_statistics",
            3,
            12,
        )
        assert record.next_run_at == "friday"
