"""Unit tests for logging infrastructure."""
from __future__ import annotations

import json
import logging
import sys

import pytest

from keyset_pagination.core.settings import LoggingSettings
from keyset_pagination.infra.logging import (
    JSONFormatter,
    LazyLoggerAdapter,
    LazyString,
    configure_logging,
    get_lazy_logger,
    lazy,
    setup_logging,
)
from keyset_pagination.infra.logging import config as logging_config


def _record(msg: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("keyset_pagination.test", level, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)
    logging_config._LOGGING_INITIALIZED = False


@pytest.mark.unit
class TestLazyLogging:
    """Tests for the lazy logger adapter."""

    def test_callable_not_evaluated_when_disabled(self):
        logger = get_lazy_logger("keyset_pagination.test.lazy_disabled")
        logger.logger.setLevel(logging.INFO)
        calls = []

        logger.debug(lambda: calls.append("called") or "msg")

        assert calls == []

    def test_callable_evaluated_when_enabled(self, caplog):
        logger = get_lazy_logger("keyset_pagination.test.lazy_enabled")

        with caplog.at_level(logging.DEBUG, logger="keyset_pagination.test.lazy_enabled"):
            logger.debug(lambda: "computed message")

        assert "computed message" in caplog.text

    def test_callable_arguments(self, caplog):
        logger = get_lazy_logger("keyset_pagination.test.lazy_args")

        with caplog.at_level(logging.INFO, logger="keyset_pagination.test.lazy_args"):
            logger.info("rows=%s", lambda: 3)

        assert "rows=3" in caplog.text

    def test_bound_context_merged_into_extra(self, caplog):
        logger = get_lazy_logger("keyset_pagination.test.lazy_ctx", component="paginator")

        with caplog.at_level(logging.INFO, logger="keyset_pagination.test.lazy_ctx"):
            logger.info("hello", extra={"operation": "pagination.paginate"})

        record = caplog.records[-1]
        assert record.component == "paginator"
        assert record.operation == "pagination.paginate"

    def test_get_lazy_logger_type(self):
        assert isinstance(get_lazy_logger("x"), LazyLoggerAdapter)

    def test_lazy_string(self):
        calls = []
        value = lazy(lambda: calls.append(1) or "text")

        assert isinstance(value, LazyString)
        assert calls == []
        assert str(value) == "text"
        assert calls == [1]


@pytest.mark.unit
class TestJSONFormatter:
    """Tests for the JSON Lines formatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record("Page served")))

        assert data["level"] == "INFO"
        assert data["logger"] == "keyset_pagination.test"
        assert data["message"] == "Page served"
        assert data["timestamp"].endswith("Z")

    def test_extras_and_static_fields(self):
        formatter = JSONFormatter(static={"service": "keyset-pagination"})

        data = json.loads(
            formatter.format(_record(operation="pagination.decode_cursor", strategy="by_name"))
        )

        assert data["service"] == "keyset-pagination"
        assert data["operation"] == "pagination.decode_cursor"
        assert data["strategy"] == "by_name"
        assert "msg" not in data
        assert "pathname" not in data

    def test_exception_stays_on_one_line(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "ValueError: boom" in json.loads(output)["exception"]

    def test_custom_keys(self):
        formatter = JSONFormatter(fmt_keys={"lvl": "levelname", "msg_text": "message"})

        data = json.loads(formatter.format(_record("x")))

        assert data["lvl"] == "INFO"
        assert data["msg_text"] == "x"

    def test_non_serializable_extra(self):
        data = json.loads(JSONFormatter().format(_record(obj=object())))

        assert data["obj"].startswith("<object object")


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for handler installation."""

    def test_json_handler(self, restore_root_logger):
        configure_logging(log_level="WARNING", json_logs=True, static_fields={"service": "svc"})

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, JSONFormatter)
        assert formatter.static == {"service": "svc"}

    def test_text_handler(self, restore_root_logger):
        configure_logging(log_level="DEBUG", json_logs=False)

        formatter = restore_root_logger.handlers[0].formatter
        assert not isinstance(formatter, JSONFormatter)

    def test_setup_logging_from_settings(self, restore_root_logger):
        setup_logging(LoggingSettings(level="ERROR", json_logs=True, service_name="svc"))

        assert restore_root_logger.level == logging.ERROR
        assert restore_root_logger.handlers[0].formatter.static == {"service": "svc"}

    def test_setup_logging_runs_once(self, restore_root_logger):
        setup_logging(LoggingSettings(level="ERROR"))
        setup_logging(LoggingSettings(level="DEBUG"))

        assert restore_root_logger.level == logging.ERROR

        setup_logging(LoggingSettings(level="DEBUG"), force=True)

        assert restore_root_logger.level == logging.DEBUG
