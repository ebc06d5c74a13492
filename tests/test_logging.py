"""
Tests for the logging module.

Tests verify:
- AppErrors under the ``error`` key are rendered as chain records
- configure_logging wires the chain processor and the chosen renderer
- log_error converts foreign values and returns the logged node
- a configured pipeline renders real log lines
"""

import io
import json

import structlog

from errchain.convert import try_catch
from errchain.errors import AppError, NotFoundError
from errchain.logging import configure_logging, error_chain_processor, get_logger, log_error
from errchain.query import iter_chain


class RecordingLogger:
    """Stand-in for a bound logger that records error() calls."""

    def __init__(self):
        self.calls = []

    def error(self, event, **fields):
        self.calls.append((event, fields))


class TestErrorChainProcessor:
    """Test error_chain_processor."""

    def test_renders_app_error(self, user_profile_error):
        event_dict = error_chain_processor(None, "error", {"event": "load_failed", "error": user_profile_error})
        assert event_dict["error"]["kind"] == "AppError"
        assert event_dict["error"]["cause"]["kind"] == "NotFoundError"
        assert event_dict["error.chain"] == user_profile_error.chain()

    def test_leaves_other_values_alone(self):
        event_dict = error_chain_processor(None, "error", {"event": "x", "error": "text"})
        assert event_dict == {"event": "x", "error": "text"}

    def test_without_error_key(self):
        assert error_chain_processor(None, "info", {"event": "x"}) == {"event": "x"}


class TestConfigureLogging:
    """Test configure_logging."""

    def test_json_format(self):
        configure_logging(level="DEBUG", json_format=True, service="orders")
        processors = structlog.get_config()["processors"]
        assert error_chain_processor in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_format(self):
        configure_logging(json_format=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_format_from_settings(self, monkeypatch):
        monkeypatch.setenv("ERRCHAIN_LOG_JSON", "true")
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_chain_processor_runs_before_renderer(self):
        configure_logging(json_format=True)
        processors = structlog.get_config()["processors"]
        assert processors.index(error_chain_processor) < len(processors) - 1


class TestLogError:
    """Test log_error."""

    def test_logs_app_error(self, user_profile_error):
        logger = RecordingLogger()
        node = log_error(user_profile_error, "load_failed", logger=logger, user_id="123")
        assert node is user_profile_error
        assert logger.calls == [("load_failed", {"error": user_profile_error, "user_id": "123"})]

    def test_converts_foreign_value(self):
        logger = RecordingLogger()
        node = log_error(ValueError("bad"), logger=logger)
        assert isinstance(node, AppError)
        assert node.chain() == "[UnexpectedError] bad"
        assert logger.calls[0][0] == "error"

    def test_default_event_name(self):
        logger = RecordingLogger()
        log_error(NotFoundError("User"), logger=logger)
        assert logger.calls[0][0] == "error"


class TestConfiguredOutput:
    """Log calls made after configure_logging render to the configured stream."""

    def test_log_error_renders_json_line(self):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, service="orders", file=stream)

        log_error(NotFoundError("User", "123").wrap("Failed to load user"), "load_failed", user_id="123")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "load_failed"
        assert record["log.level"] == "error"
        assert record["logger"] == "errchain.logging"
        assert record["service.name"] == "orders"
        assert record["user_id"] == "123"
        assert "@timestamp" in record
        assert record["error"]["kind"] == "AppError"
        assert record["error"]["cause"]["kind"] == "NotFoundError"
        assert record["error.chain"] == (
            "[AppError] Failed to load user -> [NotFoundError] User with id '123' not found"
        )

    def test_console_output(self):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=False, file=stream)

        get_logger("orders").info("order_cancelled", order_id="order-1")

        output = stream.getvalue()
        assert "order_cancelled" in output
        assert "order-1" in output

    def test_level_filters_lower_events(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", json_format=True, file=stream)

        get_logger("orders").info("hidden")

        assert stream.getvalue() == ""

    def test_try_catch_at_debug_level(self):
        configure_logging(level="DEBUG", json_format=True, file=io.StringIO())

        result = try_catch(lambda: int("x"))

        assert result.is_err()
        assert result.error.tag == "UnexpectedError"

    def test_cycle_warning_at_debug_level(self):
        configure_logging(level="DEBUG", json_format=True, file=io.StringIO())

        first = ValueError("first")
        second = ValueError("second")
        first.cause = second
        second.cause = first

        assert list(iter_chain(first)) == [first, second]
