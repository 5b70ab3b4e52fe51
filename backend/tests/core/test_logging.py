"""
Tests for the structured logging layer.
"""

from unittest.mock import Mock

import pytest

from buildops.core.enums import Environment, LogFormat, LogLevel
from buildops.core.errors import ConfigurationError
from buildops.core.logging import LogConfig, SensitiveDataFilter, StructuredLogger


class TestSensitiveDataFilter:
    """Test suite for SensitiveDataFilter."""

    @pytest.fixture
    def data_filter(self):
        return SensitiveDataFilter()

    def test_credential_fields_masked(self, data_filter):
        record = {
            "event": "Signed URL issued",
            "signing_secret": "abc",
            "api_key": "k",
            "Authorization": "Bearer x",
            "token": None,
        }

        filtered = data_filter.filter(record)

        assert filtered["signing_secret"] == "***[MASKED]"
        assert filtered["api_key"] == "***[MASKED]"
        assert filtered["Authorization"] == "***[MASKED]"
        assert filtered["token"] is None
        assert filtered["event"] == "Signed URL issued"

    def test_emails_partially_masked(self, data_filter):
        """Test addresses keep their first character and domain."""
        filtered = data_filter.filter(
            {"event": "Notification sent to alice@example.com", "to": ["bob@builder.io"]}
        )

        assert filtered["event"] == "Notification sent to a***@example.com"
        assert filtered["to"] == ["b***@builder.io"]

    def test_nested_values(self, data_filter):
        filtered = data_filter.filter({"payload": {"password": "p", "name": "Alice"}})

        assert filtered["payload"] == {"password": "***[MASKED]", "name": "Alice"}

    def test_processor_interface(self, data_filter):
        assert data_filter(None, "info", {"secret": "s"}) == {"secret": "***[MASKED]"}


class TestLogConfig:
    """Test suite for LogConfig."""

    def test_format_follows_environment(self):
        assert LogConfig(environment=Environment.PRODUCTION).format == LogFormat.JSON
        assert LogConfig(environment=Environment.DEVELOPMENT).format == LogFormat.CONSOLE
        assert LogConfig(format=LogFormat.PLAIN).format == LogFormat.PLAIN

    def test_production_forces_filtering(self):
        config = LogConfig(
            environment=Environment.PRODUCTION, enable_sensitive_data_filtering=False
        )

        assert config.enable_sensitive_data_filtering is True
        assert config.enable_caller_info is False

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            LogConfig(max_message_length=10)
        with pytest.raises(ConfigurationError):
            LogConfig(service_name="")


class TestStructuredLogger:
    """Test suite for StructuredLogger."""

    @pytest.fixture
    def logger(self):
        logger = StructuredLogger("tests", LogConfig(level=LogLevel.INFO))
        logger._logger = Mock()
        return logger

    def test_below_level_dropped(self, logger):
        logger.debug("noise")
        logger.info("Command started", command_type="quote.submit_request")

        logger._logger.debug.assert_not_called()
        logger._logger.info.assert_called_once_with(
            "Command started", command_type="quote.submit_request"
        )

    def test_long_messages_truncated(self, logger):
        logger.warning("x" * 20000)

        message = logger._logger.warning.call_args.args[0]
        kwargs = logger._logger.warning.call_args.kwargs
        assert message.endswith("... [TRUNCATED]")
        assert kwargs["original_message_length"] == 20000

    def test_bound_logger_adds_context(self, logger):
        bound = logger.bind(quote_id="q-1")

        bound.error("Quote update failed", reason="conflict")

        logger._logger.error.assert_called_once_with(
            "Quote update failed", quote_id="q-1", reason="conflict"
        )

    def test_exception_attaches_traceback(self, logger):
        logger.exception("Handler crashed")

        assert logger._logger.error.call_args.kwargs["exc_info"] is True
