# ruff: noqa: A005
"""Structured logging configuration.

Thin layer over structlog used by every BuildOps module:

- LogConfig: logging configuration with environment defaults
- SensitiveDataFilter: masks credentials and personal data before rendering
- StructuredLogger: keyword-structured logger bound to a module name
- LoggerFactory: processor chain set-up and logger caching

Usage:
    logger = get_logger(__name__)
    logger.info("Command started", command_type="SubmitQuoteRequest", command_id=cid)

Note: This module name intentionally shadows the standard library 'logging'
module inside the ``buildops.core`` package.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars

from buildops.core.enums import Environment, LogFormat, LogLevel
from buildops.core.errors import ConfigurationError

# =====================================================================================
# CONFIGURATION
# =====================================================================================


@dataclass
class LogConfig:
    """
    Logging configuration with environment defaults.

    Usage Example:
        config = LogConfig(level=LogLevel.DEBUG, environment=Environment.DEVELOPMENT)
        configure_logging(config)
    """

    level: LogLevel = field(default=LogLevel.INFO)
    format: LogFormat | None = field(default=None)
    environment: Environment = field(default=Environment.DEVELOPMENT)
    service_name: str = field(default="buildops")

    enable_timestamps: bool = field(default=True)
    enable_caller_info: bool = field(default=False)
    enable_sensitive_data_filtering: bool = field(default=True)
    max_message_length: int = field(default=10000)

    def __post_init__(self):
        self.validate()
        self.apply_environment_defaults()

    def validate(self) -> None:
        """
        Validate logging configuration parameters.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.max_message_length < 1000:
            raise ConfigurationError(
                "Maximum message length must be at least 1000 characters"
            )

        if not self.service_name:
            raise ConfigurationError("Service name is required for log records")

    def apply_environment_defaults(self) -> None:
        """Fill in the renderer and verbosity for the environment."""
        if self.format is None:
            self.format = (
                LogFormat.JSON
                if self.environment.uses_structured_output
                else LogFormat.CONSOLE
            )

        if self.environment == Environment.DEVELOPMENT:
            self.enable_caller_info = True
        elif self.environment == Environment.PRODUCTION:
            self.enable_caller_info = False
            self.enable_sensitive_data_filtering = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.level_name,
            "format": self.format.value,
            "environment": self.environment.value,
            "service_name": self.service_name,
            "enable_sensitive_data_filtering": self.enable_sensitive_data_filtering,
        }


# =====================================================================================
# SECURITY FILTER
# =====================================================================================


class SensitiveDataFilter:
    """
    Masks sensitive values in an event dict.

    Field names matching a credential pattern are replaced entirely. Email
    addresses inside string values keep their first character and domain,
    so "alice@example.com" is logged as "a***@example.com".
    """

    def __init__(self, mask: str = "***[MASKED]"):
        self.mask = mask
        self.sensitive_patterns = [
            re.compile(r"password", re.IGNORECASE),
            re.compile(r"token", re.IGNORECASE),
            re.compile(r"secret", re.IGNORECASE),
            re.compile(r"api[_-]?key", re.IGNORECASE),
            re.compile(r"credential", re.IGNORECASE),
            re.compile(r"authorization", re.IGNORECASE),
            re.compile(r"signature", re.IGNORECASE),
            re.compile(r"credit.card", re.IGNORECASE),
        ]
        self.email_pattern = re.compile(
            r"\b([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b"
        )

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        """Return a sanitized copy of the record."""
        filtered: dict[str, Any] = {}

        for key, value in record.items():
            if self._is_sensitive_field(key):
                filtered[key] = None if value is None else self.mask
            else:
                filtered[key] = self._sanitize(value)

        return filtered

    def _sanitize(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.email_pattern.sub(r"\1***@\2", value)
        if isinstance(value, dict):
            return self.filter(value)
        if isinstance(value, list | tuple):
            return [self._sanitize(item) for item in value]
        return value

    def _is_sensitive_field(self, field_name: str) -> bool:
        return any(pattern.search(field_name) for pattern in self.sensitive_patterns)

    def __call__(self, logger: Any, method_name: str, event_dict: dict) -> dict:
        """structlog processor entry point."""
        return self.filter(event_dict)


# =====================================================================================
# STRUCTURED LOGGER
# =====================================================================================


class StructuredLogger:
    """
    Keyword-structured logger bound to a module name.

    Messages below the configured level are dropped before reaching structlog;
    long messages are truncated to ``max_message_length``.
    """

    def __init__(self, name: str, config: LogConfig):
        self.name = name
        self.config = config
        self._logger = structlog.get_logger(name)

    def bind(self, **kwargs: Any) -> "BoundStructuredLogger":
        """Return a logger that adds ``kwargs`` to every record."""
        return BoundStructuredLogger(self, kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at error level with the active traceback attached."""
        kwargs["exc_info"] = True
        self.error(message, **kwargs)

    def _log(self, level: LogLevel, message: str, **kwargs: Any) -> None:
        if level.priority < self.config.level.priority:
            return

        if len(message) > self.config.max_message_length:
            kwargs["original_message_length"] = len(message)
            message = message[: self.config.max_message_length] + "... [TRUNCATED]"

        getattr(self._logger, level.level_name.lower())(message, **kwargs)


class BoundStructuredLogger:
    """StructuredLogger view with fixed extra fields."""

    def __init__(self, parent: StructuredLogger, context: dict[str, Any]):
        self._parent = parent
        self._context = context

    def bind(self, **kwargs: Any) -> "BoundStructuredLogger":
        return BoundStructuredLogger(self._parent, {**self._context, **kwargs})

    def __getattr__(self, method: str):
        if method not in ("debug", "info", "warning", "error", "critical", "exception"):
            raise AttributeError(method)
        log_method = getattr(self._parent, method)

        def emit(message: str, **kwargs: Any) -> None:
            log_method(message, **{**self._context, **kwargs})

        return emit


# =====================================================================================
# LOGGER FACTORY
# =====================================================================================


class LoggerFactory:
    """Creates loggers and installs the structlog processor chain once."""

    def __init__(self, config: LogConfig):
        self.config = config
        self._loggers: dict[str, StructuredLogger] = {}
        self._configured = False

    def configure_logging(self) -> None:
        """Configure structlog and the standard library root logger."""
        if self._configured:
            return

        processors: list[Any] = [
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
        ]

        if self.config.enable_timestamps:
            processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

        if self.config.enable_caller_info:
            processors.append(
                structlog.processors.CallsiteParameterAdder(
                    parameters=[
                        structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                        structlog.processors.CallsiteParameter.FUNC_NAME,
                    ]
                )
            )

        processors.extend(
            [
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
            ]
        )

        if self.config.enable_sensitive_data_filtering:
            processors.append(SensitiveDataFilter())

        if self.config.format == LogFormat.JSON:
            processors.append(structlog.processors.JSONRenderer())
        elif self.config.format == LogFormat.CONSOLE:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self.config.level.to_logging_level(),
        )
        logging.getLogger().setLevel(self.config.level.to_logging_level())

        if self.config.environment == Environment.PRODUCTION:
            logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
            logging.getLogger("httpx").setLevel(logging.WARNING)

        self._configured = True

    def get_logger(self, name: str) -> StructuredLogger:
        """Get or create structured logger."""
        if not self._configured:
            self.configure_logging()

        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name, self.config)

        return self._loggers[name]


# =====================================================================================
# GLOBAL CONFIGURATION AND FACTORY
# =====================================================================================

_logger_factory: LoggerFactory | None = None


def configure_logging(config: LogConfig | None = None) -> None:
    """
    Configure the logging system.

    Calling again without a config keeps the current set-up; passing a config
    replaces it.

    Args:
        config: Logging configuration (read from settings if not provided)
    """
    global _logger_factory  # noqa: PLW0603

    if config is None:
        if _logger_factory is not None:
            return

        from buildops.core.config import get_settings

        settings = get_settings()
        config = LogConfig(
            level=settings.log_level,
            format=settings.log_format,
            environment=settings.environment,
            enable_sensitive_data_filtering=settings.mask_sensitive_data,
        )

    factory = LoggerFactory(config)
    factory.configure_logging()

    # Loggers handed out earlier keep working with the new level
    if _logger_factory is not None:
        for name, logger in _logger_factory._loggers.items():
            logger.config = config
            factory._loggers[name] = logger

    _logger_factory = factory


def get_logger(name: str) -> StructuredLogger:
    """
    Get structured logger instance.

    Args:
        name: Logger name (usually __name__)
    """
    if _logger_factory is None:
        configure_logging()

    return _logger_factory.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """Add context variables to all subsequent logs in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "BoundStructuredLogger",
    "LogConfig",
    "LoggerFactory",
    "SensitiveDataFilter",
    "StructuredLogger",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_context",
]
