"""Shared enums for the BuildOps backend.

Enumerations used across the core and the business modules live here so
every layer agrees on the same values.
"""

from enum import Enum


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "dev"
    TESTING = "test"
    STAGING = "staging"
    PRODUCTION = "prod"

    @property
    def is_production(self) -> bool:
        """Check if environment is production."""
        return self == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if environment is development."""
        return self == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """Check if environment is testing."""
        return self == Environment.TESTING

    @property
    def uses_structured_output(self) -> bool:
        """Check if logs should be machine readable."""
        return self in (Environment.STAGING, Environment.PRODUCTION)


class LogLevel(Enum):
    """Logging levels with priority mapping."""

    DEBUG = ("DEBUG", 10)
    INFO = ("INFO", 20)
    WARNING = ("WARNING", 30)
    ERROR = ("ERROR", 40)
    CRITICAL = ("CRITICAL", 50)

    def __init__(self, level_name: str, priority: int):
        self.level_name = level_name
        self.priority = priority

    @classmethod
    def from_string(cls, level_str: str) -> "LogLevel":
        """Create LogLevel from string representation."""
        level_str = level_str.upper()
        for level in cls:
            if level.level_name == level_str:
                return level
        raise ValueError(f"Invalid log level: {level_str}")

    def to_logging_level(self) -> int:
        """Convert to standard logging module level."""
        return self.priority


class LogFormat(Enum):
    """Log output formats."""

    JSON = "json"
    CONSOLE = "console"
    PLAIN = "plain"

    @property
    def is_structured(self) -> bool:
        """Check if format is structured (machine readable)."""
        return self == LogFormat.JSON


class SortDirection(Enum):
    """Sort direction for paginated reads."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_string(cls, value: str) -> "SortDirection":
        """Parse a direction, accepting any casing."""
        try:
            return cls(value.lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Invalid sort direction: {value}") from None

    @property
    def is_descending(self) -> bool:
        return self == SortDirection.DESC


class HealthStatus(Enum):
    """System health status levels."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def is_operational(self) -> bool:
        """Check if status indicates operational system."""
        return self in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)
