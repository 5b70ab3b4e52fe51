"""Command middleware.

A middleware is any awaitable callable ``middleware(command, next_handler)``
that returns ``await next_handler(command)`` or raises to short-circuit. The
command dispatcher composes them so the first registered middleware is the
outermost layer:

    [Logging, Validation, Performance] ->
        Logging-before, Validation-before, Performance-before,
        handler,
        Performance-after, Validation-after, Logging-after
"""

import time
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from buildops.core.cqrs.base import Command, utc_now
from buildops.core.cqrs.cache import QueryCache
from buildops.core.cqrs.validation import CommandValidator, ValidationResult
from buildops.core.errors import (
    BuildOpsError,
    CommandValidationError,
    DomainError,
    DuplicateRegistrationError,
    ValidationError,
)
from buildops.core.logging import get_logger

logger = get_logger(__name__)

NextHandler = Callable[[Command], Awaitable[Any]]
Middleware = Callable[[Command, NextHandler], Awaitable[Any]]


def _outcome(result: Any) -> bool:
    """Handlers may report failure through the result instead of raising."""
    return getattr(result, "success", True) is not False


class CommandMiddleware(ABC):
    """Class-based middleware; instances are plain middleware callables."""

    @abstractmethod
    async def execute(self, command: Command, next_handler: NextHandler) -> Any:
        """Run around ``next_handler``."""

    async def __call__(self, command: Command, next_handler: NextHandler) -> Any:
        return await self.execute(command, next_handler)


# =====================================================================================
# LOGGING
# =====================================================================================


class LoggingMiddleware(CommandMiddleware):
    """Logs the start and end of every command; errors are logged and re-raised."""

    def __init__(self, log: Any = None):
        self._logger = log or logger

    async def execute(self, command: Command, next_handler: NextHandler) -> Any:
        command_type = command.type_key()
        self._logger.info(
            "Command started",
            command_type=command_type,
            command_id=command.command_id,
            correlation_id=command.correlation_id,
            user_id=command.user_id,
            timestamp=command.timestamp.isoformat(),
        )

        start = time.perf_counter()
        try:
            result = await next_handler(command)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start) * 1000, 3)
            context = {
                "command_type": command_type,
                "command_id": command.command_id,
                "correlation_id": command.correlation_id,
                "success": False,
                "duration_ms": duration_ms,
                "error_type": type(e).__name__,
                "error": e.message if isinstance(e, BuildOpsError) else str(e),
            }
            if isinstance(e, ValidationError | DomainError):
                self._logger.warning("Command rejected", **context)
            else:
                self._logger.error("Command failed", exc_info=e, **context)
            raise

        self._logger.info(
            "Command completed",
            command_type=command_type,
            command_id=command.command_id,
            correlation_id=command.correlation_id,
            success=_outcome(result),
            duration_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        return result


# =====================================================================================
# VALIDATION
# =====================================================================================


class ValidationMiddleware(CommandMiddleware):
    """
    Runs the validator registered for the command's type.

    A failed validation raises ``CommandValidationError`` and the rest of the
    chain, including the handler, never runs. Commands without a validator
    pass through unchanged.
    """

    def __init__(self):
        self._validators: dict[str, CommandValidator] = {}

    def register_validator(self, command_type: type[Command], validator: CommandValidator) -> None:
        """
        Raises:
            DuplicateRegistrationError: If the type already has a validator
        """
        key = command_type.type_key()
        if key in self._validators:
            raise DuplicateRegistrationError(key, kind="validator")
        self._validators[key] = validator
        logger.debug(
            "Validator registered",
            command_type=key,
            validator=type(validator).__name__,
        )

    def has_validator(self, command_type: type[Command]) -> bool:
        return command_type.type_key() in self._validators

    def list_validators(self) -> list[str]:
        return list(self._validators)

    async def execute(self, command: Command, next_handler: NextHandler) -> Any:
        validator = self._validators.get(command.type_key())
        if validator is not None:
            result: ValidationResult = await validator.validate(command)
            if not result.is_valid:
                raise CommandValidationError(
                    result.errors, correlation_id=command.correlation_id
                )
        return await next_handler(command)


# =====================================================================================
# PERFORMANCE
# =====================================================================================


@dataclass(frozen=True)
class PerformanceMetric:
    """One timed command dispatch."""

    command_type: str
    command_id: str
    duration_ms: float
    success: bool
    slow: bool = False
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "command_type": self.command_type,
            "command_id": self.command_id,
            "duration_ms": self.duration_ms,
            "success": self.success,
            "slow": self.slow,
            "timestamp": self.timestamp.isoformat(),
        }


class PerformanceMonitor(ABC):
    """Sink for command timings."""

    @abstractmethod
    def record_metric(self, metric: PerformanceMetric) -> None:
        """Store one timing."""

    @abstractmethod
    def get_average_execution_time(self, command_type: str | None = None) -> float:
        """Average duration in milliseconds, overall or for one type."""

    @abstractmethod
    def get_slow_commands(self, limit: int = 10) -> list[PerformanceMetric]:
        """Most recent timings flagged as slow."""


class InMemoryPerformanceMonitor(PerformanceMonitor):
    """Keeps the most recent ``max_metrics`` timings in memory."""

    def __init__(self, max_metrics: int = 1000):
        self.max_metrics = max_metrics
        self._metrics: deque[PerformanceMetric] = deque(maxlen=max_metrics)

    def record_metric(self, metric: PerformanceMetric) -> None:
        self._metrics.append(metric)

    def get_metrics(self, command_type: str | None = None) -> list[PerformanceMetric]:
        if command_type is None:
            return list(self._metrics)
        return [m for m in self._metrics if m.command_type == command_type]

    def get_average_execution_time(self, command_type: str | None = None) -> float:
        metrics = self.get_metrics(command_type)
        if not metrics:
            return 0.0
        return sum(m.duration_ms for m in metrics) / len(metrics)

    def get_slow_commands(self, limit: int = 10) -> list[PerformanceMetric]:
        slow = [m for m in self._metrics if m.slow]
        return slow[-limit:]

    def get_summary(self) -> dict[str, Any]:
        metrics = list(self._metrics)
        if not metrics:
            return {
                "total_commands": 0,
                "success_rate": 0.0,
                "average_duration_ms": 0.0,
                "slow_commands": 0,
                "slowest": None,
                "by_type": {},
            }

        by_type: dict[str, dict[str, Any]] = {}
        for metric in metrics:
            stats = by_type.setdefault(
                metric.command_type,
                {"count": 0, "failures": 0, "total_duration_ms": 0.0},
            )
            stats["count"] += 1
            stats["total_duration_ms"] += metric.duration_ms
            if not metric.success:
                stats["failures"] += 1
        for stats in by_type.values():
            stats["average_duration_ms"] = stats.pop("total_duration_ms") / stats["count"]

        successes = sum(1 for m in metrics if m.success)
        return {
            "total_commands": len(metrics),
            "success_rate": successes / len(metrics),
            "average_duration_ms": self.get_average_execution_time(),
            "slow_commands": sum(1 for m in metrics if m.slow),
            "slowest": max(metrics, key=lambda m: m.duration_ms).to_dict(),
            "by_type": by_type,
        }

    def clear(self) -> None:
        self._metrics.clear()


class PerformanceMiddleware(CommandMiddleware):
    """
    Times each dispatch and records exactly one metric for it, whether the
    command succeeds, fails or raises. Durations above the threshold also
    produce a "Slow command detected" warning.
    """

    def __init__(
        self,
        monitor: PerformanceMonitor,
        slow_command_threshold_ms: float = 1000.0,
        log: Any = None,
    ):
        self.monitor = monitor
        self.slow_command_threshold_ms = slow_command_threshold_ms
        self._logger = log or logger

    async def execute(self, command: Command, next_handler: NextHandler) -> Any:
        start = time.perf_counter()
        success = False
        try:
            result = await next_handler(command)
            success = _outcome(result)
            return result
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            slow = duration_ms > self.slow_command_threshold_ms
            self.monitor.record_metric(
                PerformanceMetric(
                    command_type=command.type_key(),
                    command_id=command.command_id,
                    duration_ms=duration_ms,
                    success=success,
                    slow=slow,
                )
            )
            if slow:
                self._logger.warning(
                    "Slow command detected",
                    command_type=command.type_key(),
                    command_id=command.command_id,
                    duration_ms=round(duration_ms, 3),
                    threshold_ms=self.slow_command_threshold_ms,
                )


# =====================================================================================
# QUERY CACHE INVALIDATION
# =====================================================================================


class QueryCacheInvalidationMiddleware(CommandMiddleware):
    """
    Evicts cached reads made stale by a successful command.

    Rules map a command type to cache key patterns, e.g. a rejected quote
    invalidates ``query:quote.get_list:*`` and ``query:quote.get_details:*``.
    Failed or raising commands leave the cache untouched.
    """

    def __init__(self, cache: QueryCache):
        self._cache = cache
        self._rules: dict[str, list[str]] = {}

    def add_rule(self, command_type: type[Command], *patterns: str) -> None:
        self._rules.setdefault(command_type.type_key(), []).extend(patterns)

    def patterns_for(self, command_type: type[Command]) -> list[str]:
        return list(self._rules.get(command_type.type_key(), []))

    async def execute(self, command: Command, next_handler: NextHandler) -> Any:
        result = await next_handler(command)

        patterns = self._rules.get(command.type_key())
        if patterns and _outcome(result):
            evicted = 0
            for pattern in patterns:
                evicted += await self._cache.invalidate(pattern)
            logger.debug(
                "Query cache invalidated",
                command_type=command.type_key(),
                patterns=patterns,
                evicted=evicted,
            )
        return result


__all__ = [
    "CommandMiddleware",
    "InMemoryPerformanceMonitor",
    "LoggingMiddleware",
    "Middleware",
    "NextHandler",
    "PerformanceMetric",
    "PerformanceMiddleware",
    "PerformanceMonitor",
    "QueryCacheInvalidationMiddleware",
    "ValidationMiddleware",
]
