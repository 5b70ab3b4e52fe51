"""
Tests for the command middleware chain.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from buildops.core.cqrs.base import Command, CommandResult
from buildops.core.cqrs.cache import InMemoryQueryCache
from buildops.core.cqrs.dispatchers import CommandDispatcher
from buildops.core.cqrs.middleware import (
    InMemoryPerformanceMonitor,
    LoggingMiddleware,
    PerformanceMetric,
    PerformanceMiddleware,
    QueryCacheInvalidationMiddleware,
    ValidationMiddleware,
)
from buildops.core.cqrs.validation import CommandValidator, FieldRules, ValidationResult
from buildops.core.errors import (
    BusinessRuleViolationError,
    CommandValidationError,
    DuplicateRegistrationError,
    FieldError,
)


class RecordNoteCommand(Command):
    message_type = "test.record_note"

    def __init__(self, text: str = "a valid note", **kwargs):
        super().__init__(**kwargs)
        self.text = text
        self._freeze()


class RecordNoteValidator(CommandValidator[RecordNoteCommand]):
    async def validate(self, command: RecordNoteCommand) -> ValidationResult:
        rules = FieldRules()
        if rules.required("text", command.text, "Text is required"):
            rules.length("text", command.text, minimum=10, label="Text")
        return rules.result()


def spy_middleware(name: str, calls: list[str], fail: bool = False):
    async def middleware(command, next_handler):
        calls.append(f"{name}-before")
        if fail:
            raise BusinessRuleViolationError(f"{name} refused the command")
        result = await next_handler(command)
        calls.append(f"{name}-after")
        return result

    return middleware


@pytest.fixture
def handler():
    handler = Mock()
    handler.handle = AsyncMock(
        side_effect=lambda command: CommandResult.ok(command.command_id, {"ok": True})
    )
    return handler


class TestMiddlewareOrdering:
    """Test suite for how the dispatcher composes middleware."""

    @pytest.mark.asyncio
    async def test_first_registered_is_outermost(self, handler):
        """Test before/after hooks nest around the handler."""
        calls: list[str] = []

        async def recording_handle(command):
            calls.append("handler")
            return CommandResult.ok(command.command_id)

        handler.handle = AsyncMock(side_effect=recording_handle)
        dispatcher = CommandDispatcher(
            middlewares=[spy_middleware(name, calls) for name in ("A", "B", "C")]
        )
        dispatcher.register(RecordNoteCommand, handler)

        await dispatcher.dispatch(RecordNoteCommand())

        assert calls == [
            "A-before",
            "B-before",
            "C-before",
            "handler",
            "C-after",
            "B-after",
            "A-after",
        ]

    @pytest.mark.asyncio
    async def test_short_circuit_stops_the_chain(self, handler):
        """Test a raising middleware prevents inner layers and the handler."""
        calls: list[str] = []
        dispatcher = CommandDispatcher(
            middlewares=[
                spy_middleware("A", calls),
                spy_middleware("B", calls),
                spy_middleware("C", calls, fail=True),
            ]
        )
        dispatcher.register(RecordNoteCommand, handler)

        with pytest.raises(BusinessRuleViolationError):
            await dispatcher.dispatch(RecordNoteCommand())

        assert calls == ["A-before", "B-before", "C-before"]
        handler.handle.assert_not_called()

    @pytest.mark.asyncio
    async def test_added_middleware_becomes_innermost(self, handler):
        calls: list[str] = []
        dispatcher = CommandDispatcher(middlewares=[spy_middleware("A", calls)])
        dispatcher.add_middleware(spy_middleware("B", calls))
        dispatcher.register(RecordNoteCommand, handler)

        await dispatcher.dispatch(RecordNoteCommand())

        assert calls == ["A-before", "B-before", "B-after", "A-after"]
        assert len(dispatcher.middlewares) == 2


class TestValidationMiddleware:
    """Test suite for ValidationMiddleware."""

    @pytest.fixture
    def validation(self):
        middleware = ValidationMiddleware()
        middleware.register_validator(RecordNoteCommand, RecordNoteValidator())
        return middleware

    @pytest.mark.asyncio
    async def test_invalid_command_never_reaches_handler(self, validation, handler):
        """Test validation fails closed."""
        dispatcher = CommandDispatcher(middlewares=[validation])
        dispatcher.register(RecordNoteCommand, handler)

        with pytest.raises(CommandValidationError) as exc_info:
            await dispatcher.dispatch(RecordNoteCommand(text="short"))

        assert exc_info.value.errors == [
            FieldError("text", "Text must be at least 10 characters", "MIN_LENGTH")
        ]
        assert handler.handle.call_count == 0

    @pytest.mark.asyncio
    async def test_valid_command_passes_through(self, validation, handler):
        dispatcher = CommandDispatcher(middlewares=[validation])
        dispatcher.register(RecordNoteCommand, handler)

        result = await dispatcher.dispatch(RecordNoteCommand())

        assert result.success is True
        handler.handle.assert_awaited_once()

    def test_duplicate_validator_rejected(self, validation):
        with pytest.raises(DuplicateRegistrationError):
            validation.register_validator(RecordNoteCommand, RecordNoteValidator())

    def test_list_validators(self, validation):
        assert validation.has_validator(RecordNoteCommand)
        assert validation.list_validators() == ["test.record_note"]


class TestPerformanceMiddleware:
    """Test suite for PerformanceMiddleware."""

    @pytest.mark.asyncio
    async def test_records_exactly_one_metric_on_success(self, handler):
        monitor = InMemoryPerformanceMonitor()
        dispatcher = CommandDispatcher(middlewares=[PerformanceMiddleware(monitor)])
        dispatcher.register(RecordNoteCommand, handler)

        command = RecordNoteCommand()
        await dispatcher.dispatch(command)

        metrics = monitor.get_metrics()
        assert len(metrics) == 1
        assert metrics[0].command_id == command.command_id
        assert metrics[0].command_type == "test.record_note"
        assert metrics[0].success is True

    @pytest.mark.asyncio
    async def test_records_failure_result(self, handler):
        """Test a handler reporting failure is recorded as unsuccessful."""
        handler.handle = AsyncMock(
            side_effect=lambda command: CommandResult.failure(
                command.command_id, [FieldError("x", "bad", "INVALID_VALUE")]
            )
        )
        monitor = InMemoryPerformanceMonitor()
        dispatcher = CommandDispatcher(middlewares=[PerformanceMiddleware(monitor)])
        dispatcher.register(RecordNoteCommand, handler)

        await dispatcher.dispatch(RecordNoteCommand())

        assert [m.success for m in monitor.get_metrics()] == [False]

    @pytest.mark.asyncio
    async def test_records_exactly_one_metric_when_handler_raises(self, handler):
        handler.handle = AsyncMock(side_effect=RuntimeError("boom"))
        monitor = InMemoryPerformanceMonitor()
        dispatcher = CommandDispatcher(middlewares=[PerformanceMiddleware(monitor)])
        dispatcher.register(RecordNoteCommand, handler)

        with pytest.raises(RuntimeError):
            await dispatcher.dispatch(RecordNoteCommand())

        metrics = monitor.get_metrics()
        assert len(metrics) == 1
        assert metrics[0].success is False

    @pytest.mark.asyncio
    async def test_slow_command_warning(self, handler):
        """Test durations above the threshold are flagged and logged."""
        log = Mock()
        monitor = InMemoryPerformanceMonitor()
        middleware = PerformanceMiddleware(monitor, slow_command_threshold_ms=0.000001, log=log)
        dispatcher = CommandDispatcher(middlewares=[middleware])
        dispatcher.register(RecordNoteCommand, handler)

        await dispatcher.dispatch(RecordNoteCommand())

        assert monitor.get_slow_commands()[0].slow is True
        assert log.warning.call_args.args[0] == "Slow command detected"


class TestInMemoryPerformanceMonitor:
    """Test suite for InMemoryPerformanceMonitor."""

    def test_keeps_most_recent_metrics(self):
        monitor = InMemoryPerformanceMonitor(max_metrics=2)
        for index in range(3):
            monitor.record_metric(PerformanceMetric("test.a", f"c{index}", 10.0, True))

        assert [m.command_id for m in monitor.get_metrics()] == ["c1", "c2"]

    def test_summary(self):
        monitor = InMemoryPerformanceMonitor()
        monitor.record_metric(PerformanceMetric("test.a", "c1", 10.0, True))
        monitor.record_metric(PerformanceMetric("test.a", "c2", 30.0, False, slow=True))
        monitor.record_metric(PerformanceMetric("test.b", "c3", 20.0, True))

        summary = monitor.get_summary()

        assert summary["total_commands"] == 3
        assert summary["success_rate"] == pytest.approx(2 / 3)
        assert summary["average_duration_ms"] == pytest.approx(20.0)
        assert summary["slow_commands"] == 1
        assert summary["slowest"]["command_id"] == "c2"
        assert summary["by_type"]["test.a"] == {
            "count": 2,
            "failures": 1,
            "average_duration_ms": 20.0,
        }
        assert monitor.get_average_execution_time("test.b") == 20.0

    def test_empty_summary(self):
        assert InMemoryPerformanceMonitor().get_summary()["total_commands"] == 0


class TestLoggingMiddleware:
    """Test suite for LoggingMiddleware."""

    @pytest.mark.asyncio
    async def test_logs_start_and_completion(self, handler):
        log = Mock()
        dispatcher = CommandDispatcher(middlewares=[LoggingMiddleware(log)])
        dispatcher.register(RecordNoteCommand, handler)

        command = RecordNoteCommand(correlation_id="corr-7")
        await dispatcher.dispatch(command)

        messages = [call.args[0] for call in log.info.call_args_list]
        assert messages == ["Command started", "Command completed"]
        completed = log.info.call_args_list[1].kwargs
        assert completed["command_id"] == command.command_id
        assert completed["correlation_id"] == "corr-7"
        assert completed["success"] is True

    @pytest.mark.asyncio
    async def test_domain_rejection_logged_as_warning(self, handler):
        handler.handle = AsyncMock(side_effect=BusinessRuleViolationError("Not allowed"))
        log = Mock()
        dispatcher = CommandDispatcher(middlewares=[LoggingMiddleware(log)])
        dispatcher.register(RecordNoteCommand, handler)

        with pytest.raises(BusinessRuleViolationError):
            await dispatcher.dispatch(RecordNoteCommand())

        assert log.warning.call_args.args[0] == "Command rejected"
        log.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_error_logged_and_reraised(self, handler):
        handler.handle = AsyncMock(side_effect=RuntimeError("boom"))
        log = Mock()
        dispatcher = CommandDispatcher(middlewares=[LoggingMiddleware(log)])
        dispatcher.register(RecordNoteCommand, handler)

        with pytest.raises(RuntimeError):
            await dispatcher.dispatch(RecordNoteCommand())

        assert log.error.call_args.args[0] == "Command failed"
        assert log.error.call_args.kwargs["error_type"] == "RuntimeError"


class TestQueryCacheInvalidationMiddleware:
    """Test suite for QueryCacheInvalidationMiddleware."""

    @pytest.mark.asyncio
    async def test_successful_command_evicts_mapped_patterns(self, handler):
        cache = InMemoryQueryCache()
        await cache.set("query:notes.list:a", 1)
        await cache.set("query:other.list:b", 2)
        middleware = QueryCacheInvalidationMiddleware(cache)
        middleware.add_rule(RecordNoteCommand, "query:notes.list:*")
        dispatcher = CommandDispatcher(middlewares=[middleware])
        dispatcher.register(RecordNoteCommand, handler)

        await dispatcher.dispatch(RecordNoteCommand())

        assert cache.keys() == ["query:other.list:b"]
        assert middleware.patterns_for(RecordNoteCommand) == ["query:notes.list:*"]

    @pytest.mark.asyncio
    async def test_failed_command_keeps_cache(self, handler):
        handler.handle = AsyncMock(side_effect=BusinessRuleViolationError("Not allowed"))
        cache = InMemoryQueryCache()
        await cache.set("query:notes.list:a", 1)
        middleware = QueryCacheInvalidationMiddleware(cache)
        middleware.add_rule(RecordNoteCommand, "query:notes.list:*")
        dispatcher = CommandDispatcher(middlewares=[middleware])
        dispatcher.register(RecordNoteCommand, handler)

        with pytest.raises(BusinessRuleViolationError):
            await dispatcher.dispatch(RecordNoteCommand())

        assert cache.size == 1
