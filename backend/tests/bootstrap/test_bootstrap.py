"""
Tests for the composition root.
"""

import pytest

from buildops.bootstrap import bootstrap
from buildops.core.config import Settings
from buildops.core.cqrs.cache import InMemoryQueryCache
from buildops.core.cqrs.middleware import (
    InMemoryPerformanceMonitor,
    LoggingMiddleware,
    PerformanceMiddleware,
    QueryCacheInvalidationMiddleware,
    ValidationMiddleware,
)
from buildops.core.monitoring import PrometheusPerformanceMonitor
from buildops.infrastructure import LoggingNotificationService
from buildops.modules.quote.application.queries import GetQuoteDetailsQuery, GetQuoteListQuery
from buildops.modules.quote.infrastructure import InMemoryQuoteRepository


class TestBootstrap:
    """Test suite for bootstrap()."""

    def test_middleware_order(self, container):
        """Test middleware runs logging, validation, timing, then invalidation."""
        kinds = [type(middleware) for middleware in container.command_dispatcher.middlewares]

        assert kinds == [
            LoggingMiddleware,
            ValidationMiddleware,
            PerformanceMiddleware,
            QueryCacheInvalidationMiddleware,
        ]

    def test_every_message_type_registered(self, container):
        commands = set(container.command_dispatcher.list_registered())
        queries = set(container.query_dispatcher.list_registered())

        assert {
            "quote.submit_request",
            "quote.move_to_review",
            "quote.send",
            "quote.update_priority",
            "quote.reject",
            "quote.accept",
            "job_application.submit",
            "job_application.withdraw",
        } <= commands
        assert {
            "quote.get_list",
            "quote.get_details",
            "quote.get_service_types",
            "quote.get_status",
            "quote.get_dashboard_summary",
            "job_application.get_list",
            "job_application.get_details",
        } <= queries

    def test_validators_registered(self, container):
        assert "quote.submit_request" in container.validation.list_validators()
        assert "job_application.submit" in container.validation.list_validators()

    def test_containers_are_independent(self, settings):
        """Test each call wires a fresh graph with its own state."""
        first = bootstrap(settings)
        second = bootstrap(settings)

        assert first.command_dispatcher is not second.command_dispatcher
        assert first.query_cache is not second.query_cache
        assert first.quote_repository is not second.quote_repository
        assert first.prometheus_registry is not second.prometheus_registry

    @pytest.mark.asyncio
    async def test_injected_collaborators_are_used(self, settings, quote_request):
        repository = InMemoryQuoteRepository()
        notifications = LoggingNotificationService()
        cache = InMemoryQueryCache(default_ttl=30)

        container = bootstrap(
            settings,
            quote_repository=repository,
            notification_service=notifications,
            query_cache=cache,
        )
        result = await container.quotes.submit_quote_request(**quote_request)
        await container.quotes.get_quote_list()

        assert await repository.find_by_id(result.data["quote_id"]) is not None
        assert notifications.messages_to("alice@example.com")
        assert cache.size == 1

    def test_prometheus_monitor_by_default(self, container):
        assert isinstance(container.performance_monitor, PrometheusPerformanceMonitor)
        assert container.prometheus_registry is container.performance_monitor.registry

    def test_in_memory_monitor_when_metrics_disabled(self, monkeypatch):
        monkeypatch.setenv("BUILDOPS_DISPATCH_ENABLE_PROMETHEUS_METRICS", "false")

        container = bootstrap(Settings(env_file=None))

        assert type(container.performance_monitor) is InMemoryPerformanceMonitor
        assert container.prometheus_registry is None

    def test_cache_settings_applied(self, monkeypatch):
        monkeypatch.setenv("BUILDOPS_CACHE_NON_CACHEABLE", "quote.get_list")

        container = bootstrap(Settings(env_file=None))

        assert container.query_dispatcher.policy.is_cacheable(GetQuoteListQuery) is False
        assert container.query_dispatcher.policy.is_cacheable(GetQuoteDetailsQuery) is True
