"""
Bootstrap module for initializing the entire application.

``bootstrap()`` is the composition root: it builds the collaborators, the
command middleware chain and both dispatchers, registers every business
module and returns them in one immutable container. Each call builds a
fresh, independent graph; nothing is kept at module level.

Usage Example:
    container = bootstrap(Settings(env_file=None))
    result = await container.quotes.submit_quote_request(...)
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry

from buildops.bootstrap.hiring_bootstrap import register_hiring_module
from buildops.bootstrap.quote_bootstrap import register_quote_module
from buildops.core.config import Settings, get_settings
from buildops.core.cqrs.cache import InMemoryQueryCache, QueryCache, QueryCachePolicy
from buildops.core.cqrs.dispatchers import CommandDispatcher, QueryDispatcher
from buildops.core.cqrs.middleware import (
    InMemoryPerformanceMonitor,
    LoggingMiddleware,
    PerformanceMiddleware,
    PerformanceMonitor,
    QueryCacheInvalidationMiddleware,
    ValidationMiddleware,
)
from buildops.core.domain.ports import (
    DomainEventPublisher,
    FileStorageService,
    NotificationService,
)
from buildops.core.logging import get_logger
from buildops.core.monitoring import PrometheusPerformanceMonitor
from buildops.infrastructure import (
    InMemoryEventPublisher,
    InMemoryFileStorage,
    LoggingNotificationService,
)
from buildops.modules.hiring.application.services import JobApplicationApplicationService
from buildops.modules.hiring.domain.repositories import JobApplicationRepository
from buildops.modules.hiring.infrastructure import InMemoryJobApplicationRepository
from buildops.modules.quote.application.services import QuoteApplicationService
from buildops.modules.quote.domain.repositories import QuoteRepository
from buildops.modules.quote.infrastructure import InMemoryQuoteRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ApplicationContainer:
    """Everything one running application instance needs."""

    settings: Settings
    command_dispatcher: CommandDispatcher
    query_dispatcher: QueryDispatcher
    query_cache: QueryCache
    performance_monitor: PerformanceMonitor
    validation: ValidationMiddleware
    cache_invalidation: QueryCacheInvalidationMiddleware
    quote_repository: QuoteRepository
    application_repository: JobApplicationRepository
    notification_service: NotificationService
    file_storage: FileStorageService
    event_publisher: DomainEventPublisher
    quotes: QuoteApplicationService
    job_applications: JobApplicationApplicationService

    @property
    def prometheus_registry(self) -> CollectorRegistry | None:
        """The metrics registry to expose, or None when metrics are in-memory only."""
        return getattr(self.performance_monitor, "registry", None)


def bootstrap(
    settings: Settings | None = None,
    *,
    quote_repository: QuoteRepository | None = None,
    application_repository: JobApplicationRepository | None = None,
    notification_service: NotificationService | None = None,
    file_storage: FileStorageService | None = None,
    event_publisher: DomainEventPublisher | None = None,
    query_cache: QueryCache | None = None,
    performance_monitor: PerformanceMonitor | None = None,
) -> ApplicationContainer:
    """
    Build and wire a complete application.

    Any collaborator passed in is used as-is; the rest default to the
    in-memory implementations configured from ``settings``.
    """
    settings = settings or get_settings()
    logger.info(
        "Starting application bootstrap process",
        environment=settings.environment.value,
        version=settings.app_version,
    )

    # Collaborators
    if quote_repository is None:
        quote_repository = InMemoryQuoteRepository()
    if application_repository is None:
        application_repository = InMemoryJobApplicationRepository()
    if notification_service is None:
        notification_service = LoggingNotificationService(settings.notifications)
    if file_storage is None:
        file_storage = InMemoryFileStorage(settings.file_storage)
    if event_publisher is None:
        event_publisher = InMemoryEventPublisher()
    if query_cache is None:
        query_cache = InMemoryQueryCache(
            default_ttl=settings.query_cache.default_ttl_seconds,
            cleanup_interval=settings.query_cache.cleanup_interval,
        )
    if performance_monitor is None:
        if settings.dispatch.enable_prometheus_metrics:
            performance_monitor = PrometheusPerformanceMonitor(
                max_metrics=settings.dispatch.max_performance_metrics
            )
        else:
            performance_monitor = InMemoryPerformanceMonitor(
                max_metrics=settings.dispatch.max_performance_metrics
            )

    # Middleware, outermost first
    validation = ValidationMiddleware()
    cache_invalidation = QueryCacheInvalidationMiddleware(query_cache)
    middlewares = [
        LoggingMiddleware(),
        validation,
        PerformanceMiddleware(
            performance_monitor,
            slow_command_threshold_ms=settings.dispatch.slow_command_threshold_ms,
        ),
        cache_invalidation,
    ]

    command_dispatcher = CommandDispatcher(
        middlewares=middlewares,
        timeout_seconds=settings.dispatch.timeout_seconds,
        allow_override=settings.dispatch.allow_handler_override,
    )
    query_dispatcher = QueryDispatcher(
        cache=query_cache,
        policy=QueryCachePolicy(
            enabled=settings.query_cache.enabled,
            default_ttl=settings.query_cache.default_ttl_seconds,
            ttl_overrides=dict(settings.query_cache.ttl_overrides),
            non_cacheable=settings.query_cache.non_cacheable,
        ),
        timeout_seconds=settings.dispatch.timeout_seconds,
        allow_override=settings.dispatch.allow_handler_override,
    )

    register_quote_module(
        settings,
        command_dispatcher,
        query_dispatcher,
        validation,
        cache_invalidation,
        repository=quote_repository,
        file_storage=file_storage,
        notifications=notification_service,
        event_publisher=event_publisher,
    )
    register_hiring_module(
        settings,
        command_dispatcher,
        query_dispatcher,
        validation,
        cache_invalidation,
        repository=application_repository,
        file_storage=file_storage,
        notifications=notification_service,
        event_publisher=event_publisher,
    )

    container = ApplicationContainer(
        settings=settings,
        command_dispatcher=command_dispatcher,
        query_dispatcher=query_dispatcher,
        query_cache=query_cache,
        performance_monitor=performance_monitor,
        validation=validation,
        cache_invalidation=cache_invalidation,
        quote_repository=quote_repository,
        application_repository=application_repository,
        notification_service=notification_service,
        file_storage=file_storage,
        event_publisher=event_publisher,
        quotes=QuoteApplicationService(command_dispatcher, query_dispatcher),
        job_applications=JobApplicationApplicationService(command_dispatcher, query_dispatcher),
    )

    logger.info(
        "Application bootstrap completed successfully",
        commands=len(command_dispatcher.list_registered()),
        queries=len(query_dispatcher.list_registered()),
    )
    return container


__all__ = ["ApplicationContainer", "bootstrap"]
