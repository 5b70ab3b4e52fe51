"""CQRS (Command Query Responsibility Segregation) dispatch core."""

from buildops.core.cqrs.base import (
    Command,
    CommandHandler,
    CommandResult,
    PaginatedResult,
    Pagination,
    Query,
    QueryHandler,
    QueryResult,
    Sorting,
)
from buildops.core.cqrs.cache import (
    CacheEntry,
    InMemoryQueryCache,
    QueryCache,
    QueryCachePolicy,
    build_cache_key,
)
from buildops.core.cqrs.dispatchers import CommandDispatcher, QueryDispatcher
from buildops.core.cqrs.middleware import (
    CommandMiddleware,
    InMemoryPerformanceMonitor,
    LoggingMiddleware,
    PerformanceMetric,
    PerformanceMiddleware,
    PerformanceMonitor,
    QueryCacheInvalidationMiddleware,
    ValidationMiddleware,
)
from buildops.core.cqrs.registry import HandlerRegistry
from buildops.core.cqrs.validation import CommandValidator, FieldRules, ValidationResult

__all__ = [
    "CacheEntry",
    "Command",
    "CommandDispatcher",
    "CommandHandler",
    "CommandMiddleware",
    "CommandResult",
    "CommandValidator",
    "FieldRules",
    "HandlerRegistry",
    "InMemoryPerformanceMonitor",
    "InMemoryQueryCache",
    "LoggingMiddleware",
    "PaginatedResult",
    "Pagination",
    "PerformanceMetric",
    "PerformanceMiddleware",
    "PerformanceMonitor",
    "Query",
    "QueryCache",
    "QueryCacheInvalidationMiddleware",
    "QueryCachePolicy",
    "QueryDispatcher",
    "QueryHandler",
    "QueryResult",
    "Sorting",
    "ValidationMiddleware",
    "ValidationResult",
    "build_cache_key",
]
