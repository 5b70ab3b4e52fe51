"""Command and query dispatchers.

Per dispatch:

Commands:  resolve handler -> build middleware chain -> run -> result
Queries:   resolve handler -> cache lookup -> run on miss -> cache -> result

Handler resolution happens first on both sides, so a message without a
handler fails with ``HandlerNotFoundError`` before any middleware runs or
cache is consulted. Errors propagate to the caller; nothing is retried.
"""

import asyncio
import time
from collections.abc import Iterable
from typing import Any

from buildops.core.cqrs.base import Command, Query, QueryResult
from buildops.core.cqrs.cache import (
    QueryCache,
    QueryCachePolicy,
    build_cache_key,
    type_pattern,
)
from buildops.core.cqrs.middleware import Middleware, NextHandler
from buildops.core.cqrs.registry import HandlerRegistry
from buildops.core.errors import OperationTimeoutError, ValidationError
from buildops.core.logging import get_logger

logger = get_logger(__name__)


async def _run_with_timeout(awaitable: Any, timeout_seconds: float | None, operation: str) -> Any:
    if timeout_seconds is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise OperationTimeoutError(operation, timeout_seconds) from None


class CommandDispatcher:
    """
    Routes each command to its single handler through the middleware chain.

    Usage Example:
        dispatcher = CommandDispatcher(middlewares=[LoggingMiddleware(), validation])
        dispatcher.register(SubmitQuoteRequestCommand, handler)
        result = await dispatcher.dispatch(SubmitQuoteRequestCommand(...))
    """

    def __init__(
        self,
        registry: HandlerRegistry | None = None,
        middlewares: Iterable[Middleware] = (),
        *,
        timeout_seconds: float | None = None,
        allow_override: bool = False,
        log: Any = None,
    ):
        if registry is None:
            registry = HandlerRegistry(Command, allow_override=allow_override)
        self._registry = registry
        self._middlewares: list[Middleware] = list(middlewares)
        self.timeout_seconds = timeout_seconds
        self._logger = log or logger
        self._metrics = {
            "total_commands": 0,
            "successful_commands": 0,
            "failed_commands": 0,
        }
        self._by_type: dict[str, int] = {}

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        return tuple(self._middlewares)

    def register(self, command_type: type[Command], handler: Any, *, override: bool = False) -> None:
        self._registry.register(command_type, handler, override=override)

    def add_middleware(self, middleware: Middleware) -> None:
        """Append a middleware; it becomes the innermost layer so far."""
        if not callable(middleware):
            raise ValidationError("Middleware must be callable", field="middleware")
        self._middlewares.append(middleware)

    def has_handler(self, command_type: type[Command]) -> bool:
        return self._registry.is_registered(command_type)

    def list_registered(self) -> list[str]:
        return self._registry.list_registered()

    def _build_chain(self, handler: Any) -> NextHandler:
        async def invoke_handler(command: Command) -> Any:
            return await handler.handle(command)

        chain: NextHandler = invoke_handler
        for middleware in reversed(self._middlewares):
            chain = self._wrap(middleware, chain)
        return chain

    @staticmethod
    def _wrap(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        async def layer(command: Command) -> Any:
            return await middleware(command, next_handler)

        return layer

    async def dispatch(self, command: Command) -> Any:
        """
        Dispatch a command and return its handler's result.

        Raises:
            HandlerNotFoundError: If no handler is registered for the type
            CommandValidationError: If the command's validator rejects it
            OperationTimeoutError: If a timeout is configured and exceeded
        """
        if not isinstance(command, Command):
            raise ValidationError(
                f"Expected a Command, got {type(command).__name__}", field="command"
            )

        handler = self._registry.resolve(command)
        chain = self._build_chain(handler)
        command_type = command.type_key()

        self._metrics["total_commands"] += 1
        self._by_type[command_type] = self._by_type.get(command_type, 0) + 1
        try:
            result = await _run_with_timeout(
                chain(command), self.timeout_seconds, f"Command {command_type}"
            )
        except Exception:
            self._metrics["failed_commands"] += 1
            raise

        if getattr(result, "success", True) is False:
            self._metrics["failed_commands"] += 1
        else:
            self._metrics["successful_commands"] += 1
        return result

    def get_metrics(self) -> dict[str, Any]:
        total = self._metrics["total_commands"]
        return {
            "registered_handlers": len(self._registry),
            "handler_types": self._registry.list_registered(),
            "middleware_count": len(self._middlewares),
            **self._metrics,
            "by_type": dict(self._by_type),
            "success_rate": self._metrics["successful_commands"] / total if total else 0.0,
        }


class QueryDispatcher:
    """
    Routes each query to its single handler, serving repeat reads from cache.

    Only successful, non-empty results of cacheable query types are cached;
    failures and raised errors never are.
    """

    def __init__(
        self,
        registry: HandlerRegistry | None = None,
        cache: QueryCache | None = None,
        policy: QueryCachePolicy | None = None,
        *,
        timeout_seconds: float | None = None,
        allow_override: bool = False,
        log: Any = None,
    ):
        if registry is None:
            registry = HandlerRegistry(Query, allow_override=allow_override)
        self._registry = registry
        self._cache = cache
        self._policy = policy or QueryCachePolicy()
        self.timeout_seconds = timeout_seconds
        self._logger = log or logger
        self._metrics = {
            "total_queries": 0,
            "successful_queries": 0,
            "failed_queries": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "handler_executions": 0,
        }

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def cache(self) -> QueryCache | None:
        return self._cache

    @property
    def policy(self) -> QueryCachePolicy:
        return self._policy

    def register(self, query_type: type[Query], handler: Any, *, override: bool = False) -> None:
        self._registry.register(query_type, handler, override=override)

    def has_handler(self, query_type: type[Query]) -> bool:
        return self._registry.is_registered(query_type)

    def list_registered(self) -> list[str]:
        return self._registry.list_registered()

    def _caches(self, query_type: type[Query]) -> bool:
        return self._cache is not None and self._policy.is_cacheable(query_type)

    async def dispatch(self, query: Query) -> QueryResult:
        """
        Dispatch a query and return its result envelope.

        Raises:
            HandlerNotFoundError: If no handler is registered for the type
            OperationTimeoutError: If a timeout is configured and exceeded
        """
        if not isinstance(query, Query):
            raise ValidationError(
                f"Expected a Query, got {type(query).__name__}", field="query"
            )

        handler = self._registry.resolve(query)
        query_type = type(query)
        type_key = query.type_key()
        start = time.perf_counter()
        self._metrics["total_queries"] += 1

        cache_key = None
        generation = None
        if self._caches(query_type):
            cache_key = build_cache_key(query)
            cached = await self._cache.get(cache_key)
            if cached is not None:
                self._metrics["cache_hits"] += 1
                self._metrics["successful_queries"] += 1
                self._logger.debug(
                    "Query served from cache",
                    query_type=type_key,
                    query_id=query.query_id,
                    cache_key=cache_key,
                )
                return cached.with_timing(
                    query.query_id, self._elapsed_ms(start), from_cache=True
                )
            self._metrics["cache_misses"] += 1
            # Writes from reads that overlap an invalidation are dropped by the cache
            generation = self._cache.generation()

        self._metrics["handler_executions"] += 1
        try:
            outcome = await _run_with_timeout(
                handler.handle(query), self.timeout_seconds, f"Query {type_key}"
            )
        except Exception:
            self._metrics["failed_queries"] += 1
            raise

        result = outcome if isinstance(outcome, QueryResult) else QueryResult.ok(query.query_id, outcome)
        result = result.with_timing(query.query_id, self._elapsed_ms(start), from_cache=False)

        if not result.success:
            self._metrics["failed_queries"] += 1
            return result

        self._metrics["successful_queries"] += 1
        if cache_key is not None and not result.is_empty:
            # The cache keeps its own copy; callers may mutate theirs
            await self._cache.set(
                cache_key,
                result.with_timing(query.query_id, result.execution_time_ms, from_cache=False),
                self._policy.ttl_for(query_type),
                generation=generation,
            )

        self._logger.debug(
            "Query executed",
            query_type=type_key,
            query_id=query.query_id,
            execution_time_ms=result.execution_time_ms,
            cached=cache_key is not None and not result.is_empty,
        )
        return result

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 3)

    async def invalidate_cache(self, pattern: str) -> int:
        """Evict cached results whose key matches ``pattern``."""
        if self._cache is None:
            return 0
        return await self._cache.invalidate(pattern)

    async def invalidate_query_type(self, query_type: type[Query]) -> int:
        return await self.invalidate_cache(type_pattern(query_type))

    async def clear_cache(self) -> None:
        if self._cache is not None:
            await self._cache.clear()

    def get_metrics(self) -> dict[str, Any]:
        lookups = self._metrics["cache_hits"] + self._metrics["cache_misses"]
        return {
            "registered_handlers": len(self._registry),
            "handler_types": self._registry.list_registered(),
            "cache_enabled": self._cache is not None and self._policy.enabled,
            **self._metrics,
            "cache_hit_rate": self._metrics["cache_hits"] / lookups if lookups else 0.0,
        }


__all__ = ["CommandDispatcher", "QueryDispatcher"]
