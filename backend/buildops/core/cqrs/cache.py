"""Query result cache.

Results are stored under a key derived from the query's routing key and its
filter/pagination/sort shape:

    query:quote.get_list:3f5a...   (sha256 of the canonical JSON shape)

Two queries with the same type and shape share a key regardless of their ids,
timestamps or the order their filters were given in.
"""

import asyncio
import hashlib
import json
import re
import time
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from enum import Enum
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from buildops.core.cqrs.base import Query
from buildops.core.errors import ValidationError
from buildops.core.logging import get_logger

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "query"
DEFAULT_TTL_SECONDS = 300
INVALIDATION_LOG_SIZE = 1000


def canonical_form(value: Any) -> Any:
    """
    Reduce a filter value to plain JSON types for hashing.

    Mapping keys carry their type name, so ``{1: "x"}`` and ``{"1": "x"}``
    stay distinct, and bytes are represented by their digest.
    """
    if value is None or isinstance(value, str | bool | int | float):
        return value
    if isinstance(value, Enum):
        return canonical_form(value.value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bytes | bytearray):
        return {"bytes_sha256": hashlib.sha256(value).hexdigest()}
    if isinstance(value, Mapping):
        return {
            f"{type(key).__name__}:{key}": canonical_form(item) for key, item in value.items()
        }
    if isinstance(value, set | frozenset):
        items = [canonical_form(item) for item in value]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))
    if isinstance(value, list | tuple):
        return [canonical_form(item) for item in value]
    if hasattr(value, "to_dict"):
        return canonical_form(value.to_dict())
    return f"{type(value).__name__}:{value}"


def build_cache_key(query: Query) -> str:
    """Deterministic cache key for a query instance."""
    shape = {
        "filters": {key: value for key, value in query.filters.items() if value is not None},
        "pagination": query.pagination,
        "sorting": query.sorting,
    }
    canonical = json.dumps(canonical_form(shape), sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}:{query.type_key()}:{digest}"


def type_pattern(query_type: type[Query]) -> str:
    """Pattern matching every cached result of one query type."""
    return f"{CACHE_KEY_PREFIX}:{query_type.type_key()}:*"


def compile_pattern(pattern: str) -> re.Pattern:
    """Translate a ``*`` wildcard pattern into an anchored regex."""
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile("^" + ".*".join(parts) + "$", re.DOTALL)


@dataclass
class CacheEntry:
    """A cached value and its absolute expiry (epoch seconds)."""

    value: Any
    expires_at: float
    created_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class QueryCache(ABC):
    """Key/value store with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value, or None if absent or expired."""

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: int | None = None,
        *,
        generation: int | None = None,
    ) -> None:
        """
        Store ``value`` for ``ttl_seconds``, replacing any existing entry.

        When ``generation`` is given, the write is dropped if an invalidation
        matching ``key`` has happened since that generation was read.
        """

    @abstractmethod
    async def invalidate(self, pattern: str) -> int:
        """Evict every key matching ``pattern``; return how many were evicted."""

    @abstractmethod
    async def clear(self) -> None:
        """Evict everything."""

    def generation(self) -> int:
        """Counter advanced by every invalidation; 0 for caches that do not track one."""
        return 0


class InMemoryQueryCache(QueryCache):
    """
    Process-local query cache.

    Expired entries are removed when read and by a sweep that runs every
    ``cleanup_interval`` writes. All mutation happens under one asyncio lock.

    Every ``invalidate`` and ``clear`` advances a generation counter and is
    remembered in a bounded log. A read that captured the generation before
    running its handler cannot store a result computed before a matching
    invalidation. Once the log has forgotten the generation a write was
    based on, the write is dropped.

    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        cleanup_interval: int = 100,
        clock: Callable[[], float] = time.time,
        invalidation_log_size: int = INVALIDATION_LOG_SIZE,
    ):
        if default_ttl < 1:
            raise ValidationError("Default TTL must be at least 1 second", field="default_ttl")
        self.default_ttl = default_ttl
        self.cleanup_interval = max(1, cleanup_interval)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._writes_since_cleanup = 0
        self._generation = 0
        # (generation, matcher); a None matcher stands for clear()
        self._invalidations: deque[tuple[int, re.Pattern | None]] = deque(
            maxlen=max(1, invalidation_log_size)
        )
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "expirations": 0,
            "invalidations": 0,
            "stale_writes_dropped": 0,
        }

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._stats["expirations"] += 1
                self._stats["misses"] += 1
                return None

            self._stats["hits"] += 1
            return entry.value

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: int | None = None,
        *,
        generation: int | None = None,
    ) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValidationError("Cache TTL must be positive", field="ttl_seconds")

        async with self._lock:
            if generation is not None and self._invalidated_since(key, generation):
                self._stats["stale_writes_dropped"] += 1
                logger.debug("Stale cache write dropped", key=key, generation=generation)
                return

            now = self._clock()
            self._entries[key] = CacheEntry(value=value, expires_at=now + ttl, created_at=now)
            self._stats["sets"] += 1

            self._writes_since_cleanup += 1
            if self._writes_since_cleanup >= self.cleanup_interval:
                self._writes_since_cleanup = 0
                self._purge_expired(now)

    async def invalidate(self, pattern: str) -> int:
        matcher = compile_pattern(pattern)
        async with self._lock:
            matched = [key for key in self._entries if matcher.match(key)]
            for key in matched:
                del self._entries[key]
            self._record_invalidation(matcher)
            self._stats["invalidations"] += len(matched)

        if matched:
            logger.debug("Cache entries invalidated", pattern=pattern, count=len(matched))
        return len(matched)

    async def clear(self) -> None:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._record_invalidation(None)
            self._stats["invalidations"] += count

    async def has(self, key: str) -> bool:
        async with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def generation(self) -> int:
        return self._generation

    def _record_invalidation(self, matcher: re.Pattern | None) -> None:
        self._generation += 1
        self._invalidations.append((self._generation, matcher))

    def _invalidated_since(self, key: str, generation: int) -> bool:
        if generation >= self._generation:
            return False
        if not self._invalidations or self._invalidations[0][0] > generation + 1:
            return True
        return any(
            recorded > generation and (matcher is None or matcher.match(key))
            for recorded, matcher in self._invalidations
        )

    def _purge_expired(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        self._stats["expirations"] += len(expired)
        return len(expired)

    def keys(self) -> list[str]:
        """Stored keys, including entries not yet lazily expired."""
        return list(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    def get_statistics(self) -> dict[str, Any]:
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            **self._stats,
            "size": len(self._entries),
            "hit_rate": self._stats["hits"] / lookups if lookups else 0.0,
        }


@dataclass
class QueryCachePolicy:
    """
    Decides whether and for how long a query type's results are cached.

    The query type's own ``cacheable`` and ``cache_ttl`` attributes are
    authoritative; ``ttl_overrides`` and ``non_cacheable`` (keyed by routing
    key) let deployment configuration adjust them without code changes.
    """

    enabled: bool = True
    default_ttl: int = DEFAULT_TTL_SECONDS
    ttl_overrides: dict[str, int] = field(default_factory=dict)
    non_cacheable: Iterable[str] = field(default_factory=frozenset)

    def __post_init__(self):
        self.non_cacheable = frozenset(self.non_cacheable)

    def is_cacheable(self, query_type: type[Query]) -> bool:
        return (
            self.enabled
            and query_type.cacheable
            and query_type.type_key() not in self.non_cacheable
        )

    def ttl_for(self, query_type: type[Query]) -> int:
        key = query_type.type_key()
        if key in self.ttl_overrides:
            return self.ttl_overrides[key]
        if query_type.cache_ttl is not None:
            return query_type.cache_ttl
        return self.default_ttl


__all__ = [
    "CacheEntry",
    "InMemoryQueryCache",
    "QueryCache",
    "QueryCachePolicy",
    "build_cache_key",
    "canonical_form",
    "compile_pattern",
    "type_pattern",
]
