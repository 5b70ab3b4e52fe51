"""Repository base interfaces and the in-memory implementation."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from buildops.core.domain.base import AggregateRoot
from buildops.core.logging import get_logger

logger = get_logger(__name__)

TAggregate = TypeVar("TAggregate", bound=AggregateRoot)


@dataclass
class SearchResult(Generic[TAggregate]):
    """One page of a filtered search plus the unpaged total."""

    items: list[TAggregate] = field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int | None = None

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


class Repository(ABC, Generic[TAggregate]):
    """
    Base repository interface.

    Implementations persist whole aggregates; domain events are collected by
    the application layer, not by the repository.
    """

    @abstractmethod
    async def save(self, aggregate: TAggregate) -> None:
        """Insert or replace ``aggregate``."""

    @abstractmethod
    async def find_by_id(self, aggregate_id: str) -> TAggregate | None:
        """Return the aggregate or None."""

    @abstractmethod
    async def delete(self, aggregate_id: str) -> bool:
        """Remove the aggregate; returns False when it did not exist."""


class InMemoryRepository(Repository[TAggregate]):
    """Dict-backed repository; writes are serialized by an asyncio lock."""

    def __init__(self):
        self._items: dict[str, TAggregate] = {}
        self._lock = asyncio.Lock()

    async def save(self, aggregate: TAggregate) -> None:
        async with self._lock:
            created = aggregate.id not in self._items
            self._items[aggregate.id] = aggregate
        logger.debug(
            "Aggregate saved",
            aggregate_type=type(aggregate).__name__,
            aggregate_id=aggregate.id,
            created=created,
        )

    async def find_by_id(self, aggregate_id: str) -> TAggregate | None:
        return self._items.get(aggregate_id)

    async def delete(self, aggregate_id: str) -> bool:
        async with self._lock:
            return self._items.pop(aggregate_id, None) is not None

    async def count(self) -> int:
        return len(self._items)

    def all(self) -> list[TAggregate]:
        return list(self._items.values())

    @staticmethod
    def page(
        items: Iterable[TAggregate],
        sort_key: Callable[[TAggregate], Any],
        descending: bool,
        offset: int,
        limit: int | None,
    ) -> SearchResult[TAggregate]:
        ordered = sorted(items, key=sort_key, reverse=descending)
        window = ordered[offset:] if limit is None else ordered[offset : offset + limit]
        return SearchResult(items=window, total=len(ordered), offset=offset, limit=limit)


__all__ = ["InMemoryRepository", "Repository", "SearchResult", "TAggregate"]
