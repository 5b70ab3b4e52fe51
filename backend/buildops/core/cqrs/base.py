"""CQRS base classes.

Commands (writes) and queries (reads) are immutable message objects routed
to exactly one handler by the dispatchers in ``buildops.core.cqrs.dispatchers``.

Architecture:
- Command: Represents an intent to change system state
- Query: Represents a request for information, with pagination/filter/sort shape
- CommandHandler/QueryHandler: Process one message type each
- CommandResult/QueryResult: Standardized envelopes returned to callers

Every concrete message type declares its routing key in ``message_type``.
The key is never derived from the class name, so renaming a class does not
silently re-route it or change its cache keys.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

from buildops.core.enums import SortDirection
from buildops.core.errors import (
    BuildOpsError,
    BusinessRuleViolationError,
    CommandValidationError,
    ConfigurationError,
    DomainValidationError,
    FieldError,
    NotFoundError,
    ValidationError,
)
from buildops.core.logging import get_logger

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound="Command")
TQuery = TypeVar("TQuery", bound="Query")
TResult = TypeVar("TResult")

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_serializable(value: Any) -> Any:
    """Convert message payloads into JSON-friendly structures."""
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes | bytearray):
        return {"size_bytes": len(value)}
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, set | frozenset):
        return sorted(to_serializable(item) for item in value)
    if isinstance(value, list | tuple):
        return [to_serializable(item) for item in value]
    return str(value)


def enum_filter_value(enum_type: type[Enum], value: Any, field_name: str) -> str | None:
    """Normalize a query filter to its enum value, rejecting unknown values."""
    if value is None:
        return None
    raw = value.value if isinstance(value, enum_type) else str(value).lower()
    valid = [member.value for member in enum_type]
    if raw not in valid:
        raise ValidationError(
            f"Invalid {field_name} '{value}'. Valid values: {', '.join(valid)}",
            field=field_name,
        )
    return raw


def _resolve_message_type(message_class: type, base: type) -> str:
    if not isinstance(message_class, type) or not issubclass(message_class, base):
        raise ConfigurationError(
            f"{message_class!r} is not a {base.__name__} type"
        )
    key = message_class.__dict__.get("message_type")
    if not key:
        raise ConfigurationError(
            f"{message_class.__name__} does not declare a message_type"
        )
    return key


# =====================================================================================
# MESSAGE SHAPE
# =====================================================================================


@dataclass(frozen=True)
class Pagination:
    """Page request; pages are 1-based."""

    page: int = 1
    limit: int = 20

    def __post_init__(self):
        if not isinstance(self.page, int) or self.page < 1:
            raise ValidationError("Page must be a positive integer", field="page")
        if not isinstance(self.limit, int) or self.limit < 1:
            raise ValidationError("Limit must be a positive integer", field="limit")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit}


@dataclass(frozen=True)
class Sorting:
    """Sort specification: one field and a direction."""

    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self):
        if not self.field:
            raise ValidationError("Sort field is required", field="sort_by")
        if not isinstance(self.direction, SortDirection):
            try:
                direction = SortDirection.from_string(self.direction)
            except ValueError as e:
                raise ValidationError(str(e), field="sort_order") from e
            object.__setattr__(self, "direction", direction)

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "direction": self.direction.value}


@dataclass(frozen=True)
class PaginatedResult(Generic[TResult]):
    """One page of a list read."""

    items: list[TResult]
    total: int
    page: int
    limit: int

    @classmethod
    def build(
        cls, items: list[TResult], total: int, pagination: Pagination
    ) -> "PaginatedResult[TResult]":
        return cls(items=list(items), total=total, page=pagination.page, limit=pagination.limit)

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": to_serializable(self.items),
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
        }


# =====================================================================================
# RESULT TYPES
# =====================================================================================


def _errors_from_exception(error: Exception) -> tuple[list[FieldError], str]:
    if isinstance(error, CommandValidationError):
        return list(error.errors), error.message
    if isinstance(error, DomainValidationError):
        return [FieldError(error.field, error.user_message, error.code)], "Validation failed"
    if isinstance(error, BusinessRuleViolationError):
        return (
            [FieldError("business_rule", error.message, error.code)],
            "Business rule violation",
        )
    if isinstance(error, NotFoundError):
        return [FieldError(error.resource, error.user_message, error.code)], error.user_message
    if isinstance(error, ValidationError):
        return (
            [FieldError(error.field or "request", error.user_message, error.code)],
            "Validation failed",
        )
    return [FieldError("system", INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR")], "Internal system error"


def _log_unexpected(error: Exception, **context: Any) -> None:
    expected = (
        ValidationError,
        DomainValidationError,
        BusinessRuleViolationError,
        NotFoundError,
    )
    if isinstance(error, expected):
        return
    logger.error(
        "Unexpected error translated to failure result",
        error_type=type(error).__name__,
        error=error.message if isinstance(error, BuildOpsError) else str(error),
        exc_info=error,
        **context,
    )


@dataclass
class CommandResult(Generic[TResult]):
    """
    Standardized command result envelope.

    Failures carry a list of ``FieldError`` so callers can show per-field
    messages for validation problems and a generic message for anything else.
    """

    success: bool
    command_id: str
    data: TResult | None = None
    errors: list[FieldError] = field(default_factory=list)
    message: str | None = None
    timestamp: datetime = field(default_factory=utc_now, compare=False)

    @classmethod
    def ok(
        cls, command_id: str, data: TResult | None = None, message: str | None = None
    ) -> "CommandResult[TResult]":
        return cls(success=True, command_id=command_id, data=data, message=message)

    @classmethod
    def failure(
        cls,
        command_id: str,
        errors: list[FieldError],
        message: str | None = None,
    ) -> "CommandResult[TResult]":
        return cls(success=False, command_id=command_id, errors=list(errors), message=message)

    @classmethod
    def from_error(cls, command_id: str, error: Exception) -> "CommandResult[TResult]":
        """Translate an exception into a failure result without leaking internals."""
        _log_unexpected(error, command_id=command_id)
        errors, message = _errors_from_exception(error)
        return cls.failure(command_id, errors, message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "command_id": self.command_id,
            "data": to_serializable(self.data),
            "errors": [error.to_dict() for error in self.errors],
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class QueryResult(Generic[TResult]):
    """
    Standardized query result envelope.

    Only ``success``, ``data``, ``errors`` and ``message`` take part in
    equality: a result served from cache compares equal to the one that was
    computed, even though its query id and timing differ.
    """

    success: bool
    query_id: str = field(compare=False)
    data: TResult | None = None
    errors: list[FieldError] = field(default_factory=list)
    message: str | None = None
    execution_time_ms: float | None = field(default=None, compare=False)
    from_cache: bool = field(default=False, compare=False)
    timestamp: datetime = field(default_factory=utc_now, compare=False)

    @classmethod
    def ok(
        cls, query_id: str, data: TResult | None = None, message: str | None = None
    ) -> "QueryResult[TResult]":
        return cls(success=True, query_id=query_id, data=data, message=message)

    @classmethod
    def failure(
        cls, query_id: str, errors: list[FieldError], message: str | None = None
    ) -> "QueryResult[TResult]":
        return cls(success=False, query_id=query_id, errors=list(errors), message=message)

    @classmethod
    def from_error(cls, query_id: str, error: Exception) -> "QueryResult[TResult]":
        """Translate an exception into a failure result without leaking internals."""
        _log_unexpected(error, query_id=query_id)
        errors, message = _errors_from_exception(error)
        return cls.failure(query_id, errors, message)

    def with_timing(
        self, query_id: str, execution_time_ms: float, from_cache: bool
    ) -> "QueryResult[TResult]":
        """
        Copy of this result stamped for a particular dispatch.

        The payload is deep-copied, so the stamped result shares no mutable
        state with the one it was made from.
        """
        return replace(
            self,
            data=copy.deepcopy(self.data),
            errors=list(self.errors),
            query_id=query_id,
            execution_time_ms=execution_time_ms,
            from_cache=from_cache,
            timestamp=utc_now(),
        )

    @property
    def is_empty(self) -> bool:
        if self.data is None:
            return True
        if isinstance(self.data, PaginatedResult):
            return self.data.is_empty
        if isinstance(self.data, list | tuple | dict | set):
            return len(self.data) == 0
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "query_id": self.query_id,
            "data": to_serializable(self.data),
            "errors": [error.to_dict() for error in self.errors],
            "message": self.message,
            "execution_time_ms": self.execution_time_ms,
            "from_cache": self.from_cache,
            "timestamp": self.timestamp.isoformat(),
        }


# =====================================================================================
# COMMAND CLASSES
# =====================================================================================


class Command(ABC):
    """
    Base command class representing an intent to change system state.

    Usage Example:
        class MoveQuoteToReviewCommand(Command):
            message_type = "quote.move_to_review"

            def __init__(self, quote_id: str, **kwargs):
                super().__init__(**kwargs)
                self.quote_id = quote_id
                self._freeze()
    """

    message_type: ClassVar[str | None] = None

    def __init__(
        self,
        *,
        correlation_id: str | None = None,
        user_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ):
        self._frozen = False
        self.command_id = str(uuid4())
        self.timestamp = utc_now()
        self.correlation_id = correlation_id
        self.user_id = user_id
        self.metadata = MappingProxyType(dict(metadata or {}))

    @classmethod
    def type_key(cls) -> str:
        """Routing key declared by the concrete command type."""
        return _resolve_message_type(cls, Command)

    def _validate_command(self) -> None:
        """
        Structural checks run when the command is frozen.

        Raises:
            ValidationError: If command is in invalid state
        """

    def _freeze(self) -> None:
        """Validate and mark the command as immutable."""
        self._validate_command()
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot modify immutable command {self.__class__.__name__}"
            )
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        raise AttributeError(
            f"Cannot modify immutable command {self.__class__.__name__}"
        )

    def payload(self) -> dict[str, Any]:
        """Fields declared by the concrete command."""
        identity = {"command_id", "timestamp", "correlation_id", "user_id", "metadata"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if not key.startswith("_") and key not in identity
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "command_type": self.__class__.__dict__.get("message_type"),
            "command_id": self.command_id,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": self.correlation_id,
            "user_id": self.user_id,
            "metadata": to_serializable(self.metadata),
            "payload": to_serializable(self.payload()),
        }

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Command):
            return False
        return self.command_id == other.command_id

    def __hash__(self) -> int:
        return hash(self.command_id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.command_id})"


class Query(ABC):
    """
    Base query class representing a request for information.

    Class attributes control caching:
    - ``cacheable``: False for real-time or per-session reads
    - ``cache_ttl``: seconds to keep results; None uses the configured default

    Usage Example:
        class GetServiceTypesQuery(Query):
            message_type = "quote.get_service_types"
            cache_ttl = 3600

            def __init__(self, category: str | None = None, **kwargs):
                super().__init__(filters={"category": category}, **kwargs)
                self._freeze()
    """

    message_type: ClassVar[str | None] = None
    cacheable: ClassVar[bool] = True
    cache_ttl: ClassVar[int | None] = None

    def __init__(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        pagination: Pagination | None = None,
        sorting: Sorting | None = None,
        correlation_id: str | None = None,
        user_id: str | None = None,
    ):
        self._frozen = False
        self.query_id = str(uuid4())
        self.timestamp = utc_now()
        self.correlation_id = correlation_id
        self.user_id = user_id
        self.filters = MappingProxyType(dict(filters or {}))
        self.pagination = pagination
        self.sorting = sorting

    @classmethod
    def type_key(cls) -> str:
        """Routing key declared by the concrete query type."""
        return _resolve_message_type(cls, Query)

    def _validate_query(self) -> None:
        """
        Structural checks run when the query is frozen.

        Raises:
            ValidationError: If query is in invalid state
        """

    def _freeze(self) -> None:
        self._validate_query()
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot modify immutable query {self.__class__.__name__}"
            )
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        raise AttributeError(
            f"Cannot modify immutable query {self.__class__.__name__}"
        )

    def cache_shape(self) -> dict[str, Any]:
        """
        The parts of the query that determine its result.

        Identity fields (id, timestamp, correlation, user) are excluded, and
        filters set to None are dropped so ``{"status": None}`` and ``{}``
        describe the same read.
        """
        filters = {
            key: value for key, value in self.filters.items() if value is not None
        }
        return {
            "filters": to_serializable(filters),
            "pagination": self.pagination.to_dict() if self.pagination else None,
            "sorting": self.sorting.to_dict() if self.sorting else None,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "query_type": self.__class__.__dict__.get("message_type"),
            "query_id": self.query_id,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": self.correlation_id,
            "user_id": self.user_id,
            **self.cache_shape(),
        }

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Query):
            return False
        return self.query_id == other.query_id

    def __hash__(self) -> int:
        return hash(self.query_id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.query_id})"


# =====================================================================================
# HANDLER CLASSES
# =====================================================================================


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """
    Base command handler.

    Handlers receive their collaborators explicitly in ``__init__`` and are
    registered against one command type at start-up.
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> CommandResult[TResult]:
        """
        Handle the command and return a result.

        Raises:
            DomainError: When a business rule rejects the command
        """


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """
    Base query handler.

    Query handlers must not modify state; their results may be cached and
    served to later identical queries.
    """

    @abstractmethod
    async def handle(self, query: TQuery) -> QueryResult[TResult] | TResult:
        """Handle the query and return a result or a bare payload."""


__all__ = [
    "Command",
    "CommandHandler",
    "CommandResult",
    "PaginatedResult",
    "Pagination",
    "Query",
    "QueryHandler",
    "QueryResult",
    "Sorting",
    "TCommand",
    "TQuery",
    "TResult",
    "enum_filter_value",
    "to_serializable",
    "utc_now",
]
