"""Domain primitives.

Architecture:
- ValueObject: Immutable objects defined entirely by their attributes
- Entity: Mutable objects with identity and lifecycle
- AggregateRoot: Entities that record domain events and guard invariants
- DomainEvent: Something that happened to an aggregate
"""

from abc import ABC
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import uuid4

from buildops.core.errors import DomainValidationError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =====================================================================================
# VALUE OBJECT BASE CLASS
# =====================================================================================


class ValueObject(ABC):
    """
    Base value object.

    Subclasses assign their attributes in ``__init__`` and call
    ``self._freeze()``; afterwards the object cannot be modified.

    Usage Example:
        class Money(ValueObject):
            def __init__(self, amount: Decimal):
                super().__init__()
                self.validate_in_range(amount, 0, 10**9, "amount")
                self.amount = amount
                self._freeze()
    """

    def __init__(self):
        self._frozen = False
        self._hash_cache = None

    def _freeze(self) -> None:
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False) and name != "_hash_cache":
            raise AttributeError(f"Cannot modify immutable {self.__class__.__name__}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot delete attribute from immutable {self.__class__.__name__}"
            )
        super().__delattr__(name)

    def _public_attributes(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self._public_attributes() == other._public_attributes()

    def __hash__(self) -> int:
        if self._hash_cache is None:
            values = []
            for key, value in sorted(self._public_attributes().items()):
                if isinstance(value, dict):
                    value = tuple(sorted(value.items()))
                elif isinstance(value, list | set):
                    value = tuple(sorted(value) if isinstance(value, set) else value)
                values.append((key, value))
            self._hash_cache = hash((self.__class__.__name__, tuple(values)))
        return self._hash_cache

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self._public_attributes().items())
        return f"{self.__class__.__name__}({attrs})"

    def to_dict(self) -> dict[str, Any]:
        result = {}
        for key, value in self._public_attributes().items():
            if hasattr(value, "to_dict"):
                result[key] = value.to_dict()
            elif hasattr(value, "value") and not isinstance(value, str | int | float):
                result[key] = value.value
            else:
                result[key] = value
        return result

    @classmethod
    def validate_not_empty(cls, value: Any, field_name: str) -> None:
        """
        Raises:
            DomainValidationError: If value is None or blank
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise DomainValidationError(field_name, "Must not be empty")

    @classmethod
    def validate_length(
        cls, value: str, min_length: int, max_length: int, field_name: str
    ) -> None:
        """
        Raises:
            DomainValidationError: If the trimmed length is out of range
        """
        if not isinstance(value, str):
            raise DomainValidationError(field_name, "Must be a string")

        length = len(value.strip())
        if length < min_length:
            raise DomainValidationError(field_name, f"Must be at least {min_length} characters")
        if length > max_length:
            raise DomainValidationError(field_name, f"Must not exceed {max_length} characters")

    @classmethod
    def validate_in_range(cls, value: Any, min_val: Any, max_val: Any, field_name: str) -> None:
        if value < min_val or value > max_val:
            raise DomainValidationError(
                field_name, f"Must be between {min_val} and {max_val}"
            )


# =====================================================================================
# ENTITY BASE CLASS
# =====================================================================================


class Entity(ABC):
    """
    Base entity with identity and lifecycle timestamps.

    Entities compare equal when they are of the same class and share an id.
    """

    def __init__(self, entity_id: str | None = None):
        self.id = entity_id or str(uuid4())
        self.created_at = utc_now()
        self.updated_at = self.created_at

    def mark_modified(self) -> None:
        self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, created_at={self.created_at})"


# =====================================================================================
# DOMAIN EVENT BASE CLASS
# =====================================================================================


class DomainEvent:
    """
    Base domain event.

    ``event_type`` is a stable dotted name used by subscribers, for example
    ``"quote.submitted"``.
    """

    event_type: str = "domain.event"

    def __init__(self, aggregate_id: str, **payload: Any):
        self.event_id = str(uuid4())
        self.occurred_at = utc_now()
        self.aggregate_id = aggregate_id
        self.payload = payload

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(aggregate_id={self.aggregate_id})"


# =====================================================================================
# AGGREGATE ROOT CLASS
# =====================================================================================


class AggregateRoot(Entity):
    """
    Aggregate root with domain event management.

    State-changing methods record events with ``add_event``; the application
    layer publishes them after saving and clears them with ``collect_events``.
    """

    def __init__(self, entity_id: str | None = None):
        super().__init__(entity_id)
        self._events: list[DomainEvent] = []
        self._version = 1

    def add_event(self, event: DomainEvent) -> None:
        self._events.append(event)
        self._version += 1
        self.mark_modified()

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear the uncommitted events."""
        events = self._events.copy()
        self._events.clear()
        return events

    def get_events(self) -> list[DomainEvent]:
        return self._events.copy()

    def has_events(self) -> bool:
        return bool(self._events)

    @property
    def version(self) -> int:
        return self._version

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id={self.id}, "
            f"version={self._version}, "
            f"events={len(self._events)})"
        )


EntityT = TypeVar("EntityT", bound=Entity)
AggregateT = TypeVar("AggregateT", bound=AggregateRoot)

__all__ = [
    "AggregateRoot",
    "AggregateT",
    "DomainEvent",
    "Entity",
    "EntityT",
    "ValueObject",
    "utc_now",
]
