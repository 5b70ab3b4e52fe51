"""In-process domain event publisher."""

import inspect
from collections import defaultdict

from buildops.core.domain.base import DomainEvent
from buildops.core.domain.ports import DomainEventPublisher, EventHandlerType
from buildops.core.errors import ValidationError
from buildops.core.logging import get_logger

logger = get_logger(__name__)


class InMemoryEventPublisher(DomainEventPublisher):
    """
    Calls subscribers in subscription order.

    A failing subscriber is logged and skipped; the event still reaches the
    remaining subscribers and ``publish`` does not raise. Sync and async
    handlers are both accepted.
    """

    def __init__(self):
        self._subscribers: dict[str, list[EventHandlerType]] = defaultdict(list)
        self.published: list[DomainEvent] = []
        self.failures = 0

    def subscribe(self, event_type: str, handler: EventHandlerType) -> None:
        if not callable(handler):
            raise ValidationError("Event handler must be callable", field="handler")
        self._subscribers[event_type].append(handler)
        logger.debug(
            "Event subscriber registered",
            event_type=event_type,
            handler=getattr(handler, "__qualname__", repr(handler)),
        )

    def subscribers_for(self, event_type: str) -> list[EventHandlerType]:
        return list(self._subscribers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        if not isinstance(event, DomainEvent):
            raise ValidationError(
                f"Event must be a DomainEvent, got {type(event).__name__}", field="event"
            )

        self.published.append(event)
        handlers = self.subscribers_for(event.event_type)
        logger.info(
            "Publishing event",
            event_type=event.event_type,
            event_id=event.event_id,
            aggregate_id=event.aggregate_id,
            handler_count=len(handlers),
        )

        for handler in handlers:
            try:
                outcome = handler(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                self.failures += 1
                logger.error(
                    "Event handler failed",
                    event_type=event.event_type,
                    event_id=event.event_id,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                    exc_info=e,
                )


__all__ = ["InMemoryEventPublisher"]
