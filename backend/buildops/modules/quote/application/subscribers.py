"""Quote event subscribers: customer and office notifications."""

from buildops.core.domain.base import DomainEvent
from buildops.core.domain.ports import DomainEventPublisher, NotificationService
from buildops.core.logging import get_logger
from buildops.modules.quote.domain.entities import Quote
from buildops.modules.quote.domain.events import (
    QuoteRejectedEvent,
    QuoteSentEvent,
    QuoteSubmittedEvent,
)
from buildops.modules.quote.domain.repositories import QuoteRepository

logger = get_logger(__name__)


class QuoteNotificationSubscriber:
    """
    Sends the emails that follow quote events.

    Events are published after the quote is saved, so the subscriber reads
    the current state from the repository instead of the event payload.
    """

    def __init__(self, repository: QuoteRepository, notifications: NotificationService):
        self.repository = repository
        self.notifications = notifications

    def register(self, publisher: DomainEventPublisher) -> None:
        publisher.subscribe(QuoteSubmittedEvent.event_type, self.on_quote_submitted)
        publisher.subscribe(QuoteSentEvent.event_type, self.on_quote_sent)
        publisher.subscribe(QuoteRejectedEvent.event_type, self.on_quote_rejected)

    async def on_quote_submitted(self, event: DomainEvent) -> None:
        quote = await self._load(event)
        if quote is None:
            return
        await self.notifications.send_quote_confirmation(quote, quote.confirmation_number)
        await self.notifications.send_admin_quote_notification(quote)

    async def on_quote_sent(self, event: DomainEvent) -> None:
        quote = await self._load(event)
        if quote is None:
            return
        await self.notifications.send_quote_decision(quote, "sent", quote.notes)

    async def on_quote_rejected(self, event: DomainEvent) -> None:
        if not event.payload.get("notify_customer", True):
            logger.debug("Customer notification skipped", quote_id=event.aggregate_id)
            return
        quote = await self._load(event)
        if quote is None:
            return
        await self.notifications.send_quote_decision(
            quote, "rejected", event.payload.get("reason")
        )

    async def _load(self, event: DomainEvent) -> Quote | None:
        quote = await self.repository.find_by_id(event.aggregate_id)
        if quote is None:
            logger.warning(
                "Quote for event not found",
                event_type=event.event_type,
                quote_id=event.aggregate_id,
            )
        return quote


__all__ = ["QuoteNotificationSubscriber"]
