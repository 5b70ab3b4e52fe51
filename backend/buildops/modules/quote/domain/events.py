"""
Quote Domain Events
"""

from buildops.core.domain.base import DomainEvent


class QuoteSubmittedEvent(DomainEvent):
    event_type = "quote.submitted"


class QuoteMovedToReviewEvent(DomainEvent):
    event_type = "quote.moved_to_review"


class QuoteSentEvent(DomainEvent):
    event_type = "quote.sent"


class QuoteAcceptedEvent(DomainEvent):
    event_type = "quote.accepted"


class QuoteRejectedEvent(DomainEvent):
    event_type = "quote.rejected"


class QuotePriorityChangedEvent(DomainEvent):
    event_type = "quote.priority_changed"


__all__ = [
    "QuoteAcceptedEvent",
    "QuoteMovedToReviewEvent",
    "QuotePriorityChangedEvent",
    "QuoteRejectedEvent",
    "QuoteSentEvent",
    "QuoteSubmittedEvent",
]
