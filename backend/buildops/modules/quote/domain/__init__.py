"""Quote domain layer."""

from buildops.modules.quote.domain.entities import Quote, QuoteHistoryEntry
from buildops.modules.quote.domain.enums import QuotePriority, QuoteStatus, ServiceCategory
from buildops.modules.quote.domain.events import (
    QuoteAcceptedEvent,
    QuoteMovedToReviewEvent,
    QuotePriorityChangedEvent,
    QuoteRejectedEvent,
    QuoteSentEvent,
    QuoteSubmittedEvent,
)
from buildops.modules.quote.domain.repositories import (
    QuoteRepository,
    QuoteSearchCriteria,
    QuoteSearchResult,
)
from buildops.modules.quote.domain.value_objects import ServiceType

__all__ = [
    "Quote",
    "QuoteAcceptedEvent",
    "QuoteHistoryEntry",
    "QuoteMovedToReviewEvent",
    "QuotePriority",
    "QuotePriorityChangedEvent",
    "QuoteRejectedEvent",
    "QuoteRepository",
    "QuoteSearchCriteria",
    "QuoteSearchResult",
    "QuoteSentEvent",
    "QuoteStatus",
    "QuoteSubmittedEvent",
    "ServiceCategory",
    "ServiceType",
]
