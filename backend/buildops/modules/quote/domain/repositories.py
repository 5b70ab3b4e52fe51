"""
Quote repository port.
"""

from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime

from buildops.core.enums import SortDirection
from buildops.core.repositories import Repository, SearchResult
from buildops.modules.quote.domain.entities import Quote
from buildops.modules.quote.domain.enums import QuotePriority, QuoteStatus

QUOTE_SORT_FIELDS = ("submitted_at", "updated_at", "customer_name")


@dataclass(frozen=True)
class QuoteSearchCriteria:
    """Filters for ``QuoteRepository.find_with_filters``; None means any."""

    status: QuoteStatus | None = None
    priority: QuotePriority | None = None
    service_type: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    submitted_after: datetime | None = None
    submitted_before: datetime | None = None
    is_expired: bool | None = None
    offset: int = 0
    limit: int | None = None
    order_by: str = "submitted_at"
    order_direction: SortDirection = SortDirection.DESC

    def matches(self, quote: Quote) -> bool:
        if self.status is not None and quote.status != self.status:
            return False
        if self.priority is not None and quote.priority != self.priority:
            return False
        if self.service_type is not None and quote.service_type.key != self.service_type:
            return False
        if (
            self.customer_name is not None
            and self.customer_name.lower() not in quote.customer_name.lower()
        ):
            return False
        if (
            self.customer_email is not None
            and quote.email.value != self.customer_email.strip().lower()
        ):
            return False
        if self.submitted_after is not None and quote.submitted_at < self.submitted_after:
            return False
        if self.submitted_before is not None and quote.submitted_at > self.submitted_before:
            return False
        if self.is_expired is not None and quote.is_expired() != self.is_expired:
            return False
        return True


QuoteSearchResult = SearchResult[Quote]


class QuoteRepository(Repository[Quote]):
    """Persistence port for quote aggregates."""

    @abstractmethod
    async def find_by_email(self, email: str) -> list[Quote]:
        """All quotes submitted from ``email``, newest first."""

    @abstractmethod
    async def find_with_filters(self, criteria: QuoteSearchCriteria) -> QuoteSearchResult:
        """One page of quotes matching ``criteria``."""


__all__ = [
    "QUOTE_SORT_FIELDS",
    "QuoteRepository",
    "QuoteSearchCriteria",
    "QuoteSearchResult",
]
