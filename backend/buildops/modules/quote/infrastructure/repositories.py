"""In-memory quote repository."""

from buildops.core.repositories import InMemoryRepository
from buildops.modules.quote.domain.entities import Quote
from buildops.modules.quote.domain.repositories import (
    QuoteRepository,
    QuoteSearchCriteria,
    QuoteSearchResult,
)

_SORT_KEYS = {
    "submitted_at": lambda quote: quote.submitted_at,
    "updated_at": lambda quote: quote.updated_at,
    "customer_name": lambda quote: quote.customer_name.lower(),
}


class InMemoryQuoteRepository(InMemoryRepository[Quote], QuoteRepository):
    async def find_by_email(self, email: str) -> list[Quote]:
        normalized = email.strip().lower()
        matches = [quote for quote in self.all() if quote.email.value == normalized]
        return sorted(matches, key=lambda quote: quote.submitted_at, reverse=True)

    async def find_with_filters(self, criteria: QuoteSearchCriteria) -> QuoteSearchResult:
        sort_key = _SORT_KEYS.get(criteria.order_by, _SORT_KEYS["submitted_at"])
        return self.page(
            (quote for quote in self.all() if criteria.matches(quote)),
            sort_key=sort_key,
            descending=criteria.order_direction.is_descending,
            offset=criteria.offset,
            limit=criteria.limit,
        )


__all__ = ["InMemoryQuoteRepository"]
