"""Quote infrastructure adapters."""

from buildops.modules.quote.infrastructure.repositories import InMemoryQuoteRepository

__all__ = ["InMemoryQuoteRepository"]
