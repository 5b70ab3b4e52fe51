"""Quote query handlers. None of them modify state."""

from typing import Any

from buildops.core.cqrs.base import PaginatedResult, QueryHandler, QueryResult
from buildops.core.domain.ports import FileStorageService
from buildops.core.errors import FieldError
from buildops.core.logging import get_logger
from buildops.modules.quote.application.queries import (
    GetQuoteDashboardSummaryQuery,
    GetQuoteDetailsQuery,
    GetQuoteListQuery,
    GetQuoteStatusQuery,
    GetServiceTypesQuery,
)
from buildops.modules.quote.domain.entities import Quote
from buildops.modules.quote.domain.enums import QuotePriority, QuoteStatus, ServiceCategory
from buildops.modules.quote.domain.repositories import QuoteRepository, QuoteSearchCriteria
from buildops.modules.quote.domain.value_objects import ServiceType

logger = get_logger(__name__)


def _quote_not_found(query_id: str, quote_id: str) -> QueryResult:
    return QueryResult.failure(
        query_id,
        [FieldError("quote_id", f"Quote {quote_id} was not found", "NOT_FOUND")],
        "Quote not found",
    )


def service_type_to_dict(service_type: ServiceType) -> dict[str, Any]:
    return {
        "key": service_type.key,
        "name": service_type.name,
        "category": service_type.category.value,
        "description": service_type.description,
        "estimated_response_time": service_type.estimated_response_time,
    }


class GetQuoteListHandler(QueryHandler[GetQuoteListQuery, PaginatedResult]):
    def __init__(self, repository: QuoteRepository):
        self.repository = repository

    async def handle(self, query: GetQuoteListQuery) -> QueryResult[PaginatedResult]:
        filters = query.filters
        criteria = QuoteSearchCriteria(
            status=QuoteStatus(filters["status"]) if filters.get("status") else None,
            priority=QuotePriority(filters["priority"]) if filters.get("priority") else None,
            service_type=filters.get("service_type"),
            customer_name=filters.get("customer_name"),
            customer_email=filters.get("customer_email"),
            submitted_after=filters.get("submitted_after"),
            submitted_before=filters.get("submitted_before"),
            is_expired=filters.get("is_expired"),
            offset=query.pagination.offset,
            limit=query.pagination.limit,
            order_by=query.sorting.field,
            order_direction=query.sorting.direction,
        )
        found = await self.repository.find_with_filters(criteria)

        page = PaginatedResult.build(
            [quote.to_summary() for quote in found.items], found.total, query.pagination
        )
        return QueryResult.ok(query.query_id, page)


class GetQuoteDetailsHandler(QueryHandler[GetQuoteDetailsQuery, dict[str, Any]]):
    """
    Full quote view for the admin detail page.

    Attachment links are signed for ``signed_url_ttl_seconds``, which should
    comfortably exceed the query's cache lifetime.
    """

    def __init__(
        self,
        repository: QuoteRepository,
        file_storage: FileStorageService,
        signed_url_ttl_seconds: int = 3600,
    ):
        self.repository = repository
        self.file_storage = file_storage
        self.signed_url_ttl_seconds = signed_url_ttl_seconds

    async def handle(self, query: GetQuoteDetailsQuery) -> QueryResult[dict[str, Any]]:
        quote = await self.repository.find_by_id(query.quote_id)
        if quote is None:
            return _quote_not_found(query.query_id, query.quote_id)

        details = self._details(quote)
        if query.include_attachments:
            details["attachments"] = await self._attachments(quote)
        if query.include_timeline:
            details["timeline"] = [entry.to_dict() for entry in quote.history]

        return QueryResult.ok(query.query_id, details)

    @staticmethod
    def _details(quote: Quote) -> dict[str, Any]:
        return {
            "id": quote.id,
            "confirmation_number": quote.confirmation_number,
            "customer": {
                "name": quote.customer_name,
                "email": quote.email.value,
                "phone": quote.phone.value,
                "phone_formatted": quote.phone.formatted,
            },
            "service_type": service_type_to_dict(quote.service_type),
            "description": quote.description,
            "status": quote.status.value,
            "priority": quote.priority.value,
            "submitted_at": quote.submitted_at.isoformat(),
            "updated_at": quote.updated_at.isoformat(),
            "estimated_value": float(quote.estimated_value) if quote.estimated_value else None,
            "quote_sent_at": quote.quote_sent_at.isoformat() if quote.quote_sent_at else None,
            "expires_at": quote.expires_at.isoformat() if quote.expires_at else None,
            "is_expired": quote.is_expired(),
            "notes": quote.notes,
            "rejection_reason": quote.rejection_reason,
            "estimated_response_time": quote.estimated_response_time,
            "metadata": dict(quote.metadata),
            "version": quote.version,
        }

    async def _attachments(self, quote: Quote) -> list[dict[str, Any]]:
        attachments = []
        for file_id in quote.photo_attachments:
            stored = await self.file_storage.get_file_metadata(file_id)
            if stored is None:
                logger.warning("Quote attachment missing", quote_id=quote.id, file_id=file_id)
                continue
            attachments.append(
                {
                    **stored.to_dict(),
                    "url": await self.file_storage.generate_signed_url(
                        file_id, self.signed_url_ttl_seconds
                    ),
                }
            )
        return attachments


class GetServiceTypesHandler(QueryHandler[GetServiceTypesQuery, list[dict[str, Any]]]):
    async def handle(self, query: GetServiceTypesQuery) -> list[dict[str, Any]]:
        if query.category:
            service_types = ServiceType.by_category(ServiceCategory(query.category))
        else:
            service_types = ServiceType.all()
        return [service_type_to_dict(service_type) for service_type in service_types]


class GetQuoteStatusHandler(QueryHandler[GetQuoteStatusQuery, dict[str, Any]]):
    """Customer-facing status lookup; a wrong email looks the same as a wrong id."""

    def __init__(self, repository: QuoteRepository):
        self.repository = repository

    async def handle(self, query: GetQuoteStatusQuery) -> QueryResult[dict[str, Any]]:
        quote = await self.repository.find_by_id(query.quote_id)
        if quote is None or quote.email.value != query.email.strip().lower():
            return _quote_not_found(query.query_id, query.quote_id)

        status = {
            "quote_id": quote.id,
            "confirmation_number": quote.confirmation_number,
            "status": quote.status.value,
            "status_display": quote.status.get_display_name(),
            "service_type": quote.service_type.name,
            "submitted_at": quote.submitted_at.isoformat(),
            "updated_at": quote.updated_at.isoformat(),
            "estimated_response_time": quote.estimated_response_time,
        }
        if quote.status in (QuoteStatus.QUOTE_SENT, QuoteStatus.ACCEPTED):
            status["estimated_value"] = float(quote.estimated_value)
            status["expires_at"] = quote.expires_at.isoformat()
            status["is_expired"] = quote.is_expired()
        return QueryResult.ok(query.query_id, status)


class GetQuoteDashboardSummaryHandler(
    QueryHandler[GetQuoteDashboardSummaryQuery, dict[str, Any]]
):
    def __init__(self, repository: QuoteRepository):
        self.repository = repository

    async def handle(self, query: GetQuoteDashboardSummaryQuery) -> dict[str, Any]:
        found = await self.repository.find_with_filters(QuoteSearchCriteria())

        by_status = {status.value: 0 for status in QuoteStatus}
        urgent_pending = 0
        for quote in found.items:
            by_status[quote.status.value] += 1
            if quote.is_urgent and quote.status == QuoteStatus.PENDING:
                urgent_pending += 1

        return {
            "total": found.total,
            "by_status": by_status,
            "urgent_pending": urgent_pending,
            "awaiting_review": by_status[QuoteStatus.PENDING.value],
        }


__all__ = [
    "GetQuoteDashboardSummaryHandler",
    "GetQuoteDetailsHandler",
    "GetQuoteListHandler",
    "GetQuoteStatusHandler",
    "GetServiceTypesHandler",
    "service_type_to_dict",
]
