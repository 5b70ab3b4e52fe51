"""
Quote queries.

Cache lifetimes are declared on each query type:

    GetQuoteListQuery              300s
    GetQuoteDetailsQuery            60s
    GetServiceTypesQuery          3600s
    GetQuoteDashboardSummaryQuery   60s
    GetQuoteStatusQuery           never cached (customer-facing, real time)
"""

from datetime import datetime
from typing import Any

from buildops.core.cqrs.base import Pagination, Query, Sorting, enum_filter_value
from buildops.core.enums import SortDirection
from buildops.core.errors import ValidationError
from buildops.modules.quote.domain.enums import QuotePriority, QuoteStatus, ServiceCategory
from buildops.modules.quote.domain.repositories import QUOTE_SORT_FIELDS

MAX_PAGE_SIZE = 100


class GetQuoteListQuery(Query):
    """Filtered, paginated list of quote summaries for the admin dashboard."""

    message_type = "quote.get_list"
    cache_ttl = 300

    def __init__(
        self,
        status: str | QuoteStatus | None = None,
        priority: str | QuotePriority | None = None,
        service_type: str | None = None,
        customer_name: str | None = None,
        customer_email: str | None = None,
        submitted_after: datetime | None = None,
        submitted_before: datetime | None = None,
        is_expired: bool | None = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "submitted_at",
        sort_order: str | SortDirection = SortDirection.DESC,
        **kwargs: Any,
    ):
        super().__init__(
            filters={
                "status": enum_filter_value(QuoteStatus, status, "status"),
                "priority": enum_filter_value(QuotePriority, priority, "priority"),
                "service_type": service_type,
                "customer_name": customer_name,
                "customer_email": customer_email.strip().lower() if customer_email else None,
                "submitted_after": submitted_after,
                "submitted_before": submitted_before,
                "is_expired": is_expired,
            },
            pagination=Pagination(page=page, limit=limit),
            sorting=Sorting(sort_by, sort_order),
            **kwargs,
        )
        self._freeze()

    def _validate_query(self) -> None:
        if self.pagination.limit > MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must not exceed {MAX_PAGE_SIZE}", field="limit")
        if self.sorting.field not in QUOTE_SORT_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{self.sorting.field}'. "
                f"Allowed fields: {', '.join(QUOTE_SORT_FIELDS)}",
                field="sort_by",
            )
        after = self.filters.get("submitted_after")
        before = self.filters.get("submitted_before")
        if after and before and after > before:
            raise ValidationError(
                "submitted_after must be before submitted_before", field="submitted_after"
            )


class GetQuoteDetailsQuery(Query):
    """Everything about one quote, including attachment links and its timeline."""

    message_type = "quote.get_details"
    cache_ttl = 60

    def __init__(
        self,
        quote_id: str,
        include_attachments: bool = True,
        include_timeline: bool = True,
        **kwargs: Any,
    ):
        super().__init__(
            filters={
                "quote_id": quote_id,
                "include_attachments": include_attachments,
                "include_timeline": include_timeline,
            },
            **kwargs,
        )
        self.quote_id = quote_id
        self.include_attachments = include_attachments
        self.include_timeline = include_timeline
        self._freeze()

    def _validate_query(self) -> None:
        if not isinstance(self.quote_id, str) or not self.quote_id.strip():
            raise ValidationError("Quote id is required", field="quote_id")


class GetServiceTypesQuery(Query):
    """The service catalogue, optionally narrowed to one category."""

    message_type = "quote.get_service_types"
    cache_ttl = 3600

    def __init__(self, category: str | ServiceCategory | None = None, **kwargs: Any):
        self.category = enum_filter_value(ServiceCategory, category, "category")
        super().__init__(filters={"category": self.category}, **kwargs)
        self._freeze()


class GetQuoteStatusQuery(Query):
    """A customer's own lookup; the email must match the quote's."""

    message_type = "quote.get_status"
    cacheable = False

    def __init__(self, quote_id: str, email: str, **kwargs: Any):
        super().__init__(filters={"quote_id": quote_id}, **kwargs)
        self.quote_id = quote_id
        self.email = email
        self._freeze()

    def _validate_query(self) -> None:
        if not isinstance(self.quote_id, str) or not self.quote_id.strip():
            raise ValidationError("Quote id is required", field="quote_id")
        if not isinstance(self.email, str) or not self.email.strip():
            raise ValidationError("Email is required", field="email")


class GetQuoteDashboardSummaryQuery(Query):
    """Counts by status plus the urgent requests still pending."""

    message_type = "quote.get_dashboard_summary"
    cache_ttl = 60

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self._freeze()


__all__ = [
    "MAX_PAGE_SIZE",
    "GetQuoteDashboardSummaryQuery",
    "GetQuoteDetailsQuery",
    "GetQuoteListQuery",
    "GetQuoteStatusQuery",
    "GetServiceTypesQuery",
]
