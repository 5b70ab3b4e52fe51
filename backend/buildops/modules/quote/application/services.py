"""Quote application service."""

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from buildops.core.application import ApplicationService
from buildops.core.cqrs.base import CommandResult, QueryResult
from buildops.core.domain.ports import UploadedFile
from buildops.modules.quote.application.commands import (
    AcceptQuoteCommand,
    MoveQuoteToReviewCommand,
    RejectQuoteCommand,
    SendQuoteCommand,
    SubmitQuoteRequestCommand,
    UpdateQuotePriorityCommand,
)
from buildops.modules.quote.application.queries import (
    GetQuoteDashboardSummaryQuery,
    GetQuoteDetailsQuery,
    GetQuoteListQuery,
    GetQuoteStatusQuery,
    GetServiceTypesQuery,
)


class QuoteApplicationService(ApplicationService):
    """
    Entry point for everything callers do with quotes.

    Usage Example:
        result = await quotes.submit_quote_request(
            customer_name="Alice",
            email="alice@example.com",
            phone="555-123-4567",
            service_type="painting",
            description="Repaint the front office",
        )
        if result.success:
            print(result.data["confirmation_number"])
    """

    # =================================================================================
    # COMMANDS
    # =================================================================================

    async def submit_quote_request(
        self,
        customer_name: str,
        email: str,
        phone: str,
        service_type: str,
        description: str,
        photo_files: Iterable[UploadedFile] | None = None,
        request_metadata: Mapping[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: SubmitQuoteRequestCommand(
                customer_name=customer_name,
                email=email,
                phone=phone,
                service_type=service_type,
                description=description,
                photo_files=photo_files,
                request_metadata=request_metadata,
                correlation_id=correlation_id,
            )
        )

    async def move_to_review(
        self, quote_id: str, user_id: str | None = None, correlation_id: str | None = None
    ) -> CommandResult:
        return await self.execute_command(
            lambda: MoveQuoteToReviewCommand(
                quote_id, user_id=user_id, correlation_id=correlation_id
            )
        )

    async def send_quote(
        self,
        quote_id: str,
        estimated_value: Decimal | float,
        notes: str | None = None,
        valid_until: datetime | None = None,
        user_id: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: SendQuoteCommand(
                quote_id,
                estimated_value,
                notes=notes,
                valid_until=valid_until,
                user_id=user_id,
                correlation_id=correlation_id,
            )
        )

    async def update_priority(
        self,
        quote_id: str,
        priority: str,
        reason: str | None = None,
        user_id: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: UpdateQuotePriorityCommand(
                quote_id, priority, reason=reason, user_id=user_id, correlation_id=correlation_id
            )
        )

    async def reject_quote(
        self,
        quote_id: str,
        reason: str,
        notify_customer: bool = True,
        user_id: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: RejectQuoteCommand(
                quote_id,
                reason,
                notify_customer=notify_customer,
                user_id=user_id,
                correlation_id=correlation_id,
            )
        )

    async def accept_quote(
        self,
        quote_id: str,
        customer_signature: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: AcceptQuoteCommand(
                quote_id, customer_signature=customer_signature, correlation_id=correlation_id
            )
        )

    # =================================================================================
    # QUERIES
    # =================================================================================

    async def get_quote_list(
        self, correlation_id: str | None = None, **criteria: Any
    ) -> QueryResult:
        """``criteria`` are the keyword arguments of ``GetQuoteListQuery``."""
        return await self.execute_query(
            lambda: GetQuoteListQuery(correlation_id=correlation_id, **criteria)
        )

    async def get_quotes_by_status(self, status: str, page: int = 1, limit: int = 20) -> QueryResult:
        return await self.get_quote_list(status=status, page=page, limit=limit)

    async def search_quotes_by_customer(
        self, customer_name: str, page: int = 1, limit: int = 20
    ) -> QueryResult:
        return await self.get_quote_list(
            customer_name=customer_name,
            page=page,
            limit=limit,
            sort_by="customer_name",
            sort_order="asc",
        )

    async def get_quote_details(
        self,
        quote_id: str,
        include_attachments: bool = True,
        include_timeline: bool = True,
        correlation_id: str | None = None,
    ) -> QueryResult:
        return await self.execute_query(
            lambda: GetQuoteDetailsQuery(
                quote_id,
                include_attachments=include_attachments,
                include_timeline=include_timeline,
                correlation_id=correlation_id,
            )
        )

    async def get_service_types(self, category: str | None = None) -> QueryResult:
        return await self.execute_query(lambda: GetServiceTypesQuery(category=category))

    async def get_quote_status(
        self, quote_id: str, email: str, correlation_id: str | None = None
    ) -> QueryResult:
        return await self.execute_query(
            lambda: GetQuoteStatusQuery(quote_id, email, correlation_id=correlation_id)
        )

    async def get_dashboard_summary(self) -> QueryResult:
        return await self.execute_query(GetQuoteDashboardSummaryQuery)


__all__ = ["QuoteApplicationService"]
