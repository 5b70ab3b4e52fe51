"""
Quote Routes

Public endpoints for submitting a request and checking its status, and the
admin endpoints for working through the review pipeline.
"""

from datetime import datetime

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from buildops.presentation.api.dependencies import CorrelationId, QuoteService, UserId
from buildops.presentation.api.responses import result_response
from buildops.presentation.api.schemas import (
    AcceptQuoteRequest,
    RejectQuoteRequest,
    SendQuoteRequest,
    SubmitQuoteRequest,
    UpdatePriorityRequest,
)

router = APIRouter(prefix="/api", tags=["quotes"])


@router.post("/quotes", status_code=status.HTTP_201_CREATED, summary="Submit Quote Request")
async def submit_quote_request(
    body: SubmitQuoteRequest, quotes: QuoteService, correlation_id: CorrelationId
) -> JSONResponse:
    result = await quotes.submit_quote_request(
        customer_name=body.customer_name,
        email=body.email,
        phone=body.phone,
        service_type=body.service_type,
        description=body.description,
        photo_files=[photo.to_uploaded_file() for photo in body.photos],
        request_metadata=body.metadata,
        correlation_id=correlation_id,
    )
    return result_response(result, status.HTTP_201_CREATED)


@router.get("/quotes", summary="List Quotes")
async def list_quotes(
    quotes: QuoteService,
    correlation_id: CorrelationId,
    status_filter: str | None = Query(None, alias="status"),
    priority: str | None = None,
    service_type: str | None = None,
    customer_name: str | None = None,
    customer_email: str | None = None,
    submitted_after: datetime | None = None,
    submitted_before: datetime | None = None,
    is_expired: bool | None = None,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "submitted_at",
    sort_order: str = "desc",
) -> JSONResponse:
    result = await quotes.get_quote_list(
        correlation_id=correlation_id,
        status=status_filter,
        priority=priority,
        service_type=service_type,
        customer_name=customer_name,
        customer_email=customer_email,
        submitted_after=submitted_after,
        submitted_before=submitted_before,
        is_expired=is_expired,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return result_response(result)


@router.get("/quotes/summary", summary="Quote Dashboard Summary")
async def quote_dashboard_summary(quotes: QuoteService) -> JSONResponse:
    return result_response(await quotes.get_dashboard_summary())


@router.get("/quotes/{quote_id}", summary="Get Quote Details")
async def get_quote_details(
    quote_id: str,
    quotes: QuoteService,
    correlation_id: CorrelationId,
    include_attachments: bool = True,
    include_timeline: bool = True,
) -> JSONResponse:
    result = await quotes.get_quote_details(
        quote_id,
        include_attachments=include_attachments,
        include_timeline=include_timeline,
        correlation_id=correlation_id,
    )
    return result_response(result)


@router.get("/quotes/{quote_id}/status", summary="Check Quote Status")
async def get_quote_status(
    quote_id: str, email: str, quotes: QuoteService, correlation_id: CorrelationId
) -> JSONResponse:
    result = await quotes.get_quote_status(quote_id, email, correlation_id=correlation_id)
    return result_response(result)


@router.post("/quotes/{quote_id}/review", summary="Move Quote To Review")
async def move_quote_to_review(
    quote_id: str, quotes: QuoteService, user_id: UserId, correlation_id: CorrelationId
) -> JSONResponse:
    result = await quotes.move_to_review(
        quote_id, user_id=user_id, correlation_id=correlation_id
    )
    return result_response(result)


@router.post("/quotes/{quote_id}/send", summary="Send Quote")
async def send_quote(
    quote_id: str,
    body: SendQuoteRequest,
    quotes: QuoteService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await quotes.send_quote(
        quote_id,
        body.estimated_value,
        notes=body.notes,
        valid_until=body.valid_until,
        user_id=user_id,
        correlation_id=correlation_id,
    )
    return result_response(result)


@router.post("/quotes/{quote_id}/priority", summary="Update Quote Priority")
async def update_quote_priority(
    quote_id: str,
    body: UpdatePriorityRequest,
    quotes: QuoteService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await quotes.update_priority(
        quote_id,
        body.priority,
        reason=body.reason,
        user_id=user_id,
        correlation_id=correlation_id,
    )
    return result_response(result)


@router.post("/quotes/{quote_id}/reject", summary="Reject Quote")
async def reject_quote(
    quote_id: str,
    body: RejectQuoteRequest,
    quotes: QuoteService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await quotes.reject_quote(
        quote_id,
        body.reason,
        notify_customer=body.notify_customer,
        user_id=user_id,
        correlation_id=correlation_id,
    )
    return result_response(result)


@router.post("/quotes/{quote_id}/accept", summary="Accept Quote")
async def accept_quote(
    quote_id: str,
    body: AcceptQuoteRequest,
    quotes: QuoteService,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await quotes.accept_quote(
        quote_id,
        customer_signature=body.customer_signature,
        correlation_id=correlation_id,
    )
    return result_response(result)


@router.get("/service-types", tags=["service-types"], summary="List Service Types")
async def list_service_types(quotes: QuoteService, category: str | None = None) -> JSONResponse:
    return result_response(await quotes.get_service_types(category))
