"""FastAPI dependencies that reach into the application container."""

from typing import Annotated

from fastapi import Depends, Header, Request

from buildops.bootstrap import ApplicationContainer
from buildops.modules.hiring.application.services import JobApplicationApplicationService
from buildops.modules.quote.application.services import QuoteApplicationService


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_quote_service(
    container: Annotated[ApplicationContainer, Depends(get_container)],
) -> QuoteApplicationService:
    return container.quotes


def get_application_service(
    container: Annotated[ApplicationContainer, Depends(get_container)],
) -> JobApplicationApplicationService:
    return container.job_applications


def get_correlation_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str | None:
    """Acting staff member, as forwarded by the admin front end."""
    return x_user_id


Container = Annotated[ApplicationContainer, Depends(get_container)]
QuoteService = Annotated[QuoteApplicationService, Depends(get_quote_service)]
ApplicationService = Annotated[
    JobApplicationApplicationService, Depends(get_application_service)
]
CorrelationId = Annotated[str | None, Depends(get_correlation_id)]
UserId = Annotated[str | None, Depends(get_user_id)]

__all__ = [
    "ApplicationService",
    "Container",
    "CorrelationId",
    "QuoteService",
    "UserId",
    "get_application_service",
    "get_container",
    "get_correlation_id",
    "get_quote_service",
    "get_user_id",
]
