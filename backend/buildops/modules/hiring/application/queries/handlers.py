"""Job application query handlers."""

from typing import Any

from buildops.core.cqrs.base import PaginatedResult, QueryHandler, QueryResult
from buildops.core.domain.ports import FileStorageService
from buildops.core.errors import FieldError
from buildops.core.logging import get_logger
from buildops.modules.hiring.application.queries import (
    GetJobApplicationDetailsQuery,
    GetJobApplicationListQuery,
)
from buildops.modules.hiring.domain.entities import JobApplication
from buildops.modules.hiring.domain.enums import ApplicationStatus, ExperienceLevel
from buildops.modules.hiring.domain.repositories import (
    JobApplicationRepository,
    JobApplicationSearchCriteria,
)

logger = get_logger(__name__)


class GetJobApplicationListHandler(QueryHandler[GetJobApplicationListQuery, PaginatedResult]):
    def __init__(self, repository: JobApplicationRepository):
        self.repository = repository

    async def handle(self, query: GetJobApplicationListQuery) -> QueryResult[PaginatedResult]:
        filters = query.filters
        level = filters.get("experience_level")
        criteria = JobApplicationSearchCriteria(
            status=ApplicationStatus(filters["status"]) if filters.get("status") else None,
            experience_level=ExperienceLevel(level) if level else None,
            applicant_name=filters.get("applicant_name"),
            email=filters.get("email"),
            has_resume=filters.get("has_resume"),
            offset=query.pagination.offset,
            limit=query.pagination.limit,
            order_by=query.sorting.field,
            order_direction=query.sorting.direction,
        )
        found = await self.repository.find_with_filters(criteria)
        return QueryResult.ok(
            query.query_id,
            PaginatedResult.build(
                [application.to_summary() for application in found.items],
                found.total,
                query.pagination,
            ),
        )


class GetJobApplicationDetailsHandler(
    QueryHandler[GetJobApplicationDetailsQuery, dict[str, Any]]
):
    def __init__(
        self,
        repository: JobApplicationRepository,
        file_storage: FileStorageService,
        signed_url_ttl_seconds: int = 3600,
    ):
        self.repository = repository
        self.file_storage = file_storage
        self.signed_url_ttl_seconds = signed_url_ttl_seconds

    async def handle(
        self, query: GetJobApplicationDetailsQuery
    ) -> QueryResult[dict[str, Any]]:
        application = await self.repository.find_by_id(query.application_id)
        if application is None:
            return QueryResult.failure(
                query.query_id,
                [
                    FieldError(
                        "application_id",
                        f"Job application {query.application_id} was not found",
                        "NOT_FOUND",
                    )
                ],
                "Job application not found",
            )

        details = {
            "id": application.id,
            "confirmation_number": application.confirmation_number,
            "applicant": {
                "name": application.applicant_name,
                "email": application.email.value,
                "phone": application.phone.value,
                "phone_formatted": application.phone.formatted,
            },
            "experience_level": application.experience_level.value,
            "experience_description": application.experience_description,
            "status": application.status.value,
            "status_display": application.status.get_display_name(),
            "submitted_at": application.submitted_at.isoformat(),
            "updated_at": application.updated_at.isoformat(),
            "interview_date": (
                application.interview_date.isoformat() if application.interview_date else None
            ),
            "review_notes": application.review_notes,
            "metadata": dict(application.metadata),
            "resume": await self._resume(application),
            "version": application.version,
        }
        if query.include_timeline:
            details["timeline"] = [entry.to_dict() for entry in application.history]
        return QueryResult.ok(query.query_id, details)

    async def _resume(self, application: JobApplication) -> dict[str, Any] | None:
        if not application.has_resume:
            return None
        stored = await self.file_storage.get_file_metadata(application.resume_file_id)
        if stored is None:
            logger.warning(
                "Resume file missing",
                application_id=application.id,
                file_id=application.resume_file_id,
            )
            return None
        return {
            **stored.to_dict(),
            "url": await self.file_storage.generate_signed_url(
                stored.file_id, self.signed_url_ttl_seconds
            ),
        }


__all__ = ["GetJobApplicationDetailsHandler", "GetJobApplicationListHandler"]
