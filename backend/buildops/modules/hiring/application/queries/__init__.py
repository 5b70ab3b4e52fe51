"""
Job application queries for the HR dashboard.
"""

from typing import Any

from buildops.core.cqrs.base import Pagination, Query, Sorting, enum_filter_value
from buildops.core.enums import SortDirection
from buildops.core.errors import ValidationError
from buildops.modules.hiring.domain.enums import ApplicationStatus, ExperienceLevel
from buildops.modules.hiring.domain.repositories import APPLICATION_SORT_FIELDS

MAX_PAGE_SIZE = 100


class GetJobApplicationListQuery(Query):
    message_type = "job_application.get_list"
    cache_ttl = 300

    def __init__(
        self,
        status: str | ApplicationStatus | None = None,
        experience_level: str | ExperienceLevel | None = None,
        applicant_name: str | None = None,
        email: str | None = None,
        has_resume: bool | None = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "submitted_at",
        sort_order: str | SortDirection = SortDirection.DESC,
        **kwargs: Any,
    ):
        super().__init__(
            filters={
                "status": enum_filter_value(ApplicationStatus, status, "status"),
                "experience_level": enum_filter_value(
                    ExperienceLevel, experience_level, "experience_level"
                ),
                "applicant_name": applicant_name,
                "email": email.strip().lower() if email else None,
                "has_resume": has_resume,
            },
            pagination=Pagination(page=page, limit=limit),
            sorting=Sorting(sort_by, sort_order),
            **kwargs,
        )
        self._freeze()

    def _validate_query(self) -> None:
        if self.pagination.limit > MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must not exceed {MAX_PAGE_SIZE}", field="limit")
        if self.sorting.field not in APPLICATION_SORT_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{self.sorting.field}'. "
                f"Allowed fields: {', '.join(APPLICATION_SORT_FIELDS)}",
                field="sort_by",
            )


class GetJobApplicationDetailsQuery(Query):
    """One application with its resume link and review timeline."""

    message_type = "job_application.get_details"
    cache_ttl = 60

    def __init__(self, application_id: str, include_timeline: bool = True, **kwargs: Any):
        super().__init__(
            filters={"application_id": application_id, "include_timeline": include_timeline},
            **kwargs,
        )
        self.application_id = application_id
        self.include_timeline = include_timeline
        self._freeze()

    def _validate_query(self) -> None:
        if not isinstance(self.application_id, str) or not self.application_id.strip():
            raise ValidationError("Application id is required", field="application_id")


__all__ = ["MAX_PAGE_SIZE", "GetJobApplicationDetailsQuery", "GetJobApplicationListQuery"]
