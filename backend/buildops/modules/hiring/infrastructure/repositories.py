"""In-memory job application repository."""

from buildops.core.repositories import InMemoryRepository
from buildops.modules.hiring.domain.entities import JobApplication
from buildops.modules.hiring.domain.repositories import (
    JobApplicationRepository,
    JobApplicationSearchCriteria,
    JobApplicationSearchResult,
)

_SORT_KEYS = {
    "submitted_at": lambda application: application.submitted_at,
    "updated_at": lambda application: application.updated_at,
    "applicant_name": lambda application: application.applicant_name.lower(),
}


class InMemoryJobApplicationRepository(
    InMemoryRepository[JobApplication], JobApplicationRepository
):
    async def find_by_email(self, email: str) -> list[JobApplication]:
        normalized = email.strip().lower()
        return sorted(
            (app for app in self.all() if app.email.value == normalized),
            key=lambda app: app.submitted_at,
            reverse=True,
        )

    async def find_with_filters(
        self, criteria: JobApplicationSearchCriteria
    ) -> JobApplicationSearchResult:
        return self.page(
            (app for app in self.all() if criteria.matches(app)),
            sort_key=_SORT_KEYS.get(criteria.order_by, _SORT_KEYS["submitted_at"]),
            descending=criteria.order_direction.is_descending,
            offset=criteria.offset,
            limit=criteria.limit,
        )


__all__ = ["InMemoryJobApplicationRepository"]
