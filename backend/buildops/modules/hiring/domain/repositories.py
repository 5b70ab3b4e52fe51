"""
Job application repository port.
"""

from abc import abstractmethod
from dataclasses import dataclass

from buildops.core.enums import SortDirection
from buildops.core.repositories import Repository, SearchResult
from buildops.modules.hiring.domain.entities import JobApplication
from buildops.modules.hiring.domain.enums import ApplicationStatus, ExperienceLevel

APPLICATION_SORT_FIELDS = ("submitted_at", "updated_at", "applicant_name")


@dataclass(frozen=True)
class JobApplicationSearchCriteria:
    """Filters for ``JobApplicationRepository.find_with_filters``; None means any."""

    status: ApplicationStatus | None = None
    experience_level: ExperienceLevel | None = None
    applicant_name: str | None = None
    email: str | None = None
    has_resume: bool | None = None
    offset: int = 0
    limit: int | None = None
    order_by: str = "submitted_at"
    order_direction: SortDirection = SortDirection.DESC

    def matches(self, application: JobApplication) -> bool:
        if self.status is not None and application.status != self.status:
            return False
        if (
            self.experience_level is not None
            and application.experience_level != self.experience_level
        ):
            return False
        if (
            self.applicant_name is not None
            and self.applicant_name.lower() not in application.applicant_name.lower()
        ):
            return False
        if self.email is not None and application.email.value != self.email.strip().lower():
            return False
        if self.has_resume is not None and application.has_resume != self.has_resume:
            return False
        return True


JobApplicationSearchResult = SearchResult[JobApplication]


class JobApplicationRepository(Repository[JobApplication]):
    """Persistence port for job application aggregates."""

    @abstractmethod
    async def find_by_email(self, email: str) -> list[JobApplication]:
        """All applications submitted from ``email``, newest first."""

    @abstractmethod
    async def find_with_filters(
        self, criteria: JobApplicationSearchCriteria
    ) -> JobApplicationSearchResult:
        """One page of applications matching ``criteria``."""


__all__ = [
    "APPLICATION_SORT_FIELDS",
    "JobApplicationRepository",
    "JobApplicationSearchCriteria",
    "JobApplicationSearchResult",
]
