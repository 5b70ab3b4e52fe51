"""Hiring domain layer."""

from buildops.modules.hiring.domain.entities import ApplicationHistoryEntry, JobApplication
from buildops.modules.hiring.domain.enums import ApplicationStatus, ExperienceLevel
from buildops.modules.hiring.domain.events import (
    ApplicationApprovedEvent,
    ApplicationMovedToReviewEvent,
    ApplicationRejectedEvent,
    ApplicationWithdrawnEvent,
    InterviewScheduledEvent,
    JobApplicationSubmittedEvent,
)
from buildops.modules.hiring.domain.repositories import (
    JobApplicationRepository,
    JobApplicationSearchCriteria,
    JobApplicationSearchResult,
)

__all__ = [
    "ApplicationApprovedEvent",
    "ApplicationHistoryEntry",
    "ApplicationMovedToReviewEvent",
    "ApplicationRejectedEvent",
    "ApplicationStatus",
    "ApplicationWithdrawnEvent",
    "ExperienceLevel",
    "InterviewScheduledEvent",
    "JobApplication",
    "JobApplicationRepository",
    "JobApplicationSearchCriteria",
    "JobApplicationSearchResult",
    "JobApplicationSubmittedEvent",
]
