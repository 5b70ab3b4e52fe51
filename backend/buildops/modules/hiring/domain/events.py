"""
Hiring Domain Events
"""

from buildops.core.domain.base import DomainEvent


class JobApplicationSubmittedEvent(DomainEvent):
    event_type = "job_application.submitted"


class ApplicationMovedToReviewEvent(DomainEvent):
    event_type = "job_application.moved_to_review"


class InterviewScheduledEvent(DomainEvent):
    event_type = "job_application.interview_scheduled"


class ApplicationApprovedEvent(DomainEvent):
    event_type = "job_application.approved"


class ApplicationRejectedEvent(DomainEvent):
    event_type = "job_application.rejected"


class ApplicationWithdrawnEvent(DomainEvent):
    event_type = "job_application.withdrawn"


__all__ = [
    "ApplicationApprovedEvent",
    "ApplicationMovedToReviewEvent",
    "ApplicationRejectedEvent",
    "ApplicationWithdrawnEvent",
    "InterviewScheduledEvent",
    "JobApplicationSubmittedEvent",
]
