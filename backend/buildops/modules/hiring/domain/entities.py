"""
Job Application Aggregate

A candidate's application for a position, tracked from submission to the
hiring decision.

Lifecycle:
    pending -> under_review -> interview_scheduled -> approved
    under_review -> approved
    pending | under_review | interview_scheduled -> rejected
    any non-final status -> withdrawn
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from buildops.core.domain.base import AggregateRoot, utc_now
from buildops.core.domain.identifiers import make_confirmation_number
from buildops.core.domain.value_objects import Email, PhoneNumber
from buildops.core.errors import BusinessRuleViolationError, DomainValidationError
from buildops.modules.hiring.domain.enums import ApplicationStatus, ExperienceLevel
from buildops.modules.hiring.domain.events import (
    ApplicationApprovedEvent,
    ApplicationMovedToReviewEvent,
    ApplicationRejectedEvent,
    ApplicationWithdrawnEvent,
    InterviewScheduledEvent,
    JobApplicationSubmittedEvent,
)

NAME_LENGTH = (2, 100)
EXPERIENCE_DESCRIPTION_LENGTH = (20, 1000)

_REJECTABLE = frozenset(
    {
        ApplicationStatus.PENDING,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.INTERVIEW_SCHEDULED,
    }
)
_APPROVABLE = frozenset({ApplicationStatus.UNDER_REVIEW, ApplicationStatus.INTERVIEW_SCHEDULED})


@dataclass(frozen=True)
class ApplicationHistoryEntry:
    event: str
    timestamp: datetime
    description: str
    performed_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
            "performed_by": self.performed_by,
        }


def _bounded_text(field: str, value: Any, bounds: tuple[int, int]) -> str:
    minimum, maximum = bounds
    text = value.strip() if isinstance(value, str) else ""
    if len(text) < minimum:
        raise DomainValidationError(field, f"Must be at least {minimum} characters")
    if len(text) > maximum:
        raise DomainValidationError(field, f"Must not exceed {maximum} characters")
    return text


def parse_experience_level(value: str | ExperienceLevel) -> ExperienceLevel:
    if isinstance(value, ExperienceLevel):
        return value
    try:
        return ExperienceLevel(value)
    except ValueError:
        raise DomainValidationError(
            "experience_level",
            f"Invalid experience level: {value}. "
            f"Valid levels: {', '.join(ExperienceLevel.values())}",
        ) from None


class JobApplication(AggregateRoot):
    """Job application aggregate root."""

    def __init__(
        self,
        applicant_name: str,
        email: Email,
        phone: PhoneNumber,
        experience_level: ExperienceLevel,
        experience_description: str,
        resume_file_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        entity_id: str | None = None,
    ):
        super().__init__(entity_id)
        self.applicant_name = applicant_name
        self.email = email
        self.phone = phone
        self.experience_level = experience_level
        self.experience_description = experience_description
        self.status = ApplicationStatus.PENDING
        self.resume_file_id = resume_file_id
        self.metadata: dict[str, Any] = {"source": "website", **(metadata or {})}
        self.submitted_at = self.created_at
        self.review_notes: str | None = None
        self.interview_date: datetime | None = None
        self.decided_at: datetime | None = None
        self.history: list[ApplicationHistoryEntry] = []
        self.confirmation_number = make_confirmation_number("APP", self.id, self.submitted_at)

    # =================================================================================
    # FACTORY
    # =================================================================================

    @classmethod
    def submit(
        cls,
        applicant_name: str,
        email: str,
        phone: str,
        experience_level: str | ExperienceLevel,
        experience_description: str,
        resume_file_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "JobApplication":
        """
        Create a new pending application.

        Raises:
            DomainValidationError: If any input is invalid
        """
        application = cls(
            applicant_name=_bounded_text("applicant_name", applicant_name, NAME_LENGTH),
            email=Email(email),
            phone=PhoneNumber(phone),
            experience_level=parse_experience_level(experience_level),
            experience_description=_bounded_text(
                "experience_description", experience_description, EXPERIENCE_DESCRIPTION_LENGTH
            ),
            resume_file_id=resume_file_id,
            metadata=metadata,
        )
        application._record(
            "submitted", "Application submitted", application.applicant_name
        )
        application.add_event(
            JobApplicationSubmittedEvent(
                application.id,
                applicant_name=application.applicant_name,
                email=application.email.value,
                experience_level=application.experience_level.value,
                confirmation_number=application.confirmation_number,
            )
        )
        return application

    # =================================================================================
    # BUSINESS METHODS
    # =================================================================================

    def move_to_review(self, performed_by: str | None = None) -> None:
        if self.status != ApplicationStatus.PENDING:
            raise BusinessRuleViolationError(
                "Application must be pending to move to review",
                rule="job_application.review_requires_pending",
            )

        self.status = ApplicationStatus.UNDER_REVIEW
        self._record("moved_to_review", "Application moved to review", performed_by)
        self.add_event(ApplicationMovedToReviewEvent(self.id))

    def schedule_interview(
        self,
        interview_date: datetime,
        performed_by: str | None = None,
        now: datetime | None = None,
    ) -> None:
        if not self.can_schedule_interview:
            raise BusinessRuleViolationError(
                "Application must be under review to schedule interview",
                rule="job_application.interview_requires_review",
            )
        if interview_date.tzinfo is None:
            interview_date = interview_date.replace(tzinfo=timezone.utc)
        if interview_date <= (now or utc_now()):
            raise DomainValidationError("interview_date", "Interview date must be in the future")

        self.status = ApplicationStatus.INTERVIEW_SCHEDULED
        self.interview_date = interview_date
        self._record(
            "interview_scheduled",
            f"Interview scheduled for {interview_date.isoformat()}",
            performed_by,
        )
        self.add_event(
            InterviewScheduledEvent(self.id, interview_date=interview_date.isoformat())
        )

    def approve(self, notes: str | None = None, performed_by: str | None = None) -> None:
        if self.status not in _APPROVABLE:
            raise BusinessRuleViolationError(
                "Application must be under review or interviewed to be approved",
                rule="job_application.approve_requires_review",
            )

        self.status = ApplicationStatus.APPROVED
        self.decided_at = utc_now()
        if notes:
            self.review_notes = notes
        self._record("approved", "Application approved", performed_by)
        self.add_event(ApplicationApprovedEvent(self.id))

    def reject(self, reason: str, performed_by: str | None = None) -> None:
        if self.status not in _REJECTABLE:
            raise BusinessRuleViolationError(
                "Cannot reject application in current status",
                rule="job_application.reject_requires_open",
            )

        self.status = ApplicationStatus.REJECTED
        self.decided_at = utc_now()
        self.review_notes = reason
        self._record("rejected", f"Application rejected: {reason}", performed_by)
        self.add_event(ApplicationRejectedEvent(self.id, reason=reason))

    def withdraw(self, reason: str | None = None) -> None:
        if self.status.is_finalized:
            raise BusinessRuleViolationError(
                "Cannot withdraw finalized application",
                rule="job_application.withdraw_requires_open",
            )

        self.status = ApplicationStatus.WITHDRAWN
        description = "Application withdrawn by applicant"
        if reason:
            description += f" ({reason})"
        self._record("withdrawn", description, self.applicant_name)
        self.add_event(ApplicationWithdrawnEvent(self.id, reason=reason))

    def attach_resume(self, file_id: str) -> None:
        if self.status != ApplicationStatus.PENDING:
            raise BusinessRuleViolationError(
                "Can only attach resume to pending applications",
                rule="job_application.resume_requires_pending",
            )
        self.resume_file_id = file_id
        self.mark_modified()

    def add_review_notes(self, notes: str, performed_by: str | None = None) -> None:
        self.review_notes = notes
        self._record("notes_added", "Review notes updated", performed_by)
        self.mark_modified()

    def _record(self, event: str, description: str, performed_by: str | None) -> None:
        self.history.append(
            ApplicationHistoryEntry(
                event=event,
                timestamp=utc_now(),
                description=description,
                performed_by=performed_by,
            )
        )

    # =================================================================================
    # QUERIES
    # =================================================================================

    @property
    def has_resume(self) -> bool:
        return self.resume_file_id is not None

    @property
    def can_schedule_interview(self) -> bool:
        return self.status == ApplicationStatus.UNDER_REVIEW

    def to_summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "applicant_name": self.applicant_name,
            "email": self.email.value,
            "experience_level": self.experience_level.value,
            "status": self.status.value,
            "has_resume": self.has_resume,
            "submitted_at": self.submitted_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "interview_date": self.interview_date.isoformat() if self.interview_date else None,
        }


__all__ = [
    "EXPERIENCE_DESCRIPTION_LENGTH",
    "NAME_LENGTH",
    "ApplicationHistoryEntry",
    "JobApplication",
    "parse_experience_level",
]
