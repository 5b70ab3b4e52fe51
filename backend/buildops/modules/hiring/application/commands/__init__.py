"""
Job application commands.

Applicant-facing submission and withdrawal, plus the HR review actions.
"""

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any

from buildops.core.cqrs.base import Command
from buildops.core.domain.ports import UploadedFile
from buildops.core.errors import ValidationError


class ApplicationCommand(Command):
    """Base for commands addressed to one existing application."""

    def __init__(self, application_id: str, **kwargs: Any):
        super().__init__(**kwargs)
        self.application_id = application_id

    def _validate_command(self) -> None:
        if not isinstance(self.application_id, str) or not self.application_id.strip():
            raise ValidationError("Application id is required", field="application_id")


class SubmitJobApplicationCommand(Command):
    message_type = "job_application.submit"

    def __init__(
        self,
        applicant_name: str,
        email: str,
        phone: str,
        experience_level: str,
        experience_description: str,
        resume_file: UploadedFile | None = None,
        request_metadata: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.applicant_name = applicant_name
        self.email = email
        self.phone = phone
        self.experience_level = experience_level
        self.experience_description = experience_description
        self.resume_file = resume_file
        self.request_metadata = MappingProxyType(dict(request_metadata or {}))
        self._freeze()


class MoveApplicationToReviewCommand(ApplicationCommand):
    message_type = "job_application.move_to_review"

    def __init__(self, application_id: str, **kwargs: Any):
        super().__init__(application_id, **kwargs)
        self._freeze()


class ScheduleInterviewCommand(ApplicationCommand):
    message_type = "job_application.schedule_interview"

    def __init__(self, application_id: str, interview_date: datetime, **kwargs: Any):
        super().__init__(application_id, **kwargs)
        self.interview_date = interview_date
        self._freeze()


class ApproveApplicationCommand(ApplicationCommand):
    message_type = "job_application.approve"

    def __init__(self, application_id: str, notes: str | None = None, **kwargs: Any):
        super().__init__(application_id, **kwargs)
        self.notes = notes
        self._freeze()


class RejectApplicationCommand(ApplicationCommand):
    message_type = "job_application.reject"

    def __init__(self, application_id: str, reason: str, **kwargs: Any):
        super().__init__(application_id, **kwargs)
        self.reason = reason
        self._freeze()


class WithdrawApplicationCommand(ApplicationCommand):
    """The applicant withdraws their own application."""

    message_type = "job_application.withdraw"

    def __init__(self, application_id: str, reason: str | None = None, **kwargs: Any):
        super().__init__(application_id, **kwargs)
        self.reason = reason
        self._freeze()


__all__ = [
    "ApplicationCommand",
    "ApproveApplicationCommand",
    "MoveApplicationToReviewCommand",
    "RejectApplicationCommand",
    "ScheduleInterviewCommand",
    "SubmitJobApplicationCommand",
    "WithdrawApplicationCommand",
]
