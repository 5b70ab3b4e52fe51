"""Validators for job application commands."""

from datetime import datetime, timezone

from buildops.core.cqrs.base import utc_now
from buildops.core.cqrs.validation import CommandValidator, FieldRules, ValidationResult
from buildops.modules.hiring.application.commands import (
    RejectApplicationCommand,
    ScheduleInterviewCommand,
    SubmitJobApplicationCommand,
)
from buildops.modules.hiring.domain.entities import EXPERIENCE_DESCRIPTION_LENGTH
from buildops.modules.hiring.domain.enums import ExperienceLevel

MAX_RESUME_SIZE_BYTES = 10 * 1024 * 1024
ALLOWED_RESUME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


class SubmitJobApplicationValidator(CommandValidator[SubmitJobApplicationCommand]):
    def __init__(self, max_resume_size_bytes: int = MAX_RESUME_SIZE_BYTES):
        self.max_resume_size_bytes = max_resume_size_bytes

    async def validate(self, command: SubmitJobApplicationCommand) -> ValidationResult:
        rules = FieldRules()
        rules.required("applicant_name", command.applicant_name, "Applicant name is required")
        rules.required("email", command.email, "Email is required")
        rules.required("phone", command.phone, "Phone number is required")

        if rules.required(
            "experience_level", command.experience_level, "Experience level is required"
        ):
            rules.one_of(
                "experience_level",
                command.experience_level,
                ExperienceLevel.values(),
                "Experience level",
            )

        if rules.required(
            "experience_description",
            command.experience_description,
            "Experience description is required",
        ):
            minimum, maximum = EXPERIENCE_DESCRIPTION_LENGTH
            rules.length(
                "experience_description",
                command.experience_description.strip(),
                minimum=minimum,
                maximum=maximum,
                label="Experience description",
            )

        resume = command.resume_file
        if resume is not None:
            if resume.content_type not in ALLOWED_RESUME_TYPES:
                rules.add(
                    "resume_file",
                    "Resume must be a PDF or Word document",
                    "INVALID_FILE_TYPE",
                )
            if resume.size_bytes > self.max_resume_size_bytes:
                limit_mb = self.max_resume_size_bytes // (1024 * 1024)
                rules.add(
                    "resume_file",
                    f"Resume file size must not exceed {limit_mb}MB",
                    "FILE_TOO_LARGE",
                )

        return rules.result()


class ScheduleInterviewValidator(CommandValidator[ScheduleInterviewCommand]):
    async def validate(self, command: ScheduleInterviewCommand) -> ValidationResult:
        rules = FieldRules()
        interview_date = command.interview_date
        if not isinstance(interview_date, datetime):
            rules.add("interview_date", "Interview date is required", "REQUIRED_FIELD")
        else:
            if interview_date.tzinfo is None:
                interview_date = interview_date.replace(tzinfo=timezone.utc)
            if interview_date <= utc_now():
                rules.add(
                    "interview_date", "Interview date must be in the future", "INVALID_VALUE"
                )
        return rules.result()


class RejectApplicationValidator(CommandValidator[RejectApplicationCommand]):
    async def validate(self, command: RejectApplicationCommand) -> ValidationResult:
        rules = FieldRules()
        if rules.required("reason", command.reason, "Rejection reason is required"):
            rules.length("reason", command.reason, maximum=1000, label="Rejection reason")
        return rules.result()


__all__ = [
    "ALLOWED_RESUME_TYPES",
    "MAX_RESUME_SIZE_BYTES",
    "RejectApplicationValidator",
    "ScheduleInterviewValidator",
    "SubmitJobApplicationValidator",
]
