"""Job application service."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from buildops.core.application import ApplicationService
from buildops.core.cqrs.base import CommandResult, QueryResult
from buildops.core.domain.ports import UploadedFile
from buildops.modules.hiring.application.commands import (
    ApproveApplicationCommand,
    MoveApplicationToReviewCommand,
    RejectApplicationCommand,
    ScheduleInterviewCommand,
    SubmitJobApplicationCommand,
    WithdrawApplicationCommand,
)
from buildops.modules.hiring.application.queries import (
    GetJobApplicationDetailsQuery,
    GetJobApplicationListQuery,
)


class JobApplicationApplicationService(ApplicationService):
    """Entry point for the careers page and the HR dashboard."""

    async def submit_application(
        self,
        applicant_name: str,
        email: str,
        phone: str,
        experience_level: str,
        experience_description: str,
        resume_file: UploadedFile | None = None,
        request_metadata: Mapping[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: SubmitJobApplicationCommand(
                applicant_name=applicant_name,
                email=email,
                phone=phone,
                experience_level=experience_level,
                experience_description=experience_description,
                resume_file=resume_file,
                request_metadata=request_metadata,
                correlation_id=correlation_id,
            )
        )

    async def move_to_review(
        self, application_id: str, user_id: str | None = None, correlation_id: str | None = None
    ) -> CommandResult:
        return await self.execute_command(
            lambda: MoveApplicationToReviewCommand(
                application_id, user_id=user_id, correlation_id=correlation_id
            )
        )

    async def schedule_interview(
        self,
        application_id: str,
        interview_date: datetime,
        user_id: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: ScheduleInterviewCommand(
                application_id, interview_date, user_id=user_id, correlation_id=correlation_id
            )
        )

    async def approve_application(
        self,
        application_id: str,
        notes: str | None = None,
        user_id: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: ApproveApplicationCommand(
                application_id, notes=notes, user_id=user_id, correlation_id=correlation_id
            )
        )

    async def reject_application(
        self,
        application_id: str,
        reason: str,
        user_id: str | None = None,
        correlation_id: str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            lambda: RejectApplicationCommand(
                application_id, reason, user_id=user_id, correlation_id=correlation_id
            )
        )

    async def withdraw_application(
        self, application_id: str, reason: str | None = None, correlation_id: str | None = None
    ) -> CommandResult:
        return await self.execute_command(
            lambda: WithdrawApplicationCommand(
                application_id, reason=reason, correlation_id=correlation_id
            )
        )

    async def get_application_list(
        self, correlation_id: str | None = None, **criteria: Any
    ) -> QueryResult:
        """``criteria`` are the keyword arguments of ``GetJobApplicationListQuery``."""
        return await self.execute_query(
            lambda: GetJobApplicationListQuery(correlation_id=correlation_id, **criteria)
        )

    async def get_application_details(
        self,
        application_id: str,
        include_timeline: bool = True,
        correlation_id: str | None = None,
    ) -> QueryResult:
        return await self.execute_query(
            lambda: GetJobApplicationDetailsQuery(
                application_id, include_timeline=include_timeline, correlation_id=correlation_id
            )
        )


__all__ = ["JobApplicationApplicationService"]
