"""Job application command handlers."""

from abc import abstractmethod
from typing import Any, Generic

from buildops.core.cqrs.base import CommandHandler, CommandResult, TCommand
from buildops.core.domain.ports import DomainEventPublisher, FileStorageService
from buildops.core.errors import NotFoundError
from buildops.core.logging import get_logger
from buildops.modules.hiring.application.commands import (
    ApplicationCommand,
    ApproveApplicationCommand,
    MoveApplicationToReviewCommand,
    RejectApplicationCommand,
    ScheduleInterviewCommand,
    SubmitJobApplicationCommand,
    WithdrawApplicationCommand,
)
from buildops.modules.hiring.domain.entities import JobApplication
from buildops.modules.hiring.domain.enums import ApplicationStatus
from buildops.modules.hiring.domain.repositories import JobApplicationRepository

logger = get_logger(__name__)

ESTIMATED_RESPONSE_TIME = "1-2 weeks"
NEXT_STEPS = (
    "Application review by HR team",
    "Initial phone screening (if qualified)",
    "In-person or video interview",
    "Final decision notification",
)

NEXT_ACTIONS: dict[ApplicationStatus, list[str]] = {
    ApplicationStatus.PENDING: ["Move the application to review"],
    ApplicationStatus.UNDER_REVIEW: ["Schedule an interview", "Approve or reject the applicant"],
    ApplicationStatus.INTERVIEW_SCHEDULED: ["Hold the interview", "Record the hiring decision"],
    ApplicationStatus.APPROVED: ["Send the offer letter", "Start onboarding"],
    ApplicationStatus.REJECTED: ["No further action required"],
    ApplicationStatus.WITHDRAWN: ["No further action required"],
}


class SubmitJobApplicationHandler(
    CommandHandler[SubmitJobApplicationCommand, dict[str, Any]]
):
    """Stores the resume, creates the application and announces it."""

    def __init__(
        self,
        repository: JobApplicationRepository,
        file_storage: FileStorageService,
        event_publisher: DomainEventPublisher,
    ):
        self.repository = repository
        self.file_storage = file_storage
        self.event_publisher = event_publisher

    async def handle(
        self, command: SubmitJobApplicationCommand
    ) -> CommandResult[dict[str, Any]]:
        resume_file_id = None
        if command.resume_file is not None:
            stored = await self.file_storage.upload_file(
                command.resume_file.content,
                command.resume_file.filename,
                command.resume_file.content_type,
                {"purpose": "resume", "uploaded_by": command.email},
            )
            resume_file_id = stored.file_id

        try:
            application = JobApplication.submit(
                applicant_name=command.applicant_name,
                email=command.email,
                phone=command.phone,
                experience_level=command.experience_level,
                experience_description=command.experience_description,
                resume_file_id=resume_file_id,
                metadata=dict(command.request_metadata),
            )
        except Exception:
            if resume_file_id is not None:
                await self.file_storage.delete_file(resume_file_id)
            raise

        await self.repository.save(application)
        await self.event_publisher.publish_all(application.collect_events())

        logger.info(
            "Job application submitted",
            application_id=application.id,
            experience_level=application.experience_level.value,
            has_resume=application.has_resume,
            correlation_id=command.correlation_id,
        )

        return CommandResult.ok(
            command.command_id,
            {
                "application_id": application.id,
                "confirmation_number": application.confirmation_number,
                "estimated_response_time": ESTIMATED_RESPONSE_TIME,
                "next_steps": list(NEXT_STEPS),
            },
            message="Job application submitted successfully",
        )


class ApplicationTransitionHandler(
    CommandHandler[TCommand, dict[str, Any]], Generic[TCommand]
):
    success_message = "Application updated"

    def __init__(
        self, repository: JobApplicationRepository, event_publisher: DomainEventPublisher
    ):
        self.repository = repository
        self.event_publisher = event_publisher

    @abstractmethod
    def apply(self, application: JobApplication, command: TCommand) -> None:
        """Run the business method for ``command`` on ``application``."""

    async def handle(self, command: ApplicationCommand) -> CommandResult[dict[str, Any]]:
        application = await self.repository.find_by_id(command.application_id)
        if application is None:
            raise NotFoundError("job_application", command.application_id)

        previous = application.status
        self.apply(application, command)
        await self.repository.save(application)
        await self.event_publisher.publish_all(application.collect_events())

        logger.info(
            "Job application updated",
            application_id=application.id,
            command_type=command.type_key(),
            previous_status=previous.value,
            new_status=application.status.value,
            user_id=command.user_id,
        )

        return CommandResult.ok(
            command.command_id,
            {
                "application_id": application.id,
                "new_status": application.status.value,
                "message": self.success_message,
                "next_actions": list(NEXT_ACTIONS[application.status]),
            },
            message=self.success_message,
        )


class MoveApplicationToReviewHandler(ApplicationTransitionHandler[MoveApplicationToReviewCommand]):
    success_message = "Application moved to review"

    def apply(self, application: JobApplication, command: MoveApplicationToReviewCommand) -> None:
        application.move_to_review(performed_by=command.user_id)


class ScheduleInterviewHandler(ApplicationTransitionHandler[ScheduleInterviewCommand]):
    success_message = "Interview scheduled"

    def apply(self, application: JobApplication, command: ScheduleInterviewCommand) -> None:
        application.schedule_interview(command.interview_date, performed_by=command.user_id)


class ApproveApplicationHandler(ApplicationTransitionHandler[ApproveApplicationCommand]):
    success_message = "Application approved"

    def apply(self, application: JobApplication, command: ApproveApplicationCommand) -> None:
        application.approve(notes=command.notes, performed_by=command.user_id)


class RejectApplicationHandler(ApplicationTransitionHandler[RejectApplicationCommand]):
    success_message = "Application rejected"

    def apply(self, application: JobApplication, command: RejectApplicationCommand) -> None:
        application.reject(command.reason, performed_by=command.user_id)


class WithdrawApplicationHandler(ApplicationTransitionHandler[WithdrawApplicationCommand]):
    success_message = "Application withdrawn"

    def apply(self, application: JobApplication, command: WithdrawApplicationCommand) -> None:
        application.withdraw(reason=command.reason)


__all__ = [
    "ESTIMATED_RESPONSE_TIME",
    "NEXT_ACTIONS",
    "NEXT_STEPS",
    "ApplicationTransitionHandler",
    "ApproveApplicationHandler",
    "MoveApplicationToReviewHandler",
    "RejectApplicationHandler",
    "ScheduleInterviewHandler",
    "SubmitJobApplicationHandler",
    "WithdrawApplicationHandler",
]
