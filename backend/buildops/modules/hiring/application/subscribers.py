"""Hiring event subscribers."""

from buildops.core.domain.base import DomainEvent
from buildops.core.domain.ports import DomainEventPublisher, NotificationService
from buildops.core.logging import get_logger
from buildops.modules.hiring.domain.events import JobApplicationSubmittedEvent
from buildops.modules.hiring.domain.repositories import JobApplicationRepository

logger = get_logger(__name__)


class ApplicationNotificationSubscriber:
    """Confirms receipt to the applicant and copies HR."""

    def __init__(
        self, repository: JobApplicationRepository, notifications: NotificationService
    ):
        self.repository = repository
        self.notifications = notifications

    def register(self, publisher: DomainEventPublisher) -> None:
        publisher.subscribe(JobApplicationSubmittedEvent.event_type, self.on_application_submitted)

    async def on_application_submitted(self, event: DomainEvent) -> None:
        application = await self.repository.find_by_id(event.aggregate_id)
        if application is None:
            logger.warning(
                "Job application for event not found",
                event_type=event.event_type,
                application_id=event.aggregate_id,
            )
            return
        await self.notifications.send_application_confirmation(
            application, application.confirmation_number
        )


__all__ = ["ApplicationNotificationSubscriber"]
