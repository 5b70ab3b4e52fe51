"""
Hiring module bootstrap.
"""

from buildops.core.config import Settings
from buildops.core.cqrs.cache import type_pattern
from buildops.core.cqrs.dispatchers import CommandDispatcher, QueryDispatcher
from buildops.core.cqrs.middleware import QueryCacheInvalidationMiddleware, ValidationMiddleware
from buildops.core.domain.ports import (
    DomainEventPublisher,
    FileStorageService,
    NotificationService,
)
from buildops.core.logging import get_logger
from buildops.modules.hiring.application.commands import (
    ApproveApplicationCommand,
    MoveApplicationToReviewCommand,
    RejectApplicationCommand,
    ScheduleInterviewCommand,
    SubmitJobApplicationCommand,
    WithdrawApplicationCommand,
)
from buildops.modules.hiring.application.commands.handlers import (
    ApproveApplicationHandler,
    MoveApplicationToReviewHandler,
    RejectApplicationHandler,
    ScheduleInterviewHandler,
    SubmitJobApplicationHandler,
    WithdrawApplicationHandler,
)
from buildops.modules.hiring.application.commands.validators import (
    RejectApplicationValidator,
    ScheduleInterviewValidator,
    SubmitJobApplicationValidator,
)
from buildops.modules.hiring.application.queries import (
    GetJobApplicationDetailsQuery,
    GetJobApplicationListQuery,
)
from buildops.modules.hiring.application.queries.handlers import (
    GetJobApplicationDetailsHandler,
    GetJobApplicationListHandler,
)
from buildops.modules.hiring.application.subscribers import ApplicationNotificationSubscriber
from buildops.modules.hiring.domain.repositories import JobApplicationRepository

logger = get_logger(__name__)

APPLICATION_READ_PATTERNS = (
    type_pattern(GetJobApplicationListQuery),
    type_pattern(GetJobApplicationDetailsQuery),
)

_TRANSITIONS = (
    (MoveApplicationToReviewCommand, MoveApplicationToReviewHandler),
    (ScheduleInterviewCommand, ScheduleInterviewHandler),
    (ApproveApplicationCommand, ApproveApplicationHandler),
    (RejectApplicationCommand, RejectApplicationHandler),
    (WithdrawApplicationCommand, WithdrawApplicationHandler),
)


def register_hiring_module(
    settings: Settings,
    command_dispatcher: CommandDispatcher,
    query_dispatcher: QueryDispatcher,
    validation: ValidationMiddleware,
    cache_invalidation: QueryCacheInvalidationMiddleware,
    repository: JobApplicationRepository,
    file_storage: FileStorageService,
    notifications: NotificationService,
    event_publisher: DomainEventPublisher,
) -> None:
    logger.info("Bootstrapping hiring module")

    command_dispatcher.register(
        SubmitJobApplicationCommand,
        SubmitJobApplicationHandler(repository, file_storage, event_publisher),
    )
    cache_invalidation.add_rule(SubmitJobApplicationCommand, *APPLICATION_READ_PATTERNS)
    for command_type, handler_type in _TRANSITIONS:
        command_dispatcher.register(command_type, handler_type(repository, event_publisher))
        cache_invalidation.add_rule(command_type, *APPLICATION_READ_PATTERNS)

    validation.register_validator(
        SubmitJobApplicationCommand,
        SubmitJobApplicationValidator(settings.file_storage.max_file_size_bytes),
    )
    validation.register_validator(ScheduleInterviewCommand, ScheduleInterviewValidator())
    validation.register_validator(RejectApplicationCommand, RejectApplicationValidator())

    query_dispatcher.register(
        GetJobApplicationListQuery, GetJobApplicationListHandler(repository)
    )
    query_dispatcher.register(
        GetJobApplicationDetailsQuery,
        GetJobApplicationDetailsHandler(
            repository, file_storage, settings.file_storage.signed_url_ttl_seconds
        ),
    )

    ApplicationNotificationSubscriber(repository, notifications).register(event_publisher)

    logger.info("Hiring module bootstrapped")


__all__ = ["APPLICATION_READ_PATTERNS", "register_hiring_module"]
