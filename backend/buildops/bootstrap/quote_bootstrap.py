"""
Quote module bootstrap.

Registers the quote handlers, validators, cache invalidation rules and
notification subscribers with the shared dispatch pipeline.
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
from buildops.modules.quote.application.commands import (
    AcceptQuoteCommand,
    MoveQuoteToReviewCommand,
    RejectQuoteCommand,
    SendQuoteCommand,
    SubmitQuoteRequestCommand,
    UpdateQuotePriorityCommand,
)
from buildops.modules.quote.application.commands.handlers import (
    AcceptQuoteHandler,
    MoveQuoteToReviewHandler,
    RejectQuoteHandler,
    SendQuoteHandler,
    SubmitQuoteRequestHandler,
    UpdateQuotePriorityHandler,
)
from buildops.modules.quote.application.commands.validators import (
    RejectQuoteValidator,
    SendQuoteValidator,
    SubmitQuoteRequestValidator,
    UpdateQuotePriorityValidator,
)
from buildops.modules.quote.application.queries import (
    GetQuoteDashboardSummaryQuery,
    GetQuoteDetailsQuery,
    GetQuoteListQuery,
    GetQuoteStatusQuery,
    GetServiceTypesQuery,
)
from buildops.modules.quote.application.queries.handlers import (
    GetQuoteDashboardSummaryHandler,
    GetQuoteDetailsHandler,
    GetQuoteListHandler,
    GetQuoteStatusHandler,
    GetServiceTypesHandler,
)
from buildops.modules.quote.application.subscribers import QuoteNotificationSubscriber
from buildops.modules.quote.domain.repositories import QuoteRepository

logger = get_logger(__name__)

# Reads that any change to a quote can make stale
QUOTE_READ_PATTERNS = (
    type_pattern(GetQuoteListQuery),
    type_pattern(GetQuoteDetailsQuery),
    type_pattern(GetQuoteDashboardSummaryQuery),
)


def register_quote_module(
    settings: Settings,
    command_dispatcher: CommandDispatcher,
    query_dispatcher: QueryDispatcher,
    validation: ValidationMiddleware,
    cache_invalidation: QueryCacheInvalidationMiddleware,
    repository: QuoteRepository,
    file_storage: FileStorageService,
    notifications: NotificationService,
    event_publisher: DomainEventPublisher,
) -> None:
    logger.info("Bootstrapping quote module")

    command_dispatcher.register(
        SubmitQuoteRequestCommand,
        SubmitQuoteRequestHandler(repository, file_storage, event_publisher),
    )
    command_dispatcher.register(
        MoveQuoteToReviewCommand, MoveQuoteToReviewHandler(repository, event_publisher)
    )
    command_dispatcher.register(SendQuoteCommand, SendQuoteHandler(repository, event_publisher))
    command_dispatcher.register(
        UpdateQuotePriorityCommand, UpdateQuotePriorityHandler(repository, event_publisher)
    )
    command_dispatcher.register(
        RejectQuoteCommand, RejectQuoteHandler(repository, event_publisher)
    )
    command_dispatcher.register(
        AcceptQuoteCommand, AcceptQuoteHandler(repository, event_publisher)
    )

    validation.register_validator(
        SubmitQuoteRequestCommand,
        SubmitQuoteRequestValidator(settings.file_storage.max_file_size_bytes),
    )
    validation.register_validator(SendQuoteCommand, SendQuoteValidator())
    validation.register_validator(UpdateQuotePriorityCommand, UpdateQuotePriorityValidator())
    validation.register_validator(RejectQuoteCommand, RejectQuoteValidator())

    query_dispatcher.register(GetQuoteListQuery, GetQuoteListHandler(repository))
    query_dispatcher.register(
        GetQuoteDetailsQuery,
        GetQuoteDetailsHandler(
            repository, file_storage, settings.file_storage.signed_url_ttl_seconds
        ),
    )
    query_dispatcher.register(GetServiceTypesQuery, GetServiceTypesHandler())
    query_dispatcher.register(GetQuoteStatusQuery, GetQuoteStatusHandler(repository))
    query_dispatcher.register(
        GetQuoteDashboardSummaryQuery, GetQuoteDashboardSummaryHandler(repository)
    )

    for command_type in (
        SubmitQuoteRequestCommand,
        MoveQuoteToReviewCommand,
        SendQuoteCommand,
        UpdateQuotePriorityCommand,
        RejectQuoteCommand,
        AcceptQuoteCommand,
    ):
        cache_invalidation.add_rule(command_type, *QUOTE_READ_PATTERNS)

    QuoteNotificationSubscriber(repository, notifications).register(event_publisher)

    logger.info("Quote module bootstrapped")


__all__ = ["QUOTE_READ_PATTERNS", "register_quote_module"]
