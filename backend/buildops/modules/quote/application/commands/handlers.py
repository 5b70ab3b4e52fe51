"""
Quote command handlers.

Handlers load the aggregate, apply one business method, save it and then
publish the events it recorded. Domain errors propagate to the dispatcher's
caller unchanged.
"""

from abc import abstractmethod
from typing import Any, Generic

from buildops.core.cqrs.base import CommandHandler, CommandResult, TCommand
from buildops.core.domain.ports import DomainEventPublisher, FileStorageService
from buildops.core.errors import NotFoundError
from buildops.core.logging import get_logger
from buildops.modules.quote.application.commands import (
    AcceptQuoteCommand,
    MoveQuoteToReviewCommand,
    QuoteCommand,
    RejectQuoteCommand,
    SendQuoteCommand,
    SubmitQuoteRequestCommand,
    UpdateQuotePriorityCommand,
)
from buildops.modules.quote.domain.entities import Quote
from buildops.modules.quote.domain.enums import QuotePriority, QuoteStatus
from buildops.modules.quote.domain.repositories import QuoteRepository

logger = get_logger(__name__)

NEXT_ACTIONS: dict[QuoteStatus, list[str]] = {
    QuoteStatus.PENDING: ["Move the request to review"],
    QuoteStatus.UNDER_REVIEW: ["Prepare the estimate", "Send the quote to the customer"],
    QuoteStatus.QUOTE_SENT: ["Wait for the customer's response", "Follow up before the quote expires"],
    QuoteStatus.ACCEPTED: ["Schedule the project kickoff", "Prepare the contract"],
    QuoteStatus.REJECTED: ["No further action required"],
    QuoteStatus.EXPIRED: ["Contact the customer about a new quote"],
}


class SubmitQuoteRequestHandler(CommandHandler[SubmitQuoteRequestCommand, dict[str, Any]]):
    """Stores the photos, creates the quote and announces it."""

    def __init__(
        self,
        repository: QuoteRepository,
        file_storage: FileStorageService,
        event_publisher: DomainEventPublisher,
    ):
        self.repository = repository
        self.file_storage = file_storage
        self.event_publisher = event_publisher

    async def handle(self, command: SubmitQuoteRequestCommand) -> CommandResult[dict[str, Any]]:
        photo_ids: list[str] = []
        try:
            for photo in command.photo_files:
                stored = await self.file_storage.upload_file(
                    photo.content,
                    photo.filename,
                    photo.content_type,
                    {"purpose": "quote_photo", "uploaded_by": command.email},
                )
                photo_ids.append(stored.file_id)

            quote = Quote.submit(
                customer_name=command.customer_name,
                email=command.email,
                phone=command.phone,
                service_type=command.service_type,
                description=command.description,
                photo_attachments=photo_ids,
                metadata=dict(command.request_metadata),
            )
        except Exception:
            # Photos are orphaned if the quote itself is rejected
            for file_id in photo_ids:
                await self.file_storage.delete_file(file_id)
            raise

        await self.repository.save(quote)
        await self.event_publisher.publish_all(quote.collect_events())

        logger.info(
            "Quote request submitted",
            quote_id=quote.id,
            service_type=quote.service_type.key,
            photo_count=len(photo_ids),
            correlation_id=command.correlation_id,
        )

        return CommandResult.ok(
            command.command_id,
            {
                "quote_id": quote.id,
                "confirmation_number": quote.confirmation_number,
                "estimated_response_time": quote.estimated_response_time,
            },
            message="Quote request submitted successfully",
        )


class QuoteTransitionHandler(CommandHandler[TCommand, dict[str, Any]], Generic[TCommand]):
    """Shared load/apply/save/publish flow for admin actions on one quote."""

    success_message = "Quote updated"

    def __init__(self, repository: QuoteRepository, event_publisher: DomainEventPublisher):
        self.repository = repository
        self.event_publisher = event_publisher

    @abstractmethod
    def apply(self, quote: Quote, command: TCommand) -> None:
        """Run the business method for ``command`` on ``quote``."""

    async def handle(self, command: QuoteCommand) -> CommandResult[dict[str, Any]]:
        quote = await self.repository.find_by_id(command.quote_id)
        if quote is None:
            raise NotFoundError("quote", command.quote_id)

        previous = quote.status
        self.apply(quote, command)
        await self.repository.save(quote)
        await self.event_publisher.publish_all(quote.collect_events())

        logger.info(
            "Quote updated",
            quote_id=quote.id,
            command_type=command.type_key(),
            previous_status=previous.value,
            new_status=quote.status.value,
            user_id=command.user_id,
        )

        return CommandResult.ok(
            command.command_id,
            {
                "quote_id": quote.id,
                "new_status": quote.status.value,
                "message": self.success_message,
                "next_actions": list(NEXT_ACTIONS[quote.status]),
            },
            message=self.success_message,
        )


class MoveQuoteToReviewHandler(QuoteTransitionHandler[MoveQuoteToReviewCommand]):
    success_message = "Quote moved to review"

    def apply(self, quote: Quote, command: MoveQuoteToReviewCommand) -> None:
        quote.move_to_review(performed_by=command.user_id)


class SendQuoteHandler(QuoteTransitionHandler[SendQuoteCommand]):
    success_message = "Quote sent to customer"

    def apply(self, quote: Quote, command: SendQuoteCommand) -> None:
        quote.send_quote(
            command.estimated_value,
            valid_until=command.valid_until,
            notes=command.notes,
            performed_by=command.user_id,
        )


class UpdateQuotePriorityHandler(QuoteTransitionHandler[UpdateQuotePriorityCommand]):
    success_message = "Quote priority updated"

    def apply(self, quote: Quote, command: UpdateQuotePriorityCommand) -> None:
        quote.set_priority(
            QuotePriority.from_string(command.priority),
            reason=command.reason,
            performed_by=command.user_id,
        )


class RejectQuoteHandler(QuoteTransitionHandler[RejectQuoteCommand]):
    success_message = "Quote rejected"

    def apply(self, quote: Quote, command: RejectQuoteCommand) -> None:
        quote.reject(
            command.reason,
            notify_customer=command.notify_customer,
            performed_by=command.user_id,
        )


class AcceptQuoteHandler(QuoteTransitionHandler[AcceptQuoteCommand]):
    success_message = "Quote accepted"

    def apply(self, quote: Quote, command: AcceptQuoteCommand) -> None:
        quote.accept(customer_signature=command.customer_signature)


__all__ = [
    "NEXT_ACTIONS",
    "AcceptQuoteHandler",
    "MoveQuoteToReviewHandler",
    "QuoteTransitionHandler",
    "RejectQuoteHandler",
    "SendQuoteHandler",
    "SubmitQuoteRequestHandler",
    "UpdateQuotePriorityHandler",
]
