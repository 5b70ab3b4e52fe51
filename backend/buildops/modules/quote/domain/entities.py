"""
Quote Aggregate

A customer's request for a service estimate, from submission through the
office's review to the customer's decision.

Lifecycle:
    pending -> under_review -> quote_sent -> accepted
    pending | under_review | quote_sent -> rejected
    quote_sent -> expired (when expires_at passes)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from buildops.core.domain.base import AggregateRoot, utc_now
from buildops.core.domain.identifiers import make_confirmation_number
from buildops.core.domain.value_objects import Email, PhoneNumber
from buildops.core.errors import BusinessRuleViolationError, DomainValidationError
from buildops.modules.quote.domain.enums import QuotePriority, QuoteStatus
from buildops.modules.quote.domain.events import (
    QuoteAcceptedEvent,
    QuoteMovedToReviewEvent,
    QuotePriorityChangedEvent,
    QuoteRejectedEvent,
    QuoteSentEvent,
    QuoteSubmittedEvent,
)
from buildops.modules.quote.domain.value_objects import ServiceType

MAX_PHOTO_ATTACHMENTS = 10
QUOTE_VALIDITY_DAYS = 30


@dataclass(frozen=True)
class QuoteHistoryEntry:
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


class Quote(AggregateRoot):
    """Quote request aggregate root."""

    def __init__(
        self,
        customer_name: str,
        email: Email,
        phone: PhoneNumber,
        service_type: ServiceType,
        description: str,
        photo_attachments: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        entity_id: str | None = None,
    ):
        super().__init__(entity_id)
        self.customer_name = customer_name
        self.email = email
        self.phone = phone
        self.service_type = service_type
        self.description = description
        self.status = QuoteStatus.PENDING
        self.priority = QuotePriority.MEDIUM
        self.photo_attachments: list[str] = list(photo_attachments or [])
        self.metadata: dict[str, Any] = {"source": "website", **(metadata or {})}
        self.submitted_at = self.created_at
        self.estimated_value: Decimal | None = None
        self.quote_sent_at: datetime | None = None
        self.expires_at: datetime | None = None
        self.notes: str | None = None
        self.rejection_reason: str | None = None
        self.accepted_at: datetime | None = None
        self.customer_signature: str | None = None
        self.history: list[QuoteHistoryEntry] = []
        self.confirmation_number = make_confirmation_number("QTE", self.id, self.submitted_at)

    # =================================================================================
    # FACTORY
    # =================================================================================

    @classmethod
    def submit(
        cls,
        customer_name: str,
        email: str,
        phone: str,
        service_type: str,
        description: str,
        photo_attachments: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "Quote":
        """
        Create a new pending quote request.

        Raises:
            DomainValidationError: If any input is invalid
        """
        name = cls._validate_customer_name(customer_name)
        text = cls._validate_description(description)
        if photo_attachments and len(photo_attachments) > MAX_PHOTO_ATTACHMENTS:
            raise DomainValidationError(
                "photo_attachments",
                f"Maximum {MAX_PHOTO_ATTACHMENTS} photo attachments allowed",
            )

        quote = cls(
            customer_name=name,
            email=Email(email),
            phone=PhoneNumber(phone),
            service_type=ServiceType(service_type),
            description=text,
            photo_attachments=photo_attachments,
            metadata=metadata,
        )
        quote._record("submitted", "Quote request submitted", quote.customer_name)
        quote.add_event(
            QuoteSubmittedEvent(
                quote.id,
                customer_name=quote.customer_name,
                email=quote.email.value,
                service_type=quote.service_type.key,
                confirmation_number=quote.confirmation_number,
            )
        )
        return quote

    @staticmethod
    def _validate_customer_name(name: str) -> str:
        if not isinstance(name, str) or len(name.strip()) < 2:
            raise DomainValidationError("customer_name", "Must be at least 2 characters")
        if len(name.strip()) > 100:
            raise DomainValidationError("customer_name", "Must not exceed 100 characters")
        return name.strip()

    @staticmethod
    def _validate_description(description: str) -> str:
        if not isinstance(description, str) or len(description.strip()) < 10:
            raise DomainValidationError("description", "Must be at least 10 characters")
        if len(description.strip()) > 2000:
            raise DomainValidationError("description", "Must not exceed 2000 characters")
        return description.strip()

    # =================================================================================
    # BUSINESS METHODS
    # =================================================================================

    def move_to_review(self, performed_by: str | None = None) -> None:
        if self.status != QuoteStatus.PENDING:
            raise BusinessRuleViolationError(
                "Quote must be pending to move to review", rule="quote.review_requires_pending"
            )

        self.status = QuoteStatus.UNDER_REVIEW
        self._record("moved_to_review", "Quote moved to review", performed_by)
        self.add_event(QuoteMovedToReviewEvent(self.id))

    def send_quote(
        self,
        estimated_value: Decimal | float,
        valid_until: datetime | None = None,
        notes: str | None = None,
        performed_by: str | None = None,
    ) -> None:
        if self.status != QuoteStatus.UNDER_REVIEW:
            raise BusinessRuleViolationError(
                "Quote must be under review to send quote", rule="quote.send_requires_review"
            )
        value = Decimal(str(estimated_value))
        if value <= 0:
            raise DomainValidationError("estimated_value", "Must be greater than 0")

        now = utc_now()
        self.status = QuoteStatus.QUOTE_SENT
        self.estimated_value = value
        self.quote_sent_at = now
        if valid_until is not None and valid_until.tzinfo is None:
            valid_until = valid_until.replace(tzinfo=timezone.utc)
        self.expires_at = valid_until or now + timedelta(days=QUOTE_VALIDITY_DAYS)
        self.notes = notes
        self._record("quote_sent", f"Quote sent for ${value:,.2f}", performed_by)
        self.add_event(
            QuoteSentEvent(
                self.id,
                estimated_value=str(value),
                expires_at=self.expires_at.isoformat(),
            )
        )

    def accept(self, customer_signature: str | None = None) -> None:
        if self.status != QuoteStatus.QUOTE_SENT:
            raise BusinessRuleViolationError(
                "Quote must be sent to be accepted", rule="quote.accept_requires_sent"
            )
        if self.is_expired():
            raise BusinessRuleViolationError(
                "Cannot accept expired quote", rule="quote.accept_requires_unexpired"
            )

        self.status = QuoteStatus.ACCEPTED
        self.accepted_at = utc_now()
        self.customer_signature = customer_signature
        self._record("accepted", "Quote accepted by customer", self.customer_name)
        self.add_event(QuoteAcceptedEvent(self.id, estimated_value=str(self.estimated_value)))

    def reject(
        self,
        reason: str,
        notify_customer: bool = True,
        performed_by: str | None = None,
    ) -> None:
        if not self.status.is_open:
            raise BusinessRuleViolationError(
                "Cannot reject quote in current status", rule="quote.reject_requires_open"
            )

        self.status = QuoteStatus.REJECTED
        self.rejection_reason = reason
        self._record("rejected", f"Quote rejected: {reason}", performed_by)
        self.add_event(
            QuoteRejectedEvent(self.id, reason=reason, notify_customer=notify_customer)
        )

    def set_priority(
        self,
        priority: QuotePriority,
        reason: str | None = None,
        performed_by: str | None = None,
    ) -> None:
        previous = self.priority
        self.priority = priority
        description = f"Priority changed from {previous.value} to {priority.value}"
        if reason:
            description += f" ({reason})"
        self._record("priority_changed", description, performed_by)
        self.add_event(
            QuotePriorityChangedEvent(
                self.id, previous=previous.value, priority=priority.value
            )
        )

    def add_photo_attachment(self, file_id: str) -> None:
        if len(self.photo_attachments) >= MAX_PHOTO_ATTACHMENTS:
            raise BusinessRuleViolationError(
                f"Maximum {MAX_PHOTO_ATTACHMENTS} photo attachments allowed",
                rule="quote.max_photos",
            )
        self.photo_attachments.append(file_id)
        self.mark_modified()

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.status == QuoteStatus.EXPIRED:
            return True
        return self.expires_at is not None and (now or utc_now()) > self.expires_at

    def _record(self, event: str, description: str, performed_by: str | None) -> None:
        self.history.append(
            QuoteHistoryEntry(
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
    def estimated_response_time(self) -> str:
        return self.service_type.estimated_response_time

    @property
    def is_urgent(self) -> bool:
        return self.priority == QuotePriority.URGENT

    def to_summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "email": self.email.value,
            "service_type": self.service_type.key,
            "service_type_name": self.service_type.name,
            "status": self.status.value,
            "priority": self.priority.value,
            "submitted_at": self.submitted_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "photo_count": len(self.photo_attachments),
            "estimated_value": float(self.estimated_value) if self.estimated_value else None,
            "is_expired": self.is_expired(),
        }


__all__ = [
    "MAX_PHOTO_ATTACHMENTS",
    "QUOTE_VALIDITY_DAYS",
    "Quote",
    "QuoteHistoryEntry",
]
