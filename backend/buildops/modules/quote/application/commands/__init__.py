"""
Quote commands.

Each command is an immutable request to change a quote. Field-level rules
live in the validators registered with the validation middleware; the
commands only check what they need to be routable.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from buildops.core.cqrs.base import Command
from buildops.core.domain.ports import UploadedFile
from buildops.core.errors import ValidationError


class QuoteCommand(Command):
    """Base for commands addressed to one existing quote."""

    def __init__(self, quote_id: str, **kwargs: Any):
        super().__init__(**kwargs)
        self.quote_id = quote_id

    def _validate_command(self) -> None:
        if not isinstance(self.quote_id, str) or not self.quote_id.strip():
            raise ValidationError("Quote id is required", field="quote_id")


class SubmitQuoteRequestCommand(Command):
    """A customer submits a new quote request, optionally with photos."""

    message_type = "quote.submit_request"

    def __init__(
        self,
        customer_name: str,
        email: str,
        phone: str,
        service_type: str,
        description: str,
        photo_files: Iterable[UploadedFile] | None = None,
        request_metadata: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.customer_name = customer_name
        self.email = email
        self.phone = phone
        self.service_type = service_type
        self.description = description
        self.photo_files = tuple(photo_files or ())
        self.request_metadata = MappingProxyType(dict(request_metadata or {}))
        self._freeze()


class MoveQuoteToReviewCommand(QuoteCommand):
    message_type = "quote.move_to_review"

    def __init__(self, quote_id: str, **kwargs: Any):
        super().__init__(quote_id, **kwargs)
        self._freeze()


class SendQuoteCommand(QuoteCommand):
    """The office sends the customer an estimate."""

    message_type = "quote.send"

    def __init__(
        self,
        quote_id: str,
        estimated_value: Decimal | float,
        notes: str | None = None,
        valid_until: datetime | None = None,
        **kwargs: Any,
    ):
        super().__init__(quote_id, **kwargs)
        self.estimated_value = estimated_value
        self.notes = notes
        self.valid_until = valid_until
        self._freeze()


class UpdateQuotePriorityCommand(QuoteCommand):
    message_type = "quote.update_priority"

    def __init__(self, quote_id: str, priority: str, reason: str | None = None, **kwargs: Any):
        super().__init__(quote_id, **kwargs)
        self.priority = priority
        self.reason = reason
        self._freeze()


class RejectQuoteCommand(QuoteCommand):
    message_type = "quote.reject"

    def __init__(
        self, quote_id: str, reason: str, notify_customer: bool = True, **kwargs: Any
    ):
        super().__init__(quote_id, **kwargs)
        self.reason = reason
        self.notify_customer = notify_customer
        self._freeze()


class AcceptQuoteCommand(QuoteCommand):
    """The customer accepts a quote they were sent."""

    message_type = "quote.accept"

    def __init__(self, quote_id: str, customer_signature: str | None = None, **kwargs: Any):
        super().__init__(quote_id, **kwargs)
        self.customer_signature = customer_signature
        self._freeze()


__all__ = [
    "AcceptQuoteCommand",
    "MoveQuoteToReviewCommand",
    "QuoteCommand",
    "RejectQuoteCommand",
    "SendQuoteCommand",
    "SubmitQuoteRequestCommand",
    "UpdateQuotePriorityCommand",
]
