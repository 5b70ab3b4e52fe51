"""Validators for quote commands, run by the validation middleware."""

from datetime import timezone
from decimal import Decimal, InvalidOperation

from buildops.core.cqrs.base import utc_now
from buildops.core.cqrs.validation import CommandValidator, FieldRules, ValidationResult
from buildops.modules.quote.application.commands import (
    RejectQuoteCommand,
    SendQuoteCommand,
    SubmitQuoteRequestCommand,
    UpdateQuotePriorityCommand,
)
from buildops.modules.quote.domain.entities import MAX_PHOTO_ATTACHMENTS
from buildops.modules.quote.domain.enums import QuotePriority

MAX_PHOTO_SIZE_BYTES = 10 * 1024 * 1024
ALLOWED_PHOTO_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "image/heic"}
)


class SubmitQuoteRequestValidator(CommandValidator[SubmitQuoteRequestCommand]):
    def __init__(self, max_photo_size_bytes: int = MAX_PHOTO_SIZE_BYTES):
        self.max_photo_size_bytes = max_photo_size_bytes

    async def validate(self, command: SubmitQuoteRequestCommand) -> ValidationResult:
        rules = FieldRules()
        rules.required("customer_name", command.customer_name, "Customer name is required")
        rules.required("email", command.email, "Email is required")
        rules.required("phone", command.phone, "Phone number is required")
        rules.required("service_type", command.service_type, "Service type is required")

        if rules.required("description", command.description, "Description is required"):
            rules.length(
                "description",
                command.description.strip(),
                minimum=10,
                maximum=2000,
                label="Description",
            )

        rules.max_items(
            "photo_files",
            command.photo_files,
            MAX_PHOTO_ATTACHMENTS,
            f"Maximum {MAX_PHOTO_ATTACHMENTS} photo attachments allowed",
        )

        limit_mb = self.max_photo_size_bytes // (1024 * 1024)
        for photo in command.photo_files:
            if photo.content_type not in ALLOWED_PHOTO_TYPES:
                rules.add(
                    "photo_files",
                    f"{photo.filename}: only image files are allowed",
                    "INVALID_FILE_TYPE",
                )
            if photo.size_bytes > self.max_photo_size_bytes:
                rules.add(
                    "photo_files",
                    f"{photo.filename}: file must not exceed {limit_mb}MB",
                    "FILE_TOO_LARGE",
                )

        return rules.result()


class SendQuoteValidator(CommandValidator[SendQuoteCommand]):
    async def validate(self, command: SendQuoteCommand) -> ValidationResult:
        rules = FieldRules()

        try:
            value = Decimal(str(command.estimated_value))
        except (InvalidOperation, ValueError):
            value = None
        if value is None or not value.is_finite() or value <= 0:
            rules.add(
                "estimated_value", "Estimated value must be greater than 0", "INVALID_VALUE"
            )

        if command.valid_until is not None:
            valid_until = command.valid_until
            if valid_until.tzinfo is None:
                valid_until = valid_until.replace(tzinfo=timezone.utc)
            if valid_until <= utc_now():
                rules.add(
                    "valid_until", "Valid until date must be in the future", "INVALID_VALUE"
                )

        return rules.result()


class UpdateQuotePriorityValidator(CommandValidator[UpdateQuotePriorityCommand]):
    async def validate(self, command: UpdateQuotePriorityCommand) -> ValidationResult:
        rules = FieldRules()
        if rules.required("priority", command.priority, "Priority is required"):
            rules.one_of(
                "priority",
                command.priority.lower() if isinstance(command.priority, str) else command.priority,
                [priority.value for priority in QuotePriority],
                "Priority",
            )
        return rules.result()


class RejectQuoteValidator(CommandValidator[RejectQuoteCommand]):
    async def validate(self, command: RejectQuoteCommand) -> ValidationResult:
        rules = FieldRules()
        if rules.required("reason", command.reason, "Rejection reason is required"):
            rules.length("reason", command.reason, maximum=1000, label="Rejection reason")
        return rules.result()


__all__ = [
    "ALLOWED_PHOTO_TYPES",
    "MAX_PHOTO_SIZE_BYTES",
    "RejectQuoteValidator",
    "SendQuoteValidator",
    "SubmitQuoteRequestValidator",
    "UpdateQuotePriorityValidator",
]
