"""Notification adapter that logs outgoing mail instead of delivering it."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from buildops.core.config import NotificationConfig
from buildops.core.domain.base import utc_now
from buildops.core.domain.ports import NotificationService
from buildops.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SentEmail:
    to: str
    subject: str
    body: str
    html_body: str | None = None
    sent_at: datetime = field(default_factory=utc_now)


class LoggingNotificationService(NotificationService):
    """
    Records every message in ``sent`` and logs it.

    Message bodies are built here so the templates are the same ones a real
    mail adapter would render.
    """

    def __init__(self, config: NotificationConfig | None = None):
        self.config = config or NotificationConfig()
        self.sent: list[SentEmail] = []

    async def send_email(
        self, to: str, subject: str, body: str, *, html_body: str | None = None
    ) -> None:
        self.sent.append(SentEmail(to=to, subject=subject, body=body, html_body=html_body))
        logger.info(
            "Email sent",
            to=to,
            subject=subject,
            sender=self.config.from_address,
            body_length=len(body),
        )

    async def send_quote_confirmation(self, quote: Any, confirmation_number: str) -> None:
        body = (
            f"Hi {quote.customer_name},\n\n"
            f"Thank you for your {quote.service_type.name} quote request.\n"
            f"Your confirmation number is {confirmation_number}.\n"
            f"We usually respond within {quote.estimated_response_time}.\n"
        )
        await self.send_email(
            str(quote.email),
            f"Quote request received ({confirmation_number})",
            body,
        )

    async def send_admin_quote_notification(self, quote: Any) -> None:
        body = (
            f"New {quote.service_type.name} quote request from {quote.customer_name}.\n"
            f"Phone: {quote.phone.formatted}\n"
            f"Priority: {quote.priority.value}\n\n"
            f"{quote.description}\n"
        )
        for address in self.config.admin_addresses:
            await self.send_email(address, f"New quote request: {quote.customer_name}", body)

    async def send_quote_decision(
        self, quote: Any, decision: str, note: str | None = None
    ) -> None:
        if decision == "sent":
            subject = "Your quote is ready"
            body = (
                f"Hi {quote.customer_name},\n\n"
                f"Our estimate for your {quote.service_type.name} project is "
                f"${quote.estimated_value:,.2f}.\n"
                f"It is valid until {quote.expires_at:%B %d, %Y}.\n"
            )
        else:
            subject = "Update on your quote request"
            body = (
                f"Hi {quote.customer_name},\n\n"
                f"Unfortunately we are unable to provide a quote for this request.\n"
            )
        if note:
            body += f"\n{note}\n"
        await self.send_email(str(quote.email), subject, body)

    async def send_application_confirmation(
        self, application: Any, confirmation_number: str
    ) -> None:
        body = (
            f"Hi {application.applicant_name},\n\n"
            f"We received your application. Your confirmation number is "
            f"{confirmation_number}.\n"
        )
        await self.send_email(
            str(application.email),
            f"Application received ({confirmation_number})",
            body,
        )
        for address in self.config.hr_addresses:
            await self.send_email(
                address,
                f"New job application: {application.applicant_name}",
                f"Experience level: {application.experience_level.value}\n",
            )

    def messages_to(self, address: str) -> list[SentEmail]:
        return [message for message in self.sent if message.to == address]


__all__ = ["LoggingNotificationService", "SentEmail"]
