"""
Collaborator ports.

Handlers reach email delivery, file storage and event delivery only through
these interfaces; the in-memory adapters live in ``buildops.infrastructure``.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from buildops.core.domain.base import DomainEvent, utc_now

EventHandlerType = Callable[[DomainEvent], Awaitable[None] | None]


@dataclass(frozen=True)
class StoredFile:
    """Metadata for an uploaded file."""

    file_id: str
    filename: str
    content_type: str
    size_bytes: int
    uploaded_at: datetime = field(default_factory=utc_now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_id": self.file_id,
            "filename": self.filename,
            "content_type": self.content_type,
            "size_bytes": self.size_bytes,
            "uploaded_at": self.uploaded_at.isoformat(),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class UploadedFile:
    """A file received with a request, before it is stored."""

    filename: str
    content_type: str
    content: bytes = field(repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1].lower() if "." in self.filename else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "content_type": self.content_type,
            "size_bytes": self.size_bytes,
        }


class NotificationService(ABC):
    """Outbound email notifications."""

    @abstractmethod
    async def send_email(
        self, to: str, subject: str, body: str, *, html_body: str | None = None
    ) -> None:
        """Send a single email."""

    @abstractmethod
    async def send_quote_confirmation(self, quote: Any, confirmation_number: str) -> None:
        """Acknowledge a new quote request to the customer."""

    @abstractmethod
    async def send_admin_quote_notification(self, quote: Any) -> None:
        """Tell the office a quote request arrived."""

    @abstractmethod
    async def send_quote_decision(
        self, quote: Any, decision: str, note: str | None = None
    ) -> None:
        """Tell the customer a quote was sent or rejected."""

    @abstractmethod
    async def send_application_confirmation(
        self, application: Any, confirmation_number: str
    ) -> None:
        """Acknowledge a job application to the applicant."""


class FileStorageService(ABC):
    """Binary file storage for photos and resumes."""

    @abstractmethod
    async def upload_file(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> StoredFile:
        """
        Store ``content`` and return its metadata.

        Raises:
            ValidationError: If the file is empty or exceeds the size limit
        """

    @abstractmethod
    async def download_file(self, file_id: str) -> bytes:
        """
        Raises:
            NotFoundError: If the file does not exist
        """

    @abstractmethod
    async def get_file_metadata(self, file_id: str) -> StoredFile | None:
        """Metadata for ``file_id``, or None when unknown."""

    @abstractmethod
    async def delete_file(self, file_id: str) -> bool:
        """Delete a file; returns False when it did not exist."""

    @abstractmethod
    async def generate_signed_url(self, file_id: str, expires_in_seconds: int = 3600) -> str:
        """Time-limited download URL for ``file_id``."""


class DomainEventPublisher(ABC):
    """Delivers domain events recorded by aggregates to their subscribers."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Deliver one event to every subscriber of its type."""

    async def publish_all(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    @abstractmethod
    def subscribe(self, event_type: str, handler: EventHandlerType) -> None:
        """Register ``handler`` for events whose ``event_type`` matches."""


__all__ = [
    "DomainEventPublisher",
    "EventHandlerType",
    "FileStorageService",
    "NotificationService",
    "StoredFile",
    "UploadedFile",
]
