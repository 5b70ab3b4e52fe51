"""In-memory adapters for the collaborator ports."""

from buildops.infrastructure.events import InMemoryEventPublisher
from buildops.infrastructure.file_storage import InMemoryFileStorage
from buildops.infrastructure.notifications import LoggingNotificationService, SentEmail

__all__ = [
    "InMemoryEventPublisher",
    "InMemoryFileStorage",
    "LoggingNotificationService",
    "SentEmail",
]
