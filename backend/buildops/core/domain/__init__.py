"""Domain building blocks shared by the business modules."""

from buildops.core.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject
from buildops.core.domain.ports import (
    DomainEventPublisher,
    FileStorageService,
    NotificationService,
    StoredFile,
    UploadedFile,
)
from buildops.core.domain.value_objects import Email, PhoneNumber

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "DomainEventPublisher",
    "Email",
    "Entity",
    "FileStorageService",
    "NotificationService",
    "PhoneNumber",
    "StoredFile",
    "UploadedFile",
    "ValueObject",
]
