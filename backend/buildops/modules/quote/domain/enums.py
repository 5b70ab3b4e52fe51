"""
Quote Domain Enumerations
"""

from enum import Enum


class QuoteStatus(Enum):
    """Quote request lifecycle status."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    QUOTE_SENT = "quote_sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"

    def get_display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_open(self) -> bool:
        """Still awaiting a decision from the office or the customer."""
        return self in (QuoteStatus.PENDING, QuoteStatus.UNDER_REVIEW, QuoteStatus.QUOTE_SENT)

    @property
    def is_final(self) -> bool:
        return self in (QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED)


class QuotePriority(Enum):
    """Office handling priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_string(cls, value: str) -> "QuotePriority":
        try:
            return cls(value.lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid priority '{value}'. Valid values: {valid}") from None


class ServiceCategory(Enum):
    CONSTRUCTION = "construction"
    MAINTENANCE = "maintenance"
    SEASONAL = "seasonal"


__all__ = ["QuotePriority", "QuoteStatus", "ServiceCategory"]
