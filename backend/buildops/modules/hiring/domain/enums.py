"""
Hiring Domain Enumerations
"""

from enum import Enum


class ApplicationStatus(Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    def get_display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_finalized(self) -> bool:
        return self in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


class ExperienceLevel(Enum):
    ENTRY_LEVEL = "entry_level"
    INTERMEDIATE = "intermediate"
    EXPERIENCED = "experienced"
    EXPERT = "expert"

    @classmethod
    def values(cls) -> list[str]:
        return [level.value for level in cls]


__all__ = ["ApplicationStatus", "ExperienceLevel"]
