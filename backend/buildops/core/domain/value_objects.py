"""
Shared Value Objects

Contact details used by both the quote and hiring modules.
"""

import re
from typing import ClassVar

from buildops.core.domain.base import ValueObject
from buildops.core.errors import DomainValidationError


class Email(ValueObject):
    """Email value object with validation."""

    EMAIL_REGEX: ClassVar[re.Pattern] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    MAX_LENGTH: ClassVar[int] = 254  # RFC 5321

    def __init__(self, value: str):
        super().__init__()
        if not isinstance(value, str) or not value.strip():
            raise DomainValidationError("email", "Email address is required")

        normalized = value.strip().lower()
        if len(normalized) > self.MAX_LENGTH:
            raise DomainValidationError("email", "Email address is too long")
        if not self.EMAIL_REGEX.match(normalized):
            raise DomainValidationError("email", "Invalid email format")
        if ".." in normalized:
            raise DomainValidationError("email", "Email cannot contain consecutive dots")

        self.value = normalized
        self._freeze()

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    @property
    def local_part(self) -> str:
        return self.value.split("@", 1)[0]

    def __str__(self) -> str:
        return self.value


class PhoneNumber(ValueObject):
    """
    Phone number stored as digits only.

    Accepts North American numbers (optionally prefixed with 1) and
    international numbers of 7 to 15 digits.
    """

    US_PATTERN: ClassVar[re.Pattern] = re.compile(r"^1?[2-9]\d{2}[2-9]\d{2}\d{4}$")
    INTERNATIONAL_PATTERN: ClassVar[re.Pattern] = re.compile(r"^\d{7,15}$")

    def __init__(self, value: str):
        super().__init__()
        if not isinstance(value, str) or not value.strip():
            raise DomainValidationError("phone", "Phone number is required")

        digits = re.sub(r"\D", "", value)
        if not (self.US_PATTERN.match(digits) or self.INTERNATIONAL_PATTERN.match(digits)):
            raise DomainValidationError("phone", "Invalid phone number format")

        self.value = digits
        self._freeze()

    @property
    def formatted(self) -> str:
        digits = self.value
        if len(digits) == 10:
            return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
        if len(digits) == 11 and digits.startswith("1"):
            return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
        return f"+{digits}"

    def __str__(self) -> str:
        return self.formatted


__all__ = ["Email", "PhoneNumber"]
