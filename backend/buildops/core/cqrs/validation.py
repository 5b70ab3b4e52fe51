"""Command validation contracts used by the validation middleware."""

from abc import ABC, abstractmethod
from collections.abc import Sized
from dataclasses import dataclass, field
from typing import Any, Generic

from buildops.core.cqrs.base import TCommand
from buildops.core.errors import FieldError


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one command."""

    is_valid: bool
    errors: list[FieldError] = field(default_factory=list)

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, errors: list[FieldError]) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors))

    @classmethod
    def from_errors(cls, errors: list[FieldError]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=list(errors))


class CommandValidator(ABC, Generic[TCommand]):
    """Validates one command type before its handler runs."""

    @abstractmethod
    async def validate(self, command: TCommand) -> ValidationResult:
        """Return the field errors found in ``command``."""


class FieldRules:
    """
    Accumulates field errors for a validator.

    Usage Example:
        rules = FieldRules()
        rules.required("email", command.email, "Email is required")
        rules.length("description", command.description, minimum=10, maximum=2000)
        return rules.result()
    """

    def __init__(self):
        self.errors: list[FieldError] = []

    def add(self, field_name: str, message: str, code: str) -> None:
        self.errors.append(FieldError(field_name, message, code))

    def required(self, field_name: str, value: Any, message: str) -> bool:
        """Record REQUIRED_FIELD when value is missing or blank."""
        missing = value is None or (isinstance(value, str) and not value.strip())
        if missing:
            self.add(field_name, message, "REQUIRED_FIELD")
        return not missing

    def length(
        self,
        field_name: str,
        value: str | None,
        *,
        minimum: int | None = None,
        maximum: int | None = None,
        label: str | None = None,
    ) -> None:
        """Record MIN_LENGTH/MAX_LENGTH for a present string value."""
        if not value:
            return
        label = label or field_name.replace("_", " ").capitalize()
        if minimum is not None and len(value) < minimum:
            self.add(field_name, f"{label} must be at least {minimum} characters", "MIN_LENGTH")
        if maximum is not None and len(value) > maximum:
            self.add(field_name, f"{label} must not exceed {maximum} characters", "MAX_LENGTH")

    def max_items(self, field_name: str, items: Sized | None, maximum: int, message: str) -> None:
        if items is not None and len(items) > maximum:
            self.add(field_name, message, "MAX_ITEMS")

    def one_of(self, field_name: str, value: Any, allowed: list[str], label: str) -> None:
        if value and value not in allowed:
            self.add(field_name, f"{label} must be one of: {', '.join(allowed)}", "INVALID_VALUE")

    def result(self) -> ValidationResult:
        return ValidationResult.from_errors(self.errors)


__all__ = ["CommandValidator", "FieldRules", "ValidationResult"]
