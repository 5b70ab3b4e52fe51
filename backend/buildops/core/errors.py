"""Error classes shared by every layer of the BuildOps backend."""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class FieldError:
    """A single field-level problem reported back to the caller."""

    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


class BuildOpsError(Exception):
    """
    Base exception for all BuildOps errors.

    Carries an error id, severity, retry hint and a user-safe message so the
    HTTP boundary can report failures without exposing internals.
    """

    default_code: str = "ERROR"
    status_code: int = 500
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.code = kwargs.get("code") or self.default_code
        self.details = kwargs.get("details") or {}
        self.correlation_id = kwargs.get("correlation_id")
        self.error_id = str(uuid.uuid4())
        self.timestamp = time.time()
        self.user_message = kwargs.get("user_message") or message
        self.recovery_hint = kwargs.get("recovery_hint")
        self.context = kwargs.get("context") or {}
        if kwargs.get("cause") is not None:
            self.__cause__ = kwargs["cause"]

        self._log_error()

    def _log_error(self) -> None:
        """Log error with structured data."""
        logger = logging.getLogger(f"buildops.errors.{self.__class__.__name__}")
        log_data = {
            "error_id": self.error_id,
            "correlation_id": self.correlation_id,
            "code": self.code,
            "error_message": self.message,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "status_code": self.status_code,
            "details": self._sanitize_details(self.details),
            "error_class": self.__class__.__name__,
        }

        if self.severity == ErrorSeverity.CRITICAL:
            logger.critical("Critical error occurred", extra=log_data)
        elif self.severity == ErrorSeverity.HIGH:
            logger.error("High severity error", extra=log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning("Medium severity error", extra=log_data)
        else:
            logger.info("Low severity error", extra=log_data)

    def _sanitize_details(self, details: dict) -> dict:
        """Remove sensitive values from error details."""
        if not details:
            return {}

        sensitive_keys = {"password", "token", "secret", "credential", "authorization"}
        sanitized = {}

        for key, value in details.items():
            if any(sensitive in key.lower() for sensitive in sensitive_keys):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_details(value)
            else:
                sanitized[key] = value

        return sanitized

    def to_dict(
        self, include_details: bool = True, include_internal: bool = False
    ) -> dict[str, Any]:
        """
        Serialize error for API/logging.

        Args:
            include_details: Include error details
            include_internal: Include internal debugging info (error_id, severity, ...)
        """
        data = {
            "error": self.code,
            "message": self.user_message,
            "timestamp": self.timestamp,
        }

        if include_details and self.details:
            data["details"] = {
                k: v for k, v in self._sanitize_details(self.details).items()
                if not k.startswith("_")
            }

        if self.recovery_hint:
            data["recovery_hint"] = self.recovery_hint

        if self.retryable:
            data["retryable"] = True

        if include_internal:
            data.update(
                {
                    "error_id": self.error_id,
                    "correlation_id": self.correlation_id,
                    "severity": self.severity.value,
                    "internal_message": self.message,
                    "context": self.context,
                }
            )

        return data

    def with_context(self, **context: Any) -> "BuildOpsError":
        """Add context to error and return self for chaining."""
        self.context.update(context)
        return self

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class DomainError(BuildOpsError):
    """Base class for domain errors."""

    default_code = "DOMAIN_ERROR"
    status_code = 400
    severity = ErrorSeverity.MEDIUM


class ApplicationError(BuildOpsError):
    """Base class for application layer errors."""

    default_code = "APPLICATION_ERROR"
    status_code = 400
    severity = ErrorSeverity.MEDIUM


class InfrastructureError(BuildOpsError):
    """Base class for infrastructure errors."""

    default_code = "INFRASTRUCTURE_ERROR"
    status_code = 500
    severity = ErrorSeverity.HIGH
    retryable = True


# Domain


class DomainValidationError(DomainError):
    """An aggregate or value object rejected one of its inputs."""

    default_code = "DOMAIN_VALIDATION"
    status_code = 400
    severity = ErrorSeverity.LOW

    def __init__(self, field: str, message: str, **kwargs: Any) -> None:
        super().__init__(f"{field}: {message}", user_message=message, **kwargs)
        self.field = field
        self.details["field"] = field
        self.code = self.default_code


class BusinessRuleViolationError(DomainError):
    """A state transition or invariant of an aggregate was violated."""

    default_code = "BUSINESS_RULE_VIOLATION"
    status_code = 409
    severity = ErrorSeverity.MEDIUM

    def __init__(self, message: str, rule: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if rule:
            self.details["rule"] = rule
        self.rule = rule
        self.code = self.default_code


# Application


class ValidationError(ApplicationError):
    """Validation error with support for multiple field errors."""

    default_code = "VALIDATION_ERROR"
    status_code = 400
    severity = ErrorSeverity.LOW

    def __init__(
        self,
        message: str,
        field: str | None = None,
        field_errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field
        if field_errors:
            self.details["field_errors"] = field_errors
        self.code = self.default_code


class CommandValidationError(ValidationError):
    """Raised by the validation middleware before a handler runs."""

    default_code = "COMMAND_VALIDATION_FAILED"

    def __init__(
        self,
        errors: list[FieldError],
        message: str = "Command validation failed",
        **kwargs: Any,
    ) -> None:
        field_errors: dict[str, list[str]] = {}
        for error in errors:
            field_errors.setdefault(error.field, []).append(error.message)
        super().__init__(message, field_errors=field_errors, **kwargs)
        self.errors = list(errors)
        self.code = self.default_code


class NotFoundError(ApplicationError):
    """Resource not found error."""

    default_code = "NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, resource: str, identifier: Any, **kwargs: Any) -> None:
        message = f"{resource} not found: {identifier}"
        user_message = f"The requested {resource.lower().replace('_', ' ')} was not found"
        super().__init__(message, user_message=user_message, **kwargs)
        self.resource = resource
        self.identifier = str(identifier)
        self.details.update({"resource": resource, "identifier": str(identifier)})
        self.code = self.default_code


class ConflictError(ApplicationError):
    """Resource conflict error."""

    default_code = "CONFLICT"
    status_code = 409
    severity = ErrorSeverity.MEDIUM

    def __init__(
        self, message: str, resource: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        if resource:
            self.details["resource"] = resource
        self.code = self.default_code


# Infrastructure


class ConfigurationError(InfrastructureError):
    """Configuration error."""

    default_code = "CONFIGURATION_ERROR"
    status_code = 500
    severity = ErrorSeverity.CRITICAL
    retryable = False

    def __init__(
        self, message: str, config_key: str | None = None, **kwargs: Any
    ) -> None:
        user_message = kwargs.pop("user_message", None) or "Service configuration issue"
        super().__init__(message, user_message=user_message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key
        self.code = self.default_code


class HandlerNotFoundError(ConfigurationError):
    """No handler is registered for a dispatched command or query type."""

    default_code = "HANDLER_NOT_FOUND"

    def __init__(self, message_type: str, **kwargs: Any) -> None:
        super().__init__(
            f"No handler registered for {message_type}",
            details={"message_type": message_type},
            **kwargs,
        )
        self.message_type = message_type


class DuplicateRegistrationError(ConfigurationError):
    """A second handler or validator was registered for the same type."""

    default_code = "DUPLICATE_REGISTRATION"

    def __init__(self, message_type: str, kind: str = "handler", **kwargs: Any) -> None:
        super().__init__(
            f"A {kind} is already registered for {message_type}",
            details={"message_type": message_type, "kind": kind},
            **kwargs,
        )
        self.message_type = message_type


class OperationTimeoutError(InfrastructureError):
    """Operation timeout error."""

    default_code = "TIMEOUT"
    status_code = 504
    severity = ErrorSeverity.HIGH
    retryable = True

    def __init__(self, operation: str, timeout_seconds: float, **kwargs: Any) -> None:
        message = f"{operation} timed out after {timeout_seconds}s"
        user_message = "The operation took too long to complete"
        recovery_hint = "Please try again. If the problem persists, contact support."
        super().__init__(
            message, user_message=user_message, recovery_hint=recovery_hint, **kwargs
        )
        self.details.update(
            {"operation": operation, "timeout_seconds": timeout_seconds}
        )
        self.code = self.default_code


class ExternalServiceError(InfrastructureError):
    """A collaborator (mail, file storage) failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502
    severity = ErrorSeverity.HIGH
    retryable = True

    def __init__(self, service: str, message: str, **kwargs: Any) -> None:
        full_message = f"{service} error: {message}"
        user_message = "External service temporarily unavailable"
        recovery_hint = "Please try again in a few moments"
        super().__init__(
            full_message,
            user_message=user_message,
            recovery_hint=recovery_hint,
            **kwargs,
        )
        self.details["service"] = service
        self.code = self.default_code


__all__ = [
    "ApplicationError",
    "BuildOpsError",
    "BusinessRuleViolationError",
    "CommandValidationError",
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "DomainValidationError",
    "DuplicateRegistrationError",
    "ErrorSeverity",
    "ExternalServiceError",
    "FieldError",
    "HandlerNotFoundError",
    "InfrastructureError",
    "NotFoundError",
    "OperationTimeoutError",
    "ValidationError",
]
