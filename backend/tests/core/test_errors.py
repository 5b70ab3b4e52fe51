"""
Tests for the BuildOps error hierarchy.
"""

import pytest

from buildops.core.errors import (
    ApplicationError,
    BuildOpsError,
    BusinessRuleViolationError,
    CommandValidationError,
    ConfigurationError,
    ConflictError,
    DomainError,
    DomainValidationError,
    DuplicateRegistrationError,
    ErrorSeverity,
    ExternalServiceError,
    FieldError,
    HandlerNotFoundError,
    InfrastructureError,
    NotFoundError,
    OperationTimeoutError,
    ValidationError,
)


class TestHierarchy:
    """Test suite for the error class tree."""

    @pytest.mark.parametrize(
        "error,parent",
        [
            (DomainValidationError("email", "Invalid email format"), DomainError),
            (BusinessRuleViolationError("Quote must be pending"), DomainError),
            (ValidationError("Bad input"), ApplicationError),
            (CommandValidationError([]), ValidationError),
            (NotFoundError("quote", "q-1"), ApplicationError),
            (ConflictError("Already exists"), ApplicationError),
            (HandlerNotFoundError("quote.submit"), ConfigurationError),
            (DuplicateRegistrationError("quote.submit"), ConfigurationError),
            (OperationTimeoutError("dispatch quote.submit", 2.0), InfrastructureError),
            (ExternalServiceError("mail", "SMTP refused"), InfrastructureError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, BuildOpsError)

    @pytest.mark.parametrize(
        "error,code,status",
        [
            (DomainValidationError("email", "Invalid"), "DOMAIN_VALIDATION", 400),
            (BusinessRuleViolationError("Nope"), "BUSINESS_RULE_VIOLATION", 409),
            (ValidationError("Bad"), "VALIDATION_ERROR", 400),
            (NotFoundError("quote", "q-1"), "NOT_FOUND", 404),
            (ConflictError("Taken"), "CONFLICT", 409),
            (OperationTimeoutError("op", 1), "TIMEOUT", 504),
            (ExternalServiceError("mail", "down"), "EXTERNAL_SERVICE_ERROR", 502),
        ],
    )
    def test_codes_and_status(self, error, code, status):
        assert error.code == code
        assert error.status_code == status


class TestBuildOpsError:
    """Test suite for the shared error behavior."""

    def test_identity(self):
        first = BuildOpsError("boom")
        second = BuildOpsError("boom")

        assert first.error_id != second.error_id
        assert str(first) == "ERROR: boom"

    def test_to_dict_hides_internals_by_default(self):
        error = BuildOpsError(
            "db host unreachable", user_message="Try again later", correlation_id="c-1"
        )

        data = error.to_dict()

        assert data["message"] == "Try again later"
        assert "internal_message" not in data
        assert "error_id" not in data

    def test_to_dict_internal(self):
        error = BuildOpsError("boom", correlation_id="c-1").with_context(step="upload")

        data = error.to_dict(include_internal=True)

        assert data["internal_message"] == "boom"
        assert data["correlation_id"] == "c-1"
        assert data["context"] == {"step": "upload"}

    def test_sensitive_details_redacted(self):
        """Test secrets in details never reach the serialized form."""
        error = BuildOpsError("boom", details={"api_token": "abc", "nested": {"password": "x"}})

        details = error.to_dict()["details"]

        assert details["api_token"] == "***REDACTED***"
        assert details["nested"]["password"] == "***REDACTED***"


class TestSpecificErrors:
    """Test suite for the concrete error types."""

    def test_not_found_user_message(self):
        error = NotFoundError("job_application", "a-1")

        assert error.user_message == "The requested job application was not found"
        assert error.details == {"resource": "job_application", "identifier": "a-1"}

    def test_command_validation_groups_field_errors(self):
        errors = [
            FieldError("description", "Too short", "MIN_LENGTH"),
            FieldError("description", "Missing", "REQUIRED_FIELD"),
        ]

        error = CommandValidationError(errors)

        assert error.message == "Command validation failed"
        assert error.details["field_errors"] == {"description": ["Too short", "Missing"]}

    def test_conflict_records_resource(self):
        assert ConflictError("Duplicate quote", resource="quote").details["resource"] == "quote"

    def test_external_service_error_is_retryable(self):
        """Test collaborator failures carry a retry hint and a safe message."""
        error = ExternalServiceError("mail", "SMTP refused")

        data = error.to_dict()

        assert error.retryable is True
        assert data["retryable"] is True
        assert data["message"] == "External service temporarily unavailable"
        assert "SMTP" not in data["message"]

    def test_configuration_error_is_critical_and_final(self):
        error = ConfigurationError("Bad setting", config_key="BUILDOPS_CACHE_DEFAULT_TTL")

        assert error.severity == ErrorSeverity.CRITICAL
        assert error.retryable is False
        assert error.details["config_key"] == "BUILDOPS_CACHE_DEFAULT_TTL"
