"""
Tests for the CQRS message and result types.
"""

from datetime import datetime, timezone

import pytest

from buildops.core.cqrs.base import (
    INTERNAL_ERROR_MESSAGE,
    Command,
    CommandResult,
    PaginatedResult,
    Pagination,
    Query,
    QueryResult,
    Sorting,
    enum_filter_value,
)
from buildops.core.enums import SortDirection
from buildops.core.errors import (
    BusinessRuleViolationError,
    CommandValidationError,
    DomainValidationError,
    FieldError,
    NotFoundError,
    ValidationError,
)
from buildops.modules.quote.domain.enums import QuoteStatus


class RenameCommand(Command):
    message_type = "test.rename"

    def __init__(self, new_name: str, **kwargs):
        super().__init__(**kwargs)
        self.new_name = new_name
        self._freeze()


class SearchQuery(Query):
    message_type = "test.search"

    def __init__(self, text=None, tag=None, **kwargs):
        super().__init__(
            filters={"text": text, "tag": tag},
            pagination=Pagination(page=2, limit=5),
            sorting=Sorting("name", "DESC"),
            **kwargs,
        )
        self._freeze()


class TestCommand:
    """Test suite for Command."""

    def test_identity_assigned(self):
        """Test each command gets its own id and a UTC timestamp."""
        first = RenameCommand("a")
        second = RenameCommand("a")

        assert first.command_id != second.command_id
        assert first.timestamp.tzinfo is not None
        assert first != second

    def test_immutable_after_freeze(self):
        """Test fields cannot be reassigned or deleted once frozen."""
        command = RenameCommand("a", metadata={"source": "test"})

        with pytest.raises(AttributeError):
            command.new_name = "b"
        with pytest.raises(AttributeError):
            del command.new_name
        with pytest.raises(TypeError):
            command.metadata["source"] = "changed"

    def test_to_dict(self):
        """Test serialization keeps the routing key and the payload."""
        command = RenameCommand("a", correlation_id="corr-1", user_id="admin")

        data = command.to_dict()

        assert data["command_type"] == "test.rename"
        assert data["correlation_id"] == "corr-1"
        assert data["user_id"] == "admin"
        assert data["payload"] == {"new_name": "a"}

    def test_type_key(self):
        assert RenameCommand.type_key() == "test.rename"


class TestQueryShape:
    """Test suite for Query, Pagination and Sorting."""

    def test_cache_shape_drops_none_filters(self):
        """Test unset filters do not change the shape."""
        query = SearchQuery(text="paint")

        assert query.cache_shape() == {
            "filters": {"text": "paint"},
            "pagination": {"page": 2, "limit": 5},
            "sorting": {"field": "name", "direction": "desc"},
        }

    def test_query_immutable(self):
        query = SearchQuery()

        with pytest.raises(AttributeError):
            query.filters = {}

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    def test_pagination_rejects_invalid_values(self, page, limit):
        """Test page and limit must be positive."""
        with pytest.raises(ValidationError):
            Pagination(page=page, limit=limit)

    def test_pagination_offset(self):
        assert Pagination(page=3, limit=20).offset == 40

    def test_sorting_parses_direction(self):
        """Test sort directions accept any casing."""
        assert Sorting("name", "Asc").direction == SortDirection.ASC

    def test_sorting_rejects_unknown_direction(self):
        with pytest.raises(ValidationError):
            Sorting("name", "sideways")

    def test_enum_filter_value(self):
        """Test enum filters normalize to values and reject unknown ones."""
        assert enum_filter_value(QuoteStatus, "PENDING", "status") == "pending"
        assert enum_filter_value(QuoteStatus, QuoteStatus.ACCEPTED, "status") == "accepted"
        assert enum_filter_value(QuoteStatus, None, "status") is None
        with pytest.raises(ValidationError) as exc_info:
            enum_filter_value(QuoteStatus, "lost", "status")
        assert exc_info.value.field == "status"


class TestResults:
    """Test suite for the result envelopes."""

    def test_command_result_ok(self):
        result = CommandResult.ok("cmd-1", {"id": "42"}, message="Done")

        assert result.success is True
        assert result.to_dict()["data"] == {"id": "42"}
        assert result.to_dict()["errors"] == []

    def test_from_error_command_validation(self):
        """Test validation failures keep their field errors."""
        errors = [FieldError("description", "Too short", "MIN_LENGTH")]

        result = CommandResult.from_error("cmd-1", CommandValidationError(errors))

        assert result.success is False
        assert result.errors == errors
        assert result.message == "Command validation failed"

    def test_from_error_domain_validation(self):
        result = CommandResult.from_error(
            "cmd-1", DomainValidationError("email", "Invalid email format")
        )

        assert result.errors == [
            FieldError("email", "Invalid email format", "DOMAIN_VALIDATION")
        ]

    def test_from_error_business_rule(self):
        result = CommandResult.from_error(
            "cmd-1", BusinessRuleViolationError("Quote must be pending", rule="x")
        )

        assert result.errors[0].field == "business_rule"
        assert result.errors[0].code == "BUSINESS_RULE_VIOLATION"

    def test_from_error_not_found(self):
        result = CommandResult.from_error("cmd-1", NotFoundError("quote", "q-1"))

        assert result.errors[0].field == "quote"
        assert result.errors[0].code == "NOT_FOUND"

    def test_from_error_hides_internals(self):
        """Test unexpected errors never leak their message."""
        result = QueryResult.from_error("q-1", RuntimeError("db password is hunter2"))

        assert result.errors == [FieldError("system", INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR")]
        assert result.message == "Internal system error"
        assert "hunter2" not in str(result.to_dict())

    def test_query_result_equality_ignores_identity(self):
        """Test results for the same read compare equal across dispatches."""
        first = QueryResult.ok("q-1", {"total": 3})
        second = first.with_timing("q-2", 0.5, from_cache=True)

        assert first == second
        assert second.query_id == "q-2"
        assert second.from_cache is True

    def test_is_empty(self):
        """Test empty detection for None, collections and pages."""
        page = PaginatedResult.build([], 0, Pagination())

        assert QueryResult.ok("q", None).is_empty
        assert QueryResult.ok("q", []).is_empty
        assert QueryResult.ok("q", page).is_empty
        assert not QueryResult.ok("q", {"a": 1}).is_empty
        assert not QueryResult.ok("q", 0).is_empty


class TestPaginatedResult:
    """Test suite for PaginatedResult."""

    def test_page_navigation(self):
        page = PaginatedResult.build(["a", "b"], total=5, pagination=Pagination(page=2, limit=2))

        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_previous is True

    def test_to_dict_serializes_items(self):
        moment = datetime(2024, 1, 2, tzinfo=timezone.utc)
        page = PaginatedResult.build([{"at": moment}], total=1, pagination=Pagination())

        data = page.to_dict()

        assert data["items"] == [{"at": "2024-01-02T00:00:00+00:00"}]
        assert data["total_pages"] == 1
        assert data["has_next"] is False
