"""
Tests for QuoteApplicationService, running through the wired dispatchers.
"""

import pytest

from buildops.bootstrap import bootstrap
from buildops.core.config import Settings
from buildops.core.domain.ports import UploadedFile
from buildops.core.errors import FieldError

ADMIN = "estimates@buildops.example"


@pytest.fixture
def quotes(container):
    return container.quotes


@pytest.fixture
def outbox(container):
    return container.notification_service


async def submit(quotes, quote_request, **extra):
    result = await quotes.submit_quote_request(**quote_request, **extra)
    assert result.success, result.errors
    return result.data["quote_id"]


class TestSubmitQuoteRequest:
    """Test suite for submitting quote requests."""

    @pytest.mark.asyncio
    async def test_submit_stores_and_notifies(self, container, quotes, outbox, quote_request, photo):
        result = await quotes.submit_quote_request(**quote_request, photo_files=[photo])

        assert result.success is True
        assert result.data["confirmation_number"].startswith("QTE-")
        assert result.data["estimated_response_time"] == "1-2 business days"

        quote = await container.quote_repository.find_by_id(result.data["quote_id"])
        assert len(quote.photo_attachments) == 1
        assert len(container.file_storage) == 1

        confirmation = outbox.messages_to("alice@example.com")
        assert len(confirmation) == 1
        assert result.data["confirmation_number"] in confirmation[0].subject
        assert len(outbox.messages_to(ADMIN)) == 1

    @pytest.mark.asyncio
    async def test_short_description_rejected_before_handler(
        self, container, quotes, outbox, quote_request
    ):
        """Test validation failures never reach the handler."""
        quote_request["description"] = "short"

        result = await quotes.submit_quote_request(**quote_request)

        assert result.success is False
        assert result.errors == [
            FieldError("description", "Description must be at least 10 characters", "MIN_LENGTH")
        ]
        assert await container.quote_repository.count() == 0
        assert outbox.sent == []

    @pytest.mark.asyncio
    async def test_non_image_photo_rejected(self, container, quotes, quote_request, resume):
        result = await quotes.submit_quote_request(**quote_request, photo_files=[resume])

        assert result.success is False
        assert result.errors[0].code == "INVALID_FILE_TYPE"
        assert len(container.file_storage) == 0

    @pytest.mark.asyncio
    async def test_domain_rejection_cleans_up_photos(self, container, quotes, quote_request, photo):
        """Test photos stored for a quote the domain rejects are deleted again."""
        quote_request["service_type"] = "plumbing"

        result = await quotes.submit_quote_request(**quote_request, photo_files=[photo])

        assert result.success is False
        assert result.errors[0].field == "service_type"
        assert result.errors[0].code == "DOMAIN_VALIDATION"
        assert len(container.file_storage) == 0

    @pytest.mark.asyncio
    async def test_photo_size_limit(self, monkeypatch, quote_request):
        monkeypatch.setenv("BUILDOPS_FILE_MAX_SIZE_BYTES", str(2 * 1024 * 1024))
        container = bootstrap(Settings(env_file=None))
        big = UploadedFile("big.png", "image/png", b"x" * (3 * 1024 * 1024))

        result = await container.quotes.submit_quote_request(**quote_request, photo_files=[big])

        assert result.errors[0].code == "FILE_TOO_LARGE"
        assert "2MB" in result.errors[0].message


class TestAdminActions:
    """Test suite for the office's actions on a quote."""

    @pytest.mark.asyncio
    async def test_review_and_send(self, quotes, outbox, quote_request):
        quote_id = await submit(quotes, quote_request)

        reviewed = await quotes.move_to_review(quote_id, user_id="admin")
        sent = await quotes.send_quote(quote_id, 1250, notes="Two coats", user_id="admin")

        assert reviewed.data["new_status"] == "under_review"
        assert sent.data["new_status"] == "quote_sent"
        assert sent.data["next_actions"]
        messages = outbox.messages_to("alice@example.com")
        assert messages[-1].subject == "Your quote is ready"
        assert "$1,250.00" in messages[-1].body
        assert "Two coats" in messages[-1].body

    @pytest.mark.asyncio
    async def test_reject_notifies_customer(self, quotes, outbox, quote_request):
        quote_id = await submit(quotes, quote_request)

        result = await quotes.reject_quote(quote_id, "Outside our service area")

        assert result.data["new_status"] == "rejected"
        last = outbox.messages_to("alice@example.com")[-1]
        assert last.subject == "Update on your quote request"
        assert "Outside our service area" in last.body

    @pytest.mark.asyncio
    async def test_reject_without_notification(self, quotes, outbox, quote_request):
        quote_id = await submit(quotes, quote_request)
        before = len(outbox.sent)

        result = await quotes.reject_quote(quote_id, "Duplicate request", notify_customer=False)

        assert result.success is True
        assert len(outbox.sent) == before

    @pytest.mark.asyncio
    async def test_accept(self, quotes, quote_request):
        quote_id = await submit(quotes, quote_request)
        await quotes.move_to_review(quote_id)
        await quotes.send_quote(quote_id, 900)

        result = await quotes.accept_quote(quote_id, customer_signature="Alice")

        assert result.data["new_status"] == "accepted"

    @pytest.mark.asyncio
    async def test_unknown_quote(self, quotes):
        result = await quotes.move_to_review("missing")

        assert result.success is False
        assert result.errors[0].code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_wrong_transition(self, quotes, quote_request):
        quote_id = await submit(quotes, quote_request)

        result = await quotes.send_quote(quote_id, 500)

        assert result.success is False
        assert result.errors[0].code == "BUSINESS_RULE_VIOLATION"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [0, -10, "lots"])
    async def test_send_requires_positive_value(self, quotes, quote_request, value):
        quote_id = await submit(quotes, quote_request)
        await quotes.move_to_review(quote_id)

        result = await quotes.send_quote(quote_id, value)

        assert result.errors[0].field == "estimated_value"

    @pytest.mark.asyncio
    async def test_invalid_priority(self, quotes, quote_request):
        quote_id = await submit(quotes, quote_request)

        result = await quotes.update_priority(quote_id, "someday")

        assert result.errors[0].field == "priority"
        assert result.errors[0].code == "INVALID_VALUE"

    @pytest.mark.asyncio
    async def test_missing_quote_id(self, quotes):
        """Test a command that cannot be built still yields a result."""
        result = await quotes.move_to_review("  ")

        assert result.success is False
        assert result.errors[0].field == "quote_id"


class TestQuoteQueries:
    """Test suite for quote reads."""

    @pytest.mark.asyncio
    async def test_list_is_cached_until_a_quote_changes(self, quotes, quote_request):
        """Test admin actions evict the cached list."""
        quote_id = await submit(quotes, quote_request)

        first = await quotes.get_quote_list(limit=5)
        again = await quotes.get_quote_list(limit=5)
        assert again.from_cache is True

        await quotes.move_to_review(quote_id)
        refreshed = await quotes.get_quote_list(limit=5)

        assert first.data.total == 1
        assert refreshed.from_cache is False
        assert refreshed.data.items[0]["status"] == "under_review"

    @pytest.mark.asyncio
    async def test_list_filters(self, quotes, quote_request):
        await submit(quotes, quote_request)
        quote_request.update(customer_name="Carol", service_type="landscaping")
        await submit(quotes, quote_request)

        by_service = await quotes.get_quote_list(service_type="landscaping")
        by_name = await quotes.search_quotes_by_customer("ali")
        by_status = await quotes.get_quotes_by_status("rejected")

        assert [item["customer_name"] for item in by_service.data.items] == ["Carol"]
        assert [item["customer_name"] for item in by_name.data.items] == ["Alice"]
        assert by_status.data.total == 0

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_sort(self, quotes):
        result = await quotes.get_quote_list(sort_by="password")

        assert result.success is False
        assert result.errors[0].field == "sort_by"

    @pytest.mark.asyncio
    async def test_details_include_signed_attachments(self, container, quotes, quote_request, photo):
        quote_id = await submit(quotes, quote_request, photo_files=[photo])

        result = await quotes.get_quote_details(quote_id)

        details = result.data
        assert details["customer"]["phone_formatted"] == "(555) 123-4567"
        assert details["timeline"][0]["event"] == "submitted"
        attachment = details["attachments"][0]
        assert attachment["filename"] == "front.jpg"
        assert container.file_storage.verify_signed_url(attachment["url"])

    @pytest.mark.asyncio
    async def test_details_not_found(self, quotes):
        result = await quotes.get_quote_details("missing")

        assert result.success is False
        assert result.errors[0].code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_status_requires_matching_email(self, quotes, quote_request):
        quote_id = await submit(quotes, quote_request)

        found = await quotes.get_quote_status(quote_id, "ALICE@example.com")
        mismatch = await quotes.get_quote_status(quote_id, "mallory@example.com")

        assert found.data["status_display"] == "Pending"
        assert mismatch.success is False
        assert mismatch.errors[0].code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_service_types(self, quotes):
        everything = await quotes.get_service_types()
        construction = await quotes.get_service_types("construction")

        assert len(everything.data) == 5
        assert {item["key"] for item in construction.data} == {
            "concrete-asphalt",
            "painting",
            "demolition",
        }

    @pytest.mark.asyncio
    async def test_dashboard_summary(self, quotes, quote_request):
        first = await submit(quotes, quote_request)
        await submit(quotes, quote_request)
        await quotes.update_priority(first, "urgent")

        result = await quotes.get_dashboard_summary()

        assert result.data["total"] == 2
        assert result.data["awaiting_review"] == 2
        assert result.data["urgent_pending"] == 1
