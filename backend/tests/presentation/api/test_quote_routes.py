"""
HTTP tests for the quote endpoints.
"""

import pytest

from buildops.presentation.api.middleware import CORRELATION_HEADER


async def create_quote(client, quote_request, **extra):
    response = await client.post("/api/quotes", json={**quote_request, **extra})
    assert response.status_code == 201, response.text
    return response.json()["data"]["quote_id"]


class TestSubmitQuote:
    """Test suite for POST /api/quotes."""

    @pytest.mark.asyncio
    async def test_created(self, client, quote_request, encoded_photo):
        response = await client.post("/api/quotes", json={**quote_request, "photos": [encoded_photo]})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["confirmation_number"].startswith("QTE-")

    @pytest.mark.asyncio
    async def test_business_validation_is_400(self, client, quote_request):
        response = await client.post("/api/quotes", json={**quote_request, "description": "short"})

        assert response.status_code == 400
        error = response.json()["errors"][0]
        assert error["field"] == "description"
        assert error["code"] == "MIN_LENGTH"

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, client, quote_request):
        del quote_request["email"]

        response = await client.post("/api/quotes", json=quote_request)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "email"
        assert body["errors"][0]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_bad_base64_is_400(self, client, quote_request, encoded_photo):
        encoded_photo["content"] = "not base64!"

        response = await client.post("/api/quotes", json={**quote_request, "photos": [encoded_photo]})

        assert response.status_code == 400


class TestQuoteAdminRoutes:
    """Test suite for the admin quote endpoints."""

    @pytest.mark.asyncio
    async def test_review_and_send(self, client, quote_request):
        quote_id = await create_quote(client, quote_request)

        reviewed = await client.post(
            f"/api/quotes/{quote_id}/review", headers={"X-User-Id": "admin"}
        )
        sent = await client.post(
            f"/api/quotes/{quote_id}/send", json={"estimated_value": "1250.00"}
        )

        assert reviewed.status_code == 200
        assert sent.status_code == 200
        assert sent.json()["data"]["new_status"] == "quote_sent"

    @pytest.mark.asyncio
    async def test_unknown_quote_is_404(self, client):
        response = await client.post("/api/quotes/missing/review")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_wrong_transition_is_409(self, client, quote_request):
        quote_id = await create_quote(client, quote_request)

        response = await client.post(f"/api/quotes/{quote_id}/accept", json={})

        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "BUSINESS_RULE_VIOLATION"

    @pytest.mark.asyncio
    async def test_reject(self, client, quote_request):
        quote_id = await create_quote(client, quote_request)

        response = await client.post(
            f"/api/quotes/{quote_id}/reject",
            json={"reason": "Outside our service area", "notify_customer": False},
        )

        assert response.json()["data"]["new_status"] == "rejected"


class TestQuoteReads:
    """Test suite for the quote read endpoints."""

    @pytest.mark.asyncio
    async def test_list_served_from_cache(self, client, quote_request):
        await create_quote(client, quote_request)

        first = await client.get("/api/quotes", params={"limit": 5})
        second = await client.get("/api/quotes", params={"limit": 5})

        assert first.json()["from_cache"] is False
        assert second.json()["from_cache"] is True
        assert second.json()["data"]["total"] == 1

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_status(self, client):
        response = await client.get("/api/quotes", params={"status": "lost"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    @pytest.mark.asyncio
    async def test_details(self, client, quote_request):
        quote_id = await create_quote(client, quote_request)

        response = await client.get(f"/api/quotes/{quote_id}")

        assert response.status_code == 200
        assert response.json()["data"]["customer"]["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_status_lookup(self, client, quote_request):
        quote_id = await create_quote(client, quote_request)

        found = await client.get(
            f"/api/quotes/{quote_id}/status", params={"email": "alice@example.com"}
        )
        hidden = await client.get(
            f"/api/quotes/{quote_id}/status", params={"email": "eve@example.com"}
        )

        assert found.json()["data"]["status"] == "pending"
        assert hidden.status_code == 404

    @pytest.mark.asyncio
    async def test_summary_and_service_types(self, client, quote_request):
        await create_quote(client, quote_request)

        summary = await client.get("/api/quotes/summary")
        service_types = await client.get("/api/service-types", params={"category": "seasonal"})

        assert summary.json()["data"]["total"] == 1
        assert [item["key"] for item in service_types.json()["data"]] == ["snow-ice-removal"]


class TestPlatformRoutes:
    """Test suite for health, metrics and correlation ids."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["checks"]["query_cache"] == "healthy"
        assert "commands" in response.json()["dispatch"]

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, client, quote_request):
        await create_quote(client, quote_request)

        response = await client.get("/metrics/")

        assert response.status_code == 200
        assert "buildops_commands_total" in response.text
        assert 'command_type="quote.submit_request"' in response.text

    @pytest.mark.asyncio
    async def test_correlation_id_echoed(self, client):
        response = await client.get("/health", headers={CORRELATION_HEADER: "corr-123"})

        assert response.headers[CORRELATION_HEADER] == "corr-123"

    @pytest.mark.asyncio
    async def test_correlation_id_generated(self, client):
        response = await client.get("/health")

        assert response.headers[CORRELATION_HEADER]
