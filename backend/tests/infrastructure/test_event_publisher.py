"""
Tests for InMemoryEventPublisher.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from buildops.core.domain.base import DomainEvent
from buildops.core.errors import ValidationError
from buildops.infrastructure.events import InMemoryEventPublisher


class ThingHappened(DomainEvent):
    event_type = "thing.happened"


class OtherThingHappened(DomainEvent):
    event_type = "thing.other"


class TestInMemoryEventPublisher:
    """Test suite for InMemoryEventPublisher."""

    @pytest.mark.asyncio
    async def test_subscribers_called_in_order(self):
        publisher = InMemoryEventPublisher()
        calls = []
        publisher.subscribe("thing.happened", lambda event: calls.append("sync"))

        async def async_handler(event):
            calls.append("async")

        publisher.subscribe("thing.happened", async_handler)

        await publisher.publish(ThingHappened("agg-1"))

        assert calls == ["sync", "async"]

    @pytest.mark.asyncio
    async def test_only_matching_subscribers_called(self):
        publisher = InMemoryEventPublisher()
        handler = AsyncMock()
        publisher.subscribe("thing.other", handler)

        await publisher.publish(ThingHappened("agg-1"))

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_subscriber_isolated(self):
        """Test one failing subscriber neither raises nor stops the rest."""
        publisher = InMemoryEventPublisher()
        failing = Mock(side_effect=RuntimeError("smtp down"))
        after = AsyncMock()
        publisher.subscribe("thing.happened", failing)
        publisher.subscribe("thing.happened", after)

        event = ThingHappened("agg-1")
        await publisher.publish(event)

        after.assert_awaited_once_with(event)
        assert publisher.failures == 1

    @pytest.mark.asyncio
    async def test_publish_all_keeps_order(self):
        publisher = InMemoryEventPublisher()
        events = [ThingHappened("agg-1"), OtherThingHappened("agg-1")]

        await publisher.publish_all(events)

        assert publisher.published == events

    @pytest.mark.asyncio
    async def test_rejects_non_events(self):
        with pytest.raises(ValidationError):
            await InMemoryEventPublisher().publish({"event_type": "thing.happened"})

    def test_subscribe_requires_callable(self):
        with pytest.raises(ValidationError):
            InMemoryEventPublisher().subscribe("thing.happened", "not callable")
