"""
Tests for shared value objects, identifiers and the aggregate base.
"""

from datetime import datetime, timezone

import pytest

from buildops.core.domain.base import AggregateRoot, DomainEvent
from buildops.core.domain.identifiers import make_confirmation_number, to_base36
from buildops.core.domain.value_objects import Email, PhoneNumber
from buildops.core.errors import DomainValidationError


class TestEmail:
    """Test suite for Email."""

    def test_normalized(self):
        email = Email("  Alice@Example.COM ")

        assert email.value == "alice@example.com"
        assert email.domain == "example.com"
        assert email.local_part == "alice"
        assert email == Email("alice@example.com")

    @pytest.mark.parametrize(
        "value", ["", "   ", "alice", "alice@", "alice@example", "a..b@example.com", None]
    )
    def test_invalid(self, value):
        with pytest.raises(DomainValidationError) as exc_info:
            Email(value)

        assert exc_info.value.field == "email"

    def test_too_long(self):
        with pytest.raises(DomainValidationError):
            Email("a" * 250 + "@example.com")

    def test_immutable(self):
        email = Email("alice@example.com")

        with pytest.raises(AttributeError):
            email.value = "bob@example.com"


class TestPhoneNumber:
    """Test suite for PhoneNumber."""

    @pytest.mark.parametrize(
        "raw,digits,formatted",
        [
            ("555-123-4567", "5551234567", "(555) 123-4567"),
            ("(415) 555-2671", "4155552671", "(415) 555-2671"),
            ("1 415 555 2671", "14155552671", "+1 (415) 555-2671"),
            ("+44 20 7946 0958", "442079460958", "+442079460958"),
        ],
    )
    def test_accepted_formats(self, raw, digits, formatted):
        phone = PhoneNumber(raw)

        assert phone.value == digits
        assert str(phone) == formatted

    @pytest.mark.parametrize("value", ["", "12345", "call me", "1" * 16])
    def test_invalid(self, value):
        with pytest.raises(DomainValidationError) as exc_info:
            PhoneNumber(value)

        assert exc_info.value.field == "phone"


class TestConfirmationNumbers:
    """Test suite for human-facing reference numbers."""

    def test_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "Z"
        assert to_base36(36) == "10"
        with pytest.raises(ValueError):
            to_base36(-1)

    def test_confirmation_number_layout(self):
        at = datetime(2024, 1, 1, tzinfo=timezone.utc)

        number = make_confirmation_number("QTE", "3f2b8c1d-aaaa-bbbb", at)

        prefix, stamp, suffix = number.split("-")
        assert prefix == "QTE"
        assert int(stamp, 36) == int(at.timestamp() * 1000)
        assert suffix == "3F2B8C1D"


class SampleEvent(DomainEvent):
    event_type = "sample.happened"


class SampleAggregate(AggregateRoot):
    def touch(self):
        self.add_event(SampleEvent(self.id, note="touched"))


class TestAggregateRoot:
    """Test suite for AggregateRoot event bookkeeping."""

    def test_events_collected_once(self):
        aggregate = SampleAggregate()
        aggregate.touch()
        aggregate.touch()

        assert aggregate.version == 3
        events = aggregate.collect_events()

        assert [event.event_type for event in events] == ["sample.happened"] * 2
        assert events[0].to_dict()["payload"] == {"note": "touched"}
        assert aggregate.has_events() is False

    def test_identity_equality(self):
        first = SampleAggregate("agg-1")

        assert first == SampleAggregate("agg-1")
        assert first != SampleAggregate("agg-2")
        assert len({first, SampleAggregate("agg-1")}) == 1
