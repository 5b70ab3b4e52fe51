"""
Tests for HandlerRegistry.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from buildops.core.cqrs.base import Command, Query
from buildops.core.cqrs.registry import HandlerRegistry
from buildops.core.errors import (
    ConfigurationError,
    DuplicateRegistrationError,
    HandlerNotFoundError,
)


class CreateWidgetCommand(Command):
    message_type = "widget.create"

    def __init__(self, name: str = "widget", **kwargs):
        super().__init__(**kwargs)
        self.name = name
        self._freeze()


class RenameWidgetCommand(Command):
    message_type = "widget.rename"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._freeze()


class ImpostorCreateCommand(Command):
    message_type = "widget.create"


class UnroutedCommand(Command):
    pass


class SpecialCreateWidgetCommand(CreateWidgetCommand):
    """Inherits a concrete type but declares no key of its own."""


class ListWidgetsQuery(Query):
    message_type = "widget.list"


def make_handler():
    handler = Mock()
    handler.handle = Mock()
    return handler


@pytest.fixture
def registry():
    return HandlerRegistry(Command)


class TestRegistration:
    """Test suite for registering handlers."""

    def test_resolve_returns_registered_instance(self, registry):
        """Test dispatch resolves to the exact handler registered."""
        handler = make_handler()
        registry.register(CreateWidgetCommand, handler)

        assert registry.resolve(CreateWidgetCommand()) is handler
        assert registry.resolve(CreateWidgetCommand) is handler

    def test_list_registered_in_registration_order(self, registry):
        """Test every registered type is listed exactly once, in order."""
        registry.register(RenameWidgetCommand, make_handler())
        registry.register(CreateWidgetCommand, make_handler())

        assert registry.list_registered() == ["widget.rename", "widget.create"]
        assert len(registry) == 2
        assert CreateWidgetCommand in registry

    def test_duplicate_registration_rejected(self, registry):
        """Test a second handler for the same type is rejected."""
        first = make_handler()
        registry.register(CreateWidgetCommand, first)

        with pytest.raises(DuplicateRegistrationError) as exc_info:
            registry.register(CreateWidgetCommand, make_handler())

        assert exc_info.value.message_type == "widget.create"
        assert registry.resolve(CreateWidgetCommand) is first

    def test_override_flag_replaces_handler(self, registry):
        """Test override=True replaces the existing handler."""
        registry.register(CreateWidgetCommand, make_handler())
        replacement = make_handler()

        registry.register(CreateWidgetCommand, replacement, override=True)

        assert registry.resolve(CreateWidgetCommand) is replacement
        assert registry.list_registered() == ["widget.create"]

    def test_registry_built_with_allow_override(self):
        """Test allow_override registries replace without the per-call flag."""
        registry = HandlerRegistry(Command, allow_override=True)
        registry.register(CreateWidgetCommand, make_handler())
        replacement = make_handler()

        registry.register(CreateWidgetCommand, replacement)

        assert registry.resolve(CreateWidgetCommand) is replacement

    def test_two_types_claiming_one_key_always_rejected(self):
        """Test a different class with the same key is rejected even with override."""
        registry = HandlerRegistry(Command, allow_override=True)
        registry.register(CreateWidgetCommand, make_handler())

        with pytest.raises(DuplicateRegistrationError):
            registry.register(ImpostorCreateCommand, make_handler(), override=True)

    def test_type_without_message_type_rejected(self, registry):
        """Test a command type must declare its routing key."""
        with pytest.raises(ConfigurationError):
            registry.register(UnroutedCommand, make_handler())

    def test_subclass_does_not_inherit_routing_key(self, registry):
        """Test every concrete class declares its own key."""
        with pytest.raises(ConfigurationError):
            registry.register(SpecialCreateWidgetCommand, make_handler())

    def test_wrong_message_kind_rejected(self, registry):
        """Test a query type cannot be registered in a command registry."""
        with pytest.raises(ConfigurationError):
            registry.register(ListWidgetsQuery, make_handler())

    def test_handler_without_handle_rejected(self, registry):
        """Test handlers must expose handle()."""
        with pytest.raises(ConfigurationError):
            registry.register(CreateWidgetCommand, object())

    def test_concurrent_duplicate_registration_is_deterministic(self, registry):
        """Test exactly one of many racing registrations wins."""
        handlers = [make_handler() for _ in range(8)]

        def attempt(handler):
            try:
                registry.register(CreateWidgetCommand, handler)
                return handler
            except DuplicateRegistrationError:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(attempt, handlers))

        winners = [handler for handler in outcomes if handler is not None]
        assert len(winners) == 1
        assert registry.resolve(CreateWidgetCommand) is winners[0]


class TestResolution:
    """Test suite for resolving and removing handlers."""

    def test_unregistered_type_raises_handler_not_found(self, registry):
        """Test resolving an unknown type names the type."""
        with pytest.raises(HandlerNotFoundError) as exc_info:
            registry.resolve(RenameWidgetCommand())

        assert exc_info.value.message_type == "widget.rename"
        assert "widget.rename" in exc_info.value.message

    def test_unregister(self, registry):
        """Test unregister removes the handler once."""
        registry.register(CreateWidgetCommand, make_handler())

        assert registry.unregister(CreateWidgetCommand) is True
        assert registry.unregister(CreateWidgetCommand) is False
        assert not registry.is_registered(CreateWidgetCommand)

    def test_is_registered_tolerates_invalid_types(self, registry):
        """Test is_registered answers False for types it cannot route."""
        assert registry.is_registered(UnroutedCommand) is False

    def test_clear(self, registry):
        """Test clear removes everything."""
        registry.register(CreateWidgetCommand, make_handler())
        registry.register(RenameWidgetCommand, make_handler())

        registry.clear()

        assert len(registry) == 0
        assert registry.list_registered() == []
