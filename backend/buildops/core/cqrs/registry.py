"""Handler registry shared by the command and query dispatchers."""

import threading
from typing import Any

from buildops.core.errors import (
    ConfigurationError,
    DuplicateRegistrationError,
    HandlerNotFoundError,
)
from buildops.core.logging import get_logger

logger = get_logger(__name__)


class HandlerRegistry:
    """
    Maps a message type's routing key to exactly one handler.

    Registering a second handler for the same key raises
    ``DuplicateRegistrationError``. Test set-ups that need to swap a handler
    either build the registry with ``allow_override=True`` or pass
    ``override=True`` to ``register``.

    Usage Example:
        registry = HandlerRegistry(Command)
        registry.register(SubmitQuoteRequestCommand, handler)
        registry.resolve(command)        # -> handler
        registry.list_registered()       # -> ["quote.submit_request"]
    """

    def __init__(self, message_base: type, *, allow_override: bool = False):
        """
        Args:
            message_base: Command or Query; registered types must subclass it
            allow_override: Replace existing registrations instead of rejecting them
        """
        self._message_base = message_base
        self._allow_override = allow_override
        self._handlers: dict[str, Any] = {}
        self._types: dict[str, type] = {}
        self._lock = threading.Lock()

    @property
    def kind(self) -> str:
        return self._message_base.__name__.lower()

    def _key_for(self, message_type: type) -> str:
        if not isinstance(message_type, type) or not issubclass(
            message_type, self._message_base
        ):
            raise ConfigurationError(
                f"{message_type!r} is not a {self._message_base.__name__} type"
            )
        return message_type.type_key()

    def register(self, message_type: type, handler: Any, *, override: bool = False) -> None:
        """
        Bind ``handler`` to ``message_type``.

        Raises:
            DuplicateRegistrationError: If the type already has a handler
            ConfigurationError: If the type has no routing key or the handler
                has no ``handle`` method
        """
        key = self._key_for(message_type)
        if not callable(getattr(handler, "handle", None)):
            raise ConfigurationError(
                f"Handler for {key} must define an async handle() method"
            )

        with self._lock:
            existing_type = self._types.get(key)
            if existing_type is not None:
                if existing_type is not message_type:
                    # Two classes claiming one key is always a wiring mistake
                    raise DuplicateRegistrationError(key, kind=f"{self.kind} type")
                if not (self._allow_override or override):
                    raise DuplicateRegistrationError(key, kind=f"{self.kind} handler")
                logger.warning(
                    "Handler replaced",
                    message_type=key,
                    previous=type(self._handlers[key]).__name__,
                    handler=type(handler).__name__,
                )

            self._handlers[key] = handler
            self._types[key] = message_type

        logger.debug(
            "Handler registered",
            kind=self.kind,
            message_type=key,
            handler=type(handler).__name__,
        )

    def unregister(self, message_type: type) -> bool:
        """Remove a registration; returns False if there was none."""
        key = self._key_for(message_type)
        with self._lock:
            removed = self._handlers.pop(key, None) is not None
            self._types.pop(key, None)
        if removed:
            logger.debug("Handler unregistered", kind=self.kind, message_type=key)
        return removed

    def resolve(self, message: Any) -> Any:
        """
        Return the handler for a message instance or message type.

        Raises:
            HandlerNotFoundError: If nothing is registered for the type
        """
        message_type = message if isinstance(message, type) else type(message)
        key = self._key_for(message_type)
        handler = self._handlers.get(key)
        if handler is None:
            raise HandlerNotFoundError(key)
        return handler

    def is_registered(self, message_type: type) -> bool:
        try:
            key = self._key_for(message_type)
        except ConfigurationError:
            return False
        return key in self._handlers

    def list_registered(self) -> list[str]:
        """Registered routing keys, in registration order."""
        return list(self._handlers)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()
            self._types.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, message_type: type) -> bool:
        return self.is_registered(message_type)


__all__ = ["HandlerRegistry"]
