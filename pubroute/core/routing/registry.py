import logging
from typing import Callable, TypeVar

from pubroute.core.errors import RegistrationConflictError
from pubroute.core.ports.processor import MessageProcessor


HANDLER_SUFFIX = "MessageProcessor"

P = TypeVar("P", bound=type)


def handler_key(event_type: str) -> str:
    """
    Derive the registry key of an event type: 'Subscribe' -> 'subscribeMessageProcessor'.
    """
    return event_type.lower() + HANDLER_SUFFIX


class HandlerRegistry:
    """
    Maps handler keys to MessageProcessor instances.

    Processors are registered exactly once per key while the process starts
    up, usually through the `processor` class decorator in modules picked up
    by the package scan. Registering a second processor for a key raises a
    RegistrationConflictError, so ambiguous routing stops the startup.

    Once `seal()` has been called the registry is read-only: lookups need no
    locking and further registrations raise a RuntimeError.
    """

    def __init__(self) -> None:
        self._processors: dict[str, MessageProcessor] = {}
        self._sealed = False
        self._logger = logging.getLogger("core.routing.registry")

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register(self, event_type: str, processor: MessageProcessor) -> str:
        if self._sealed:
            raise RuntimeError(
                f"Registry is sealed, cannot register processor for '{event_type}'"
            )

        key = handler_key(event_type)
        if key in self._processors:
            raise RegistrationConflictError(key)

        self._processors[key] = processor
        self._logger.debug(f"Registered {type(processor).__name__} as '{key}'")
        return key

    def processor(self, event_type: str) -> Callable[[P], P]:
        def decorator(cls: P) -> P:
            self.register(event_type, cls())
            return cls

        return decorator

    def seal(self) -> None:
        self._sealed = True
        self._logger.info(f"Handler registry sealed with keys: {sorted(self._processors)}")

    def resolve(self, key: str) -> MessageProcessor | None:
        return self._processors.get(key)

    def keys(self) -> list[str]:
        return list(self._processors)
