import asyncio
import logging

from pubroute.core.models.event import EventMessage
from pubroute.core.routing.registry import HandlerRegistry, handler_key


class Dispatcher:
    """
    Routes a decoded event to the processor registered for its type.

    - The handler key is derived from `event.event_type` with `handler_key`.
    - If no processor is registered under that key, an error is logged and
      the dispatch completes normally.
    - Otherwise the processor is awaited, optionally bounded by
      `handler_timeout`. Any exception it raises, timeout included, is logged
      with the event type and key, then swallowed so that the next message
      is processed as usual.

    The Dispatcher holds no mutable state; concurrent dispatches only share
    the sealed registry.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        handler_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._handler_timeout = handler_timeout
        self._logger = logging.getLogger("core.routing.dispatcher")

    async def dispatch(self, event: EventMessage) -> None:
        event_type = event.event_type
        key = handler_key(event_type)
        processor = self._registry.resolve(key)

        if processor is None:
            self._logger.error(
                f"No processor found for event '{event_type}' (key '{key}'), message dropped"
            )
            return

        # a None delay never expires
        deadline = asyncio.timeout(self._handler_timeout)
        try:
            async with deadline:
                await processor.on_message(event)
            self._logger.debug(f"Event '{event_type}' handled by '{key}'")
        except Exception as exc:
            if isinstance(exc, TimeoutError) and deadline.expired():
                self._logger.error(
                    f"Processor '{key}' timed out after {self._handler_timeout}s "
                    f"on event '{event_type}'",
                    exc_info=exc
                )
            else:
                self._logger.error(
                    f"Error in processor '{key}' for event '{event_type}': {exc}",
                    exc_info=exc
                )
