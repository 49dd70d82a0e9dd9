from typing import Protocol

from pubroute.core.models.event import EventMessage


class MessageProcessor(Protocol):
    """
    Business handler for one event type.

    Processors are registered under `handler_key(event_type)` at startup and
    invoked by the Dispatcher. They may raise; the Dispatcher logs and
    swallows the error.
    """

    async def on_message(self, event: EventMessage) -> None:
        ...
