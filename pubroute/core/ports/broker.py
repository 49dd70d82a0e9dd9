from typing import Protocol

from pubroute.core.models.message import InboundMessage


class Subscriber(Protocol):
    """
    Callback side of a channel subscription.

    The broker drives it: `connection_made` once the subscription is live,
    `message_received` for every inbound payload and `connection_lost` when
    the subscription goes away, with the error if it was not requested.
    """

    def connection_made(self) -> None:
        ...

    async def message_received(self, message: InboundMessage) -> None:
        ...

    def connection_lost(self, exc: Exception | None) -> None:
        ...


class Broker(Protocol):
    """
    Pub/sub transport boundary.

    Connection setup, credentials and reconnection belong to the
    implementation; the dispatch core only subscribes and receives.
    """

    async def subscribe(self, channel: str, subscriber: Subscriber) -> None:
        ...

    async def unsubscribe(self, channel: str) -> None:
        ...

    async def publish(self, channel: str, data: bytes) -> int:
        ...

    async def close(self) -> None:
        ...
