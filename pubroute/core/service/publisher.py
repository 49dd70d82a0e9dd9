import logging

from pubroute.core.codec import EventCodec
from pubroute.core.models.event import EventMessage
from pubroute.core.ports.broker import Broker


class EventPublisher:
    """Encodes events with the worker's codec and publishes them on its channel."""

    def __init__(self, broker: Broker, codec: EventCodec, channel: str) -> None:
        self._broker = broker
        self._codec = codec
        self._channel = channel
        self._logger = logging.getLogger("core.service.publisher")

    async def publish(self, event: EventMessage) -> int:
        receivers = await self._broker.publish(self._channel, self._codec.encode(event))
        self._logger.info(
            f"Published '{event.event_type}' event to '{self._channel}' "
            f"({receivers} receiver(s))"
        )
        return receivers
