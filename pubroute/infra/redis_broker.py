import asyncio
import logging
from typing import Any

from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from pubroute.core.helpers.spawn import TaskSpawner
from pubroute.core.models.message import InboundMessage
from pubroute.core.ports.broker import Broker, Subscriber
from pubroute.core.throttling.backoff import ExponentialBackoff


class RedisBroker(Broker):
    """
    Redis pub/sub implementation of the Broker interface.

    Each subscribed channel gets its own PubSub connection and a reader task
    that polls `get_message` and hands every `message` frame to the
    subscriber. Subscription confirmations are ignored.

    Reconnection is handled here: when a read fails with a RedisError the
    subscriber is told the connection was lost, the reader waits according
    to an ExponentialBackoff and tries again. redis-py re-subscribes the
    channels of a PubSub when its connection is re-established; the first
    successful read after an outage reports `connection_made` again.
    """

    def __init__(
        self,
        client: "Redis[bytes]",  # type: ignore[type-arg]
        spawner: TaskSpawner,
        poll_interval: float = 1.0,
        reconnect_initial: float = 0.5,
        reconnect_maximum: float = 30.0,
        reconnect_jitter: float = 1.2,
    ) -> None:
        self._client = client
        self._spawner = spawner
        self._poll_interval = poll_interval
        self._reconnect_initial = reconnect_initial
        self._reconnect_maximum = reconnect_maximum
        self._reconnect_jitter = reconnect_jitter
        self._subscriptions: dict[str, tuple[PubSub, Subscriber, asyncio.Task[Any]]] = {}
        self._logger = logging.getLogger("infra.redis_broker")

    async def subscribe(self, channel: str, subscriber: Subscriber) -> None:
        if channel in self._subscriptions:
            raise RuntimeError(f"Channel '{channel}' is already subscribed")

        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(channel)
        subscriber.connection_made()

        task = self._spawner.spawn(
            self._read_forever(channel, pubsub, subscriber),
            name=f"redis-reader:{channel}",
        )
        self._subscriptions[channel] = (pubsub, subscriber, task)

    async def unsubscribe(self, channel: str) -> None:
        entry = self._subscriptions.pop(channel, None)
        if entry is None:
            return

        pubsub, subscriber, task = entry
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        try:
            await pubsub.unsubscribe(channel)
        except RedisError as exc:
            self._logger.warning(f"Error while unsubscribing from '{channel}': {exc}")
        finally:
            await pubsub.aclose()

        subscriber.connection_lost(None)

    async def publish(self, channel: str, data: bytes) -> int:
        return await self._client.publish(channel, data)

    async def close(self) -> None:
        for channel in list(self._subscriptions):
            await self.unsubscribe(channel)
        await self._client.aclose()

    async def _read_forever(
        self,
        channel: str,
        pubsub: PubSub,
        subscriber: Subscriber,
    ) -> None:
        backoff = ExponentialBackoff(
            initial=self._reconnect_initial,
            maximum=self._reconnect_maximum,
            jitter=self._reconnect_jitter,
        )
        connected = True

        while True:
            try:
                frame = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self._poll_interval,
                )
            except RedisError as exc:
                if connected:
                    connected = False
                    subscriber.connection_lost(exc)
                delay = backoff.next_delay()
                self._logger.warning(
                    f"Reading from '{channel}' failed: {exc}. Retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
                continue

            if not connected:
                connected = True
                backoff.reset()
                subscriber.connection_made()

            if frame is None or frame.get("type") != "message":
                continue

            await subscriber.message_received(
                InboundMessage(channel=self._as_text(frame["channel"]), data=frame["data"])
            )

    @staticmethod
    def _as_text(value: bytes | str) -> str:
        return value.decode("utf-8") if isinstance(value, bytes) else value
