import asyncio
import enum
import logging
from typing import Any

from pubroute.core.codec import EventCodec
from pubroute.core.errors import DecodeError
from pubroute.core.helpers.spawn import TaskSpawner
from pubroute.core.models.event import EventMessage
from pubroute.core.models.message import InboundMessage
from pubroute.core.ports.broker import Broker
from pubroute.core.routing.dispatcher import Dispatcher


class ListenerState(enum.Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


class SubscriptionListener:
    """
    Owns the subscription to one channel and turns every inbound payload
    into a dispatch.

    The broker drives the listener through the Subscriber callbacks:
    `connection_made` and `connection_lost` move it between UNSUBSCRIBED and
    SUBSCRIBED, `message_received` runs one dispatch cycle. Payloads that
    fail to decode are logged and dropped, they never reach a processor.

    With `max_inflight == 1` the dispatch is awaited before the broker
    delivers the next message. With a larger value dispatches run as tracked
    background tasks, and delivery only waits while `max_inflight` of them
    are still running. On `stop()` those tasks get `shutdown_grace` seconds
    to finish, the ones still running afterwards are cancelled.
    """

    def __init__(
        self,
        channel: str,
        broker: Broker,
        codec: EventCodec,
        dispatcher: Dispatcher,
        spawner: TaskSpawner,
        max_inflight: int = 1,
        shutdown_grace: float = 10.0,
    ) -> None:
        if max_inflight < 1:
            raise ValueError("max_inflight must be at least 1")

        self._channel = channel
        self._broker = broker
        self._codec = codec
        self._dispatcher = dispatcher
        self._spawner = spawner
        self._max_inflight = max_inflight
        self._shutdown_grace = shutdown_grace
        self._slots = asyncio.Semaphore(max_inflight)
        self._inflight: set[asyncio.Task[Any]] = set()
        self._state = ListenerState.UNSUBSCRIBED
        self._logger = logging.getLogger("core.service.listener")

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def state(self) -> ListenerState:
        return self._state

    async def start(self) -> None:
        self._logger.debug(f"Subscribing to channel '{self._channel}'")
        await self._broker.subscribe(self._channel, self)

    async def stop(self) -> None:
        if self._state is ListenerState.SUBSCRIBED:
            await self._broker.unsubscribe(self._channel)
        else:
            self._logger.info(
                f"Listener on '{self._channel}' is not subscribed, skip unsubscribing."
            )

        await self._wait_inflight()

    async def _wait_inflight(self) -> None:
        if not self._inflight:
            return

        self._logger.info(
            f"Waiting up to {self._shutdown_grace}s for {len(self._inflight)} in-flight dispatches."
        )
        _, pending = await asyncio.wait(set(self._inflight), timeout=self._shutdown_grace)
        if not pending:
            return

        self._logger.warning(
            f"Cancelling {len(pending)} dispatches still running after {self._shutdown_grace}s."
        )
        for task in pending:
            task.cancel()
        await asyncio.wait(pending)

    def connection_made(self) -> None:
        self._state = ListenerState.SUBSCRIBED
        self._logger.info(f"Subscribed to channel '{self._channel}'")

    def connection_lost(self, exc: Exception | None) -> None:
        self._state = ListenerState.UNSUBSCRIBED
        if exc is None:
            self._logger.info(f"Unsubscribed from channel '{self._channel}'")
        else:
            self._logger.warning(f"Subscription to '{self._channel}' lost: {exc}")

    async def message_received(self, message: InboundMessage) -> None:
        try:
            event = self._codec.decode(message.data)
        except DecodeError as exc:
            self._logger.warning(
                f"Dropping undecodable message on '{message.channel}': {exc}"
            )
            return

        if self._max_inflight == 1:
            await self._dispatcher.dispatch(event)
            return

        await self._slots.acquire()
        task = self._spawner.spawn(self._dispatch_in_slot(event))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _dispatch_in_slot(self, event: EventMessage) -> None:
        try:
            await self._dispatcher.dispatch(event)
        finally:
            self._slots.release()
