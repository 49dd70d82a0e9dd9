import asyncio
import logging

from redis.asyncio import Redis

from pubroute.bootstrap.config.settings import PubrouteConfig
from pubroute.core.codec import EventCodec
from pubroute.core.helpers.shutdown import ShutdownSignal
from pubroute.core.helpers.spawn import TaskSpawner
from pubroute.core.ports.serializer import Serializer
from pubroute.core.routing.dispatcher import Dispatcher
from pubroute.core.routing.registry import HandlerRegistry
from pubroute.core.service.lifecycle import LifecycleService
from pubroute.core.service.listener import SubscriptionListener
from pubroute.infra.redis_broker import RedisBroker


class Worker:
    """
    Builds the dispatch pipeline in a fixed order and runs it.

    The registry is sealed first, so every processor must have been
    registered by the time the Worker is created. Collaborators are passed
    explicitly: broker -> listener -> codec -> dispatcher -> registry.
    """

    def __init__(
        self,
        config: PubrouteConfig, # todo(pubroute): core depends on the bootstrap settings model
        registry: HandlerRegistry,
        serializer: Serializer,
    ) -> None:
        self._config = config
        self._registry = registry
        self._loop = self._create_event_loop()
        self._logger = logging.getLogger("pubroute.worker")

        self._registry.seal()
        if not self._registry.keys():
            self._logger.warning("No processor registered, every event will be dropped.")

        broker_config = self._config.broker
        dispatch_config = self._config.dispatch

        self._spawner = TaskSpawner(loop=self._loop)
        self._shutdown = ShutdownSignal(loop=self._loop)
        self._broker = RedisBroker(
            client=Redis.from_url(broker_config.url),
            spawner=self._spawner,
            poll_interval=broker_config.poll_interval,
            reconnect_initial=broker_config.reconnect_initial,
            reconnect_maximum=broker_config.reconnect_maximum,
            reconnect_jitter=broker_config.reconnect_jitter,
        )
        self._codec = EventCodec(serializer=serializer)
        self._dispatcher = Dispatcher(
            registry=self._registry,
            handler_timeout=dispatch_config.handler_timeout,
        )
        self._listener = SubscriptionListener(
            channel=broker_config.channel,
            broker=self._broker,
            codec=self._codec,
            dispatcher=self._dispatcher,
            spawner=self._spawner,
            max_inflight=dispatch_config.max_inflight,
            shutdown_grace=dispatch_config.shutdown_grace,
        )
        self._lifecycle = LifecycleService(
            listener=self._listener,
            broker=self._broker,
            shutdown=self._shutdown,
            spawner=self._spawner,
        )

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def shutdown(self) -> ShutdownSignal:
        return self._shutdown

    @property
    def lifecycle(self) -> LifecycleService:
        return self._lifecycle

    async def start(self) -> None:
        await self._lifecycle.run()

    @staticmethod
    def _create_event_loop() -> asyncio.AbstractEventLoop:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        return loop
