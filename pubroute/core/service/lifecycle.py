import logging

from pubroute.core.helpers.shutdown import ShutdownSignal
from pubroute.core.helpers.spawn import TaskSpawner
from pubroute.core.ports.broker import Broker
from pubroute.core.service.listener import SubscriptionListener


class LifecycleService:
    """
    Keeps the worker alive between startup and shutdown.

    `run()` subscribes the listener, then parks the calling coroutine on the
    ShutdownSignal: message delivery happens on the broker's own tasks, so
    nothing else would keep the process from exiting. Once
    `signal_shutdown()` is called (SIGTERM, teardown hook, another thread),
    the listener is unsubscribed, the broker closed and background tasks
    drained.
    """

    def __init__(
        self,
        listener: SubscriptionListener,
        broker: Broker,
        shutdown: ShutdownSignal,
        spawner: TaskSpawner,
    ) -> None:
        self._listener = listener
        self._broker = broker
        self._shutdown = shutdown
        self._spawner = spawner
        self._logger = logging.getLogger("core.service.lifecycle")

    async def start(self) -> None:
        await self._listener.start()
        self._logger.info(
            f"Worker is now listening on channel '{self._listener.channel}'."
        )

    async def stop(self) -> None:
        self._logger.info("Stopping listener.")
        await self._listener.stop()

        self._logger.info("Closing broker connection.")
        await self._broker.close()

        await self._spawner.drain()
        self._logger.info("Worker stopped.")

    async def await_shutdown(self) -> None:
        await self._shutdown.wait()

    def signal_shutdown(self) -> None:
        self._shutdown.signal()

    async def run(self) -> None:
        await self.start()
        try:
            await self.await_shutdown()
        finally:
            await self.stop()
