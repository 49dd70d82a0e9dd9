import asyncio
import enum
import logging
import threading


class ShutdownState(enum.Enum):
    PENDING = "pending"
    SIGNALED = "signaled"


class ShutdownSignal:
    """
    One-shot, level-triggered shutdown primitive.

    A worker has no request loop to block on, so the process stays alive by
    awaiting this signal once the listener is subscribed. `signal()` moves
    the state from PENDING to SIGNALED exactly once and never resets; any
    later call is a no-op. It may be called from the event loop thread, a
    POSIX signal handler or any other thread: waiters are always woken
    through `call_soon_threadsafe`.

    Without an explicit `loop` it must be created from a coroutine, and it
    binds to the running loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._event = asyncio.Event()
        self._lock = threading.RLock()
        self._state = ShutdownState.PENDING
        self._logger = logging.getLogger("core.helpers.shutdown")

    @property
    def state(self) -> ShutdownState:
        return self._state

    def is_signaled(self) -> bool:
        return self._state is ShutdownState.SIGNALED

    def signal(self) -> None:
        with self._lock:
            if self._state is ShutdownState.SIGNALED:
                return
            self._state = ShutdownState.SIGNALED

        self._logger.info("Shutdown signaled")

        # also wakes a loop blocked in select when called from a signal handler
        if not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._event.set)

    async def wait(self) -> None:
        """Block until `signal()` has been called, returning at once if it already was."""
        await self._event.wait()
