import asyncio
import logging
from typing import Any, Coroutine


class TaskSpawner:
    """
    Spawns and tracks the background tasks of the worker: broker reader
    loops and, when concurrent dispatch is enabled, in-flight dispatches.

    - every spawned task is tracked until completion
    - unhandled exceptions inside tasks are logged
    - cancelled tasks are dropped silently, cancellation is how readers stop
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._tasks: set[asyncio.Task[Any]] = set()
        self._logger = logging.getLogger("core.helpers.spawn")

    @property
    def remaining_tasks(self) -> int:
        return len(self._tasks)

    def on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)

        if task.cancelled():
            return

        if ex := task.exception():
            self._logger.error(
                f"Error occurred in task {task.get_name()}: {str(ex)}",
                exc_info=ex
            )

    def spawn(self, coro: Coroutine[Any, Any, None], name: str | None = None) -> asyncio.Task[Any]:
        task = self._loop.create_task(coro, name=name)
        task.add_done_callback(self.on_done)
        self._tasks.add(task)
        return task

    async def drain(self, poll_interval: float = 0.1) -> None:
        """Wait until every tracked task has completed."""
        while remaining := self.remaining_tasks:
            self._logger.info(f"Waiting for {remaining} background tasks to complete.")
            await asyncio.sleep(poll_interval)
