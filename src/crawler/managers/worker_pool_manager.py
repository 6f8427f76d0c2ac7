"""
Worker Pool Manager
Runs a fixed-size pool of asynchronous workers over a pre-filled queue.
"""

import asyncio
import logging
from typing import Callable, Awaitable, Any, List

logger = logging.getLogger(__name__)


class WorkerPoolManager:
    """
    Drains an asyncio.Queue with `concurrency` parallel workers.

    Workers exit when the queue is empty or `stop_event` is set. Items are
    never re-queued, so every item is handed to `work_coro` at most once.
    """

    def __init__(
            self,
            work_coro: Callable[[Any], Awaitable[None]],
            queue: asyncio.Queue,
            concurrency: int,
            stop_event: asyncio.Event
    ):
        self.work_coro = work_coro
        self.queue = queue
        self.concurrency = max(1, concurrency)
        self.stop_event = stop_event
        self._tasks: List[asyncio.Task] = []

    async def run(self) -> None:
        """Starts the workers and waits until all of them have returned."""
        logger.debug("Starting %d workers...", self.concurrency)
        self._tasks = [
            asyncio.create_task(self._worker_loop(f"Worker-{i + 1}"))
            for i in range(self.concurrency)
        ]
        try:
            await asyncio.gather(*self._tasks)
        except asyncio.CancelledError:
            for task in self._tasks:
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            raise
        logger.debug("All workers have been shut down and gathered.")

    async def _worker_loop(self, name: str) -> None:
        logger.debug("[%s] Started.", name)
        while not self.stop_event.is_set():
            try:
                item = self.queue.get_nowait()
            except asyncio.QueueEmpty:
                break

            try:
                await self.work_coro(item)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("[%s] Unhandled exception processing item: %s", name, item)
            finally:
                self.queue.task_done()

        logger.debug("[%s] Stopped.", name)
