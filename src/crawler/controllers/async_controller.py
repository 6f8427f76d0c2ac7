import asyncio
import logging
from typing import Optional

from crawler.utils.run_timers import RunTimers

logger = logging.getLogger(__name__)


class AsyncController:
    """
    Base class for asynchronous controllers.

    Provides lifecycle hooks (setup, shutdown), an internal stop event, and
    the external cancellation signal plus deadline every analysis run honours.
    """

    def __init__(self, cancel_event: Optional[asyncio.Event] = None, deadline_s: Optional[float] = None):
        self._setup_done = False
        self._worker_task: asyncio.Task | None = None
        self.stop_event = asyncio.Event()
        self.cancel_event = cancel_event
        self.timer = RunTimers(deadline_s)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    @property
    def should_stop(self) -> bool:
        """True once the run was stopped, cancelled from outside, or ran past its deadline."""
        return self.stop_event.is_set() or self.cancelled or self.timer.expired

    async def setup(self):
        """Starts the timer. Runs only once per controller."""
        if self._setup_done:
            return
        self._setup_done = True
        self.timer.start()
        logger.debug("%s setup done.", type(self).__name__)

    async def wait_or_stop(self, task: asyncio.Task) -> bool:
        """
        Waits until `task` finishes, the cancel event fires or the deadline passes.
        Returns True when the task finished. An unfinished task is left running.
        """
        waiters = {task}
        cancel_waiter = None
        if self.cancel_event is not None:
            cancel_waiter = asyncio.create_task(self.cancel_event.wait())
            waiters.add(cancel_waiter)
        try:
            await asyncio.wait(waiters, timeout=self.timer.remaining, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()
        return task.done()

    async def shutdown(self):
        """Cancels the running worker task, if any, and waits for it to unwind."""
        self.stop_event.set()
        if self._worker_task and not self._worker_task.done():
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                logger.debug("Worker task cancelled cleanly.")
        self.timer.stop()
