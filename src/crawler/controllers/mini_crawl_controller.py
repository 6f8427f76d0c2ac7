import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from crawler.controllers.async_controller import AsyncController
from crawler.errors import DiscoveryPageError, RetrievalError
from crawler.managers.progress_manager import ProgressManager
from crawler.managers.worker_pool_manager import WorkerPoolManager
from crawler.model import CrawlOutcome, CrawlSettings, RetrievalResult
from crawler.services.retrieval_service import RetrievalService

logger = logging.getLogger(__name__)

PageAnalyzer = Callable[[str, RetrievalResult], Any]
PlaceholderFactory = Callable[[str, str], Any]


class MiniCrawlController(AsyncController):
    """
    Fetches and analyzes a bounded list of candidate URLs.

    Pages are processed by a small worker pool (`CrawlSettings.concurrency`).
    A candidate that cannot be fetched or analyzed becomes a placeholder
    result instead of aborting the batch. When the cancel event fires or the
    deadline passes, in-flight fetches are cancelled and the pages finished
    so far are returned with `partial=True`.
    """

    def __init__(
            self,
            retrieval: RetrievalService,
            settings: Optional[CrawlSettings] = None,
            cancel_event: Optional[asyncio.Event] = None,
            deadline_s: Optional[float] = None,
            desc: str = "Crawling"
    ):
        super().__init__(cancel_event=cancel_event, deadline_s=deadline_s)
        self.retrieval = retrieval
        self.settings = settings or CrawlSettings()
        self.desc = desc

        self.pages_crawled = 0
        self.failures = 0
        self.progress_manager: Optional[ProgressManager] = None

    async def run(
            self,
            urls: List[str],
            analyze_page: PageAnalyzer,
            placeholder: PlaceholderFactory
    ) -> CrawlOutcome:
        """
        Args:
            urls: Candidate URLs; only the first `max_pages` are fetched.
            analyze_page: Builds a result from a fetched page.
            placeholder: Builds the stand-in result for a failed candidate from (url, reason).
        """
        await self.setup()
        targets = urls[:self.settings.max_pages]
        if not targets:
            return CrawlOutcome()

        results: Dict[int, Any] = {}
        queue: asyncio.Queue = asyncio.Queue()
        for item in enumerate(targets):
            queue.put_nowait(item)

        async def process(item) -> None:
            index, url = item
            if self.should_stop:
                self.stop_event.set()
                return
            try:
                results[index] = await self._crawl_page(url, analyze_page)
            except DiscoveryPageError as e:
                logger.warning("Candidate %s degraded to placeholder: %s", url, e.reason)
                self.failures += 1
                results[index] = placeholder(url, e.reason)
            self.pages_crawled += 1
            if self.progress_manager:
                self.progress_manager.advance(pages_count=self.pages_crawled, failures_count=self.failures)

        if self.settings.show_progress:
            self.progress_manager = ProgressManager(total=len(targets), desc=self.desc)

        pool = WorkerPoolManager(process, queue, self.settings.concurrency, self.stop_event)
        self._worker_task = asyncio.create_task(pool.run())
        interrupted = not await self.wait_or_stop(self._worker_task)
        await self.shutdown()
        partial = interrupted or len(results) < len(targets)

        if self.progress_manager:
            self.progress_manager.close(self.pages_crawled, self.failures, partial=partial)
        if partial:
            logger.warning(
                "Crawl stopped early: %d of %d candidates analyzed.", len(results), len(targets)
            )
        logger.info(
            "Crawl finished. %d pages (%d failed) in %.2fs.",
            self.pages_crawled, self.failures, self.timer.duration
        )

        return CrawlOutcome(
            results=[results[i] for i in sorted(results)],
            attempted=len(targets),
            failures=self.failures,
            partial=partial
        )

    async def _crawl_page(self, url: str, analyze_page: PageAnalyzer) -> Any:
        try:
            result = await self.retrieval.fetch(url)
        except RetrievalError as e:
            raise DiscoveryPageError(url, str(e)) from e
        try:
            return analyze_page(url, result)
        except Exception as e:
            raise DiscoveryPageError(url, f"{type(e).__name__}: {e}") from e
