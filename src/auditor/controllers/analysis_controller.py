import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from crawler.controllers.async_controller import AsyncController
from crawler.controllers.mini_crawl_controller import MiniCrawlController
from crawler.errors import RetrievalError
from crawler.model import CrawlSettings
from crawler.services.retrieval_service import RetrievalService
from crawler.utils.url_utils import UrlUtils
from auditor.dom.builder import DOMBuilder
from auditor.model import Report
from auditor.modules.base import AnalysisModule, AnalysisRun
from auditor.services.aggregation_service import AggregationService

logger = logging.getLogger(__name__)


class AnalysisController(AsyncController):
    """
    The shared retrieve -> parse -> evaluate -> crawl -> score pipeline.

    One controller runs one analysis and owns its accumulator, so concurrent
    analyses never share issues or records. The module supplies the checks
    and the hooks around them.

    The seed fetch and the module's `prepare` step race against the cancel
    event and the deadline. The mini-crawl honours both on its own and hands
    back the pages finished so far. Any interruption marks the report with
    `summary["partial"] = True`.
    """

    def __init__(
            self,
            module: AnalysisModule,
            retrieval: Optional[RetrievalService] = None,
            cancel_event: Optional[asyncio.Event] = None,
            deadline_s: Optional[float] = None
    ):
        super().__init__(cancel_event=cancel_event, deadline_s=deadline_s)
        self.module = module
        self.builder = DOMBuilder()
        self.retrieval = retrieval or RetrievalService()
        self._owns_retrieval = retrieval is None
        self.aggregator = AggregationService()

    def mini_crawl(self, settings: CrawlSettings, desc: str = "Crawling") -> MiniCrawlController:
        """A mini-crawl sharing this run's retrieval, cancel event and remaining time."""
        return MiniCrawlController(
            self.retrieval,
            settings,
            cancel_event=self.cancel_event,
            deadline_s=self.timer.remaining,
            desc=desc
        )

    async def _guarded(self, step: Callable[..., Awaitable[Any]], *args: Any) -> Tuple[bool, Any]:
        """
        Runs `step(*args)` until it finishes, the cancel event fires or the
        deadline passes. Returns (finished, result); unfinished work is cancelled
        and a step is not started at all once the run should stop.
        """
        if self.should_stop:
            return False, None
        task = asyncio.ensure_future(step(*args))
        try:
            finished = await self.wait_or_stop(task)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not finished:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Interrupted step cancelled.")
            return False, None
        return True, task.result()

    def _interruption_reason(self) -> str:
        if not self.cancelled:
            return f"deadline of {self.timer.deadline_s:g}s exceeded"
        return "analysis cancelled"

    async def analyze(self, url: str) -> Report:
        await self.setup()
        url = UrlUtils.normalize_input_url(url)
        module = self.module
        logger.info("Starting %s analysis of %s", module.name, url)
        try:
            try:
                finished, result = await self._guarded(self.retrieval.fetch, url)
            except RetrievalError as e:
                logger.warning("Could not retrieve %s: %s (last error: %s)", url, e, e.last_error)
                return self.failure_report(url, str(e))
            if not finished:
                reason = self._interruption_reason()
                logger.warning("%s analysis of %s stopped before retrieval: %s", module.title, url, reason)
                return self.failure_report(url, reason, partial=True)

            document = self.builder.parse_doc(url, result.raw_content)
            run = AnalysisRun(url=url, result=result, document=document)

            finished, _ = await self._guarded(module.prepare, run, self)
            if not finished:
                logger.warning("%s preparation for %s interrupted: %s", module.title, url, self._interruption_reason())
                run.partial = True

            module.evaluate(run)
            await module.crawl(run, self)

            return self.build_report(run)
        finally:
            await self.shutdown()
            if self._owns_retrieval:
                await self.retrieval.close()
            logger.info("%s analysis of %s finished in %.2fs", module.title, url, self.timer.duration)

    def build_report(self, run: AnalysisRun) -> Report:
        module = self.module
        issues = module.order_issues(run.issues)
        summary = dict(module.summary(run))
        summary["partial"] = run.partial
        return self.aggregator.aggregate(
            url=run.url,
            module=module.name,
            score=module.score(run),
            issues=issues,
            checks=run.records,
            findings=run.findings,
            metrics=module.metrics(run),
            summary=summary
        )

    def failure_report(self, url: str, message: str, partial: bool = False) -> Report:
        """Score 0, one high-priority error issue and one failed 'Page Analysis' record."""
        module = self.module
        return self.aggregator.aggregate(
            url=url,
            module=module.name,
            score=0,
            issues=[module.failure_issue(message)],
            checks=[module.failure_record()],
            metrics=module.failure_metrics(),
            summary={"error": message, "partial": partial}
        )
