# src/auditor/modules/base.py
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from crawler.model import CrawlSettings, RetrievalResult, RobotsTxtReport, SitemapReport
from sitelens.core.managers.config_manager import config_manager
from ..checks.core import CheckCatalog, CheckContext, CheckFunc
from ..dom.models import HTMLDocument
from ..model import CheckRecord, CheckStatus, Issue, IssueKind, PageFinding, Priority
from ..services.scoring_service import DeductionTable, ScoringService

logger = logging.getLogger(__name__)


class AnalysisRun(BaseModel):
    """
    Accumulator owned by exactly one `analyze_*` invocation.
    Modules read the seed page from it and append records, issues and findings.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    result: RetrievalResult
    document: HTMLDocument
    robots: Optional[RobotsTxtReport] = None
    sitemap: Optional[SitemapReport] = None
    records: List[CheckRecord] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
    findings: Optional[List[PageFinding]] = None
    extras: Dict[str, Any] = Field(default_factory=dict)
    partial: bool = False

    def context(self) -> CheckContext:
        return CheckContext(
            url=self.url,
            document=self.document,
            http_status=self.result.http_status,
            elapsed_ms=self.result.elapsed_ms,
            response_headers=self.result.response_headers,
            robots=self.robots,
            sitemap=self.sitemap
        )


def crawl_settings(max_pages_key: str = "crawler.max_pages", max_pages_default: int = 15) -> CrawlSettings:
    return CrawlSettings(
        max_candidates=config_manager.get_nested("crawler.max_candidates", 20),
        max_pages=config_manager.get_nested(max_pages_key, max_pages_default),
        concurrency=config_manager.get_nested("crawler.concurrency", 3),
        show_progress=config_manager.get_nested("crawler.show_progress", False)
    )


class AnalysisModule:
    """
    One analysis flavour: a check catalog plus the hooks the shared pipeline
    calls around it (prepare, crawl, metrics, summary, score).

    Subclasses set the class attributes and override only the hooks they need.
    """

    name: str = "module"
    title: str = "Module"
    description: str = "Analyze page"
    failure_category: str = "indexability"
    checks: List[CheckFunc] = []
    deductions: Optional[DeductionTable] = None

    def __init__(self):
        self.catalog = CheckCatalog(self.name, self.checks)
        self.scoring = ScoringService(self.deductions) if self.deductions is not None else None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} ({len(self.catalog)} checks)>"

    # --- Pipeline hooks ---

    async def prepare(self, run: AnalysisRun, pipeline) -> None:
        """Fetches anything the checks need besides the seed page."""

    def evaluate(self, run: AnalysisRun) -> None:
        result = self.catalog.run(run.context())
        run.records.extend(result.records)
        run.issues.extend(result.issues)

    async def crawl(self, run: AnalysisRun, pipeline) -> None:
        """Multi-page modules analyze discovered pages here."""

    def order_issues(self, issues: List[Issue]) -> List[Issue]:
        return issues

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        return {}

    def summary(self, run: AnalysisRun) -> Dict[str, Any]:
        return {}

    def score(self, run: AnalysisRun) -> int:
        return self.scoring.score(run.issues)

    # --- Failure report ---

    def failure_issue(self, message: str) -> Issue:
        return Issue(
            kind=IssueKind.ERROR,
            category=self.failure_category,
            message=f"{self.title} analysis failed: {message}",
            priority=Priority.HIGH,
            impact=f"Unable to perform {self.title.lower()} analysis",
            recommendation='Check if the URL is correct and accessible',
            check_name='Page Analysis'
        )

    def failure_record(self) -> CheckRecord:
        return CheckRecord(
            name='Page Analysis',
            status=CheckStatus.FAILED,
            description=self.description,
            result='Analysis failed',
            impact=f"Unable to perform {self.title.lower()} analysis",
            recommendation='Check if the URL is correct and accessible'
        )

    def failure_metrics(self) -> Dict[str, Any]:
        return {}
