import logging
from typing import Any, Dict, List, Tuple

from crawler.model import RetrievalResult
from crawler.services.link_discovery_service import LinkDiscoveryService
from .base import AnalysisModule, AnalysisRun, crawl_settings
from ..checks.content import (
    BLOG_POST_CHECKS, blog_issues, build_finding, no_posts_issue, placeholder_finding
)
from ..checks.core import CheckContext
from ..model import CheckRecord, Issue, PageFinding
from ..services.scoring_service import BlogScoringService, content_summary

logger = logging.getLogger(__name__)

NO_POSTS_SCORE = 50


class BlogContentModule(AnalysisModule):
    """
    Finds blog-like pages linked from the seed page and analyzes each one.
    Scoring is based on the posts, not on issue weights.
    """

    name = "blog_content"
    title = "Blog content"
    description = "Analyze blog posts linked from the page"
    failure_category = "performance"
    checks = BLOG_POST_CHECKS

    def __init__(self):
        super().__init__()
        self.blog_scoring = BlogScoringService()

    def evaluate(self, run: AnalysisRun) -> None:
        """The seed page is only used for discovery; its posts carry the checks."""

    async def crawl(self, run: AnalysisRun, pipeline) -> None:
        settings = crawl_settings()
        candidates = LinkDiscoveryService(settings.max_candidates).discover(
            run.document, run.url, filter_name="blog_post"
        )
        run.extras["candidates"] = candidates
        if not candidates:
            logger.info("No blog posts linked from %s", run.url)
            run.findings = []
            run.issues.append(no_posts_issue())
            return

        def analyze_post(url: str, result: RetrievalResult) -> Tuple[PageFinding, List[CheckRecord]]:
            document = pipeline.builder.parse_doc(url, result.raw_content)
            context = CheckContext(
                url=url,
                document=document,
                http_status=result.http_status,
                elapsed_ms=result.elapsed_ms,
                response_headers=result.response_headers
            )
            checked = self.catalog.run(context, record_url=url)
            return build_finding(url, document, result), checked.records

        def placeholder(url: str, reason: str) -> Tuple[PageFinding, List[CheckRecord]]:
            return placeholder_finding(url, reason), []

        outcome = await pipeline.mini_crawl(settings, desc="Blog posts").run(candidates, analyze_post, placeholder)

        run.findings = [finding for finding, _ in outcome.results]
        for _, records in outcome.results:
            run.records.extend(records)
        run.issues.extend(blog_issues(run.findings))
        run.partial = run.partial or outcome.partial

    def score(self, run: AnalysisRun) -> int:
        if not run.extras.get("candidates"):
            return NO_POSTS_SCORE
        return self.blog_scoring.score(run.findings or [])

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        findings = run.findings or []
        return {
            "total_posts": len(run.extras.get("candidates", [])),
            "scanned_posts": len(findings),
            "failed_posts": sum(1 for f in findings if f.failed),
            "total_words": sum(f.content_metrics.word_count for f in findings),
        }

    def summary(self, run: AnalysisRun) -> Dict[str, Any]:
        findings = run.findings or []
        candidates = run.extras.get("candidates", [])
        return {
            "total_posts": len(candidates),
            "scanned_posts": len(findings),
            "blog_url": candidates[0] if candidates else None,
            "duplicate_content": 0,
            **content_summary(findings),
        }

    def failure_issue(self, message: str) -> Issue:
        issue = super().failure_issue(message)
        return issue.model_copy(update={
            "recommendation": 'Check if the website is accessible and has a blog section'
        })


MODULE = BlogContentModule
