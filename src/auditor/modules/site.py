import logging
from typing import Any, Dict, List, Tuple

from crawler.model import RetrievalResult
from crawler.services.link_discovery_service import LinkDiscoveryService
from crawler.services.robots_txt_service import RobotsTxtService
from crawler.utils.url_utils import UrlUtils
from .base import AnalysisModule, AnalysisRun, crawl_settings
from ..checks.content import build_finding, placeholder_finding
from ..checks.core import CheckCatalog, CheckContext
from ..checks.site import SITE_CHECKS, SITE_PAGE_CHECKS
from ..model import CheckRecord, CheckStatus, Issue, PageFinding
from ..services.scoring_service import SITE_TABLE, content_summary

logger = logging.getLogger(__name__)


class SiteModule(AnalysisModule):
    """
    Site-wide crawlability: robots.txt and sitemap probes, checks on the
    seed page's structure, and a reduced catalog on linked internal pages.
    """

    name = "site"
    title = "Site"
    description = "Analyze site crawlability and structure"
    failure_category = "crawling"
    checks = SITE_CHECKS
    deductions = SITE_TABLE

    def __init__(self):
        super().__init__()
        self.page_catalog = CheckCatalog("site_page", SITE_PAGE_CHECKS)

    async def prepare(self, run: AnalysisRun, pipeline) -> None:
        base_url = UrlUtils.get_base_url(run.url) or run.url
        service = RobotsTxtService(pipeline.retrieval)
        run.robots = await service.fetch_robots(base_url)
        run.sitemap = await service.fetch_sitemap(base_url, run.robots.sitemaps)
        logger.info(
            "Site probes for %s: robots.txt accessible=%s, sitemap valid=%s",
            base_url, run.robots.accessible, run.sitemap.valid
        )

    async def crawl(self, run: AnalysisRun, pipeline) -> None:
        settings = crawl_settings("crawler.site_max_pages", 10)
        candidates = LinkDiscoveryService(settings.max_candidates).discover(
            run.document, run.url, filter_name="internal_page"
        )
        run.extras["candidates"] = candidates

        def analyze_page(url: str, result: RetrievalResult) -> Tuple[PageFinding, List[CheckRecord], List[Issue]]:
            document = pipeline.builder.parse_doc(url, result.raw_content)
            context = CheckContext(
                url=url,
                document=document,
                http_status=result.http_status,
                elapsed_ms=result.elapsed_ms,
                response_headers=result.response_headers
            )
            checked = self.page_catalog.run(context, record_url=url)
            return build_finding(url, document, result), checked.records, checked.issues

        def placeholder(url: str, reason: str) -> Tuple[PageFinding, List[CheckRecord], List[Issue]]:
            return placeholder_finding(url, reason), [], []

        outcome = await pipeline.mini_crawl(settings, desc="Site pages").run(candidates, analyze_page, placeholder)

        run.findings = []
        for finding, records, issues in outcome.results:
            run.findings.append(finding)
            run.records.extend(records)
            run.issues.extend(issues)
        run.partial = run.partial or outcome.partial

    @staticmethod
    def _page_statuses(run: AnalysisRun) -> Dict[str, Dict[str, CheckStatus]]:
        statuses: Dict[str, Dict[str, CheckStatus]] = {}
        for record in run.records:
            if record.url is not None:
                statuses.setdefault(record.url, {})[record.name] = record.status
        return statuses

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        robots = run.robots
        sitemap = run.sitemap
        findings = run.findings or []
        pages = self._page_statuses(run)

        def status_of(finding: PageFinding) -> int:
            return finding.http_status or 0

        internal, external = LinkDiscoveryService().count_links(run.document, run.url)
        return {
            "crawlability": {
                "robots_txt_exists": bool(robots and robots.exists),
                "robots_txt_accessible": bool(robots and robots.accessible),
                "robots_txt_valid": bool(robots and robots.valid),
                "sitemap_exists": bool(sitemap and sitemap.exists),
                "sitemap_accessible": bool(sitemap and sitemap.accessible),
                "sitemap_valid": bool(sitemap and sitemap.valid),
                "sitemap_url_count": sitemap.url_count if sitemap else 0,
                "crawl_directives": list(robots.directives) if robots else [],
                "blocked_resources": list(robots.disallowed) if robots else [],
            },
            "indexability": {
                "indexable_pages": sum(
                    1 for f in findings
                    if 200 <= status_of(f) < 300
                    and pages.get(f.url, {}).get("Robots Meta - Indexing") != CheckStatus.FAILED
                ),
                "blocked_pages": sum(
                    1 for statuses in pages.values() if statuses.get("Robots Meta - Indexing") == CheckStatus.FAILED
                ),
                "redirects": sum(1 for f in findings if 300 <= status_of(f) < 400),
                "errors": sum(1 for f in findings if f.failed or status_of(f) >= 400),
                "canonical_issues": sum(
                    1 for statuses in pages.values()
                    if statuses.get("Canonical Tag") in (CheckStatus.WARNING, CheckStatus.FAILED)
                ),
            },
            "site_structure": {
                "depth": 2 if any(not f.failed for f in findings) else 1,
                "internal_links": internal,
                "external_links": external,
                "broken_links": sum(1 for f in findings if f.failed or status_of(f) >= 400),
                "orphan_pages": 0,
            },
        }

    def summary(self, run: AnalysisRun) -> Dict[str, Any]:
        findings = run.findings or []
        return {
            "candidate_pages": len(run.extras.get("candidates", [])),
            "crawled_pages": len(findings),
            "failed_pages": sum(1 for f in findings if f.failed),
            **content_summary([f for f in findings if not f.failed]),
        }


MODULE = SiteModule
