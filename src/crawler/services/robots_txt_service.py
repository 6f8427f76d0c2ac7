# src/crawler/services/robots_txt_service.py
import logging
import re
from typing import List, Optional
from urllib.parse import urljoin

from crawler.errors import RetrievalError
from crawler.model import RobotsTxtReport, SitemapReport
from crawler.services.retrieval_service import RetrievalService

logger = logging.getLogger(__name__)

COMMON_SITEMAP_PATHS = ["/sitemap.xml", "/sitemap_index.xml", "/sitemap.txt", "/sitemaps.xml"]

_URL_ENTRY = re.compile(r"<url>")


class RobotsTxtService:
    """
    Fetches and inspects robots.txt and XML sitemaps through the retrieval layer.
    Only existence, accessibility and basic structure are evaluated.
    """

    def __init__(self, retrieval: RetrievalService):
        self._retrieval = retrieval

    async def fetch_robots(self, base_url: str) -> RobotsTxtReport:
        robots_url = urljoin(base_url, "/robots.txt")
        try:
            result = await self._retrieval.fetch(robots_url)
        except RetrievalError as e:
            logger.warning("Could not fetch robots.txt for %s: %s", base_url, e)
            return RobotsTxtReport(url=robots_url, fetch_error=str(e))

        if result.http_status == 404:
            logger.debug("robots.txt not found for %s", base_url)
            return RobotsTxtReport(url=robots_url, http_status=404)
        if result.http_status != 200:
            return RobotsTxtReport(url=robots_url, exists=True, http_status=result.http_status)

        report = self.parse(result.raw_content, robots_url)
        logger.debug(
            "Parsed robots.txt for %s: %d directives, %d sitemaps",
            base_url, len(report.directives), len(report.sitemaps)
        )
        return report

    @staticmethod
    def parse(content: str, robots_url: str = "") -> RobotsTxtReport:
        """Parses the directive lines of a robots.txt body (comments and blanks ignored)."""
        directives: List[str] = []
        disallowed: List[str] = []
        sitemaps: List[str] = []
        has_user_agent = False
        has_disallow = False

        for raw_line in content.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            directive, _, value = line.partition(":")
            directive = directive.strip().lower()
            value = value.strip()

            if directive == "user-agent":
                has_user_agent = True
                directives.append(f"User-agent: {value}")
            elif directive == "disallow":
                has_disallow = True
                directives.append(f"Disallow: {value}")
                if value:
                    disallowed.append(value)
            elif directive == "allow":
                directives.append(f"Allow: {value}")
            elif directive == "sitemap":
                sitemaps.append(value)
            elif directive == "crawl-delay":
                directives.append(f"Crawl-delay: {value}")

        return RobotsTxtReport(
            url=robots_url,
            exists=True,
            accessible=True,
            valid=has_user_agent,
            http_status=200,
            has_user_agent=has_user_agent,
            has_disallow=has_disallow,
            directives=directives,
            disallowed=disallowed,
            sitemaps=sitemaps
        )

    async def fetch_sitemap(self, base_url: str, sitemap_urls: Optional[List[str]] = None) -> SitemapReport:
        """
        Probes the sitemaps referenced by robots.txt, or the common locations when
        there are none. Stops at the first structurally valid sitemap.
        """
        urls_to_check = list(sitemap_urls or []) or [urljoin(base_url, path) for path in COMMON_SITEMAP_PATHS]
        report = SitemapReport(checked_urls=urls_to_check)

        for sitemap_url in urls_to_check:
            try:
                result = await self._retrieval.fetch(sitemap_url)
            except RetrievalError:
                logger.debug("Sitemap candidate unreachable: %s", sitemap_url)
                continue
            if result.http_status != 200:
                continue

            report.exists = True
            report.accessible = True
            report.found_url = report.found_url or sitemap_url
            if self.is_valid_sitemap(result.raw_content):
                report.valid = True
                report.found_url = sitemap_url
                report.url_count += self.count_urls(result.raw_content)
                break

        return report

    @staticmethod
    def is_valid_sitemap(content: str) -> bool:
        return "<urlset" in content or "<sitemapindex" in content

    @staticmethod
    def count_urls(content: str) -> int:
        return len(_URL_ENTRY.findall(content))
