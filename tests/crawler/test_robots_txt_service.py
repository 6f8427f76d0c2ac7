# tests/crawler/test_robots_txt_service.py
import pytest

from crawler.model import RetrievalResult
from crawler.services.robots_txt_service import RobotsTxtService

ROBOTS = """
# comment
User-agent: *
Disallow: /admin
Disallow:
Allow: /admin/public
Crawl-delay: 5
Sitemap: https://example.com/sitemap-main.xml
"""

SITEMAP = """<?xml version="1.0"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc>https://example.com/about</loc></url>
</urlset>"""


def test_parse_collects_directives_and_sitemaps():
    report = RobotsTxtService.parse(ROBOTS, "https://example.com/robots.txt")

    assert report.valid
    assert report.has_user_agent and report.has_disallow
    assert report.disallowed == ["/admin"]
    assert report.sitemaps == ["https://example.com/sitemap-main.xml"]
    assert "Crawl-delay: 5" in report.directives
    assert "Allow: /admin/public" in report.directives


@pytest.mark.asyncio
async def test_fetch_robots_and_referenced_sitemap(fake_retrieval):
    retrieval = fake_retrieval({
        "https://example.com/robots.txt": ROBOTS,
        "https://example.com/sitemap-main.xml": SITEMAP,
    })
    service = RobotsTxtService(retrieval)

    robots = await service.fetch_robots("https://example.com")
    sitemap = await service.fetch_sitemap("https://example.com", robots.sitemaps)

    assert robots.exists and robots.accessible
    assert sitemap.valid
    assert sitemap.url_count == 2
    assert sitemap.found_url == "https://example.com/sitemap-main.xml"


@pytest.mark.asyncio
async def test_missing_robots_and_common_sitemap_locations(fake_retrieval):
    retrieval = fake_retrieval({
        "https://example.com/robots.txt": RetrievalResult(
            url="https://example.com/robots.txt", raw_content="Not found", http_status=404, elapsed_ms=10
        ),
        "https://example.com/sitemap_index.xml": "<sitemapindex></sitemapindex>",
    })
    service = RobotsTxtService(retrieval)

    robots = await service.fetch_robots("https://example.com")
    sitemap = await service.fetch_sitemap("https://example.com", robots.sitemaps)

    assert not robots.exists
    assert robots.http_status == 404
    assert sitemap.valid
    assert sitemap.found_url == "https://example.com/sitemap_index.xml"
    assert retrieval.calls[1:3] == ["https://example.com/sitemap.xml", "https://example.com/sitemap_index.xml"]


@pytest.mark.asyncio
async def test_unreachable_robots_records_fetch_error(fake_retrieval):
    robots = await RobotsTxtService(fake_retrieval()).fetch_robots("https://example.com")

    assert not robots.exists
    assert robots.fetch_error
