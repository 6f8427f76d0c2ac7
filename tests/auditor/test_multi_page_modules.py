# tests/auditor/test_multi_page_modules.py
import asyncio

import pytest

from auditor.checks.core import CheckCatalog, CheckContext
from auditor.checks.site import SITE_CHECKS
from auditor.model import CheckStatus, QualityTier
from crawler.model import RetrievalResult
from sitelens.api import analyze_blog_content, analyze_site

SEED = "https://example.com"

BLOG_SEED = """<html lang="en"><head><title>Example blog index page</title></head><body>
<a href="/blog/good-post">Good post</a>
<a href="/blog/missing-post">Missing post</a>
<a href="/about">About</a>
</body></html>"""

GOOD_POST = """<html lang="en"><head>
<title>A good post</title>
<meta name="description" content="Everything about widgets.">
</head><body><article>
<h1>A good post</h1>
<h2>Section</h2>
<p>{words}</p>
<img src="/chart.png">
<time datetime="2024-05-01">May 1</time>
</article></body></html>""".format(words=" ".join(f"widget{i % 7}" for i in range(350)))


@pytest.mark.asyncio
async def test_blog_report_with_one_failed_post(fake_retrieval):
    retrieval = fake_retrieval({
        SEED: BLOG_SEED,
        "https://example.com/blog/good-post": GOOD_POST,
    })

    report = await analyze_blog_content(SEED, retrieval=retrieval)

    good, failed = report.findings
    assert good.url == "https://example.com/blog/good-post"
    assert good.quality_tier == QualityTier.ADEQUATE
    assert good.content_metrics.images_without_alt == 1
    assert good.content_metrics.publish_date == "2024-05-01"
    assert good.content_metrics.reading_time == 2
    assert failed.title == "Failed to analyze"
    assert failed.failed and failed.quality_tier == QualityTier.THIN

    # records come only from the post that was analyzed
    assert len(report.all_checks) == 5
    assert {r.url for r in report.all_checks} == {"https://example.com/blog/good-post"}

    messages = [issue.message for issue in report.issues]
    assert messages == [
        "1 posts with thin content (<300 words)",
        "1 posts missing meta descriptions",
        "1 posts with poor header structure",
        "1 images missing alt text across 1 posts",
    ]
    assert report.issues[0].affected_element == "Failed to analyze"
    assert report.score == 100 - 10 - 8 - 5 - 3
    assert report.summary["total_posts"] == 2
    assert report.summary["average_word_count"] > 0
    assert report.summary["partial"] is False


@pytest.mark.asyncio
async def test_blog_without_posts(fake_retrieval):
    report = await analyze_blog_content(SEED, retrieval=fake_retrieval({SEED: "<html><body><a href='/about'>About</a></body></html>"}))

    assert report.score == 50
    assert report.findings == []
    assert [issue.message for issue in report.issues] == ["No blog posts found"]
    assert report.all_checks == []


@pytest.mark.asyncio
async def test_blog_crawl_cut_by_deadline_is_partial(fake_retrieval):
    retrieval = fake_retrieval({SEED: BLOG_SEED, "https://example.com/blog/good-post": GOOD_POST})
    original_fetch = retrieval.fetch

    async def slow_posts(url, timeout_ms=None):
        if url != SEED:
            await asyncio.sleep(5)
        return await original_fetch(url, timeout_ms)

    retrieval.fetch = slow_posts
    report = await asyncio.wait_for(analyze_blog_content(SEED, deadline_s=0.2, retrieval=retrieval), timeout=3)

    assert report.summary["partial"] is True
    assert report.findings == []


ROBOTS = "User-agent: *\nDisallow: /private\nSitemap: https://example.com/sitemap.xml\n"
SITEMAP = "<urlset><url><loc>https://example.com/</loc></url><url><loc>https://example.com/pricing</loc></url></urlset>"

SITE_SEED = """<html lang="en"><head><title>Example site home</title></head><body>
<nav aria-label="breadcrumb" class="breadcrumb"><a href="/">Home</a></nav>
<nav><a href="/pricing">Pricing</a><a href="/contact">Contact</a><a href="https://other.org">Other</a></nav>
</body></html>"""

PRICING = """<html><head><title>Pricing</title><meta name="robots" content="noindex">
<link rel="canonical" href="https://example.com/pricing"></head><body><h1>Pricing</h1></body></html>"""


@pytest.mark.asyncio
async def test_site_report(fake_retrieval):
    retrieval = fake_retrieval({
        SEED: SITE_SEED,
        "https://example.com/robots.txt": ROBOTS,
        "https://example.com/sitemap.xml": SITEMAP,
        "https://example.com/pricing": PRICING,
    })

    report = await analyze_site(SEED, retrieval=retrieval)

    site_level = [r for r in report.all_checks if r.url is None]
    per_page = [r for r in report.all_checks if r.url is not None]
    assert len(site_level) == 7
    assert [r.name for r in per_page] == ["HTTP Status Code", "Robots Meta - Indexing", "Canonical Tag"]
    assert {r.url for r in per_page} == {"https://example.com/pricing"}

    crawlability = report.metrics["crawlability"]
    assert crawlability["robots_txt_exists"] and crawlability["robots_txt_valid"]
    assert crawlability["sitemap_valid"]
    assert crawlability["sitemap_url_count"] == 2
    assert crawlability["blocked_resources"] == ["/private"]

    indexability = report.metrics["indexability"]
    assert indexability["blocked_pages"] == 1
    assert indexability["indexable_pages"] == 0
    assert indexability["errors"] == 1
    assert indexability["canonical_issues"] == 0

    structure = report.metrics["site_structure"]
    assert structure["internal_links"] == 3
    assert structure["external_links"] == 1
    assert structure["broken_links"] == 1

    assert report.summary["crawled_pages"] == 2
    assert report.summary["failed_pages"] == 1
    # the pricing page: one heading, no subheadings, no meta description
    assert report.summary["thin_content"] == 1
    assert report.summary["missing_meta_descriptions"] == 1
    assert report.summary["poor_structure"] == 1
    assert report.summary["average_word_count"] >= 1
    assert report.summary["average_reading_time"] == 1
    assert any(i.message == 'Page blocked from indexing (noindex)' for i in report.issues)
    assert 0 <= report.score <= 100


@pytest.mark.asyncio
async def test_site_without_robots_or_sitemap(fake_retrieval):
    retrieval = fake_retrieval({
        SEED: "<html><head><title>Bare</title></head><body><p>Nothing linked</p></body></html>",
        "https://example.com/robots.txt": RetrievalResult(
            url="https://example.com/robots.txt", raw_content="", http_status=404, elapsed_ms=5
        ),
    })

    report = await analyze_site(SEED, retrieval=retrieval)

    robots_record = next(r for r in report.all_checks if r.name == "Robots.txt File")
    sitemap_record = next(r for r in report.all_checks if r.name == "XML Sitemap")
    assert robots_record.status == CheckStatus.WARNING
    assert sitemap_record.status == CheckStatus.WARNING
    assert report.findings == []
    messages = [i.message for i in report.issues]
    assert "robots.txt file not found" in messages
    assert "No XML sitemap found" in messages
    assert report.score < 100


def test_site_checks_without_probe_results_are_info(parse):
    context = CheckContext(url=SEED, document=parse(SEED, SITE_SEED), http_status=200)

    result = CheckCatalog("site", SITE_CHECKS).run(context)

    by_name = {r.name: r for r in result.records}
    for name in ("Robots.txt File", "Robots.txt Syntax", "Robots.txt Sitemap"):
        assert by_name[name].status == CheckStatus.INFO
        assert by_name[name].result == "robots.txt was not checked"
    assert by_name["XML Sitemap"].status == CheckStatus.INFO
    assert by_name["XML Sitemap"].result == "Sitemap was not checked"
    assert not [i for i in result.issues if i.category in ("robots", "sitemap")]


@pytest.mark.asyncio
async def test_site_summary_without_crawled_pages(fake_retrieval):
    report = await analyze_site(SEED, retrieval=fake_retrieval({SEED: "<html><body><p>Alone</p></body></html>"}))

    assert report.summary["crawled_pages"] == 0
    assert report.summary["thin_content"] == 0
    assert report.summary["average_word_count"] == 0
    assert report.summary["average_reading_time"] == 0
