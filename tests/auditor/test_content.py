# tests/auditor/test_content.py
import pytest

from auditor.checks.content import (
    blog_issues, keyword_density, page_title, placeholder_finding, quality_tier, reading_time
)
from auditor.model import ContentMetrics, IssueKind, PageFinding, Priority, QualityTier


def finding(title, words=500, meta=True, h1=1, h2=2, missing_alt=0):
    return PageFinding(
        url=f"https://example.com/blog/{title.lower()}",
        title=title,
        content_metrics=ContentMetrics(
            word_count=words, h1_count=h1, h2_count=h2, has_meta_description=meta, images_without_alt=missing_alt
        ),
        quality_tier=quality_tier(words)
    )


def test_keyword_density_ignores_short_words_and_stopwords():
    words = "Widgets widgets! and this cool cool cool tool".split()

    density = keyword_density(words)

    assert list(density) == ["cool", "widgets", "tool"]
    assert density["cool"] == pytest.approx(37.5)
    assert density["widgets"] == pytest.approx(25.0)
    assert "this" not in density and "and" not in density


def test_keyword_density_accepts_custom_stopwords():
    density = keyword_density(["cool", "cool", "tool"], stopwords={"cool"})
    assert list(density) == ["tool"]


def test_keyword_density_of_no_words():
    assert keyword_density([]) == {}


def test_keyword_density_keeps_top_ten():
    words = [f"word{i}" for i in range(15)]
    assert len(keyword_density(words)) == 10


@pytest.mark.parametrize("words, minutes", [(0, 0), (1, 1), (200, 1), (201, 2), (1000, 5)])
def test_reading_time(words, minutes):
    assert reading_time(words) == minutes


@pytest.mark.parametrize("words, tier", [
    (0, QualityTier.THIN),
    (299, QualityTier.THIN),
    (300, QualityTier.ADEQUATE),
    (999, QualityTier.ADEQUATE),
    (1000, QualityTier.COMPREHENSIVE),
])
def test_quality_tier_boundaries(words, tier):
    assert quality_tier(words) is tier


def test_page_title_falls_back_to_untitled(parse):
    document = parse("https://example.com/post", "<html><body><p>No heading here</p></body></html>")
    assert page_title(document) == "Untitled"


def test_page_title_prefers_title_element(parse, make_page):
    document = parse("https://example.com/post", make_page(title="My first post"))
    assert page_title(document) == "My first post"


def test_placeholder_finding_is_thin_and_empty():
    placeholder = placeholder_finding("https://example.com/blog/gone", "HTTP 404")

    assert placeholder.failed
    assert placeholder.quality_tier == QualityTier.THIN
    assert placeholder.content_metrics.word_count == 0


def test_blog_issues_name_the_affected_posts():
    findings = [
        finding("Short", words=120),
        finding("NoMeta", meta=False),
        finding("Flat", h2=0, missing_alt=3),
        finding("Fine"),
    ]

    issues = blog_issues(findings)

    assert [i.message for i in issues] == [
        "1 posts with thin content (<300 words)",
        "1 posts missing meta descriptions",
        "1 posts with poor header structure",
        "3 images missing alt text across 1 posts",
    ]
    assert issues[0].affected_element == "Short"
    assert issues[0].kind == IssueKind.ERROR and issues[0].priority == Priority.HIGH
    assert issues[2].kind == IssueKind.WARNING and issues[2].priority == Priority.MEDIUM
    assert issues[3].affected_element == "Flat"


def test_healthy_posts_produce_no_blog_issues():
    assert blog_issues([finding("One"), finding("Two", words=1500)]) == []
