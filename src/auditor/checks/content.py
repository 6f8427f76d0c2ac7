# src/auditor/checks/content.py
import math
import re
from collections import Counter
from typing import Dict, List, Optional

from crawler.model import RetrievalResult
from crawler.services.link_discovery_service import LinkDiscoveryService
from .core import CheckContext, CheckOutcome, check_spec, make_issue
from ..dom.models import HTMLDocument
from ..model import CheckStatus as S, ContentMetrics, Issue, IssueKind as K, PageFinding, Priority as P, QualityTier
from ..utils.stopwords import combine_stopwords

TITLE_SELECTOR = 'title, h1, .post-title, .article-title, [class*="title"]'
CONTENT_SELECTORS = [
    'article', '.post-content', '.article-content', '.entry-content', '.blog-content', 'main', '.content'
]
DATE_SELECTORS = ['time[datetime]', '.published', '.date', '.post-date', '.article-date', '[class*="date"]']

WORDS_PER_MINUTE = 200
THIN_WORDS = 300
COMPREHENSIVE_WORDS = 1000

_NON_WORD = re.compile(r"[^\w]", re.ASCII)


# --- PAGE EXTRACTION ---

def page_title(document: HTMLDocument) -> str:
    element = document.select_one(TITLE_SELECTOR)
    title = element.text.strip() if element is not None else ""
    return title or "Untitled"


def content_text(document: HTMLDocument) -> str:
    """Text of the main content container, falling back to the whole body."""
    root = document.first_match(CONTENT_SELECTORS)
    return root.text if root is not None else document.body_text


def split_words(text: str) -> List[str]:
    return text.split()


def reading_time(word_count: int) -> int:
    return math.ceil(word_count / WORDS_PER_MINUTE)


def quality_tier(word_count: int) -> QualityTier:
    if word_count < THIN_WORDS:
        return QualityTier.THIN
    if word_count < COMPREHENSIVE_WORDS:
        return QualityTier.ADEQUATE
    return QualityTier.COMPREHENSIVE


@combine_stopwords
def keyword_density(words: List[str], stopwords=None, top_n: int = 10) -> Dict[str, float]:
    """
    Share (in percent of all words) of the most frequent meaningful words.
    Words are lowercased and stripped of non-word characters; words of three
    characters or fewer and stopwords are ignored.
    """
    if not words:
        return {}
    cleaned = (_NON_WORD.sub("", word.lower()) for word in words)
    counts = Counter(word for word in cleaned if len(word) > 3 and word not in stopwords)
    # Counter.most_common keeps first-seen order on ties
    return {word: count / len(words) * 100 for word, count in counts.most_common(top_n)}


def publish_date(document: HTMLDocument) -> Optional[str]:
    element = document.first_match(DATE_SELECTORS)
    if element is None:
        return None
    return element.attr('datetime') or element.text.strip() or None


def content_metrics(document: HTMLDocument, url: str) -> ContentMetrics:
    words = split_words(content_text(document))
    internal, external = LinkDiscoveryService().count_links(document, url)
    head = document.head
    return ContentMetrics(
        word_count=len(words),
        reading_time=reading_time(len(words)),
        h1_count=len(document.headings_at(1)),
        h2_count=len(document.headings_at(2)),
        image_count=len(document.images),
        images_without_alt=sum(1 for img in document.images if not img.alt),
        internal_links=internal,
        external_links=external,
        has_meta_description=head.has_meta_desc,
        meta_description_length=head.meta_desc_len,
        publish_date=publish_date(document),
        keyword_density=keyword_density(words)
    )


def build_finding(url: str, document: HTMLDocument, result: Optional[RetrievalResult] = None) -> PageFinding:
    metrics = content_metrics(document, url)
    return PageFinding(
        url=url,
        title=page_title(document),
        content_metrics=metrics,
        quality_tier=quality_tier(metrics.word_count),
        http_status=result.http_status if result is not None else None
    )


def placeholder_finding(url: str, reason: str = "") -> PageFinding:
    """Zero-metric thin finding for a page that could not be retrieved or analyzed."""
    return PageFinding(url=url, title="Failed to analyze", failed=True)


# --- PER-PAGE CHECKS ---

@check_spec("Content Depth", "Check that the post has enough words to be useful", "content-quality")
def check_content_depth(ctx: CheckContext) -> CheckOutcome:
    word_count = len(split_words(content_text(ctx.document)))
    tier = quality_tier(word_count)
    minutes = reading_time(word_count)
    if tier == QualityTier.THIN:
        return CheckOutcome(
            status=S.FAILED, result=f"{word_count} words (thin)", impact='Thin content rarely ranks well',
            recommendation='Expand thin content posts to at least 300-500 words with valuable information'
        )
    return CheckOutcome(status=S.PASSED, result=f"{word_count} words ({tier.value}, {minutes} min read)",
                        impact='Enough depth to satisfy readers')


@check_spec("Meta Description", "Check that the post has a meta description", "seo-optimization")
def check_post_meta_description(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_meta_desc:
        return CheckOutcome(
            status=S.FAILED, result='Missing meta description', impact='Search engines will generate a snippet',
            recommendation='Add compelling meta descriptions (150-160 characters) to all blog posts'
        )
    return CheckOutcome(status=S.PASSED, result=f"{head.meta_desc_len} characters",
                        impact='Controlled search result snippet')


@check_spec("H1 Tag", "Check that the post has exactly one H1", "structure")
def check_post_h1(ctx: CheckContext) -> CheckOutcome:
    count = len(ctx.document.h1s)
    if count != 1:
        return CheckOutcome(status=S.WARNING, result=f"{count} H1 tags found", impact='Unclear post topic',
                            recommendation='Ensure each post has exactly one H1')
    return CheckOutcome(status=S.PASSED, result='Single H1 tag found', impact='Clear post topic')


@check_spec("Subheadings", "Check that the post is structured with H2 subheadings", "structure")
def check_post_subheadings(ctx: CheckContext) -> CheckOutcome:
    count = len(ctx.document.headings_at(2))
    if count == 0:
        return CheckOutcome(status=S.WARNING, result='No H2 subheadings', impact='Hard to scan for readers',
                            recommendation='Break the post into sections with multiple H2 subheadings')
    return CheckOutcome(status=S.PASSED, result=f"{count} H2 subheadings", impact='Scannable structure')


@check_spec("Image Alt Text", "Check that every image in the post has alt text", "seo-optimization")
def check_post_image_alt(ctx: CheckContext) -> CheckOutcome:
    images = ctx.document.images
    missing = sum(1 for img in images if not img.alt)
    if missing:
        return CheckOutcome(status=S.WARNING, result=f"{missing} of {len(images)} images missing alt text",
                            impact='Reduced accessibility and image search visibility',
                            recommendation='Add descriptive alt text to all images for better accessibility and SEO')
    if images:
        return CheckOutcome(status=S.PASSED, result=f"All {len(images)} images have alt text",
                            impact='Accessible images')
    return CheckOutcome(status=S.INFO, result='No images found')


BLOG_POST_CHECKS = [
    check_content_depth,
    check_post_meta_description,
    check_post_h1,
    check_post_subheadings,
    check_post_image_alt,
]


# --- AGGREGATE ISSUES ---

def has_poor_structure(finding: PageFinding) -> bool:
    metrics = finding.content_metrics
    return metrics.h1_count != 1 or metrics.h2_count == 0


def _titles(findings: List[PageFinding]) -> str:
    return ', '.join(f.title for f in findings)


def blog_issues(findings: List[PageFinding]) -> List[Issue]:
    """Issues summarizing problems shared across the analyzed posts."""
    issues: List[Issue] = []
    thin = [f for f in findings if f.quality_tier == QualityTier.THIN]
    missing_meta = [f for f in findings if not f.content_metrics.has_meta_description]
    poor_structure = [f for f in findings if has_poor_structure(f)]
    without_alt = [f for f in findings if f.content_metrics.images_without_alt > 0]

    if thin:
        issues.append(make_issue(
            K.ERROR, 'content-quality', f"{len(thin)} posts with thin content (<300 words)", P.HIGH,
            affected_element=_titles(thin), check_name='Content Depth',
            recommendation='Expand thin content posts to at least 300-500 words with valuable information'
        ))
    if missing_meta:
        issues.append(make_issue(
            K.ERROR, 'seo-optimization', f"{len(missing_meta)} posts missing meta descriptions", P.HIGH,
            affected_element=_titles(missing_meta), check_name='Meta Description',
            recommendation='Add compelling meta descriptions (150-160 characters) to all blog posts'
        ))
    if poor_structure:
        issues.append(make_issue(
            K.WARNING, 'structure', f"{len(poor_structure)} posts with poor header structure", P.MEDIUM,
            affected_element=_titles(poor_structure), check_name='Subheadings',
            recommendation='Ensure each post has exactly one H1 and multiple H2 subheadings'
        ))
    if without_alt:
        total_missing = sum(f.content_metrics.images_without_alt for f in without_alt)
        issues.append(make_issue(
            K.WARNING, 'seo-optimization',
            f"{total_missing} images missing alt text across {len(without_alt)} posts", P.MEDIUM,
            affected_element=_titles(without_alt), check_name='Image Alt Text',
            recommendation='Add descriptive alt text to all images for better accessibility and SEO'
        ))
    return issues


def no_posts_issue() -> Issue:
    return make_issue(
        K.WARNING, 'structure', 'No blog posts found', P.MEDIUM,
        recommendation='Ensure blog posts are properly linked from the main site'
    )
