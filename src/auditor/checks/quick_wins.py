# src/auditor/checks/quick_wins.py
import math
from typing import Optional

from .core import CheckContext, CheckOutcome, check_spec
from ..model import CheckStatus, Effort, IssueKind, Priority, QuickWin

# Quick-win verdicts are "critical" or "needs improvement"; they map onto
# failed/error and warning/warning respectively.
CRITICAL = (CheckStatus.FAILED, IssueKind.ERROR)
NEEDS_IMPROVEMENT = (CheckStatus.WARNING, IssueKind.WARNING)


def _win(
        verdict,
        result: str,
        record_rec: Optional[str],
        category: str,
        issue: str,
        impact: Priority,
        effort: Effort,
        recommendation: str,
        rank: int,
        time_to_implement: str,
        expected_impact: str,
        element: Optional[str] = None
) -> CheckOutcome:
    status, kind = verdict
    win = QuickWin(
        kind=kind,
        category=category,
        message=issue,
        priority=impact,
        affected_element=element,
        recommendation=recommendation,
        impact=expected_impact,
        effort=effort,
        rank=rank,
        time_to_implement=time_to_implement,
        expected_impact=expected_impact
    )
    return CheckOutcome(status=status, result=result, recommendation=record_rec, issues=[win])


def _passed(result: str) -> CheckOutcome:
    return CheckOutcome(status=CheckStatus.PASSED, result=result)


@check_spec("Title Tag", "Check for page title presence and optimization", "meta")
def win_title(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_title:
        return _win(
            CRITICAL, 'Missing title tag', 'Add a descriptive title tag (50-60 characters)',
            'meta', 'Missing title tag', Priority.HIGH, Effort.EASY,
            'Add a descriptive title tag that includes your primary keyword and is 50-60 characters long',
            10, '5 minutes', 'Immediate improvement in search result appearance and click-through rates'
        )
    length = head.title_len
    if length < 30 or length > 60:
        too_short = length < 30
        return _win(
            NEEDS_IMPROVEMENT, f"Length: {length} characters",
            'Expand title to 50-60 characters' if too_short else 'Shorten title to under 60 characters',
            'meta', f"Title length not optimal ({length} characters)", Priority.MEDIUM, Effort.EASY,
            'Expand title to include more descriptive keywords (50-60 chars)' if too_short
            else 'Shorten title to prevent truncation in search results (under 60 chars)',
            8, '5 minutes', 'Better search result display and improved CTR',
            element=head.title_raw
        )
    return _passed(f"Optimal length: {length} characters")


@check_spec("Meta Description", "Check for meta description presence and optimization", "meta")
def win_meta_description(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_meta_desc:
        return _win(
            CRITICAL, 'Missing meta description', 'Add compelling meta description (150-160 characters)',
            'meta', 'Missing meta description', Priority.HIGH, Effort.EASY,
            'Add a compelling meta description that summarizes the page content and includes a '
            'call-to-action (150-160 characters)',
            9, '10 minutes', 'Control how your page appears in search results and improve click-through rates'
        )
    length = head.meta_desc_len
    if length < 120 or length > 160:
        too_short = length < 120
        return _win(
            NEEDS_IMPROVEMENT, f"Length: {length} characters",
            'Expand description to 150-160 characters' if too_short else 'Shorten description to under 160 characters',
            'meta', f"Meta description length not optimal ({length} characters)", Priority.MEDIUM, Effort.EASY,
            'Expand description to better summarize page content (150-160 chars)' if too_short
            else 'Shorten description to prevent truncation in search results (under 160 chars)',
            7, '10 minutes', 'Better search result snippet and improved user engagement',
            element=head.meta_description
        )
    return _passed(f"Optimal length: {length} characters")


@check_spec("HTTPS Security", "Check if site uses secure HTTPS protocol", "technical")
def win_https(ctx: CheckContext) -> CheckOutcome:
    if not ctx.url.startswith('https://'):
        return _win(
            CRITICAL, 'HTTP only (not secure)', 'Implement SSL certificate and redirect HTTP to HTTPS',
            'technical', 'Not using HTTPS', Priority.HIGH, Effort.MEDIUM,
            'Implement SSL certificate and set up automatic redirects from HTTP to HTTPS',
            10, '1-2 hours', 'Improved security, user trust, and search engine rankings'
        )
    return _passed('HTTPS enabled')


@check_spec("Mobile Viewport", "Check for mobile-friendly viewport configuration", "technical")
def win_viewport(ctx: CheckContext) -> CheckOutcome:
    if not ctx.document.head.has_viewport:
        return _win(
            CRITICAL, 'Missing viewport meta tag', 'Add viewport meta tag for mobile responsiveness',
            'technical', 'Missing viewport meta tag', Priority.HIGH, Effort.EASY,
            'Add <meta name="viewport" content="width=device-width, initial-scale=1.0"> to the <head> section',
            9, '2 minutes', 'Proper mobile display and improved mobile search rankings'
        )
    return _passed('Viewport meta tag present')


@check_spec("H1 Heading", "Check for main heading tag presence", "content")
def win_h1(ctx: CheckContext) -> CheckOutcome:
    h1s = ctx.document.h1s
    if not h1s:
        return _win(
            CRITICAL, 'No H1 tag found', 'Add exactly one H1 tag per page',
            'content', 'Missing H1 tag', Priority.HIGH, Effort.EASY,
            'Add exactly one H1 tag that clearly describes the main topic of the page',
            8, '5 minutes', 'Clear page topic signal for search engines and better content structure'
        )
    if len(h1s) > 1:
        return _win(
            NEEDS_IMPROVEMENT, f"{len(h1s)} H1 tags found", 'Use only one H1 tag per page',
            'content', f"Multiple H1 tags ({len(h1s)} found)", Priority.MEDIUM, Effort.EASY,
            'Keep only one H1 tag and convert others to H2 or H3 tags as appropriate',
            6, '10 minutes', 'Clearer content hierarchy and improved SEO focus',
            element=', '.join(h.text for h in h1s[:2])
        )
    return _passed('Single H1 tag found')


@check_spec("Image Alt Text", "Check for descriptive alt text on images", "content")
def win_image_alt(ctx: CheckContext) -> CheckOutcome:
    images = ctx.document.images
    without_alt = [img for img in images if not img.alt]
    if without_alt:
        count = len(without_alt)
        return _win(
            NEEDS_IMPROVEMENT, f"{count} images missing alt text", 'Add descriptive alt text to all images',
            'content', f"{count} images missing alt text", Priority.MEDIUM, Effort.EASY,
            'Add descriptive alt text to all images for better accessibility and SEO',
            7, f"{math.ceil(count * 2)} minutes", 'Better accessibility, image search visibility, and user experience'
        )
    if images:
        return _passed(f"All {len(images)} images have alt text")
    return _passed('No images found')


@check_spec("Page Speed", "Check page loading performance", "performance")
def win_page_speed(ctx: CheckContext) -> CheckOutcome:
    load_time = ctx.elapsed_ms
    if load_time > 3000:
        return _win(
            CRITICAL, f"{load_time}ms (slow)", 'Optimize images, minify CSS/JS, enable compression',
            'performance', f"Slow page load time ({load_time}ms)", Priority.HIGH, Effort.HARD,
            'Optimize images, minify CSS/JS files, enable gzip compression, and consider using a CDN',
            9, '4-8 hours', 'Better user experience, lower bounce rate, and improved search rankings'
        )
    if load_time > 1500:
        return _win(
            NEEDS_IMPROVEMENT, f"{load_time}ms (moderate)", 'Consider optimizing for faster load times (target <1500ms)',
            'performance', f"Moderate page load time ({load_time}ms)", Priority.MEDIUM, Effort.MEDIUM,
            'Optimize images and consider lazy loading to improve load times',
            5, '2-4 hours', 'Improved user experience and better Core Web Vitals scores'
        )
    return _passed(f"{load_time}ms (good)")


@check_spec("Canonical URL", "Check for canonical URL specification", "technical")
def win_canonical(ctx: CheckContext) -> CheckOutcome:
    if not ctx.document.head.has_canonical:
        return _win(
            NEEDS_IMPROVEMENT, 'Missing canonical tag', 'Add canonical tag to prevent duplicate content issues',
            'technical', 'Missing canonical tag', Priority.MEDIUM, Effort.EASY,
            'Add a canonical tag to specify the preferred URL version and prevent duplicate content issues',
            6, '5 minutes', 'Prevention of duplicate content penalties and clearer URL signals'
        )
    return _passed('Canonical tag present')


@check_spec("Language Declaration", "Check for HTML language attribute", "technical")
def win_language(ctx: CheckContext) -> CheckOutcome:
    lang = ctx.document.lang
    if not lang:
        return _win(
            NEEDS_IMPROVEMENT, 'Missing lang attribute', 'Add lang attribute to HTML element',
            'technical', 'Missing language declaration', Priority.MEDIUM, Effort.EASY,
            'Add lang attribute to HTML element (e.g., <html lang="en">) to help search engines '
            'understand content language',
            5, '2 minutes', 'Better international SEO and accessibility'
        )
    return _passed(f"Language: {lang}")


@check_spec("Social Media Tags", "Check for Open Graph social media tags", "meta")
def win_social_tags(ctx: CheckContext) -> CheckOutcome:
    og = ctx.document.head.open_graph
    if not all(prop in og for prop in ("og:title", "og:description", "og:image")):
        return _win(
            NEEDS_IMPROVEMENT, 'Incomplete Open Graph tags', 'Add og:title, og:description, and og:image for social sharing',
            'meta', 'Incomplete Open Graph tags', Priority.MEDIUM, Effort.EASY,
            'Add og:title, og:description, and og:image meta tags for better social media sharing appearance',
            4, '15 minutes', 'Better appearance when shared on social media platforms'
        )
    return _passed('Complete Open Graph tags found')


QUICK_WIN_CHECKS = [
    win_title,
    win_meta_description,
    win_https,
    win_viewport,
    win_h1,
    win_image_alt,
    win_page_speed,
    win_canonical,
    win_language,
    win_social_tags,
]
