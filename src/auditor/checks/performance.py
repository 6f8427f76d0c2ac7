# src/auditor/checks/performance.py
from typing import Optional

from .core import CheckContext, CheckOutcome, check_spec
from ..model import CheckStatus, IssueKind, PerformanceIssue, Priority

COMPRESSION_ENCODINGS = ("gzip", "br", "deflate")
CACHE_HEADERS = ("cache-control", "expires", "etag", "last-modified")


def _perf_issue(
        kind: IssueKind,
        category: str,
        message: str,
        priority: Priority,
        impact: str,
        time_to_fix: str,
        expected_improvement: str,
        recommendation: Optional[str] = None
) -> PerformanceIssue:
    return PerformanceIssue(
        kind=kind,
        category=category,
        message=message,
        priority=priority,
        impact=impact,
        recommendation=recommendation,
        time_to_fix=time_to_fix,
        expected_improvement=expected_improvement
    )


def compression_encoding(ctx: CheckContext) -> Optional[str]:
    """The content-encoding header when it names a text compression scheme."""
    encoding = ctx.header("content-encoding")
    if encoding and any(scheme in encoding for scheme in COMPRESSION_ENCODINGS):
        return encoding
    return None


def has_cache_headers(ctx: CheckContext) -> bool:
    return any(ctx.header(name) for name in CACHE_HEADERS)


@check_spec("Page Load Time", "Measure total page load time", "loading")
def check_page_load_time(ctx: CheckContext) -> CheckOutcome:
    load_time = ctx.elapsed_ms
    if load_time > 3000:
        return CheckOutcome(
            status=CheckStatus.FAILED, result=f"{load_time}ms (slow)",
            impact='Poor user experience, high bounce rate',
            recommendation='Optimize images, minify resources, enable compression',
            issues=[_perf_issue(
                IssueKind.ERROR, 'loading', f"Slow page load time ({load_time}ms)", Priority.HIGH,
                'Poor user experience, high bounce rate, negative SEO impact', '4-8 hours', 'Reduce load time by 40-60%',
                recommendation='Optimize images, minify CSS/JS, enable gzip compression, use CDN'
            )]
        )
    if load_time > 1500:
        return CheckOutcome(
            status=CheckStatus.WARNING, result=f"{load_time}ms (moderate)",
            impact='Acceptable but could be improved',
            recommendation='Consider optimizing for faster load times',
            issues=[_perf_issue(
                IssueKind.WARNING, 'loading', f"Moderate page load time ({load_time}ms)", Priority.MEDIUM,
                'Room for improvement in user experience', '2-4 hours', 'Reduce load time by 20-30%',
                recommendation='Optimize images and consider lazy loading'
            )]
        )
    return CheckOutcome(
        status=CheckStatus.PASSED, result=f"{load_time}ms (good)", impact='Good user experience',
        issues=[_perf_issue(
            IssueKind.SUCCESS, 'loading', f"Good page load time ({load_time}ms)", Priority.LOW,
            'Positive user experience', 'N/A', 'Already optimized'
        )]
    )


@check_spec("CSS Files", "Count CSS files that may block rendering", "rendering")
def check_css_files(ctx: CheckContext) -> CheckOutcome:
    count = ctx.document.head.stylesheet_count
    if count > 5:
        return CheckOutcome(
            status=CheckStatus.WARNING, result=f"{count} CSS files",
            impact='Multiple CSS files can slow initial render', recommendation='Consider combining CSS files',
            issues=[_perf_issue(
                IssueKind.WARNING, 'rendering', f"Multiple CSS files ({count}) may block rendering", Priority.MEDIUM,
                'Delayed first paint and content visibility', '2-3 hours', 'Faster first contentful paint',
                recommendation='Combine CSS files, inline critical CSS, use media queries for non-critical CSS'
            )]
        )
    return CheckOutcome(status=CheckStatus.PASSED, result=f"{count} CSS files (reasonable)",
                        impact='Good CSS file management')


@check_spec("Render-blocking JS", "Check for render-blocking JavaScript", "rendering")
def check_render_blocking_js(ctx: CheckContext) -> CheckOutcome:
    count = len(ctx.document.render_blocking_scripts)
    if count > 3:
        return CheckOutcome(
            status=CheckStatus.WARNING, result=f"{count} blocking scripts",
            impact='Scripts block HTML parsing', recommendation='Add async or defer attributes to non-critical scripts',
            issues=[_perf_issue(
                IssueKind.WARNING, 'rendering', f"{count} render-blocking JavaScript files", Priority.MEDIUM,
                'Delayed page rendering and interactivity', '1-2 hours', 'Faster page rendering',
                recommendation='Add async or defer attributes to non-critical scripts'
            )]
        )
    return CheckOutcome(status=CheckStatus.PASSED, result=f"{count} blocking scripts (acceptable)",
                        impact='Good JavaScript loading strategy')


@check_spec("Image Lazy Loading", "Check if images use lazy loading", "optimization")
def check_lazy_loading(ctx: CheckContext) -> CheckOutcome:
    images = ctx.document.images
    lazy = sum(1 for img in images if img.is_lazy)
    if len(images) > 3 and lazy == 0:
        return CheckOutcome(
            status=CheckStatus.WARNING, result='No lazy loading detected',
            impact='All images load immediately', recommendation='Implement lazy loading for below-fold images',
            issues=[_perf_issue(
                IssueKind.WARNING, 'optimization', 'Images not using lazy loading', Priority.MEDIUM,
                'Slower initial page load, wasted bandwidth', '30 minutes', 'Faster initial load, reduced bandwidth usage',
                recommendation='Add loading="lazy" to images below the fold'
            )]
        )
    if lazy > 0:
        return CheckOutcome(status=CheckStatus.PASSED, result=f"{lazy} images use lazy loading",
                            impact='Optimized image loading')
    return CheckOutcome(status=CheckStatus.INFO, result=f"{len(images)} images (lazy loading not required)",
                        impact='Few images to defer')


@check_spec("Image Dimensions", "Check if images have explicit dimensions", "rendering")
def check_image_dimensions(ctx: CheckContext) -> CheckOutcome:
    images = ctx.document.images
    missing = sum(1 for img in images if not img.has_dimensions)
    if missing > 0:
        return CheckOutcome(
            status=CheckStatus.WARNING, result=f"{missing} images without dimensions",
            impact='May cause layout shifts', recommendation='Add width and height attributes to images',
            issues=[_perf_issue(
                IssueKind.WARNING, 'rendering', f"{missing} images without explicit dimensions", Priority.MEDIUM,
                'Potential layout shifts, poor Core Web Vitals', '1 hour', 'Better Cumulative Layout Shift score',
                recommendation='Add width and height attributes to prevent layout shifts'
            )]
        )
    if images:
        return CheckOutcome(status=CheckStatus.PASSED, result='All images have dimensions',
                            impact='Prevents layout shifts')
    return CheckOutcome(status=CheckStatus.INFO, result='No images found', impact='No layout shift risk from images')


@check_spec("Text Compression", "Check if text resources are compressed", "optimization")
def check_compression(ctx: CheckContext) -> CheckOutcome:
    encoding = compression_encoding(ctx)
    if encoding is None:
        return CheckOutcome(
            status=CheckStatus.WARNING, result='No compression detected',
            impact='Larger file sizes, slower loading', recommendation='Enable gzip or Brotli compression',
            issues=[_perf_issue(
                IssueKind.WARNING, 'optimization', 'Text compression not enabled', Priority.MEDIUM,
                'Larger file sizes, slower download times', '1 hour', 'Reduce file sizes by 60-80%',
                recommendation='Enable gzip or Brotli compression on your server'
            )]
        )
    return CheckOutcome(status=CheckStatus.PASSED, result=f"Compression enabled ({encoding})",
                        impact='Optimized file transfer')


@check_spec("Browser Caching", "Check for browser caching headers", "optimization")
def check_caching(ctx: CheckContext) -> CheckOutcome:
    if not has_cache_headers(ctx):
        return CheckOutcome(
            status=CheckStatus.WARNING, result='No cache headers found',
            impact='Resources downloaded on every visit', recommendation='Add cache-control headers for static resources',
            issues=[_perf_issue(
                IssueKind.WARNING, 'optimization', 'Browser caching not configured', Priority.MEDIUM,
                'Resources re-downloaded on every visit', '30 minutes', 'Faster repeat visits',
                recommendation='Add Cache-Control headers for static resources'
            )]
        )
    return CheckOutcome(status=CheckStatus.PASSED, result='Cache headers present', impact='Optimized for repeat visits')


PAGE_SPEED_CHECKS = [
    check_page_load_time,
    check_css_files,
    check_render_blocking_js,
    check_lazy_loading,
    check_image_dimensions,
    check_compression,
    check_caching,
]
