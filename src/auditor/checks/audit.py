# src/auditor/checks/audit.py
"""
General on-page audit. Broader than the technical catalog (links, images,
semantic markup, speed) but with lighter texts and weights.
"""
from crawler.utils.url_utils import UrlUtils
from .core import CheckContext, CheckOutcome, check_spec, make_issue
from .technical import has_hierarchy_gap
from ..model import CheckStatus as S, IssueKind as K, Priority as P

SEMANTIC_ELEMENTS = ['main', 'header', 'footer', 'nav', 'article', 'section', 'aside']
AUDIT_OPEN_GRAPH = ("og:title", "og:description", "og:image")


def _heading_outline(ctx: CheckContext, limit: int = 5) -> str:
    return ' | '.join(f"{h.tag.upper()}: {h.text[:50]}..." for h in ctx.document.headings[:limit])


def classify_links(ctx: CheckContext):
    """Returns (internal, external, external_nofollow, broken_suspects) for the page's anchors."""
    internal = external = nofollow = broken = 0
    for link in ctx.document.anchors:
        href = link.href.strip()
        if link.looks_broken:
            broken += 1
        if not UrlUtils.is_navigable_href(href):
            continue
        resolved = UrlUtils.resolve(ctx.url, href)
        if resolved is None:
            continue
        if UrlUtils.is_same_host(resolved, ctx.url):
            internal += 1
        else:
            external += 1
            if link.is_nofollow:
                nofollow += 1
    return internal, external, nofollow, broken


@check_spec("HTTP Status Code", "Check if page returns successful HTTP status", "indexability")
def audit_http_status(ctx: CheckContext) -> CheckOutcome:
    status = ctx.http_status
    if status >= 400:
        return CheckOutcome(status=S.FAILED, result=f"{status} Error", recommendation='Fix server response issues',
                            issues=[make_issue(K.ERROR, 'indexability', f"HTTP {status} error", P.HIGH,
                                               recommendation='Fix server response issues')])
    if status >= 300:
        return CheckOutcome(status=S.WARNING, result=f"{status} Redirect",
                            recommendation='Check if redirect is intentional',
                            issues=[make_issue(K.WARNING, 'indexability', f"HTTP {status} redirect", P.MEDIUM,
                                               recommendation='Check if redirect is intentional')])
    return CheckOutcome(status=S.PASSED, result=f"{status} Success")


@check_spec("Title Tag", "Check for page title", "meta")
def audit_title(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_title:
        rec = 'Add a descriptive title tag (50-60 characters)'
        return CheckOutcome(status=S.FAILED, result='Missing title tag', recommendation=rec,
                            issues=[make_issue(K.ERROR, 'meta', 'Missing page title', P.HIGH, recommendation=rec)])
    length = head.title_len
    if length < 30:
        rec = 'Expand title to 50-60 characters for better SEO'
        return CheckOutcome(status=S.WARNING, result=f"Too short ({length} chars)", recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Title too short ({length} characters)", P.MEDIUM,
                       affected_element=head.title_raw, recommendation=rec)
        ])
    if length > 60:
        rec = 'Shorten title to under 60 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too long ({length} chars)", recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Title too long ({length} characters)", P.MEDIUM,
                       affected_element=head.title_raw, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result=f"Optimal length ({length} chars)", issues=[
        make_issue(K.SUCCESS, 'meta', f"Title length optimal ({length} characters)", P.LOW,
                   affected_element=head.title_raw)
    ])


@check_spec("Meta Description", "Check for meta description", "meta")
def audit_meta_description(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_meta_desc:
        rec = 'Add a compelling meta description (150-160 characters)'
        return CheckOutcome(status=S.FAILED, result='Missing meta description', recommendation=rec,
                            issues=[make_issue(K.ERROR, 'meta', 'Missing meta description', P.HIGH, recommendation=rec)])
    length = head.meta_desc_len
    content = head.meta_description
    if length < 120:
        rec = 'Expand description to 150-160 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too short ({length} chars)", recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Meta description too short ({length} characters)", P.MEDIUM,
                       affected_element=content, recommendation=rec)
        ])
    if length > 160:
        rec = 'Shorten description to under 160 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too long ({length} chars)", recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Meta description too long ({length} characters)", P.MEDIUM,
                       affected_element=content, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result=f"Optimal length ({length} chars)", issues=[
        make_issue(K.SUCCESS, 'meta', f"Meta description length optimal ({length} characters)", P.LOW,
                   affected_element=content)
    ])


@check_spec("Viewport Meta Tag", "Check for mobile viewport configuration", "meta")
def audit_viewport(ctx: CheckContext) -> CheckOutcome:
    viewport = ctx.document.head.viewport_content
    if viewport is None:
        rec = 'Add viewport meta tag for mobile responsiveness'
        return CheckOutcome(status=S.FAILED, result='Missing viewport tag', recommendation=rec,
                            issues=[make_issue(K.ERROR, 'meta', 'Missing viewport meta tag', P.HIGH, recommendation=rec)])
    return CheckOutcome(status=S.PASSED, result='Viewport tag present', issues=[
        make_issue(K.SUCCESS, 'meta', 'Viewport meta tag present', P.LOW, affected_element=viewport)
    ])


@check_spec("Canonical Tag", "Check for canonical URL specification", "meta")
def audit_canonical(ctx: CheckContext) -> CheckOutcome:
    href = ctx.document.head.canonical_href
    if href is None:
        rec = 'Add canonical tag to prevent duplicate content issues'
        return CheckOutcome(status=S.WARNING, result='Missing canonical tag', recommendation=rec,
                            issues=[make_issue(K.WARNING, 'meta', 'Missing canonical tag', P.MEDIUM, recommendation=rec)])
    return CheckOutcome(status=S.PASSED, result='Canonical tag present', issues=[
        make_issue(K.SUCCESS, 'meta', 'Canonical tag present', P.LOW, affected_element=href)
    ])


@check_spec("Open Graph Tags", "Check for social media meta tags", "meta")
def audit_open_graph(ctx: CheckContext) -> CheckOutcome:
    og = ctx.document.head.open_graph
    found = sum(1 for prop in AUDIT_OPEN_GRAPH if prop in og)
    if found == 0:
        rec = 'Add og:title, og:description, and og:image for better social sharing'
        return CheckOutcome(status=S.WARNING, result='No Open Graph tags found', recommendation=rec,
                            issues=[make_issue(K.WARNING, 'meta', 'No Open Graph tags found', P.MEDIUM, recommendation=rec)])
    if found < 3:
        rec = 'Add missing Open Graph tags for complete social media optimization'
        return CheckOutcome(status=S.WARNING, result=f"{found}/3 Open Graph tags found", recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Incomplete Open Graph tags ({found}/3 found)", P.MEDIUM, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result='Complete Open Graph tags found', issues=[
        make_issue(K.SUCCESS, 'meta', 'Complete Open Graph tags found', P.LOW)
    ])


@check_spec("Robots Meta", "Check robots meta directives", "indexability")
def audit_robots_meta(ctx: CheckContext) -> CheckOutcome:
    robots = ctx.document.head.robots_content
    if robots is None:
        return CheckOutcome(status=S.PASSED, result='No robots restrictions')
    issues = []
    if 'noindex' in robots:
        issues.append(make_issue(K.WARNING, 'indexability', 'Page set to noindex', P.HIGH, affected_element=robots,
                                 recommendation='Remove noindex if you want this page to be indexed'))
    if 'nofollow' in robots:
        issues.append(make_issue(K.INFO, 'indexability', 'Page set to nofollow', P.MEDIUM, affected_element=robots,
                                 recommendation='Consider if nofollow is necessary for this page'))
    if not issues:
        return CheckOutcome(status=S.PASSED, result=f"Directives: {robots}")
    status = S.WARNING if 'noindex' in robots else S.INFO
    return CheckOutcome(status=status, result=f"Directives: {robots}", issues=issues)


@check_spec("H1 Tag", "Check for main heading tag", "headers")
def audit_h1(ctx: CheckContext) -> CheckOutcome:
    h1s = ctx.document.h1s
    if not h1s:
        rec = 'Add exactly one H1 tag per page'
        return CheckOutcome(status=S.FAILED, result='No H1 tag found', recommendation=rec,
                            issues=[make_issue(K.ERROR, 'headers', 'Missing H1 tag', P.HIGH, recommendation=rec)])
    if len(h1s) > 1:
        rec = 'Use only one H1 tag per page'
        return CheckOutcome(status=S.WARNING, result=f"{len(h1s)} H1 tags found", recommendation=rec, issues=[
            make_issue(K.WARNING, 'headers', f"Multiple H1 tags found ({len(h1s)})", P.MEDIUM,
                       affected_element=', '.join(h.text for h in h1s), recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result='Single H1 tag found', issues=[
        make_issue(K.SUCCESS, 'headers', 'H1 tag structure correct', P.LOW, affected_element=h1s[0].text)
    ])


@check_spec("Header Hierarchy", "Check header structure follows proper hierarchy", "headers")
def audit_header_hierarchy(ctx: CheckContext) -> CheckOutcome:
    headings = ctx.document.headings
    if len(headings) <= 1:
        return CheckOutcome(status=S.INFO, result='Insufficient headers for hierarchy analysis')
    if has_hierarchy_gap(h.level for h in headings):
        rec = 'Ensure headers follow proper hierarchy (H1 → H2 → H3, etc.)'
        return CheckOutcome(status=S.WARNING, result='Improper hierarchy detected', recommendation=rec, issues=[
            make_issue(K.WARNING, 'headers', 'Header hierarchy not properly structured', P.MEDIUM,
                       affected_element=_heading_outline(ctx), recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result=f"{len(headings)} headers properly structured", issues=[
        make_issue(K.SUCCESS, 'headers', f"Header hierarchy properly structured ({len(headings)} headers)", P.LOW)
    ])


@check_spec("Image Alt Attributes", "Check that images carry alt text", "images")
def audit_image_alt(ctx: CheckContext) -> CheckOutcome:
    images = ctx.document.images
    # alt="" counts as missing, whitespace-only alt as empty
    missing = [img for img in images if not img.alt]
    blank = [img for img in images if img.alt and not img.alt.strip()]
    problematic = ', '.join((img.filename or 'unknown') for img in (missing + blank)[:3])

    issues = []
    if missing:
        issues.append(make_issue(
            K.ERROR, 'images', f"{len(missing)} images missing alt attributes", P.HIGH, affected_element=problematic,
            recommendation='Add descriptive alt text to all images for accessibility and SEO'
        ))
    if blank:
        issues.append(make_issue(
            K.WARNING, 'images', f"{len(blank)} images with empty alt attributes", P.MEDIUM, affected_element=problematic,
            recommendation='Add descriptive alt text or use alt="" for decorative images'
        ))
    if images and not issues:
        issues.append(make_issue(K.SUCCESS, 'images', f"All {len(images)} images have alt attributes", P.LOW))
    if len(images) > 3 and not any(img.is_lazy for img in images):
        issues.append(make_issue(
            K.INFO, 'performance', 'Consider adding lazy loading to images', P.LOW, actionable=True,
            recommendation='Add loading="lazy" to images below the fold for better performance'
        ))

    if missing:
        status = S.FAILED
    elif blank:
        status = S.WARNING
    elif images:
        status = S.PASSED
    else:
        status = S.INFO
    return CheckOutcome(status=status, result=f"{len(missing) + len(blank)} of {len(images)} images lack alt text",
                        issues=issues)


@check_spec("Internal Links", "Check for internal linking", "links")
def audit_internal_links(ctx: CheckContext) -> CheckOutcome:
    internal, _, _, _ = classify_links(ctx)
    if internal == 0:
        rec = 'Add internal links to improve site navigation and SEO'
        return CheckOutcome(status=S.WARNING, result='No internal links', recommendation=rec,
                            issues=[make_issue(K.WARNING, 'links', 'No internal links found', P.MEDIUM, recommendation=rec)])
    return CheckOutcome(status=S.PASSED, result=f"{internal} internal links", issues=[
        make_issue(K.SUCCESS, 'links', f"{internal} internal links found", P.LOW)
    ])


@check_spec("External Links", "Check external links and their nofollow usage", "links")
def audit_external_links(ctx: CheckContext) -> CheckOutcome:
    _, external, nofollow, _ = classify_links(ctx)
    if external == 0:
        return CheckOutcome(status=S.INFO, result='No external links')
    share = nofollow / external * 100
    rec = ('Consider adding nofollow to untrusted external links' if share < 30
           else 'Good use of nofollow attributes')
    return CheckOutcome(status=S.INFO, result=f"{external} external links ({nofollow} nofollow)", recommendation=rec,
                        issues=[make_issue(K.INFO, 'links', f"{external} external links ({nofollow} with nofollow)",
                                           P.LOW, recommendation=rec)])


@check_spec("Link Integrity", "Check for empty or placeholder links", "links")
def audit_link_integrity(ctx: CheckContext) -> CheckOutcome:
    _, _, _, broken = classify_links(ctx)
    if broken > 0:
        rec = 'Review and fix broken or placeholder links'
        return CheckOutcome(status=S.WARNING, result=f"{broken} suspicious links", recommendation=rec, issues=[
            make_issue(K.WARNING, 'links', f"{broken} potentially broken or empty links", P.MEDIUM, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result='No placeholder links')


@check_spec("Structured Data", "Check for Schema.org structured data", "structure")
def audit_structured_data(ctx: CheckContext) -> CheckOutcome:
    count = len(ctx.document.structured_data_scripts)
    if count == 0:
        rec = 'Add structured data markup for better search results'
        return CheckOutcome(status=S.WARNING, result='No structured data found', recommendation=rec, issues=[
            make_issue(K.WARNING, 'structure', 'No structured data (Schema.org) found', P.MEDIUM, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result=f"{count} JSON-LD scripts", issues=[
        make_issue(K.SUCCESS, 'structure', f"Structured data found ({count} scripts)", P.LOW)
    ])


@check_spec("Language Declaration", "Check for HTML language attribute", "structure")
def audit_language(ctx: CheckContext) -> CheckOutcome:
    lang = ctx.document.lang
    if not lang:
        rec = 'Add lang attribute to HTML element (e.g., lang="en")'
        return CheckOutcome(status=S.WARNING, result='Missing lang attribute', recommendation=rec, issues=[
            make_issue(K.WARNING, 'structure', 'Missing language attribute on HTML element', P.MEDIUM, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result=f"Language: {lang}", issues=[
        make_issue(K.SUCCESS, 'structure', f'Language attribute set to "{lang}"', P.LOW, affected_element=lang)
    ])


@check_spec("Semantic Elements", "Check for semantic HTML5 elements", "structure")
def audit_semantic_elements(ctx: CheckContext) -> CheckOutcome:
    found = [tag for tag in SEMANTIC_ELEMENTS if ctx.document.exists(tag)]
    if len(found) < 3:
        return CheckOutcome(status=S.INFO, result=f"{len(found)}/7 semantic elements", issues=[
            make_issue(K.INFO, 'structure', f"Limited semantic HTML5 elements ({len(found)}/7 found)", P.LOW,
                       affected_element=', '.join(found),
                       recommendation='Consider using more semantic HTML5 elements for better structure')
        ])
    return CheckOutcome(status=S.PASSED, result=f"{len(found)}/7 semantic elements", issues=[
        make_issue(K.SUCCESS, 'structure', f"Good use of semantic HTML5 elements ({len(found)}/7 found)", P.LOW,
                   affected_element=', '.join(found))
    ])


@check_spec("Page Load Time", "Measure page load time", "performance")
def audit_load_time(ctx: CheckContext) -> CheckOutcome:
    load_time = ctx.elapsed_ms
    if load_time > 3000:
        rec = 'Optimize images, minify CSS/JS, and consider using a CDN'
        return CheckOutcome(status=S.FAILED, result=f"{load_time}ms (slow)", recommendation=rec, issues=[
            make_issue(K.ERROR, 'performance', f"Slow page load time ({load_time}ms)", P.HIGH, recommendation=rec)
        ])
    if load_time > 1500:
        rec = 'Consider optimizing for faster load times (target <1500ms)'
        return CheckOutcome(status=S.WARNING, result=f"{load_time}ms (moderate)", recommendation=rec, issues=[
            make_issue(K.WARNING, 'performance', f"Moderate page load time ({load_time}ms)", P.MEDIUM,
                       recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result=f"{load_time}ms (good)", issues=[
        make_issue(K.SUCCESS, 'performance', f"Good page load time ({load_time}ms)", P.LOW)
    ])


@check_spec("Render-blocking JS", "Check for render-blocking scripts and stylesheets", "performance")
def audit_render_blocking(ctx: CheckContext) -> CheckOutcome:
    scripts = len(ctx.document.render_blocking_scripts)
    stylesheets = ctx.document.head.stylesheet_count
    issues = []
    if scripts > 3:
        issues.append(make_issue(
            K.WARNING, 'performance', f"{scripts} render-blocking scripts found", P.MEDIUM,
            recommendation='Consider adding async or defer attributes to non-critical scripts'
        ))
    if stylesheets > 5:
        issues.append(make_issue(
            K.INFO, 'performance', f"{stylesheets} stylesheets found", P.LOW,
            recommendation='Consider combining CSS files to reduce HTTP requests'
        ))
    if scripts > 3:
        status = S.WARNING
    elif stylesheets > 5:
        status = S.INFO
    else:
        status = S.PASSED
    return CheckOutcome(status=status, result=f"{scripts} blocking scripts, {stylesheets} stylesheets", issues=issues)


AUDIT_CHECKS = [
    audit_http_status,
    audit_title,
    audit_meta_description,
    audit_viewport,
    audit_canonical,
    audit_open_graph,
    audit_robots_meta,
    audit_h1,
    audit_header_hierarchy,
    audit_image_alt,
    audit_internal_links,
    audit_external_links,
    audit_link_integrity,
    audit_structured_data,
    audit_language,
    audit_semantic_elements,
    audit_load_time,
    audit_render_blocking,
]
