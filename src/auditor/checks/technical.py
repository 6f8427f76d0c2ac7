# src/auditor/checks/technical.py
from crawler.utils.url_utils import UrlUtils
from .core import CheckContext, CheckOutcome, check_spec, make_issue
from ..model import CheckStatus as S, IssueKind as K, Priority as P


# --- INDEXABILITY ---

@check_spec("HTTP Status Code", "Check if page returns successful HTTP status", "indexability")
def check_http_status(ctx: CheckContext) -> CheckOutcome:
    status = ctx.http_status
    if status >= 400:
        impact = 'Page cannot be indexed by search engines'
        rec = 'Fix server configuration to return 200 status code'
        return CheckOutcome(status=S.FAILED, result=f"{status} Error", impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'indexability', f"HTTP {status} error - Page not accessible", P.HIGH,
                       impact=impact, recommendation=rec)
        ])
    if 300 <= status < 400:
        impact = 'May dilute link equity and slow crawling'
        rec = 'Minimize redirect chains and use 301 redirects for permanent moves'
        return CheckOutcome(status=S.WARNING, result=f"{status} Redirect", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'redirects', f"HTTP {status} redirect detected", P.MEDIUM,
                       impact=impact, recommendation=rec)
        ])
    impact = 'Page can be properly indexed'
    return CheckOutcome(status=S.PASSED, result=f"{status} Success", impact=impact, issues=[
        make_issue(K.SUCCESS, 'indexability', f"HTTP {status} - Page accessible", P.LOW, impact=impact)
    ])


@check_spec("HTTPS Security", "Check if site uses HTTPS encryption", "security")
def check_https(ctx: CheckContext) -> CheckOutcome:
    if not ctx.url.startswith('https://'):
        impact = 'Security warning in browsers, negative ranking factor'
        rec = 'Implement SSL certificate and redirect HTTP to HTTPS'
        return CheckOutcome(status=S.FAILED, result='HTTP only', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'security', 'Site not using HTTPS', P.HIGH, impact=impact, recommendation=rec)
        ])
    impact = 'Secure connection established'
    return CheckOutcome(status=S.PASSED, result='HTTPS enabled', impact=impact, issues=[
        make_issue(K.SUCCESS, 'security', 'HTTPS enabled', P.LOW, impact=impact)
    ])


@check_spec("Robots Meta - Indexing", "Check if page allows indexing", "indexability")
def check_robots_indexing(ctx: CheckContext) -> CheckOutcome:
    """Also reports the unrestricted case, since the following check stays silent then."""
    robots = ctx.document.head.robots_content
    if robots is None:
        impact = 'Page can be freely indexed and crawled'
        return CheckOutcome(status=S.PASSED, result='No robots restrictions', impact=impact, issues=[
            make_issue(K.SUCCESS, 'indexability', 'No robots restrictions found', P.LOW, impact=impact)
        ])
    if 'noindex' in robots.lower():
        impact = 'Page will not appear in search results'
        rec = 'Remove noindex directive if page should be indexed'
        return CheckOutcome(status=S.FAILED, result='noindex directive found', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'indexability', 'Page blocked from indexing (noindex)', P.HIGH,
                       affected_element=robots, impact=impact, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result='No noindex directive', impact='Page can be indexed')


@check_spec("Robots Meta - Following", "Check if page allows link following", "crawlability")
def check_robots_following(ctx: CheckContext) -> CheckOutcome:
    robots = ctx.document.head.robots_content
    if robots is None:
        return CheckOutcome(status=S.PASSED, result='No robots restrictions', impact='Links can be followed')
    if 'nofollow' in robots.lower():
        impact = "Search engines won't follow links on this page"
        rec = 'Remove nofollow if links should pass authority'
        return CheckOutcome(status=S.WARNING, result='nofollow directive found', impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'crawlability', 'Links blocked from following (nofollow)', P.MEDIUM,
                       affected_element=robots, impact=impact, recommendation=rec)
        ])
    return CheckOutcome(status=S.PASSED, result='No nofollow directive', impact='Links can be followed')


# --- CANONICALIZATION ---

@check_spec("Canonical Tag", "Check for canonical URL specification", "canonicalization")
def check_canonical(ctx: CheckContext) -> CheckOutcome:
    href = ctx.document.head.canonical_href
    if href is None:
        impact = 'Risk of duplicate content issues'
        rec = 'Add canonical tag to specify preferred URL version'
        return CheckOutcome(status=S.WARNING, result='Missing canonical tag', impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'canonicalization', 'Missing canonical tag', P.MEDIUM, impact=impact, recommendation=rec)
        ])
    if not href:
        impact = 'Invalid canonical signal to search engines'
        rec = 'Add proper URL to canonical tag'
        return CheckOutcome(status=S.FAILED, result='Empty canonical tag', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'canonicalization', 'Empty canonical tag', P.HIGH, impact=impact, recommendation=rec)
        ])

    resolved = UrlUtils.resolve(ctx.url, href)
    if resolved is None:
        impact = 'Search engines cannot process canonical signal'
        rec = 'Fix canonical URL format'
        return CheckOutcome(status=S.FAILED, result='Invalid URL format', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'canonicalization', 'Invalid canonical URL format', P.HIGH,
                       affected_element=href, impact=impact, recommendation=rec)
        ])

    if not UrlUtils.same_document(resolved, ctx.url):
        impact = 'This page defers authority to canonical URL'
        rec = 'Verify canonical URL is correct'
        return CheckOutcome(status=S.INFO, result='Points to different URL', impact=impact, recommendation=rec, issues=[
            make_issue(K.INFO, 'canonicalization', 'Canonical points to different URL', P.LOW,
                       affected_element=href, impact=impact, recommendation=rec, actionable=False)
        ])

    impact = 'Clear canonical signal established'
    return CheckOutcome(status=S.PASSED, result='Self-referencing canonical', impact=impact, issues=[
        make_issue(K.SUCCESS, 'canonicalization', 'Self-referencing canonical tag present', P.LOW,
                   affected_element=href, impact=impact)
    ])


# --- META TAGS ---

@check_spec("Title Tag", "Check for page title", "meta")
def check_title(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_title:
        impact = 'No title will appear in search results'
        rec = 'Add descriptive title tag (50-60 characters)'
        return CheckOutcome(status=S.FAILED, result='Missing title tag', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'meta', 'Missing title tag', P.HIGH, impact=impact, recommendation=rec)
        ])

    length = head.title_len
    if length < 30:
        impact = 'Underutilized space in search results'
        rec = 'Expand title to 50-60 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too short ({length} chars)", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Title too short ({length} characters)", P.MEDIUM,
                       affected_element=head.title_raw, impact=impact, recommendation=rec)
        ])
    if length > 60:
        impact = 'Title may be truncated in search results'
        rec = 'Shorten title to under 60 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too long ({length} chars)", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Title too long ({length} characters)", P.MEDIUM,
                       affected_element=head.title_raw, impact=impact, recommendation=rec)
        ])
    impact = 'Title will display properly in search results'
    return CheckOutcome(status=S.PASSED, result=f"Optimal length ({length} chars)", impact=impact, issues=[
        make_issue(K.SUCCESS, 'meta', f"Title length optimal ({length} characters)", P.LOW,
                   affected_element=head.title_raw, impact=impact)
    ])


@check_spec("Meta Description", "Check for meta description", "meta")
def check_meta_description(ctx: CheckContext) -> CheckOutcome:
    head = ctx.document.head
    if not head.has_meta_desc:
        impact = 'Search engines will generate description automatically'
        rec = 'Add compelling meta description (150-160 characters)'
        return CheckOutcome(status=S.FAILED, result='Missing meta description', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'meta', 'Missing meta description', P.HIGH, impact=impact, recommendation=rec)
        ])

    length = head.meta_desc_len
    content = head.meta_description
    if length < 120:
        impact = 'Underutilized space in search results'
        rec = 'Expand description to 150-160 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too short ({length} chars)", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Meta description too short ({length} characters)", P.MEDIUM,
                       affected_element=content, impact=impact, recommendation=rec)
        ])
    if length > 160:
        impact = 'Description may be truncated in search results'
        rec = 'Shorten description to under 160 characters'
        return CheckOutcome(status=S.WARNING, result=f"Too long ({length} chars)", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Meta description too long ({length} characters)", P.MEDIUM,
                       affected_element=content, impact=impact, recommendation=rec)
        ])
    impact = 'Description will display properly in search results'
    return CheckOutcome(status=S.PASSED, result=f"Optimal length ({length} chars)", impact=impact, issues=[
        make_issue(K.SUCCESS, 'meta', f"Meta description length optimal ({length} characters)", P.LOW,
                   affected_element=content, impact=impact)
    ])


@check_spec("Viewport Meta Tag", "Check for mobile viewport configuration", "meta")
def check_viewport(ctx: CheckContext) -> CheckOutcome:
    viewport = ctx.document.head.viewport_content
    if viewport is None:
        impact = 'Poor mobile user experience, mobile ranking penalty'
        rec = 'Add viewport meta tag for mobile responsiveness'
        return CheckOutcome(status=S.FAILED, result='Missing viewport tag', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'meta', 'Missing viewport meta tag', P.HIGH, impact=impact, recommendation=rec)
        ])
    impact = 'Mobile-friendly configuration detected'
    return CheckOutcome(status=S.PASSED, result='Viewport tag present', impact=impact, issues=[
        make_issue(K.SUCCESS, 'meta', 'Viewport meta tag present', P.LOW, affected_element=viewport, impact=impact)
    ])


@check_spec("Language Declaration", "Check for HTML language attribute", "structure")
def check_language(ctx: CheckContext) -> CheckOutcome:
    lang = ctx.document.lang
    if not lang:
        impact = 'Search engines may not understand page language'
        rec = 'Add lang attribute to HTML element (e.g., lang="en")'
        return CheckOutcome(status=S.WARNING, result='Missing lang attribute', impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'structure', 'Missing language declaration', P.MEDIUM, impact=impact, recommendation=rec)
        ])
    impact = 'Clear language signal for search engines'
    return CheckOutcome(status=S.PASSED, result=f"Language: {lang}", impact=impact, issues=[
        make_issue(K.SUCCESS, 'structure', f'Language declared as "{lang}"', P.LOW, affected_element=lang, impact=impact)
    ])


# --- HEADERS ---

@check_spec("H1 Tag", "Check for main heading tag", "headers")
def check_h1(ctx: CheckContext) -> CheckOutcome:
    h1s = ctx.document.h1s
    if not h1s:
        impact = 'No clear page topic signal for search engines'
        rec = 'Add exactly one H1 tag per page'
        return CheckOutcome(status=S.FAILED, result='No H1 tag found', impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'headers', 'Missing H1 tag', P.HIGH, impact=impact, recommendation=rec)
        ])
    if len(h1s) > 1:
        impact = 'Diluted topic focus, confusing for search engines'
        rec = 'Use only one H1 tag per page'
        return CheckOutcome(status=S.WARNING, result=f"{len(h1s)} H1 tags found", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'headers', f"Multiple H1 tags found ({len(h1s)})", P.MEDIUM,
                       affected_element=', '.join(h.text for h in h1s[:3]), impact=impact, recommendation=rec)
        ])
    impact = 'Clear page topic established'
    return CheckOutcome(status=S.PASSED, result='Single H1 tag found', impact=impact, issues=[
        make_issue(K.SUCCESS, 'headers', 'Single H1 tag found', P.LOW, affected_element=h1s[0].text, impact=impact)
    ])


def has_hierarchy_gap(levels) -> bool:
    """True when any heading is more than one level deeper than the one before it."""
    previous = 0
    for level in levels:
        if previous > 0 and level > previous + 1:
            return True
        previous = level
    return False


@check_spec("Header Hierarchy", "Check header structure follows proper hierarchy", "headers")
def check_header_hierarchy(ctx: CheckContext) -> CheckOutcome:
    headings = ctx.document.headings
    if len(headings) <= 1:
        return CheckOutcome(
            status=S.INFO,
            result='Insufficient headers for hierarchy analysis',
            impact='Consider adding more headers for better content structure'
        )
    if has_hierarchy_gap(h.level for h in headings):
        impact = 'Poor content structure understanding for search engines'
        rec = 'Ensure headers follow proper hierarchy (H1 → H2 → H3, etc.)'
        return CheckOutcome(status=S.WARNING, result='Improper hierarchy detected', impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'headers', 'Header hierarchy not properly structured', P.MEDIUM,
                       impact=impact, recommendation=rec)
        ])
    impact = 'Clear content structure for search engines'
    return CheckOutcome(status=S.PASSED, result=f"{len(headings)} headers properly structured", impact=impact, issues=[
        make_issue(K.SUCCESS, 'headers', f"Header hierarchy properly structured ({len(headings)} headers)", P.LOW,
                   impact=impact)
    ])


# --- STRUCTURED DATA & SOCIAL ---

@check_spec("Structured Data", "Check for Schema.org structured data", "structure")
def check_structured_data(ctx: CheckContext) -> CheckOutcome:
    valid = len(ctx.document.structured_data)
    invalid = ctx.document.invalid_structured_data
    if valid == 0 and invalid == 0:
        impact = 'Missing rich snippet opportunities'
        rec = 'Add Schema.org structured data for better search results'
        return CheckOutcome(status=S.WARNING, result='No structured data found', impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'structure', 'No structured data found', P.MEDIUM, impact=impact, recommendation=rec)
        ])
    if invalid > 0:
        impact = 'Broken structured data may cause indexing issues'
        rec = 'Fix JSON-LD syntax errors in structured data'
        return CheckOutcome(status=S.FAILED, result=f"{invalid} invalid schemas", impact=impact, recommendation=rec, issues=[
            make_issue(K.ERROR, 'structure', f"{invalid} invalid structured data scripts", P.HIGH,
                       impact=impact, recommendation=rec)
        ])
    impact = 'Enhanced search result appearance potential'
    return CheckOutcome(status=S.PASSED, result=f"{valid} valid schemas found", impact=impact, issues=[
        make_issue(K.SUCCESS, 'structure', f"{valid} valid structured data schemas found", P.LOW, impact=impact)
    ])


@check_spec("Open Graph Tags", "Check for social media meta tags", "meta")
def check_open_graph(ctx: CheckContext) -> CheckOutcome:
    found = len(ctx.document.head.open_graph_core)
    if found == 0:
        impact = 'Poor social media sharing appearance'
        rec = 'Add og:title, og:description, og:image, and og:url for better social sharing'
        return CheckOutcome(status=S.WARNING, result='No Open Graph tags found', impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', 'No Open Graph tags found', P.MEDIUM, impact=impact, recommendation=rec)
        ])
    if found < 4:
        impact = 'Incomplete social media optimization'
        rec = 'Add missing Open Graph tags for complete social media optimization'
        return CheckOutcome(status=S.WARNING, result=f"{found}/4 Open Graph tags found", impact=impact, recommendation=rec, issues=[
            make_issue(K.WARNING, 'meta', f"Incomplete Open Graph tags ({found}/4 found)", P.MEDIUM,
                       impact=impact, recommendation=rec)
        ])
    impact = 'Optimized for social media sharing'
    return CheckOutcome(status=S.PASSED, result='Complete Open Graph tags found', impact=impact, issues=[
        make_issue(K.SUCCESS, 'meta', 'Complete Open Graph tags found', P.LOW, impact=impact)
    ])


TECHNICAL_CHECKS = [
    check_http_status,
    check_https,
    check_robots_indexing,
    check_robots_following,
    check_canonical,
    check_title,
    check_meta_description,
    check_viewport,
    check_language,
    check_h1,
    check_header_hierarchy,
    check_structured_data,
    check_open_graph,
]
