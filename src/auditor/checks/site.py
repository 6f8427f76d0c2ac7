# src/auditor/checks/site.py
from crawler.services.link_discovery_service import LinkDiscoveryService
from .core import CheckContext, CheckOutcome, check_spec, make_issue
from .technical import check_canonical, check_http_status, check_robots_indexing
from ..model import CheckStatus as S, IssueKind as K, Priority as P

NAVIGATION_SELECTORS = ['nav', '[role="navigation"]', '.menu', '.navigation']
BREADCRUMB_SELECTORS = ['[aria-label="breadcrumb"]', '.breadcrumb', '.breadcrumbs']
BREADCRUMB_LINK_THRESHOLD = 10


def _not_checked(what: str) -> CheckOutcome:
    # The site probes were skipped, usually because the run ran out of time.
    return CheckOutcome(status=S.INFO, result=f"{what} was not checked", impact="No probe result available")


# --- ROBOTS.TXT ---

@check_spec("Robots.txt File", "Check for robots.txt file existence", "robots")
def check_robots_file(ctx: CheckContext) -> CheckOutcome:
    robots = ctx.robots
    if robots is None:
        return _not_checked("robots.txt")
    if robots.fetch_error is not None:
        return CheckOutcome(
            status=S.FAILED, result='Failed to fetch robots.txt', impact='Cannot verify crawling directives',
            recommendation='Check server configuration and accessibility',
            issues=[make_issue(
                K.ERROR, 'robots', 'Failed to fetch robots.txt', P.HIGH,
                impact='Cannot verify crawling directives',
                recommendation='Check server configuration and ensure robots.txt is accessible'
            )]
        )
    if robots.http_status == 404:
        return CheckOutcome(
            status=S.WARNING, result='File not found (404)', impact='Search engines may crawl unintended pages',
            recommendation='Create a robots.txt file to guide search engine crawling',
            issues=[make_issue(
                K.WARNING, 'robots', 'robots.txt file not found', P.MEDIUM,
                impact='Search engines may crawl unintended pages or waste crawl budget',
                recommendation='Create a robots.txt file to guide search engine crawling'
            )]
        )
    if not robots.accessible:
        status = robots.http_status
        return CheckOutcome(
            status=S.FAILED, result=f"HTTP {status} error", impact='Robots.txt cannot be accessed by search engines',
            recommendation='Fix server configuration to serve robots.txt properly',
            issues=[make_issue(
                K.ERROR, 'robots', f"robots.txt returns HTTP {status} error", P.HIGH,
                impact='Search engines cannot access crawling instructions',
                recommendation='Fix server configuration to serve robots.txt with 200 status'
            )]
        )
    return CheckOutcome(status=S.PASSED, result='File exists and accessible',
                        impact='Proper crawling guidance for search engines')


@check_spec("Robots.txt Syntax", "Check robots.txt syntax and structure", "robots")
def check_robots_syntax(ctx: CheckContext) -> CheckOutcome:
    robots = ctx.robots
    if robots is None:
        return _not_checked("robots.txt")
    if not robots.accessible:
        return CheckOutcome(status=S.INFO, result='robots.txt not available', impact='No directives to validate')
    if not robots.has_user_agent:
        return CheckOutcome(
            status=S.WARNING, result='Missing User-agent directive', impact='Robots.txt may not work as expected',
            recommendation='Add User-agent directive to robots.txt',
            issues=[make_issue(
                K.WARNING, 'robots', 'robots.txt missing User-agent directive', P.MEDIUM,
                impact='Crawling directives may not be applied correctly',
                recommendation='Add "User-agent: *" or specific user-agent directives'
            )]
        )
    return CheckOutcome(status=S.PASSED, result=f"{len(robots.directives)} directives found",
                        impact='Crawling directives can be applied')


@check_spec("Robots.txt Sitemap", "Check for sitemap references in robots.txt", "robots")
def check_robots_sitemap(ctx: CheckContext) -> CheckOutcome:
    robots = ctx.robots
    if robots is None:
        return _not_checked("robots.txt")
    if not robots.accessible:
        return CheckOutcome(status=S.INFO, result='robots.txt not available', impact='No sitemap references to check')
    if not robots.sitemaps:
        return CheckOutcome(
            status=S.INFO, result='No sitemap references found', impact='Missing opportunity to guide search engines',
            recommendation='Add sitemap references to robots.txt',
            issues=[make_issue(
                K.INFO, 'robots', 'No sitemap references in robots.txt', P.LOW,
                impact='Missing opportunity to help search engines discover sitemap',
                recommendation='Add "Sitemap: [URL]" entries to robots.txt', actionable=True
            )]
        )
    return CheckOutcome(status=S.PASSED, result=f"{len(robots.sitemaps)} sitemap(s) referenced",
                        impact='Good sitemap discovery')


# --- SITEMAP ---

@check_spec("XML Sitemap", "Check for XML sitemap existence and validity", "sitemap")
def check_xml_sitemap(ctx: CheckContext) -> CheckOutcome:
    sitemap = ctx.sitemap
    if sitemap is None:
        return _not_checked("Sitemap")
    if sitemap.valid:
        return CheckOutcome(status=S.PASSED, result=f"Valid sitemap found with {sitemap.url_count} URLs",
                            impact='Good site structure discovery for search engines')
    if sitemap.exists:
        return CheckOutcome(
            status=S.WARNING, result='Sitemap found but may be invalid', impact='Sitemap may not be processed correctly',
            recommendation='Ensure sitemap follows XML sitemap protocol',
            issues=[make_issue(
                K.WARNING, 'sitemap', 'Sitemap found but appears to be invalid XML', P.MEDIUM,
                affected_element=sitemap.found_url,
                impact='Search engines may not process sitemap correctly',
                recommendation='Validate sitemap XML structure and ensure it follows sitemap protocol'
            )]
        )
    return CheckOutcome(
        status=S.WARNING, result='No sitemap found', impact='Search engines may have difficulty discovering all pages',
        recommendation='Create and submit an XML sitemap',
        issues=[make_issue(
            K.WARNING, 'sitemap', 'No XML sitemap found', P.MEDIUM,
            impact='Search engines may have difficulty discovering all pages',
            recommendation='Create an XML sitemap and submit it to search engines'
        )]
    )


# --- SITE STRUCTURE ---

@check_spec("Site Accessibility", "Check if main site is accessible", "crawling")
def check_site_accessibility(ctx: CheckContext) -> CheckOutcome:
    status = ctx.http_status
    if status != 200:
        return CheckOutcome(
            status=S.FAILED, result=f"HTTP {status} error", impact='Site cannot be crawled',
            recommendation='Fix server issues to ensure site accessibility',
            issues=[make_issue(
                K.ERROR, 'crawling', f"Site returns HTTP {status} error", P.HIGH,
                impact='Site cannot be crawled by search engines',
                recommendation='Fix server configuration to return 200 status'
            )]
        )
    return CheckOutcome(status=S.PASSED, result='Site accessible', impact='Site can be properly crawled')


@check_spec("Navigation Structure", "Check for clear navigation structure", "structure")
def check_navigation(ctx: CheckContext) -> CheckOutcome:
    if ctx.document.first_match(NAVIGATION_SELECTORS) is None:
        return CheckOutcome(
            status=S.WARNING, result='No clear navigation found', impact='Poor user experience and crawlability',
            recommendation='Add clear navigation structure with nav element',
            issues=[make_issue(
                K.WARNING, 'structure', 'No clear navigation structure found', P.MEDIUM,
                impact='Poor user experience and search engine crawlability',
                recommendation='Add clear navigation structure using nav element or ARIA roles'
            )]
        )
    return CheckOutcome(status=S.PASSED, result='Navigation structure found',
                        impact='Good site structure for users and search engines')


@check_spec("Breadcrumb Navigation", "Check for breadcrumb navigation", "structure")
def check_breadcrumbs(ctx: CheckContext) -> CheckOutcome:
    if ctx.document.first_match(BREADCRUMB_SELECTORS) is not None:
        return CheckOutcome(status=S.PASSED, result='Breadcrumbs found', impact='Clear navigation aid')

    internal, _ = LinkDiscoveryService().count_links(ctx.document, ctx.url)
    if internal > BREADCRUMB_LINK_THRESHOLD:
        return CheckOutcome(
            status=S.INFO, result='No breadcrumbs found', impact='Missing navigation aid for complex sites',
            recommendation='Consider adding breadcrumb navigation for better UX',
            issues=[make_issue(
                K.INFO, 'structure', 'No breadcrumb navigation found', P.LOW,
                impact='Missing navigation aid for users and search engines',
                recommendation='Consider adding breadcrumb navigation for better user experience', actionable=True
            )]
        )
    return CheckOutcome(status=S.INFO, result=f"No breadcrumbs needed ({internal} internal links)",
                        impact='Simple site structure')


SITE_CHECKS = [
    check_robots_file,
    check_robots_syntax,
    check_robots_sitemap,
    check_xml_sitemap,
    check_site_accessibility,
    check_navigation,
    check_breadcrumbs,
]

# Run against every crawled page of the site.
SITE_PAGE_CHECKS = [
    check_http_status,
    check_robots_indexing,
    check_canonical,
]
