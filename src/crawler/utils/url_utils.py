# src/crawler/utils/url_utils.py
import os
import logging
from typing import Optional
from urllib.parse import urlparse, urljoin, urlunparse, quote

logger = logging.getLogger(__name__)

# Extensions that may still be an HTML page. "" covers extensionless paths.
PAGE_EXTENSIONS = {
    "", ".htm", ".html", ".xhtml", ".shtml", ".php", ".asp", ".aspx",
    ".jsp", ".jspx", ".do", ".action", ".cfm", ".cgi", ".pl",
}

NON_NAVIGABLE_PREFIXES = ("#", "mailto:", "tel:", "javascript:", "data:")


class UrlUtils:
    """A collection of static methods for URL parsing and manipulation."""

    @staticmethod
    def normalize_input_url(url: str) -> str:
        """Trims user input, lowercases an http(s) scheme and prefixes https:// when none is given."""
        url = (url or "").strip()
        scheme, sep, rest = url.partition("://")
        if sep and scheme.lower() in ("http", "https"):
            return scheme.lower() + sep + rest
        return "https://" + url

    @staticmethod
    def encode_component(url: str) -> str:
        """Percent-encodes a URL so it can be embedded as a query value."""
        return quote(url, safe="-_.!~*'()")

    @staticmethod
    def resolve(base_url: str, href: str) -> Optional[str]:
        """
        Resolves a (possibly relative) href against base_url.
        Returns None when the result is not an http(s) URL with a host.
        """
        try:
            absolute_url = urljoin(base_url, href.strip())
            parsed = urlparse(absolute_url)
        except ValueError:
            logger.debug("Could not resolve href %r against %s", href, base_url)
            return None
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return None
        return absolute_url

    @staticmethod
    def normalize_url(base_url: str, url: str) -> str:
        """
        Creates a clean, absolute URL from a base URL and a potentially relative URL.
        """
        absolute_url = urljoin(base_url, url)
        parsed_url = urlparse(absolute_url)

        if not parsed_url.path:
            parsed_url = parsed_url._replace(path='/')

        # Fragments are client-side only
        parsed_url = parsed_url._replace(fragment='')

        return urlunparse(parsed_url)

    @staticmethod
    def get_base_url(url: str) -> Optional[str]:
        """Extracts the origin (scheme + netloc) from a URL."""
        try:
            parsed_url = urlparse(url)
        except ValueError:
            logger.debug(f"Could not parse invalid URL: {url}")
            return None
        if not parsed_url.scheme or not parsed_url.netloc:
            logger.debug(f"Invalid URL format: {url}")
            return None
        return f"{parsed_url.scheme}://{parsed_url.netloc}"

    @staticmethod
    def hostname(url: str) -> Optional[str]:
        try:
            return urlparse(url).hostname
        except ValueError:
            return None

    @staticmethod
    def is_same_host(url: str, base_url: str) -> bool:
        """True when both URLs resolve to the same hostname."""
        host = UrlUtils.hostname(url)
        return host is not None and host == UrlUtils.hostname(base_url)

    @staticmethod
    def is_navigable_href(href: Optional[str]) -> bool:
        """False for empty hrefs, in-page anchors and non-http pseudo protocols."""
        if href is None:
            return False
        href = href.strip()
        return bool(href) and not href.lower().startswith(NON_NAVIGABLE_PREFIXES)

    @staticmethod
    def is_allowed_extension(url: str) -> bool:
        """
        Checks if a URL's extension is on the whitelist of crawlable page types.
        URLs without an extension are considered valid.
        """
        try:
            path = urlparse(url).path
            _, extension = os.path.splitext(path)
            return extension.lower() in PAGE_EXTENSIONS
        except ValueError:
            return False

    @staticmethod
    def is_crawlable_page(url: str, base_url: str) -> bool:
        """An http(s) URL on the same host whose extension may be an HTML page."""
        try:
            parsed_url = urlparse(url)
        except ValueError:
            return False
        if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
            return False
        return UrlUtils.is_same_host(url, base_url) and UrlUtils.is_allowed_extension(url)

    @staticmethod
    def same_document(url_a: str, url_b: str) -> bool:
        """Compares two absolute URLs after normalization (fragment removed, empty path → '/')."""
        return UrlUtils.normalize_url(url_a, url_a) == UrlUtils.normalize_url(url_b, url_b)
