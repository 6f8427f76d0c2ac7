# src/crawler/page_filters/blog_post_filter.py
import logging
import re
from urllib.parse import urlparse

from crawler.model import DiscoveredLink
from crawler.page_filters.page_filter_base import PageFilterBase
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

BLOG_PATH_PATTERNS = [
    re.compile(r"/blog/", re.IGNORECASE),
    re.compile(r"/articles?/", re.IGNORECASE),
    re.compile(r"/posts?/", re.IGNORECASE),
    re.compile(r"/news/", re.IGNORECASE),
    re.compile(r"/insights?/", re.IGNORECASE),
    re.compile(r"/resources?/", re.IGNORECASE),
    re.compile(r"/learn/", re.IGNORECASE),
    re.compile(r"/guides?/", re.IGNORECASE),
]

BLOG_ANCHOR_KEYWORDS = ("blog", "article", "post", "news", "insight", "resource", "guide", "learn")


class BlogPostFilter(PageFilterBase):
    """Keeps same-host links whose path or anchor text looks like blog content."""

    def apply(self, link: DiscoveredLink) -> bool:
        if not UrlUtils.is_same_host(link.url, self.base_url):
            return False

        path = urlparse(link.url).path
        if any(pattern.search(path) for pattern in BLOG_PATH_PATTERNS):
            return True

        anchor = link.anchor.lower()
        if any(keyword in anchor for keyword in BLOG_ANCHOR_KEYWORDS):
            logger.debug("BlogPostFilter: anchor text match for %s", link.url)
            return True
        return False
