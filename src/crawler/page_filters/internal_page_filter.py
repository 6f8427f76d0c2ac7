# src/crawler/page_filters/internal_page_filter.py
from crawler.model import DiscoveredLink
from crawler.page_filters.page_filter_base import PageFilterBase
from crawler.utils.url_utils import UrlUtils


class InternalPageFilter(PageFilterBase):
    """Keeps same-host links that may be HTML pages, excluding the seed page itself."""

    def apply(self, link: DiscoveredLink) -> bool:
        if not UrlUtils.is_crawlable_page(link.url, self.base_url):
            return False
        return not UrlUtils.same_document(link.url, self.base_url)
