# src/crawler/services/link_discovery_service.py
import logging
from typing import List, Optional, Tuple, Any, Iterable

from crawler.model import DiscoveredLink
from crawler.page_filters.page_filter_base import PageFilterBase
from crawler.page_filters.registry import FilterRegistry
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class LinkDiscoveryService:
    """
    Turns the anchors of a parsed page into crawl candidates.

    The document only needs a `links` sequence whose items expose `href`,
    `text` and `rel` (see auditor.dom.elements.link.LinkElement).
    """

    def __init__(self, max_candidates: int = 20):
        self.max_candidates = max_candidates

    def extract_links(self, document: Any, base_url: str) -> List[DiscoveredLink]:
        """Resolves every navigable anchor on the page. Unresolvable hrefs are skipped."""
        resolved: List[DiscoveredLink] = []
        for link in getattr(document, "links", []) or []:
            href = link.href
            if not UrlUtils.is_navigable_href(href):
                continue
            absolute_url = UrlUtils.resolve(base_url, href)
            if absolute_url is None:
                continue
            resolved.append(DiscoveredLink(
                url=UrlUtils.normalize_url(absolute_url, absolute_url),
                anchor=link.text or "",
                rel=link.rel,
                is_internal=UrlUtils.is_same_host(absolute_url, base_url)
            ))
        return resolved

    def count_links(self, document: Any, base_url: str) -> Tuple[int, int]:
        """Returns (internal, external) anchor counts."""
        links = self.extract_links(document, base_url)
        internal = sum(1 for link in links if link.is_internal)
        return internal, len(links) - internal

    def discover(
            self,
            document: Any,
            base_url: str,
            page_filter: Optional[PageFilterBase] = None,
            filter_name: str = "blog_post"
    ) -> List[str]:
        """
        Returns de-duplicated candidate URLs in first-seen order, capped at max_candidates.

        Args:
            document: The seed page's parsed document.
            base_url: The seed URL; candidates must share its hostname.
            page_filter: Filter instance to apply. When omitted, the filter
                         registered under `filter_name` is built for base_url.
        """
        if page_filter is None:
            page_filter = FilterRegistry.get(filter_name)(base_url)

        candidates = self._dedupe(
            link.url for link in self.extract_links(document, base_url) if page_filter.apply(link)
        )
        logger.info(
            "Discovered %d candidate pages on %s (%s)",
            len(candidates), base_url, type(page_filter).__name__
        )
        return candidates[:self.max_candidates]

    @staticmethod
    def _dedupe(urls: Iterable[str]) -> List[str]:
        seen = set()
        ordered = []
        for url in urls:
            if url not in seen:
                seen.add(url)
                ordered.append(url)
        return ordered
