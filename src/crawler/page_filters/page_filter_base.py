# src/crawler/page_filters/page_filter_base.py
from __future__ import annotations

from abc import ABC, abstractmethod

from crawler.model import DiscoveredLink


class PageFilterBase(ABC):
    """Interface for filters that decide which discovered links become crawl candidates."""

    def __init__(self, base_url: str):
        self.base_url = base_url

    @abstractmethod
    def apply(self, link: DiscoveredLink) -> bool:  # True = keep the candidate
        """Apply the filter to one resolved link."""
        raise NotImplementedError
