# tests/conftest.py
import asyncio
from typing import Dict, Optional, Union

import pytest

from crawler.errors import RetrievalError
from crawler.model import RetrievalResult
from auditor.dom.builder import DOMBuilder

PageSpec = Union[str, RetrievalResult, Exception]


class FakeRetrieval:
    """
    Stands in for RetrievalService. Pages are given as HTML strings (served
    with status 200), full RetrievalResults, or exceptions to raise. Unknown
    URLs raise RetrievalError, as an exhausted relay chain would.
    """

    def __init__(self, pages: Optional[Dict[str, PageSpec]] = None, delay: float = 0.0, elapsed_ms: int = 120):
        self.pages = pages or {}
        self.delay = delay
        self.elapsed_ms = elapsed_ms
        self.calls = []
        self.cancelled = []
        self.closed = False

    async def fetch(self, url: str, timeout_ms: Optional[int] = None) -> RetrievalResult:
        self.calls.append(url)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled.append(url)
                raise
        page = self.pages.get(url)
        if page is None:
            raise RetrievalError(url, tried_count=5, last_error="ClientConnectorError")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, str):
            return RetrievalResult(url=url, raw_content=page, http_status=200, elapsed_ms=self.elapsed_ms)
        return page

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_retrieval():
    """Factory fixture: fake_retrieval({url: html}, delay=...)."""
    return FakeRetrieval


@pytest.fixture
def parse():
    builder = DOMBuilder()
    return builder.parse_doc


def html_page(title: str = "Example Domain Homepage For Testing Purposes", body: str = "", head: str = "") -> str:
    return (
        f"<!DOCTYPE html><html lang=\"en\"><head><title>{title}</title>{head}</head>"
        f"<body>{body}</body></html>"
    )


@pytest.fixture
def make_page():
    return html_page
