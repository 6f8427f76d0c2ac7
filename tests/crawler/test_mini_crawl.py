# tests/crawler/test_mini_crawl.py
import asyncio

import pytest

from crawler.controllers.mini_crawl_controller import MiniCrawlController
from crawler.model import CrawlSettings


def analyze_title(url, result):
    return ("ok", url, result.http_status)


def placeholder(url, reason):
    return ("placeholder", url, reason)


@pytest.mark.asyncio
async def test_failed_candidate_degrades_to_placeholder(fake_retrieval):
    retrieval = fake_retrieval({
        "https://example.com/blog/a": "<html>a</html>",
        "https://example.com/blog/c": "<html>c</html>",
    })
    controller = MiniCrawlController(retrieval, CrawlSettings(concurrency=2))

    outcome = await controller.run(
        ["https://example.com/blog/a", "https://example.com/blog/b", "https://example.com/blog/c"],
        analyze_title, placeholder
    )

    assert [r[0] for r in outcome.results] == ["ok", "placeholder", "ok"]
    assert [r[1] for r in outcome.results] == [
        "https://example.com/blog/a", "https://example.com/blog/b", "https://example.com/blog/c"
    ]
    assert outcome.failures == 1
    assert outcome.attempted == 3
    assert not outcome.partial


@pytest.mark.asyncio
async def test_analyzer_exception_degrades_to_placeholder(fake_retrieval):
    retrieval = fake_retrieval({"https://example.com/blog/a": "<html>a</html>"})

    def broken(url, result):
        raise ValueError("unexpected markup")

    outcome = await MiniCrawlController(retrieval).run(["https://example.com/blog/a"], broken, placeholder)

    assert outcome.results == [("placeholder", "https://example.com/blog/a", "ValueError: unexpected markup")]


@pytest.mark.asyncio
async def test_only_max_pages_are_fetched(fake_retrieval):
    urls = [f"https://example.com/blog/{i}" for i in range(20)]
    retrieval = fake_retrieval({url: "<html></html>" for url in urls})

    outcome = await MiniCrawlController(retrieval, CrawlSettings(max_pages=15)).run(urls, analyze_title, placeholder)

    assert len(outcome.results) == 15
    assert len(retrieval.calls) == 15
    assert outcome.attempted == 15


@pytest.mark.asyncio
async def test_empty_candidate_list(fake_retrieval):
    outcome = await MiniCrawlController(fake_retrieval()).run([], analyze_title, placeholder)
    assert outcome.results == []
    assert not outcome.partial


@pytest.mark.asyncio
async def test_preset_cancel_event_returns_partial_outcome(fake_retrieval):
    urls = [f"https://example.com/blog/{i}" for i in range(5)]
    retrieval = fake_retrieval({url: "<html></html>" for url in urls})
    cancel_event = asyncio.Event()
    cancel_event.set()

    outcome = await MiniCrawlController(retrieval, cancel_event=cancel_event).run(urls, analyze_title, placeholder)

    assert outcome.partial
    assert outcome.results == []
    assert retrieval.calls == []


@pytest.mark.asyncio
async def test_deadline_cancels_in_flight_fetches(fake_retrieval):
    urls = [f"https://example.com/blog/{i}" for i in range(6)]
    retrieval = fake_retrieval({url: "<html></html>" for url in urls}, delay=5.0)

    controller = MiniCrawlController(retrieval, CrawlSettings(concurrency=3), deadline_s=0.1)
    outcome = await asyncio.wait_for(controller.run(urls, analyze_title, placeholder), timeout=2)

    assert outcome.partial
    assert outcome.results == []
    assert len(retrieval.cancelled) == 3


@pytest.mark.asyncio
async def test_cancel_event_mid_crawl_keeps_finished_pages(fake_retrieval):
    fast = "https://example.com/blog/fast"
    slow = "https://example.com/blog/slow"
    retrieval = fake_retrieval({fast: "<html></html>", slow: "<html></html>"})
    cancel_event = asyncio.Event()

    original_fetch = retrieval.fetch

    async def fetch(url, timeout_ms=None):
        if url == slow:
            cancel_event.set()
            await asyncio.sleep(5)
        return await original_fetch(url, timeout_ms)

    retrieval.fetch = fetch
    controller = MiniCrawlController(retrieval, CrawlSettings(concurrency=1), cancel_event=cancel_event)
    outcome = await asyncio.wait_for(controller.run([fast, slow], analyze_title, placeholder), timeout=2)

    assert outcome.partial
    assert outcome.results == [("ok", fast, 200)]
