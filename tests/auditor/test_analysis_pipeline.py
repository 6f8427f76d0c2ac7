# tests/auditor/test_analysis_pipeline.py
import asyncio

import pytest

from auditor.dom.builder import DOMBuilder
from auditor.dom.registry import DOMRegistry
from auditor.model import CheckStatus, IssueKind, Priority
from sitelens.api import analyze_audit, analyze_page_speed, analyze_quick_wins, analyze_technical

SEED = "https://example.com"

GOOD_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Example Widgets - Handmade Widgets Shipped Worldwide</title>
  <meta name="description" content="{desc}">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link rel="canonical" href="https://example.com/">
  <meta property="og:title" content="Example Widgets">
  <meta property="og:description" content="Handmade widgets">
  <meta property="og:image" content="https://example.com/og.png">
  <script type="application/ld+json">{{"@context": "https://schema.org", "@type": "Organization"}}</script>
</head>
<body>
  <header><nav><a href="/about">About</a><a href="/shop">Shop</a></nav></header>
  <main>
    <h1>Handmade widgets</h1>
    <h2>Why ours</h2>
    <img src="/a.png" alt="A widget" width="100" height="100">
    <a href="https://partner.example.org">Partner</a>
  </main>
  <footer>Footer</footer>
</body>
</html>""".format(desc="Handmade widgets built to last, shipped worldwide from our small workshop. " * 2)

BARE_PAGE = "<html><head><title>Short</title></head><body><p>hi</p></body></html>"


@pytest.mark.asyncio
async def test_technical_report_shape(fake_retrieval):
    retrieval = fake_retrieval({SEED: GOOD_PAGE})

    report = await analyze_technical(SEED, retrieval=retrieval)

    assert report.module == "technical"
    assert 0 <= report.score <= 100
    assert len(report.all_checks) == 13
    assert all(item in report.issues for item in report.actionable_items)
    assert all(item.actionable for item in report.actionable_items)
    assert report.metrics["response_code"] == 200
    assert report.metrics["title_length"] == len("Example Widgets - Handmade Widgets Shipped Worldwide")
    assert report.summary["partial"] is False
    assert report.findings is None
    assert not retrieval.closed


@pytest.mark.asyncio
async def test_actionable_items_are_ranked_by_priority(fake_retrieval):
    report = await analyze_technical("http://example.com", retrieval=fake_retrieval({"http://example.com": BARE_PAGE}))

    ranks = [issue.priority.rank for issue in report.actionable_items]
    assert ranks == sorted(ranks, reverse=True)
    assert report.score < 100


@pytest.mark.asyncio
async def test_input_url_is_normalized(fake_retrieval):
    retrieval = fake_retrieval({SEED: GOOD_PAGE})

    report = await analyze_technical("  example.com ", retrieval=retrieval)

    assert retrieval.calls[0] == SEED
    assert report.url == SEED


@pytest.mark.asyncio
async def test_seed_retrieval_failure_yields_failure_report(fake_retrieval):
    report = await analyze_technical(SEED, retrieval=fake_retrieval())

    assert report.score == 0
    assert len(report.issues) == 1
    issue = report.issues[0]
    assert issue.kind == IssueKind.ERROR
    assert issue.priority == Priority.HIGH
    assert issue.message.startswith("Technical analysis failed: All proxy attempts failed")
    assert [(r.name, r.status) for r in report.all_checks] == [("Page Analysis", CheckStatus.FAILED)]
    assert report.actionable_items == report.issues


@pytest.mark.asyncio
async def test_reruns_are_identical(fake_retrieval):
    first = await analyze_technical(SEED, retrieval=fake_retrieval({SEED: GOOD_PAGE}))
    second = await analyze_technical(SEED, retrieval=fake_retrieval({SEED: GOOD_PAGE}))

    assert first.model_dump(exclude={"timestamp_utc"}) == second.model_dump(exclude={"timestamp_utc"})


@pytest.mark.asyncio
async def test_concurrent_runs_do_not_share_state(fake_retrieval):
    other = "http://bare.example.com"
    retrieval = fake_retrieval({SEED: GOOD_PAGE, other: BARE_PAGE})

    good, bare = await asyncio.gather(
        analyze_technical(SEED, retrieval=retrieval),
        analyze_technical(other, retrieval=retrieval),
    )

    assert len(good.all_checks) == len(bare.all_checks) == 13
    assert good.score > bare.score
    assert all(r.url is None for r in good.all_checks)


@pytest.mark.asyncio
async def test_preset_cancel_event_returns_partial_failure_report(fake_retrieval):
    cancel_event = asyncio.Event()
    cancel_event.set()

    report = await analyze_technical(SEED, cancel_event=cancel_event, retrieval=fake_retrieval({SEED: GOOD_PAGE}))

    assert report.score == 0
    assert report.summary["partial"] is True
    assert "cancelled" in report.issues[0].message


@pytest.mark.asyncio
async def test_deadline_during_seed_fetch(fake_retrieval):
    retrieval = fake_retrieval({SEED: GOOD_PAGE}, delay=5.0)

    report = await asyncio.wait_for(analyze_technical(SEED, deadline_s=0.1, retrieval=retrieval), timeout=2)

    assert report.summary["partial"] is True
    assert "deadline" in report.issues[0].message
    assert retrieval.cancelled == [SEED]


@pytest.mark.asyncio
async def test_quick_wins_are_ordered_by_rank(fake_retrieval):
    report = await analyze_quick_wins("http://example.com", retrieval=fake_retrieval({"http://example.com": BARE_PAGE}))

    ranks = [issue.rank for issue in report.issues]
    assert ranks == sorted(ranks, reverse=True)
    assert report.issues[0].message == report.summary["implementation_plan"]["short_term"][0]
    assert report.summary["total_time_estimate"] == "1.7 hours"
    assert report.metrics["total_wins"] == len(report.issues) == 8
    assert len(report.all_checks) == 10


@pytest.mark.asyncio
async def test_quick_wins_failure_report(fake_retrieval):
    report = await analyze_quick_wins(SEED, retrieval=fake_retrieval())

    win = report.issues[0]
    assert win.rank == 10
    assert win.time_to_implement == "5 minutes"
    assert win.message.startswith("Quick wins analysis failed")


@pytest.mark.asyncio
async def test_page_speed_report(fake_retrieval):
    report = await analyze_page_speed(SEED, retrieval=fake_retrieval({SEED: GOOD_PAGE}))

    assert len(report.all_checks) == 7
    vitals = report.summary["core_web_vitals"]
    assert vitals["lcp"]["rating"] == "good"
    assert vitals["cls"]["value"] == 0.05
    titles = [o["title"] for o in report.summary["optimization_opportunities"]]
    assert titles[0] == "Enable Text Compression"
    assert "Leverage Browser Caching" in titles
    assert report.metrics["compression_enabled"] is False


@pytest.mark.asyncio
async def test_page_speed_failure_issue_is_performance_issue(fake_retrieval):
    report = await analyze_page_speed(SEED, retrieval=fake_retrieval())

    assert report.issues[0].message.startswith("Performance analysis failed")
    assert report.issues[0].time_to_fix == "5 minutes"


@pytest.mark.asyncio
async def test_audit_report(fake_retrieval):
    report = await analyze_audit(SEED, retrieval=fake_retrieval({SEED: GOOD_PAGE}))

    assert len(report.all_checks) == 18
    assert report.metrics["image_count"] == 1
    assert report.metrics["images_without_alt"] == 0
    assert report.metrics["internal_links"] == 2
    assert report.metrics["external_links"] == 1
    assert 0 <= report.score <= 100


@pytest.fixture
def failing_image_parser(monkeypatch):
    DOMRegistry.discover()

    def explode(tag):
        raise ValueError("unexpected image markup")

    monkeypatch.setattr(DOMRegistry.get_definition("img"), "parser", explode)


def test_failing_element_parser_gives_empty_document(failing_image_parser):
    document = DOMBuilder().parse_doc(SEED, GOOD_PAGE)

    assert document.parse_failed
    assert document.images == []
    assert not document.head.has_title


@pytest.mark.asyncio
async def test_failing_element_parser_still_yields_report(failing_image_parser, fake_retrieval):
    report = await analyze_technical(SEED, retrieval=fake_retrieval({SEED: GOOD_PAGE}))

    assert report.module == "technical"
    assert len(report.all_checks) == 13
    assert any(i.message == "Missing title tag" for i in report.issues)
    assert 0 <= report.score <= 100


def test_open_graph_properties_are_collected_per_document():
    builder = DOMBuilder()

    head = builder.parse_doc(SEED, GOOD_PAGE).head
    bare = builder.parse_doc(SEED, BARE_PAGE).head

    assert head.open_graph == {
        "og:title": "Example Widgets",
        "og:description": "Handmade widgets",
        "og:image": "https://example.com/og.png",
    }
    assert head.open_graph_core == ["og:title", "og:description", "og:image"]
    assert bare.open_graph == {}


def test_element_definitions_bind_parsers_to_document_fields():
    DOMRegistry.discover()

    assert sorted(DOMRegistry.collections()) == ["headings", "images", "links", "scripts"]
    assert [d.collection for d in DOMRegistry.document_definitions()] == ["head"]
    assert DOMRegistry.get_definition("h3").collection == "headings"
    assert DOMRegistry.get_definition("head") is None
