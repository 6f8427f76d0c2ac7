# tests/auditor/test_technical_checks.py
import pytest

from auditor.checks.core import CheckCatalog, CheckContext, CheckOutcome, check_spec
from auditor.checks.technical import (
    TECHNICAL_CHECKS, check_canonical, check_robots_indexing, check_title, has_hierarchy_gap
)
from auditor.model import CheckStatus, IssueKind, Priority


def run_check(check, parse, url, html):
    catalog = CheckCatalog("single", [check])
    context = CheckContext(url=url, document=parse(url, html))
    result = catalog.run(context)
    assert len(result.records) == 1
    return result.records[0], result.issues


def test_title_of_45_characters_is_success(parse, make_page):
    record, issues = run_check(check_title, parse, "https://example.com", make_page(title="x" * 45))

    assert record.status == CheckStatus.PASSED
    assert len(issues) == 1
    assert issues[0].kind == IssueKind.SUCCESS
    assert issues[0].priority == Priority.LOW
    assert "45" in issues[0].message
    assert issues[0].check_name == "Title Tag"


def test_short_title_is_medium_warning_recommending_expansion(parse, make_page):
    record, issues = run_check(check_title, parse, "https://example.com", make_page(title="x" * 10))

    assert record.status == CheckStatus.WARNING
    assert issues[0].kind == IssueKind.WARNING
    assert issues[0].priority == Priority.MEDIUM
    assert "Expand" in issues[0].recommendation


def test_missing_title_is_high_error(parse):
    record, issues = run_check(check_title, parse, "https://example.com", "<html><head></head><body></body></html>")

    assert record.status == CheckStatus.FAILED
    assert issues[0].kind == IssueKind.ERROR
    assert issues[0].priority == Priority.HIGH


CANONICAL = '<link rel="canonical" href="https://example.com/page">'


def test_self_referencing_canonical(parse, make_page):
    record, issues = run_check(check_canonical, parse, "https://example.com/page", make_page(head=CANONICAL))

    assert record.status == CheckStatus.PASSED
    assert issues[0].kind == IssueKind.SUCCESS
    assert "Self-referencing" in issues[0].message


def test_canonical_pointing_elsewhere_is_info(parse, make_page):
    record, issues = run_check(check_canonical, parse, "https://example.com/other", make_page(head=CANONICAL))

    assert record.status == CheckStatus.INFO
    assert issues[0].kind == IssueKind.INFO
    assert "points to different URL" in issues[0].message
    assert not issues[0].actionable


def test_relative_canonical_resolves_against_page(parse, make_page):
    _, issues = run_check(
        check_canonical, parse, "https://example.com/page#intro", make_page(head='<link rel="canonical" href="/page">')
    )
    assert issues[0].kind == IssueKind.SUCCESS


def test_catalog_yields_one_record_per_check(parse, make_page):
    catalog = CheckCatalog("technical", TECHNICAL_CHECKS)
    result = catalog.run(CheckContext(url="https://example.com", document=parse("https://example.com", make_page())))

    assert len(result.records) == len(TECHNICAL_CHECKS) == 13
    assert [r.name for r in result.records] == catalog.check_names


def test_crashing_check_becomes_failed_record_and_error_issue(parse, make_page):
    @check_spec("Exploding Check", "Always raises", "structure")
    def exploding(ctx):
        raise RuntimeError("boom")

    @check_spec("Quiet Check", "Always passes")
    def quiet(ctx):
        return CheckOutcome(status=CheckStatus.PASSED, result="fine")

    catalog = CheckCatalog("test", [exploding, quiet])
    result = catalog.run(CheckContext(url="https://example.com", document=parse("https://example.com", make_page())))

    assert [r.status for r in result.records] == [CheckStatus.FAILED, CheckStatus.PASSED]
    assert len(result.issues) == 1
    assert result.issues[0].kind == IssueKind.ERROR
    assert result.issues[0].category == "structure"
    assert "boom" in result.issues[0].message


def test_undecorated_check_is_rejected():
    def plain(ctx):
        return None

    with pytest.raises(TypeError):
        CheckCatalog("bad", [plain])


@pytest.mark.parametrize("levels, expected", [
    ([1, 2, 3, 2], False),
    ([1, 3], True),
    ([2, 4, 2], True),
    ([], False),
])
def test_hierarchy_gap(levels, expected):
    assert has_hierarchy_gap(levels) is expected


def test_noindex_robots_meta_is_high_error(parse, make_page):
    record, issues = run_check(
        check_robots_indexing, parse, "https://example.com",
        make_page(head='<meta name="robots" content="noindex, follow">')
    )
    assert record.status == CheckStatus.FAILED
    assert issues[0].message == 'Page blocked from indexing (noindex)'
