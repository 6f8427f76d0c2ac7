# tests/auditor/test_scoring_aggregation.py
import pytest

from auditor.checks.core import make_issue
from auditor.model import ContentMetrics, IssueKind as K, PageFinding, Priority as P, QualityTier
from auditor.services.aggregation_service import AggregationService
from auditor.services.scoring_service import (
    TECHNICAL_TABLE, BlogScoringService, DeductionTable, ScoringService, clamp_score, round_half_up
)


def issue(kind, priority, message="msg", category="meta", **fields):
    return make_issue(kind, category, message, priority, **fields)


def test_technical_deductions():
    issues = [issue(K.ERROR, P.HIGH), issue(K.WARNING, P.MEDIUM), issue(K.INFO, P.LOW), issue(K.SUCCESS, P.LOW)]
    assert ScoringService(TECHNICAL_TABLE).score(issues) == 100 - 20 - 6 - 1


def test_score_is_clamped_at_zero():
    issues = [issue(K.ERROR, P.HIGH)] * 6
    assert ScoringService(TECHNICAL_TABLE).score(issues) == 0


def test_score_of_no_issues_is_perfect():
    assert ScoringService(TECHNICAL_TABLE).score([]) == 100


def test_deduction_table_build_maps_priorities():
    table = DeductionTable.build(error=(9, 5, 1), warning=(4, 2, 0), info=3)

    assert table.deduction(issue(K.ERROR, P.MEDIUM)) == 5
    assert table.deduction(issue(K.WARNING, P.HIGH)) == 4
    assert table.deduction(issue(K.INFO, P.HIGH)) == 3
    assert table.deduction(issue(K.SUCCESS, P.HIGH)) == 0


@pytest.mark.parametrize("value, expected", [(-5, 0), (0, 0), (57.9, 57), (100, 100), (140, 100)])
def test_clamp_score(value, expected):
    assert clamp_score(value) == expected


@pytest.mark.parametrize("value, expected", [(0.5, 1), (1.4, 1), (2.5, 3), (3.5, 4), (2.49, 2)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def blog_post(words=500, meta=True, h1=1, h2=1, missing_alt=0):
    tier = QualityTier.THIN if words < 300 else QualityTier.ADEQUATE
    return PageFinding(
        url="https://example.com/blog/post",
        title="Post",
        content_metrics=ContentMetrics(
            word_count=words, has_meta_description=meta, h1_count=h1, h2_count=h2, images_without_alt=missing_alt
        ),
        quality_tier=tier
    )


def test_blog_score_counts_each_problem():
    findings = [blog_post(words=100), blog_post(meta=False), blog_post(h1=0), blog_post(missing_alt=2)]
    assert BlogScoringService().score(findings) == 100 - 10 - 8 - 5 - 3


def test_blog_alt_text_deduction_is_capped():
    findings = [blog_post(missing_alt=1) for _ in range(10)]
    assert BlogScoringService().score(findings) == 80


def test_actionable_items_are_stable_sorted_by_priority():
    a = issue(K.WARNING, P.LOW, "a")
    b = issue(K.ERROR, P.HIGH, "b")
    c = issue(K.WARNING, P.MEDIUM, "c")
    d = issue(K.INFO, P.HIGH, "d")
    e = issue(K.WARNING, P.HIGH, "e")

    ranked = AggregationService().actionable_items([a, b, c, d, e])
    emitted = AggregationService(rank_actionable=False).actionable_items([a, b, c, d, e])

    assert [i.message for i in ranked] == ["b", "e", "c", "a"]
    assert [i.message for i in emitted] == ["a", "b", "c", "e"]


def test_informational_issue_can_be_actionable():
    assert issue(K.INFO, P.LOW, actionable=True).actionable
    assert not issue(K.SUCCESS, P.LOW).actionable


def test_aggregate_builds_report_and_groups_categories():
    issues = [
        issue(K.ERROR, P.HIGH, "first", category="meta"),
        issue(K.WARNING, P.LOW, "second", category="images"),
        issue(K.WARNING, P.MEDIUM, "third", category="meta"),
    ]

    report = AggregationService().aggregate("https://example.com", "technical", 70, issues, [])

    assert report.score == 70
    assert report.findings is None
    grouped = report.issues_by_category()
    assert list(grouped) == ["meta", "images"]
    assert [i.message for i in grouped["meta"]] == ["first", "third"]
    assert report.count_by_kind() == {"error": 1, "warning": 2, "info": 0, "success": 0}
