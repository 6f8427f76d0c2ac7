# tests/auditor/test_modules.py
import pytest

from auditor.errors import UnknownModuleError
from auditor.model import Effort, IssueKind, Priority, QuickWin
from auditor.modules.quick_wins import estimate_minutes, format_estimate, implementation_plan
from auditor.modules.registry import ModuleRegistry


@pytest.mark.parametrize("estimate, minutes", [
    ("5 minutes", 5),
    ("30 minutes", 30),
    ("1 hour", 60),
    ("1-2 hours", 60),
    ("ongoing", 240),
])
def test_estimate_minutes(estimate, minutes):
    assert estimate_minutes(estimate) == minutes


@pytest.mark.parametrize("minutes, text", [
    (0, "0 minutes"),
    (45, "45 minutes"),
    (60, "1 hours"),
    (100, "1.7 hours"),
    (120, "2 hours"),
])
def test_format_estimate(minutes, text):
    assert format_estimate(minutes) == text


def win(message, effort, time_to_implement):
    return QuickWin(
        kind=IssueKind.WARNING, category="meta", message=message, priority=Priority.MEDIUM,
        effort=effort, rank=5, time_to_implement=time_to_implement, expected_impact="Better CTR"
    )


def test_implementation_plan_buckets():
    wins = [
        win("title", Effort.EASY, "5 minutes"),
        win("https", Effort.MEDIUM, "1-2 hours"),
        win("images", Effort.EASY, "1 hour"),
        win("rewrite", Effort.HARD, "ongoing"),
    ]

    plan = implementation_plan(wins)

    assert plan == {
        "immediate": ["title"],
        "short_term": ["https", "images"],
        "long_term": ["rewrite"],
    }


def test_registry_discovers_all_modules():
    assert ModuleRegistry.names() == ["audit", "blog_content", "page_speed", "quick_wins", "site", "technical"]


@pytest.mark.parametrize("alias, name", [
    ("quickwins", "quick_wins"),
    ("blog", "blog_content"),
    ("speed", "page_speed"),
    ("seo", "audit"),
    ("technical", "technical"),
])
def test_registry_resolves_aliases(alias, name):
    assert ModuleRegistry.get(alias).name == name


def test_registry_returns_fresh_instances():
    assert ModuleRegistry.get("site") is not ModuleRegistry.get("site")


def test_unknown_module_lists_available_names():
    with pytest.raises(UnknownModuleError) as excinfo:
        ModuleRegistry.get("backlinks")

    assert "backlinks" in str(excinfo.value)
    assert "technical" in str(excinfo.value)
