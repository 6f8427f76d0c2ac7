import logging
import math
import re
from typing import Any, Dict, List

from .base import AnalysisModule, AnalysisRun
from ..checks.quick_wins import QUICK_WIN_CHECKS
from ..model import Effort, Issue, IssueKind, Priority, QuickWin
from ..services.scoring_service import QUICK_WINS_TABLE

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*(\d+)")
COMPLEX_TASK_MINUTES = 240


def estimate_minutes(time_to_implement: str) -> int:
    """Minutes for a '5 minutes' / '1-2 hours' style estimate; unknown formats count as 4 hours."""
    match = _LEADING_INT.match(time_to_implement)
    value = int(match.group(1)) if match else 0
    if "minutes" in time_to_implement:
        return value
    if "hour" in time_to_implement:
        return value * 60
    return COMPLEX_TASK_MINUTES


def format_estimate(total_minutes: int) -> str:
    if total_minutes < 60:
        return f"{total_minutes} minutes"
    hours = math.floor(total_minutes / 60 * 10 + 0.5) / 10
    return f"{hours:g} hours"


def implementation_plan(wins: List[QuickWin]) -> Dict[str, List[str]]:
    return {
        "immediate": [w.message for w in wins if w.effort == Effort.EASY and "minutes" in w.time_to_implement],
        "short_term": [w.message for w in wins
                       if (w.effort == Effort.EASY and "hour" in w.time_to_implement) or w.effort == Effort.MEDIUM],
        "long_term": [w.message for w in wins if w.effort == Effort.HARD],
    }


class QuickWinsModule(AnalysisModule):
    name = "quick_wins"
    title = "Quick wins"
    description = "Analyze page for quick SEO wins"
    failure_category = "technical"
    checks = QUICK_WIN_CHECKS
    deductions = QUICK_WINS_TABLE

    def order_issues(self, issues: List[Issue]) -> List[Issue]:
        """Highest-ranked wins first; ties keep check order."""
        return sorted(issues, key=lambda issue: getattr(issue, "rank", 0), reverse=True)

    @staticmethod
    def _wins(run: AnalysisRun) -> List[QuickWin]:
        return [issue for issue in run.issues if isinstance(issue, QuickWin)]

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        wins = self._wins(run)
        return {
            "total_wins": len(wins),
            "load_time": run.result.elapsed_ms,
            "response_code": run.result.http_status,
        }

    def summary(self, run: AnalysisRun) -> Dict[str, Any]:
        wins = self.order_issues(self._wins(run))
        total_minutes = sum(estimate_minutes(w.time_to_implement) for w in wins)
        return {
            "implementation_plan": implementation_plan(wins),
            "easy_wins": sum(1 for w in wins if w.effort == Effort.EASY),
            "medium_wins": sum(1 for w in wins if w.effort == Effort.MEDIUM),
            "hard_wins": sum(1 for w in wins if w.effort == Effort.HARD),
            "high_impact": sum(1 for w in wins if w.priority == Priority.HIGH),
            "medium_impact": sum(1 for w in wins if w.priority == Priority.MEDIUM),
            "low_impact": sum(1 for w in wins if w.priority == Priority.LOW),
            "total_time_estimate": format_estimate(total_minutes),
        }

    def failure_issue(self, message: str) -> Issue:
        return QuickWin(
            kind=IssueKind.ERROR,
            category=self.failure_category,
            message=f"{self.title} analysis failed: {message}",
            priority=Priority.HIGH,
            recommendation='Check if URL is accessible and try again',
            impact='Successful SEO analysis',
            check_name='Page Analysis',
            effort=Effort.EASY,
            rank=10,
            time_to_implement='5 minutes',
            expected_impact='Successful SEO analysis'
        )


MODULE = QuickWinsModule
