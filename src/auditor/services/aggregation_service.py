import logging
from typing import Any, Dict, List, Optional

from auditor.model import CheckRecord, Issue, PageFinding, Report

logger = logging.getLogger(__name__)


class AggregationService:
    """
    Folds the issues, check records and findings of one analysis into a Report.

    Actionable items keep emission order unless `rank_actionable` is set, in
    which case they are stable-sorted by priority rank (high first).
    """

    def __init__(self, rank_actionable: bool = True):
        self.rank_actionable = rank_actionable

    def actionable_items(self, issues: List[Issue]) -> List[Issue]:
        items = [issue for issue in issues if issue.actionable]
        if self.rank_actionable:
            items = sorted(items, key=lambda issue: issue.priority.rank, reverse=True)
        return items

    def aggregate(
            self,
            url: str,
            module: str,
            score: int,
            issues: List[Issue],
            checks: List[CheckRecord],
            findings: Optional[List[PageFinding]] = None,
            metrics: Optional[Dict[str, Any]] = None,
            summary: Optional[Dict[str, Any]] = None
    ) -> Report:
        report = Report(
            url=url,
            module=module,
            score=score,
            issues=list(issues),
            actionable_items=self.actionable_items(issues),
            all_checks=list(checks),
            metrics=metrics or {},
            findings=list(findings) if findings is not None else None,
            summary=summary or {}
        )
        logger.info(
            "%s report for %s: score %d, %d issues, %d checks",
            module, url, score, len(report.issues), len(report.all_checks)
        )
        return report
