import logging
import math
from typing import Dict, Iterable, List

from auditor.model import Issue, IssueKind, PageFinding, Priority, QualityTier
from auditor.checks.content import has_poor_structure

logger = logging.getLogger(__name__)


def clamp_score(score: float) -> int:
    return int(max(0, min(100, score)))


def round_half_up(value: float) -> int:
    """Rounds .5 upwards, unlike the built-in round()."""
    return math.floor(value + 0.5)


class DeductionTable:
    """
    Points deducted from a perfect score of 100, keyed by issue kind and priority.
    Info issues deduct a flat amount; success issues deduct nothing.
    """

    def __init__(self, error: Dict[Priority, int], warning: Dict[Priority, int], info: int = 0):
        self.error = error
        self.warning = warning
        self.info = info

    @classmethod
    def build(cls, error=(0, 0, 0), warning=(0, 0, 0), info: int = 0) -> "DeductionTable":
        """Shorthand taking (high, medium, low) tuples."""
        keys = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)
        return cls(dict(zip(keys, error)), dict(zip(keys, warning)), info)

    def deduction(self, issue: Issue) -> int:
        if issue.kind == IssueKind.ERROR:
            return self.error[issue.priority]
        if issue.kind == IssueKind.WARNING:
            return self.warning[issue.priority]
        if issue.kind == IssueKind.INFO:
            return self.info
        return 0


TECHNICAL_TABLE = DeductionTable.build(error=(20, 12, 6), warning=(10, 6, 3), info=1)
QUICK_WINS_TABLE = DeductionTable.build(error=(15, 8, 3), warning=(15, 8, 3), info=0)
PAGE_SPEED_TABLE = DeductionTable.build(error=(25, 15, 8), warning=(12, 8, 4), info=2)
SITE_TABLE = DeductionTable.build(error=(20, 12, 6), warning=(10, 6, 3), info=2)
AUDIT_TABLE = DeductionTable.build(error=(15, 10, 5), warning=(8, 5, 2), info=1)


class ScoringService:
    """Linear penalty scoring of a report's issues."""

    def __init__(self, table: DeductionTable):
        self.table = table

    def score(self, issues: Iterable[Issue]) -> int:
        total = 100
        for issue in issues:
            total -= self.table.deduction(issue)
        return clamp_score(total)


class BlogScoringService:
    """Blog reports are scored from the analyzed posts rather than from issue weights."""

    def score(self, findings: List[PageFinding]) -> int:
        thin = sum(1 for f in findings if f.quality_tier == QualityTier.THIN)
        missing_meta = sum(1 for f in findings if not f.content_metrics.has_meta_description)
        poor_structure = sum(1 for f in findings if has_poor_structure(f))
        without_alt = sum(1 for f in findings if f.content_metrics.images_without_alt > 0)

        score = 100 - thin * 10 - missing_meta * 8 - poor_structure * 5 - min(without_alt * 3, 20)
        logger.debug(
            "Blog score: thin=%d missing_meta=%d poor_structure=%d without_alt=%d -> %d",
            thin, missing_meta, poor_structure, without_alt, score
        )
        return clamp_score(score)


def content_summary(findings: List[PageFinding]) -> Dict[str, int]:
    """Content-quality aggregates shared by the multi-page report summaries."""
    count = len(findings)
    total_words = sum(f.content_metrics.word_count for f in findings)
    total_reading = sum(f.content_metrics.reading_time for f in findings)
    return {
        "thin_content": sum(1 for f in findings if f.quality_tier == QualityTier.THIN),
        "missing_meta_descriptions": sum(1 for f in findings if not f.content_metrics.has_meta_description),
        "poor_structure": sum(1 for f in findings if has_poor_structure(f)),
        "average_word_count": round_half_up(total_words / count) if count else 0,
        "average_reading_time": round_half_up(total_reading / count) if count else 0,
    }
