# src/auditor/model.py
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, model_validator


class IssueKind(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class CheckStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    INFO = "info"


class QualityTier(str, Enum):
    THIN = "thin"
    ADEQUATE = "adequate"
    COMPREHENSIVE = "comprehensive"


class Effort(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Issue(BaseModel):
    """
    A user-facing finding emitted by one check.

    `actionable` defaults to True for errors and warnings and False otherwise;
    checks pass it explicitly for the informational findings that carry a
    concrete next step.
    """
    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    category: str
    message: str
    priority: Priority
    affected_element: Optional[str] = None
    recommendation: Optional[str] = None
    impact: Optional[str] = None
    actionable: Optional[bool] = None
    check_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _default_actionable(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("actionable") is None:
            kind = data.get("kind")
            kind_value = kind.value if isinstance(kind, IssueKind) else kind
            data = {**data, "actionable": kind_value in ("error", "warning")}
        return data


class QuickWin(Issue):
    """An issue that can be fixed with little effort, ranked 1-10."""
    effort: Effort
    rank: int = Field(ge=1, le=10)
    time_to_implement: str
    expected_impact: str


class PerformanceIssue(Issue):
    time_to_fix: str
    expected_improvement: str


class CheckRecord(BaseModel):
    """One check's verdict for one page."""
    model_config = ConfigDict(frozen=True)

    name: str
    status: CheckStatus
    description: str
    result: str
    impact: Optional[str] = None
    recommendation: Optional[str] = None
    url: Optional[str] = None


class ContentMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    word_count: int = 0
    reading_time: int = 0
    h1_count: int = 0
    h2_count: int = 0
    image_count: int = 0
    images_without_alt: int = 0
    internal_links: int = 0
    external_links: int = 0
    has_meta_description: bool = False
    meta_description_length: int = 0
    publish_date: Optional[str] = None
    keyword_density: Dict[str, float] = Field(default_factory=dict)


class PageFinding(BaseModel):
    """Per-page outcome of a mini-crawl."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    content_metrics: ContentMetrics = Field(default_factory=ContentMetrics)
    quality_tier: QualityTier = QualityTier.THIN
    http_status: Optional[int] = None
    failed: bool = False


class Report(BaseModel):
    """
    The immutable result of one `analyze_*` call.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    module: str
    score: int = Field(ge=0, le=100)
    issues: List[SerializeAsAny[Issue]] = Field(default_factory=list)
    actionable_items: List[SerializeAsAny[Issue]] = Field(default_factory=list)
    all_checks: List[CheckRecord] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)
    findings: Optional[List[PageFinding]] = None
    summary: Dict[str, Any] = Field(default_factory=dict)
    timestamp_utc: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def issues_by_category(self) -> Dict[str, List[Issue]]:
        """Issues grouped by category, in order of each category's first appearance."""
        grouped: Dict[str, List[Issue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.category, []).append(issue)
        return grouped

    def count_by_kind(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in IssueKind}
        for issue in self.issues:
            counts[issue.kind.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
