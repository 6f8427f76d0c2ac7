# src/auditor/checks/core.py
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from crawler.model import RobotsTxtReport, SitemapReport
from ..dom.models import HTMLDocument
from ..errors import CheckEvaluationError
from ..model import CheckRecord, CheckStatus, Issue, IssueKind, Priority

logger = logging.getLogger(__name__)


class CheckContext(BaseModel):
    """Everything a check may read about one page. Shared read-only by all checks."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str
    document: HTMLDocument
    http_status: int = 200
    elapsed_ms: int = 0
    response_headers: Dict[str, str] = Field(default_factory=dict)
    robots: Optional[RobotsTxtReport] = None
    sitemap: Optional[SitemapReport] = None
    extras: Dict[str, Any] = Field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        return self.response_headers.get(name.lower())


class CheckOutcome(BaseModel):
    """What a check function returns: its verdict plus any issues it raised."""
    status: CheckStatus
    result: str
    impact: Optional[str] = None
    recommendation: Optional[str] = None
    issues: List[Issue] = Field(default_factory=list)


def make_issue(
        kind: IssueKind,
        category: str,
        message: str,
        priority: Priority,
        issue_cls: type = Issue,
        **fields: Any
) -> Issue:
    return issue_cls(kind=kind, category=category, message=message, priority=priority, **fields)


def check_spec(name: str, description: str, failure_category: str = "technical"):
    """
    Decorator declaring the record name and description of a check function.
    `failure_category` is used for the error issue emitted when the check itself crashes.
    """
    def decorator(func):
        func.check_name = name
        func.description = description
        func.failure_category = failure_category
        return func
    return decorator


CheckFunc = Callable[[CheckContext], CheckOutcome]


class Checker:
    """Runs one check function and converts its outcome into data."""

    def __init__(self, func: CheckFunc):
        if not hasattr(func, "check_name"):
            raise TypeError(f"{func.__name__} is not decorated with @check_spec")
        self.func = func
        self.name: str = func.check_name
        self.description: str = func.description
        self.failure_category: str = func.failure_category

    def run(self, context: CheckContext, record_url: Optional[str] = None) -> Tuple[CheckRecord, List[Issue]]:
        try:
            outcome = self.func(context)
        except Exception as e:
            return self._failed(context, CheckEvaluationError(self.name, e), record_url)

        record = CheckRecord(
            name=self.name,
            status=outcome.status,
            description=self.description,
            result=outcome.result,
            impact=outcome.impact,
            recommendation=outcome.recommendation,
            url=record_url
        )
        issues = [issue.model_copy(update={"check_name": self.name}) for issue in outcome.issues]
        return record, issues

    def _failed(
            self, context: CheckContext, error: CheckEvaluationError, record_url: Optional[str]
    ) -> Tuple[CheckRecord, List[Issue]]:
        logger.warning("Check '%s' failed on %s: %s", self.name, context.url, error.cause)
        record = CheckRecord(
            name=self.name,
            status=CheckStatus.FAILED,
            description=self.description,
            result=f"Evaluation error: {error.cause}",
            url=record_url
        )
        issue = Issue(
            kind=IssueKind.ERROR,
            category=self.failure_category,
            message=f"{self.name} check could not be evaluated: {error.cause}",
            priority=Priority.HIGH,
            check_name=self.name
        )
        return record, [issue]


class CatalogResult(BaseModel):
    records: List[CheckRecord] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)

    def extend(self, other: "CatalogResult") -> None:
        self.records.extend(other.records)
        self.issues.extend(other.issues)


class CheckCatalog:
    """
    An ordered list of independent checks. Running the catalog evaluates every
    check in registration order and always yields exactly one record per check.
    """

    def __init__(self, name: str, checks: List[CheckFunc]):
        self.name = name
        self.checkers = [Checker(func) for func in checks]

    def __len__(self) -> int:
        return len(self.checkers)

    @property
    def check_names(self) -> List[str]:
        return [checker.name for checker in self.checkers]

    def run(self, context: CheckContext, record_url: Optional[str] = None) -> CatalogResult:
        result = CatalogResult()
        for checker in self.checkers:
            record, issues = checker.run(context, record_url=record_url)
            result.records.append(record)
            result.issues.extend(issues)
        return result
