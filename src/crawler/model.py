# src/crawler/model.py (Retrieval & Crawl Layer)
import logging
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class RetrievalResult(BaseModel):
    """The outcome of one successful `fetch()` call."""
    model_config = ConfigDict(frozen=True)

    url: str
    raw_content: str = ""
    http_status: int
    elapsed_ms: int
    response_headers: Dict[str, str] = Field(default_factory=dict)
    backend: str = "direct"
    attempts: int = 1

    @field_validator("raw_content", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("response_headers", mode="before")
    @classmethod
    def _lowercase_headers(cls, v: Any) -> Dict[str, str]:
        # Header lookups are case-insensitive throughout the checks.
        if not v:
            return {}
        return {str(k).lower(): str(val) for k, val in dict(v).items()}

    def header(self, name: str) -> Optional[str]:
        return self.response_headers.get(name.lower())


class RelayResponse(BaseModel):
    """Normalized payload returned by a single retrieval backend."""
    body: str
    status: int
    headers: Dict[str, str] = Field(default_factory=dict)


class RelaySettings(BaseModel):
    prefix: str
    envelope: bool = False


class CrawlSettings(BaseModel):
    max_candidates: int = Field(default=20, ge=1)
    max_pages: int = Field(default=15, ge=0)
    concurrency: int = Field(default=3)
    show_progress: bool = False

    @field_validator("concurrency", mode="before")
    @classmethod
    def _clamp_concurrency(cls, v: Any) -> int:
        try:
            value = int(v)
        except (TypeError, ValueError):
            logger.warning("Invalid crawl concurrency %r, using 3.", v)
            return 3
        return max(1, min(5, value))


class DiscoveredLink(BaseModel):
    """A hyperlink resolved against the page it was found on."""
    model_config = ConfigDict(frozen=True)

    url: str
    anchor: str = ""
    rel: str = ""
    is_internal: bool = True


class RobotsTxtReport(BaseModel):
    url: str
    exists: bool = False
    accessible: bool = False
    valid: bool = False
    http_status: Optional[int] = None
    fetch_error: Optional[str] = None
    has_user_agent: bool = False
    has_disallow: bool = False
    directives: List[str] = Field(default_factory=list)
    disallowed: List[str] = Field(default_factory=list)
    sitemaps: List[str] = Field(default_factory=list)


class SitemapReport(BaseModel):
    checked_urls: List[str] = Field(default_factory=list)
    found_url: Optional[str] = None
    exists: bool = False
    accessible: bool = False
    valid: bool = False
    url_count: int = 0


class CrawlOutcome(BaseModel):
    """Per-page results of a mini-crawl, in candidate order."""
    results: List[Any] = Field(default_factory=list)
    attempted: int = 0
    failures: int = 0
    partial: bool = False
