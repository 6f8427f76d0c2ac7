# src/crawler/errors.py
from typing import Optional


class SiteLensError(Exception):
    """Base class for all errors raised by the analysis pipeline."""


class RelayError(SiteLensError):
    """A single retrieval attempt (direct or via relay) failed."""

    def __init__(self, backend: str, url: str, reason: str):
        super().__init__(f"{backend} failed for {url}: {reason}")
        self.backend = backend
        self.url = url
        self.reason = reason


class RetrievalError(SiteLensError):
    """
    Raised when the direct attempt and every relay endpoint are exhausted.
    """

    MESSAGE = (
        "All proxy attempts failed. The website may be blocking requests "
        "or temporarily unavailable."
    )

    def __init__(self, url: str, tried_count: int, last_error: Optional[str] = None):
        super().__init__(self.MESSAGE)
        self.url = url
        self.tried_count = tried_count
        self.last_error = last_error


class DiscoveryPageError(SiteLensError):
    """One candidate page of a mini-crawl could not be fetched or analyzed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to analyze {url}: {reason}")
        self.url = url
        self.reason = reason
