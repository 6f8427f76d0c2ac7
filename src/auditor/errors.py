# src/auditor/errors.py
from crawler.errors import SiteLensError


class ParseError(SiteLensError):
    """Raw markup could not be turned into a document. Never leaves the builder."""


class CheckEvaluationError(SiteLensError):
    """A single checker raised while evaluating a page."""

    def __init__(self, check_name: str, cause: Exception):
        super().__init__(f"{check_name} evaluation failed: {cause}")
        self.check_name = check_name
        self.cause = cause


class UnknownModuleError(SiteLensError):
    def __init__(self, name: str, available):
        super().__init__(f"Unknown analysis module '{name}'. Available: {', '.join(available)}")
        self.name = name
