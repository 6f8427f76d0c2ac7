from typing import Any, Dict

from .base import AnalysisModule, AnalysisRun
from ..checks.audit import AUDIT_CHECKS, classify_links
from ..services.scoring_service import AUDIT_TABLE


class AuditModule(AnalysisModule):
    name = "audit"
    title = "SEO"
    description = "General on-page SEO audit"
    checks = AUDIT_CHECKS
    deductions = AUDIT_TABLE

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        doc = run.document
        internal, external, _, _ = classify_links(run.context())
        return {
            "title_length": doc.head.title_len,
            "description_length": doc.head.meta_desc_len,
            "h1_count": len(doc.h1s),
            "image_count": len(doc.images),
            "images_without_alt": sum(1 for img in doc.images if img.missing_alt),
            "internal_links": internal,
            "external_links": external,
            "load_time": run.result.elapsed_ms,
            "response_code": run.result.http_status,
        }


MODULE = AuditModule
