from typing import Any, Dict

from .base import AnalysisModule, AnalysisRun
from ..checks.technical import TECHNICAL_CHECKS
from ..services.scoring_service import TECHNICAL_TABLE


class TechnicalModule(AnalysisModule):
    name = "technical"
    title = "Technical"
    description = "Analyze page for technical SEO factors"
    checks = TECHNICAL_CHECKS
    deductions = TECHNICAL_TABLE

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        doc = run.document
        head = doc.head
        status = run.result.http_status
        return {
            "title_length": head.title_len,
            "description_length": head.meta_desc_len,
            "h1_count": len(doc.h1s),
            "canonical_present": head.has_canonical,
            "robots_meta_present": head.has_robots_meta,
            "structured_data_count": len(doc.structured_data_scripts),
            "https_enabled": run.url.startswith("https://"),
            "response_code": status,
            "redirect_count": 1 if 300 <= status < 400 else 0,
            "xml_sitemap_detected": head.has_sitemap_link,
            "robots_txt_accessible": False,
            "hreflang_count": head.hreflang_count,
            "open_graph_count": len(head.open_graph),
        }


MODULE = TechnicalModule
