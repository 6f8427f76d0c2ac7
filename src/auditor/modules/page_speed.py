from typing import Any, Dict, List

from .base import AnalysisModule, AnalysisRun
from ..checks.performance import PAGE_SPEED_CHECKS
from ..model import CheckStatus, Issue, IssueKind, PerformanceIssue, Priority
from ..services.scoring_service import PAGE_SPEED_TABLE, round_half_up

# (check name, category, title, description, potential savings, difficulty, priority)
OPTIMIZATION_OPPORTUNITIES = [
    ("Image Lazy Loading", "Images", "Implement Image Lazy Loading",
     "Load images only when they're about to enter the viewport", "20-40% faster initial load", "easy", 8),
    ("Text Compression", "Compression", "Enable Text Compression",
     "Compress HTML, CSS, and JavaScript files with gzip or Brotli", "60-80% file size reduction", "easy", 9),
    ("Render-blocking JS", "JavaScript", "Eliminate Render-blocking JavaScript",
     "Use async/defer attributes or inline critical JavaScript", "10-30% faster rendering", "medium", 7),
    ("CSS Files", "CSS", "Optimize CSS Delivery",
     "Combine CSS files and inline critical styles", "15-25% faster first paint", "medium", 6),
    ("Browser Caching", "Caching", "Leverage Browser Caching",
     "Set appropriate cache headers for static resources", "50-90% faster repeat visits", "easy", 8),
]


def rate(value: float, good: float, needs_improvement: float) -> str:
    if value <= good:
        return "good"
    if value <= needs_improvement:
        return "needs-improvement"
    return "poor"


class PageSpeedModule(AnalysisModule):
    """
    Single-page performance analysis. Core Web Vitals are approximated from
    the wall-clock load time of the fetch, not measured in a browser.
    """

    name = "page_speed"
    title = "Performance"
    description = "Analyze page performance"
    failure_category = "loading"
    checks = PAGE_SPEED_CHECKS
    deductions = PAGE_SPEED_TABLE

    @staticmethod
    def simulated_vitals(run: AnalysisRun) -> Dict[str, float]:
        load_time = run.result.elapsed_ms
        images = run.document.images
        sized = sum(1 for img in images if img.has_attr("width") and img.has_attr("height"))
        return {
            "lcp": load_time * 0.8,
            "fid": min(100, load_time * 0.1),
            "cls": 0.15 if images and sized < len(images) else 0.05,
        }

    def metrics(self, run: AnalysisRun) -> Dict[str, Any]:
        load_time = run.result.elapsed_ms
        doc = run.document
        vitals = self.simulated_vitals(run)
        return {
            "load_time": load_time,
            "dom_content_loaded": load_time * 0.7,
            "first_contentful_paint": load_time * 0.4,
            "largest_contentful_paint": vitals["lcp"],
            "first_input_delay": vitals["fid"],
            "cumulative_layout_shift": vitals["cls"],
            "total_blocking_time": len(doc.external_scripts) * 50,
            "resource_count": {
                "images": len(doc.images),
                "scripts": len(doc.external_scripts),
                "stylesheets": doc.head.stylesheet_count,
                "fonts": doc.head.font_count,
            },
            "total_size": round_half_up(len(run.result.raw_content) / 1024),
            "compression_enabled": bool(run.result.header("content-encoding")),
            "cache_headers": bool(run.result.header("cache-control") or run.result.header("expires")),
        }

    def summary(self, run: AnalysisRun) -> Dict[str, Any]:
        vitals = self.simulated_vitals(run)
        return {
            "core_web_vitals": {
                "lcp": {"value": vitals["lcp"], "rating": rate(vitals["lcp"], 2500, 4000)},
                "fid": {"value": vitals["fid"], "rating": rate(vitals["fid"], 100, 300)},
                "cls": {"value": vitals["cls"], "rating": rate(vitals["cls"], 0.1, 0.25)},
            },
            "optimization_opportunities": self.optimization_opportunities(run),
        }

    @staticmethod
    def optimization_opportunities(run: AnalysisRun) -> List[Dict[str, Any]]:
        not_passed = {
            record.name for record in run.records if record.status in (CheckStatus.WARNING, CheckStatus.FAILED)
        }
        opportunities = [
            {
                "category": category,
                "title": title,
                "description": description,
                "potential_savings": savings,
                "difficulty": difficulty,
                "priority": priority,
            }
            for check_name, category, title, description, savings, difficulty, priority in OPTIMIZATION_OPPORTUNITIES
            if check_name in not_passed
        ]
        return sorted(opportunities, key=lambda o: o["priority"], reverse=True)

    def failure_issue(self, message: str) -> Issue:
        return PerformanceIssue(
            kind=IssueKind.ERROR,
            category=self.failure_category,
            message=f"{self.title} analysis failed: {message}",
            priority=Priority.HIGH,
            impact='Unable to perform performance analysis',
            recommendation='Check if the URL is correct and accessible',
            check_name='Page Analysis',
            time_to_fix='5 minutes',
            expected_improvement='Successful performance analysis'
        )


MODULE = PageSpeedModule
