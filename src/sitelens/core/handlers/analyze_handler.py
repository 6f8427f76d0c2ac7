# src/sitelens/core/handlers/analyze_handler.py
import argparse
import asyncio
import json
import logging
from typing import List

from auditor.errors import UnknownModuleError
from auditor.model import Report
from crawler.utils.run_timers import RunTimers
from sitelens.api import analyze
from sitelens.core.handlers.export_handler import handle_export
from sitelens.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

MODULE_CHOICES = ["technical", "quickwins", "blog", "speed", "site", "audit"]
TOP_ITEMS = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitelens", description="SEO analysis of a single page or small site.")
    parser.add_argument("module", choices=MODULE_CHOICES, help="Analysis to run.")
    parser.add_argument("url", help="Page to analyze; https:// is assumed when no scheme is given.")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    parser.add_argument("--csv", metavar="PATH", default=None, help="Write the quick wins CSV (quickwins only).")
    parser.add_argument("--timeout", metavar="SECONDS", type=float, default=None,
                        help="Overall deadline; a partial report is returned when it passes.")
    parser.add_argument("--set", metavar="KEY=VALUE", action="append", default=[], dest="overrides",
                        help="Override a setting for this run, e.g. crawler.max_pages=5. Repeatable.")
    return parser


def print_summary(report: Report) -> None:
    counts = report.count_by_kind()
    print(f"\n{report.module} report for {report.url}")
    print(f"  Score: {report.score}/100")
    print(
        f"  Issues: {counts['error']} errors, {counts['warning']} warnings, "
        f"{counts['info']} info, {counts['success']} passed"
    )
    if report.summary.get("partial"):
        print("  ⚠️  Partial result: the run was stopped before all pages were analyzed.")

    top = report.actionable_items[:TOP_ITEMS]
    if top:
        print("  Top actionable items:")
        for issue in top:
            print(f"    [{issue.priority.value}] {issue.message}")
            if issue.recommendation:
                print(f"        -> {issue.recommendation}")


def handle_analyze(args: List[str]) -> int:
    """
    Runs one analysis and prints the result.

    Returns:
        0 for success, 1 for errors.
    """
    parser = build_parser()
    try:
        parsed = parser.parse_args(args)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    if parsed.csv and parsed.module != "quickwins":
        print("❌ --csv is only supported for the quickwins module.")
        return 1

    rejected = config_manager.apply_overrides(parsed.overrides)
    if rejected:
        print(f"❌ Invalid setting override(s): {', '.join(rejected)} (expected KEY=VALUE).")
        return 1

    timer = RunTimers()
    timer.start()
    try:
        report = asyncio.run(analyze(parsed.module, parsed.url, deadline_s=parsed.timeout))
    except UnknownModuleError as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⛔ Analysis interrupted.")
        return 1
    timer.stop()
    logger.info("Analysis finished in %.2fs", timer.duration)

    if parsed.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_summary(report)

    if parsed.csv:
        return handle_export(report, parsed.csv)
    return 0
