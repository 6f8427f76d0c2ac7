# src/sitelens/core/handlers/export_handler.py
import logging
from typing import Optional

from auditor.controllers.report_controller import ReportController
from auditor.model import Report

logger = logging.getLogger(__name__)


def handle_export(report: Report, output: Optional[str] = None) -> int:
    """
    Writes the quick-wins CSV for `report`.

    Returns:
        0 for success, 1 for errors.
    """
    if report.module != "quick_wins":
        print(f"❌ CSV export is only available for quick wins reports (got '{report.module}').")
        return 1

    try:
        output_file = ReportController().export_csv(report, output)
    except OSError as e:
        logger.error("CSV export failed: %s", e, exc_info=True)
        print(f"❌ Could not write CSV: {e}")
        return 1

    print(f"✅ CSV written to {output_file}")
    return 0
