import csv
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from auditor.model import QuickWin, Report
from sitelens.core.managers.config_manager import config_manager
from sitelens.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'Priority', 'Category', 'Issue', 'Impact', 'Effort', 'TimeToImplement',
    'Recommendation', 'ExpectedImpact', 'Element', 'Status', 'Notes'
]


class ReportController:
    """
    Serializes quick-wins reports for spreadsheets.

    The CSV starts with a three-line header block (title, generation date,
    overall score) followed by one fully quoted row per quick win. Status and
    Notes are left empty for the reader to fill in.
    """

    def __init__(self, export_dir: Optional[Path] = None):
        self.export_dir = export_dir

    @staticmethod
    def quick_wins_df(report: Report) -> pd.DataFrame:
        wins: List[QuickWin] = [issue for issue in report.issues if isinstance(issue, QuickWin)]
        rows = [
            {
                'Priority': str(win.rank),
                'Category': win.category,
                'Issue': win.message,
                'Impact': win.priority.value,
                'Effort': win.effort.value,
                'TimeToImplement': win.time_to_implement,
                'Recommendation': win.recommendation or '',
                'ExpectedImpact': win.expected_impact,
                'Element': win.affected_element or '',
                'Status': '',
                'Notes': '',
            }
            for win in wins
        ]
        return pd.DataFrame(rows, columns=CSV_COLUMNS)

    @staticmethod
    def header_lines(report: Report) -> List[str]:
        return [
            f"SEO Quick Wins Report - {report.url}",
            f"Generated: {report.timestamp_utc.strftime('%Y-%m-%d')}",
            f"Overall Score: {report.score}/100",
        ]

    def to_csv(self, report: Report) -> str:
        df = self.quick_wins_df(report)
        body = df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        return "\n".join(self.header_lines(report)) + "\n" + body

    def default_filename(self, report: Report) -> str:
        return f"seo-quick-wins-{report.timestamp_utc.strftime('%Y-%m-%d')}.csv"

    def export_csv(self, report: Report, output: Optional[str] = None) -> Path:
        """Writes the CSV and returns its path. Relative paths land in the export directory."""
        export_dir = self.export_dir or PathUtils.get_export_dir(config_manager.get_nested("export.directory"))
        output_file = PathUtils.resolve_output_file(output or self.default_filename(report), export_dir, ".csv")
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(self.to_csv(report), encoding="utf-8")
        logger.info("Quick wins CSV for %s written to %s", report.url, output_file)
        return output_file
