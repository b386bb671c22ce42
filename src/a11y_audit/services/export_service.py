# src/a11y_audit/services/export_service.py
import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pandas as pd

from ..model import AuditReport

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "report_id", "url", "engine", "created_at", "score",
    "truncated", "timed_out", "check_id", "ok", "rationale",
]


class ReportExportService:
    """Flattens stored reports into one row per check for spreadsheets and BI tools."""

    @staticmethod
    def checks_dataframe(reports: Iterable[Tuple[Optional[int], AuditReport]]) -> pd.DataFrame:
        rows = []
        for report_id, report in reports:
            for check in report.checks:
                rows.append({
                    "report_id": report_id,
                    "url": report.url,
                    "engine": report.engine,
                    "created_at": report.created_at.isoformat(),
                    "score": report.summary.score,
                    "truncated": report.truncated,
                    "timed_out": report.timed_out,
                    "check_id": check.id,
                    "ok": check.ok,
                    "rationale": check.rationale,
                })
        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    def export(self, path: Path, reports: Iterable[Tuple[Optional[int], AuditReport]]) -> int:
        """
        Writes the flattened checks to ``path`` (.csv, .json or .xlsx).
        Returns the number of rows written.
        """
        path = Path(path)
        df = self.checks_dataframe(reports)

        suffix = path.suffix.lower()
        if suffix == ".csv":
            df.to_csv(path, index=False)
        elif suffix == ".json":
            df.to_json(path, orient="records", indent=2)
        elif suffix == ".xlsx":
            df.to_excel(path, index=False, sheet_name="Checks", engine="openpyxl")
        else:
            raise ValueError(f"Unsupported export format '{suffix}' (use .csv, .json or .xlsx)")

        logger.info(f"Exported {len(df)} check rows to {path}")
        return len(df)
