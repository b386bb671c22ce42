# src/a11y_audit/managers/report_store.py
import json
import logging
import math
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from pydantic import ValidationError

from ..database_schema import DEFAULT_SCHEMA_SCRIPT
from ..errors import PersistenceError
from ..model import AuditReport
from ..utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100

_LIST_COLUMNS = ("id", "created_at", "engine", "url", "html_len", "truncated", "timed_out", "score", "summary")


class ReportStore:
    """
    SQLite-backed storage for audit reports.

    One short-lived connection per operation, so the store can be shared by
    concurrent request handlers without thread-affinity issues. Reports are
    append-only: there is no update path.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else PathUtils.get_report_db_path()
        self._schema_ready = False

    # --- CONNECTION METHODS ---

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        if not self._schema_ready:
            try:
                conn.executescript(DEFAULT_SCHEMA_SCRIPT)
            except sqlite3.Error:
                conn.close()
                raise
            self._schema_ready = True
        return conn

    # --- WRITE METHODS ---

    def save(self, report: AuditReport) -> int:
        """Inserts a report and returns its id. Raises PersistenceError on failure."""
        sql = """
            INSERT INTO audit_reports
                (created_at, engine, url, html_len, truncated, timed_out,
                 summary_pass, summary_fail, score, summary, report)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        summary = report.summary
        params = (
            report.created_at.isoformat(),
            report.engine,
            report.url,
            report.html_length,
            int(report.truncated),
            int(report.timed_out),
            summary.passed_count,
            summary.total_count - summary.passed_count,
            summary.score,
            summary.model_dump_json(by_alias=True),
            report.model_dump_json(by_alias=True),
        )
        try:
            with closing(self._connect()) as conn:
                with conn:
                    cursor = conn.execute(sql, params)
                    report_id = int(cursor.lastrowid)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Failed to save report for '{report.url}': {e}") from e

        logger.debug(f"Saved report {report_id} ({report.engine}, score {summary.score})")
        return report_id

    # --- READ METHODS ---

    def get(self, report_id: int) -> Optional[AuditReport]:
        """Returns the stored report, or None when it does not exist or cannot be decoded."""
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT report FROM audit_reports WHERE id = ?", (int(report_id),)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to fetch report {report_id}: {e}")
            return None

        if not row:
            return None
        return self._decode(report_id, row[0])

    def list(self, page: int = 1, per_page: int = 10) -> Dict[str, Any]:
        """
        Returns one page of report summaries, newest first:
        ``{items, page, per_page, total, pages}``.
        """
        page = max(1, int(page if page is not None else 1))
        per_page = max(1, min(MAX_PER_PAGE, int(per_page if per_page is not None else 10)))
        offset = (page - 1) * per_page

        sql = f"""
            SELECT {', '.join(_LIST_COLUMNS)}
            FROM audit_reports
            ORDER BY id DESC
            LIMIT ? OFFSET ?
        """
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(sql, (per_page, offset)).fetchall()
                total = conn.execute("SELECT COUNT(*) FROM audit_reports").fetchone()[0]
        except sqlite3.Error as e:
            logger.error(f"Failed to list reports: {e}")
            rows, total = [], 0

        return {
            "items": [self._row_to_item(r) for r in rows],
            "page": page,
            "per_page": per_page,
            "total": total,
            "pages": int(math.ceil(total / per_page)) if total else 0,
        }

    def iter_reports(self, batch_size: int = 200) -> Iterator[Tuple[int, AuditReport]]:
        """Yields (id, report) pairs oldest first, in batches, for exports."""
        last_id = 0
        while True:
            try:
                with closing(self._connect()) as conn:
                    rows = conn.execute(
                        "SELECT id, report FROM audit_reports WHERE id > ? ORDER BY id LIMIT ?",
                        (last_id, batch_size)
                    ).fetchall()
            except sqlite3.Error as e:
                logger.error(f"Failed to iterate reports: {e}")
                return

            if not rows:
                return
            for report_id, payload in rows:
                last_id = report_id
                report = self._decode(report_id, payload)
                if report is not None:
                    yield report_id, report

    # --- HELPERS ---

    @staticmethod
    def _decode(report_id: int, payload: str) -> Optional[AuditReport]:
        try:
            return AuditReport.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Stored report {report_id} could not be decoded: {e}")
            return None

    @staticmethod
    def _row_to_item(row: tuple) -> Dict[str, Any]:
        item = dict(zip(_LIST_COLUMNS, row))
        item["truncated"] = bool(item["truncated"])
        item["timed_out"] = bool(item["timed_out"])
        if item.get("summary"):
            try:
                item["summary"] = json.loads(item["summary"])
            except (json.JSONDecodeError, TypeError):
                item["summary"] = None
        return item


def report_store_from_config(store_cfg: Optional[Dict[str, Any]] = None) -> Optional[ReportStore]:
    """Builds the store described by the 'store' config section; None when storage is disabled."""
    store_cfg = store_cfg or {}
    if not store_cfg.get("enabled", True):
        logger.debug("Report storage disabled by configuration.")
        return None
    return ReportStore(store_cfg.get("db_path") or None)
