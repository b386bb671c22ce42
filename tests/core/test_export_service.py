# tests/core/test_export_service.py
import pandas as pd
import pytest

from a11y_audit.model import AuditReport, AuditSummary, CheckResult
from a11y_audit.services.export_service import EXPORT_COLUMNS, ReportExportService


@pytest.fixture
def reports():
    checks = [
        CheckResult(id="document_title", ok=True, rationale="title"),
        CheckResult(id="html_lang", ok=False, rationale="lang"),
    ]
    report = AuditReport(
        engine="pattern",
        url="https://example.com",
        checks=checks,
        summary=AuditSummary.from_checks(checks)
    )
    return [(1, report), (2, report)]


def test_one_row_per_check(reports):
    df = ReportExportService.checks_dataframe(reports)

    assert list(df.columns) == EXPORT_COLUMNS
    assert len(df) == 4
    assert df["report_id"].tolist() == [1, 1, 2, 2]
    assert df.loc[1, "check_id"] == "html_lang"
    assert not df.loc[1, "ok"]
    assert df.loc[0, "score"] == 50


def test_empty_input_keeps_columns():
    df = ReportExportService.checks_dataframe([])
    assert df.empty
    assert list(df.columns) == EXPORT_COLUMNS


@pytest.mark.parametrize("suffix, reader", [
    (".csv", pd.read_csv),
    (".json", pd.read_json),
    (".xlsx", pd.read_excel),
])
def test_export_formats(tmp_path, reports, suffix, reader):
    path = tmp_path / f"checks{suffix}"
    rows = ReportExportService().export(path, reports)

    assert rows == 4
    assert len(reader(path)) == 4


def test_unknown_format_is_rejected(tmp_path, reports):
    with pytest.raises(ValueError):
        ReportExportService().export(tmp_path / "checks.parquet", reports)
