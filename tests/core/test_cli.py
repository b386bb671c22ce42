# tests/core/test_cli.py
import json

import pandas as pd
import pytest

from a11y_audit.managers.config_manager import config_manager
from a11y_audit.model import FetchResult
from a11y_shell.cli import main
from a11y_shell.command_registry import CommandRegistry, register_all_commands
from a11y_shell.handlers.audit_handler import handle_audit
from a11y_shell.handlers.reports_handler import handle_reports

PAGE = "<html><head><title>T</title></head><body><img src=x></body></html>"


@pytest.fixture
def isolated_store(tmp_path):
    """Laat de CLI naar een tijdelijke database schrijven."""
    db_path = tmp_path / "cli_reports.db"
    config_manager.set_nested("store.db_path", str(db_path))
    config_manager.set_nested("audit.time_budget_ms", "60000")
    return db_path


def test_commands_are_discovered():
    register_all_commands()
    assert {"audit", "reports", "serve", "config"} <= set(CommandRegistry)


def test_main_without_args_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage: a11y-audit" in capsys.readouterr().out


def test_main_unknown_command(capsys):
    assert main(["frobnicate"]) == 1
    assert "Unknown command" in capsys.readouterr().out


def test_main_dispatches_config_get(capsys):
    assert main(["config", "get", "audit.time_budget_ms"]) == 0
    assert capsys.readouterr().out.strip() == "400"


def test_audit_stdin_json(isolated_store, capsys):
    assert handle_audit(["--json", "--no-save"], stdin=PAGE) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert "reportId" not in payload
    assert payload["report"]["summary"]["totalCount"] == 9


def test_audit_empty_stdin_fails(isolated_store, capsys):
    assert handle_audit(["--no-save"], stdin="") == 1
    assert "Empty input" in capsys.readouterr().out


def test_audit_file_is_saved(isolated_store, tmp_path, capsys):
    page = tmp_path / "page.html"
    page.write_text(PAGE, encoding="utf-8")

    assert handle_audit(["--file", str(page)]) == 0
    out = capsys.readouterr().out
    assert "Score:" in out
    assert "report #1" in out
    assert "❌ html_lang" in out


def test_audit_missing_file(isolated_store, tmp_path, capsys):
    assert handle_audit(["--file", str(tmp_path / "missing.html")]) == 1
    assert "Could not read input" in capsys.readouterr().out


def test_audit_pattern_engine_flag(isolated_store, capsys):
    assert handle_audit(["--json", "--no-save", "--engine", "pattern"], stdin=PAGE) == 0
    assert json.loads(capsys.readouterr().out)["report"]["engine"] == "pattern"


def test_audit_multiple_urls(isolated_store, monkeypatch, capsys):
    class StubFetcher:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def fetch(self, url):
            if "broken" in url:
                return FetchResult(ok=False, error="HTTP status 500", code=500)
            return FetchResult(ok=True, html=PAGE, status=200)

    monkeypatch.setattr(
        "a11y_audit.controllers.audit_controller.HttpFetchService", StubFetcher
    )

    code = handle_audit(["--json", "--no-save", "--url", "https://a.test", "--url", "https://broken.test"])
    payloads = json.loads(capsys.readouterr().out)

    assert code == 1
    assert [p["ok"] for p in payloads] == [True, False]
    assert payloads[1]["code"] == 500


def test_reports_list_show_and_export(isolated_store, tmp_path, capsys):
    handle_audit([], stdin=PAGE)
    handle_audit([], stdin=PAGE)
    capsys.readouterr()

    assert handle_reports(["list"]) == 0
    listing = capsys.readouterr().out
    assert "#2" in listing and "#1" in listing

    assert handle_reports(["show", "1"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["engine"] == "structured"

    export_path = tmp_path / "checks.csv"
    assert handle_reports(["export", str(export_path)]) == 0
    df = pd.read_csv(export_path)
    assert len(df) == 18
    assert set(df["check_id"]) >= {"document_title", "images_alt"}


def test_reports_show_missing(isolated_store, capsys):
    assert handle_reports(["show", "77"]) == 1
    assert "not found" in capsys.readouterr().out


def test_reports_export_rejects_unknown_format(isolated_store, tmp_path, capsys):
    assert handle_reports(["export", str(tmp_path / "checks.txt")]) == 1
    assert "Unsupported export format" in capsys.readouterr().out


def test_reports_disabled_store(capsys):
    config_manager.set_nested("store.enabled", "false")
    assert handle_reports(["list"]) == 1
    assert "disabled" in capsys.readouterr().out
