# src/a11y_shell/handlers/reports_handler.py
import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from a11y_audit.managers.config_manager import config_manager
from a11y_audit.managers.report_store import report_store_from_config
from a11y_audit.services.export_service import ReportExportService
from a11y_audit.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "list": None,
    "show": None,
    "export": None,
}

HELP_TEXT = """
  reports list [--page N] [--per-page N]   List stored reports, newest first.
  reports show <id>                        Print one stored report as JSON.
  reports export <path>                    Export all checks to .csv, .json or .xlsx.
                                           Relative paths land in the Documents folder.
""".strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reports")
    subparsers = parser.add_subparsers(dest="subcommand")

    list_parser = subparsers.add_parser("list", help="List stored reports")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--per-page", type=int, default=20)

    show_parser = subparsers.add_parser("show", help="Show one stored report")
    show_parser.add_argument("report_id", type=int)

    export_parser = subparsers.add_parser("export", help="Export stored reports")
    export_parser.add_argument("path", type=str)

    return parser


def _resolve_export_path(raw: str) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = PathUtils.get_user_documents_dir() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def handle_reports(args: List[str], _stdin: Optional[str] = None) -> int:
    """Handler for browsing and exporting stored reports."""
    parser = _build_parser()
    if not args:
        print(HELP_TEXT)
        return 1

    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    store = report_store_from_config(config_manager.get_section("store"))
    if store is None:
        print("❌ Report storage is disabled (store.enabled = false).")
        return 1

    if parsed_args.subcommand == "list":
        listing = store.list(page=parsed_args.page, per_page=parsed_args.per_page)
        if not listing["items"]:
            print("No reports stored yet.")
            return 0
        print(f"📋 Reports (page {listing['page']}/{max(1, listing['pages'])}, {listing['total']} total)")
        for item in listing["items"]:
            flags = []
            if item["truncated"]:
                flags.append("truncated")
            if item["timed_out"]:
                flags.append("timed out")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            print(f"   #{item['id']:<5} {item['score']:>3}/100  {item['engine']:<10} {item['url'] or '-'}  {item['created_at']}{suffix}")
        return 0

    if parsed_args.subcommand == "show":
        report = store.get(parsed_args.report_id)
        if report is None:
            print(f"❌ Report #{parsed_args.report_id} not found.")
            return 1
        print(json.dumps(report.model_dump(mode='json', by_alias=True), indent=2, ensure_ascii=False))
        return 0

    if parsed_args.subcommand == "export":
        output_file = _resolve_export_path(parsed_args.path)
        try:
            rows = ReportExportService().export(output_file, store.iter_reports())
        except ValueError as e:
            print(f"❌ {e}")
            return 1
        except OSError as e:
            logger.error(f"Export to {output_file} failed: {e}", exc_info=True)
            print(f"❌ Could not write {output_file}: {e}")
            return 1
        print(f"✅ Exported {rows} check rows to: {output_file}")
        return 0

    print(HELP_TEXT)
    return 1
