# src/a11y_shell/handlers/audit_handler.py
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm.auto import tqdm

from a11y_audit.controllers.audit_controller import AuditController
from a11y_audit.managers.config_manager import config_manager
from a11y_audit.managers.report_store import report_store_from_config
from a11y_audit.model import AuditInput, AuditResponse

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY = None

HELP_TEXT = """
  audit [--url <url> ...] [--file <path>] [--json] [--no-save] [--engine auto|pattern]
                      Audits one or more URLs, an HTML file, or HTML read from stdin.
""".strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audit", description="Run an accessibility audit.")
    parser.add_argument("--url", action="append", default=[], help="URL to fetch and audit (repeatable).")
    parser.add_argument("--file", type=str, default=None, help="Local HTML file to audit.")
    parser.add_argument("--json", action="store_true", help="Print the raw response payload as JSON.")
    parser.add_argument("--no-save", action="store_true", help="Do not persist reports.")
    parser.add_argument(
        "--engine", choices=["auto", "pattern"], default="auto",
        help="'auto' prefers the structured parser; 'pattern' forces the regex engine."
    )
    return parser


def _build_controller(parsed_args: argparse.Namespace) -> AuditController:
    audit_cfg: Dict[str, Any] = config_manager.get_section("audit")
    if parsed_args.engine == "pattern":
        audit_cfg["prefer_structured"] = False

    store = None if parsed_args.no_save else report_store_from_config(config_manager.get_section("store"))
    return AuditController(store=store, config=audit_cfg)


def _collect_inputs(parsed_args: argparse.Namespace, stdin: Optional[str]) -> List[AuditInput]:
    if parsed_args.url:
        return [AuditInput(url=u) for u in parsed_args.url]

    if parsed_args.file:
        path = Path(parsed_args.file).expanduser()
        html = path.read_text(encoding="utf-8", errors="replace")
        return [AuditInput(html=html, url=path.resolve().as_uri())]

    if stdin is None:
        stdin = sys.stdin.read()
    return [AuditInput(html=stdin)]


def _print_response(response: AuditResponse, label: str) -> None:
    if not response.ok:
        code = f" ({response.code})" if response.code is not None else ""
        print(f"❌ {label}: {response.error}{code}")
        return

    report = response.report
    summary = report.summary
    saved = f" | report #{response.report_id}" if response.report_id is not None else ""
    print(f"\n📊 {label}")
    print(f"   Score: {summary.score}/100 ({summary.passed_count}/{summary.total_count} passed, {report.engine}){saved}")
    for check in report.checks:
        icon = "✅" if check.ok else "❌"
        print(f"   {icon} {check.id}: {check.rationale}")
    for note in summary.notes:
        print(f"   ℹ️  {note}")


def handle_audit(args: List[str], stdin: Optional[str] = None) -> int:
    """
    Handler for the audit command.
    Returns 0 when every audit produced a report, 1 otherwise.
    """
    parser = _build_parser()
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    try:
        inputs = _collect_inputs(parsed_args, stdin)
    except OSError as e:
        print(f"❌ Could not read input: {e}")
        return 1

    controller = _build_controller(parsed_args)

    responses: List[AuditResponse] = []
    show_progress = len(inputs) > 1 and not parsed_args.json
    for audit_input in tqdm(inputs, desc="Auditing", unit="page", disable=not show_progress):
        responses.append(controller.audit(audit_input))

    if parsed_args.json:
        payloads = [r.to_payload() for r in responses]
        print(json.dumps(payloads[0] if len(payloads) == 1 else payloads, indent=2, ensure_ascii=False))
    else:
        for audit_input, response in zip(inputs, responses):
            _print_response(response, audit_input.url or "<stdin>")

    failed = sum(1 for r in responses if not r.ok)
    if failed:
        logger.info(f"{failed}/{len(responses)} audits failed")
        return 1
    return 0
