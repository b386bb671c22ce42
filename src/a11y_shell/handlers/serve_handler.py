# src/a11y_shell/handlers/serve_handler.py
import argparse
import logging
from typing import List, Optional

from a11y_audit.controllers.audit_controller import AuditController
from a11y_audit.managers.config_manager import config_manager
from a11y_audit.managers.report_store import report_store_from_config
from a11y_audit.server.app import create_app, run_server

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY = None

HELP_TEXT = """
  serve [--host <host>] [--port <port>] [--debug]
                      Starts the HTTP API (POST /api/audit, GET /api/reports, ...).
""".strip()


def handle_serve(args: List[str], _stdin: Optional[str] = None) -> int:
    server_cfg = config_manager.get_section("server")

    parser = argparse.ArgumentParser(prog="serve", description="Start the audit HTTP API.")
    parser.add_argument("--host", type=str, default=server_cfg.get("host", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(server_cfg.get("port", 5000)))
    parser.add_argument("--debug", action="store_true")

    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    store = report_store_from_config(config_manager.get_section("store"))
    controller = AuditController(store=store)
    app = create_app(controller, store)

    try:
        run_server(app, parsed_args.host, parsed_args.port, debug=parsed_args.debug)
    except OSError as e:
        print(f"❌ Could not start server on {parsed_args.host}:{parsed_args.port}: {e}")
        return 1
    return 0
