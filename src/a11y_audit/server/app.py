"""
a11y-audit - Report Server
Flask application exposing the audit engine and stored reports over HTTP.
"""

import logging
from typing import Optional

from flask import Flask

from ..controllers.audit_controller import AuditController
from ..managers.report_store import ReportStore
from .routers.audit_api_router import audit_api_router

logger = logging.getLogger(__name__)


def create_app(controller: Optional[AuditController] = None, store: Optional[ReportStore] = None) -> Flask:
    """
    Application factory. The controller and store are injected into the app
    config for blueprint access; a controller is built around the store when
    none is given.
    """
    flask_app = Flask(__name__)

    # 1. Initialize the audit pipeline
    if controller is None:
        controller = AuditController(store=store)

    # 2. Inject into App Config for Blueprint access
    flask_app.config['AUDIT_CONTROLLER'] = controller
    flask_app.config['REPORT_STORE'] = store

    # 3. Register Blueprints
    flask_app.register_blueprint(audit_api_router, url_prefix='/api')

    return flask_app


def run_server(app: Flask, host: str, port: int, debug: bool = False):
    """Prints the route map and starts the Flask development server."""
    print("\n" + "=" * 50)
    print("🚀  A11Y AUDIT | Report Server")
    print("=" * 50)
    print(f"📡  Listening on: http://{host}:{port}")
    print("-" * 50)

    print("\n🔍 API ROUTE MAPPING:")
    for rule in app.url_map.iter_rules():
        if "api" in str(rule):
            print(f"   ✅ {rule}")
    print("-" * 50 + "\n")

    logger.info(f"Starting report server on {host}:{port}")
    # use_reloader=False prevents double-initialization when started from the CLI
    app.run(debug=debug, host=host, port=port, use_reloader=False)
