import json
import logging
import time

from flask import Blueprint, Response, current_app, jsonify, request

logger = logging.getLogger(__name__)

audit_api_router = Blueprint('audit_api_router', __name__)

# HTTP status per failure code; fetch failures are upstream problems
_FAILURE_STATUS = {"empty_input": 400}
_FETCH_FAILURE_STATUS = 502


# --- HELPER FUNCTIONS ---

def get_audit_controller():
    """Retrieves the audit controller from the Flask application context."""
    controller = current_app.config.get('AUDIT_CONTROLLER')
    if not controller:
        raise RuntimeError("AuditController is not set in app.config['AUDIT_CONTROLLER']")
    return controller


def get_report_store():
    """Returns the configured ReportStore, or None when storage is disabled."""
    return current_app.config.get('REPORT_STORE')


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _not_found(message: str = "Report not found."):
    return jsonify({"ok": False, "error": message, "code": "not_found"}), 404


# --- API ROUTES ---

@audit_api_router.route('/ping', methods=['GET'])
def ping():
    """Health check."""
    return jsonify({"ok": True, "service": "a11y-audit", "time": int(time.time())})


@audit_api_router.route('/audit', methods=['GET'])
def audit_probe():
    """Quick liveness probe for the audit endpoint."""
    return jsonify({"ok": True, "alive": "audit GET ok"})


@audit_api_router.route('/audit', methods=['POST'])
def run_audit():
    """
    Runs one audit. Accepts JSON ``{html?, url?}`` or form fields.
    The body is the orchestrator payload as-is.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = request.form.to_dict()

    audit_input = {"html": payload.get("html"), "url": payload.get("url")}

    try:
        response = get_audit_controller().audit(audit_input)
    except Exception as e:
        logger.error(f"Audit request crashed: {e}", exc_info=True)
        return jsonify({"ok": False, "error": str(e), "code": "internal_error"}), 500

    body = response.to_payload()
    if response.ok:
        return jsonify(body)

    status = _FAILURE_STATUS.get(response.code, _FETCH_FAILURE_STATUS)
    return jsonify(body), status


@audit_api_router.route('/reports', methods=['GET'])
def list_reports():
    """Paginated report summaries, newest first."""
    store = get_report_store()
    page = max(1, _int_arg('page', 1))
    per_page = max(1, min(100, _int_arg('per_page', 20)))

    if store is None:
        return jsonify({"ok": True, "items": [], "page": page, "per_page": per_page, "total": 0, "pages": 0})

    listing = store.list(page=page, per_page=per_page)
    return jsonify({"ok": True, **listing})


@audit_api_router.route('/report/<int:report_id>', methods=['GET'])
def get_report(report_id: int):
    store = get_report_store()
    if store is None:
        return _not_found("Storage not available.")

    report = store.get(report_id)
    if report is None:
        return _not_found()

    return jsonify({
        "ok": True,
        "id": report_id,
        "report": report.model_dump(mode='json', by_alias=True)
    })


@audit_api_router.route('/report/<int:report_id>/download', methods=['GET'])
def download_report(report_id: int):
    """Serves the stored report as a pretty-printed JSON attachment."""
    store = get_report_store()
    if store is None:
        return _not_found("Storage not available.")

    report = store.get(report_id)
    if report is None:
        return _not_found()

    body = json.dumps(report.model_dump(mode='json', by_alias=True), indent=2, ensure_ascii=False)
    filename = f"a11y-report-{report_id}.json"
    return Response(
        body,
        mimetype='application/json',
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store"
        }
    )
