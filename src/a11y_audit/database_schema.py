# src/a11y_audit/database_schema.py

DEFAULT_SCHEMA_SCRIPT = """
CREATE TABLE IF NOT EXISTS audit_reports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL,
    engine TEXT NOT NULL DEFAULT 'pattern',
    url TEXT,
    html_len INTEGER DEFAULT 0,
    truncated INTEGER NOT NULL DEFAULT 0,
    timed_out INTEGER NOT NULL DEFAULT 0,
    summary_pass INTEGER NOT NULL DEFAULT 0,
    summary_fail INTEGER NOT NULL DEFAULT 0,
    score INTEGER NOT NULL DEFAULT 0,
    summary TEXT,       -- AuditSummary as JSON
    report TEXT NOT NULL -- full AuditReport as JSON
);
CREATE INDEX IF NOT EXISTS idx_audit_reports_created_at ON audit_reports(created_at);
"""
