import time
from typing import Optional

import pytest

from a11y_audit.controllers.audit_controller import AuditController
from a11y_audit.managers.config_manager import config_manager
from a11y_audit.managers.report_store import ReportStore
from a11y_audit.model import FetchResult

# Ruim budget zodat trage CI-machines geen time-outs veroorzaken
GENEROUS_AUDIT_CONFIG = {
    "max_bytes": 1_500_000,
    "time_budget_ms": 60_000,
    "parser": "html.parser",
    "prefer_structured": True,
    "extended_rules": False,
}


@pytest.fixture(autouse=True)
def fresh_config():
    """Elke test begint (en eindigt) met de configuratie uit settings.json."""
    config_manager.reset()
    yield
    config_manager.reset()


class FakeFetcher:
    """Stand-in for HttpFetchService that records requested URLs."""

    def __init__(self, result: FetchResult):
        self.result = result
        self.calls = []

    def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        return self.result


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def store(tmp_path) -> ReportStore:
    return ReportStore(tmp_path / "reports.db")


@pytest.fixture
def make_controller():
    def _make(fetcher=None, store: Optional[ReportStore] = None, clock=time.perf_counter, **overrides) -> AuditController:
        config = dict(GENEROUS_AUDIT_CONFIG, **overrides)
        return AuditController(fetcher=fetcher, store=store, config=config, clock=clock)
    return _make
