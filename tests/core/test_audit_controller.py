# tests/core/test_audit_controller.py
import pytest

from a11y_audit.controllers.audit_controller import (
    AuditController,
    NOTE_MANUAL_CHECKS,
    NOTE_PARSER_FALLBACK,
    NOTE_PARSER_OVER_BUDGET,
    NOTE_TIMED_OUT,
    NOTE_TRUNCATED,
)
from a11y_audit.engines import structured_engine
from a11y_audit.errors import PersistenceError
from a11y_audit.model import AuditInput, FetchResult
from a11y_audit.rules.ruleset import CORE_RULES

CORE_IDS = [r.id for r in CORE_RULES]

SCENARIO_HTML = "<html><head><title>T</title></head><body><img src=x></body></html>"

CLEAN_HTML = """
<!doctype html>
<html lang="en">
  <head><title>Clean page</title></head>
  <body>
    <h1>Main</h1>
    <h2>Section</h2>
    <h3>Subsection</h3>
    <p>Plain text only.</p>
  </body>
</html>
"""


# --- Input validation ---

def test_empty_input_is_rejected(make_controller):
    response = make_controller().audit({"html": "", "url": ""})

    assert response.ok is False
    assert response.error == "Empty input"
    assert response.code == "empty_input"
    assert response.report is None


def test_whitespace_html_without_url_is_rejected(make_controller):
    response = make_controller().audit(AuditInput(html="   \n\t"))
    assert response.ok is False
    assert response.code == "empty_input"


def test_failure_payload_drops_absent_fields(make_controller):
    payload = make_controller().audit({}).to_payload()
    assert payload == {"ok": False, "error": "Empty input", "code": "empty_input"}


# --- Scenarios ---

def test_scenario_missing_lang_and_alt(make_controller):
    response = make_controller().audit_html(SCENARIO_HTML)

    assert response.ok is True
    report = response.report
    assert report.engine == "structured"
    assert report.get_check("document_title").ok is True
    assert report.get_check("html_lang").ok is False
    assert report.get_check("images_alt").ok is False

    summary = report.summary
    assert summary.total_count == len(report.checks) == 9
    assert summary.passed_count == sum(1 for c in report.checks if c.ok)
    assert 0 <= summary.score < 100


def test_clean_page_scores_100(make_controller):
    report = make_controller().audit_html(CLEAN_HTML).report

    assert [c.id for c in report.checks] == CORE_IDS
    assert all(c.ok for c in report.checks), [c.id for c in report.checks if not c.ok]
    assert report.summary.score == 100
    assert report.summary.fail_list == []


def test_checks_follow_rule_set_order(make_controller):
    report = make_controller().audit_html(SCENARIO_HTML).report
    assert [c.id for c in report.checks] == CORE_IDS


def test_notes_always_mention_client_side_checks(make_controller):
    report = make_controller().audit_html(CLEAN_HTML).report
    assert report.summary.notes == [NOTE_MANUAL_CHECKS]


def test_pass_and_fail_lists_carry_rationales(make_controller):
    report = make_controller().audit_html(SCENARIO_HTML).report
    summary = report.summary

    assert report.get_check("html_lang").rationale in summary.fail_list
    assert report.get_check("document_title").rationale in summary.pass_list
    assert len(summary.pass_list) + len(summary.fail_list) == summary.total_count


def test_extended_rules_are_appended_when_enabled(make_controller):
    report = make_controller(extended_rules=True).audit_html(CLEAN_HTML).report

    ids = [c.id for c in report.checks]
    assert ids[:9] == CORE_IDS
    assert ids[9:] == ["touch_target_size_hint", "lists_only_li"]


# --- Properties ---

def test_audit_is_idempotent(make_controller):
    controller = make_controller()
    first = controller.audit_html(SCENARIO_HTML).report
    second = controller.audit_html(SCENARIO_HTML).report

    assert first.checks == second.checks
    assert first.summary == second.summary


def test_truncation_reports_original_length(make_controller):
    html = "<html lang='en'><head><title>Big</title></head><body>" + ("<p>filler</p>" * 200) + "</body></html>"
    response = make_controller(max_bytes=100).audit_html(html)

    report = response.report
    assert response.ok is True
    assert report.truncated is True
    assert report.html_length == len(html.encode("utf-8"))
    assert NOTE_TRUNCATED in report.summary.notes


def test_html_length_counts_utf8_bytes(make_controller):
    html = "<p>héllo</p>"
    report = make_controller().audit_html(html).report
    assert report.html_length == len(html.encode("utf-8"))
    assert report.truncated is False


def test_structured_failure_falls_back_to_pattern(make_controller, monkeypatch):
    def broken_parser(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(structured_engine, "BeautifulSoup", broken_parser)

    response = make_controller().audit_html(SCENARIO_HTML)

    assert response.ok is True
    report = response.report
    assert report.engine == "pattern"
    assert [c.id for c in report.checks] == CORE_IDS
    assert NOTE_PARSER_FALLBACK in report.summary.notes
    assert report.get_check("html_lang").ok is False
    assert report.get_check("images_alt").ok is False


class ManualClock:
    """Fake clock that only moves when a test advances it."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_slow_parser_failure_gives_fallback_a_fresh_budget(make_controller, monkeypatch):
    clock = ManualClock()

    def slow_broken_parser(*args, **kwargs):
        clock.now += 0.5
        raise RuntimeError("parser exploded late")

    monkeypatch.setattr(structured_engine, "BeautifulSoup", slow_broken_parser)

    report = make_controller(time_budget_ms=400, clock=clock).audit_html(SCENARIO_HTML).report

    assert report.engine == "pattern"
    assert [c.id for c in report.checks] == CORE_IDS
    assert report.timed_out is False
    assert NOTE_PARSER_FALLBACK in report.summary.notes
    assert NOTE_TIMED_OUT not in report.summary.notes


def test_parse_over_budget_falls_back_to_pattern(make_controller, monkeypatch):
    clock = ManualClock()
    real_soup = structured_engine.BeautifulSoup

    def slow_parser(*args, **kwargs):
        clock.now += 0.5
        return real_soup(*args, **kwargs)

    monkeypatch.setattr(structured_engine, "BeautifulSoup", slow_parser)

    report = make_controller(time_budget_ms=400, clock=clock).audit_html(SCENARIO_HTML).report

    assert report.engine == "pattern"
    assert [c.id for c in report.checks] == CORE_IDS
    assert report.timed_out is False
    assert NOTE_PARSER_OVER_BUDGET in report.summary.notes
    assert NOTE_PARSER_FALLBACK not in report.summary.notes
    assert report.get_check("images_alt").ok is False


def test_script_heavy_page_keeps_its_body(make_controller):
    html = (
        "<html><head><title>T</title><script>" + ("var a = 1;\n" * 500) + "</script></head>"
        "<body><img src=a.png></body></html>"
    )
    report = make_controller(max_bytes=1000, prefer_structured=False).audit_html(html).report

    assert report.truncated is True
    check = report.get_check("images_alt")
    assert check.ok is False
    assert check.metrics["img_total"] == 1


def test_cut_inside_script_does_not_reach_rules(make_controller):
    html = (
        "<html><head><title>T</title></head><body><p>intro</p>"
        "<script>" + ("var s = '<img src=x>';" * 200) + "</script>"
        "<p>" + ("filler " * 300) + "</p></body></html>"
    )
    report = make_controller(max_bytes=200, prefer_structured=False).audit_html(html).report

    assert report.truncated is True
    check = report.get_check("images_alt")
    assert check.ok is True
    assert check.metrics["img_total"] == 0


def test_unavailable_parser_uses_pattern_without_note(make_controller):
    report = make_controller(parser="no-such-parser").audit_html(SCENARIO_HTML).report

    assert report.engine == "pattern"
    assert NOTE_PARSER_FALLBACK not in report.summary.notes


def test_prefer_structured_off_uses_pattern(make_controller):
    report = make_controller(prefer_structured=False).audit_html(SCENARIO_HTML).report
    assert report.engine == "pattern"


def test_zero_budget_evaluates_one_rule(make_controller):
    report = make_controller(time_budget_ms=0).audit_html(SCENARIO_HTML).report

    assert report.engine == "pattern"
    assert NOTE_PARSER_OVER_BUDGET in report.summary.notes
    assert report.timed_out is True
    assert [c.id for c in report.checks] == ["document_title"]
    assert report.summary.total_count == 1
    assert report.summary.score == 100
    assert NOTE_TIMED_OUT in report.summary.notes


def test_budget_uses_injected_clock(make_controller):
    ticks = iter(range(0, 1000))

    controller = AuditController(
        config={"time_budget_ms": 2500, "prefer_structured": False},
        clock=lambda: next(ticks)
    )
    report = controller.audit_html(SCENARIO_HTML).report

    # Elke klok-tik is 1000ms: na de derde regel is het budget op
    assert report.timed_out is True
    assert [c.id for c in report.checks] == CORE_IDS[:3]


def test_rule_exception_becomes_failing_check(make_controller, monkeypatch):
    from a11y_audit.rules.registry import RuleRegistry

    def exploding_rule(doc):
        raise ValueError("boom")

    original_get_rule = RuleRegistry.get_rule.__func__

    def patched_get_rule(cls, engine, rule_id):
        if rule_id == "images_alt":
            return exploding_rule
        return original_get_rule(cls, engine, rule_id)

    monkeypatch.setattr(RuleRegistry, "get_rule", classmethod(patched_get_rule))

    report = make_controller().audit_html(SCENARIO_HTML).report
    check = report.get_check("images_alt")

    assert len(report.checks) == 9
    assert check.ok is False
    assert "internal rule failure: ValueError" in check.rationale
    assert check.metrics["error"] == "boom"
    assert report.get_check("document_title").ok is True


# --- Fetching ---

def test_url_only_input_is_fetched(make_controller, fake_fetcher):
    fetcher = fake_fetcher(FetchResult(ok=True, html=SCENARIO_HTML, status=200))
    response = make_controller(fetcher=fetcher).audit_url("  https://example.com/page  ")

    assert fetcher.calls == ["https://example.com/page"]
    assert response.ok is True
    assert response.report.url == "https://example.com/page"


def test_html_wins_over_url(make_controller, fake_fetcher):
    fetcher = fake_fetcher(FetchResult(ok=True, html="<p>fetched</p>"))
    response = make_controller(fetcher=fetcher).audit({"html": SCENARIO_HTML, "url": "https://example.com"})

    assert fetcher.calls == []
    assert response.report.url == "https://example.com"


def test_fetch_failure_is_returned(make_controller, fake_fetcher):
    fetcher = fake_fetcher(FetchResult(ok=False, error="HTTP status 404", code=404, status=404))
    response = make_controller(fetcher=fetcher).audit_url("https://example.com/missing")

    assert response.ok is False
    assert response.error == "HTTP status 404"
    assert response.code == 404


def test_fetch_empty_body_is_returned(make_controller, fake_fetcher):
    fetcher = fake_fetcher(FetchResult(ok=True, html="   "))
    response = make_controller(fetcher=fetcher).audit_url("https://example.com")

    assert response.ok is False
    assert response.code == "empty_body"


# --- Persistence ---

def test_report_is_persisted(make_controller, store):
    response = make_controller(store=store).audit_html(SCENARIO_HTML)

    assert isinstance(response.report_id, int)
    stored = store.get(response.report_id)
    assert stored is not None
    assert stored.checks == response.report.checks


def test_persistence_failure_does_not_fail_audit(make_controller):
    class BrokenStore:
        def save(self, report):
            raise PersistenceError("disk full")

    response = make_controller(store=BrokenStore()).audit_html(SCENARIO_HTML)

    assert response.ok is True
    assert response.report_id is None


def test_success_payload_uses_camel_case(make_controller, store):
    payload = make_controller(store=store).audit_html(SCENARIO_HTML).to_payload()

    assert payload["ok"] is True
    assert isinstance(payload["reportId"], int)
    report = payload["report"]
    for key in ("engine", "url", "createdAt", "htmlLength", "truncated", "timedOut", "checks", "summary"):
        assert key in report
    for key in ("passedCount", "totalCount", "score", "passList", "failList", "notes"):
        assert key in report["summary"]


@pytest.mark.parametrize("garbage", [
    "<<<>>><div <p></span>",
    "<html><body><img src=",
    "\x00\x01 binary-ish �",
    "<title>one</title><title>two",
])
def test_malformed_html_never_raises(make_controller, garbage):
    response = make_controller().audit_html(garbage)

    assert response.ok is True
    assert len(response.report.checks) == 9
    assert 0 <= response.report.summary.score <= 100
