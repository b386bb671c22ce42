import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..engines.base import Deadline, EvaluationOutcome
from ..engines.pattern_engine import PatternEvaluator
from ..engines.structured_engine import StructuredEvaluator, DEFAULT_PARSER
from ..errors import AuditError, FetchError, InputError
from ..managers.config_manager import config_manager
from ..model import AuditInput, AuditReport, AuditResponse, AuditSummary
from ..rules.ruleset import build_rule_set
from ..services.fetch_service import HttpFetchService
from ..services.preprocess_service import HtmlPreprocessService, DEFAULT_MAX_BYTES

logger = logging.getLogger(__name__)

DEFAULT_TIME_BUDGET_MS = 400

NOTE_MANUAL_CHECKS = "Contrast ratios and touch target sizes require client-side evaluation."
NOTE_TRUNCATED = "html_truncated"
NOTE_TIMED_OUT = "time_budget_exceeded"
NOTE_PARSER_FALLBACK = "structured_parse_failed"
NOTE_PARSER_OVER_BUDGET = "structured_parse_over_budget"


class AuditController:
    """
    Entry point of the audit engine.

    Validates input, fetches when only a URL is given, bounds and cleans the
    HTML, runs the preferred evaluator under a time budget (falling back to
    the pattern engine, with a fresh budget, when structured parsing fails or
    uses up the budget), summarises, and hands the report to the store on a
    best-effort basis.

    Only missing input and fetch failures produce ``ok=False``; everything
    else degrades inside the report (flags and notes).
    """

    def __init__(
            self,
            fetcher=None,
            store=None,
            config: Optional[Dict[str, Any]] = None,
            clock: Callable[[], float] = time.perf_counter
    ):
        audit_cfg = config if config is not None else config_manager.get_section("audit")

        self.max_bytes = int(audit_cfg.get("max_bytes", DEFAULT_MAX_BYTES))
        self.time_budget_ms = float(audit_cfg.get("time_budget_ms", DEFAULT_TIME_BUDGET_MS))
        self.parser = audit_cfg.get("parser") or DEFAULT_PARSER
        self.prefer_structured = bool(audit_cfg.get("prefer_structured", True))
        self.extended_rules = bool(audit_cfg.get("extended_rules", False))

        self.fetcher = fetcher
        self.store = store
        self.clock = clock
        self.preprocessor = HtmlPreprocessService(self.max_bytes)

    # --- PUBLIC API ---

    def audit(self, audit_input: Union[AuditInput, Mapping[str, Any]]) -> AuditResponse:
        """Runs one audit. Never raises for present-but-malformed HTML."""
        if not isinstance(audit_input, AuditInput):
            audit_input = AuditInput.model_validate(dict(audit_input or {}))

        try:
            html = self._resolve_html(audit_input)
        except AuditError as e:
            logger.warning(f"Audit rejected: {e.message}")
            return AuditResponse.failure(e.message, e.code)

        report = self._build_report(html, (audit_input.url or "").strip())
        report_id = self._persist(report)

        return AuditResponse(ok=True, report=report, report_id=report_id)

    def audit_html(self, html: str, url: str = "") -> AuditResponse:
        return self.audit(AuditInput(html=html, url=url or None))

    def audit_url(self, url: str) -> AuditResponse:
        return self.audit(AuditInput(url=url))

    # --- PIPELINE STEPS ---

    def _resolve_html(self, audit_input: AuditInput) -> str:
        if audit_input.has_html:
            return audit_input.html
        if not audit_input.has_url:
            raise InputError("Empty input")

        url = audit_input.url.strip()
        if self.fetcher is not None:
            result = self.fetcher.fetch(url)
        else:
            with self._default_fetcher() as fetcher:
                result = fetcher.fetch(url)

        if not result.ok:
            raise FetchError(result.error or "Fetch failed", result.code)
        if not result.html or not result.html.strip():
            raise FetchError("Empty HTML", "empty_body")
        return result.html

    def _build_report(self, html: str, url: str) -> AuditReport:
        prepared = self.preprocessor.prepare(html)
        started = self.clock()
        rule_set = build_rule_set(extended=self.extended_rules)

        notes: List[str] = [NOTE_MANUAL_CHECKS]
        outcome = self._evaluate(prepared.html, rule_set, notes)

        if prepared.truncated:
            notes.append(NOTE_TRUNCATED)
        if outcome.timed_out:
            notes.append(NOTE_TIMED_OUT)

        summary = AuditSummary.from_checks(outcome.checks, notes)
        logger.info(
            f"Audit finished ({outcome.engine}): {summary.passed_count}/{summary.total_count} passed, "
            f"score {summary.score}, {(self.clock() - started) * 1000.0:.1f}ms"
        )

        return AuditReport(
            engine=outcome.engine,
            url=url,
            html_length=prepared.original_length,
            truncated=prepared.truncated,
            timed_out=outcome.timed_out,
            checks=outcome.checks,
            summary=summary
        )

    def _evaluate(self, html: str, rule_set, notes: List[str]) -> EvaluationOutcome:
        """
        Structured engine first when it is wanted and installed; the pattern
        engine otherwise, or whenever the structured outcome reports failure.
        Each evaluator gets its own budget.
        """
        if self.prefer_structured and StructuredEvaluator.is_available(parser=self.parser):
            outcome = StructuredEvaluator(rule_set, parser=self.parser).evaluate(html, self._new_deadline())
            if outcome.ok:
                return outcome
            logger.info(f"Falling back to pattern engine: {outcome.error}")
            notes.append(NOTE_PARSER_OVER_BUDGET if outcome.timed_out else NOTE_PARSER_FALLBACK)
        elif self.prefer_structured:
            logger.debug(f"Parser '{self.parser}' unavailable; using pattern engine")

        return PatternEvaluator(rule_set).evaluate(html, self._new_deadline())

    def _new_deadline(self) -> Deadline:
        return Deadline(self.time_budget_ms, clock=self.clock)

    def _persist(self, report: AuditReport) -> Optional[int]:
        """Best-effort: a store failure is logged and never fails the audit."""
        if self.store is None:
            return None
        try:
            return self.store.save(report)
        except Exception as e:
            logger.warning(f"Report could not be persisted: {e}")
            return None

    @staticmethod
    def _default_fetcher() -> HttpFetchService:
        return HttpFetchService(config_manager.get_section("fetch"))
