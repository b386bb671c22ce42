# src/a11y_audit/engines/base.py
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import EvaluatorError, RuleError
from ..model import CheckResult
from ..rules.core import RuleFinding, RuleSpec
from ..rules.registry import RuleRegistry
from ..rules.ruleset import build_rule_set

logger = logging.getLogger(__name__)


class Deadline:
    """
    Wall-clock budget for one audit, passed explicitly through evaluation.
    Cooperative: it is only consulted between rules, so a single slow rule can overrun it.
    """

    def __init__(self, budget_ms: float, clock: Callable[[], float] = time.perf_counter):
        self.budget_ms = float(budget_ms)
        self._clock = clock
        self._start = clock()

    @property
    def elapsed_ms(self) -> float:
        return (self._clock() - self._start) * 1000.0

    def expired(self) -> bool:
        return self.elapsed_ms >= self.budget_ms


class EvaluationOutcome(BaseModel):
    """
    Typed result of an evaluator run. ``ok=False`` means the engine could not
    evaluate at all (``error`` says why) and ``checks`` is empty; ``timed_out``
    is then set when preparing the document alone used up the budget.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    engine: str
    checks: List[CheckResult] = Field(default_factory=list)
    timed_out: bool = False
    error: Optional[EvaluatorError] = None


class Evaluator(ABC):
    """
    Strategy executing the shared rule set with one technique.
    Subclasses only decide how the input is prepared; the rule loop is shared.
    """
    engine: str = ""
    # Give up on the document when preparing it alone used the whole budget
    yields_on_slow_prepare: bool = False

    def __init__(self, rule_set: Optional[List[RuleSpec]] = None):
        self.rule_set = rule_set if rule_set is not None else build_rule_set()

    @classmethod
    def is_available(cls, **kwargs) -> bool:
        return True

    @abstractmethod
    def prepare(self, html: str) -> Any:
        """Turns pre-processed HTML into the object the engine's rules consume."""

    def evaluate(self, html: str, deadline: Deadline) -> EvaluationOutcome:
        try:
            document = self.prepare(html)
        except Exception as e:
            logger.info(f"{self.engine} engine could not prepare document: {e}")
            return EvaluationOutcome(
                ok=False,
                engine=self.engine,
                error=e if isinstance(e, EvaluatorError) else EvaluatorError(f"{type(e).__name__}: {e}")
            )

        if self.yields_on_slow_prepare and deadline.expired():
            logger.info(
                f"{self.engine} engine spent {deadline.elapsed_ms:.0f}ms preparing the document, "
                f"over the {deadline.budget_ms:.0f}ms budget"
            )
            return EvaluationOutcome(
                ok=False,
                engine=self.engine,
                timed_out=True,
                error=EvaluatorError(f"Preparing the document exceeded the {deadline.budget_ms:.0f}ms budget")
            )

        checks: List[CheckResult] = []
        timed_out = False

        for spec, rule in RuleRegistry.bind(self.engine, self.rule_set):
            checks.append(self._run_rule(spec, rule, document))

            if deadline.expired():
                timed_out = len(checks) < len(self.rule_set)
                if timed_out:
                    logger.warning(
                        f"Time budget of {deadline.budget_ms:.0f}ms exceeded after '{spec.id}' "
                        f"({len(checks)}/{len(self.rule_set)} rules evaluated)"
                    )
                break

        return EvaluationOutcome(ok=True, engine=self.engine, checks=checks, timed_out=timed_out)

    def _run_rule(self, spec: RuleSpec, rule: Optional[Callable], document: Any) -> CheckResult:
        """Runs one rule in isolation; any failure becomes a failing check, never an abort."""
        if rule is None:
            logger.error(f"No {self.engine} implementation registered for rule '{spec.id}'")
            return CheckResult(
                id=spec.id, ok=False,
                rationale=f"{spec.rationale} (not evaluated: no {self.engine} implementation)"
            )

        try:
            finding = rule(document)
            if not isinstance(finding, RuleFinding):
                raise TypeError(f"expected RuleFinding, got {type(finding).__name__}")
        except Exception as e:
            err = RuleError(spec.id, e)
            logger.warning(err.message)
            return CheckResult(
                id=spec.id, ok=False,
                rationale=f"{spec.rationale} (internal rule failure: {type(e).__name__})",
                metrics={"error": str(e)[:200]}
            )

        return CheckResult(
            id=spec.id,
            ok=finding.ok,
            rationale=spec.rationale,
            metrics=finding.metrics,
            examples=finding.examples
        )
