from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MetricValue = Union[int, float, str]
EngineName = Literal["structured", "pattern"]


class _FrozenModel(BaseModel):
    """
    Base for all audit models: immutable once produced, snake_case in Python,
    camelCase on the wire (``model_dump(by_alias=True)``).
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AuditInput(_FrozenModel):
    """Caller input. ``html`` is authoritative when non-empty; ``url`` is fetched otherwise."""
    html: Optional[str] = None
    url: Optional[str] = None

    @field_validator('html', 'url', mode='before')
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        """Accepts bytes and other scalars from loosely typed callers (forms, JSON)."""
        if v is None:
            return None
        if isinstance(v, bytes):
            return v.decode('utf-8', errors='replace')
        return str(v)

    @property
    def has_html(self) -> bool:
        return bool(self.html and self.html.strip())

    @property
    def has_url(self) -> bool:
        return bool(self.url and self.url.strip())


class CheckResult(_FrozenModel):
    """Outcome of a single rule. One per evaluated rule, in rule-set order."""
    id: str
    ok: bool
    rationale: str
    metrics: Dict[str, MetricValue] = Field(default_factory=dict)
    examples: List[Any] = Field(default_factory=list)


class AuditSummary(_FrozenModel):
    passed_count: int
    total_count: int
    score: int = Field(ge=0, le=100)
    pass_list: List[str] = Field(default_factory=list)
    fail_list: List[str] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)

    @classmethod
    def from_checks(cls, checks: List[CheckResult], notes: Optional[List[str]] = None) -> "AuditSummary":
        """
        Derives the summary from the evaluated checks only.
        Rules skipped by the time budget are absent from ``checks`` and therefore
        do not count towards either side of the score.
        """
        total = len(checks)
        passed = sum(1 for c in checks if c.ok)

        return cls(
            passed_count=passed,
            total_count=total,
            score=score_for(passed, total),
            pass_list=[c.rationale for c in checks if c.ok],
            fail_list=[c.rationale for c in checks if not c.ok],
            notes=list(notes or [])
        )


def score_for(passed: int, total: int) -> int:
    """Percentage of passing checks, rounded half-up; 100 for an empty rule set."""
    if total <= 0:
        return 100
    # Integer arithmetic: round-half-up of passed * 100 / total
    return (passed * 200 + total) // (2 * total)


class AuditReport(_FrozenModel):
    """
    Full result of one audit invocation.
    Ownership passes to the caller; nothing in the engine keeps a reference.
    """
    engine: EngineName
    url: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    html_length: int = 0
    truncated: bool = False
    timed_out: bool = False
    checks: List[CheckResult] = Field(default_factory=list)
    summary: AuditSummary

    def get_check(self, rule_id: str) -> Optional[CheckResult]:
        return next((c for c in self.checks if c.id == rule_id), None)


class AuditResponse(_FrozenModel):
    """
    Orchestrator return shape: either ``{ok: False, error, code?}`` or
    ``{ok: True, report, reportId?}``. Callers must check ``ok`` first.
    """
    ok: bool
    report: Optional[AuditReport] = None
    report_id: Optional[int] = None
    error: Optional[str] = None
    code: Optional[Union[str, int]] = None

    @classmethod
    def failure(cls, error: str, code: Optional[Union[str, int]] = None) -> "AuditResponse":
        return cls(ok=False, error=error, code=code)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class FetchResult(_FrozenModel):
    """Fetch adapter contract: ``{ok: True, html}`` or ``{ok: False, error, code?}``."""
    ok: bool
    html: Optional[str] = None
    error: Optional[str] = None
    code: Optional[Union[str, int]] = None
    status: Optional[int] = None
