import re
from typing import Dict, Any, List, Callable, Optional, Iterable, Tuple
from pydantic import BaseModel, Field

from ..model import MetricValue

# Upper bound on offenders recorded in ``examples`` per rule
MAX_EXAMPLES = 5


class RuleSpec(BaseModel):
    """A named rule in the shared rule set: identity and rationale, no logic."""
    id: str
    rationale: str
    extended: bool = False


class RuleFinding(BaseModel):
    """
    Raw outcome produced by a rule implementation.
    The evaluator turns it into a ``CheckResult`` by adding the id and rationale.
    """
    ok: bool
    metrics: Dict[str, MetricValue] = Field(default_factory=dict)
    examples: List[Any] = Field(default_factory=list)


def rule_impl(rule_id: str):
    """
    Decorator declaring which rule of the shared rule set a function implements.
    Facilitates auto-discovery by the RuleRegistry.
    """
    def decorator(func):
        func.rule_id = rule_id
        return func
    return decorator


class RuleModuleDefinition:
    """
    Configuration object binding a set of rule implementations to an engine.
    Each implementation module exports one as ``DEFINITION``.
    """

    def __init__(self, engine: str, rules: Optional[List[Callable[[Any], RuleFinding]]] = None):
        self.engine = engine
        self.rules = rules or []

        self.rule_ids = sorted(r.rule_id for r in self.rules if hasattr(r, 'rule_id'))


# --- Shared helpers (used by both back-ends) ---


def heading_breaks(levels: Iterable[int]) -> List[Tuple[int, int]]:
    """
    Returns every (previous, current) pair where the level jumps up by more than one.
    h2 -> h4 is a break; h4 -> h2 is not. The first heading is unconstrained.
    """
    breaks = []
    last = 0
    for level in levels:
        if last > 0 and level > last + 1:
            breaks.append((last, level))
        last = level
    return breaks


_MAX_SCALE_RE = re.compile(r'maximum-scale\s*=\s*([0-9]*\.?[0-9]+)')
_USER_SCALABLE_RE = re.compile(r'user-scalable\s*=\s*["\']?\s*(no|0)\b')


def viewport_blocks_scaling(content: Optional[str]) -> Optional[str]:
    """
    Inspects the ``content`` of a viewport meta tag.
    Returns the offending directive ('user-scalable' or 'maximum-scale'), or None.
    """
    if not content:
        return None
    text = content.lower()

    if _USER_SCALABLE_RE.search(text):
        return "user-scalable"

    m = _MAX_SCALE_RE.search(text)
    if m:
        try:
            if float(m.group(1)) < 5.0:
                return "maximum-scale"
        except ValueError:
            pass  # Unparseable scale values cannot block zoom
    return None


# The parser lower-cases attribute names, so both engines read these from source text
_ARIA_ATTR_RE = re.compile(r'[\s"\'/]((?i:aria)-[A-Za-z0-9_-]{0,64})\s*=')


def aria_attribute_names(source: str) -> List[str]:
    """Returns every aria-* attribute name as written in the source, in document order."""
    return _ARIA_ATTR_RE.findall(source)


def text_blank(value: Any) -> bool:
    """True for None, empty and whitespace-only attribute values (bs4 may hand back lists)."""
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        value = " ".join(value)
    return not str(value).strip()
