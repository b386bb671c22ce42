# src/a11y_audit/engines/pattern_engine.py
from .base import Evaluator


class PatternEvaluator(Evaluator):
    """
    Runs the rule set with regular expressions only.
    No parser dependency, always available: the fallback of last resort.
    """
    engine = "pattern"

    def prepare(self, html: str) -> str:
        return html or ""
