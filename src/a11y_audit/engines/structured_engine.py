# src/a11y_audit/engines/structured_engine.py
import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.builder import builder_registry

from .base import Evaluator
from ..errors import EvaluatorError
from ..rules.core import RuleSpec
from ..rules.documents import ParsedDocument

logger = logging.getLogger(__name__)

DEFAULT_PARSER = "html.parser"


class StructuredEvaluator(Evaluator):
    """
    Runs the rule set over a BeautifulSoup tree.

    Preferred engine: the parser normalises malformed markup, so attribute
    order, quoting and self-closing variants stop mattering. Any failure to
    build the tree is reported through the outcome, never raised, so the
    orchestrator can fall back to the pattern engine.
    """
    engine = "structured"
    yields_on_slow_prepare = True

    def __init__(self, rule_set: Optional[List[RuleSpec]] = None, parser: str = DEFAULT_PARSER):
        super().__init__(rule_set)
        self.parser = parser or DEFAULT_PARSER

    @classmethod
    def is_available(cls, parser: str = DEFAULT_PARSER, **kwargs) -> bool:
        """Capability check: is a tree builder for the requested parser installed?"""
        return builder_registry.lookup(parser or DEFAULT_PARSER) is not None

    def prepare(self, html: str) -> ParsedDocument:
        try:
            soup = BeautifulSoup(html, self.parser)
        except Exception as e:
            raise EvaluatorError(f"Parser '{self.parser}' failed: {type(e).__name__}: {e}") from e

        if soup is None:
            raise EvaluatorError(f"Parser '{self.parser}' produced no document")

        logger.debug(f"Parsed document with '{self.parser}' ({len(html)} chars)")
        return ParsedDocument(soup=soup, source=html)
