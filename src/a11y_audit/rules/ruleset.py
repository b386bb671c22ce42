from typing import List

from .core import RuleSpec

# Canonical rule set, in evaluation order. Both engines implement every entry.
CORE_RULES: List[RuleSpec] = [
    RuleSpec(id="document_title", rationale="Ensure the document has a single non-empty <title> element"),
    RuleSpec(id="html_lang", rationale="Ensure the <html> element has a [lang] attribute"),
    RuleSpec(id="images_alt", rationale="Ensure image elements have [alt] attributes"),
    RuleSpec(id="buttons_accessible_name", rationale="Ensure buttons have an accessible name"),
    RuleSpec(id="links_discernible", rationale="Ensure links have discernible names"),
    RuleSpec(id="form_labels", rationale="Ensure form elements have associated labels"),
    RuleSpec(id="headings_sequential", rationale="Ensure heading elements are in sequentially-descending order"),
    RuleSpec(
        id="viewport_scaling",
        rationale='Ensure [user-scalable="no"] is not used and [maximum-scale] is not less than 5'
    ),
    RuleSpec(id="aria_attributes_valid", rationale="Ensure [aria-*] attributes are valid and not misspelled"),
]

# Opt-in heuristics (audit.extended_rules); appended after the core set
EXTENDED_RULES: List[RuleSpec] = [
    RuleSpec(
        id="touch_target_size_hint",
        rationale="Ensure touch targets have sufficient size and spacing (heuristic)",
        extended=True
    ),
    RuleSpec(
        id="lists_only_li",
        rationale="Ensure lists contain only <li> elements and script/template",
        extended=True
    ),
]


def build_rule_set(extended: bool = False) -> List[RuleSpec]:
    """Returns the ordered rule set for one audit. A fresh list per call."""
    rules = list(CORE_RULES)
    if extended:
        rules.extend(EXTENDED_RULES)
    return rules


def all_rule_ids() -> List[str]:
    return [r.id for r in CORE_RULES + EXTENDED_RULES]
