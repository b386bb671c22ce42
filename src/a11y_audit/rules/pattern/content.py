from ..core import RuleFinding, RuleModuleDefinition, rule_impl, MAX_EXAMPLES, heading_breaks
from . import patterns as p


def _counting_finding(total: int, qualifying: int, total_key: str, qualifying_key: str) -> RuleFinding:
    """
    Shared shape of the counting heuristics: pass when the qualifying count
    reaches the total. Over-counted attribute matches can hide a violation.
    """
    missing = max(0, total - qualifying)
    return RuleFinding(
        ok=total == 0 or qualifying >= total,
        metrics={total_key: total, qualifying_key: qualifying, "approx_missing": missing}
    )


# --- AUDIT RULES ---


@rule_impl("images_alt")
def check_images_alt(html: str) -> RuleFinding:
    return _counting_finding(
        total=len(p.IMG.findall(html)),
        qualifying=len(p.IMG_WITH_ALT.findall(html)),
        total_key="img_total",
        qualifying_key="img_with_alt"
    )


@rule_impl("buttons_accessible_name")
def check_buttons_named(html: str) -> RuleFinding:
    total = len(p.BUTTON.findall(html)) + len(p.INPUT_BUTTON.findall(html))
    named = len(p.BUTTON_NAMED.findall(html)) + len(p.INPUT_NAMED.findall(html))
    return _counting_finding(total, named, "btn_total", "btn_named")


@rule_impl("links_discernible")
def check_links_named(html: str) -> RuleFinding:
    return _counting_finding(
        total=len(p.ANCHOR.findall(html)),
        qualifying=len(p.ANCHOR_NAMED.findall(html)),
        total_key="a_total",
        qualifying_key="a_named"
    )


@rule_impl("form_labels")
def check_form_labels(html: str) -> RuleFinding:
    controls = len(p.FORM_CONTROL.findall(html))
    labelled = len(p.LABEL_FOR.findall(html)) + len(p.CONTROL_ARIA_NAMED.findall(html))
    return _counting_finding(controls, labelled, "control_total", "control_labelled")


@rule_impl("headings_sequential")
def check_headings_sequential(html: str) -> RuleFinding:
    levels = [int(level) for level in p.HEADING_OPEN.findall(html)]
    breaks = heading_breaks(levels)

    return RuleFinding(
        ok=not breaks,
        metrics={"heading_count": len(levels), "breaks": len(breaks)},
        examples=[{"sequence": [f"h{prev}", f"h{cur}"]} for prev, cur in breaks[:MAX_EXAMPLES]]
    )


# --- EXTENDED RULES ---


@rule_impl("touch_target_size_hint")
def check_touch_targets(html: str) -> RuleFinding:
    tiny = len(p.TINY_ANCHOR.findall(html))
    return RuleFinding(ok=tiny == 0, metrics={"tiny_links": tiny})


@rule_impl("lists_only_li")
def check_lists_only_li(html: str) -> RuleFinding:
    bad_children = [name.lower() for name in p.LIST_BAD_CHILD.findall(html)]
    return RuleFinding(
        ok=not bad_children,
        metrics={"invalid_children": len(bad_children)},
        examples=bad_children[:MAX_EXAMPLES]
    )


# --- DEFINITION ---
DEFINITION = RuleModuleDefinition(
    engine="pattern",
    rules=[
        check_images_alt,
        check_buttons_named,
        check_links_named,
        check_form_labels,
        check_headings_sequential,
        check_touch_targets,
        check_lists_only_li,
    ]
)
