import re
from typing import List

from bs4 import Tag

from ..core import RuleFinding, RuleModuleDefinition, rule_impl, MAX_EXAMPLES, heading_breaks, text_blank
from ..documents import ParsedDocument, describe_tag

BUTTON_INPUT_TYPES = {"button", "submit", "image", "reset"}
BUTTON_NAME_ATTRS = ("aria-label", "aria-labelledby", "title", "alt", "value")
LINK_NAME_ATTRS = ("aria-label", "aria-labelledby", "title")
CONTROL_NAME_ATTRS = ("aria-label", "aria-labelledby")
LIST_CHILDREN_ALLOWED = {"li", "script", "template"}

_HEADING_TAG_RE = re.compile(r'^h[1-6]$')


def _has_any_attr(tag: Tag, names) -> bool:
    return any(not text_blank(tag.get(n)) for n in names)


def _is_button_like(tag: Tag) -> bool:
    if tag.name == 'button':
        return True
    return tag.name == 'input' and str(tag.get('type', '')).strip().lower() in BUTTON_INPUT_TYPES


# --- AUDIT RULES ---


@rule_impl("images_alt")
def check_images_alt(doc: ParsedDocument) -> RuleFinding:
    images = doc.soup.find_all('img')
    missing = [img for img in images if text_blank(img.get('alt'))]

    return RuleFinding(
        ok=not missing,
        metrics={"img_total": len(images), "img_missing_alt": len(missing)},
        examples=[describe_tag(img) for img in missing[:MAX_EXAMPLES]]
    )


@rule_impl("buttons_accessible_name")
def check_buttons_named(doc: ParsedDocument) -> RuleFinding:
    buttons = doc.soup.find_all(_is_button_like)
    unnamed = [
        b for b in buttons
        if not b.get_text(" ", strip=True) and not _has_any_attr(b, BUTTON_NAME_ATTRS)
    ]

    return RuleFinding(
        ok=not unnamed,
        metrics={"btn_total": len(buttons), "btn_unnamed": len(unnamed)},
        examples=[describe_tag(b) for b in unnamed[:MAX_EXAMPLES]]
    )


@rule_impl("links_discernible")
def check_links_named(doc: ParsedDocument) -> RuleFinding:
    """
    A link is named by its text, a naming attribute, or an image child
    carrying alt text (the common logo-link case).
    """
    anchors = doc.soup.find_all('a')
    unnamed = []
    for a in anchors:
        if a.get_text(" ", strip=True) or _has_any_attr(a, LINK_NAME_ATTRS):
            continue
        if any(not text_blank(img.get('alt')) for img in a.find_all('img')):
            continue
        unnamed.append(a)

    return RuleFinding(
        ok=not unnamed,
        metrics={"a_total": len(anchors), "a_unnamed": len(unnamed)},
        examples=[describe_tag(a) for a in unnamed[:MAX_EXAMPLES]]
    )


@rule_impl("form_labels")
def check_form_labels(doc: ParsedDocument) -> RuleFinding:
    controls = doc.soup.find_all(['input', 'select', 'textarea'])
    label_targets = {
        str(label.get('for')).strip()
        for label in doc.soup.find_all('label')
        if not text_blank(label.get('for'))
    }

    unlabeled = []
    for control in controls:
        control_id = str(control.get('id') or '').strip()
        if control_id and control_id in label_targets:
            continue
        if control.find_parent('label') is not None:
            continue
        if _has_any_attr(control, CONTROL_NAME_ATTRS):
            continue
        unlabeled.append(control)

    return RuleFinding(
        ok=not unlabeled,
        metrics={"control_total": len(controls), "control_unlabeled": len(unlabeled)},
        examples=[describe_tag(c) for c in unlabeled[:MAX_EXAMPLES]]
    )


@rule_impl("headings_sequential")
def check_headings_sequential(doc: ParsedDocument) -> RuleFinding:
    levels: List[int] = [int(h.name[1]) for h in doc.soup.find_all(_HEADING_TAG_RE)]
    breaks = heading_breaks(levels)

    return RuleFinding(
        ok=not breaks,
        metrics={"heading_count": len(levels), "breaks": len(breaks)},
        examples=[{"sequence": [f"h{prev}", f"h{cur}"]} for prev, cur in breaks[:MAX_EXAMPLES]]
    )


# --- EXTENDED RULES ---


@rule_impl("touch_target_size_hint")
def check_touch_targets(doc: ParsedDocument) -> RuleFinding:
    """Layout is unknown here; flags links whose whole content is at most one character."""
    anchors = doc.soup.find_all('a')
    tiny = [a for a in anchors if len(a.decode_contents()) <= 1]

    return RuleFinding(
        ok=not tiny,
        metrics={"tiny_links": len(tiny)},
        examples=[describe_tag(a) for a in tiny[:MAX_EXAMPLES]]
    )


@rule_impl("lists_only_li")
def check_lists_only_li(doc: ParsedDocument) -> RuleFinding:
    offenders = []
    for lst in doc.soup.find_all(['ul', 'ol']):
        for child in lst.find_all(True, recursive=False):
            if child.name not in LIST_CHILDREN_ALLOWED:
                offenders.append(f"{lst.name}>{child.name}")

    return RuleFinding(
        ok=not offenders,
        metrics={"invalid_children": len(offenders)},
        examples=offenders[:MAX_EXAMPLES]
    )


# --- DEFINITION ---
DEFINITION = RuleModuleDefinition(
    engine="structured",
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
