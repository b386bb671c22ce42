from ..core import (
    RuleFinding, RuleModuleDefinition, rule_impl, MAX_EXAMPLES,
    viewport_blocks_scaling, aria_attribute_names
)
from . import patterns as p


@rule_impl("document_title")
def check_document_title(html: str) -> RuleFinding:
    """Only titles before <body> count, which keeps inline SVG titles out."""
    body = p.BODY_OPEN.search(html)
    head_region = html[:body.start()] if body else html

    texts = [t.strip() for t in p.TITLE.findall(head_region)]
    ok = len(texts) == 1 and bool(texts[0])
    return RuleFinding(
        ok=ok,
        metrics={"title_count": len(texts), "title_length": len(texts[0]) if texts else 0},
        examples=[] if ok else [t[:80] for t in texts[:MAX_EXAMPLES]]
    )


@rule_impl("html_lang")
def check_html_lang(html: str) -> RuleFinding:
    root = p.HTML_OPEN.search(html)
    lang = p.attr_value(p.LANG_ATTR, root.group(0)) if root else None

    return RuleFinding(
        ok=bool(lang and lang.strip()),
        metrics={"has_html_root": int(root is not None), "lang": (lang or "").strip()}
    )


@rule_impl("viewport_scaling")
def check_viewport_scaling(html: str) -> RuleFinding:
    viewport_count = 0
    offenders = []
    for m in p.META.finditer(html):
        tag_text = m.group(0)
        name = p.attr_value(p.NAME_ATTR, tag_text)
        if not name or name.strip().lower() != 'viewport':
            continue
        viewport_count += 1

        content = p.attr_value(p.CONTENT_ATTR, tag_text)
        directive = viewport_blocks_scaling(content)
        if directive:
            offenders.append({"directive": directive, "content": (content or "")[:120]})

    return RuleFinding(
        ok=not offenders,
        metrics={"viewport_count": viewport_count, "blocking_count": len(offenders)},
        examples=offenders[:MAX_EXAMPLES]
    )


@rule_impl("aria_attributes_valid")
def check_aria_attributes(html: str) -> RuleFinding:
    names = aria_attribute_names(html)
    invalid = [n for n in names if n != n.lower()]

    return RuleFinding(
        ok=not invalid,
        metrics={"aria_total": len(names), "aria_invalid": len(invalid)},
        examples=sorted(set(invalid))[:MAX_EXAMPLES]
    )


# --- DEFINITION ---
DEFINITION = RuleModuleDefinition(
    engine="pattern",
    rules=[check_document_title, check_html_lang, check_viewport_scaling, check_aria_attributes]
)
