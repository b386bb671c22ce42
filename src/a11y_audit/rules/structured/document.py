from ..core import (
    RuleFinding, RuleModuleDefinition, rule_impl, MAX_EXAMPLES,
    viewport_blocks_scaling, aria_attribute_names, text_blank
)
from ..documents import ParsedDocument


@rule_impl("document_title")
def check_document_title(doc: ParsedDocument) -> RuleFinding:
    """Exactly one non-empty <title> outside <body> (SVG titles do not count)."""
    titles = [t for t in doc.soup.find_all('title') if t.find_parent(['body', 'svg']) is None]
    texts = [t.get_text(" ", strip=True) for t in titles]

    ok = len(titles) == 1 and bool(texts[0])
    return RuleFinding(
        ok=ok,
        metrics={"title_count": len(titles), "title_length": len(texts[0]) if texts else 0},
        examples=[] if ok else [t[:80] for t in texts[:MAX_EXAMPLES]]
    )


@rule_impl("html_lang")
def check_html_lang(doc: ParsedDocument) -> RuleFinding:
    root = doc.soup.find('html')
    lang = root.get('lang') if root else None

    return RuleFinding(
        ok=root is not None and not text_blank(lang),
        metrics={"has_html_root": int(root is not None), "lang": str(lang or "").strip()}
    )


@rule_impl("viewport_scaling")
def check_viewport_scaling(doc: ParsedDocument) -> RuleFinding:
    viewports = [
        m for m in doc.soup.find_all('meta')
        if str(m.get('name', '')).strip().lower() == 'viewport'
    ]

    offenders = []
    for meta in viewports:
        directive = viewport_blocks_scaling(meta.get('content'))
        if directive:
            offenders.append({"directive": directive, "content": str(meta.get('content', ''))[:120]})

    return RuleFinding(
        ok=not offenders,
        metrics={"viewport_count": len(viewports), "blocking_count": len(offenders)},
        examples=offenders[:MAX_EXAMPLES]
    )


@rule_impl("aria_attributes_valid")
def check_aria_attributes(doc: ParsedDocument) -> RuleFinding:
    """
    Syntactic smell test only. Reads the source text because the parser
    lower-cases attribute names, which would hide the very typos we look for.
    """
    names = aria_attribute_names(doc.source)
    invalid = [n for n in names if n != n.lower()]

    return RuleFinding(
        ok=not invalid,
        metrics={"aria_total": len(names), "aria_invalid": len(invalid)},
        examples=sorted(set(invalid))[:MAX_EXAMPLES]
    )


# --- DEFINITION ---
DEFINITION = RuleModuleDefinition(
    engine="structured",
    rules=[check_document_title, check_html_lang, check_viewport_scaling, check_aria_attributes]
)
