# src/a11y_audit/rules/pattern/patterns.py
"""
Compiled patterns for the text-only engine.

Every pattern is anchored on a literal ``<tag\\b`` and only uses character
classes that cannot cross a tag boundary (``[^>]``, ``[^"]``), so a failed
attempt never rescans more than the tag it started in. Repetition of nested
tags is bounded.
"""
import re
from typing import Optional

_I = re.IGNORECASE

# A non-blank attribute value in any quoting style
NON_BLANK_VALUE = r'''(?:"\s*[^"\s][^"]*"|'\s*[^'\s][^']*'|[^\s"'>]+)'''

# --- Document ---
BODY_OPEN = re.compile(r'<body\b', _I)
TITLE = re.compile(r'<title\b[^>]*>([^<]*)</title\s*>', _I)
HTML_OPEN = re.compile(r'<html\b[^>]*>', _I)
META = re.compile(r'<meta\b[^>]*>', _I)

# --- Images ---
IMG = re.compile(r'<img\b[^>]*>', _I)
IMG_WITH_ALT = re.compile(r'<img\b[^>]*?\salt\s*=\s*' + NON_BLANK_VALUE + r'[^>]*>', _I)

# --- Buttons ---
BUTTON = re.compile(r'<button\b[^>]*>', _I)
INPUT_BUTTON = re.compile(r'''<input\b[^>]*?\stype\s*=\s*["']?\s*(?:button|submit|image|reset)\b[^>]*>''', _I)
BUTTON_NAMED = re.compile(
    r'<button\b(?:'
    r'[^>]*?\s(?:aria-label|aria-labelledby|title)\s*=\s*' + NON_BLANK_VALUE + r'[^>]*>'
    r'|[^>]*>(?:\s*<[a-z][^>]*>){0,5}\s*[^<\s]'
    r')',
    _I
)
# Any input carrying one of the naming attributes qualifies, blank or not
INPUT_NAMED = re.compile(r'<input\b[^>]*?\s(?:aria-label|aria-labelledby|title|alt|value)\s*=', _I)

# --- Links ---
ANCHOR = re.compile(r'<a\b[^>]*>', _I)
ANCHOR_NAMED = re.compile(
    r'<a\b(?:'
    r'[^>]*?\s(?:aria-label|aria-labelledby|title)\s*=\s*' + NON_BLANK_VALUE + r'[^>]*>'
    r'|[^>]*>(?:\s*<(?!img\b)[a-z][^>]*>){0,5}\s*'
    r'(?:[^<\s]|<img\b[^>]*?\salt\s*=\s*' + NON_BLANK_VALUE + r')'
    r')',
    _I
)

# --- Forms ---
FORM_CONTROL = re.compile(r'<(?:input|select|textarea)\b[^>]*>', _I)
LABEL_FOR = re.compile(r'<label\b[^>]*?\sfor\s*=\s*' + NON_BLANK_VALUE, _I)
CONTROL_ARIA_NAMED = re.compile(
    r'<(?:input|select|textarea)\b[^>]*?\saria-label(?:ledby)?\s*=\s*' + NON_BLANK_VALUE, _I
)

# --- Headings ---
HEADING_OPEN = re.compile(r'<h([1-6])\b[^>]*>', _I)

# --- Extended ---
TINY_ANCHOR = re.compile(r'<a\b[^>]*>[^<]?</a\s*>', _I)
LIST_BAD_CHILD = re.compile(
    r'(?:<(?:ul|ol)\b[^>]*>|</li\s*>)\s*<(?!li\b|script\b|template\b)([a-z][a-z0-9]*)', _I
)


def attr_pattern(name: str) -> re.Pattern:
    """Matches ``name=value`` inside a single tag; the value is in one of three groups."""
    return re.compile(
        r'\s' + re.escape(name) + r'''\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))''',
        _I
    )


LANG_ATTR = attr_pattern('lang')
NAME_ATTR = attr_pattern('name')
CONTENT_ATTR = attr_pattern('content')


def attr_value(pattern: re.Pattern, tag_text: str) -> Optional[str]:
    m = pattern.search(tag_text)
    if not m:
        return None
    return next((g for g in m.groups() if g is not None), "")
