# src/a11y_audit/services/preprocess_service.py
import logging
import re

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 1_500_000

# Blocks whose contents pollute text matching and carry no accessibility structure
_NON_CONTENT_BLOCKS = re.compile(
    r'<(script|style|template|noscript)\b[^>]*>.*?</\1\s*>',
    re.IGNORECASE | re.DOTALL
)

# A block that is never closed swallows the rest of the document
_UNTERMINATED_BLOCK = re.compile(
    r'<(script|style|template|noscript)\b[^>]*>.*\Z',
    re.IGNORECASE | re.DOTALL
)


class PreparedHtml(BaseModel):
    html: str
    original_length: int
    truncated: bool = False


class HtmlPreprocessService:
    """
    Cleans and bounds raw HTML before any rule sees it.

    Non-content blocks are stripped first and the size cap applies to what
    remains. ``original_length`` is the byte length of the caller's input and
    ``truncated`` is set whenever that input exceeded the cap.
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self.max_bytes = int(max_bytes)

    def prepare(self, html: str) -> PreparedHtml:
        raw = html or ""
        original_length = len(raw.encode('utf-8', errors='replace'))
        truncated = 0 < self.max_bytes < original_length

        clean = self.strip_non_content(raw.replace('\ufeff', ''))

        encoded = clean.encode('utf-8', errors='replace')
        if truncated and len(encoded) > self.max_bytes:
            # A split multi-byte character is dropped, not mangled
            clean = encoded[:self.max_bytes].decode('utf-8', errors='ignore')
            logger.info(f"Stripped HTML cut from {len(encoded)} to {self.max_bytes} bytes")
        elif truncated:
            logger.debug(f"Input of {original_length} bytes fits the cap once stripped")

        return PreparedHtml(html=clean, original_length=original_length, truncated=truncated)

    @staticmethod
    def strip_non_content(html: str) -> str:
        """
        Removes <script>, <style>, <template> and <noscript> blocks, tags
        included. An opener without a closing tag is dropped with everything
        after it.
        """
        return _UNTERMINATED_BLOCK.sub('', _NON_CONTENT_BLOCKS.sub('', html))
