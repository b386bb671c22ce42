from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict


class ParsedDocument(BaseModel):
    """
    Input handed to structured rules: the parsed tree plus the (pre-processed)
    source text it was built from, for checks the parser normalises away.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    soup: BeautifulSoup
    source: str


def describe_tag(tag: Tag, limit: int = 80) -> str:
    """Short, stable description of an element for report examples."""
    parts = [tag.name]
    if tag.get('id'):
        parts.append(f"#{tag.get('id')}")
    classes = tag.get('class')
    if classes:
        parts.append("." + ".".join(classes if isinstance(classes, list) else [classes]))
    for attr in ('src', 'href', 'name', 'type'):
        value = tag.get(attr)
        if value:
            parts.append(f"[{attr}={value}]")
            break
    return "".join(parts)[:limit]
