"""Visible text of document nodes."""

from bs4 import NavigableString, PageElement, Tag
from bs4.element import PreformattedString

NON_CONTENT_TAGS = frozenset({"script", "style", "noscript"})


def is_text_node(node: PageElement | None) -> bool:
    """True for character data; comments, CDATA and doctypes are excluded."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def extract_text(node: PageElement | None) -> str:
    """Return the effective visible text of a text node or element."""
    if node is None:
        return ""
    if is_text_node(node):
        return str(node)
    if isinstance(node, Tag):
        if node.name in NON_CONTENT_TAGS:
            return ""
        return _rendered_text(node)
    return ""


def _rendered_text(tag: Tag) -> str:
    parts: list[str] = []
    for child in tag.children:
        if is_text_node(child):
            parts.append(str(child))
        elif isinstance(child, Tag):
            if child.name in NON_CONTENT_TAGS:
                continue
            if child.name == "br":
                parts.append("\n")
                continue
            parts.append(_rendered_text(child))
    return "".join(parts)
