"""Bounded text windows around a link for access-code search.

Access codes are often published on the following (or preceding) line or
paragraph rather than right next to the link, so the windows reach past the
anchor node into its siblings and into the siblings of a few ancestors.
"""

from typing import Literal

from bs4 import PageElement, Tag

from text_linkify.config import CodeSearchConfig
from text_linkify.extractor.text import extract_text, is_text_node

Direction = Literal["next", "prev"]

_DEFAULT_CONFIG = CodeSearchConfig()


def own_text(node: PageElement) -> str:
    """Text the match offsets refer to: a text node's value or an element's visible text."""
    return extract_text(node)


def sibling_text(
    start: PageElement,
    direction: Direction = "next",
    config: CodeSearchConfig = _DEFAULT_CONFIG,
) -> str:
    """Collect text from the meaningful siblings of ``start`` in one direction.

    Whitespace-only text and ``<br>`` are skipped without counting as a step.
    Each meaningful sibling is joined with a newline on the side facing the
    start node. The walk stops once the text exceeds ``sibling_text_cap``
    characters or ``max_sibling_steps`` meaningful siblings were taken.
    """
    current: PageElement | None = start
    result = ""
    steps = 0

    while current is not None and steps < config.max_sibling_steps:
        current = current.next_sibling if direction == "next" else current.previous_sibling
        if current is None:
            break

        if is_text_node(current) and not str(current).strip():
            continue
        if isinstance(current, Tag) and current.name == "br":
            continue

        content = extract_text(current)
        if content.strip():
            if direction == "next":
                result += "\n" + content
            else:
                result = content + "\n" + result

            if len(result) > config.sibling_text_cap:
                break
            steps += 1

    return result


def build_after_window(
    node: PageElement,
    end_offset: int,
    config: CodeSearchConfig = _DEFAULT_CONFIG,
) -> str:
    """Text following a match, nearest first."""
    text = own_text(node)
    window = text[end_offset : end_offset + config.search_range]
    window += sibling_text(node, "next", config)

    parent = node.parent
    levels = config.ancestor_levels
    while parent is not None and levels > 0:
        # The next paragraph or block may hold the code, not just the inline run.
        window += sibling_text(parent, "next", config)
        parent = parent.parent
        levels -= 1

    return window


def build_before_window(
    node: PageElement,
    start_offset: int,
    config: CodeSearchConfig = _DEFAULT_CONFIG,
) -> str:
    """Text preceding a match; text further from the match comes first."""
    text = own_text(node)
    window = text[max(0, start_offset - config.search_range) : start_offset]
    window = sibling_text(node, "prev", config) + window

    parent = node.parent
    levels = config.ancestor_levels
    while parent is not None and levels > 0:
        window = sibling_text(parent, "prev", config) + window
        parent = parent.parent
        levels -= 1

    return window
