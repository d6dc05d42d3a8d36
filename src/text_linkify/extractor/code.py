"""Access-code recovery from text near a drive link."""

import logging
import re

from bs4 import PageElement

from text_linkify.config import CodeSearchConfig
from text_linkify.extractor.context import build_after_window, build_before_window

logger = logging.getLogger(__name__)

CODE_LABELS: tuple[str, ...] = ("code", "pwd", "提取码", "密码", "访问码")

# Label, optional ASCII or full-width colon, then exactly four alphanumerics.
CODE_PATTERN = re.compile(
    r"(?:" + "|".join(CODE_LABELS) + r")\s*[:：]?\s*([a-zA-Z0-9]{4})",
    re.IGNORECASE,
)


def find_first_code(text: str) -> str | None:
    match = CODE_PATTERN.search(text)
    return match.group(1) if match else None


def find_last_code(text: str) -> str | None:
    best: str | None = None
    for match in CODE_PATTERN.finditer(text):
        best = match.group(1)
    return best


def extract_code(
    node: PageElement,
    match_start: int,
    match_end: int,
    config: CodeSearchConfig | None = None,
) -> str | None:
    """Find the access code closest to a link.

    The text after the link is searched first and its first candidate wins.
    Failing that, the last candidate before the link wins. Both rules favor
    the candidate physically closest to the link.

    ``node`` is either the text node holding the match or, for an existing
    anchor, the ``<a>`` element itself with ``match_start=0`` and
    ``match_end=len(text)``.
    """
    config = config or CodeSearchConfig()

    code = find_first_code(build_after_window(node, match_end, config))
    if code:
        logger.debug("Code %s found after link", code)
        return code

    code = find_last_code(build_before_window(node, match_start, config))
    if code:
        logger.debug("Code %s found before link", code)
    return code
