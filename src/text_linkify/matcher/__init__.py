"""URL recognition."""

from text_linkify.matcher.url_matcher import MatchSpan, build_href, find_urls, trim_url

__all__ = [
    "MatchSpan",
    "find_urls",
    "trim_url",
    "build_href",
]
