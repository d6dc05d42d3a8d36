"""Heuristic URL recognition in plain text."""

import re
from collections.abc import Iterator
from dataclasses import dataclass

# Generic, country-code and "new gTLD" suffixes accepted without a scheme.
TLDS: tuple[str, ...] = (
    "com", "cn", "net", "org", "edu", "gov", "io", "me", "info", "biz",
    "top", "vip", "cc", "co", "uk", "jp", "de", "fr", "ru", "au", "us",
    "ca", "br", "it", "es", "nl", "se", "no", "pl", "fi", "gr", "tr",
    "cz", "ro", "hu", "dk", "be", "at", "ch", "pt", "ie", "mx", "sg",
    "my", "th", "vn", "ph", "id", "sa", "za", "nz", "tw", "hk", "kr",
    "in", "tk", "ml", "ga", "cf", "gq", "tv", "ws", "xyz", "site", "win",
    "club", "online", "fun", "wang", "space", "shop", "ltd", "work",
    "live", "store", "bid", "loan", "click", "wiki", "tech", "cloud",
    "art", "love", "press", "website", "trade", "date", "party", "review",
    "video", "web", "link", "mobi", "pro", "app", "dev", "ly",
)

SCHEMES: tuple[str, ...] = (
    "https://",
    "http://",
    "magnet:?xt=",
    "tg://",
    "ms-windows-store://",
    "ed2k://",
    "thunder://",
)

# Characters that end a URL: whitespace (including the Unicode spaces common
# in CJK text), angle brackets, quotes and full-width parentheses.
_STOP = r"\s\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff<>\"'（）"
_TAIL = rf"(?:[/?#][^{_STOP}]*)?"
# Protocol-less forms may not start in the middle of an identifier.
_NOT_MID_TOKEN = r"(?<![a-z0-9@._-])"

URL_PATTERN = re.compile(
    "(?:"
    + "|".join(re.escape(s) for s in SCHEMES)
    + rf")[^{_STOP}]+"
    + rf"|{_NOT_MID_TOKEN}\b[a-z0-9][a-z0-9.-]*\.(?:{'|'.join(TLDS)})\b(?![@-]){_TAIL}"
    + rf"|{_NOT_MID_TOKEN}\bwww\.[a-z0-9.-]+\b{_TAIL}",
    re.IGNORECASE | re.ASCII,
)

_TRAILING_PUNCTUATION = frozenset(',.;:!?")]。')

_HAS_SCHEME = re.compile(r"^(?:[a-z][a-z0-9+.-]*://|magnet:)", re.IGNORECASE)


@dataclass(frozen=True)
class MatchSpan:
    """A recognized URL substring of a text node's value."""

    start: int
    end: int
    raw: str

    @property
    def url(self) -> str:
        """The match with trailing punctuation trimmed."""
        return trim_url(self.raw)

    @property
    def trailing(self) -> str:
        """Punctuation trimmed off the match, re-inserted after the link."""
        return self.raw[len(self.url):]

    @property
    def href(self) -> str:
        return build_href(self.url)


def find_urls(text: str) -> Iterator[MatchSpan]:
    """Yield non-overlapping URL matches from left to right.

    Every call starts a fresh scan, so concurrent iterators over the same
    pattern never share a position.
    """
    if not text:
        return
    for match in URL_PATTERN.finditer(text):
        yield MatchSpan(start=match.start(), end=match.end(), raw=match.group(0))


def trim_url(url: str) -> str:
    """Trim trailing punctuation from a raw URL match.

    A trailing ``)`` is kept when the URL holds at least as many ``(`` as
    ``)``, so ``https://site.com/foo_(bar)`` survives intact while
    ``(https://site.com/foo)`` loses the closing paren.
    """
    end = len(url) - 1
    open_count = url.count("(")
    close_count = url.count(")")

    while end >= 0:
        char = url[end]
        if char not in _TRAILING_PUNCTUATION:
            break
        if char == ")":
            if close_count > open_count:
                close_count -= 1
                end -= 1
                continue
            # Balanced or more opens, likely part of the URL
            break
        end -= 1

    return url[: end + 1]


def build_href(url: str) -> str:
    """Link target for a trimmed match; bare domains default to https."""
    if _HAS_SCHEME.match(url):
        return url
    return "https://" + url
