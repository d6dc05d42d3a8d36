"""URL manipulation utilities."""

import re
from urllib.parse import urlparse

_CODE_PARAM = re.compile(r"(?:^|[#&])pwd=([^&#]*)")


def get_host(url: str) -> str:
    """Extract the lowercase hostname from a URL (empty for file paths)."""
    return (urlparse(url).hostname or "").lower()


def is_web_url(source: str) -> bool:
    """Check if a source string is an http(s) URL rather than a local path."""
    return urlparse(source).scheme in ("http", "https")


def code_from_fragment(url: str) -> str | None:
    """Return the access code carried as ``pwd=`` in the URL fragment."""
    if "#" not in url:
        return None
    fragment = url.split("#", 1)[1]
    match = _CODE_PARAM.search(fragment)
    if not match or not match.group(1):
        return None
    return match.group(1)


def has_code_fragment(url: str) -> bool:
    """Check if the URL fragment already carries a ``pwd=`` parameter."""
    if "#" not in url:
        return False
    return _CODE_PARAM.search(url.split("#", 1)[1]) is not None


def with_code_fragment(href: str, code: str) -> str:
    """Attach an access code to a link target as a ``pwd=`` fragment parameter."""
    if "#" in href:
        return f"{href}&pwd={code}"
    return f"{href}#pwd={code}"
