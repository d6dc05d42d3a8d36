"""Utility functions."""

from text_linkify.utils.url_utils import (
    code_from_fragment,
    get_host,
    has_code_fragment,
    is_web_url,
    with_code_fragment,
)

__all__ = [
    "get_host",
    "is_web_url",
    "code_from_fragment",
    "has_code_fragment",
    "with_code_fragment",
]
