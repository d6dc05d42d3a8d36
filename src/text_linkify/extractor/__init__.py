"""Text extraction and access-code search."""

from text_linkify.extractor.code import extract_code
from text_linkify.extractor.context import build_after_window, build_before_window
from text_linkify.extractor.text import extract_text, is_text_node

__all__ = [
    "extract_code",
    "extract_text",
    "is_text_node",
    "build_after_window",
    "build_before_window",
]
