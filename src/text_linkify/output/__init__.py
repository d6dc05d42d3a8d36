"""Output writers."""

from text_linkify.output.html_file import HtmlFileOutput

__all__ = [
    "HtmlFileOutput",
]
