"""Access-code auto-fill on cloud-drive pages."""

from text_linkify.autofill.filler import AutoFiller

__all__ = [
    "AutoFiller",
]
