"""Exception types raised by text-linkify."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from text_linkify.fetcher.base import FetchResult


class LinkifyError(Exception):
    """Base class for text-linkify errors."""


class PageLoadError(LinkifyError):
    """A source page could not be loaded."""

    def __init__(self, message: str, result: "FetchResult | None" = None):
        super().__init__(message)
        self.result = result


class SettingsError(LinkifyError):
    """The persisted settings file is unreadable or malformed."""
