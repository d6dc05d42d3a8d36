"""Page fetching with optional JavaScript rendering."""

from text_linkify.fetcher.base import BaseFetcher, FetchResult
from text_linkify.fetcher.http_fetcher import HttpFetcher
from text_linkify.fetcher.playwright_fetcher import PlaywrightFetcher

__all__ = [
    "BaseFetcher",
    "FetchResult",
    "PlaywrightFetcher",
    "HttpFetcher",
]
