"""Page loading contract shared by the HTTP and browser fetchers."""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from pydantic import BaseModel

from text_linkify.config import FetcherConfig

logger = logging.getLogger(__name__)

MAX_RETRY_DELAY = 60.0


class FetchResult(BaseModel):
    """Outcome of loading one page."""

    url: str
    final_url: str
    html: str
    status_code: int
    error: str | None = None
    retry_after: float | None = None
    attempts: int = 1

    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 400 and not self.error

    @property
    def failure_reason(self) -> str:
        return self.error or f"HTTP {self.status_code}"

    @classmethod
    def failed(cls, url: str, error: str) -> "FetchResult":
        return cls(url=url, final_url=url, html="", status_code=0, error=error)


class BaseFetcher(ABC):
    """A page loader used as an async context manager."""

    def __init__(self, config: FetcherConfig):
        self.config = config

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @abstractmethod
    async def open(self) -> None:
        """Acquire clients or browsers."""

    @abstractmethod
    async def close(self) -> None:
        """Release everything ``open`` acquired; safe after a partial open."""

    @abstractmethod
    async def fetch(self, url: str) -> FetchResult:
        """Load one page; failures are reported in the result, not raised."""

    async def fetch_with_retry(self, url: str) -> FetchResult:
        """Fetch, retrying rate limits, server errors and connection failures."""
        result = FetchResult.failed(url, "no attempts")
        for attempt in range(self.config.max_retries + 1):
            result = await self.fetch(url)
            result.attempts = attempt + 1
            if result.success or not self.is_retryable(result):
                return result
            if attempt == self.config.max_retries:
                break
            delay = self.backoff_delay(attempt, result)
            logger.info(
                "Fetching %s failed (%s), retry %d in %.1fs",
                url,
                result.failure_reason,
                attempt + 1,
                delay,
            )
            await asyncio.sleep(delay)
        return result

    def backoff_delay(self, attempt: int, result: FetchResult) -> float:
        delay = self.config.retry_base_delay * (2**attempt) + random.uniform(0, 0.5)
        if result.retry_after is not None:
            delay = max(delay, result.retry_after)
        return min(delay, MAX_RETRY_DELAY)

    @staticmethod
    def is_retryable(result: FetchResult) -> bool:
        if result.status_code == 0:
            return bool(result.error)
        return result.status_code == 429 or result.status_code >= 500

    @staticmethod
    def parse_retry_after(value: str | None) -> float | None:
        """Seconds to wait from a ``Retry-After`` header (delta-seconds or HTTP-date)."""
        if not value:
            return None
        try:
            return max(0.0, float(value))
        except ValueError:
            pass
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
