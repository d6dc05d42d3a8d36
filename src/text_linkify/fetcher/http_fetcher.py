"""Static page loading over httpx."""

import httpx

from text_linkify.config import FetcherConfig
from text_linkify.fetcher.base import BaseFetcher, FetchResult


class HttpFetcher(BaseFetcher):
    """Load pages without running their scripts."""

    def __init__(self, config: FetcherConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(config)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
            timeout=self.config.timeout_ms / 1000,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> FetchResult:
        if self._client is None:
            raise RuntimeError("HttpFetcher is not open; use 'async with'")

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            return FetchResult.failed(url, str(e) or type(e).__name__)

        return FetchResult(
            url=url,
            final_url=str(response.url),
            html=response.text,
            status_code=response.status_code,
            retry_after=self.parse_retry_after(response.headers.get("retry-after"))
            if response.status_code == 429
            else None,
        )
