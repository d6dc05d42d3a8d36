"""Browser-rendered page loading and auto-fill over Playwright."""

import asyncio
import logging

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from text_linkify.autofill import AutoFiller
from text_linkify.config import FetcherConfig
from text_linkify.fetcher.base import BaseFetcher, FetchResult

logger = logging.getLogger(__name__)


class PlaywrightFetcher(BaseFetcher):
    """Render pages in Chromium; also drives access-code auto-fill on drive pages.

    Each call opens a fresh page in a shared context and closes it afterwards,
    so one fetcher can serve a whole run.
    """

    def __init__(self, config: FetcherConfig):
        super().__init__(config)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def open(self) -> None:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={"width": 1280, "height": 720},
            )
        except Exception:
            await self.close()
            raise

    async def close(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._context = self._browser = self._playwright = None

    async def fetch(self, url: str) -> FetchResult:
        """Load ``url`` and return the rendered HTML."""
        page = await self._new_page()
        try:
            status = await self._goto(page, url)
            if status == 0:
                return FetchResult.failed(url, "No response received")
            return FetchResult(
                url=url,
                final_url=page.url,
                html=await page.content(),
                status_code=status,
            )
        except Exception as e:
            logger.debug("Rendering %s failed", url, exc_info=True)
            return FetchResult.failed(url, str(e))
        finally:
            await _close_quietly(page)

    async def autofill(self, url: str, filler: AutoFiller) -> FetchResult:
        """Open a drive page, let ``filler`` submit its access code, report where it landed."""
        page = await self._new_page()
        try:
            status = await self._goto(page, url)
            filled = await filler.run(page)
            if filled:
                try:
                    await page.wait_for_load_state("networkidle", timeout=10000)
                except Exception:
                    logger.debug("Page did not settle after submit: %s", url, exc_info=True)
            return FetchResult(
                url=url,
                final_url=page.url,
                html=await page.content(),
                status_code=status,
                error=None if filled else "access code input not found",
            )
        except Exception as e:
            logger.debug("Auto-fill on %s failed", url, exc_info=True)
            return FetchResult.failed(url, str(e))
        finally:
            await _close_quietly(page)

    async def _new_page(self) -> Page:
        if self._context is None:
            raise RuntimeError("PlaywrightFetcher is not open; use 'async with'")
        return await self._context.new_page()

    async def _goto(self, page: Page, url: str) -> int:
        response = await page.goto(url, wait_until="load", timeout=self.config.timeout_ms)
        if self.config.wait_after_load_ms > 0:
            await asyncio.sleep(self.config.wait_after_load_ms / 1000)
        return response.status if response is not None else 0


async def _close_quietly(page: Page) -> None:
    try:
        await page.close()
    except Exception:
        logger.debug("Failed to close page", exc_info=True)
