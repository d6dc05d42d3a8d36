"""Fill an access code into a cloud-drive page and submit it."""

import asyncio
import logging
import re
from time import monotonic

from playwright.async_api import ElementHandle, Page

from text_linkify.config import AutoFillConfig
from text_linkify.utils.url_utils import code_from_fragment, get_host

logger = logging.getLogger(__name__)


class AutoFiller:
    """Best-effort access-code auto-fill for one page.

    The ``filled`` flag latches on the first fill, so a page is submitted at
    most once no matter how many candidate inputs show up later.
    """

    def __init__(self, config: AutoFillConfig | None = None):
        self.config = config or AutoFillConfig()
        self.filled = False
        self.clicked: str | None = None
        self._submit_re = re.compile(self.config.submit_keywords)

    async def run(self, page: Page) -> bool:
        """Fill the code from the page URL fragment; True if an input was filled."""
        if self.filled:
            return False

        code = code_from_fragment(page.url)
        if not code:
            return False

        logger.info("Auto-filling access code %s", code)

        deadline = monotonic() + self.config.observe_timeout_seconds
        while True:
            handle = await self.find_input(page)
            if handle is not None:
                await self.fill_and_submit(page, handle, code)
                return True
            if monotonic() >= deadline:
                logger.info("Auto-fill timed out, input not found")
                return False
            # Inputs on drive pages are often rendered late by scripts
            await asyncio.sleep(self.config.poll_interval_seconds)

    async def find_input(self, page: Page) -> ElementHandle | None:
        for selector in self.config.input_selectors:
            handle = await page.query_selector(selector)
            if handle is not None and await self.is_valid_input(handle):
                return handle
        return None

    async def is_valid_input(self, handle: ElementHandle) -> bool:
        """Reject search boxes and hidden inputs."""
        input_type = (await handle.get_attribute("type") or "").lower()
        if input_type == "search":
            return False

        element_id = (await handle.get_attribute("id") or "").lower()
        css_class = (await handle.get_attribute("class") or "").lower()
        if "search" in element_id or "search" in css_class:
            return False

        placeholder = (await handle.get_attribute("placeholder") or "").lower()
        if any(keyword in placeholder for keyword in self.config.search_keywords):
            return False

        if input_type != "hidden" and not await handle.is_visible():
            return False

        return True

    async def fill_and_submit(self, page: Page, handle: ElementHandle, code: str) -> None:
        if self.filled:
            return
        self.filled = True

        logger.info("Found input, filling")
        # fill() goes through the native value setter, so framework-controlled
        # inputs see the change
        await handle.fill(code)
        await handle.dispatch_event("input")
        await handle.dispatch_event("change")

        await asyncio.sleep(self.config.click_delay_for(get_host(page.url)))
        await self.click_submit(page)

    async def click_submit(self, page: Page) -> bool:
        for button in await page.query_selector_all(self.config.button_selector):
            text = await button.inner_text() or ""
            if self._submit_re.search(text):
                logger.info("Clicking submit button: %s", text.strip())
                await button.click()
                self.clicked = text.strip()
                return True
        logger.info("No submit button found")
        return False
