# browser.py — playwright session scoped to one solve flow

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Page, async_playwright

from engine.config import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_session(settings: Settings) -> AsyncIterator[Page]:
    """
    Launch a private Chromium instance with one fresh context and page.

    The browser is closed on every exit path, including cancellation; a
    failure during teardown is logged and swallowed so it never masks the
    flow's own outcome.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(
            headless=settings.headless, args=list(settings.browser_args)
        )
        try:
            ctx = await browser.new_context(accept_downloads=True)
            page = await ctx.new_page()
            page.set_default_timeout(settings.page_timeout_ms)
            yield page
        finally:
            try:
                await browser.close()
            except Exception as e:
                logger.warning("Browser close failed: %s", e)


async def navigate(page: Page, url: str) -> None:
    logger.info("Navigating to %s", url)
    await page.goto(url, wait_until="networkidle")
    # content may still be populated by scripts after network idle
    await page.wait_for_load_state("domcontentloaded")


async def visible_text(page: Page) -> str:
    text = await page.evaluate("() => document.body ? document.body.innerText : ''")
    return text or ""
