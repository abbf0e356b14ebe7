# extractor.py – best-effort text extraction from a loaded page

import logging
from typing import Awaitable, Callable, Optional, Sequence

from playwright.async_api import Page

from engine.browser import visible_text

logger = logging.getLogger(__name__)

Strategy = Callable[[Page], Awaitable[Optional[str]]]


async def _locator_text(page: Page, selector: str) -> Optional[str]:
    locator = page.locator(selector).first
    # check presence first so a missing element doesn't wait out the page timeout
    if await locator.count() == 0:
        return None
    return await locator.inner_text()


async def result_container_text(page: Page) -> Optional[str]:
    return await _locator_text(page, "#result")


async def first_pre_text(page: Page) -> Optional[str]:
    return await _locator_text(page, "pre")


async def body_text(page: Page) -> Optional[str]:
    return await visible_text(page)


EXTRACTION_STRATEGIES: Sequence[Strategy] = (
    result_container_text,
    first_pre_text,
    body_text,
)


async def extract_content(
    page: Page, strategies: Sequence[Strategy] = EXTRACTION_STRATEGIES
) -> Optional[str]:
    """Return the first non-blank text any strategy yields, or None."""
    for strategy in strategies:
        try:
            text = await strategy(page)
        except Exception as e:
            logger.debug("Extraction strategy %s failed: %s", strategy.__name__, e)
            continue
        if text and text.strip():
            logger.info("Extracted %d chars via %s", len(text), strategy.__name__)
            return text
        logger.debug("Extraction strategy %s found nothing", strategy.__name__)
    logger.info("No content extracted")
    return None
