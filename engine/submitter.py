# submitter.py – post the answer and optionally follow one returned url

import json
import logging
from datetime import datetime
from typing import Optional

import httpx
from playwright.async_api import Page

from engine.browser import navigate
from engine.models import AnswerPayload, SubmitResult, utcnow

logger = logging.getLogger(__name__)

SUBMIT_TIMEOUT = 20.0


async def submit_answer(
    destination: str,
    payload: AnswerPayload,
    timeout: float = SUBMIT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SubmitResult:
    """
    POST the payload as JSON. Non-2xx responses raise httpx.HTTPStatusError;
    an answer with no JSON form (inf, NaN) raises ValueError before any request.
    """
    data = json.dumps(payload.model_dump(), allow_nan=False)
    logger.info("Submitting answer to %s payload preview: %s", destination, payload.preview())
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        resp = await client.post(
            destination,
            content=data,
            headers={"Content-Type": "application/json"},
        )
        resp.raise_for_status()

    try:
        body = resp.json()
    except ValueError:
        body = resp.text

    next_url = None
    if isinstance(body, dict) and isinstance(body.get("url"), str) and body["url"]:
        next_url = body["url"]

    logger.info("Submit response status: %s data: %s", resp.status_code, str(body)[:200])
    return SubmitResult(http_status=resp.status_code, response_body=body, next_url=next_url)


async def follow_next(page: Page, result: SubmitResult, deadline: datetime) -> SubmitResult:
    """Navigate once to the returned url. The new page is not solved."""
    if not result.next_url:
        return result
    if utcnow() >= deadline:
        logger.info("Deadline passed, not following %s", result.next_url)
        return result
    logger.info("Following next URL (single-step): %s", result.next_url)
    await navigate(page, result.next_url)
    return result.model_copy(update={"followed": True})
