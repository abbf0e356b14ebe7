# orchestrator.py – one request's solve flow, bound to its deadline

import asyncio
import logging
from typing import AsyncContextManager, Callable, Optional

import httpx
from playwright.async_api import Page

from engine.browser import navigate, open_session, visible_text
from engine.config import Settings
from engine.decoder import decode_payload
from engine.extractor import extract_content
from engine.models import AnswerPayload, FlowState, SolveOutcome, SolveRequest
from engine.resolver import resolve_answer, resolve_destination
from engine.submitter import follow_next, submit_answer

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], AsyncContextManager[Page]]


async def _page_text(page: Page) -> str:
    try:
        return await visible_text(page)
    except Exception as e:
        logger.debug("Could not read visible text: %s", e)
        return ""


async def _page_html(page: Page) -> str:
    try:
        return await page.content()
    except Exception as e:
        logger.debug("Could not read page html: %s", e)
        return ""


async def _run(
    request: SolveRequest,
    settings: Settings,
    outcome: SolveOutcome,
    session_factory: SessionFactory,
    transport: Optional[httpx.AsyncBaseTransport],
) -> None:
    async with session_factory(settings) as page:
        await navigate(page, request.url)
        outcome.advance(FlowState.NAVIGATED)

        extracted = await extract_content(page)
        outcome.extracted_length = len(extracted) if extracted else 0
        outcome.advance(FlowState.EXTRACTED)

        decoded = decode_payload(extracted) if extracted else None
        if decoded is not None:
            outcome.decoded = decoded
            outcome.advance(FlowState.DECODED)

        answer, rule = resolve_answer(decoded, await _page_text(page))
        payload = AnswerPayload(
            email=request.email, secret=request.secret, url=request.url, answer=answer
        )
        outcome.answer = payload
        outcome.answer_rule = rule
        outcome.destination = resolve_destination(decoded, await _page_html(page), page.url)
        outcome.advance(FlowState.ANSWER_RESOLVED)

        if not outcome.destination:
            logger.warning("No submit URL detected. Computed payload (not posted): %s", payload.preview())
            return

        outcome.advance(FlowState.SUBMIT_ATTEMPTED)
        try:
            result = await submit_answer(
                outcome.destination,
                payload,
                timeout=settings.submit_timeout_seconds,
                transport=transport,
            )
        except (httpx.HTTPError, ValueError) as e:
            # ValueError: the answer is not JSON compliant (inf, NaN)
            logger.error("Error submitting answer: %s", e)
            outcome.error = f"submit failed: {e}"
            return

        outcome.submit_result = result
        result = await follow_next(page, result, request.deadline)
        outcome.submit_result = result
        if result.followed:
            outcome.advance(FlowState.FOLLOWED_ONCE)


async def solve_flow(
    request: SolveRequest,
    settings: Settings,
    session_factory: SessionFactory = open_session,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SolveOutcome:
    """
    Run navigate -> extract -> decode -> resolve -> submit -> follow once.

    Never raises: every failure is logged and recorded on the returned
    outcome. The remaining time before the deadline bounds the whole run, so
    a slow navigation is cancelled rather than left to overrun.
    """
    outcome = SolveOutcome(url=request.url)
    remaining = request.seconds_left()
    if remaining < settings.min_start_seconds:
        logger.warning("Not enough time left to start solving flow for %s", request.url)
        outcome.error = "not enough time left"
        outcome.advance(FlowState.CLOSED)
        return outcome

    logger.info("Starting solve flow for %s (deadline in %ds)", request.url, round(remaining))
    try:
        await asyncio.wait_for(
            _run(request, settings, outcome, session_factory, transport),
            timeout=remaining,
        )
    except asyncio.TimeoutError:
        logger.error("Solve flow for %s hit the deadline", request.url)
        outcome.error = "deadline exceeded"
    except Exception as e:
        logger.exception("Solve flow for %s failed", request.url)
        outcome.error = str(e) or type(e).__name__
    finally:
        outcome.advance(FlowState.CLOSED)

    logger.info("Solve flow for %s finished in state path %s", request.url,
                " -> ".join(s.value for s in outcome.states))
    return outcome
