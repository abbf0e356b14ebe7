#!/usr/bin/env python3
"""
Debug script: run the extraction pipeline against a page and show each stage.

Nothing is submitted unless --submit is given, in which case the full solve
flow runs (including the POST and the single follow-up navigation).
"""

import argparse
import asyncio
import json

from engine.browser import navigate, open_session, visible_text
from engine.config import load_settings
from engine.decoder import decode_payload, find_base64_blob
from engine.extractor import extract_content
from engine.models import SolveRequest
from engine.orchestrator import solve_flow
from engine.resolver import resolve_answer, resolve_destination


async def dry_run(url: str) -> None:
    settings = load_settings()
    async with open_session(settings) as page:
        await navigate(page, url)
        print("Loaded:", page.url)

        extracted = await extract_content(page)
        print("\n" + "=" * 60)
        print("EXTRACTED CONTENT:")
        print("=" * 60)
        print(extracted[:2000] if extracted else "(none)")

        blob = find_base64_blob(extracted or "")
        print("\nBase64 blob:", f"{len(blob)} chars" if blob else "(none)")
        decoded = decode_payload(extracted)
        print("Decoded payload:", json.dumps(decoded, indent=2) if decoded else "(none)")

        answer, rule = resolve_answer(decoded, await visible_text(page))
        print(f"\nAnswer: {answer!r} (via {rule})")

        destination = resolve_destination(decoded, await page.content(), page.url)
        print("Destination:", destination or "(none)")


async def full_run(url: str) -> None:
    settings = load_settings()
    req = SolveRequest.accept(
        email="inspect@localhost",
        secret=settings.quiz_secret,
        url=url,
        max_flow_seconds=settings.max_flow_seconds,
    )
    outcome = await solve_flow(req, settings)
    print("States:", " -> ".join(s.value for s in outcome.states))
    print("Answer:", outcome.answer.answer if outcome.answer else None)
    print("Destination:", outcome.destination)
    if outcome.submit_result:
        print("Submit result:", outcome.submit_result.model_dump_json(indent=2))
    if outcome.error:
        print("Error:", outcome.error)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url")
    parser.add_argument("--submit", action="store_true", help="post the answer as well")
    args = parser.parse_args()
    asyncio.run(full_run(args.url) if args.submit else dry_run(args.url))


if __name__ == "__main__":
    main()
