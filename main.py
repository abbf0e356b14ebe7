# main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Set

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse

from engine.config import Settings, load_settings
from engine.models import SolveOutcome, SolveRequest
from engine.orchestrator import solve_flow

logger = logging.getLogger("quiz")

REQUIRED_FIELDS = ("email", "secret", "url")
ACCEPTED = {"ok": True, "message": "Accepted. Solving started."}

Solver = Callable[[SolveRequest, Settings], Awaitable[SolveOutcome]]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def _run_in_background(solver: Solver, req: SolveRequest, settings: Settings) -> None:
    try:
        await solver(req, settings)
    except asyncio.CancelledError:
        logger.warning("Solve flow for %s cancelled", req.url)
        raise
    except Exception:
        # solve_flow doesn't raise, but a substituted solver might
        logger.exception("Background solve error for %s", req.url)


def create_app(settings: Settings, solver: Solver = solve_flow) -> FastAPI:
    running: Set[asyncio.Task] = set()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.quiz_secret:
            logger.warning("WARNING: QUIZ_SECRET not set in environment")
        yield
        for task in list(running):
            task.cancel()
        if running:
            await asyncio.gather(*running, return_exceptions=True)

    app = FastAPI(title="Quiz Page Solver", lifespan=lifespan)
    app.state.settings = settings
    app.state.running = running

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "Quiz endpoint ready"

    @app.post("/quiz-endpoint", status_code=200)
    async def quiz_endpoint(request: Request) -> Dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        if content_type.split(";")[0].strip().lower() != "application/json":
            raise HTTPException(status_code=400, detail="Invalid content-type: expected application/json")

        cl = request.headers.get("content-length")
        if cl and cl.isdigit() and int(cl) > settings.max_payload_bytes:
            raise HTTPException(status_code=400, detail="Payload too large.")

        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON payload")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid JSON payload")

        if any(not isinstance(payload.get(f), str) or not payload.get(f) for f in REQUIRED_FIELDS):
            raise HTTPException(status_code=400, detail="Missing email, secret, or url")

        if payload["secret"] != settings.quiz_secret:
            raise HTTPException(status_code=403, detail="Invalid secret")

        req = SolveRequest.accept(
            email=payload["email"],
            secret=payload["secret"],
            url=payload["url"],
            max_flow_seconds=settings.max_flow_seconds,
        )
        task = asyncio.create_task(_run_in_background(solver, req, settings))
        running.add(task)
        task.add_done_callback(running.discard)
        logger.info("Accepted solve request for %s", req.url)
        return ACCEPTED

    return app


settings = load_settings()
configure_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    logger.info("Server listening on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
