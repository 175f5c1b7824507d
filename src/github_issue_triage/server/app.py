"""FastAPI app factory.

The endpoint is a thin wrapper over `TriageService`: decode the JSON body, run one
triage session in the worker threadpool, and translate errors into status codes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

from github_issue_triage import __version__
from github_issue_triage.config import TriageSettings
from github_issue_triage.errors import ArgumentError, PipelineError, SessionCancelled
from github_issue_triage.models import TriageRequest
from github_issue_triage.triage.service import TriageService

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5


def _validation_message(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    msg = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
    loc = ".".join(str(part) for part in first.get("loc", ()))
    if msg == "Error log cannot be empty" or not loc:
        return msg
    return f"Invalid request body: {loc}: {msg}"


async def _watch_disconnect(request: Request, cancelled: threading.Event) -> None:
    while not cancelled.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected; cancelling triage session")
            cancelled.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


def create_app(
    service: TriageService | None = None,
    settings: TriageSettings | None = None,
) -> FastAPI:
    """Build the API.

    Args:
        service: Pre-built service (tests, embedding). When omitted, one is built from
            `settings` (or the environment) and closed on shutdown.
        settings: Configuration used when `service` is omitted.
    """

    owns_service = service is None
    if service is None:
        service = TriageService.from_settings(settings or TriageSettings())
    triage_service = service

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if owns_service:
            triage_service.close()

    app = FastAPI(
        title="GitHub Issue Triage",
        version=__version__,
        description="Triage error logs into GitHub issues with an LLM agent.",
        lifespan=lifespan,
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "repository": triage_service.repository}

    @app.post("/process_error", response_model=None)
    async def process_error(request: Request) -> Response:
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except ValueError as e:
            return PlainTextResponse(f"Invalid request body: {e}", status_code=400)

        try:
            req = TriageRequest.model_validate(payload)
        except ValidationError as e:
            return PlainTextResponse(_validation_message(e), status_code=400)

        cancelled = threading.Event()
        watcher = asyncio.create_task(_watch_disconnect(request, cancelled))
        try:
            result = await run_in_threadpool(
                triage_service.triage, req.error_log, cancelled=cancelled
            )
        except ArgumentError as e:
            return PlainTextResponse(str(e), status_code=400)
        except SessionCancelled as e:
            logger.warning("Triage cancelled", extra={"error": str(e)})
            return PlainTextResponse(f"Agent failed to process error: {e}", status_code=500)
        except PipelineError as e:
            logger.error("Pipeline execution failed", extra={"error": str(e)})
            return PlainTextResponse(f"Agent failed to process error: {e}", status_code=500)
        finally:
            watcher.cancel()

        return JSONResponse(result.model_dump(exclude_none=True))

    return app
