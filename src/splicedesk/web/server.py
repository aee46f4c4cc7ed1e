"""
Web server for SpliceDesk.

Builds the FastAPI application around a SignalingService. The service's
dispatcher runs for the lifetime of the app, so scheduled cues and
auto-returns fire while the server is up.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..infra.exceptions import (
    GatewayError,
    NotFoundError,
    SpliceDeskError,
    StateConflictError,
    ValidationError,
)
from ..infra.logging import get_logger
from ..runtime.signaling_service import SignalingService
from .api import scte35

logger = get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[SpliceDeskError], int], ...] = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (StateConflictError, 409),
    (GatewayError, 502),
)


def status_for(error: SpliceDeskError) -> int:
    for error_cls, status in _STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status
    return 500


def create_app(service: SignalingService, *, run_dispatcher: bool = True) -> FastAPI:
    """Create the API app; ``run_dispatcher=False`` leaves timers to the caller."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if run_dispatcher:
            service.start()
        logger.info("api_started", run_dispatcher=run_dispatcher)
        try:
            yield
        finally:
            if run_dispatcher:
                service.stop()
            logger.info("api_stopped")

    app = FastAPI(title="SpliceDesk SCTE-35 API", lifespan=lifespan)
    app.state.service = service

    @app.exception_handler(SpliceDeskError)
    async def splicedesk_error_handler(request: Request, exc: SpliceDeskError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.warning("api_error", path=request.url.path, code=exc.code, error=exc.message)
        return JSONResponse(status_code=status, content={"code": exc.code, "message": exc.message})

    app.include_router(scte35.router)
    app.include_router(scte35.streams_router)
    return app
