"""Health endpoint."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from rbs_pipeline import __version__
from rbs_pipeline.server.schemas import HealthResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> HealthResponse:
    elapsed = time.monotonic() - request.app.state.start_time
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
        mode=request.app.state.config.mode,
    )
