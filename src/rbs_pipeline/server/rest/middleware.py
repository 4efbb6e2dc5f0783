"""Access logging for the REST server.

Every request gets an id (echoed in ``X-Request-ID``) and one log line.
Import, batch and sync endpoints attach their counts with
``record_outcome`` so the line reads like::

    POST /api/v1/imports/csv -> 200 (4.1ms) [req-3f2a9c0b1d2e] created=12 skipped=1 errors=1
"""

from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from rbs_pipeline.core.utils import new_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Logged at DEBUG
QUIET_PATHS = frozenset({"/api/v1/health"})


def record_outcome(request: Request, **counts: int) -> None:
    """Attach counts for the access log line of this request."""
    request.state.outcome = counts


def format_outcome(counts: dict[str, int]) -> str:
    return " ".join(f"{name}={value}" for name, value in counts.items())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log it with any recorded outcome."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_id("req")
        request.state.request_id = request_id

        start = time.monotonic()
        response = await call_next(request)
        elapsed = (time.monotonic() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        outcome = getattr(request.state, "outcome", None)
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%.1fms) [%s]%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            request_id,
            " " + format_outcome(outcome) if outcome else "",
        )
        return response
