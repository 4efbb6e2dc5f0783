"""Exception-to-HTTP mapping for the server."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from rbs_pipeline.core.exceptions import (
    ImportFileError,
    SyncFetchError,
    SyncSourceInactiveError,
    SyncSourceNotFoundError,
)


async def source_not_found_handler(request: Request, exc: SyncSourceNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "detail": str(exc), "id": exc.source_id},
    )


async def source_inactive_handler(request: Request, exc: SyncSourceInactiveError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": "source_inactive", "detail": str(exc), "id": exc.source_id},
    )


async def import_file_error_handler(request: Request, exc: ImportFileError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "import_failed", "detail": str(exc), "file_name": exc.file_name},
    )


async def sync_fetch_error_handler(request: Request, exc: SyncFetchError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": "fetch_failed", "detail": str(exc), "id": exc.source_id},
    )


EXCEPTION_HANDLERS = {
    SyncSourceNotFoundError: source_not_found_handler,
    SyncSourceInactiveError: source_inactive_handler,
    ImportFileError: import_file_error_handler,
    SyncFetchError: sync_fetch_error_handler,
}
