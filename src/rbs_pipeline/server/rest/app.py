"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rbs_pipeline import __version__
from rbs_pipeline.core.clock import Clock, SystemClock, resolve_timezone
from rbs_pipeline.ingestion.sync import SheetFetcher, SyncRegistry, SyncService
from rbs_pipeline.server.config import ServerConfig
from rbs_pipeline.server.errors import EXCEPTION_HANDLERS
from rbs_pipeline.server.rest.middleware import RequestLoggingMiddleware
from rbs_pipeline.server.rest.routers import health, imports, listings, sync

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig,
    fetcher: SheetFetcher | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``fetcher`` replaces the default sheet fetcher used by sync runs.
    Without a ``clock`` the system clock is used, scheduling in
    ``config.schedule_timezone``.
    """
    if clock is None:
        clock = SystemClock(resolve_timezone(config.schedule_timezone))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        app.state.config = config
        app.state.start_time = time.monotonic()
        app.state.sync_registry = SyncRegistry(clock=clock)
        app.state.sync_service = SyncService(
            app.state.sync_registry,
            fetcher=fetcher,
            timeout=config.sync_fetch_timeout,
            clock=clock,
        )

        if config.mode == "full":
            from rbs_pipeline.server.workers import SyncWorker

            worker = SyncWorker(app.state.sync_service, config)
            app.state.worker = worker
            await worker.start()
            logger.info("Background sync worker started (interval=%ds)", config.sync_interval)

        logger.info("RBS pipeline server started (mode=%s)", config.mode)
        yield

        # Shutdown
        if hasattr(app.state, "worker"):
            await app.state.worker.stop()
            logger.info("Background sync worker stopped")
        logger.info("RBS pipeline server stopped")

    app = FastAPI(
        title="RBS Pipeline",
        description="Chat-export extraction and listing ingestion for the RBS directory",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Routers
    prefix = "/api/v1"
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(imports.router, prefix=prefix, tags=["imports"])
    app.include_router(listings.router, prefix=prefix, tags=["listings"])
    app.include_router(sync.router, prefix=prefix, tags=["sync"])

    return app
