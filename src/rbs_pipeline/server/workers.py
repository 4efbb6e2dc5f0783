"""Background worker that runs due sync sources on an interval."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from rbs_pipeline.core.utils import utc_now
from rbs_pipeline.ingestion.sync import ScheduledSyncResult, SyncService
from rbs_pipeline.server.config import ServerConfig

logger = logging.getLogger(__name__)

ERROR_BACKOFF_SECONDS = 60


class SyncWorker:
    """Runs a sync cycle every ``sync_interval`` seconds.

    Each cycle syncs only the sources whose frequency makes them due.
    The server holds no listing store, so cycles dedupe against an empty
    snapshot; callers that own a store trigger syncs through the API.
    """

    def __init__(self, service: SyncService, config: ServerConfig) -> None:
        self._service = service
        self._config = config
        self._task: asyncio.Task | None = None
        self._running = False
        self._cycle_count = 0
        self._last_run: datetime | None = None

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def last_run(self) -> datetime | None:
        return self._last_run

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background sync loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        """Stop the background sync loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        logger.info("Sync worker started (interval=%ds)", self._config.sync_interval)
        while self._running:
            try:
                await asyncio.sleep(self._config.sync_interval)
                if not self._running:
                    break
                await self.run_cycle()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Error in sync cycle")
                await asyncio.sleep(ERROR_BACKOFF_SECONDS)

    async def run_cycle(self) -> ScheduledSyncResult:
        """Sync every due source once."""
        result = await self._service.run_all(due_only=True)
        self._cycle_count += 1
        self._last_run = utc_now()

        if result.total_sources:
            logger.info(
                "Sync cycle #%d complete: %d/%d sources successful",
                self._cycle_count, result.successful_syncs, result.total_sources,
            )
        else:
            logger.debug("Sync cycle #%d: no sources due", self._cycle_count)
        return result
