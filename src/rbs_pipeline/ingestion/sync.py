"""Scheduled sync from external sources (Google Sheets).

``SyncRegistry`` holds source descriptors and their run logs in memory.
``SyncService`` runs sources through the listing pipeline. Row fetching
goes through one replaceable async callable so the network boundary can
be swapped out and is always bounded by a timeout.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable

from rbs_pipeline.core.clock import Clock, SystemClock
from rbs_pipeline.core.exceptions import (
    SyncFetchError,
    SyncSourceInactiveError,
    SyncSourceNotFoundError,
)
from rbs_pipeline.core.types import SourceType, SyncFrequency, SyncStatus
from rbs_pipeline.core.utils import new_id
from rbs_pipeline.ingestion.pipeline import process_listing_batch
from rbs_pipeline.ingestion.types import IngestionOptions
from rbs_pipeline.listings.types import ExistingListing, ListingInput

logger = logging.getLogger(__name__)

MAX_LOGS_PER_SOURCE = 100
DEFAULT_FETCH_TIMEOUT = 30.0
SCHEDULED_SYNC_HOUR = 2  # wall-clock hour in the clock's schedule_tz

FREQUENCY_INTERVALS: dict[SyncFrequency, timedelta] = {
    SyncFrequency.HOURLY: timedelta(hours=1),
    SyncFrequency.DAILY: timedelta(hours=24),
    SyncFrequency.WEEKLY: timedelta(hours=24 * 7),
}


# ============================================================================
# Data types
# ============================================================================


@dataclass
class SyncSource:
    """An external source that is pulled on a schedule."""

    id: str
    name: str
    url: str
    type: SourceType
    created_at: datetime
    updated_at: datetime
    is_active: bool = True
    sync_frequency: SyncFrequency = SyncFrequency.DAILY
    last_sync_at: datetime | None = None
    last_sync_status: SyncStatus | None = None
    column_mapping: dict[str, str] = field(default_factory=dict)


@dataclass
class SyncLog:
    id: str
    source_id: str
    status: SyncStatus
    started_at: datetime
    completed_at: datetime | None = None
    records_fetched: int = 0
    records_created: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    error_message: str | None = None


@dataclass
class SyncRunResult:
    source_id: str
    source_name: str
    success: bool
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class ScheduledSyncResult:
    total_sources: int
    successful_syncs: int
    failed_syncs: int
    results: list[SyncRunResult] = field(default_factory=list)


@dataclass(frozen=True)
class SyncStatusSummary:
    active_sources: int
    total_sources: int
    pending_syncs: int
    last_sync_time: datetime | None
    next_scheduled_sync: datetime


SheetFetcher = Callable[[SyncSource], Awaitable[list[ListingInput]]]


# ============================================================================
# Registry
# ============================================================================


class SyncRegistry:
    """In-memory sync sources and their logs (newest first, capped per source)."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._sources: dict[str, SyncSource] = {}
        self._logs: dict[str, list[SyncLog]] = {}

    def add_source(
        self,
        name: str,
        url: str,
        type: SourceType = SourceType.GOOGLE_SHEETS,
        *,
        is_active: bool = True,
        sync_frequency: SyncFrequency = SyncFrequency.DAILY,
        column_mapping: dict[str, str] | None = None,
    ) -> SyncSource:
        now = self._clock.now()
        source = SyncSource(
            id=new_id("sync"),
            name=name,
            url=url,
            type=type,
            is_active=is_active,
            sync_frequency=sync_frequency,
            column_mapping=dict(column_mapping or {}),
            created_at=now,
            updated_at=now,
        )
        self._sources[source.id] = source
        logger.info("Added sync source %s (%s)", source.id, name)
        return source

    def get_source(self, source_id: str) -> SyncSource | None:
        return self._sources.get(source_id)

    def require_source(self, source_id: str) -> SyncSource:
        source = self._sources.get(source_id)
        if source is None:
            raise SyncSourceNotFoundError(source_id)
        return source

    def list_sources(self) -> list[SyncSource]:
        return list(self._sources.values())

    def update_source(self, source_id: str, **changes: Any) -> SyncSource:
        """Apply field changes to a source.

        Raises:
            SyncSourceNotFoundError: If the id is unknown.
            ValueError: If a change names a field the source lacks.
        """
        source = self.require_source(source_id)
        allowed = {f.name for f in fields(SyncSource)} - {"id", "created_at"}
        for key, value in changes.items():
            if key not in allowed:
                raise ValueError(f"Cannot update sync source field '{key}'")
            setattr(source, key, value)
        source.updated_at = self._clock.now()
        return source

    def delete_source(self, source_id: str) -> bool:
        self._logs.pop(source_id, None)
        return self._sources.pop(source_id, None) is not None

    def add_log(self, log: SyncLog) -> SyncLog:
        logs = self._logs.setdefault(log.source_id, [])
        logs.insert(0, log)
        del logs[MAX_LOGS_PER_SOURCE:]
        return log

    def get_logs(self, source_id: str | None = None) -> list[SyncLog]:
        """Logs for one source, or for all sources merged newest first."""
        if source_id is not None:
            return list(self._logs.get(source_id, []))
        merged = [log for logs in self._logs.values() for log in logs]
        return sorted(merged, key=lambda log: log.started_at, reverse=True)


def is_sync_due(source: SyncSource, now: datetime) -> bool:
    """Whether enough time has passed since the last sync for the source's frequency."""
    if not source.is_active:
        return False
    if source.last_sync_at is None:
        return True
    interval = FREQUENCY_INTERVALS.get(source.sync_frequency)
    if interval is None:
        return False
    return now - source.last_sync_at >= interval


async def fetch_sheet_rows(source: SyncSource) -> list[ListingInput]:
    """Default fetcher. No Sheets client is wired in, so nothing is fetched."""
    logger.info("Fetching rows for %s from %s", source.id, source.url)
    return []


# ============================================================================
# Service
# ============================================================================


class SyncService:
    """Runs sync sources through the ingestion pipeline.

    Usage:
        service = SyncService(registry, fetcher=my_sheets_fetcher, timeout=20)
        summary = await service.run_all(existing_listings)
    """

    def __init__(
        self,
        registry: SyncRegistry,
        fetcher: SheetFetcher | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self._fetcher = fetcher or fetch_sheet_rows
        self._timeout = timeout
        self._clock = clock or SystemClock()

    async def run_source(
        self,
        source_id: str,
        existing_listings: list[ExistingListing] | None = None,
    ) -> SyncRunResult:
        """Sync one source.

        Fetch and ingest failures close the log as ``FAILED`` and come back
        as a failed result rather than being raised.

        Raises:
            SyncSourceNotFoundError: If the id is unknown.
            SyncSourceInactiveError: If the source is deactivated.
        """
        source = self.registry.require_source(source_id)
        if not source.is_active:
            raise SyncSourceInactiveError(source_id)

        log = self.registry.add_log(SyncLog(
            id=new_id("log"),
            source_id=source.id,
            status=SyncStatus.SYNCING,
            started_at=self._clock.now(),
        ))

        try:
            inputs = await self._fetch(source)
        except SyncFetchError as e:
            logger.warning("Sync %s failed: %s", source.id, e)
            self._finish(source, log, SyncStatus.FAILED, error_message=str(e))
            return SyncRunResult(source.id, source.name, success=False, errors=[str(e)])

        if not inputs:
            self._finish(source, log, SyncStatus.SUCCESS)
            return SyncRunResult(source.id, source.name, success=True)

        log.records_fetched = len(inputs)
        try:
            result = process_listing_batch(inputs, IngestionOptions(
                source_type=SourceType.GOOGLE_SHEETS,
                source_id=source.id,
                source_url=source.url,
                skip_duplicates=True,
                auto_approve=False,
                existing_listings=existing_listings or [],
            ))
        except Exception as e:
            logger.exception("Sync %s failed during ingest", source.id)
            message = f"Ingest failed: {e}"
            self._finish(source, log, SyncStatus.FAILED, error_message=message)
            return SyncRunResult(source.id, source.name, success=False, errors=[message])

        errors = [e.message for e in result.errors]
        log.records_created = result.created
        log.records_updated = result.updated
        log.records_skipped = result.skipped
        self._finish(
            source, log,
            SyncStatus.SUCCESS if result.success else SyncStatus.FAILED,
            error_message="; ".join(errors) or None,
        )

        logger.info(
            "Synced %s: %d fetched, %d created, %d skipped",
            source.id, len(inputs), result.created, result.skipped,
        )
        return SyncRunResult(
            source_id=source.id,
            source_name=source.name,
            success=result.success,
            created=result.created,
            updated=result.updated,
            skipped=result.skipped,
            errors=errors,
        )

    async def run_all(
        self,
        existing_listings: list[ExistingListing] | None = None,
        *,
        due_only: bool = False,
    ) -> ScheduledSyncResult:
        """Sync every active source concurrently (only due ones if ``due_only``)."""
        now = self._clock.now()
        sources = [
            s for s in self.registry.list_sources()
            if s.is_active and (not due_only or is_sync_due(s, now))
        ]

        outcomes = await asyncio.gather(
            *(self.run_source(s.id, existing_listings) for s in sources),
            return_exceptions=True,
        )
        results: list[SyncRunResult] = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, SyncRunResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error("Sync %s raised: %s", source.id, outcome)
                results.append(SyncRunResult(
                    source.id, source.name, success=False, errors=[str(outcome)]
                ))
            else:
                raise outcome

        successful = sum(1 for r in results if r.success)
        return ScheduledSyncResult(
            total_sources=len(sources),
            successful_syncs=successful,
            failed_syncs=len(results) - successful,
            results=results,
        )

    def status(self) -> SyncStatusSummary:
        now = self._clock.now()
        sources = self.registry.list_sources()
        active = [s for s in sources if s.is_active]
        synced = [s.last_sync_at for s in active if s.last_sync_at is not None]

        return SyncStatusSummary(
            active_sources=len(active),
            total_sources=len(sources),
            pending_syncs=sum(1 for s in active if is_sync_due(s, now)),
            last_sync_time=max(synced) if synced else None,
            next_scheduled_sync=self._clock.next_daily(SCHEDULED_SYNC_HOUR),
        )

    async def _fetch(self, source: SyncSource) -> list[ListingInput]:
        if source.type != SourceType.GOOGLE_SHEETS:
            return []
        try:
            return await asyncio.wait_for(self._fetcher(source), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise SyncFetchError(
                source.id, f"Fetch timed out after {self._timeout:g}s"
            ) from e
        except SyncFetchError:
            raise
        except Exception as e:
            raise SyncFetchError(source.id, f"Fetch failed: {e}") from e

    def _finish(
        self,
        source: SyncSource,
        log: SyncLog,
        status: SyncStatus,
        error_message: str | None = None,
    ) -> None:
        now = self._clock.now()
        log.status = status
        log.completed_at = now
        log.error_message = error_message
        self.registry.update_source(source.id, last_sync_at=now, last_sync_status=status)
