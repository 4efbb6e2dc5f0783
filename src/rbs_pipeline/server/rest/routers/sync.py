"""Sync scheduler endpoints: status, trigger, sources and logs."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from rbs_pipeline.core.types import SourceType, SyncFrequency
from rbs_pipeline.ingestion.sync import (
    ScheduledSyncResult,
    SyncLog,
    SyncService,
    SyncSource,
)
from rbs_pipeline.server.dependencies import get_sync_service, verify_cron_secret
from rbs_pipeline.server.rest.middleware import record_outcome
from rbs_pipeline.server.schemas import (
    SyncLogModel,
    SyncRunModel,
    SyncSourceModel,
    SyncSourceRequest,
    SyncStatusResponse,
    SyncTriggerRequest,
    SyncTriggerResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _source_model(source: SyncSource) -> SyncSourceModel:
    return SyncSourceModel(
        id=source.id,
        name=source.name,
        url=source.url,
        type=source.type.value,
        is_active=source.is_active,
        sync_frequency=source.sync_frequency.value,
        last_sync_at=source.last_sync_at,
        last_sync_status=source.last_sync_status.value if source.last_sync_status else None,
        column_mapping=source.column_mapping,
    )


def _log_model(log: SyncLog) -> SyncLogModel:
    return SyncLogModel(
        id=log.id,
        source_id=log.source_id,
        status=log.status.value,
        started_at=log.started_at,
        completed_at=log.completed_at,
        records_fetched=log.records_fetched,
        records_created=log.records_created,
        records_updated=log.records_updated,
        records_skipped=log.records_skipped,
        error_message=log.error_message,
    )


def _trigger_response(summary: ScheduledSyncResult) -> SyncTriggerResponse:
    return SyncTriggerResponse(
        success=summary.failed_syncs == 0,
        message=(
            f"Synced {summary.successful_syncs}/{summary.total_sources} sources"
        ),
        total_sources=summary.total_sources,
        successful_syncs=summary.successful_syncs,
        failed_syncs=summary.failed_syncs,
        results=[
            SyncRunModel(
                source_id=r.source_id,
                source_name=r.source_name,
                success=r.success,
                created=r.created,
                updated=r.updated,
                skipped=r.skipped,
                errors=r.errors,
            )
            for r in summary.results
        ],
    )


@router.get("/sync/status")
async def sync_status(service: SyncService = Depends(get_sync_service)) -> SyncStatusResponse:
    status = service.status()
    return SyncStatusResponse(
        active_sources=status.active_sources,
        total_sources=status.total_sources,
        pending_syncs=status.pending_syncs,
        last_sync_time=status.last_sync_time,
        next_scheduled_sync=status.next_scheduled_sync,
    )


@router.post("/sync/trigger", dependencies=[Depends(verify_cron_secret)])
async def trigger_sync(
    request: Request,
    body: SyncTriggerRequest,
    service: SyncService = Depends(get_sync_service),
) -> SyncTriggerResponse:
    existing = [m.to_existing() for m in body.existing_listings]

    if body.source_id:
        run = await service.run_source(body.source_id, existing)
        summary = ScheduledSyncResult(
            total_sources=1,
            successful_syncs=1 if run.success else 0,
            failed_syncs=0 if run.success else 1,
            results=[run],
        )
    else:
        summary = await service.run_all(existing)

    logger.info(
        "Sync triggered: %d/%d sources successful",
        summary.successful_syncs, summary.total_sources,
    )
    record_outcome(
        request,
        sources=summary.total_sources,
        synced=summary.successful_syncs,
        failed=summary.failed_syncs,
    )
    return _trigger_response(summary)


@router.get("/sync/sources")
async def list_sources(service: SyncService = Depends(get_sync_service)) -> list[SyncSourceModel]:
    return [_source_model(s) for s in service.registry.list_sources()]


@router.post("/sync/sources", status_code=201)
async def add_source(
    body: SyncSourceRequest,
    service: SyncService = Depends(get_sync_service),
) -> SyncSourceModel:
    source = service.registry.add_source(
        body.name,
        body.url,
        SourceType(body.type),
        is_active=body.is_active,
        sync_frequency=SyncFrequency(body.sync_frequency),
        column_mapping=body.column_mapping,
    )
    return _source_model(source)


@router.delete("/sync/sources/{source_id}")
async def delete_source(
    source_id: str,
    service: SyncService = Depends(get_sync_service),
) -> dict:
    if not service.registry.delete_source(source_id):
        raise HTTPException(status_code=404, detail=f"Sync source '{source_id}' not found")
    return {"deleted": True, "id": source_id}


@router.get("/sync/logs")
async def sync_logs(
    source_id: str | None = None,
    service: SyncService = Depends(get_sync_service),
) -> list[SyncLogModel]:
    return [_log_model(log) for log in service.registry.get_logs(source_id)]
