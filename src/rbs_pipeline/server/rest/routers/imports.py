"""Chat-export and CSV import endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from rbs_pipeline.core.exceptions import ImportFileError
from rbs_pipeline.core.types import SourceType
from rbs_pipeline.ingestion.chat import process_chat_import
from rbs_pipeline.ingestion.pipeline import get_ingestion_stats, process_csv_import
from rbs_pipeline.ingestion.types import IngestionOptions, IngestionResult
from rbs_pipeline.listings.csv_parser import (
    CSVParseOptions,
    generate_csv_template,
    validate_csv_structure,
)
from rbs_pipeline.server.rest.middleware import record_outcome
from rbs_pipeline.server.schemas import (
    ChatImportRequest,
    ChatImportResponse,
    CSVImportRequest,
    CSVStructureRequest,
    CSVStructureResponse,
    ExportStatsModel,
    IngestionResponse,
    RowMessageModel,
    SenderCountModel,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def record_ingestion(request: Request, result: IngestionResult) -> None:
    record_outcome(
        request, created=result.created, skipped=result.skipped, errors=len(result.errors)
    )


def to_ingestion_response(result: IngestionResult) -> IngestionResponse:
    stats = get_ingestion_stats(result)
    return IngestionResponse(
        success=result.success,
        created=result.created,
        updated=result.updated,
        skipped=result.skipped,
        success_rate=round(stats.success_rate, 1),
        errors=[RowMessageModel(row=e.row, message=e.message) for e in result.errors],
        warnings=[RowMessageModel(row=w.row, message=w.message) for w in result.warnings],
        listings=[listing.to_dict() for listing in result.listings],
    )


@router.post("/imports/chat")
async def import_chat(request: Request, body: ChatImportRequest) -> ChatImportResponse:
    result = process_chat_import(
        body.content,
        body.file_name,
        uploaded_by=body.uploaded_by,
        known_providers=body.known_providers,
    )
    record = result.chat_import
    if not result.success:
        raise ImportFileError(body.file_name, record.processing_error or "unknown error")

    record_outcome(
        request,
        messages=record.message_count,
        entities=record.extracted_entities_count,
    )
    stats = result.stats
    return ChatImportResponse(
        import_id=record.id,
        status=record.status.value,
        file_name=record.file_name,
        group_name=record.group_name,
        message_count=record.message_count,
        entity_count=record.extracted_entities_count,
        date_range_start=record.date_range_start,
        date_range_end=record.date_range_end,
        stats=ExportStatsModel(
            total_messages=stats.total_messages,
            unique_senders=stats.unique_senders,
            system_messages=stats.system_messages,
            top_senders=[SenderCountModel(name=s.name, count=s.count) for s in stats.top_senders],
        ),
        entities=[entity.to_dict() for entity in result.entities],
    )


@router.post("/imports/csv")
async def import_csv(request: Request, body: CSVImportRequest) -> IngestionResponse:
    result = process_csv_import(
        body.content,
        IngestionOptions(
            source_type=SourceType(body.source_type),
            source_id=body.source_id,
            source_url=body.source_url,
            skip_duplicates=body.skip_duplicates,
            auto_approve=body.auto_approve,
            existing_listings=[m.to_existing() for m in body.existing_listings],
        ),
        CSVParseOptions(
            delimiter=body.delimiter,
            has_headers=body.has_headers,
            column_mapping=body.column_mapping,
        ),
    )
    fatal = [e for e in result.errors if e.row == 0]
    if fatal and not result.listings and not result.skipped:
        raise ImportFileError(body.file_name, "; ".join(e.message for e in fatal))

    record_ingestion(request, result)
    logger.info("CSV import %s: %s", body.file_name, result.summary())
    return to_ingestion_response(result)


@router.get("/imports/csv/template")
async def csv_template() -> PlainTextResponse:
    return PlainTextResponse(generate_csv_template(), media_type="text/csv")


@router.post("/imports/csv/structure")
async def csv_structure(body: CSVStructureRequest) -> CSVStructureResponse:
    report = validate_csv_structure(body.content, body.delimiter)
    return CSVStructureResponse(
        is_valid=report.is_valid,
        errors=report.errors,
        row_count=report.row_count,
        column_count=report.column_count,
    )
