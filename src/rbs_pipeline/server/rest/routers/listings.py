"""Listing validation, normalization and batch ingestion endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

from rbs_pipeline.core.types import SourceType
from rbs_pipeline.ingestion.pipeline import process_listing_batch
from rbs_pipeline.ingestion.types import IngestionOptions
from rbs_pipeline.listings.duplicates import check_for_duplicates
from rbs_pipeline.listings.normalization import normalize_listing
from rbs_pipeline.listings.types import ListingInput, ValidationIssue
from rbs_pipeline.listings.validation import validate_listing
from rbs_pipeline.server.rest.routers.imports import record_ingestion, to_ingestion_response
from rbs_pipeline.server.schemas import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    IngestionResponse,
    ListingBatchRequest,
    NormalizeResponse,
    ValidationIssueModel,
    ValidationResponse,
)

router = APIRouter()


def _issues(issues: list[ValidationIssue]) -> list[ValidationIssueModel]:
    return [ValidationIssueModel(field=i.field, message=i.message, code=i.code) for i in issues]


@router.post("/listings/validate")
async def validate(body: dict) -> ValidationResponse:
    result = validate_listing(ListingInput.from_dict(body))
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=_issues(result.errors),
        warnings=_issues(result.warnings),
    )


@router.post("/listings/normalize")
async def normalize(body: dict) -> NormalizeResponse:
    listing = normalize_listing(ListingInput.from_dict(body))
    return NormalizeResponse(listing=listing.to_dict())


@router.post("/listings/check-duplicates")
async def check_duplicates(body: DuplicateCheckRequest) -> DuplicateCheckResponse:
    result = check_for_duplicates(
        ListingInput.from_dict(body.listing),
        [m.to_existing() for m in body.existing_listings],
    )
    return DuplicateCheckResponse(
        is_duplicate=result.is_duplicate,
        confidence=result.confidence,
        matches=result.matches,
    )


@router.post("/listings/batch")
async def ingest_batch(request: Request, body: ListingBatchRequest) -> IngestionResponse:
    result = process_listing_batch(
        [ListingInput.from_dict(item) for item in body.listings],
        IngestionOptions(
            source_type=SourceType(body.source_type),
            source_id=body.source_id,
            source_url=body.source_url,
            skip_duplicates=body.skip_duplicates,
            auto_approve=body.auto_approve,
            existing_listings=[m.to_existing() for m in body.existing_listings],
        ),
    )
    record_ingestion(request, result)
    return to_ingestion_response(result)
