"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from rbs_pipeline.listings.types import ExistingListing


# ========== Common ==========

class ErrorResponse(BaseModel):
    error: str
    detail: str


class ExistingListingModel(BaseModel):
    """One row of the caller's listing snapshot, used for duplicate checks."""

    title: str
    title_he: str | None = None
    provider_id: str | None = None

    def to_existing(self) -> ExistingListing:
        return ExistingListing(self.title, self.title_he, self.provider_id)


class RowMessageModel(BaseModel):
    row: int
    message: str


# ========== Chat import ==========

class ChatImportRequest(BaseModel):
    content: str
    file_name: str = "chat.txt"
    uploaded_by: str = "admin"
    known_providers: list[str] = Field(default_factory=list)


class SenderCountModel(BaseModel):
    name: str
    count: int


class ExportStatsModel(BaseModel):
    total_messages: int
    unique_senders: int
    system_messages: int
    top_senders: list[SenderCountModel]


class ChatImportResponse(BaseModel):
    import_id: str
    status: str
    file_name: str
    group_name: str | None = None
    message_count: int
    entity_count: int
    date_range_start: datetime | None = None
    date_range_end: datetime | None = None
    stats: ExportStatsModel
    entities: list[dict[str, Any]]


# ========== CSV import ==========

class CSVImportRequest(BaseModel):
    content: str
    file_name: str = "listings.csv"
    source_type: Literal["MANUAL", "CSV_IMPORT", "GOOGLE_SHEETS", "WHATSAPP"] = "CSV_IMPORT"
    source_id: str | None = None
    source_url: str | None = None
    skip_duplicates: bool = True
    auto_approve: bool = False
    existing_listings: list[ExistingListingModel] = Field(default_factory=list)
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    has_headers: bool = True
    column_mapping: dict[str, str] | None = None


class CSVStructureRequest(BaseModel):
    content: str
    delimiter: str = Field(default=",", min_length=1, max_length=1)


class CSVStructureResponse(BaseModel):
    is_valid: bool
    errors: list[str]
    row_count: int
    column_count: int


# ========== Listings ==========

class ListingBatchRequest(BaseModel):
    listings: list[dict[str, Any]]
    source_type: Literal["MANUAL", "CSV_IMPORT", "GOOGLE_SHEETS", "WHATSAPP"] = "MANUAL"
    source_id: str | None = None
    source_url: str | None = None
    skip_duplicates: bool = True
    auto_approve: bool = False
    existing_listings: list[ExistingListingModel] = Field(default_factory=list)


class IngestionResponse(BaseModel):
    success: bool
    created: int
    updated: int
    skipped: int
    success_rate: float
    errors: list[RowMessageModel]
    warnings: list[RowMessageModel]
    listings: list[dict[str, Any]]


class ValidationIssueModel(BaseModel):
    field: str
    message: str
    code: str


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: list[ValidationIssueModel]
    warnings: list[ValidationIssueModel]


class NormalizeResponse(BaseModel):
    listing: dict[str, Any]


class DuplicateCheckRequest(BaseModel):
    listing: dict[str, Any]
    existing_listings: list[ExistingListingModel] = Field(default_factory=list)


class DuplicateCheckResponse(BaseModel):
    is_duplicate: bool
    confidence: float
    matches: list[str]


# ========== Sync ==========

class SyncStatusResponse(BaseModel):
    active_sources: int
    total_sources: int
    pending_syncs: int
    last_sync_time: datetime | None = None
    next_scheduled_sync: datetime


class SyncTriggerRequest(BaseModel):
    source_id: str | None = None
    existing_listings: list[ExistingListingModel] = Field(default_factory=list)


class SyncRunModel(BaseModel):
    source_id: str
    source_name: str
    success: bool
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class SyncTriggerResponse(BaseModel):
    success: bool
    message: str
    total_sources: int
    successful_syncs: int
    failed_syncs: int
    results: list[SyncRunModel]


class SyncSourceRequest(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    type: Literal["GOOGLE_SHEETS", "CSV_IMPORT"] = "GOOGLE_SHEETS"
    is_active: bool = True
    sync_frequency: Literal["HOURLY", "DAILY", "WEEKLY", "MANUAL"] = "DAILY"
    column_mapping: dict[str, str] = Field(default_factory=dict)


class SyncSourceModel(BaseModel):
    id: str
    name: str
    url: str
    type: str
    is_active: bool
    sync_frequency: str
    last_sync_at: datetime | None = None
    last_sync_status: str | None = None
    column_mapping: dict[str, str] = Field(default_factory=dict)


class SyncLogModel(BaseModel):
    id: str
    source_id: str
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    records_fetched: int = 0
    records_created: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    error_message: str | None = None


# ========== Health ==========

class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float
    mode: str
