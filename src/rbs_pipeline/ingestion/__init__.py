"""Ingestion orchestration: listing batches, CSV imports, chat imports and sync."""

from rbs_pipeline.ingestion.chat import (
    ChatImport,
    ChatImportResult,
    ImportedMessage,
    process_chat_import,
)
from rbs_pipeline.ingestion.pipeline import (
    get_ingestion_stats,
    process_csv_import,
    process_listing_batch,
)
from rbs_pipeline.ingestion.sync import (
    ScheduledSyncResult,
    SheetFetcher,
    SyncLog,
    SyncRegistry,
    SyncRunResult,
    SyncService,
    SyncSource,
    SyncStatusSummary,
    fetch_sheet_rows,
    is_sync_due,
)
from rbs_pipeline.ingestion.types import (
    IngestionOptions,
    IngestionResult,
    IngestionStats,
    RowMessage,
)

__all__ = [
    # Chat
    "ChatImport",
    "ChatImportResult",
    "ImportedMessage",
    "process_chat_import",
    # Pipeline
    "get_ingestion_stats",
    "process_csv_import",
    "process_listing_batch",
    # Sync
    "ScheduledSyncResult",
    "SheetFetcher",
    "SyncLog",
    "SyncRegistry",
    "SyncRunResult",
    "SyncService",
    "SyncSource",
    "SyncStatusSummary",
    "fetch_sheet_rows",
    "is_sync_due",
    # Types
    "IngestionOptions",
    "IngestionResult",
    "IngestionStats",
    "RowMessage",
]
