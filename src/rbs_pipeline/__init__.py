"""RBS Pipeline - content ingestion for the Ramat Beit Shemesh activity directory.

Turns community content into reviewable directory data:
- WhatsApp chat exports (iOS, Android and Hebrew formats) into messages
- Messages into extracted entities (providers, contacts, prices,
  service requests, recommendations) awaiting admin review
- Listing rows from forms, CSV files and Google Sheets into validated,
  normalized listings with duplicate detection

Plus:
- Sync scheduler for registered sheet sources
- REST server (``python -m rbs_pipeline.server``)

Example:
    >>> from rbs_pipeline import parse_chat_export, extract_entities
    >>>
    >>> result = parse_chat_export(open("chat.txt", encoding="utf-8").read())
    >>> for message in result.messages:
    ...     for entity in extract_entities(message):
    ...         print(entity.entity_type.value, entity.raw_text)
"""

from rbs_pipeline.core.exceptions import (
    EntityDataMismatchError,
    ImportFileError,
    PipelineError,
    SyncFetchError,
    SyncSourceInactiveError,
    SyncSourceNotFoundError,
)
from rbs_pipeline.core.types import (
    ApprovalStatus,
    EntityType,
    Gender,
    ImportStatus,
    ListingStatus,
    PriceType,
    Sentiment,
    SourceType,
    SyncFrequency,
    SyncStatus,
)
from rbs_pipeline.entities import ExtractedEntity, extract_entities
from rbs_pipeline.ingestion import (
    IngestionOptions,
    IngestionResult,
    SyncRegistry,
    SyncService,
    process_chat_import,
    process_csv_import,
    process_listing_batch,
)
from rbs_pipeline.listings import (
    ListingInput,
    check_for_duplicates,
    normalize_listing,
    parse_csv,
    validate_listing,
)
from rbs_pipeline.whatsapp import ParsedMessage, ParseResult, parse_chat_export

__version__ = "0.1.0"

__all__ = [
    # Errors
    "PipelineError",
    "ImportFileError",
    "EntityDataMismatchError",
    "SyncSourceNotFoundError",
    "SyncSourceInactiveError",
    "SyncFetchError",
    # Enums
    "ApprovalStatus",
    "EntityType",
    "Gender",
    "ImportStatus",
    "ListingStatus",
    "PriceType",
    "Sentiment",
    "SourceType",
    "SyncFrequency",
    "SyncStatus",
    # WhatsApp
    "ParsedMessage",
    "ParseResult",
    "parse_chat_export",
    # Entities
    "ExtractedEntity",
    "extract_entities",
    # Listings
    "ListingInput",
    "check_for_duplicates",
    "normalize_listing",
    "parse_csv",
    "validate_listing",
    # Ingestion
    "IngestionOptions",
    "IngestionResult",
    "SyncRegistry",
    "SyncService",
    "process_chat_import",
    "process_csv_import",
    "process_listing_batch",
]
