"""Core types, clock and exceptions for the RBS pipeline."""

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
from rbs_pipeline.core.clock import Clock, FakeClock, SystemClock, resolve_timezone
from rbs_pipeline.core.exceptions import (
    EntityDataMismatchError,
    ImportFileError,
    PipelineError,
    SyncFetchError,
    SyncSourceInactiveError,
    SyncSourceNotFoundError,
)
from rbs_pipeline.core.utils import new_id, utc_now

__all__ = [
    # Types
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
    # Clock
    "Clock",
    "FakeClock",
    "SystemClock",
    "resolve_timezone",
    # Exceptions
    "EntityDataMismatchError",
    "ImportFileError",
    "PipelineError",
    "SyncFetchError",
    "SyncSourceInactiveError",
    "SyncSourceNotFoundError",
    # Utils
    "new_id",
    "utc_now",
]
