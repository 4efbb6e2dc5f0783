"""Core enums shared across the ingestion pipeline."""

from __future__ import annotations

from enum import Enum


class EntityType(Enum):
    """Kind of fact pulled out of a chat message."""

    PROVIDER_MENTION = "PROVIDER_MENTION"
    CONTACT_INFO = "CONTACT_INFO"
    PRICING = "PRICING"
    SERVICE_REQUEST = "SERVICE_REQUEST"
    RECOMMENDATION = "RECOMMENDATION"


class Sentiment(Enum):
    """Keyword-scored tone of a message."""

    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class ApprovalStatus(Enum):
    """Review state of an extracted entity."""

    PENDING = "PENDING"  # Waiting in the review queue
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ImportStatus(Enum):
    """Lifecycle of a chat-export import."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PriceType(Enum):
    """How a listing is billed."""

    FIXED = "FIXED"
    HOURLY = "HOURLY"
    PER_SESSION = "PER_SESSION"
    MONTHLY = "MONTHLY"
    CONTACT = "CONTACT"
    FREE = "FREE"


class Gender(Enum):
    """Audience or instructor gender."""

    MALE = "MALE"
    FEMALE = "FEMALE"
    ALL = "ALL"


class ListingStatus(Enum):
    """Lifecycle of a listing in the external store."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    REJECTED = "REJECTED"


class SourceType(Enum):
    """Where a listing came from."""

    MANUAL = "MANUAL"
    CSV_IMPORT = "CSV_IMPORT"
    GOOGLE_SHEETS = "GOOGLE_SHEETS"
    WHATSAPP = "WHATSAPP"


class SyncStatus(Enum):
    """Outcome of the most recent sync of a source."""

    PENDING = "PENDING"
    SYNCING = "SYNCING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class SyncFrequency(Enum):
    """How often a sync source should be pulled."""

    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MANUAL = "MANUAL"  # Only on explicit trigger
