"""Data types for extracted chat entities."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from rbs_pipeline.core.exceptions import EntityDataMismatchError
from rbs_pipeline.core.types import ApprovalStatus, EntityType, Sentiment
from rbs_pipeline.core.utils import utc_now


class MentionType(Enum):
    DIRECT = "DIRECT"  # Matched a known provider
    INDIRECT = "INDIRECT"  # Pattern-only hit


class RecommendationType(Enum):
    RECOMMEND = "RECOMMEND"
    NOT_RECOMMEND = "NOT_RECOMMEND"
    NEUTRAL = "NEUTRAL"


class Urgency(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# ============================================================================
# Entity payloads
# ============================================================================


@dataclass
class ProviderMentionData:
    """A business named in a message."""

    business_name: str
    context: str
    mention_type: MentionType = MentionType.INDIRECT
    type: EntityType = field(default=EntityType.PROVIDER_MENTION, init=False)


@dataclass
class ContactInfoData:
    """Phone, e-mail or website posted in a message."""

    phone: str | None = None
    email: str | None = None
    website: str | None = None
    associated_name: str | None = None
    type: EntityType = field(default=EntityType.CONTACT_INFO, init=False)


@dataclass
class PricingData:
    """A price, or a price range when ``price_type`` is ``RANGE``."""

    amount: float | None = None
    currency: str = "ILS"
    service_description: str | None = None
    price_type: str | None = None  # FIXED, HOURLY, MONTHLY, PER_SESSION or RANGE
    range_min: float | None = None
    range_max: float | None = None
    type: EntityType = field(default=EntityType.PRICING, init=False)


@dataclass
class ServiceRequestData:
    """Someone asking the group for a provider. Always a lead."""

    service_type: str
    description: str
    age_range: str | None = None
    neighborhood: str | None = None
    urgency: Urgency = Urgency.LOW
    is_lead: bool = True
    type: EntityType = field(default=EntityType.SERVICE_REQUEST, init=False)


@dataclass
class RecommendationData:
    """A recommendation (or warning) about a business, named when known."""

    recommendation_type: RecommendationType
    business_name: str | None = None
    reason: str | None = None
    type: EntityType = field(default=EntityType.RECOMMENDATION, init=False)


EntityData = Union[
    ProviderMentionData,
    ContactInfoData,
    PricingData,
    ServiceRequestData,
    RecommendationData,
]

_DATA_CLASSES: dict[EntityType, type] = {
    EntityType.PROVIDER_MENTION: ProviderMentionData,
    EntityType.CONTACT_INFO: ContactInfoData,
    EntityType.PRICING: PricingData,
    EntityType.SERVICE_REQUEST: ServiceRequestData,
    EntityType.RECOMMENDATION: RecommendationData,
}

_ENUM_FIELDS: dict[str, type[Enum]] = {
    "mention_type": MentionType,
    "recommendation_type": RecommendationType,
    "urgency": Urgency,
}


def entity_data_to_dict(data: EntityData) -> dict[str, Any]:
    """Serialize a payload to plain JSON-friendly values."""
    result = asdict(data)
    for key, value in result.items():
        if isinstance(value, Enum):
            result[key] = value.value
    return result


def entity_data_from_dict(payload: dict[str, Any]) -> EntityData:
    """Build the payload variant named by ``payload["type"]``.

    Raises:
        ValueError: If the discriminator is missing or unknown.
    """
    raw_type = payload.get("type")
    try:
        entity_type = EntityType(raw_type)
    except ValueError:
        raise ValueError(f"Unknown entity data type: {raw_type!r}") from None

    cls = _DATA_CLASSES[entity_type]
    kwargs: dict[str, Any] = {}
    for key, value in payload.items():
        if key == "type":
            continue
        if key in _ENUM_FIELDS and value is not None:
            value = _ENUM_FIELDS[key](value)
        kwargs[key] = value
    return cls(**kwargs)


# ============================================================================
# Extracted entity
# ============================================================================


@dataclass
class ExtractedEntity:
    """One classified fact from a chat message, waiting for human review.

    ``extracted_data.type`` must equal ``entity_type``; a mismatch raises
    ``EntityDataMismatchError`` at construction.
    """

    id: str
    import_id: str
    message_id: str
    entity_type: EntityType
    raw_text: str
    extracted_data: EntityData
    confidence: float
    sentiment: Sentiment | None = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    provider_id: str | None = None
    listing_id: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if self.extracted_data.type != self.entity_type:
            raise EntityDataMismatchError(
                self.entity_type.value, self.extracted_data.type.value
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    def approve(
        self,
        reviewer: str,
        provider_id: str | None = None,
        listing_id: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Mark the entity approved, optionally linking it to a provider/listing."""
        self._review(ApprovalStatus.APPROVED, reviewer, now)
        if provider_id is not None:
            self.provider_id = provider_id
        if listing_id is not None:
            self.listing_id = listing_id

    def reject(self, reviewer: str, now: datetime | None = None) -> None:
        self._review(ApprovalStatus.REJECTED, reviewer, now)

    def _review(self, status: ApprovalStatus, reviewer: str, now: datetime | None) -> None:
        if self.approval_status != ApprovalStatus.PENDING:
            raise ValueError(
                f"Entity {self.id} already reviewed ({self.approval_status.value})"
            )
        self.approval_status = status
        self.reviewed_by = reviewer
        self.reviewed_at = now or utc_now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "import_id": self.import_id,
            "message_id": self.message_id,
            "entity_type": self.entity_type.value,
            "provider_id": self.provider_id,
            "listing_id": self.listing_id,
            "raw_text": self.raw_text,
            "extracted_data": entity_data_to_dict(self.extracted_data),
            "confidence": self.confidence,
            "sentiment": self.sentiment.value if self.sentiment else None,
            "approval_status": self.approval_status.value,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat(),
        }
