"""Entity extraction package: typed, confidence-scored facts from chat messages."""

from rbs_pipeline.entities.extractor import extract_entities
from rbs_pipeline.entities.rules import RULES, ExtractionRule, confidence_for
from rbs_pipeline.entities.types import (
    ContactInfoData,
    EntityData,
    ExtractedEntity,
    MentionType,
    PricingData,
    ProviderMentionData,
    RecommendationData,
    RecommendationType,
    ServiceRequestData,
    Urgency,
    entity_data_from_dict,
    entity_data_to_dict,
)

__all__ = [
    "ContactInfoData",
    "EntityData",
    "ExtractedEntity",
    "ExtractionRule",
    "MentionType",
    "PricingData",
    "ProviderMentionData",
    "RULES",
    "RecommendationData",
    "RecommendationType",
    "ServiceRequestData",
    "Urgency",
    "confidence_for",
    "entity_data_from_dict",
    "entity_data_to_dict",
    "extract_entities",
]
