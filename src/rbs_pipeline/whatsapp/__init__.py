"""WhatsApp chat-export parsing and the Hebrew/English pattern library."""

from rbs_pipeline.whatsapp.parser import (
    extract_group_name,
    extract_sender_phone,
    get_export_stats,
    is_valid_chat_export,
    parse_chat_export,
)
from rbs_pipeline.whatsapp.patterns import (
    PATTERNS_VERSION,
    PriceMention,
    PriceRange,
    RecommendationMatch,
    ServiceRequestMatch,
    analyze_sentiment,
    detect_category,
    detect_recommendation,
    detect_service_request,
    detect_urgency,
    extract_age_range,
    extract_emails,
    extract_phone_numbers,
    extract_price_ranges,
    extract_prices,
    extract_websites,
    find_business_names,
    is_system_message,
    map_unit_to_type,
    normalize_phone,
)
from rbs_pipeline.whatsapp.types import (
    DateRange,
    ExportStats,
    ParsedMessage,
    ParseResult,
    SenderCount,
)

__all__ = [
    "DateRange",
    "ExportStats",
    "ParsedMessage",
    "ParseResult",
    "SenderCount",
    "extract_group_name",
    "extract_sender_phone",
    "get_export_stats",
    "is_valid_chat_export",
    "parse_chat_export",
    "PATTERNS_VERSION",
    "PriceMention",
    "PriceRange",
    "RecommendationMatch",
    "ServiceRequestMatch",
    "analyze_sentiment",
    "detect_category",
    "detect_recommendation",
    "detect_service_request",
    "detect_urgency",
    "extract_age_range",
    "extract_emails",
    "extract_phone_numbers",
    "extract_price_ranges",
    "extract_prices",
    "extract_websites",
    "find_business_names",
    "is_system_message",
    "map_unit_to_type",
    "normalize_phone",
]
