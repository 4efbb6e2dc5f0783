"""Entity extraction from parsed chat messages.

Composes the pattern library into typed, confidence-scored entities.
Everything here is a pure function of the message and the known
provider names; the caller owns persistence and review.
"""

from __future__ import annotations

import re
from datetime import datetime

from rbs_pipeline.core.types import EntityType, Sentiment
from rbs_pipeline.core.utils import new_id, utc_now
from rbs_pipeline.entities.rules import confidence_for, context_around
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
)
from rbs_pipeline.listings.normalization import find_neighborhood
from rbs_pipeline.whatsapp.patterns import (
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
    overlaps_any,
)
from rbs_pipeline.whatsapp.types import ParsedMessage

GENERAL_SERVICE = "general"


class _EntityBuilder:
    """Collects entities for one message, stamping shared ids and times."""

    def __init__(self, import_id: str, message_id: str, now: datetime) -> None:
        self.import_id = import_id
        self.message_id = message_id
        self.now = now
        self.entities: list[ExtractedEntity] = []

    def add(
        self,
        entity_type: EntityType,
        rule_id: str,
        raw_text: str,
        data: EntityData,
        sentiment: Sentiment | None = None,
    ) -> None:
        self.entities.append(ExtractedEntity(
            id=new_id("ent"),
            import_id=self.import_id,
            message_id=self.message_id,
            entity_type=entity_type,
            raw_text=raw_text,
            extracted_data=data,
            confidence=confidence_for(rule_id),
            sentiment=sentiment,
            created_at=self.now,
        ))


def extract_entities(
    message: ParsedMessage,
    *,
    import_id: str = "",
    message_id: str = "",
    known_providers: list[str] | None = None,
    now: datetime | None = None,
) -> list[ExtractedEntity]:
    """Extract every entity type from one message.

    System messages and empty content yield nothing. Every entity comes
    back PENDING for human review.
    """
    text = message.content
    if message.is_system_message or not text.strip():
        return []

    builder = _EntityBuilder(import_id, message_id, now or utc_now())
    sentiment = analyze_sentiment(text)

    provider_names = _extract_provider_mentions(builder, text, known_providers or [], sentiment)
    _extract_contact_info(builder, text, message.sender_name)
    _extract_pricing(builder, text)
    _extract_service_request(builder, text)
    _extract_recommendation(builder, text, provider_names, sentiment)

    return builder.entities


def _extract_provider_mentions(
    builder: _EntityBuilder,
    text: str,
    known_providers: list[str],
    sentiment: Sentiment,
) -> list[str]:
    found: list[str] = []
    lowered = text.lower()

    for provider in known_providers:
        if not provider.strip():
            continue
        idx = lowered.find(provider.lower())
        if idx < 0 or provider in found:
            continue
        span = (idx, idx + len(provider))
        found.append(provider)
        builder.add(
            EntityType.PROVIDER_MENTION,
            "provider_direct",
            text[span[0]:span[1]],
            ProviderMentionData(
                business_name=provider,
                context=context_around(text, span),
                mention_type=MentionType.DIRECT,
            ),
            sentiment,
        )

    for name in find_business_names(text):
        name_lower = name.lower()
        if any(name_lower in p.lower() or p.lower() in name_lower for p in found):
            continue
        idx = text.find(name)
        found.append(name)
        builder.add(
            EntityType.PROVIDER_MENTION,
            "provider_indirect",
            name,
            ProviderMentionData(
                business_name=name,
                context=context_around(text, (idx, idx + len(name))),
                mention_type=MentionType.INDIRECT,
            ),
            sentiment,
        )

    return found


def _extract_contact_info(builder: _EntityBuilder, text: str, sender_name: str) -> None:
    for phone in extract_phone_numbers(text):
        builder.add(
            EntityType.CONTACT_INFO, "contact_phone", phone,
            ContactInfoData(phone=phone, associated_name=sender_name),
        )
    for email in extract_emails(text):
        builder.add(
            EntityType.CONTACT_INFO, "contact_email", email,
            ContactInfoData(email=email, associated_name=sender_name),
        )
    for website in extract_websites(text):
        builder.add(
            EntityType.CONTACT_INFO, "contact_website", website,
            ContactInfoData(website=website, associated_name=sender_name),
        )


def _extract_pricing(builder: _EntityBuilder, text: str) -> None:
    service = detect_category(text)
    range_spans: list[tuple[int, int]] = []

    for price_range in extract_price_ranges(text):
        range_spans.append(price_range.span)
        builder.add(
            EntityType.PRICING, "price_range",
            text[price_range.span[0]:price_range.span[1]].strip(),
            PricingData(
                service_description=service,
                price_type="RANGE",
                range_min=price_range.min_amount,
                range_max=price_range.max_amount,
            ),
        )

    for price in extract_prices(text):
        if overlaps_any(price.span, range_spans):
            continue
        rule_id = "price_per_unit" if price.price_type else "price_plain"
        builder.add(
            EntityType.PRICING, rule_id,
            text[price.span[0]:price.span[1]],
            PricingData(
                amount=price.amount,
                service_description=service,
                price_type=price.price_type or "FIXED",
            ),
        )


def _extract_service_request(builder: _EntityBuilder, text: str) -> None:
    match = detect_service_request(text)
    if match is None:
        return
    builder.add(
        EntityType.SERVICE_REQUEST,
        f"request_{match.rule}",
        text.strip(),
        ServiceRequestData(
            service_type=detect_category(text) or GENERAL_SERVICE,
            description=match.description,
            age_range=extract_age_range(text),
            neighborhood=find_neighborhood(text),
            urgency=Urgency(detect_urgency(text)),
        ),
    )


def _extract_recommendation(
    builder: _EntityBuilder,
    text: str,
    provider_names: list[str],
    sentiment: Sentiment,
) -> None:
    match = detect_recommendation(text)
    if match is None:
        return

    recommendation_type = RecommendationType(match.recommendation_type)
    if sentiment == Sentiment.NEUTRAL:
        # Keyword scoring found nothing; fall back to the phrase polarity.
        sentiment = (
            Sentiment.POSITIVE
            if recommendation_type == RecommendationType.RECOMMEND
            else Sentiment.NEGATIVE
        )

    builder.add(
        EntityType.RECOMMENDATION,
        f"recommend_{match.tier}",
        context_around(text, match.span),
        RecommendationData(
            recommendation_type=recommendation_type,
            business_name=provider_names[0] if provider_names else None,
            reason=_sentence_around(text, match.span),
        ),
        sentiment,
    )


def _sentence_around(text: str, span: tuple[int, int]) -> str:
    """The sentence holding the match, bounded by . ! ? or newlines."""
    start = max((m.end() for m in re.finditer(r"[.!?\n]", text[:span[0]])), default=0)
    end_match = re.search(r"[.!?\n]", text[span[1]:])
    end = span[1] + end_match.start() + 1 if end_match else len(text)
    return text[start:end].strip()
