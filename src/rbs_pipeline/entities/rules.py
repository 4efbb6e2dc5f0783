"""Extraction rules and their fixed confidence values.

Confidence reflects how reliable a rule is, not a learned score. Each
rule has one constant; identical input always yields identical output.
"""

from __future__ import annotations

from dataclasses import dataclass

from rbs_pipeline.core.types import EntityType

CONTEXT_WINDOW = 50  # chars before/after match for context


@dataclass(frozen=True)
class ExtractionRule:
    """One extraction heuristic and its calibrated confidence."""

    id: str
    entity_type: EntityType
    confidence: float
    description: str


RULES: dict[str, ExtractionRule] = {
    rule.id: rule
    for rule in [
        # Provider mentions
        ExtractionRule("provider_direct", EntityType.PROVIDER_MENTION, 0.95,
                       "Known provider name found in text"),
        ExtractionRule("provider_indirect", EntityType.PROVIDER_MENTION, 0.65,
                       "Business-name pattern without a known provider"),
        # Contact info
        ExtractionRule("contact_phone", EntityType.CONTACT_INFO, 0.99, "Israeli phone number"),
        ExtractionRule("contact_email", EntityType.CONTACT_INFO, 0.98, "E-mail address"),
        ExtractionRule("contact_website", EntityType.CONTACT_INFO, 0.95, "URL or bare domain"),
        # Pricing
        ExtractionRule("price_per_unit", EntityType.PRICING, 0.95, "Price with a billing unit"),
        ExtractionRule("price_plain", EntityType.PRICING, 0.90, "Shekel amount"),
        ExtractionRule("price_range", EntityType.PRICING, 0.85, "Currency-marked price range"),
        # Service requests
        ExtractionRule("request_looking_for", EntityType.SERVICE_REQUEST, 0.91, "'looking for' phrasing"),
        ExtractionRule("request_anyone_know", EntityType.SERVICE_REQUEST, 0.89, "'anyone know' phrasing"),
        ExtractionRule("request_recommendation_for", EntityType.SERVICE_REQUEST, 0.90,
                       "'recommendation for' phrasing"),
        ExtractionRule("request_does_anyone_have", EntityType.SERVICE_REQUEST, 0.88,
                       "'does anyone have' phrasing"),
        ExtractionRule("request_need", EntityType.SERVICE_REQUEST, 0.85, "'need' phrasing"),
        # Recommendations
        ExtractionRule("recommend_strong_positive", EntityType.RECOMMENDATION, 0.92,
                       "Strong recommendation phrase"),
        ExtractionRule("recommend_positive", EntityType.RECOMMENDATION, 0.90, "Positive keyword"),
        ExtractionRule("recommend_negative", EntityType.RECOMMENDATION, 0.90, "Negative phrase"),
    ]
}


def confidence_for(rule_id: str) -> float:
    """Look up the constant confidence of a rule. Raises KeyError if unknown."""
    return RULES[rule_id].confidence


def context_around(text: str, span: tuple[int, int], window: int = CONTEXT_WINDOW) -> str:
    """Return the match plus ``window`` chars on each side, stripped."""
    start = max(0, span[0] - window)
    end = min(len(text), span[1] + window)
    return text[start:end].strip()
