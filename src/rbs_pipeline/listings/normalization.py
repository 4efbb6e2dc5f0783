"""Listing normalization.

Turns a validated ``ListingInput`` into a ``Listing`` with canonical
enums, ids and formats. Nothing here raises for bad content: values that
cannot be resolved are left unset, and enum fields fall back to a fixed
default so cosmetic mismatches never block ingestion.
"""

from __future__ import annotations

import re

from rbs_pipeline.core.types import Gender, PriceType
from rbs_pipeline.listings.reference import (
    CATEGORIES,
    CATEGORY_KEYWORD_IDS,
    GENDER_ALIASES,
    HEALTH_FUNDS,
    LANGUAGE_ALIASES,
    NEIGHBORHOOD_ALIASES,
    PRICE_TYPE_ALIASES,
    RBS_NEIGHBORHOODS,
    SUBSIDY_ALIASES,
    SUPPORTED_LANGUAGES,
    TRUTHY_STRINGS,
)
from rbs_pipeline.listings.types import Listing, ListingInput, coerce_listing
from rbs_pipeline.listings.validation import parse_integer
from rbs_pipeline.whatsapp.patterns import normalize_phone

__all__ = [
    "extract_price",
    "find_neighborhood",
    "match_category",
    "normalize_gender",
    "normalize_languages",
    "normalize_listing",
    "normalize_neighborhood",
    "normalize_phone",
    "normalize_price_type",
    "normalize_subsidies",
]

_AMOUNT = r"(\d+(?:,\d{3})*(?:\.\d{2})?)"

PRICE_TEXT_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"₪\s*" + _AMOUNT),
    re.compile(_AMOUNT + r"\s*₪"),
    re.compile(_AMOUNT + r"\s*(?:nis|shekel|שקל|ש\"ח|ש״ח)", re.IGNORECASE),
]

_PLAIN_NUMBER = re.compile(r"^(\d+(?:\.\d{2})?)$")
_LIST_SEPARATOR = re.compile(r"[,;]")


def normalize_neighborhood(neighborhood: str) -> str | None:
    """Resolve a neighborhood through aliases, exact match, then containment."""
    lower = neighborhood.lower().strip()
    if lower in NEIGHBORHOOD_ALIASES:
        return NEIGHBORHOOD_ALIASES[lower]

    if neighborhood in RBS_NEIGHBORHOODS:
        return neighborhood

    for known in RBS_NEIGHBORHOODS:
        if neighborhood in known or known in neighborhood:
            return known
    return None


def find_neighborhood(text: str) -> str | None:
    """Find a neighborhood mentioned anywhere in free text."""
    for known in RBS_NEIGHBORHOODS:
        if known in text:
            return known
    lower = text.lower()
    for alias, canonical in NEIGHBORHOOD_ALIASES.items():
        if re.search(r"(?<!\w)" + re.escape(alias) + r"(?!\w)", lower):
            return canonical
    return None


def normalize_price_type(price_type: str) -> PriceType:
    lower = price_type.lower().strip()
    if lower in PRICE_TYPE_ALIASES:
        return PriceType(PRICE_TYPE_ALIASES[lower])
    try:
        return PriceType(price_type.strip().upper())
    except ValueError:
        return PriceType.CONTACT


def normalize_gender(gender: str) -> Gender:
    lower = gender.lower().strip()
    if lower in GENDER_ALIASES:
        return Gender(GENDER_ALIASES[lower])
    try:
        return Gender(gender.strip().upper())
    except ValueError:
        return Gender.ALL


def normalize_languages(languages: str | list[str]) -> list[str]:
    """Map names to language codes and drop anything unsupported."""
    items = _LIST_SEPARATOR.split(languages) if isinstance(languages, str) else languages
    codes = []
    for item in items:
        lower = item.lower().strip()
        code = LANGUAGE_ALIASES.get(lower, lower)
        if code in SUPPORTED_LANGUAGES:
            codes.append(code)
    return codes


def normalize_subsidies(subsidies: str | list[str]) -> list[str]:
    items = _LIST_SEPARATOR.split(subsidies) if isinstance(subsidies, str) else subsidies
    funds = []
    for item in items:
        trimmed = item.strip()
        fund = SUBSIDY_ALIASES.get(trimmed.lower(), trimmed)
        if fund in HEALTH_FUNDS:
            funds.append(fund)
    return funds


def extract_price(text: str) -> float | None:
    """Pull an amount out of ``₪150``, ``150₪``, ``150 NIS``, ``150 ש"ח`` or ``150``."""
    for pattern in PRICE_TEXT_PATTERNS:
        m = pattern.search(text)
        if m:
            return float(m.group(1).replace(",", ""))

    m = _PLAIN_NUMBER.match(text.strip())
    if m:
        return float(m.group(1))
    return None


def match_category(category_name: str) -> str | None:
    """Resolve a free-text category name to a category id.

    Tries exact name, then containment either way, then the keyword table.
    """
    name = category_name.strip()
    lower = name.lower()
    if not lower:
        return None

    for category in CATEGORIES:
        if category.name.lower() == lower or category.name_he == name:
            return category.id

    for category in CATEGORIES:
        cat_lower = category.name.lower()
        if lower in cat_lower or cat_lower in lower or name in category.name_he:
            return category.id

    for category_id, keywords in CATEGORY_KEYWORD_IDS.items():
        if any(kw in lower for kw in keywords):
            return category_id
    return None


def normalize_listing(listing: ListingInput) -> Listing:
    """Best-effort normalization; assumes ``validate_listing`` ran first."""
    listing, _ = coerce_listing(listing)
    result = Listing()

    for name in ("title", "title_he", "description", "description_he", "location", "provider_name"):
        value = getattr(listing, name)
        if value:
            setattr(result, name, value.strip())

    if listing.category_id:
        result.category_id = listing.category_id
    elif listing.category_name:
        result.category_id = match_category(listing.category_name)

    if listing.provider_id:
        result.provider_id = listing.provider_id

    if listing.price is not None and listing.price != "":
        if isinstance(listing.price, str):
            result.price = extract_price(listing.price)
        elif not isinstance(listing.price, bool):
            result.price = float(listing.price)

    if listing.price_type:
        result.price_type = normalize_price_type(listing.price_type)

    if listing.phone:
        result.phone = normalize_phone(listing.phone)
    if listing.email:
        result.email = listing.email.strip().lower()
    if listing.website:
        result.website = listing.website.strip()

    if listing.neighborhood:
        result.neighborhood = normalize_neighborhood(listing.neighborhood)

    if listing.age_min is not None:
        result.age_min = parse_integer(listing.age_min)
    if listing.age_max is not None:
        result.age_max = parse_integer(listing.age_max)

    if listing.gender:
        result.gender = normalize_gender(listing.gender)
    if listing.instructor_gender:
        result.instructor_gender = normalize_gender(listing.instructor_gender)

    if listing.language:
        result.language = normalize_languages(listing.language)

    if listing.max_participants is not None:
        result.max_participants = parse_integer(listing.max_participants)
    if listing.duration is not None:
        result.duration = parse_integer(listing.duration)

    if listing.is_online is not None:
        if isinstance(listing.is_online, str):
            result.is_online = listing.is_online.strip().lower() in TRUTHY_STRINGS
        else:
            result.is_online = bool(listing.is_online)

    if listing.subsidies:
        result.subsidies = normalize_subsidies(listing.subsidies)

    return result
