"""Listing validation.

Every rule runs on every call so one pass reports all problems. Errors
block a listing; warnings are only surfaced for review.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from rbs_pipeline.core.types import Gender, PriceType
from rbs_pipeline.listings.reference import CATEGORY_IDS, RBS_NEIGHBORHOODS
from rbs_pipeline.listings.types import (
    ListingInput,
    ValidationIssue,
    ValidationResult,
    coerce_listing,
)

ISRAELI_PHONE_REGEX = re.compile(r"^(?:\+972|972|0)(?:5[0-9]|[2-4]|[7-9])[0-9]{7}$")
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
WEBSITE_REGEX = re.compile(r"^(https?://)?(www\.)?[\w-]+\.[\w.-]+/?.*$", re.IGNORECASE)

HIGH_PRICE_THRESHOLD = 100_000

VALID_PRICE_TYPES = [p.value for p in PriceType]
VALID_GENDERS = [g.value for g in Gender]

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")


def parse_number(value: float | int | str | None) -> float | None:
    """Read a number the lenient way form fields arrive: ``"200 ש"ח"`` -> 200.0.

    Strings are read up to the first non-numeric character. Returns None
    when no number can be read.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    m = _FLOAT_PREFIX.match(value)
    return float(m.group(0)) if m else None


def parse_integer(value: float | int | str | None) -> int | None:
    """Like ``parse_number`` but for whole numbers (``"12 years"`` -> 12)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    m = _INT_PREFIX.match(value)
    return int(m.group(0)) if m else None


def validate_listing(listing: ListingInput) -> ValidationResult:
    """Check a raw listing against every field rule."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    listing, rejected = coerce_listing(listing)
    for name in rejected:
        errors.append(ValidationIssue(
            name, f"{name} has an unsupported value type", "INVALID_TYPE"
        ))

    # Required fields
    if not listing.title and not listing.title_he:
        errors.append(ValidationIssue(
            "title", "Title is required (English or Hebrew)", "REQUIRED_TITLE"
        ))
    if not listing.description and not listing.description_he:
        errors.append(ValidationIssue(
            "description", "Description is required (English or Hebrew)", "REQUIRED_DESCRIPTION"
        ))
    if not listing.category_id and not listing.category_name:
        errors.append(ValidationIssue("category", "Category is required", "REQUIRED_CATEGORY"))
    if not listing.provider_id and not listing.provider_name:
        errors.append(ValidationIssue("provider", "Provider is required", "REQUIRED_PROVIDER"))

    if listing.category_id and listing.category_id not in CATEGORY_IDS:
        errors.append(ValidationIssue(
            "category_id",
            f'Category with ID "{listing.category_id}" not found',
            "INVALID_CATEGORY",
        ))

    # Price
    if listing.price is not None and listing.price != "":
        price = parse_number(listing.price)
        if price is None:
            errors.append(ValidationIssue("price", "Price must be a valid number", "INVALID_PRICE"))
        elif price < 0:
            errors.append(ValidationIssue("price", "Price cannot be negative", "NEGATIVE_PRICE"))
        elif price > HIGH_PRICE_THRESHOLD:
            warnings.append(ValidationIssue(
                "price", "Price seems unusually high. Please verify.", "HIGH_PRICE"
            ))

    if listing.price_type and listing.price_type.upper() not in VALID_PRICE_TYPES:
        errors.append(ValidationIssue(
            "price_type",
            f"Invalid price type. Must be one of: {', '.join(VALID_PRICE_TYPES)}",
            "INVALID_PRICE_TYPE",
        ))

    # Contact
    if listing.phone:
        clean_phone = re.sub(r"[\s\-()]", "", listing.phone)
        if not ISRAELI_PHONE_REGEX.match(clean_phone):
            warnings.append(ValidationIssue(
                "phone", "Phone number may not be in valid Israeli format", "INVALID_PHONE_FORMAT"
            ))

    if listing.email and not EMAIL_REGEX.match(listing.email):
        errors.append(ValidationIssue("email", "Invalid email format", "INVALID_EMAIL"))

    if listing.website and not WEBSITE_REGEX.match(listing.website):
        warnings.append(ValidationIssue(
            "website", "Website URL may not be valid", "INVALID_WEBSITE"
        ))

    if listing.neighborhood and not is_known_neighborhood(listing.neighborhood):
        warnings.append(ValidationIssue(
            "neighborhood",
            f'Neighborhood "{listing.neighborhood}" may not be recognized',
            "UNKNOWN_NEIGHBORHOOD",
        ))

    # Ages
    age_min = age_max = None
    if listing.age_min is not None:
        age_min = parse_integer(listing.age_min)
        if age_min is None or age_min < 0:
            errors.append(ValidationIssue(
                "age_min", "Minimum age must be a valid positive number", "INVALID_AGE_MIN"
            ))
    if listing.age_max is not None:
        age_max = parse_integer(listing.age_max)
        if age_max is None or age_max < 0:
            errors.append(ValidationIssue(
                "age_max", "Maximum age must be a valid positive number", "INVALID_AGE_MAX"
            ))
    if age_min is not None and age_max is not None and age_min > age_max:
        errors.append(ValidationIssue(
            "age_range", "Minimum age cannot be greater than maximum age", "INVALID_AGE_RANGE"
        ))

    # Audience
    if listing.gender and listing.gender.upper() not in VALID_GENDERS:
        errors.append(ValidationIssue(
            "gender",
            f"Invalid gender. Must be one of: {', '.join(VALID_GENDERS)}",
            "INVALID_GENDER",
        ))
    if listing.instructor_gender and listing.instructor_gender.upper() not in VALID_GENDERS:
        errors.append(ValidationIssue(
            "instructor_gender",
            f"Invalid instructor gender. Must be one of: {', '.join(VALID_GENDERS)}",
            "INVALID_INSTRUCTOR_GENDER",
        ))

    if listing.max_participants is not None:
        max_participants = parse_integer(listing.max_participants)
        if max_participants is None or max_participants < 1:
            errors.append(ValidationIssue(
                "max_participants", "Max participants must be at least 1", "INVALID_MAX_PARTICIPANTS"
            ))

    if listing.duration is not None:
        duration = parse_integer(listing.duration)
        if duration is None or duration < 1:
            errors.append(ValidationIssue(
                "duration", "Duration must be at least 1 minute", "INVALID_DURATION"
            ))

    # Bilingual content
    if listing.title and not listing.title_he:
        warnings.append(ValidationIssue(
            "title_he",
            "Hebrew title is missing - recommended for better local visibility",
            "MISSING_HEBREW_TITLE",
        ))
    if listing.title_he and not listing.title:
        warnings.append(ValidationIssue(
            "title", "English title is missing - recommended for broader reach", "MISSING_ENGLISH_TITLE"
        ))
    if listing.description and not listing.description_he:
        warnings.append(ValidationIssue(
            "description_he", "Hebrew description is missing", "MISSING_HEBREW_DESCRIPTION"
        ))
    if listing.description_he and not listing.description:
        warnings.append(ValidationIssue(
            "description", "English description is missing", "MISSING_ENGLISH_DESCRIPTION"
        ))

    return ValidationResult(errors=errors, warnings=warnings)


def is_known_neighborhood(neighborhood: str) -> bool:
    """Exact or containment match against canonical names. Aliases are not consulted."""
    return any(
        known == neighborhood or neighborhood in known or known in neighborhood
        for known in RBS_NEIGHBORHOODS
    )


@dataclass
class InvalidListing:
    index: int
    listing: ListingInput
    result: ValidationResult


@dataclass
class BatchValidationResult:
    """Valid/invalid split of a batch; indices are 0-based input positions."""

    valid: list[tuple[int, ListingInput]] = field(default_factory=list)
    invalid: list[InvalidListing] = field(default_factory=list)
    total_errors: int = 0
    total_warnings: int = 0


def validate_listing_batch(listings: list[ListingInput]) -> BatchValidationResult:
    batch = BatchValidationResult()
    for index, listing in enumerate(listings):
        result = validate_listing(listing)
        batch.total_errors += len(result.errors)
        batch.total_warnings += len(result.warnings)
        if result.is_valid:
            batch.valid.append((index, listing))
        else:
            batch.invalid.append(InvalidListing(index=index, listing=listing, result=result))
    return batch
