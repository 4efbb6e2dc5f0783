"""Data types for listing ingestion."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from rbs_pipeline.core.types import Gender, ListingStatus, PriceType, SourceType

TEXT_FIELDS = (
    "title",
    "title_he",
    "description",
    "description_he",
    "category_id",
    "category_name",
    "provider_id",
    "provider_name",
    "price_type",
    "phone",
    "email",
    "website",
    "location",
    "neighborhood",
    "gender",
    "instructor_gender",
)
NUMBER_FIELDS = ("price", "age_min", "age_max", "max_participants", "duration")
LIST_FIELDS = ("language", "subsidies")


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _number_text(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_listing(listing: ListingInput) -> tuple[ListingInput, list[str]]:
    """Bring loosely typed values into the shapes the listing rules expect.

    Spreadsheet and JSON sources send numbers where text is expected
    (a phone of ``521234567``, a title of ``2024``); those become strings.
    Values that cannot stand in for their field (dicts, lists in a text
    field, booleans) are cleared. Returns the coerced copy and the names
    of the cleared fields.
    """
    changes: dict[str, Any] = {}
    rejected: list[str] = []

    for name in TEXT_FIELDS:
        value = getattr(listing, name)
        if value is None or isinstance(value, str):
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            changes[name] = _number_text(value)
        else:
            changes[name] = None
            rejected.append(name)

    for name in NUMBER_FIELDS:
        value = getattr(listing, name)
        if value is not None and not isinstance(value, (str, int, float)):
            changes[name] = None
            rejected.append(name)

    for name in LIST_FIELDS:
        value = getattr(listing, name)
        if value is None or isinstance(value, str):
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            changes[name] = _number_text(value)
        elif isinstance(value, (list, tuple)) and all(
            isinstance(item, (str, int, float)) and not isinstance(item, bool) for item in value
        ):
            changes[name] = [
                item if isinstance(item, str) else _number_text(item) for item in value
            ]
        else:
            changes[name] = None
            rejected.append(name)

    if not changes:
        return listing, rejected
    return replace(listing, **changes), rejected


@dataclass
class ListingInput:
    """A raw listing record from a form, CSV row or sync row.

    Every field is optional and untrusted. Numbers may still be strings
    (``"200"``, ``"₪150"``); list fields may be comma-separated strings.
    Free-form ``category_name``/``provider_name`` may stand in for ids.
    """

    title: str | None = None
    title_he: str | None = None
    description: str | None = None
    description_he: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    provider_id: str | None = None
    provider_name: str | None = None
    price: float | str | None = None
    price_type: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    location: str | None = None
    neighborhood: str | None = None
    age_min: int | str | None = None
    age_max: int | str | None = None
    gender: str | None = None
    instructor_gender: str | None = None
    language: str | list[str] | None = None
    max_participants: int | str | None = None
    duration: int | str | None = None
    is_online: bool | str | None = None
    subsidies: str | list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ListingInput:
        """Build from a mapping with camelCase or snake_case keys.

        Unknown keys are kept in ``extra``. A ``category`` key is read as
        ``category_name``.
        """
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name == "category":
                name = "category_name"
            if name in known:
                kwargs[name] = value
            else:
                extra[key] = value
        return cls(**kwargs, extra=extra)


@dataclass(frozen=True)
class ValidationIssue:
    """One validation error or warning with a stable machine code."""

    field: str
    message: str
    code: str


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    name_he: str
    slug: str
    parent_id: str | None = None


@dataclass(frozen=True)
class ExistingListing:
    """Snapshot row of a stored listing, used for duplicate checks."""

    title: str
    title_he: str | None = None
    provider_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExistingListing:
        return cls(
            title=data.get("title", ""),
            title_he=data.get("title_he", data.get("titleHe")),
            provider_id=data.get("provider_id", data.get("providerId")),
        )


@dataclass
class Listing:
    """A normalized, partially filled listing ready for the external store.

    The store assigns ``id`` and persists; fields left as None were
    absent or could not be resolved.
    """

    title: str | None = None
    title_he: str | None = None
    description: str | None = None
    description_he: str | None = None
    category_id: str | None = None
    provider_id: str | None = None
    provider_name: str | None = None
    price: float | None = None
    price_type: PriceType | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    location: str | None = None
    neighborhood: str | None = None
    age_min: int | None = None
    age_max: int | None = None
    gender: Gender | None = None
    instructor_gender: Gender | None = None
    language: list[str] | None = None
    max_participants: int | None = None
    duration: int | None = None
    is_online: bool | None = None
    subsidies: list[str] | None = None
    # Source metadata, attached by the ingestion pipeline
    source_type: SourceType | None = None
    source_id: str | None = None
    source_url: str | None = None
    submitted_at: datetime | None = None
    status: ListingStatus | None = None
    sync_enabled: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-friendly dict without unset fields."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, (PriceType, Gender, SourceType, ListingStatus)):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            result[f.name] = value
        return result
