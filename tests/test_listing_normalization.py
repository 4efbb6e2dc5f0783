"""Tests for listing normalization and reference lookups."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rbs_pipeline.core.types import Gender, ListingStatus, PriceType, SourceType
from rbs_pipeline.listings.normalization import (
    extract_price,
    find_neighborhood,
    match_category,
    normalize_gender,
    normalize_languages,
    normalize_listing,
    normalize_neighborhood,
    normalize_price_type,
    normalize_subsidies,
)
from rbs_pipeline.listings.reference import get_category, get_subcategories
from rbs_pipeline.listings.types import Listing, ListingInput, coerce_listing


class TestNeighborhoods:
    @pytest.mark.parametrize("raw, expected", [
        ("RBS A", "רמת בית שמש א"),
        ("  rbs aleph ", "רמת בית שמש א"),
        ("רמת בית שמש ב", "רמת בית שמש ב"),
        ("שעלבים הישנה", "שעלבים"),
        ("Downtown", None),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_neighborhood(raw) == expected

    def test_find_in_free_text(self):
        assert find_neighborhood("חוג ברמת בית שמש ג למתחילים") == "רמת בית שמש ג"
        assert find_neighborhood("lessons in RBS A on sundays") == "רמת בית שמש א"
        assert find_neighborhood("bars and clubs") is None


class TestEnumNormalizers:
    @pytest.mark.parametrize("raw, expected", [
        ("per month", PriceType.MONTHLY),
        ("MONTHLY", PriceType.MONTHLY),
        ("לשעה", PriceType.HOURLY),
        ("free", PriceType.FREE),
        ("whatever", PriceType.CONTACT),
    ])
    def test_price_type(self, raw, expected):
        assert normalize_price_type(raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        ("boys", Gender.MALE),
        ("בנות", Gender.FEMALE),
        ("female", Gender.FEMALE),
        ("??", Gender.ALL),
    ])
    def test_gender(self, raw, expected):
        assert normalize_gender(raw) == expected

    def test_languages(self):
        assert normalize_languages("Hebrew, English; Klingon") == ["he", "en"]
        assert normalize_languages(["he", "fr"]) == ["he", "fr"]

    def test_subsidies(self):
        assert normalize_subsidies("Clalit, מכבי, other") == ["כללית", "מכבי"]


class TestExtractPrice:
    @pytest.mark.parametrize("text, expected", [
        ("₪150", 150.0),
        ("150 ₪", 150.0),
        ("1,500 NIS", 1500.0),
        ('80 ש"ח', 80.0),
        ("150", 150.0),
        ("call for price", None),
    ])
    def test_extract(self, text, expected):
        assert extract_price(text) == expected


class TestMatchCategory:
    @pytest.mark.parametrize("name, expected", [
        ("Sports", "cat-kids-sports"),
        ("ספורט", "cat-kids-sports"),
        ("music", "cat-kids-music"),
        ("Piano lessons", "cat-kids-music"),
        ("Yoga", "cat-health-fitness"),
        ("", None),
        ("xyzzy", None),
    ])
    def test_match(self, name, expected):
        assert match_category(name) == expected

    def test_reference_lookups(self):
        assert get_category("cat-kids-music").name_he == "מוזיקה"
        assert get_category("nope") is None
        children = {c.id for c in get_subcategories("cat-health")}
        assert children == {"cat-health-therapy", "cat-health-fitness"}


class TestNormalizeListing:
    def test_full_listing(self):
        listing = ListingInput(
            title="  Soccer  ",
            category_name="Sports",
            provider_name="Goal Kids Academy",
            price="₪200",
            price_type="monthly",
            phone="+972521234567",
            email=" Info@Example.COM ",
            neighborhood="RBS A",
            age_min="6",
            age_max="12 years",
            gender="boys",
            language="he,en",
            duration="45",
            is_online="yes",
            subsidies="clalit",
        )
        result = normalize_listing(listing)

        assert result.title == "Soccer"
        assert result.category_id == "cat-kids-sports"
        assert result.provider_name == "Goal Kids Academy"
        assert result.price == 200.0
        assert result.price_type == PriceType.MONTHLY
        assert result.phone == "052-123-4567"
        assert result.email == "info@example.com"
        assert result.neighborhood == "רמת בית שמש א"
        assert (result.age_min, result.age_max) == (6, 12)
        assert result.gender == Gender.MALE
        assert result.language == ["he", "en"]
        assert result.duration == 45
        assert result.is_online is True
        assert result.subsidies == ["כללית"]

    def test_category_id_wins_over_name(self):
        result = normalize_listing(ListingInput(category_id="cat-kids-art", category_name="Sports"))
        assert result.category_id == "cat-kids-art"

    def test_numeric_price_and_unknowns(self):
        result = normalize_listing(ListingInput(price=99, neighborhood="Downtown", is_online=False))
        assert result.price == 99.0
        assert result.neighborhood is None
        assert result.is_online is False
        assert result.price_type is None

    def test_phone_normalization_is_idempotent(self):
        once = normalize_listing(ListingInput(phone="972 52 123 4567")).phone
        twice = normalize_listing(ListingInput(phone=once)).phone
        assert once == twice == "052-123-4567"


class TestListingToDict:
    def test_drops_unset_and_serializes(self):
        listing = Listing(
            title="Soccer",
            price_type=PriceType.MONTHLY,
            source_type=SourceType.CSV_IMPORT,
            status=ListingStatus.PENDING,
            submitted_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
        )
        assert listing.to_dict() == {
            "title": "Soccer",
            "price_type": "MONTHLY",
            "source_type": "CSV_IMPORT",
            "submitted_at": "2024-01-15T00:00:00+00:00",
            "status": "PENDING",
        }


class TestListingInputFromDict:
    def test_camel_case_and_extras(self):
        listing = ListingInput.from_dict({
            "titleHe": "כדורגל",
            "category": "Sports",
            "ageMin": 6,
            "favouriteColor": "blue",
        })
        assert listing.title_he == "כדורגל"
        assert listing.category_name == "Sports"
        assert listing.age_min == 6
        assert listing.extra == {"favouriteColor": "blue"}


class TestCoerceListing:
    def test_numbers_become_text(self):
        listing, rejected = coerce_listing(ListingInput(phone=521234567, title=2024, price=99.0))
        assert listing.phone == "521234567"
        assert listing.title == "2024"
        assert listing.price == 99.0
        assert rejected == []

    def test_whole_floats_drop_the_fraction(self):
        listing, _ = coerce_listing(ListingInput(provider_id=17.0, location=3.5))
        assert listing.provider_id == "17"
        assert listing.location == "3.5"

    def test_list_fields(self):
        listing, rejected = coerce_listing(ListingInput(language=["he", 1], subsidies=[{"x": 1}]))
        assert listing.language == ["he", "1"]
        assert listing.subsidies is None
        assert rejected == ["subsidies"]

    def test_untouched_listing_is_returned_as_is(self, valid_listing):
        listing, rejected = coerce_listing(valid_listing)
        assert listing is valid_listing
        assert rejected == []

    def test_normalize_accepts_numeric_phone_and_title(self):
        result = normalize_listing(ListingInput(phone=521234567, title=2024, email=5))
        assert result.phone == "052-123-4567"
        assert result.title == "2024"
        assert result.email == "5"
