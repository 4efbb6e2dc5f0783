"""Pytest fixtures for rbs-pipeline tests.

Provides fixtures for:
- Sample chat exports (iOS English, Android Hebrew)
- Sample listing inputs and existing-listing snapshots
- Fake clock for sync scheduling tests
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rbs_pipeline.core.clock import FakeClock
from rbs_pipeline.listings.types import ExistingListing, ListingInput


# ============================================================================
# Chat export fixtures
# ============================================================================

ENGLISH_EXPORT = """WhatsApp Chat with RBS Parents
[15/01/2024, 10:30:00] Messages and calls are end-to-end encrypted. No one outside of this chat can read them.
[15/01/2024, 10:31:12] Sarah Cohen: Looking for a piano teacher for my daughter age 8 in RBS A
[15/01/2024, 10:35:40] David Levi: I highly recommend Goal Kids Academy
their coach is excellent, call 052-123-4567
[15/01/2024, 10:40:05] Sarah Cohen: Thanks! How much do they charge?
[15/01/2024, 10:42:00] David Levi: 200 ש"ח לחודש לאימון כדורגל
[15/01/2024, 11:02:19] +972 54-765-4321: <Media omitted>
"""

HEBREW_EXPORT = """15.01.2024, 10:30 - משה: מחפש חוג כדורגל לילד בן 7 ברמת בית שמש א
15.01.2024, 10:35 - רבקה: ממליצה בחום! הבן שלי עשה אצלם קורס
15.01.2024, 10:36 - רבקה: טלפון 052-111-2222
16.01.2024, 09:00 - משה: תודה רבה
"""


@pytest.fixture
def english_export() -> str:
    return ENGLISH_EXPORT


@pytest.fixture
def hebrew_export() -> str:
    return HEBREW_EXPORT


# ============================================================================
# Listing fixtures
# ============================================================================


def make_listing(**overrides) -> ListingInput:
    """A listing that passes validation; override fields per test."""
    fields = {
        "title": "Kids Soccer",
        "title_he": "כדורגל לילדים",
        "description": "Weekly soccer training",
        "description_he": "אימון כדורגל שבועי",
        "category_name": "Sports",
        "provider_name": "Goal Kids Academy",
        "price": "200",
        "price_type": "MONTHLY",
        "phone": "052-123-4567",
    }
    fields.update(overrides)
    return ListingInput(**fields)


@pytest.fixture
def valid_listing() -> ListingInput:
    return make_listing()


@pytest.fixture
def listing_factory():
    """Build valid listings with per-test overrides."""
    return make_listing


@pytest.fixture
def existing_listings() -> list[ExistingListing]:
    return [
        ExistingListing(title="Kids Soccer", title_he=None, provider_id="prov-1"),
        ExistingListing(title="Piano Lessons", title_he="שיעורי פסנתר", provider_id="prov-2"),
    ]


# ============================================================================
# Clock fixtures
# ============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock for testing."""
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))
