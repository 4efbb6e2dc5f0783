"""Duplicate detection against a snapshot of stored listings."""

from __future__ import annotations

from dataclasses import dataclass, field

from rbs_pipeline.listings.types import ExistingListing, ListingInput, coerce_listing

EXACT_TITLE_SCORE = 0.5
PARTIAL_TITLE_SCORE = 0.3
SAME_PROVIDER_SCORE = 0.3
MATCH_REPORT_THRESHOLD = 0.5  # strictly above
DUPLICATE_THRESHOLD = 0.7


@dataclass
class DuplicateCheckResult:
    is_duplicate: bool
    confidence: float
    matches: list[str] = field(default_factory=list)


def score_pair(candidate: ListingInput, existing: ExistingListing) -> float:
    """Sum of title, Hebrew-title and provider evidence for one pair."""
    score = 0.0

    if candidate.title and existing.title:
        new_title = candidate.title.lower().strip()
        old_title = existing.title.lower().strip()
        if new_title == old_title:
            score += EXACT_TITLE_SCORE
        elif new_title in old_title or old_title in new_title:
            score += PARTIAL_TITLE_SCORE

    if candidate.title_he and existing.title_he:
        if candidate.title_he == existing.title_he:
            score += EXACT_TITLE_SCORE
        elif candidate.title_he in existing.title_he or existing.title_he in candidate.title_he:
            score += PARTIAL_TITLE_SCORE

    if candidate.provider_id and candidate.provider_id == existing.provider_id:
        score += SAME_PROVIDER_SCORE

    return round(score, 4)


def check_for_duplicates(
    candidate: ListingInput,
    existing_listings: list[ExistingListing],
) -> DuplicateCheckResult:
    """Score ``candidate`` against every existing listing.

    The best score is the confidence; a duplicate needs 0.7 or more, so
    an exact title plus the same provider (0.8) trips it while a shared
    provider alone (0.3) never does.
    """
    candidate, _ = coerce_listing(candidate)
    matches: list[str] = []
    max_confidence = 0.0

    for existing in existing_listings:
        score = score_pair(candidate, existing)
        max_confidence = max(max_confidence, score)
        if score > MATCH_REPORT_THRESHOLD:
            matches.append(existing.title)

    return DuplicateCheckResult(
        is_duplicate=max_confidence >= DUPLICATE_THRESHOLD,
        confidence=max_confidence,
        matches=matches,
    )
