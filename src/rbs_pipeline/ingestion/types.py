"""Data types for listing ingestion runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from rbs_pipeline.core.types import SourceType
from rbs_pipeline.listings.types import ExistingListing, Listing


@dataclass
class IngestionOptions:
    """Per-run settings and the existing-listings snapshot used for dedupe."""

    source_type: SourceType = SourceType.MANUAL
    source_id: str | None = None
    source_url: str | None = None
    skip_duplicates: bool = False
    auto_approve: bool = False
    existing_listings: list[ExistingListing] | None = None


@dataclass(frozen=True)
class RowMessage:
    """An error or warning tied to a 1-based input row (0 for the whole file)."""

    row: int
    message: str


@dataclass
class IngestionResult:
    """Aggregate report for one batch."""

    success: bool = True
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RowMessage] = field(default_factory=list)
    warnings: list[RowMessage] = field(default_factory=list)
    listings: list[Listing] = field(default_factory=list)

    def summary(self) -> str:
        """Human-readable summary of the run."""
        parts = [f"Ingested {self.created} listings, skipped {self.skipped}"]
        if self.errors:
            parts.append(f"  {len(self.errors)} errors:")
            for err in self.errors[:5]:
                parts.append(f"    - row {err.row}: {err.message}")
        if self.warnings:
            parts.append(f"  {len(self.warnings)} warnings")
        return "\n".join(parts)


@dataclass(frozen=True)
class IngestionStats:
    total: int
    success_rate: float  # percent, 0 when no rows
    created: int
    skipped: int
    error_count: int
    warning_count: int
