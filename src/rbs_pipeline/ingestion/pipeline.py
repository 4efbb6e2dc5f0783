"""Listing ingestion pipeline: validate, dedupe, normalize, report.

Each call works on its own inputs and its own existing-listings
snapshot and returns a fresh result. Merging ``result.listings`` into a
store is the caller's job. Two concurrent batches checked against the
same stale snapshot can both pass the duplicate check, so a store that
needs exactly-once inserts must re-check duplicates under its own lock
at write time.
"""

from __future__ import annotations

import logging

from rbs_pipeline.core.types import ListingStatus, SourceType
from rbs_pipeline.core.utils import utc_now
from rbs_pipeline.ingestion.types import (
    IngestionOptions,
    IngestionResult,
    IngestionStats,
    RowMessage,
)
from rbs_pipeline.listings.csv_parser import CSVParseOptions, parse_csv
from rbs_pipeline.listings.duplicates import check_for_duplicates
from rbs_pipeline.listings.normalization import normalize_listing
from rbs_pipeline.listings.types import ListingInput
from rbs_pipeline.listings.validation import validate_listing

logger = logging.getLogger(__name__)


def process_listing_batch(
    inputs: list[ListingInput],
    options: IngestionOptions,
    row_numbers: list[int] | None = None,
) -> IngestionResult:
    """Run every input through the pipeline without aborting on bad rows.

    Invalid rows are skipped with their errors recorded; likely
    duplicates are skipped with a warning. ``success`` is False only
    when some row failed validation. Messages are numbered by
    ``row_numbers`` when given, else by 1-based position.
    """
    result = IngestionResult()

    for i, listing in enumerate(inputs):
        row = row_numbers[i] if row_numbers is not None else i + 1

        validation = validate_listing(listing)
        for w in validation.warnings:
            result.warnings.append(RowMessage(row, f"{w.field}: {w.message}"))

        if not validation.is_valid:
            for e in validation.errors:
                result.errors.append(RowMessage(row, f"{e.field}: {e.message}"))
            result.skipped += 1
            result.success = False
            continue

        if options.skip_duplicates and options.existing_listings is not None:
            duplicate = check_for_duplicates(listing, options.existing_listings)
            if duplicate.is_duplicate:
                result.warnings.append(RowMessage(
                    row,
                    f"Potential duplicate: {', '.join(duplicate.matches)} "
                    f"({round(duplicate.confidence * 100)}% confidence)",
                ))
                result.skipped += 1
                continue

        normalized = normalize_listing(listing)
        normalized.source_type = options.source_type
        normalized.source_id = options.source_id
        normalized.source_url = options.source_url
        normalized.submitted_at = utc_now()
        normalized.status = ListingStatus.ACTIVE if options.auto_approve else ListingStatus.PENDING
        normalized.sync_enabled = options.source_type == SourceType.GOOGLE_SHEETS

        result.listings.append(normalized)
        result.created += 1

    logger.info(
        "Processed %d listings from %s: %d created, %d skipped, %d errors",
        len(inputs), options.source_type.value, result.created, result.skipped, len(result.errors),
    )
    return result


def process_csv_import(
    csv_content: str,
    options: IngestionOptions,
    csv_options: CSVParseOptions | None = None,
) -> IngestionResult:
    """Parse CSV text and feed the rows to ``process_listing_batch``.

    An empty file fails the whole import with a row-0 error. Rows the
    parser could not map are reported as errors and the rest still run.
    Every message is numbered by data row, the first row under the
    header being row 1.
    """
    parsed = parse_csv(csv_content, csv_options)
    header_lines = 1 if (csv_options or CSVParseOptions()).has_headers else 0
    parse_errors = [
        RowMessage(e.row - header_lines if e.row > 0 else 0, e.message) for e in parsed.errors
    ]

    if not parsed.headers and not parsed.rows:
        logger.warning("CSV import rejected: %s", "; ".join(e.message for e in parsed.errors))
        return IngestionResult(success=False, errors=parse_errors)

    result = process_listing_batch(
        parsed.rows,
        options,
        row_numbers=[line - header_lines for line in parsed.line_numbers],
    )
    if parse_errors:
        result.errors = sorted(parse_errors + result.errors, key=lambda m: m.row)
        result.success = False
    return result


def get_ingestion_stats(result: IngestionResult) -> IngestionStats:
    total = result.created + result.skipped
    return IngestionStats(
        total=total,
        success_rate=(result.created / total) * 100 if total > 0 else 0.0,
        created=result.created,
        skipped=result.skipped,
        error_count=len(result.errors),
        warning_count=len(result.warnings),
    )
