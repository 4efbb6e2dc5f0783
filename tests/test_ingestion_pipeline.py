"""Tests for the listing ingestion pipeline."""

from __future__ import annotations

from rbs_pipeline.core.types import ListingStatus, SourceType
from rbs_pipeline.ingestion.pipeline import (
    get_ingestion_stats,
    process_csv_import,
    process_listing_batch,
)
from rbs_pipeline.ingestion.types import IngestionOptions, IngestionResult, RowMessage
from rbs_pipeline.listings.csv_parser import CSVParseOptions, generate_csv_template


# ============================================================================
# Batches
# ============================================================================


class TestProcessListingBatch:
    def test_one_bad_row_does_not_abort(self, listing_factory):
        inputs = [listing_factory(title=f"Class {i}") for i in range(10)]
        inputs[4] = listing_factory(title=None, title_he=None)

        result = process_listing_batch(inputs, IngestionOptions())

        assert result.created == 9
        assert result.skipped == 1
        assert not result.success
        assert {e.row for e in result.errors} == {5}
        assert len(result.listings) == 9

    def test_duplicate_is_skipped_with_warning(self, listing_factory, existing_listings):
        options = IngestionOptions(skip_duplicates=True, existing_listings=existing_listings)
        result = process_listing_batch(
            [listing_factory(title="Kids Soccer", provider_id="prov-1")], options
        )

        assert result.success
        assert result.created == 0
        assert result.skipped == 1
        assert result.warnings == [
            RowMessage(1, "Potential duplicate: Kids Soccer (80% confidence)"),
        ]

    def test_duplicates_kept_when_not_skipping(self, listing_factory, existing_listings):
        options = IngestionOptions(skip_duplicates=False, existing_listings=existing_listings)
        result = process_listing_batch(
            [listing_factory(title="Kids Soccer", provider_id="prov-1")], options
        )
        assert result.created == 1

    def test_source_metadata(self, valid_listing):
        options = IngestionOptions(
            source_type=SourceType.GOOGLE_SHEETS,
            source_id="sync-1",
            source_url="https://docs.google.com/spreadsheets/d/abc",
        )
        listing = process_listing_batch([valid_listing], options).listings[0]

        assert listing.source_type == SourceType.GOOGLE_SHEETS
        assert listing.source_id == "sync-1"
        assert listing.source_url == "https://docs.google.com/spreadsheets/d/abc"
        assert listing.status == ListingStatus.PENDING
        assert listing.sync_enabled is True
        assert listing.submitted_at is not None

    def test_auto_approve(self, valid_listing):
        options = IngestionOptions(source_type=SourceType.MANUAL, auto_approve=True)
        listing = process_listing_batch([valid_listing], options).listings[0]
        assert listing.status == ListingStatus.ACTIVE
        assert listing.sync_enabled is False

    def test_warnings_carry_row_numbers(self, listing_factory):
        result = process_listing_batch(
            [listing_factory(), listing_factory(phone="123")], IngestionOptions()
        )
        assert result.success
        assert [w.row for w in result.warnings] == [2]
        assert result.warnings[0].message.startswith("phone: ")

    def test_normalizes_created_listings(self, valid_listing):
        listing = process_listing_batch([valid_listing], IngestionOptions()).listings[0]
        assert listing.category_id == "cat-kids-sports"
        assert listing.price == 200.0
        assert listing.phone == "052-123-4567"

    def test_numeric_cells_from_sheets(self, listing_factory):
        inputs = [
            listing_factory(title="Yoga"),
            listing_factory(title="Chess", phone=521234567),
            listing_factory(title=2024),
        ]
        options = IngestionOptions(source_type=SourceType.GOOGLE_SHEETS)
        result = process_listing_batch(inputs, options)

        assert result.success
        assert result.created == 3
        assert result.listings[1].phone == "052-123-4567"
        assert result.listings[2].title == "2024"

    def test_unusable_cell_fails_only_its_row(self, listing_factory, existing_listings):
        inputs = [
            listing_factory(title="Yoga"),
            listing_factory(title={"en": "Chess"}, title_he=None),
            listing_factory(title="Art", phone=521234567),
        ]
        options = IngestionOptions(skip_duplicates=True, existing_listings=existing_listings)
        result = process_listing_batch(inputs, options)

        assert result.created == 2
        assert result.skipped == 1
        assert [e.row for e in result.errors] == [2, 2]
        assert result.errors[0].message == "title: title has an unsupported value type"

    def test_empty_batch(self):
        result = process_listing_batch([], IngestionOptions())
        assert result.success
        assert result.created == 0


# ============================================================================
# CSV imports
# ============================================================================


class TestProcessCsvImport:
    def test_template_imports(self):
        options = IngestionOptions(source_type=SourceType.CSV_IMPORT)
        result = process_csv_import(generate_csv_template(), options)

        assert result.success
        assert result.created == 1
        listing = result.listings[0]
        assert listing.title == "Kids Soccer Classes"
        assert listing.source_type == SourceType.CSV_IMPORT
        assert listing.max_participants == 20

    def test_empty_file_fails_whole_import(self):
        result = process_csv_import("", IngestionOptions())
        assert not result.success
        assert result.errors == [RowMessage(0, "CSV file is empty")]
        assert result.created == 0

    def test_mapping_errors_are_reported(self):
        csv_options = CSVParseOptions(column_mapping={"colour": "title"})
        result = process_csv_import("title\nYoga\nChess", IngestionOptions(), csv_options)

        assert not result.success
        assert result.errors == [
            RowMessage(1, "Unknown listing field 'colour' in column mapping"),
            RowMessage(2, "Unknown listing field 'colour' in column mapping"),
        ]

    def test_headerless_rows_count_from_one(self):
        csv_options = CSVParseOptions(
            has_headers=False,
            column_mapping={
                "title": "column_1",
                "description": "column_2",
                "category_name": "column_3",
                "provider_name": "column_4",
            },
        )
        content = (
            "Yoga,Morning yoga,Fitness,Studio One\n"
            ",No title here,Fitness,Studio One\n"
        )
        result = process_csv_import(content, IngestionOptions(), csv_options)

        assert result.created == 1
        assert [e.row for e in result.errors] == [2]

    def test_invalid_rows_use_data_row_numbers(self):
        content = (
            "title,description,category,providerName\n"
            "Yoga,Morning yoga,Fitness,Studio One\n"
            ",No title here,Fitness,Studio One\n"
        )
        result = process_csv_import(content, IngestionOptions())
        assert result.created == 1
        assert [e.row for e in result.errors] == [2]


# ============================================================================
# Reporting
# ============================================================================


class TestReporting:
    def test_stats(self):
        result = IngestionResult(
            success=False,
            created=9,
            skipped=1,
            errors=[RowMessage(5, "title: Title is required (English or Hebrew)")],
        )
        stats = get_ingestion_stats(result)

        assert stats.total == 10
        assert stats.success_rate == 90.0
        assert stats.error_count == 1
        assert stats.warning_count == 0

    def test_stats_for_empty_run(self):
        assert get_ingestion_stats(IngestionResult()).success_rate == 0.0

    def test_summary(self):
        result = IngestionResult(
            created=2,
            skipped=1,
            errors=[RowMessage(3, "title: Title is required (English or Hebrew)")],
            warnings=[RowMessage(1, "phone: bad")],
        )
        assert result.summary() == (
            "Ingested 2 listings, skipped 1\n"
            "  1 errors:\n"
            "    - row 3: title: Title is required (English or Hebrew)\n"
            "  1 warnings"
        )
