"""Listing validation, normalization, CSV parsing and duplicate detection."""

from rbs_pipeline.listings.csv_parser import (
    CSVParseOptions,
    CSVParseResult,
    CSVRowError,
    CSVStructureReport,
    auto_detect_column_mapping,
    generate_csv_template,
    parse_csv,
    parse_csv_line,
    validate_csv_structure,
)
from rbs_pipeline.listings.duplicates import DuplicateCheckResult, check_for_duplicates
from rbs_pipeline.listings.normalization import (
    extract_price,
    match_category,
    normalize_gender,
    normalize_languages,
    normalize_listing,
    normalize_neighborhood,
    normalize_price_type,
    normalize_subsidies,
)
from rbs_pipeline.listings.types import (
    Category,
    ExistingListing,
    Listing,
    ListingInput,
    ValidationIssue,
    ValidationResult,
    coerce_listing,
)
from rbs_pipeline.listings.validation import (
    BatchValidationResult,
    validate_listing,
    validate_listing_batch,
)

__all__ = [
    # CSV
    "CSVParseOptions",
    "CSVParseResult",
    "CSVRowError",
    "CSVStructureReport",
    "auto_detect_column_mapping",
    "generate_csv_template",
    "parse_csv",
    "parse_csv_line",
    "validate_csv_structure",
    # Duplicates
    "DuplicateCheckResult",
    "check_for_duplicates",
    # Normalization
    "extract_price",
    "match_category",
    "normalize_gender",
    "normalize_languages",
    "normalize_listing",
    "normalize_neighborhood",
    "normalize_price_type",
    "normalize_subsidies",
    # Types
    "Category",
    "ExistingListing",
    "Listing",
    "ListingInput",
    "ValidationIssue",
    "ValidationResult",
    "coerce_listing",
    # Validation
    "BatchValidationResult",
    "validate_listing",
    "validate_listing_batch",
]
