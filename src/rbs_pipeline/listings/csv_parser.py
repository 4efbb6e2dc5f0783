"""CSV parsing for bulk listing imports.

Rows are tokenized with a quote-aware state machine (RFC 4180 style:
``""`` inside a quoted field is a literal quote) and mapped onto
``ListingInput`` fields through a header-to-field column mapping that is
auto-detected when the caller does not supply one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields

from rbs_pipeline.listings.types import ListingInput

# Target field -> header patterns, checked against the lowercased header.
# More specific fields come first so "titleHe" is not taken by "title".
HEADER_PATTERNS: list[tuple[str, list[re.Pattern[str]]]] = [
    ("title_he", [re.compile(p) for p in (r"^title.?he$", r"^hebrew.?title$", r"^שם.?עברית$")]),
    ("title", [re.compile(p) for p in (r"^title$", r"^name$", r"^listing.?name$", r"^שם$")]),
    ("description_he", [re.compile(p) for p in (r"^desc(ription)?.?he$", r"^hebrew.?desc")]),
    ("description", [re.compile(p) for p in (r"^desc(ription)?$", r"^about$", r"^תיאור$")]),
    ("category_id", [re.compile(r"^category.?id$")]),
    ("category_name", [re.compile(p) for p in (r"^category$", r"^category.?name$", r"^cat$", r"^קטגוריה$")]),
    ("provider_id", [re.compile(r"^provider.?id$")]),
    ("provider_name", [re.compile(p) for p in (r"^provider(.?name)?$", r"^business$", r"^ספק$", r"^שם.?העסק$")]),
    ("price_type", [re.compile(p) for p in (r"^price.?type$", r"^סוג.?מחיר$")]),
    ("price", [re.compile(p) for p in (r"^price$", r"^cost$", r"^מחיר$")]),
    ("phone", [re.compile(p) for p in (r"^phone$", r"^tel$", r"^mobile$", r"^טלפון$")]),
    ("email", [re.compile(p) for p in (r"^e?.?mail$", r"^דוא.?ל$")]),
    ("website", [re.compile(p) for p in (r"^website$", r"^url$", r"^site$", r"^אתר$")]),
    ("location", [re.compile(p) for p in (r"^location$", r"^address$", r"^כתובת$", r"^מיקום$")]),
    ("neighborhood", [re.compile(p) for p in (r"^neighborhood$", r"^area$", r"^שכונה$")]),
    ("age_min", [re.compile(p) for p in (r"^age.?min$", r"^min.?age$", r"^גיל.?מינימום$")]),
    ("age_max", [re.compile(p) for p in (r"^age.?max$", r"^max.?age$", r"^גיל.?מקסימום$")]),
    ("instructor_gender", [re.compile(p) for p in (r"^instructor.?gender$", r"^מגדר.?מדריך$")]),
    ("gender", [re.compile(p) for p in (r"^gender$", r"^for$", r"^מגדר$")]),
    ("language", [re.compile(p) for p in (r"^languages?$", r"^lang$", r"^שפה$")]),
    ("duration", [re.compile(p) for p in (r"^duration$", r"^משך$")]),
    ("max_participants", [re.compile(p) for p in (r"^max.?participants$", r"^capacity$")]),
    ("subsidies", [re.compile(p) for p in (r"^subsid(y|ies)$", r"^סבסוד")]),
    ("is_online", [re.compile(p) for p in (r"^is.?online$", r"^online$")]),
]

_LISTING_FIELDS = {f.name for f in fields(ListingInput)} - {"extra"}

TEMPLATE_COLUMNS: list[tuple[str, str]] = [
    ("title", "Kids Soccer Classes"),
    ("titleHe", "חוג כדורגל לילדים"),
    ("description", "Professional soccer training for kids"),
    ("descriptionHe", "אימוני כדורגל מקצועיים לילדים"),
    ("category", "Sports"),
    ("providerName", "Goal Kids Academy"),
    ("price", "200"),
    ("priceType", "MONTHLY"),
    ("phone", "052-123-4567"),
    ("email", "info@example.com"),
    ("location", "Sports Center, Main Street"),
    ("neighborhood", "רמת בית שמש א"),
    ("ageMin", "6"),
    ("ageMax", "12"),
    ("gender", "ALL"),
    ("language", "he,en"),
    ("duration", "60"),
    ("maxParticipants", "20"),
]


@dataclass
class CSVParseOptions:
    delimiter: str = ","
    has_headers: bool = True
    column_mapping: dict[str, str] | None = None  # field -> header name
    skip_empty_rows: bool = True


@dataclass(frozen=True)
class CSVRowError:
    row: int  # 1-based line number in the file, header included
    message: str


@dataclass
class CSVParseResult:
    success: bool
    headers: list[str] = field(default_factory=list)
    rows: list[ListingInput] = field(default_factory=list)
    errors: list[CSVRowError] = field(default_factory=list)
    line_numbers: list[int] = field(default_factory=list)  # file line of each row

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class CSVStructureReport:
    is_valid: bool
    errors: list[str]
    row_count: int
    column_count: int


def parse_csv(content: str, options: CSVParseOptions | None = None) -> CSVParseResult:
    """Parse CSV text into listing inputs.

    An empty file fails as a whole. A row that cannot be mapped is
    recorded in ``errors`` and the remaining rows are still parsed.
    """
    opts = options or CSVParseOptions()
    lines = _split_lines(content, opts.skip_empty_rows)

    if not lines:
        return CSVParseResult(success=False, errors=[CSVRowError(0, "CSV file is empty")])

    if opts.has_headers:
        headers = parse_csv_line(lines[0], opts.delimiter)
        data_start = 1
    else:
        width = len(parse_csv_line(lines[0], opts.delimiter))
        headers = [f"column_{i + 1}" for i in range(width)]
        data_start = 0

    mapping = opts.column_mapping or auto_detect_column_mapping(headers)

    rows: list[ListingInput] = []
    line_numbers: list[int] = []
    errors: list[CSVRowError] = []
    for i in range(data_start, len(lines)):
        try:
            values = parse_csv_line(lines[i], opts.delimiter)
            rows.append(map_record(headers, values, mapping))
            line_numbers.append(i + 1)
        except ValueError as e:
            errors.append(CSVRowError(i + 1, str(e)))

    return CSVParseResult(
        success=not errors,
        headers=headers,
        rows=rows,
        errors=errors,
        line_numbers=line_numbers,
    )


def parse_csv_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one line into trimmed fields, honoring quotes and ``""`` escapes."""
    result: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if in_quotes:
            if char == '"' and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
            else:
                current.append(char)
        elif char == '"':
            in_quotes = True
        elif char == delimiter:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    result.append("".join(current).strip())
    return result


def auto_detect_column_mapping(headers: list[str]) -> dict[str, str]:
    """Map listing fields to headers by pattern.

    Each header goes to the first field whose pattern it matches. When
    several headers match the same field, the leftmost one is kept.
    Headers matching nothing are ignored.
    """
    mapping: dict[str, str] = {}
    for header in headers:
        normalized = header.lower().strip()
        for field_name, patterns in HEADER_PATTERNS:
            if any(p.search(normalized) for p in patterns):
                mapping.setdefault(field_name, header)
                break
    return mapping


def map_record(headers: list[str], values: list[str], mapping: dict[str, str]) -> ListingInput:
    """Build a ``ListingInput`` from one row. Blank cells are left unset.

    Raises:
        ValueError: If the mapping targets a field ``ListingInput`` lacks.
    """
    header_index = {h.lower(): i for i, h in enumerate(headers)}
    data: dict[str, str] = {}

    for field_name, column in mapping.items():
        if field_name not in _LISTING_FIELDS:
            raise ValueError(f"Unknown listing field '{field_name}' in column mapping")
        if not column:
            continue
        index = header_index.get(column.lower())
        if index is None or index >= len(values):
            continue
        value = values[index].strip()
        if value:
            data[field_name] = value

    return ListingInput(**data)


def generate_csv_template() -> str:
    """Header row plus one fully populated, quoted example row."""
    header = ",".join(name for name, _ in TEMPLATE_COLUMNS)
    sample = ",".join(f'"{value}"' for _, value in TEMPLATE_COLUMNS)
    return f"{header}\n{sample}"


def validate_csv_structure(content: str, delimiter: str = ",") -> CSVStructureReport:
    """Check a CSV is non-empty, has 2+ columns and consistent row widths."""
    lines = _split_lines(content, skip_empty=True)
    if not lines:
        return CSVStructureReport(is_valid=False, errors=["File is empty"], row_count=0, column_count=0)

    errors: list[str] = []
    header_count = len(parse_csv_line(lines[0], delimiter))
    if header_count < 2:
        errors.append("CSV should have at least 2 columns")

    for i in range(1, len(lines)):
        col_count = len(parse_csv_line(lines[i], delimiter))
        if col_count != header_count:
            errors.append(f"Row {i + 1} has {col_count} columns, expected {header_count}")

    return CSVStructureReport(
        is_valid=not errors,
        errors=errors,
        row_count=len(lines) - 1,
        column_count=header_count,
    )


def _split_lines(content: str, skip_empty: bool) -> list[str]:
    lines = re.split(r"\r?\n", content)
    if skip_empty:
        return [line for line in lines if line.strip()]
    return lines
