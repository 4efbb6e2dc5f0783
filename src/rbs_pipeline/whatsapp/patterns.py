"""Hebrew and English pattern library for chat-message extraction.

All regex and keyword tables live here as module-level data so new
phrasings, aliases and keywords can be added without touching the
matcher functions below. ``PATTERNS_VERSION`` is bumped whenever a
table changes in a way that alters extraction output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rbs_pipeline.core.types import Sentiment

PATTERNS_VERSION = "2024.2"

# ============================================================================
# Contact patterns
# ============================================================================

# Israeli mobile: 05X-XXX-XXXX, optionally +972 / 972 / 0 prefixed.
MOBILE_PHONE_PATTERN = re.compile(
    r"(?<![\d+])(?:(?:\+972|972)[- ]?|0)?5\d[- ]?\d{3}[- ]?\d{4}(?!\d)"
)

# Landline: area codes 2, 3, 4, 8, 9, trunk or country prefix required.
LANDLINE_PHONE_PATTERN = re.compile(
    r"(?<![\d+])(?:(?:\+972|972)[- ]?|0)[2-489][- ]?\d{3}[- ]?\d{4}(?!\d)"
)

# "טל: ...", "phone: ...", "נייד ..."
PREFIXED_PHONE_PATTERN = re.compile(
    r"(?:טל[׳']?|טלפון|phone|tel|נייד)[:\s]*([0-9\-+() ]{9,15})",
    re.IGNORECASE,
)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

WEBSITE_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?[a-zA-Z0-9][a-zA-Z0-9-]*(?:\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}(?:/[^\s]*)?",
    re.IGNORECASE,
)

# ============================================================================
# Price patterns
# ============================================================================

_CURRENCY = r"(?:₪|ש[״\"]ח|שקל(?:ים)?|NIS)"
_AMOUNT = r"([0-9][0-9,]*(?:\.[0-9]{2})?)"

PRICE_PATTERNS: dict[str, re.Pattern[str]] = {
    # "200 ש"ח לחודש", "50₪ per hour", "80 NIS/session"
    "per_unit": re.compile(
        _AMOUNT + r"\s*" + _CURRENCY + r"\s*(?:ל|per|/)\s*"
        r"(שעה|חודש|שיעור|פעם|hour|month|session|lesson|class)",
        re.IGNORECASE,
    ),
    # "₪150", "ש"ח 150"
    "shekel_before": re.compile(_CURRENCY + r"\s*" + _AMOUNT, re.IGNORECASE),
    # "150₪", "150 שקלים"
    "shekel_after": re.compile(_AMOUNT + r"\s*" + _CURRENCY, re.IGNORECASE),
}

# "100-200 ₪", "מ-100 עד 200 ש"ח". Only counted when a currency marker is present.
PRICE_RANGE_PATTERN = re.compile(
    r"(?:מ[- ]?)?(₪)?\s*(\d+)\s*(?:[-–]|עד|to)\s*(₪)?\s*(\d+)\s*(₪|ש[״\"]ח|NIS)?",
    re.IGNORECASE,
)

MAX_PLAUSIBLE_PRICE = 100_000

# Unit word -> price type. First key found in the unit wins.
PRICE_UNIT_TYPES: list[tuple[tuple[str, ...], str]] = [
    (("שעה", "hour"), "HOURLY"),
    (("חודש", "month"), "MONTHLY"),
    (("שיעור", "lesson", "session", "class"), "PER_SESSION"),
]

# ============================================================================
# Intent patterns
# ============================================================================

SERVICE_REQUEST_PATTERNS: dict[str, re.Pattern[str]] = {
    "looking_for": re.compile(
        r"(?:מחפש[ת]?|מחפשים|looking for|need[s]?)\s+(.{10,150})", re.IGNORECASE
    ),
    "anyone_know": re.compile(
        r"(?:מישהו מכיר|מישהי מכירה|anyone know[s]?|does anyone)\s+(.{10,150})",
        re.IGNORECASE,
    ),
    "recommendation_for": re.compile(
        r"(?:המלצה ל|המלצות ל|recommend(?:ation)?(?:s)? for)\s*(.{10,150})",
        re.IGNORECASE,
    ),
    "does_anyone_have": re.compile(
        r"(?:יש למישהו|יש למישהי|does anyone have)\s+(.{10,150})", re.IGNORECASE
    ),
    "need": re.compile(r"(?:צריך[ה]?|צריכים|אני צריך)\s+(.{10,150})", re.IGNORECASE),
}

# Tiers are checked in this order; the first tier with a hit decides.
RECOMMENDATION_PATTERNS: dict[str, re.Pattern[str]] = {
    "strong_positive": re.compile(
        r"(?:ממליץ בחום|מאוד ממליץ|ממליצה בחום|מאוד ממליצה|highly recommend|strongly recommend)",
        re.IGNORECASE,
    ),
    "positive": re.compile(
        r"(?:ממליץ|ממליצה|recommend|מומלץ|מומלצת|אהבנו|מעולה|מקצועי|מקצועית|עבד מצוין|עבדה מצוין)",
        re.IGNORECASE,
    ),
    "negative": re.compile(
        r"(?:לא ממליץ|לא ממליצה|לא מקצועי|לא לפנות|להימנע מ|don't recommend|do not recommend|"
        r"avoid|wouldn't recommend|גרוע|איכזב|בעייתי)",
        re.IGNORECASE,
    ),
}

RECOMMENDATION_TIER_TYPES: dict[str, str] = {
    "strong_positive": "RECOMMEND",
    "positive": "RECOMMEND",
    "negative": "NOT_RECOMMEND",
}

BUSINESS_PATTERNS: dict[str, re.Pattern[str]] = {
    # Hebrew business words followed by a name: "סטודיו רוקדים מהלב"
    "hebrew_business": re.compile(r"(?:חוג|סטודיו|מכון|קליניקה|מרפאה|חנות)\s+[א-ת ]{2,30}"),
    # Two to four capitalised words: "Goal Kids Academy"
    "english_business": re.compile(r"\b[A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+){1,3}\b"),
}

URGENCY_KEYWORDS: dict[str, list[str]] = {
    "HIGH": ["דחוף", "בדחיפות", "urgent", "asap", "היום", "today"],
    "MEDIUM": ["בהקדם", "השבוע", "soon", "this week"],
}

AGE_PATTERN = re.compile(
    r"(?:גיל(?:אי)?|בן|בת|ages?|aged?)\s*(\d{1,2}(?:\s*[-–]\s*\d{1,2})?)",
    re.IGNORECASE,
)

# ============================================================================
# Classification keyword tables (table order is the tie-break)
# ============================================================================

CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "sports": [
        "כדורגל", "כדורסל", "שחייה", "ריצה", "אופניים", "ג'ימבורי", "התעמלות",
        "soccer", "basketball", "swimming", "running", "biking", "gymnastics",
        "ספורט", "אימון", "כושר", "sport", "training", "fitness",
    ],
    "music": [
        "פסנתר", "גיטרה", "כינור", "חליל", "תופים", "זמרה", "מוזיקה",
        "piano", "guitar", "violin", "flute", "drums", "singing", "music",
    ],
    "dance": [
        "ריקוד", "מחול", "בלט", "היפ הופ", "סלסה",
        "dance", "ballet", "hip hop", "salsa",
    ],
    "art": [
        "ציור", "אמנות", "יצירה", "קרמיקה", "פיסול",
        "art", "painting", "drawing", "ceramics", "sculpture",
    ],
    "tutoring": [
        "מתמטיקה", "אנגלית", "פיזיקה", "כימיה", "שיעורים פרטיים", "עזרה בשיעורים",
        "math", "english", "physics", "chemistry", "tutoring", "homework help",
    ],
    "therapy": [
        "טיפול", "פסיכולוג", "קלינאי", "ריפוי בעיסוק", "פיזיותרפיה",
        "therapy", "psychologist", "occupational", "physiotherapy",
    ],
}

SENTIMENT_KEYWORDS: dict[str, list[str]] = {
    "positive": [
        "מעולה", "מומלץ", "אהבנו", "מקצועי", "אדיב", "יעיל", "מצוין", "נהדר", "טוב מאוד",
        "excellent", "great", "amazing", "professional", "wonderful", "fantastic", "love",
    ],
    "negative": [
        "גרוע", "נורא", "איכזב", "לא מקצועי", "יקר מדי", "בעייתי", "לא ממליץ",
        "terrible", "awful", "disappointed", "unprofessional", "overpriced", "avoid",
    ],
}

# Join/leave/encryption notices and media placeholders, Hebrew and English.
SYSTEM_MESSAGE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^.+צורף/ה לקבוצה$"),
    re.compile(r"^.+הוסיף/ה את .+$"),
    re.compile(r"^.+עזב/ה$"),
    re.compile(r"^.+הוסר/ה$"),
    re.compile(r"^.+שינה/תה את שם הקבוצה"),
    re.compile(r"^.+שינה/תה את תמונת הקבוצה$"),
    re.compile(r"^.+הצטרף/ה באמצעות קישור ההזמנה"),
    re.compile(r"^.+added .+$", re.IGNORECASE),
    re.compile(r"^.+left$", re.IGNORECASE),
    re.compile(r"^.+removed .+$", re.IGNORECASE),
    re.compile(r"^.+joined using this group's invite link$", re.IGNORECASE),
    re.compile(r"^.+changed the subject", re.IGNORECASE),
    re.compile(r"^.+changed this group's icon$", re.IGNORECASE),
    re.compile(r"^Messages and calls are end-to-end encrypted", re.IGNORECASE),
    re.compile(r"^הודעות ושיחות מוצפנות"),
    re.compile(r"^<מדיה לא נכללה>"),
    re.compile(r"^<Media omitted>", re.IGNORECASE),
    re.compile(r"^(?:image|video|audio|sticker|GIF|document) omitted$", re.IGNORECASE),
    re.compile(r"^This message was deleted$", re.IGNORECASE),
    re.compile(r"^הודעה זו נמחקה$"),
]


# ============================================================================
# Matcher results
# ============================================================================


@dataclass(frozen=True)
class PriceMention:
    """A price found in free text."""

    amount: float
    price_type: str | None = None
    span: tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class PriceRange:
    """A currency-marked price range such as ``100-200 ₪``."""

    min_amount: float
    max_amount: float
    span: tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class ServiceRequestMatch:
    """Someone asking the group for a service."""

    rule: str
    description: str


@dataclass(frozen=True)
class RecommendationMatch:
    """A recommendation phrase and the tier it came from."""

    tier: str
    recommendation_type: str
    phrase: str
    span: tuple[int, int]


# ============================================================================
# Matchers
# ============================================================================


def is_system_message(content: str) -> bool:
    """Check content against the localized system-notice table."""
    return any(pattern.search(content) for pattern in SYSTEM_MESSAGE_PATTERNS)


def normalize_phone(phone: str) -> str:
    """Normalize an Israeli phone number to ``0XX-XXX-XXXX`` (or ``0X-XXX-XXXX``).

    Numbers that do not reduce to a local Israeli shape are returned as
    their bare digits. Applying the function twice gives the same result.
    """
    cleaned = re.sub(r"[^\d+]", "", phone)

    if cleaned.startswith("+972"):
        cleaned = "0" + cleaned[4:]
    elif cleaned.startswith("972"):
        cleaned = "0" + cleaned[3:]

    if not cleaned.startswith("0") and len(cleaned) == 9 and cleaned.isdigit():
        cleaned = "0" + cleaned

    if len(cleaned) == 10 and cleaned.startswith("0"):
        return f"{cleaned[:3]}-{cleaned[3:6]}-{cleaned[6:]}"
    if len(cleaned) == 9 and cleaned.startswith("0") and cleaned[1] in "234789":
        return f"{cleaned[:2]}-{cleaned[2:5]}-{cleaned[5:]}"

    return cleaned


def extract_phone_numbers(text: str) -> list[str]:
    """Find mobile, landline and label-prefixed phones; normalized and deduplicated.

    Order follows first appearance in the text.
    """
    found: list[tuple[int, str]] = []
    spans: list[tuple[int, int]] = []

    for pattern in (MOBILE_PHONE_PATTERN, LANDLINE_PHONE_PATTERN):
        for m in pattern.finditer(text):
            span = (m.start(), m.end())
            if overlaps_any(span, spans):
                continue
            spans.append(span)
            found.append((m.start(), m.group(0)))

    for m in PREFIXED_PHONE_PATTERN.finditer(text):
        span = (m.start(1), m.end(1))
        if overlaps_any(span, spans):
            continue
        digits = re.sub(r"\D", "", m.group(1))
        if len(digits) < 9:
            continue
        spans.append(span)
        found.append((m.start(1), m.group(1)))

    phones: list[str] = []
    for _, raw in sorted(found, key=lambda item: item[0]):
        normalized = normalize_phone(raw)
        if normalized not in phones:
            phones.append(normalized)
    return phones


def extract_emails(text: str) -> list[str]:
    emails: list[str] = []
    for m in EMAIL_PATTERN.finditer(text):
        email = m.group(0).lower()
        if email not in emails:
            emails.append(email)
    return emails


def extract_websites(text: str) -> list[str]:
    """Find URLs and bare domains, skipping the domain part of e-mail addresses."""
    email_spans = [(m.start(), m.end()) for m in EMAIL_PATTERN.finditer(text)]
    sites: list[str] = []
    for m in WEBSITE_PATTERN.finditer(text):
        if overlaps_any((m.start(), m.end()), email_spans):
            continue
        site = m.group(0).rstrip(".,;:!?)")
        if site not in sites:
            sites.append(site)
    return sites


def extract_prices(text: str) -> list[PriceMention]:
    """Find shekel prices in text.

    Per-unit prices are matched first; a plain prefix/suffix match that
    overlaps one is dropped, so ``200 ש"ח לחודש`` yields one MONTHLY price.
    Amounts outside (0, 100000) are rejected as implausible.
    """
    prices: list[PriceMention] = []
    spans: list[tuple[int, int]] = []

    for name in ("per_unit", "shekel_before", "shekel_after"):
        for m in PRICE_PATTERNS[name].finditer(text):
            span = (m.start(), m.end())
            if overlaps_any(span, spans):
                continue
            amount = _parse_amount(m.group(1))
            if amount is None or not 0 < amount < MAX_PLAUSIBLE_PRICE:
                continue
            price_type = map_unit_to_type(m.group(2)) if name == "per_unit" else None
            spans.append(span)
            prices.append(PriceMention(amount=amount, price_type=price_type, span=span))

    return sorted(prices, key=lambda p: p.span[0])


def extract_price_ranges(text: str) -> list[PriceRange]:
    ranges: list[PriceRange] = []
    for m in PRICE_RANGE_PATTERN.finditer(text):
        if not (m.group(1) or m.group(3) or m.group(5)):
            continue
        low, high = float(m.group(2)), float(m.group(4))
        if 0 < low < high < MAX_PLAUSIBLE_PRICE:
            ranges.append(PriceRange(min_amount=low, max_amount=high, span=(m.start(), m.end())))
    return ranges


def map_unit_to_type(unit: str) -> str:
    unit_lower = unit.lower()
    for words, price_type in PRICE_UNIT_TYPES:
        if any(word in unit_lower for word in words):
            return price_type
    return "FIXED"


def detect_service_request(text: str) -> ServiceRequestMatch | None:
    """Return the first service-request phrasing found, or None."""
    for rule, pattern in SERVICE_REQUEST_PATTERNS.items():
        m = pattern.search(text)
        if m:
            return ServiceRequestMatch(rule=rule, description=m.group(1).strip())
    return None


def detect_recommendation(text: str) -> RecommendationMatch | None:
    """Three-tier recommendation match: strong positive, positive, negative.

    A positive hit that sits inside a negative phrase ("לא ממליץ",
    "don't recommend") does not count for the positive tiers.
    """
    negative_spans = [
        (m.start(), m.end())
        for m in RECOMMENDATION_PATTERNS["negative"].finditer(text)
    ]

    for tier, pattern in RECOMMENDATION_PATTERNS.items():
        for m in pattern.finditer(text):
            span = (m.start(), m.end())
            if tier != "negative" and overlaps_any(span, negative_spans):
                continue
            return RecommendationMatch(
                tier=tier,
                recommendation_type=RECOMMENDATION_TIER_TYPES[tier],
                phrase=m.group(0),
                span=span,
            )
    return None


def find_business_names(text: str) -> list[str]:
    names: list[str] = []
    for pattern in BUSINESS_PATTERNS.values():
        for m in pattern.finditer(text):
            name = m.group(0).strip()
            if name and name not in names:
                names.append(name)
    return names


def analyze_sentiment(text: str) -> Sentiment:
    """Count positive vs negative keyword hits (case-insensitive substring)."""
    text_lower = text.lower()
    positive = sum(1 for kw in SENTIMENT_KEYWORDS["positive"] if kw.lower() in text_lower)
    negative = sum(1 for kw in SENTIMENT_KEYWORDS["negative"] if kw.lower() in text_lower)

    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def detect_category(text: str) -> str | None:
    """Return the first category whose keyword list hits, in table order."""
    text_lower = text.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        for keyword in keywords:
            if keyword.lower() in text_lower:
                return category
    return None


def detect_urgency(text: str) -> str:
    text_lower = text.lower()
    for level, keywords in URGENCY_KEYWORDS.items():
        if any(kw in text_lower for kw in keywords):
            return level
    return "LOW"


def extract_age_range(text: str) -> str | None:
    m = AGE_PATTERN.search(text)
    if not m:
        return None
    return re.sub(r"\s+", "", m.group(1)).replace("–", "-")


def _parse_amount(raw: str) -> float | None:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def overlaps_any(span: tuple[int, int], seen: list[tuple[int, int]]) -> bool:
    for existing in seen:
        if span[0] < existing[1] and span[1] > existing[0]:
            return True
    return False
