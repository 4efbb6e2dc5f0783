"""Reference tables for listing validation and normalization.

Categories, neighborhoods and every alias map live here so that new
entries can be added without touching the validator or normalizer.
``REFERENCE_VERSION`` is bumped when a table changes.
"""

from __future__ import annotations

from rbs_pipeline.listings.types import Category

REFERENCE_VERSION = "2024.1"

# ============================================================================
# Categories (flattened: top-level entries followed by their children)
# ============================================================================

CATEGORIES: list[Category] = [
    Category("cat-emergency", "Emergency", "חירום", "emergency"),
    Category("cat-zmanim", "Zmanim", "זמנים", "zmanim"),
    Category("cat-services", "Services", "שירותים", "services"),
    Category("cat-whatsup", "WhatsUp RBS", "מה קורה ברמב״ש", "whatsup-rbs"),
    Category("cat-deals", "Sales & Deals", "מבצעים", "sales-deals"),
    Category("cat-news", "News & Updates", "חדשות ועדכונים", "news"),
    Category("cat-kids", "Kids & Teens", "ילדים ונוער", "kids-teens"),
    Category("cat-kids-sports", "Sports", "ספורט", "kids-sports", "cat-kids"),
    Category("cat-kids-dance", "Dance & Movement", "ריקוד ותנועה", "kids-dance", "cat-kids"),
    Category("cat-kids-art", "Art & Creativity", "אמנות ויצירה", "kids-art", "cat-kids"),
    Category("cat-kids-music", "Music", "מוזיקה", "kids-music", "cat-kids"),
    Category("cat-kids-tutoring", "Tutoring", "שיעורים פרטיים", "kids-tutoring", "cat-kids"),
    Category("cat-kids-camps", "Camps", "קייטנות", "kids-camps", "cat-kids"),
    Category("cat-kids-activities", "Activities", "פעילויות", "kids-activities", "cat-kids"),
    Category("cat-seniors", "Seniors", "גיל הזהב", "seniors"),
    Category("cat-community", "Community", "קהילה", "community"),
    Category("cat-courses", "Courses & Learning", "קורסים ולימודים", "courses"),
    Category("cat-beauty", "Beauty", "יופי וטיפוח", "beauty"),
    Category("cat-home", "Home Improvement", "שיפוצים ותיקונים", "home-improvement"),
    Category("cat-simcha", "Simcha Directory", "ספריית שמחות", "simcha"),
    Category("cat-health", "Health & Wellness", "בריאות ואיכות חיים", "health"),
    Category("cat-health-therapy", "Therapy", "טיפול", "health-therapy", "cat-health"),
    Category("cat-health-fitness", "Fitness", "כושר", "health-fitness", "cat-health"),
    Category("cat-realestate", "Real Estate", "נדל״ן", "real-estate"),
    Category("cat-stores", "Stores & Businesses", "חנויות ועסקים", "stores"),
    Category("cat-homebiz", "Home Based Businesses", "עסקים מהבית", "home-businesses"),
    Category("cat-buysell", "Buy/Sell/Swap", "קנייה/מכירה/החלפה", "buy-sell-swap"),
    Category("cat-gemachs", "Gemachs", "גמ״חים", "gemachs"),
]

CATEGORY_IDS: frozenset[str] = frozenset(c.id for c in CATEGORIES)

# Last-resort keyword lookup for free-text category names. Table order is the tie-break.
CATEGORY_KEYWORD_IDS: dict[str, list[str]] = {
    "cat-kids-sports": ["sport", "soccer", "basketball", "swim", "כדורגל", "ספורט", "שחייה"],
    "cat-kids-music": ["music", "piano", "guitar", "מוזיקה", "פסנתר", "גיטרה"],
    "cat-kids-dance": ["dance", "ballet", "jazz", "ריקוד", "בלט"],
    "cat-kids-art": ["art", "paint", "draw", "craft", "אומנות", "ציור", "יצירה"],
    "cat-kids-tutoring": ["tutor", "math", "english", "homework", "שיעורים", "מתמטיקה"],
    "cat-health-therapy": ["therapy", "counsel", "psychology", "טיפול", "פסיכולוג"],
    "cat-health-fitness": ["yoga", "pilates", "gym", "fitness", "יוגה", "כושר"],
}

# ============================================================================
# Neighborhoods
# ============================================================================

RBS_NEIGHBORHOODS: list[str] = [
    "רמת בית שמש א",
    "רמת בית שמש ב",
    "רמת בית שמש ג",
    "רמת בית שמש ד",
    "רמת בית שמש ה",
    "בית שמש הותיקה",
    "שעלבים",
]

# Keys are lowercase.
NEIGHBORHOOD_ALIASES: dict[str, str] = {
    # RBS Aleph
    "rbs a": "רמת בית שמש א",
    "rbs aleph": "רמת בית שמש א",
    "ramat beit shemesh a": "רמת בית שמש א",
    "ramat beit shemesh aleph": "רמת בית שמש א",
    'רמב"ש א': "רמת בית שמש א",
    "רמב״ש א": "רמת בית שמש א",
    "רמב'ש א": "רמת בית שמש א",
    # RBS Bet
    "rbs b": "רמת בית שמש ב",
    "rbs bet": "רמת בית שמש ב",
    "ramat beit shemesh b": "רמת בית שמש ב",
    "ramat beit shemesh bet": "רמת בית שמש ב",
    'רמב"ש ב': "רמת בית שמש ב",
    "רמב״ש ב": "רמת בית שמש ב",
    # RBS Gimmel
    "rbs g": "רמת בית שמש ג",
    "rbs gimmel": "רמת בית שמש ג",
    "rbs gimel": "רמת בית שמש ג",
    "ramat beit shemesh g": "רמת בית שמש ג",
    'רמב"ש ג': "רמת בית שמש ג",
    "רמב״ש ג": "רמת בית שמש ג",
    # RBS Dalet
    "rbs d": "רמת בית שמש ד",
    "rbs dalet": "רמת בית שמש ד",
    "ramat beit shemesh d": "רמת בית שמש ד",
    'רמב"ש ד': "רמת בית שמש ד",
    "רמב״ש ד": "רמת בית שמש ד",
    # RBS Hey
    "rbs h": "רמת בית שמש ה",
    "rbs hey": "רמת בית שמש ה",
    "ramat beit shemesh h": "רמת בית שמש ה",
    'רמב"ש ה': "רמת בית שמש ה",
    "רמב״ש ה": "רמת בית שמש ה",
    # Old Beit Shemesh
    "old beit shemesh": "בית שמש הותיקה",
    "old bs": "בית שמש הותיקה",
    "beit shemesh vatika": "בית שמש הותיקה",
    # Shaalvim
    "shaalvim": "שעלבים",
    "sha'alvim": "שעלבים",
}

# ============================================================================
# Enum alias maps (keys are lowercase)
# ============================================================================

PRICE_TYPE_ALIASES: dict[str, str] = {
    "fixed": "FIXED",
    "one-time": "FIXED",
    "single": "FIXED",
    "חד פעמי": "FIXED",
    "hourly": "HOURLY",
    "per hour": "HOURLY",
    "לשעה": "HOURLY",
    "session": "PER_SESSION",
    "per session": "PER_SESSION",
    "per class": "PER_SESSION",
    "לשיעור": "PER_SESSION",
    "monthly": "MONTHLY",
    "per month": "MONTHLY",
    "חודשי": "MONTHLY",
    "לחודש": "MONTHLY",
    "contact": "CONTACT",
    "call": "CONTACT",
    "inquire": "CONTACT",
    "ליצירת קשר": "CONTACT",
    "free": "FREE",
    "חינם": "FREE",
    "ללא תשלום": "FREE",
}

GENDER_ALIASES: dict[str, str] = {
    "male": "MALE",
    "boys": "MALE",
    "men": "MALE",
    "בנים": "MALE",
    "גברים": "MALE",
    "female": "FEMALE",
    "girls": "FEMALE",
    "women": "FEMALE",
    "בנות": "FEMALE",
    "נשים": "FEMALE",
    "all": "ALL",
    "both": "ALL",
    "mixed": "ALL",
    "everyone": "ALL",
    "מעורב": "ALL",
    "לכולם": "ALL",
}

LANGUAGE_ALIASES: dict[str, str] = {
    "hebrew": "he",
    "עברית": "he",
    "english": "en",
    "אנגלית": "en",
    "french": "fr",
    "צרפתית": "fr",
    "russian": "ru",
    "רוסית": "ru",
    "spanish": "es",
    "ספרדית": "es",
}

SUPPORTED_LANGUAGES: tuple[str, ...] = ("he", "en", "fr", "ru", "es")

SUBSIDY_ALIASES: dict[str, str] = {
    "meuhedet": "מאוחדת",
    "meuchedet": "מאוחדת",
    "clalit": "כללית",
    "maccabi": "מכבי",
    "macabi": "מכבי",
    "leumit": "לאומית",
}

HEALTH_FUNDS: tuple[str, ...] = ("מאוחדת", "כללית", "מכבי", "לאומית")

TRUTHY_STRINGS: frozenset[str] = frozenset({"true", "yes", "1", "כן"})


def get_category(category_id: str) -> Category | None:
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None


def get_subcategories(parent_id: str) -> list[Category]:
    return [c for c in CATEGORIES if c.parent_id == parent_id]
