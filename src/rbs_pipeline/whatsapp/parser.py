"""Chat export parser.

Turns the text of an exported WhatsApp chat into ``ParsedMessage``
records. Four header layouts are recognised, tried in this order:

- iOS bracketed, 24 hour:  ``[31/12/2023, 14:05:09] Name: text``
- iOS bracketed, AM/PM:    ``[31/12/2023, 2:05:09 PM] Name: text``
- Android, slash date:     ``31/12/2023, 14:05 - Name: text``
- Hebrew locale, dot date: ``31.12.2023, 14:05 - Name: text``

A line that matches none of them is a continuation of the message
before it. A header whose date or time does not make a real timestamp
is treated the same way, so a malformed header silently becomes body
text of the previous message.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from rbs_pipeline.whatsapp.patterns import is_system_message
from rbs_pipeline.whatsapp.types import (
    DateRange,
    ExportStats,
    ParsedMessage,
    ParseResult,
    SenderCount,
)

logger = logging.getLogger(__name__)

SYSTEM_SENDER = "System"

_DATE = r"(\d{1,2}/\d{1,2}/\d{2,4})"
_DOT_DATE = r"(\d{1,2}\.\d{1,2}\.\d{2,4})"
_TIME_24 = r"(\d{1,2}:\d{2}(?::\d{2})?)"
_TIME_AMPM = r"(\d{1,2}:\d{2}(?::\d{2})?\s*[AP]M)"
_DASH_TIME = r"(\d{1,2}:\d{2}(?:\s*[AP]M)?)"

# (name, pattern, dotted date). Order matters: most specific first.
MESSAGE_PATTERNS: list[tuple[str, re.Pattern[str], bool]] = [
    ("ios", re.compile(r"^\[" + _DATE + r",?\s+" + _TIME_24 + r"\]\s*([^:]+):\s*(.*)$"), False),
    ("ios_ampm", re.compile(
        r"^\[" + _DATE + r",?\s+" + _TIME_AMPM + r"\]\s*([^:]+):\s*(.*)$", re.IGNORECASE
    ), False),
    ("android", re.compile(
        r"^" + _DATE + r",?\s+" + _DASH_TIME + r"\s*-\s*([^:]+):\s*(.*)$", re.IGNORECASE
    ), False),
    ("hebrew_dots", re.compile(
        r"^" + _DOT_DATE + r",?\s+" + _DASH_TIME + r"\s*-\s*([^:]+):\s*(.*)$", re.IGNORECASE
    ), True),
]

# Timestamp + free text, no sender. Only accepted when the text is a system notice.
SYSTEM_LINE_PATTERNS: list[tuple[str, re.Pattern[str], bool]] = [
    ("ios", re.compile(
        r"^\[" + _DATE + r",?\s+(\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AP]M)?)\]\s*(.+)$", re.IGNORECASE
    ), False),
    ("android", re.compile(r"^" + _DATE + r",?\s+" + _DASH_TIME + r"\s*-\s*(.+)$", re.IGNORECASE), False),
    ("hebrew_dots", re.compile(r"^" + _DOT_DATE + r",?\s+" + _DASH_TIME + r"\s*-\s*(.+)$", re.IGNORECASE), True),
]

GROUP_NAME_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"WhatsApp Chat with (.+)$", re.IGNORECASE),
    re.compile(r"צ'אט וואטסאפ עם (.+)$"),
    re.compile(r"Chat de WhatsApp con (.+)$", re.IGNORECASE),
]

# Direction marks and BOM that exports put in front of lines and message bodies.
_BIDI_MARKS = "\ufeff\u200e\u200f\u202a\u202b\u202c\u202d\u202e\u2066\u2067\u2068\u2069"

_SENDER_PHONE = re.compile(r"[+]?[\d\s\-()]{10,}")

VALIDATION_WINDOW = 10
MIN_VALID_HEADERS = 2
TOP_SENDERS_LIMIT = 10


def parse_chat_export(file_content: str) -> ParseResult:
    """Parse a full chat export into ordered messages.

    Never raises for messy content; an export with no recognisable
    message comes back with ``success=False``.
    """
    lines = file_content.split("\n")
    messages: list[ParsedMessage] = []
    errors: list[str] = []

    group_name = None
    for raw in lines:
        first = _clean(raw)
        if first:
            group_name = extract_group_name(first)
            break

    current: dict | None = None

    for raw in lines:
        line = _clean(raw)
        if not line:
            continue

        header = parse_message_line(line)
        if header is not None:
            if current and current["content"]:
                messages.append(_finish(current))
            current = header
        elif current is not None:
            current["content"] = (
                f"{current['content']}\n{line}" if current["content"] else line
            )

    if current and current["content"]:
        messages.append(_finish(current))

    if messages:
        timestamps = [m.timestamp for m in messages]
        date_range = DateRange(start=min(timestamps), end=max(timestamps))
    else:
        now = datetime.now()
        date_range = DateRange(start=now, end=now)
        errors.append(
            "Chat export is empty" if not file_content.strip()
            else "No messages could be parsed from the chat export"
        )

    logger.debug(
        "Parsed chat export: %d messages, group=%s", len(messages), group_name
    )

    return ParseResult(
        success=len(messages) > 0,
        messages=messages,
        date_range=date_range,
        group_name=group_name,
        errors=errors,
    )


def parse_message_line(line: str) -> dict | None:
    """Try to read ``line`` as a message header.

    Returns the fields of a new in-progress message, or None when the
    line is a continuation (including headers with impossible dates).
    """
    for _name, pattern, dotted in MESSAGE_PATTERNS:
        m = pattern.match(line)
        if not m:
            continue
        date_str, time_str, sender, content = m.groups()
        timestamp = parse_timestamp(date_str, time_str, dotted=dotted)
        if timestamp is None:
            continue
        content = content.strip().lstrip(_BIDI_MARKS)
        sender = sender.strip().lstrip(_BIDI_MARKS).strip()
        return {
            "timestamp": timestamp,
            "sender_name": sender,
            "content": content,
            "is_system_message": is_system_message(content),
        }

    for _name, pattern, dotted in SYSTEM_LINE_PATTERNS:
        m = pattern.match(line)
        if not m:
            continue
        date_str, time_str, content = m.groups()
        content = content.strip().lstrip(_BIDI_MARKS)
        timestamp = parse_timestamp(date_str, time_str, dotted=dotted)
        if timestamp is not None and is_system_message(content):
            return {
                "timestamp": timestamp,
                "sender_name": SYSTEM_SENDER,
                "content": content,
                "is_system_message": True,
            }

    return None


def parse_timestamp(date_str: str, time_str: str, *, dotted: bool = False) -> datetime | None:
    """Build a timestamp from day/month/year and h:mm[:ss][ AM|PM] strings.

    Two-digit years above 50 land in the 1900s, the rest in the 2000s.
    Returns None when any component is out of range.
    """
    parts = date_str.split(".") if dotted else re.split(r"[/.]", date_str)
    if len(parts) != 3:
        return None

    try:
        day, month, year = (int(p) for p in parts)
    except ValueError:
        return None

    if year < 100:
        year += 1900 if year > 50 else 2000

    is_pm = re.search(r"PM", time_str, re.IGNORECASE) is not None
    is_am = re.search(r"AM", time_str, re.IGNORECASE) is not None
    clean_time = re.sub(r"\s*[AP]M", "", time_str, flags=re.IGNORECASE).strip()

    time_parts = clean_time.split(":")
    try:
        hours = int(time_parts[0])
        minutes = int(time_parts[1])
        seconds = int(time_parts[2]) if len(time_parts) > 2 else 0
    except (ValueError, IndexError):
        return None

    if is_pm and hours < 12:
        hours += 12
    if is_am and hours == 12:
        hours = 0

    try:
        return datetime(year, month, day, hours, minutes, seconds)
    except ValueError:
        return None


def extract_sender_phone(name: str) -> str | None:
    """Pull a phone number out of a sender name like ``+972 52-123-4567``."""
    m = _SENDER_PHONE.search(name)
    if m:
        phone = re.sub(r"[\s\-()]", "", m.group(0))
        if len(phone) >= 10:
            return phone
    return None


def extract_group_name(first_line: str) -> str | None:
    for pattern in GROUP_NAME_PATTERNS:
        m = pattern.search(first_line)
        if m:
            return m.group(1).strip()
    return None


def is_valid_chat_export(content: str) -> bool:
    """Cheap upfront gate: at least 2 header lines among the first 10 lines."""
    lines = content.split("\n")[:VALIDATION_WINDOW]
    valid = sum(1 for line in lines if parse_message_line(_clean(line)) is not None)
    return valid >= MIN_VALID_HEADERS


def get_export_stats(result: ParseResult) -> ExportStats:
    """Message, sender and system-notice counts plus the top 10 senders.

    Senders with equal counts keep the order they first appeared in.
    """
    sender_counts: dict[str, int] = {}
    system_count = 0

    for message in result.messages:
        if message.is_system_message:
            system_count += 1
            continue
        sender_counts[message.sender_name] = sender_counts.get(message.sender_name, 0) + 1

    ranked = sorted(sender_counts.items(), key=lambda item: -item[1])

    return ExportStats(
        total_messages=len(result.messages),
        unique_senders=len(sender_counts),
        system_messages=system_count,
        date_range=result.date_range,
        top_senders=[
            SenderCount(name=name, count=count)
            for name, count in ranked[:TOP_SENDERS_LIMIT]
        ],
    )


def _clean(line: str) -> str:
    return line.strip().lstrip(_BIDI_MARKS).strip()


def _finish(current: dict) -> ParsedMessage:
    return ParsedMessage(
        timestamp=current["timestamp"],
        sender_name=current["sender_name"],
        sender_phone=extract_sender_phone(current["sender_name"]),
        content=current["content"],
        is_system_message=current["is_system_message"],
    )
