"""Data types for parsed chat exports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ParsedMessage:
    """One chat message, possibly reassembled from several source lines."""

    timestamp: datetime
    sender_name: str
    content: str
    is_system_message: bool = False
    sender_phone: str | None = None


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime


@dataclass
class ParseResult:
    """Output of one parse pass over a chat export.

    ``messages`` keeps file order; it is never re-sorted by timestamp.
    """

    success: bool
    messages: list[ParsedMessage] = field(default_factory=list)
    date_range: DateRange | None = None
    group_name: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def message_count(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class SenderCount:
    name: str
    count: int


@dataclass
class ExportStats:
    """Summary numbers for an uploaded export, shown before import."""

    total_messages: int
    unique_senders: int
    system_messages: int
    date_range: DateRange | None
    top_senders: list[SenderCount] = field(default_factory=list)
