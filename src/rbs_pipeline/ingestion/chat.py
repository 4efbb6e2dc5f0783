"""Chat-export import: parse, extract entities, queue them for review.

``process_chat_import`` never raises for bad content. An export that
fails the upfront format check, or yields no messages, comes back as a
FAILED import carrying the reason in ``processing_error``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from rbs_pipeline.core.clock import Clock, SystemClock
from rbs_pipeline.core.types import ImportStatus
from rbs_pipeline.core.utils import new_id
from rbs_pipeline.entities.extractor import extract_entities
from rbs_pipeline.entities.types import ExtractedEntity
from rbs_pipeline.whatsapp.parser import (
    get_export_stats,
    is_valid_chat_export,
    parse_chat_export,
)
from rbs_pipeline.whatsapp.types import ExportStats, ParsedMessage

logger = logging.getLogger(__name__)

NOT_AN_EXPORT = "File does not look like a WhatsApp chat export"


@dataclass
class ChatImport:
    """Bookkeeping record for one uploaded export."""

    id: str
    file_name: str
    file_size: int
    uploaded_by: str
    status: ImportStatus
    created_at: datetime
    updated_at: datetime
    message_count: int = 0
    extracted_entities_count: int = 0
    date_range_start: datetime | None = None
    date_range_end: datetime | None = None
    group_name: str | None = None
    processing_error: str | None = None


@dataclass
class ImportedMessage:
    """A parsed message with the ids the review queue links entities to."""

    id: str
    import_id: str
    message: ParsedMessage
    created_at: datetime


@dataclass
class ChatImportResult:
    chat_import: ChatImport
    messages: list[ImportedMessage] = field(default_factory=list)
    entities: list[ExtractedEntity] = field(default_factory=list)
    stats: ExportStats | None = None

    @property
    def success(self) -> bool:
        return self.chat_import.status == ImportStatus.COMPLETED


def process_chat_import(
    content: str,
    file_name: str,
    *,
    uploaded_by: str = "admin",
    known_providers: list[str] | None = None,
    clock: Clock | None = None,
) -> ChatImportResult:
    """Import one chat export end to end.

    Every non-system message is run through the entity extractor; the
    entities come back PENDING, linked to their message and import ids.
    """
    clock = clock or SystemClock()
    now = clock.now()
    record = ChatImport(
        id=new_id("imp"),
        file_name=file_name,
        file_size=len(content.encode("utf-8")),
        uploaded_by=uploaded_by,
        status=ImportStatus.PROCESSING,
        created_at=now,
        updated_at=now,
    )

    if not is_valid_chat_export(content):
        return _fail(record, NOT_AN_EXPORT, clock)

    parsed = parse_chat_export(content)
    if not parsed.success:
        return _fail(record, "; ".join(parsed.errors) or NOT_AN_EXPORT, clock)

    messages: list[ImportedMessage] = []
    entities: list[ExtractedEntity] = []
    for message in parsed.messages:
        imported = ImportedMessage(
            id=new_id("msg"), import_id=record.id, message=message, created_at=now
        )
        messages.append(imported)
        entities.extend(extract_entities(
            message,
            import_id=record.id,
            message_id=imported.id,
            known_providers=known_providers,
            now=now,
        ))

    record.status = ImportStatus.COMPLETED
    record.message_count = len(messages)
    record.extracted_entities_count = len(entities)
    record.group_name = parsed.group_name
    if parsed.date_range is not None:
        record.date_range_start = parsed.date_range.start
        record.date_range_end = parsed.date_range.end
    record.updated_at = clock.now()

    logger.info(
        "Imported %s: %d messages, %d entities pending review",
        file_name, len(messages), len(entities),
    )
    return ChatImportResult(
        chat_import=record,
        messages=messages,
        entities=entities,
        stats=get_export_stats(parsed),
    )


def _fail(record: ChatImport, reason: str, clock: Clock) -> ChatImportResult:
    logger.warning("Chat import %s failed: %s", record.file_name, reason)
    record.status = ImportStatus.FAILED
    record.processing_error = reason
    record.updated_at = clock.now()
    return ChatImportResult(chat_import=record)
