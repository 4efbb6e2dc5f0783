"""Tests for chat-export imports."""

from __future__ import annotations

from rbs_pipeline.core.types import ApprovalStatus, EntityType, ImportStatus
from rbs_pipeline.ingestion.chat import NOT_AN_EXPORT, process_chat_import


class TestProcessChatImport:
    def test_english_export(self, english_export, fake_clock):
        result = process_chat_import(english_export, "rbs-parents.txt", clock=fake_clock)
        record = result.chat_import

        assert result.success
        assert record.status == ImportStatus.COMPLETED
        assert record.file_name == "rbs-parents.txt"
        assert record.group_name == "RBS Parents"
        assert record.message_count == 6
        assert record.extracted_entities_count == len(result.entities)
        assert record.processing_error is None
        assert record.created_at == fake_clock.now()
        assert record.file_size == len(english_export.encode("utf-8"))

    def test_entities_link_to_messages(self, english_export, fake_clock):
        result = process_chat_import(english_export, "chat.txt", clock=fake_clock)
        message_ids = {m.id for m in result.messages}

        assert result.entities
        for entity in result.entities:
            assert entity.import_id == result.chat_import.id
            assert entity.message_id in message_ids
            assert entity.approval_status == ApprovalStatus.PENDING
            assert entity.created_at == fake_clock.now()

    def test_expected_entity_kinds(self, english_export, fake_clock):
        result = process_chat_import(english_export, "chat.txt", clock=fake_clock)
        kinds = {e.entity_type for e in result.entities}

        assert EntityType.SERVICE_REQUEST in kinds
        assert EntityType.RECOMMENDATION in kinds
        assert EntityType.CONTACT_INFO in kinds
        assert EntityType.PRICING in kinds

    def test_system_messages_produce_no_entities(self, english_export, fake_clock):
        result = process_chat_import(english_export, "chat.txt", clock=fake_clock)
        system_ids = {m.id for m in result.messages if m.message.is_system_message}
        assert system_ids
        assert not any(e.message_id in system_ids for e in result.entities)

    def test_stats(self, english_export, fake_clock):
        result = process_chat_import(english_export, "chat.txt", clock=fake_clock)
        assert result.stats.total_messages == 6
        assert result.stats.system_messages == 2

    def test_hebrew_export(self, hebrew_export, fake_clock):
        result = process_chat_import(hebrew_export, "chat.txt", clock=fake_clock)
        assert result.success
        assert result.chat_import.message_count == 4

    def test_known_providers_are_passed_through(self, english_export, fake_clock):
        result = process_chat_import(
            english_export, "chat.txt", known_providers=["Goal Kids Academy"], clock=fake_clock
        )
        providers = [e for e in result.entities if e.entity_type == EntityType.PROVIDER_MENTION]
        assert any(p.extracted_data.business_name == "Goal Kids Academy" for p in providers)

    def test_not_an_export(self, fake_clock):
        result = process_chat_import("name,price\nyoga,50\n", "listings.csv", clock=fake_clock)

        assert not result.success
        assert result.chat_import.status == ImportStatus.FAILED
        assert result.chat_import.processing_error == NOT_AN_EXPORT
        assert result.messages == []
        assert result.entities == []

    def test_failure_updates_timestamp(self, fake_clock):
        result = process_chat_import("", "empty.txt", clock=fake_clock)
        assert result.chat_import.status == ImportStatus.FAILED
        assert result.chat_import.updated_at == fake_clock.now()
