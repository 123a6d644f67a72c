"""Tests for politician resolution and duplicate bookkeeping."""
import os
import pytest

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from datetime import datetime, timezone
from circular_democracy.models.message import MessageInsert
from circular_democracy.pipeline.duplicates import duplicate_rank, is_transport_duplicate
from circular_democracy.pipeline.identity import hash_email
from circular_democracy.pipeline.recipients import resolve_recipient


def _stored(external_id: str, sender: str = "citizen@example.com", campaign_id: int = 10, source: str = "api") -> MessageInsert:
    return MessageInsert(
        external_id=external_id,
        channel="api",
        channel_source=source,
        politician_id=1,
        sender_hash=hash_email(sender),
        campaign_id=campaign_id,
        classification_confidence=0.95,
        message_embedding=[0.1],
        received_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        duplicate_rank=0,
    )


class TestResolveRecipient:
    @pytest.mark.asyncio
    async def test_exact_match(self, seeded_datastore):
        politician = await resolve_recipient(seeded_datastore, "politician@example.com")
        assert politician.id == 1
        assert seeded_datastore.calls == ["find_active_politician_by_email"]

    @pytest.mark.asyncio
    async def test_alias_match(self, seeded_datastore):
        politician = await resolve_recipient(seeded_datastore, "office@example.com")
        assert politician.id == 1
        assert seeded_datastore.calls == [
            "find_active_politician_by_email",
            "find_active_politician_by_alias",
        ]

    @pytest.mark.asyncio
    async def test_inactive_politician_not_found(self, seeded_datastore):
        assert await resolve_recipient(seeded_datastore, "retired@example.com") is None

    @pytest.mark.asyncio
    async def test_unknown_address(self, seeded_datastore):
        assert await resolve_recipient(seeded_datastore, "nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_storage_error_is_not_found(self, seeded_datastore):
        seeded_datastore.failing.add("find_active_politician_by_email")
        assert await resolve_recipient(seeded_datastore, "politician@example.com") is None

    @pytest.mark.asyncio
    async def test_alias_lookup_error_is_not_found(self, seeded_datastore):
        seeded_datastore.failing.add("find_active_politician_by_alias")
        assert await resolve_recipient(seeded_datastore, "office@example.com") is None


class TestTransportDuplicate:
    @pytest.mark.asyncio
    async def test_new_message(self, datastore):
        assert await is_transport_duplicate(datastore, "msg-1", "api") is False

    @pytest.mark.asyncio
    async def test_same_id_and_source(self, datastore):
        datastore.messages.append(_stored("msg-1"))
        assert await is_transport_duplicate(datastore, "msg-1", "api") is True

    @pytest.mark.asyncio
    async def test_same_id_other_source(self, datastore):
        datastore.messages.append(_stored("msg-1", source="stalwart"))
        assert await is_transport_duplicate(datastore, "msg-1", "api") is False

    @pytest.mark.asyncio
    async def test_storage_error_is_not_duplicate(self, datastore):
        datastore.messages.append(_stored("msg-1"))
        datastore.failing.add("external_id_exists")
        assert await is_transport_duplicate(datastore, "msg-1", "api") is False


class TestDuplicateRank:
    @pytest.mark.asyncio
    async def test_counts_prior_messages(self, datastore):
        sender = hash_email("citizen@example.com")
        assert await duplicate_rank(datastore, sender, 1, 10) == 0

        datastore.messages.append(_stored("msg-1"))
        assert await duplicate_rank(datastore, sender, 1, 10) == 1

        datastore.messages.append(_stored("msg-2"))
        datastore.messages.append(_stored("msg-3"))
        assert await duplicate_rank(datastore, sender, 1, 10) == 3

    @pytest.mark.asyncio
    async def test_other_campaign_not_counted(self, datastore):
        datastore.messages.append(_stored("msg-1", campaign_id=11))
        assert await duplicate_rank(datastore, hash_email("citizen@example.com"), 1, 10) == 0

    @pytest.mark.asyncio
    async def test_other_sender_not_counted(self, datastore):
        datastore.messages.append(_stored("msg-1", sender="someone-else@example.com"))
        assert await duplicate_rank(datastore, hash_email("citizen@example.com"), 1, 10) == 0

    @pytest.mark.asyncio
    async def test_storage_error_is_zero(self, datastore):
        datastore.messages.append(_stored("msg-1"))
        datastore.failing.add("count_messages")
        assert await duplicate_rank(datastore, hash_email("citizen@example.com"), 1, 10) == 0
