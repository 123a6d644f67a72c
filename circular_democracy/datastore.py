"""Supabase gateway used by the ingestion pipeline and the management routes.

Every method performs a single PostgREST call (or one call plus a reread for
``ensure_campaign``). Failures are raised as DatastoreError; deciding whether a
failure is fatal or soft is left to the caller.
"""
import asyncio
import json
from loguru import logger
from pydantic import ValidationError
from supabase import Client
from circular_democracy.database import get_supabase
from circular_democracy.exceptions import DatastoreError
from circular_democracy.models.campaign import Campaign, CampaignMatch, CLASSIFIABLE_STATUSES
from circular_democracy.models.message import MessageInsert
from circular_democracy.models.politician import Politician

POLITICIAN_COLUMNS = "id, name, email, additional_emails, active"
CAMPAIGN_COLUMNS = "id, name, slug, status"


def _quote_filter_value(value: str) -> str:
    """Quote a value for use inside a PostgREST ``or=(...)`` expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class Datastore:
    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    async def _execute(self, query, operation: str):
        try:
            return await asyncio.to_thread(query.execute)
        except Exception as e:
            logger.debug(f"Datastore call '{operation}' failed: {e}")
            raise DatastoreError(f"{operation} failed: {e}") from e

    # ── Politicians ──

    async def find_active_politician_by_email(self, email: str) -> Politician | None:
        result = await self._execute(
            self.client.table("politicians")
            .select(POLITICIAN_COLUMNS)
            .eq("email", email)
            .eq("active", True)
            .limit(1),
            "find_active_politician_by_email",
        )
        return self._politician(result, "find_active_politician_by_email")

    async def find_active_politician_by_alias(self, email: str) -> Politician | None:
        result = await self._execute(
            self.client.table("politicians")
            .select(POLITICIAN_COLUMNS)
            .contains("additional_emails", [email])
            .eq("active", True)
            .limit(1),
            "find_active_politician_by_alias",
        )
        return self._politician(result, "find_active_politician_by_alias")

    @staticmethod
    def _politician(result, operation: str) -> Politician | None:
        if not result.data:
            return None
        try:
            return Politician(**result.data[0])
        except ValidationError as e:
            raise DatastoreError(f"{operation} returned an unreadable row: {e}") from e

    async def list_politicians(self) -> list[dict]:
        result = await self._execute(
            self.client.table("politicians")
            .select("id, name, email, party, country, region, position, active")
            .order("id"),
            "list_politicians",
        )
        return result.data

    async def get_politician(self, politician_id: int) -> dict | None:
        result = await self._execute(
            self.client.table("politicians")
            .select("id, name, email, party, country, region, position, active")
            .eq("id", politician_id)
            .limit(1),
            "get_politician",
        )
        return result.data[0] if result.data else None

    # ── Campaigns ──

    async def find_campaign_by_hint(self, hint: str) -> Campaign | None:
        pattern = _quote_filter_value(f"*{hint}*")
        result = await self._execute(
            self.client.table("campaigns")
            .select(CAMPAIGN_COLUMNS)
            .or_(f"name.ilike.{pattern},slug.ilike.{pattern}")
            .in_("status", list(CLASSIFIABLE_STATUSES))
            .order("id")
            .limit(1),
            "find_campaign_by_hint",
        )
        return Campaign(**result.data[0]) if result.data else None

    async def find_similar_campaigns(
        self,
        embedding: list[float],
        floor: float,
        limit: int,
    ) -> list[CampaignMatch]:
        """Top campaigns by vector similarity, best first.

        Backed by the ``find_similar_campaigns`` SQL function, which already
        restricts to classifiable campaigns with a reference vector and drops
        candidates at or below ``floor``.
        """
        result = await self._execute(
            self.client.rpc(
                "find_similar_campaigns",
                {
                    "query_embedding": embedding,
                    "similarity_threshold": floor,
                    "match_limit": limit,
                },
            ),
            "find_similar_campaigns",
        )
        return [CampaignMatch(**row) for row in result.data or []]

    async def list_reference_campaigns(self, limit: int) -> list[Campaign]:
        """Classifiable campaigns that have a reference vector, unordered."""
        result = await self._execute(
            self.client.table("campaigns")
            .select(CAMPAIGN_COLUMNS)
            .in_("status", list(CLASSIFIABLE_STATUSES))
            .not_.is_("reference_vector", "null")
            .limit(limit),
            "list_reference_campaigns",
        )
        return [Campaign(**row) for row in result.data]

    async def get_campaign_by_slug(self, slug: str) -> Campaign | None:
        result = await self._execute(
            self.client.table("campaigns")
            .select(CAMPAIGN_COLUMNS)
            .eq("slug", slug)
            .limit(1),
            "get_campaign_by_slug",
        )
        return Campaign(**result.data[0]) if result.data else None

    async def ensure_campaign(self, row: dict) -> Campaign:
        """Create a campaign keyed on its slug, or return the existing one.

        Upserts with ``ignore_duplicates`` so a concurrent creator never makes
        this call fail; when the row already existed nothing comes back and the
        winner is reread.
        """
        result = await self._execute(
            self.client.table("campaigns").upsert(
                row, on_conflict="slug", ignore_duplicates=True
            ),
            "ensure_campaign",
        )
        if result.data:
            return Campaign(**result.data[0])

        existing = await self.get_campaign_by_slug(row["slug"])
        if existing is None:
            raise DatastoreError(f"Campaign '{row['slug']}' missing after upsert")
        return existing

    async def list_campaigns(self) -> list[dict]:
        result = await self._execute(
            self.client.table("campaigns")
            .select("id, name, slug, description, status, created_at")
            .order("id"),
            "list_campaigns",
        )
        return result.data

    async def get_campaign(self, campaign_id: int) -> dict | None:
        result = await self._execute(
            self.client.table("campaigns")
            .select("id, name, slug, description, status, created_at")
            .eq("id", campaign_id)
            .limit(1),
            "get_campaign",
        )
        return result.data[0] if result.data else None

    async def create_campaign(self, data: dict) -> dict:
        result = await self._execute(
            self.client.table("campaigns").insert(data), "create_campaign"
        )
        return result.data[0]

    async def campaign_stats(self) -> list[dict]:
        result = await self._execute(
            self.client.rpc("get_campaign_stats", {}), "campaign_stats"
        )
        return result.data or []

    # ── Messages ──

    async def external_id_exists(self, external_id: str, channel_source: str) -> bool:
        result = await self._execute(
            self.client.table("messages")
            .select("id")
            .eq("external_id", external_id)
            .eq("channel_source", channel_source)
            .limit(1),
            "external_id_exists",
        )
        return bool(result.data)

    async def count_messages(
        self,
        sender_hash: str,
        politician_id: int,
        campaign_id: int,
    ) -> int:
        result = await self._execute(
            self.client.table("messages")
            .select("id", count="exact", head=True)
            .eq("sender_hash", sender_hash)
            .eq("politician_id", politician_id)
            .eq("campaign_id", campaign_id),
            "count_messages",
        )
        return int(result.count or 0)

    async def insert_message(self, message: MessageInsert) -> int:
        row = message.model_dump(mode="json")
        # pgvector accepts the "[x,y,...]" text form
        row["message_embedding"] = json.dumps(message.message_embedding)
        result = await self._execute(
            self.client.table("messages").insert(row), "insert_message"
        )
        return result.data[0]["id"]

    # ── Reply templates ──

    async def list_reply_templates(self) -> list[dict]:
        result = await self._execute(
            self.client.table("reply_templates").select("*").order("id"),
            "list_reply_templates",
        )
        return result.data

    async def get_reply_template(self, template_id: int) -> dict | None:
        result = await self._execute(
            self.client.table("reply_templates")
            .select("*")
            .eq("id", template_id)
            .limit(1),
            "get_reply_template",
        )
        return result.data[0] if result.data else None

    async def create_reply_template(self, data: dict) -> dict:
        result = await self._execute(
            self.client.table("reply_templates").insert(data),
            "create_reply_template",
        )
        return result.data[0]


_datastore: Datastore | None = None


def get_datastore() -> Datastore:
    """Shared gateway bound to the service-role Supabase client."""
    global _datastore
    if _datastore is None:
        _datastore = Datastore()
    return _datastore
