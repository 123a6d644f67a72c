import os
import pytest

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret-key-for-jwt-tokens-minimum-64-chars-long-1234567890abcdef")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from circular_democracy.exceptions import DatastoreError
from circular_democracy.models.campaign import Campaign, CampaignMatch, CLASSIFIABLE_STATUSES
from circular_democracy.models.message import MessageInsert
from circular_democracy.models.politician import Politician


class InMemoryDatastore:
    """Datastore double backed by plain lists.

    ``similarities`` maps campaign id to the score the similarity search should
    report for any embedding. Operation names listed in ``failing`` raise
    DatastoreError.
    """

    def __init__(self):
        self.politicians: list[Politician] = []
        self.campaigns: list[Campaign] = []
        self.similarities: dict[int, float] = {}
        self.messages: list[MessageInsert] = []
        self.failing: set[str] = set()
        self.calls: list[str] = []
        self._next_campaign_id = 900

    def _call(self, operation: str):
        self.calls.append(operation)
        if operation in self.failing:
            raise DatastoreError(f"{operation} failed: connection refused")

    async def find_active_politician_by_email(self, email):
        self._call("find_active_politician_by_email")
        return next((p for p in self.politicians if p.active and p.email == email), None)

    async def find_active_politician_by_alias(self, email):
        self._call("find_active_politician_by_alias")
        return next(
            (p for p in self.politicians if p.active and email in p.additional_emails), None
        )

    async def find_campaign_by_hint(self, hint):
        self._call("find_campaign_by_hint")
        needle = hint.lower()
        return next(
            (
                c for c in self.campaigns
                if c.status in CLASSIFIABLE_STATUSES
                and (needle in c.name.lower() or needle in c.slug.lower())
            ),
            None,
        )

    async def find_similar_campaigns(self, embedding, floor, limit):
        self._call("find_similar_campaigns")
        matches = [
            CampaignMatch(**c.model_dump(), similarity=self.similarities[c.id])
            for c in self.campaigns
            if c.id in self.similarities
            and c.status in CLASSIFIABLE_STATUSES
            and c.reference_vector is not None
            and self.similarities[c.id] > floor
        ]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    async def list_reference_campaigns(self, limit):
        self._call("list_reference_campaigns")
        return [
            c for c in self.campaigns
            if c.status in CLASSIFIABLE_STATUSES and c.reference_vector is not None
        ][:limit]

    async def get_campaign_by_slug(self, slug):
        self._call("get_campaign_by_slug")
        return next((c for c in self.campaigns if c.slug == slug), None)

    async def ensure_campaign(self, row):
        self._call("ensure_campaign")
        existing = next((c for c in self.campaigns if c.slug == row["slug"]), None)
        if existing:
            return existing
        self._next_campaign_id += 1
        campaign = Campaign(
            id=self._next_campaign_id, name=row["name"], slug=row["slug"], status=row["status"]
        )
        self.campaigns.append(campaign)
        return campaign

    async def external_id_exists(self, external_id, channel_source):
        self._call("external_id_exists")
        return any(
            m.external_id == external_id and m.channel_source == channel_source
            for m in self.messages
        )

    async def count_messages(self, sender_hash, politician_id, campaign_id):
        self._call("count_messages")
        return sum(
            1 for m in self.messages
            if m.sender_hash == sender_hash
            and m.politician_id == politician_id
            and m.campaign_id == campaign_id
        )

    async def insert_message(self, message):
        self._call("insert_message")
        self.messages.append(message)
        return len(self.messages)


@pytest.fixture
def datastore():
    return InMemoryDatastore()


@pytest.fixture
def seeded_datastore():
    db = InMemoryDatastore()
    db.politicians = [
        Politician(
            id=1,
            name="Jane Politician",
            email="politician@example.com",
            additional_emails=["office@example.com"],
        ),
        Politician(id=2, name="Retired Member", email="retired@example.com", active=False),
    ]
    db.campaigns = [
        Campaign(id=10, name="Climate Action", slug="climate-action", status="active", reference_vector=[0.1, 0.2]),
        Campaign(id=11, name="Affordable Housing", slug="housing", status="unconfirmed", reference_vector=[0.3, 0.1]),
        Campaign(id=12, name="Old Climate Petition", slug="old-climate", status="closed", reference_vector=[0.1, 0.2]),
    ]
    return db


@pytest.fixture
def embed():
    calls: list[str] = []

    async def fake_embed(text: str) -> list[float]:
        calls.append(text)
        return [0.1, 0.2, 0.3]

    fake_embed.calls = calls
    return fake_embed
