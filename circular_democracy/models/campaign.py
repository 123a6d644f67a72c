import json
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

FALLBACK_CAMPAIGN_SLUG = "uncategorized"
FALLBACK_CAMPAIGN_NAME = "Uncategorized"
CLASSIFIABLE_STATUSES = ("active", "unconfirmed")


class Campaign(BaseModel):
    id: int
    name: str
    slug: str
    status: str  # active | unconfirmed | closed | ...
    reference_vector: list[float] | None = None

    @field_validator("reference_vector", mode="before")
    @classmethod
    def _parse_vector(cls, value):
        # pgvector columns come back from PostgREST as "[0.1,0.2,...]"
        if isinstance(value, str):
            return json.loads(value)
        return value


class CampaignMatch(Campaign):
    """A campaign returned by the similarity search, with its score."""
    similarity: float


class ClassificationResult(BaseModel):
    """Which campaign a message belongs to and how sure the cascade was."""
    campaign_id: int
    campaign_name: str
    confidence: float = Field(ge=0.0, le=1.0)


class CampaignCreate(BaseModel):
    name: str = Field(min_length=3)
    slug: str = Field(min_length=3, pattern=r"^[a-z0-9-]+$")
    description: str | None = None


class CampaignResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    status: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class CampaignStats(BaseModel):
    id: int
    name: str
    message_count: int
    recent_count: int
    avg_confidence: float | None = None


class CampaignStatsResponse(BaseModel):
    campaigns: list[CampaignStats]
