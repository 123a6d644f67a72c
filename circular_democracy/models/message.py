from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class InboundMessage(BaseModel):
    """A message as handed to the pipeline by a channel adapter.

    Length rules are enforced by the channel schemas and by the orchestrator,
    not here, so the mail hook can represent too-short mail as well.
    """
    external_id: str
    sender_name: str
    sender_email: str
    recipient_email: str
    subject: str = ""
    body: str
    sent_at: datetime
    channel: str = "api"  # api | email
    channel_source: str | None = None
    campaign_hint: str | None = None

    model_config = {"frozen": True}


class MessageInput(BaseModel):
    """Request body for the direct-API channel."""
    external_id: str = Field(min_length=1, max_length=255, description="Unique identifier from source system")
    sender_name: str = Field(min_length=1, max_length=255, description="Full name of the message sender")
    sender_email: EmailStr = Field(max_length=255, description="Email address of the sender")
    recipient_email: EmailStr = Field(max_length=255, description="Email address of the target politician")
    subject: str = Field(max_length=500, description="Message subject line")
    message: str = Field(min_length=10, max_length=10000, description="Message body content")
    timestamp: datetime = Field(description="When the message was originally sent (ISO 8601)")
    channel_source: str | None = Field(default=None, max_length=100, description="Source system identifier")
    campaign_hint: str | None = Field(default=None, max_length=255, description="Optional campaign name hint from sender")


class MessageResponse(BaseModel):
    success: bool
    message_id: int | None = None
    status: str  # processed | failed | politician_not_found | duplicate
    campaign_id: int | None = None
    campaign_name: str | None = None
    confidence: float | None = None
    duplicate_rank: int | None = None
    errors: list[str] | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: str | None = None


class MessageInsert(BaseModel):
    """Row written to the messages table, exactly once per accepted message."""
    external_id: str
    channel: str
    channel_source: str
    politician_id: int
    sender_hash: str
    campaign_id: int
    classification_confidence: float
    message_embedding: list[float]
    language: str = "auto"
    received_at: datetime
    duplicate_rank: int
    processing_status: str = "processed"
