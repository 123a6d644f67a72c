"""Stalwart MTA hook request/response schemas."""
from typing import Literal
from pydantic import BaseModel, EmailStr


class HookBody(BaseModel):
    text: str | None = None
    html: str | None = None


class SpfResult(BaseModel):
    result: Literal["pass", "fail", "softfail", "neutral", "temperror", "permerror", "none"]
    domain: str | None = None


class DkimResult(BaseModel):
    result: Literal["pass", "fail", "temperror", "permerror", "neutral", "none"]
    domain: str | None = None
    selector: str | None = None


class DmarcResult(BaseModel):
    result: Literal["pass", "fail", "temperror", "permerror", "none"]
    policy: Literal["none", "quarantine", "reject"] | None = None


class StalwartHook(BaseModel):
    messageId: str
    queueId: str | None = None
    sender: EmailStr
    recipients: list[EmailStr]
    headers: dict[str, str | list[str]] = {}
    subject: str | None = None
    body: HookBody | None = None
    size: int
    timestamp: float  # unix seconds
    spf: SpfResult | None = None
    dkim: list[DkimResult] | None = None
    dmarc: DmarcResult | None = None


class HookModifications(BaseModel):
    folder: str | None = None
    headers: dict[str, str] = {}
    subject: str | None = None


class HookResponse(BaseModel):
    action: Literal["accept", "reject", "quarantine", "discard"] = "accept"
    modifications: HookModifications | None = None
    reject_reason: str | None = None
    confidence: float | None = None
    error: str | None = None
