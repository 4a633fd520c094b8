from datetime import datetime

from pydantic import BaseModel, Field


class DisclosureDecision(BaseModel):
    allowed: bool
    requires_time_boxed_token: bool = False
    reason: str | None = None


class TemporaryMask(BaseModel):
    masked_number: str
    token: str
    expires_at: datetime


class UnmaskTokenCheck(BaseModel):
    valid: bool
    mobile: str | None = None
    expired: bool = False
    expires_at: datetime | None = None


class UnmaskTokenCreate(BaseModel):
    ttl_minutes: int | None = Field(default=None, ge=1)


class UnmaskRequest(BaseModel):
    token: str = Field(min_length=1, max_length=512)


class ContactResponse(BaseModel):
    worker_id: str
    mobile: str
    masked: bool
    decision: DisclosureDecision
