"""Channel and membership schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from channelhub.models.member import MemberRole


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ChannelCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class ChannelPatchRequest(BaseModel):
    """Partial update. Only fields present in the body are applied."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class MemberAddRequest(BaseModel):
    user_id: uuid.UUID
    role: MemberRole = MemberRole.MEMBER


class MemberUpdateRequest(BaseModel):
    role: MemberRole


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ChannelResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ChannelSummary(ChannelResponse):
    """Channel as seen in the caller's channel list, with their role."""
    role: MemberRole


class ChannelListResponse(BaseModel):
    data: List[ChannelSummary]


class MemberResponse(BaseModel):
    channel_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    joined_at: datetime


class MemberListResponse(BaseModel):
    data: List[MemberResponse]
