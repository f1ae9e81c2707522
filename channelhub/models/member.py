"""Channel membership (join table)."""

from datetime import datetime
from enum import Enum
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import utcnow


class MemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class Member(SQLModel, table=True):
    __tablename__ = "members"

    channel_id: uuid.UUID = Field(foreign_key="channels.id", primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True, index=True)
    role: str = Field(default=MemberRole.MEMBER.value, nullable=False, max_length=16)  # admin | member
    joined_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
