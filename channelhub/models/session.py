"""Login session model.

Only the SHA-256 digest of the opaque token is stored; the token itself is
handed to the client once, at login.
"""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import utcnow


class UserSession(SQLModel, table=True):
    __tablename__ = "sessions"

    token_digest: str = Field(primary_key=True, max_length=64)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    issued_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    expires_at: datetime = Field(nullable=False, index=True, sa_type=sa.DateTime(timezone=True))
