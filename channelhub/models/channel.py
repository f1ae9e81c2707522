"""Channel model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Channel(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "channels"

    name: str = Field(unique=True, nullable=False, index=True)
    description: Optional[str] = None
