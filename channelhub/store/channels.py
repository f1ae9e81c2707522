"""
Channel and membership storage.

Membership rows are removed explicitly before their channel, so deleting a
channel cascades on every backend regardless of foreign key enforcement.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from channelhub.core.errors import DataNotFound
from channelhub.models.base import utcnow
from channelhub.models.channel import Channel
from channelhub.models.member import Member, MemberRole

from ._errors import translate_db_errors


class ChannelStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Channels ---

    async def get_channel(self, channel_id: uuid.UUID) -> Channel:
        async with translate_db_errors():
            result = await self.session.execute(select(Channel).where(Channel.id == channel_id))
            channel = result.scalar_one_or_none()
        if not channel:
            raise DataNotFound(f"channel {channel_id}")
        return channel

    async def insert_channel(self, name: str, description: Optional[str] = None) -> Channel:
        channel = Channel(name=name, description=description)
        async with translate_db_errors():
            self.session.add(channel)
            await self.session.flush()
        return channel

    async def patch_channel(self, channel_id: uuid.UUID, patch: dict) -> Channel:
        """Apply ``patch`` (field -> value) to the channel and return it."""
        channel = await self.get_channel(channel_id)
        for key, value in patch.items():
            setattr(channel, key, value)
        channel.updated_at = utcnow()
        async with translate_db_errors():
            self.session.add(channel)
            await self.session.flush()
        return channel

    async def remove_channel(self, channel_id: uuid.UUID) -> Channel:
        """Delete the channel and all of its members. Returns the removed channel."""
        channel = await self.get_channel(channel_id)
        async with translate_db_errors():
            await self.session.execute(
                delete(Member)
                .where(Member.channel_id == channel_id)
                .execution_options(synchronize_session="fetch")
            )
            await self.session.delete(channel)
            await self.session.flush()
        return channel

    async def list_user_channels(self, user_id: uuid.UUID) -> list[tuple[Channel, str]]:
        """Channels ``user_id`` belongs to, paired with their role, by name."""
        async with translate_db_errors():
            result = await self.session.execute(
                select(Channel, Member.role)
                .join(Member, Member.channel_id == Channel.id)
                .where(Member.user_id == user_id)
                .order_by(Channel.name)
            )
            return [(channel, role) for channel, role in result.all()]

    # --- Members ---

    async def get_member(self, channel_id: uuid.UUID, user_id: uuid.UUID) -> Member:
        async with translate_db_errors():
            result = await self.session.execute(
                select(Member).where(Member.channel_id == channel_id, Member.user_id == user_id)
            )
            member = result.scalar_one_or_none()
        if not member:
            raise DataNotFound(f"member {user_id} of channel {channel_id}")
        return member

    async def get_members(self, channel_id: uuid.UUID) -> list[Member]:
        await self.get_channel(channel_id)
        async with translate_db_errors():
            result = await self.session.execute(
                select(Member).where(Member.channel_id == channel_id).order_by(Member.joined_at)
            )
            return list(result.scalars().all())

    async def insert_member(
        self, channel_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole
    ) -> Member:
        member = Member(channel_id=channel_id, user_id=user_id, role=role.value)
        async with translate_db_errors():
            self.session.add(member)
            await self.session.flush()
        return member

    async def update_member_role(
        self, channel_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole
    ) -> Member:
        member = await self.get_member(channel_id, user_id)
        member.role = role.value
        async with translate_db_errors():
            self.session.add(member)
            await self.session.flush()
        return member

    async def remove_member(self, channel_id: uuid.UUID, user_id: uuid.UUID) -> Member:
        member = await self.get_member(channel_id, user_id)
        async with translate_db_errors():
            await self.session.delete(member)
            await self.session.flush()
        return member

    async def count_admins(self, channel_id: uuid.UUID) -> int:
        async with translate_db_errors():
            result = await self.session.execute(
                select(func.count())
                .select_from(Member)
                .where(Member.channel_id == channel_id, Member.role == MemberRole.ADMIN.value)
            )
            return result.scalar() or 0
