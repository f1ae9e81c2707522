"""
Channel service: business logic for channel and membership lifecycle.

Every function here runs inside the caller's database transaction (one per
request). Multi-row operations therefore commit or roll back as a whole:
create_channel never leaves a channel without its admin row behind.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from channelhub.core.errors import Conflict, DataNotFound, map_store_errors
from channelhub.core.permissions import Action, authorize
from channelhub.models.channel import Channel
from channelhub.models.member import Member, MemberRole
from channelhub.models.user import User
from channelhub.schemas.channels import ChannelCreateRequest, ChannelPatchRequest
from channelhub.store import ChannelStore, UserStore

log = structlog.get_logger()

CHANNEL_NOT_FOUND = "Channel not found"
MEMBER_NOT_FOUND = "Member not found"
NAME_TAKEN = "Channel name already taken"
LAST_ADMIN = "Channel must keep at least one administrator"
ALREADY_MEMBER = "User is already a member of this channel"


async def list_channels(user: User, session: AsyncSession) -> list[tuple[Channel, str]]:
    """Channels the user belongs to, with the user's role in each."""
    with map_store_errors():
        return await ChannelStore(session).list_user_channels(user.id)


async def create_channel(
    user: User, req: ChannelCreateRequest, session: AsyncSession
) -> Channel:
    """Create a channel and make the creator its administrator."""
    store = ChannelStore(session)
    with map_store_errors(already_exists=NAME_TAKEN):
        channel = await store.insert_channel(req.name, req.description)
        await store.insert_member(channel.id, user.id, MemberRole.ADMIN)

    log.info("channel.created", channel_id=str(channel.id), name=channel.name, creator=str(user.id))
    return channel


async def get_channel(user: User, channel_id: uuid.UUID, session: AsyncSession) -> Channel:
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.GET_CHANNEL)
    with map_store_errors(not_found=CHANNEL_NOT_FOUND):
        return await store.get_channel(channel_id)


async def patch_channel(
    user: User,
    channel_id: uuid.UUID,
    req: ChannelPatchRequest,
    session: AsyncSession,
) -> Channel:
    """Apply the fields present in ``req`` (Admin only)."""
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.PATCH_CHANNEL)

    patch = req.model_dump(exclude_unset=True)
    # name is required; an explicit null leaves it unchanged
    if patch.get("name", "") is None:
        del patch["name"]

    with map_store_errors(not_found=CHANNEL_NOT_FOUND, already_exists=NAME_TAKEN):
        channel = await store.patch_channel(channel_id, patch)

    log.info("channel.updated", channel_id=str(channel_id), fields=sorted(patch), by=str(user.id))
    return channel


async def remove_channel(user: User, channel_id: uuid.UUID, session: AsyncSession) -> Channel:
    """Delete a channel and its memberships (Admin only). Returns the removed channel."""
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.REMOVE_CHANNEL)
    with map_store_errors(not_found=CHANNEL_NOT_FOUND):
        channel = await store.remove_channel(channel_id)

    log.info("channel.deleted", channel_id=str(channel_id), by=str(user.id))
    return channel


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def list_members(user: User, channel_id: uuid.UUID, session: AsyncSession) -> list[Member]:
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.GET_MEMBERS)
    with map_store_errors(not_found=CHANNEL_NOT_FOUND):
        return await store.get_members(channel_id)


async def get_member(
    user: User,
    channel_id: uuid.UUID,
    target_user_id: uuid.UUID,
    session: AsyncSession,
) -> Member:
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.GET_MEMBER)
    with map_store_errors(not_found=MEMBER_NOT_FOUND):
        return await store.get_member(channel_id, target_user_id)


async def add_member(
    user: User,
    channel_id: uuid.UUID,
    target_user_id: uuid.UUID,
    role: MemberRole,
    session: AsyncSession,
) -> Member:
    """Add an existing user to the channel (Admin only)."""
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.ADD_MEMBER)

    with map_store_errors(not_found="User not found"):
        await UserStore(session).get_user(target_user_id)

    with map_store_errors(already_exists=ALREADY_MEMBER):
        try:
            await store.get_member(channel_id, target_user_id)
        except DataNotFound:
            pass
        else:
            raise Conflict(ALREADY_MEMBER)
        # A concurrent add surfaces here as a primary key violation.
        member = await store.insert_member(channel_id, target_user_id, role)

    log.info(
        "member.added",
        channel_id=str(channel_id),
        user_id=str(target_user_id),
        role=role.value,
        by=str(user.id),
    )
    return member


async def update_member_role(
    user: User,
    channel_id: uuid.UUID,
    target_user_id: uuid.UUID,
    role: MemberRole,
    session: AsyncSession,
) -> Member:
    """Change a member's role (Admin only). The last admin cannot be demoted."""
    store = ChannelStore(session)
    await authorize(store, user, channel_id, Action.UPDATE_MEMBER_ROLE)

    with map_store_errors(not_found=MEMBER_NOT_FOUND):
        member = await store.get_member(channel_id, target_user_id)
        if member.role == MemberRole.ADMIN.value and role != MemberRole.ADMIN:
            await _ensure_not_last_admin(store, channel_id)
        member = await store.update_member_role(channel_id, target_user_id, role)

    log.info(
        "member.role_changed",
        channel_id=str(channel_id),
        user_id=str(target_user_id),
        role=role.value,
        by=str(user.id),
    )
    return member


async def remove_member(
    user: User,
    channel_id: uuid.UUID,
    target_user_id: uuid.UUID,
    session: AsyncSession,
) -> Member:
    """Remove a member. Admins may remove anyone; any member may leave."""
    store = ChannelStore(session)
    action = Action.LEAVE_CHANNEL if target_user_id == user.id else Action.REMOVE_MEMBER
    await authorize(store, user, channel_id, action)

    with map_store_errors(not_found=MEMBER_NOT_FOUND):
        member = await store.get_member(channel_id, target_user_id)
        if member.role == MemberRole.ADMIN.value:
            await _ensure_not_last_admin(store, channel_id)
        member = await store.remove_member(channel_id, target_user_id)

    log.info(
        "member.removed",
        channel_id=str(channel_id),
        user_id=str(target_user_id),
        by=str(user.id),
    )
    return member


async def _ensure_not_last_admin(store: ChannelStore, channel_id: uuid.UUID) -> None:
    if await store.count_admins(channel_id) <= 1:
        raise Conflict(LAST_ADMIN)
