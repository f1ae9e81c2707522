"""
Channel and membership endpoints.

GET    /channels                                  List the caller's channels
POST   /channels                                  Create a channel (caller becomes admin)
GET    /channels/{channel_id}                     Get a channel (members)
PATCH  /channels/{channel_id}                     Update name/description (admins)
DELETE /channels/{channel_id}                     Delete a channel (admins)
GET    /channels/{channel_id}/members             List members (members)
POST   /channels/{channel_id}/members             Add a member (admins)
GET    /channels/{channel_id}/members/{user_id}   Get a member (members)
PATCH  /channels/{channel_id}/members/{user_id}   Change a member's role (admins)
DELETE /channels/{channel_id}/members/{user_id}   Remove a member (admins) or leave (self)

Non-members get 404 on every channel route, never 403.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from channelhub.core.auth import get_current_user
from channelhub.core.database import get_session
from channelhub.models.channel import Channel
from channelhub.models.member import Member, MemberRole
from channelhub.models.user import User
from channelhub.schemas.channels import (
    ChannelCreateRequest,
    ChannelListResponse,
    ChannelPatchRequest,
    ChannelResponse,
    ChannelSummary,
    MemberAddRequest,
    MemberListResponse,
    MemberResponse,
    MemberUpdateRequest,
)
from channelhub.services import channels as channel_service

router = APIRouter()


def _channel_response(channel: Channel) -> ChannelResponse:
    return ChannelResponse(
        id=channel.id,
        name=channel.name,
        description=channel.description,
        created_at=channel.created_at,
        updated_at=channel.updated_at,
    )


def _member_response(member: Member) -> MemberResponse:
    return MemberResponse(
        channel_id=member.channel_id,
        user_id=member.user_id,
        role=MemberRole(member.role),
        joined_at=member.joined_at,
    )


# --- Channels ---


@router.get("", response_model=ChannelListResponse)
async def list_channels(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await channel_service.list_channels(user, session)
    return ChannelListResponse(
        data=[
            ChannelSummary(**_channel_response(channel).model_dump(), role=MemberRole(role))
            for channel, role in rows
        ]
    )


@router.post("", response_model=ChannelResponse, status_code=201)
async def create_channel(
    body: ChannelCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    channel = await channel_service.create_channel(user, body, session)
    return _channel_response(channel)


@router.get("/{channel_id}", response_model=ChannelResponse)
async def get_channel(
    channel_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    channel = await channel_service.get_channel(user, channel_id, session)
    return _channel_response(channel)


@router.patch("/{channel_id}", response_model=ChannelResponse)
async def patch_channel(
    channel_id: UUID,
    body: ChannelPatchRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    channel = await channel_service.patch_channel(user, channel_id, body, session)
    return _channel_response(channel)


@router.delete("/{channel_id}", response_model=ChannelResponse)
async def remove_channel(
    channel_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Delete a channel. Responds with the removed channel."""
    channel = await channel_service.remove_channel(user, channel_id, session)
    return _channel_response(channel)


# --- Members ---


@router.get("/{channel_id}/members", response_model=MemberListResponse)
async def list_members(
    channel_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    members = await channel_service.list_members(user, channel_id, session)
    return MemberListResponse(data=[_member_response(m) for m in members])


@router.post("/{channel_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    channel_id: UUID,
    body: MemberAddRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    member = await channel_service.add_member(user, channel_id, body.user_id, body.role, session)
    return _member_response(member)


@router.get("/{channel_id}/members/{user_id}", response_model=MemberResponse)
async def get_member(
    channel_id: UUID,
    user_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    member = await channel_service.get_member(user, channel_id, user_id, session)
    return _member_response(member)


@router.patch("/{channel_id}/members/{user_id}", response_model=MemberResponse)
async def update_member(
    channel_id: UUID,
    user_id: UUID,
    body: MemberUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    member = await channel_service.update_member_role(user, channel_id, user_id, body.role, session)
    return _member_response(member)


@router.delete("/{channel_id}/members/{user_id}", status_code=204)
async def remove_member(
    channel_id: UUID,
    user_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await channel_service.remove_member(user, channel_id, user_id, session)
    return Response(status_code=204)
