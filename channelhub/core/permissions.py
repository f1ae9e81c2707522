"""
Channel authorization.

``authorize`` answers "may this user perform this action on this channel?"
from the membership row fetched fresh on every call. Order matters:

1. No membership -> NotFound ("Channel not found"), even for admin-only
   actions, so outsiders cannot probe which channels exist.
2. Membership present but role lacks the action -> Forbidden.

``is_permitted`` is the only place roles are compared with actions.
"""

from __future__ import annotations

import uuid
from enum import Enum

import structlog

from channelhub.core.errors import DataNotFound, Forbidden, NotFound, map_store_errors
from channelhub.models.member import MemberRole
from channelhub.models.user import User
from channelhub.store import ChannelStore

log = structlog.get_logger()


class Action(str, Enum):
    GET_CHANNEL = "get_channel"
    GET_MEMBERS = "get_members"
    GET_MEMBER = "get_member"
    LEAVE_CHANNEL = "leave_channel"
    PATCH_CHANNEL = "patch_channel"
    REMOVE_CHANNEL = "remove_channel"
    ADD_MEMBER = "add_member"
    UPDATE_MEMBER_ROLE = "update_member_role"
    REMOVE_MEMBER = "remove_member"


READ_ACTIONS = frozenset({
    Action.GET_CHANNEL,
    Action.GET_MEMBERS,
    Action.GET_MEMBER,
    Action.LEAVE_CHANNEL,
})

ROLE_PERMISSIONS: dict[MemberRole, frozenset[Action]] = {
    MemberRole.ADMIN: frozenset(Action),
    MemberRole.MEMBER: READ_ACTIONS,
}


def is_permitted(role: MemberRole, action: Action) -> bool:
    return action in ROLE_PERMISSIONS.get(role, frozenset())


async def authorize(
    store: ChannelStore,
    user: User,
    channel_id: uuid.UUID,
    action: Action,
) -> MemberRole:
    """Check ``action`` for ``user`` on ``channel_id``. Returns the caller's role."""
    with map_store_errors():
        try:
            member = await store.get_member(channel_id, user.id)
        except DataNotFound:
            raise NotFound("Channel not found") from None

    role = MemberRole(member.role)
    if not is_permitted(role, action):
        log.info(
            "authz.denied",
            user_id=str(user.id),
            channel_id=str(channel_id),
            action=action.value,
            role=role.value,
        )
        raise Forbidden("Administrator access required")
    return role
