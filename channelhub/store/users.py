"""
Credential and session storage.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from channelhub.core.errors import DataNotFound
from channelhub.models.session import UserSession
from channelhub.models.user import User

from ._errors import translate_db_errors


class UserStore:
    """Users and their login sessions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Users ---

    async def get_user(self, user_id: uuid.UUID) -> User:
        async with translate_db_errors():
            result = await self.session.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        if not user:
            raise DataNotFound(f"user {user_id}")
        return user

    async def find_user_by_identifier(self, identifier: str) -> Optional[User]:
        async with translate_db_errors():
            result = await self.session.execute(
                select(User).where(User.identifier == identifier)
            )
            return result.scalar_one_or_none()

    async def insert_user(self, identifier: str, secret_digest: str) -> User:
        user = User(identifier=identifier, secret_digest=secret_digest)
        async with translate_db_errors():
            self.session.add(user)
            await self.session.flush()
        return user

    # --- Sessions ---

    async def insert_session(
        self, token_digest: str, user_id: uuid.UUID, expires_at: datetime
    ) -> UserSession:
        record = UserSession(token_digest=token_digest, user_id=user_id, expires_at=expires_at)
        async with translate_db_errors():
            self.session.add(record)
            await self.session.flush()
        return record

    async def get_session(self, token_digest: str) -> UserSession:
        async with translate_db_errors():
            result = await self.session.execute(
                select(UserSession).where(UserSession.token_digest == token_digest)
            )
            record = result.scalar_one_or_none()
        if not record:
            raise DataNotFound("session")
        return record

    async def delete_session(self, token_digest: str) -> bool:
        """Delete a session. Returns False if there was nothing to delete."""
        async with translate_db_errors():
            result = await self.session.execute(
                select(UserSession).where(UserSession.token_digest == token_digest)
            )
            record = result.scalar_one_or_none()
            if not record:
                return False
            await self.session.delete(record)
            await self.session.flush()
        return True

    async def delete_expired_sessions(self, now: datetime) -> int:
        async with translate_db_errors():
            result = await self.session.execute(
                select(UserSession.token_digest).where(UserSession.expires_at <= now)
            )
            digests = list(result.scalars().all())
            if digests:
                await self.session.execute(
                    delete(UserSession)
                    .where(UserSession.token_digest.in_(digests))
                    .execution_options(synchronize_session="fetch")
                )
        return len(digests)
