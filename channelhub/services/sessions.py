"""
Session issuer: registration, login, session resolution and logout.

Sessions are opaque random tokens. Only their SHA-256 digest is persisted,
together with an absolute expiry that is checked on every resolve.
"""

from __future__ import annotations

from datetime import timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from channelhub.core.config import get_settings
from channelhub.core.errors import (
    Conflict,
    DataNotFound,
    InvalidCredentials,
    Unauthorized,
    map_store_errors,
)
from channelhub.core.security import (
    digest_session_token,
    dummy_secret_digest,
    generate_session_token,
    hash_secret,
    verify_secret,
)
from channelhub.models.base import as_utc, utcnow
from channelhub.models.session import UserSession
from channelhub.models.user import User
from channelhub.store import UserStore

log = structlog.get_logger()


async def register(identifier: str, secret: str, session: AsyncSession) -> User:
    """Create a user. Raises Conflict if the identifier is taken."""
    store = UserStore(session)
    with map_store_errors(already_exists="Identifier already registered"):
        if await store.find_user_by_identifier(identifier):
            log.info("auth.register_conflict", identifier=identifier)
            raise Conflict("Identifier already registered")
        # A concurrent registration surfaces here as a unique violation.
        user = await store.insert_user(identifier, hash_secret(secret))

    log.info("user.registered", user_id=str(user.id), identifier=identifier)
    return user


async def login(
    identifier: str, secret: str, session: AsyncSession
) -> tuple[User, UserSession, str]:
    """Verify credentials and mint a session. Returns (user, session record, plaintext token)."""
    store = UserStore(session)
    with map_store_errors():
        user = await store.find_user_by_identifier(identifier)

    # unknown identifiers still pay for one bcrypt check
    digest = user.secret_digest if user else dummy_secret_digest()
    if not verify_secret(secret, digest) or not user:
        log.warning(
            "auth.login_failure",
            identifier=identifier,
            reason="unknown_identifier" if not user else "bad_secret",
        )
        raise InvalidCredentials()

    token = generate_session_token()
    expires_at = utcnow() + timedelta(minutes=get_settings().session_expire_minutes)
    with map_store_errors():
        record = await store.insert_session(digest_session_token(token), user.id, expires_at)

    log.info("auth.login_success", user_id=str(user.id))
    return user, record, token


async def resolve(token: str, session: AsyncSession) -> User:
    """Resolve a session token to its user.

    Raises Unauthorized if the session is unknown, expired, or its user is gone.
    """
    store = UserStore(session)
    with map_store_errors():
        try:
            record = await store.get_session(digest_session_token(token))
        except DataNotFound:
            raise Unauthorized("Invalid or expired session") from None

    if as_utc(record.expires_at) <= utcnow():
        raise Unauthorized("Invalid or expired session")

    with map_store_errors():
        try:
            return await store.get_user(record.user_id)
        except DataNotFound:
            raise Unauthorized("Invalid or expired session") from None


async def logout(token: str, session: AsyncSession) -> bool:
    """Invalidate a session. Idempotent; returns whether a session was removed."""
    store = UserStore(session)
    with map_store_errors():
        removed = await store.delete_session(digest_session_token(token))
    if removed:
        log.info("auth.logout")
    return removed


async def purge_expired_sessions(session: AsyncSession) -> int:
    """Delete every expired session row. Returns the number removed."""
    store = UserStore(session)
    with map_store_errors():
        count = await store.delete_expired_sessions(utcnow())
    log.info("sessions.purged", count=count)
    return count
