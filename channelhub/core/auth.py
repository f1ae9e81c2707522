"""
Identity guard.

Every protected route depends on ``get_current_user``. It only extracts the
raw credential from the request; ``authenticate`` does the actual work and is
framework-free so it can be called from anywhere a credential arrives.

Credential sources, in order:
- ``Authorization: Bearer <token>`` header (API clients)
- session cookie (browsers)
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from channelhub.core.config import get_settings
from channelhub.core.database import get_session
from channelhub.core.errors import Unauthorized
from channelhub.models.user import User
from channelhub.services import sessions as session_service


def extract_credential(request: Request) -> Optional[str]:
    """Return the raw session token carried by the request, if any."""
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(get_settings().session_cookie_name) or None


async def authenticate(raw_credential: Optional[str], session: AsyncSession) -> User:
    """Turn a raw session token into a stored User, or raise Unauthorized."""
    if not raw_credential or not raw_credential.strip():
        raise Unauthorized("Authentication required")
    return await session_service.resolve(raw_credential.strip(), session)


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> User:
    """Main authentication dependency."""
    return await authenticate(extract_credential(request), session)
