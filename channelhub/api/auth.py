"""
Authentication endpoints.

- Registration with identifier/secret
- Login: issues an opaque session token (cookie + response body)
- Logout: deletes the session server-side and clears cookies
- Me: the user behind the current session
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from channelhub.core.auth import extract_credential, get_current_user
from channelhub.core.config import get_settings
from channelhub.core.database import get_session
from channelhub.core.security import generate_csrf_token
from channelhub.models.user import User
from channelhub.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from channelhub.services import sessions as session_service

log = structlog.get_logger()
router = APIRouter()


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, identifier=user.identifier, created_at=user.created_at)


def _set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session token and CSRF cookies on a response."""
    settings = get_settings()
    max_age = settings.session_expire_minutes * 60
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=not settings.debug,  # allow non-HTTPS in dev
        samesite="lax",
        path="/",
        max_age=max_age,
    )
    response.set_cookie(
        key=settings.csrf_cookie_name,
        value=csrf,
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=max_age,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a new user. Does not log in."""
    user = await session_service.register(body.identifier, body.secret, session)
    return _user_response(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with identifier/secret and receive a session."""
    user, record, token = await session_service.login(body.identifier, body.secret, session)
    _set_session_cookies(response, token, generate_csrf_token())
    return LoginResponse(user=_user_response(user), token=token, expires_at=record.expires_at)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Invalidate the current session, if any."""
    settings = get_settings()
    token = extract_credential(request)
    if token:
        await session_service.logout(token, session)

    response.delete_cookie(settings.session_cookie_name, path="/")
    response.delete_cookie(settings.csrf_cookie_name, path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return _user_response(user)
