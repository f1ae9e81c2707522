"""Registration, login and identity schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, UUID4, field_validator

from channelhub.core.security import MAX_SECRET_BYTES, secret_fits


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    identifier: str = Field(min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.@-]+$")
    secret: str = Field(min_length=8, max_length=MAX_SECRET_BYTES)

    @field_validator("secret")
    @classmethod
    def secret_within_bcrypt_limit(cls, v: str) -> str:
        if not secret_fits(v):
            raise ValueError(f"secret must be at most {MAX_SECRET_BYTES} bytes when UTF-8 encoded")
        return v


class LoginRequest(BaseModel):
    identifier: str
    secret: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: UUID4
    identifier: str
    created_at: datetime


class LoginResponse(BaseModel):
    """Returned at login. ``token`` is also set as the session cookie."""
    user: UserResponse
    token: str
    expires_at: datetime
