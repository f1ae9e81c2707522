"""
Credential primitives: secret hashing, session tokens, CSRF tokens.
"""

from __future__ import annotations

import hashlib
import secrets
from functools import lru_cache

import bcrypt

from channelhub.core.config import get_settings

# bcrypt only reads the first 72 bytes of its input
MAX_SECRET_BYTES = 72


def secret_fits(secret: str) -> bool:
    return len(secret.encode()) <= MAX_SECRET_BYTES


def hash_secret(secret: str) -> str:
    """Hash a secret using bcrypt with the configured cost factor.

    Raises ValueError for secrets longer than ``MAX_SECRET_BYTES`` when encoded.
    """
    if not secret_fits(secret):
        raise ValueError(f"secret exceeds {MAX_SECRET_BYTES} bytes")
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(secret.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_secret(secret: str, digest: str) -> bool:
    """Verify a secret against a bcrypt hash. Malformed hashes and overlong secrets never verify."""
    if not secret_fits(secret):
        return False
    try:
        return bcrypt.checkpw(secret.encode(), digest.encode())
    except ValueError:
        return False


@lru_cache
def dummy_secret_digest() -> str:
    """A digest no caller knows the secret for. Login verifies against it when
    the identifier is unknown, so both failure paths cost one bcrypt check."""
    return hash_secret(secrets.token_urlsafe(32))


def generate_session_token() -> str:
    """Generate an opaque, URL-safe session token (256 bits of randomness)."""
    return secrets.token_urlsafe(32)


def digest_session_token(token: str) -> str:
    """SHA-256 hex digest of a session token; this is what gets stored."""
    return hashlib.sha256(token.encode()).hexdigest()


def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)
