"""JWT token creation and verification.

- Access token: short-lived (15 min), sent as a Bearer header
- Refresh token: long-lived (7 days), exchanged for a new pair

Both carry the user id in "sub"; the access token also carries the role
so role checks don't need a database round-trip.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from hireboard.config import settings


class TokenError(Exception):
    """Raised when token verification fails."""


def create_access_token(
    user_id: str,
    role: str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a JWT access token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "exp": now + timedelta(
            minutes=expires_minutes or settings.access_token_expire_minutes
        ),
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_refresh_token(
    user_id: str,
    expires_days: Optional[int] = None,
    version: int = 0,
) -> str:
    """Create a JWT refresh token.

    `version` is the user's token_version at issue time; the refresh
    endpoint refuses tokens whose version is behind the stored one.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "type": "refresh",
        "ver": version,
        "exp": now + timedelta(days=expires_days or settings.refresh_token_expire_days),
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = "access") -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure or when the token type doesn't match.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if payload.get("type") != expected_type:
        raise TokenError(f"Expected a {expected_type} token")
    return payload
