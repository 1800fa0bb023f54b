"""FastAPI auth dependencies.

Used as Depends() in route handlers to extract and validate the
identity behind the request's Bearer token, and to gate routes by role.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException

from hireboard.auth.jwt import TokenError, verify_token


class CurrentIdentity:
    """The authenticated user making the request.

    Built from the access token alone; handlers that need the full user
    row load it themselves.
    """

    def __init__(self, user_id: str, role: str = "jobSeeker"):
        self.user_id = user_id
        self.role = role

    @property
    def id(self) -> uuid.UUID:
        return uuid.UUID(self.user_id)

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
) -> Optional[CurrentIdentity]:
    """Soft auth: the identity if a Bearer token is present, else None."""
    if authorization and authorization.startswith("Bearer "):
        return _authenticate_jwt(authorization[7:])
    return None


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Hard auth: 401 when there is no valid token."""
    if not identity:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_roles(*roles: str):
    """Dependency factory: 403 unless the caller has one of `roles`.

    Usage: `identity: CurrentIdentity = Depends(require_roles("employer"))`
    """

    async def _check(
        identity: CurrentIdentity = Depends(get_current_user),
    ) -> CurrentIdentity:
        if not identity.has_role(*roles):
            raise HTTPException(
                status_code=403,
                detail=f"Role '{identity.role}' is not authorized for this action",
            )
        return identity

    return _check


def _authenticate_jwt(token: str) -> CurrentIdentity:
    try:
        payload = verify_token(token)
    except TokenError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token subject")
    return CurrentIdentity(
        user_id=payload["sub"],
        role=payload.get("role", "jobSeeker"),
    )
