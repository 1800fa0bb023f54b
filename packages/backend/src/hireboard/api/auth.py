"""Auth API — registration, login, token refresh, current user.

- POST /auth/register → create account, returns tokens + user
- POST /auth/login → email/password → tokens + user
- POST /auth/refresh → refresh token → new token pair
- POST /auth/logout → revoke outstanding refresh tokens
- POST /auth/forgot-password → email a one-time reset link
- POST /auth/reset-password → reset token + new password
- GET /auth/me → current user profile
"""

import hashlib
import secrets
import uuid
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.auth.dependencies import CurrentIdentity, get_current_user
from hireboard.auth.jwt import (
    TokenError,
    create_access_token,
    create_refresh_token,
    verify_token,
)
from hireboard.auth.password import hash_password, verify_password
from hireboard.config import settings
from hireboard.db.engine import get_db
from hireboard.db.models import User, utcnow
from hireboard.schemas.user import UserRead
from hireboard.services.email import (
    Mailer,
    get_mailer,
    password_reset_email,
    welcome_email,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)
    # Admins are provisioned out of band, never self-registered.
    role: str = Field(default="jobSeeker", pattern=r"^(jobSeeker|employer)$")
    company_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenResponse):
    user: UserRead


def _tokens_for(user: User) -> dict:
    return {
        "access_token": create_access_token(str(user.id), user.role),
        "refresh_token": create_refresh_token(str(user.id), version=user.token_version),
    }


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Create a new user account and log it in."""
    result = await db.execute(select(User).where(User.email == body.email))
    if result.scalars().first():
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role,
        company_name=body.company_name,
        skills=[],
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("user.registered", user_id=str(user.id), role=user.role)

    subject, html = welcome_email(user.name)
    try:
        mailer.dispatch(user.email, subject, html)
    except Exception:
        logger.exception("email.dispatch_failed", to=user.email)

    return {**_tokens_for(user), "user": user}


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password → JWT tokens."""
    result = await db.execute(
        select(User).where(User.email == body.email.strip().lower())
    )
    user = result.scalars().first()

    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {**_tokens_for(user), "user": user}


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new token pair.

    The role is re-read from the database so a role change takes effect
    on the next refresh.
    """
    try:
        payload = verify_token(body.refresh_token, expected_type="refresh")
    except TokenError as e:
        raise HTTPException(status_code=401, detail=str(e))

    user = await db.get(User, uuid.UUID(payload["sub"]))
    if not user:
        raise HTTPException(status_code=401, detail="User no longer exists")
    if payload.get("ver", 0) != user.token_version:
        raise HTTPException(status_code=401, detail="Refresh token has been revoked")
    return _tokens_for(user)


# ─── Logout ─────────────────────────────────────────────


@router.post("/logout")
async def logout(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Revoke every refresh token issued so far.

    Access tokens are stateless and stay valid until they expire.
    """
    user = await db.get(User, identity.id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user.token_version += 1
    await db.commit()
    logger.info("user.logged_out", user_id=identity.user_id)
    return {"logged_out": True}


# ─── Password reset ─────────────────────────────────────


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Email a one-time reset link. Answers the same for unknown emails."""
    result = await db.execute(
        select(User).where(User.email == body.email.strip().lower())
    )
    user = result.scalars().first()
    if user:
        token = secrets.token_hex(20)
        user.password_reset_token_hash = _hash_reset_token(token)
        user.password_reset_expires = utcnow() + timedelta(
            minutes=settings.password_reset_expire_minutes
        )
        await db.commit()

        subject, html = password_reset_email(
            f"{settings.client_url}/reset-password/{token}",
            settings.password_reset_expire_minutes,
        )
        try:
            mailer.dispatch(user.email, subject, html)
        except Exception:
            logger.exception("email.dispatch_failed", to=user.email)
        logger.info("user.password_reset_requested", user_id=str(user.id))

    return {"message": "If that email is registered, a reset link has been sent"}


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    """Set a new password with a reset token. The token works once."""
    result = await db.execute(
        select(User).where(
            User.password_reset_token_hash == _hash_reset_token(body.token),
            User.password_reset_expires > utcnow(),
        )
    )
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user.password_hash = hash_password(body.new_password)
    user.password_reset_token_hash = None
    user.password_reset_expires = None
    user.token_version += 1
    await db.commit()
    logger.info("user.password_reset", user_id=str(user.id))
    return {"reset": True}


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's profile."""
    user = await db.get(User, uuid.UUID(identity.user_id))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
