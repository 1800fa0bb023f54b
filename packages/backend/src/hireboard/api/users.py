"""User routes — own profile, public lookup, admin management.

- GET    /users/me → own profile
- PATCH  /users/me → edit own profile
- GET    /users → paginated list, optional role filter (admins)
- GET    /users/:id → one user
- DELETE /users/:id → delete a user and what they own (admins)
"""

import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.auth.dependencies import CurrentIdentity, get_current_user, require_roles
from hireboard.db.engine import get_db
from hireboard.schemas.user import UserPage, UserRead, UserUpdate
from hireboard.services.errors import HireboardError
from hireboard.services.user_service import UserService

router = APIRouter(prefix="/users")


def _user_svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/me", response_model=UserRead)
async def get_my_profile(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    try:
        return await svc.get_user(identity.id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/me", response_model=UserRead)
async def update_my_profile(
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Partially update the caller's profile."""
    try:
        return await svc.update_profile(identity.id, body.model_dump(exclude_unset=True))
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=UserPage)
async def list_users(
    role: Optional[str] = Query(None, pattern=r"^(jobSeeker|employer|admin)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: CurrentIdentity = Depends(require_roles("admin")),
    svc: UserService = Depends(_user_svc),
):
    users, total = await svc.list_users(role=role, limit=limit, offset=(page - 1) * limit)
    return {
        "users": users,
        "total": total,
        "pages": math.ceil(total / limit),
        "current_page": page,
    }


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: uuid.UUID,
    svc: UserService = Depends(_user_svc),
):
    try:
        return await svc.get_user(user_id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_roles("admin")),
    svc: UserService = Depends(_user_svc),
):
    try:
        await svc.delete_user(user_id, actor_id=identity.id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"deleted": True}
