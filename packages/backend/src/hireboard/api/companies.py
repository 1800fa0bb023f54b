"""Company profile and review routes.

- POST  /companies → create the caller's profile (employers)
- GET   /companies/mine → own profile + job counts (employers)
- PATCH /companies/mine → edit own profile (employers)
- GET   /companies/:id → profile + open jobs (profile id or employer id)
- GET   /companies/:id/reviews → reviews + average rating
- POST/PATCH/DELETE /companies/:id/reviews[/:review_id] → signed-in users
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.auth.dependencies import CurrentIdentity, get_current_user, require_roles
from hireboard.db.engine import get_db
from hireboard.schemas.company import (
    CompanyCreate,
    CompanyDetail,
    CompanyRead,
    CompanyUpdate,
    MyCompany,
    ReviewCreate,
    ReviewList,
    ReviewUpdate,
)
from hireboard.services.company_service import CompanyService
from hireboard.services.errors import HireboardError

router = APIRouter(prefix="/companies")


def _company_svc(db: AsyncSession = Depends(get_db)) -> CompanyService:
    return CompanyService(db)


# ─── Profiles ────────────────────────────────────────────


@router.post("", response_model=CompanyRead, status_code=201)
async def create_company(
    body: CompanyCreate,
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: CompanyService = Depends(_company_svc),
):
    try:
        return await svc.create_profile(identity.id, **body.model_dump())
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/mine", response_model=MyCompany)
async def get_my_company(
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: CompanyService = Depends(_company_svc),
):
    try:
        profile, stats = await svc.get_my_profile(identity.id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"profile": profile, "stats": stats}


@router.patch("/mine", response_model=CompanyRead)
async def update_my_company(
    body: CompanyUpdate,
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: CompanyService = Depends(_company_svc),
):
    try:
        return await svc.update_profile(identity.id, body.model_dump(exclude_unset=True))
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{company_id}", response_model=CompanyDetail)
async def get_company(
    company_id: uuid.UUID,
    svc: CompanyService = Depends(_company_svc),
):
    """Public profile. Accepts the profile id or the employer's user id."""
    try:
        profile, jobs = await svc.get_profile(company_id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"profile": profile, "jobs": jobs}


# ─── Reviews ─────────────────────────────────────────────


@router.get("/{company_id}/reviews", response_model=ReviewList)
async def list_reviews(
    company_id: uuid.UUID,
    svc: CompanyService = Depends(_company_svc),
):
    try:
        reviews, ratings = await svc.list_reviews(company_id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"reviews": reviews, "ratings": ratings}


@router.post("/{company_id}/reviews", response_model=CompanyRead, status_code=201)
async def add_review(
    company_id: uuid.UUID,
    body: ReviewCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CompanyService = Depends(_company_svc),
):
    """One review per user per company; employers can't review themselves."""
    try:
        return await svc.add_review(
            company_id,
            reviewer_id=identity.id,
            rating=body.rating,
            title=body.title,
            comment=body.comment,
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{company_id}/reviews/{review_id}", response_model=CompanyRead)
async def update_review(
    company_id: uuid.UUID,
    review_id: uuid.UUID,
    body: ReviewUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CompanyService = Depends(_company_svc),
):
    try:
        return await svc.update_review(
            company_id, review_id, identity.id, body.model_dump(exclude_unset=True)
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{company_id}/reviews/{review_id}", response_model=CompanyRead)
async def delete_review(
    company_id: uuid.UUID,
    review_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CompanyService = Depends(_company_svc),
):
    try:
        return await svc.delete_review(company_id, review_id, identity.id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
