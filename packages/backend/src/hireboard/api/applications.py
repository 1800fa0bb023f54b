"""Application API routes.

Routes translate HTTP to ApplicationService calls and map service
errors to status codes. Email and live push happen inside the service,
after the write commits, and never change the response.

- POST /jobs/:id/applications → apply (job seekers)
- GET  /jobs/:id/applications → applicants for a job (its employer)
- GET  /applications → my applications (job seekers)
- GET  /applications/stats → counts by status/day (employers, admins)
- GET  /applications/:id → one application (applicant or job owner)
- POST /applications/:id/status|notes|rating|interviews → job owner only
"""

import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.auth.dependencies import CurrentIdentity, get_current_user, require_roles
from hireboard.db.engine import get_db
from hireboard.realtime.notifier import Notifier, get_notifier
from hireboard.schemas.application import (
    STATUS_PATTERN,
    ApplicationCreate,
    ApplicationPage,
    ApplicationRead,
    ApplicationStats,
    InterviewCreate,
    NoteCreate,
    RatingChange,
    StatusChange,
)
from hireboard.services.application_service import ApplicationService
from hireboard.services.email import Mailer, get_mailer
from hireboard.services.errors import HireboardError

router = APIRouter()


def _app_svc(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    mailer: Mailer = Depends(get_mailer),
) -> ApplicationService:
    return ApplicationService(db, notifier, mailer)


def _page(applications, total: int, page: int, limit: int) -> dict:
    return {
        "applications": applications,
        "total": total,
        "pages": math.ceil(total / limit),
        "current_page": page,
    }


# ═══════════════════════════════════════════════════════════
# Per-job
# ═══════════════════════════════════════════════════════════


@router.post(
    "/jobs/{job_id}/applications",
    response_model=ApplicationRead,
    status_code=201,
)
async def apply_for_job(
    job_id: uuid.UUID,
    body: ApplicationCreate,
    identity: CurrentIdentity = Depends(require_roles("jobSeeker")),
    svc: ApplicationService = Depends(_app_svc),
):
    """Apply to a job. One application per job per seeker (400 on repeat)."""
    try:
        return await svc.apply(
            job_id=job_id,
            applicant_id=identity.id,
            cover_letter=body.cover_letter,
            resume_file_name=body.resume_file_name,
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/jobs/{job_id}/applications", response_model=ApplicationPage)
async def list_job_applicants(
    job_id: uuid.UUID,
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: ApplicationService = Depends(_app_svc),
):
    """Applicants for a job the caller owns."""
    try:
        applications, total = await svc.list_for_job(
            job_id,
            owner_id=identity.id,
            status=status,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return _page(applications, total, page, limit)


# ═══════════════════════════════════════════════════════════
# Applications
# ═══════════════════════════════════════════════════════════


@router.get("/applications", response_model=ApplicationPage)
async def list_my_applications(
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: CurrentIdentity = Depends(require_roles("jobSeeker")),
    svc: ApplicationService = Depends(_app_svc),
):
    """The caller's own applications, newest first."""
    applications, total = await svc.list_for_applicant(
        identity.id,
        status=status,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return _page(applications, total, page, limit)


@router.get("/applications/stats", response_model=ApplicationStats)
async def application_stats(
    identity: CurrentIdentity = Depends(require_roles("admin", "employer")),
    svc: ApplicationService = Depends(_app_svc),
):
    return await svc.stats()


@router.get("/applications/{application_id}", response_model=ApplicationRead)
async def get_application(
    application_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ApplicationService = Depends(_app_svc),
):
    try:
        return await svc.get_for_viewer(application_id, viewer_id=identity.id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/applications/{application_id}/status", response_model=ApplicationRead)
async def change_application_status(
    application_id: uuid.UUID,
    body: StatusChange,
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: ApplicationService = Depends(_app_svc),
):
    """Change an application's status. Only the job's owner may do this.

    Returns 409 in strict mode when the move isn't in the transition
    table; in the default permissive mode any known status is accepted.
    """
    try:
        return await svc.update_status(
            application_id,
            actor_id=identity.id,
            new_status=body.status,
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/applications/{application_id}/notes", response_model=ApplicationRead)
async def add_application_note(
    application_id: uuid.UUID,
    body: NoteCreate,
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: ApplicationService = Depends(_app_svc),
):
    try:
        return await svc.add_note(application_id, actor_id=identity.id, text=body.text)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/applications/{application_id}/rating", response_model=ApplicationRead)
async def rate_application(
    application_id: uuid.UUID,
    body: RatingChange,
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: ApplicationService = Depends(_app_svc),
):
    try:
        return await svc.set_rating(application_id, actor_id=identity.id, rating=body.rating)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post(
    "/applications/{application_id}/interviews",
    response_model=ApplicationRead,
    status_code=201,
)
async def record_interview(
    application_id: uuid.UUID,
    body: InterviewCreate,
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: ApplicationService = Depends(_app_svc),
):
    try:
        return await svc.add_interview(
            application_id,
            actor_id=identity.id,
            date=body.date,
            interviewer_id=body.interviewer_id,
            feedback=body.feedback,
            score=body.score,
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
