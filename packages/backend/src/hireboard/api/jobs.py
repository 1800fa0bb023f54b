"""Job API routes.

Listing and viewing jobs is public; creating, editing and deactivating
require an employer (or admin) token. Ownership is checked in the
service layer. Job seekers bookmark jobs through /jobs/:id/save.
"""

import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.auth.dependencies import CurrentIdentity, get_current_user, require_roles
from hireboard.db.engine import get_db
from hireboard.schemas.job import JobCreate, JobPage, JobRead, JobStats, JobUpdate
from hireboard.services.errors import HireboardError
from hireboard.services.job_service import JobService

router = APIRouter(prefix="/jobs")


def _job_svc(db: AsyncSession = Depends(get_db)) -> JobService:
    return JobService(db)


@router.post("", response_model=JobRead, status_code=201)
async def create_job(
    body: JobCreate,
    identity: CurrentIdentity = Depends(require_roles("employer", "admin")),
    svc: JobService = Depends(_job_svc),
):
    """Post a new job owned by the calling employer."""
    return await svc.create_job(company_id=identity.id, **body.model_dump())


@router.get("", response_model=JobPage)
async def list_jobs(
    search: Optional[str] = Query(None, description="Match title or description"),
    job_type: Optional[str] = Query(None),
    location: Optional[str] = Query(None, description="Match city"),
    remote: Optional[bool] = Query(None),
    min_salary: Optional[float] = Query(None, ge=0),
    max_salary: Optional[float] = Query(None, ge=0),
    tag: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    svc: JobService = Depends(_job_svc),
):
    """Search active jobs, newest first."""
    jobs, total = await svc.search_jobs(
        search=search,
        job_type=job_type,
        location=location,
        remote=remote,
        min_salary=min_salary,
        max_salary=max_salary,
        tag=tag,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return {
        "jobs": jobs,
        "total": total,
        "pages": math.ceil(total / limit),
        "current_page": page,
    }


@router.get("/mine", response_model=list[JobRead])
async def list_my_jobs(
    identity: CurrentIdentity = Depends(require_roles("employer")),
    svc: JobService = Depends(_job_svc),
):
    """Every job the calling employer posted, active or not."""
    return await svc.list_employer_jobs(identity.id)


@router.get("/stats", response_model=JobStats)
async def job_stats(svc: JobService = Depends(_job_svc)):
    """Posting counts and mean minimum salary per job type."""
    return {"stats": await svc.stats()}


@router.get("/saved", response_model=JobPage)
async def list_saved_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: JobService = Depends(_job_svc),
):
    """The caller's bookmarked jobs, most recently saved first."""
    jobs, total = await svc.list_saved_jobs(
        identity.id, limit=limit, offset=(page - 1) * limit
    )
    return {
        "jobs": jobs,
        "total": total,
        "pages": math.ceil(total / limit),
        "current_page": page,
    }


@router.get("/{job_id}", response_model=JobRead)
async def get_job(
    job_id: uuid.UUID,
    svc: JobService = Depends(_job_svc),
):
    """Get a single job. Counts as a view."""
    try:
        return await svc.view_job(job_id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{job_id}", response_model=JobRead)
async def update_job(
    job_id: uuid.UUID,
    body: JobUpdate,
    identity: CurrentIdentity = Depends(require_roles("employer", "admin")),
    svc: JobService = Depends(_job_svc),
):
    """Partially update a job (owner or admin)."""
    try:
        return await svc.update_job(
            job_id,
            actor_id=identity.id,
            actor_role=identity.role,
            changes=body.model_dump(exclude_unset=True),
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{job_id}")
async def delete_job(
    job_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_roles("employer", "admin")),
    svc: JobService = Depends(_job_svc),
):
    """Deactivate a job. Existing applications keep their reference."""
    try:
        await svc.delete_job(job_id, actor_id=identity.id, actor_role=identity.role)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"deleted": True}


@router.post("/{job_id}/save")
async def save_job(
    job_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_roles("jobSeeker")),
    svc: JobService = Depends(_job_svc),
):
    """Bookmark a job."""
    try:
        await svc.save_job(identity.id, job_id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"saved": True}


@router.delete("/{job_id}/save")
async def unsave_job(
    job_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_roles("jobSeeker")),
    svc: JobService = Depends(_job_svc),
):
    """Remove a bookmark."""
    try:
        await svc.unsave_job(identity.id, job_id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"saved": False}
