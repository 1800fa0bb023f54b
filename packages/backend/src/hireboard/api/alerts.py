"""Job alert API routes — CRUD plus the recommended-jobs feed.

All routes act on the caller's own alerts; touching someone else's
alert is a 403.
"""

import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.auth.dependencies import CurrentIdentity, get_current_user
from hireboard.db.engine import get_db
from hireboard.schemas.alert import AlertCreate, AlertRead, AlertUpdate
from hireboard.schemas.job import JobPage
from hireboard.services.alert_service import AlertService
from hireboard.services.errors import HireboardError

router = APIRouter(prefix="/alerts")


def _alert_svc(db: AsyncSession = Depends(get_db)) -> AlertService:
    return AlertService(db)


@router.post("", response_model=AlertRead, status_code=201)
async def create_alert(
    body: AlertCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AlertService = Depends(_alert_svc),
):
    return await svc.create_alert(identity.id, **body.model_dump())


@router.get("", response_model=list[AlertRead])
async def list_alerts(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AlertService = Depends(_alert_svc),
):
    return await svc.list_alerts(identity.id)


@router.get("/recommended", response_model=JobPage)
async def recommended_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AlertService = Depends(_alert_svc),
):
    """Active jobs matching any of the caller's alerts (latest jobs if none)."""
    jobs, total = await svc.recommended_jobs(
        identity.id, limit=limit, offset=(page - 1) * limit
    )
    return {
        "jobs": jobs,
        "total": total,
        "pages": math.ceil(total / limit),
        "current_page": page,
    }


@router.patch("/{alert_id}", response_model=AlertRead)
async def update_alert(
    alert_id: uuid.UUID,
    body: AlertUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AlertService = Depends(_alert_svc),
):
    try:
        return await svc.update_alert(
            alert_id, identity.id, body.model_dump(exclude_unset=True)
        )
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AlertService = Depends(_alert_svc),
):
    try:
        await svc.delete_alert(alert_id, identity.id)
    except HireboardError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"deleted": True}
