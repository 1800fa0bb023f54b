"""Job alerts and the recommended-jobs feed.

A user's alerts are OR'ed together; within one alert every criterion
that is set must match:
- keywords: any keyword appears (case-insensitive) in title or description
- job_types: the job's type is one of them
- location: substring of the job's city (case-insensitive)
- min_salary: job.salary_max >= min_salary
- max_salary: job.salary_min <= max_salary
- remote: only remote jobs, when set

Users without alerts get the latest active jobs.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.db.models import Job, JobAlert
from hireboard.services.errors import NotFoundError, PermissionDeniedError

UPDATABLE_FIELDS = {
    "keywords",
    "job_types",
    "location",
    "min_salary",
    "max_salary",
    "remote",
    "frequency",
    "is_active",
}


def alert_condition(alert: JobAlert):
    """SQL condition for one alert, or None when the alert sets no criteria."""
    clauses = []
    keywords = [k for k in (alert.keywords or []) if k]
    if keywords:
        clauses.append(
            or_(
                *[Job.title.ilike(f"%{k}%") for k in keywords],
                *[Job.description.ilike(f"%{k}%") for k in keywords],
            )
        )
    if alert.job_types:
        clauses.append(Job.job_type.in_(alert.job_types))
    if alert.location:
        clauses.append(Job.location_city.ilike(f"%{alert.location}%"))
    if alert.min_salary is not None:
        clauses.append(Job.salary_max >= alert.min_salary)
    if alert.max_salary is not None:
        clauses.append(Job.salary_min <= alert.max_salary)
    if alert.remote:
        clauses.append(Job.remote.is_(True))
    if not clauses:
        return None
    return and_(*clauses)


class AlertService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_alert(self, user_id: uuid.UUID, **fields: Any) -> JobAlert:
        alert = JobAlert(user_id=user_id, **fields)
        self.db.add(alert)
        await self.db.commit()
        await self.db.refresh(alert)
        return alert

    async def list_alerts(self, user_id: uuid.UUID) -> list[JobAlert]:
        result = await self.db.execute(
            select(JobAlert)
            .where(JobAlert.user_id == user_id)
            .order_by(JobAlert.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_alert(
        self, alert_id: uuid.UUID, user_id: uuid.UUID, changes: dict[str, Any]
    ) -> JobAlert:
        alert = await self._get_owned(alert_id, user_id)
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(alert, key, value)
        await self.db.commit()
        await self.db.refresh(alert)
        return alert

    async def delete_alert(self, alert_id: uuid.UUID, user_id: uuid.UUID) -> None:
        alert = await self._get_owned(alert_id, user_id)
        await self.db.delete(alert)
        await self.db.commit()

    async def recommended_jobs(
        self,
        user_id: uuid.UUID,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Job], int]:
        """Active jobs matching any of the user's active alerts, newest first."""
        alerts = [a for a in await self.list_alerts(user_id) if a.is_active]

        conditions = [Job.is_active.is_(True)]
        if alerts:
            per_alert = [alert_condition(a) for a in alerts]
            # An alert with no criteria matches everything.
            if all(c is not None for c in per_alert):
                conditions.append(or_(*per_alert))

        result = await self.db.execute(
            select(Job).where(*conditions).order_by(Job.created_at.desc())
        )
        jobs = list(result.scalars().all())
        return jobs[offset:offset + limit], len(jobs)

    async def _get_owned(self, alert_id: uuid.UUID, user_id: uuid.UUID) -> JobAlert:
        alert: Optional[JobAlert] = await self.db.get(JobAlert, alert_id)
        if not alert:
            raise NotFoundError("Alert not found")
        if alert.user_id != user_id:
            raise PermissionDeniedError("Not authorized")
        return alert
