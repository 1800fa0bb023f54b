"""Job service — CRUD and search over job postings.

Ownership rule: the employer who created a job (Job.company_id) may
update or deactivate it; admins may too. Deleting is a soft delete
(is_active=False) because applications keep pointing at the job.

Seekers can bookmark jobs (one bookmark per user and job). Bookmarks
survive the job being closed.
"""

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.db.models import Job, SavedJob
from hireboard.services.errors import (
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = structlog.get_logger()

UPDATABLE_FIELDS = {
    "title",
    "description",
    "responsibilities",
    "qualifications",
    "job_type",
    "location_city",
    "location_country",
    "salary_min",
    "salary_max",
    "currency",
    "remote",
    "tags",
    "is_active",
    "expires_at",
}


class JobService:
    """Business logic for job postings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_job(self, company_id: uuid.UUID, **fields: Any) -> Job:
        job = Job(company_id=company_id, **fields)
        self.db.add(job)
        await self.db.commit()
        await self.db.refresh(job)
        logger.info("job.created", job_id=str(job.id), company_id=str(company_id))
        return job

    # ─── Read ────────────────────────────────────────────

    async def get_job(self, job_id: uuid.UUID) -> Optional[Job]:
        return await self.db.get(Job, job_id)

    async def view_job(self, job_id: uuid.UUID) -> Job:
        """Fetch a job for display and bump its view counter."""
        job = await self.get_job(job_id)
        if not job:
            raise NotFoundError("Job not found")
        await self.db.execute(
            update(Job)
            .where(Job.id == job_id)
            .values(views=Job.views + 1)
            .execution_options(synchronize_session="evaluate")
        )
        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def search_jobs(
        self,
        search: Optional[str] = None,
        job_type: Optional[str] = None,
        location: Optional[str] = None,
        remote: Optional[bool] = None,
        min_salary: Optional[float] = None,
        max_salary: Optional[float] = None,
        tag: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Job], int]:
        """Active jobs matching every given filter, newest first.

        Returns (page, total matching).
        """
        conditions = [Job.is_active.is_(True)]
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(Job.title.ilike(pattern), Job.description.ilike(pattern))
            )
        if job_type:
            conditions.append(Job.job_type == job_type)
        if location:
            conditions.append(Job.location_city.ilike(f"%{location}%"))
        if remote is not None:
            conditions.append(Job.remote.is_(remote))
        if min_salary is not None:
            conditions.append(Job.salary_max >= min_salary)
        if max_salary is not None:
            conditions.append(Job.salary_min <= max_salary)

        result = await self.db.execute(
            select(Job).where(*conditions).order_by(Job.created_at.desc())
        )
        jobs = list(result.scalars().all())

        # Tags live in a JSON column; filter in Python so the query stays
        # portable across PostgreSQL and SQLite.
        if tag:
            wanted = tag.lower()
            jobs = [j for j in jobs if any(t.lower() == wanted for t in j.tags or [])]

        return jobs[offset:offset + limit], len(jobs)

    async def list_employer_jobs(self, company_id: uuid.UUID) -> list[Job]:
        result = await self.db.execute(
            select(Job)
            .where(Job.company_id == company_id)
            .order_by(Job.created_at.desc())
        )
        return list(result.scalars().all())

    # ─── Update / delete ─────────────────────────────────

    async def update_job(
        self,
        job_id: uuid.UUID,
        actor_id: uuid.UUID,
        actor_role: str,
        changes: dict[str, Any],
    ) -> Job:
        job = await self._get_owned(job_id, actor_id, actor_role)
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(job, key, value)
        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def delete_job(
        self,
        job_id: uuid.UUID,
        actor_id: uuid.UUID,
        actor_role: str,
    ) -> Job:
        job = await self._get_owned(job_id, actor_id, actor_role)
        job.is_active = False
        await self.db.commit()
        await self.db.refresh(job)
        logger.info("job.deactivated", job_id=str(job_id))
        return job

    # ─── Stats ───────────────────────────────────────────

    async def stats(self) -> list[dict]:
        """Job counts and mean minimum salary per job type, over every posting."""
        result = await self.db.execute(
            select(Job.job_type, func.count(), func.avg(Job.salary_min))
            .group_by(Job.job_type)
            .order_by(Job.job_type)
        )
        return [
            {"job_type": job_type, "count": count, "avg_salary": avg}
            for job_type, count, avg in result
        ]

    # ─── Saved jobs ──────────────────────────────────────

    async def save_job(self, user_id: uuid.UUID, job_id: uuid.UUID) -> None:
        if not await self.get_job(job_id):
            raise NotFoundError("Job not found")
        if await self._saved(user_id, job_id):
            raise AlreadyExistsError("Job already saved")
        self.db.add(SavedJob(user_id=user_id, job_id=job_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise AlreadyExistsError("Job already saved")

    async def unsave_job(self, user_id: uuid.UUID, job_id: uuid.UUID) -> None:
        saved = await self._saved(user_id, job_id)
        if not saved:
            raise ValidationError("Job not saved")
        await self.db.delete(saved)
        await self.db.commit()

    async def list_saved_jobs(
        self, user_id: uuid.UUID, limit: int = 10, offset: int = 0
    ) -> tuple[list[Job], int]:
        """Bookmarked jobs, most recently saved first. Closed jobs are included."""
        result = await self.db.execute(
            select(Job)
            .join(SavedJob, SavedJob.job_id == Job.id)
            .where(SavedJob.user_id == user_id)
            .order_by(SavedJob.created_at.desc(), SavedJob.id.desc())
            .limit(limit)
            .offset(offset)
        )
        total = await self.db.execute(
            select(func.count()).select_from(SavedJob).where(SavedJob.user_id == user_id)
        )
        return list(result.scalars().all()), total.scalar_one()

    async def _saved(self, user_id: uuid.UUID, job_id: uuid.UUID):
        result = await self.db.execute(
            select(SavedJob).where(SavedJob.user_id == user_id, SavedJob.job_id == job_id)
        )
        return result.scalars().first()

    # ─── Helpers ─────────────────────────────────────────

    async def _get_owned(
        self, job_id: uuid.UUID, actor_id: uuid.UUID, actor_role: str
    ) -> Job:
        job = await self.get_job(job_id)
        if not job:
            raise NotFoundError("Job not found")
        if actor_role != "admin" and job.company_id != actor_id:
            raise PermissionDeniedError("Not authorized to modify this job")
        return job
