"""User service — profiles and admin account management.

Deleting a user removes everything that only makes sense with the user
around: their alerts, bookmarks, reviews and applications, and for an
employer their company profile, jobs and the applications to those
jobs. Reviews the user wrote are removed and the affected companies'
ratings recomputed.
"""

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.db.models import (
    Application,
    ApplicationNote,
    CompanyProfile,
    CompanyReview,
    Interview,
    Job,
    JobAlert,
    SavedJob,
    User,
)
from hireboard.services.errors import NotFoundError, ValidationError

logger = structlog.get_logger()

UPDATABLE_FIELDS = {
    "name",
    "phone",
    "location_city",
    "location_country",
    "bio",
    "skills",
    "company_name",
    "resume_file_name",
}


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Profiles ────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: uuid.UUID, changes: dict[str, Any]) -> User:
        user = await self.get_user(user_id)
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(user, key, value)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    # ─── Admin ───────────────────────────────────────────

    async def list_users(
        self,
        role: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        conditions = []
        if role:
            conditions.append(User.role == role)
        result = await self.db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        total = await self.db.execute(
            select(func.count()).select_from(User).where(*conditions)
        )
        return list(result.scalars().all()), total.scalar_one()

    async def delete_user(self, user_id: uuid.UUID, actor_id: uuid.UUID) -> None:
        if user_id == actor_id:
            raise ValidationError("Admins cannot delete their own account")
        user = await self.get_user(user_id)

        owned_jobs = await self._ids(select(Job.id).where(Job.company_id == user_id))
        applications = await self._ids(
            select(Application.id).where(
                or_(Application.applicant_id == user_id, Application.job_id.in_(owned_jobs))
            )
        )
        applied_jobs = await self._ids(
            select(Application.job_id).where(Application.applicant_id == user_id)
        )
        own_company = await self._ids(
            select(CompanyProfile.id).where(CompanyProfile.employer_id == user_id)
        )
        reviewed_companies = set(
            await self._ids(
                select(CompanyReview.company_id).where(CompanyReview.reviewer_id == user_id)
            )
        ) - set(own_company)

        await self.db.execute(
            delete(ApplicationNote).where(
                or_(
                    ApplicationNote.application_id.in_(applications),
                    ApplicationNote.author_id == user_id,
                )
            )
        )
        await self.db.execute(delete(Interview).where(Interview.application_id.in_(applications)))
        await self.db.execute(
            update(Interview)
            .where(Interview.interviewer_id == user_id)
            .values(interviewer_id=None)
        )
        await self.db.execute(delete(Application).where(Application.id.in_(applications)))
        await self.db.execute(
            update(Job)
            .where(Job.id.in_(applied_jobs))
            .values(applicant_count=Job.applicant_count - 1)
        )
        await self.db.execute(
            delete(SavedJob).where(
                or_(SavedJob.user_id == user_id, SavedJob.job_id.in_(owned_jobs))
            )
        )
        await self.db.execute(delete(JobAlert).where(JobAlert.user_id == user_id))
        await self.db.execute(
            delete(CompanyReview).where(
                or_(
                    CompanyReview.reviewer_id == user_id,
                    CompanyReview.company_id.in_(own_company),
                )
            )
        )
        await self.db.execute(delete(CompanyProfile).where(CompanyProfile.id.in_(own_company)))
        await self.db.execute(delete(Job).where(Job.id.in_(owned_jobs)))

        for company_id in reviewed_companies:
            average = await self.db.execute(
                select(func.avg(CompanyReview.rating)).where(
                    CompanyReview.company_id == company_id
                )
            )
            value = average.scalar_one_or_none()
            await self.db.execute(
                update(CompanyProfile)
                .where(CompanyProfile.id == company_id)
                .values(ratings=float(value) if value is not None else 0.0)
            )

        await self.db.delete(user)
        await self.db.commit()
        logger.info("user.deleted", user_id=str(user_id), actor_id=str(actor_id))

    async def _ids(self, stmt) -> list[uuid.UUID]:
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
