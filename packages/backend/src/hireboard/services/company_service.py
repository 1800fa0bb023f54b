"""Company profiles and reviews.

An employer has at most one profile. Public lookups accept either the
profile id or the employer's user id, since jobs only carry the latter.

Any signed-in user may review a company once, except its own employer.
Only the author may edit or remove a review. The profile's `ratings`
is recomputed from the stored reviews after every change.
"""

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.db.models import CompanyProfile, CompanyReview, Job
from hireboard.services.errors import (
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = structlog.get_logger()

UPDATABLE_FIELDS = {
    "company_name",
    "industry",
    "company_size",
    "website",
    "description",
    "logo_url",
    "location_city",
    "location_country",
    "headquarters",
    "founded_year",
    "social_links",
}


class CompanyService:
    """Business logic for company profiles and their reviews."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Profiles ────────────────────────────────────────

    async def create_profile(self, employer_id: uuid.UUID, **fields: Any) -> CompanyProfile:
        if await self._by_employer(employer_id):
            raise AlreadyExistsError("Company profile already exists")

        profile = CompanyProfile(employer_id=employer_id, **fields)
        self.db.add(profile)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise AlreadyExistsError("Company profile already exists")
        logger.info("company.created", company_id=str(profile.id), employer_id=str(employer_id))
        return await self._reload(profile.id)

    async def get_profile(self, company_or_employer_id: uuid.UUID) -> tuple[CompanyProfile, list[Job]]:
        """Profile plus the employer's active jobs."""
        profile = await self._lookup(company_or_employer_id)
        result = await self.db.execute(
            select(Job)
            .where(Job.company_id == profile.employer_id, Job.is_active.is_(True))
            .order_by(Job.created_at.desc())
        )
        return profile, list(result.scalars().all())

    async def get_my_profile(self, employer_id: uuid.UUID) -> tuple[CompanyProfile, dict]:
        """The caller's own profile plus total/active job counts."""
        profile = await self._by_employer(employer_id)
        if not profile:
            raise NotFoundError("Company profile not found")

        result = await self.db.execute(
            select(Job.is_active, func.count())
            .where(Job.company_id == employer_id)
            .group_by(Job.is_active)
        )
        counts = {bool(active): n for active, n in result}
        stats = {
            "total_jobs": sum(counts.values()),
            "active_jobs": counts.get(True, 0),
        }
        return profile, stats

    async def update_profile(
        self, employer_id: uuid.UUID, changes: dict[str, Any]
    ) -> CompanyProfile:
        profile = await self._by_employer(employer_id)
        if not profile:
            raise NotFoundError("Company profile not found")
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(profile, key, value)
        await self.db.commit()
        return await self._reload(profile.id)

    # ─── Reviews ─────────────────────────────────────────

    async def add_review(
        self,
        company_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        rating: int,
        comment: str,
        title: str = "",
    ) -> CompanyProfile:
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        profile = await self.db.get(CompanyProfile, company_id, populate_existing=True)
        if not profile:
            raise NotFoundError("Company not found")
        if profile.employer_id == reviewer_id:
            raise PermissionDeniedError("You cannot review your own company")
        if any(r.reviewer_id == reviewer_id for r in profile.reviews):
            raise AlreadyExistsError("You have already reviewed this company")

        profile.reviews.append(
            CompanyReview(
                reviewer_id=reviewer_id, rating=rating, title=title or "", comment=comment
            )
        )
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise AlreadyExistsError("You have already reviewed this company")
        await self._recompute_ratings(profile)
        await self.db.commit()
        logger.info(
            "company.review_added", company_id=str(company_id), reviewer_id=str(reviewer_id)
        )
        return await self._reload(company_id)

    async def list_reviews(
        self, company_or_employer_id: uuid.UUID
    ) -> tuple[list[CompanyReview], float]:
        profile = await self._lookup(company_or_employer_id)
        return list(profile.reviews), profile.ratings

    async def update_review(
        self,
        company_id: uuid.UUID,
        review_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> CompanyProfile:
        profile, review = await self._get_own_review(company_id, review_id, reviewer_id, "update")
        rating = changes.get("rating")
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        for key in ("rating", "title", "comment"):
            if changes.get(key) is not None:
                setattr(review, key, changes[key])
        await self.db.flush()
        await self._recompute_ratings(profile)
        await self.db.commit()
        return await self._reload(company_id)

    async def delete_review(
        self,
        company_id: uuid.UUID,
        review_id: uuid.UUID,
        reviewer_id: uuid.UUID,
    ) -> CompanyProfile:
        profile, review = await self._get_own_review(company_id, review_id, reviewer_id, "delete")
        profile.reviews.remove(review)
        await self.db.flush()
        await self._recompute_ratings(profile)
        await self.db.commit()
        return await self._reload(company_id)

    # ─── Helpers ─────────────────────────────────────────

    async def _by_employer(self, employer_id: uuid.UUID) -> Optional[CompanyProfile]:
        result = await self.db.execute(
            select(CompanyProfile)
            .where(CompanyProfile.employer_id == employer_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _lookup(self, company_or_employer_id: uuid.UUID) -> CompanyProfile:
        result = await self.db.execute(
            select(CompanyProfile).where(
                or_(
                    CompanyProfile.id == company_or_employer_id,
                    CompanyProfile.employer_id == company_or_employer_id,
                )
            )
            .execution_options(populate_existing=True)
        )
        profile = result.scalars().first()
        if not profile:
            raise NotFoundError("Company not found")
        return profile

    async def _reload(self, company_id: uuid.UUID) -> CompanyProfile:
        # populate_existing refreshes the reviews collection already in the
        # identity map.
        result = await self.db.execute(
            select(CompanyProfile)
            .where(CompanyProfile.id == company_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().one()

    async def _get_own_review(
        self,
        company_id: uuid.UUID,
        review_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        action: str,
    ) -> tuple[CompanyProfile, CompanyReview]:
        profile = await self.db.get(CompanyProfile, company_id, populate_existing=True)
        if not profile:
            raise NotFoundError("Company not found")
        review = next((r for r in profile.reviews if r.id == review_id), None)
        if not review:
            raise NotFoundError("Review not found")
        if review.reviewer_id != reviewer_id:
            raise PermissionDeniedError(f"Not authorized to {action} this review")
        return profile, review

    async def _recompute_ratings(self, profile: CompanyProfile) -> None:
        result = await self.db.execute(
            select(func.avg(CompanyReview.rating)).where(
                CompanyReview.company_id == profile.id
            )
        )
        average = result.scalar_one_or_none()
        profile.ratings = float(average) if average is not None else 0.0
