"""Application service — the apply / review workflow and its notifications.

Learn: Every state-changing action follows the same order:
1. Load and check (not found → 404, wrong owner → 403, duplicate → 400)
2. Write and commit
3. Best-effort side effects: schedule an email, push a live event

Step 3 can't fail the request. If the email bounces or the user is
offline the committed write stands; the push is a UX nicety and the
email/REST state are the real channels.

Status machine (as the UI offers it):
  Applied → Reviewed | Interview | Offer | Rejected
  Reviewed → Interview | Offer | Rejected
  Interview → Offer | Rejected
  any non-terminal → Withdrawn (applicant side, no route yet)
  Offer, Rejected, Withdrawn are terminal

By default the table is NOT enforced: the job owner may set any status,
same as the stored enum allows. HIREBOARD_STRICT_STATUS_TRANSITIONS=true
turns enforcement on.
"""

import uuid
from collections import Counter
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard.config import settings
from hireboard.db.models import Application, ApplicationNote, Interview, Job, User, utcnow
from hireboard.events.types import (
    APPLICATION_NOTE_ADDED,
    APPLICATION_STATUS_UPDATE,
    NEW_APPLICATION,
)
from hireboard.realtime.notifier import Notifier
from hireboard.services.email import Mailer, new_application_email, status_update_email
from hireboard.services.errors import (
    DuplicateApplicationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = structlog.get_logger()


# ═══════════════════════════════════════════════════════════
# State Machine
# ═══════════════════════════════════════════════════════════

STATUSES = ("Applied", "Reviewed", "Interview", "Offer", "Rejected", "Withdrawn")

VALID_TRANSITIONS: dict[str, set[str]] = {
    "Applied": {"Reviewed", "Interview", "Offer", "Rejected", "Withdrawn"},
    "Reviewed": {"Interview", "Offer", "Rejected", "Withdrawn"},
    "Interview": {"Offer", "Rejected", "Withdrawn"},
    "Offer": set(),
    "Rejected": set(),
    "Withdrawn": set(),
}


def can_transition(old_status: str, new_status: str) -> bool:
    return new_status in VALID_TRANSITIONS.get(old_status, set())


# ═══════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════


class ApplicationService:
    """Business logic for job applications."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier,
        mailer: Mailer,
        strict_transitions: Optional[bool] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.mailer = mailer
        self.strict_transitions = (
            settings.strict_status_transitions
            if strict_transitions is None
            else strict_transitions
        )

    # ─── Apply ───────────────────────────────────────────

    async def apply(
        self,
        job_id: uuid.UUID,
        applicant_id: uuid.UUID,
        cover_letter: Optional[str] = None,
        resume_file_name: Optional[str] = None,
    ) -> Application:
        """Create an application, bump the job's counter, tell the employer.

        Raises:
            NotFoundError: job missing/inactive or applicant missing
            DuplicateApplicationError: applicant already applied to this job
        """
        job = await self.db.get(Job, job_id)
        if not job or not job.is_active:
            raise NotFoundError("Job not found")

        applicant = await self.db.get(User, applicant_id)
        if not applicant:
            raise NotFoundError("User not found")

        existing = await self.db.execute(
            select(Application.id).where(
                Application.job_id == job_id,
                Application.applicant_id == applicant_id,
            )
        )
        if existing.first():
            raise DuplicateApplicationError("You have already applied for this job")

        application = Application(
            job_id=job_id,
            applicant_id=applicant_id,
            cover_letter=cover_letter,
            resume_file_name=resume_file_name or applicant.resume_file_name,
            status="Applied",
            notes=[],
            interviews=[],
        )
        self.db.add(application)
        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent apply for the same pair.
            await self.db.rollback()
            raise DuplicateApplicationError("You have already applied for this job")

        await self.db.execute(
            update(Job)
            .where(Job.id == job_id)
            .values(applicant_count=Job.applicant_count + 1)
            .execution_options(synchronize_session="evaluate")
        )
        await self.db.commit()
        await self.db.refresh(application)

        logger.info(
            "application.created",
            application_id=str(application.id),
            job_id=str(job_id),
            applicant_id=str(applicant_id),
        )

        employer = await self.db.get(User, job.company_id)
        if employer:
            subject, html = new_application_email(job.title, applicant.name)
            self._email(employer.email, subject, html)

        self.notifier.notify(
            str(job.company_id),
            NEW_APPLICATION,
            {
                "jobId": str(job.id),
                "jobTitle": job.title,
                "applicantName": applicant.name,
                "applicationId": str(application.id),
            },
        )
        return application

    # ─── Read ────────────────────────────────────────────

    async def get_application(self, application_id: uuid.UUID) -> Optional[Application]:
        return await self.db.get(Application, application_id)

    async def get_for_viewer(
        self, application_id: uuid.UUID, viewer_id: uuid.UUID
    ) -> Application:
        """The applicant and the job owner may view an application."""
        application = await self.get_application(application_id)
        if not application:
            raise NotFoundError("Application not found")
        if application.applicant_id != viewer_id:
            await self._require_job_owner(application, viewer_id, "view")
        return application

    async def list_for_applicant(
        self,
        applicant_id: uuid.UUID,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Application], int]:
        conditions = [Application.applicant_id == applicant_id]
        if status:
            conditions.append(Application.status == status)
        return await self._page(conditions, limit, offset)

    async def list_for_job(
        self,
        job_id: uuid.UUID,
        owner_id: uuid.UUID,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Application], int]:
        job = await self.db.get(Job, job_id)
        if not job:
            raise NotFoundError("Job not found")
        if job.company_id != owner_id:
            raise PermissionDeniedError("Not authorized to view applicants")

        conditions = [Application.job_id == job_id]
        if status:
            conditions.append(Application.status == status)
        return await self._page(conditions, limit, offset)

    async def _page(
        self, conditions: list, limit: int, offset: int
    ) -> tuple[list[Application], int]:
        result = await self.db.execute(
            select(Application)
            .where(*conditions)
            .order_by(Application.applied_at.desc())
            .limit(limit)
            .offset(offset)
        )
        total = await self.db.execute(
            select(func.count()).select_from(Application).where(*conditions)
        )
        return list(result.scalars().all()), total.scalar_one()

    # ─── Status changes ──────────────────────────────────

    async def update_status(
        self,
        application_id: uuid.UUID,
        actor_id: uuid.UUID,
        new_status: str,
    ) -> Application:
        """Move an application to new_status on behalf of the job owner.

        Raises:
            ValidationError: new_status is not a known status
            NotFoundError: application (or its job) is missing
            PermissionDeniedError: actor doesn't own the job
            InvalidTransitionError: strict mode and the move isn't allowed
        """
        if new_status not in STATUSES:
            raise ValidationError(f"Unknown status '{new_status}'")

        application = await self.get_application(application_id)
        if not application:
            raise NotFoundError("Application not found")
        job = await self._require_job_owner(application, actor_id, "update")

        old_status = application.status
        if self.strict_transitions and not can_transition(old_status, new_status):
            allowed = VALID_TRANSITIONS.get(old_status, set())
            raise InvalidTransitionError(
                f"Cannot transition from '{old_status}' to '{new_status}'. "
                f"Allowed: {sorted(allowed) or 'none (terminal state)'}"
            )

        application.status = new_status
        application.updated_at = utcnow()
        await self.db.commit()

        logger.info(
            "application.status_changed",
            application_id=str(application_id),
            from_status=old_status,
            to_status=new_status,
            actor_id=str(actor_id),
        )

        applicant = await self.db.get(User, application.applicant_id)
        if applicant:
            subject, html = status_update_email(job.title, new_status)
            self._email(applicant.email, subject, html)

        self.notifier.notify(
            str(application.applicant_id),
            APPLICATION_STATUS_UPDATE,
            {
                "jobTitle": job.title,
                "status": new_status,
                "applicationId": str(application.id),
            },
        )
        return application

    # ─── Notes, rating, interviews (job owner only) ──────

    async def add_note(
        self,
        application_id: uuid.UUID,
        actor_id: uuid.UUID,
        text: str,
    ) -> Application:
        """Append an employer note and sync the employer's other open tabs."""
        application = await self.get_application(application_id)
        if not application:
            raise NotFoundError("Application not found")
        job = await self._require_job_owner(application, actor_id, "add notes to")

        application.notes.append(ApplicationNote(author_id=actor_id, text=text))
        application.updated_at = utcnow()
        await self.db.commit()

        # Notes are employer-side; the listener lives on the applicants page.
        self.notifier.notify(
            str(job.company_id),
            APPLICATION_NOTE_ADDED,
            {
                "applicationId": str(application.id),
                "notes": [
                    {
                        "by": str(n.author_id),
                        "text": n.text,
                        "createdAt": n.created_at,
                    }
                    for n in application.notes
                ],
            },
        )
        return application

    async def set_rating(
        self,
        application_id: uuid.UUID,
        actor_id: uuid.UUID,
        rating: int,
    ) -> Application:
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        application = await self.get_application(application_id)
        if not application:
            raise NotFoundError("Application not found")
        await self._require_job_owner(application, actor_id, "rate")

        application.rating = rating
        application.updated_at = utcnow()
        await self.db.commit()
        return application

    async def add_interview(
        self,
        application_id: uuid.UUID,
        actor_id: uuid.UUID,
        date: datetime,
        interviewer_id: Optional[uuid.UUID] = None,
        feedback: Optional[str] = None,
        score: Optional[float] = None,
    ) -> Application:
        application = await self.get_application(application_id)
        if not application:
            raise NotFoundError("Application not found")
        await self._require_job_owner(application, actor_id, "record interviews for")

        application.interviews.append(
            Interview(
                date=date,
                interviewer_id=interviewer_id or actor_id,
                feedback=feedback,
                score=score,
            )
        )
        application.updated_at = utcnow()
        await self.db.commit()
        return application

    # ─── Stats ───────────────────────────────────────────

    async def stats(self) -> dict:
        """Application counts per status and per applied-at day."""
        by_status = await self.db.execute(
            select(Application.status, func.count())
            .group_by(Application.status)
            .order_by(Application.status)
        )
        applied = await self.db.execute(select(Application.applied_at))
        daily = Counter(ts.strftime("%Y-%m-%d") for (ts,) in applied if ts)

        return {
            "stats": [{"status": s, "count": c} for s, c in by_status],
            "daily_stats": [{"date": d, "count": daily[d]} for d in sorted(daily)],
        }

    # ─── Helpers ─────────────────────────────────────────

    async def _require_job_owner(
        self, application: Application, actor_id: uuid.UUID, action: str
    ) -> Job:
        job = await self.db.get(Job, application.job_id)
        if not job:
            raise NotFoundError("Job not found")
        if job.company_id != actor_id:
            raise PermissionDeniedError(f"Not authorized to {action} this application")
        return job

    def _email(self, to: str, subject: str, html: str) -> None:
        try:
            self.mailer.dispatch(to, subject, html)
        except Exception:
            logger.exception("email.dispatch_failed", to=to, subject=subject)
