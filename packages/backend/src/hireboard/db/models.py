"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative mapping in SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints and indexes live here;
Alembic compares these models to the live database to build migrations.

Column types are the portable ones (Uuid, JSON) so the same models run on
PostgreSQL in deployment and on SQLite in the test suite.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


# ══════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A job seeker, an employer, or an admin.

    Employers own jobs directly: Job.company points at the employer's
    user row, and that is the only ownership check the workflow makes.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="jobSeeker"
    )  # jobSeeker, employer, admin

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    company_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    resume_file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Bumped on logout and password reset; refresh tokens carrying an
    # older version are refused.
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    password_reset_token_hash: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )  # sha256 hex of the emailed token
    password_reset_expires: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Jobs
# ══════════════════════════════════════════════════════════════


class Job(Base):
    """A job posting owned by one employer."""

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_company", "company_id"),
        Index("idx_jobs_active_created", "is_active", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )  # the owning employer

    responsibilities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    qualifications: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    job_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Full-time"
    )  # Full-time, Part-time, Contract, Freelance, Internship
    location_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    salary_min: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    salary_max: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    applicant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


# ══════════════════════════════════════════════════════════════
# Applications
# ══════════════════════════════════════════════════════════════


class Application(Base):
    """One job seeker's submission to one job posting.

    The (applicant_id, job_id) unique constraint backs up the duplicate
    check the service does before writing. Notes and interviews are
    child rows loaded eagerly (selectin) because async sessions can't
    lazy-load on attribute access.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("applicant_id", "job_id", name="uq_applications_applicant_job"),
        Index("idx_applications_job_status", "job_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    job_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("jobs.id"), nullable=False)
    applicant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    cover_letter: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resume_file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Applied"
    )  # Applied, Reviewed, Interview, Offer, Rejected, Withdrawn
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-5
    screening_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    notes: Mapped[list["ApplicationNote"]] = relationship(
        back_populates="application",
        lazy="selectin",
        order_by="ApplicationNote.created_at",
        cascade="all, delete-orphan",
    )
    interviews: Mapped[list["Interview"]] = relationship(
        back_populates="application",
        lazy="selectin",
        order_by="Interview.date",
        cascade="all, delete-orphan",
    )


class ApplicationNote(Base):
    """Employer note on an application (append-only)."""

    __tablename__ = "application_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("applications.id"), nullable=False
    )
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    application: Mapped["Application"] = relationship(back_populates="notes")


class Interview(Base):
    """A recorded interview round for an application."""

    __tablename__ = "interviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("applications.id"), nullable=False
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    interviewer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    application: Mapped["Application"] = relationship(back_populates="interviews")


# ══════════════════════════════════════════════════════════════
# Job alerts
# ══════════════════════════════════════════════════════════════


class JobAlert(Base):
    """Saved search criteria. Drives the recommended-jobs feed."""

    __tablename__ = "job_alerts"
    __table_args__ = (Index("idx_job_alerts_user", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    keywords: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    job_types: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    min_salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    frequency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="weekly"
    )  # daily, weekly, instant
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_sent: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ══════════════════════════════════════════════════════════════
# Saved jobs
# ══════════════════════════════════════════════════════════════


class SavedJob(Base):
    """A job a seeker bookmarked."""

    __tablename__ = "saved_jobs"
    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_saved_jobs_user_job"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    job_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("jobs.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ══════════════════════════════════════════════════════════════
# Company profiles
# ══════════════════════════════════════════════════════════════


class CompanyProfile(Base):
    """Public profile of an employer. At most one per employer.

    `ratings` is the mean of the review ratings, recomputed by the
    service whenever a review is added, edited or removed.
    """

    __tablename__ = "company_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    employer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), unique=True, nullable=False
    )
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    company_size: Mapped[Optional[str]] = mapped_column(
        String(10), nullable=True
    )  # 1-50, 51-200, 201-500, 501-1000, 1000+
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    headquarters: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    founded_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    social_links: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ratings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    reviews: Mapped[list["CompanyReview"]] = relationship(
        back_populates="company",
        lazy="selectin",
        order_by="CompanyReview.created_at",
        cascade="all, delete-orphan",
    )


class CompanyReview(Base):
    """One user's review of one company."""

    __tablename__ = "company_reviews"
    __table_args__ = (
        UniqueConstraint("company_id", "reviewer_id", name="uq_company_reviews_reviewer"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("company_profiles.id"), nullable=False
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-5
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    company: Mapped["CompanyProfile"] = relationship(back_populates="reviews")
