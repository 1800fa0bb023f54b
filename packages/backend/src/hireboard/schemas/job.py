"""Pydantic schemas for jobs.

- JobCreate: what an employer POSTs
- JobUpdate: PATCH body (all optional, only set fields are applied)
- JobRead: what the API returns
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

JOB_TYPE_PATTERN = r"^(Full-time|Part-time|Contract|Freelance|Internship)$"


class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    responsibilities: list[str] = Field(default_factory=list)
    qualifications: list[str] = Field(default_factory=list)
    job_type: str = Field(default="Full-time", pattern=JOB_TYPE_PATTERN)
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    remote: bool = False
    tags: list[str] = Field(default_factory=list)
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_salary_range(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min cannot exceed salary_max")
        return self


class JobUpdate(BaseModel):
    """Partial update: only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, min_length=1)
    responsibilities: Optional[list[str]] = None
    qualifications: Optional[list[str]] = None
    job_type: Optional[str] = Field(None, pattern=JOB_TYPE_PATTERN)
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    remote: Optional[bool] = None
    tags: Optional[list[str]] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None


class JobRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    company_id: uuid.UUID
    responsibilities: list[str]
    qualifications: list[str]
    job_type: str
    location_city: Optional[str]
    location_country: Optional[str]
    salary_min: Optional[float]
    salary_max: Optional[float]
    currency: str
    remote: bool
    tags: list[str]
    applicant_count: int
    is_active: bool
    views: int
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime]

    model_config = {"from_attributes": True}


class JobPage(BaseModel):
    jobs: list[JobRead]
    total: int
    pages: int
    current_page: int


class JobTypeStats(BaseModel):
    job_type: str
    count: int
    avg_salary: Optional[float]


class JobStats(BaseModel):
    stats: list[JobTypeStats]
