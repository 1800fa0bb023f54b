"""Pydantic schemas for company profiles and reviews."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from hireboard.schemas.job import JobRead

COMPANY_SIZE_PATTERN = r"^(1-50|51-200|201-500|501-1000|1000\+)$"


class CompanyCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    industry: Optional[str] = None
    company_size: Optional[str] = Field(None, pattern=COMPANY_SIZE_PATTERN)
    website: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    headquarters: Optional[str] = None
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    social_links: dict[str, str] = Field(default_factory=dict)


class CompanyUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    industry: Optional[str] = None
    company_size: Optional[str] = Field(None, pattern=COMPANY_SIZE_PATTERN)
    website: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    headquarters: Optional[str] = None
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    social_links: Optional[dict[str, str]] = None


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(default="", max_length=200)
    comment: str = Field(..., min_length=1)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    comment: Optional[str] = Field(None, min_length=1)


class ReviewRead(BaseModel):
    id: uuid.UUID
    reviewer_id: uuid.UUID
    rating: int
    title: str
    comment: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CompanyRead(BaseModel):
    id: uuid.UUID
    employer_id: uuid.UUID
    company_name: str
    industry: Optional[str]
    company_size: Optional[str]
    website: Optional[str]
    description: Optional[str]
    logo_url: Optional[str]
    location_city: Optional[str]
    location_country: Optional[str]
    headquarters: Optional[str]
    founded_year: Optional[int]
    social_links: dict[str, str]
    ratings: float
    is_verified: bool
    reviews: list[ReviewRead]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CompanyDetail(BaseModel):
    """Public company page: the profile and the employer's open jobs."""
    profile: CompanyRead
    jobs: list[JobRead]


class CompanyJobCounts(BaseModel):
    total_jobs: int
    active_jobs: int


class MyCompany(BaseModel):
    profile: CompanyRead
    stats: CompanyJobCounts


class ReviewList(BaseModel):
    reviews: list[ReviewRead]
    ratings: float
