"""Pydantic schemas for applications, notes and interviews.

StatusChange is validated against the status enum here; whether the
move is allowed from the current status is the service's call.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

STATUS_PATTERN = r"^(Applied|Reviewed|Interview|Offer|Rejected|Withdrawn)$"


class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None
    resume_file_name: Optional[str] = Field(None, max_length=255)


class StatusChange(BaseModel):
    status: str = Field(..., pattern=STATUS_PATTERN)


class NoteCreate(BaseModel):
    text: str = Field(..., min_length=1)


class RatingChange(BaseModel):
    rating: int = Field(..., ge=1, le=5)


class InterviewCreate(BaseModel):
    date: datetime
    interviewer_id: Optional[uuid.UUID] = None
    feedback: Optional[str] = None
    score: Optional[float] = Field(None, ge=0)


class NoteRead(BaseModel):
    id: int
    author_id: uuid.UUID
    text: str
    created_at: datetime

    model_config = {"from_attributes": True}


class InterviewRead(BaseModel):
    id: int
    date: datetime
    interviewer_id: Optional[uuid.UUID]
    feedback: Optional[str]
    score: Optional[float]

    model_config = {"from_attributes": True}


class ApplicationRead(BaseModel):
    id: uuid.UUID
    job_id: uuid.UUID
    applicant_id: uuid.UUID
    cover_letter: Optional[str]
    resume_file_name: Optional[str]
    status: str
    rating: Optional[int]
    screening_score: Optional[float]
    notes: list[NoteRead]
    interviews: list[InterviewRead]
    applied_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicationPage(BaseModel):
    applications: list[ApplicationRead]
    total: int
    pages: int
    current_page: int


class StatusCount(BaseModel):
    status: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class ApplicationStats(BaseModel):
    stats: list[StatusCount]
    daily_stats: list[DailyCount]
