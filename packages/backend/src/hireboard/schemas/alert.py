"""Pydantic schemas for job alerts."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

FREQUENCY_PATTERN = r"^(daily|weekly|instant)$"


class AlertCreate(BaseModel):
    keywords: list[str] = Field(default_factory=list)
    job_types: list[str] = Field(default_factory=list)
    location: Optional[str] = None
    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    remote: bool = False
    frequency: str = Field(default="weekly", pattern=FREQUENCY_PATTERN)


class AlertUpdate(BaseModel):
    keywords: Optional[list[str]] = None
    job_types: Optional[list[str]] = None
    location: Optional[str] = None
    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    remote: Optional[bool] = None
    frequency: Optional[str] = Field(None, pattern=FREQUENCY_PATTERN)
    is_active: Optional[bool] = None


class AlertRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    keywords: list[str]
    job_types: list[str]
    location: Optional[str]
    min_salary: Optional[float]
    max_salary: Optional[float]
    remote: bool
    frequency: str
    is_active: bool
    last_sent: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}
