"""Pydantic schemas for user profiles and the admin user list."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    bio: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    company_name: Optional[str] = None
    resume_file_name: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Partial profile update. Role and email can't be changed here."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[list[str]] = None
    company_name: Optional[str] = None
    resume_file_name: Optional[str] = Field(None, max_length=255)


class UserPage(BaseModel):
    users: list[UserRead]
    total: int
    pages: int
    current_page: int
