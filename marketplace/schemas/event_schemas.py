from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .profile_schemas import EMPLOYMENT_STATUSES


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=500)
    creator: str = Field(..., min_length=1, max_length=200)
    background_image_url: Optional[str] = Field(default=None, max_length=500)
    target_date: datetime


class TimeLeft(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    address: str
    creator: str
    background_image_url: Optional[str] = None
    target_date: datetime
    status: str = "upcoming"
    time_left: Optional[TimeLeft] = None
    is_registered: Optional[bool] = None


class ExternalParticipantCreate(BaseModel):
    full_name: str = Field(..., min_length=3, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=9, max_length=20)
    age: int = Field(..., ge=16, le=120)
    id_number: str = Field(..., min_length=5, max_length=30)
    academic_info: Optional[str] = None
    employment_status: str = Field(..., min_length=1, max_length=30)
    job_title: Optional[str] = Field(default=None, max_length=100)
    company: Optional[str] = Field(default=None, max_length=200)

    @field_validator('employment_status')
    @classmethod
    def validate_employment_status(cls, v: str) -> str:
        if v not in EMPLOYMENT_STATUSES:
            raise ValueError(f"employment_status must be one of {', '.join(EMPLOYMENT_STATUSES)}")
        return v


class ExternalParticipantRead(ExternalParticipantCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    registered_at: Optional[datetime] = None


class EventParticipantCounts(BaseModel):
    event_id: UUID
    members: int
    external: int
    total: int
