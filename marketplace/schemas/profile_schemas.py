# marketplace/schemas/profile_schemas.py
"""Pydantic schemas for member profiles."""
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

PROVINCES = [
    "Bengo", "Benguela", "Bié", "Cabinda", "Cuando Cubango",
    "Cuanza Norte", "Cuanza Sul", "Cunene", "Huambo", "Huíla",
    "Luanda", "Lunda Norte", "Lunda Sul", "Malanje", "Moxico",
    "Namibe", "Uíge", "Zaire"
]

EMPLOYMENT_STATUSES = ["employed", "self_employed", "unemployed", "student", "other"]


def _check_province(v):
    if v is not None and v not in PROVINCES:
        raise ValueError(f"Unknown province: {v}")
    return v


def _check_employment_status(v):
    if v is not None and v not in EMPLOYMENT_STATUSES:
        raise ValueError(f"employment_status must be one of {', '.join(EMPLOYMENT_STATUSES)}")
    return v


class EnrollmentProfileForm(BaseModel):
    """Fields a member must supply (or confirm) when enrolling."""
    full_name: str = Field(..., min_length=3, max_length=200)
    phone: str = Field(..., min_length=9, max_length=20)
    birth_date: date
    gender: str = Field(..., min_length=1, max_length=20)
    id_number: str = Field(..., min_length=5, max_length=30)
    address: str = Field(..., min_length=5, max_length=500)
    city: str = Field(..., min_length=2, max_length=100)
    province: str = Field(..., min_length=1)
    academic_info: Optional[str] = None
    employment_status: str = Field(..., min_length=1, max_length=30)
    job_title: Optional[str] = Field(default=None, max_length=100)
    company: Optional[str] = Field(default=None, max_length=200)

    @field_validator('full_name', 'phone', 'id_number', 'address', 'city')
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    @field_validator('province')
    @classmethod
    def validate_province(cls, v):
        return _check_province(v)

    @field_validator('employment_status')
    @classmethod
    def validate_employment_status(cls, v):
        return _check_employment_status(v)

    @field_validator('birth_date')
    @classmethod
    def validate_birth_date(cls, v: date) -> date:
        if v >= date.today():
            raise ValueError('Birth date must be in the past')
        return v


class ProfileUpdate(BaseModel):
    """Partial update - all fields optional"""
    full_name: Optional[str] = Field(default=None, min_length=3, max_length=200)
    display_name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, min_length=9, max_length=20)
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(default=None, max_length=20)
    id_number: Optional[str] = Field(default=None, min_length=5, max_length=30)
    address: Optional[str] = Field(default=None, min_length=5, max_length=500)
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    province: Optional[str] = None
    academic_info: Optional[str] = None
    employment_status: Optional[str] = Field(default=None, max_length=30)
    job_title: Optional[str] = Field(default=None, max_length=100)
    company: Optional[str] = Field(default=None, max_length=200)

    @field_validator('province')
    @classmethod
    def validate_province(cls, v):
        return _check_province(v)

    @field_validator('employment_status')
    @classmethod
    def validate_employment_status(cls, v):
        return _check_employment_status(v)


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    full_name: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    id_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    academic_info: Optional[str] = None
    employment_status: Optional[str] = None
    job_title: Optional[str] = None
    company: Optional[str] = None
    is_complete: bool = False
    updated_at: Optional[datetime] = None
