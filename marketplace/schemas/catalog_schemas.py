# marketplace/schemas/catalog_schemas.py
"""Pydantic schemas for class groups, courses and mentorships."""
from typing import List, Optional
from datetime import date, datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator

CLASS_FORMATS = ["presencial", "online", "hibrido"]


# ---------------------------------------------------------------- class groups

class ClassGroupBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    schedule: str = Field(..., min_length=1, max_length=200)
    format: str = Field(..., description="presencial, online or hibrido")
    instructor: Optional[str] = Field(default=None, max_length=200)
    price_aoa: float = Field(..., ge=0, description="Price in kwanza")
    spots: int = Field(..., gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    topics: List[str] = Field(default_factory=list)
    is_active: bool = True

    @model_validator(mode='after')
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        if self.format not in CLASS_FORMATS:
            raise ValueError(f"format must be one of {', '.join(CLASS_FORMATS)}")
        return self


class ClassGroupCreate(ClassGroupBase):
    pass


class ClassGroupUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    schedule: Optional[str] = Field(default=None, min_length=1, max_length=200)
    format: Optional[str] = None
    instructor: Optional[str] = Field(default=None, max_length=200)
    price_aoa: Optional[float] = Field(default=None, ge=0)
    spots: Optional[int] = Field(default=None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    topics: Optional[List[str]] = None
    is_active: Optional[bool] = None


class ClassGroupRead(ClassGroupBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: Optional[datetime] = None
    enrolled: int = 0
    spots_left: int = 0


# ---------------------------------------------------------------- courses

class CourseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    level: Optional[str] = Field(default=None, max_length=50)
    duration_hours: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    price_aoa: float = Field(..., ge=0)
    is_active: bool = True


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    level: Optional[str] = Field(default=None, max_length=50)
    duration_hours: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    price_aoa: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class CourseModuleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: int = Field(0, ge=0)


class CourseLessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = Field(default=None, max_length=500)
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    order_index: int = Field(0, ge=0)
    is_free: bool = False


class LessonSummary(BaseModel):
    """Outline entry; never carries content or video."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    duration_minutes: Optional[int] = None
    order_index: int
    is_free: bool


class LessonDetail(LessonSummary):
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None


class CourseModuleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    order_index: int
    lessons: List[LessonSummary] = []


class CourseRead(CourseBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: Optional[datetime] = None


class CourseDetail(CourseRead):
    modules: List[CourseModuleRead] = []


# ---------------------------------------------------------------- mentorships

class MentorshipBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    duration_weeks: Optional[int] = Field(default=None, gt=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    mentor_id: UUID
    price_aoa: float = Field(..., ge=0)
    max_students: Optional[int] = Field(default=None, gt=0)
    is_active: bool = True


class MentorshipCreate(MentorshipBase):
    pass


class MentorshipUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    duration_weeks: Optional[int] = Field(default=None, gt=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    price_aoa: Optional[float] = Field(default=None, ge=0)
    max_students: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class MentorshipRead(MentorshipBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: Optional[datetime] = None
    enrolled: int = 0
