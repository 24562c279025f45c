from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CertificateCreate(BaseModel):
    user_id: UUID
    course_id: Optional[UUID] = None
    class_group_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None
    is_public: bool = True
    skills: List[str] = Field(default_factory=list)
    issuer_name: Optional[str] = Field(default=None, max_length=200)
    badge_type: Optional[str] = Field(default=None, max_length=50)

    @model_validator(mode='after')
    def validate_subject(self):
        if (self.course_id is None) == (self.class_group_id is None):
            raise ValueError('Exactly one of course_id or class_group_id is required')
        return self


class CertificateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    certificate_code: str
    user_id: UUID
    course_id: Optional[UUID] = None
    class_group_id: Optional[UUID] = None
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_public: bool
    skills: List[str] = []
    issuer_name: Optional[str] = None
    badge_type: Optional[str] = None


class CertificateVerificationResult(BaseModel):
    certificate: CertificateRead
    holder_name: str
    subject_title: Optional[str] = None
    is_expired: bool
    verification_count: int
