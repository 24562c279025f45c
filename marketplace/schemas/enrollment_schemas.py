# marketplace/schemas/enrollment_schemas.py
"""Pydantic schemas for enrollments and the admin payments view."""
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

from ..models.enrollment import SubjectKind, PaymentStatus
from ..services.enrollment_lifecycle import from_stored, has_access


class EnrollmentRead(BaseModel):
    id: UUID
    kind: SubjectKind
    subject_id: UUID
    user_id: UUID
    status: PaymentStatus = Field(..., description="Normalised payment status")
    payment_status: str = Field(..., description="Status as stored for this kind (paid/confirmed spelling)")
    payment_reference: Optional[str] = None
    payment_amount: Optional[float] = None
    payment_method: Optional[str] = None
    enrolled_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    version: int
    has_access: bool

    @classmethod
    def from_model(cls, kind: SubjectKind, enrollment, **extra) -> "EnrollmentRead":
        return cls(
            id=enrollment.id,
            kind=kind,
            subject_id=enrollment.subject_id,
            user_id=enrollment.user_id,
            status=from_stored(kind, enrollment.payment_status),
            payment_status=enrollment.payment_status,
            payment_reference=enrollment.payment_reference,
            payment_amount=float(enrollment.payment_amount) if enrollment.payment_amount is not None else None,
            payment_method=enrollment.payment_method,
            enrolled_at=enrollment.enrolled_at,
            paid_at=enrollment.paid_at,
            version=enrollment.version,
            has_access=has_access(kind, enrollment),
            **extra,
        )


class PaymentInstructions(BaseModel):
    method: str
    reference: str
    amount: float
    currency: str
    message: str


class EnrollmentCreated(BaseModel):
    enrollment: EnrollmentRead
    payment_instructions: PaymentInstructions


class AdminEnrollmentRow(EnrollmentRead):
    member_name: Optional[str] = None
    member_phone: Optional[str] = None
    subject_title: Optional[str] = None


class AdminEnrollmentPage(BaseModel):
    items: List[AdminEnrollmentRow]
    total: int
    page: int
    size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class TransitionRequest(BaseModel):
    """Optional optimistic-lock token: the version the admin saw."""
    expected_version: Optional[int] = Field(default=None, ge=1)


class CancelRequest(TransitionRequest):
    confirm: bool = Field(False, description="Must be true; cancellation cannot be undone")


class AccessCheck(BaseModel):
    kind: SubjectKind
    subject_id: UUID
    has_access: bool
    status: Optional[PaymentStatus] = None


class MyLearning(BaseModel):
    classes: List[EnrollmentRead] = []
    courses: List[EnrollmentRead] = []
    mentorships: List[EnrollmentRead] = []
