from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..core.security import CurrentUser, get_current_user
from ..models.enrollment import SubjectKind
from ..schemas.enrollment_schemas import (
    EnrollmentRead, EnrollmentCreated, PaymentInstructions, AccessCheck, MyLearning
)
from ..schemas.profile_schemas import EnrollmentProfileForm
from ..services.enrollment_lifecycle import from_stored, has_access
from ..services.enrollment_service import EnrollmentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/enrollments", tags=["Enrollments"])


@router.post("/{kind}/{subject_id}", response_model=EnrollmentCreated, status_code=201)
async def enroll(
    kind: SubjectKind,
    subject_id: UUID,
    profile_form: EnrollmentProfileForm,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Enroll the signed-in member in a class group, course or mentorship.

    The body carries the member's profile fields, saved before the
    enrollment is created. The enrollment starts as pending with a payment
    reference the member quotes when paying.
    """
    service = EnrollmentService(kind, db)
    enrollment = await service.create_enrollment(
        subject_id, current_user.id, profile_form.model_dump()
    )
    amount = float(enrollment.payment_amount)
    return EnrollmentCreated(
        enrollment=EnrollmentRead.from_model(kind, enrollment),
        payment_instructions=PaymentInstructions(
            method=enrollment.payment_method,
            reference=enrollment.payment_reference,
            amount=amount,
            currency=settings.currency,
            message=(
                f"Pay {amount:,.2f} {settings.currency} by Multicaixa Express quoting reference "
                f"{enrollment.payment_reference}. Access opens once an administrator confirms the payment."
            )
        )
    )


@router.get("/me", response_model=MyLearning)
async def my_learning(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Every enrollment of the signed-in member, grouped by kind"""
    learning = {}
    for kind, key in (
        (SubjectKind.CLASS, "classes"),
        (SubjectKind.COURSE, "courses"),
        (SubjectKind.MENTORSHIP, "mentorships"),
    ):
        enrollments = await EnrollmentService(kind, db).list_for_user(current_user.id)
        learning[key] = [EnrollmentRead.from_model(kind, e) for e in enrollments]
    return MyLearning(**learning)


@router.get("/{kind}/{subject_id}", response_model=EnrollmentRead)
async def get_my_enrollment(
    kind: SubjectKind,
    subject_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(kind, db)
    enrollment = await service.get_for_user(current_user.id, subject_id)
    if enrollment is None:
        raise NotFoundError("Enrollment")
    return EnrollmentRead.from_model(kind, enrollment)


@router.get("/{kind}/{subject_id}/access", response_model=AccessCheck)
async def check_access(
    kind: SubjectKind,
    subject_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Content gate, evaluated against a fresh read on every call"""
    service = EnrollmentService(kind, db)
    enrollment = await service.get_for_user(current_user.id, subject_id)
    return AccessCheck(
        kind=kind,
        subject_id=subject_id,
        has_access=has_access(kind, enrollment),
        status=from_stored(kind, enrollment.payment_status) if enrollment else None
    )
