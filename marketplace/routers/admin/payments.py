from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.exceptions import ValidationError
from ...core.security import CurrentUser, get_current_admin
from ...models.enrollment import SubjectKind, PaymentStatus
from ...schemas.enrollment_schemas import (
    EnrollmentRead, AdminEnrollmentRow, AdminEnrollmentPage, TransitionRequest, CancelRequest
)
from ...services.enrollment_service import EnrollmentService
from ...utils.pagination import Paginator

router = APIRouter(prefix="/api/v1/admin/payments", tags=["Admin - Payments"])


@router.get("/{kind}", response_model=AdminEnrollmentPage)
async def list_payments(
    kind: SubjectKind,
    status: str = Query("pending", pattern="^(pending|confirmed|cancelled|all)$"),
    search: Optional[str] = Query(None, max_length=100, description="Payment reference, case-insensitive"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Enrollments awaiting (or past) payment confirmation, newest first"""
    service = EnrollmentService(kind, db)
    status_filter = None if status == "all" else PaymentStatus(status)
    result = await service.list_admin(status=status_filter, search=search, page=page, size=size)

    meta = Paginator.create_meta(page, size, result["total"])
    return AdminEnrollmentPage(
        items=[
            AdminEnrollmentRow.from_model(
                kind,
                row["enrollment"],
                member_name=row["member_name"],
                member_phone=row["member_phone"],
                subject_title=row["subject_title"],
            )
            for row in result["items"]
        ],
        total=meta.total,
        page=meta.page,
        size=meta.size,
        total_pages=meta.total_pages,
        has_next=meta.has_next,
        has_previous=meta.has_previous,
    )


@router.post("/{kind}/{enrollment_id}/confirm", response_model=EnrollmentRead)
async def confirm_payment(
    kind: SubjectKind,
    enrollment_id: UUID,
    transition: Optional[TransitionRequest] = None,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Mark a pending enrollment as paid. Only one of several concurrent confirmations succeeds."""
    service = EnrollmentService(kind, db)
    expected_version = transition.expected_version if transition else None
    enrollment = await service.confirm_payment(enrollment_id, expected_version=expected_version, acted_by=admin.id)
    return EnrollmentRead.from_model(kind, enrollment)


@router.post("/{kind}/{enrollment_id}/cancel", response_model=EnrollmentRead)
async def cancel_enrollment(
    kind: SubjectKind,
    enrollment_id: UUID,
    cancel_request: CancelRequest,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Cancel a pending enrollment. Irreversible, so the body must carry confirm=true."""
    if not cancel_request.confirm:
        raise ValidationError("Cancellation cannot be undone; resend with confirm=true", field="confirm")
    service = EnrollmentService(kind, db)
    enrollment = await service.cancel_enrollment(enrollment_id, expected_version=cancel_request.expected_version, acted_by=admin.id)
    return EnrollmentRead.from_model(kind, enrollment)
