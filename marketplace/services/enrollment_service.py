# marketplace/services/enrollment_service.py
from typing import Dict, List, Optional, Any
from uuid import UUID
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from .base_service import BaseService
from .profile_service import ProfileService
from .enrollment_lifecycle import (
    subject_type, to_stored, from_stored, stored_values, source_states, can_transition, is_terminal
)
from ..core.config import settings
from ..core.database import is_unique_violation
from ..core.exceptions import (
    NotFoundError, ValidationError, AlreadyEnrolledError, SubjectFullError,
    InvalidTransitionError, StaleEnrollmentError, StoreError
)
from ..models.enrollment import SubjectKind, PaymentStatus
from ..models.profile import Profile
from ..utils.payment_reference import generate_payment_reference
from ..utils.pagination import Paginator
from ..utils.search import sanitize_search_term

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EnrollmentService(BaseService):
    """Lifecycle operations for one subject kind's enrollment table."""

    def __init__(self, kind: SubjectKind, db: AsyncSession):
        self.kind = SubjectKind(kind)
        self.subject_type = subject_type(self.kind)
        super().__init__(self.subject_type.enrollment_model, db)
        self.subject_column = getattr(self.model, self.model.subject_key)

    # ------------------------------------------------------------------ reads

    async def get(self, id: Any, fresh: bool = False):
        stmt = select(self.model).where(self.model.id == id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_subject(self, subject_id: UUID):
        stmt = select(self.subject_type.subject_model).where(self.subject_type.subject_model.id == subject_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: UUID, subject_id: UUID):
        """The member's enrollment in a subject, re-read on every call"""
        stmt = select(self.model).where(
            self.model.user_id == user_id,
            self.subject_column == subject_id
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: UUID, status: Optional[PaymentStatus] = None) -> List:
        stmt = select(self.model).where(self.model.user_id == user_id)
        if status is not None:
            stmt = stmt.where(self.model.payment_status.in_(stored_values(self.kind, status)))
        stmt = stmt.order_by(self.model.enrolled_at.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count(self, subject_id: Optional[UUID] = None, status: Optional[PaymentStatus] = None) -> int:
        """Count-only query used for occupancy and dashboard figures"""
        stmt = select(func.count()).select_from(self.model)
        if subject_id is not None:
            stmt = stmt.where(self.subject_column == subject_id)
        if status is not None:
            stmt = stmt.where(self.model.payment_status.in_(stored_values(self.kind, status)))
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def confirmed_revenue(self) -> float:
        stmt = select(func.coalesce(func.sum(self.model.payment_amount), 0)).where(
            self.model.payment_status.in_(stored_values(self.kind, PaymentStatus.CONFIRMED))
        )
        result = await self.db.execute(stmt)
        return float(result.scalar() or 0)

    async def list_admin(
        self,
        status: Optional[PaymentStatus] = PaymentStatus.PENDING,
        search: Optional[str] = None,
        page: int = 1,
        size: int = 20,
    ) -> Dict[str, Any]:
        """Admin payments view: newest first, joined with member and subject names.

        ``status=None`` lists every status. ``search`` matches the payment
        reference case-insensitively.
        """
        subject_model = self.subject_type.subject_model
        filters = []
        if status is not None:
            filters.append(self.model.payment_status.in_(stored_values(self.kind, status)))
        if search:
            term = sanitize_search_term(search)
            if term:
                filters.append(func.lower(self.model.payment_reference).like(f"%{term.lower()}%", escape="\\"))

        count_stmt = select(func.count()).select_from(self.model).where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(self.model, Profile.full_name, Profile.phone, subject_model.title)
            .outerjoin(Profile, Profile.user_id == self.model.user_id)
            .outerjoin(subject_model, subject_model.id == self.subject_column)
            .where(*filters)
            .order_by(self.model.enrolled_at.desc(), self.model.id)
            .offset(Paginator.calculate_offset(page, size))
            .limit(size)
        )
        result = await self.db.execute(stmt)
        rows = [
            {
                "enrollment": enrollment,
                "member_name": full_name,
                "member_phone": phone,
                "subject_title": title,
            }
            for enrollment, full_name, phone, title in result.all()
        ]
        return {"items": rows, "total": total, "page": page, "size": size}

    # ------------------------------------------------------------------ create

    async def create_enrollment(self, subject_id: UUID, user_id: UUID, profile_fields: Dict):
        """Create one pending enrollment after refreshing the member's profile.

        The amount is the subject's current price read here, never a value
        supplied by the client.
        """
        await ProfileService(self.db).upsert(user_id, profile_fields)

        subject = await self.get_subject(subject_id)
        if subject is None:
            raise NotFoundError(self.subject_type.label.capitalize(), subject_id)
        if not getattr(subject, "is_active", True):
            raise ValidationError(f"This {self.subject_type.label} is not open for enrollment")

        if self.subject_type.capacity_field:
            capacity = getattr(subject, self.subject_type.capacity_field)
            if capacity:
                taken = await self.count(subject_id=subject_id, status=PaymentStatus.CONFIRMED)
                if taken >= capacity:
                    raise SubjectFullError(self.subject_type.label)

        reference = generate_payment_reference()
        enrollment = self.model(
            user_id=user_id,
            payment_status=to_stored(self.kind, PaymentStatus.PENDING),
            payment_reference=reference,
            payment_amount=subject.price_aoa,
            payment_method=settings.payment_method,
            enrolled_at=utcnow(),
            paid_at=None,
            version=1,
        )
        setattr(enrollment, self.model.subject_key, subject_id)
        self.db.add(enrollment)

        try:
            await self.commit()
        except IntegrityError as e:
            if is_unique_violation(e):
                logger.info("Duplicate %s enrollment rejected for user %s subject %s", self.kind.value, user_id, subject_id)
                raise AlreadyEnrolledError(self.subject_type.label)
            logger.error("Integrity error creating %s enrollment: %s", self.kind.value, e)
            raise StoreError()

        await self.db.refresh(enrollment)
        logger.info(
            "Created %s enrollment %s for user %s (reference %s, amount %s)",
            self.kind.value, enrollment.id, user_id, reference, enrollment.payment_amount
        )
        return enrollment

    # ------------------------------------------------------------------ transitions

    async def confirm_payment(self, enrollment_id: UUID, expected_version: Optional[int] = None, acted_by: Optional[UUID] = None):
        """pending -> confirmed, stamping paid_at"""
        return await self._transition(enrollment_id, PaymentStatus.CONFIRMED, expected_version, acted_by)

    async def cancel_enrollment(self, enrollment_id: UUID, expected_version: Optional[int] = None, acted_by: Optional[UUID] = None):
        """pending -> cancelled; terminal, there is no un-cancel"""
        return await self._transition(enrollment_id, PaymentStatus.CANCELLED, expected_version, acted_by)

    async def _transition(
        self,
        enrollment_id: UUID,
        target: PaymentStatus,
        expected_version: Optional[int],
        acted_by: Optional[UUID],
    ):
        sources = [value for state in source_states(target) for value in stored_values(self.kind, state)]
        values = {
            "payment_status": to_stored(self.kind, target),
            "version": self.model.version + 1,
        }
        if target is PaymentStatus.CONFIRMED:
            values["paid_at"] = utcnow()

        # Compare-and-swap: only a row in an allowed source state at the expected version moves
        stmt = update(self.model).where(
            self.model.id == enrollment_id,
            self.model.payment_status.in_(sources),
        )
        if expected_version is not None:
            stmt = stmt.where(self.model.version == expected_version)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        try:
            result = await self.db.execute(stmt)
            updated = result.rowcount
            await self.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to move %s enrollment %s to %s: %s", self.kind.value, enrollment_id, target.value, e)
            raise StoreError()

        current = await self.get(enrollment_id, fresh=True)
        if updated == 1:
            logger.info(
                "%s enrollment %s moved to %s by %s (version %s)",
                self.kind.value, enrollment_id, current.payment_status, acted_by, current.version
            )
            return current

        if current is None:
            raise NotFoundError("Enrollment", enrollment_id)
        current_status = from_stored(self.kind, current.payment_status)
        if is_terminal(current_status) or not can_transition(current_status, target):
            raise InvalidTransitionError(current_status.value, target.value)
        raise StaleEnrollmentError(expected_version, current.version)
