# marketplace/services/admin_stats_service.py
"""Back-office dashboard figures.

Every figure comes from its own read, so the result is not a snapshot: a
payment confirmed while the reads run may show in one figure and not in
another. The response says so (``consistency: "eventual"``).
"""
from datetime import datetime, timezone
from typing import Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from .enrollment_service import EnrollmentService
from ..models.catalog import ClassGroup, Course, Mentorship
from ..models.certificate import Certificate
from ..models.enrollment import SubjectKind, PaymentStatus
from ..models.profile import Profile


class AdminStatsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self) -> Dict[str, Any]:
        pending_by_kind = {}
        revenue_by_kind = {}
        for kind in SubjectKind:
            enrollments = EnrollmentService(kind, self.db)
            pending_by_kind[kind.value] = await enrollments.count(status=PaymentStatus.PENDING)
            revenue_by_kind[kind.value] = await enrollments.confirmed_revenue()

        return {
            "total_classes": await BaseService(ClassGroup, self.db).get_total_count(),
            "total_courses": await BaseService(Course, self.db).get_total_count(),
            "total_mentorships": await BaseService(Mentorship, self.db).get_total_count(),
            "issued_certificates": await BaseService(Certificate, self.db).get_total_count(),
            "total_students": await BaseService(Profile, self.db).get_total_count(),
            "pending_payments": sum(pending_by_kind.values()),
            "pending_by_kind": pending_by_kind,
            "total_revenue": sum(revenue_by_kind.values()),
            "revenue_by_kind": revenue_by_kind,
            "consistency": "eventual",
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }
