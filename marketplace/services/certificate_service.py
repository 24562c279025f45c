# marketplace/services/certificate_service.py
from typing import Any, Dict, Optional
from uuid import UUID
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
import logging

from .base_service import BaseService
from ..core.database import is_unique_violation
from ..core.exceptions import NotFoundError, PermissionDeniedError, StoreError
from ..models.catalog import ClassGroup, Course
from ..models.certificate import Certificate, CertificateVerification
from ..models.profile import Profile
from ..utils.payment_reference import generate_certificate_code

logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 3
DEFAULT_HOLDER_NAME = "D1000 Student"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CertificateService(BaseService[Certificate]):
    def __init__(self, db: AsyncSession):
        super().__init__(Certificate, db)

    async def issue(self, data: Dict) -> Certificate:
        """Issue a certificate with a fresh code, regenerating on a code clash"""
        if data.get("course_id") and await BaseService(Course, self.db).get(data["course_id"]) is None:
            raise NotFoundError("Course", data["course_id"])
        if data.get("class_group_id") and await BaseService(ClassGroup, self.db).get(data["class_group_id"]) is None:
            raise NotFoundError("Class group", data["class_group_id"])

        for attempt in range(CODE_ATTEMPTS):
            certificate = Certificate(**data, certificate_code=generate_certificate_code())
            self.db.add(certificate)
            try:
                await self.commit()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    logger.error("Integrity error issuing certificate: %s", e)
                    raise StoreError()
                logger.warning("Certificate code clash on attempt %s, regenerating", attempt + 1)
                continue
            await self.db.refresh(certificate)
            logger.info("Issued certificate %s to user %s", certificate.certificate_code, certificate.user_id)
            return certificate

        raise StoreError("Could not allocate a certificate code. Please try again.")

    async def get_by_code(self, code: str) -> Optional[Certificate]:
        stmt = (
            select(Certificate)
            .where(Certificate.certificate_code == code.strip().upper())
            .options(selectinload(Certificate.course), selectinload(Certificate.class_group))
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def verify(self, code: str, client_ip: Optional[str] = None) -> Dict[str, Any]:
        """Public lookup; logs one verification row per successful call"""
        certificate = await self.get_by_code(code)
        if certificate is None:
            raise NotFoundError("Certificate")
        if certificate.is_public is False:
            raise PermissionDeniedError("This certificate is not available for public verification")

        profile = (await self.db.execute(
            select(Profile).where(Profile.user_id == certificate.user_id)
        )).scalar_one_or_none()

        self.db.add(CertificateVerification(certificate_id=certificate.id, verified_by_ip=client_ip))
        await self.commit()

        count = (await self.db.execute(
            select(func.count()).select_from(CertificateVerification)
            .where(CertificateVerification.certificate_id == certificate.id)
        )).scalar() or 0

        subject = certificate.course or certificate.class_group
        expires_at = _as_utc(certificate.expires_at)
        return {
            "certificate": certificate,
            "holder_name": (profile.full_name if profile and profile.full_name else DEFAULT_HOLDER_NAME),
            "subject_title": subject.title if subject else None,
            "is_expired": bool(expires_at and expires_at < datetime.now(timezone.utc)),
            "verification_count": count,
        }

    async def list_for_user(self, user_id: UUID):
        stmt = select(Certificate).where(Certificate.user_id == user_id).order_by(Certificate.issued_at.desc())
        return (await self.db.execute(stmt)).scalars().all()
