from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.rate_limiter import public_rate_limit
from ..core.security import CurrentUser, get_current_user, get_current_admin
from ..schemas.certificate_schemas import CertificateCreate, CertificateRead, CertificateVerificationResult
from ..services.certificate_service import CertificateService

router = APIRouter(prefix="/api/v1/certificates", tags=["Certificates"])


@router.get(
    "/verify/{code}",
    response_model=CertificateVerificationResult,
    dependencies=[Depends(public_rate_limit)]
)
async def verify_certificate(
    code: str,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Public certificate lookup by code"""
    service = CertificateService(db)
    client_ip = request.client.host if request.client else None
    return await service.verify(code, client_ip=client_ip)


@router.post("/", response_model=CertificateRead, status_code=201)
async def issue_certificate(
    certificate_data: CertificateCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Issue a certificate for a completed course or class group (admin)"""
    service = CertificateService(db)
    return await service.issue(certificate_data.model_dump())


@router.get("/me", response_model=List[CertificateRead])
async def my_certificates(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = CertificateService(db)
    return await service.list_for_user(current_user.id)
