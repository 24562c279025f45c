from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, JSON, Uuid, func
from sqlalchemy.orm import relationship
from .base import Base


class Certificate(Base):
    __tablename__ = "certificates"

    certificate_code = Column(String(40), unique=True, nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # Exactly one of these is set
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id"), nullable=True, index=True)
    class_group_id = Column(Uuid(as_uuid=True), ForeignKey("class_groups.id"), nullable=True, index=True)

    issued_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expires_at = Column(DateTime(timezone=True))
    is_public = Column(Boolean, default=True, nullable=False)
    skills = Column(JSON, default=list)
    issuer_name = Column(String(200))
    badge_type = Column(String(50))
    share_count = Column(Integer, default=0)

    course = relationship("Course")
    class_group = relationship("ClassGroup")
    verifications = relationship("CertificateVerification", back_populates="certificate", cascade="all, delete-orphan")


class CertificateVerification(Base):
    __tablename__ = "certificate_verifications"

    certificate_id = Column(Uuid(as_uuid=True), ForeignKey("certificates.id", ondelete="CASCADE"), nullable=False, index=True)
    verified_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    verified_by_ip = Column(String(64))
    verified_by_country = Column(String(2))

    certificate = relationship("Certificate", back_populates="verifications")
