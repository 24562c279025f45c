# marketplace/models/__init__.py
"""Import all models here so Base.metadata is complete for Alembic and create_all."""
from .base import Base

from .profile import Profile, UserRole
from .catalog import ClassGroup, Course, CourseModule, CourseLesson, Mentorship
from .enrollment import (
    SubjectKind, PaymentStatus,
    ClassEnrollment, CourseEnrollment, MentorshipEnrollment
)
from .certificate import Certificate, CertificateVerification
from .event import Event, EventRegistration, ExternalParticipant

__all__ = [
    "Base",
    "Profile",
    "UserRole",
    "ClassGroup",
    "Course",
    "CourseModule",
    "CourseLesson",
    "Mentorship",
    "SubjectKind",
    "PaymentStatus",
    "ClassEnrollment",
    "CourseEnrollment",
    "MentorshipEnrollment",
    "Certificate",
    "CertificateVerification",
    "Event",
    "EventRegistration",
    "ExternalParticipant",
]
