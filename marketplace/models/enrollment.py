# marketplace/models/enrollment.py
"""Enrollment records for the three purchasable subject kinds.

The three tables share one shape. Each keeps its own foreign key column name
(``class_group_id``, ``course_id``, ``mentorship_id``) so existing rows stay
readable; ``subject_key`` names that column for code that handles every kind.
"""
import enum
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Uuid, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .base import Base


class SubjectKind(str, enum.Enum):
    CLASS = "class"
    COURSE = "course"
    MENTORSHIP = "mentorship"


class PaymentStatus(str, enum.Enum):
    """Normalised payment status. Stored spelling is per kind, see enrollment_lifecycle."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class EnrollmentMixin:
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # Payment tracking
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    payment_reference = Column(String(40), index=True)
    payment_amount = Column(Numeric(12, 2))  # price snapshot at enrollment time
    payment_method = Column(String(50))

    enrolled_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    paid_at = Column(DateTime(timezone=True))

    # Bumped on every status transition; admins send it back to detect stale views
    version = Column(Integer, nullable=False, default=1)

    @property
    def subject_id(self):
        return getattr(self, self.subject_key)


class ClassEnrollment(EnrollmentMixin, Base):
    __tablename__ = "class_enrollments"
    subject_key = "class_group_id"

    class_group_id = Column(Uuid(as_uuid=True), ForeignKey("class_groups.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "class_group_id", name="uq_class_enrollment_user_subject"),
    )

    class_group = relationship("ClassGroup", back_populates="enrollments")


class CourseEnrollment(EnrollmentMixin, Base):
    __tablename__ = "course_enrollments"
    subject_key = "course_id"

    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_course_enrollment_user_subject"),
    )

    course = relationship("Course", back_populates="enrollments")


class MentorshipEnrollment(EnrollmentMixin, Base):
    __tablename__ = "mentorship_enrollments"
    subject_key = "mentorship_id"

    mentorship_id = Column(Uuid(as_uuid=True), ForeignKey("mentorships.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "mentorship_id", name="uq_mentorship_enrollment_user_subject"),
    )

    mentorship = relationship("Mentorship", back_populates="enrollments")
