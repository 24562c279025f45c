# marketplace/services/enrollment_lifecycle.py
"""Payment-status rules shared by class, course and mentorship enrollments.

Domain code works with ``PaymentStatus``. Rows keep the historical spelling
of the confirmed state (``paid`` for classes and courses, ``confirmed`` for
mentorships); ``to_stored``/``from_stored`` translate at the table boundary.
"""
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Type

from ..models.catalog import ClassGroup, Course, Mentorship
from ..models.enrollment import (
    SubjectKind, PaymentStatus,
    ClassEnrollment, CourseEnrollment, MentorshipEnrollment
)


@dataclass(frozen=True)
class SubjectType:
    kind: SubjectKind
    enrollment_model: Type[Any]
    subject_model: Type[Any]
    # Subject column limiting confirmed enrollments, None when unlimited
    capacity_field: Optional[str]
    label: str


SUBJECTS: Dict[SubjectKind, SubjectType] = {
    SubjectKind.CLASS: SubjectType(SubjectKind.CLASS, ClassEnrollment, ClassGroup, "spots", "class group"),
    SubjectKind.COURSE: SubjectType(SubjectKind.COURSE, CourseEnrollment, Course, None, "course"),
    SubjectKind.MENTORSHIP: SubjectType(SubjectKind.MENTORSHIP, MentorshipEnrollment, Mentorship, "max_students", "mentorship"),
}

CONFIRMED_STORED_VALUE: Dict[SubjectKind, str] = {
    SubjectKind.CLASS: "paid",
    SubjectKind.COURSE: "paid",
    SubjectKind.MENTORSHIP: "confirmed",
}

_LEGACY_CONFIRMED: FrozenSet[str] = frozenset(CONFIRMED_STORED_VALUE.values())

ALLOWED_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.CONFIRMED, PaymentStatus.CANCELLED}),
    PaymentStatus.CONFIRMED: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
}


def subject_type(kind: SubjectKind) -> SubjectType:
    return SUBJECTS[SubjectKind(kind)]


def to_stored(kind: SubjectKind, status: PaymentStatus) -> str:
    status = PaymentStatus(status)
    if status is PaymentStatus.CONFIRMED:
        return CONFIRMED_STORED_VALUE[SubjectKind(kind)]
    return status.value


def stored_values(kind: SubjectKind, status: PaymentStatus) -> List[str]:
    """Every stored spelling that reads back as ``status``, for query filters"""
    status = PaymentStatus(status)
    if status is PaymentStatus.CONFIRMED:
        return sorted(_LEGACY_CONFIRMED)
    return [status.value]


def from_stored(kind: SubjectKind, value: str) -> PaymentStatus:
    # Either confirmed spelling reads as confirmed so rows written under the
    # other convention still show up in admin views.
    if value in _LEGACY_CONFIRMED:
        return PaymentStatus.CONFIRMED
    try:
        return PaymentStatus(value)
    except ValueError:
        raise ValueError(f"Unknown payment status {value!r} for {SubjectKind(kind).value} enrollment")


def is_terminal(status: PaymentStatus) -> bool:
    return not ALLOWED_TRANSITIONS[PaymentStatus(status)]


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return PaymentStatus(target) in ALLOWED_TRANSITIONS[PaymentStatus(current)]


def source_states(target: PaymentStatus) -> List[PaymentStatus]:
    return [status for status in PaymentStatus if can_transition(status, target)]


def has_access(kind: SubjectKind, enrollment) -> bool:
    """True iff the enrollment's stored status is this kind's confirmed value.

    No caching: callers re-read the enrollment on every check.
    """
    if enrollment is None:
        return False
    return enrollment.payment_status == CONFIRMED_STORED_VALUE[SubjectKind(kind)]


def can_view_lesson(kind: SubjectKind, enrollment, lesson) -> bool:
    if lesson is not None and getattr(lesson, "is_free", False):
        return True
    return has_access(kind, enrollment)
