# marketplace/services/catalog_service.py
from typing import Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
import logging

from .base_service import BaseService
from .enrollment_lifecycle import subject_type, stored_values
from ..core.exceptions import NotFoundError
from ..models.catalog import ClassGroup, Course, CourseModule, CourseLesson, Mentorship
from ..models.enrollment import SubjectKind, PaymentStatus

logger = logging.getLogger(__name__)


class CatalogService:
    """Class groups, courses and mentorships. Writes are admin-only at the router."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.class_groups = BaseService(ClassGroup, db)
        self.courses = BaseService(Course, db)
        self.mentorships = BaseService(Mentorship, db)

    def service_for(self, kind: SubjectKind) -> BaseService:
        return {
            SubjectKind.CLASS: self.class_groups,
            SubjectKind.COURSE: self.courses,
            SubjectKind.MENTORSHIP: self.mentorships,
        }[SubjectKind(kind)]

    async def confirmed_counts(self, kind: SubjectKind, subject_ids: List[UUID]) -> Dict[UUID, int]:
        """Confirmed enrollments per subject, one grouped count query"""
        if not subject_ids:
            return {}
        model = subject_type(kind).enrollment_model
        subject_column = getattr(model, model.subject_key)
        stmt = (
            select(subject_column, func.count())
            .where(
                subject_column.in_(subject_ids),
                model.payment_status.in_(stored_values(kind, PaymentStatus.CONFIRMED)),
            )
            .group_by(subject_column)
        )
        result = await self.db.execute(stmt)
        return {subject_id: count for subject_id, count in result.all()}

    # ------------------------------------------------------------ class groups

    async def list_class_groups(self, active_only: bool = True) -> List[Tuple[ClassGroup, int]]:
        stmt = select(ClassGroup).order_by(ClassGroup.start_date.asc(), ClassGroup.title.asc())
        if active_only:
            stmt = stmt.where(ClassGroup.is_active.is_(True))
        groups = (await self.db.execute(stmt)).scalars().all()
        counts = await self.confirmed_counts(SubjectKind.CLASS, [g.id for g in groups])
        return [(group, counts.get(group.id, 0)) for group in groups]

    async def get_class_group(self, class_group_id: UUID) -> Tuple[ClassGroup, int]:
        group = await self.class_groups.get(class_group_id)
        if group is None:
            raise NotFoundError("Class group", class_group_id)
        counts = await self.confirmed_counts(SubjectKind.CLASS, [group.id])
        return group, counts.get(group.id, 0)

    # ------------------------------------------------------------ courses

    async def list_courses(self, category: Optional[str] = None, active_only: bool = True) -> List[Course]:
        stmt = select(Course).order_by(Course.created_at.desc())
        if active_only:
            stmt = stmt.where(Course.is_active.is_(True))
        if category:
            stmt = stmt.where(Course.category == category)
        return (await self.db.execute(stmt)).scalars().all()

    async def get_course_detail(self, course_id: UUID) -> Course:
        stmt = (
            select(Course)
            .where(Course.id == course_id)
            .options(selectinload(Course.modules).selectinload(CourseModule.lessons))
        )
        course = (await self.db.execute(stmt)).scalar_one_or_none()
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    async def add_module(self, course_id: UUID, data: Dict) -> CourseModule:
        if await self.courses.get(course_id) is None:
            raise NotFoundError("Course", course_id)
        return await BaseService(CourseModule, self.db).create({**data, "course_id": course_id})

    async def add_lesson(self, course_id: UUID, module_id: UUID, data: Dict) -> CourseLesson:
        module = await BaseService(CourseModule, self.db).get(module_id)
        if module is None or module.course_id != course_id:
            raise NotFoundError("Course module", module_id)
        return await BaseService(CourseLesson, self.db).create({**data, "module_id": module_id})

    async def get_lesson(self, course_id: UUID, lesson_id: UUID) -> CourseLesson:
        stmt = (
            select(CourseLesson)
            .join(CourseModule, CourseModule.id == CourseLesson.module_id)
            .where(CourseLesson.id == lesson_id, CourseModule.course_id == course_id)
        )
        lesson = (await self.db.execute(stmt)).scalar_one_or_none()
        if lesson is None:
            raise NotFoundError("Lesson", lesson_id)
        return lesson

    # ------------------------------------------------------------ mentorships

    async def list_mentorships(self, active_only: bool = True) -> List[Tuple[Mentorship, int]]:
        stmt = select(Mentorship).order_by(Mentorship.created_at.desc())
        if active_only:
            stmt = stmt.where(Mentorship.is_active.is_(True))
        items = (await self.db.execute(stmt)).scalars().all()
        counts = await self.confirmed_counts(SubjectKind.MENTORSHIP, [m.id for m in items])
        return [(m, counts.get(m.id, 0)) for m in items]

    async def get_mentorship(self, mentorship_id: UUID) -> Tuple[Mentorship, int]:
        mentorship = await self.mentorships.get(mentorship_id)
        if mentorship is None:
            raise NotFoundError("Mentorship", mentorship_id)
        counts = await self.confirmed_counts(SubjectKind.MENTORSHIP, [mentorship.id])
        return mentorship, counts.get(mentorship.id, 0)

    async def update_subject(self, kind: SubjectKind, subject_id: UUID, changes: Dict):
        """Edit a subject. Existing enrollments keep their payment_amount snapshot."""
        subject = await self.service_for(kind).update(subject_id, changes)
        if subject is None:
            raise NotFoundError(subject_type(kind).label.capitalize(), subject_id)
        logger.info("Updated %s %s: %s", SubjectKind(kind).value, subject_id, sorted(changes))
        return subject
