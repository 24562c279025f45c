from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import PermissionDeniedError
from ..core.security import CurrentUser, get_current_admin, get_optional_user
from ..models.enrollment import SubjectKind
from ..schemas.catalog_schemas import (
    ClassGroupCreate, ClassGroupUpdate, ClassGroupRead,
    CourseCreate, CourseUpdate, CourseRead, CourseDetail,
    CourseModuleCreate, CourseModuleRead, CourseLessonCreate, LessonDetail,
    MentorshipCreate, MentorshipUpdate, MentorshipRead
)
from ..services.catalog_service import CatalogService
from ..services.enrollment_lifecycle import can_view_lesson
from ..services.enrollment_service import EnrollmentService

router = APIRouter(prefix="/api/v1", tags=["Catalog"])


def _class_group_response(group, enrolled: int) -> ClassGroupRead:
    data = ClassGroupRead.model_validate(group)
    data.enrolled = enrolled
    data.spots_left = max(group.spots - enrolled, 0)
    return data


def _mentorship_response(mentorship, enrolled: int) -> MentorshipRead:
    data = MentorshipRead.model_validate(mentorship)
    data.enrolled = enrolled
    return data


# Class Groups
@router.get("/class-groups", response_model=List[ClassGroupRead])
async def list_class_groups(db: AsyncSession = Depends(get_db)):
    """Open class groups with confirmed occupancy"""
    service = CatalogService(db)
    return [_class_group_response(group, enrolled) for group, enrolled in await service.list_class_groups()]

@router.get("/class-groups/{class_group_id}", response_model=ClassGroupRead)
async def get_class_group(class_group_id: UUID, db: AsyncSession = Depends(get_db)):
    service = CatalogService(db)
    group, enrolled = await service.get_class_group(class_group_id)
    return _class_group_response(group, enrolled)

@router.post("/class-groups", response_model=ClassGroupRead, status_code=201)
async def create_class_group(
    group_data: ClassGroupCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a class group (admin)"""
    service = CatalogService(db)
    group = await service.class_groups.create(group_data.model_dump())
    return _class_group_response(group, 0)

@router.patch("/class-groups/{class_group_id}", response_model=ClassGroupRead)
async def update_class_group(
    class_group_id: UUID,
    group_data: ClassGroupUpdate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Edit a class group (admin). Existing enrollments keep the price they were created with."""
    service = CatalogService(db)
    await service.update_subject(SubjectKind.CLASS, class_group_id, group_data.model_dump(exclude_unset=True))
    group, enrolled = await service.get_class_group(class_group_id)
    return _class_group_response(group, enrolled)


# Courses
@router.get("/courses", response_model=List[CourseRead])
async def list_courses(
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    return await service.list_courses(category=category)

@router.get("/courses/{course_id}", response_model=CourseDetail)
async def get_course(course_id: UUID, db: AsyncSession = Depends(get_db)):
    """Course with its module and lesson outline. Lesson content is not included."""
    service = CatalogService(db)
    return await service.get_course_detail(course_id)

@router.post("/courses", response_model=CourseRead, status_code=201)
async def create_course(
    course_data: CourseCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    return await service.courses.create(course_data.model_dump())

@router.patch("/courses/{course_id}", response_model=CourseRead)
async def update_course(
    course_id: UUID,
    course_data: CourseUpdate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    return await service.update_subject(SubjectKind.COURSE, course_id, course_data.model_dump(exclude_unset=True))

@router.post("/courses/{course_id}/modules", response_model=CourseModuleRead, status_code=201)
async def add_course_module(
    course_id: UUID,
    module_data: CourseModuleCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    module = await service.add_module(course_id, module_data.model_dump())
    return CourseModuleRead(
        id=module.id,
        title=module.title,
        description=module.description,
        order_index=module.order_index,
        lessons=[]
    )

@router.post("/courses/{course_id}/modules/{module_id}/lessons", response_model=LessonDetail, status_code=201)
async def add_course_lesson(
    course_id: UUID,
    module_id: UUID,
    lesson_data: CourseLessonCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    return await service.add_lesson(course_id, module_id, lesson_data.model_dump())

@router.get("/courses/{course_id}/lessons/{lesson_id}", response_model=LessonDetail)
async def get_course_lesson(
    course_id: UUID,
    lesson_id: UUID,
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Lesson content: free previews for everyone, the rest for confirmed enrollments only"""
    service = CatalogService(db)
    lesson = await service.get_lesson(course_id, lesson_id)

    enrollment = None
    if current_user is not None and not lesson.is_free:
        enrollment = await EnrollmentService(SubjectKind.COURSE, db).get_for_user(current_user.id, course_id)

    if not can_view_lesson(SubjectKind.COURSE, enrollment, lesson):
        raise PermissionDeniedError("A confirmed enrollment is required to view this lesson")
    return lesson


# Mentorships
@router.get("/mentorships", response_model=List[MentorshipRead])
async def list_mentorships(db: AsyncSession = Depends(get_db)):
    service = CatalogService(db)
    return [_mentorship_response(m, enrolled) for m, enrolled in await service.list_mentorships()]

@router.get("/mentorships/{mentorship_id}", response_model=MentorshipRead)
async def get_mentorship(mentorship_id: UUID, db: AsyncSession = Depends(get_db)):
    service = CatalogService(db)
    mentorship, enrolled = await service.get_mentorship(mentorship_id)
    return _mentorship_response(mentorship, enrolled)

@router.post("/mentorships", response_model=MentorshipRead, status_code=201)
async def create_mentorship(
    mentorship_data: MentorshipCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    mentorship = await service.mentorships.create(mentorship_data.model_dump())
    return _mentorship_response(mentorship, 0)

@router.patch("/mentorships/{mentorship_id}", response_model=MentorshipRead)
async def update_mentorship(
    mentorship_id: UUID,
    mentorship_data: MentorshipUpdate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = CatalogService(db)
    await service.update_subject(SubjectKind.MENTORSHIP, mentorship_id, mentorship_data.model_dump(exclude_unset=True))
    mentorship, enrolled = await service.get_mentorship(mentorship_id)
    return _mentorship_response(mentorship, enrolled)
