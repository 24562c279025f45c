# marketplace/models/catalog.py
"""Purchasable subjects: class groups, courses (with modules/lessons) and mentorships."""
from sqlalchemy import Column, String, Integer, Numeric, Boolean, Date, DateTime, Text, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from .base import Base


class ClassGroup(Base):
    __tablename__ = "class_groups"

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    schedule = Column(String(200), nullable=False)
    format = Column(String(50), nullable=False)  # presencial, online, hibrido
    instructor = Column(String(200))
    price_aoa = Column(Numeric(12, 2), nullable=False)
    spots = Column(Integer, nullable=False, default=20)
    start_date = Column(Date)
    end_date = Column(Date)
    topics = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, nullable=False)

    enrollments = relationship("ClassEnrollment", back_populates="class_group")


class Course(Base):
    __tablename__ = "courses"

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    category = Column(String(100), index=True)
    level = Column(String(50))
    duration_hours = Column(Integer)
    image_url = Column(String(500))
    price_aoa = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    modules = relationship(
        "CourseModule", back_populates="course",
        order_by="CourseModule.order_index", cascade="all, delete-orphan"
    )
    enrollments = relationship("CourseEnrollment", back_populates="course")


class CourseModule(Base):
    __tablename__ = "course_modules"

    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    order_index = Column(Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="modules")
    lessons = relationship(
        "CourseLesson", back_populates="module",
        order_by="CourseLesson.order_index", cascade="all, delete-orphan"
    )


class CourseLesson(Base):
    __tablename__ = "course_lessons"

    module_id = Column(Uuid(as_uuid=True), ForeignKey("course_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    content = Column(Text)
    video_url = Column(String(500))
    duration_minutes = Column(Integer)
    order_index = Column(Integer, nullable=False, default=0)
    # Free-preview lessons are visible without a confirmed enrollment
    is_free = Column(Boolean, default=False, nullable=False)

    module = relationship("CourseModule", back_populates="lessons")


class Mentorship(Base):
    __tablename__ = "mentorships"

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    category = Column(String(100))
    duration_weeks = Column(Integer)
    image_url = Column(String(500))
    mentor_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    price_aoa = Column(Numeric(12, 2), nullable=False)
    max_students = Column(Integer)
    is_active = Column(Boolean, default=True, nullable=False)

    enrollments = relationship("MentorshipEnrollment", back_populates="mentorship")
