"""Live events with member and guest registrations."""
from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Uuid, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .base import Base


class Event(Base):
    __tablename__ = "events"

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    address = Column(String(500), nullable=False)
    creator = Column(String(200), nullable=False)
    background_image_url = Column(String(500))
    # Countdown target
    target_date = Column(DateTime(timezone=True), nullable=False, index=True)
    created_by = Column(Uuid(as_uuid=True), nullable=False)

    registrations = relationship("EventRegistration", back_populates="event", cascade="all, delete-orphan")
    external_participants = relationship("ExternalParticipant", back_populates="event", cascade="all, delete-orphan")


class EventRegistration(Base):
    __tablename__ = "event_registrations"

    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    registered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_registration"),
    )

    event = relationship("Event", back_populates="registrations")


class ExternalParticipant(Base):
    """Profile-less guest registration; carries no payment state."""
    __tablename__ = "external_participants"

    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(20), nullable=False)
    age = Column(Integer, nullable=False)
    id_number = Column(String(30), nullable=False)
    academic_info = Column(Text)
    employment_status = Column(String(30))
    job_title = Column(String(100))
    company = Column(String(200))
    registered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    event = relationship("Event", back_populates="external_participants")
