"""Member profile and role models."""
from sqlalchemy import Column, String, Date, Text, Uuid, UniqueConstraint
from .base import Base

class Profile(Base):
    __tablename__ = "profiles"

    # Owned by the identity provider; one profile per member
    user_id = Column(Uuid(as_uuid=True), nullable=False, unique=True, index=True)

    # Identity
    full_name = Column(String(200))
    display_name = Column(String(100))
    avatar_url = Column(String(500))
    birth_date = Column(Date)
    gender = Column(String(20))
    id_number = Column(String(30))

    # Contact
    phone = Column(String(20))
    address = Column(String(500))
    city = Column(String(100))
    province = Column(String(50))

    # Background
    academic_info = Column(Text)
    employment_status = Column(String(30))
    job_title = Column(String(100))
    company = Column(String(200))


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # admin, user, mentor, moderator

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
    )
