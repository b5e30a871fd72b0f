"""Admin and Learner models."""

from sqlalchemy import CheckConstraint, Column, String, DateTime, Enum as SQLEnum, Integer
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from ..database import Base
from ..errors import ValidationError
from .enums import AdminRole

LEARNER_CODE_LENGTH = 4


def name_key(name: str) -> str:
    """Case-insensitive form of a learner name, Unicode aware."""
    return (name or "").strip().casefold()


class Admin(Base):
    """Administrative actor; ``super`` admins are unrestricted."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(AdminRole, name="admin_role"), nullable=False, default=AdminRole.admin)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    schools = relationship("School", secondary="admin_schools", back_populates="admins", viewonly=True)

    def __repr__(self):
        return f"<Admin(id={self.id}, email='{self.email}', role={self.role})>"

    @property
    def is_super(self) -> bool:
        return self.role == AdminRole.super


class Learner(Base):
    """Learner identified by first name, last name and a 4-character code."""
    __tablename__ = "learners"
    __table_args__ = (
        CheckConstraint(f"length(code) = {LEARNER_CODE_LENGTH}", name="ck_learners_code_length"),
    )

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    # Casefolded copies of the names; identity lookups compare these
    first_name_key = Column(String(100), nullable=False, index=True)
    last_name_key = Column(String(100), nullable=False, index=True)
    code = Column(String(LEARNER_CODE_LENGTH), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    schools = relationship("School", secondary="learner_schools", back_populates="learners", viewonly=True)
    courses = relationship("Course", secondary="learner_courses", back_populates="learners", viewonly=True)
    submissions = relationship(
        "Submission", back_populates="learner", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Learner(id={self.id}, name='{self.full_name}')>"

    @validates("first_name", "last_name")
    def validate_name(self, key, value):
        if not value or not value.strip():
            raise ValidationError(f"{key} is required")
        value = value.strip()
        setattr(self, f"{key}_key", name_key(value))
        return value

    @validates("code")
    def validate_code(self, key, value):
        if not value or len(value) != LEARNER_CODE_LENGTH:
            raise ValidationError(f"code must be exactly {LEARNER_CODE_LENGTH} characters")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
