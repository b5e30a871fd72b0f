"""District and School models."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class District(Base):
    """District model."""
    __tablename__ = "districts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    city = Column(String(255))
    state = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    schools = relationship("School", back_populates="district", order_by="School.name")

    def __repr__(self):
        return f"<District(id={self.id}, name='{self.name}')>"


class School(Base):
    """School model."""
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    district_id = Column(Integer, ForeignKey("districts.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    district = relationship("District", back_populates="schools")
    admins = relationship("Admin", secondary="admin_schools", back_populates="schools", viewonly=True)
    learners = relationship("Learner", secondary="learner_schools", back_populates="schools", viewonly=True)
    courses = relationship("Course", secondary="school_courses", back_populates="schools", viewonly=True)

    def __repr__(self):
        return f"<School(id={self.id}, name='{self.name}')>"

    @property
    def district_name(self):
        return self.district.name if self.district else None
