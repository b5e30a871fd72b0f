"""Course and Assignment models."""

from sqlalchemy import Boolean, Column, String, Text, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Course(Base):
    """Course model."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    assignments = relationship(
        "Assignment",
        back_populates="course",
        order_by="Assignment.position",
        cascade="all, delete-orphan",
    )
    schools = relationship("School", secondary="school_courses", back_populates="courses", viewonly=True)
    learners = relationship("Learner", secondary="learner_courses", back_populates="courses", viewonly=True)

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}')>"

    @property
    def assignment_count(self):
        """Get count of assignments in this course."""
        return len(self.assignments)


class Assignment(Base):
    """Assignment model; imported packages create one per manifest item."""
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    prompt = Column(Text)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    course = relationship("Course", back_populates="assignments")
    submissions = relationship("Submission", back_populates="assignment")

    def __repr__(self):
        return f"<Assignment(id={self.id}, title='{self.title}')>"

    @property
    def submission_count(self):
        """Get count of submissions for this assignment."""
        return len(self.submissions)
