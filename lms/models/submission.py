"""Submission model."""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Submission(Base):
    """A learner's answer to an assignment. Rows are never updated."""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    learner_id = Column(Integer, ForeignKey("learners.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, default="")
    file_path = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    assignment = relationship("Assignment", back_populates="submissions")
    learner = relationship("Learner", back_populates="submissions")

    def __repr__(self):
        return f"<Submission(id={self.id}, learner_id={self.learner_id}, assignment_id={self.assignment_id})>"

    @property
    def learner_name(self):
        return self.learner.full_name if self.learner else None

    @property
    def assignment_title(self):
        return self.assignment.title if self.assignment else None

    @property
    def course_id(self):
        return self.assignment.course_id if self.assignment else None
