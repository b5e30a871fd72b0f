"""Many-to-many association tables.

Each table has a composite primary key, so a pair can only be stored once.
"""

from sqlalchemy import Column, ForeignKey, Integer

from ..database import Base


class AdminSchool(Base):
    __tablename__ = "admin_schools"

    admin_id = Column(Integer, ForeignKey("admins.id", ondelete="CASCADE"), primary_key=True)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), primary_key=True)


class LearnerSchool(Base):
    __tablename__ = "learner_schools"

    learner_id = Column(Integer, ForeignKey("learners.id", ondelete="CASCADE"), primary_key=True)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), primary_key=True)


class SchoolCourse(Base):
    __tablename__ = "school_courses"

    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)


class LearnerCourse(Base):
    __tablename__ = "learner_courses"

    learner_id = Column(Integer, ForeignKey("learners.id", ondelete="CASCADE"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
