"""SQLAlchemy models for the district LMS."""

from .enums import AdminRole
from .school import District, School
from .user import Admin, Learner, LEARNER_CODE_LENGTH
from .course import Course, Assignment
from .submission import Submission
from .associations import AdminSchool, LearnerSchool, SchoolCourse, LearnerCourse

__all__ = [
    "AdminRole",
    "District",
    "School",
    "Admin",
    "Learner",
    "LEARNER_CODE_LENGTH",
    "Course",
    "Assignment",
    "Submission",
    "AdminSchool",
    "LearnerSchool",
    "SchoolCourse",
    "LearnerCourse",
]
