"""Learner submissions and the admin notification they trigger."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database import atomic
from ..errors import NotFoundError
from ..models import Admin, AdminSchool, Assignment, Learner, LearnerSchool, Submission
from ..notifications import NotificationMessage, Notifier, Recipient, default_notifier
from .courses import require_enrollment

logger = logging.getLogger(__name__)


def admins_for_learner(db: Session, learner_id: int) -> List[Recipient]:
    """Admins assigned to any school the learner attends."""
    learner_schools = select(LearnerSchool.school_id).where(LearnerSchool.learner_id == learner_id)
    stmt = (
        select(Admin.id, Admin.email)
        .join(AdminSchool, AdminSchool.admin_id == Admin.id)
        .where(AdminSchool.school_id.in_(learner_schools))
        .distinct()
        .order_by(Admin.id)
    )
    return [Recipient(id=admin_id, email=email) for admin_id, email in db.execute(stmt).all()]


def create_submission(
    db: Session,
    learner_id: int,
    assignment_id: int,
    text: str = "",
    file_path: Optional[str] = None,
    notifier: Optional[Notifier] = None,
) -> Submission:
    """
    Record a learner's submission and notify the admins of the learner's schools.

    Raises:
        NotFoundError: If the learner or assignment does not exist.
        AuthorizationError: If the learner is not enrolled in the assignment's course.
    """
    learner = db.get(Learner, learner_id)
    if learner is None:
        raise NotFoundError("Learner", learner_id)
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", assignment_id)
    require_enrollment(db, learner_id, assignment.course_id)

    with atomic(db):
        submission = Submission(
            assignment_id=assignment.id,
            learner_id=learner.id,
            text=text or "",
            file_path=file_path,
        )
        db.add(submission)
    logger.info(f"Submission {submission.id} by learner {learner_id} for assignment {assignment_id}")

    message = NotificationMessage(
        subject=f"[LMS] New submission: {assignment.title}",
        body=f"{learner.full_name} submitted '{assignment.title}'.",
    )
    (notifier or default_notifier()).notify(admins_for_learner(db, learner_id), message)
    return submission


def list_submissions_for_learner(db: Session, learner_id: int, assignment_id: int) -> List[Submission]:
    """A learner's own submissions for one assignment, newest first."""
    stmt = (
        select(Submission)
        .where(Submission.learner_id == learner_id, Submission.assignment_id == assignment_id)
        .order_by(Submission.created_at.desc(), Submission.id.desc())
    )
    return list(db.scalars(stmt).all())
