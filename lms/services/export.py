"""Roster and submission exports.

``export_roster`` writes the same text format ``reconcile_roster`` reads, so
an export can be imported back unchanged.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import LearnerCourse, LearnerSchool
from .roster import FIELD_SEPARATOR, ID_SEPARATOR, ROSTER_HEADER
from .scope import Scope, list_learners, list_submissions

logger = logging.getLogger(__name__)

SUBMISSIONS_HEADER = "learner_name,assignment_title,course_id,created_at"


def _links_by_learner(db: Session, link_model, target_column: str, learner_ids, target_ids) -> Dict[int, List[int]]:
    target = getattr(link_model, target_column)
    stmt = select(link_model.learner_id, target).where(
        link_model.learner_id.in_(sorted(learner_ids)),
        target.in_(sorted(target_ids)),
    )
    grouped: Dict[int, List[int]] = defaultdict(list)
    for learner_id, target_id in db.execute(stmt).all():
        grouped[learner_id].append(target_id)
    return grouped


def _join_ids(ids: Iterable[int]) -> str:
    return ID_SEPARATOR.join(str(i) for i in sorted(ids))


def export_roster(db: Session, scope: Scope) -> str:
    """
    Render the learners in ``scope`` as roster text.

    Rows are ordered by last name then first name. School and course ids are
    limited to the scope's schools and courses and listed in ascending order.
    """
    learners = list_learners(db, scope)
    schools = _links_by_learner(db, LearnerSchool, "school_id", scope.learner_ids, scope.school_ids)
    courses = _links_by_learner(db, LearnerCourse, "course_id", scope.learner_ids, scope.course_ids)

    lines = [ROSTER_HEADER]
    for learner in learners:
        lines.append(FIELD_SEPARATOR.join([
            learner.first_name,
            learner.last_name,
            learner.code,
            _join_ids(schools.get(learner.id, ())),
            _join_ids(courses.get(learner.id, ())),
        ]))
    logger.info(f"Exported {len(learners)} learners for admin {scope.actor.id}")
    return "\n".join(lines) + "\n"


def export_submissions(db: Session, scope: Scope) -> str:
    """Render the submissions in ``scope``, newest first."""
    lines = [SUBMISSIONS_HEADER]
    submissions = list_submissions(db, scope)
    for submission in submissions:
        created = submission.created_at.strftime("%Y-%m-%d %H:%M:%S") if submission.created_at else ""
        lines.append(FIELD_SEPARATOR.join([
            submission.learner_name or "",
            submission.assignment_title or "",
            str(submission.course_id or ""),
            created,
        ]))
    logger.info(f"Exported {len(submissions)} submissions for admin {scope.actor.id}")
    return "\n".join(lines) + "\n"
