"""Scope resolution: which schools, courses, learners and submissions an admin may see.

Scope is always derived from the association tables at call time. An
``admin`` sees the schools it is assigned to, the courses offered at those
schools, the learners enrolled at those schools and those learners'
submissions. A ``super`` admin sees everything.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, assert_never

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import ActorContext
from ..errors import AuthorizationError, NotFoundError
from ..models import (
    Admin,
    AdminRole,
    AdminSchool,
    Course,
    District,
    Learner,
    LearnerSchool,
    School,
    SchoolCourse,
    Submission,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """Ids visible to one actor at the moment the scope was resolved."""
    actor: ActorContext
    school_ids: FrozenSet[int]
    course_ids: FrozenSet[int]
    learner_ids: FrozenSet[int]
    submission_ids: FrozenSet[int]

    def require_schools(self, school_ids: Iterable[int]) -> None:
        outside = set(school_ids) - self.school_ids
        if outside:
            raise AuthorizationError(self.actor.id, f"Schools outside admin scope: {sorted(outside)}")

    def require_courses(self, course_ids: Iterable[int]) -> None:
        outside = set(course_ids) - self.course_ids
        if outside:
            raise AuthorizationError(self.actor.id, f"Courses outside admin scope: {sorted(outside)}")

    def require_learner(self, learner_id: int) -> None:
        if learner_id not in self.learner_ids:
            raise AuthorizationError(self.actor.id, f"Learner {learner_id} is outside admin scope")


def load_actor(db: Session, actor: ActorContext) -> Admin:
    """Fetch the admin behind ``actor`` and check its stored role matches."""
    admin = db.get(Admin, actor.id)
    if admin is None:
        raise NotFoundError("Admin", actor.id)
    if admin.role is not actor.role:
        logger.warning(f"Admin {actor.id} claimed role {actor.role.value}, stored {admin.role.value}")
        raise AuthorizationError(actor.id, "Actor role does not match the stored admin role")
    return admin


def _ids(db: Session, stmt) -> FrozenSet[int]:
    return frozenset(db.scalars(stmt).all())


def resolve_scope(db: Session, actor: ActorContext) -> Scope:
    """
    Compute the schools, courses, learners and submissions ``actor`` may access.

    Nothing is cached. Each query sees the state committed as of its own
    statement, so a replacement committed between two of the queries can show
    up in the later ones only.

    Raises:
        NotFoundError: If the actor id does not exist.
        AuthorizationError: If the actor's claimed role is not its stored role.
    """
    load_actor(db, actor)

    match actor.role:
        case AdminRole.super:
            school_ids = _ids(db, select(School.id))
            course_ids = _ids(db, select(Course.id))
            learner_ids = _ids(db, select(Learner.id))
            submission_ids = _ids(db, select(Submission.id))
        case AdminRole.admin:
            schools_q = select(AdminSchool.school_id).where(AdminSchool.admin_id == actor.id)
            learners_q = (
                select(LearnerSchool.learner_id)
                .where(LearnerSchool.school_id.in_(schools_q))
                .distinct()
            )
            school_ids = _ids(db, schools_q)
            course_ids = _ids(
                db,
                select(SchoolCourse.course_id).where(SchoolCourse.school_id.in_(schools_q)).distinct(),
            )
            learner_ids = _ids(db, learners_q)
            submission_ids = _ids(db, select(Submission.id).where(Submission.learner_id.in_(learners_q)))
        case _:
            assert_never(actor.role)

    logger.debug(
        f"Scope for admin {actor.id}: {len(school_ids)} schools, {len(course_ids)} courses, "
        f"{len(learner_ids)} learners, {len(submission_ids)} submissions"
    )
    return Scope(
        actor=actor,
        school_ids=school_ids,
        course_ids=course_ids,
        learner_ids=learner_ids,
        submission_ids=submission_ids,
    )


def list_schools(db: Session, scope: Scope) -> List[School]:
    stmt = (
        select(School)
        .outerjoin(District, District.id == School.district_id)
        .where(School.id.in_(sorted(scope.school_ids)))
        .order_by(District.name, School.name)
    )
    return list(db.scalars(stmt).all())


def list_courses(db: Session, scope: Scope, active_only: bool = True) -> List[Course]:
    stmt = select(Course).where(Course.id.in_(sorted(scope.course_ids)))
    if active_only:
        stmt = stmt.where(Course.active.is_(True))
    return list(db.scalars(stmt.order_by(Course.title, Course.id)).all())


def list_learners(db: Session, scope: Scope) -> List[Learner]:
    stmt = (
        select(Learner)
        .where(Learner.id.in_(sorted(scope.learner_ids)))
        .order_by(Learner.last_name, Learner.first_name, Learner.code, Learner.id)
    )
    return list(db.scalars(stmt).all())


def list_submissions(db: Session, scope: Scope) -> List[Submission]:
    """Submissions in scope, newest first."""
    stmt = (
        select(Submission)
        .where(Submission.id.in_(sorted(scope.submission_ids)))
        .order_by(Submission.created_at.desc(), Submission.id.desc())
    )
    return list(db.scalars(stmt).all())


def peer_admins(db: Session, actor: ActorContext) -> List[Admin]:
    """Admins assigned to any school in a district the actor works in.

    A super admin's peers are all admins.
    """
    load_actor(db, actor)
    stmt = select(Admin)
    if not actor.is_super:
        actor_districts = (
            select(School.district_id)
            .join(AdminSchool, AdminSchool.school_id == School.id)
            .where(AdminSchool.admin_id == actor.id)
        )
        peers = (
            select(AdminSchool.admin_id)
            .join(School, School.id == AdminSchool.school_id)
            .where(School.district_id.in_(actor_districts))
        )
        stmt = stmt.where(Admin.id.in_(peers))
    return list(db.scalars(stmt.order_by(Admin.name, Admin.id)).all())
