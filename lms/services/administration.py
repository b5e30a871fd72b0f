"""Privileged administration: districts, schools, admins and learner placement."""

import logging
from typing import Callable, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..auth import ActorContext, find_learner, hash_password, require_super
from ..database import atomic
from ..errors import NotFoundError, ValidationError
from ..models import (
    Admin,
    AdminRole,
    AdminSchool,
    District,
    Learner,
    LearnerCourse,
    LearnerSchool,
    School,
    Submission,
)
from .associations import add_links, current_targets, lock_owner, replace_links, require_existing
from .roster import upsert_learner
from .scope import load_actor, resolve_scope

logger = logging.getLogger(__name__)


def create_district(db: Session, actor: ActorContext, name: str, city: str = "", state: str = "") -> District:
    require_super(actor, "creating districts")
    load_actor(db, actor)
    if not name or not name.strip():
        raise ValidationError("District name is required")
    if db.scalars(select(District).where(District.name == name.strip())).first():
        raise ValidationError(f"District '{name}' already exists")
    with atomic(db):
        district = District(name=name.strip(), city=city, state=state)
        db.add(district)
    logger.info(f"District {district.id} '{district.name}' created by admin {actor.id}")
    return district


def create_school(db: Session, actor: ActorContext, name: str, district_id: int) -> School:
    require_super(actor, "creating schools")
    load_actor(db, actor)
    if not name or not name.strip():
        raise ValidationError("School name is required")
    if db.get(District, district_id) is None:
        raise NotFoundError("District", district_id)
    with atomic(db):
        school = School(name=name.strip(), district_id=district_id)
        db.add(school)
    logger.info(f"School {school.id} '{school.name}' created by admin {actor.id}")
    return school


def create_admin(
    db: Session,
    actor: ActorContext,
    name: str,
    email: str,
    password: str,
    role: AdminRole = AdminRole.admin,
    hasher: Callable[[str], str] = hash_password,
) -> Admin:
    """Create an admin account. Only super admins may do this."""
    require_super(actor, "creating admins")
    load_actor(db, actor)
    if not email or not password:
        raise ValidationError("Email and password are required")
    if db.scalars(select(Admin).where(Admin.email == email)).first():
        raise ValidationError("Email already registered")
    with atomic(db):
        admin = Admin(name=name, email=email, password_hash=hasher(password), role=role)
        db.add(admin)
    logger.info(f"Admin {admin.id} ({role.value}) created by admin {actor.id}")
    return admin


def replace_admin_schools(db: Session, actor: ActorContext, admin_id: int, school_ids: Iterable[int]) -> List[int]:
    """
    Replace an admin's schools with exactly ``school_ids``.

    The old assignments are removed and the new ones inserted in one
    transaction; replaying the same list leaves the same set.

    Returns:
        The admin's school ids after the replacement, ascending.
    """
    require_super(actor, "assigning admins to schools")
    load_actor(db, actor)
    with atomic(db):
        lock_owner(db, Admin, admin_id)
        schools = require_existing(db, School, school_ids)
        replace_links(db, AdminSchool, "admin_id", admin_id, "school_id", schools)
    logger.info(f"Admin {admin_id} assigned to schools {sorted(schools)} by admin {actor.id}")
    return sorted(schools)


def delete_admin(db: Session, actor: ActorContext, admin_id: int) -> None:
    """Delete an admin and its school assignments."""
    require_super(actor, "deleting admins")
    load_actor(db, actor)
    with atomic(db):
        admin = lock_owner(db, Admin, admin_id)
        db.execute(delete(AdminSchool).where(AdminSchool.admin_id == admin_id))
        db.delete(admin)
    logger.info(f"Admin {admin_id} deleted by admin {actor.id}")


def create_learner(
    db: Session,
    actor: ActorContext,
    first_name: str,
    last_name: str,
    code: str,
    school_ids: Optional[Iterable[int]] = None,
) -> Learner:
    """
    Enroll a single learner at the given schools.

    A learner with the same name and code is reused rather than duplicated.
    An ``admin`` may only place learners at its own schools. An existing learner
    may only be reused by an ``admin`` that already sees all of its schools.
    """
    scope = resolve_scope(db, actor)
    school_ids = set(school_ids or ())
    if not actor.is_super:
        scope.require_schools(school_ids)
        existing = find_learner(db, first_name, last_name, code)
        if existing is not None:
            scope.require_schools(current_targets(db, LearnerSchool, "learner_id", existing.id, "school_id"))
    require_existing(db, School, school_ids)

    with atomic(db):
        learner, is_new = upsert_learner(db, (first_name or "").strip(), (last_name or "").strip(), (code or "").strip())
        add_links(db, LearnerSchool, "learner_id", learner.id, "school_id", school_ids)
    logger.info(f"Learner {learner.id} {'created' if is_new else 'updated'} by admin {actor.id}")
    return learner


def replace_learner_schools(
    db: Session, actor: ActorContext, learner_id: int, school_ids: Iterable[int]
) -> List[int]:
    """
    Replace a learner's schools with exactly ``school_ids``.

    An ``admin`` may only do this for learners whose current and new schools
    all lie inside its scope.
    """
    scope = resolve_scope(db, actor)
    school_ids = set(school_ids)
    with atomic(db):
        lock_owner(db, Learner, learner_id)
        require_existing(db, School, school_ids)
        if not actor.is_super:
            scope.require_learner(learner_id)
            scope.require_schools(current_targets(db, LearnerSchool, "learner_id", learner_id, "school_id"))
            scope.require_schools(school_ids)
        replace_links(db, LearnerSchool, "learner_id", learner_id, "school_id", school_ids)
    logger.info(f"Learner {learner_id} moved to schools {sorted(school_ids)} by admin {actor.id}")
    return sorted(school_ids)


def delete_learner(db: Session, actor: ActorContext, learner_id: int) -> None:
    """Delete a learner with its associations and submissions."""
    scope = resolve_scope(db, actor)
    if not actor.is_super:
        scope.require_learner(learner_id)
    with atomic(db):
        learner = lock_owner(db, Learner, learner_id)
        db.execute(delete(LearnerSchool).where(LearnerSchool.learner_id == learner_id))
        db.execute(delete(LearnerCourse).where(LearnerCourse.learner_id == learner_id))
        db.execute(delete(Submission).where(Submission.learner_id == learner_id))
        db.delete(learner)
    logger.info(f"Learner {learner_id} deleted by admin {actor.id}")
