"""Course creation, package import, school offering and learner enrollment."""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import ActorContext, require_super
from ..database import atomic
from ..errors import AuthorizationError, NotFoundError
from ..models import Assignment, Course, District, Learner, LearnerCourse, School, SchoolCourse
from ..packages import PackageDecoder, flatten_manifest, get_decoder
from ..packages.imscc_adapter import ImsccDecoder
from .associations import add_links, require_existing
from .scope import load_actor, resolve_scope

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_TITLE = "Imported Course"
IMPORT_DESCRIPTION = "Imported from IMSCC upload"


def _get_course(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course


def create_course(db: Session, actor: ActorContext, title: str, description: str = "") -> Course:
    require_super(actor, "creating courses")
    load_actor(db, actor)
    with atomic(db):
        course = Course(title=title, description=description or "", active=True)
        db.add(course)
    logger.info(f"Course {course.id} '{title}' created by admin {actor.id}")
    return course


def import_course_package(
    db: Session,
    actor: ActorContext,
    data: bytes,
    filename: Optional[str] = None,
    decoder: Optional[PackageDecoder] = None,
) -> Course:
    """
    Create a course and its assignments from a content package.

    The package is decoded and flattened before anything is written, so a
    bad package leaves no course behind.

    Args:
        db: Session to write through.
        actor: Must be a super admin.
        data: Raw package bytes.
        filename: Upload name, used to pick a decoder when none is given.
        decoder: Decoder to use instead of the filename lookup.

    Returns:
        The new course, with one assignment per manifest item in traversal order.

    Raises:
        AuthorizationError: If the actor is not a super admin.
        DecodeError: If the package cannot be read.
        MalformedPackage: If the manifest lacks organization or resources.
    """
    require_super(actor, "importing course packages")
    load_actor(db, actor)

    decoder = decoder or (get_decoder(filename) if filename else None) or ImsccDecoder()
    manifest = decoder.decode(data)
    records = flatten_manifest(manifest)

    with atomic(db):
        course = Course(
            title=manifest.course_title or DEFAULT_IMPORT_TITLE,
            description=IMPORT_DESCRIPTION,
            active=True,
        )
        db.add(course)
        db.flush()
        for position, record in enumerate(records):
            db.add(Assignment(
                course_id=course.id,
                title=record.title,
                slug=record.slug,
                prompt=record.prompt,
                position=position,
            ))

    logger.info(f"Imported course {course.id} '{course.title}' with {len(records)} assignments")
    return course


def _offer_course(db: Session, actor: ActorContext, course_id: int, school_ids: Iterable[int]) -> int:
    school_ids = list(school_ids)
    with atomic(db):
        _get_course(db, course_id)
        added = add_links(db, SchoolCourse, "course_id", course_id, "school_id", school_ids)
    logger.info(f"Course {course_id} offered at {len(added)} more schools by admin {actor.id}")
    return len(added)


def assign_course_to_all_schools(db: Session, actor: ActorContext, course_id: int) -> int:
    """Offer a course at every school. Returns the number of new links."""
    require_super(actor, "assigning courses to schools")
    load_actor(db, actor)
    return _offer_course(db, actor, course_id, db.scalars(select(School.id)).all())


def assign_course_to_districts(db: Session, actor: ActorContext, course_id: int, district_ids: Iterable[int]) -> int:
    """Offer a course at every school of the given districts."""
    require_super(actor, "assigning courses to districts")
    load_actor(db, actor)
    district_ids = require_existing(db, District, district_ids)
    if not district_ids:
        return 0
    schools = db.scalars(select(School.id).where(School.district_id.in_(sorted(district_ids)))).all()
    return _offer_course(db, actor, course_id, schools)


def assign_course_to_all_districts(db: Session, actor: ActorContext, course_id: int) -> int:
    require_super(actor, "assigning courses to districts")
    return assign_course_to_districts(db, actor, course_id, db.scalars(select(District.id)).all())


def enroll_learner_in_course(db: Session, actor: ActorContext, learner_id: int, course_id: int) -> bool:
    """
    Enroll a learner in a course; enrolling twice is a no-op.

    An ``admin`` may only enroll learners it can see into courses offered at
    its schools.

    Returns:
        True if a new enrollment was created.
    """
    scope = resolve_scope(db, actor)
    if db.get(Learner, learner_id) is None:
        raise NotFoundError("Learner", learner_id)
    _get_course(db, course_id)
    if not actor.is_super:
        scope.require_learner(learner_id)
        scope.require_courses([course_id])

    with atomic(db):
        added = add_links(db, LearnerCourse, "learner_id", learner_id, "course_id", [course_id])
    if added:
        logger.info(f"Learner {learner_id} enrolled in course {course_id} by admin {actor.id}")
    return bool(added)


def list_courses_for_learner(db: Session, learner_id: int) -> List[Course]:
    """Active courses the learner is enrolled in, by title."""
    stmt = (
        select(Course)
        .join(LearnerCourse, LearnerCourse.course_id == Course.id)
        .where(LearnerCourse.learner_id == learner_id, Course.active.is_(True))
        .order_by(Course.title, Course.id)
    )
    return list(db.scalars(stmt).all())


def require_enrollment(db: Session, learner_id: int, course_id: int) -> None:
    """Refuse access unless the learner is enrolled in an active course."""
    if not any(c.id == course_id for c in list_courses_for_learner(db, learner_id)):
        raise AuthorizationError(message=f"Learner {learner_id} is not enrolled in course {course_id}")


def list_assignments_for_course(db: Session, learner_id: int, course_id: int) -> List[Assignment]:
    """Assignments of a course the learner is enrolled in, in course order."""
    _get_course(db, course_id)
    require_enrollment(db, learner_id, course_id)
    stmt = select(Assignment).where(Assignment.course_id == course_id).order_by(Assignment.position, Assignment.id)
    return list(db.scalars(stmt).all())
