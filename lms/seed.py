"""
Seed the LMS database.

Creates the tables, a super admin with a default district, school and admin,
a demo course when there are no courses, and optionally loads sample
learners and submissions.

Usage:
    python -m lms.seed [--database-url URL] [--learners learners.csv] [--submissions submissions.csv]

Super admin credentials come from --super-email/--super-password or the
SEED_SUPERADMIN_EMAIL / SEED_SUPERADMIN_PASSWORD environment variables.
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from .auth import ActorContext, hash_password
from .database import SessionLocal, atomic, create_engine_for, create_tables, engine
from .models import Admin, AdminRole, AdminSchool, Assignment, Course, District, Learner, School, Submission
from .packages.manifest import slugify
from .services.roster import FIELD_SEPARATOR, ImportResult, reconcile_roster

logger = logging.getLogger(__name__)

DEMO_ASSIGNMENTS = ["Introduction Quiz", "Module 1 Reflection", "Final Project"]
DEFAULT_ADMIN_EMAIL = "admin@example.com"
DEFAULT_ADMIN_PASSWORD = "changeme"
SAMPLE_SUBMISSION_TEXT = "Sample submission text"


def seed_super_admin(db: Session, email: Optional[str], password: Optional[str]) -> Optional[Admin]:
    """
    Create the super admin if ``email`` is new.

    A fresh super admin also gets a Default District with a Default School
    and a Default Admin assigned to it.
    """
    if not email or not password:
        logger.info("No super admin credentials given; skipping super admin seed")
        return None
    existing = db.scalars(select(Admin).where(Admin.email == email)).first()
    if existing is not None:
        return existing

    with atomic(db):
        super_admin = Admin(name="Super Admin", email=email, password_hash=hash_password(password), role=AdminRole.super)
        district = District(name="Default District", city="City", state="ST")
        db.add_all([super_admin, district])
        db.flush()
        school = School(name="Default School", district_id=district.id)
        admin = Admin(
            name="Default Admin",
            email=DEFAULT_ADMIN_EMAIL,
            password_hash=hash_password(DEFAULT_ADMIN_PASSWORD),
            role=AdminRole.admin,
        )
        db.add_all([school, admin])
        db.flush()
        db.add(AdminSchool(admin_id=admin.id, school_id=school.id))
    logger.info(f"Seeded super admin {email}")
    return super_admin


def seed_demo_course(db: Session) -> Optional[Course]:
    """Create a demo course with three assignments when no course exists."""
    if db.scalar(select(func.count(Course.id))):
        return None
    with atomic(db):
        course = Course(title="Demo Course", description="Example coursework", active=True)
        db.add(course)
        db.flush()
        for position, title in enumerate(DEMO_ASSIGNMENTS):
            db.add(Assignment(
                course_id=course.id,
                title=title,
                slug=slugify(title),
                prompt=f"Please complete: {title}",
                position=position,
            ))
    logger.info("Seeded demo course")
    return course


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def load_sample_submissions(db: Session, text: str) -> Tuple[int, int]:
    """
    Load ``learner_name,assignment_title,course_id,created_at`` lines.

    Lines whose learner or assignment cannot be found are skipped.

    Returns:
        (loaded, skipped) counts.
    """
    loaded = skipped = 0
    full_name = Learner.first_name + " " + Learner.last_name
    with atomic(db):
        for line in text.splitlines()[1:]:
            if not line.strip():
                continue
            cells = [c.strip() for c in line.split(FIELD_SEPARATOR)]
            if len(cells) < 4 or not cells[2].isdigit():
                skipped += 1
                continue
            learner_name, assignment_title, course_id, created_at = cells[:4]
            assignment = db.scalars(
                select(Assignment).where(Assignment.course_id == int(course_id), Assignment.title == assignment_title)
            ).first()
            learner = db.scalars(select(Learner).where(full_name == learner_name).order_by(Learner.id)).first()
            if assignment is None or learner is None:
                skipped += 1
                continue
            submission = Submission(
                assignment_id=assignment.id,
                learner_id=learner.id,
                text=SAMPLE_SUBMISSION_TEXT,
            )
            timestamp = _parse_timestamp(created_at)
            if timestamp is not None:
                submission.created_at = timestamp
            db.add(submission)
            loaded += 1
    logger.info(f"Loaded {loaded} sample submissions, skipped {skipped}")
    return loaded, skipped


def load_sample_data(
    db: Session,
    actor: ActorContext,
    learners_text: Optional[str] = None,
    submissions_text: Optional[str] = None,
) -> Tuple[Optional[ImportResult], Tuple[int, int]]:
    """Load a sample roster (through the roster importer) and sample submissions."""
    roster_result = reconcile_roster(db, actor, learners_text) if learners_text else None
    submission_counts = load_sample_submissions(db, submissions_text) if submissions_text else (0, 0)
    return roster_result, submission_counts


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the LMS database")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL (default: DATABASE_URL)")
    parser.add_argument("--super-email", default=os.getenv("SEED_SUPERADMIN_EMAIL"))
    parser.add_argument("--super-password", default=os.getenv("SEED_SUPERADMIN_PASSWORD"))
    parser.add_argument("--learners", type=Path, default=None, help="Sample roster file to import")
    parser.add_argument("--submissions", type=Path, default=None, help="Sample submissions file to load")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    bind = create_engine_for(args.database_url) if args.database_url else engine
    if bind.dialect.name == "sqlite" and bind.url.database and bind.url.database != ":memory:":
        Path(bind.url.database).parent.mkdir(parents=True, exist_ok=True)
    create_tables(bind)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=bind) if args.database_url else SessionLocal

    db = session_factory()
    try:
        super_admin = seed_super_admin(db, args.super_email, args.super_password)
        seed_demo_course(db)
        if super_admin is not None and (args.learners or args.submissions):
            result, (loaded, skipped) = load_sample_data(
                db,
                ActorContext.for_admin(super_admin),
                learners_text=args.learners.read_text(encoding="utf-8") if args.learners else None,
                submissions_text=args.submissions.read_text(encoding="utf-8") if args.submissions else None,
            )
            if result is not None:
                logger.info(f"Sample roster: {result.imported} imported, {result.skipped} skipped")
    finally:
        db.close()

    logger.info("Seed complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
