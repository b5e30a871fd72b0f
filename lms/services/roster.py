"""
Roster import.

Reads bulk roster text and reconciles it into learners and their school and
course associations.

Example:
    >>> text = "first_name,last_name,code,school_ids,course_ids\\nAda,Lovelace,AL12,1;2,5\\n"
    >>> result = reconcile_roster(db, actor, text)
    >>> result.imported, result.skipped
    (1, 0)
"""

import logging
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import ActorContext, find_learner
from ..database import atomic
from ..errors import RosterFormatError, ValidationError
from ..models import Course, Learner, LearnerCourse, LearnerSchool, LEARNER_CODE_LENGTH, School
from .associations import add_links, current_targets, lock_owner, replace_links
from .scope import resolve_scope

logger = logging.getLogger(__name__)

ROSTER_COLUMNS = ("first_name", "last_name", "code", "school_ids", "course_ids")
ROSTER_HEADER = ",".join(ROSTER_COLUMNS)
FIELD_SEPARATOR = ","
ID_SEPARATOR = ";"


class RosterRow(BaseModel):
    """One validated roster line."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    row_number: int
    first_name: str
    last_name: str
    code: str
    school_ids: Tuple[int, ...] = ()
    course_ids: Tuple[int, ...] = ()

    @field_validator("first_name", "last_name")
    @classmethod
    def name_required(cls, v: str, info) -> str:
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("code")
    @classmethod
    def code_length(cls, v: str) -> str:
        if not v:
            raise ValueError("code is required")
        if len(v) != LEARNER_CODE_LENGTH:
            raise ValueError(f"code must be exactly {LEARNER_CODE_LENGTH} characters, got {len(v)}")
        return v

    @field_validator("school_ids", "course_ids", mode="before")
    @classmethod
    def split_ids(cls, v):
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(ID_SEPARATOR)]
            ids = []
            for part in parts:
                if not part:
                    continue
                if not part.isdigit():
                    raise ValueError(f"'{part}' is not an integer id")
                ids.append(int(part))
            return tuple(sorted(set(ids)))
        return v


class RowError(BaseModel):
    row_number: int
    message: str


class ImportResult(BaseModel):
    """Outcome of one roster import."""
    imported: int = 0
    skipped: int = 0
    created: int = 0
    errors: List[RowError] = Field(default_factory=list)


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(loc) for loc in error.get("loc", ()))
    message = error.get("msg", "invalid value")
    return f"{field}: {message}" if field else message


def parse_roster(text: str) -> Tuple[List[RosterRow], List[ValidationError]]:
    """
    Split roster text into validated rows and row errors.

    Args:
        text: Full roster text, header line first.

    Returns:
        A tuple of (valid rows, row-scoped ValidationErrors). Row numbers are
        1-based line numbers in ``text``.

    Raises:
        RosterFormatError: If the header is missing or is not exactly
            ``first_name,last_name,code,school_ids,course_ids``.
    """
    lines = (text or "").lstrip("\ufeff").splitlines()
    numbered = [(n, line) for n, line in enumerate(lines, start=1) if line.strip()]
    if not numbered:
        raise RosterFormatError(f"Roster is empty; expected header {ROSTER_HEADER}")

    header_number, header_line = numbered[0]
    header = tuple(cell.strip().lower() for cell in header_line.split(FIELD_SEPARATOR))
    if header != ROSTER_COLUMNS:
        raise RosterFormatError(f"Roster header must be {ROSTER_HEADER}", row_number=header_number)

    rows: List[RosterRow] = []
    errors: List[ValidationError] = []
    for row_number, line in numbered[1:]:
        cells = line.split(FIELD_SEPARATOR)
        if len(cells) > len(ROSTER_COLUMNS):
            errors.append(ValidationError(
                f"expected {len(ROSTER_COLUMNS)} columns, got {len(cells)}", row_number=row_number
            ))
            continue
        cells += [""] * (len(ROSTER_COLUMNS) - len(cells))
        try:
            rows.append(RosterRow(row_number=row_number, **dict(zip(ROSTER_COLUMNS, cells))))
        except PydanticValidationError as e:
            errors.append(ValidationError(_first_error(e), row_number=row_number))
    return rows, errors


def _existing_ids(db: Session, model, ids: set) -> set:
    if not ids:
        return set()
    return set(db.scalars(select(model.id).where(model.id.in_(sorted(ids)))).all())


def _drop_unknown_references(
    db: Session, rows: Sequence[RosterRow]
) -> Tuple[List[RosterRow], List[ValidationError]]:
    schools = _existing_ids(db, School, {s for row in rows for s in row.school_ids})
    courses = _existing_ids(db, Course, {c for row in rows for c in row.course_ids})
    kept, errors = [], []
    for row in rows:
        unknown_schools = sorted(set(row.school_ids) - schools)
        unknown_courses = sorted(set(row.course_ids) - courses)
        if unknown_schools or unknown_courses:
            parts = []
            if unknown_schools:
                parts.append(f"unknown school ids {unknown_schools}")
            if unknown_courses:
                parts.append(f"unknown course ids {unknown_courses}")
            errors.append(ValidationError("; ".join(parts), row_number=row.row_number))
        else:
            kept.append(row)
    return kept, errors


def upsert_learner(db: Session, first_name: str, last_name: str, code: str) -> Tuple[Learner, bool]:
    """Return the learner with this natural identity, creating it if needed.

    The second element is True when a new row was inserted.
    """
    learner = find_learner(db, first_name, last_name, code)
    if learner is not None:
        return learner, False
    learner = Learner(first_name=first_name, last_name=last_name, code=code)
    db.add(learner)
    db.flush()
    return learner, True


def reconcile_roster(db: Session, actor: ActorContext, text: str) -> ImportResult:
    """
    Import roster text on behalf of ``actor``.

    Invalid rows are skipped and reported in the result. Every valid row
    upserts its learner, replaces the learner's schools with the row's school
    ids and adds (never removes) the row's course enrollments. All writes
    commit together.

    Raises:
        RosterFormatError: If the header is wrong.
        AuthorizationError: If an ``admin`` actor references a school or
            course outside its scope. Nothing is written.
        NotFoundError: If the actor does not exist.
    """
    scope = resolve_scope(db, actor)
    rows, row_errors = parse_roster(text)
    rows, reference_errors = _drop_unknown_references(db, rows)
    row_errors = sorted(row_errors + reference_errors, key=lambda e: e.row_number)

    if not actor.is_super:
        scope.require_schools(s for row in rows for s in row.school_ids)
        scope.require_courses(c for row in rows for c in row.course_ids)
        # Replacing an existing learner's schools must not drop schools the admin cannot see
        for row in rows:
            existing = find_learner(db, row.first_name, row.last_name, row.code)
            if existing is not None:
                scope.require_schools(current_targets(db, LearnerSchool, "learner_id", existing.id, "school_id"))

    created = 0
    with atomic(db):
        for row in rows:
            learner, is_new = upsert_learner(db, row.first_name, row.last_name, row.code)
            created += int(is_new)
            lock_owner(db, Learner, learner.id)
            replace_links(db, LearnerSchool, "learner_id", learner.id, "school_id", row.school_ids)
            add_links(db, LearnerCourse, "learner_id", learner.id, "course_id", row.course_ids)

    for error in row_errors:
        logger.warning(f"Roster row skipped: {error}")
    logger.info(
        f"Roster import by admin {actor.id}: {len(rows)} imported, "
        f"{len(row_errors)} skipped, {created} new learners"
    )
    return ImportResult(
        imported=len(rows),
        skipped=len(row_errors),
        created=created,
        errors=[RowError(row_number=e.row_number, message=e.message) for e in row_errors],
    )
