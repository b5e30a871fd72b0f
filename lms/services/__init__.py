"""Core operations of the LMS: scoping, roster import/export, course import and administration."""

from .scope import Scope, resolve_scope, list_schools, list_courses, list_learners, list_submissions, peer_admins
from .roster import ImportResult, RosterRow, parse_roster, reconcile_roster
from .export import export_roster, export_submissions
from .courses import (
    import_course_package,
    create_course,
    assign_course_to_all_schools,
    assign_course_to_districts,
    assign_course_to_all_districts,
    enroll_learner_in_course,
    list_courses_for_learner,
    list_assignments_for_course,
)
from .administration import (
    create_district,
    create_school,
    create_admin,
    replace_admin_schools,
    delete_admin,
    create_learner,
    replace_learner_schools,
    delete_learner,
)
from .submissions import create_submission, list_submissions_for_learner

__all__ = [
    "Scope",
    "resolve_scope",
    "list_schools",
    "list_courses",
    "list_learners",
    "list_submissions",
    "peer_admins",
    "ImportResult",
    "RosterRow",
    "parse_roster",
    "reconcile_roster",
    "export_roster",
    "export_submissions",
    "import_course_package",
    "create_course",
    "assign_course_to_all_schools",
    "assign_course_to_districts",
    "assign_course_to_all_districts",
    "enroll_learner_in_course",
    "list_courses_for_learner",
    "list_assignments_for_course",
    "create_district",
    "create_school",
    "create_admin",
    "replace_admin_schools",
    "delete_admin",
    "create_learner",
    "replace_learner_schools",
    "delete_learner",
    "create_submission",
    "list_submissions_for_learner",
]
