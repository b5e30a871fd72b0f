"""Test cases for roster and submission exports."""

from datetime import datetime

from sqlalchemy import select

from lms.models import Assignment, Learner, Submission
from lms.services.administration import delete_learner
from lms.services.export import SUBMISSIONS_HEADER, export_roster, export_submissions
from lms.services.roster import ROSTER_HEADER, reconcile_roster
from lms.services.scope import resolve_scope


class TestExportRoster:
    """Test cases for export_roster."""

    def test_empty_scope_exports_header_only(self, db_session, super_actor):
        text = export_roster(db_session, resolve_scope(db_session, super_actor))

        assert text == ROSTER_HEADER + "\n"

    def test_rows_sorted_with_ascending_ids(self, db_session, super_actor, make_learner, school_a, school_b, course, other_course):
        make_learner("Zoe", "Young", "ZY01", [school_b.id, school_a.id], [other_course.id, course.id])
        make_learner("Ada", "Lovelace", "AL12", [school_a.id])

        text = export_roster(db_session, resolve_scope(db_session, super_actor))

        first, second = sorted([school_a.id, school_b.id])
        low, high = sorted([course.id, other_course.id])
        assert text.splitlines() == [
            ROSTER_HEADER,
            f"Ada,Lovelace,AL12,{school_a.id},",
            f"Zoe,Young,ZY01,{first};{second},{low};{high}",
        ]
        assert text.endswith("\n")

    def test_admin_export_limited_to_scope(self, db_session, admin_actor, make_learner, school_a, school_b, course, other_course, outside_learner):
        make_learner("Ada", "Lovelace", "AL12", [school_a.id, school_b.id], [course.id, other_course.id])

        lines = export_roster(db_session, resolve_scope(db_session, admin_actor)).splitlines()

        assert lines == [ROSTER_HEADER, f"Ada,Lovelace,AL12,{school_a.id},{course.id}"]

    def test_round_trip_through_reconcile(self, db_session, super_actor, make_learner, school_a, school_b, course, other_course):
        make_learner("Ada", "Lovelace", "AL12", [school_a.id, school_b.id], [course.id])
        make_learner("Bob", "Smith", "BS12", [school_b.id], [other_course.id])
        make_learner("Cy", "Adams", "CA12")
        exported = export_roster(db_session, resolve_scope(db_session, super_actor))

        for learner_id in db_session.scalars(select(Learner.id)).all():
            delete_learner(db_session, super_actor, learner_id)
        result = reconcile_roster(db_session, super_actor, exported)

        assert (result.imported, result.skipped) == (3, 0)
        assert export_roster(db_session, resolve_scope(db_session, super_actor)) == exported

    def test_admin_round_trip(self, db_session, admin_actor, learner, outside_learner):
        exported = export_roster(db_session, resolve_scope(db_session, admin_actor))

        result = reconcile_roster(db_session, admin_actor, exported)

        assert result.skipped == 0
        assert export_roster(db_session, resolve_scope(db_session, admin_actor)) == exported


class TestExportSubmissions:
    """Test cases for export_submissions."""

    def test_newest_first(self, db_session, super_actor, learner, course):
        assignment = Assignment(course_id=course.id, title="Essay", slug="essay", prompt="", position=0)
        db_session.add(assignment)
        db_session.flush()
        db_session.add_all([
            Submission(assignment_id=assignment.id, learner_id=learner.id, created_at=datetime(2024, 1, 2, 9, 30)),
            Submission(assignment_id=assignment.id, learner_id=learner.id, created_at=datetime(2024, 3, 4, 10, 0)),
        ])
        db_session.commit()

        lines = export_submissions(db_session, resolve_scope(db_session, super_actor)).splitlines()

        assert lines == [
            SUBMISSIONS_HEADER,
            f"Ada Lovelace,Essay,{course.id},2024-03-04 10:00:00",
            f"Ada Lovelace,Essay,{course.id},2024-01-02 09:30:00",
        ]

    def test_admin_sees_only_scoped_submissions(self, db_session, admin_actor, learner, outside_learner, course):
        assignment = Assignment(course_id=course.id, title="Essay", slug="essay", prompt="", position=0)
        db_session.add(assignment)
        db_session.flush()
        db_session.add_all([
            Submission(assignment_id=assignment.id, learner_id=learner.id),
            Submission(assignment_id=assignment.id, learner_id=outside_learner.id),
        ])
        db_session.commit()

        lines = export_submissions(db_session, resolve_scope(db_session, admin_actor)).splitlines()

        assert len(lines) == 2
        assert lines[1].startswith("Ada Lovelace,Essay,")
