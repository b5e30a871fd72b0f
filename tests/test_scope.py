"""Test cases for scope resolution."""

import pytest

from lms.auth import ActorContext
from lms.errors import AuthorizationError, NotFoundError
from lms.models import Admin, AdminRole, AdminSchool, Assignment, Submission
from lms.services.scope import (
    list_courses,
    list_learners,
    list_schools,
    list_submissions,
    peer_admins,
    resolve_scope,
)


class TestResolveScope:
    """Test cases for resolve_scope."""

    def test_admin_sees_own_school_only(self, db_session, admin_actor, school_a, learner, outside_learner):
        scope = resolve_scope(db_session, admin_actor)

        assert scope.school_ids == {school_a.id}
        assert learner.id in scope.learner_ids
        assert outside_learner.id not in scope.learner_ids

    def test_scope_grows_with_new_school(self, db_session, admin, admin_actor, school_b, learner, outside_learner):
        before = resolve_scope(db_session, admin_actor)
        db_session.add(AdminSchool(admin_id=admin.id, school_id=school_b.id))
        db_session.commit()

        after = resolve_scope(db_session, admin_actor)

        assert outside_learner.id not in before.learner_ids
        assert {learner.id, outside_learner.id} <= after.learner_ids
        assert before.learner_ids <= after.learner_ids

    def test_courses_follow_school_offerings(self, db_session, admin_actor, course, other_course):
        scope = resolve_scope(db_session, admin_actor)

        assert scope.course_ids == {course.id}

    def test_submissions_follow_learners(self, db_session, admin_actor, learner, outside_learner, course):
        assignment_id = _assignment(db_session, course)
        mine = Submission(assignment_id=assignment_id, learner_id=learner.id, text="mine")
        theirs = Submission(assignment_id=assignment_id, learner_id=outside_learner.id, text="theirs")
        db_session.add_all([mine, theirs])
        db_session.commit()

        scope = resolve_scope(db_session, admin_actor)

        assert scope.submission_ids == {mine.id}

    def test_super_sees_everything(self, db_session, super_actor, school_a, school_b, school_c, learner, outside_learner, other_course):
        scope = resolve_scope(db_session, super_actor)

        assert scope.school_ids == {school_a.id, school_b.id, school_c.id}
        assert scope.learner_ids == {learner.id, outside_learner.id}
        assert len(scope.course_ids) == 2

    def test_admin_without_schools_sees_nothing(self, db_session, learner):
        lonely = Admin(name="Lonely", email="lonely@test.com", password_hash="x", role=AdminRole.admin)
        db_session.add(lonely)
        db_session.commit()

        scope = resolve_scope(db_session, ActorContext.for_admin(lonely))

        assert scope.school_ids == frozenset()
        assert scope.learner_ids == frozenset()

    def test_unknown_actor(self, db_session):
        with pytest.raises(NotFoundError):
            resolve_scope(db_session, ActorContext(id=12345, role=AdminRole.admin))

    def test_claimed_role_must_match_stored_role(self, db_session, admin):
        with pytest.raises(AuthorizationError):
            resolve_scope(db_session, ActorContext(id=admin.id, role=AdminRole.super))

    def test_require_helpers(self, db_session, admin_actor, school_a, school_b, learner, outside_learner):
        scope = resolve_scope(db_session, admin_actor)

        scope.require_schools([school_a.id])
        scope.require_learner(learner.id)
        with pytest.raises(AuthorizationError):
            scope.require_schools([school_a.id, school_b.id])
        with pytest.raises(AuthorizationError):
            scope.require_learner(outside_learner.id)


class TestScopedListings:
    """Test cases for listing helpers."""

    def test_list_learners_sorted_by_last_then_first(self, db_session, super_actor, make_learner, school_a):
        make_learner("Zoe", "Adams", "ZA01", [school_a.id])
        make_learner("Amy", "Baker", "AB01", [school_a.id])
        make_learner("Ben", "Adams", "BA01", [school_a.id])

        names = [l.full_name for l in list_learners(db_session, resolve_scope(db_session, super_actor))]

        assert names == ["Ben Adams", "Zoe Adams", "Amy Baker"]

    def test_list_schools_by_district(self, db_session, super_actor, school_a, school_b, school_c):
        names = [s.name for s in list_schools(db_session, resolve_scope(db_session, super_actor))]

        assert names == ["Shelbyville High", "Lincoln Elementary", "Washington Middle"]

    def test_list_courses_hides_inactive(self, db_session, super_actor, course, other_course):
        other_course.active = False
        db_session.commit()
        scope = resolve_scope(db_session, super_actor)

        assert [c.title for c in list_courses(db_session, scope)] == ["Algebra I"]
        assert len(list_courses(db_session, scope, active_only=False)) == 2

    def test_list_submissions_newest_first(self, db_session, super_actor, learner, course):
        assignment_id = _assignment(db_session, course)
        first = Submission(assignment_id=assignment_id, learner_id=learner.id, text="one")
        db_session.add(first)
        db_session.commit()
        second = Submission(assignment_id=assignment_id, learner_id=learner.id, text="two")
        db_session.add(second)
        db_session.commit()

        texts = [s.text for s in list_submissions(db_session, resolve_scope(db_session, super_actor))]

        assert texts == ["two", "one"]


class TestPeerAdmins:
    """Test cases for peer_admins."""

    def test_peers_share_a_district(self, db_session, admin, admin_actor, school_b, school_c):
        peer = Admin(name="Pat Peer", email="peer@test.com", password_hash="x", role=AdminRole.admin)
        stranger = Admin(name="Sid Stranger", email="stranger@test.com", password_hash="x", role=AdminRole.admin)
        db_session.add_all([peer, stranger])
        db_session.flush()
        db_session.add_all([
            AdminSchool(admin_id=peer.id, school_id=school_b.id),
            AdminSchool(admin_id=stranger.id, school_id=school_c.id),
        ])
        db_session.commit()

        names = [a.name for a in peer_admins(db_session, admin_actor)]

        assert names == ["Alex Admin", "Pat Peer"]

    def test_super_peers_are_all_admins(self, db_session, super_actor, admin):
        emails = {a.email for a in peer_admins(db_session, super_actor)}

        assert emails == {"super@test.com", "admin@test.com"}


def _assignment(db_session, course):
    assignment = Assignment(course_id=course.id, title="Homework", slug="homework", prompt="Do it", position=0)
    db_session.add(assignment)
    db_session.commit()
    return assignment.id
