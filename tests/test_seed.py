"""Test cases for database seeding."""

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from lms.auth import verify_password
from lms.models import Admin, AdminRole, AdminSchool, Assignment, Course, District, School, Submission
from lms.seed import load_sample_data, load_sample_submissions, main, seed_demo_course, seed_super_admin


class TestSeedSuperAdmin:
    """Test cases for seed_super_admin."""

    def test_creates_super_and_defaults(self, db_session):
        super_admin = seed_super_admin(db_session, "root@test.com", "rootpw")

        assert super_admin.role == AdminRole.super
        assert verify_password("rootpw", super_admin.password_hash)
        assert db_session.scalars(select(District.name)).all() == ["Default District"]
        assert db_session.scalars(select(School.name)).all() == ["Default School"]
        default_admin = db_session.scalars(select(Admin).where(Admin.email == "admin@example.com")).one()
        assert default_admin.role == AdminRole.admin
        assert db_session.scalar(select(func.count()).select_from(AdminSchool)) == 1

    def test_existing_email_is_reused(self, db_session):
        first = seed_super_admin(db_session, "root@test.com", "rootpw")
        again = seed_super_admin(db_session, "root@test.com", "rootpw")

        assert again.id == first.id
        assert db_session.scalar(select(func.count(District.id))) == 1

    def test_missing_credentials_skip(self, db_session):
        assert seed_super_admin(db_session, None, None) is None
        assert db_session.scalar(select(func.count(Admin.id))) == 0


class TestSeedDemoCourse:
    """Test cases for seed_demo_course."""

    def test_demo_course_has_three_assignments(self, db_session):
        course = seed_demo_course(db_session)

        assert [a.title for a in course.assignments] == ["Introduction Quiz", "Module 1 Reflection", "Final Project"]
        assert course.assignments[0].prompt == "Please complete: Introduction Quiz"
        assert course.assignments[1].slug == "module-1-reflection"

    def test_skipped_when_courses_exist(self, db_session, course):
        assert seed_demo_course(db_session) is None
        assert db_session.scalar(select(func.count(Course.id))) == 1


class TestSampleData:
    """Test cases for sample roster and submission loading."""

    def test_load_sample_roster_and_submissions(self, db_session, super_actor, school_a):
        course = seed_demo_course(db_session)
        learners = f"first_name,last_name,code,school_ids,course_ids\nAda,Lovelace,AL12,{school_a.id},{course.id}\n"
        submissions = (
            "learner_name,assignment_title,course_id,created_at\n"
            f"Ada Lovelace,Introduction Quiz,{course.id},2024-05-01 08:15:00\n"
            f"Nobody Here,Introduction Quiz,{course.id},2024-05-01 08:15:00\n"
            f"Ada Lovelace,No Such Assignment,{course.id},2024-05-01 08:15:00\n"
        )

        result, (loaded, skipped) = load_sample_data(db_session, super_actor, learners, submissions)

        assert result.imported == 1
        assert (loaded, skipped) == (1, 2)
        stored = db_session.scalars(select(Submission)).one()
        assert stored.created_at.year == 2024
        assert stored.assignment.title == "Introduction Quiz"

    def test_bad_lines_are_skipped(self, db_session):
        loaded, skipped = load_sample_submissions(db_session, "header\nonly,two\nAda,Quiz,notanumber,2024-01-01\n")

        assert (loaded, skipped) == (0, 2)


def test_main_seeds_sqlite_file(tmp_path):
    url = f"sqlite:///{tmp_path / 'nested' / 'lms.sqlite'}"

    assert main(["--database-url", url, "--super-email", "root@test.com", "--super-password", "rootpw"]) == 0

    engine = create_engine(url)
    session = sessionmaker(bind=engine)()
    try:
        assert session.scalars(select(Admin.email).where(Admin.role == AdminRole.super)).all() == ["root@test.com"]
        assert session.scalar(select(func.count(Assignment.id))) == 3
    finally:
        session.close()
        engine.dispose()
