"""Test configuration and fixtures."""

import io
import zipfile

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lms.auth import ActorContext
from lms.database import Base, create_engine_for
from lms.models import (
    Admin,
    AdminRole,
    AdminSchool,
    Course,
    District,
    Learner,
    LearnerCourse,
    LearnerSchool,
    School,
    SchoolCourse,
)

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

# Not a real bcrypt hash; tests that log in hash their own password
PLACEHOLDER_HASH = "not-a-hash"


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test, so committed writes never leak."""
    engine = create_engine_for(TEST_DATABASE_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """Create test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def district(db_session):
    district = District(name="Springfield District", city="Springfield", state="IL")
    db_session.add(district)
    db_session.commit()
    return district


@pytest.fixture
def other_district(db_session):
    district = District(name="Shelbyville District", city="Shelbyville", state="IL")
    db_session.add(district)
    db_session.commit()
    return district


@pytest.fixture
def school_a(db_session, district):
    school = School(name="Lincoln Elementary", district_id=district.id)
    db_session.add(school)
    db_session.commit()
    return school


@pytest.fixture
def school_b(db_session, district):
    school = School(name="Washington Middle", district_id=district.id)
    db_session.add(school)
    db_session.commit()
    return school


@pytest.fixture
def school_c(db_session, other_district):
    school = School(name="Shelbyville High", district_id=other_district.id)
    db_session.add(school)
    db_session.commit()
    return school


@pytest.fixture
def super_admin(db_session):
    admin = Admin(name="Sam Super", email="super@test.com", password_hash=PLACEHOLDER_HASH, role=AdminRole.super)
    db_session.add(admin)
    db_session.commit()
    return admin


@pytest.fixture
def admin(db_session, school_a):
    """Admin assigned to ``school_a`` only."""
    admin = Admin(name="Alex Admin", email="admin@test.com", password_hash=PLACEHOLDER_HASH, role=AdminRole.admin)
    db_session.add(admin)
    db_session.flush()
    db_session.add(AdminSchool(admin_id=admin.id, school_id=school_a.id))
    db_session.commit()
    return admin


@pytest.fixture
def super_actor(super_admin):
    return ActorContext.for_admin(super_admin)


@pytest.fixture
def admin_actor(admin):
    return ActorContext.for_admin(admin)


@pytest.fixture
def course(db_session, school_a):
    """Course offered at ``school_a``."""
    course = Course(title="Algebra I", description="Intro algebra", active=True)
    db_session.add(course)
    db_session.flush()
    db_session.add(SchoolCourse(school_id=school_a.id, course_id=course.id))
    db_session.commit()
    return course


@pytest.fixture
def other_course(db_session, school_b):
    """Course offered at ``school_b`` only."""
    course = Course(title="Biology", description="", active=True)
    db_session.add(course)
    db_session.flush()
    db_session.add(SchoolCourse(school_id=school_b.id, course_id=course.id))
    db_session.commit()
    return course


@pytest.fixture
def make_learner(db_session):
    """Factory that stores a learner with school and course links."""
    def _make(first_name, last_name, code, school_ids=(), course_ids=()):
        learner = Learner(first_name=first_name, last_name=last_name, code=code)
        db_session.add(learner)
        db_session.flush()
        for school_id in school_ids:
            db_session.add(LearnerSchool(learner_id=learner.id, school_id=school_id))
        for course_id in course_ids:
            db_session.add(LearnerCourse(learner_id=learner.id, course_id=course_id))
        db_session.commit()
        return learner
    return _make


@pytest.fixture
def learner(make_learner, school_a, course):
    """Learner at ``school_a`` enrolled in ``course``."""
    return make_learner("Ada", "Lovelace", "AL12", [school_a.id], [course.id])


@pytest.fixture
def outside_learner(make_learner, school_b):
    """Learner enrolled only at ``school_b``."""
    return make_learner("Mary", "Shelley", "MS34", [school_b.id])


SAMPLE_MANIFEST = """<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="cc" xmlns="http://www.imsglobal.org/xsd/imsccv1p1/imscp_v1p1">
  <organizations>
    <organization identifier="org">
      <title>Unit 1</title>
      <item identifier="i1">
        <title>Quiz A</title>
      </item>
      <item identifier="i2" identifierref="r2">
        <title>Quiz B</title>
      </item>
    </organization>
  </organizations>
  <resources>
    <resource identifier="r2" type="webcontent" href="b.html"/>
  </resources>
</manifest>
"""


@pytest.fixture
def make_cartridge():
    """Factory that zips a manifest (and optional extra files) into cartridge bytes."""
    def _make(manifest_xml=SAMPLE_MANIFEST, extra_files=None, manifest_name="imsmanifest.xml"):
        bio = io.BytesIO()
        with zipfile.ZipFile(bio, "w", zipfile.ZIP_DEFLATED) as z:
            if manifest_xml is not None:
                z.writestr(manifest_name, manifest_xml.encode("utf-8"))
            for name, content in (extra_files or {}).items():
                z.writestr(name, content)
        return bio.getvalue()
    return _make


@pytest.fixture
def sample_cartridge(make_cartridge):
    return make_cartridge(SAMPLE_MANIFEST, {"b.html": "<p>Quiz B</p>"})
