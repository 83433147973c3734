import os
from datetime import datetime, timedelta

import pytest
import pytz
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from app import app  # noqa: E402
from core.choices import AssignmentType, UserRole  # noqa: E402
from core.database import create_db_engine, get_db  # noqa: E402
from models.base import Base  # noqa: E402
from utils.assignment_manager import AssignmentManager  # noqa: E402
from utils.course_manager import CourseManager  # noqa: E402
from utils.group_manager import GroupManager  # noqa: E402
from utils.submission_manager import SubmissionManager  # noqa: E402
from utils.user_manager import UserManager  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture
def engine():
    db_engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=db_engine)
    yield db_engine
    Base.metadata.drop_all(bind=db_engine)
    db_engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    manager = UserManager(db_session)

    def _make_user(name: str, role: UserRole = UserRole.STUDENT):
        return manager.create_user(f"{name.lower()}@example.edu", PASSWORD, name, role)

    return _make_user


@pytest.fixture
def professor(make_user):
    return make_user("Prof", UserRole.ADMIN)


@pytest.fixture
def other_professor(make_user):
    return make_user("Otherprof", UserRole.ADMIN)


@pytest.fixture
def student(make_user):
    return make_user("Sam")


@pytest.fixture
def leader(make_user):
    return make_user("Lee")


@pytest.fixture
def member(make_user):
    return make_user("Max")


@pytest.fixture
def courses(db_session):
    return CourseManager(db_session)


@pytest.fixture
def groups(db_session):
    return GroupManager(db_session)


@pytest.fixture
def assignments(db_session):
    return AssignmentManager(db_session)


@pytest.fixture
def submissions(db_session):
    return SubmissionManager(db_session)


@pytest.fixture
def course(courses, professor):
    return courses.create_course(professor, name="Intro to Computing", code="cs101")


@pytest.fixture
def enroll(courses, professor, course):
    def _enroll(*users):
        for user in users:
            courses.enroll_student(professor, course.course_id, user.email)

    return _enroll


def _due_in(days: int) -> datetime:
    return datetime.now(pytz.utc) + timedelta(days=days)


@pytest.fixture
def due_in():
    return _due_in


@pytest.fixture
def individual_assignment(assignments, professor, course):
    return assignments.create_assignment(
        professor, course.course_id, title="Essay", due_date=_due_in(5)
    )


@pytest.fixture
def group_assignment(assignments, professor, course):
    return assignments.create_assignment(
        professor,
        course.course_id,
        title="Project",
        due_date=_due_in(10),
        type=AssignmentType.GROUP,
    )


@pytest.fixture
def team(groups, course, enroll, leader, member):
    """Group led by ``leader`` with ``member`` as second member."""
    enroll(leader, member)
    group = groups.create_group(leader, "Team Rocket", course.course_id)
    return groups.add_member(leader, group.group_id, user_id=member.user_id)
