import pytest

from core.choices import SubmissionStatus
from core.exceptions import (
    AlreadyEnrolledError,
    DuplicateCourseCodeError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from models import (
    AssignmentModel,
    CourseModel,
    EnrollmentModel,
    GroupMembershipModel,
    GroupModel,
    SubmissionModel,
)


def test_create_course_normalizes_code_and_sets_owner(course, professor) -> None:
    assert course.code == "CS101"
    assert course.professor_id == professor.user_id
    assert course.student_ids == set()


def test_create_course_requires_admin(courses, student) -> None:
    with pytest.raises(ForbiddenError):
        courses.create_course(student, name="Sneaky", code="HACK1")


def test_create_course_rejects_blank_name(courses, professor) -> None:
    with pytest.raises(ValidationError):
        courses.create_course(professor, name="   ", code="CS999")


def test_create_course_rejects_duplicate_code(courses, professor, course) -> None:
    with pytest.raises(DuplicateCourseCodeError):
        courses.create_course(professor, name="Another", code=" cs101 ")


def test_owner_enrolls_student(courses, professor, course, student) -> None:
    updated = courses.enroll_student(professor, course.course_id, student.email)

    assert updated.student_ids == {student.user_id}


def test_student_can_enroll_themself(courses, course, student) -> None:
    updated = courses.enroll_student(student, course.course_id, student.email.upper())

    assert student.user_id in updated.student_ids


def test_student_cannot_enroll_someone_else(courses, course, student, member) -> None:
    with pytest.raises(ForbiddenError):
        courses.enroll_student(student, course.course_id, member.email)


def test_enroll_twice_is_a_conflict(courses, professor, course, student) -> None:
    courses.enroll_student(professor, course.course_id, student.email)

    with pytest.raises(AlreadyEnrolledError):
        courses.enroll_student(professor, course.course_id, student.email)


@pytest.mark.parametrize("email", ["nobody@example.edu", "otherprof@example.edu"])
def test_enroll_requires_existing_student(courses, professor, other_professor, course, email) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        courses.enroll_student(professor, course.course_id, email)

    assert exception_info.value.message == "Student not found"


def test_list_courses_is_scoped_by_role(
    courses, professor, other_professor, course, student, member, enroll
) -> None:
    other = courses.create_course(other_professor, name="Other", code="MA200")
    enroll(student)

    assert [c.course_id for c in courses.list_courses(professor)] == [course.course_id]
    assert [c.course_id for c in courses.list_courses(other_professor)] == [other.course_id]
    assert [c.course_id for c in courses.list_courses(student)] == [course.course_id]
    assert courses.list_courses(member) == []


def test_course_read_requires_ownership_or_enrollment(
    courses, course, professor, other_professor, student, enroll
) -> None:
    assert courses.get_course_for_reader(professor, course.course_id) is not None

    with pytest.raises(ForbiddenError):
        courses.get_course_for_reader(other_professor, course.course_id)
    with pytest.raises(ForbiddenError):
        courses.get_course_for_reader(student, course.course_id)

    enroll(student)
    assert courses.get_course_for_reader(student, course.course_id).course_id == course.course_id


def test_get_course_unknown_id(courses) -> None:
    with pytest.raises(NotFoundError):
        courses.get_course("missing")


def test_update_course_owner_only(courses, course, professor, other_professor) -> None:
    with pytest.raises(ForbiddenError):
        courses.update_course(other_professor, course.course_id, name="Hijacked")

    updated = courses.update_course(
        professor, course.course_id, name="Computing I", semester="Fall", year=None
    )

    assert updated.name == "Computing I"
    assert updated.semester == "Fall"
    assert updated.code == "CS101"


def test_update_course_rechecks_code_uniqueness(courses, course, professor) -> None:
    other = courses.create_course(professor, name="Other", code="CS102")

    with pytest.raises(DuplicateCourseCodeError):
        courses.update_course(professor, other.course_id, code="cs101")


def test_list_students_sorted_by_name(courses, course, professor, student, leader, member, enroll) -> None:
    enroll(student, member, leader)

    names = [s.name for s in courses.list_students(professor, course.course_id)]

    assert names == ["Lee", "Max", "Sam"]


def test_delete_course_cascades(
    db_session, courses, course, professor, team, group_assignment, individual_assignment,
    submissions, leader,
) -> None:
    submissions.upsert_submission(
        leader,
        group_assignment.assignment_id,
        group_id=team.group_id,
        status=SubmissionStatus.ACKNOWLEDGED,
    )
    submissions.upsert_submission(leader, individual_assignment.assignment_id)

    courses.delete_course(professor, course.course_id)

    assert db_session.query(CourseModel).count() == 0
    assert db_session.query(EnrollmentModel).count() == 0
    assert db_session.query(GroupModel).count() == 0
    assert db_session.query(GroupMembershipModel).count() == 0
    assert db_session.query(AssignmentModel).count() == 0
    assert db_session.query(SubmissionModel).count() == 0


def test_delete_course_owner_only(courses, course, other_professor) -> None:
    with pytest.raises(ForbiddenError):
        courses.delete_course(other_professor, course.course_id)
