from datetime import datetime, timedelta

import pytest
import pytz

from core.choices import AssignmentType, SubmissionStatus
from core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from models import AssignmentModel, SubmissionModel
from utils.converters import assignment_to_info


def test_create_assignment_defaults(individual_assignment, professor, course) -> None:
    assert individual_assignment.max_marks == 100
    assert individual_assignment.type == "individual"
    assert individual_assignment.created_by == professor.user_id
    assert individual_assignment.course_id == course.course_id


def test_create_assignment_owner_only(assignments, course, other_professor, student, due_in) -> None:
    for actor in (other_professor, student):
        with pytest.raises(ForbiddenError):
            assignments.create_assignment(actor, course.course_id, "Quiz", due_in(1))


def test_create_assignment_validates_input(assignments, course, professor, due_in) -> None:
    with pytest.raises(ValidationError):
        assignments.create_assignment(professor, course.course_id, "  ", due_in(1))
    with pytest.raises(ValidationError):
        assignments.create_assignment(professor, course.course_id, "Quiz", due_in(1), max_marks=0)
    with pytest.raises(NotFoundError):
        assignments.create_assignment(professor, "missing", "Quiz", due_in(1))


def test_due_date_is_stored_in_utc(assignments, course, professor) -> None:
    local = pytz.timezone("America/Chicago").localize(datetime(2031, 3, 1, 23, 59))

    assignment = assignments.create_assignment(professor, course.course_id, "Report", local)
    info = assignment_to_info(assignment)

    assert info.due_date == local
    assert info.due_date.tzinfo is not None
    assert info.is_overdue is False


def test_overdue_flag(assignments, course, professor) -> None:
    past = datetime.now(pytz.utc) - timedelta(days=1)

    assignment = assignments.create_assignment(professor, course.course_id, "Old", past)

    assert assignment_to_info(assignment).is_overdue is True


def test_list_assignments_with_confirmed_counts(
    assignments, submissions, individual_assignment, group_assignment, enroll, student, member, professor
) -> None:
    enroll(student, member)
    submissions.upsert_submission(
        student, individual_assignment.assignment_id, status=SubmissionStatus.ACKNOWLEDGED
    )
    submissions.upsert_submission(member, individual_assignment.assignment_id)

    counts = {
        model.assignment_id: count for model, count in assignments.list_assignments(professor)
    }

    assert counts == {
        individual_assignment.assignment_id: 1,
        group_assignment.assignment_id: 0,
    }


def test_list_assignments_scoped_to_readers(
    assignments, individual_assignment, course, other_professor, student
) -> None:
    assert assignments.list_assignments(other_professor) == []
    assert assignments.list_assignments(student) == []
    with pytest.raises(ForbiddenError):
        assignments.list_assignments(student, course_id=course.course_id)


def test_find_user_submission_through_group(
    assignments, submissions, group_assignment, team, leader, member
) -> None:
    assert assignments.find_user_submission(member, group_assignment) is None

    created, _ = submissions.upsert_submission(
        leader, group_assignment.assignment_id, group_id=team.group_id
    )

    found = assignments.find_user_submission(member, group_assignment)
    assert found.submission_id == created.submission_id


def test_update_assignment(assignments, individual_assignment, professor, other_professor) -> None:
    with pytest.raises(ForbiddenError):
        assignments.update_assignment(
            other_professor, individual_assignment.assignment_id, title="Nope"
        )

    updated = assignments.update_assignment(
        professor,
        individual_assignment.assignment_id,
        title="Long Essay",
        max_marks=50,
        description=None,
    )

    assert updated.title == "Long Essay"
    assert updated.max_marks == 50


def test_type_change_refused_once_submissions_exist(
    assignments, submissions, individual_assignment, enroll, student, professor
) -> None:
    enroll(student)
    submissions.upsert_submission(student, individual_assignment.assignment_id)

    with pytest.raises(ConflictError):
        assignments.update_assignment(
            professor, individual_assignment.assignment_id, type=AssignmentType.GROUP
        )


def test_type_change_allowed_without_submissions(assignments, individual_assignment, professor) -> None:
    updated = assignments.update_assignment(
        professor, individual_assignment.assignment_id, type=AssignmentType.GROUP
    )

    assert updated.type == "group"


def test_delete_assignment_cascades_to_submissions(
    db_session, assignments, submissions, individual_assignment, enroll, student, professor
) -> None:
    enroll(student)
    submissions.upsert_submission(student, individual_assignment.assignment_id)

    assignments.delete_assignment(professor, individual_assignment.assignment_id)

    assert db_session.query(AssignmentModel).count() == 0
    assert db_session.query(SubmissionModel).count() == 0
