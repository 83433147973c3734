import pytest

from core import access
from core.choices import UserRole
from core.exceptions import ForbiddenError
from schemas.user import User


def test_role_predicates(professor, student) -> None:
    assert access.is_admin(professor)
    assert not access.is_student(professor)
    assert access.is_student(student)
    assert access.role_of(student) is UserRole.STUDENT


def test_course_owner_must_be_admin_and_professor(course, professor, other_professor) -> None:
    assert access.is_course_owner(professor, course)
    assert not access.is_course_owner(other_professor, course)
    assert not access.is_course_owner(professor, None)

    # a student holding the professor's id is still not an owner
    impostor = User(user_id=professor.user_id, email="x@example.edu", name="X",
                    role=UserRole.STUDENT, password_hash="-")
    assert not access.is_course_owner(impostor, course)


def test_can_read_course(course, professor, other_professor, student, enroll) -> None:
    assert access.can_read_course(professor, course)
    assert not access.can_read_course(other_professor, course)
    assert not access.can_read_course(student, course)

    enroll(student)

    assert access.can_read_course(student, course)


def test_ensure_helpers_raise_forbidden(course, student, team, member) -> None:
    with pytest.raises(ForbiddenError):
        access.ensure_admin(student)
    with pytest.raises(ForbiddenError):
        access.ensure_course_owner(student, course)
    with pytest.raises(ForbiddenError):
        access.ensure_group_manager(member, team)


def test_group_manager_allows_creator_only_when_asked(groups, team, leader, member) -> None:
    groups.transfer_leader(leader, team.group_id, member.user_id)

    access.ensure_group_manager(leader, team, allow_creator=True)
    with pytest.raises(ForbiddenError):
        access.ensure_group_manager(leader, team)
