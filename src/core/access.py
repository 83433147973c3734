"""Role & object access helpers.

Predicates (``is_*`` / ``can_*``) answer a yes/no question about an acting
user and a resource. ``ensure_*`` helpers raise ForbiddenError when the answer
is no, before any mutation has been attempted.
"""

from typing import Any, Optional

from core.choices import AssignmentType, UserRole
from core.exceptions import ForbiddenError
from models.assignment import AssignmentModel
from models.course import CourseModel
from models.group import GroupModel
from models.submission import SubmissionModel


def role_of(user: Any) -> UserRole:
    return UserRole(user.role)


def is_admin(user: Any) -> bool:
    return role_of(user) is UserRole.ADMIN


def is_student(user: Any) -> bool:
    return role_of(user) is UserRole.STUDENT


def is_course_owner(user: Any, course: Optional[CourseModel]) -> bool:
    return bool(
        user and course and is_admin(user) and course.professor_id == user.user_id
    )


def is_enrolled(user: Any, course: Optional[CourseModel]) -> bool:
    return bool(user and course and user.user_id in course.student_ids)


def can_read_course(user: Any, course: CourseModel) -> bool:
    role = role_of(user)
    if role is UserRole.ADMIN:
        return course.professor_id == user.user_id
    if role is UserRole.STUDENT:
        return is_enrolled(user, course)
    raise ValueError(f"Unhandled role: {role}")


def is_group_leader(user: Any, group: GroupModel) -> bool:
    return group.leader_id == user.user_id


def is_group_member(user: Any, group: GroupModel) -> bool:
    return user.user_id in group.member_ids


def can_view_submission(user: Any, submission: SubmissionModel) -> bool:
    """Course owner, the submitting student, or any member of the submitting group."""
    if is_course_owner(user, submission.assignment.course):
        return True
    if submission.student_id is not None:
        return submission.student_id == user.user_id
    return submission.group is not None and is_group_member(user, submission.group)


def ensure_admin(user: Any, message: str = "Admin access required") -> None:
    if not is_admin(user):
        raise ForbiddenError(message)


def ensure_course_owner(
    user: Any,
    course: CourseModel,
    message: str = "Only the course professor can perform this action",
) -> None:
    if not is_course_owner(user, course):
        raise ForbiddenError(message)


def ensure_can_read_course(user: Any, course: CourseModel) -> None:
    if not can_read_course(user, course):
        raise ForbiddenError("You don't have permission to access this course")


def ensure_group_manager(
    user: Any,
    group: GroupModel,
    allow_creator: bool = False,
    message: str = "Only group leader can manage members",
) -> None:
    if is_group_leader(user, group):
        return
    if allow_creator and group.created_by == user.user_id:
        return
    raise ForbiddenError(message)


def ensure_can_confirm_submission(
    user: Any, assignment: AssignmentModel, group: Optional[GroupModel]
) -> None:
    """Only the leader confirms group work; individual work is the student's own."""
    if AssignmentType(assignment.type) is AssignmentType.GROUP:
        if group is None or not is_group_leader(user, group):
            raise ForbiddenError("Only group leader can acknowledge submission")
    elif not is_enrolled(user, assignment.course):
        raise ForbiddenError("You are not enrolled in this course")


def ensure_can_view_submission(user: Any, submission: SubmissionModel) -> None:
    if not can_view_submission(user, submission):
        raise ForbiddenError("Access denied")
