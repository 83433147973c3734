"""Conversions between ORM models and API schemas."""

from typing import Optional

from models.assignment import AssignmentModel
from models.base import as_utc, utcnow
from models.course import CourseModel
from models.group import GroupModel
from models.submission import SubmissionModel
from models.user import UserModel
from schemas.assignment import AssignmentInfo
from schemas.course import CourseInfo, CourseSummary
from schemas.group import GroupInfo
from schemas.submission import SubmissionAssignment, SubmissionGroup, SubmissionInfo
from schemas.user import User, UserPublic, UserSummary


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        email=user.email,
        password_hash=user.password_hash,
        name=user.name,
        role=user.role.value,
        create_at=user.create_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        email=model.email,
        password_hash=model.password_hash,
        name=model.name,
        role=model.role,
        create_at=model.create_at,
    )


def user_to_public(user) -> UserPublic:
    return UserPublic(
        user_id=user.user_id,
        email=user.email,
        name=user.name,
        role=user.role,
        create_at=user.create_at,
    )


def user_to_summary(model: Optional[UserModel]) -> Optional[UserSummary]:
    if model is None:
        return None
    return UserSummary(user_id=model.user_id, name=model.name, email=model.email)


def course_to_summary(model: CourseModel) -> CourseSummary:
    return CourseSummary(course_id=model.course_id, name=model.name, code=model.code)


def course_to_info(model: CourseModel) -> CourseInfo:
    students = sorted(
        (enrollment.student for enrollment in model.enrollments),
        key=lambda student: student.name.lower(),
    )
    return CourseInfo(
        course_id=model.course_id,
        name=model.name,
        code=model.code,
        description=model.description,
        semester=model.semester,
        year=model.year,
        professor=user_to_summary(model.professor),
        students=[user_to_summary(student) for student in students],
        student_count=len(students),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def group_to_info(model: GroupModel) -> GroupInfo:
    members = [membership.user for membership in model.memberships]
    return GroupInfo(
        group_id=model.group_id,
        name=model.name,
        course=course_to_summary(model.course),
        leader=user_to_summary(model.leader),
        members=[user_to_summary(member) for member in members],
        member_count=len(members),
        created_by=model.created_by,
        created_at=model.created_at,
    )


def submission_to_info(model: SubmissionModel) -> SubmissionInfo:
    assignment = model.assignment
    group = None
    if model.group is not None:
        group = SubmissionGroup(
            group_id=model.group.group_id,
            name=model.group.name,
            leader_id=model.group.leader_id,
            members=[
                user_to_summary(membership.user)
                for membership in model.group.memberships
            ],
        )
    return SubmissionInfo(
        submission_id=model.submission_id,
        assignment=SubmissionAssignment(
            assignment_id=assignment.assignment_id,
            title=assignment.title,
            type=assignment.type,
            due_date=assignment.due_date,
            course_id=assignment.course_id,
        ),
        student=user_to_summary(model.student),
        group=group,
        status=model.status,
        submission_link=model.submission_link,
        acknowledged_by=user_to_summary(model.acknowledger),
        acknowledged_at=model.acknowledged_at,
        submitted_at=model.submitted_at,
        marks=model.marks,
        feedback=model.feedback,
        graded_by=user_to_summary(model.grader),
        graded_at=model.graded_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def assignment_to_info(
    model: AssignmentModel,
    submission_count: int = 0,
    user_submission: Optional[SubmissionModel] = None,
) -> AssignmentInfo:
    return AssignmentInfo(
        assignment_id=model.assignment_id,
        title=model.title,
        description=model.description,
        instructions=model.instructions,
        course=course_to_summary(model.course),
        type=model.type,
        due_date=model.due_date,
        external_link=model.external_link,
        max_marks=model.max_marks,
        created_by=user_to_summary(model.creator),
        is_overdue=as_utc(model.due_date) < utcnow(),
        submission_count=submission_count,
        user_submission=(
            submission_to_info(user_submission) if user_submission is not None else None
        ),
        created_at=model.created_at,
    )
