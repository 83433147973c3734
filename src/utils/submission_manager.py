"""Submission ledger.

One submission exists per (assignment, student) for individual assignments
and per (assignment, group) for group assignments. Records start out
``pending``; the student or group leader confirms them and the course
professor grades them. Nothing moves back to ``pending``.
"""

import logging
import secrets
from typing import Any, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core import access
from core.choices import AssignmentType, SubmissionStatus
from core.exceptions import (
    DuplicateSubmissionError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from models.assignment import AssignmentModel
from models.base import utcnow
from models.course import CourseModel
from models.group import GroupMembershipModel, GroupModel
from models.submission import SubmissionModel

logger = logging.getLogger(__name__)

CONFIRMING_STATUSES = (SubmissionStatus.ACKNOWLEDGED, SubmissionStatus.SUBMITTED)


def _apply_status(submission: SubmissionModel, actor: Any, status: SubmissionStatus) -> None:
    submission.status = status.value
    now = utcnow()
    if status is SubmissionStatus.ACKNOWLEDGED:
        submission.acknowledged_by = actor.user_id
        submission.acknowledged_at = now
    elif status is SubmissionStatus.SUBMITTED:
        submission.submitted_at = now


class SubmissionManager:
    """Creates, grades, lists and deletes submissions."""

    def __init__(self, db: Session):
        self.db = db

    def upsert_submission(
        self,
        actor: Any,
        assignment_id: str,
        group_id: Optional[str] = None,
        status: Optional[SubmissionStatus] = None,
        submission_link: Optional[str] = None,
    ) -> Tuple[SubmissionModel, bool]:
        """Create the actor's submission for an assignment, or update it.

        Args:
            actor: Acting user.
            assignment_id: Assignment being submitted.
            group_id: Submitting group; required for group assignments and
                refused for individual ones.
            status: Requested status. Students may request pending,
                acknowledged or submitted.
            submission_link: Link to the work on the external file share.

        Returns:
            (submission, created) where created tells whether a new record
            was inserted.

        Raises:
            NotFoundError: If the assignment or group does not exist.
            ValidationError: If the key does not match the assignment type.
            ForbiddenError: If the actor may not submit, or may not confirm.
            InvalidTransitionError: If the record is graded, or the request
                would move it back to pending.
            DuplicateSubmissionError: If a concurrent request inserted the
                same key first.
        """
        assignment = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.assignment_id == assignment_id)
            .first()
        )
        if assignment is None:
            raise NotFoundError("Assignment", assignment_id)

        is_group = AssignmentType(assignment.type) is AssignmentType.GROUP
        if is_group and not group_id:
            raise ValidationError("Group ID is required for group assignments")
        if not is_group and group_id:
            raise ValidationError("Group ID is not allowed for individual assignments")

        requested = SubmissionStatus(status) if status is not None else None
        if requested is SubmissionStatus.GRADED:
            raise ForbiddenError("Only the course professor can grade submissions")

        if not access.is_enrolled(actor, assignment.course):
            raise ForbiddenError("You are not enrolled in this course")

        group = None
        if is_group:
            group = self.db.query(GroupModel).filter(GroupModel.group_id == group_id).first()
            if group is None:
                raise NotFoundError("Group", group_id)
            if group.course_id != assignment.course_id:
                raise ValidationError("Group does not belong to this assignment's course")
            if not access.is_group_member(actor, group):
                raise ForbiddenError("You are not a member of this group")

        if requested in CONFIRMING_STATUSES:
            access.ensure_can_confirm_submission(actor, assignment, group)

        submission = self._find_by_key(assignment.assignment_id, actor.user_id, group)
        created = submission is None
        if created:
            submission = SubmissionModel(
                submission_id=secrets.token_hex(8),
                assignment_id=assignment.assignment_id,
                student_id=None if is_group else actor.user_id,
                group_id=group.group_id if is_group else None,
                status=SubmissionStatus.PENDING.value,
                submission_link=submission_link,
                submitted_at=utcnow(),
            )
            self.db.add(submission)
        else:
            current = SubmissionStatus(submission.status)
            if current is SubmissionStatus.GRADED:
                raise InvalidTransitionError("Graded submissions cannot be changed")
            if requested is SubmissionStatus.PENDING and current is not SubmissionStatus.PENDING:
                raise InvalidTransitionError("Cannot move a submission back to pending")
            if is_group and current is not SubmissionStatus.PENDING:
                access.ensure_can_confirm_submission(actor, assignment, group)
            if submission_link is not None:
                submission.submission_link = submission_link

        if requested is not None:
            _apply_status(submission, actor, requested)

        # two requests for a fresh key can both get here; the unique
        # constraint lets only one insert through
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Duplicate submission for assignment %s (user=%s, group=%s)",
                assignment_id,
                actor.user_id,
                group_id,
            )
            raise DuplicateSubmissionError() from e
        self.db.refresh(submission)
        logger.info(
            "%s submission %s for assignment %s (status=%s)",
            "Created" if created else "Updated",
            submission.submission_id,
            assignment_id,
            submission.status,
        )
        return submission, created

    def _find_by_key(
        self, assignment_id: str, user_id: str, group: Optional[GroupModel]
    ) -> Optional[SubmissionModel]:
        query = self.db.query(SubmissionModel).filter(
            SubmissionModel.assignment_id == assignment_id
        )
        if group is not None:
            query = query.filter(SubmissionModel.group_id == group.group_id)
        else:
            query = query.filter(SubmissionModel.student_id == user_id)
        return query.first()

    def get_submission(self, submission_id: str) -> SubmissionModel:
        model = (
            self.db.query(SubmissionModel)
            .filter(SubmissionModel.submission_id == submission_id)
            .first()
        )
        if not model:
            raise NotFoundError("Submission", submission_id)
        return model

    def get_submission_for_viewer(self, actor: Any, submission_id: str) -> SubmissionModel:
        submission = self.get_submission(submission_id)
        access.ensure_can_view_submission(actor, submission)
        return submission

    def grade_submission(
        self,
        actor: Any,
        submission_id: str,
        marks: Optional[float] = None,
        feedback: Optional[str] = None,
        status: Optional[SubmissionStatus] = None,
    ) -> SubmissionModel:
        """Record marks and feedback. The status only changes when passed in.

        Raises:
            ForbiddenError: If the actor does not own the assignment's course.
            ValidationError: If marks fall outside 0..max marks.
            InvalidTransitionError: If status is pending.
        """
        submission = self.get_submission(submission_id)
        assignment = submission.assignment
        access.ensure_course_owner(
            actor, assignment.course, "Only the course professor can grade submissions"
        )

        if marks is not None and not 0 <= marks <= assignment.max_marks:
            raise ValidationError(f"Marks must be between 0 and {assignment.max_marks}")
        new_status = SubmissionStatus(status) if status is not None else None
        if new_status is SubmissionStatus.PENDING:
            raise InvalidTransitionError("Cannot move a submission back to pending")

        if marks is not None:
            submission.marks = marks
            submission.graded_by = actor.user_id
            submission.graded_at = utcnow()
        if feedback is not None:
            submission.feedback = feedback
        if new_status is not None:
            _apply_status(submission, actor, new_status)

        self.db.commit()
        self.db.refresh(submission)
        logger.info(
            "Graded submission %s: marks=%s status=%s", submission_id, submission.marks, submission.status
        )
        return submission

    def delete_submission(self, actor: Any, submission_id: str) -> None:
        """Delete a submission.

        The course professor may delete any submission of the course. A
        student may delete only their own individual submission, and only
        while it is pending.
        """
        submission = self.get_submission(submission_id)
        if not access.is_course_owner(actor, submission.assignment.course):
            if submission.group_id is not None:
                raise ForbiddenError("Group submissions cannot be deleted by students")
            if submission.student_id != actor.user_id:
                raise ForbiddenError("Unauthorized to delete this submission")
            if SubmissionStatus(submission.status) is not SubmissionStatus.PENDING:
                raise ForbiddenError("Only pending submissions can be deleted")

        self.db.delete(submission)
        self.db.commit()
        logger.info("Deleted submission: %s", submission_id)

    def _member_group_ids(self, user_id: str) -> List[str]:
        rows = (
            self.db.query(GroupMembershipModel.group_id)
            .filter(GroupMembershipModel.user_id == user_id)
            .all()
        )
        return [group_id for (group_id,) in rows]

    def _own_condition(self, actor: Any):
        conditions = [SubmissionModel.student_id == actor.user_id]
        group_ids = self._member_group_ids(actor.user_id)
        if group_ids:
            conditions.append(SubmissionModel.group_id.in_(group_ids))
        return or_(*conditions)

    def list_submissions(
        self,
        actor: Any,
        assignment_id: Optional[str] = None,
        course_id: Optional[str] = None,
        status: Optional[SubmissionStatus] = None,
    ) -> List[SubmissionModel]:
        """Submissions visible to the actor, optionally filtered.

        Professors see the submissions of courses they own, students see
        their own and their groups'.
        """
        query = self.db.query(SubmissionModel).join(
            AssignmentModel, AssignmentModel.assignment_id == SubmissionModel.assignment_id
        )
        if access.is_admin(actor):
            query = query.join(
                CourseModel, CourseModel.course_id == AssignmentModel.course_id
            ).filter(CourseModel.professor_id == actor.user_id)
        else:
            query = query.filter(self._own_condition(actor))

        if assignment_id:
            query = query.filter(SubmissionModel.assignment_id == assignment_id)
        if course_id:
            query = query.filter(AssignmentModel.course_id == course_id)
        if status is not None:
            query = query.filter(SubmissionModel.status == SubmissionStatus(status).value)
        return query.order_by(SubmissionModel.created_at.desc()).all()

    def list_my_submissions(self, actor: Any) -> List[SubmissionModel]:
        return (
            self.db.query(SubmissionModel)
            .filter(self._own_condition(actor))
            .order_by(SubmissionModel.created_at.desc())
            .all()
        )

    def list_for_assignment(self, actor: Any, assignment_id: str) -> List[SubmissionModel]:
        """All submissions of an assignment, most recently acknowledged first."""
        assignment = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.assignment_id == assignment_id)
            .first()
        )
        if assignment is None:
            raise NotFoundError("Assignment", assignment_id)
        access.ensure_course_owner(actor, assignment.course, "Unauthorized")
        return (
            self.db.query(SubmissionModel)
            .filter(SubmissionModel.assignment_id == assignment_id)
            .order_by(
                SubmissionModel.acknowledged_at.is_(None),
                SubmissionModel.acknowledged_at.desc(),
                SubmissionModel.created_at.desc(),
            )
            .all()
        )

    def list_for_group(self, actor: Any, group_id: str) -> List[SubmissionModel]:
        group = self.db.query(GroupModel).filter(GroupModel.group_id == group_id).first()
        if group is None:
            raise NotFoundError("Group", group_id)
        if not (
            access.is_group_member(actor, group)
            or access.is_course_owner(actor, group.course)
        ):
            raise ForbiddenError("Access denied")
        return (
            self.db.query(SubmissionModel)
            .filter(SubmissionModel.group_id == group_id)
            .order_by(SubmissionModel.created_at.desc())
            .all()
        )
