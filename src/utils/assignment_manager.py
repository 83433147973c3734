"""Assignment management utilities."""

import logging
import secrets
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from config import DEFAULT_MAX_MARKS
from core import access
from core.choices import CONFIRMED_STATUSES, AssignmentType
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.assignment import AssignmentModel
from models.base import as_utc
from models.submission import SubmissionModel
from utils.course_manager import CourseManager
from utils.group_manager import GroupManager

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "type",
    "due_date",
    "external_link",
    "max_marks",
    "instructions",
)


class AssignmentManager:
    """Manages assignments. Every mutation is reserved to the course professor."""

    def __init__(self, db: Session):
        self.db = db
        self.courses = CourseManager(db)
        self.groups = GroupManager(db)

    def create_assignment(
        self,
        actor: Any,
        course_id: str,
        title: str,
        due_date: datetime,
        type: AssignmentType = AssignmentType.INDIVIDUAL,
        description: Optional[str] = None,
        external_link: Optional[str] = None,
        max_marks: Optional[int] = None,
        instructions: Optional[str] = None,
    ) -> AssignmentModel:
        """Create an assignment in a course the actor owns.

        Raises:
            ValidationError: If title or due date is missing, or max marks is not positive.
            NotFoundError: If the course does not exist.
            ForbiddenError: If the actor does not own the course.
        """
        title = (title or "").strip()
        if not title or due_date is None:
            raise ValidationError("Title, course, and due date are required")
        if max_marks is None:
            max_marks = DEFAULT_MAX_MARKS
        if max_marks <= 0:
            raise ValidationError("Max marks must be positive")

        course = self.courses.get_course(course_id)
        access.ensure_course_owner(
            actor, course, "You can only create assignments for your courses"
        )

        assignment = AssignmentModel(
            assignment_id=secrets.token_hex(8),
            title=title,
            description=description,
            instructions=instructions,
            course_id=course.course_id,
            type=AssignmentType(type).value,
            due_date=as_utc(due_date),
            external_link=external_link,
            max_marks=max_marks,
            created_by=actor.user_id,
        )
        self.db.add(assignment)
        self.db.commit()
        self.db.refresh(assignment)
        logger.info(
            "Created %s assignment %s in course %s",
            assignment.type,
            assignment.assignment_id,
            course_id,
        )
        return assignment

    def get_assignment(self, assignment_id: str) -> AssignmentModel:
        model = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.assignment_id == assignment_id)
            .first()
        )
        if not model:
            raise NotFoundError("Assignment", assignment_id)
        return model

    def get_assignment_for_reader(self, actor: Any, assignment_id: str) -> AssignmentModel:
        assignment = self.get_assignment(assignment_id)
        access.ensure_can_read_course(actor, assignment.course)
        return assignment

    def get_assignment_for_owner(self, actor: Any, assignment_id: str) -> AssignmentModel:
        assignment = self.get_assignment(assignment_id)
        access.ensure_course_owner(actor, assignment.course, "Unauthorized")
        return assignment

    def list_assignments(
        self, actor: Any, course_id: Optional[str] = None
    ) -> List[Tuple[AssignmentModel, int]]:
        """List readable assignments with their confirmed-submission counts."""
        if course_id:
            course = self.courses.get_course_for_reader(actor, course_id)
            course_ids = [course.course_id]
        else:
            course_ids = self.courses.list_readable_course_ids(actor)
        if not course_ids:
            return []

        assignments = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.course_id.in_(course_ids))
            .order_by(AssignmentModel.created_at.desc())
            .all()
        )
        counts = self.count_confirmed_submissions([a.assignment_id for a in assignments])
        return [(a, counts.get(a.assignment_id, 0)) for a in assignments]

    def count_confirmed_submissions(self, assignment_ids: List[str]) -> Dict[str, int]:
        if not assignment_ids:
            return {}
        rows = (
            self.db.query(SubmissionModel.assignment_id, func.count(SubmissionModel.submission_id))
            .filter(
                SubmissionModel.assignment_id.in_(assignment_ids),
                SubmissionModel.status.in_(CONFIRMED_STATUSES),
            )
            .group_by(SubmissionModel.assignment_id)
            .all()
        )
        return {assignment_id: count for assignment_id, count in rows}

    def find_user_submission(
        self, actor: Any, assignment: AssignmentModel
    ) -> Optional[SubmissionModel]:
        """The actor's own submission for an assignment, directly or via a group."""
        group_ids = [
            g.group_id
            for g in self.groups.list_groups_for_member(actor.user_id, assignment.course_id)
        ]
        conditions = [SubmissionModel.student_id == actor.user_id]
        if group_ids:
            conditions.append(SubmissionModel.group_id.in_(group_ids))
        return (
            self.db.query(SubmissionModel)
            .filter(
                SubmissionModel.assignment_id == assignment.assignment_id,
                or_(*conditions),
            )
            .first()
        )

    def update_assignment(self, actor: Any, assignment_id: str, **fields) -> AssignmentModel:
        """Update assignment fields. Fields left as None are not changed.

        Raises:
            ConflictError: If the type would change after submissions exist.
        """
        assignment = self.get_assignment_for_owner(actor, assignment_id)
        changes = {
            key: value
            for key, value in fields.items()
            if key in UPDATABLE_FIELDS and value is not None
        }

        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ValidationError("Title is required")
        if "due_date" in changes:
            changes["due_date"] = as_utc(changes["due_date"])
        if "max_marks" in changes and changes["max_marks"] <= 0:
            raise ValidationError("Max marks must be positive")
        if "type" in changes:
            changes["type"] = AssignmentType(changes["type"]).value
            # existing submissions are keyed by student or group according to the old type
            if changes["type"] != assignment.type and assignment.submissions:
                raise ConflictError(
                    "Cannot change the type of an assignment that has submissions"
                )

        for key, value in changes.items():
            setattr(assignment, key, value)
        self.db.commit()
        self.db.refresh(assignment)
        logger.info("Updated assignment %s (%s)", assignment_id, ", ".join(sorted(changes)))
        return assignment

    def delete_assignment(self, actor: Any, assignment_id: str) -> None:
        """Delete an assignment and all of its submissions in one commit."""
        assignment = self.get_assignment_for_owner(actor, assignment_id)
        self.db.delete(assignment)
        self.db.commit()
        logger.info("Deleted assignment: %s", assignment_id)
