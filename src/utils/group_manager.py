"""Group management utilities.

Groups are scoped to a course. A group always has exactly one leader and the
leader is always one of its members; every mutating operation re-checks that
before committing.
"""

import logging
import secrets
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core import access
from core.exceptions import (
    AlreadyMemberError,
    CannotRemoveLeaderError,
    ConflictError,
    ForbiddenError,
    NotAMemberError,
    NotEnrolledError,
    NotFoundError,
    ValidationError,
)
from models.group import GroupMembershipModel, GroupModel
from models.user import UserModel
from utils.course_manager import CourseManager

logger = logging.getLogger(__name__)


def _ensure_leader_is_member(group: GroupModel) -> None:
    if group.leader_id not in group.member_ids:
        raise ConflictError("Group leader must be a member of the group")


class GroupManager:
    """Manages groups and group membership."""

    def __init__(self, db: Session):
        self.db = db
        self.courses = CourseManager(db)

    def create_group(self, actor: Any, name: str, course_id: str) -> GroupModel:
        """Create a group in a course with the actor as leader and first member.

        Raises:
            ValidationError: If the name is blank.
            NotFoundError: If the course does not exist.
            ForbiddenError: If the actor is not enrolled in the course.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Group name and course are required")

        course = self.courses.get_course(course_id)
        if not access.is_enrolled(actor, course):
            raise ForbiddenError("You must be enrolled in this course")

        group = GroupModel(
            group_id=secrets.token_hex(8),
            name=name,
            course_id=course.course_id,
            leader_id=actor.user_id,
            created_by=actor.user_id,
        )
        group.memberships.append(GroupMembershipModel(user_id=actor.user_id))
        _ensure_leader_is_member(group)

        # group row and leader membership land in the same transaction
        self.db.add(group)
        self.db.commit()
        self.db.refresh(group)
        logger.info("Created group %s in course %s led by %s", group.group_id, course_id, actor.user_id)
        return group

    def get_group(self, group_id: str) -> GroupModel:
        model = (
            self.db.query(GroupModel)
            .filter(GroupModel.group_id == group_id)
            .first()
        )
        if not model:
            raise NotFoundError("Group", group_id)
        return model

    def get_group_for_reader(self, actor: Any, group_id: str) -> GroupModel:
        group = self.get_group(group_id)
        access.ensure_can_read_course(actor, group.course)
        return group

    def list_groups(self, actor: Any, course_id: Optional[str] = None) -> List[GroupModel]:
        """Groups in one course, or in every course the actor can read."""
        if course_id:
            course = self.courses.get_course_for_reader(actor, course_id)
            course_ids = [course.course_id]
        else:
            course_ids = self.courses.list_readable_course_ids(actor)
        if not course_ids:
            return []
        return (
            self.db.query(GroupModel)
            .filter(GroupModel.course_id.in_(course_ids))
            .order_by(GroupModel.created_at.desc())
            .all()
        )

    def list_groups_for_member(
        self, user_id: str, course_id: Optional[str] = None
    ) -> List[GroupModel]:
        query = (
            self.db.query(GroupModel)
            .join(GroupMembershipModel, GroupMembershipModel.group_id == GroupModel.group_id)
            .filter(GroupMembershipModel.user_id == user_id)
        )
        if course_id:
            query = query.filter(GroupModel.course_id == course_id)
        return query.order_by(GroupModel.created_at.desc()).all()

    def add_member(
        self,
        actor: Any,
        group_id: str,
        user_id: Optional[str] = None,
        user_email: Optional[str] = None,
    ) -> GroupModel:
        """Add an enrolled user to the group.

        Raises:
            ForbiddenError: If the actor is neither leader nor creator.
            ValidationError: If no target user is given.
            NotFoundError: If the group or the target user does not exist.
            AlreadyMemberError: If the user is already a member.
            NotEnrolledError: If the user is not enrolled in the group's course.
        """
        group = self.get_group(group_id)
        access.ensure_group_manager(
            actor, group, allow_creator=True, message="Only group leader can add members"
        )

        if user_id:
            target = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        elif user_email:
            target = (
                self.db.query(UserModel)
                .filter(UserModel.email == user_email.strip().lower())
                .first()
            )
        else:
            raise ValidationError("User ID or email is required")
        if target is None:
            raise NotFoundError("User")

        if target.user_id in group.member_ids:
            raise AlreadyMemberError()
        if not access.is_enrolled(target, group.course):
            raise NotEnrolledError()

        group.memberships.append(GroupMembershipModel(user_id=target.user_id))
        _ensure_leader_is_member(group)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyMemberError() from e
        self.db.refresh(group)
        logger.info("Added user %s to group %s", target.user_id, group_id)
        return group

    def remove_member(self, actor: Any, group_id: str, user_id: str) -> GroupModel:
        """Remove a non-leader member from the group.

        Raises:
            ForbiddenError: If the actor is not the leader.
            CannotRemoveLeaderError: If the target is the leader.
            NotAMemberError: If the target is not in the group.
        """
        group = self.get_group(group_id)
        access.ensure_group_manager(actor, group, message="Only group leader can remove members")

        if user_id == group.leader_id:
            raise CannotRemoveLeaderError()

        membership = next(
            (m for m in group.memberships if m.user_id == user_id), None
        )
        if membership is None:
            raise NotAMemberError()

        group.memberships.remove(membership)
        _ensure_leader_is_member(group)
        self.db.commit()
        self.db.refresh(group)
        logger.info("Removed user %s from group %s", user_id, group_id)
        return group

    def transfer_leader(self, actor: Any, group_id: str, new_leader_id: str) -> GroupModel:
        """Hand leadership to another member.

        Raises:
            ForbiddenError: If the actor is not the current leader.
            NotAMemberError: If the new leader is not a member.
        """
        group = self.get_group(group_id)
        access.ensure_group_manager(
            actor, group, message="Only current leader can transfer leadership"
        )

        if new_leader_id not in group.member_ids:
            raise NotAMemberError("New leader must be a group member")

        group.leader_id = new_leader_id
        _ensure_leader_is_member(group)
        self.db.commit()
        self.db.refresh(group)
        logger.info("Group %s leadership moved to %s", group_id, new_leader_id)
        return group

    def delete_group(self, actor: Any, group_id: str) -> None:
        """Delete a group, its memberships and its submissions."""
        group = self.get_group(group_id)
        access.ensure_group_manager(
            actor, group, allow_creator=True, message="Unauthorized to delete this group"
        )
        self.db.delete(group)
        self.db.commit()
        logger.info("Deleted group: %s", group_id)
