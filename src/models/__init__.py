from .base import Base
from .user import UserModel
from .course import CourseModel
from .enrollment import EnrollmentModel
from .group import GroupModel, GroupMembershipModel
from .assignment import AssignmentModel
from .submission import SubmissionModel

__all__ = [
    "Base",
    "UserModel",
    "CourseModel",
    "EnrollmentModel",
    "GroupModel",
    "GroupMembershipModel",
    "AssignmentModel",
    "SubmissionModel",
]
