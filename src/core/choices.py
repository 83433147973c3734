"""Closed enumerations for user roles, assignment types and submission states."""

import enum


class UserRole(str, enum.Enum):
    """System-level role assigned to a user account at registration."""

    STUDENT = "student"
    ADMIN = "admin"


class AssignmentType(str, enum.Enum):
    """Whether an assignment is submitted per student or per group."""

    INDIVIDUAL = "individual"
    GROUP = "group"


class SubmissionStatus(str, enum.Enum):
    """Lifecycle states for a submission.

    pending -> acknowledged/submitted -> graded
    """

    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    SUBMITTED = "submitted"
    GRADED = "graded"


# Statuses that count as "work handed in" for listings and analytics
CONFIRMED_STATUSES = (
    SubmissionStatus.ACKNOWLEDGED.value,
    SubmissionStatus.SUBMITTED.value,
    SubmissionStatus.GRADED.value,
)
