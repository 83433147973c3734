"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Every manager is built around the request-scoped database session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import analytics_manager
from utils import assignment_manager
from utils import course_manager
from utils import group_manager
from utils import submission_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_course_manager(db: Session = Depends(get_db)) -> course_manager.CourseManager:
    """Get CourseManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        CourseManager instance.
    """
    return course_manager.CourseManager(db)


def get_group_manager(db: Session = Depends(get_db)) -> group_manager.GroupManager:
    """Get GroupManager instance with request-scoped DB session."""
    return group_manager.GroupManager(db)


def get_assignment_manager(
    db: Session = Depends(get_db),
) -> assignment_manager.AssignmentManager:
    """Get AssignmentManager instance with request-scoped DB session."""
    return assignment_manager.AssignmentManager(db)


def get_submission_manager(
    db: Session = Depends(get_db),
) -> submission_manager.SubmissionManager:
    """Get SubmissionManager instance with request-scoped DB session."""
    return submission_manager.SubmissionManager(db)


def get_analytics_manager(
    db: Session = Depends(get_db),
) -> analytics_manager.AnalyticsManager:
    """Get AnalyticsManager instance with request-scoped DB session."""
    return analytics_manager.AnalyticsManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
CourseManagerDep = Annotated[
    course_manager.CourseManager, Depends(get_course_manager)
]
GroupManagerDep = Annotated[
    group_manager.GroupManager, Depends(get_group_manager)
]
AssignmentManagerDep = Annotated[
    assignment_manager.AssignmentManager, Depends(get_assignment_manager)
]
SubmissionManagerDep = Annotated[
    submission_manager.SubmissionManager, Depends(get_submission_manager)
]
AnalyticsManagerDep = Annotated[
    analytics_manager.AnalyticsManager, Depends(get_analytics_manager)
]
