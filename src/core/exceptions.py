"""Custom exception classes for the CourseHub API.

This module defines application-specific exceptions following Google Python
Style Guide. Every exception carries the HTTP status code the API layer
reports it with.
"""

from typing import Optional


class CourseHubError(Exception):
    """Base exception for all CourseHub errors."""

    status_code: int = 500

    def __init__(self, message: str):
        """Initialize the exception.

        Args:
            message: Human readable description reported to the caller.
        """
        self.message = message
        super().__init__(message)


class ValidationError(CourseHubError):
    """Raised when input is missing or malformed."""

    status_code = 400


class AuthenticationError(CourseHubError):
    """Raised when credentials are missing, invalid or expired."""

    status_code = 401


class ForbiddenError(CourseHubError):
    """Raised when an authorization rule is violated."""

    status_code = 403


class NotFoundError(CourseHubError):
    """Raised when a requested resource cannot be found."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        """Initialize the exception.

        Args:
            resource: Kind of resource, e.g. "Course".
            resource_id: The ID that did not resolve.
        """
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ConflictError(CourseHubError):
    """Raised when a uniqueness rule would be violated."""

    status_code = 409


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User '{email}' already exists")


class DuplicateCourseCodeError(ConflictError):
    """Raised when a course code is already in use."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Course code '{code}' already exists")


class AlreadyEnrolledError(ConflictError):
    """Raised when enrolling a student twice in the same course."""

    def __init__(self):
        super().__init__("Student already enrolled")


class AlreadyMemberError(ConflictError):
    """Raised when adding a user who is already in the group."""

    def __init__(self):
        super().__init__("User is already a member")


class DuplicateSubmissionError(ConflictError):
    """Raised when a submission already exists for the same key."""

    def __init__(self):
        super().__init__("Submission already exists")


class NotEnrolledError(ValidationError):
    """Raised when a group member candidate is not enrolled in the course."""

    def __init__(self):
        super().__init__("User must be enrolled in the course")


class CannotRemoveLeaderError(ValidationError):
    """Raised when removing the leader from their own group."""

    def __init__(self):
        super().__init__("Cannot remove group leader")


class NotAMemberError(ValidationError):
    """Raised when the target user does not belong to the group."""

    def __init__(self, message: str = "User is not a group member"):
        super().__init__(message)


class InvalidTransitionError(ValidationError):
    """Raised when a submission status change is not allowed."""

    pass
