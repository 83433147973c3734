"""Assignment schema definitions."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from core.choices import AssignmentType
from schemas.common import APIModel, UtcDatetime
from schemas.course import CourseSummary
from schemas.submission import SubmissionInfo
from schemas.user import UserSummary


class CreateAssignmentRequest(APIModel):
    title: str
    description: Optional[str] = None
    course_id: str
    type: AssignmentType = AssignmentType.INDIVIDUAL
    due_date: datetime
    external_link: Optional[str] = None
    max_marks: Optional[int] = Field(default=None, gt=0)
    instructions: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Title is required.")
        return normalized


class UpdateAssignmentRequest(APIModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[AssignmentType] = None
    due_date: Optional[datetime] = None
    external_link: Optional[str] = None
    max_marks: Optional[int] = Field(default=None, gt=0)
    instructions: Optional[str] = None


class AssignmentInfo(APIModel):
    assignment_id: str
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    course: CourseSummary
    type: AssignmentType
    due_date: UtcDatetime
    external_link: Optional[str] = None
    max_marks: int
    created_by: UserSummary
    is_overdue: bool
    submission_count: int = 0
    user_submission: Optional[SubmissionInfo] = None
    created_at: UtcDatetime


class AssignmentResult(APIModel):
    message: str
    assignment: AssignmentInfo
