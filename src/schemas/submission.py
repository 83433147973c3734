"""Submission schema definitions."""

from typing import List, Optional

from pydantic import Field

from core.choices import AssignmentType, SubmissionStatus
from schemas.common import APIModel, UtcDatetime
from schemas.user import UserSummary


class SubmissionAssignment(APIModel):
    assignment_id: str
    title: str
    type: AssignmentType
    due_date: UtcDatetime
    course_id: str


class SubmissionGroup(APIModel):
    group_id: str
    name: str
    leader_id: str
    members: List[UserSummary] = Field(default_factory=list)


class UpsertSubmissionRequest(APIModel):
    assignment_id: str
    group_id: Optional[str] = None
    status: Optional[SubmissionStatus] = None
    submission_link: Optional[str] = None


class GradeSubmissionRequest(APIModel):
    marks: Optional[float] = Field(default=None, ge=0)
    feedback: Optional[str] = None
    status: Optional[SubmissionStatus] = None


class SubmissionInfo(APIModel):
    submission_id: str
    assignment: SubmissionAssignment
    student: Optional[UserSummary] = None
    group: Optional[SubmissionGroup] = None
    status: SubmissionStatus
    submission_link: Optional[str] = None
    acknowledged_by: Optional[UserSummary] = None
    acknowledged_at: Optional[UtcDatetime] = None
    submitted_at: Optional[UtcDatetime] = None
    marks: Optional[float] = None
    feedback: Optional[str] = None
    graded_by: Optional[UserSummary] = None
    graded_at: Optional[UtcDatetime] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class SubmissionResult(APIModel):
    message: str
    submission: SubmissionInfo
