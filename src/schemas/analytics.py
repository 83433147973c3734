"""Dashboard analytics schema definitions."""

from typing import List, Optional

from pydantic import Field

from core.choices import AssignmentType, SubmissionStatus
from schemas.common import APIModel, UtcDatetime


class RecentSubmission(APIModel):
    submission_id: str
    assignment_id: str
    assignment_title: str
    assignment_type: AssignmentType
    submitted_by: str
    group_name: Optional[str] = None
    group_members: Optional[List[str]] = None
    student_name: Optional[str] = None
    status: SubmissionStatus
    acknowledged_at: Optional[UtcDatetime] = None
    submitted_at: Optional[UtcDatetime] = None


class OverviewAnalytics(APIModel):
    total_students: int
    total_groups: int
    total_assignments: int
    total_submissions: int
    submission_rate: float
    recent_submissions: List[RecentSubmission] = Field(default_factory=list)


class AssignmentStats(APIModel):
    assignment_id: str
    assignment_title: str
    type: AssignmentType
    due_date: UtcDatetime
    total_submissions: int
    pending_submissions: int
    expected_count: int
    completion_rate: float


class StudentPerformance(APIModel):
    student_id: str
    student_name: str
    student_email: str
    total_assignments: int
    completed_assignments: int
    completion_rate: float
    average_marks: float


class GroupPerformance(APIModel):
    group_id: str
    group_name: str
    member_count: int
    total_group_assignments: int
    completed_assignments: int
    completion_rate: float


class CourseOverview(APIModel):
    course_id: str
    name: str
    code: str
    student_count: int


class CourseAnalytics(APIModel):
    course: CourseOverview
    submissions_by_assignment: List[AssignmentStats] = Field(default_factory=list)
    student_performance: List[StudentPerformance] = Field(default_factory=list)
    group_performance: List[GroupPerformance] = Field(default_factory=list)


class CourseProgress(APIModel):
    course_id: str
    course_name: str
    course_code: str
    total_assignments: int
    completed_assignments: int
    progress: float


class UpcomingAssignment(APIModel):
    assignment_id: str
    title: str
    type: AssignmentType
    due_date: UtcDatetime
    course_id: str


class StudentDashboard(APIModel):
    total_courses: int
    total_assignments: int
    completed_assignments: int
    overall_progress: float
    progress_by_course: List[CourseProgress] = Field(default_factory=list)
    upcoming_assignments: List[UpcomingAssignment] = Field(default_factory=list)
    recent_submissions: List[RecentSubmission] = Field(default_factory=list)
    total_groups: int
