"""Dashboard aggregations.

Read-only: nothing here writes to the database. Rates are percentages
rounded to two decimals and are 0 whenever the denominator is 0.
"""

import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import RECENT_SUBMISSIONS_LIMIT, UPCOMING_ASSIGNMENTS_LIMIT
from core import access
from core.choices import CONFIRMED_STATUSES, AssignmentType, SubmissionStatus
from models.assignment import AssignmentModel
from models.base import as_utc, utcnow
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.group import GroupModel
from models.submission import SubmissionModel
from schemas.analytics import (
    AssignmentStats,
    CourseAnalytics,
    CourseOverview,
    CourseProgress,
    GroupPerformance,
    OverviewAnalytics,
    RecentSubmission,
    StudentDashboard,
    StudentPerformance,
    UpcomingAssignment,
)
from utils.course_manager import CourseManager
from utils.group_manager import GroupManager

logger = logging.getLogger(__name__)


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def is_confirmed(submission: SubmissionModel) -> bool:
    return submission.status in CONFIRMED_STATUSES


def expected_submission_count(assignment: AssignmentModel) -> int:
    """Enrolled students for individual work, groups in the course for group work."""
    course = assignment.course
    if AssignmentType(assignment.type) is AssignmentType.INDIVIDUAL:
        return len(course.enrollments)
    return len(course.groups)


def to_recent_submission(submission: SubmissionModel) -> RecentSubmission:
    assignment = submission.assignment
    group = submission.group
    student = submission.student
    if submission.acknowledger is not None:
        submitted_by = submission.acknowledger.name
    elif student is not None:
        submitted_by = student.name
    else:
        submitted_by = "Unknown"
    return RecentSubmission(
        submission_id=submission.submission_id,
        assignment_id=assignment.assignment_id,
        assignment_title=assignment.title,
        assignment_type=assignment.type,
        submitted_by=submitted_by,
        group_name=group.name if group else None,
        group_members=[m.user.name for m in group.memberships] if group else None,
        student_name=student.name if student else None,
        status=submission.status,
        acknowledged_at=submission.acknowledged_at,
        submitted_at=submission.submitted_at,
    )


def _latest_first(submissions: Iterable[SubmissionModel]) -> List[SubmissionModel]:
    return sorted(
        submissions,
        key=lambda s: as_utc(s.acknowledged_at or s.submitted_at or s.created_at),
        reverse=True,
    )


class AnalyticsManager:
    """Computes the professor and student dashboards."""

    def __init__(self, db: Session):
        self.db = db
        self.courses = CourseManager(db)
        self.groups = GroupManager(db)

    def overview(self, actor: Any, course_id: Optional[str] = None) -> OverviewAnalytics:
        """Totals across the professor's courses, or one of them.

        Raises:
            ForbiddenError: If the actor is not an admin, or does not own
                the requested course.
            NotFoundError: If the requested course does not exist.
        """
        access.ensure_admin(actor)
        if course_id:
            course = self.courses.get_course(course_id)
            access.ensure_course_owner(actor, course, "Unauthorized")
            courses = [course]
        else:
            courses = (
                self.db.query(CourseModel)
                .filter(CourseModel.professor_id == actor.user_id)
                .all()
            )
        course_ids = [c.course_id for c in courses]

        student_ids = set()
        for course in courses:
            student_ids.update(course.student_ids)

        if not course_ids:
            return OverviewAnalytics(
                total_students=0,
                total_groups=0,
                total_assignments=0,
                total_submissions=0,
                submission_rate=0.0,
            )

        total_groups = (
            self.db.query(func.count(GroupModel.group_id))
            .filter(GroupModel.course_id.in_(course_ids))
            .scalar()
        )
        assignments = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.course_id.in_(course_ids))
            .all()
        )
        confirmed_query = (
            self.db.query(SubmissionModel)
            .join(AssignmentModel, AssignmentModel.assignment_id == SubmissionModel.assignment_id)
            .filter(
                AssignmentModel.course_id.in_(course_ids),
                SubmissionModel.status.in_(CONFIRMED_STATUSES),
            )
        )
        total_submissions = confirmed_query.count()
        expected = sum(expected_submission_count(a) for a in assignments)

        logger.debug(
            "Overview for %s: %d courses, %d of %d expected submissions",
            actor.user_id,
            len(course_ids),
            total_submissions,
            expected,
        )

        recent = (
            confirmed_query.order_by(
                func.coalesce(SubmissionModel.acknowledged_at, SubmissionModel.submitted_at).desc()
            )
            .limit(RECENT_SUBMISSIONS_LIMIT)
            .all()
        )

        return OverviewAnalytics(
            total_students=len(student_ids),
            total_groups=total_groups or 0,
            total_assignments=len(assignments),
            total_submissions=total_submissions,
            submission_rate=percentage(total_submissions, expected),
            recent_submissions=[to_recent_submission(s) for s in recent],
        )

    def course_analytics(self, actor: Any, course_id: str) -> CourseAnalytics:
        """Per-assignment, per-student and per-group completion for one course."""
        course = self.courses.get_course(course_id)
        access.ensure_course_owner(actor, course, "Unauthorized")

        assignments = list(course.assignments)
        assignment_ids = {a.assignment_id for a in assignments}
        group_assignments = [
            a for a in assignments if AssignmentType(a.type) is AssignmentType.GROUP
        ]

        by_assignment = []
        for assignment in assignments:
            confirmed = sum(1 for s in assignment.submissions if is_confirmed(s))
            pending = sum(
                1 for s in assignment.submissions
                if s.status == SubmissionStatus.PENDING.value
            )
            expected = expected_submission_count(assignment)
            by_assignment.append(
                AssignmentStats(
                    assignment_id=assignment.assignment_id,
                    assignment_title=assignment.title,
                    type=assignment.type,
                    due_date=assignment.due_date,
                    total_submissions=confirmed,
                    pending_submissions=pending,
                    expected_count=expected,
                    completion_rate=percentage(confirmed, expected),
                )
            )

        students = []
        for enrollment in course.enrollments:
            student = enrollment.student
            group_ids = [
                g.group_id
                for g in self.groups.list_groups_for_member(student.user_id, course.course_id)
            ]
            query = self.db.query(SubmissionModel).filter(
                SubmissionModel.assignment_id.in_(assignment_ids)
            )
            if group_ids:
                query = query.filter(
                    (SubmissionModel.student_id == student.user_id)
                    | SubmissionModel.group_id.in_(group_ids)
                )
            else:
                query = query.filter(SubmissionModel.student_id == student.user_id)
            submissions = query.all() if assignment_ids else []

            completed = len({s.assignment_id for s in submissions if is_confirmed(s)})
            marked = [s.marks for s in submissions if s.marks is not None]
            students.append(
                StudentPerformance(
                    student_id=student.user_id,
                    student_name=student.name,
                    student_email=student.email,
                    total_assignments=len(assignments),
                    completed_assignments=completed,
                    completion_rate=percentage(completed, len(assignments)),
                    average_marks=round(sum(marked) / len(marked), 2) if marked else 0.0,
                )
            )

        group_assignment_ids = {a.assignment_id for a in group_assignments}
        groups = []
        for group in course.groups:
            completed = sum(
                1
                for s in group.submissions
                if s.assignment_id in group_assignment_ids and is_confirmed(s)
            )
            groups.append(
                GroupPerformance(
                    group_id=group.group_id,
                    group_name=group.name,
                    member_count=len(group.memberships),
                    total_group_assignments=len(group_assignments),
                    completed_assignments=completed,
                    completion_rate=percentage(completed, len(group_assignments)),
                )
            )

        return CourseAnalytics(
            course=CourseOverview(
                course_id=course.course_id,
                name=course.name,
                code=course.code,
                student_count=len(course.enrollments),
            ),
            submissions_by_assignment=by_assignment,
            student_performance=sorted(students, key=lambda p: p.completion_rate, reverse=True),
            group_performance=sorted(groups, key=lambda p: p.completion_rate, reverse=True),
        )

    def student_dashboard(self, actor: Any) -> StudentDashboard:
        """Progress of the acting user across the courses they are enrolled in."""
        courses = (
            self.db.query(CourseModel)
            .filter(CourseModel.course_id.in_(self._enrolled_course_ids(actor.user_id)))
            .order_by(CourseModel.code.asc())
            .all()
        )
        course_ids = [c.course_id for c in courses]
        assignments = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.course_id.in_(course_ids))
            .all()
            if course_ids
            else []
        )
        assignment_ids = [a.assignment_id for a in assignments]
        groups = self.groups.list_groups_for_member(actor.user_id)
        group_ids = [g.group_id for g in groups]

        submissions: List[SubmissionModel] = []
        if assignment_ids:
            owner = SubmissionModel.student_id == actor.user_id
            if group_ids:
                owner = owner | SubmissionModel.group_id.in_(group_ids)
            submissions = (
                self.db.query(SubmissionModel)
                .filter(SubmissionModel.assignment_id.in_(assignment_ids), owner)
                .all()
            )
        confirmed = [s for s in submissions if is_confirmed(s)]
        completed_ids = {s.assignment_id for s in confirmed}

        progress = []
        for course in courses:
            course_assignment_ids = {
                a.assignment_id for a in assignments if a.course_id == course.course_id
            }
            done = len(course_assignment_ids & completed_ids)
            progress.append(
                CourseProgress(
                    course_id=course.course_id,
                    course_name=course.name,
                    course_code=course.code,
                    total_assignments=len(course_assignment_ids),
                    completed_assignments=done,
                    progress=percentage(done, len(course_assignment_ids)),
                )
            )

        now = utcnow()
        upcoming = sorted(
            (a for a in assignments if as_utc(a.due_date) > now),
            key=lambda a: as_utc(a.due_date),
        )[:UPCOMING_ASSIGNMENTS_LIMIT]

        return StudentDashboard(
            total_courses=len(courses),
            total_assignments=len(assignments),
            completed_assignments=len(completed_ids),
            overall_progress=percentage(len(completed_ids), len(assignments)),
            progress_by_course=progress,
            upcoming_assignments=[
                UpcomingAssignment(
                    assignment_id=a.assignment_id,
                    title=a.title,
                    type=a.type,
                    due_date=a.due_date,
                    course_id=a.course_id,
                )
                for a in upcoming
            ],
            recent_submissions=[to_recent_submission(s) for s in _latest_first(confirmed)],
            total_groups=len(groups),
        )

    def _enrolled_course_ids(self, user_id: str) -> List[str]:
        rows = (
            self.db.query(EnrollmentModel.course_id)
            .filter(EnrollmentModel.student_id == user_id)
            .all()
        )
        return [course_id for (course_id,) in rows]
