"""Dashboard analytics routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.routes.auth import get_current_user
from core.dependencies import AnalyticsManagerDep
from schemas.analytics import CourseAnalytics, OverviewAnalytics, StudentDashboard
from schemas.user import User

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("/overview", response_model=OverviewAnalytics, summary="Professor overview")
def get_overview(
    analytics_manager: AnalyticsManagerDep,
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    current_user: User = Depends(get_current_user),
) -> OverviewAnalytics:
    """Totals and recent submissions across the professor's courses."""
    return analytics_manager.overview(current_user, course_id)


@router.get(
    "/course/{course_id}", response_model=CourseAnalytics, summary="Course analytics"
)
def get_course_analytics(
    course_id: str,
    analytics_manager: AnalyticsManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseAnalytics:
    return analytics_manager.course_analytics(current_user, course_id)


@router.get(
    "/student/dashboard", response_model=StudentDashboard, summary="Student dashboard"
)
def get_student_dashboard(
    analytics_manager: AnalyticsManagerDep,
    current_user: User = Depends(get_current_user),
) -> StudentDashboard:
    return analytics_manager.student_dashboard(current_user)
