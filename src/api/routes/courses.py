"""Course management routes."""

from typing import List

from fastapi import APIRouter, Depends, status

from api.routes.auth import get_current_user
from core.dependencies import CourseManagerDep
from schemas.common import MessageResponse
from schemas.course import (
    CourseInfo,
    CourseResult,
    CreateCourseRequest,
    EnrollRequest,
    UpdateCourseRequest,
)
from schemas.user import User
from utils.converters import course_to_info

router = APIRouter(prefix="/api/courses", tags=["Courses"])


@router.get("", response_model=List[CourseInfo], summary="List courses")
def list_courses(
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[CourseInfo]:
    """Courses the user teaches (professors) or is enrolled in (students)."""
    return [course_to_info(model) for model in course_manager.list_courses(current_user)]


@router.get("/{course_id}", response_model=CourseInfo, summary="Get course")
def get_course(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseInfo:
    return course_to_info(course_manager.get_course_for_reader(current_user, course_id))


@router.post(
    "",
    response_model=CourseResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
def create_course(
    req: CreateCourseRequest,
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseResult:
    """Create a course owned by the current professor.

    Raises:
        ForbiddenError: If the current user is not a professor (403).
        DuplicateCourseCodeError: If the code is taken (409).
    """
    model = course_manager.create_course(
        current_user,
        name=req.name,
        code=req.code,
        description=req.description,
        semester=req.semester,
        year=req.year,
    )
    return CourseResult(message="Course created successfully", course=course_to_info(model))


@router.post("/{course_id}/enroll", response_model=CourseResult, summary="Enroll student")
def enroll_student(
    course_id: str,
    req: EnrollRequest,
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseResult:
    model = course_manager.enroll_student(current_user, course_id, req.student_email)
    return CourseResult(message="Student enrolled successfully", course=course_to_info(model))


@router.put("/{course_id}", response_model=CourseResult, summary="Update course")
def update_course(
    course_id: str,
    req: UpdateCourseRequest,
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseResult:
    model = course_manager.update_course(
        current_user, course_id, **req.model_dump(exclude_unset=True)
    )
    return CourseResult(message="Course updated successfully", course=course_to_info(model))


@router.delete("/{course_id}", response_model=MessageResponse, summary="Delete course")
def delete_course(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Delete a course together with its groups, assignments and submissions."""
    course_manager.delete_course(current_user, course_id)
    return MessageResponse(message="Course deleted successfully")
