"""User directory and profile routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_user
from core.choices import UserRole
from core.dependencies import CourseManagerDep, UserManagerDep
from schemas.user import (
    CourseReference,
    ProfileUpdateResponse,
    UpdateProfileRequest,
    User,
    UserProfile,
    UserPublic,
    UserSummary,
)
from utils.converters import user_to_public, user_to_summary

router = APIRouter(prefix="/api/users", tags=["Users"])


def _build_profile(user: User, user_manager) -> UserProfile:
    enrolled, teaching = user_manager.get_course_lists(user.user_id)
    return UserProfile(
        **user_to_public(user).model_dump(),
        enrolled_courses=[
            CourseReference(course_id=c.course_id, name=c.name, code=c.code) for c in enrolled
        ],
        teaching_courses=[
            CourseReference(course_id=c.course_id, name=c.name, code=c.code) for c in teaching
        ],
    )


@router.get("", response_model=List[UserPublic], summary="List users")
def list_users(
    user_manager: UserManagerDep,
    role: Optional[UserRole] = None,
    current_user: User = Depends(get_current_user),
) -> List[UserPublic]:
    """List users sorted by name, e.g. students to add to a course or group."""
    return [user_to_public(user) for user in user_manager.list_users(role)]


@router.get("/me/profile", response_model=UserProfile, summary="Current user profile")
def get_my_profile(
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> UserProfile:
    return _build_profile(current_user, user_manager)


@router.put("/me/profile", response_model=ProfileUpdateResponse, summary="Update profile")
def update_my_profile(
    req: UpdateProfileRequest,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProfileUpdateResponse:
    user = user_manager.update_profile(current_user.user_id, req.name)
    return ProfileUpdateResponse(
        message="Profile updated successfully", user=user_to_public(user)
    )


@router.get(
    "/course/{course_id}/students",
    response_model=List[UserSummary],
    summary="Students of a course",
)
def list_course_students(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[UserSummary]:
    """Students enrolled in a course. Only readers of the course may list them."""
    students = course_manager.list_students(current_user, course_id)
    return [user_to_summary(student) for student in students]


@router.get("/{user_id}", response_model=UserProfile, summary="Get user")
def get_user(
    user_id: str,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> UserProfile:
    return _build_profile(user_manager.require_user(user_id), user_manager)
