"""Group management routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.routes.auth import get_current_user
from core.dependencies import GroupManagerDep
from schemas.common import MessageResponse
from schemas.group import (
    AddMemberRequest,
    ChangeLeaderRequest,
    CreateGroupRequest,
    GroupInfo,
    GroupResult,
)
from schemas.user import User
from utils.converters import group_to_info

router = APIRouter(prefix="/api/groups", tags=["Groups"])


@router.get("", response_model=List[GroupInfo], summary="List groups")
def list_groups(
    group_manager: GroupManagerDep,
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    current_user: User = Depends(get_current_user),
) -> List[GroupInfo]:
    """Groups of one course, or of every course the user can read."""
    return [group_to_info(g) for g in group_manager.list_groups(current_user, course_id)]


@router.get("/my-groups", response_model=List[GroupInfo], summary="List my groups")
def list_my_groups(
    group_manager: GroupManagerDep,
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    current_user: User = Depends(get_current_user),
) -> List[GroupInfo]:
    groups = group_manager.list_groups_for_member(current_user.user_id, course_id)
    return [group_to_info(g) for g in groups]


@router.post(
    "",
    response_model=GroupResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create group",
)
def create_group(
    req: CreateGroupRequest,
    group_manager: GroupManagerDep,
    current_user: User = Depends(get_current_user),
) -> GroupResult:
    """Create a group; the creator becomes its leader and first member."""
    model = group_manager.create_group(current_user, req.name, req.course_id)
    return GroupResult(message="Group created successfully", group=group_to_info(model))


@router.get("/{group_id}", response_model=GroupInfo, summary="Get group")
def get_group(
    group_id: str,
    group_manager: GroupManagerDep,
    current_user: User = Depends(get_current_user),
) -> GroupInfo:
    return group_to_info(group_manager.get_group_for_reader(current_user, group_id))


@router.post("/{group_id}/members", response_model=GroupResult, summary="Add member")
def add_member(
    group_id: str,
    req: AddMemberRequest,
    group_manager: GroupManagerDep,
    current_user: User = Depends(get_current_user),
) -> GroupResult:
    model = group_manager.add_member(
        current_user, group_id, user_id=req.user_id, user_email=req.user_email
    )
    return GroupResult(message="Member added successfully", group=group_to_info(model))


@router.delete(
    "/{group_id}/members/{user_id}", response_model=GroupResult, summary="Remove member"
)
def remove_member(
    group_id: str,
    user_id: str,
    group_manager: GroupManagerDep,
    current_user: User = Depends(get_current_user),
) -> GroupResult:
    model = group_manager.remove_member(current_user, group_id, user_id)
    return GroupResult(message="Member removed successfully", group=group_to_info(model))


@router.put("/{group_id}/leader", response_model=GroupResult, summary="Change leader")
def change_leader(
    group_id: str,
    req: ChangeLeaderRequest,
    group_manager: GroupManagerDep,
    current_user: User = Depends(get_current_user),
) -> GroupResult:
    model = group_manager.transfer_leader(current_user, group_id, req.new_leader_id)
    return GroupResult(message="Leader changed successfully", group=group_to_info(model))


@router.delete("/{group_id}", response_model=MessageResponse, summary="Delete group")
def delete_group(
    group_id: str,
    group_manager: GroupManagerDep,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    group_manager.delete_group(current_user, group_id)
    return MessageResponse(message="Group deleted successfully")
