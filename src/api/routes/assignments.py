"""Assignment routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.routes.auth import get_current_user
from core import access
from core.dependencies import AssignmentManagerDep, SubmissionManagerDep
from schemas.assignment import (
    AssignmentInfo,
    AssignmentResult,
    CreateAssignmentRequest,
    UpdateAssignmentRequest,
)
from schemas.common import MessageResponse
from schemas.submission import SubmissionInfo
from schemas.user import User
from utils.converters import assignment_to_info, submission_to_info

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


@router.get("", response_model=List[AssignmentInfo], summary="List assignments")
def list_assignments(
    assignment_manager: AssignmentManagerDep,
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    current_user: User = Depends(get_current_user),
) -> List[AssignmentInfo]:
    """Assignments of readable courses, newest first, with confirmed submission counts."""
    return [
        assignment_to_info(model, submission_count=count)
        for model, count in assignment_manager.list_assignments(current_user, course_id)
    ]


@router.get("/{assignment_id}", response_model=AssignmentInfo, summary="Get assignment")
def get_assignment(
    assignment_id: str,
    assignment_manager: AssignmentManagerDep,
    current_user: User = Depends(get_current_user),
) -> AssignmentInfo:
    """Assignment detail. Students also get their own submission, if any."""
    model = assignment_manager.get_assignment_for_reader(current_user, assignment_id)
    counts = assignment_manager.count_confirmed_submissions([model.assignment_id])
    user_submission = None
    if access.is_student(current_user):
        user_submission = assignment_manager.find_user_submission(current_user, model)
    return assignment_to_info(
        model,
        submission_count=counts.get(model.assignment_id, 0),
        user_submission=user_submission,
    )


@router.post(
    "",
    response_model=AssignmentResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
)
def create_assignment(
    req: CreateAssignmentRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: User = Depends(get_current_user),
) -> AssignmentResult:
    model = assignment_manager.create_assignment(
        current_user,
        course_id=req.course_id,
        title=req.title,
        due_date=req.due_date,
        type=req.type,
        description=req.description,
        external_link=req.external_link,
        max_marks=req.max_marks,
        instructions=req.instructions,
    )
    return AssignmentResult(
        message="Assignment created successfully", assignment=assignment_to_info(model)
    )


@router.put("/{assignment_id}", response_model=AssignmentResult, summary="Update assignment")
def update_assignment(
    assignment_id: str,
    req: UpdateAssignmentRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: User = Depends(get_current_user),
) -> AssignmentResult:
    model = assignment_manager.update_assignment(
        current_user, assignment_id, **req.model_dump(exclude_unset=True)
    )
    counts = assignment_manager.count_confirmed_submissions([model.assignment_id])
    return AssignmentResult(
        message="Assignment updated successfully",
        assignment=assignment_to_info(
            model, submission_count=counts.get(model.assignment_id, 0)
        ),
    )


@router.delete("/{assignment_id}", response_model=MessageResponse, summary="Delete assignment")
def delete_assignment(
    assignment_id: str,
    assignment_manager: AssignmentManagerDep,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    assignment_manager.delete_assignment(current_user, assignment_id)
    return MessageResponse(message="Assignment deleted successfully")


@router.get(
    "/{assignment_id}/submissions",
    response_model=List[SubmissionInfo],
    summary="Submissions of an assignment",
)
def list_assignment_submissions(
    assignment_id: str,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[SubmissionInfo]:
    """All submissions of an assignment. Course professor only."""
    return [
        submission_to_info(model)
        for model in submission_manager.list_for_assignment(current_user, assignment_id)
    ]
