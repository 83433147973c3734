"""Submission routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from api.routes.auth import get_current_user
from core.choices import SubmissionStatus
from core.dependencies import SubmissionManagerDep
from schemas.common import MessageResponse
from schemas.submission import (
    GradeSubmissionRequest,
    SubmissionInfo,
    SubmissionResult,
    UpsertSubmissionRequest,
)
from schemas.user import User
from utils.converters import submission_to_info

router = APIRouter(prefix="/api/submissions", tags=["Submissions"])


@router.get("", response_model=List[SubmissionInfo], summary="List submissions")
def list_submissions(
    submission_manager: SubmissionManagerDep,
    assignment_id: Optional[str] = Query(default=None, alias="assignmentId"),
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    status_filter: Optional[SubmissionStatus] = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
) -> List[SubmissionInfo]:
    models = submission_manager.list_submissions(
        current_user,
        assignment_id=assignment_id,
        course_id=course_id,
        status=status_filter,
    )
    return [submission_to_info(model) for model in models]


@router.get(
    "/my-submissions", response_model=List[SubmissionInfo], summary="List my submissions"
)
def list_my_submissions(
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[SubmissionInfo]:
    """The user's own submissions and those of their groups."""
    return [
        submission_to_info(model)
        for model in submission_manager.list_my_submissions(current_user)
    ]


@router.post("", response_model=SubmissionResult, summary="Create or update submission")
def upsert_submission(
    req: UpsertSubmissionRequest,
    response: Response,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> SubmissionResult:
    """Create the user's submission for an assignment, or update the existing one.

    Responds 201 when a record was created and 200 when one was updated.
    """
    model, created = submission_manager.upsert_submission(
        current_user,
        assignment_id=req.assignment_id,
        group_id=req.group_id,
        status=req.status,
        submission_link=req.submission_link,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
        message = "Submission created successfully"
    else:
        message = "Submission updated successfully"
    return SubmissionResult(message=message, submission=submission_to_info(model))


@router.get(
    "/assignment/{assignment_id}",
    response_model=List[SubmissionInfo],
    summary="Submissions of an assignment",
)
def list_assignment_submissions(
    assignment_id: str,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[SubmissionInfo]:
    return [
        submission_to_info(model)
        for model in submission_manager.list_for_assignment(current_user, assignment_id)
    ]


@router.get(
    "/group/{group_id}", response_model=List[SubmissionInfo], summary="Submissions of a group"
)
def list_group_submissions(
    group_id: str,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[SubmissionInfo]:
    return [
        submission_to_info(model)
        for model in submission_manager.list_for_group(current_user, group_id)
    ]


@router.get("/{submission_id}", response_model=SubmissionInfo, summary="Get submission")
def get_submission(
    submission_id: str,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> SubmissionInfo:
    return submission_to_info(
        submission_manager.get_submission_for_viewer(current_user, submission_id)
    )


@router.put("/{submission_id}", response_model=SubmissionResult, summary="Grade submission")
def grade_submission(
    submission_id: str,
    req: GradeSubmissionRequest,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> SubmissionResult:
    """Record marks and feedback. Course professor only."""
    model = submission_manager.grade_submission(
        current_user,
        submission_id,
        marks=req.marks,
        feedback=req.feedback,
        status=req.status,
    )
    return SubmissionResult(
        message="Submission graded successfully", submission=submission_to_info(model)
    )


@router.delete("/{submission_id}", response_model=MessageResponse, summary="Delete submission")
def delete_submission(
    submission_id: str,
    submission_manager: SubmissionManagerDep,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    submission_manager.delete_submission(current_user, submission_id)
    return MessageResponse(message="Submission deleted successfully")
