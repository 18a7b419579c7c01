"""Assignment routes (teacher only).

Teachers see and change only the assignments they authored.
"""

from typing import List

from fastapi import APIRouter, HTTPException, status

from core.dependencies import IntakeDep, StoreDep, TeacherDep
from core.exceptions import ValidationError
from schemas.assignment import (
    Assignment,
    AssignmentWithSubmissionCount,
    CreateAssignmentRequest,
    ExtendDeadlineRequest,
)
from schemas.submission import Submission
from schemas.user import User
from utils import derived_views
from utils.entity_store import EntityStore

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


def _owned_assignment(store: EntityStore, assignment_id: str, teacher: User) -> Assignment:
    assignment = store.get_assignment(assignment_id)
    if assignment is None or assignment.teacher_id != teacher.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Assignment '{assignment_id}' not found",
        )
    return assignment


@router.get("", response_model=List[AssignmentWithSubmissionCount], summary="List my assignments")
async def list_assignments(
    store: StoreDep, current_user: TeacherDep
) -> List[AssignmentWithSubmissionCount]:
    return [
        AssignmentWithSubmissionCount(
            assignment=a,
            submission_count=len(derived_views.submissions_for(store, a.id)),
            overdue=derived_views.is_overdue(a),
        )
        for a in derived_views.assignments_by_teacher(store, current_user.id)
    ]


@router.post(
    "",
    response_model=Assignment,
    status_code=status.HTTP_201_CREATED,
    summary="Publish assignment",
)
async def create_assignment(
    req: CreateAssignmentRequest,
    intake: IntakeDep,
    current_user: TeacherDep,
) -> Assignment:
    try:
        return intake.create_assignment(
            current_user,
            title=req.title,
            due_date=req.due_date,
            description=req.description,
            attachments=req.attachments,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{assignment_id}/due-date", response_model=Assignment, summary="Extend deadline")
async def extend_deadline(
    assignment_id: str,
    req: ExtendDeadlineRequest,
    store: StoreDep,
    intake: IntakeDep,
    current_user: TeacherDep,
) -> Assignment:
    _owned_assignment(store, assignment_id, current_user)
    try:
        intake.extend_deadline(assignment_id, req.due_date)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return store.get_assignment(assignment_id)


@router.delete("/{assignment_id}", summary="Delete assignment and its submissions")
async def delete_assignment(
    assignment_id: str, store: StoreDep, current_user: TeacherDep
) -> dict:
    _owned_assignment(store, assignment_id, current_user)
    store.delete_assignment(assignment_id)
    return {"success": True}


@router.get(
    "/{assignment_id}/submissions",
    response_model=List[Submission],
    summary="Submissions for an assignment",
)
async def list_submissions(
    assignment_id: str, store: StoreDep, current_user: TeacherDep
) -> List[Submission]:
    _owned_assignment(store, assignment_id, current_user)
    return derived_views.submissions_for(store, assignment_id)
