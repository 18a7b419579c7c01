"""Student routes: own assignments and submitting work."""

from fastapi import APIRouter, HTTPException, status

from core.dependencies import IntakeDep, StoreDep, StudentDep
from core.exceptions import ValidationError
from schemas.submission import StudentAssignments, Submission, SubmitRequest
from utils import derived_views

router = APIRouter(prefix="/api", tags=["Student"])


@router.get(
    "/student/assignments",
    response_model=StudentAssignments,
    summary="Pending and completed assignments",
)
async def list_my_assignments(store: StoreDep, current_user: StudentDep) -> StudentAssignments:
    return derived_views.student_assignments(store, current_user)


@router.post(
    "/submissions",
    response_model=Submission,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an assignment",
)
async def submit_assignment(
    req: SubmitRequest,
    store: StoreDep,
    intake: IntakeDep,
    current_user: StudentDep,
) -> Submission:
    """Submit files (and an optional text answer) for an assignment of the student's section.

    Raises:
        HTTPException: 404 for an unknown assignment or one from another
            section, 400 when no file is attached.
    """
    assignment = store.get_assignment(req.assignment_id)
    if assignment is None or assignment.section != current_user.section:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Assignment '{req.assignment_id}' not found",
        )
    try:
        return intake.submit(
            current_user, assignment, req.files, text_response=req.text_response
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
