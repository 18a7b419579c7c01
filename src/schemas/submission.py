"""Submission schema definitions."""

from typing import List, Optional

from pydantic import Field

from schemas.assignment import Assignment, SubmissionFile
from schemas.common import SubmissionStatus, TrackerModel, utc_now_iso


class Submission(TrackerModel):
    id: str = Field(description="The unique identifier for the submission.")
    assignment_id: str = ""
    student_id: str = ""
    student_name: str = Field(default="", description="Denormalized at submission time.")
    submitted_at: str = Field(default_factory=utc_now_iso)
    files: List[SubmissionFile] = Field(default_factory=list)
    text_response: Optional[str] = None
    status: SubmissionStatus = SubmissionStatus.ON_TIME


class SubmitRequest(TrackerModel):
    assignment_id: str
    files: List[SubmissionFile] = Field(default_factory=list)
    text_response: Optional[str] = None


class CompletedAssignment(TrackerModel):
    assignment: Assignment
    submission: Submission


class StudentAssignments(TrackerModel):
    """Pending/completed partition of a student's section assignments."""

    pending: List[Assignment] = Field(default_factory=list)
    completed: List[CompletedAssignment] = Field(default_factory=list)
