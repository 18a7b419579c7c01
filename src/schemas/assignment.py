"""Assignment and attachment schema definitions."""

from typing import List

from pydantic import Field

from schemas.common import Section, TrackerModel, utc_now_iso


class SubmissionFile(TrackerModel):
    """An opaque encoded file, owned by the assignment or submission holding it."""

    name: str = Field(description="Original file name.")
    type: str = Field(default="", description="MIME type string.")
    data: str = Field(
        default="",
        description="Self-describing encoded payload, usually a base64 data URL.",
    )


class Assignment(TrackerModel):
    id: str = Field(description="The unique identifier for the assignment.")
    title: str = ""
    description: str = ""
    due_date: str = Field(default="", description="Due instant, ISO-8601.")
    section: Section = Section.NONE
    teacher_id: str = ""
    teacher_name: str = ""
    subject: str = ""
    attachments: List[SubmissionFile] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)


class CreateAssignmentRequest(TrackerModel):
    title: str = ""
    description: str = ""
    due_date: str = ""
    attachments: List[SubmissionFile] = Field(default_factory=list)


class ExtendDeadlineRequest(TrackerModel):
    due_date: str


class AssignmentWithSubmissionCount(TrackerModel):
    assignment: Assignment
    submission_count: int = 0
    overdue: bool = False
