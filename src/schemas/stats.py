"""Derived statistics schema definitions."""

from pydantic import Field

from schemas.common import Section, TrackerModel


class SectionStats(TrackerModel):
    """Submission volume of a section against its expected volume."""

    section: Section
    assignment_count: int = 0
    student_count: int = 0
    expected: int = Field(default=0, description="assignment_count x student_count")
    on_time: int = 0
    late: int = 0
    total: int = Field(default=0, description="on_time + late")
    rate: int = Field(default=0, description="Completion rate percentage, 0 when nothing is expected.")
