"""Derived views over the entity store.

Stateless functions recomputed on every call: per-section statistics, the
pending/completed partition of a student's assignments, per-assignment
submission lists, and on-time/late classification.
"""

from datetime import datetime
from typing import List, Optional

import pytz

from config import LOCAL_TIMEZONE
from core.exceptions import ValidationError
from schemas.assignment import Assignment
from schemas.common import Section, SubmissionStatus, UserRole
from schemas.stats import SectionStats
from schemas.submission import CompletedAssignment, StudentAssignments, Submission
from schemas.user import User
from utils.entity_store import EntityStore


def parse_instant(value: str, timezone: str = LOCAL_TIMEZONE) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Values without an offset (datetime-local form values) are interpreted in
    ``timezone``.

    Raises:
        ValidationError: If the value is not a well-formed timestamp.
    """
    if not value:
        raise ValidationError("A timestamp is required")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp '{value}'") from e
    return localize(parsed, timezone)


def localize(value: datetime, timezone: str = LOCAL_TIMEZONE) -> datetime:
    """Attach ``timezone`` to a naive datetime; aware values pass through."""
    if value.tzinfo is None:
        return pytz.timezone(timezone).localize(value)
    return value


def current_instant(now: Optional[datetime] = None) -> datetime:
    """``now`` as an aware datetime, defaulting to the current UTC time."""
    return localize(now) if now is not None else datetime.now(pytz.utc)


def is_late(due_date: str, now: Optional[datetime] = None) -> bool:
    """True when ``now`` is strictly after the due instant."""
    return current_instant(now) > parse_instant(due_date)


def is_overdue(assignment: Assignment, now: Optional[datetime] = None) -> bool:
    """Display flag; an unreadable due date never counts as overdue."""
    try:
        return is_late(assignment.due_date, now)
    except ValidationError:
        return False


def classify(due_date: str, now: Optional[datetime] = None) -> SubmissionStatus:
    return SubmissionStatus.LATE if is_late(due_date, now) else SubmissionStatus.ON_TIME


def _round_half_up_percent(part: int, whole: int) -> int:
    # Integer form of floor(100 * part / whole + 0.5)
    return (200 * part + whole) // (2 * whole)


def assignments_for_section(store: EntityStore, section: Section) -> List[Assignment]:
    return [a for a in store.assignments if a.section == section]


def users_in_section(store: EntityStore, section: Section) -> List[User]:
    return [u for u in store.users if u.section == section]


def students_in_section(store: EntityStore, section: Section) -> List[User]:
    return [
        u for u in store.users
        if u.role == UserRole.STUDENT and u.section == section
    ]


def assignments_by_teacher(store: EntityStore, teacher_id: str) -> List[Assignment]:
    return [a for a in store.assignments if a.teacher_id == teacher_id]


def section_stats(store: EntityStore, section: Section) -> SectionStats:
    """Compute submission volume of a section against its expected volume.

    expected = assignments in the section x students in the section. The
    rate counts every submission to a section assignment, so one student
    submitting to several assignments counts several times.

    Args:
        store: Entity store to read.
        section: Section to summarize.

    Returns:
        SectionStats; rate is 0 when nothing is expected.
    """
    section_assignment_ids = {a.id for a in assignments_for_section(store, section)}
    section_submissions = [
        s for s in store.submissions if s.assignment_id in section_assignment_ids
    ]
    assignment_count = len(section_assignment_ids)
    student_count = len(students_in_section(store, section))
    expected = assignment_count * student_count
    on_time = sum(1 for s in section_submissions if s.status == SubmissionStatus.ON_TIME)
    late = sum(1 for s in section_submissions if s.status == SubmissionStatus.LATE)
    total = on_time + late
    rate = _round_half_up_percent(total, expected) if expected > 0 else 0
    return SectionStats(
        section=section,
        assignment_count=assignment_count,
        student_count=student_count,
        expected=expected,
        on_time=on_time,
        late=late,
        total=total,
        rate=rate,
    )


def all_section_stats(store: EntityStore) -> List[SectionStats]:
    return [section_stats(store, s) for s in Section if s != Section.NONE]


def submission_for(
    store: EntityStore, student_id: str, assignment_id: str
) -> Optional[Submission]:
    """First submission in store order for the student and assignment, if any."""
    return next(
        (
            s for s in store.submissions
            if s.assignment_id == assignment_id and s.student_id == student_id
        ),
        None,
    )


def pending_for(store: EntityStore, student: User) -> List[Assignment]:
    return [
        a for a in assignments_for_section(store, student.section)
        if submission_for(store, student.id, a.id) is None
    ]


def completed_for(store: EntityStore, student: User) -> List[Assignment]:
    return [
        a for a in assignments_for_section(store, student.section)
        if submission_for(store, student.id, a.id) is not None
    ]


def student_assignments(store: EntityStore, student: User) -> StudentAssignments:
    """Pending and completed assignments of a student, with the matching submissions."""
    completed = []
    for assignment in completed_for(store, student):
        completed.append(
            CompletedAssignment(
                assignment=assignment,
                submission=submission_for(store, student.id, assignment.id),
            )
        )
    return StudentAssignments(pending=pending_for(store, student), completed=completed)


def submissions_for(store: EntityStore, assignment_id: str) -> List[Submission]:
    """All submissions for an assignment, newest first."""
    return [s for s in store.submissions if s.assignment_id == assignment_id]
