"""Validated entry points for the create/submit forms.

The entity store only fills in defaults. Everything that must be declined
before the store is touched (empty submissions, missing form fields, bad
timestamps) is checked here.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from config import DEFAULT_SUBJECT
from core.exceptions import EmptySubmissionError, ValidationError
from schemas.assignment import Assignment, SubmissionFile
from schemas.common import Section, SubmissionStatus, UserRole
from schemas.submission import Submission
from schemas.user import User
from utils.auth_gate import CredentialVerifier, get_credential_verifier
from utils.derived_views import classify, current_instant, parse_instant
from utils.entity_store import EntityStore

logger = logging.getLogger(__name__)


def username_for(name: str) -> str:
    """Lowercase the name and replace whitespace runs with underscores."""
    return re.sub(r"\s+", "_", name.lower())


class SubmissionIntake:
    """Applies form rules before mutating the entity store."""

    def __init__(self, store: EntityStore, verifier: Optional[CredentialVerifier] = None):
        self.store = store
        self.verifier = verifier or get_credential_verifier()

    def submit(
        self,
        student: User,
        assignment: Assignment,
        files: Iterable[SubmissionFile],
        text_response: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Submission:
        """Record a student's submission.

        Args:
            student: Submitting student.
            assignment: Target assignment.
            files: Attached files; at least one is required.
            text_response: Optional free-text answer.
            now: Submission instant; a naive value is read in LOCAL_TIMEZONE.
                Defaults to the current time.

        Returns:
            The stored Submission.

        Raises:
            EmptySubmissionError: If no files are attached. Nothing is stored.
        """
        attached = list(files)
        if not attached:
            raise EmptySubmissionError(assignment.id)

        current = current_instant(now)
        try:
            status = classify(assignment.due_date, current)
        except ValidationError:
            logger.warning(
                "Assignment %s has an unreadable due date, recording as on time",
                assignment.id,
            )
            status = SubmissionStatus.ON_TIME

        return self.store.add_submission(
            {
                "assignment_id": assignment.id,
                "student_id": student.id,
                "student_name": student.name,
                "files": attached,
                "text_response": text_response,
                "submitted_at": current.isoformat(),
                "status": status,
            }
        )

    def create_assignment(
        self,
        teacher: User,
        title: str,
        due_date: str,
        description: str = "",
        attachments: Iterable[SubmissionFile] = (),
    ) -> Assignment:
        """Publish an assignment to the teacher's section.

        Raises:
            ValidationError: If the title or due date is missing or malformed.
        """
        if not title or not title.strip():
            raise ValidationError("A title is required")
        parse_instant(due_date)

        return self.store.add_assignment(
            {
                "title": title,
                "description": description,
                "due_date": due_date,
                "section": teacher.section,
                "teacher_id": teacher.id,
                "teacher_name": teacher.name,
                "subject": teacher.subject or DEFAULT_SUBJECT,
                "attachments": list(attachments),
            }
        )

    def extend_deadline(self, assignment_id: str, due_date: str) -> None:
        """Move an assignment's due date.

        Raises:
            ValidationError: If the new due date is missing or malformed.
        """
        parse_instant(due_date)
        self.store.update_assignment(assignment_id, {"due_date": due_date})

    def create_user(
        self,
        name: str,
        password: str,
        role: UserRole = UserRole.STUDENT,
        section: Section = Section.EINSTEIN_G11,
        subject: Optional[str] = None,
    ) -> User:
        """Create an account from the admin form.

        Admins always get section NONE; only teachers keep a subject.

        Raises:
            ValidationError: If the name or password is missing.
        """
        if not name or not password:
            raise ValidationError("Name and password are required")

        return self.store.add_user(
            {
                "name": name,
                "username": username_for(name),
                "password": self.verifier.prepare(password),
                "role": role,
                "section": Section.NONE if role == UserRole.ADMIN else section,
                "subject": subject if role == UserRole.TEACHER else None,
            }
        )

    def reset_password(self, user_id: str, new_password: str) -> None:
        """Replace a user's password.

        Raises:
            ValidationError: If the new password is empty.
        """
        if not new_password:
            raise ValidationError("A new password is required")
        self.store.update_user(user_id, {"password": self.verifier.prepare(new_password)})
