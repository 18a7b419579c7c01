from datetime import timedelta

import pytest

from core.exceptions import EmptySubmissionError, ValidationError
from schemas.common import Section, SubmissionStatus, UserRole
from utils.auth_gate import BcryptCredentialVerifier
from utils.submission_intake import SubmissionIntake, username_for


@pytest.fixture
def intake(seeded_store):
    return SubmissionIntake(seeded_store)


@pytest.fixture
def teacher(seeded_store, user_named):
    return user_named(seeded_store, "Tom Teacher")


@pytest.fixture
def jane(seeded_store, user_named):
    return user_named(seeded_store, "Jane Doe")


def test_username_for():
    assert username_for("Jane  Mary\tDoe") == "jane_mary_doe"


def test_submit_without_files_is_declined(intake, seeded_store, teacher, jane, future_due):
    assignment = intake.create_assignment(teacher, "Lab", future_due)
    events = []
    seeded_store.subscribe(events.append)

    with pytest.raises(EmptySubmissionError) as exc_info:
        intake.submit(jane, assignment, [])

    assert exc_info.value.assignment_id == assignment.id
    assert seeded_store.submissions == []
    assert events == []


def test_submit_before_due_is_on_time(intake, teacher, jane, pdf_file, future_due, now):
    assignment = intake.create_assignment(teacher, "Lab", future_due)

    submission = intake.submit(jane, assignment, [pdf_file], text_response="done", now=now)

    assert submission.status == SubmissionStatus.ON_TIME
    assert submission.student_id == jane.id
    assert submission.student_name == "Jane Doe"
    assert submission.submitted_at == now.isoformat()
    assert submission.text_response == "done"
    assert submission.files == [pdf_file]


def test_submit_after_due_is_late(intake, teacher, jane, pdf_file, past_due, now):
    assignment = intake.create_assignment(teacher, "Lab", past_due)

    submission = intake.submit(jane, assignment, [pdf_file], now=now)

    assert submission.status == SubmissionStatus.LATE


def test_submit_exactly_at_due_is_on_time(intake, teacher, jane, pdf_file, now):
    assignment = intake.create_assignment(teacher, "Lab", now.isoformat())

    assert intake.submit(jane, assignment, [pdf_file], now=now).status == SubmissionStatus.ON_TIME


def test_unreadable_due_date_counts_as_on_time(intake, seeded_store, jane, pdf_file, now):
    assignment = seeded_store.add_assignment({"title": "Old", "due_date": "tomorrow-ish"})

    submission = intake.submit(jane, assignment, [pdf_file], now=now)

    assert submission.status == SubmissionStatus.ON_TIME


def test_create_assignment_copies_teacher_fields(intake, teacher, future_due, pdf_file):
    assignment = intake.create_assignment(
        teacher, "Lab", future_due, description="Measure g", attachments=[pdf_file]
    )

    assert assignment.section == Section.EINSTEIN_G11
    assert assignment.teacher_id == teacher.id
    assert assignment.teacher_name == "Tom Teacher"
    assert assignment.subject == "Physics"
    assert assignment.description == "Measure g"
    assert assignment.attachments == [pdf_file]


def test_create_assignment_subject_falls_back_to_general(intake, seeded_store, future_due):
    teacher = intake.create_user("No Subject", "pw", role=UserRole.TEACHER, section=Section.GALILEI_G12)

    assert intake.create_assignment(teacher, "Quiz", future_due).subject == "General"


@pytest.mark.parametrize("title,due_date", [("", "2025-03-08T12:00"), ("   ", "2025-03-08T12:00"), ("Lab", ""), ("Lab", "later")])
def test_create_assignment_validation(intake, seeded_store, teacher, title, due_date):
    with pytest.raises(ValidationError):
        intake.create_assignment(teacher, title, due_date)

    assert seeded_store.assignments == []


def test_extend_deadline(intake, seeded_store, teacher, future_due, now):
    assignment = intake.create_assignment(teacher, "Lab", future_due)
    later = (now + timedelta(days=14)).isoformat()

    intake.extend_deadline(assignment.id, later)

    assert seeded_store.get_assignment(assignment.id).due_date == later
    with pytest.raises(ValidationError):
        intake.extend_deadline(assignment.id, "")
    assert seeded_store.get_assignment(assignment.id).due_date == later


def test_create_student(intake):
    user = intake.create_user("Mary  Ann", "pw", section=Section.GALILEI_G12, subject="Ignored")

    assert user.username == "mary_ann"
    assert user.role == UserRole.STUDENT
    assert user.section == Section.GALILEI_G12
    assert user.subject is None


def test_create_admin_has_no_section(intake):
    user = intake.create_user("Root", "pw", role=UserRole.ADMIN, section=Section.EINSTEIN_G11)

    assert user.section == Section.NONE
    assert user.subject is None


def test_create_teacher_keeps_subject(intake):
    user = intake.create_user("Ms Curie", "pw", role=UserRole.TEACHER, subject="Chemistry")

    assert user.section == Section.EINSTEIN_G11
    assert user.subject == "Chemistry"


def test_create_user_requires_name_and_password(intake, seeded_store):
    count = len(seeded_store.users)

    with pytest.raises(ValidationError):
        intake.create_user("", "pw")
    with pytest.raises(ValidationError):
        intake.create_user("Someone", "")

    assert len(seeded_store.users) == count


def test_passwords_go_through_the_verifier(seeded_store, jane):
    verifier = BcryptCredentialVerifier(rounds=4)
    intake = SubmissionIntake(seeded_store, verifier)

    user = intake.create_user("Hashed", "pw")
    intake.reset_password(jane.id, "new")

    assert verifier.verify("pw", user.password)
    assert verifier.verify("new", seeded_store.get_user(jane.id).password)


def test_reset_password_requires_value(intake, jane):
    with pytest.raises(ValidationError):
        intake.reset_password(jane.id, "")


def test_submit_with_naive_now(intake, teacher, jane, pdf_file, past_due, now):
    assignment = intake.create_assignment(teacher, "Lab", past_due)

    submission = intake.submit(jane, assignment, [pdf_file], now=now.replace(tzinfo=None))

    assert submission.status == SubmissionStatus.LATE
    assert submission.submitted_at == now.isoformat()
