"""Command-line entry point.

This module provides a small operator CLI over the same state the API server
uses: print section statistics, list users, list assignments, and submit
files from disk on behalf of a student.
"""

import argparse
import asyncio
import logging
from typing import List, Optional

from core.exceptions import FileReadError, ValidationError
from core.logging_config import setup_logging
from schemas.common import UserRole
from utils import derived_views
from utils.file_reader import StagedFiles
from utils.tracker_context import TrackerContext

logger = logging.getLogger(__name__)


def print_banner() -> None:
    """Print program banner."""
    print("=" * 70)
    print("  Mustang Stride")
    print("  Assignment Efficiency Study Platform")
    print("=" * 70)
    print()


def print_stats(context: TrackerContext) -> None:
    print(f"{'Section':<16}{'Assignments':>12}{'Students':>10}{'On time':>9}{'Late':>6}{'Rate':>7}")
    for stats in derived_views.all_section_stats(context.store):
        print(
            f"{stats.section.value:<16}{stats.assignment_count:>12}{stats.student_count:>10}"
            f"{stats.on_time:>9}{stats.late:>6}{stats.rate:>6}%"
        )


def print_users(context: TrackerContext) -> None:
    for user in context.store.users:
        subject = f" ({user.subject})" if user.subject else ""
        print(f"{user.id:<20}{user.role.value:<9}{user.section.value:<14}{user.name}{subject}")


def print_assignments(context: TrackerContext) -> None:
    for assignment in context.store.assignments:
        count = len(derived_views.submissions_for(context.store, assignment.id))
        overdue = " [overdue]" if derived_views.is_overdue(assignment) else ""
        print(
            f"{assignment.id:<20}{assignment.section.value:<14}{assignment.due_date:<26}"
            f"{count:>3} submitted  {assignment.title}{overdue}"
        )


async def submit_files(
    context: TrackerContext,
    name: str,
    password: str,
    assignment_id: str,
    paths: List[str],
    text_response: Optional[str] = None,
) -> bool:
    """Sign in as a student, submit files for an assignment, sign out.

    Returns:
        True if the submission was stored.
    """
    student = context.auth.login(name, password)
    if student is None:
        print("❌ sorry, wrong credentials")
        return False
    try:
        if student.role != UserRole.STUDENT:
            print("❌ Only students can submit assignments.")
            return False

        assignment = context.store.get_assignment(assignment_id)
        if assignment is None or assignment.section != student.section:
            print(f"❌ Assignment not found: {assignment_id}")
            return False

        staged = StagedFiles()
        try:
            await staged.attach(paths)
        except FileReadError as e:
            print(f"❌ Failed to read one or more files. {e}")
            return False

        try:
            submission = context.intake.submit(
                student, assignment, staged.files, text_response=text_response
            )
        except ValidationError as e:
            print(f"❌ {e}")
            return False

        print(f"✅ Assignment submitted successfully! ({submission.status.value})")
        return True
    finally:
        context.auth.logout()


async def run(args: argparse.Namespace) -> int:
    context = TrackerContext()
    await context.start()
    try:
        if args.command == "stats":
            print_stats(context)
        elif args.command == "users":
            print_users(context)
        elif args.command == "assignments":
            print_assignments(context)
        elif args.command == "submit":
            ok = await submit_files(
                context,
                args.name,
                args.password,
                args.assignment_id,
                args.files,
                text_response=args.text,
            )
            return 0 if ok else 1
        return 0
    finally:
        await context.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mustang Stride operator CLI")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("stats", help="Print per-section submission statistics")
    commands.add_parser("users", help="List users")
    commands.add_parser("assignments", help="List assignments, newest first")

    submit = commands.add_parser("submit", help="Submit files as a student")
    submit.add_argument("name", help="Student full name")
    submit.add_argument("password")
    submit.add_argument("assignment_id")
    submit.add_argument("files", nargs="+", help="Files to attach")
    submit.add_argument("--text", default=None, help="Optional text response")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    setup_logging()
    args = build_parser().parse_args(argv)
    print_banner()
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\n\nInterrupted.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
