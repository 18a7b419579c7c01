"""In-memory entity store.

This module holds the single in-memory source of truth: users, assignments,
submissions and the active session user. Every mutation is synchronous and
immediately visible to later reads; listeners are told which collections
changed so they can be written back.
"""

import logging
import secrets
from typing import Any, Callable, Collection, Dict, FrozenSet, List, Mapping, Optional, Sequence

from config import ASSIGNMENTS_KEY, SESSION_USER_KEY, SUBMISSIONS_KEY, USERS_KEY
from schemas.assignment import Assignment
from schemas.common import merge_fields, normalize_fields, utc_now_iso
from schemas.submission import Submission
from schemas.user import User

logger = logging.getLogger(__name__)

ChangeListener = Callable[[FrozenSet[str]], None]


def _new_id(prefix: str, existing: Collection[str]) -> str:
    while True:
        candidate = f"{prefix}-{secrets.token_hex(8)}"
        if candidate not in existing:
            return candidate


def _given(model_cls, partial: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize a partial payload, treating None and "" as not specified."""
    fields = normalize_fields(model_cls, partial)
    fields.pop("id", None)
    return {key: value for key, value in fields.items() if value not in (None, "")}


class EntityStore:
    """Holds the current collections and the session user."""

    def __init__(
        self,
        users: Optional[Sequence[User]] = None,
        assignments: Optional[Sequence[Assignment]] = None,
        submissions: Optional[Sequence[Submission]] = None,
        session_user: Optional[User] = None,
    ):
        """Initialize EntityStore with its pre-hydration defaults.

        Args:
            users: Initial users, in order.
            assignments: Initial assignments, newest first.
            submissions: Initial submissions, newest first.
            session_user: Initially signed-in user, if any.
        """
        self._users: List[User] = list(users or [])
        self._assignments: List[Assignment] = list(assignments or [])
        self._submissions: List[Submission] = list(submissions or [])
        self._session_user: Optional[User] = session_user
        self._listeners: List[ChangeListener] = []

    # --- Reads ---

    @property
    def users(self) -> List[User]:
        return list(self._users)

    @property
    def assignments(self) -> List[Assignment]:
        return list(self._assignments)

    @property
    def submissions(self) -> List[Submission]:
        return list(self._submissions)

    @property
    def session_user(self) -> Optional[User]:
        return self._session_user

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self._users if u.id == user_id), None)

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        return next((a for a in self._assignments if a.id == assignment_id), None)

    def snapshot(self, key: str) -> Any:
        """Return the JSON-compatible state of one collection.

        Args:
            key: One of the logical state keys.

        Returns:
            A list of dicts for collections, a dict or None for the session user.
        """
        if key == USERS_KEY:
            return [u.to_state() for u in self._users]
        if key == ASSIGNMENTS_KEY:
            return [a.to_state() for a in self._assignments]
        if key == SUBMISSIONS_KEY:
            return [s.to_state() for s in self._submissions]
        if key == SESSION_USER_KEY:
            return self._session_user.to_state() if self._session_user else None
        raise KeyError(key)

    # --- Change notification ---

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener called with the changed keys after each mutation.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self, *keys: str) -> None:
        changed = frozenset(keys)
        for listener in list(self._listeners):
            listener(changed)

    def replace_collection(self, key: str, value: Any) -> None:
        """Overwrite one collection wholesale (hydration).

        Args:
            key: One of the logical state keys.
            value: Validated models: a list, or a User/None for the session user.
        """
        if key == USERS_KEY:
            self._users = list(value)
        elif key == ASSIGNMENTS_KEY:
            self._assignments = list(value)
        elif key == SUBMISSIONS_KEY:
            self._submissions = list(value)
        elif key == SESSION_USER_KEY:
            self._session_user = value
        else:
            raise KeyError(key)
        self._notify(key)

    # --- Session ---

    def set_session_user(self, user: Optional[User]) -> None:
        self._session_user = user.model_copy() if user else None
        self._notify(SESSION_USER_KEY)

    # --- Users ---

    def add_user(self, partial: Mapping[str, Any]) -> User:
        """Append a new user; role defaults to STUDENT and section to NONE."""
        user = User.model_validate(
            {**_given(User, partial), "id": _new_id("u", {u.id for u in self._users})}
        )
        self._users.append(user)
        logger.info("Added user %s (%s)", user.id, user.role.value)
        self._notify(USERS_KEY)
        return user

    def delete_user(self, user_id: str) -> None:
        """Remove a user. Their assignments and submissions are kept."""
        remaining = [u for u in self._users if u.id != user_id]
        if len(remaining) == len(self._users):
            logger.debug("delete_user: no user %s", user_id)
            return
        self._users = remaining
        logger.info("Deleted user %s", user_id)
        self._notify(USERS_KEY)

    def update_user(self, user_id: str, partial: Mapping[str, Any]) -> None:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                self._users[index] = merge_fields(user, partial)
                logger.info("Updated user %s", user_id)
                self._notify(USERS_KEY)
                return
        logger.debug("update_user: no user %s", user_id)

    # --- Assignments ---

    def add_assignment(self, partial: Mapping[str, Any]) -> Assignment:
        """Prepend a new assignment so the newest is always first."""
        fields = _given(Assignment, partial)
        fields["id"] = _new_id("a", {a.id for a in self._assignments})
        fields["created_at"] = utc_now_iso()
        assignment = Assignment.model_validate(fields)
        self._assignments.insert(0, assignment)
        logger.info("Added assignment %s for section %s", assignment.id, assignment.section.value)
        self._notify(ASSIGNMENTS_KEY)
        return assignment

    def delete_assignment(self, assignment_id: str) -> None:
        """Remove an assignment together with every submission referencing it.

        Both collections change in one step and are reported in one event.
        """
        remaining = [a for a in self._assignments if a.id != assignment_id]
        if len(remaining) == len(self._assignments):
            logger.debug("delete_assignment: no assignment %s", assignment_id)
            return
        kept = [s for s in self._submissions if s.assignment_id != assignment_id]
        removed = len(self._submissions) - len(kept)
        self._assignments = remaining
        self._submissions = kept
        logger.info(
            "Deleted assignment %s and %d submission(s)", assignment_id, removed
        )
        self._notify(ASSIGNMENTS_KEY, SUBMISSIONS_KEY)

    def update_assignment(self, assignment_id: str, partial: Mapping[str, Any]) -> None:
        for index, assignment in enumerate(self._assignments):
            if assignment.id == assignment_id:
                self._assignments[index] = merge_fields(assignment, partial)
                logger.info("Updated assignment %s", assignment_id)
                self._notify(ASSIGNMENTS_KEY)
                return
        logger.debug("update_assignment: no assignment %s", assignment_id)

    # --- Submissions ---

    def add_submission(self, partial: Mapping[str, Any]) -> Submission:
        """Prepend a new submission.

        submitted_at defaults to now and status to ON_TIME. No business rules
        are checked here; see SubmissionIntake.
        """
        fields = _given(Submission, partial)
        if not fields.get("submitted_at"):
            fields["submitted_at"] = utc_now_iso()
        fields["id"] = _new_id("s", {s.id for s in self._submissions})
        submission = Submission.model_validate(fields)
        self._submissions.insert(0, submission)
        logger.info(
            "Added submission %s for assignment %s (%s)",
            submission.id,
            submission.assignment_id,
            submission.status.value,
        )
        self._notify(SUBMISSIONS_KEY)
        return submission
