"""Session and credential handling.

This module validates login attempts against the entity store, keeps the
active session user, and exposes the transient login error flag shown after
a failed attempt.
"""

import logging
import time
from typing import Callable, Optional

import bcrypt

from config import CREDENTIAL_SCHEME, LOGIN_ERROR_DISPLAY_SECONDS
from core.exceptions import ConfigurationError, PermissionDeniedError
from schemas.common import UserRole
from schemas.user import User
from utils.entity_store import EntityStore

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72
BCRYPT_ROUNDS = 12


class CredentialVerifier:
    """Turns passwords into stored form and checks attempts against it."""

    def prepare(self, password: str) -> str:
        raise NotImplementedError

    def verify(self, supplied: str, stored: str) -> bool:
        raise NotImplementedError


class PlaintextCredentialVerifier(CredentialVerifier):
    """Stores passwords as given and compares them exactly."""

    def prepare(self, password: str) -> str:
        return password

    def verify(self, supplied: str, stored: str) -> bool:
        return supplied == stored


class BcryptCredentialVerifier(CredentialVerifier):
    """Stores bcrypt hashes and verifies attempts with bcrypt."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def prepare(self, password: str) -> str:
        password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, supplied: str, stored: str) -> bool:
        password_bytes = supplied.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(password_bytes, stored.encode("utf-8"))
        except ValueError as e:
            # Stored value is not a bcrypt hash
            logger.error("Password verification error: %s", e)
            return False


def get_credential_verifier(scheme: str = CREDENTIAL_SCHEME) -> CredentialVerifier:
    """Build the verifier for a configured scheme.

    Raises:
        ConfigurationError: If the scheme is unknown.
    """
    if scheme == "plaintext":
        return PlaintextCredentialVerifier()
    if scheme == "bcrypt":
        return BcryptCredentialVerifier()
    raise ConfigurationError(f"Unknown credential scheme: {scheme}")


def normalize_name(name: str) -> str:
    """Normalize a typed name: outer whitespace dropped, lowercased."""
    return name.strip().lower()


class AuthGate:
    """Logs users in and out of the single active session."""

    def __init__(
        self,
        store: EntityStore,
        verifier: Optional[CredentialVerifier] = None,
        error_window: float = LOGIN_ERROR_DISPLAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize AuthGate.

        Args:
            store: Entity store holding users and the session user.
            verifier: Credential verifier. Defaults to the configured scheme.
            error_window: Seconds a failed login keeps the error flag raised.
            clock: Monotonic clock, injectable for tests.
        """
        self.store = store
        self.verifier = verifier or get_credential_verifier()
        self.error_window = error_window
        self._clock = clock
        self._error_until: Optional[float] = None

    @property
    def current_user(self) -> Optional[User]:
        return self.store.session_user

    @property
    def login_error(self) -> bool:
        """True while a failed login is still inside its display window."""
        if self._error_until is None:
            return False
        if self._clock() >= self._error_until:
            self._error_until = None
            return False
        return True

    def clear_error(self) -> None:
        self._error_until = None

    def find_by_name(self, name: str) -> Optional[User]:
        """First user whose display name matches the typed name, ignoring case.

        Only the typed name is trimmed; stored names are only lowercased.
        """
        wanted = normalize_name(name)
        return next(
            (u for u in self.store.users if u.name.lower() == wanted), None
        )

    def login(self, name: str, password: str) -> Optional[User]:
        """Try to start a session.

        Args:
            name: Full display name as typed.
            password: Password as typed.

        Returns:
            The signed-in user, or None when the credentials do not match.
        """
        candidate = self.find_by_name(name)
        if candidate is not None and self.verifier.verify(password, candidate.password):
            self.store.set_session_user(candidate)
            self._error_until = None
            logger.info("User %s signed in as %s", candidate.id, candidate.role.value)
            return candidate

        self._error_until = self._clock() + self.error_window
        logger.info("Rejected login attempt")
        return None

    def logout(self) -> None:
        user = self.store.session_user
        self.store.set_session_user(None)
        self._error_until = None
        if user:
            logger.info("User %s signed out", user.id)

    def require_role(self, *roles: UserRole) -> User:
        """Return the session user if it holds one of ``roles``.

        Raises:
            PermissionDeniedError: If nobody is signed in or the role differs.
        """
        user = self.current_user
        if user is None:
            raise PermissionDeniedError("Not signed in")
        if roles and user.role not in roles:
            raise PermissionDeniedError(
                f"This action requires role {' or '.join(r.value for r in roles)}"
            )
        return user
