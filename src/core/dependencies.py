"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated, Callable

from fastapi import Depends, HTTPException, Request, status

from core.exceptions import NotHydratedError, PermissionDeniedError
from schemas.common import UserRole
from schemas.user import User
from utils.auth_gate import AuthGate
from utils.entity_store import EntityStore
from utils.submission_intake import SubmissionIntake
from utils.tracker_context import TrackerContext


def get_context(request: Request) -> TrackerContext:
    """Get the TrackerContext created at application startup.

    Args:
        request: Incoming request.

    Returns:
        TrackerContext instance stored on the application.
    """
    return request.app.state.tracker


def get_ready_context(
    context: TrackerContext = Depends(get_context),
) -> TrackerContext:
    """Get the TrackerContext once hydration has finished.

    Raises:
        HTTPException: 503 while state is still loading.
    """
    try:
        context.hydration.require_hydrated()
    except NotHydratedError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    return context


def get_store(context: TrackerContext = Depends(get_ready_context)) -> EntityStore:
    return context.store


def get_auth_gate(context: TrackerContext = Depends(get_ready_context)) -> AuthGate:
    return context.auth


def get_intake(context: TrackerContext = Depends(get_ready_context)) -> SubmissionIntake:
    return context.intake


def require_role(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency returning the session user if it holds one of ``roles``."""

    def dependency(auth: AuthGate = Depends(get_auth_gate)) -> User:
        try:
            return auth.require_role(*roles)
        except PermissionDeniedError as e:
            status_code = (
                status.HTTP_401_UNAUTHORIZED
                if auth.current_user is None
                else status.HTTP_403_FORBIDDEN
            )
            raise HTTPException(status_code=status_code, detail=str(e))

    return dependency


# Type aliases for dependency injection
StoreDep = Annotated[EntityStore, Depends(get_store)]
AuthGateDep = Annotated[AuthGate, Depends(get_auth_gate)]
IntakeDep = Annotated[SubmissionIntake, Depends(get_intake)]
AdminDep = Annotated[User, Depends(require_role(UserRole.ADMIN))]
TeacherDep = Annotated[User, Depends(require_role(UserRole.TEACHER))]
StudentDep = Annotated[User, Depends(require_role(UserRole.STUDENT))]
