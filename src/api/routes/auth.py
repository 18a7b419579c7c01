"""Authentication routes.

This module handles HTTP endpoints for signing in and out of the single
active session. Handlers are coroutines so every store mutation runs on the
event loop.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from core.dependencies import AuthGateDep
from core.exceptions import InvalidCredentialsError
from schemas.user import LoginRequest, LoginResponse, PublicUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse, summary="Sign in")
async def login(req: LoginRequest, auth: AuthGateDep) -> LoginResponse:
    """Sign in by full name and password.

    Args:
        req: Login request with display name and password.
        auth: Injected AuthGate.

    Returns:
        LoginResponse with the signed-in user, without the password.

    Raises:
        HTTPException: 401 if the credentials do not match. The message
            never says which of the two was wrong.
    """
    user = auth.login(req.name, req.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(InvalidCredentialsError()),
        )
    return LoginResponse(user=PublicUser.from_user(user))


@router.post("/logout", summary="Sign out")
async def logout(auth: AuthGateDep) -> dict:
    auth.logout()
    return {"success": True, "message": "Logged out successfully"}


@router.get("/session", summary="Current session")
async def get_session(auth: AuthGateDep) -> dict:
    """Return the signed-in user (or null) and the transient login error flag."""
    user = auth.current_user
    return {
        "user": PublicUser.from_user(user).model_dump(mode="json", by_alias=True)
        if user
        else None,
        "loginError": auth.login_error,
    }
