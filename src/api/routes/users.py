"""User administration routes (admin only)."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from core.dependencies import AdminDep, IntakeDep, StoreDep
from core.exceptions import ValidationError
from schemas.common import Section
from schemas.user import CreateUserRequest, PublicUser, UpdateUserRequest
from utils.derived_views import users_in_section

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[PublicUser], summary="List users")
async def list_users(
    store: StoreDep,
    current_user: AdminDep,
    section: Optional[Section] = None,
) -> List[PublicUser]:
    users = store.users if section is None else users_in_section(store, section)
    return [PublicUser.from_user(u) for u in users]


@router.post(
    "",
    response_model=PublicUser,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    req: CreateUserRequest,
    intake: IntakeDep,
    current_user: AdminDep,
) -> PublicUser:
    try:
        user = intake.create_user(
            name=req.name,
            password=req.password,
            role=req.role,
            section=req.section,
            subject=req.subject,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return PublicUser.from_user(user)


@router.patch("/{user_id}", summary="Update user")
async def update_user(
    user_id: str,
    req: UpdateUserRequest,
    store: StoreDep,
    intake: IntakeDep,
    current_user: AdminDep,
) -> dict:
    """Merge the given fields into a user. Unknown ids are ignored.

    A new password goes through the credential verifier before it is stored.
    """
    updates = req.model_dump(exclude_unset=True)
    password = updates.pop("password", None)
    if password is not None:
        try:
            intake.reset_password(user_id, password)
        except ValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if updates:
        store.update_user(user_id, updates)
    return {"success": True}


@router.delete("/{user_id}", summary="Delete user")
async def delete_user(user_id: str, store: StoreDep, current_user: AdminDep) -> dict:
    store.delete_user(user_id)
    return {"success": True}
