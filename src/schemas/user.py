"""User schema definitions.

This module defines the User data model and the request/response bodies of
the authentication and user administration endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field

from schemas.common import Section, TrackerModel, UserRole


class User(TrackerModel):
    id: str = Field(description="The unique identifier for the user.")
    username: str = Field(default="", description="Login handle derived from the name.")
    password: str = Field(default="", description="Plaintext password.")
    name: str = Field(default="", description="Display name, matched at login.")
    role: UserRole = Field(default=UserRole.STUDENT)
    section: Section = Field(
        default=Section.NONE,
        description="Cohort of a student or teacher; NONE for admins.",
    )
    subject: Optional[str] = Field(
        default=None,
        description="Taught subject, meaningful only for teachers.",
    )


class PublicUser(TrackerModel):
    """User without the password, as returned by the HTTP surface."""

    id: str
    username: str
    name: str
    role: UserRole
    section: Section
    subject: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls.model_validate(user.model_dump(exclude={"password"}))


class LoginRequest(BaseModel):
    name: str = Field(description="Full display name.")
    password: str


class LoginResponse(TrackerModel):
    user: PublicUser


class CreateUserRequest(TrackerModel):
    name: str = ""
    password: str = ""
    role: UserRole = UserRole.STUDENT
    section: Section = Section.EINSTEIN_G11
    subject: Optional[str] = None


class UpdateUserRequest(TrackerModel):
    """Partial user update; only fields that are set are merged."""

    username: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[UserRole] = None
    section: Optional[Section] = None
    subject: Optional[str] = None
