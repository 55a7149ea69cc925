"""
User schema definitions for request/response handling.

Request schemas accept plain strings so that blank and malformed values reach
the user service, which reports them with per-field messages.
"""

import hashlib
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from sample_app.schemas.base import BaseDBSchema, BaseSchema, PageMeta


def gravatar_url(email: str, size: int = 80) -> str:
    """Gravatar image URL for an email address."""
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://secure.gravatar.com/avatar/{digest}?s={size}"


class UserCreate(BaseModel):
    """Signup form."""

    name: str = ""
    email: str = ""
    password: str = ""
    password_confirmation: str = ""


class UserUpdate(BaseModel):
    """
    Profile edit form.

    Unknown keys are kept so the service can log and drop them; only the
    service's allow-list decides what is written.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    password_confirmation: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class SignIn(BaseModel):
    """Sign-in form."""

    email: str = ""
    password: str = ""


class UserResponse(BaseDBSchema):
    """Public user data."""

    name: str
    email: str
    admin: bool = False

    @computed_field
    @property
    def gravatar_url(self) -> str:
        return gravatar_url(self.email)


class UserListItem(UserResponse):
    """User row on the index page; can_delete drives the delete link."""

    can_delete: bool = False


class UserListResponse(BaseSchema):
    users: List[UserListItem]
    page: PageMeta


class AuthResponse(BaseSchema):
    """Session token for a signed-in user."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    flash: Optional[str] = None


class UserUpdateResponse(BaseSchema):
    user: UserResponse
    flash: str = "Profile updated"
