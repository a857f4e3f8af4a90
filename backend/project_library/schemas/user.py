"""
Project Library Backend - Auth, Session and Profile Schemas
============================================================

What:  Request/response bodies for signup, login, the active-owner switch,
       GET /api/me and the user profile routes.
How:   Field limits on the profile mirror the columns in models/user.py.
       Format rules for email/username/password live in AuthService so the
       service can be exercised without HTTP.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from project_library.schemas.owner import OwnerSummary

INTEREST_MAX_LENGTH = 50


def clean_interests(value: Optional[List[str]]) -> Optional[List[str]]:
    """Each interest must be a non-empty string of at most 50 characters."""
    if value is None:
        return value
    cleaned = []
    for interest in value:
        stripped = interest.strip()
        if not stripped:
            raise ValueError("Each interest must be a non-empty string")
        if len(stripped) > INTEREST_MAX_LENGTH:
            raise ValueError(
                f"Each interest must be {INTEREST_MAX_LENGTH} characters or less"
            )
        cleaned.append(stripped)
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Auth & Session
# ══════════════════════════════════════════════════════════════════════════


class SignupRequest(BaseModel):
    email: str = Field(description="Login email, stored lowercased")
    username: str = Field(description="3-20 characters: letters, digits, _ or -")
    password: str = Field(description="At least 8 characters")


class LoginRequest(BaseModel):
    email: str
    password: str


class SwitchOwnerRequest(BaseModel):
    owner_id: uuid.UUID = Field(description="Owner to act as from now on")


class SessionResponse(BaseModel):
    """
    What:  Result of login and of switching the active owner.
    Who:   POST /api/auth/login, POST/DELETE /api/session/active-owner.

    The same token is also set as the session cookie.
    """

    access_token: str
    token_type: str = "bearer"
    user_id: uuid.UUID
    active_owner: OwnerSummary


# ══════════════════════════════════════════════════════════════════════════
# Profile
# ══════════════════════════════════════════════════════════════════════════


class UserProfile(BaseModel):
    """Private view of the signed-in user (includes email)."""

    id: uuid.UUID
    email: str
    username: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    avatar_image_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PublicUserProfile(BaseModel):
    """Public view served by GET /api/users/by-username/{username}."""

    id: uuid.UUID
    username: str
    owner_id: uuid.UUID
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    avatar_image_id: Optional[uuid.UUID] = None
    created_at: datetime


class UserProfileUpdate(BaseModel):
    """
    Partial update for PUT /api/me/user. Only fields present in the body
    are written (see `model_dump(exclude_unset=True)` in UserService).
    """

    display_name: Optional[str] = Field(default=None, max_length=100)
    first_name: Optional[str] = Field(default=None, max_length=100)
    middle_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    headline: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = Field(default=None, max_length=2000)
    interests: Optional[List[str]] = None
    location: Optional[str] = Field(default=None, max_length=100)
    avatar_image_id: Optional[uuid.UUID] = None

    @field_validator("interests")
    @classmethod
    def validate_interests(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return clean_interests(v)


class MeResponse(BaseModel):
    """
    What:  Everything the UI needs to render the identity switcher.
    Who:   GET /api/me.
    """

    user: UserProfile
    owners: List[OwnerSummary] = Field(description="Personal owner first, then orgs")
    active_owner_id: uuid.UUID
