"""
Org and membership schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from project_library.models.org import OrgRole
from project_library.schemas.owner import UserSummary
from project_library.schemas.user import clean_interests

SLUG_PATTERN = r"^[a-z0-9][a-z0-9-]{1,48}[a-z0-9]$"


class OrgCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(
        pattern=SLUG_PATTERN,
        description="3-50 lowercase letters, digits or hyphens; used in URLs",
    )
    headline: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = Field(default=None, max_length=2000)
    interests: List[str] = Field(default_factory=list)
    location: Optional[str] = Field(default=None, max_length=100)
    is_public: bool = True

    @field_validator("name", "slug", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("interests")
    @classmethod
    def validate_interests(cls, v: List[str]) -> List[str]:
        return clean_interests(v)


class OrgProfileUpdate(BaseModel):
    """Partial update for PUT /api/me/org (acting as the org)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    headline: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = Field(default=None, max_length=2000)
    interests: Optional[List[str]] = None
    location: Optional[str] = Field(default=None, max_length=100)
    is_public: Optional[bool] = None
    avatar_image_id: Optional[uuid.UUID] = None

    @field_validator("interests")
    @classmethod
    def validate_interests(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return clean_interests(v)


class OrgResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    slug: str
    name: str
    headline: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    is_public: bool
    avatar_image_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class MemberAdd(BaseModel):
    user_id: uuid.UUID
    role: OrgRole = OrgRole.MEMBER


class MemberRoleUpdate(BaseModel):
    role: OrgRole


class MemberResponse(BaseModel):
    user: UserSummary
    role: OrgRole
    joined_at: datetime


class MemberListResponse(BaseModel):
    org_id: uuid.UUID
    count: int
    members: List[MemberResponse]
