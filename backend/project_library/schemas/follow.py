"""
Follow schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from project_library.schemas.owner import OwnerSummary


class FollowCreate(BaseModel):
    following_owner_id: uuid.UUID = Field(description="Owner the active owner starts following")


class FollowResponse(BaseModel):
    id: uuid.UUID
    follower_owner_id: uuid.UUID
    following_owner_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class FollowEntry(BaseModel):
    """One row of a followers/following list: the *other* owner."""

    owner: OwnerSummary
    followed_at: datetime


class FollowListResponse(BaseModel):
    """
    What:  Followers or following of one owner.
    Who:   GET /api/owners/{id}/followers and /following.
    Order: newest edge first.
    """

    owner_id: uuid.UUID
    count: int
    items: List[FollowEntry]


class FollowStats(BaseModel):
    owner_id: uuid.UUID
    followers: int
    following: int
    is_following: Optional[bool] = Field(
        default=None,
        description="Whether the requesting owner follows this owner (null when anonymous)",
    )
