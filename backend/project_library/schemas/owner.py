"""
Owner display payloads.

Every place that shows "who" (follower lists, message senders, content
authors) embeds an `OwnerSummary` built straight from the ORM Owner with
its joined user/org.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from project_library.models.owner import OwnerStatus, OwnerType


class UserSummary(BaseModel):
    id: uuid.UUID
    username: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    avatar_image_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}


class OrgSummary(BaseModel):
    id: uuid.UUID
    slug: str
    name: str
    headline: Optional[str] = None
    avatar_image_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}


class OwnerSummary(BaseModel):
    """
    What:  An owner plus the display data of whatever backs it.
    Exactly one of `user` / `org` is set, matching `type`.
    """

    id: uuid.UUID
    type: OwnerType
    status: OwnerStatus
    display_name: str = Field(description="Org name or the user's best available name")
    user: Optional[UserSummary] = None
    org: Optional[OrgSummary] = None

    model_config = {"from_attributes": True}
