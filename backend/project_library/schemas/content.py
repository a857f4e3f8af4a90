"""
Project, event, post and entry schemas.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from project_library.models.image import AttachmentTarget
from project_library.schemas.image import AttachmentResponse
from project_library.schemas.owner import OwnerSummary


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def clean_tags(value: Optional[List[str]]) -> Optional[List[str]]:
    """Trim tags and drop empty ones."""
    if value is None:
        return value
    return [tag.strip() for tag in value if tag.strip()]


# ══════════════════════════════════════════════════════════════════════════
# Projects
# ══════════════════════════════════════════════════════════════════════════


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return clean_tags(v)


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    tags: Optional[List[str]] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return clean_tags(v)


class ProjectResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    owner: OwnerSummary
    title: str
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    images: List[AttachmentResponse] = Field(
        default_factory=list, description="Attached images ordered by sort_order"
    )

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Events
# ══════════════════════════════════════════════════════════════════════════


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    location: Optional[str] = Field(default=None, max_length=200)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_time_range(self):
        starts_at, ends_at = _as_utc(self.starts_at), _as_utc(self.ends_at)
        if starts_at and ends_at and ends_at < starts_at:
            raise ValueError("ends_at must not be before starts_at")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    location: Optional[str] = Field(default=None, max_length=200)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class EventResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    owner: OwnerSummary
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    images: List[AttachmentResponse] = Field(
        default_factory=list, description="Populated on detail reads only"
    )

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Posts
# ══════════════════════════════════════════════════════════════════════════


def _split_tags(value):
    # Tags arrive as a list or as one comma-separated string
    if isinstance(value, str):
        return value.split(",")
    return value


def _strip_optional_title(value):
    if isinstance(value, str):
        return value.strip() or None
    return value


class PostBody(BaseModel):
    """
    What:  The writable part of a post.
    Who:   POST /api/projects/{id}/posts and /api/events/{id}/posts, where the
           parent comes from the path; PostCreate adds the parent ids.
    """

    title: Optional[str] = Field(default=None, max_length=200)
    content: str = Field(min_length=1, max_length=10_000)
    tags: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip_optional_title(v)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Union[str, List[str], None]):
        return _split_tags(v)

    @field_validator("tags", "topics")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return clean_tags(v)


class PostCreate(PostBody):
    project_id: Optional[uuid.UUID] = None
    event_id: Optional[uuid.UUID] = None

    @model_validator(mode="after")
    def check_single_parent(self):
        if self.project_id is not None and self.event_id is not None:
            raise ValueError("A post can belong to at most one of project_id or event_id")
        return self


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1, max_length=10_000)
    tags: Optional[List[str]] = None
    topics: Optional[List[str]] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip_optional_title(v)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        return _split_tags(v)

    @field_validator("tags", "topics")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return clean_tags(v)


class ContentRef(BaseModel):
    id: uuid.UUID
    title: str

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    owner: OwnerSummary
    project_id: Optional[uuid.UUID] = None
    event_id: Optional[uuid.UUID] = None
    project: Optional[ContentRef] = None
    event: Optional[ContentRef] = None
    title: Optional[str] = None
    content: str
    tags: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    images: List[AttachmentResponse] = Field(
        default_factory=list, description="Populated on detail reads only"
    )

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Entries
# ══════════════════════════════════════════════════════════════════════════


class EntryCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    content: str = Field(min_length=1, max_length=10_000)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip_optional_title(v)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class EntryResponse(BaseModel):
    id: uuid.UUID
    collection_type: AttachmentTarget
    collection_id: uuid.UUID
    title: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
