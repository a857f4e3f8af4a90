"""
Image and attachment schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from project_library.models.image import AttachmentTarget


class ImageCreate(BaseModel):
    """
    What:  Metadata for an image already uploaded to external storage.
    Who:   POST /api/images.
    """

    url: str = Field(min_length=1, max_length=2048)
    path: str = Field(min_length=1, max_length=1024, description="Storage path/key")
    alt_text: Optional[str] = Field(default=None, max_length=500)


class ImageResponse(BaseModel):
    id: uuid.UUID
    url: str
    path: str
    alt_text: Optional[str] = None
    uploaded_by_owner_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class AttachmentCreate(BaseModel):
    image_id: uuid.UUID
    target_type: AttachmentTarget
    target_id: uuid.UUID
    sort_order: int = Field(default=0, ge=0)


class AttachmentResponse(BaseModel):
    id: uuid.UUID
    image_id: uuid.UUID
    target_type: AttachmentTarget
    target_id: uuid.UUID
    sort_order: int
    created_at: datetime
    image: ImageResponse

    model_config = {"from_attributes": True}
