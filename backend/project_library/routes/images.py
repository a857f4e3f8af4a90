"""
Project Library Backend - Image Routes
=======================================

What:  Image metadata (POST/GET /api/images) and attachments to projects or
       events (POST /api/image-attachments, DELETE /api/image-attachments/{id}).
How:   Everything is attributed to and checked against the session's active
       owner. The upload itself goes straight to object storage from the
       client; only the resulting url/path is recorded here.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.config import settings
from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_session_context
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.image import (
    AttachmentCreate,
    AttachmentResponse,
    ImageCreate,
    ImageResponse,
)
from project_library.services.image_service import image_service

router = APIRouter(prefix="/api", tags=["Images"])


@router.post(
    "/images",
    response_model=Envelope[ImageResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_image(
    body: ImageCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    image = await image_service.create_image(db, ctx.active_owner, body)
    return ok(ImageResponse.model_validate(image))


@router.get("/images", response_model=Envelope[List[ImageResponse]], responses=ERROR_RESPONSES)
async def list_images(
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    images = await image_service.list_images(db, ctx.active_owner, limit=limit)
    return ok([ImageResponse.model_validate(i) for i in images])


@router.post(
    "/image-attachments",
    response_model=Envelope[AttachmentResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def attach_image(
    body: AttachmentCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    attachment = await image_service.attach_image(db, ctx.active_owner, body)
    return ok(AttachmentResponse.model_validate(attachment))


@router.delete(
    "/image-attachments/{attachment_id}",
    response_model=Envelope[dict],
    responses=ERROR_RESPONSES,
)
async def delete_attachment(
    attachment_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    await image_service.delete_attachment(db, ctx.active_owner, attachment_id)
    return ok({"deleted": True})
