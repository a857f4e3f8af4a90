"""
Project Library Backend - Post Routes
======================================

What:  CRUD for posts. Reads are public and filterable by owner, project or
       event; writes act as the session's active owner.

Endpoints:
    GET    /api/posts        list (owner_id, project_id, event_id, q, limit, offset)
    POST   /api/posts        create, optionally on one of your projects or events
    GET    /api/posts/{id}   detail with attached images
    PATCH  /api/posts/{id}   owner only
    DELETE /api/posts/{id}   owner only
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.config import settings
from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_session_context
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.content import PostCreate, PostResponse, PostUpdate
from project_library.schemas.image import AttachmentResponse
from project_library.services.content_service import post_service

router = APIRouter(prefix="/api/posts", tags=["Posts"])


def post_response(post, attachments=()) -> PostResponse:
    payload = PostResponse.model_validate(post)
    payload.images = [AttachmentResponse.model_validate(a) for a in attachments]
    return payload


@router.get("", response_model=Envelope[List[PostResponse]], responses=ERROR_RESPONSES)
async def list_posts(
    owner_id: Optional[uuid.UUID] = Query(default=None),
    project_id: Optional[uuid.UUID] = Query(default=None),
    event_id: Optional[uuid.UUID] = Query(default=None),
    q: Optional[str] = Query(default=None, max_length=200, description="Search title/content"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
):
    posts = await post_service.list_items(
        db,
        q=q,
        owner_id=owner_id,
        limit=limit,
        offset=offset,
        project_id=project_id,
        event_id=event_id,
    )
    return ok([post_response(p) for p in posts])


@router.post(
    "",
    response_model=Envelope[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_post(
    body: PostCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    post = await post_service.create(db, ctx.active_owner, body.model_dump())
    return ok(post_response(post))


@router.get("/{post_id}", response_model=Envelope[PostResponse], responses=ERROR_RESPONSES)
async def get_post(post_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    post, attachments = await post_service.get_with_images(db, post_id)
    return ok(post_response(post, attachments))


@router.patch("/{post_id}", response_model=Envelope[PostResponse], responses=ERROR_RESPONSES)
async def update_post(
    post_id: uuid.UUID,
    body: PostUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    post = await post_service.update(
        db, ctx.active_owner, post_id, body.model_dump(exclude_unset=True)
    )
    attachments = await post_service.list_attachments(db, post.id)
    return ok(post_response(post, attachments))


@router.delete("/{post_id}", response_model=Envelope[dict], responses=ERROR_RESPONSES)
async def delete_post(
    post_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    await post_service.delete(db, ctx.active_owner, post_id)
    return ok({"deleted": True})
