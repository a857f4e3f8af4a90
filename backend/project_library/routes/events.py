"""
Project Library Backend - Event Routes
=======================================

What:  CRUD for events with their posts and entries, same permission model
       as projects.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.config import settings
from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_session_context
from project_library.models.image import AttachmentTarget
from project_library.routes.posts import post_response
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.content import (
    EntryCreate,
    EntryResponse,
    EventCreate,
    EventResponse,
    EventUpdate,
    PostBody,
    PostResponse,
)
from project_library.schemas.image import AttachmentResponse
from project_library.services.content_service import entry_service, event_service, post_service

router = APIRouter(prefix="/api/events", tags=["Events"])


def event_response(event, attachments=()) -> EventResponse:
    payload = EventResponse.model_validate(event)
    payload.images = [AttachmentResponse.model_validate(a) for a in attachments]
    return payload


@router.get("", response_model=Envelope[List[EventResponse]], responses=ERROR_RESPONSES)
async def list_events(
    q: Optional[str] = Query(default=None, max_length=200),
    owner_id: Optional[uuid.UUID] = Query(default=None),
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
):
    events = await event_service.list_items(db, q=q, owner_id=owner_id, limit=limit)
    return ok([event_response(e) for e in events])


@router.post(
    "",
    response_model=Envelope[EventResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_event(
    body: EventCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    event = await event_service.create(db, ctx.active_owner, body.model_dump())
    return ok(event_response(event))


@router.get("/{event_id}", response_model=Envelope[EventResponse], responses=ERROR_RESPONSES)
async def get_event(event_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    event, attachments = await event_service.get_with_images(db, event_id)
    return ok(event_response(event, attachments))


@router.put("/{event_id}", response_model=Envelope[EventResponse], responses=ERROR_RESPONSES)
async def update_event(
    event_id: uuid.UUID,
    body: EventUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    event = await event_service.update(
        db, ctx.active_owner, event_id, body.model_dump(exclude_unset=True)
    )
    attachments = await event_service.list_attachments(db, event.id)
    return ok(event_response(event, attachments))


@router.delete("/{event_id}", response_model=Envelope[dict], responses=ERROR_RESPONSES)
async def delete_event(
    event_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    await event_service.delete(db, ctx.active_owner, event_id)
    return ok({"deleted": True})


# ── Posts and entries on an event ─────────────────────────────────────────


@router.get(
    "/{event_id}/posts", response_model=Envelope[List[PostResponse]], responses=ERROR_RESPONSES
)
async def list_event_posts(
    event_id: uuid.UUID,
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
):
    await event_service.get(db, event_id)
    posts = await post_service.list_items(db, limit=limit, offset=offset, event_id=event_id)
    return ok([post_response(p) for p in posts])


@router.post(
    "/{event_id}/posts",
    response_model=Envelope[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_event_post(
    event_id: uuid.UUID,
    body: PostBody,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    post = await post_service.create(
        db, ctx.active_owner, {**body.model_dump(), "event_id": event_id}
    )
    return ok(post_response(post))


@router.get(
    "/{event_id}/entries",
    response_model=Envelope[List[EntryResponse]],
    responses=ERROR_RESPONSES,
)
async def list_event_entries(event_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    entries = await entry_service.list_entries(db, AttachmentTarget.EVENT, event_id)
    return ok([EntryResponse.model_validate(e) for e in entries])


@router.post(
    "/{event_id}/entries",
    response_model=Envelope[EntryResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_event_entry(
    event_id: uuid.UUID,
    body: EntryCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    entry = await entry_service.create_entry(
        db, ctx.active_owner, AttachmentTarget.EVENT, event_id, body.model_dump()
    )
    return ok(EntryResponse.model_validate(entry))
