"""
Project Library Backend - Project Routes
=========================================

What:  CRUD for projects, plus the posts and progress entries written on
       them. Reads are public; writes act as the session's active owner and
       only the owning owner may update, delete or add posts and entries.
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
    PostBody,
    PostResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from project_library.schemas.image import AttachmentResponse
from project_library.services.content_service import entry_service, post_service, project_service

router = APIRouter(prefix="/api/projects", tags=["Projects"])


def project_response(project, attachments=()) -> ProjectResponse:
    payload = ProjectResponse.model_validate(project)
    payload.images = [AttachmentResponse.model_validate(a) for a in attachments]
    return payload


@router.get("", response_model=Envelope[List[ProjectResponse]], responses=ERROR_RESPONSES)
async def list_projects(
    q: Optional[str] = Query(default=None, max_length=200, description="Search title/description"),
    owner_id: Optional[uuid.UUID] = Query(default=None),
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
):
    projects = await project_service.list_items(db, q=q, owner_id=owner_id, limit=limit)
    return ok([project_response(p) for p in projects])


@router.post(
    "",
    response_model=Envelope[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_project(
    body: ProjectCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    project = await project_service.create(db, ctx.active_owner, body.model_dump())
    return ok(project_response(project))


@router.get("/{project_id}", response_model=Envelope[ProjectResponse], responses=ERROR_RESPONSES)
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    project, attachments = await project_service.get_with_images(db, project_id)
    return ok(project_response(project, attachments))


@router.put("/{project_id}", response_model=Envelope[ProjectResponse], responses=ERROR_RESPONSES)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    project = await project_service.update(
        db, ctx.active_owner, project_id, body.model_dump(exclude_unset=True)
    )
    attachments = await project_service.list_attachments(db, project.id)
    return ok(project_response(project, attachments))


@router.delete("/{project_id}", response_model=Envelope[dict], responses=ERROR_RESPONSES)
async def delete_project(
    project_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    await project_service.delete(db, ctx.active_owner, project_id)
    return ok({"deleted": True})


# ── Posts and entries on a project ────────────────────────────────────────


@router.get(
    "/{project_id}/posts", response_model=Envelope[List[PostResponse]], responses=ERROR_RESPONSES
)
async def list_project_posts(
    project_id: uuid.UUID,
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
):
    await project_service.get(db, project_id)
    posts = await post_service.list_items(db, limit=limit, offset=offset, project_id=project_id)
    return ok([post_response(p) for p in posts])


@router.post(
    "/{project_id}/posts",
    response_model=Envelope[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_project_post(
    project_id: uuid.UUID,
    body: PostBody,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    post = await post_service.create(
        db, ctx.active_owner, {**body.model_dump(), "project_id": project_id}
    )
    return ok(post_response(post))


@router.get(
    "/{project_id}/entries",
    response_model=Envelope[List[EntryResponse]],
    responses=ERROR_RESPONSES,
)
async def list_project_entries(project_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    entries = await entry_service.list_entries(db, AttachmentTarget.PROJECT, project_id)
    return ok([EntryResponse.model_validate(e) for e in entries])


@router.post(
    "/{project_id}/entries",
    response_model=Envelope[EntryResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_project_entry(
    project_id: uuid.UUID,
    body: EntryCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    entry = await entry_service.create_entry(
        db, ctx.active_owner, AttachmentTarget.PROJECT, project_id, body.model_dump()
    )
    return ok(EntryResponse.model_validate(entry))
