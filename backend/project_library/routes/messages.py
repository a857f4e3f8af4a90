"""
Project Library Backend - Message Routes
=========================================

What:  Direct messages for the session's active owner.
Who:   The frontend inbox, sent box and conversation views.

Endpoints:
    POST  /api/messages                          send
    GET   /api/messages                          conversation overview
    GET   /api/messages/inbox?limit&unread_only  received, newest first
    GET   /api/messages/sent?limit               sent, newest first
    GET   /api/messages/conversation/{owner_id}  thread, oldest first
    PATCH /api/messages/{id}/read                mark read (receiver only)
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.config import settings
from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_session_context
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.message import (
    ConversationListResponse,
    ConversationSummary,
    MessageCreate,
    MessageListResponse,
    MessageResponse,
)
from project_library.schemas.owner import OwnerSummary
from project_library.services.message_service import message_service

router = APIRouter(prefix="/api/messages", tags=["Messages"])


def _message_list(messages) -> MessageListResponse:
    return MessageListResponse(
        count=len(messages),
        items=[MessageResponse.model_validate(m) for m in messages],
    )


@router.post(
    "",
    response_model=Envelope[MessageResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def send_message(
    body: MessageCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    message = await message_service.send_message(
        db, ctx.active_owner, body.receiver_owner_id, body.content
    )
    return ok(MessageResponse.model_validate(message))


@router.get("", response_model=Envelope[ConversationListResponse], responses=ERROR_RESPONSES)
async def list_conversations(
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    threads = await message_service.conversations(db, ctx.active_owner)
    return ok(
        ConversationListResponse(
            count=len(threads),
            items=[
                ConversationSummary(
                    other_owner=OwnerSummary.model_validate(t.other_owner),
                    last_message=MessageResponse.model_validate(t.last_message),
                    unread_count=t.unread_count,
                )
                for t in threads
            ],
        )
    )


@router.get("/inbox", response_model=Envelope[MessageListResponse], responses=ERROR_RESPONSES)
async def inbox(
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    unread_only: bool = Query(default=False),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    messages = await message_service.inbox(db, ctx.active_owner, limit=limit, unread_only=unread_only)
    return ok(_message_list(messages))


@router.get("/sent", response_model=Envelope[MessageListResponse], responses=ERROR_RESPONSES)
async def sent(
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    messages = await message_service.sent(db, ctx.active_owner, limit=limit)
    return ok(_message_list(messages))


@router.get(
    "/conversation/{owner_id}",
    response_model=Envelope[MessageListResponse],
    responses=ERROR_RESPONSES,
)
async def conversation(
    owner_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    messages = await message_service.conversation(db, ctx.active_owner, owner_id)
    return ok(_message_list(messages))


@router.patch(
    "/{message_id}/read",
    response_model=Envelope[MessageResponse],
    responses=ERROR_RESPONSES,
)
async def mark_read(
    message_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    message = await message_service.mark_read(db, message_id, ctx.active_owner)
    return ok(MessageResponse.model_validate(message))
