"""
Project Library Backend - Owner Routes
=======================================

What:  Public owner lookups: GET /api/owners/{id}, its followers, who it
       follows, and follow counts.
How:   follow-stats also reports whether the caller's active owner follows
       this owner when a session is present.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_optional_session_context
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.follow import FollowEntry, FollowListResponse, FollowStats
from project_library.schemas.owner import OwnerSummary
from project_library.services.follow_service import follow_service
from project_library.services.owner_service import owner_service

router = APIRouter(prefix="/api/owners", tags=["Owners"])


def _follow_list(owner_id: uuid.UUID, entries) -> FollowListResponse:
    return FollowListResponse(
        owner_id=owner_id,
        count=len(entries),
        items=[
            FollowEntry(owner=OwnerSummary.model_validate(owner), followed_at=followed_at)
            for owner, followed_at in entries
        ],
    )


@router.get("/{owner_id}", response_model=Envelope[OwnerSummary], responses=ERROR_RESPONSES)
async def get_owner(owner_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    owner = await owner_service.get_owner(db, owner_id)
    return ok(OwnerSummary.model_validate(owner))


@router.get(
    "/{owner_id}/followers",
    response_model=Envelope[FollowListResponse],
    responses=ERROR_RESPONSES,
    summary="Owners following this owner, newest first",
)
async def list_followers(owner_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    entries = await follow_service.list_followers(db, owner_id)
    return ok(_follow_list(owner_id, entries))


@router.get(
    "/{owner_id}/following",
    response_model=Envelope[FollowListResponse],
    responses=ERROR_RESPONSES,
    summary="Owners this owner follows, newest first",
)
async def list_following(owner_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    entries = await follow_service.list_following(db, owner_id)
    return ok(_follow_list(owner_id, entries))


@router.get(
    "/{owner_id}/follow-stats",
    response_model=Envelope[FollowStats],
    responses=ERROR_RESPONSES,
)
async def get_follow_stats(
    owner_id: uuid.UUID,
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    viewer = ctx.active_owner.id if ctx else None
    followers, following, is_following = await follow_service.follow_stats(db, owner_id, viewer)
    return ok(
        FollowStats(
            owner_id=owner_id,
            followers=followers,
            following=following,
            is_following=is_following,
        )
    )
