"""
Project Library Backend - Org Routes
=====================================

What:  Create and read orgs; list and manage their members.
How:   Reads are public. Creating requires a session; member management
       requires the caller to be OWNER or ADMIN of the org (OrgService).
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.dependencies import get_current_user
from project_library.models.org import Org, OrgMembership
from project_library.models.user import User
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.org import (
    MemberAdd,
    MemberListResponse,
    MemberResponse,
    MemberRoleUpdate,
    OrgCreate,
    OrgResponse,
)
from project_library.schemas.owner import UserSummary
from project_library.services.org_service import org_service
from project_library.services.owner_service import owner_service

router = APIRouter(prefix="/api/orgs", tags=["Orgs"])


def org_response(org: Org, owner_id: uuid.UUID) -> OrgResponse:
    return OrgResponse(
        id=org.id,
        owner_id=owner_id,
        slug=org.slug,
        name=org.name,
        headline=org.headline,
        bio=org.bio,
        interests=list(org.interests or []),
        location=org.location,
        is_public=org.is_public,
        avatar_image_id=org.avatar_image_id,
        created_at=org.created_at,
        updated_at=org.updated_at,
    )


def member_response(membership: OrgMembership) -> MemberResponse:
    return MemberResponse(
        user=UserSummary.model_validate(membership.user),
        role=membership.role,
        joined_at=membership.created_at,
    )


@router.post(
    "",
    response_model=Envelope[OrgResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create an organization owned by the caller",
)
async def create_org(
    body: OrgCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    org, owner = await org_service.create_org(db, user, body)
    return ok(org_response(org, owner.id))


@router.get("/by-slug/{slug}", response_model=Envelope[OrgResponse], responses=ERROR_RESPONSES)
async def get_org_by_slug(slug: str, db: AsyncSession = Depends(get_db_session)):
    org = await org_service.get_org_by_slug(db, slug)
    owner = await owner_service.get_org_owner(db, org.id)
    return ok(org_response(org, owner.id))


@router.get("/{org_id}", response_model=Envelope[OrgResponse], responses=ERROR_RESPONSES)
async def get_org(org_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    org = await org_service.get_org(db, org_id)
    owner = await owner_service.get_org_owner(db, org.id)
    return ok(org_response(org, owner.id))


@router.get(
    "/{org_id}/members",
    response_model=Envelope[MemberListResponse],
    responses=ERROR_RESPONSES,
    summary="Members ordered OWNER, ADMIN, MEMBER",
)
async def list_members(org_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    memberships = await org_service.list_members(db, org_id)
    return ok(
        MemberListResponse(
            org_id=org_id,
            count=len(memberships),
            members=[member_response(m) for m in memberships],
        )
    )


@router.post(
    "/{org_id}/members",
    response_model=Envelope[MemberResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def add_member(
    org_id: uuid.UUID,
    body: MemberAdd,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    membership = await org_service.add_member(db, user.id, org_id, body.user_id, body.role)
    return ok(member_response(membership))


@router.patch(
    "/{org_id}/members/{user_id}",
    response_model=Envelope[MemberResponse],
    responses=ERROR_RESPONSES,
)
async def change_member_role(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    body: MemberRoleUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    membership = await org_service.change_member_role(db, user.id, org_id, user_id, body.role)
    return ok(member_response(membership))


@router.delete(
    "/{org_id}/members/{user_id}",
    response_model=Envelope[dict],
    responses=ERROR_RESPONSES,
)
async def remove_member(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await org_service.remove_member(db, user.id, org_id, user_id)
    return ok({"removed": True})
