"""
Project Library Backend - Current Identity Routes
==================================================

What:  GET /api/me, GET/PUT /api/me/user, PUT /api/me/org.
Who:   The frontend header (identity switcher) and the profile editors.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_current_user, get_session_context
from project_library.models.user import User
from project_library.routes.orgs import org_response
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.org import OrgProfileUpdate, OrgResponse
from project_library.schemas.owner import OwnerSummary
from project_library.schemas.user import MeResponse, UserProfile, UserProfileUpdate
from project_library.services.org_service import org_service
from project_library.services.owner_service import owner_service
from project_library.services.user_service import user_service

router = APIRouter(prefix="/api/me", tags=["Me"])


@router.get("", response_model=Envelope[MeResponse], responses=ERROR_RESPONSES)
async def get_me(
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    """The signed-in user, every owner they may act as, and the active one."""
    owners = await owner_service.list_owners_for_user(db, ctx.user.id)
    return ok(
        MeResponse(
            user=UserProfile.model_validate(ctx.user),
            owners=[OwnerSummary.model_validate(o) for o in owners],
            active_owner_id=ctx.active_owner.id,
        )
    )


@router.get("/user", response_model=Envelope[UserProfile], responses=ERROR_RESPONSES)
async def get_my_profile(user: User = Depends(get_current_user)):
    return ok(UserProfile.model_validate(user))


@router.put("/user", response_model=Envelope[UserProfile], responses=ERROR_RESPONSES)
async def update_my_profile(
    body: UserProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    updated = await user_service.update_profile(db, user, body)
    return ok(UserProfile.model_validate(updated))


@router.put("/org", response_model=Envelope[OrgResponse], responses=ERROR_RESPONSES)
async def update_my_org_profile(
    body: OrgProfileUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    """Edit the org the session is currently acting as."""
    org = await org_service.update_org_profile(db, ctx.active_owner, body)
    return ok(org_response(org, ctx.active_owner.id))
