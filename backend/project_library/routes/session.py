"""
Project Library Backend - Active Owner Switch
==============================================

What:  POST /api/session/active-owner switches the session to another owner
       (an org the user manages); DELETE switches back to the personal owner.
How:   The requested owner goes through OwnerService.resolve_active_owner();
       on success a new token with the `active_owner_id` claim is issued and
       set as the cookie. Failures (404/403) leave the session unchanged.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.dependencies import get_current_user
from project_library.models.owner import OwnerType
from project_library.models.user import User
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.owner import OwnerSummary
from project_library.schemas.user import SessionResponse, SwitchOwnerRequest
from project_library.security import issue_session_token, set_session_cookie
from project_library.services.owner_service import owner_service

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.post(
    "/active-owner",
    response_model=Envelope[SessionResponse],
    responses=ERROR_RESPONSES,
    summary="Act as another owner",
)
async def switch_active_owner(
    body: SwitchOwnerRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    owner = await owner_service.resolve_active_owner(db, user.id, body.owner_id)
    # The personal owner is the default, so it is not stored in the claim
    claim = owner.id if owner.type == OwnerType.ORG else None
    token = issue_session_token(user.id, claim)
    set_session_cookie(response, token)
    return ok(
        SessionResponse(
            access_token=token,
            user_id=user.id,
            active_owner=OwnerSummary.model_validate(owner),
        )
    )


@router.delete(
    "/active-owner",
    response_model=Envelope[SessionResponse],
    responses=ERROR_RESPONSES,
    summary="Switch back to the personal owner",
)
async def reset_active_owner(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    owner = await owner_service.resolve_active_owner(db, user.id, None)
    token = issue_session_token(user.id)
    set_session_cookie(response, token)
    return ok(
        SessionResponse(
            access_token=token,
            user_id=user.id,
            active_owner=OwnerSummary.model_validate(owner),
        )
    )
