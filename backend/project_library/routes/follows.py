"""
POST /api/follows: the active owner starts following another owner.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.dependencies import SessionContext, get_session_context
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.follow import FollowCreate, FollowResponse
from project_library.services.follow_service import follow_service

router = APIRouter(prefix="/api/follows", tags=["Follows"])


@router.post(
    "",
    response_model=Envelope[FollowResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_follow(
    body: FollowCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db_session),
):
    follow = await follow_service.follow(db, ctx.active_owner, body.following_owner_id)
    return ok(FollowResponse.model_validate(follow))
